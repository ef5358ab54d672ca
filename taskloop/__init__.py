"""Task queues, timers, I/O multiplexing, heart-beat tracking and thread primitives."""

__version__ = "0.1.0"