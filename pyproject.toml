[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskloop"
version = "0.1.0"
description = "Building blocks for threaded event loops: task queues, timers, I/O multiplexing and heart-beat tracking"
requires-python = ">=3.10"
dependencies = []
keywords = ["event loop", "task queue", "timers", "heart beat", "poll", "threads", "ring buffer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["taskloop"]

[tool.pytest.ini_options]
addopts = "-ra"
