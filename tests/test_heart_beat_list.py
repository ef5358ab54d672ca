import pytest

from taskloop.heart_beat_list import HeartBeatList, HeartBeatNode


def make(*values):
    lst = HeartBeatList()
    nodes = [HeartBeatNode(v) for v in values]
    for node in nodes:
        lst.push_back(node)
    return lst, nodes


def test_new_list_is_empty():
    lst = HeartBeatList()
    assert lst.empty()
    assert lst.front() is None
    assert lst.back() is None
    assert list(lst) == []


def test_push_front_reverses_order():
    lst = HeartBeatList()
    for v in ["a", "b", "c"]:
        lst.push_front(HeartBeatNode(v))
    assert list(lst) == ["c", "b", "a"]
    assert lst.front().data == "c"
    assert lst.back().data == "a"


def test_push_back_keeps_order():
    lst, nodes = make(1, 2, 3)
    assert list(lst) == [1, 2, 3]
    assert lst.front() is nodes[0]
    assert lst.back() is nodes[2]
    assert not lst.empty()


def test_push_none_raises():
    lst = HeartBeatList()
    with pytest.raises(ValueError):
        lst.push_front(None)
    with pytest.raises(ValueError):
        lst.push_back(None)


def test_pop_front_and_back():
    lst, nodes = make(1, 2, 3)
    assert lst.pop_front() is nodes[0]
    assert lst.pop_back() is nodes[2]
    assert list(lst) == [2]
    assert lst.pop_back() is nodes[1]
    assert lst.empty()
    assert lst.pop_front() is None
    assert lst.pop_back() is None


def test_popped_node_is_unlinked():
    lst, nodes = make(1, 2)
    node = lst.pop_front()
    assert node.next is None and node.prev is None
    assert lst.front().prev is None


def test_erase_middle():
    lst, nodes = make(1, 2, 3)
    lst.erase(nodes[1])
    assert list(lst) == [1, 3]
    assert nodes[1].prev is None and nodes[1].next is None
    assert nodes[0].next is nodes[2]
    assert nodes[2].prev is nodes[0]


def test_erase_head_and_tail():
    lst, nodes = make(1, 2, 3)
    lst.erase(nodes[0])
    assert lst.front() is nodes[1]
    lst.erase(nodes[2])
    assert lst.back() is nodes[1]
    assert list(lst) == [2]


def test_erase_single_node_empties_list():
    lst, nodes = make("x")
    lst.erase(nodes[0])
    assert lst.empty()
    assert lst.back() is None


def test_erase_unlinked_node_raises():
    lst, _ = make(1, 2)
    with pytest.raises(ValueError):
        lst.erase(HeartBeatNode(9))


def test_erase_from_empty_list_raises():
    with pytest.raises(ValueError):
        HeartBeatList().erase(HeartBeatNode(1))


def test_erase_then_push_front_moves_node_to_head():
    lst, nodes = make(1, 2, 3)
    lst.erase(nodes[2])
    lst.push_front(nodes[2])
    assert list(lst) == [3, 1, 2]
    assert lst.back() is nodes[1]