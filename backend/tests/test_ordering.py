"""Tests for sibling ordering."""

from learnboard.schemas.roadmap import OrderedNode
from learnboard.services import ordering


def _nodes(*ids: str) -> list[OrderedNode]:
    return [OrderedNode(id=node_id, sort_order=i) for i, node_id in enumerate(ids, start=1)]


def _ids(nodes: list[OrderedNode]) -> list[str]:
    return [node.id for node in nodes]


def _orders(nodes: list[OrderedNode]) -> list[int]:
    return [node.sort_order for node in nodes]


def test_renumber_makes_orders_dense() -> None:
    nodes = [OrderedNode(id="a", sort_order=4), OrderedNode(id="b", sort_order=9)]
    result = ordering.renumber(nodes)
    assert _orders(result) == [1, 2]
    # inputs are not mutated
    assert _orders(nodes) == [4, 9]


def test_move_last_to_first() -> None:
    result = ordering.move(_nodes("A", "B", "C"), "C", "A")
    assert _ids(result) == ["C", "A", "B"]
    assert _orders(result) == [1, 2, 3]


def test_move_first_to_last() -> None:
    result = ordering.move(_nodes("A", "B", "C"), "A", "C")
    assert _ids(result) == ["B", "C", "A"]
    assert _orders(result) == [1, 2, 3]


def test_move_unknown_id_is_noop() -> None:
    nodes = _nodes("A", "B")
    assert ordering.move(nodes, "A", "missing") is nodes
    assert ordering.move(nodes, "missing", "B") is nodes


def test_insert_append_uses_max_plus_one() -> None:
    nodes = [OrderedNode(id="a", sort_order=1), OrderedNode(id="b", sort_order=5)]
    result = ordering.insert_append(nodes, OrderedNode(id="c"))
    assert _ids(result) == ["a", "b", "c"]
    assert _orders(result) == [1, 5, 6]


def test_insert_append_into_empty_list() -> None:
    result = ordering.insert_append([], OrderedNode(id="a"))
    assert _orders(result) == [1]


def test_insert_at_position_renumbers() -> None:
    result = ordering.insert_at(_nodes("A", "B", "C"), OrderedNode(id="X"), 2)
    assert _ids(result) == ["A", "X", "B", "C"]
    assert _orders(result) == [1, 2, 3, 4]


def test_insert_at_clamps_position() -> None:
    assert _ids(ordering.insert_at(_nodes("A"), OrderedNode(id="X"), 0)) == ["X", "A"]
    assert _ids(ordering.insert_at(_nodes("A"), OrderedNode(id="X"), 99)) == ["A", "X"]


def test_apply_order_follows_supplied_ids() -> None:
    result = ordering.apply_order(_nodes("A", "B", "C"), ["C", "A", "B"])
    assert _ids(result) == ["C", "A", "B"]
    assert _orders(result) == [1, 2, 3]


def test_apply_order_ignores_strangers_and_keeps_unlisted() -> None:
    result = ordering.apply_order(_nodes("A", "B", "C"), ["C", "zzz", "C"])
    assert _ids(result) == ["C", "A", "B"]
