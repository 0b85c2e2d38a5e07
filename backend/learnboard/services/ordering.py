"""Sibling ordering for sections and topics.

Every structural change leaves sort_order as a dense 1..n sequence. Sibling
lists are small, so renumbering the whole list on each move is cheap and
keeps the ranks readable. Nodes are never mutated; changed nodes are returned
as copies.
"""

from collections.abc import Iterable, Sequence
from typing import TypeVar

from learnboard.schemas.roadmap import OrderedNode

NodeT = TypeVar("NodeT", bound=OrderedNode)


def _with_order(node: NodeT, sort_order: int) -> NodeT:
    if node.sort_order == sort_order:
        return node
    return node.model_copy(update={"sort_order": sort_order})


def renumber(siblings: Sequence[NodeT]) -> list[NodeT]:
    """Assign sort_order = index + 1 in list order."""
    return [_with_order(node, index) for index, node in enumerate(siblings, start=1)]


def move(siblings: list[NodeT], from_id: str, to_id: str) -> list[NodeT]:
    """Array-move one sibling to the index of another, then renumber.

    Unknown ids leave the input list untouched and it is returned as is.
    """
    ids = [node.id for node in siblings]
    if from_id not in ids or to_id not in ids:
        return siblings

    items = list(siblings)
    node = items.pop(ids.index(from_id))
    items.insert(ids.index(to_id), node)
    return renumber(items)


def insert_append(siblings: Sequence[NodeT], node: NodeT) -> list[NodeT]:
    """Append with sort_order = max(existing) + 1; other siblings are untouched."""
    next_order = max((sibling.sort_order for sibling in siblings), default=0) + 1
    return [*siblings, _with_order(node, next_order)]


def insert_at(siblings: Sequence[NodeT], node: NodeT, position: int) -> list[NodeT]:
    """Insert at a 1-based position (clamped to the list bounds) and renumber."""
    index = min(max(position, 1), len(siblings) + 1) - 1
    items = list(siblings)
    items.insert(index, node)
    return renumber(items)


def apply_order(siblings: Sequence[NodeT], ordered_ids: Iterable[str]) -> list[NodeT]:
    """Reorder siblings by a caller-supplied id sequence and renumber.

    Ids that are not siblings are ignored. Siblings missing from the sequence
    keep their relative order after the ones that were listed.
    """
    by_id = {node.id: node for node in siblings}
    picked: list[NodeT] = []
    seen: set[str] = set()
    for node_id in ordered_ids:
        if node_id in by_id and node_id not in seen:
            seen.add(node_id)
            picked.append(by_id[node_id])

    rest = [node for node in siblings if node.id not in seen]
    return renumber(picked + rest)
