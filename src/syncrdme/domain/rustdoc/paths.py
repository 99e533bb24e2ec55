"""Canonical item paths, including items rustdoc leaves out of ``paths``.

rustdoc only records items reachable through the public surface in
``paths``; deeply nested ones (fields of re-exported structs, variants of
private-module enums and the like) are sometimes missing. For those the
path is rebuilt from the nearest ancestor that *is* recorded, found with a
multi-source shortest-path walk over the containment graph.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .model import DocTree, ItemSummary


@dataclass
class PathNode:
    kind: str
    name: Optional[str]
    depth: Optional[int] = None
    parent: Optional[str] = None

    @property
    def reachable(self) -> bool:
        return self.depth is not None


def build_path_nodes(tree: DocTree) -> Dict[str, PathNode]:
    """Arena of every indexed item with its hop count to a ``paths`` entry."""

    nodes = {item_id: PathNode(kind=item.kind, name=item.name) for item_id, item in tree.index.items()}

    # ordered by (depth, push order): the first entry popped for an item is its shortest
    order = itertools.count()
    heap: List[Tuple[int, int, str, Optional[str]]] = []
    for item_id in tree.index:
        if item_id in tree.paths:
            heapq.heappush(heap, (0, next(order), item_id, None))

    while heap:
        depth, _, item_id, parent = heapq.heappop(heap)
        node = nodes[item_id]
        if node.depth is not None:
            continue
        node.depth = depth
        node.parent = parent
        for child in tree.index[item_id].children():
            if child in tree.index and nodes[child].depth is None:
                heapq.heappush(heap, (depth + 1, next(order), child, item_id))

    return nodes


class PathIndex:
    """Item id to :class:`ItemSummary`, with the fallback reconstruction."""

    def __init__(self, tree: DocTree) -> None:
        self._tree = tree
        self._nodes = build_path_nodes(tree)

    def node(self, item_id: str) -> Optional[PathNode]:
        return self._nodes.get(item_id)

    def summary(self, item_id: str) -> Optional[ItemSummary]:
        recorded = self._tree.paths.get(item_id)
        if recorded is not None:
            return recorded

        leaf = self._nodes.get(item_id)
        if leaf is None:
            return None
        chain = [leaf]
        current = leaf
        while current.parent is not None:
            anchor = self._tree.paths.get(current.parent)
            if anchor is not None:
                path = list(anchor.path)
                for visited in reversed(chain):
                    if visited.name is None:
                        return None
                    path.append(visited.name)
                return ItemSummary(crate_id=anchor.crate_id, kind=leaf.kind, path=path)
            parent = self._nodes.get(current.parent)
            if parent is None:
                return None
            chain.append(parent)
            current = parent
        return None
