"""
Hover tracking - which node the pointer is currently over.

The rendering layer is the source of truth for "which shape is under the
pointer"; it reports enter/leave and the tracker simply remembers the last
one. Only used to resolve the target of a connect-drag.
"""

from typing import Optional

from sketchgraph.model import Node
from sketchgraph.store import GraphStore


class HoverTracker:
    def __init__(self):
        self._node_id: Optional[int] = None

    @property
    def node_id(self) -> Optional[int]:
        return self._node_id

    def enter(self, node: Node) -> None:
        self._node_id = node.id

    def leave(self) -> None:
        self._node_id = None

    def current(self, store: GraphStore) -> Optional[Node]:
        """The hovered node, or None if nothing is hovered or it was removed."""
        return store.get_node(self._node_id)

    def prune(self, store: GraphStore) -> None:
        if self._node_id is not None and store.get_node(self._node_id) is None:
            self._node_id = None
