"""
Single selection: at most one node XOR one edge.

Ids and edge keys are stored rather than objects, so a selection can never
keep a removed entity alive. prune() drops a slot whose entity is gone.
"""

from typing import Optional

from sketchgraph.model import Edge, EdgeKey, Node
from sketchgraph.store import GraphStore


class SelectionManager:
    def __init__(self):
        self._node_id: Optional[int] = None
        self._edge_key: Optional[EdgeKey] = None

    @property
    def node_id(self) -> Optional[int]:
        return self._node_id

    @property
    def edge_key(self) -> Optional[EdgeKey]:
        return self._edge_key

    @property
    def is_empty(self) -> bool:
        return self._node_id is None and self._edge_key is None

    def select_node(self, node: Node) -> None:
        self._edge_key = None
        self._node_id = node.id

    def select_edge(self, edge: Edge) -> None:
        self._node_id = None
        self._edge_key = edge.key

    def clear(self) -> None:
        self._node_id = None
        self._edge_key = None

    def selected_node(self, store: GraphStore) -> Optional[Node]:
        return store.get_node(self._node_id)

    def selected_edge(self, store: GraphStore) -> Optional[Edge]:
        if self._edge_key is None:
            return None
        return store.get_edge(*self._edge_key)

    def prune(self, store: GraphStore) -> bool:
        """Clear a slot whose entity left the store. Returns True if anything changed."""
        changed = False
        if self._node_id is not None and store.get_node(self._node_id) is None:
            self._node_id = None
            changed = True
        if self._edge_key is not None and store.get_edge(*self._edge_key) is None:
            self._edge_key = None
            changed = True
        return changed
