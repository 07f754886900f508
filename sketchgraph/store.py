"""
GraphStore - the single owner of nodes and edges.

All structural mutations go through this class. It enforces the graph
invariants:
- every edge's endpoints are nodes in the store (removing a node cascades)
- no self-loops
- at most one connection between two nodes created by reconnecting
  (a new edge replaces an existing one in either direction)
- node ids are never reused within a session; after replace_all the
  allocator restarts at max(loaded ids)

Listeners registered with add_listener() receive a StoreChange after every
mutation that actually changed something.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sketchgraph.errors import DanglingReferenceError, DocumentFormatError
from sketchgraph.model import Edge, EdgeKey, Node

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    NODE_ADDED = "node_added"
    NODE_REMOVED = "node_removed"
    NODE_MOVED = "node_moved"
    NODE_RENAMED = "node_renamed"
    EDGE_ADDED = "edge_added"
    EDGE_REMOVED = "edge_removed"
    EDGE_RELABELED = "edge_relabeled"
    REPLACED = "replaced"


@dataclass
class StoreChange:
    """Describes one mutation. Removed edges include cascaded and replaced ones."""
    kind: ChangeKind
    node_id: Optional[int] = None
    edge_key: Optional[EdgeKey] = None
    removed_edges: List[EdgeKey] = field(default_factory=list)


class GraphStore:
    """Owns the node and edge collections and the node id allocator."""

    def __init__(self):
        self._nodes: Dict[int, Node] = {}
        self._edges: Dict[EdgeKey, Edge] = {}
        self._last_id = 0
        self._listeners: List[Callable[[StoreChange], None]] = []

    # --- Read access ---

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    @property
    def next_id(self) -> int:
        return self._last_id + 1

    def __contains__(self, item) -> bool:
        if isinstance(item, Node):
            return self._nodes.get(item.id) is item
        if isinstance(item, Edge):
            return self._edges.get(item.key) is item
        return False

    def __len__(self) -> int:
        return len(self._nodes)

    def get_node(self, node_id: Optional[int]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def get_edge(self, source: int, target: int) -> Optional[Edge]:
        return self._edges.get((source, target))

    def find_connection(self, a: int, b: int) -> Optional[Edge]:
        """Return the edge joining a and b in either direction, if any."""
        return self._edges.get((a, b)) or self._edges.get((b, a))

    def endpoints(self, edge: Edge) -> Tuple[Node, Node]:
        """Resolve an edge's endpoint ids to the live nodes."""
        return self._nodes[edge.source], self._nodes[edge.target]

    # --- Listeners ---

    def add_listener(self, callback: Callable[[StoreChange], None]) -> None:
        self._listeners.append(callback)

    def _notify(self, change: StoreChange) -> None:
        for callback in list(self._listeners):
            callback(change)

    # --- Mutations ---

    def add_node(self, title: str, x: float, y: float) -> Node:
        self._last_id += 1
        node = Node(id=self._last_id, title=title, x=float(x), y=float(y))
        self._nodes[node.id] = node
        logger.debug(f"Added node {node.id} '{title}' at ({x}, {y})")
        self._notify(StoreChange(ChangeKind.NODE_ADDED, node_id=node.id))
        return node

    def remove_node(self, node: Node) -> None:
        """Remove a node and every edge that touches it. No-op if absent."""
        if node not in self:
            return
        del self._nodes[node.id]
        removed = [key for key, edge in self._edges.items() if edge.touches(node.id)]
        for key in removed:
            del self._edges[key]
        logger.debug(f"Removed node {node.id} and {len(removed)} edge(s)")
        self._notify(StoreChange(ChangeKind.NODE_REMOVED, node_id=node.id, removed_edges=removed))

    def add_edge(self, source: Node, target: Node, label: str = "") -> Optional[Edge]:
        """
        Connect source to target.

        Returns None without changing anything when source and target are the
        same node or either one is not in the store. An existing edge between
        the two nodes, in either direction, is replaced.
        """
        if source.id == target.id:
            logger.debug(f"Rejected self-loop on node {source.id}")
            return None
        if source not in self or target not in self:
            logger.debug(f"Rejected edge {source.id}->{target.id}: endpoint not in store")
            return None

        replaced = [key for key, edge in self._edges.items() if edge.connects(source.id, target.id)]
        for key in replaced:
            del self._edges[key]

        edge = Edge(source=source.id, target=target.id, label=label or "")
        self._edges[edge.key] = edge
        logger.debug(f"Added edge {edge.key}, replaced {replaced}")
        self._notify(StoreChange(ChangeKind.EDGE_ADDED, edge_key=edge.key, removed_edges=replaced))
        return edge

    def remove_edge(self, edge: Edge) -> None:
        if edge not in self:
            return
        del self._edges[edge.key]
        self._notify(StoreChange(ChangeKind.EDGE_REMOVED, edge_key=edge.key, removed_edges=[edge.key]))

    def rename_node(self, node: Node, title: str) -> None:
        if node not in self:
            return
        node.title = title
        self._notify(StoreChange(ChangeKind.NODE_RENAMED, node_id=node.id))

    def relabel_edge(self, edge: Edge, label: str) -> None:
        if edge not in self:
            return
        edge.label = label
        self._notify(StoreChange(ChangeKind.EDGE_RELABELED, edge_key=edge.key))

    def move_node(self, node: Node, x: float, y: float) -> None:
        if node not in self:
            return
        node.x = float(x)
        node.y = float(y)
        self._notify(StoreChange(ChangeKind.NODE_MOVED, node_id=node.id))

    def replace_all(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        """
        Atomically replace the whole graph.

        Edge endpoint ids are resolved against the new node set. On any error
        the store is left exactly as it was.

        Raises:
            DocumentFormatError: duplicate node ids or a self-loop edge
            DanglingReferenceError: an edge endpoint id is not a loaded node
        """
        new_nodes: Dict[int, Node] = {}
        for node in nodes:
            if node.id in new_nodes:
                raise DocumentFormatError(f"Duplicate node id {node.id!r}")
            new_nodes[node.id] = node

        new_edges: Dict[EdgeKey, Edge] = {}
        for edge in edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in new_nodes:
                    raise DanglingReferenceError(endpoint)
            if edge.source == edge.target:
                raise DocumentFormatError(f"Self-loop edge on node {edge.source!r}")
            if edge.key in new_edges:
                logger.warning(f"Duplicate edge {edge.key} in document; keeping the last one")
            new_edges[edge.key] = edge

        self._nodes = new_nodes
        self._edges = new_edges
        # An empty document restarts the allocator at 0.
        self._last_id = max(new_nodes, default=0)
        logger.info(f"Replaced graph: {len(new_nodes)} node(s), {len(new_edges)} edge(s)")
        self._notify(StoreChange(ChangeKind.REPLACED))

    def clear(self) -> None:
        self.replace_all([], [])
