"""
Graph entities.

Nodes are identified by an integer id. Edges are identified by the ordered
pair (source, target) of node ids and do not hold node objects; the
GraphStore resolves endpoint ids to live nodes when needed.
"""

from dataclasses import dataclass
from typing import Tuple

EdgeKey = Tuple[int, int]


@dataclass(eq=False)
class Node:
    """A positioned, titled vertex. Equality is identity; use `id` to compare."""
    id: int
    title: str = ""
    x: float = 0.0
    y: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(eq=False)
class Edge:
    """A directed, labeled connection between two distinct nodes."""
    source: int
    target: int
    label: str = ""

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target)

    def touches(self, node_id: int) -> bool:
        return node_id == self.source or node_id == self.target

    def connects(self, a: int, b: int) -> bool:
        """True if this edge joins a and b, in either direction."""
        return self.key == (a, b) or self.key == (b, a)
