"""
Graphviz export.

Builds a graphviz.Digraph from the store so a graph drawn in the editor
can be rendered with the `dot` toolchain. Only the DOT source is produced
here; rendering to an image needs the Graphviz binaries.
"""

from graphviz import Digraph

from sketchgraph.store import GraphStore

# Canvas pixels per inch in the Graphviz position hints
POSITION_SCALE = 72.0


def to_dot(store: GraphStore, name: str = "sketchgraph") -> Digraph:
    """
    Return a Digraph with one node per graph node and one edge per graph edge.

    Node titles become labels and canvas positions become `pos` hints
    (y flipped, as Graphviz grows upwards) for use with `neato -n`.
    """
    dot = Digraph(name=name, comment="SketchGraph export")
    dot.attr("node", shape="circle")
    for node in store.nodes:
        y = -node.y / POSITION_SCALE or 0.0
        pos = f"{node.x / POSITION_SCALE:g},{y:g}!"
        dot.node(str(node.id), label=node.title, pos=pos)

    for edge in store.edges:
        if edge.label:
            dot.edge(str(edge.source), str(edge.target), label=edge.label)
        else:
            dot.edge(str(edge.source), str(edge.target))

    return dot


def to_dot_source(store: GraphStore) -> str:
    return to_dot(store).source
