"""
Graph visualizer that produces SVG content for the editor canvas.

This implementation uses NetworkX to hold the snapshot being drawn, but the
output is a plain SVG fragment string which NiceGUI's ui.interactive_image
renders on top of the (blank) canvas image.

Draw order, bottom to top:
- the connector guide shown while connect-dragging
- edges, each with an arrow marker that stops at the target circle
- nodes (circle + title), later nodes above earlier ones
"""

from html import escape
from typing import Any, Dict, Optional, Tuple

import networkx as nx

from sketchgraph.edit.constants import NODE_RADIUS
from sketchgraph.edit.controller import EditorSnapshot
from sketchgraph.edit.session import TargetKind

STYLE = """
    .edge { fill: none; stroke: #333; stroke-width: 4px; }
    .edge.selected { stroke: #e67e22; }
    .edge.dragline { stroke-dasharray: 10, 2; }
    .edge.editing { stroke: #3498db; }
    .edge-label { font: 14px sans-serif; fill: #333; text-anchor: middle; }
    .node circle { fill: #f5f5f5; stroke: #333; stroke-width: 2px; }
    .node.selected circle { fill: #fde3c8; stroke: #e67e22; }
    .node.editing text { visibility: hidden; }
    .node text { font: 16px sans-serif; text-anchor: middle; }
    marker path { fill: #333; }
"""


def _fmt(value: float) -> str:
    return f"{value:g}"


def _line_path(start: Tuple[float, float], end: Tuple[float, float]) -> str:
    return f"M{_fmt(start[0])},{_fmt(start[1])}L{_fmt(end[0])},{_fmt(end[1])}"


class GraphVisualizer:
    """
    Build SVG markup for an EditorSnapshot.

    Node ids are integers; edges are keyed by (source, target). A selected
    entity gets the `selected` class, an entity being renamed gets `editing`.
    """

    def __init__(self, node_radius: float = NODE_RADIUS):
        self.node_radius = node_radius
        self.G = nx.DiGraph()

    def _defs(self) -> str:
        marker = (
            '<marker id="{id}" markerUnits="userSpaceOnUse" viewBox="-20 -10 20 20" '
            'markerWidth="20" markerHeight="20" refX="{ref_x}" orient="auto">'
            '<path d="M-20,-10L0,0L-20,10"/></marker>'
        )
        # Tip of the edge arrow sits on the circle; the guide arrow sits on the pointer.
        return (
            '<defs>'
            + marker.format(id='end-arrow', ref_x=_fmt(self.node_radius - 3))
            + marker.format(id='mark-end-arrow', ref_x=0)
            + '</defs>'
        )

    def build_graph(self, snapshot: EditorSnapshot) -> nx.DiGraph:
        """Load the snapshot into a fresh DiGraph carrying the drawing attributes."""
        editing = snapshot.editing
        editing_node = editing.node_id if editing and editing.kind is TargetKind.NODE else None
        editing_edge = editing.edge_key if editing and editing.kind is TargetKind.EDGE else None

        self.G = nx.DiGraph()
        for node in snapshot.nodes:
            self.G.add_node(
                node.id, title=node.title, x=node.x, y=node.y,
                selected=node.id == snapshot.selected_node_id,
                editing=node.id == editing_node,
            )
        for edge in snapshot.edges:
            if edge.source in self.G and edge.target in self.G:
                self.G.add_edge(
                    edge.source, edge.target, label=edge.label,
                    selected=edge.key == snapshot.selected_edge_key,
                    editing=edge.key == editing_edge,
                )
        return self.G

    def generate_svg(self, snapshot: EditorSnapshot) -> str:
        G = self.build_graph(snapshot)
        parts = [f'<style>{STYLE}</style>', self._defs()]

        if snapshot.guide is not None:
            start, end = snapshot.guide
            parts.append(
                f'<path class="edge dragline" d="{_line_path(start, end)}" '
                f'marker-end="url(#mark-end-arrow)"/>'
            )

        parts.append('<g class="edges">')
        for src, tgt, attrs in G.edges(data=True):
            start = (G.nodes[src]['x'], G.nodes[src]['y'])
            end = (G.nodes[tgt]['x'], G.nodes[tgt]['y'])
            classes = self._classes('edge', attrs)
            parts.append(
                f'<path class="{classes}" data-source="{src}" data-target="{tgt}" '
                f'd="{_line_path(start, end)}" marker-end="url(#end-arrow)"/>'
            )
            if attrs.get('label') and not attrs.get('editing'):
                mid_x = (start[0] + end[0]) / 2
                mid_y = (start[1] + end[1]) / 2
                parts.append(
                    f'<text class="edge-label" x="{_fmt(mid_x)}" y="{_fmt(mid_y - 8)}">'
                    f'{escape(attrs["label"])}</text>'
                )
        parts.append('</g>')

        parts.append('<g class="nodes">')
        for node_id, attrs in G.nodes(data=True):
            classes = self._classes('node', attrs)
            parts.append(
                f'<g class="{classes}" data-id="{node_id}" '
                f'transform="translate({_fmt(attrs["x"])},{_fmt(attrs["y"])})">'
                f'<circle r="{_fmt(self.node_radius)}"/>'
                f'<text dy="5">{escape(attrs["title"])}</text></g>'
            )
        parts.append('</g>')
        return ''.join(parts)

    @staticmethod
    def _classes(base: str, attrs: Dict[str, Any]) -> str:
        classes = [base]
        if attrs.get('selected'):
            classes.append('selected')
        if attrs.get('editing'):
            classes.append('editing')
        return ' '.join(classes)

    def label_anchor(self, snapshot: EditorSnapshot) -> Optional[Tuple[float, float]]:
        """Canvas position where the inline text box should appear, if editing."""
        editing = snapshot.editing
        if editing is None:
            return None
        positions = {n.id: (n.x, n.y) for n in snapshot.nodes}
        if editing.kind is TargetKind.NODE:
            return positions.get(editing.node_id)
        source = positions.get(editing.edge_key[0])
        target = positions.get(editing.edge_key[1])
        if source is None or target is None:
            return None
        return ((source[0] + target[0]) / 2, (source[1] + target[1]) / 2)
