"""
Pointer and keyboard editing for the SketchGraph canvas.

This package provides the interaction engine and its UI wiring:
- EditController: the interaction state machine
- SelectionManager / HoverTracker: selection and hover state
- LabelEditSession: inline renaming of node titles and edge labels
- hit_test: canvas position -> node / edge
- LabelEditOverlay: the NiceGUI text box used for renaming
- setup_edit_handlers: event handlers for app.py integration

Usage:
    from sketchgraph.edit import EditController, LabelEditOverlay
    from sketchgraph.edit.handlers import setup_edit_handlers
"""

from sketchgraph.edit.constants import (
    CLICK_DISTANCE,
    NODE_RADIUS,
    EDGE_HOVER_TOLERANCE,
    CANVAS_WIDTH,
    CANVAS_HEIGHT,
)
from sketchgraph.edit.tracker import HoverTracker
from sketchgraph.edit.selection import SelectionManager
from sketchgraph.edit.session import LabelEditSession, EditSurface, TargetKind
from sketchgraph.edit.controller import (
    EditController,
    EditorSnapshot,
    Mode,
    Modifiers,
    Idle,
    ConnectDragging,
    NodeDragging,
    EditingLabel,
)
from sketchgraph.edit.hit_test import hit_at, find_node_at, find_edge_at
from sketchgraph.edit.overlay import LabelEditOverlay
from sketchgraph.edit.handlers import setup_edit_handlers

__all__ = [
    'EditController',
    'EditorSnapshot',
    'Mode',
    'Modifiers',
    'Idle',
    'ConnectDragging',
    'NodeDragging',
    'EditingLabel',
    'HoverTracker',
    'SelectionManager',
    'LabelEditSession',
    'EditSurface',
    'TargetKind',
    'LabelEditOverlay',
    'setup_edit_handlers',
    'hit_at',
    'find_node_at',
    'find_edge_at',
    'CLICK_DISTANCE',
    'NODE_RADIUS',
    'EDGE_HOVER_TOLERANCE',
    'CANVAS_WIDTH',
    'CANVAS_HEIGHT',
]
