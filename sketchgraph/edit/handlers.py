"""
Edit Handlers - NiceGUI event handlers for the editor canvas.

This module turns raw NiceGUI events into EditController input:
- mouse events from ui.interactive_image are hit-tested into a node, an edge
  or the empty canvas, and hover enter/leave is derived from pointer moves
- key events from ui.keyboard become delete-key presses
- every controller change redraws the canvas SVG and moves the text box
"""

import logging
from typing import Callable, Dict, Optional

from sketchgraph.edit.constants import DELETE_KEYS
from sketchgraph.edit.controller import EditController, EditorSnapshot, Mode, Modifiers
from sketchgraph.edit.hit_test import find_node_at, hit_at
from sketchgraph.edit.overlay import LabelEditOverlay

logger = logging.getLogger(__name__)

# Mouse events requested from ui.interactive_image
MOUSE_EVENTS = ['mousedown', 'mousemove', 'mouseup', 'mouseleave']

DRAG_MODES = (Mode.CONNECT_DRAGGING, Mode.NODE_DRAGGING)


def setup_edit_handlers(
    controller: EditController,
    canvas,
    overlay: LabelEditOverlay,
    visualizer,
    on_graph_change: Optional[Callable[[EditorSnapshot], None]] = None,
) -> Dict[str, Callable]:
    """
    Connect the controller to the canvas and the text box overlay.

    Args:
        controller: EditController instance
        canvas: ui.interactive_image showing the graph
        overlay: LabelEditOverlay used for inline renaming
        visualizer: GraphVisualizer producing the canvas SVG
        on_graph_change: Optional extra callback run after each redraw

    Returns:
        Dict with handler functions for binding to UI events
    """
    last_pos = {'pos': (0.0, 0.0)}

    def redraw(snapshot: EditorSnapshot):
        canvas.set_content(visualizer.generate_svg(snapshot))
        overlay.place(visualizer.label_anchor(snapshot))
        if on_graph_change:
            on_graph_change(snapshot)

    controller.set_on_change(redraw)
    controller.set_edit_surface(overlay)

    def update_hover(pos):
        node = find_node_at(controller.store, pos)
        current = controller.hover.node_id
        if node is None:
            if current is not None:
                controller.on_hover_leave()
        elif node.id != current:
            controller.on_hover_leave()
            controller.on_hover_enter(node)

    def handle_mouse(e):
        """Dispatch one ui.interactive_image mouse event."""
        pos = (e.image_x, e.image_y)
        if e.type == 'mouseleave':
            controller.on_hover_leave()
            if controller.mode in DRAG_MODES:
                controller.on_pointer_up(last_pos['pos'])
            return

        last_pos['pos'] = pos
        update_hover(pos)
        if e.type == 'mousedown':
            if getattr(e, 'button', 0) != 0:
                return
            controller.on_pointer_down(pos, Modifiers.from_event_args(e), hit_at(controller.store, pos))
        elif e.type == 'mousemove':
            controller.on_pointer_move(pos)
        elif e.type == 'mouseup':
            controller.on_pointer_up(pos)

    def handle_keyboard(e):
        """Delete/Backspace removes the selection. Keys typed into inputs are ignored by ui.keyboard."""
        if not e.action.keydown:
            return
        if e.key.name in DELETE_KEYS:
            logger.debug(f"Delete key pressed: {e.key.name}")
            controller.on_delete_key()

    def refresh():
        redraw(controller.snapshot())

    return {
        'handle_mouse': handle_mouse,
        'handle_keyboard': handle_keyboard,
        'refresh': refresh,
    }
