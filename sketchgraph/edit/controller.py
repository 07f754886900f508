"""
Edit Controller - the pointer/keyboard interaction state machine.

This controller is the single actor that mutates the graph in response to
input. It coordinates:
- input events from the UI (pointer down/move/up, hover, keys, text box blur)
- the HoverTracker and SelectionManager
- structural mutations on the GraphStore
- the LabelEditSession used for inline renaming

States form a tagged variant (Idle, ConnectDragging, NodeDragging,
EditingLabel). A press is classified once, when the gesture starts; a
release closer than CLICK_DISTANCE to its press counts as a click.

Gestures never raise. A gesture without a valid outcome (self-loop, drag
released off-target, stale target) changes nothing.
"""

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, Tuple, Union

from sketchgraph import serializer
from sketchgraph.edit.constants import CLICK_DISTANCE, CONNECT_MODIFIER, EDIT_MODIFIER
from sketchgraph.edit.selection import SelectionManager
from sketchgraph.edit.session import EditSurface, LabelEditSession
from sketchgraph.edit.tracker import HoverTracker
from sketchgraph.model import Edge, EdgeKey, Node
from sketchgraph.store import ChangeKind, GraphStore, StoreChange

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class Mode(Enum):
    IDLE = "idle"
    CONNECT_DRAGGING = "connect_dragging"
    NODE_DRAGGING = "node_dragging"
    EDITING_LABEL = "editing_label"


@dataclass(frozen=True)
class Idle:
    mode: ClassVar[Mode] = Mode.IDLE


@dataclass(frozen=True)
class ConnectDragging:
    source_id: int
    guide_end: Point
    mode: ClassVar[Mode] = Mode.CONNECT_DRAGGING


@dataclass(frozen=True)
class NodeDragging:
    node_id: int
    grab_dx: float = 0.0
    grab_dy: float = 0.0
    moved: bool = False
    mode: ClassVar[Mode] = Mode.NODE_DRAGGING


@dataclass(frozen=True)
class EditingLabel:
    session: LabelEditSession
    mode: ClassVar[Mode] = Mode.EDITING_LABEL


EditState = Union[Idle, ConnectDragging, NodeDragging, EditingLabel]

IDLE = Idle()


@dataclass(frozen=True)
class Modifiers:
    """Modifier keys held when a gesture started."""
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    meta: bool = False

    def active(self, name: str) -> bool:
        return bool(getattr(self, name, False))

    @classmethod
    def from_event_args(cls, args: Any) -> "Modifiers":
        """Build from a mouse event (object with attributes, or a dict)."""
        if isinstance(args, dict):
            return cls(
                shift=bool(args.get('shift', args.get('shiftKey', False))),
                ctrl=bool(args.get('ctrl', args.get('ctrlKey', False))),
                alt=bool(args.get('alt', args.get('altKey', False))),
                meta=bool(args.get('meta', args.get('metaKey', False))),
            )
        return cls(
            shift=bool(getattr(args, 'shift', False)),
            ctrl=bool(getattr(args, 'ctrl', False)),
            alt=bool(getattr(args, 'alt', False)),
            meta=bool(getattr(args, 'meta', False)),
        )


NO_MODIFIERS = Modifiers()


@dataclass(frozen=True)
class Press:
    """Where and how the current gesture started."""
    position: Point
    modifiers: Modifiers
    node_id: Optional[int] = None
    edge_key: Optional[EdgeKey] = None


@dataclass
class EditorSnapshot:
    """Everything a renderer needs to redraw."""
    nodes: List[Node]
    edges: List[Edge]
    selected_node_id: Optional[int]
    selected_edge_key: Optional[EdgeKey]
    guide: Optional[Tuple[Point, Point]]
    editing: Optional[LabelEditSession]
    mode: Mode


def _distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def _point(pos: Sequence[float]) -> Point:
    return (float(pos[0]), float(pos[1]))


class EditController:
    """Turns input events into graph mutations and selection changes."""

    def __init__(self, store: Optional[GraphStore] = None, surface: Optional[EditSurface] = None):
        self.store = store if store is not None else GraphStore()
        self.selection = SelectionManager()
        self.hover = HoverTracker()
        self._surface = surface
        self._state: EditState = IDLE
        self._press: Optional[Press] = None
        self._on_change: Optional[Callable[[EditorSnapshot], None]] = None
        self._depth = 0
        self._dirty = False
        self.store.add_listener(self._on_store_change)

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def mode(self) -> Mode:
        return self._state.mode

    def set_on_change(self, callback: Optional[Callable[[EditorSnapshot], None]]):
        self._on_change = callback

    def set_edit_surface(self, surface: Optional[EditSurface]):
        self._surface = surface

    def snapshot(self) -> EditorSnapshot:
        guide = None
        if isinstance(self._state, ConnectDragging):
            source = self.store.get_node(self._state.source_id)
            if source is not None:
                guide = (source.position, self._state.guide_end)
        editing = self._state.session if isinstance(self._state, EditingLabel) else None
        return EditorSnapshot(
            nodes=self.store.nodes,
            edges=self.store.edges,
            selected_node_id=self.selection.node_id,
            selected_edge_key=self.selection.edge_key,
            guide=guide,
            editing=editing,
            mode=self._state.mode,
        )

    # --- Change notification ---

    @contextmanager
    def _changes(self):
        """Collect notifications so one input event emits at most one snapshot."""
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1
            if self._depth == 0 and self._dirty:
                self._dirty = False
                self._notify_change()

    def _mark_changed(self):
        self._dirty = True
        if self._depth == 0:
            self._dirty = False
            self._notify_change()

    def _notify_change(self):
        if self._on_change:
            self._on_change(self.snapshot())

    def _on_store_change(self, change: StoreChange):
        if change.kind is ChangeKind.REPLACED:
            # Ids in the new graph may collide with the old ones.
            self.selection.clear()
            self.hover.leave()
            self._reset_state()
        else:
            self.selection.prune(self.store)
            self.hover.prune(self.store)
            self._drop_stale_state()
        self._mark_changed()

    def _drop_stale_state(self):
        state = self._state
        if isinstance(state, ConnectDragging) and self.store.get_node(state.source_id) is None:
            self._state = IDLE
        elif isinstance(state, NodeDragging) and self.store.get_node(state.node_id) is None:
            self._state = IDLE
        elif isinstance(state, EditingLabel) and state.session.resolve(self.store) is None:
            state.session.close()
            self._state = IDLE

    def _reset_state(self):
        if isinstance(self._state, EditingLabel):
            self._state.session.close()
        self._state = IDLE
        self._press = None

    def reset(self):
        """Abandon any gesture or edit and return to Idle."""
        with self._changes():
            self._reset_state()
            self._mark_changed()

    # --- Pointer input ---

    def on_pointer_down(self, pos: Sequence[float], modifiers: Modifiers = NO_MODIFIERS,
                        hit: Optional[Union[Node, Edge]] = None):
        """
        Start a gesture.

        Args:
            pos: pointer position in canvas coordinates
            modifiers: modifier keys held at press time
            hit: the node or edge under the pointer, or None for the empty canvas
        """
        if not isinstance(self._state, Idle):
            logger.debug(f"Ignoring press while {self._state.mode.value}")
            return

        pos = _point(pos)
        modifiers = modifiers or NO_MODIFIERS
        connect = modifiers.active(CONNECT_MODIFIER)

        with self._changes():
            if hit is None:
                self._press = Press(pos, modifiers)
                if connect:
                    self.store.add_node(str(self.store.next_id), pos[0], pos[1])
            elif isinstance(hit, Node):
                if hit not in self.store:
                    self._press = Press(pos, modifiers)
                    return
                self._press = Press(pos, modifiers, node_id=hit.id)
                if connect:
                    self._state = ConnectDragging(source_id=hit.id, guide_end=hit.position)
                    self._mark_changed()
                else:
                    self._state = NodeDragging(node_id=hit.id, grab_dx=hit.x - pos[0], grab_dy=hit.y - pos[1])
            elif isinstance(hit, Edge):
                self._press = Press(pos, modifiers, edge_key=hit.key if hit in self.store else None)

    def on_pointer_move(self, pos: Sequence[float]):
        pos = _point(pos)
        state = self._state
        with self._changes():
            if isinstance(state, ConnectDragging):
                self._state = replace(state, guide_end=pos)
                self._mark_changed()
            elif isinstance(state, NodeDragging):
                if not state.moved and self._press is not None and \
                        _distance(self._press.position, pos) < CLICK_DISTANCE:
                    return
                node = self.store.get_node(state.node_id)
                if node is None:
                    self._state = IDLE
                    return
                if not state.moved:
                    self._state = replace(state, moved=True)
                self.store.move_node(node, pos[0] + state.grab_dx, pos[1] + state.grab_dy)

    def on_pointer_up(self, pos: Sequence[float]):
        pos = _point(pos)
        press, self._press = self._press, None
        is_click = press is not None and _distance(press.position, pos) < CLICK_DISTANCE
        edit = press is not None and press.modifiers.active(EDIT_MODIFIER)
        state = self._state

        with self._changes():
            if isinstance(state, ConnectDragging):
                self._state = IDLE
                self._mark_changed()
                source = self.store.get_node(state.source_id)
                if source is None:
                    return
                if is_click:
                    self._click_node(source, edit)
                    return
                target = self.hover.current(self.store)
                if target is None or target.id == source.id:
                    logger.debug(f"Connect from node {source.id} released without a target")
                    return
                self.store.add_edge(source, target, "")

            elif isinstance(state, NodeDragging):
                self._state = IDLE
                if state.moved:
                    return
                node = self.store.get_node(state.node_id)
                if node is None:
                    return
                if is_click:
                    self._click_node(node, edit)
                else:
                    # Released away from the press with no move event in between
                    self.store.move_node(node, pos[0] + state.grab_dx, pos[1] + state.grab_dy)

            elif isinstance(state, Idle):
                if not is_click:
                    return
                if press.edge_key is not None:
                    edge = self.store.get_edge(*press.edge_key)
                    if edge is None:
                        return
                    if edit:
                        self._begin_edit(edge)
                    else:
                        self.selection.select_edge(edge)
                        self._mark_changed()
                elif press.node_id is None:
                    if not self.selection.is_empty:
                        self.selection.clear()
                        self._mark_changed()

    def _click_node(self, node: Node, edit: bool):
        if edit:
            self._begin_edit(node)
        else:
            self.selection.select_node(node)
            self._mark_changed()

    def _begin_edit(self, target: Union[Node, Edge]):
        session = LabelEditSession(target, self._surface)
        self._state = EditingLabel(session)
        logger.debug(f"Editing {session!r}")
        session.begin()
        self._mark_changed()

    # --- Hover input ---

    def on_hover_enter(self, node: Node):
        if node in self.store:
            self.hover.enter(node)

    def on_hover_leave(self):
        self.hover.leave()

    # --- Keyboard input ---

    def on_delete_key(self):
        """Delete the selected node (with its edges) or the selected edge."""
        if not isinstance(self._state, Idle):
            return
        with self._changes():
            node = self.selection.selected_node(self.store)
            edge = self.selection.selected_edge(self.store)
            if node is not None:
                self.store.remove_node(node)
            elif edge is not None:
                self.store.remove_edge(edge)
            else:
                return
            self.selection.clear()
            self._mark_changed()

    def on_edit_commit_key(self):
        if isinstance(self._state, EditingLabel):
            self._state.session.end_input()

    def on_edit_blur(self, text: str):
        """The text box lost focus: write its text back and return to Idle."""
        state = self._state
        if not isinstance(state, EditingLabel):
            return
        with self._changes():
            self._state = IDLE
            state.session.commit(self.store, text)
            self._mark_changed()

    # --- Document operations ---

    def load_document(self, document: Dict[str, Any]):
        """
        Replace the graph with a document. Any gesture in progress is dropped.

        Raises:
            DanglingReferenceError, DocumentFormatError: the graph is unchanged
        """
        with self._changes():
            serializer.deserialize(document, self.store)

    def document(self) -> Dict[str, Any]:
        return serializer.serialize(self.store)

    def clear(self):
        with self._changes():
            self.store.clear()
