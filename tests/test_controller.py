"""
Tests for the interaction state machine.

The controller is driven the way the UI drives it: pointer down with the
hit shape, pointer moves, pointer up, hover enter/leave and keys.
"""

from types import SimpleNamespace

import pytest

from sketchgraph import DanglingReferenceError, GraphStore
from sketchgraph.edit import (
    ConnectDragging,
    EditController,
    EditingLabel,
    Mode,
    Modifiers,
    NodeDragging,
    TargetKind,
)
from sketchgraph.edit.handlers import setup_edit_handlers
from sketchgraph.graph_viz import GraphVisualizer

SHIFT = Modifiers(shift=True)

SCENARIO_DOC = {
    "nodes": [
        {"id": 1, "title": "A", "x": 0, "y": 0},
        {"id": 2, "title": "B", "x": 10, "y": 10},
    ],
    "edges": [{"source": 1, "target": 2, "label": "go"}],
}


class RecordingSurface:
    """Stands in for the text box overlay."""

    def __init__(self):
        self.opened = []
        self.released = 0
        self.closed = 0

    def open(self, session):
        self.opened.append(session.buffer)

    def release_focus(self):
        self.released += 1

    def close(self):
        self.closed += 1


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def controller(surface):
    store = GraphStore()
    store.add_node("A", 0, 0)
    store.add_node("B", 300, 0)
    store.add_node("C", 0, 300)
    ctl = EditController(store, surface)
    ctl.snapshots = []
    ctl.set_on_change(ctl.snapshots.append)
    return ctl


def nodes(ctl):
    a, b, c = (ctl.store.get_node(i) for i in (1, 2, 3))
    return a, b, c


def click(ctl, pos, hit=None, modifiers=Modifiers()):
    ctl.on_pointer_down(pos, modifiers, hit)
    ctl.on_pointer_up(pos)


def connect_drag(ctl, source, target, release_at):
    ctl.on_pointer_down(source.position, SHIFT, source)
    ctl.on_pointer_move(((source.x + release_at[0]) / 2, (source.y + release_at[1]) / 2))
    if target is not None:
        ctl.on_hover_enter(target)
    else:
        ctl.on_hover_leave()
    ctl.on_pointer_move(release_at)
    ctl.on_pointer_up(release_at)


def assert_single_selection(ctl):
    assert ctl.selection.node_id is None or ctl.selection.edge_key is None


class TestCreateNode:
    def test_shift_press_on_canvas_creates_node(self, controller):
        controller.on_pointer_down((500, 400), SHIFT, None)
        node = controller.store.get_node(4)
        assert node is not None
        assert node.title == "4"
        assert node.position == (500.0, 400.0)
        assert controller.mode is Mode.IDLE
        controller.on_pointer_up((500, 400))
        assert len(controller.store.nodes) == 4

    def test_plain_press_on_canvas_creates_nothing(self, controller):
        click(controller, (500, 400))
        assert len(controller.store.nodes) == 3

    def test_first_node_on_empty_store(self):
        ctl = EditController()
        ctl.on_pointer_down((5, 5), SHIFT, None)
        assert [n.id for n in ctl.store.nodes] == [1]

    def test_create_emits_one_snapshot(self, controller):
        controller.on_pointer_down((500, 400), SHIFT, None)
        assert len(controller.snapshots) == 1
        assert len(controller.snapshots[0].nodes) == 4


class TestConnectDrag:
    def test_drag_to_other_node_creates_edge(self, controller):
        a, b, _ = nodes(controller)
        connect_drag(controller, a, b, b.position)
        assert [e.key for e in controller.store.edges] == [(1, 2)]
        assert controller.store.edges[0].label == ""
        assert controller.mode is Mode.IDLE
        assert controller.snapshot().guide is None

    def test_guide_follows_pointer(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down(a.position, SHIFT, a)
        assert isinstance(controller.state, ConnectDragging)
        controller.on_pointer_move((120, 80))
        assert controller.snapshot().guide == ((0.0, 0.0), (120.0, 80.0))
        assert controller.snapshots[-1].guide == ((0.0, 0.0), (120.0, 80.0))

    def test_release_off_target_changes_nothing(self, controller):
        a, _, _ = nodes(controller)
        connect_drag(controller, a, None, (600, 600))
        assert controller.store.edges == []
        assert controller.mode is Mode.IDLE
        assert controller.snapshot().guide is None

    def test_release_on_source_is_not_a_self_loop(self, controller):
        a, _, _ = nodes(controller)
        connect_drag(controller, a, a, (30, 20))
        assert controller.store.edges == []
        assert controller.mode is Mode.IDLE

    def test_reconnect_replaces_opposite_edge(self, controller):
        a, b, _ = nodes(controller)
        controller.store.add_edge(b, a, "back")
        connect_drag(controller, a, b, b.position)
        assert [e.key for e in controller.store.edges] == [(1, 2)]

    def test_hover_left_before_release(self, controller):
        a, b, _ = nodes(controller)
        controller.on_pointer_down(a.position, SHIFT, a)
        controller.on_hover_enter(b)
        controller.on_pointer_move((300, 0))
        controller.on_hover_leave()
        controller.on_pointer_move((400, 200))
        controller.on_pointer_up((400, 200))
        assert controller.store.edges == []

    def test_press_is_not_reinterpreted_mid_gesture(self, controller):
        a, b, c = nodes(controller)
        controller.on_pointer_down(a.position, SHIFT, a)
        controller.on_pointer_down(c.position, Modifiers(), c)
        assert isinstance(controller.state, ConnectDragging)
        controller.on_hover_enter(b)
        controller.on_pointer_up(b.position)
        assert [e.key for e in controller.store.edges] == [(1, 2)]
        assert c.position == (0.0, 300.0)


class TestNodeDrag:
    def test_drag_moves_node_keeping_grab_offset(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down((10, 5), Modifiers(), a)
        assert isinstance(controller.state, NodeDragging)
        controller.on_pointer_move((110, 105))
        assert a.position == (100.0, 100.0)
        controller.on_pointer_move((210, 55))
        assert a.position == (200.0, 50.0)
        controller.on_pointer_up((210, 55))
        assert controller.mode is Mode.IDLE
        assert controller.selection.is_empty

    def test_small_jitter_does_not_move(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down((0, 0), Modifiers(), a)
        controller.on_pointer_move((2, 2))
        assert a.position == (0.0, 0.0)
        controller.on_pointer_up((2, 2))
        assert controller.selection.node_id == a.id

    def test_release_far_away_without_moves_is_a_drag(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down((0, 0), Modifiers(), a)
        controller.on_pointer_up((200, 0))
        assert controller.mode is Mode.IDLE
        assert controller.selection.node_id is None
        assert a.position == (200.0, 0.0)

    def test_release_far_away_keeps_grab_offset(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down((10, 5), Modifiers(), a)
        controller.on_pointer_up((110, 105))
        assert a.position == (100.0, 100.0)
        assert controller.selection.is_empty

    def test_each_move_emits_a_snapshot(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down((0, 0), Modifiers(), a)
        controller.on_pointer_move((50, 0))
        controller.on_pointer_move((60, 0))
        assert len(controller.snapshots) == 2
        assert controller.snapshots[-1].nodes[0].x == 60.0

    def test_edges_follow_moved_node(self, controller):
        a, b, _ = nodes(controller)
        edge = controller.store.add_edge(a, b)
        controller.on_pointer_down((0, 0), Modifiers(), a)
        controller.on_pointer_move((40, 40))
        controller.on_pointer_up((40, 40))
        source, _ = controller.store.endpoints(edge)
        assert source.position == (40.0, 40.0)


class TestSelection:
    def test_click_node_selects(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a)
        assert controller.selection.node_id == a.id
        assert controller.snapshots[-1].selected_node_id == a.id

    def test_click_edge_selects_and_clears_node(self, controller):
        a, b, _ = nodes(controller)
        edge = controller.store.add_edge(a, b)
        click(controller, (0, 0), a)
        click(controller, (150, 0), edge)
        assert controller.selection.edge_key == (1, 2)
        assert controller.selection.node_id is None

    def test_click_canvas_clears(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a)
        click(controller, (600, 600))
        assert controller.selection.is_empty

    def test_single_selection_over_a_sequence(self, controller):
        a, b, c = nodes(controller)
        e1 = controller.store.add_edge(a, b)
        e2 = controller.store.add_edge(b, c)
        for hit, pos in [(a, a.position), (e1, (150, 0)), (c, c.position),
                         (e2, (150, 150)), (None, (700, 700)), (b, b.position)]:
            click(controller, pos, hit)
            assert_single_selection(controller)
        assert controller.selection.node_id == b.id

    def test_drag_release_is_not_a_click(self, controller):
        a, b, _ = nodes(controller)
        edge = controller.store.add_edge(a, b)
        controller.on_pointer_down((150, 0), Modifiers(), edge)
        controller.on_pointer_up((180, 40))
        assert controller.selection.is_empty


class TestDeleteKey:
    def test_delete_selected_node_cascades(self, controller):
        a, b, c = nodes(controller)
        controller.store.add_edge(a, b)
        controller.store.add_edge(b, c)
        click(controller, b.position, b)
        controller.on_delete_key()
        assert {n.id for n in controller.store.nodes} == {a.id, c.id}
        assert controller.store.edges == []
        assert controller.selection.is_empty

    def test_delete_selected_edge_keeps_nodes(self, controller):
        controller.load_document(SCENARIO_DOC)
        edge = controller.store.get_edge(1, 2)
        click(controller, (5, 5), edge)
        assert controller.selection.edge_key == (1, 2)
        controller.on_delete_key()
        assert [n.title for n in controller.store.nodes] == ["A", "B"]
        assert controller.store.edges == []
        assert controller.selection.is_empty

    def test_delete_with_nothing_selected_is_noop(self, controller):
        controller.on_delete_key()
        assert len(controller.store.nodes) == 3
        assert controller.snapshots == []

    def test_delete_ignored_while_dragging(self, controller):
        a, _, _ = nodes(controller)
        click(controller, a.position, a)
        controller.on_pointer_down(a.position, Modifiers(), a)
        controller.on_delete_key()
        assert a in controller.store


class TestLabelEditing:
    def test_shift_click_node_edits_title(self, controller, surface):
        a, _, _ = nodes(controller)
        controller.on_pointer_down((0, 0), SHIFT, a)
        controller.on_pointer_up((1, 0))
        assert isinstance(controller.state, EditingLabel)
        assert controller.state.session.kind is TargetKind.NODE
        assert surface.opened == ["A"]
        assert controller.store.edges == []

        controller.on_edit_blur("Alpha")
        assert a.title == "Alpha"
        assert controller.mode is Mode.IDLE
        assert surface.closed == 1

    def test_shift_click_edge_edits_label(self, controller, surface):
        a, b, _ = nodes(controller)
        edge = controller.store.add_edge(a, b, "old")
        click(controller, (150, 0), edge, SHIFT)
        assert controller.snapshot().editing.edge_key == (1, 2)
        assert surface.opened == ["old"]
        controller.on_edit_blur("new")
        assert edge.label == "new"
        assert controller.mode is Mode.IDLE

    def test_commit_key_releases_focus_only(self, controller, surface):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a, SHIFT)
        controller.on_edit_commit_key()
        assert surface.released == 1
        assert isinstance(controller.state, EditingLabel)
        assert a.title == "A"

    def test_blur_always_commits(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a, SHIFT)
        controller.on_edit_blur("")
        assert a.title == ""

    def test_canvas_press_ignored_while_editing(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a, SHIFT)
        controller.on_pointer_down((600, 600), SHIFT, None)
        controller.on_pointer_up((600, 600))
        assert len(controller.store.nodes) == 3
        assert isinstance(controller.state, EditingLabel)

    def test_delete_ignored_while_editing(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a)
        click(controller, (0, 0), a, SHIFT)
        controller.on_delete_key()
        assert a in controller.store

    def test_target_removed_while_editing(self, controller, surface):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a, SHIFT)
        controller.store.remove_node(a)
        assert controller.mode is Mode.IDLE
        assert surface.closed == 1
        controller.on_edit_blur("late")
        assert all(n.title != "late" for n in controller.store.nodes)

    def test_blur_outside_editing_is_ignored(self, controller):
        controller.on_edit_blur("stray")
        assert controller.mode is Mode.IDLE
        assert controller.snapshots == []


class TestStaleReferences:
    def test_removing_selected_node_clears_selection(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a)
        controller.store.remove_node(a)
        assert controller.selection.is_empty

    def test_cascade_clears_selected_edge(self, controller):
        a, b, _ = nodes(controller)
        edge = controller.store.add_edge(a, b)
        click(controller, (150, 0), edge)
        controller.store.remove_node(b)
        assert controller.selection.is_empty

    def test_reconnect_clears_selection_of_replaced_edge(self, controller):
        a, b, _ = nodes(controller)
        edge = controller.store.add_edge(b, a)
        click(controller, (150, 0), edge)
        connect_drag(controller, a, b, b.position)
        assert controller.selection.edge_key is None

    def test_hovered_node_removed(self, controller):
        a, _, _ = nodes(controller)
        controller.on_hover_enter(a)
        controller.store.remove_node(a)
        assert controller.hover.node_id is None

    def test_hover_enter_ignores_foreign_node(self, controller):
        other = GraphStore().add_node("elsewhere", 0, 0)
        controller.store.remove_node(controller.store.get_node(1))
        controller.on_hover_enter(other)
        assert controller.hover.node_id is None

    def test_drag_source_removed(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down(a.position, SHIFT, a)
        controller.store.remove_node(a)
        assert controller.mode is Mode.IDLE


class TestDocumentOperations:
    def test_load_resets_connect_drag(self, controller):
        a, _, _ = nodes(controller)
        controller.on_pointer_down(a.position, SHIFT, a)
        controller.load_document(SCENARIO_DOC)
        assert controller.mode is Mode.IDLE
        assert controller.snapshot().guide is None

    def test_load_closes_edit_surface(self, controller, surface):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a, SHIFT)
        controller.load_document(SCENARIO_DOC)
        assert controller.mode is Mode.IDLE
        assert surface.closed == 1

    def test_load_clears_selection_and_hover(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a)
        controller.on_hover_enter(a)
        controller.load_document(SCENARIO_DOC)
        assert controller.selection.is_empty
        assert controller.hover.node_id is None

    def test_load_emits_one_snapshot(self, controller):
        controller.load_document(SCENARIO_DOC)
        assert len(controller.snapshots) == 1
        assert [n.title for n in controller.snapshots[0].nodes] == ["A", "B"]

    def test_failed_load_keeps_graph_and_gesture(self, controller):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a)
        bad = {"nodes": [{"id": 1, "x": 0, "y": 0}], "edges": [{"source": 1, "target": 5}]}
        with pytest.raises(DanglingReferenceError):
            controller.load_document(bad)
        assert len(controller.store.nodes) == 3
        assert controller.selection.node_id == a.id

    def test_document_round_trip(self, controller):
        a, b, _ = nodes(controller)
        controller.store.add_edge(a, b, "x")
        doc = controller.document()
        other = EditController()
        other.load_document(doc)
        assert other.document() == doc

    def test_clear(self, controller):
        controller.clear()
        assert controller.store.nodes == []
        controller.on_pointer_down((1, 1), SHIFT, None)
        assert controller.store.nodes[0].id == 1

    def test_reset(self, controller, surface):
        a, _, _ = nodes(controller)
        click(controller, (0, 0), a, SHIFT)
        controller.reset()
        assert controller.mode is Mode.IDLE
        assert surface.closed == 1


class TestModifiers:
    def test_from_dict(self):
        assert Modifiers.from_event_args({'shiftKey': True}).shift is True
        assert Modifiers.from_event_args({'alt': True}).alt is True

    def test_from_event_object(self):
        mods = Modifiers.from_event_args(SimpleNamespace(shift=True, ctrl=False, alt=False, meta=True))
        assert mods == Modifiers(shift=True, meta=True)


class FakeCanvas:
    def __init__(self):
        self.content = ''

    def set_content(self, content):
        self.content = content


class FakeOverlay(RecordingSurface):
    def place(self, position):
        self.position = position


class TestEditHandlers:
    """Drive the controller through the NiceGUI handler functions."""

    @pytest.fixture
    def wired(self, controller):
        canvas = FakeCanvas()
        overlay = FakeOverlay()
        handlers = setup_edit_handlers(controller, canvas, overlay, GraphVisualizer())
        return handlers, canvas, overlay

    @staticmethod
    def mouse(kind, x, y, shift=False):
        return SimpleNamespace(type=kind, image_x=x, image_y=y, button=0,
                               shift=shift, ctrl=False, alt=False, meta=False)

    @staticmethod
    def key(name, keydown=True):
        return SimpleNamespace(key=SimpleNamespace(name=name), action=SimpleNamespace(keydown=keydown))

    def test_connect_gesture_through_mouse_events(self, controller, wired):
        handlers, canvas, _ = wired
        handle = handlers['handle_mouse']
        handle(self.mouse('mousedown', 0, 0, shift=True))
        handle(self.mouse('mousemove', 150, 0))
        assert 'class="edge dragline"' in canvas.content
        handle(self.mouse('mousemove', 290, 10))
        handle(self.mouse('mouseup', 290, 10))
        assert [e.key for e in controller.store.edges] == [(1, 2)]
        assert 'class="edge dragline"' not in canvas.content

    def test_backspace_deletes_selection(self, controller, wired):
        handlers, _, _ = wired
        handlers['handle_mouse'](self.mouse('mousedown', 300, 0))
        handlers['handle_mouse'](self.mouse('mouseup', 300, 0))
        handlers['handle_keyboard'](self.key('Backspace', keydown=False))
        assert controller.store.get_node(2) is not None
        handlers['handle_keyboard'](self.key('Backspace'))
        assert controller.store.get_node(2) is None

    def test_mouseleave_ends_drag(self, controller, wired):
        handlers, _, _ = wired
        handlers['handle_mouse'](self.mouse('mousedown', 0, 0))
        handlers['handle_mouse'](self.mouse('mousemove', 100, 100))
        handlers['handle_mouse'](self.mouse('mouseleave', 0, 0))
        assert controller.mode is Mode.IDLE
        assert controller.store.get_node(1).position == (100.0, 100.0)

    def test_text_box_follows_edited_node(self, controller, wired):
        handlers, _, overlay = wired
        handlers['handle_mouse'](self.mouse('mousedown', 0, 300, shift=True))
        handlers['handle_mouse'](self.mouse('mouseup', 0, 300))
        assert overlay.opened == ["C"]
        assert overlay.position == (0.0, 300.0)
