"""
Main NiceGUI application for SketchGraph.

Renders the graph on a ui.interactive_image canvas, routes mouse and
keyboard input into the EditController, and provides the toolbar for
loading, saving, downloading, exporting and clearing the graph.

Gestures:
- Shift + press on empty canvas: create a node
- Shift + drag from a node to another node: connect them
- Shift + click on a node or edge: rename it (Enter or clicking away commits)
- drag a node: move it
- click a node or edge: select it; click the canvas: deselect
- Delete / Backspace: remove the selection
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

load_dotenv()

from sketchgraph import DanglingReferenceError, DocumentFormatError, GraphStore, serializer
from sketchgraph.config import get_canvas_size, get_document_path, get_log_level, get_port
from sketchgraph.document_io import open_document, save_document
from sketchgraph.edit import EditController, EditorSnapshot, LabelEditOverlay, setup_edit_handlers
from sketchgraph.edit.handlers import MOUSE_EVENTS
from sketchgraph.export import to_dot_source
from sketchgraph.graph_viz import GraphVisualizer
from sketchgraph.paths import ensure_db_dir

logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

ensure_db_dir()


def show_confirm_dialog(title: str, message: str, confirm_label: str = 'OK'):
    """Modal yes/no dialog. Await the returned dialog for True/False."""
    with ui.dialog() as dialog, ui.card().classes('w-96'):
        ui.label(title).classes('text-lg font-bold')
        ui.label(message).classes('text-gray-500')
        with ui.row().classes('w-full justify-end gap-2 mt-4'):
            ui.button('Cancel', on_click=lambda: dialog.submit(False)).props('flat')
            ui.button(confirm_label, on_click=lambda: dialog.submit(True)).props('color=negative')
    dialog.open()
    return dialog


@ui.page('/')
def main_page():
    document_path = get_document_path()
    width, height = get_canvas_size()

    store = GraphStore()
    save_path = open_document(document_path, store)
    if save_path != document_path:
        ui.notify(
            f'Could not open {document_path.name}, saving to {save_path.name} instead',
            type='negative',
        )

    controller = EditController(store)
    visualizer = GraphVisualizer()
    state = {'status': None}

    def update_status(snapshot: EditorSnapshot):
        if state['status']:
            state['status'].text = (
                f'{len(snapshot.nodes)} nodes · {len(snapshot.edges)} edges · {snapshot.mode.value}'
            )

    # --- Actions ---

    def do_save():
        try:
            path = save_document(store, save_path)
        except OSError as e:
            logger.error(f"Save failed: {e}")
            ui.notify(f'Save failed: {e}', type='negative')
            return
        ui.notify(f'Saved to {path.name}', type='positive', position='bottom-right')

    def do_download():
        ui.download(serializer.dumps(store).encode('utf-8'), 'graph.json')

    def do_export_dot():
        ui.download(to_dot_source(store).encode('utf-8'), 'graph.dot')

    def handle_upload(e):
        try:
            controller.load_document(serializer.parse_json(e.content.read()))
        except DanglingReferenceError as err:
            logger.error(f"Load of {e.name} failed: unknown node id {err.node_id}")
            ui.notify(f'Load failed: edge references unknown node {err.node_id}', type='negative')
            return
        except DocumentFormatError as err:
            logger.error(f"Load of {e.name} failed: {err}")
            ui.notify(f'Load failed: {err}', type='negative')
            return
        finally:
            upload.reset()
            upload_dialog.close()
        ui.notify(f'Loaded {e.name}', type='positive', position='bottom-right')

    async def do_clear():
        confirmed = await show_confirm_dialog(
            'Clear graph?', 'All nodes and edges will be removed.', confirm_label='Clear'
        )
        if not confirmed:
            return
        controller.clear()
        ui.notify('Graph cleared', position='bottom-right')

    # --- Layout ---

    with ui.dialog() as upload_dialog, ui.card():
        ui.label('Load graph document').classes('text-lg font-bold')
        upload = ui.upload(on_upload=handle_upload, auto_upload=True, max_files=1) \
            .props('accept=.json')

    with ui.row().classes('items-center gap-2'):
        ui.label('SketchGraph').classes('text-xl font-bold')
        ui.button('Load', on_click=upload_dialog.open).props('flat dense icon=folder_open')
        ui.button('Save', on_click=do_save).props('flat dense icon=save')
        ui.button('Download', on_click=do_download).props('flat dense icon=download')
        ui.button('Export DOT', on_click=do_export_dot).props('flat dense icon=account_tree')
        ui.button('Clear', on_click=do_clear).props('flat dense color=negative icon=delete_sweep')
        state['status'] = ui.label('').classes('text-sm text-gray-500 ml-4')

    ui.label(
        'Shift+click canvas: new node · Shift+drag node→node: connect · '
        'Shift+click node/edge: rename · Delete: remove selection'
    ).classes('text-xs text-gray-400')

    with ui.element('div').classes('relative border').style(f'width: {width}px; height: {height}px'):
        canvas = ui.interactive_image(
            size=(width, height),
            events=MOUSE_EVENTS,
            cross=False,
            on_mouse=lambda e: handlers["handle_mouse"](e),
        )
        overlay = LabelEditOverlay(
            on_commit_key=controller.on_edit_commit_key,
            on_blur=controller.on_edit_blur,
        )

    handlers = setup_edit_handlers(controller, canvas, overlay, visualizer, on_graph_change=update_status)
    ui.keyboard(on_key=handlers['handle_keyboard'])
    handlers['refresh']()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='SketchGraph',
        port=get_port(),
        reload=not getattr(sys, 'frozen', False),
    )
