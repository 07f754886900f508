"""
Label Edit Overlay - the inline text box used to rename nodes and edges.

The overlay is a NiceGUI input absolutely positioned over the canvas. It
implements the EditSurface protocol expected by LabelEditSession:
open() shows and focuses it, release_focus() blurs it, close() hides it.

The input reports back to the EditController through two callbacks:
Enter -> on_commit_key, focus lost -> on_blur(text).
"""

from typing import Callable, Optional, Tuple

from nicegui import ui

from sketchgraph.edit.session import LabelEditSession

OVERLAY_WIDTH = 160


class LabelEditOverlay:
    """Floating text box. Create it inside the same relative container as the canvas."""

    def __init__(self, on_commit_key: Callable[[], None], on_blur: Callable[[str], None]):
        self._input = ui.input() \
            .props('dense outlined bg-color=white') \
            .classes('absolute z-10') \
            .style(f'width: {OVERLAY_WIDTH}px; transform: translate(-50%, -50%)')
        self._input.set_visibility(False)
        self._input.on('keydown.enter', lambda _: on_commit_key())
        self._input.on('blur', lambda _: on_blur(self._input.value or ''))

    def place(self, position: Optional[Tuple[float, float]]):
        if position is None:
            return
        x, y = position
        self._input.style(f'left: {x}px; top: {y}px')

    def open(self, session: LabelEditSession):
        self._input.value = session.buffer
        self._input.set_visibility(True)
        self._input.run_method('focus')

    def release_focus(self):
        self._input.run_method('blur')

    def close(self):
        self._input.set_visibility(False)
