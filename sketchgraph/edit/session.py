"""
Label Edit Session - inline renaming of a node title or an edge label.

The session only exchanges a text buffer with the core. The editable widget
itself is an EditSurface supplied by the UI layer (see handlers.py):

    open(session)     show the text box with session.buffer and focus it
    release_focus()   blur the text box (the commit key does this)
    close()           discard the text box

There is no cancel path: whatever text is present when the box loses focus
is written back.
"""

import logging
from enum import Enum
from typing import Optional, Protocol, Union, runtime_checkable

from sketchgraph.model import Edge, EdgeKey, Node
from sketchgraph.store import GraphStore

logger = logging.getLogger(__name__)


@runtime_checkable
class EditSurface(Protocol):
    """Text box used for inline renaming."""

    def open(self, session: "LabelEditSession") -> None:
        ...

    def release_focus(self) -> None:
        ...

    def close(self) -> None:
        ...


class TargetKind(Enum):
    NODE = "node"
    EDGE = "edge"


class LabelEditSession:
    """Edits the text of one node or edge until the surface loses focus."""

    def __init__(self, target: Union[Node, Edge], surface: Optional[EditSurface] = None):
        if isinstance(target, Node):
            self.kind = TargetKind.NODE
            self.node_id: Optional[int] = target.id
            self.edge_key: Optional[EdgeKey] = None
            self.buffer = target.title
        else:
            self.kind = TargetKind.EDGE
            self.node_id = None
            self.edge_key = target.key
            self.buffer = target.label
        self._surface = surface
        self._closed = False

    def __repr__(self) -> str:
        ref = self.node_id if self.kind is TargetKind.NODE else self.edge_key
        return f"LabelEditSession({self.kind.value} {ref}, buffer={self.buffer!r})"

    @property
    def is_closed(self) -> bool:
        return self._closed

    def resolve(self, store: GraphStore) -> Optional[Union[Node, Edge]]:
        """The live entity being edited, or None if it left the store."""
        if self.kind is TargetKind.NODE:
            return store.get_node(self.node_id)
        return store.get_edge(*self.edge_key)

    def begin(self) -> None:
        if self._surface is not None:
            self._surface.open(self)

    def end_input(self) -> None:
        """Commit key: stop taking input. The text is written on blur."""
        if self._surface is not None:
            self._surface.release_focus()

    def commit(self, store: GraphStore, text: str) -> bool:
        """
        Write the final text back and discard the surface.

        Returns False when the target no longer exists; the text is dropped.
        """
        text = text if text is not None else self.buffer
        self.buffer = text
        target = self.resolve(store)
        if target is None:
            logger.debug(f"{self!r}: target gone, text dropped")
            committed = False
        elif isinstance(target, Node):
            store.rename_node(target, text)
            committed = True
        else:
            store.relabel_edge(target, text)
            committed = True
        self.close()
        return committed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._surface is not None:
            self._surface.close()
