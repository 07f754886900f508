"""
Exceptions raised by SketchGraph.

Gestures never raise: an invalid gesture is a silent no-op inside the
EditController. Only document loading (serializer / document_io) reports
failures to the caller.
"""

from typing import Any


class SketchGraphError(Exception):
    """Base class for all SketchGraph errors."""


class DanglingReferenceError(SketchGraphError):
    """An edge in a document references a node id that is not in the document."""

    def __init__(self, node_id: Any, message: str = None):
        self.node_id = node_id
        super().__init__(message or f"Edge references unknown node id {node_id!r}")


class DocumentFormatError(SketchGraphError):
    """A document is not shaped like {"nodes": [...], "edges": [...]}."""
