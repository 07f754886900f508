"""
SketchGraph - an interactive editor for small directed graphs.

The package is split into:
- model / store: Node and Edge entities and the GraphStore that owns them
- edit: pointer/keyboard interaction (controller, selection, hover, label editing)
- serializer / document_io: conversion to and from the JSON document format
- graph_viz / export: SVG rendering and Graphviz DOT export
"""

__version__ = "0.3.0"

from sketchgraph.errors import SketchGraphError, DanglingReferenceError, DocumentFormatError
from sketchgraph.model import Node, Edge
from sketchgraph.store import GraphStore, StoreChange, ChangeKind

__all__ = [
    'SketchGraphError',
    'DanglingReferenceError',
    'DocumentFormatError',
    'Node',
    'Edge',
    'GraphStore',
    'StoreChange',
    'ChangeKind',
]
