"""
Reading and writing graph documents on disk.

Documents are UTF-8 JSON files in the format described in serializer.py.
Saving writes to a temporary file next to the target and renames it, so a
failed save never leaves a truncated document behind.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

from sketchgraph import serializer
from sketchgraph.errors import DanglingReferenceError, DocumentFormatError
from sketchgraph.store import GraphStore

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def seed_document() -> Dict[str, Any]:
    """The graph shown when no document exists yet."""
    return {
        "nodes": [
            {"id": 1, "title": "A", "x": 250, "y": 150},
            {"id": 2, "title": "B", "x": 800, "y": 500},
            {"id": 3, "title": "C", "x": 200, "y": 700},
        ],
        "edges": [
            {"source": 1, "target": 2, "label": ""},
            {"source": 2, "target": 3, "label": ""},
        ],
    }


def read_document(path: PathLike) -> Dict[str, Any]:
    """
    Read a document without touching any store.

    Raises:
        DocumentFormatError: the file is not valid JSON
        OSError: the file cannot be read
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        try:
            return json.load(fh)
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"{path.name}: invalid JSON ({e})") from e


def load_document(path: PathLike, store: GraphStore) -> None:
    """Replace the store's contents with the document at path."""
    document = read_document(path)
    serializer.deserialize(document, store)
    logger.info(f"Loaded {len(store.nodes)} node(s) and {len(store.edges)} edge(s) from {path}")


def write_document(document: Dict[str, Any], path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump(document, fh, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)
    return path


def save_document(store: GraphStore, path: PathLike) -> Path:
    path = write_document(serializer.serialize(store), path)
    logger.info(f"Saved {len(store.nodes)} node(s) and {len(store.edges)} edge(s) to {path}")
    return path


def load_or_seed(path: PathLike, store: GraphStore) -> bool:
    """
    Load path if it exists, otherwise load the seed graph.

    Returns True if the file was loaded.
    """
    if Path(path).exists():
        load_document(path, store)
        return True
    serializer.deserialize(seed_document(), store)
    return False


def recovery_path(path: PathLike) -> Path:
    """Save target used in place of a document that failed to load."""
    path = Path(path)
    return path.with_name(f"{path.stem}.recovered{path.suffix}")


def open_document(path: PathLike, store: GraphStore) -> Path:
    """
    Load path (or the seed graph) into store and return where saves should go.

    A document that exists but cannot be loaded leaves the store unchanged,
    and saves go to recovery_path(path) so the file is never overwritten.
    """
    path = Path(path)
    try:
        load_or_seed(path, store)
    except (DanglingReferenceError, DocumentFormatError, OSError) as e:
        target = recovery_path(path)
        logger.error(f"Failed to open {path}: {e}; saving to {target} instead")
        return target
    return path
