"""
Filesystem locations used by SketchGraph.

Works both from a source checkout and from a PyInstaller build. Saved graphs
(db/) and config.json are kept beside the project root or the executable,
never inside the bundle.
"""

import sys
from pathlib import Path

DOCUMENT_NAME = "graph.json"


def get_app_dir() -> Path:
    """Project root in a checkout, or the executable's folder when frozen."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).resolve().parent.parent


def get_db_dir() -> Path:
    return get_app_dir() / "db"


def get_default_document_path() -> Path:
    """Where the editor opens and saves the graph unless configured otherwise."""
    return get_db_dir() / DOCUMENT_NAME


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def ensure_db_dir() -> Path:
    db_dir = get_db_dir()
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir
