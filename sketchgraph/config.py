"""
Configuration management for SketchGraph.

Handles persistent configuration including:
- the document the editor opens and saves to
- server port and log level
- canvas size

Config is stored in config.json next to the executable/project root.
Each setting can be overridden by an environment variable (app.py loads a
.env file into the environment on startup).
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from sketchgraph.edit.constants import CANVAS_HEIGHT, CANVAS_WIDTH
from sketchgraph.paths import get_config_path, get_default_document_path

logger = logging.getLogger(__name__)

ENV_DOCUMENT = "SKETCHGRAPH_DOCUMENT"
ENV_PORT = "SKETCHGRAPH_PORT"
ENV_LOG_LEVEL = "SKETCHGRAPH_LOG_LEVEL"

DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return {}
        if isinstance(data, dict):
            return data
        logger.warning(f"Ignoring config {config_path}: not a JSON object")
    return {}


def get_document_path(config_path: Optional[Path] = None) -> Path:
    """
    Get the path of the graph document.

    Priority:
    1. Environment variable SKETCHGRAPH_DOCUMENT
    2. "document" in config.json
    3. db/graph.json in the app directory
    """
    env_path = os.environ.get(ENV_DOCUMENT)
    if env_path:
        return Path(env_path)

    config = load_config(config_path)
    if config.get("document"):
        return Path(config["document"])
    return get_default_document_path()


def get_port(config_path: Optional[Path] = None) -> int:
    raw = os.environ.get(ENV_PORT) or load_config(config_path).get("port")
    if raw is None:
        return DEFAULT_PORT
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid port {raw!r}, using {DEFAULT_PORT}")
        return DEFAULT_PORT


def get_log_level(config_path: Optional[Path] = None) -> str:
    level = os.environ.get(ENV_LOG_LEVEL) or load_config(config_path).get("log_level") or DEFAULT_LOG_LEVEL
    level = str(level).upper()
    if level not in LOG_LEVELS:
        logger.warning(f"Unknown log level {level!r}, using {DEFAULT_LOG_LEVEL}")
        return DEFAULT_LOG_LEVEL
    return level


def get_canvas_size(config_path: Optional[Path] = None) -> Tuple[int, int]:
    """Canvas (width, height) in pixels; config.json may set "canvas": [w, h]."""
    canvas = load_config(config_path).get("canvas")
    if isinstance(canvas, (list, tuple)) and len(canvas) == 2:
        try:
            return int(canvas[0]), int(canvas[1])
        except (TypeError, ValueError):
            logger.warning(f"Invalid canvas size {canvas!r}, using default")
    return CANVAS_WIDTH, CANVAS_HEIGHT
