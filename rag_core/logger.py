from __future__ import annotations

import logging
import os
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME = "rag_core"


def _default_level() -> int:
    name = (os.getenv("RAG_CORE_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[int | str] = None) -> logging.Logger:
    """Attach the console handler to the package logger (idempotent).

    Child loggers created through ``get_logger`` propagate to it, so calling
    this again only changes the level.
    """
    root = logging.getLogger(_ROOT_NAME)
    if level is None:
        resolved = _default_level()
    elif isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    else:
        resolved = int(level)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(handler)
        root.propagate = False

    root.setLevel(resolved)
    for handler in root.handlers:
        handler.setLevel(resolved)
    return root


def get_logger(name: str) -> logging.Logger:
    if name != _ROOT_NAME and not name.startswith(_ROOT_NAME + "."):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)
