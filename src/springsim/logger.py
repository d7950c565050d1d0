# MIT License (see LICENSE)
"""
Package logger factory.

All modules log through children of the ``springsim`` logger. The level is
read from the ``SPRINGSIM_LOG_LEVEL`` environment variable (default WARNING).
"""
from __future__ import annotations
import logging
import os

_ROOT = "springsim"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child of it when ``name`` is given."""
    root = logging.getLogger(_ROOT)
    if not root.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(asctime)s][%(levelname)s][%(name)s] %(message)s')
        handler.setFormatter(formatter)
        root.addHandler(handler)
        level_name = os.getenv("SPRINGSIM_LOG_LEVEL", "WARNING").upper()
        root.setLevel(getattr(logging, level_name, logging.WARNING))
    if not name or name == _ROOT:
        return root
    if name.startswith(_ROOT + "."):
        name = name[len(_ROOT) + 1:]
    return root.getChild(name)
