"""Logging utilities for llmdb (thin wrappers).

Library modules log through ``logging.getLogger(__name__)``; this module only
provides a stable place to adjust levels for the ``llmdb`` logger tree.
"""

from __future__ import annotations

import logging
from typing import Union

_ROOT_LOGGER = "llmdb"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Attach a stream handler to the ``llmdb`` logger if none is present.

    Args:
        verbose: Enable DEBUG output when True, INFO otherwise.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def set_component_level(component: str, level: Union[str, int]) -> None:
    """Set log level for a specific component or group.

    Accepts either string levels (e.g., "INFO") or numeric constants. Component
    names are relative to the ``llmdb`` package unless already qualified.
    """
    if isinstance(level, str) and level.strip().isdigit():
        level_value = int(level)
    elif isinstance(level, str):
        level_value = getattr(logging, level.upper(), logging.INFO)
    else:
        level_value = level
    if component != _ROOT_LOGGER and not component.startswith(f"{_ROOT_LOGGER}."):
        component = f"{_ROOT_LOGGER}.{component}"
    logging.getLogger(component).setLevel(level_value)


__all__ = ["configure_logging", "set_component_level"]
