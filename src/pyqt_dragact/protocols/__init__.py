"""
Protocol definitions and configuration.

ABC-based contracts between the state machine and its host, plus the
global configuration hooks.
"""

from .host_adapter import HostAdapter
from .arbiter_client import ArbiterClient
from .dragact_config import (
    CHECKED_STATE,
    SELECTED_STATE,
    DragActConfig,
    set_dragact_config,
    get_dragact_config,
)

__all__ = [
    "HostAdapter",
    "ArbiterClient",
    "CHECKED_STATE",
    "SELECTED_STATE",
    "DragActConfig",
    "set_dragact_config",
    "get_dragact_config",
]
