"""
State model.

Plain records for containers, items, selection and input events, plus the
registry that owns them.
"""

from .types import (
    Channel,
    Container,
    ContainerInfo,
    ContainerMode,
    Direction,
    DropMarker,
    InputModifiers,
    Item,
    ItemInfo,
    Multimode,
    OrderPolicy,
    Rect,
    SelectionState,
)
from .events import DragEvent, KeyEvent, PointerEvent
from .registry import ContainerRegistry

__all__ = [
    "Channel",
    "Container",
    "ContainerInfo",
    "ContainerMode",
    "Direction",
    "DropMarker",
    "InputModifiers",
    "Item",
    "ItemInfo",
    "Multimode",
    "OrderPolicy",
    "Rect",
    "SelectionState",
    "DragEvent",
    "KeyEvent",
    "PointerEvent",
    "ContainerRegistry",
]
