"""Input event records delivered to a DragAct instance by the host bridge."""

from dataclasses import dataclass
from typing import Optional

# Pointer types that count as touch-like input
TOUCH_POINTER_TYPES = ("touch", "pen")


@dataclass(frozen=True)
class PointerEvent:
    """Pointer press or release resolved against the instance tree.

    ``container_id``/``item_id`` are None when the pointer is outside any
    container/item of this instance. ``click_count`` is 0 for synthetic
    clicks (voice control, screen reader activation).
    """
    container_id: Optional[str] = None
    item_id: Optional[str] = None
    on_sort_button: bool = False
    button: int = 0
    click_count: int = 1
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    pointer_type: str = "mouse"

    @property
    def command(self) -> bool:
        return self.ctrl or self.meta

    @property
    def ignorable(self) -> bool:
        """Non-primary button or the second half of a double click."""
        return self.button > 0 or self.click_count > 1

    @property
    def target(self):
        return (self.container_id, self.item_id)


@dataclass(frozen=True)
class KeyEvent:
    """Key press. ``key`` is the lower-cased key name (" " for Space)."""
    key: str
    container_id: Optional[str] = None
    on_sort_button: bool = False
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    repeat: bool = False
    inside_scope: bool = True

    @property
    def command(self) -> bool:
        return self.ctrl or self.meta


@dataclass(frozen=True)
class DragEvent:
    """Native drag event resolved against the instance tree."""
    container_id: Optional[str] = None
    item_id: Optional[str] = None
    on_sort_button: bool = False
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    inside_scope: bool = True

    @property
    def command(self) -> bool:
        return self.ctrl or self.meta
