"""
Explicit state records for containers, items and selections.

The host tree is only a synchronization target; these records are the source
of truth and are addressed by stable string ids.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ContainerMode(Enum):
    """Selection mode of a container, derived from its items."""
    LOCKED_SINGLE = 0              # Single-choice items (role=radio)
    MULTI_NONCONTIGUOUS = 1        # Non-contiguous by default, range by modifier
    SINGLE_DEFAULT = -1            # Exclusive unless a modifier asks for more
    MULTI_CONTIGUOUS_CAPABLE = 2   # Empty lockable container, unrestricted until it has items

    @property
    def locked(self) -> bool:
        return self is ContainerMode.LOCKED_SINGLE


class Multimode(Enum):
    """Resolved selection behavior for one selection action."""
    EXCLUSIVE = 0
    NONCONTIGUOUS = 1
    CONTIGUOUS = 2


class OrderPolicy(Enum):
    """Order in which dropped items are appended to the destination."""
    NODE_ORDER = "node"
    SELECTION_ORDER = "selection"


class Direction(Enum):
    """Virtual focus movements."""
    NEXT = "next"
    PREV = "prev"
    PAGE_FORWARD = "page_forward"
    PAGE_BACK = "page_back"
    FIRST = "first"
    LAST = "last"


class DropMarker(Enum):
    """Valid-drop-target marker on a container."""
    NONE = None
    OWNER = "false"    # Holds the current selection
    VALID = "true"     # Can receive the current selection


class Channel(Enum):
    """Announcement channels kept per container."""
    STATUS = "droptarget"
    COUNT = "dragitems"


@dataclass(frozen=True)
class Rect:
    """Bounding region in viewport coordinates."""
    left: float
    top: float
    right: float
    bottom: float

    def overflows(self, other: "Rect") -> bool:
        """True when this rect is not entirely inside other."""
        return self.vertical_overflow(other) or self.horizontal_overflow(other)

    def vertical_overflow(self, other: "Rect") -> bool:
        return self.bottom > other.bottom or self.top < other.top

    def horizontal_overflow(self, other: "Rect") -> bool:
        return self.right > other.right or self.left < other.left


@dataclass(frozen=True)
class ContainerInfo:
    """What the host reports about a container at scan time."""
    id: str
    role: Optional[str]
    label: Optional[str]
    sortable: bool = False
    selection_attribute: Optional[str] = None


@dataclass(frozen=True)
class ItemInfo:
    """What the host reports about an item."""
    id: str
    role: Optional[str]
    disabled: bool = False


@dataclass(eq=False)
class Item:
    """A transferable, selectable unit owned by exactly one container."""
    id: str
    container_id: str
    role: str
    disabled: bool = False      # Author-declared
    locked: bool = False        # Temporarily disabled while it sits in a valid drop target
    selected: bool = False

    @property
    def unavailable(self) -> bool:
        return self.disabled or self.locked


@dataclass(eq=False)
class Container:
    """A labeled drop zone holding an ordered list of item ids."""
    id: str
    role: str
    label: str
    selection_attribute: str
    sortable: bool = False
    items: List[str] = field(default_factory=list)
    mode: ContainerMode = ContainerMode.SINGLE_DEFAULT
    active_item: Optional[str] = None
    last_active_item: Optional[str] = None
    marker: DropMarker = DropMarker.NONE

    def index_of(self, item_id: Optional[str]) -> int:
        try:
            return self.items.index(item_id)
        except ValueError:
            return -1


@dataclass
class SelectionState:
    """Per-instance selection: members in selection order and their owner."""
    items: List[str] = field(default_factory=list)
    owner: Optional[str] = None
    pending_target: Optional[str] = None
    order_policy: OrderPolicy = OrderPolicy.NODE_ORDER

    @property
    def is_empty(self) -> bool:
        return not self.items

    def copy(self) -> "SelectionState":
        return SelectionState(list(self.items), self.owner, self.pending_target, self.order_policy)


@dataclass(frozen=True)
class InputModifiers:
    """Modality-neutral modifier trio used to derive the multimode."""
    range: bool = False          # Shift
    alternate: bool = False      # Ctrl/Cmd
    forced_multi: bool = False   # Touch, synthetic clicks, or any keyboard action
