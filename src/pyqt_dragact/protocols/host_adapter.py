"""
Host tree ABC contract.

The host owns the actual widgets: it discovers containers and items, renders
accessibility attributes, moves item nodes, scrolls and focuses. The state
machine never reads state back from it except through the queries below, and
writes every decision to it through the commands.

Design Philosophy:
- Explicit inheritance over duck typing
- Queries return plain model records, never toolkit objects
- Commands are fire-and-forget synchronization of an already-made decision
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from pyqt_dragact.model.types import Channel, ContainerInfo, DropMarker, ItemInfo, Rect


class HostAdapter(ABC):
    """
    ABC for the tree/attribute collaborator of a DragAct instance.

    Implementations must resolve their root scope on construction and raise
    ScopeResolutionError if they cannot.
    """

    # ========== QUERIES ==========

    @abstractmethod
    def list_containers(self) -> List[ContainerInfo]:
        """Return every container inside the scope, in tree order."""
        pass

    @abstractmethod
    def list_items(self, container_id: str) -> List[ItemInfo]:
        """Return a container's current items in node order."""
        pass

    @abstractmethod
    def language_tags(self) -> Tuple[Optional[str], Optional[str]]:
        """Return (element-declared tag, document-declared tag); either may be None."""
        pass

    @abstractmethod
    def item_rect(self, item_id: str) -> Optional[Rect]:
        """Return the item's bounding region, or None if it is not laid out."""
        pass

    @abstractmethod
    def container_rect(self, container_id: str) -> Rect:
        """Return the bounding region of the container's scrollable viewport."""
        pass

    @abstractmethod
    def container_overflows(self, container_id: str) -> bool:
        """Return True when the container's content is larger than its viewport."""
        pass

    @abstractmethod
    def viewport_rect(self) -> Rect:
        """Return the outer viewport region (the window)."""
        pass

    # ========== COMMANDS ==========

    @abstractmethod
    def set_language(self, tag: str) -> None:
        """Declare the negotiated language on the scope."""
        pass

    @abstractmethod
    def set_role_description(self, container_id: str, text: str) -> None:
        pass

    @abstractmethod
    def set_item_selected(self, item_id: str, attribute: str, selected: Optional[bool]) -> None:
        """
        Set an item's selection state as a visible and accessible attribute.

        Args:
            item_id: Item to update
            attribute: Selection scheme (aria-checked or aria-selected)
            selected: New state; None removes the attribute entirely
        """
        pass

    @abstractmethod
    def set_item_disabled(self, item_id: str, disabled: bool) -> None:
        pass

    @abstractmethod
    def set_item_number(self, item_id: str, text: Optional[str]) -> None:
        """Show (or remove with None) the selection-order number of an item."""
        pass

    @abstractmethod
    def set_drop_marker(self, container_id: str, marker: DropMarker) -> None:
        pass

    @abstractmethod
    def set_sort_enabled(self, container_id: str, enabled: bool) -> None:
        """Enable or disable a sortable container's sort button."""
        pass

    @abstractmethod
    def set_active_marker(self, container_id: str, item_id: Optional[str]) -> None:
        """Mark item_id as the container's focused-equivalent item (None clears)."""
        pass

    @abstractmethod
    def set_drag_hover(self, container_id: str, hovered: bool) -> None:
        pass

    @abstractmethod
    def set_drag_out(self, container_id: str, dragged_out: bool) -> None:
        pass

    @abstractmethod
    def set_description(self, container_id: str, channel: Channel, text: str) -> None:
        """Apply announcement text to one of a container's description channels."""
        pass

    @abstractmethod
    def move_item(self, item_id: str, container_id: str) -> None:
        """Append an item node at the destination container's insertion point."""
        pass

    @abstractmethod
    def focus_container(self, container_id: str) -> None:
        pass

    @abstractmethod
    def scroll_into_view(self, item_id: str, block: Optional[str], inline: Optional[str]) -> None:
        """
        Scroll an item into view.

        Args:
            item_id: Item to reveal
            block: Vertical alignment ("nearest", "center") or None
            inline: Horizontal alignment ("nearest", "center") or None
        """
        pass

    # ========== REGISTRATION ==========

    def bind(self, instance: Any) -> None:
        """Subscribe instance to the host's input and mutation notifications.

        Scoped events go to the instance's root; pointer-up, key-down and
        drag events that must be filtered by arbiter identity are bound
        globally. The default host has no event source.
        """

    def unbind(self, instance: Any) -> None:
        """Undo bind()."""
