"""
Virtual focus controller.

Each container has one active item, the keyboard navigation cursor, which is
independent of real input focus (the container itself holds that).
"""

import logging
from typing import TYPE_CHECKING, Dict, Optional

from pyqt_dragact.model.types import Direction
from pyqt_dragact.protocols.dragact_config import DragActConfig, get_dragact_config

if TYPE_CHECKING:
    from pyqt_dragact.model.registry import ContainerRegistry
    from pyqt_dragact.protocols.host_adapter import HostAdapter

logger = logging.getLogger(__name__)


class FocusService:
    """Moves and reveals the active item of a container."""

    def __init__(self, registry: 'ContainerRegistry', adapter: 'HostAdapter',
                 config: Optional[DragActConfig] = None):
        self._registry = registry
        self._adapter = adapter
        self._config = config or get_dragact_config()

    def set_active(self, container_id: Optional[str], item_id: Optional[str]) -> bool:
        """Make item_id the active item, remembering the previous one.

        No-op unless both exist and the item differs from the current one.
        """
        container = self._registry.container(container_id)
        if container is None or item_id is None or item_id not in container.items:
            return False
        if container.active_item == item_id:
            return False

        container.last_active_item = container.active_item
        container.active_item = item_id
        self._adapter.set_active_marker(container.id, item_id)
        return True

    def move(self, container_id: str, direction: Direction) -> Optional[str]:
        """
        Resolve the item a navigation step lands on.

        NEXT/PREV wrap around at the ends; paging, FIRST and LAST clamp.

        Returns:
            The target item id, or None when the container has no items
        """
        container = self._registry.container(container_id)
        if container is None or not container.items:
            return None

        last = len(container.items) - 1
        index = max(container.index_of(container.active_item), 0)
        step = self._config.page_step

        targets: Dict[Direction, int] = {
            Direction.NEXT: 0 if index == last else index + 1,
            Direction.PREV: last if index == 0 else index - 1,
            Direction.PAGE_FORWARD: min(index + step, last),
            Direction.PAGE_BACK: max(index - step, 0),
            Direction.FIRST: 0,
            Direction.LAST: last,
        }
        return container.items[targets[direction]]

    def reveal(self, container_id: str) -> None:
        """
        Scroll the active item into view when it is not entirely visible.

        Container overflow scrolls to the nearest edge; outer viewport
        overflow centers the item. At most one scroll per region.
        """
        container = self._registry.container(container_id)
        if container is None or container.active_item is None:
            return

        item_id = container.active_item
        itembox = self._adapter.item_rect(item_id)
        if itembox is None:
            return

        if self._adapter.container_overflows(container_id):
            if itembox.overflows(self._adapter.container_rect(container_id)):
                self._adapter.scroll_into_view(item_id, "nearest", "nearest")

        viewport = self._adapter.viewport_rect()
        block = inline = None
        if itembox.vertical_overflow(viewport):
            block, inline = "center", "nearest"
        if itembox.horizontal_overflow(viewport):
            block, inline = "nearest", "center"
            if itembox.vertical_overflow(viewport):
                block = "center"
        if block or inline:
            logger.debug(f"Revealing {item_id} in viewport (block={block}, inline={inline})")
            self._adapter.scroll_into_view(item_id, block, inline)
