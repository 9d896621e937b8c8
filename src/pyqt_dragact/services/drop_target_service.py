"""
Valid-drop-target marking.

While a selection exists, the owner container is marked OWNER and every other
container VALID. Items inside VALID containers are temporarily disabled so
they can be reviewed but not selected, and their author-declared state is
restored when the marking is cleared.
"""

import logging
from typing import TYPE_CHECKING, Mapping, Set

from pyqt_dragact.i18n.tables import render
from pyqt_dragact.model.types import DropMarker, OrderPolicy, SelectionState

if TYPE_CHECKING:
    from pyqt_dragact.model.registry import ContainerRegistry
    from pyqt_dragact.protocols.host_adapter import HostAdapter
    from pyqt_dragact.services.announcement_service import AnnouncementService

logger = logging.getLogger(__name__)


class DropTargetService:
    """Marks containers, locks non-owner items, numbers sortable selections."""

    def __init__(self, adapter: 'HostAdapter', registry: 'ContainerRegistry',
                 announcer: 'AnnouncementService', table: Mapping[str, str]):
        self._adapter = adapter
        self._registry = registry
        self._announcer = announcer
        self._table = dict(table)
        self._awaiting_blur: Set[str] = set()

    def _set_marker(self, container_id: str, marker: DropMarker) -> None:
        self._registry.container(container_id).marker = marker
        self._adapter.set_drop_marker(container_id, marker)

    def mark(self, state: SelectionState) -> None:
        """Mark the owner and every valid destination for a non-empty selection."""
        for container in self._registry:
            if container.sortable:
                self._adapter.set_sort_enabled(container.id, True)

            if container.id == state.owner:
                self._set_marker(container.id, DropMarker.OWNER)
                continue

            self._set_marker(container.id, DropMarker.VALID)
            for item in self._registry.items_of(container.id):
                if not item.locked:
                    item.locked = True
                    self._adapter.set_item_disabled(item.id, True)

            self._announcer.describe_container(container.id, "drop-notes")

    def clear(self, state: SelectionState) -> None:
        """
        Remove every marker and restore locked items.

        When state still names a pending target (the clear that follows a
        drop), that container announces how many items were dropped and keeps
        the confirmation until it loses focus.
        """
        if state.is_empty:
            return

        count = len(state.items)
        for container in self._registry:
            self._set_marker(container.id, DropMarker.NONE)
            self._adapter.set_drag_hover(container.id, False)
            if container.sortable:
                self._adapter.set_sort_enabled(container.id, False)

            # The owner is treated like any other container after a same-container sort drop
            if container.id != state.owner or state.order_policy is OrderPolicy.SELECTION_ORDER:
                for item in self._registry.items_of(container.id):
                    if item.locked:
                        item.locked = False
                        self._adapter.set_item_disabled(item.id, item.disabled)

                if container.id != state.pending_target:
                    self._announcer.describe_container(container.id, "selection-notes")
                else:
                    self._announcer.describe_container(container.id, "dropped-items", count)
                    self._awaiting_blur.add(container.id)
            else:
                # Owner may have been emptied and need the empty description
                self._announcer.describe_container(container.id, "selection-notes")

        logger.debug(f"Cleared drop targets (count={count}, target={state.pending_target})")

    def focus_out(self, container_id: str) -> None:
        """Revert a drop confirmation to the default instructions."""
        if container_id in self._awaiting_blur:
            self._awaiting_blur.discard(container_id)
            self._announcer.describe_container(container_id, "selection-notes")

    def refresh_numbers(self, container_id: str, state: SelectionState) -> None:
        """Number the selected items of a sortable container in selection order."""
        container = self._registry.container(container_id)
        if container is None or not container.sortable:
            return

        for item_id in container.items:
            if item_id in state.items:
                text = render(self._table["sort-number"], number=state.items.index(item_id) + 1)
            else:
                text = None
            self._adapter.set_item_number(item_id, text)
