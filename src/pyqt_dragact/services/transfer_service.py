"""
Transfer engine: executes a drop.

Moves the selected items to the destination's insertion point in the chosen
order, re-derives both containers, clears the selection and reveals the
destination's new active item.
"""

import logging
from typing import TYPE_CHECKING, List

from pyqt_dragact.model.types import OrderPolicy

if TYPE_CHECKING:
    from pyqt_dragact.model.registry import ContainerRegistry
    from pyqt_dragact.protocols.host_adapter import HostAdapter
    from pyqt_dragact.services.drop_target_service import DropTargetService
    from pyqt_dragact.services.focus_service import FocusService
    from pyqt_dragact.services.selection_service import SelectionService

logger = logging.getLogger(__name__)


class TransferService:
    """Moves the current selection into its pending target."""

    def __init__(self, registry: 'ContainerRegistry', adapter: 'HostAdapter',
                 selection: 'SelectionService', targets: 'DropTargetService', focus: 'FocusService'):
        self._registry = registry
        self._adapter = adapter
        self._selection = selection
        self._targets = targets
        self._focus = focus

    def ordered_items(self) -> List[str]:
        """Return the selected items in the order they will be appended."""
        state = self._selection.state
        if state.order_policy is OrderPolicy.SELECTION_ORDER:
            return list(state.items)
        owner = self._registry.container(state.owner)
        return [item_id for item_id in owner.items if item_id in state.items]

    def transfer(self) -> bool:
        """
        Drop the selection into ``state.pending_target``.

        Returns:
            False when no drop occurred (no pending target or nothing selected)
        """
        state = self._selection.state
        if state.owner is not None:
            self._adapter.set_drag_out(state.owner, False)

        if state.pending_target is None or state.is_empty:
            return False

        owner = self._registry.container(state.owner)
        destination = self._registry.container(state.pending_target)

        # Selection attribute is removed first, the destination may use another scheme
        for item_id in state.items:
            self._adapter.set_item_selected(item_id, owner.selection_attribute, None)
            if owner.sortable:
                self._adapter.set_item_number(item_id, None)

        moved = self.ordered_items()
        for item_id in moved:
            self._registry.move(item_id, destination.id)
        logger.debug(
            f"Transferred {len(moved)} items {owner.id} -> {destination.id} "
            f"({state.order_policy.name})"
        )

        for container in dict.fromkeys((owner, destination)):
            active = None
            if destination is owner or container is not owner:
                active = container.items[-1] if container.items else None
            self._registry.rebuild(container.id, active=active)

        self._targets.clear(state)
        self._selection.clear(destination.id)

        self._adapter.focus_container(destination.id)
        self._focus.reveal(destination.id)

        state.pending_target = None
        return True
