"""
Selection state machine.

Owns the set of selected items (in selection order), their common owning
container, the pending drop target and the requested drop order. Every input
modality ends up here through resolve(), with a modality-neutral multimode.
"""

import logging
from typing import TYPE_CHECKING

from pyqt_dragact.model.types import (
    ContainerMode,
    InputModifiers,
    Multimode,
    OrderPolicy,
    SelectionState,
)

if TYPE_CHECKING:
    from pyqt_dragact.model.registry import ContainerRegistry
    from pyqt_dragact.protocols.arbiter_client import ArbiterClient
    from pyqt_dragact.protocols.host_adapter import HostAdapter
    from pyqt_dragact.services.arbiter import InstanceArbiter
    from pyqt_dragact.services.drop_target_service import DropTargetService

logger = logging.getLogger(__name__)


def resolve_multimode(mode: ContainerMode, modifiers: InputModifiers) -> Multimode:
    """
    Derive the multimode for one selection action.

    - LOCKED_SINGLE is always EXCLUSIVE
    - MULTI_NONCONTIGUOUS is CONTIGUOUS with the range modifier, else NONCONTIGUOUS
    - unrestricted containers are CONTIGUOUS with the range modifier,
      NONCONTIGUOUS with the alternate modifier (or touch / any keyboard
      action), EXCLUSIVE otherwise
    """
    if mode is ContainerMode.LOCKED_SINGLE:
        return Multimode.EXCLUSIVE
    if modifiers.range:
        return Multimode.CONTIGUOUS
    if mode is ContainerMode.MULTI_NONCONTIGUOUS:
        return Multimode.NONCONTIGUOUS
    if modifiers.alternate or modifiers.forced_multi:
        return Multimode.NONCONTIGUOUS
    return Multimode.EXCLUSIVE


class SelectionService:
    """
    Selection state machine for one DragAct instance.

    Invariant: ``state.items`` is non-empty exactly when ``state.owner`` is
    set, and every selected item belongs to the owner.
    """

    def __init__(self, client: 'ArbiterClient', registry: 'ContainerRegistry',
                 adapter: 'HostAdapter', arbiter: 'InstanceArbiter', targets: 'DropTargetService'):
        self._client = client
        self._registry = registry
        self._adapter = adapter
        self._arbiter = arbiter
        self._targets = targets
        self.state = SelectionState()

    def is_selected(self, item_id: str) -> bool:
        return item_id in self.state.items

    def _settle(self) -> None:
        """Drop the owner and release the arbiter once the selection is empty."""
        if self.state.is_empty:
            self.state.owner = None
            self.state.order_policy = OrderPolicy.NODE_ORDER
            self._arbiter.release(self._client)

    # ---------- Membership ----------
    def add(self, item_id: str, container_id: str) -> bool:
        """Select one item. Returns False when the selection is rejected."""
        item = self._registry.item(item_id)
        container = self._registry.container(container_id)
        if item is None or container is None or item.container_id != container_id:
            return False

        # Disabled (or temporarily locked) items can't be selected
        if item.unavailable:
            return False

        if self.state.owner is None:
            self.state.owner = container_id
        elif self.state.owner != container_id:
            return False

        if item_id in self.state.items:
            self.state.items.remove(item_id)
        item.selected = True
        self.state.items.append(item_id)
        self._adapter.set_item_selected(item_id, container.selection_attribute, True)
        self._targets.refresh_numbers(container_id, self.state)

        self.state.order_policy = OrderPolicy.NODE_ORDER
        self._arbiter.claim(self._client)
        logger.debug(f"Selected {item_id} in {container_id} ({len(self.state.items)} selected)")
        return True

    def remove(self, item_id: str, container_id: str = None) -> bool:
        """Unselect one item, using container_id's selection scheme if given."""
        item = self._registry.item(item_id)
        if item is None:
            return False
        container = self._registry.container(container_id) or self._registry.owner_of(item_id)

        item.selected = False
        if item_id in self.state.items:
            self.state.items.remove(item_id)
        self._adapter.set_item_selected(item_id, container.selection_attribute, False)
        self._targets.refresh_numbers(item.container_id, self.state)

        self._settle()
        logger.debug(f"Unselected {item_id} ({len(self.state.items)} selected)")
        return True

    def clear(self, container_id: str = None) -> None:
        """Unselect every member and reset the owner."""
        for item_id in list(self.state.items):
            self.remove(item_id, container_id)
        self.state.owner = None

    def select_range(self, container_id: str) -> None:
        """
        Reselect the interval between the container's last and current active item.

        The interval is appended ascending when the earlier boundary has the
        lower index and reversed otherwise, so repeated range gestures keep
        their direction in the selection order.
        """
        container = self._registry.container(container_id)
        boundaries = [container.index_of(container.last_active_item), container.index_of(container.active_item)]
        if min(boundaries) < 0:
            return

        low, high = sorted(boundaries)
        span = container.items[low:high + 1]
        if boundaries[0] > boundaries[1]:
            span.reverse()

        # Members of the span are re-appended in span order
        self.state.items = [item_id for item_id in self.state.items if item_id not in span]
        for item_id in span:
            self.add(item_id, container_id)
        self._settle()

    def select_all(self, container_id: str) -> bool:
        """Select every item of a container in node order."""
        container = self._registry.container(container_id)
        if container.mode.locked:
            return False
        if self.state.owner is not None and self.state.owner != container_id:
            return False
        if len(self.state.items) >= len(container.items):
            return False

        self.state.items = []
        for item_id in container.items:
            self.add(item_id, container_id)
        self._settle()

        if not self.state.is_empty:
            self._targets.mark(self.state)
        return True

    # ---------- Modality-neutral entry point ----------
    def resolve(self, container_id: str, item_id: str, multimode: Multimode) -> None:
        """Select or unselect according to the resolved multimode."""
        logger.debug(f"Resolve {multimode.name} on {item_id} in {container_id}")

        if multimode is Multimode.CONTIGUOUS:
            if not self.is_selected(item_id):
                self.add(item_id, container_id)
            self.select_range(container_id)
            if not self.state.is_empty:
                self._targets.mark(self.state)

        elif multimode is Multimode.NONCONTIGUOUS:
            if self.is_selected(item_id):
                if len(self.state.items) == 1:
                    self._targets.clear(self.state)
                self.remove(item_id)
            else:
                self.add(item_id, container_id)
                if not self.state.is_empty:
                    self._targets.mark(self.state)

        else:
            # Sole selection toggles off, anything else becomes the only selection
            single = self.state.items == [item_id]
            self._targets.clear(self.state)
            self.clear()
            if not single:
                self.add(item_id, container_id)
                if not self.state.is_empty:
                    self._targets.mark(self.state)
