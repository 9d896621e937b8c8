"""
Container/Item registry.

Keeps, per container, its ordered item list and derived selection mode, and
the item records themselves. Rebuilt whenever a container's item list changes,
either through a transfer or through an externally observed mutation.
"""

import dataclasses
import logging
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence

from pyqt_dragact.exceptions import MissingLabelError, MissingRoleError
from pyqt_dragact.model.types import Container, ContainerMode, Item, ItemInfo
from pyqt_dragact.protocols.dragact_config import CHECKED_STATE, DragActConfig, get_dragact_config

if TYPE_CHECKING:
    from pyqt_dragact.protocols.host_adapter import HostAdapter

logger = logging.getLogger(__name__)


class ContainerRegistry:
    """Owns every Container and Item record of one DragAct instance."""

    def __init__(self, adapter: 'HostAdapter', config: Optional[DragActConfig] = None):
        self._adapter = adapter
        self._config = config or get_dragact_config()
        self._containers: Dict[str, Container] = {}
        self._items: Dict[str, Item] = {}

    # ---------- Build ----------
    def build(self) -> None:
        """Scan the host for containers and their items.

        Raises:
            MissingRoleError: A container or item has no role
            MissingLabelError: A container has no label reference
        """
        for info in self._adapter.list_containers():
            if not info.role:
                raise MissingRoleError(f'The container "{info.id}" does not have an explicit role.')
            if not info.label:
                raise MissingLabelError(f'The container "{info.id}" does not have a labelling element.')

            self._containers[info.id] = Container(
                id=info.id,
                role=info.role,
                label=info.label,
                selection_attribute=info.selection_attribute or self._config.default_selection_attribute,
                sortable=info.sortable,
            )
            self.rebuild(info.id, items=self._adapter.list_items(info.id))

        logger.debug(f"Registry built with {len(self._containers)} containers, {len(self._items)} items")

    def rebuild(self, container_id: str, items: Optional[Sequence[ItemInfo]] = None,
                active: Optional[str] = None) -> Container:
        """
        Re-derive a container after its item list changed.

        Args:
            container_id: Container to rebuild
            items: Freshly read item list; None keeps the registry's own list
            active: Item to make active; defaults to the first item when it
                is None or no longer in the container

        Returns:
            The rebuilt container
        """
        container = self._containers[container_id]
        if items is not None:
            self._adopt(container, items)

        container.mode = self.derive_mode(container)

        if container.items:
            target = active if active in container.items else container.items[0]
            container.active_item = target
            container.last_active_item = target
        else:
            container.active_item = None
            container.last_active_item = None

        self._adapter.set_active_marker(container.id, container.active_item)
        logger.debug(
            f"Rebuilt {container.id}: {len(container.items)} items, "
            f"mode={container.mode.name}, active={container.active_item}"
        )
        return container

    def _adopt(self, container: Container, infos: Sequence[ItemInfo]) -> None:
        ids = []
        for info in infos:
            if not info.role:
                raise MissingRoleError(f'The dragitem "{info.id}" does not have an explicit role.')

            item = self._items.get(info.id)
            if item is None:
                item = Item(id=info.id, container_id=container.id, role=info.role, disabled=info.disabled)
                self._items[info.id] = item
                self._adapter.set_item_selected(item.id, container.selection_attribute, False)
            else:
                item.role = info.role
                item.disabled = info.disabled
                item.container_id = container.id
            ids.append(info.id)

        for item_id in container.items:
            if item_id not in ids and self._items.get(item_id) is not None \
                    and self._items[item_id].container_id == container.id:
                del self._items[item_id]

        container.items = ids

    def derive_mode(self, container: Container) -> ContainerMode:
        """Derive the default selection mode from the container's first item.

        Only the lockable (aria-checked) scheme can lock; the first item's
        role decides for the whole container.
        """
        if container.selection_attribute != CHECKED_STATE:
            return ContainerMode.SINGLE_DEFAULT
        if not container.items:
            return ContainerMode.MULTI_CONTIGUOUS_CAPABLE
        first = self._items[container.items[0]]
        roles = {self._items[item_id].role for item_id in container.items}
        if len(roles) > 1:
            logger.warning(
                f"Container {container.id} mixes item roles {sorted(roles)}; "
                f"mode follows first item role '{first.role}'"
            )
        if first.role == self._config.single_choice_role:
            return ContainerMode.LOCKED_SINGLE
        return ContainerMode.MULTI_NONCONTIGUOUS

    # ---------- Ownership ----------
    def move(self, item_id: str, destination_id: str) -> None:
        """Transfer ownership of an item: remove from its source, append to destination."""
        item = self._items[item_id]
        source = self._containers[item.container_id]
        destination = self._containers[destination_id]

        source.items.remove(item_id)
        destination.items.append(item_id)
        item.container_id = destination_id
        self._adapter.move_item(item_id, destination_id)

    # ---------- Lookup ----------
    def container(self, container_id: Optional[str]) -> Optional[Container]:
        if container_id is None:
            return None
        return self._containers.get(container_id)

    def item(self, item_id: Optional[str]) -> Optional[Item]:
        if item_id is None:
            return None
        return self._items.get(item_id)

    def owner_of(self, item_id: str) -> Optional[Container]:
        item = self._items.get(item_id)
        return self._containers.get(item.container_id) if item else None

    def items_of(self, container_id: str) -> List[Item]:
        return [self._items[item_id] for item_id in self._containers[container_id].items]

    def containers(self) -> List[Container]:
        return list(self._containers.values())

    def snapshot(self) -> Dict[str, Container]:
        """Return copies of every container, safe to hand out."""
        return {
            key: dataclasses.replace(container, items=list(container.items))
            for key, container in self._containers.items()
        }

    def __iter__(self) -> Iterator[Container]:
        return iter(list(self._containers.values()))

    def __contains__(self, container_id: str) -> bool:
        return container_id in self._containers

    def __len__(self) -> int:
        return len(self._containers)
