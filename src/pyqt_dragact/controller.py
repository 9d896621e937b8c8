"""
DragAct: one accessible drag-and-drop instance.

Binds the state machine services to a host scope and translates the four
input modalities (pointer, native drag, touch, keyboard) plus focus and
structural mutation notifications into modality-neutral selection actions.

Example Usage:

    root = QWidget()
    fruit = DropTargetListWidget("Fruit", role="listbox", parent=root)
    fruit.add_item("Apple")
    basket = DropTargetListWidget("Basket", role="listbox", sortable=True, parent=root)

    dragact = DragAct(root)
    dragact.add_callback(lambda instance: print(instance.collection))
"""

import logging
import sys
from typing import Any, Callable, Dict, List, Mapping, Optional

from pyqt_dragact.exceptions import PlatformFlagError, ScopeResolutionError
from pyqt_dragact.i18n.tables import LocaleRegistry, get_locale_registry, render
from pyqt_dragact.model.events import TOUCH_POINTER_TYPES, DragEvent, KeyEvent, PointerEvent
from pyqt_dragact.model.registry import ContainerRegistry
from pyqt_dragact.model.types import (
    Container,
    Direction,
    InputModifiers,
    Multimode,
    OrderPolicy,
    SelectionState,
)
from pyqt_dragact.protocols.arbiter_client import ArbiterClient
from pyqt_dragact.protocols.dragact_config import DragActConfig, get_dragact_config
from pyqt_dragact.protocols.host_adapter import HostAdapter
from pyqt_dragact.services.announcement_service import AnnouncementService
from pyqt_dragact.services.arbiter import InstanceArbiter, get_default_arbiter
from pyqt_dragact.services.drop_target_service import DropTargetService
from pyqt_dragact.services.focus_service import FocusService
from pyqt_dragact.services.selection_service import SelectionService, resolve_multimode
from pyqt_dragact.services.transfer_service import TransferService

logger = logging.getLogger(__name__)

# --- Module-level constants ---
SPACE = " "
NAVIGATION_KEYS: Dict[str, Direction] = {
    "arrowdown": Direction.NEXT,
    "arrowright": Direction.NEXT,
    "arrowup": Direction.PREV,
    "arrowleft": Direction.PREV,
    "pagedown": Direction.PAGE_FORWARD,
    "pageup": Direction.PAGE_BACK,
    "home": Direction.FIRST,
    "end": Direction.LAST,
}
KEYNAMES = (*NAVIGATION_KEYS, SPACE, "x", "a", "enter", "v", "s", "escape")


class DragAct(ArbiterClient):
    """
    Accessible drag-and-drop instance bound to one root scope.

    Handlers return True when the event was consumed (the host should
    prevent its default action).
    """

    # Tri-state platform patches flag: -1 never, 0 auto-detect, 1 always
    _platform_patches: int = 0
    _instances: int = 0

    @classmethod
    def platform_patches(cls) -> int:
        return cls._platform_patches

    @classmethod
    def set_platform_patches(cls, flag: Any) -> None:
        """Set the platform patches flag. Only allowed before the first instance.

        Raises:
            PlatformFlagError: Instances exist, or flag is not an integer in [-1, 1]
        """
        if cls._instances:
            raise PlatformFlagError("The platform patches flag can only be set before creating instances.")
        if not isinstance(flag, int) or flag < -1 or flag > 1:
            raise PlatformFlagError(f"The platform patches flag must be an integer between -1 and 1, got {flag!r}.")
        cls._platform_patches = int(flag)

    @staticmethod
    def i18n(tables: Mapping[str, Mapping[str, str]]) -> None:
        """Register additional locale tables (validated eagerly, per table)."""
        get_locale_registry().register(tables)

    @staticmethod
    def language_tables() -> Dict[str, Dict[str, str]]:
        return get_locale_registry().tables()

    # ---------- Construction ----------
    def __init__(self, scope: Any = None, *, arbiter: Optional[InstanceArbiter] = None,
                 config: Optional[DragActConfig] = None, locales: Optional[LocaleRegistry] = None):
        self._config = config or get_dragact_config()
        self._adapter = self._resolve_scope(scope)
        self._arbiter = arbiter or get_default_arbiter()
        self._locales = locales or get_locale_registry()

        self._patched = self._detect_patches()
        self._langcode = self._negotiate_language()
        self._table = self._locales.get(self._langcode)
        self._adapter.set_language(self._langcode)

        self._registry = ContainerRegistry(self._adapter, self._config)
        self._announcer = AnnouncementService(self._adapter, self._registry, self._table, self._config)
        self._targets = DropTargetService(self._adapter, self._registry, self._announcer, self._table)
        self._selection = SelectionService(self, self._registry, self._adapter, self._arbiter, self._targets)
        self._focus = FocusService(self._registry, self._adapter, self._config)
        self._transfer = TransferService(self._registry, self._adapter, self._selection, self._targets, self._focus)

        self._callbacks: List[Callable[['DragAct'], None]] = []
        self._touching = False
        self._pointer: Optional[tuple] = None
        self._dragenter: Optional[DragEvent] = None

        self._registry.build()
        for container in self._registry:
            self._initialize_container(container)

        type(self)._instances += 1
        self._adapter.bind(self)
        logger.debug(f"DragAct created: language={self._langcode}, containers={len(self._registry)}")

    def _resolve_scope(self, scope: Any) -> HostAdapter:
        if isinstance(scope, HostAdapter):
            return scope
        if scope is None:
            raise ScopeResolutionError("The scope element reference is invalid.")

        # Qt layer only needed for widget scopes
        from pyqt_dragact.widgets.qt_host import QtHostAdapter
        return QtHostAdapter(scope, config=self._config)

    def _detect_patches(self) -> bool:
        flag = type(self)._platform_patches
        if flag < 0:
            return False
        return bool(flag) or sys.platform == "darwin"

    def _negotiate_language(self) -> str:
        element_tag, document_tag = self._adapter.language_tags()
        platform_tag = self._config.platform_language
        if platform_tag is None:
            from PyQt6.QtCore import QLocale
            platform_tag = QLocale.system().bcp47Name()
        return self._locales.negotiate([element_tag, document_tag, platform_tag])

    def _initialize_container(self, container: Container) -> None:
        self._adapter.set_role_description(
            container.id, render(self._table["role-description"], role=container.role)
        )
        if container.sortable:
            self._adapter.set_sort_enabled(container.id, False)
        self._announcer.initialize(container.id)
        self._announcer.describe_container(container.id, "selection-notes")

    # ---------- Public surface ----------
    @property
    def adapter(self) -> HostAdapter:
        return self._adapter

    @property
    def language_code(self) -> str:
        return self._langcode

    @property
    def language(self) -> Dict[str, str]:
        return dict(self._table)

    @property
    def collection(self) -> Dict[str, Container]:
        return self._registry.snapshot()

    @property
    def selection(self) -> SelectionState:
        return self._selection.state.copy()

    @property
    def registry(self) -> ContainerRegistry:
        return self._registry

    @property
    def announcer(self) -> AnnouncementService:
        return self._announcer

    @property
    def patched(self) -> bool:
        return self._patched

    def add_callback(self, fn: Callable[['DragAct'], None]) -> None:
        """Register a callback fired after every transfer and every item-list change."""
        self._callbacks.append(fn)

    def _dispatch_callbacks(self) -> None:
        for fn in self._callbacks:
            fn(self)

    def close(self) -> None:
        """Cancel any selection and detach from the host."""
        self.cancel_selection()
        self._announcer.cancel_all()
        self._adapter.unbind(self)

    # ---------- ArbiterClient ----------
    @property
    def has_selection(self) -> bool:
        return not self._selection.state.is_empty

    def cancel_selection(self) -> None:
        """Full cancel sequence: drag visuals, descriptions, selection, arbiter."""
        state = self._selection.state
        if state.is_empty:
            return
        self._targets.clear(state)
        self._adapter.set_drag_out(state.owner, False)
        self._announcer.describe_items(state.owner)
        self._selection.clear()

    # ---------- Shared helpers ----------
    def _owner_allows(self, container_id: str) -> bool:
        owner = self._selection.state.owner
        return owner is None or owner == container_id

    def _modifiers(self, event, forced: bool = False) -> InputModifiers:
        return InputModifiers(
            range=event.shift,
            alternate=event.command,
            forced_multi=forced or self._touching,
        )

    def _multimode(self, container_id: str, modifiers: InputModifiers) -> Multimode:
        return resolve_multimode(self._registry.container(container_id).mode, modifiers)

    def _select(self, container_id: str, item_id: str, multimode: Multimode, describe_item: bool = True) -> None:
        """Clear the count, resolve the action, then schedule the new count."""
        self._announcer.undescribe_items(item_id)
        self._selection.resolve(container_id, item_id, multimode)
        self._announcer.describe_items(
            container_id, len(self._selection.state.items), item_id if describe_item else None
        )

    def _drop(self, container_id: str, policy: OrderPolicy) -> bool:
        state = self._selection.state
        state.order_policy = policy
        self._announcer.describe_items(state.owner)
        state.pending_target = container_id
        if self._transfer.transfer():
            self._dispatch_callbacks()
            return True
        return False

    def _follows_focus(self, container_id: str) -> bool:
        """Navigation moves selection for single-locked containers and patched platforms."""
        return self._patched or self._registry.container(container_id).mode.locked

    # ---------- Focus ----------
    def on_focus(self, container_id: Optional[str], on_sort_button: bool = False) -> None:
        if container_id not in self._registry or on_sort_button:
            return

        owner = self._selection.state.owner
        if owner is not None:
            if container_id == owner:
                self._adapter.set_drag_out(owner, False)
            else:
                self._adapter.set_drag_out(owner, True)

        self._focus.reveal(container_id)

    def on_focus_out(self, container_id: Optional[str]) -> None:
        if container_id in self._registry:
            self._targets.focus_out(container_id)

    # ---------- Pointer ----------
    def on_document_pointer_down(self, event: PointerEvent) -> None:
        """Remember the press target globally, to filter mismatched releases."""
        self._pointer = event.target

    def on_pointer_down(self, event: PointerEvent) -> bool:
        if event.pointer_type in TOUCH_POINTER_TYPES or (not self._touching and event.click_count == 0):
            self._touching = True

        if event.ignorable:
            return False

        self._focus.set_active(event.container_id, event.item_id)

        # Synthetic clicks don't move focus by themselves
        if event.click_count == 0 and event.container_id in self._registry:
            self._adapter.focus_container(event.container_id)
        return False

    def on_pointer_up(self, event: PointerEvent) -> bool:
        """Pointer release inside the scope: select, or drop."""
        if event.ignorable or event.container_id not in self._registry:
            return False

        pressed = self._pointer or (None, None)
        if event.item_id is not None:
            if pressed[1] != event.item_id:
                return False
        elif pressed[0] != event.container_id:
            return False

        state = self._selection.state
        if not state.is_empty and (event.container_id != state.owner or event.on_sort_button):
            policy = OrderPolicy.SELECTION_ORDER if event.on_sort_button else OrderPolicy.NODE_ORDER
            return self._drop(event.container_id, policy)

        if event.item_id is None:
            return False

        multimode = self._multimode(event.container_id, self._modifiers(event))
        self._select(event.container_id, event.item_id, multimode)
        self._pointer = None
        return True

    def on_document_pointer_up(self, event: PointerEvent) -> None:
        """Any primary release resets touch; releases outside items may clear the selection."""
        if event.ignorable:
            return
        self._touching = False

        state = self._selection.state
        if event.item_id is not None or event.on_sort_button:
            return
        if event.container_id is None or event.container_id == state.owner:
            self.cancel_selection()

    # ---------- Native drag ----------
    def on_drag_start(self, event: DragEvent) -> bool:
        """Returns False when the drag must be refused."""
        container = self._registry.container(event.container_id)
        item = self._registry.item(event.item_id)
        if container is None or item is None:
            return True

        if not self._owner_allows(item.container_id):
            return False
        if item.unavailable:
            return False

        if not self._selection.is_selected(item.id):
            multimode = self._multimode(container.id, self._modifiers(event))
            self._select(container.id, item.id, multimode, describe_item=False)

        self._focus.set_active(container.id, item.id)
        if self._selection.state.owner is not None:
            self._adapter.set_drag_out(self._selection.state.owner, True)
        return True

    def _drop_candidate(self, event: Optional[DragEvent]) -> Optional[str]:
        if event is None or event.container_id not in self._registry:
            return None
        if event.container_id == self._selection.state.owner and not event.on_sort_button:
            return None
        return event.container_id

    def on_drag_enter(self, event: DragEvent) -> None:
        if not self._arbiter.holds(self):
            return
        self._dragenter = event

    def on_drag_leave(self, event: DragEvent) -> None:
        """Update the pending target and hover marker from the last entered node."""
        if not self._arbiter.holds(self):
            return

        state = self._selection.state
        candidate = self._drop_candidate(self._dragenter)
        if candidate == state.owner:
            candidate = None
        if candidate != state.pending_target:
            if state.pending_target is not None:
                self._adapter.set_drag_hover(state.pending_target, False)
            if candidate is not None:
                self._adapter.set_drag_hover(candidate, True)
            state.pending_target = candidate

    def on_drag_over(self, event: DragEvent) -> bool:
        """Returns True when a drop is currently allowed."""
        if not self._arbiter.holds(self):
            return False
        if self._drop_candidate(self._dragenter) is None:
            return False
        return self.has_selection and event.inside_scope

    def on_drop(self, event: DragEvent) -> bool:
        state = self._selection.state
        sorted_drop = self._dragenter is not None and self._dragenter.on_sort_button
        if sorted_drop and state.pending_target is None:
            state.pending_target = state.owner
        if state.pending_target is None:
            if state.owner is not None:
                self._adapter.set_drag_out(state.owner, False)
            return False

        policy = OrderPolicy.SELECTION_ORDER if sorted_drop else OrderPolicy.NODE_ORDER
        return self._drop(state.pending_target, policy)

    def on_drag_end(self, event: DragEvent) -> None:
        if not self._arbiter.holds(self):
            return
        if self._selection.state.owner is not None:
            self._adapter.set_drag_out(self._selection.state.owner, False)

    # ---------- Keyboard ----------
    def on_key_down(self, event: KeyEvent) -> bool:
        """Keydown inside the scope. Returns True when consumed."""
        container = self._registry.container(event.container_id)
        keyname = event.key.lower() if event.key.lower() in KEYNAMES else ""
        if container is None or not keyname or keyname == "escape":
            return False

        # Sort button: Space acts as Enter, only Enter and Ctrl/Cmd+S do anything
        if event.on_sort_button:
            if keyname == SPACE:
                keyname = "enter"
            if keyname not in ("enter", "s"):
                return True

        if keyname in (SPACE, "x"):
            return self._key_select(container, keyname, event)
        if keyname == "a":
            return self._key_select_all(container, event)
        if (keyname == "enter" and not event.on_sort_button) or keyname == "v":
            return self._key_drop(container, event)
        if keyname in ("enter", "s"):
            return self._key_sort_drop(container, keyname, event)
        return self._key_navigate(container, keyname, event)

    def _key_select(self, container: Container, keyname: str, event: KeyEvent) -> bool:
        if keyname == "x" and not event.command:
            return False
        if event.repeat:
            return True

        item_id = container.active_item
        if item_id is None or not self._owner_allows(container.id):
            return True

        selected = self._selection.is_selected(item_id)
        # Selection follows focus on patched platforms; explicit reselect is swallowed
        if self._patched and selected:
            return True
        # Ctrl/Cmd+X only selects
        if keyname == SPACE or not selected:
            multimode = self._multimode(container.id, self._modifiers(event, forced=True))
            self._select(container.id, item_id, multimode)
        return True

    def _key_select_all(self, container: Container, event: KeyEvent) -> bool:
        if not event.command:
            return False
        if event.repeat:
            return True
        if container.mode.locked or container.active_item is None or not self._owner_allows(container.id):
            return True

        self._announcer.undescribe_items(container.active_item)
        if self._selection.select_all(container.id):
            self._announcer.describe_items(container.id, len(self._selection.state.items))
        return True

    def _key_drop(self, container: Container, event: KeyEvent) -> bool:
        if event.repeat:
            return True
        if event.key.lower() == "v" and not event.command:
            return False

        owner = self._selection.state.owner
        if owner is not None and container.id != owner:
            self._drop(container.id, OrderPolicy.NODE_ORDER)
        return True

    def _key_sort_drop(self, container: Container, keyname: str, event: KeyEvent) -> bool:
        if event.repeat:
            return True
        if keyname == "s" and not event.command:
            return False

        if self._selection.state.owner is not None and container.sortable:
            # Focus first, in case focus was on the sort button
            self._adapter.focus_container(container.id)
            self._drop(container.id, OrderPolicy.SELECTION_ORDER)
        return True

    def _key_navigate(self, container: Container, keyname: str, event: KeyEvent) -> bool:
        direction = NAVIGATION_KEYS[keyname]
        if self._patched and direction in (Direction.FIRST, Direction.LAST):
            return False

        target = self._focus.move(container.id, direction)
        if target is None:
            return True

        allowed = self._owner_allows(container.id)
        multimode = self._multimode(container.id, self._modifiers(event, forced=True))

        if multimode is Multimode.CONTIGUOUS:
            if allowed:
                self._announcer.undescribe_items(target)
                self._focus.set_active(container.id, target)
                self._focus.reveal(container.id)
                self._selection.resolve(container.id, target, Multimode.CONTIGUOUS)
                self._announcer.describe_items(container.id, len(self._selection.state.items))
            return True

        # Count is only re-announced when arriving on an already-selected item
        if self._selection.is_selected(target):
            self._announcer.describe_items(container.id, len(self._selection.state.items))
        else:
            self._announcer.undescribe_items(target)

        if allowed and self._follows_focus(container.id) and not self._selection.is_selected(target):
            self._announcer.undescribe_items(target)
            self._selection.resolve(container.id, target, Multimode.EXCLUSIVE)
            self._announcer.describe_items(container.id, len(self._selection.state.items))

        self._focus.set_active(container.id, target)
        self._focus.reveal(container.id)
        return True

    def on_document_key_down(self, event: KeyEvent) -> bool:
        """Escape anywhere aborts the active selection."""
        if event.key.lower() != "escape" or not self.has_selection:
            return False

        owner = self._selection.state.owner
        if event.container_id in self._registry and event.container_id != owner:
            self._adapter.focus_container(owner)
        self.cancel_selection()
        return event.inside_scope

    # ---------- Structural mutation ----------
    def on_items_changed(self, container_ids: List[str]) -> None:
        """
        React to a batch of externally added/removed items.

        Every affected container is rebuilt before callbacks fire, once for
        the whole batch. Ignored while this instance holds a selection.
        """
        if self.has_selection:
            logger.debug(f"Ignoring item mutation in {container_ids} while a selection exists")
            return

        rebuilt = []
        for container_id in dict.fromkeys(container_ids):
            container = self._registry.container(container_id)
            if container is None:
                logger.warning(f"Item mutation outside any known container: {container_id!r}")
                continue
            self._registry.rebuild(
                container_id,
                items=self._adapter.list_items(container_id),
                active=container.active_item,
            )
            self._announcer.describe_container(container_id, "selection-notes")
            rebuilt.append(container_id)

        if rebuilt:
            self._dispatch_callbacks()
