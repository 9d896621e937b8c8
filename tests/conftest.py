"""pytest configuration and fixtures for pyqt-dragact tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from pyqt_dragact.model.types import ContainerInfo, ItemInfo, Rect
from pyqt_dragact.protocols.host_adapter import HostAdapter


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class RecordingHost(HostAdapter):
    """In-memory host tree that records every command it receives."""

    def __init__(self, element_lang=None, document_lang=None):
        self.containers = {}
        self.items = {}
        self.langs = (element_lang, document_lang)
        self.language = None
        self.role_descriptions = {}
        self.selected = {}
        self.disabled = {}
        self.numbers = {}
        self.markers = {}
        self.sort_enabled = {}
        self.active = {}
        self.hover = {}
        self.dragout = {}
        self.descriptions = {}
        self.focused = None
        self.scrolls = []
        self.item_rects = {}
        self.container_rects = {}
        self.overflowing = set()
        self.viewport = Rect(0, 0, 1000, 1000)
        self.bound = []

    def add_container(self, container_id, items=(), role="listbox", label="Label", sortable=False,
                      attribute=None, item_role="option", disabled=()):
        self.containers[container_id] = ContainerInfo(container_id, role, label, sortable, attribute)
        self.items[container_id] = [ItemInfo(item_id, item_role, item_id in disabled) for item_id in items]
        return self

    # ---------- Queries ----------
    def list_containers(self):
        return list(self.containers.values())

    def list_items(self, container_id):
        return list(self.items[container_id])

    def language_tags(self):
        return self.langs

    def item_rect(self, item_id):
        return self.item_rects.get(item_id, Rect(0, 0, 10, 10))

    def container_rect(self, container_id):
        return self.container_rects.get(container_id, Rect(0, 0, 100, 100))

    def container_overflows(self, container_id):
        return container_id in self.overflowing

    def viewport_rect(self):
        return self.viewport

    # ---------- Commands ----------
    def set_language(self, tag):
        self.language = tag

    def set_role_description(self, container_id, text):
        self.role_descriptions[container_id] = text

    def set_item_selected(self, item_id, attribute, selected):
        self.selected[item_id] = (attribute, selected)

    def set_item_disabled(self, item_id, disabled):
        self.disabled[item_id] = disabled

    def set_item_number(self, item_id, text):
        self.numbers[item_id] = text

    def set_drop_marker(self, container_id, marker):
        self.markers[container_id] = marker

    def set_sort_enabled(self, container_id, enabled):
        self.sort_enabled[container_id] = enabled

    def set_active_marker(self, container_id, item_id):
        self.active[container_id] = item_id

    def set_drag_hover(self, container_id, hovered):
        self.hover[container_id] = hovered

    def set_drag_out(self, container_id, dragged_out):
        self.dragout[container_id] = dragged_out

    def set_description(self, container_id, channel, text):
        self.descriptions[(container_id, channel)] = text

    def move_item(self, item_id, container_id):
        for infos in self.items.values():
            for info in list(infos):
                if info.id == item_id:
                    infos.remove(info)
                    self.items[container_id].append(info)
                    return

    def focus_container(self, container_id):
        self.focused = container_id

    def scroll_into_view(self, item_id, block, inline):
        self.scrolls.append((item_id, block, inline))

    def bind(self, instance):
        self.bound.append(instance)

    def unbind(self, instance):
        self.bound.remove(instance)

    def ids(self, container_id):
        return [info.id for info in self.items[container_id]]


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset class-level and process-wide state between tests."""
    from pyqt_dragact import DragAct
    from pyqt_dragact.i18n import set_locale_registry
    from pyqt_dragact.protocols import set_dragact_config

    DragAct._instances = 0
    DragAct._platform_patches = -1
    set_locale_registry(None)
    set_dragact_config(None)
    yield
    DragAct._instances = 0
    DragAct._platform_patches = 0
    set_locale_registry(None)
    set_dragact_config(None)


@pytest.fixture
def host():
    """Two plain containers and one sortable, empty destination."""
    return (
        RecordingHost()
        .add_container("source", ["a", "b", "c", "d"])
        .add_container("target", ["x"])
        .add_container("sorted", [], sortable=True)
    )


@pytest.fixture
def arbiter():
    from pyqt_dragact.services import InstanceArbiter
    return InstanceArbiter()


@pytest.fixture
def make_dragact(qapp, arbiter):
    """Factory building a DragAct over a RecordingHost with English as platform language."""
    from pyqt_dragact import DragAct, DragActConfig

    def make(host, **config):
        config.setdefault("platform_language", "en")
        return DragAct(host, arbiter=arbiter, config=DragActConfig(**config))

    return make


@pytest.fixture
def dragact(make_dragact, host):
    return make_dragact(host)


class Machine:
    """The service layer of one instance wired over a RecordingHost, without input handling."""

    def __init__(self, host, arbiter):
        from pyqt_dragact.i18n import DEFAULT_TABLES
        from pyqt_dragact.model import ContainerRegistry
        from pyqt_dragact.protocols import DragActConfig
        from pyqt_dragact.services import (
            AnnouncementService,
            DropTargetService,
            FocusService,
            SelectionService,
            TransferService,
        )

        config = DragActConfig()
        table = DEFAULT_TABLES["en"]
        self.host = host
        self.registry = ContainerRegistry(host, config)
        self.registry.build()
        self.announcer = AnnouncementService(host, self.registry, table, config)
        self.targets = DropTargetService(host, self.registry, self.announcer, table)
        self.selection = SelectionService(self, self.registry, host, arbiter, self.targets)
        self.focus = FocusService(self.registry, host, config)
        self.transfer = TransferService(self.registry, host, self.selection, self.targets, self.focus)

    @property
    def state(self):
        return self.selection.state

    @property
    def has_selection(self):
        return not self.selection.state.is_empty

    def cancel_selection(self):
        self.targets.clear(self.selection.state)
        self.selection.clear()


@pytest.fixture
def machine(qapp, host, arbiter):
    return Machine(host, arbiter)


def assert_selection_invariant(state, registry):
    """Members are non-empty exactly when an owner is set, and all belong to it."""
    assert bool(state.items) == (state.owner is not None)
    if state.owner is not None:
        owner_items = registry.container(state.owner).items
        assert all(item_id in owner_items for item_id in state.items)
