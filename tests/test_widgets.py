"""Tests for the Qt widget layer."""

import pytest


def _root():
    from PyQt6.QtWidgets import QWidget
    from pyqt_dragact.widgets import DropTargetListWidget

    root = QWidget()
    root.setObjectName("dragact-root")
    fruit = DropTargetListWidget("Fruit", container_id="fruit", parent=root)
    for name in ("Apple", "Banana", "Cherry"):
        fruit.add_item(name, item_id=name.lower())
    basket = DropTargetListWidget("Basket", container_id="basket", sortable=True, parent=root)
    return root, fruit, basket


@pytest.fixture
def dragact_widget(qapp, arbiter):
    """DragAct bound to a widget tree; closed after the test."""
    from pyqt_dragact import DragAct, DragActConfig

    root, fruit, basket = _root()
    dragact = DragAct(root, arbiter=arbiter, config=DragActConfig(platform_language="en"))
    yield dragact, fruit, basket
    dragact.close()


def test_drop_target_list_items(qapp):
    """Test DropTargetListWidget item bookkeeping."""
    from pyqt_dragact.widgets import DropTargetListWidget

    widget = DropTargetListWidget("Fruit")
    item = widget.add_item("Apple", item_id="apple", disabled=True)

    assert widget.item_ids() == ["apple"]
    assert widget.item_by_id("apple") is item
    assert widget.accessibleName() == "Fruit"
    assert widget.container_id.startswith("dragcontainer-")
    assert widget.sort_button is None

    widget.set_item_number(item, "#1")
    assert item.text() == "#1 Apple"
    widget.set_item_number(item, None)
    assert item.text() == "Apple"


def test_items_changed_signal(qapp):
    """Test application changes are reported and instance moves are not."""
    from pyqt_dragact.widgets import DropTargetListWidget

    widget = DropTargetListWidget("Fruit", container_id="fruit")
    seen = []
    widget.items_changed.connect(seen.append)

    widget.add_item("Apple", item_id="apple")
    assert seen == ["fruit"]

    with widget.moving():
        widget.takeItem(0)
    assert seen == ["fruit"]


def test_qt_host_queries(qapp):
    """Test QtHostAdapter reads containers, items and language tags."""
    from pyqt_dragact.widgets import QtHostAdapter

    root, fruit, basket = _root()
    root.setProperty("lang", "it-CH")
    adapter = QtHostAdapter(root)

    infos = {info.id: info for info in adapter.list_containers()}
    assert set(infos) == {"fruit", "basket"}
    assert infos["basket"].sortable
    assert infos["fruit"].label == "Fruit"
    assert [info.id for info in adapter.list_items("fruit")] == ["apple", "banana", "cherry"]
    assert adapter.language_tags()[0] == "it-CH"


def test_qt_host_commands(qapp):
    """Test QtHostAdapter renders selection, markers, descriptions and moves."""
    from PyQt6.QtCore import Qt
    from pyqt_dragact.model import Channel, DropMarker
    from pyqt_dragact.protocols import CHECKED_STATE, SELECTED_STATE
    from pyqt_dragact.widgets import QtHostAdapter

    root, fruit, basket = _root()
    adapter = QtHostAdapter(root)
    adapter.list_containers()

    adapter.set_item_selected("apple", CHECKED_STATE, True)
    assert fruit.item_by_id("apple").checkState() == Qt.CheckState.Checked
    adapter.set_item_selected("apple", CHECKED_STATE, None)
    assert fruit.item_by_id("apple").data(Qt.ItemDataRole.CheckStateRole) is None

    adapter.set_item_selected("banana", SELECTED_STATE, True)
    assert fruit.item_by_id("banana").isSelected()

    adapter.set_drop_marker("fruit", DropMarker.VALID)
    assert fruit.property("droptarget") == "true"

    adapter.set_description("fruit", Channel.STATUS, "To drop items press Enter.")
    adapter.set_description("fruit", Channel.COUNT, "1 item checked.")
    assert fruit.accessibleDescription() == "To drop items press Enter. 1 item checked."
    adapter.set_description("fruit", Channel.COUNT, "\u200b")
    assert fruit.accessibleDescription() == "To drop items press Enter."

    adapter.set_item_disabled("cherry", True)
    assert not fruit.item_by_id("cherry").flags() & Qt.ItemFlag.ItemIsEnabled

    seen = []
    fruit.items_changed.connect(seen.append)
    adapter.move_item("apple", "basket")
    assert basket.item_ids() == ["apple"]
    assert fruit.item_ids() == ["banana", "cherry"]
    assert seen == []


def test_scope_resolution_by_name(qapp, arbiter):
    """Test a scope can be given as a top-level widget's object name."""
    from pyqt_dragact import DragAct, DragActConfig

    root, fruit, basket = _root()
    dragact = DragAct("dragact-root", arbiter=arbiter, config=DragActConfig(platform_language="en"))
    try:
        assert set(dragact.collection) == {"fruit", "basket"}
    finally:
        dragact.close()


def test_key_names():
    """Test Qt keys map to handler key names."""
    from PyQt6.QtCore import Qt
    from pyqt_dragact.widgets.event_bridge import key_name

    assert key_name(Qt.Key.Key_Space) == " "
    assert key_name(Qt.Key.Key_Return) == "enter"
    assert key_name(Qt.Key.Key_Enter) == "enter"
    assert key_name(Qt.Key.Key_Q) == ""


def test_widget_keyboard_transfer(dragact_widget):
    """Test keyboard selection and drop end to end through Qt events."""
    from PyQt6.QtCore import Qt
    from PyQt6.QtTest import QTest

    dragact, fruit, basket = dragact_widget

    QTest.keyClick(fruit, Qt.Key.Key_Space)
    assert fruit.item_by_id("apple").checkState() == Qt.CheckState.Checked
    assert basket.property("droptarget") == "true"
    assert basket.sort_button.isEnabled()

    QTest.keyClick(basket, Qt.Key.Key_Return)
    assert basket.item_ids() == ["apple"]
    assert fruit.item_ids() == ["banana", "cherry"]
    assert basket.currentItem().text() == "Apple"
    assert not basket.sort_button.isEnabled()


def test_widget_item_changes_are_batched(dragact_widget):
    """Test widget item changes reach the instance as one batch."""
    dragact, fruit, basket = dragact_widget
    seen = []
    dragact.add_callback(lambda instance: seen.append(instance.collection["fruit"].items))

    fruit.add_item("Date", item_id="date")
    basket.add_item("Elderberry", item_id="elderberry")
    dragact.adapter.bridge.flush_changes()

    assert seen == [["apple", "banana", "cherry", "date"]]
    assert dragact.collection["basket"].items == ["elderberry"]
