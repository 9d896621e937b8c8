"""Tests for virtual focus, transfer and announcement services."""

import pytest

from conftest import Machine, RecordingHost, assert_selection_invariant


# ---------- Virtual focus ----------

@pytest.mark.parametrize("start, direction, expected", [
    ("a", "NEXT", "b"),
    ("d", "NEXT", "a"),
    ("a", "PREV", "d"),
    ("b", "PAGE_FORWARD", "d"),
    ("c", "PAGE_BACK", "a"),
    ("c", "FIRST", "a"),
    ("b", "LAST", "d"),
])
def test_focus_move(machine, start, direction, expected):
    """Test NEXT/PREV wrap while paging and FIRST/LAST clamp."""
    from pyqt_dragact.model import Direction

    machine.registry.container("source").active_item = start
    assert machine.focus.move("source", Direction[direction]) == expected


def test_focus_move_in_empty_container(machine):
    """Test navigating an empty container yields nothing."""
    from pyqt_dragact.model import Direction

    assert machine.focus.move("sorted", Direction.NEXT) is None


def test_set_active_remembers_previous(machine):
    """Test set_active keeps the last active item and ignores no-ops."""
    container = machine.registry.container("source")

    assert machine.focus.set_active("source", "c")
    assert (container.last_active_item, container.active_item) == ("a", "c")
    assert machine.host.active["source"] == "c"

    assert not machine.focus.set_active("source", "c")
    assert not machine.focus.set_active("source", "x")
    assert not machine.focus.set_active("nowhere", "a")


def test_reveal_container_overflow_scrolls_nearest(machine):
    """Test an item clipped by its container scrolls to the nearest edge."""
    from pyqt_dragact.model import Rect

    machine.host.overflowing.add("source")
    machine.host.item_rects["a"] = Rect(0, 95, 10, 110)

    machine.focus.reveal("source")

    assert machine.host.scrolls == [("a", "nearest", "nearest")]


def test_reveal_viewport_overflow_centers(machine):
    """Test an item outside the window is centered on the overflowing axis."""
    from pyqt_dragact.model import Rect

    machine.host.item_rects["a"] = Rect(0, 990, 10, 1010)
    machine.focus.reveal("source")
    assert machine.host.scrolls == [("a", "center", "nearest")]

    machine.host.scrolls.clear()
    machine.host.item_rects["a"] = Rect(995, 990, 1010, 1010)
    machine.focus.reveal("source")
    assert machine.host.scrolls == [("a", "center", "center")]


def test_reveal_visible_item_does_nothing(machine):
    """Test fully visible items don't scroll."""
    machine.focus.reveal("source")
    assert machine.host.scrolls == []


# ---------- Transfer ----------

def _select(machine, container_id, *item_ids):
    from pyqt_dragact.model import Multimode

    for item_id in item_ids:
        machine.selection.resolve(container_id, item_id, Multimode.NONCONTIGUOUS)


@pytest.mark.parametrize("policy, expected", [
    ("NODE_ORDER", ["x", "a", "c"]),
    ("SELECTION_ORDER", ["x", "c", "a"]),
])
def test_transfer_ordering(machine, policy, expected):
    """Test node order keeps source order and selection order keeps click order."""
    from pyqt_dragact.model import OrderPolicy

    _select(machine, "source", "c", "a")
    machine.state.order_policy = OrderPolicy[policy]
    machine.state.pending_target = "target"

    assert machine.transfer.transfer()

    assert machine.registry.container("target").items == expected
    assert machine.host.ids("target") == expected
    assert machine.registry.container("source").items == ["b", "d"]


def test_transfer_resets_state_and_focuses_destination(machine, arbiter):
    """Test a drop clears the selection, focuses and activates the destination."""
    from pyqt_dragact.model import Channel, DropMarker

    _select(machine, "source", "b", "d")
    machine.state.pending_target = "target"
    machine.transfer.transfer()

    state = machine.state
    assert state.is_empty and state.owner is None and state.pending_target is None
    assert_selection_invariant(state, machine.registry)
    assert arbiter.holder is None

    target = machine.registry.container("target")
    source = machine.registry.container("source")
    assert target.active_item == "d"
    assert source.active_item == "a"
    assert machine.host.focused == "target"
    assert machine.host.markers["target"] is DropMarker.NONE
    assert machine.registry.item("x").locked is False

    machine.announcer.flush()
    assert machine.host.descriptions[("target", Channel.STATUS)] == "2 items dropped."

    machine.targets.focus_out("target")
    machine.announcer.flush()
    assert machine.host.descriptions[("target", Channel.STATUS)] == "To choose items press Space."


def test_transfer_leaves_moved_items_unselected(machine):
    """Test moved items end up unselected in the destination scheme."""
    _select(machine, "source", "a")
    machine.state.pending_target = "sorted"
    machine.transfer.transfer()

    assert machine.host.selected["a"] == ("aria-checked", False)
    assert machine.registry.item("a").container_id == "sorted"


def test_transfer_without_target_is_noop(machine):
    """Test dropping with no pending target keeps the selection."""
    _select(machine, "source", "a")

    assert not machine.transfer.transfer()
    assert machine.state.items == ["a"]
    assert machine.registry.container("source").items == ["a", "b", "c", "d"]


def test_transfer_clears_numbers_out_of_sortable_owner(qapp, arbiter):
    """Test items leaving a sortable owner lose their selection numbers."""
    host = RecordingHost().add_container("sorted", ["a", "b"], sortable=True).add_container("plain", [])
    machine = Machine(host, arbiter)

    _select(machine, "sorted", "a")
    assert host.numbers["a"] == "#1"

    machine.state.pending_target = "plain"
    assert machine.transfer.transfer()

    assert machine.registry.container("plain").items == ["a"]
    assert host.numbers["a"] is None


def test_same_container_sort_drop(qapp, arbiter):
    """Test a selection-order drop onto the owner reorders it."""
    from pyqt_dragact.model import OrderPolicy

    host = RecordingHost().add_container("one", ["a", "b", "c"], sortable=True)
    machine = Machine(host, arbiter)

    _select(machine, "one", "c", "a")
    machine.state.order_policy = OrderPolicy.SELECTION_ORDER
    machine.state.pending_target = "one"
    assert machine.transfer.transfer()

    container = machine.registry.container("one")
    assert container.items == ["b", "c", "a"]
    assert container.active_item == "a"
    assert host.numbers["a"] is None


def test_transfer_recomputes_mode(qapp, arbiter):
    """Test an emptied destination takes the mode of the items it receives."""
    from pyqt_dragact.model import ContainerMode, Multimode

    host = RecordingHost().add_container("radio", ["r1"], item_role="radio").add_container("empty", [])
    machine = Machine(host, arbiter)

    machine.selection.resolve("radio", "r1", Multimode.EXCLUSIVE)
    machine.state.pending_target = "empty"
    machine.transfer.transfer()

    assert machine.registry.container("empty").mode is ContainerMode.LOCKED_SINGLE
    assert machine.registry.container("radio").mode is ContainerMode.MULTI_CONTIGUOUS_CAPABLE


# ---------- Announcements ----------

def test_announcement_supersedes_pending_text(machine):
    """Test only the last scheduled text of a channel is applied."""
    from pyqt_dragact.model import Channel

    machine.announcer.schedule("source", Channel.STATUS, "first")
    machine.announcer.schedule("source", Channel.STATUS, "second")
    assert machine.announcer.pending("source", Channel.STATUS) == "second"
    assert ("source", Channel.STATUS) not in machine.host.descriptions

    machine.announcer.flush()

    assert machine.host.descriptions[("source", Channel.STATUS)] == "second"
    assert machine.announcer.text("source", Channel.STATUS) == "second"
    assert machine.announcer.pending("source", Channel.STATUS) is None


def test_clear_applies_placeholder_immediately(machine):
    """Test clearing cancels pending text and never writes an empty value."""
    from pyqt_dragact.model import Channel

    machine.announcer.schedule("source", Channel.COUNT, "2 items checked.")
    machine.announcer.clear("source", Channel.COUNT)
    machine.announcer.flush()

    assert machine.host.descriptions[("source", Channel.COUNT)] == "\u200b"


def test_count_announcement(machine):
    """Test count text is scheduled for multi-select containers."""
    from pyqt_dragact.model import Channel

    _select(machine, "source", "a", "b")
    machine.announcer.describe_items("source", len(machine.state.items))
    machine.announcer.flush()

    assert machine.host.descriptions[("source", Channel.COUNT)] == "2 items checked."


def test_count_suppressed_for_locked_and_unavailable(qapp, arbiter):
    """Test count text is skipped in single-choice containers and on unavailable items."""
    from pyqt_dragact.model import Channel

    host = (
        RecordingHost()
        .add_container("radio", ["r1"], item_role="radio")
        .add_container("one", ["a", "b"], disabled=("b",))
    )
    machine = Machine(host, arbiter)

    machine.announcer.describe_items("radio", 1)
    machine.announcer.describe_items("one", 1, item_id="b")
    machine.announcer.flush()

    assert ("radio", Channel.COUNT) not in host.descriptions
    assert ("one", Channel.COUNT) not in host.descriptions


def test_empty_container_gets_empty_notes(machine):
    """Test selection instructions become the empty note without items."""
    from pyqt_dragact.model import Channel

    machine.announcer.describe_container("sorted", "selection-notes")
    machine.announcer.describe_container("source", "selection-notes")
    machine.announcer.flush()

    assert machine.host.descriptions[("sorted", Channel.STATUS)] == "No items."
    assert machine.host.descriptions[("source", Channel.STATUS)] == "To choose items press Space."
