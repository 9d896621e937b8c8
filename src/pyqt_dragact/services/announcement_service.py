"""
Announcement scheduling for assistive technology.

Each container has two description channels: STATUS (empty / selection
instructions / drop instructions / drop confirmation) and COUNT (how many
items are selected). Text is applied after a fixed delay so the selection or
active-state change is announced first, and a newer value for a channel
supersedes one that has not been applied yet.
"""

import logging
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Tuple

from pyqt_dragact.core.debounce_timer import DebounceTimer
from pyqt_dragact.i18n.tables import render_count
from pyqt_dragact.model.types import Channel
from pyqt_dragact.protocols.dragact_config import DragActConfig, get_dragact_config

if TYPE_CHECKING:
    from pyqt_dragact.model.registry import ContainerRegistry
    from pyqt_dragact.protocols.host_adapter import HostAdapter

logger = logging.getLogger(__name__)

ChannelKey = Tuple[str, Channel]


class AnnouncementService:
    """Per-container, per-channel supersedable announcement tasks."""

    def __init__(self, adapter: 'HostAdapter', registry: 'ContainerRegistry',
                 table: Mapping[str, str], config: Optional[DragActConfig] = None):
        self._adapter = adapter
        self._registry = registry
        self._table = dict(table)
        self._config = config or get_dragact_config()
        self._timers: Dict[ChannelKey, DebounceTimer] = {}
        self._applied: Dict[ChannelKey, str] = {}

    # ---------- Channel plumbing ----------
    def _timer(self, key: ChannelKey) -> DebounceTimer:
        timer = self._timers.get(key)
        if timer is None:
            timer = DebounceTimer(
                delay_ms=self._config.announce_delay_ms,
                handler=lambda text, key=key: self._apply(key, text),
            )
            self._timers[key] = timer
        return timer

    def _apply(self, key: ChannelKey, text: str) -> None:
        container_id, channel = key
        self._applied[key] = text
        self._adapter.set_description(container_id, channel, text)

    def schedule(self, container_id: str, channel: Channel, text: str) -> None:
        """Apply text after the announcement delay, superseding any pending text."""
        logger.debug(f"Scheduled {channel.name} for {container_id}: {text!r}")
        self._timer((container_id, channel)).trigger(text)

    def clear(self, container_id: str, channel: Channel) -> None:
        """Cancel pending text and apply the placeholder immediately."""
        key = (container_id, channel)
        if key in self._timers:
            self._timers[key].cancel()
        self._apply(key, self._config.placeholder_text)

    def initialize(self, container_id: str) -> None:
        for channel in Channel:
            self.clear(container_id, channel)

    def flush(self) -> None:
        """Apply every pending text now."""
        for timer in list(self._timers.values()):
            timer.force()

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.cancel()

    def text(self, container_id: str, channel: Channel) -> Optional[str]:
        """Return the text last applied to a channel."""
        return self._applied.get((container_id, channel))

    def pending(self, container_id: str, channel: Channel) -> Optional[str]:
        timer = self._timers.get((container_id, channel))
        return timer.payload if timer is not None and timer.pending else None

    # ---------- Descriptions ----------
    def describe_container(self, container_id: str, key: str, count: int = 0) -> None:
        """
        Schedule a STATUS description.

        "selection-notes" becomes "empty-notes" when the container has no
        items; a nonzero count renders a count template.
        """
        container = self._registry.container(container_id)
        if key == "selection-notes" and not container.items:
            text = self._table["empty-notes"]
        elif count:
            text = render_count(self._table, key, count)
        else:
            text = self._table[key]
        self.schedule(container_id, Channel.STATUS, text)

    def describe_items(self, container_id: str, count: int = 0, item_id: Optional[str] = None) -> None:
        """
        Schedule a COUNT description, or clear it when count is zero.

        Suppressed for single-locked containers (always "1 item", redundant)
        and when triggered by an event on an unavailable item.
        """
        if not count:
            self.clear(container_id, Channel.COUNT)
            return

        container = self._registry.container(container_id)
        if container.mode.locked:
            return

        item = self._registry.item(item_id)
        if item is not None and item.unavailable:
            return

        self.schedule(container_id, Channel.COUNT, render_count(self._table, "selected-items", count))

    def undescribe_items(self, item_id: str) -> None:
        """Clear the COUNT channel of the container that owns item_id."""
        container = self._registry.owner_of(item_id)
        if container is not None:
            self.clear(container.id, Channel.COUNT)
