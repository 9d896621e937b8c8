"""
Qt implementation of the host tree contract.

Containers are the DropTargetListWidget descendants of a root widget; items
are their QListWidgetItems, addressed by the id stored in ITEM_ID_ROLE.
Accessibility state is rendered as check state (aria-checked scheme) or item
selection (aria-selected scheme), accessible names/descriptions and dynamic
properties that style sheets can target (``droptarget``, ``draghover``,
``dragout``, ``roledescription``).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from PyQt6.QtCore import QItemSelectionModel, QLocale, QPoint, Qt
from PyQt6.QtWidgets import QAbstractItemView, QApplication, QListWidgetItem, QWidget

from pyqt_dragact.exceptions import ScopeResolutionError
from pyqt_dragact.model.types import Channel, ContainerInfo, DropMarker, ItemInfo, Rect
from pyqt_dragact.protocols.dragact_config import CHECKED_STATE, DragActConfig, get_dragact_config
from pyqt_dragact.protocols.host_adapter import HostAdapter
from pyqt_dragact.widgets.drop_target_list import (
    DISABLED_ROLE,
    ITEM_ID_ROLE,
    ITEM_ROLE_ROLE,
    DropTargetListWidget,
)

logger = logging.getLogger(__name__)

SCROLL_HINTS = {
    "center": QAbstractItemView.ScrollHint.PositionAtCenter,
    "nearest": QAbstractItemView.ScrollHint.EnsureVisible,
}


def resolve_scope(scope: Any) -> QWidget:
    """Resolve a widget or an objectName to the root widget of an instance.

    Raises:
        ScopeResolutionError: The scope is neither a widget nor the name of one
    """
    if isinstance(scope, QWidget):
        return scope
    if isinstance(scope, str) and scope:
        for top in QApplication.topLevelWidgets():
            if top.objectName() == scope:
                return top
            found = top.findChild(QWidget, scope)
            if found is not None:
                return found
    raise ScopeResolutionError("The scope element reference is invalid.")


class QtHostAdapter(HostAdapter):
    """HostAdapter over a QWidget subtree."""

    def __init__(self, scope: Any, config: Optional[DragActConfig] = None):
        self.scope = resolve_scope(scope)
        self._config = config or get_dragact_config()
        self._widgets: Dict[str, DropTargetListWidget] = {}
        self._descriptions: Dict[str, Dict[Channel, str]] = {}
        self._bridge = None

    # ---------- Lookup ----------
    def widget(self, container_id: str) -> DropTargetListWidget:
        return self._widgets[container_id]

    def widgets(self) -> List[DropTargetListWidget]:
        return list(self._widgets.values())

    def find_item(self, item_id: str) -> Tuple[Optional[DropTargetListWidget], Optional[QListWidgetItem]]:
        for widget in self._widgets.values():
            item = widget.item_by_id(item_id)
            if item is not None:
                return widget, item
        return None, None

    def contains(self, widget: Optional[QWidget]) -> bool:
        return widget is not None and (widget is self.scope or self.scope.isAncestorOf(widget))

    # ========== QUERIES ==========

    def list_containers(self) -> List[ContainerInfo]:
        found = self.scope.findChildren(DropTargetListWidget)
        if isinstance(self.scope, DropTargetListWidget):
            found.insert(0, self.scope)

        infos = []
        for widget in found:
            self._widgets[widget.container_id] = widget
            infos.append(ContainerInfo(
                id=widget.container_id,
                role=widget.role,
                label=widget.label,
                sortable=widget.sortable,
                selection_attribute=widget.selection_attribute,
            ))
        return infos

    def list_items(self, container_id: str) -> List[ItemInfo]:
        widget = self._widgets[container_id]
        infos = []
        for row in range(widget.count()):
            item = widget.item(row)
            infos.append(ItemInfo(
                id=item.data(ITEM_ID_ROLE),
                role=item.data(ITEM_ROLE_ROLE),
                disabled=bool(item.data(DISABLED_ROLE)),
            ))
        return infos

    def language_tags(self) -> Tuple[Optional[str], Optional[str]]:
        element = self.scope.property("lang")
        document = self.scope.window().property("lang")
        if document is None and QApplication.instance() is not None:
            document = QApplication.instance().property("lang")
        return element or None, document or None

    def item_rect(self, item_id: str) -> Optional[Rect]:
        widget, item = self.find_item(item_id)
        if item is None or item.isHidden():
            return None
        rect = widget.visualItemRect(item)
        top_left = widget.viewport().mapToGlobal(rect.topLeft())
        return Rect(top_left.x(), top_left.y(), top_left.x() + rect.width(), top_left.y() + rect.height())

    def container_rect(self, container_id: str) -> Rect:
        return self._global_rect(self._widgets[container_id].viewport())

    def container_overflows(self, container_id: str) -> bool:
        widget = self._widgets[container_id]
        return widget.verticalScrollBar().maximum() > 0 or widget.horizontalScrollBar().maximum() > 0

    def viewport_rect(self) -> Rect:
        return self._global_rect(self.scope.window())

    @staticmethod
    def _global_rect(widget: QWidget) -> Rect:
        top_left = widget.mapToGlobal(QPoint(0, 0))
        return Rect(top_left.x(), top_left.y(), top_left.x() + widget.width(), top_left.y() + widget.height())

    # ========== COMMANDS ==========

    def set_language(self, tag: str) -> None:
        self.scope.setProperty("lang", tag)
        self.scope.setLocale(QLocale(tag))

    def set_role_description(self, container_id: str, text: str) -> None:
        self._set_property(self._widgets[container_id], "roledescription", text)

    def set_item_selected(self, item_id: str, attribute: str, selected: Optional[bool]) -> None:
        widget, item = self.find_item(item_id)
        if item is None:
            return

        if attribute == CHECKED_STATE:
            if selected is None:
                item.setData(Qt.ItemDataRole.CheckStateRole, None)
            else:
                item.setCheckState(Qt.CheckState.Checked if selected else Qt.CheckState.Unchecked)
        else:
            flag = QItemSelectionModel.SelectionFlag.Select if selected else QItemSelectionModel.SelectionFlag.Deselect
            widget.selectionModel().select(widget.indexFromItem(item), flag)

    def set_item_disabled(self, item_id: str, disabled: bool) -> None:
        _, item = self.find_item(item_id)
        if item is None:
            return
        if disabled:
            item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEnabled)
        else:
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsEnabled)

    def set_item_number(self, item_id: str, text: Optional[str]) -> None:
        widget, item = self.find_item(item_id)
        if item is not None:
            widget.set_item_number(item, text)

    def set_drop_marker(self, container_id: str, marker: DropMarker) -> None:
        self._set_property(self._widgets[container_id], "droptarget", marker.value)

    def set_sort_enabled(self, container_id: str, enabled: bool) -> None:
        button = self._widgets[container_id].sort_button
        if button is not None:
            button.setEnabled(enabled)

    def set_active_marker(self, container_id: str, item_id: Optional[str]) -> None:
        widget = self._widgets[container_id]
        item = widget.item_by_id(item_id) if item_id is not None else None
        widget.setCurrentItem(item, QItemSelectionModel.SelectionFlag.NoUpdate)

    def set_drag_hover(self, container_id: str, hovered: bool) -> None:
        self._set_property(self._widgets[container_id], "draghover", hovered or None)

    def set_drag_out(self, container_id: str, dragged_out: bool) -> None:
        self._set_property(self._widgets[container_id], "dragout", dragged_out or None)

    def set_description(self, container_id: str, channel: Channel, text: str) -> None:
        """Store the channel text and rebuild the accessible description from both channels."""
        channels = self._descriptions.setdefault(container_id, {})
        channels[channel] = text
        parts = [channels[key] for key in Channel if channels.get(key, self._config.placeholder_text)
                 != self._config.placeholder_text]
        widget = self._widgets[container_id]
        widget.setAccessibleDescription(" ".join(parts) or self._config.placeholder_text)
        widget.setProperty(channel.value, text)

    def move_item(self, item_id: str, container_id: str) -> None:
        source, item = self.find_item(item_id)
        destination = self._widgets[container_id]
        if item is None:
            return

        with source.moving(), destination.moving():
            source.takeItem(source.row(item))
            destination.addItem(item)

    def focus_container(self, container_id: str) -> None:
        self._widgets[container_id].setFocus(Qt.FocusReason.OtherFocusReason)

    def scroll_into_view(self, item_id: str, block: Optional[str], inline: Optional[str]) -> None:
        widget, item = self.find_item(item_id)
        if item is None:
            return
        # Item views scroll both axes together; centering wins over nearest
        hint = SCROLL_HINTS["center"] if "center" in (block, inline) else SCROLL_HINTS["nearest"]
        widget.scrollToItem(item, hint)

    @staticmethod
    def _set_property(widget: QWidget, name: str, value: Any) -> None:
        widget.setProperty(name, value)
        # Re-polish so style sheet property selectors pick up the change
        widget.style().unpolish(widget)
        widget.style().polish(widget)

    # ========== REGISTRATION ==========

    def bind(self, instance: Any) -> None:
        from pyqt_dragact.widgets.event_bridge import QtEventBridge

        self._bridge = QtEventBridge(self, instance)
        logger.debug(f"Bound instance to {len(self._widgets)} containers")

    def unbind(self, instance: Any) -> None:
        if self._bridge is not None:
            self._bridge.detach()
            self._bridge = None

    @property
    def bridge(self):
        return self._bridge
