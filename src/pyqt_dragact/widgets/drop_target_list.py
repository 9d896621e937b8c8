"""
Drop-target QListWidget.

A labelled container whose items can be selected and transferred by a
DragAct instance. Selection, focus cursor, disabled state and drag visuals
are driven by the instance through QtHostAdapter, not by Qt's own selection
model, so the widget runs with NoSelection and a custom drag source.
"""

import itertools
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from PyQt6.QtCore import QMimeData, Qt, pyqtSignal
from PyQt6.QtGui import QDrag
from PyQt6.QtWidgets import QListWidget, QListWidgetItem, QToolButton

logger = logging.getLogger(__name__)

# Item data roles
ITEM_ID_ROLE = Qt.ItemDataRole.UserRole
ITEM_ROLE_ROLE = Qt.ItemDataRole.UserRole + 1
DISABLED_ROLE = Qt.ItemDataRole.UserRole + 2
LABEL_ROLE = Qt.ItemDataRole.UserRole + 3
NUMBER_ROLE = Qt.ItemDataRole.UserRole + 4

DRAG_MIME_TYPE = "application/x-dragact-item"

_container_ids = itertools.count(1)
_item_ids = itertools.count(1)


class DropTargetListWidget(QListWidget):
    """QListWidget that acts as a DragAct container.

    Emits ``items_changed`` with its container id whenever items are added
    or removed by application code. Moves performed by the instance itself
    are not reported.
    """

    items_changed = pyqtSignal(str)  # container_id
    drag_finished = pyqtSignal(str)  # item_id

    def __init__(self, label: Optional[str] = None, role: Optional[str] = "listbox",
                 selection_attribute: Optional[str] = None, sortable: bool = False,
                 sort_text: str = "Sort", container_id: Optional[str] = None, parent=None):
        """Initialize drop target list.

        Args:
            label: Accessible label; required by DragAct
            role: Accessible container role
            selection_attribute: "aria-checked" or "aria-selected"; None uses the configured default
            sortable: Whether the container has a sort (drop in selection order) button
            sort_text: Sort button caption
            container_id: Stable container id; generated when omitted
            parent: Parent widget
        """
        super().__init__(parent)
        self.container_id = container_id or f"dragcontainer-{next(_container_ids)}"
        self.label = label
        self.role = role
        self.selection_attribute = selection_attribute
        self.sortable = sortable
        self.drag_filter: Optional[Callable[['DropTargetListWidget', str], bool]] = None
        self._moving = False

        if label:
            self.setAccessibleName(label)

        self.setSelectionMode(QListWidget.SelectionMode.NoSelection)
        self.setDragDropMode(QListWidget.DragDropMode.DragDrop)
        self.setDefaultDropAction(Qt.DropAction.MoveAction)
        self.setDragEnabled(True)
        self.setAcceptDrops(True)
        self.setWordWrap(True)
        self.setTextElideMode(Qt.TextElideMode.ElideNone)

        self.sort_button: Optional[QToolButton] = None
        if sortable:
            self.sort_button = QToolButton(self)
            self.sort_button.setText(sort_text)
            self.sort_button.setAccessibleName(sort_text)
            self.sort_button.setAcceptDrops(True)
            self.sort_button.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        model = self.model()
        model.rowsInserted.connect(self._on_rows_changed)
        model.rowsRemoved.connect(self._on_rows_changed)

    # ---------- Items ----------
    def add_item(self, text: str, item_id: Optional[str] = None, role: Optional[str] = "option",
                 disabled: bool = False) -> QListWidgetItem:
        """Append an item and return it."""
        item = QListWidgetItem(text)
        item.setData(ITEM_ID_ROLE, item_id or f"dragitem-{next(_item_ids)}")
        item.setData(ITEM_ROLE_ROLE, role)
        item.setData(DISABLED_ROLE, disabled)
        item.setData(LABEL_ROLE, text)
        if disabled:
            item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEnabled)
        self.addItem(item)
        return item

    def remove_item(self, item_id: str) -> Optional[QListWidgetItem]:
        item = self.item_by_id(item_id)
        if item is None:
            return None
        return self.takeItem(self.row(item))

    def item_by_id(self, item_id: str) -> Optional[QListWidgetItem]:
        for row in range(self.count()):
            item = self.item(row)
            if item.data(ITEM_ID_ROLE) == item_id:
                return item
        return None

    def item_ids(self):
        return [self.item(row).data(ITEM_ID_ROLE) for row in range(self.count())]

    def set_item_number(self, item: QListWidgetItem, number: Optional[str]) -> None:
        """Prefix the item's text with its selection number, or remove it."""
        item.setData(NUMBER_ROLE, number)
        label = item.data(LABEL_ROLE)
        item.setText(f"{number} {label}" if number else label)

    @contextmanager
    def moving(self) -> Iterator[None]:
        """Suppress ``items_changed`` while items are moved by the instance."""
        self._moving = True
        try:
            yield
        finally:
            self._moving = False

    def _on_rows_changed(self, *args) -> None:
        if not self._moving:
            self.items_changed.emit(self.container_id)

    # ---------- Layout ----------
    def resizeEvent(self, event):
        super().resizeEvent(event)
        if self.sort_button is not None:
            hint = self.sort_button.sizeHint()
            self.sort_button.setGeometry(self.width() - hint.width() - 2, 2, hint.width(), hint.height())

    # ---------- Native drag source ----------
    def startDrag(self, supportedActions):
        """Start a drag of the current item, if the drag filter allows it."""
        item = self.currentItem()
        if item is None:
            return

        item_id = item.data(ITEM_ID_ROLE)
        if self.drag_filter is not None and not self.drag_filter(self, item_id):
            logger.debug(f"Drag of {item_id} refused")
            return

        mime = QMimeData()
        mime.setData(DRAG_MIME_TYPE, item_id.encode("utf-8"))
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.exec(Qt.DropAction.MoveAction)
        self.drag_finished.emit(item_id)
