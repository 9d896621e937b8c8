"""
Qt event bridge.

Translates Qt input into DragAct's modality-neutral event records and feeds
them to the instance handlers. Scoped events are observed through event
filters on each container (keys and focus), its viewport (pointer and drag)
and its sort button. Document-level events (any pointer press/release, any
Escape) are observed through an application filter restricted to window
objects, so each physical event is seen once.
"""

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from PyQt6.QtCore import QEvent, QObject, Qt, QTimer
from PyQt6.QtGui import QInputDevice, QWindow
from PyQt6.QtWidgets import QApplication, QWidget

from pyqt_dragact.model.events import DragEvent, KeyEvent, PointerEvent
from pyqt_dragact.widgets.drop_target_list import DRAG_MIME_TYPE, ITEM_ID_ROLE, DropTargetListWidget

if TYPE_CHECKING:
    from pyqt_dragact.controller import DragAct
    from pyqt_dragact.widgets.qt_host import QtHostAdapter

logger = logging.getLogger(__name__)

KEY_NAMES = {
    Qt.Key.Key_Space: " ",
    Qt.Key.Key_Down: "arrowdown",
    Qt.Key.Key_Right: "arrowright",
    Qt.Key.Key_Up: "arrowup",
    Qt.Key.Key_Left: "arrowleft",
    Qt.Key.Key_PageDown: "pagedown",
    Qt.Key.Key_PageUp: "pageup",
    Qt.Key.Key_Home: "home",
    Qt.Key.Key_End: "end",
    Qt.Key.Key_Return: "enter",
    Qt.Key.Key_Enter: "enter",
    Qt.Key.Key_Escape: "escape",
    Qt.Key.Key_X: "x",
    Qt.Key.Key_A: "a",
    Qt.Key.Key_V: "v",
    Qt.Key.Key_S: "s",
}

BUTTONS = {
    Qt.MouseButton.LeftButton: 0,
    Qt.MouseButton.MiddleButton: 1,
    Qt.MouseButton.RightButton: 2,
}

POINTER_TYPES = {
    QInputDevice.DeviceType.TouchScreen: "touch",
    QInputDevice.DeviceType.TouchPad: "touch",
    QInputDevice.DeviceType.Stylus: "pen",
    QInputDevice.DeviceType.Airbrush: "pen",
}

Target = Tuple[Optional[str], Optional[str], bool]


def key_name(key: int) -> str:
    """Map a Qt key code to a DragAct key name ("" when not handled)."""
    try:
        return KEY_NAMES.get(Qt.Key(key), "")
    except ValueError:
        return ""


def modifier_flags(modifiers) -> Tuple[bool, bool, bool]:
    """Return (shift, ctrl, meta) from Qt keyboard modifiers."""
    return (
        bool(modifiers & Qt.KeyboardModifier.ShiftModifier),
        bool(modifiers & Qt.KeyboardModifier.ControlModifier),
        bool(modifiers & Qt.KeyboardModifier.MetaModifier),
    )


def pointer_type(event) -> str:
    device = event.pointingDevice()
    if device is None:
        return "mouse"
    return POINTER_TYPES.get(device.type(), "mouse")


class _WindowEventFilter(QObject):
    """Application-wide filter that only looks at window-level events."""

    def __init__(self, bridge: 'QtEventBridge'):
        super().__init__(bridge)
        self._bridge = bridge

    def eventFilter(self, obj, event) -> bool:
        if isinstance(obj, QWindow):
            return self._bridge.document_event(event)
        return False


class QtEventBridge(QObject):
    """Routes Qt events of one QtHostAdapter to one DragAct instance."""

    def __init__(self, adapter: 'QtHostAdapter', instance: 'DragAct', parent: Optional[QObject] = None):
        super().__init__(parent)
        self._adapter = adapter
        self._instance = instance
        self._changed: List[str] = []
        self._batch_scheduled = False

        for widget in adapter.widgets():
            self.attach(widget)

        self._window_filter = _WindowEventFilter(self)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self._window_filter)

    def attach(self, widget: DropTargetListWidget) -> None:
        widget.installEventFilter(self)
        widget.viewport().installEventFilter(self)
        if widget.sort_button is not None:
            widget.sort_button.installEventFilter(self)
        widget.drag_filter = self._drag_filter
        widget.drag_finished.connect(self._on_drag_finished)
        widget.items_changed.connect(self._on_items_changed)

    def detach(self) -> None:
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self._window_filter)

        for widget in self._adapter.widgets():
            widget.removeEventFilter(self)
            widget.viewport().removeEventFilter(self)
            if widget.sort_button is not None:
                widget.sort_button.removeEventFilter(self)
            widget.drag_filter = None
            widget.drag_finished.disconnect(self._on_drag_finished)
            widget.items_changed.disconnect(self._on_items_changed)

    # ---------- Target resolution ----------
    def _container_of(self, obj: Any) -> Tuple[Optional[DropTargetListWidget], bool]:
        """Return (container widget, is_sort_button) for a watched object."""
        for widget in self._adapter.widgets():
            if obj is widget or obj is widget.viewport():
                return widget, False
            if widget.sort_button is not None and obj is widget.sort_button:
                return widget, True
        return None, False

    def _target_at(self, obj: Any, position) -> Target:
        widget, on_sort_button = self._container_of(obj)
        if widget is None:
            return None, None, False
        item = None
        if not on_sort_button and obj is widget.viewport():
            item = widget.itemAt(position.toPoint())
        return widget.container_id, item.data(ITEM_ID_ROLE) if item else None, on_sort_button

    def _target_under(self, global_position) -> Target:
        """Resolve the container/item under a global position, walking up to a watched widget."""
        widget = QApplication.widgetAt(global_position.toPoint())
        while widget is not None:
            container, _ = self._container_of(widget)
            if container is not None:
                return self._target_at(widget, widget.mapFromGlobal(global_position))
            widget = widget.parentWidget()
        return None, None, False

    def _pointer_event(self, event, target: Target) -> PointerEvent:
        shift, ctrl, meta = modifier_flags(event.modifiers())
        container_id, item_id, on_sort_button = target
        return PointerEvent(
            container_id=container_id,
            item_id=item_id,
            on_sort_button=on_sort_button,
            button=BUTTONS.get(event.button(), 3),
            click_count=2 if event.type() == QEvent.Type.MouseButtonDblClick else 1,
            shift=shift,
            ctrl=ctrl,
            meta=meta,
            pointer_type=pointer_type(event),
        )

    def _drag_event(self, target: Target, inside_scope: bool = True) -> DragEvent:
        shift, ctrl, meta = modifier_flags(QApplication.keyboardModifiers())
        container_id, item_id, on_sort_button = target
        return DragEvent(container_id, item_id, on_sort_button, shift, ctrl, meta, inside_scope)

    # ---------- Event filter ----------
    def eventFilter(self, obj, event) -> bool:
        kind = event.type()

        if kind in (QEvent.Type.MouseButtonPress, QEvent.Type.MouseButtonDblClick):
            pointer = self._pointer_event(event, self._target_at(obj, event.position()))
            if pointer.container_id is not None:
                return self._instance.on_pointer_down(pointer)

        elif kind == QEvent.Type.MouseButtonRelease:
            pointer = self._pointer_event(event, self._target_at(obj, event.position()))
            if pointer.container_id is not None:
                return self._instance.on_pointer_up(pointer)

        elif kind == QEvent.Type.KeyPress:
            widget, on_sort_button = self._container_of(obj)
            if widget is not None and obj is not widget.viewport():
                return self._instance.on_key_down(self._key_event(event, widget.container_id, on_sort_button))

        elif kind == QEvent.Type.FocusIn:
            widget, on_sort_button = self._container_of(obj)
            if widget is not None:
                self._instance.on_focus(widget.container_id, on_sort_button)

        elif kind == QEvent.Type.FocusOut:
            widget, on_sort_button = self._container_of(obj)
            if widget is not None and not on_sort_button:
                self._instance.on_focus_out(widget.container_id)

        elif kind in (QEvent.Type.DragEnter, QEvent.Type.DragMove, QEvent.Type.Drop):
            return self._drag_target_event(obj, kind, event)

        elif kind == QEvent.Type.DragLeave:
            if self._container_of(obj)[0] is not None:
                self._instance.on_drag_enter(self._drag_event((None, None, False), inside_scope=False))
                self._instance.on_drag_leave(self._drag_event((None, None, False), inside_scope=False))

        return False

    def document_event(self, event) -> bool:
        """Window-level events: anywhere in the application."""
        kind = event.type()
        if kind == QEvent.Type.MouseButtonPress:
            target = self._target_under(event.globalPosition())
            self._instance.on_document_pointer_down(self._pointer_event(event, target))

        elif kind == QEvent.Type.MouseButtonRelease:
            # Runs after the scoped release handler has seen the same event
            pointer = self._pointer_event(event, self._target_under(event.globalPosition()))
            QTimer.singleShot(0, lambda: self._instance.on_document_pointer_up(pointer))

        elif kind == QEvent.Type.KeyPress and key_name(event.key()) == "escape":
            focused = QApplication.focusWidget()
            widget, _ = self._container_of(focused)
            container_id = widget.container_id if widget is not None else None
            key = self._key_event(event, container_id, False, inside_scope=self._adapter.contains(focused))
            return self._instance.on_document_key_down(key)

        return False

    def _key_event(self, event, container_id: Optional[str], on_sort_button: bool,
                   inside_scope: bool = True) -> KeyEvent:
        shift, ctrl, meta = modifier_flags(event.modifiers())
        return KeyEvent(
            key=key_name(event.key()),
            container_id=container_id,
            on_sort_button=on_sort_button,
            shift=shift,
            ctrl=ctrl,
            meta=meta,
            repeat=event.isAutoRepeat(),
            inside_scope=inside_scope,
        )

    def _drag_target_event(self, obj, kind, event) -> bool:
        widget, _ = self._container_of(obj)
        if widget is None or not event.mimeData().hasFormat(DRAG_MIME_TYPE):
            return False

        drag = self._drag_event(self._target_at(obj, event.position()))
        if kind == QEvent.Type.DragEnter:
            self._instance.on_drag_enter(drag)
            self._instance.on_drag_leave(drag)
            event.acceptProposedAction()
        elif kind == QEvent.Type.DragMove:
            if self._instance.on_drag_over(drag):
                event.acceptProposedAction()
            else:
                event.ignore()
        else:
            # Items are moved by the instance; Qt must not remove the source row
            self._instance.on_drop(drag)
            event.setDropAction(Qt.DropAction.IgnoreAction)
            event.accept()
        return True

    # ---------- Drag source ----------
    def _drag_filter(self, widget: DropTargetListWidget, item_id: str) -> bool:
        return self._instance.on_drag_start(self._drag_event((widget.container_id, item_id, False)))

    def _on_drag_finished(self, item_id: str) -> None:
        self._instance.on_drag_end(self._drag_event((None, item_id, False), inside_scope=False))

    # ---------- Structural mutation ----------
    def _on_items_changed(self, container_id: str) -> None:
        """Collect changes and deliver them as one batch on the next event loop turn."""
        if container_id not in self._changed:
            self._changed.append(container_id)
        if not self._batch_scheduled:
            self._batch_scheduled = True
            QTimer.singleShot(0, self.flush_changes)

    def flush_changes(self) -> None:
        batch, self._changed = self._changed, []
        self._batch_scheduled = False
        if batch:
            logger.debug(f"Delivering item changes for {batch}")
            self._instance.on_items_changed(batch)
