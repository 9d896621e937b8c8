"""
Qt widget layer.

The drop-target list widget, the HostAdapter over a QWidget subtree and the
event bridge that feeds Qt input to a DragAct instance.
"""

from .drop_target_list import DRAG_MIME_TYPE, DropTargetListWidget
from .event_bridge import QtEventBridge
from .qt_host import QtHostAdapter, resolve_scope

__all__ = [
    "DRAG_MIME_TYPE",
    "DropTargetListWidget",
    "QtEventBridge",
    "QtHostAdapter",
    "resolve_scope",
]
