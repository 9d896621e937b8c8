"""
Service layer.

The stateful components of one drag-and-drop instance: selection, virtual
focus, transfer, drop-target marking, announcements and the arbiter shared
across instances.
"""

from .arbiter import InstanceArbiter, get_default_arbiter
from .announcement_service import AnnouncementService
from .drop_target_service import DropTargetService
from .focus_service import FocusService
from .selection_service import SelectionService, resolve_multimode
from .transfer_service import TransferService

__all__ = [
    "InstanceArbiter",
    "get_default_arbiter",
    "AnnouncementService",
    "DropTargetService",
    "FocusService",
    "SelectionService",
    "resolve_multimode",
    "TransferService",
]
