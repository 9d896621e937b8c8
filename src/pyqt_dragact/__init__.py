"""
pyqt-dragact: accessible multi-modal drag and drop for PyQt6.

Lets users move items between labelled containers with pointer, touch,
native drag or keyboard alone, with every state change exposed to assistive
technology through accessible states and delayed, supersedable descriptions.

Architecture:
- Tier 1 (Core): Pure PyQt6 utilities (debounce timer)
- Tier 2 (Protocols): Host and arbiter ABCs, global configuration
- Tier 3 (Model/Services): Container registry, selection state machine,
  virtual focus, transfer, drop-target marking, announcements, arbiter
- Tier 4 (Widgets): DropTargetListWidget, QtHostAdapter, QtEventBridge

Key Features:
- One selection per instance, one active selection across instances
- Exclusive, non-contiguous and contiguous selection from any modality
- Drops in node order or in selection order (sort)
- Localized descriptions with BCP47 language negotiation
"""

__version__ = "0.1.0"

from pyqt_dragact.controller import DragAct
from pyqt_dragact.exceptions import (
    ConfigurationError,
    DragActError,
    LocaleDataError,
    MissingLabelError,
    MissingRoleError,
    PlatformFlagError,
    ScopeResolutionError,
)
from pyqt_dragact.protocols import DragActConfig, get_dragact_config, set_dragact_config

__all__ = [
    "__version__",
    "DragAct",
    "DragActConfig",
    "get_dragact_config",
    "set_dragact_config",
    "DragActError",
    "ConfigurationError",
    "ScopeResolutionError",
    "MissingRoleError",
    "MissingLabelError",
    "LocaleDataError",
    "PlatformFlagError",
]
