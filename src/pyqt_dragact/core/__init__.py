"""
Core PyQt6 utilities.

Pure PyQt6 utility components with no domain-specific logic.
"""

from .debounce_timer import DebounceTimer

__all__ = [
    "DebounceTimer",
]
