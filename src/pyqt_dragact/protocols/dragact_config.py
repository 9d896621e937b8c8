"""Base configuration class for drag-and-drop instances.

Provides hooks for applications to customize timing and accessibility defaults.
"""

from typing import Optional
from dataclasses import dataclass

# Accessibility attribute names for the two selection schemes
CHECKED_STATE = "aria-checked"
SELECTED_STATE = "aria-selected"


@dataclass
class DragActConfig:
    """Base configuration for drag-and-drop behavior.

    Applications can subclass this to provide custom configuration.

    Attributes:
        announce_delay_ms: Delay before description text is applied, so the
            selection or active-state change reaches AT first
        page_step: Number of items PageUp/PageDown move virtual focus by
        placeholder_text: Text used for a cleared description (never empty,
            some AT stop announcing elements that were ever empty)
        default_selection_attribute: Selection scheme for containers that
            don't declare one (the lockable-state scheme by default)
        single_choice_role: Item role that locks a container to single selection
        platform_language: Platform/user language tag; None reads QLocale.system()
    """

    announce_delay_ms: int = 250
    page_step: int = 5
    placeholder_text: str = "\u200b"
    default_selection_attribute: str = CHECKED_STATE
    single_choice_role: str = "radio"
    platform_language: Optional[str] = None


# Global config instance (set by application)
_dragact_config: Optional[DragActConfig] = None


def set_dragact_config(config: Optional[DragActConfig]) -> None:
    """Set the global drag-and-drop configuration.

    Args:
        config: DragActConfig instance, or None to restore defaults
    """
    global _dragact_config
    _dragact_config = config


def get_dragact_config() -> DragActConfig:
    """Get the current drag-and-drop configuration.

    Returns:
        Current DragActConfig or default if not set
    """
    if _dragact_config is None:
        return DragActConfig()
    return _dragact_config
