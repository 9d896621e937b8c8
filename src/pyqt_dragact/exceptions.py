"""Drag-and-drop exceptions.

Configuration errors are fatal and raised synchronously while an instance is
being set up. Runtime conditions (selecting a disabled item, dropping with no
target, ...) never raise; they are absorbed as no-ops by the services.
"""


class DragActError(Exception):
    """Base class for all pyqt-dragact errors."""


class ConfigurationError(DragActError):
    """Raised when setup input is invalid. The caller must fix it and reconstruct."""


class ScopeResolutionError(ConfigurationError):
    """Raised when the root scope of an instance cannot be resolved."""


class MissingRoleError(ConfigurationError):
    """Raised when a container or draggable item has no explicit role."""


class MissingLabelError(ConfigurationError):
    """Raised when a container has no labelling reference."""


class LocaleDataError(ConfigurationError, ValueError):
    """Raised when a locale table registration is malformed."""


class PlatformFlagError(ConfigurationError):
    """Raised when the platform patches flag is invalid or set too late."""
