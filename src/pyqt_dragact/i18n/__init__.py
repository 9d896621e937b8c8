"""
Localization for accessible descriptions.

Locale tables, their validation, and BCP47 language negotiation.
"""

from .negotiation import negotiate, normalize_tags, subcodes
from .tables import (
    DEFAULT_CODE,
    DEFAULT_TABLES,
    REQUIRED_KEYS,
    REQUIRED_TOKENS,
    LocaleRegistry,
    get_locale_registry,
    set_locale_registry,
    render,
    render_count,
    validate_table,
)

__all__ = [
    "negotiate",
    "normalize_tags",
    "subcodes",
    "DEFAULT_CODE",
    "DEFAULT_TABLES",
    "REQUIRED_KEYS",
    "REQUIRED_TOKENS",
    "LocaleRegistry",
    "get_locale_registry",
    "set_locale_registry",
    "render",
    "render_count",
    "validate_table",
]
