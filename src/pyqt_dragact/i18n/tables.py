"""
Locale tables for accessible descriptions.

Every table maps a fixed set of message keys to non-empty template strings.
Since all of this text is only ever heard through assistive technology, and
authors rarely test with a screen reader, registration is validated eagerly
and a bad table is rejected before anything is stored.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from pyqt_dragact.exceptions import LocaleDataError
from pyqt_dragact.i18n.negotiation import negotiate

logger = logging.getLogger(__name__)

# --- Module-level constants ---
DEFAULT_CODE = "en"

REQUIRED_KEYS = (
    "role-description",
    "selection-notes",
    "empty-notes",
    "drop-notes",
    "sort-notes",
    "sort-number",
    "selected-items",
    "dropped-items",
    "item-single",
    "item-plural",
)

# Placeholder tokens each parameterized template must carry
REQUIRED_TOKENS: Dict[str, Sequence[str]] = {
    "role-description": ("{{role}}",),
    "sort-number": ("{{number}}",),
    "selected-items": ("{{count}}", "{{items}}"),
    "dropped-items": ("{{count}}", "{{items}}"),
}

DEFAULT_TABLES: Dict[str, Dict[str, str]] = {
    "en": {
        "role-description": "{{role}} drag and drop",
        "selection-notes": "To choose items press Space.",
        "empty-notes": "No items.",
        "drop-notes": "To drop items press Enter.",
        "sort-notes": "Sort by chosen order.",
        "sort-number": "#{{number}}",
        "selected-items": "{{count}} {{items}} checked.",
        "dropped-items": "{{count}} {{items}} dropped.",
        "item-single": "item",
        "item-plural": "items",
    },
    "it": {
        "role-description": "{{role}} drag and drop",
        "selection-notes": "Per scegliere l elemento premere Barra Spaziatrice.",
        "empty-notes": "Non ci sono definizioni.",
        "drop-notes": "Per rilasciare l elemento selezionato premere Invio",
        "sort-notes": "Riordina scegliendo l ordine",
        "sort-number": "#{{number}}",
        "selected-items": "{{count}} {{items}} selezionate.",
        "dropped-items": "{{count}} {{items}} spostate.",
        "item-single": "elemento",
        "item-plural": "elementi",
    },
}


def render(template: str, **tokens) -> str:
    """Replace ``{{name}}`` tokens in a template with the given values."""
    for name, value in tokens.items():
        template = template.replace(f"{{{{{name}}}}}", str(value))
    return template


def render_count(table: Mapping[str, str], key: str, count: int) -> str:
    """Render a count template with the singular or plural item noun."""
    noun = table["item-single"] if count == 1 else table["item-plural"]
    return render(table[key], count=count, items=noun)


def validate_table(code: str, strings: Mapping[str, str]) -> Dict[str, str]:
    """
    Validate one locale table and return a filtered copy.

    Unexpected keys are dropped. Values are not trimmed.

    Args:
        code: Language tag the table is registered under
        strings: Mapping of message keys to templates

    Returns:
        New dict containing exactly the required keys

    Raises:
        LocaleDataError: Empty code, non-mapping data, missing keys,
            empty or non-string values, or missing placeholder tokens
    """
    if not isinstance(code, str) or not code.strip():
        raise LocaleDataError(f'The language code "{code}" is not valid.')

    if not isinstance(strings, Mapping):
        raise LocaleDataError(f'The language data for "{code}" must be a mapping of strings.')

    table = {key: value for key, value in strings.items() if key in REQUIRED_KEYS}

    missing = [key for key in REQUIRED_KEYS if key not in table]
    if missing:
        raise LocaleDataError(
            f'The language data for "{code}" is missing expected values ("{", ".join(missing)}").'
        )

    invalid = [key for key in REQUIRED_KEYS if not (isinstance(table[key], str) and table[key].strip())]
    if invalid:
        raise LocaleDataError(
            f'The language data for "{code}" contains invalid or empty values ("{", ".join(invalid)}").'
        )

    notokens = [
        key for key, tokens in REQUIRED_TOKENS.items()
        if any(token not in table[key] for token in tokens)
    ]
    if notokens:
        raise LocaleDataError(
            f'The language data for "{code}" is missing expected tokens ("{", ".join(notokens)}").'
        )

    return {key: table[key] for key in REQUIRED_KEYS}


class LocaleRegistry:
    """
    Registry of locale tables indexed by lower-cased language tag.

    Each table in a registration is validated and stored on its own: a bad
    table raises before it touches the registry, while tables that came
    before it in the same call stay registered.
    """

    def __init__(self, tables: Optional[Mapping[str, Mapping[str, str]]] = None,
                 default_code: str = DEFAULT_CODE):
        self._tables: Dict[str, Dict[str, str]] = {}
        self._default_code = default_code
        self.register(DEFAULT_TABLES if tables is None else tables)
        if default_code not in self._tables:
            raise LocaleDataError(f'The default language "{default_code}" has no table.')

    @property
    def default_code(self) -> str:
        return self._default_code

    def register(self, tables: Mapping[str, Mapping[str, str]]) -> None:
        """Validate and add (or replace) locale tables."""
        if not isinstance(tables, Mapping):
            raise LocaleDataError("The language data must be a mapping of language codes to tables.")
        for code, strings in tables.items():
            table = validate_table(code, strings)
            key = code.strip().lower()
            self._tables[key] = table
            logger.debug(f"Registered locale table {key!r}")

    def codes(self) -> List[str]:
        return list(self._tables)

    def get(self, code: str) -> Dict[str, str]:
        """Return a copy of the table for code, or of the default table."""
        return dict(self._tables.get(code.lower(), self._tables[self._default_code]))

    def tables(self) -> Dict[str, Dict[str, str]]:
        return {code: dict(table) for code, table in self._tables.items()}

    def negotiate(self, wanted: Sequence[str]) -> str:
        """Return the registered tag that best matches the wanted tags."""
        return negotiate(wanted, self.codes(), default=self._default_code)

    def __contains__(self, code: str) -> bool:
        return code.lower() in self._tables


# Global registry instance (shared by every DragAct)
_locale_registry: Optional[LocaleRegistry] = None


def get_locale_registry() -> LocaleRegistry:
    """Get the process-wide locale registry, creating it on first use."""
    global _locale_registry
    if _locale_registry is None:
        _locale_registry = LocaleRegistry()
    return _locale_registry


def set_locale_registry(registry: Optional[LocaleRegistry]) -> None:
    """Replace the process-wide locale registry (None resets to defaults)."""
    global _locale_registry
    _locale_registry = registry
