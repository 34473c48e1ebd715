"""
Settings for table rendering.

Display texts and placeholder tokens default to the values the client
script expects and can be overridden through MODELTABLE_* environment
variables (a .env file is honoured) or, in a Flask application, through
app.config keys of the same name.
"""

import os
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv

from .constants import FALSE_VALUES
from .logger import logger

load_dotenv()

ENV_PREFIX = 'MODELTABLE_'


def validate_environment_variable(
    var_name: str,
    default: Any,
    validator: Optional[Callable[[Any], bool]] = None,
    converter: Optional[Callable[[str], Any]] = None,
    environ: Optional[Dict[str, str]] = None
) -> Any:
    """
    Safely get and validate an environment variable.

    Args:
        var_name: Name of the environment variable
        default: Default value if not set or invalid
        validator: Optional validation function
        converter: Optional conversion function (e.g., int, float)
        environ: Mapping to read from instead of os.environ

    Returns:
        The validated and converted environment variable value
    """
    source = os.environ if environ is None else environ
    raw_value = source.get(var_name)

    if raw_value is None:
        return default

    if converter:
        try:
            value = converter(raw_value)
        except (ValueError, TypeError) as exc:
            logger.warning(
                f"Invalid {var_name}='{raw_value}': {exc}. Using default: {default}"
            )
            return default
    else:
        value = raw_value

    if validator and not validator(value):
        logger.warning(
            f"Invalid {var_name}='{value}' failed validation. Using default: {default}"
        )
        return default

    logger.debug(f"Using {var_name}={value}")
    return value


def _to_bool(raw_value: str) -> bool:
    return str(raw_value).strip().lower() not in FALSE_VALUES


def _is_token(value: str) -> bool:
    # Tokens are substituted inside attribute values so they must be short and quote free
    return 0 < len(value) <= 8 and not any(c in value for c in '"\'<>[]')


class TableSettings:
    """
    Display texts and tokens used while rendering tables.

    Args:
        yes_text: Text shown for a true boolean value
        no_text: Text shown for a false boolean value
        row_number_header: Header text of the row number column
        details_text: Text of the per-row details link
        edit_text: Text of the per-row edit link
        index_placeholder: Row index token used in the names of the template row
        indexer_placeholder: Value of the template row's Index input
        validate_controls: Whether editable controls carry data-val-* attributes
    """

    _FIELDS = {
        'yes_text': ('YES_TEXT', 'Yes', None, None),
        'no_text': ('NO_TEXT', 'No', None, None),
        'row_number_header': ('ROW_NUMBER_HEADER', 'No.', None, None),
        'details_text': ('DETAILS_TEXT', 'Details', None, None),
        'edit_text': ('EDIT_TEXT', 'Edit', None, None),
        'index_placeholder': ('INDEX_PLACEHOLDER', '#', _is_token, None),
        'indexer_placeholder': ('INDEXER_PLACEHOLDER', '%', _is_token, None),
        'validate_controls': ('VALIDATE_CONTROLS', True, None, _to_bool),
    }

    def __init__(self, yes_text: str = 'Yes', no_text: str = 'No',
                 row_number_header: str = 'No.', details_text: str = 'Details',
                 edit_text: str = 'Edit', index_placeholder: str = '#',
                 indexer_placeholder: str = '%', validate_controls: bool = True):
        self.yes_text = yes_text
        self.no_text = no_text
        self.row_number_header = row_number_header
        self.details_text = details_text
        self.edit_text = edit_text
        self.index_placeholder = index_placeholder
        self.indexer_placeholder = indexer_placeholder
        self.validate_controls = validate_controls

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, Any]] = None) -> 'TableSettings':
        """
        Build settings from MODELTABLE_* variables.

        Args:
            environ: Mapping to read from (os.environ by default, or a Flask app.config)

        Returns:
            TableSettings with invalid values replaced by their defaults
        """
        values = {}
        for attr, (suffix, default, validator, converter) in cls._FIELDS.items():
            values[attr] = validate_environment_variable(
                ENV_PREFIX + suffix, default,
                validator=validator, converter=converter, environ=environ
            )
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {attr: getattr(self, attr) for attr in self._FIELDS}


_settings: Optional[TableSettings] = None


def get_settings() -> TableSettings:
    """Return the process wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = TableSettings.from_env()
    return _settings


def configure(settings: TableSettings) -> TableSettings:
    """Replace the process wide settings."""
    global _settings
    _settings = settings
    return _settings


def reset_settings():
    """Forget the loaded settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
