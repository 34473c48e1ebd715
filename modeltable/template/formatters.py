"""
Formatting functions for table cells and form values.
"""

import base64
import re
from datetime import date, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from ..config import TableSettings, get_settings
from ..metadata import PropertyDescriptor, PropertyKind, PropertyMetadata

DEFAULT_FORMAT = '{0}'
INTEGRAL_TOTAL_FORMAT = '{0:,.0f}'
FRACTIONAL_TOTAL_FORMAT = '{0:,.2f}'

_PRECISION_PATTERN = re.compile(r'\.(\d+)[fFeE%]')


def enum_display_name(member: Optional[Enum]) -> Optional[str]:
    """
    Return the display name of an enum member.

    Members may carry a display_name attribute (or property); otherwise the
    member name is used.

    Example:
        >>> class Status(Enum):
        ...     OPEN = 1
        ...     @property
        ...     def display_name(self):
        ...         return self.name.title()
        >>> enum_display_name(Status.OPEN)
        'Open'
    """
    if member is None:
        return None
    display_name = getattr(member, 'display_name', None)
    if display_name:
        return str(display_name)
    return member.name


def format_boolean(value: bool, settings: Optional[TableSettings] = None) -> str:
    settings = settings or get_settings()
    return settings.yes_text if value else settings.no_text


def formatted_value(descriptor: PropertyDescriptor, settings: Optional[TableSettings] = None) -> str:
    """
    Return the display text of a property value.

    None shows the null display text, booleans show Yes/No, enums their
    display name, everything else goes through the format string.
    """
    value = descriptor.value
    if value is None:
        return descriptor.null_display_text
    if descriptor.kind is PropertyKind.BOOLEAN:
        return format_boolean(value, settings)
    if descriptor.kind is PropertyKind.ENUM:
        return enum_display_name(value)
    format_string = descriptor.format_string or DEFAULT_FORMAT
    return format_string.format(value)


def totals_format_string(metadata: PropertyMetadata) -> str:
    """Explicit format string, else no decimals for integral types and two otherwise."""
    if metadata.format_string:
        return metadata.format_string
    if metadata.is_integral:
        return INTEGRAL_TOTAL_FORMAT
    return FRACTIONAL_TOTAL_FORMAT


def format_decimals(format_string: str) -> int:
    """Number of decimals the client uses when it recomputes a total."""
    match = _PRECISION_PATTERN.search(format_string or '')
    if match:
        return int(match.group(1))
    return 0 if format_string == INTEGRAL_TOTAL_FORMAT else 2


def format_total(total: Decimal, format_string: str) -> str:
    return format_string.format(total)


def format_client_total(total: Decimal, decimals: int) -> str:
    """Format a total the way the client script does (grouped, fixed decimals)."""
    return f"{total:,.{decimals}f}"


def to_decimal(value: Any) -> Decimal:
    """Convert a value for totals accumulation; None and blanks count as zero."""
    if value is None or value == '':
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        return Decimal(str(value).replace(',', ''))
    except InvalidOperation:
        return Decimal(0)


def input_value(value: Any) -> str:
    """
    Return the wire format of a value for an input's value attribute.

    Example:
        >>> input_value(True)
        'True'
        >>> input_value(None)
        ''
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'True' if value else 'False'
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode('ascii')
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
