"""
Declarative table annotations.

Property level records are attached with typing.Annotated:

    class OrderLine(TableRow):
        id: Annotated[int, HiddenInput()]
        product: Annotated[Product, TableColumn(display_property='name')]
        quantity: Annotated[int, TableColumn(include_total=True)]

Class level records are attached with the decorators at the bottom of this
module (table_display, table_edit, table_link, read_only).
"""

import typing
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .error_handler import ConfigurationError

CLASS_ANNOTATIONS_ATTR = '__table_annotations__'


class DataType(Enum):
    """Data types that change how a scalar is displayed or edited."""
    EMAIL_ADDRESS = 'EmailAddress'
    MULTILINE_TEXT = 'MultilineText'
    DATE = 'Date'


class TableAnnotation:
    """Base class of all annotation records."""

    def __repr__(self):
        fields = ', '.join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


class Display(TableAnnotation):
    """
    Display metadata for a property.

    Args:
        name: Header text (defaults to the prettified attribute name)
        format_string: str.format pattern applied to the value, e.g. "{0:,.2f}"
        null_display_text: Text shown when the value is None
        data_type: Optional DataType
    """

    def __init__(self, name: Optional[str] = None, format_string: Optional[str] = None,
                 null_display_text: str = '', data_type: Optional[DataType] = None):
        if data_type is not None and not isinstance(data_type, DataType):
            raise ConfigurationError(f"data_type must be a DataType, not {data_type!r}")
        self.name = name
        self.format_string = format_string
        self.null_display_text = null_display_text
        self.data_type = data_type


class Required(TableAnnotation):
    """The property must have a value."""
    pass


class ReadOnly(TableAnnotation):
    """The property (or every property of the class) cannot be edited."""
    pass


class HiddenInput(TableAnnotation):
    """The property is posted back as a hidden input and never shown in a cell."""
    pass


class TableColumn(TableAnnotation):
    """
    Per column rendering directives.

    no_repeat is dropped when include_total is set: a totalled column always
    shows its values.
    """

    def __init__(self, exclude: bool = False, readonly: bool = False,
                 display_property: Optional[str] = None, include_total: bool = False,
                 no_repeat: bool = False):
        if display_property is not None and not display_property:
            raise ConfigurationError("display_property cannot be an empty string")
        self.exclude = exclude
        self.readonly = readonly
        self.display_property = display_property
        self.include_total = include_total
        self.no_repeat = no_repeat and not include_total


class TableLink(TableAnnotation):
    """Render a complex property (or the row itself) as a hyperlink."""

    def __init__(self, controller: Optional[str] = None, action: str = 'details',
                 id_property: str = 'id', display_property: str = 'name'):
        if not controller:
            raise ConfigurationError("TableLink requires a controller")
        self.controller = controller
        self.action = action
        self.id_property = id_property
        self.display_property = display_property


class TableDisplay(TableAnnotation):
    """Row numbers and per-row navigation links for read-only tables."""

    def __init__(self, include_row_numbers: bool = False, controller: Optional[str] = None,
                 details_action: Optional[str] = None, edit_action: Optional[str] = None,
                 id_property: str = 'id'):
        if (details_action or edit_action) and not controller:
            raise ConfigurationError("TableDisplay requires a controller when an action is set")
        self.include_row_numbers = include_row_numbers
        self.controller = controller
        self.details_action = details_action
        self.edit_action = edit_action
        self.id_property = id_property

    @property
    def include_details_link(self) -> bool:
        return self.details_action is not None

    @property
    def include_edit_link(self) -> bool:
        return self.edit_action is not None


class TableEdit(TableAnnotation):
    """Add/delete buttons and dirty/active tracking for editable tables."""

    def __init__(self, allow_additions: bool = True, allow_deletions: bool = True,
                 is_dirty_property: Optional[str] = None,
                 is_active_property: Optional[str] = None):
        self.allow_additions = allow_additions
        self.allow_deletions = allow_deletions
        self.is_dirty_property = is_dirty_property
        self.is_active_property = is_active_property


class DropDownList(TableAnnotation):
    """Edit the property with a select built from a sibling option list."""

    def __init__(self, select_list_property: Optional[str] = None, option_label: Optional[str] = '',
                 searchable: bool = False):
        if not select_list_property:
            raise ConfigurationError("DropDownList requires a select_list_property")
        self.select_list_property = select_list_property
        self.option_label = option_label
        self.searchable = searchable


class DataList(TableAnnotation):
    """Offer browser suggestions from a sibling list of strings."""

    def __init__(self, data_list_property: Optional[str] = None):
        if not data_list_property:
            raise ConfigurationError("DataList requires a data_list_property")
        self.data_list_property = data_list_property


class TableRow:
    """
    Row contract for editable tables.

    Subclasses decorated with table_edit get is_active/is_dirty tracking
    without naming the properties.
    """
    is_active: bool = True
    is_dirty: bool = False


# =============================================================================
# Lookup helpers
# =============================================================================

def annotations_of(metadata: Iterable[Any]) -> List[TableAnnotation]:
    """Return the annotation records in an Annotated metadata tuple."""
    return [item for item in metadata if isinstance(item, TableAnnotation)]


def find_annotation(records: Iterable[TableAnnotation], record_type: type) -> Optional[TableAnnotation]:
    for record in records:
        if isinstance(record, record_type):
            return record
    return None


def class_annotations(cls: type) -> List[TableAnnotation]:
    """Return the records attached to a class by the decorators (inherited ones included)."""
    return list(getattr(cls, CLASS_ANNOTATIONS_ATTR, ()))


def _resolved_hints(cls: type) -> Optional[Dict[str, Any]]:
    # Forward references may not be resolvable yet; type_properties() validates later
    try:
        return typing.get_type_hints(cls)
    except NameError:
        return None


def _require_properties(cls: type, record: TableAnnotation, *names: Optional[str]):
    hints = _resolved_hints(cls)
    if hints is None:
        return
    for name in names:
        if name is not None and name not in hints:
            raise ConfigurationError(
                f"{type(record).__name__}: '{cls.__name__}' has no property '{name}'"
            )


def _attach(cls: type, record: TableAnnotation) -> type:
    inherited = [r for r in class_annotations(cls) if not isinstance(r, type(record))]
    setattr(cls, CLASS_ANNOTATIONS_ATTR, tuple([record] + inherited))
    return cls


# =============================================================================
# Class decorators
# =============================================================================

def table_display(**options):
    """Attach TableDisplay options to a row class."""
    record = TableDisplay(**options)

    def decorator(cls):
        if record.include_details_link or record.include_edit_link:
            _require_properties(cls, record, record.id_property)
        return _attach(cls, record)
    return decorator


def table_edit(**options):
    """
    Attach TableEdit options to a row class.

    Subclasses of TableRow always track is_active/is_dirty.
    """
    def decorator(cls):
        record = TableEdit(**options)
        if issubclass(cls, TableRow):
            record.is_active_property = 'is_active'
            record.is_dirty_property = 'is_dirty'
        _require_properties(cls, record, record.is_active_property, record.is_dirty_property)
        return _attach(cls, record)
    return decorator


def table_link(**options):
    """Render the row's display property as a link to the row itself."""
    record = TableLink(**options)

    def decorator(cls):
        _require_properties(cls, record, record.id_property, record.display_property)
        return _attach(cls, record)
    return decorator


def read_only(cls):
    """Make every property of the class read-only in editable tables."""
    return _attach(cls, ReadOnly())
