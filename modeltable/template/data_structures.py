"""
Data structures shared by the table renderers.

A ColumnPlan is built once per render and consumed by every pass (header,
body, validation rows, footer); the TableRenderContext threads the mutable
state of one render through those passes.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from markupsafe import Markup

from ..annotations import TableEdit, TableLink
from ..config import TableSettings


class SelectListItem:
    """
    An option of a select list.

    Args:
        value: Value posted back when the option is selected
        text: Display text
        selected: Whether the option is selected
    """

    def __init__(self, value: Any, text: Any, selected: bool = False):
        self.value = None if value is None else str(value)
        self.text = '' if text is None else str(text)
        self.selected = selected

    @classmethod
    def coerce(cls, item: Any) -> 'SelectListItem':
        """Accept SelectListItem, (value, text) tuples and dicts with value/text keys."""
        if isinstance(item, SelectListItem):
            return cls(item.value, item.text, item.selected)
        if isinstance(item, dict):
            return cls(item.get('value'), item.get('text', item.get('label')), item.get('selected', False))
        if isinstance(item, (tuple, list)) and len(item) == 2:
            return cls(item[0], item[1])
        raise TypeError(f"Cannot use {item!r} as a select list item")

    def __repr__(self):
        return f"SelectListItem({self.value!r}, {self.text!r}, selected={self.selected})"


class ColumnDescriptor:
    """
    One column of a table, derived from a leaf (or decision point) of the
    row type's property tree.

    Args:
        path: Property names from the row to the property this column renders
        header_text: Header cell text
    """

    def __init__(self, path: Tuple[str, ...], header_text: Optional[str] = None):
        self.path = path
        self.header_text = header_text
        self.is_excluded = False
        self.is_hidden = False
        self.is_active_flag = False
        self.is_dirty_flag = False
        self.is_link = False
        self.link: Optional[TableLink] = None
        # Path of the object that supplies the link's id and text
        self.link_path: Tuple[str, ...] = ()
        self.is_email = False
        self.no_repeat = False
        self.previous_value: Optional[str] = None
        self.include_totals = False
        self.column_total = Decimal(0)
        self.format_string: Optional[str] = None
        self.is_readonly = False
        self.require_validation = False
        self.display_property: Optional[str] = None
        self.data_list_property: Optional[str] = None
        self.select_list_property: Optional[str] = None
        # Name of the control rendered for the current row
        self.field_name: Optional[str] = None

    @property
    def property_name(self) -> str:
        return self.path[-1] if self.path else ''

    @property
    def has_display_property(self) -> bool:
        return self.display_property is not None

    @property
    def is_visible(self) -> bool:
        return not (self.is_excluded or self.is_hidden)

    def suppress_repeat(self, text: str) -> str:
        """Blank the text if it equals this column's value in the previous row."""
        if not self.no_repeat:
            return text
        if text == self.previous_value:
            return ''
        self.previous_value = text
        return text

    def add_to_total(self, amount: Decimal):
        self.column_total += amount

    def __repr__(self):
        flags = [name for name in ('is_excluded', 'is_hidden', 'is_link', 'no_repeat', 'include_totals', 'is_readonly')
                 if getattr(self, name)]
        return f"ColumnDescriptor({'.'.join(self.path)!r}, {flags})"


class ColumnPlan(list):
    """Ordered column descriptors shared by every rendering pass of one table."""

    def visible(self) -> List[ColumnDescriptor]:
        return [column for column in self if column.is_visible]

    @property
    def has_totals(self) -> bool:
        return any(column.include_totals for column in self)

    def last_visible(self) -> Optional[ColumnDescriptor]:
        for column in reversed(self):
            if column.is_visible:
                return column
        return None


class TableRenderContext:
    """
    Mutable state of one table render.

    Exactly one instance exists per render and it is never shared, so
    concurrent renders cannot interfere.

    Args:
        field_name: Fully qualified name of the rendered collection
        is_edit_mode: True for an editable table
        settings: Display texts and tokens
        url_builder: Callable (controller, action, id) -> url for links
    """

    def __init__(self, field_name: str, is_edit_mode: bool, settings: TableSettings,
                 url_builder=None):
        self.field_name = field_name
        self.is_edit_mode = is_edit_mode
        self.settings = settings
        self.url_builder = url_builder
        self.columns = ColumnPlan()

        # Read-only table options
        self.include_row_numbers = False
        self.include_details_link = False
        self.include_edit_link = False
        self.row_controller: Optional[str] = None
        self.details_action: Optional[str] = None
        self.edit_action: Optional[str] = None
        self.id_property: Optional[str] = None
        # Class level link of the row type
        self.row_link: Optional[TableLink] = None

        # Editable table options
        self.allow_additions = False
        self.allow_deletions = False
        self.is_active_property: Optional[str] = None
        self.is_dirty_property: Optional[str] = None
        self.data_lists: Dict[str, List[str]] = {}
        self.select_lists: Dict[str, List[SelectListItem]] = {}

        # Per-row state
        self.is_archived = False
        self.hidden_inputs: List[Markup] = []

    def apply_edit_options(self, options: Optional[TableEdit]):
        if options is None:
            return
        self.allow_additions = options.allow_additions
        self.allow_deletions = options.allow_deletions
        self.is_active_property = options.is_active_property
        self.is_dirty_property = options.is_dirty_property

    @property
    def include_buttons(self) -> bool:
        return self.is_edit_mode and (self.allow_additions or self.allow_deletions)

    @property
    def include_footer(self) -> bool:
        return self.include_buttons or self.columns.has_totals

    def start_row(self, is_archived: bool = False):
        """Reset the per-row state before a row is rendered."""
        self.is_archived = is_archived
        self.hidden_inputs = []

    def add_hidden_input(self, html: Markup):
        if html:
            self.hidden_inputs.append(html)

    def leading_structural_count(self) -> int:
        return 1 if (not self.is_edit_mode and self.include_row_numbers) else 0

    def trailing_structural_count(self) -> int:
        """Number of cells after the data columns, identical in every pass."""
        if self.is_edit_mode:
            return (1 if self.include_buttons else 0) + 1
        return int(self.include_details_link) + int(self.include_edit_link)
