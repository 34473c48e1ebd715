"""
Row lifecycle controller for editable tables.

Mirrors the client script (static/modeltable-table.js) over a BeautifulSoup
document so the add/delete/archive/restore behavior, dirty tracking and
running totals can be driven without a browser.

Row states:
    new rows     -- cloned from the template body; deleting removes them
    existing     -- rendered by the server; deleting archives them
    archived     -- existing rows marked inactive; deleting again restores them

Control values live in the controller, keyed by control, while the markup
keeps the values the control was rendered with. A row is dirty whenever any
control differs from its rendered value.
"""

import copy
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from werkzeug.datastructures import MultiDict

from .config import TableSettings, get_settings
from .constants import (
    ACTIVE_PROPERTY_ATTR, ARCHIVED_CLASS, ARCHIVED_TEXT_CLASS, BEHAVIOR_CLASSES, DECIMALS_ATTR,
    DIRTY_PROPERTY_ATTR, EDIT_ROW_CLASS, FIELD_NAME_ATTR, FOOTER_TOTAL_CLASS, INDEX_PLACEHOLDER_ATTR,
    INDEX_SUFFIX, INDEXER_PLACEHOLDER_ATTR, NO_TEXT_ATTR, NUMERIC_INPUT_CLASS, ROW_ACTIVATED_EVENT,
    ROW_DELETED_EVENT, TABLE_CONTROL_CLASS, TABLE_TEXT_CLASS, TEMPLATE_BODY_CLASS, VALIDATION_ROW_CLASS,
    VALUE_ATTR, YES_TEXT_ATTR
)
from .error_handler import EnhancementMissingError, ModelTableError
from .logger import logger
from .template.formatters import format_client_total, to_decimal

# Attributes that carry the row index token
INDEXED_ATTRIBUTES = ('name', 'id', 'for', 'data-valmsg-for')

CONTROL_TAGS = ['input', 'select', 'textarea']

Behavior = Callable[[Tag], None]
Listener = Callable[[str, int], None]

# Instance attribute of the table element holding its controller
CONTROLLER_ATTR = '_modeltable_controller'


def _classes(tag: Tag) -> List[str]:
    value = tag.get('class', [])
    if isinstance(value, str):
        return value.split()
    return list(value)


def _has_class(tag: Tag, css_class: str) -> bool:
    return css_class in _classes(tag)


def _add_class(tag: Tag, css_class: str):
    classes = _classes(tag)
    if css_class not in classes:
        tag['class'] = classes + [css_class]


def _remove_class(tag: Tag, css_class: str):
    tag['class'] = [c for c in _classes(tag) if c != css_class]


def _new_tag(name: str, **attrs) -> Tag:
    return BeautifulSoup('', 'html.parser').new_tag(name, attrs=attrs)


def _position(items: List[Tag], target: Tag) -> int:
    # Tags compare by content, so look them up by identity
    for index, item in enumerate(items):
        if item is target:
            return index
    return -1


def attach(table: Tag, behaviors: Optional[Dict[str, Behavior]] = None,
           settings: Optional[TableSettings] = None) -> Optional['TableRowController']:
    """
    Attach a controller to an editable table.

    Attaching is idempotent: a table that already has a controller gets the
    same instance back.

    Args:
        table: The <table class="edit-table"> element
        behaviors: Callables binding client behaviors, keyed by the class that
            requests them (numeric-input, select-input, datepicker-input)
        settings: Tokens and texts (process settings by default)

    Returns:
        The controller, or None when the table requests a behavior that was
        not supplied
    """
    existing = vars(table).get(CONTROLLER_ATTR)
    if existing is not None:
        return existing

    behaviors = dict(behaviors or {})
    for behavior in BEHAVIOR_CLASSES:
        if table.find(class_=behavior) is not None and behavior not in behaviors:
            logger.error(str(EnhancementMissingError(behavior)))
            return None

    controller = TableRowController(table, behaviors, settings)
    setattr(table, CONTROLLER_ATTR, controller)
    return controller


def detach(table: Tag):
    vars(table).pop(CONTROLLER_ATTR, None)


class TableRowController:
    """
    Row lifecycle of one editable table.

    Args:
        table: The <table class="edit-table"> element
        behaviors: Behavior callables keyed by class name
        settings: Fallback tokens and texts for tables rendered without them
    """

    def __init__(self, table: Tag, behaviors: Optional[Dict[str, Behavior]] = None,
                 settings: Optional[TableSettings] = None):
        self.table = table
        self.behaviors = behaviors or {}
        self.settings = settings or get_settings()
        self.field_name = table.get(FIELD_NAME_ATTR)
        self.active_property = table.get(ACTIVE_PROPERTY_ATTR)
        self.dirty_property = table.get(DIRTY_PROPERTY_ATTR)
        # The table carries the tokens and texts it was rendered with
        self.index_placeholder = table.get(INDEX_PLACEHOLDER_ATTR, self.settings.index_placeholder)
        self.indexer_placeholder = table.get(INDEXER_PLACEHOLDER_ATTR, self.settings.indexer_placeholder)
        self.yes_text = table.get(YES_TEXT_ATTR, self.settings.yes_text)
        self.no_text = table.get(NO_TEXT_ATTR, self.settings.no_text)

        self.template_body = table.find('tbody', class_=TEMPLATE_BODY_CLASS, recursive=False)
        self.body = next(
            (tbody for tbody in table.find_all('tbody', recursive=False)
             if not _has_class(tbody, TEMPLATE_BODY_CLASS)),
            None
        )
        self.footer = table.find('tfoot', recursive=False)

        self.focused: Optional[Tag] = None
        self.validation_rules: Dict[str, Dict[str, str]] = {}
        self._values: Dict[int, Any] = {}
        self._new_rows: List[Tag] = []
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

        self._check_flag_inputs()

        existing = self.rows()
        self._used_tokens = {
            indexer.get('value') for indexer in self.body.find_all('input', attrs={'name': self._index_name})
        }
        self._next_token = len(existing)

        for row in existing:
            self._bind_behaviors(row)
            self._register_rules(row)

        logger.debug("Attached row controller to '%s' (%d rows)", self.field_name, len(existing))

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    @property
    def _index_name(self) -> str:
        return f"{self.field_name}.{INDEX_SUFFIX}"

    def _check_flag_inputs(self):
        """Stop tracking a flag property the template row has no input for."""
        if self.template_body is None:
            return
        if self.active_property and self.template_body.find('input', class_=self.active_property) is None:
            logger.warning("No input for '%s' in the template row; active tracking disabled",
                           self.active_property)
            self.active_property = None
        if self.dirty_property and self.template_body.find('input', class_=self.dirty_property) is None:
            logger.warning("No input for '%s' in the template row; dirty tracking disabled",
                           self.dirty_property)
            self.dirty_property = None

    def _bind_behaviors(self, row: Tag):
        for behavior in BEHAVIOR_CLASSES:
            bind = self.behaviors.get(behavior)
            if bind is None:
                continue
            for control in row.find_all(class_=behavior):
                bind(control)

    def _register_rules(self, row: Tag):
        for control in row.find_all(attrs={'data-val': 'true'}):
            rules = {
                key[len('data-val-'):]: value
                for key, value in control.attrs.items()
                if key.startswith('data-val-')
            }
            self.validation_rules[control.get('name')] = rules

    def _unregister_rules(self, row: Tag):
        for control in row.find_all(attrs={'data-val': 'true'}):
            self.validation_rules.pop(control.get('name'), None)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on(self, event: str, listener: Listener):
        """Register a listener called with (event, row index)."""
        self._listeners[event].append(listener)

    def _fire(self, event: str, row: Tag):
        index = _position(self.rows(), row)
        for listener in self._listeners[event]:
            listener(event, index)

    # -------------------------------------------------------------------------
    # Rows
    # -------------------------------------------------------------------------

    def rows(self) -> List[Tag]:
        """Edit rows of the body, in order."""
        return [row for row in self.body.find_all('tr', recursive=False) if _has_class(row, EDIT_ROW_CLASS)]

    def is_new(self, row: Tag) -> bool:
        return _position(self._new_rows, row) >= 0

    def is_archived(self, row: Tag) -> bool:
        return _has_class(row, ARCHIVED_CLASS)

    def _take_token(self) -> str:
        token = self._next_token
        while str(token) in self._used_tokens:
            token += 1
        self._next_token = token + 1
        self._used_tokens.add(str(token))
        return str(token)

    def _substitute(self, row: Tag, token: str):
        placeholder = f"[{self.index_placeholder}]"
        for element in [row] + row.find_all(True):
            for attribute in INDEXED_ATTRIBUTES:
                value = element.get(attribute)
                if value and placeholder in value:
                    element[attribute] = value.replace(placeholder, f"[{token}]")
            if element.get('name') == self._index_name and element.get('value') == self.indexer_placeholder:
                element['value'] = token

    def add_row(self) -> Tag:
        """
        Add a row cloned from the template body.

        Returns:
            The new edit row
        """
        if self.template_body is None:
            raise ModelTableError(f"The table '{self.field_name}' has no template row")

        token = self._take_token()
        edit_row = None
        for template_row in self.template_body.find_all('tr', recursive=False):
            clone = copy.copy(template_row)
            self._substitute(clone, token)
            self.body.append(clone)
            if _has_class(clone, EDIT_ROW_CLASS):
                edit_row = clone

        self._new_rows.append(edit_row)
        self._bind_behaviors(edit_row)
        self._register_rules(edit_row)
        self.focused = next(
            (control for control in edit_row.find_all(CONTROL_TAGS) if control.get('type') != 'hidden'),
            None
        )
        logger.debug("Added row %s to '%s'", token, self.field_name)
        return edit_row

    def delete_row(self, row: Tag):
        """Remove a new row, archive an existing row or restore an archived one."""
        if self.is_new(row):
            self._remove_row(row)
        elif self.is_archived(row):
            self.restore_row(row)
        else:
            self.archive_row(row)

    def _remove_row(self, row: Tag):
        self._unregister_rules(row)
        validation_row = row.find_next_sibling('tr')
        for control in row.find_all(CONTROL_TAGS):
            self._values.pop(id(control), None)
        self._new_rows = [new_row for new_row in self._new_rows if new_row is not row]
        if validation_row is not None and _has_class(validation_row, VALIDATION_ROW_CLASS):
            validation_row.decompose()
        row.decompose()
        self.update_totals()

    def _flag_input(self, row: Tag, property_name: Optional[str]) -> Optional[Tag]:
        if not property_name:
            return None
        return row.find('input', class_=property_name)

    def _set_flag(self, row: Tag, property_name: Optional[str], value: bool):
        flag = self._flag_input(row, property_name)
        if flag is not None:
            flag['value'] = 'True' if value else 'False'

    def _snapshot(self, control: Tag) -> str:
        """Read-only text of a control's current value."""
        value = self.value_of(control)
        if control.name == 'select':
            option = next((o for o in control.find_all('option') if o.get('value', o.get_text()) == value), None)
            return option.get_text() if option is not None else ''
        if control.get('type') == 'checkbox':
            return self.yes_text if value else self.no_text
        return '' if value is None else str(value)

    def archive_row(self, row: Tag):
        _add_class(row, ARCHIVED_CLASS)
        self._set_flag(row, self.active_property, False)
        self._set_flag(row, self.dirty_property, True)
        for control in row.find_all(class_=TABLE_CONTROL_CLASS):
            text = _new_tag('div')
            text['class'] = [TABLE_TEXT_CLASS, ARCHIVED_TEXT_CLASS]
            text.string = self._snapshot(control)
            control.insert_after(text)
            control['style'] = 'display:none;'
            control['readonly'] = 'readonly'
        self.update_totals()
        self._fire(ROW_DELETED_EVENT, row)

    def restore_row(self, row: Tag):
        _remove_class(row, ARCHIVED_CLASS)
        for text in row.find_all('div', class_=ARCHIVED_TEXT_CLASS):
            text.decompose()
        for control in row.find_all(class_=TABLE_CONTROL_CLASS):
            for attribute in ('style', 'readonly'):
                if attribute in control.attrs:
                    del control[attribute]
        self._set_flag(row, self.active_property, True)
        self._set_flag(row, self.dirty_property, True)
        self.update_totals()
        self._fire(ROW_ACTIVATED_EVENT, row)

    # -------------------------------------------------------------------------
    # Values
    # -------------------------------------------------------------------------

    @staticmethod
    def default_of(control: Tag) -> Any:
        """The value a control was rendered with (checked state for checkboxes)."""
        if control.name == 'select':
            options = control.find_all('option')
            selected = next((o for o in options if o.has_attr('selected')), options[0] if options else None)
            if selected is None:
                return ''
            return selected.get('value', selected.get_text())
        if control.name == 'textarea':
            return control.get_text()
        if control.get('type') == 'checkbox':
            return control.has_attr('checked')
        return control.get('value', '')

    def value_of(self, control: Tag) -> Any:
        return self._values.get(id(control), self.default_of(control))

    def change(self, control: Tag, value: Any) -> bool:
        """
        Set a control's value as if the user had edited it.

        Returns:
            False when the row is archived and the change was ignored
        """
        row = control.find_parent('tr')
        if self.is_archived(row):
            return False
        self._values[id(control)] = value
        if self.dirty_property:
            self._set_flag(row, self.dirty_property, self.is_dirty(row))
        if _has_class(control, NUMERIC_INPUT_CLASS):
            self.update_totals(control)
        return True

    def is_dirty(self, row: Tag) -> bool:
        """True if any visible control differs from its rendered value."""
        for control in row.find_all(CONTROL_TAGS):
            if control.get('type') == 'hidden':
                continue
            if self.value_of(control) != self.default_of(control):
                return True
        return False

    # -------------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------------

    def _footer_cells(self) -> List[Tag]:
        if self.footer is None:
            return []
        row = self.footer.find('tr')
        return row.find_all('td', recursive=False) if row is not None else []

    def _update_column(self, column_index: int, total_cell: Tag):
        total = to_decimal(0)
        for row in self.rows():
            if self.is_archived(row):
                continue
            cells = row.find_all('td', recursive=False)
            if column_index >= len(cells):
                continue
            control = cells[column_index].find(class_=NUMERIC_INPUT_CLASS)
            if control is not None:
                total += to_decimal(self.value_of(control))
                continue
            # Read-only columns keep their value on the text cell
            text = cells[column_index].find(attrs={VALUE_ATTR: True})
            if text is not None:
                total += to_decimal(text.get(VALUE_ATTR))
        decimals = int(total_cell.get(DECIMALS_ATTR, 2))
        total_cell.string = format_client_total(total, decimals)

    def update_totals(self, control: Optional[Tag] = None):
        """Recompute the footer total of control's column, or of every totalled column."""
        footer_cells = self._footer_cells()
        if control is not None:
            cell = control.find_parent('td')
            columns = [_position(cell.find_parent('tr').find_all('td', recursive=False), cell)]
        else:
            columns = range(len(footer_cells))
        for column_index in columns:
            if not 0 <= column_index < len(footer_cells):
                continue
            total_cell = footer_cells[column_index].find('div', class_=FOOTER_TOTAL_CLASS)
            if total_cell is not None:
                self._update_column(column_index, total_cell)

    def total_text(self, column_index: int) -> Optional[str]:
        footer_cells = self._footer_cells()
        if not 0 <= column_index < len(footer_cells):
            return None
        total_cell = footer_cells[column_index].find('div', class_=FOOTER_TOTAL_CLASS)
        return total_cell.get_text() if total_cell is not None else None

    # -------------------------------------------------------------------------
    # Submit
    # -------------------------------------------------------------------------

    def submit(self) -> MultiDict:
        """
        Prepare the table for posting and return the posted values.

        The template body is removed and archived rows are always posted as dirty.
        """
        if self.template_body is not None:
            self.template_body.decompose()
            self.template_body = None
        for row in self.rows():
            if self.is_archived(row):
                self._set_flag(row, self.dirty_property, True)
        return self.serialize()

    def serialize(self) -> MultiDict:
        form = MultiDict()
        for control in self.table.find_all(CONTROL_TAGS):
            name = control.get('name')
            if not name:
                continue
            if control.get('type') == 'checkbox':
                if self.value_of(control):
                    form.add(name, control.get('value', 'on'))
                continue
            form.add(name, self.value_of(control))
        return form
