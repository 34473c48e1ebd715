"""
Table rendering.

table_display_for() renders a read-only table and table_editor_for() an
editable one for a collection property of a view model. Both build one
ColumnPlan for the row type and walk it in lockstep for the header, every
body row, the validation rows and the footer, so each pass emits the same
number of cells.

Example:
    class OrderView:
        lines: List[OrderLine]
        products: List[SelectListItem]

    html = table_editor_for(view, 'lines')
"""

import itertools
from collections.abc import Iterable, Mapping
from typing import Any, Callable, List, Optional, Tuple

from flask import url_for
from markupsafe import Markup

from ..annotations import TableDisplay, TableEdit
from ..config import get_settings
from ..constants import (
    ACTIVE_PROPERTY_ATTR, ADD_BUTTON_CLASS, ARCHIVED_CLASS, BUTTON_CELL_CLASS, BUTTON_HEADER_CLASS,
    DELETE_BUTTON_CLASS, DETAILS_LINK_CLASS, DIRTY_PROPERTY_ATTR, EDIT_LINK_CLASS,
    EDIT_ROW_CLASS, EDIT_TABLE_CLASS, FIELD_NAME_ATTR, FOOTER_TOTAL_CLASS, HIDDEN_HEADER_CLASS,
    INDEX_PLACEHOLDER_ATTR, INDEX_SUFFIX, INDEXER_PLACEHOLDER_ATTR, NO_TEXT_ATTR, READONLY_TABLE_CLASS,
    TABLE_BUTTON_CLASS, TABLE_TEXT_CLASS, TEMPLATE_BODY_CLASS, VALIDATION_MESSAGE_CLASS,
    VALIDATION_ROW_CLASS, YES_TEXT_ATTR
)
from ..error_handler import (
    ConfigurationError, ModelTableError, NoConstructorError, NullCollectionError,
    UnsupportedShapeError, log_and_reraise
)
from ..logger import logger
from ..metadata import (
    PropertyDescriptor, PropertyMetadata, describe, has_default_constructor,
    model_metadata, property_annotation
)
from .column_plan import build_column_plan, load_option_lists
from .data_structures import ColumnDescriptor, TableRenderContext
from .form_controls import form_control
from .formatters import format_decimals, format_total, formatted_value, input_value, to_decimal
from .hidden_inputs import hidden_input, hidden_inputs_for
from .markup import TagBuilder, generate_id_from_name, join, tag

UrlBuilder = Callable[[str, str, Any], str]


def default_url_builder(controller: str, action: str, id: Any) -> str:
    """Build a link with Flask's url_for, treating the controller as a blueprint name."""
    return url_for(f"{controller}.{action}", id=id)


# =============================================================================
# Model resolution
# =============================================================================

def _resolve_expression(model: Any, expression: str) -> Tuple[Any, Any, Optional[Any]]:
    """
    Walk a dotted expression from the model.

    Returns:
        Tuple of (parent, value, annotation) where parent holds the last property
    """
    names = expression.split('.')
    parent = model
    for name in names[:-1]:
        if not hasattr(parent, name):
            raise ConfigurationError(f"'{type(parent).__name__}' has no property '{name}'")
        parent = getattr(parent, name)
        if parent is None:
            raise NullCollectionError(expression)
    last = names[-1]
    if not hasattr(parent, last):
        raise ConfigurationError(f"'{type(parent).__name__}' has no property '{last}'")
    return parent, getattr(parent, last), property_annotation(type(parent), last)


def _resolve_collection(model: Any, expression: str) -> Tuple[Any, List[Any], type]:
    """
    Resolve the collection an expression names and the type of its rows.

    Returns:
        Tuple of (parent model, items, row type)

    Raises:
        NullCollectionError: The collection is None
        UnsupportedShapeError: The value is a string, a grouped collection, not
            iterable, or its item type has no properties
    """
    if not expression:
        raise ConfigurationError("An expression naming the collection is required")
    parent, collection, annotation = _resolve_expression(model, expression)

    if collection is None:
        raise NullCollectionError(expression)
    if isinstance(collection, (str, bytes, bytearray)):
        raise UnsupportedShapeError(expression, "strings are not collections of rows")
    if isinstance(collection, (Mapping, itertools.groupby)):
        raise UnsupportedShapeError(expression, "grouped collections have no per-row columns")
    if not isinstance(collection, Iterable):
        raise UnsupportedShapeError(expression, f"'{type(collection).__name__}' is not iterable")

    items = list(collection)

    element_type = None
    if annotation is not None:
        declared = PropertyMetadata(expression, annotation, type(parent))
        if declared.is_collection:
            element_type = declared.element_type
    if element_type is None and items:
        element_type = type(items[0])
    if element_type is None:
        raise UnsupportedShapeError(expression, "the item type cannot be resolved")

    row = PropertyMetadata(None, element_type)
    if not row.is_complex:
        raise UnsupportedShapeError(
            expression, f"items of type '{getattr(row.model_type, '__name__', row.model_type)}' have no columns"
        )
    return parent, items, row.model_type


# =============================================================================
# Shared cells
# =============================================================================

def _button_cell(button_class: Optional[str]) -> Markup:
    if button_class is None:
        return tag('td', None, class_=BUTTON_CELL_CLASS)
    button = tag('button', None, type='button', class_=f"{TABLE_BUTTON_CLASS} {button_class}")
    return tag('td', button, class_=BUTTON_CELL_CLASS)


def render_header(context: TableRenderContext) -> Markup:
    """Render the <thead>; structural cells mirror the body rows."""
    cells = []
    if context.leading_structural_count():
        cells.append(tag('th', context.settings.row_number_header))
    for column in context.columns.visible():
        cells.append(tag('th', column.header_text or ''))
    if context.is_edit_mode:
        if context.include_buttons:
            cells.append(tag('th', None, class_=BUTTON_HEADER_CLASS))
        # Holds the row's hidden inputs
        cells.append(tag('th', None, class_=HIDDEN_HEADER_CLASS))
    else:
        cells.extend(tag('th', None) for _ in range(context.trailing_structural_count()))
    return tag('thead', tag('tr', join(cells)))


def render_footer(context: TableRenderContext) -> Markup:
    """Render the <tfoot> with the column totals and the add button."""
    cells = []
    if context.leading_structural_count():
        cells.append(tag('td', None))
    for column in context.columns.visible():
        if not column.include_totals:
            cells.append(tag('td', None))
            continue
        text = format_total(column.column_total, column.format_string)
        attributes = {'class_': FOOTER_TOTAL_CLASS}
        if context.is_edit_mode:
            attributes['data_decimals'] = format_decimals(column.format_string)
        cells.append(tag('td', tag('div', text, **attributes)))
    if context.is_edit_mode:
        if context.include_buttons:
            cells.append(_button_cell(ADD_BUTTON_CLASS if context.allow_additions else None))
        cells.append(tag('td', None))
    else:
        cells.extend(tag('td', None) for _ in range(context.trailing_structural_count()))
    return tag('tfoot', tag('tr', join(cells)))


# =============================================================================
# Read-only table
# =============================================================================

def _link(target: PropertyDescriptor, column: ColumnDescriptor, context: TableRenderContext) -> Markup:
    link = column.link
    identifier = target.resolve((link.id_property,)).value
    text = formatted_value(target.resolve((link.display_property,)), context.settings)
    href = context.url_builder(link.controller, link.action, identifier)
    return tag('a', text, href=href)


def _display_property_text(descriptor: PropertyDescriptor, column: ColumnDescriptor,
                           context: TableRenderContext) -> str:
    child = descriptor.resolve((column.display_property,))
    if column.format_string and child.value is not None:
        return column.format_string.format(child.value)
    return formatted_value(child, context.settings)


def _readonly_cell(row: PropertyDescriptor, column: ColumnDescriptor, context: TableRenderContext) -> Markup:
    descriptor = row.resolve(column.path)
    value = descriptor.value

    if column.include_totals:
        raw = value
        if column.has_display_property:
            raw = descriptor.resolve((column.display_property,)).value if value is not None else None
        column.add_to_total(to_decimal(raw))

    if value is not None and column.is_email:
        text = tag('a', str(value), href=f"mailto:{value}")
    elif value is not None and column.is_link:
        text = _link(row.resolve(column.link_path), column, context)
    elif value is not None and column.has_display_property:
        text = _display_property_text(descriptor, column, context)
    else:
        text = formatted_value(descriptor, context.settings)

    return tag('td', column.suppress_repeat(text))


def _row_link_cell(row: PropertyDescriptor, action: str, text: str, css_class: str,
                   context: TableRenderContext) -> Markup:
    identifier = row.resolve((context.id_property,)).value
    href = context.url_builder(context.row_controller, action, identifier)
    return tag('td', tag('a', text, href=href, class_=css_class))


def render_readonly_body(items: List[Any], row_type: type, context: TableRenderContext) -> Markup:
    rows = []
    for number, item in enumerate(items, start=1):
        row = describe(item, row_type)
        cells = []
        if context.include_row_numbers:
            cells.append(tag('td', str(number)))
        for column in context.columns.visible():
            cells.append(_readonly_cell(row, column, context))
        if context.include_details_link:
            cells.append(_row_link_cell(row, context.details_action, context.settings.details_text,
                                        DETAILS_LINK_CLASS, context))
        if context.include_edit_link:
            cells.append(_row_link_cell(row, context.edit_action, context.settings.edit_text,
                                        EDIT_LINK_CLASS, context))
        rows.append(tag('tr', join(cells)))
    return tag('tbody', join(rows))


def _apply_display_options(options: Optional[TableDisplay], context: TableRenderContext):
    if options is None:
        return
    context.include_row_numbers = options.include_row_numbers
    context.include_details_link = options.include_details_link
    context.include_edit_link = options.include_edit_link
    context.row_controller = options.controller
    context.details_action = options.details_action
    context.edit_action = options.edit_action
    context.id_property = options.id_property


def table_display_for(model: Any, expression: str, url_builder: Optional[UrlBuilder] = None) -> Markup:
    """
    Render a read-only table for a collection property.

    Args:
        model: View model holding the collection
        expression: Dotted path of the collection, also used as the table id
        url_builder: Callable (controller, action, id) -> url; Flask's url_for by default

    Returns:
        Markup of the <table>

    Raises:
        NullCollectionError: The collection is None
        UnsupportedShapeError: The collection cannot be rendered as rows
        ConfigurationError: The row type's annotations are inconsistent
    """
    try:
        _, items, row_type = _resolve_collection(model, expression)
        metadata = model_metadata(row_type)
        context = TableRenderContext(expression, False, get_settings(), url_builder or default_url_builder)
        _apply_display_options(metadata.get(TableDisplay), context)
        build_column_plan(metadata, context)

        parts = [render_header(context), render_readonly_body(items, row_type, context)]
        if context.include_footer:
            parts.append(render_footer(context))
    except ModelTableError as exc:
        log_and_reraise(exc, "Cannot render table for '%s'", expression)

    table = TagBuilder('table', {'id': generate_id_from_name(expression), 'class': READONLY_TABLE_CLASS})
    table.set_inner_html(join(parts))
    logger.debug("Rendered read-only table '%s' with %d rows", expression, len(items))
    return table.render()


# =============================================================================
# Editable table
# =============================================================================

def _validation_cells(context: TableRenderContext) -> Markup:
    cells = []
    for column in context.columns.visible():
        if column.require_validation:
            message = tag('span', None, class_=VALIDATION_MESSAGE_CLASS,
                          data_valmsg_for=column.field_name, data_valmsg_replace='true')
            cells.append(tag('td', message))
        else:
            cells.append(tag('td', None))
    if context.include_buttons:
        cells.append(tag('td', None, class_=BUTTON_CELL_CLASS))
    cells.append(tag('td', None))
    return join(cells)


def _is_archived(row: PropertyDescriptor, context: TableRenderContext) -> bool:
    if context.is_active_property is None:
        return False
    return not row.resolve((context.is_active_property,)).value


def _edit_row(row: PropertyDescriptor, prefix: str, indexer: str, context: TableRenderContext,
              is_template: bool = False) -> Markup:
    """Render one edit row and its validation row."""
    context.start_row(_is_archived(row, context))
    cells = []

    for column in context.columns:
        if column.is_excluded:
            continue
        descriptor = row.resolve(column.path)
        column.field_name = f"{prefix}.{'.'.join(column.path)}"

        if column.is_active_flag or column.is_dirty_flag:
            context.add_hidden_input(hidden_input(column.field_name, descriptor.value, column.property_name))
            continue
        if column.is_hidden:
            context.add_hidden_input(hidden_inputs_for(descriptor, column.field_name))
            continue

        if column.has_display_property:
            # The display property posts through its own control
            context.add_hidden_input(hidden_inputs_for(descriptor, column.field_name, include_default=True,
                                                       exclude=(column.display_property,)))
            column.field_name = f"{column.field_name}.{column.display_property}"
            descriptor = descriptor.resolve((column.display_property,))

        if column.include_totals and not context.is_archived and not is_template:
            column.add_to_total(to_decimal(descriptor.value))

        if column.is_readonly:
            text = formatted_value(descriptor, context.settings)
            if not is_template:
                text = column.suppress_repeat(text)
            attributes = {'class_': TABLE_TEXT_CLASS}
            if column.include_totals:
                # No numeric control to read, so the client sums this instead
                attributes['data_value'] = input_value(descriptor.value)
            cells.append(tag('td', tag('div', text, **attributes)))
            if not column.has_display_property:
                context.add_hidden_input(hidden_inputs_for(descriptor, column.field_name, include_default=True))
        else:
            cells.append(form_control(column, descriptor, context))

    if context.include_buttons:
        cells.append(_button_cell(DELETE_BUTTON_CLASS if context.allow_deletions else None))
    context.add_hidden_input(hidden_input(f"{context.field_name}.{INDEX_SUFFIX}", indexer))
    cells.append(tag('td', join(context.hidden_inputs)))

    row_class = f"{EDIT_ROW_CLASS} {ARCHIVED_CLASS}" if context.is_archived else EDIT_ROW_CLASS
    return join([
        tag('tr', join(cells), class_=row_class),
        tag('tr', _validation_cells(context), class_=VALIDATION_ROW_CLASS)
    ])


def render_edit_body(items: List[Any], row_type: type, context: TableRenderContext) -> Markup:
    rows = []
    for index, item in enumerate(items):
        row = describe(item, row_type)
        rows.append(_edit_row(row, f"{context.field_name}[{index}]", str(index), context))
    return tag('tbody', join(rows))


def render_template_body(row_type: type, context: TableRenderContext) -> Markup:
    """
    Render the hidden <tbody> the client clones to add rows.

    The row is built from a default constructed instance and named with the
    index placeholder, which the client replaces with a fresh token.
    """
    settings = context.settings
    row = describe(row_type(), row_type)
    prefix = f"{context.field_name}[{settings.index_placeholder}]"
    rows = _edit_row(row, prefix, settings.indexer_placeholder, context, is_template=True)
    return tag('tbody', rows, class_=TEMPLATE_BODY_CLASS, style='display:none;')


def render_data_lists(context: TableRenderContext) -> Markup:
    parts = []
    for property_name, options in context.data_lists.items():
        items = join(tag('option', None, value=option) for option in options)
        parts.append(tag('datalist', items, id=f"{property_name.lower()}-datalist"))
    return join(parts)


def table_editor_for(model: Any, expression: str) -> Markup:
    """
    Render an editable table for a collection property.

    Controls are named expression[i].property so the posted form binds back
    to the collection, and a hidden template row lets the client add rows.

    Args:
        model: View model holding the collection and any option lists
        expression: Dotted path of the collection

    Returns:
        Markup of the <table> followed by any <datalist> elements

    Raises:
        NullCollectionError: The collection is None
        UnsupportedShapeError: The collection cannot be rendered as rows
        NoConstructorError: The row type cannot be created without arguments
        ConfigurationError: Annotations or option lists are inconsistent
    """
    try:
        parent, items, row_type = _resolve_collection(model, expression)
        if not has_default_constructor(row_type):
            raise NoConstructorError(row_type)
        metadata = model_metadata(row_type)
        context = TableRenderContext(expression, True, get_settings())
        context.apply_edit_options(metadata.get(TableEdit))
        build_column_plan(metadata, context)
        load_option_lists(context, metadata, parent)

        parts = [
            render_header(context),
            render_edit_body(items, row_type, context),
            render_template_body(row_type, context)
        ]
        if context.include_footer:
            parts.append(render_footer(context))
    except ModelTableError as exc:
        log_and_reraise(exc, "Cannot render editable table for '%s'", expression)

    settings = context.settings
    table = TagBuilder('table', {
        'id': generate_id_from_name(expression),
        'class': EDIT_TABLE_CLASS,
        FIELD_NAME_ATTR: expression,
        ACTIVE_PROPERTY_ATTR: context.is_active_property,
        DIRTY_PROPERTY_ATTR: context.is_dirty_property,
        INDEX_PLACEHOLDER_ATTR: settings.index_placeholder,
        INDEXER_PLACEHOLDER_ATTR: settings.indexer_placeholder,
        YES_TEXT_ATTR: settings.yes_text,
        NO_TEXT_ATTR: settings.no_text
    })
    table.set_inner_html(join(parts))
    logger.debug("Rendered editable table '%s' with %d rows", expression, len(items))
    return join([table.render(), render_data_lists(context)])


# =============================================================================
# Hidden inputs
# =============================================================================

def hidden_input_for(model: Any, expression: Optional[str] = None) -> Markup:
    """
    Render hidden inputs for a model or one of its properties.

    Args:
        model: View model
        expression: Dotted path of the property; None renders the whole model

    Returns:
        Markup of the hidden inputs
    """
    try:
        if not expression:
            return hidden_inputs_for(describe(model), '', include_default=True)
        parent, value, annotation = _resolve_expression(model, expression)
        if annotation is None:
            annotation = type(value) if value is not None else str
        metadata = PropertyMetadata(expression.split('.')[-1], annotation, type(parent))
        return hidden_inputs_for(PropertyDescriptor(metadata, value), expression, include_default=True)
    except ModelTableError as exc:
        log_and_reraise(exc, "Cannot render hidden inputs for '%s'", expression or type(model).__name__)
