"""
Form controls for editable table cells.

The control kind follows the property type: option lists become selects,
multi-line text a textarea, bool a checkbox, Optional[bool] a tri-state
select, enums a select of their members and everything else a text input.
"""

from typing import Any, Dict, List, Optional

from markupsafe import Markup

from ..annotations import DataType, DropDownList
from ..constants import (
    ARCHIVED_TEXT_CLASS, DATEPICKER_INPUT_CLASS, NUMERIC_INPUT_CLASS, SELECT_INPUT_CLASS,
    TABLE_CONTROL_CLASS, TABLE_TEXT_CLASS
)
from ..metadata import PropertyDescriptor, PropertyKind
from .data_structures import ColumnDescriptor, SelectListItem, TableRenderContext
from .formatters import enum_display_name, formatted_value, input_value
from .markup import TagBuilder, join, tag


def validation_attributes(descriptor: PropertyDescriptor, context: TableRenderContext) -> Dict[str, str]:
    """
    Return the unobtrusive validation attributes of a control.

    Example:
        >>> validation_attributes(quantity, context)
        {'data-val': 'true', 'data-val-number': 'The field Quantity must be a number.'}
    """
    if not context.settings.validate_controls:
        return {}
    attributes = {}
    label = descriptor.display_name
    if descriptor.is_required:
        attributes['data-val-required'] = f"The {label} field is required."
    if descriptor.is_numeric:
        attributes['data-val-number'] = f"The field {label} must be a number."
    if attributes:
        attributes = {'data-val': 'true', **attributes}
    return attributes


def _control_attributes(column: ColumnDescriptor, descriptor: PropertyDescriptor,
                        context: TableRenderContext) -> Dict[str, Any]:
    classes = [TABLE_CONTROL_CLASS]
    if column.include_totals:
        classes.append(NUMERIC_INPUT_CLASS)
    if descriptor.is_date:
        classes.append(DATEPICKER_INPUT_CLASS)
    drop_down = descriptor.get(DropDownList)
    if drop_down is not None and drop_down.searchable:
        classes.append(SELECT_INPUT_CLASS)

    attributes = {'name': column.field_name, 'class': ' '.join(classes)}
    if not column.include_totals and column.property_name in context.data_lists:
        attributes['list'] = f"{column.property_name.lower()}-datalist"
    attributes.update(validation_attributes(descriptor, context))
    if context.is_archived:
        attributes['style'] = 'display:none;'
    return attributes


def _select(attributes: Dict[str, Any], options: List[SelectListItem]) -> Markup:
    parts = []
    for option in options:
        builder = TagBuilder('option', {'value': option.value})
        if option.selected:
            builder.merge_attribute('selected', 'selected')
        builder.set_inner_text(option.text)
        parts.append(builder.render())
    builder = TagBuilder('select', attributes)
    builder.set_inner_html(join(parts))
    return builder.render()


def _selected_options(items: List[SelectListItem], current: str) -> List[SelectListItem]:
    """Copy the option list with the item matching current selected."""
    options = []
    for item in items:
        selected = item.value == current if item.value is not None else item.text == current
        options.append(SelectListItem(item.value, item.text, selected))
    return options


def select_list_control(attributes: Dict[str, Any], items: List[SelectListItem], value: Any) -> Markup:
    return _select(attributes, _selected_options(items, input_value(value)))


def textarea_control(attributes: Dict[str, Any], value: Any) -> Markup:
    builder = TagBuilder('textarea', attributes)
    builder.set_inner_text('' if value is None else value)
    return builder.render()


def checkbox_control(attributes: Dict[str, Any], value: bool) -> Markup:
    """A checkbox posts nothing when unchecked, so a hidden 'false' follows it."""
    builder = TagBuilder('input', {'type': 'checkbox'})
    builder.merge_attributes(attributes)
    builder.merge_attribute('value', 'true')
    if value:
        builder.merge_attribute('checked', 'checked')
    return join([
        builder.render(),
        tag('input', type='hidden', name=attributes['name'], value='false')
    ])


def nullable_boolean_control(attributes: Dict[str, Any], value: Optional[bool], context: TableRenderContext) -> Markup:
    options = [
        SelectListItem('', '', value is None),
        SelectListItem('true', context.settings.yes_text, value is True),
        SelectListItem('false', context.settings.no_text, value is False)
    ]
    return _select(attributes, options)


def enum_control(attributes: Dict[str, Any], descriptor: PropertyDescriptor) -> Markup:
    current = input_value(descriptor.value)
    options = [SelectListItem('', descriptor.null_display_text)]
    for member in descriptor.model_type:
        options.append(SelectListItem(member.name, enum_display_name(member), member.name == current))
    return _select(attributes, options)


def text_control(attributes: Dict[str, Any], value: Any) -> Markup:
    builder = TagBuilder('input', {'type': 'text'})
    builder.merge_attributes(attributes)
    builder.merge_attribute('value', input_value(value))
    return builder.render()


def form_control(column: ColumnDescriptor, descriptor: PropertyDescriptor,
                 context: TableRenderContext) -> Markup:
    """
    Render the <td> holding the editable control of a column.

    Archived rows keep the control (hidden) and show a read-only rendition
    next to it, so restoring a row only toggles visibility.

    Args:
        column: Column being rendered; field_name must be set for this row
        descriptor: The property the control edits
        context: Render context

    Returns:
        Markup of the cell
    """
    attributes = _control_attributes(column, descriptor, context)
    value = descriptor.value

    if column.property_name in context.select_lists:
        control = select_list_control(attributes, context.select_lists[column.property_name], value)
    elif descriptor.data_type is DataType.MULTILINE_TEXT:
        control = textarea_control(attributes, value)
    elif descriptor.kind is PropertyKind.BOOLEAN and not descriptor.is_nullable:
        control = checkbox_control(attributes, bool(value))
    elif descriptor.kind is PropertyKind.BOOLEAN:
        control = nullable_boolean_control(attributes, value, context)
    elif descriptor.kind is PropertyKind.ENUM:
        control = enum_control(attributes, descriptor)
    else:
        control = text_control(attributes, value)

    parts = [control]
    if context.is_archived:
        parts.append(tag('div', formatted_value(descriptor, context.settings),
                         class_=f"{TABLE_TEXT_CLASS} {ARCHIVED_TEXT_CLASS}"))
    return tag('td', join(parts))
