"""
Column plan builder.

Walks a row type's metadata depth first and flattens it into the ordered
list of columns every rendering pass consumes. Complex properties are
expanded in place unless they are excluded, hidden, shown through a display
property, or (read-only tables) rendered as a link.
"""

from typing import Any, Iterable, Optional, Tuple

from ..annotations import DataList, DataType, DropDownList, TableColumn, TableLink
from ..error_handler import ConfigurationError
from ..logger import logger
from ..metadata import PropertyMetadata
from .data_structures import ColumnDescriptor, ColumnPlan, SelectListItem, TableRenderContext
from .formatters import totals_format_string


def build_column_plan(row_metadata: PropertyMetadata, context: TableRenderContext) -> ColumnPlan:
    """
    Build the column plan for a row type.

    Args:
        row_metadata: Root metadata of the row type
        context: Render context; its columns list is filled in place

    Returns:
        The context's ColumnPlan
    """
    if not context.is_edit_mode:
        context.row_link = row_metadata.get(TableLink)
    _add_columns(row_metadata, (), context, row_metadata.is_read_only)
    logger.debug(
        "Built column plan for %s: %d columns (%d visible)",
        getattr(row_metadata.model_type, '__name__', row_metadata.model_type),
        len(context.columns), len(context.columns.visible())
    )
    return context.columns


def _add_columns(metadata: PropertyMetadata, path: Tuple[str, ...],
                 context: TableRenderContext, container_read_only: bool):
    plan = context.columns
    is_readonly_table = not context.is_edit_mode

    # A class level link on the row type turns its display property into a link
    link_property = None
    if is_readonly_table and not path and context.row_link is not None:
        link_property = context.row_link.display_property

    for prop in metadata.properties:
        column_path = path + (prop.name,)
        column = ColumnDescriptor(column_path, prop.display_name)
        config: Optional[TableColumn] = prop.get(TableColumn)

        if config is not None and config.exclude:
            column.is_excluded = True
            plan.append(column)
            continue

        if not path and prop.name in (context.is_active_property, context.is_dirty_property):
            # Row state flags only ever travel as hidden inputs
            column.is_hidden = True
            column.is_active_flag = prop.name == context.is_active_property
            column.is_dirty_flag = prop.name == context.is_dirty_property
            plan.append(column)
            continue

        if prop.is_hidden:
            column.is_hidden = True
            plan.append(column)
            continue

        if is_readonly_table and prop.name == link_property:
            column.is_link = True
            column.link = context.row_link
            column.link_path = path
        elif is_readonly_table and prop.data_type is DataType.EMAIL_ADDRESS:
            column.is_email = True

        if config is not None and config.no_repeat:
            # Only meaningful for the first column or when the column before is collapsed too
            previous = plan.last_visible()
            if previous is None or previous.no_repeat:
                column.no_repeat = True

        if context.is_edit_mode:
            data_list = prop.get(DataList)
            drop_down = prop.get(DropDownList)
            column.data_list_property = data_list.data_list_property if data_list else None
            column.select_list_property = drop_down.select_list_property if drop_down else None

        if prop.is_collection:
            # Nested collections are never rendered inside a row
            column.is_excluded = True
            plan.append(column)
            continue

        is_read_only = container_read_only or prop.is_read_only or bool(config and config.readonly)

        if prop.is_complex:
            if config is not None and config.display_property is not None:
                child = next(p for p in prop.properties if p.name == config.display_property)
                column.display_property = config.display_property
                column.header_text = child.display_name
                if config.include_total and child.is_numeric:
                    column.include_totals = True
                    column.format_string = totals_format_string(child)
                column.is_readonly = is_read_only
                column.require_validation = not is_read_only
                plan.append(column)
            elif is_readonly_table and prop.get(TableLink) is not None:
                column.is_link = True
                column.link = prop.get(TableLink)
                column.link_path = column_path
                plan.append(column)
            else:
                _add_columns(prop, column_path, context, is_read_only)
            continue

        if config is not None and config.include_total and prop.is_numeric:
            column.include_totals = True
            column.format_string = totals_format_string(prop)
        column.is_readonly = is_read_only
        column.require_validation = not is_read_only
        plan.append(column)


# =============================================================================
# Option lists
# =============================================================================

def _sibling_value(parent_model: Any, property_name: str, owner: str) -> Any:
    if not hasattr(parent_model, property_name):
        raise ConfigurationError(
            f"{owner}: the model '{type(parent_model).__name__}' has no property '{property_name}'"
        )
    value = getattr(parent_model, property_name)
    if value is None:
        raise ConfigurationError(f"{owner}: the option list '{property_name}' is null")
    return value


def _as_list(value: Any, property_name: str, owner: str) -> list:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ConfigurationError(f"{owner}: '{property_name}' is not a list of options")
    options = list(value)
    if not options:
        raise ConfigurationError(f"{owner}: the option list '{property_name}' is empty")
    return options


def load_option_lists(context: TableRenderContext, row_metadata: PropertyMetadata, parent_model: Any):
    """
    Resolve the data lists and select lists the plan's columns refer to.

    Option lists are sibling properties of the model that holds the rendered
    collection.

    Raises:
        ConfigurationError: An option property is missing, null, empty or of the wrong type
    """
    for column in context.columns:
        if column.is_excluded or column.is_hidden:
            continue
        prop = row_metadata
        for name in column.path:
            prop = next(p for p in prop.properties if p.name == name)

        if column.data_list_property is not None and column.property_name not in context.data_lists:
            owner = 'DataList'
            value = _sibling_value(parent_model, column.data_list_property, owner)
            options = _as_list(value, column.data_list_property, owner)
            if not all(isinstance(option, str) for option in options):
                raise ConfigurationError(
                    f"{owner}: '{column.data_list_property}' must contain only strings"
                )
            context.data_lists[column.property_name] = options

        if column.select_list_property is not None and column.property_name not in context.select_lists:
            owner = 'DropDownList'
            value = _sibling_value(parent_model, column.select_list_property, owner)
            options = _as_list(value, column.select_list_property, owner)
            try:
                items = [SelectListItem.coerce(option) for option in options]
            except TypeError as exc:
                raise ConfigurationError(f"{owner}: {exc}") from exc
            option_label = prop.get(DropDownList).option_label
            if option_label is not None:
                items.insert(0, SelectListItem('', option_label))
            context.select_lists[column.property_name] = items
