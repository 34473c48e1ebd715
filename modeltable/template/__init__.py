"""
Table markup generation.

This package turns annotated model collections into read-only and editable
HTML tables. All public functions and classes are re-exported here.
"""

# Data structures
from .data_structures import (
    SelectListItem,
    ColumnDescriptor,
    ColumnPlan,
    TableRenderContext
)

# Markup primitives
from .markup import (
    TagBuilder,
    RenderMode,
    tag,
    join,
    generate_id_from_name
)

# Formatters
from .formatters import (
    enum_display_name,
    format_boolean,
    formatted_value,
    format_total,
    format_client_total,
    format_decimals,
    input_value
)

# Column plan
from .column_plan import (
    build_column_plan,
    load_option_lists
)

# Hidden inputs
from .hidden_inputs import (
    hidden_input,
    hidden_inputs_for
)

# Rendering
from .rendering import (
    table_display_for,
    table_editor_for,
    hidden_input_for,
    default_url_builder
)

__all__ = [
    # Data structures
    'SelectListItem',
    'ColumnDescriptor',
    'ColumnPlan',
    'TableRenderContext',
    # Markup primitives
    'TagBuilder',
    'RenderMode',
    'tag',
    'join',
    'generate_id_from_name',
    # Formatters
    'enum_display_name',
    'format_boolean',
    'formatted_value',
    'format_total',
    'format_client_total',
    'format_decimals',
    'input_value',
    # Column plan
    'build_column_plan',
    'load_option_lists',
    # Hidden inputs
    'hidden_input',
    'hidden_inputs_for',
    # Rendering
    'table_display_for',
    'table_editor_for',
    'hidden_input_for',
    'default_url_builder',
]
