"""
Metadata driven HTML tables for annotated Python models.

Annotate a row class, then render a collection of it read-only with
table_display_for() or as an editable form table with table_editor_for().
The bundled client script (and TableRowController on the server) manages
adding, archiving and restoring rows.
"""

__version__ = '1.1.0'

# Annotations
from .annotations import (
    DataType,
    Display,
    Required,
    ReadOnly,
    HiddenInput,
    TableColumn,
    TableLink,
    TableDisplay,
    TableEdit,
    DropDownList,
    DataList,
    TableRow,
    table_display,
    table_edit,
    table_link,
    read_only
)

# Errors
from .error_handler import (
    ModelTableError,
    ConfigurationError,
    NoConstructorError,
    ModelShapeError,
    NullCollectionError,
    UnsupportedShapeError,
    BindingError,
    EnhancementMissingError
)

# Settings
from .config import (
    TableSettings,
    get_settings,
    configure,
    reset_settings
)

# Rendering
from .template import (
    SelectListItem,
    table_display_for,
    table_editor_for,
    hidden_input_for
)

# Binding and row lifecycle
from .binding import bind_rows, bind_row
from .row_lifecycle import TableRowController, attach

__all__ = [
    # Annotations
    'DataType',
    'Display',
    'Required',
    'ReadOnly',
    'HiddenInput',
    'TableColumn',
    'TableLink',
    'TableDisplay',
    'TableEdit',
    'DropDownList',
    'DataList',
    'TableRow',
    'table_display',
    'table_edit',
    'table_link',
    'read_only',
    # Errors
    'ModelTableError',
    'ConfigurationError',
    'NoConstructorError',
    'ModelShapeError',
    'NullCollectionError',
    'UnsupportedShapeError',
    'BindingError',
    'EnhancementMissingError',
    # Settings
    'TableSettings',
    'get_settings',
    'configure',
    'reset_settings',
    # Rendering
    'SelectListItem',
    'table_display_for',
    'table_editor_for',
    'hidden_input_for',
    # Binding and row lifecycle
    'bind_rows',
    'bind_row',
    'TableRowController',
    'attach',
]
