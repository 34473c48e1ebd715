"""
Common constants used across the modeltable package.
"""

# Values that are considered "false" for boolean environment variables
# Include empty string to handle unset or blank environment variables
FALSE_VALUES = {'false', '0', 'no', 'off', ''}

# Table level CSS classes
READONLY_TABLE_CLASS = 'readonly-table'
EDIT_TABLE_CLASS = 'edit-table'
TEMPLATE_BODY_CLASS = 'template-body'

# Row level CSS classes
EDIT_ROW_CLASS = 'edit-row'
VALIDATION_ROW_CLASS = 'validation-row'
ARCHIVED_CLASS = 'archived'

# Cell and control CSS classes
TABLE_TEXT_CLASS = 'table-text'
ARCHIVED_TEXT_CLASS = 'archived-text'
FOOTER_TOTAL_CLASS = 'footer-total'
TABLE_CONTROL_CLASS = 'table-control'
BUTTON_CELL_CLASS = 'button-cell'
BUTTON_HEADER_CLASS = 'button-header-cell'
HIDDEN_HEADER_CLASS = 'hidden-header-cell'
TABLE_BUTTON_CLASS = 'table-button'
ADD_BUTTON_CLASS = 'add-button'
DELETE_BUTTON_CLASS = 'delete-button'
DETAILS_LINK_CLASS = 'details-link'
EDIT_LINK_CLASS = 'edit-link'
VALIDATION_MESSAGE_CLASS = 'field-validation-valid'

# Classes that bind client-side enhancement behaviors
NUMERIC_INPUT_CLASS = 'numeric-input'
SELECT_INPUT_CLASS = 'select-input'
DATEPICKER_INPUT_CLASS = 'datepicker-input'
BEHAVIOR_CLASSES = (NUMERIC_INPUT_CLASS, SELECT_INPUT_CLASS, DATEPICKER_INPUT_CLASS)

# Data attributes read by the client script
FIELD_NAME_ATTR = 'data-fieldname'
ACTIVE_PROPERTY_ATTR = 'data-isactiveproperty'
DIRTY_PROPERTY_ATTR = 'data-isdirtyproperty'
DECIMALS_ATTR = 'data-decimals'
INDEX_PLACEHOLDER_ATTR = 'data-indexplaceholder'
INDEXER_PLACEHOLDER_ATTR = 'data-indexerplaceholder'
YES_TEXT_ATTR = 'data-yestext'
NO_TEXT_ATTR = 'data-notext'

# Raw value of a read-only text cell in a totalled column
VALUE_ATTR = 'data-value'

# Suffix of the hidden input carrying the literal row index
INDEX_SUFFIX = 'Index'

# Client events raised when a row changes state
ROW_DELETED_EVENT = 'rowDeleted'
ROW_ACTIVATED_EVENT = 'rowActivated'
