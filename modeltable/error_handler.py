"""
Standardized error handling for table rendering.

Every error raised here is a programming or configuration mistake rather
than a transient condition, so errors are logged and propagated, never
retried or suppressed.
"""

from .logger import logger


class ModelTableError(Exception):
    """Base exception for all modeltable errors."""
    pass


class ConfigurationError(ModelTableError):
    """An annotation names a property that is missing or has the wrong type."""
    pass


class NoConstructorError(ConfigurationError):
    """
    Raised when an editable table's row type cannot be created without arguments.

    The hidden template row is rendered from a default constructed instance,
    so editable tables need a zero-argument construction path.
    """

    def __init__(self, model_type: type, message: str = None):
        self.model_type = model_type
        self.message = message or (
            f"The type '{model_type.__name__}' must be constructible without "
            f"arguments to render an editable table"
        )
        super().__init__(self.message)


class ModelShapeError(ModelTableError):
    """The bound model cannot be rendered as a table."""
    pass


class NullCollectionError(ModelShapeError):
    """Raised when the collection to render is None."""

    def __init__(self, field_name: str, message: str = None):
        self.field_name = field_name
        self.message = message or f"The collection '{field_name}' is null"
        super().__init__(self.message)


class UnsupportedShapeError(ModelShapeError):
    """
    Raised for strings, grouped collections (mappings, groupby results) and
    collections whose item type has no per-row column semantics.
    """

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        self.message = f"The property '{field_name}' cannot be rendered as a table: {reason}"
        super().__init__(self.message)


class BindingError(ModelTableError):
    """Raised when a posted value cannot be converted to its property type."""

    def __init__(self, name: str, value: str, message: str = None):
        self.name = name
        self.value = value
        self.message = message or f"Invalid value {value!r} for '{name}'"
        super().__init__(self.message)


class EnhancementMissingError(ModelTableError):
    """A client-side behavior referenced by the markup is not available."""

    def __init__(self, behavior: str):
        self.behavior = behavior
        self.message = f"The {behavior} behavior is referenced by the table but not loaded"
        super().__init__(self.message)


def log_and_reraise(
    exc: Exception,
    message: str,
    *args,
    level: str = "error"
) -> None:
    """
    Log an exception with context and re-raise it.

    Args:
        exc: The exception to log
        message: Log message with format placeholders
        *args: Arguments for message formatting
        level: Log level (error, warning, critical)

    Raises:
        The original exception
    """
    log_func = getattr(logger, level, logger.error)
    log_func(message + ": %s", *args, exc)
    logger.debug("Exception details", exc_info=True)

    raise exc
