"""
Form binding for editable tables.

Reads the rows of a posted editable table back into model instances. Rows
are enumerated from the field.Index values, so client generated tokens and
gaps left by deleted rows bind the same way as server rendered indices.
"""

import base64
import binascii
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from uuid import UUID

from werkzeug.datastructures import MultiDict

from .constants import INDEX_SUFFIX
from .error_handler import BindingError, ModelTableError, NoConstructorError, log_and_reraise
from .logger import logger
from .metadata import PropertyKind, PropertyMetadata, default_value, has_default_constructor, model_metadata

TRUE_VALUES = {'true', 'on', '1', 'yes'}
FALSE_VALUES = {'false', 'off', '0', 'no'}


def _as_multidict(form: Any) -> MultiDict:
    if isinstance(form, MultiDict):
        return form
    return MultiDict(form)


def convert_value(metadata: PropertyMetadata, raw: str, name: str) -> Any:
    """
    Convert a posted string to the type of a property.

    Args:
        metadata: Metadata of the target property
        raw: Posted value
        name: Field name, used in error messages

    Returns:
        The converted value

    Raises:
        BindingError: The value is not valid for the property type
    """
    model_type = metadata.model_type
    if raw == '':
        if metadata.is_nullable:
            return None
        if model_type is str:
            return ''
        return default_value(metadata)

    try:
        if metadata.kind is PropertyKind.BOOLEAN:
            lowered = raw.strip().lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
            raise ValueError(raw)
        if metadata.kind is PropertyKind.ENUM:
            if raw in model_type.__members__:
                return model_type[raw]
            for member in model_type:
                if str(member.value) == raw:
                    return member
            raise ValueError(raw)
        if model_type in (bytes, bytearray):
            return model_type(base64.b64decode(raw, validate=True))
        if isinstance(model_type, type) and issubclass(model_type, datetime):
            return datetime.fromisoformat(raw)
        if isinstance(model_type, type) and issubclass(model_type, date):
            return date.fromisoformat(raw)
        if model_type is time:
            return time.fromisoformat(raw)
        if model_type is UUID:
            return UUID(raw)
        if model_type in (int, float, Decimal):
            return model_type(raw.replace(',', '').strip())
    except (ValueError, TypeError, InvalidOperation, binascii.Error) as exc:
        raise BindingError(name, raw) from exc
    return raw


def _bind_object(instance: Any, metadata: PropertyMetadata, prefix: str, form: MultiDict):
    keys = list(form.keys())
    for prop in metadata.properties:
        name = f"{prefix}.{prop.name}" if prefix else prop.name
        if prop.is_collection:
            continue
        if prop.is_complex:
            if not any(key.startswith(name + '.') for key in keys):
                continue
            child = getattr(instance, prop.name, None)
            if child is None:
                if not has_default_constructor(prop.model_type):
                    raise NoConstructorError(prop.model_type)
                child = prop.model_type()
            _bind_object(child, prop, name, form)
            setattr(instance, prop.name, child)
            continue
        values = form.getlist(name)
        if not values:
            continue
        # A checked checkbox posts 'true' followed by its hidden 'false'
        setattr(instance, prop.name, convert_value(prop, values[0], name))


def bind_rows(form: Any, field_name: str, row_type: type) -> List[Any]:
    """
    Bind the posted rows of an editable table.

    Args:
        form: Posted form (werkzeug MultiDict or a plain mapping)
        field_name: Name the table was rendered with
        row_type: Type of the rows

    Returns:
        List of row_type instances in posted order

    Raises:
        BindingError: A posted value cannot be converted
        NoConstructorError: row_type cannot be created without arguments

    Example:
        lines = bind_rows(request.form, 'lines', OrderLine)
    """
    try:
        form = _as_multidict(form)
        if not has_default_constructor(row_type):
            raise NoConstructorError(row_type)
        metadata = model_metadata(row_type)
        rows = []
        for index in form.getlist(f"{field_name}.{INDEX_SUFFIX}"):
            instance = row_type()
            _bind_object(instance, metadata, f"{field_name}[{index}]", form)
            rows.append(instance)
    except ModelTableError as exc:
        log_and_reraise(exc, "Cannot bind rows of '%s'", field_name)

    logger.debug("Bound %d rows of '%s'", len(rows), field_name)
    return rows


def bind_row(form: Any, prefix: str, row_type: type, instance: Optional[Any] = None) -> Any:
    """Bind a single object whose fields are named prefix.property."""
    form = _as_multidict(form)
    if instance is None:
        if not has_default_constructor(row_type):
            raise NoConstructorError(row_type)
        instance = row_type()
    _bind_object(instance, model_metadata(row_type), prefix, form)
    return instance
