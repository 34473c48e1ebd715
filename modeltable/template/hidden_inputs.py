"""
Hidden input serializer.

Renders a model value as hidden inputs so it survives a form post. Complex
values are walked recursively; collections are skipped and so are unset Optional
properties (other than strings) that are not Required.
"""

from typing import Any, Optional, Tuple

from markupsafe import Markup

from ..metadata import PropertyDescriptor, default_value
from .formatters import input_value
from .markup import TagBuilder, join


def hidden_input(name: str, value: Any, css_class: Optional[str] = None) -> Markup:
    """Render a single <input type="hidden"> with the wire format of value."""
    builder = TagBuilder('input', {'type': 'hidden', 'name': name})
    builder.merge_attribute('value', input_value(value))
    if css_class:
        builder.add_css_class(css_class)
    return builder.render()


def _child_name(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _posted_when_null(descriptor: PropertyDescriptor) -> bool:
    """Strings, Required properties and non-nullable scalars are posted even without a value."""
    if descriptor.model_type is str or descriptor.is_required:
        return True
    return not descriptor.is_nullable and not descriptor.is_complex


def hidden_inputs_for(descriptor: PropertyDescriptor, name: str, include_default: bool = False,
                      exclude: Tuple[str, ...] = ()) -> Markup:
    """
    Render the hidden inputs of a property (or a whole model).

    Args:
        descriptor: Bound property descriptor
        name: Field name of the property; empty for a root model
        include_default: Substitute the type default for null scalar values, nested ones included
        exclude: Names of direct child properties to leave out

    Returns:
        Markup of zero or more hidden inputs
    """
    value = descriptor.value
    if isinstance(value, (bytes, bytearray)):
        # Checked before the complex branch; row versions and other binary blobs
        return hidden_input(name, value)

    if descriptor.is_complex:
        parts = []
        for child in descriptor.properties:
            if child.is_collection or child.name in exclude:
                continue
            if child.value is None and not _posted_when_null(child):
                continue
            parts.append(hidden_inputs_for(child, _child_name(name, child.name), include_default))
        return join(parts)

    if value is None and include_default:
        value = default_value(descriptor.metadata)
    return hidden_input(name, value)
