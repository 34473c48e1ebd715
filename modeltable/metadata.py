"""
Model metadata for table rendering.

A model type is any class with type annotations. type_properties() reads the
annotations once per type and describes each property with a
PropertyMetadata; describe() binds that static tree to an instance so the
renderers can walk values and configuration together.
"""

import collections.abc
import inspect
import types
import typing
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, ClassVar, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from .annotations import (
    DataType, Display, HiddenInput, ReadOnly, Required, TableAnnotation, TableColumn,
    TableDisplay, TableEdit, TableLink, annotations_of, class_annotations, find_annotation
)
from .error_handler import ConfigurationError

SCALAR_TYPES = (str, int, float, Decimal, complex, bytes, bytearray,
                date, datetime, time, timedelta, UUID)
DATE_TYPES = (date, datetime)


class PropertyKind(Enum):
    """The closed set of property shapes the column plan distinguishes."""
    SCALAR = 'scalar'
    ENUM = 'enum'
    BOOLEAN = 'boolean'
    COMPLEX = 'complex'
    COLLECTION = 'collection'


# =============================================================================
# Type inspection
# =============================================================================

def _unwrap(annotation: Any) -> Tuple[Any, bool, List[TableAnnotation]]:
    """Strip Annotated and Optional wrappers, collecting annotation records."""
    records = []
    nullable = False
    current = annotation
    while True:
        origin = typing.get_origin(current)
        if origin is Annotated:
            records.extend(annotations_of(current.__metadata__))
            current = typing.get_args(current)[0]
        elif origin is Union or origin is types.UnionType:
            args = typing.get_args(current)
            remaining = [arg for arg in args if arg is not type(None)]
            nullable = nullable or len(remaining) < len(args)
            if len(remaining) != 1:
                # A genuine union has no single shape; treat it as an opaque scalar
                return Any, nullable, records
            current = remaining[0]
        else:
            return current, nullable, records


@lru_cache(maxsize=None)
def _type_hints(cls: type) -> Tuple[Tuple[str, Any], ...]:
    """Return the (name, annotation) pairs that are model properties of cls."""
    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exc:
        raise ConfigurationError(f"Cannot resolve the annotations of '{cls.__name__}': {exc}") from exc
    result = []
    for name, annotation in hints.items():
        if name.startswith('_'):
            continue
        if annotation is ClassVar or typing.get_origin(annotation) is ClassVar:
            continue
        result.append((name, annotation))
    return tuple(result)


def property_annotation(model_type: type, name: str) -> Optional[Any]:
    """Return the declared annotation of a property, or None if it is not annotated."""
    if not isinstance(model_type, type):
        return None
    try:
        return dict(_type_hints(model_type)).get(name)
    except ConfigurationError:
        return None


def _is_model_type(cls: Any) -> bool:
    if not isinstance(cls, type) or cls.__module__ == 'builtins':
        return False
    try:
        return len(_type_hints(cls)) > 0
    except ConfigurationError:
        return False


def classify(model_type: Any) -> Tuple[PropertyKind, Any]:
    """
    Classify a type into a PropertyKind.

    Returns:
        Tuple of (kind, element_type); element_type is only set for collections
    """
    origin = typing.get_origin(model_type) or model_type
    if model_type is bool:
        return PropertyKind.BOOLEAN, None
    if isinstance(model_type, type) and issubclass(model_type, Enum):
        return PropertyKind.ENUM, None
    if not isinstance(origin, type) or model_type is object:
        return PropertyKind.SCALAR, None
    if issubclass(origin, (str, bytes, bytearray)):
        return PropertyKind.SCALAR, None
    if issubclass(origin, collections.abc.Mapping):
        return PropertyKind.COLLECTION, None
    if issubclass(origin, collections.abc.Iterable):
        args = typing.get_args(model_type)
        element_type = args[0] if args and args[0] is not Ellipsis else None
        return PropertyKind.COLLECTION, element_type
    if issubclass(origin, SCALAR_TYPES):
        return PropertyKind.SCALAR, None
    if _is_model_type(model_type):
        return PropertyKind.COMPLEX, None
    return PropertyKind.SCALAR, None


def is_numeric(model_type: Any) -> bool:
    return isinstance(model_type, type) and model_type is not bool and issubclass(model_type, (int, float, Decimal))


def is_integral(model_type: Any) -> bool:
    return isinstance(model_type, type) and model_type is not bool and issubclass(model_type, int)


def has_default_constructor(cls: type) -> bool:
    """Return True if cls() can be called without arguments."""
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        if parameter.default is parameter.empty:
            return False
    return True


def _prettify(name: str) -> str:
    return ' '.join(word.capitalize() for word in name.split('_') if word)


# =============================================================================
# Static metadata
# =============================================================================

class PropertyMetadata:
    """
    Static description of one model property (or of a model type when name is None).

    Property level records take priority over the class level records of the
    property's own type, which are merged in for complex properties. A
    TableLink on a non-complex property is dropped.
    """

    def __init__(self, name: Optional[str], annotation: Any, container_type: Optional[type] = None):
        model_type, nullable, records = _unwrap(annotation)
        self.name = name
        self.container_type = container_type
        self.model_type = model_type
        self.is_nullable = nullable
        self.kind, self.element_type = classify(model_type)

        if self.kind is PropertyKind.COMPLEX:
            own_types = {type(record) for record in records}
            inherited = [r for r in class_annotations(model_type) if type(r) not in own_types]
            records = records + inherited
        else:
            records = [r for r in records if not isinstance(r, TableLink)]
        self.annotations = tuple(records)

    def get(self, record_type: type) -> Optional[TableAnnotation]:
        """Return the first attached record of record_type, or None."""
        return find_annotation(self.annotations, record_type)

    @property
    def properties(self) -> Sequence['PropertyMetadata']:
        if self.kind is not PropertyKind.COMPLEX:
            return ()
        return type_properties(self.model_type)

    @property
    def is_complex(self) -> bool:
        return self.kind is PropertyKind.COMPLEX

    @property
    def is_collection(self) -> bool:
        return self.kind is PropertyKind.COLLECTION

    @property
    def is_numeric(self) -> bool:
        return is_numeric(self.model_type)

    @property
    def is_integral(self) -> bool:
        return is_integral(self.model_type)

    @property
    def is_date(self) -> bool:
        return (isinstance(self.model_type, type) and issubclass(self.model_type, DATE_TYPES)) \
            or self.data_type is DataType.DATE

    @property
    def display_name(self) -> str:
        display = self.get(Display)
        if display is not None and display.name:
            return display.name
        if self.name is None:
            return getattr(self.model_type, '__name__', '')
        return _prettify(self.name)

    @property
    def format_string(self) -> Optional[str]:
        display = self.get(Display)
        return display.format_string if display is not None else None

    @property
    def null_display_text(self) -> str:
        display = self.get(Display)
        return display.null_display_text if display is not None else ''

    @property
    def data_type(self) -> Optional[DataType]:
        display = self.get(Display)
        return display.data_type if display is not None else None

    @property
    def is_required(self) -> bool:
        return self.get(Required) is not None

    @property
    def is_read_only(self) -> bool:
        return self.get(ReadOnly) is not None

    @property
    def is_hidden(self) -> bool:
        return self.get(HiddenInput) is not None

    def __repr__(self):
        return f"PropertyMetadata({self.name!r}, {self.kind.value})"


def _property_names(model_type: type) -> List[str]:
    return [name for name, _ in _type_hints(model_type)]


def _check_named(owner: str, record: TableAnnotation, model_type: type, *names: Optional[str]):
    available = _property_names(model_type)
    for name in names:
        if name is not None and name not in available:
            raise ConfigurationError(
                f"{type(record).__name__} on '{owner}': '{model_type.__name__}' has no property '{name}'"
            )


def _check_boolean(owner: type, record: TableEdit, name: Optional[str], properties: Sequence[PropertyMetadata]):
    if name is None:
        return
    match = next((p for p in properties if p.name == name), None)
    if match is None:
        raise ConfigurationError(
            f"TableEdit on '{owner.__name__}': no property '{name}'"
        )
    if match.model_type is not bool or match.is_nullable:
        raise ConfigurationError(
            f"TableEdit on '{owner.__name__}': property '{name}' must be a bool"
        )


@lru_cache(maxsize=None)
def type_properties(model_type: type) -> Tuple[PropertyMetadata, ...]:
    """
    Return the metadata of every property of model_type, in declaration order.

    The result is cached and never mutated, so it can be shared by concurrent
    renders.

    Raises:
        ConfigurationError: An annotation names a property that does not exist
            or that has the wrong type
    """
    properties = tuple(
        PropertyMetadata(name, annotation, model_type)
        for name, annotation in _type_hints(model_type)
    )

    for record in class_annotations(model_type):
        if isinstance(record, TableEdit):
            _check_boolean(model_type, record, record.is_active_property, properties)
            _check_boolean(model_type, record, record.is_dirty_property, properties)
        elif isinstance(record, TableDisplay) and (record.include_details_link or record.include_edit_link):
            _check_named(model_type.__name__, record, model_type, record.id_property)
        elif isinstance(record, TableLink):
            _check_named(model_type.__name__, record, model_type, record.id_property, record.display_property)

    for prop in properties:
        if not prop.is_complex:
            continue
        owner = f"{model_type.__name__}.{prop.name}"
        link = prop.get(TableLink)
        if link is not None:
            _check_named(owner, link, prop.model_type, link.id_property, link.display_property)
        column = prop.get(TableColumn)
        if column is not None and column.display_property is not None:
            _check_named(owner, column, prop.model_type, column.display_property)

    return properties


@lru_cache(maxsize=None)
def model_metadata(model_type: type) -> PropertyMetadata:
    """Return the root metadata of a model type (validating its properties)."""
    type_properties(model_type)
    return PropertyMetadata(None, model_type)


def default_value(metadata: PropertyMetadata) -> Any:
    """Return the value an unset property of this type defaults to."""
    if metadata.is_nullable:
        return None
    if metadata.kind is PropertyKind.BOOLEAN:
        return False
    if metadata.kind is PropertyKind.ENUM:
        return next(iter(metadata.model_type), None)
    if is_numeric(metadata.model_type):
        return metadata.model_type(0)
    return None


# =============================================================================
# Bound descriptors
# =============================================================================

class PropertyDescriptor:
    """
    A PropertyMetadata bound to the current value of the property.

    Attribute access falls through to the metadata, so a descriptor exposes
    name, kind, display_name, format_string and friends directly.
    """

    def __init__(self, metadata: PropertyMetadata, model: Any,
                 container: Optional['PropertyDescriptor'] = None):
        self.metadata = metadata
        self.model = model
        self.container = container
        self._properties = None

    def __getattr__(self, item):
        if item == 'metadata':
            raise AttributeError(item)
        return getattr(self.metadata, item)

    @property
    def value(self) -> Any:
        return self.model

    @property
    def properties(self) -> List['PropertyDescriptor']:
        """Nested descriptors; a None complex value yields children whose values are None."""
        if self._properties is None:
            self._properties = [
                PropertyDescriptor(
                    child,
                    getattr(self.model, child.name, None) if self.model is not None else None,
                    self
                )
                for child in self.metadata.properties
            ]
        return self._properties

    def find(self, name: str) -> Optional['PropertyDescriptor']:
        for descriptor in self.properties:
            if descriptor.name == name:
                return descriptor
        return None

    def resolve(self, path: Sequence[str]) -> 'PropertyDescriptor':
        """Walk a path of property names from this descriptor."""
        descriptor = self
        for name in path:
            found = descriptor.find(name)
            if found is None:
                raise ConfigurationError(
                    f"'{descriptor.model_type.__name__}' has no property '{name}'"
                )
            descriptor = found
        return descriptor

    def __repr__(self):
        return f"PropertyDescriptor({self.metadata.name!r}, {self.model!r})"


def describe(instance: Any, model_type: Optional[type] = None) -> PropertyDescriptor:
    """Bind the metadata of model_type (default: type(instance)) to instance."""
    if model_type is None:
        model_type = type(instance)
    return PropertyDescriptor(model_metadata(model_type), instance)
