"""
Tests for model metadata: classification, annotation merging and bound descriptors.
"""

import unittest
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, Dict, List, Optional

import pytest

from modeltable import ConfigurationError, Display, TableColumn, TableLink
from modeltable.metadata import (
    PropertyKind, PropertyMetadata, classify, default_value, describe, has_default_constructor,
    model_metadata, property_annotation, type_properties
)

from sample_models import (
    Allocation, Category, Customer, Measurement, OrderLine, Product, Status, Supplier
)


class TestClassify(unittest.TestCase):
    """Test property kind classification."""

    def test_scalars(self):
        for scalar in (int, str, float, Decimal, bytes):
            self.assertEqual(classify(scalar)[0], PropertyKind.SCALAR, scalar)

    def test_boolean(self):
        self.assertEqual(classify(bool), (PropertyKind.BOOLEAN, None))

    def test_enum(self):
        self.assertEqual(classify(Status), (PropertyKind.ENUM, None))

    def test_complex(self):
        self.assertEqual(classify(Category), (PropertyKind.COMPLEX, None))

    def test_collection_element_type(self):
        self.assertEqual(classify(List[Category]), (PropertyKind.COLLECTION, Category))

    def test_mapping_is_collection_without_element(self):
        self.assertEqual(classify(Dict[str, int]), (PropertyKind.COLLECTION, None))


class TestPropertyMetadata(unittest.TestCase):
    """Test static property metadata."""

    def test_optional_is_unwrapped(self):
        metadata = PropertyMetadata('count', Optional[int])
        self.assertTrue(metadata.is_nullable)
        self.assertIs(metadata.model_type, int)
        self.assertTrue(metadata.is_numeric)
        self.assertTrue(metadata.is_integral)

    def test_annotated_records_collected(self):
        metadata = PropertyMetadata('price', Annotated[Decimal, Display(format_string='{0:.2f}')])
        self.assertEqual(metadata.format_string, '{0:.2f}')
        self.assertFalse(metadata.is_integral)

    def test_display_name_prettified(self):
        self.assertEqual(PropertyMetadata('unit_price', Decimal).display_name, 'Unit Price')

    def test_display_name_from_annotation(self):
        category = next(p for p in type_properties(OrderLine) if p.name == 'category_id')
        self.assertEqual(category.display_name, 'Category')

    def test_properties_in_declaration_order(self):
        names = [p.name for p in type_properties(OrderLine)]
        self.assertEqual(names[:3], ['is_active', 'is_dirty', 'id'])
        self.assertEqual(names[-1], 'sku')

    def test_class_records_merged_into_complex_property(self):
        """A complex property picks up the class level records of its type."""
        product = next(p for p in type_properties(Allocation) if p.name == 'product')
        self.assertIsNotNone(product.get(TableLink))
        self.assertEqual(product.get(TableColumn).display_property, 'stock')

    def test_link_dropped_on_scalar(self):
        @dataclass
        class Linked:
            name: Annotated[str, TableLink(controller='things')] = ''

        self.assertIsNone(type_properties(Linked)[0].get(TableLink))

    def test_root_metadata_carries_class_records(self):
        self.assertIsNotNone(model_metadata(Product).get(TableLink))

    def test_property_annotation(self):
        self.assertIsNotNone(property_annotation(Customer, 'email'))
        self.assertIsNone(property_annotation(Customer, 'missing'))


class TestDefaults(unittest.TestCase):

    def test_default_values(self):
        self.assertIsNone(default_value(PropertyMetadata('a', Optional[int])))
        self.assertIs(default_value(PropertyMetadata('b', bool)), False)
        self.assertEqual(default_value(PropertyMetadata('c', Status)), Status.PENDING)
        self.assertEqual(default_value(PropertyMetadata('d', int)), 0)
        self.assertEqual(default_value(PropertyMetadata('e', Decimal)), Decimal(0))
        self.assertIsNone(default_value(PropertyMetadata('f', str)))

    def test_default_constructor(self):
        self.assertTrue(has_default_constructor(Category))
        self.assertFalse(has_default_constructor(Measurement))


def test_describe_resolves_nested_values():
    product = Product(id=3, name='Hammer', category=Category(1, 'Tools'))
    row = describe(product)
    assert row.resolve(('category', 'name')).value == 'Tools'
    assert row.resolve(('name',)).display_name == 'Name'


def test_describe_null_complex_yields_null_children():
    row = describe(Product(name='Loose'))
    assert row.resolve(('supplier', 'name')).value is None


def test_resolve_unknown_property_raises():
    row = describe(Supplier())
    with pytest.raises(ConfigurationError):
        row.resolve(('missing',))


def test_descriptor_delegates_to_metadata():
    row = describe(Customer(name='Ann', email='ann@example.com'))
    email = row.find('email')
    assert email.value == 'ann@example.com'
    assert email.is_nullable
    assert email.kind is PropertyKind.SCALAR
