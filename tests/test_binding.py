"""
Tests for binding posted editable tables back to models.
"""

import unittest
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import pytest
from werkzeug.datastructures import MultiDict

from modeltable import BindingError, NoConstructorError, bind_row, bind_rows
from modeltable.binding import convert_value
from modeltable.metadata import PropertyMetadata

from sample_models import Allocation, Measurement, OrderLine, Status


class TestBindRows(unittest.TestCase):
    """Test binding the rows of a posted table."""

    def setUp(self):
        self.form = MultiDict([
            ('lines.Index', '0'),
            ('lines[0].is_active', 'True'),
            ('lines[0].is_dirty', 'True'),
            ('lines[0].id', '7'),
            ('lines[0].description', 'Widget'),
            ('lines[0].category_id', ''),
            ('lines[0].quantity', '1,200'),
            ('lines[0].unit_price', '2.50'),
            ('lines[0].status', 'SHIPPED'),
            ('lines[0].urgent', 'true'),
            ('lines[0].urgent', 'false'),
            ('lines[0].approved', 'false'),
            ('lines.Index', 'k1'),
            ('lines[k1].description', 'Gadget'),
            ('lines[k1].urgent', 'false'),
            ('lines[k1].quantity', ''),
            ('lines[k1].category_id', '2'),
        ])

    def test_rows_follow_index_values(self):
        """Client generated tokens bind like server indices."""
        lines = bind_rows(self.form, 'lines', OrderLine)
        self.assertEqual([line.description for line in lines], ['Widget', 'Gadget'])

    def test_values_converted(self):
        line = bind_rows(self.form, 'lines', OrderLine)[0]
        self.assertEqual(line.id, 7)
        self.assertIsNone(line.category_id)
        self.assertEqual(line.quantity, 1200)
        self.assertEqual(line.unit_price, Decimal('2.50'))
        self.assertEqual(line.status, Status.SHIPPED)
        self.assertIs(line.approved, False)
        self.assertIs(line.is_dirty, True)

    def test_checked_checkbox_wins_over_hidden_false(self):
        first, second = bind_rows(self.form, 'lines', OrderLine)
        self.assertIs(first.urgent, True)
        self.assertIs(second.urgent, False)

    def test_unposted_values_keep_defaults(self):
        second = bind_rows(self.form, 'lines', OrderLine)[1]
        self.assertEqual(second.quantity, 0)
        self.assertEqual(second.category_id, 2)
        self.assertEqual(second.status, Status.PENDING)
        self.assertIsNone(second.notes)

    def test_no_rows_posted(self):
        self.assertEqual(bind_rows(MultiDict(), 'lines', OrderLine), [])

    def test_plain_mapping_accepted(self):
        lines = bind_rows({'lines.Index': '0', 'lines[0].description': 'Bolt'}, 'lines', OrderLine)
        self.assertEqual(lines[0].description, 'Bolt')

    def test_invalid_value_raises(self):
        self.form['lines[0].quantity'] = 'many'
        with self.assertRaises(BindingError) as ctx:
            bind_rows(self.form, 'lines', OrderLine)
        self.assertEqual(ctx.exception.name, 'lines[0].quantity')

    def test_row_type_without_default_constructor(self):
        with self.assertRaises(NoConstructorError):
            bind_rows(MultiDict([('m.Index', '0')]), 'm', Measurement)


class TestBindRow(unittest.TestCase):

    def test_nested_complex_created(self):
        form = MultiDict([('product.id', '5'), ('product.name', 'Saw'), ('product.stock', '3'), ('note', 'x')])
        allocation = bind_row(form, '', Allocation)
        self.assertEqual(allocation.product.name, 'Saw')
        self.assertEqual(allocation.product.stock, 3)
        self.assertEqual(allocation.note, 'x')

    def test_nested_complex_left_alone_when_not_posted(self):
        allocation = bind_row(MultiDict([('note', 'x')]), '', Allocation)
        self.assertIsNone(allocation.product)

    def test_existing_instance_updated(self):
        line = OrderLine(description='Old', quantity=4)
        bind_row(MultiDict([('row.description', 'New')]), 'row', OrderLine, instance=line)
        self.assertEqual(line.description, 'New')
        self.assertEqual(line.quantity, 4)


@dataclass
class Sample:
    when: Optional[date] = None
    stamp: Optional[datetime] = None
    key: Optional[UUID] = None
    blob: bytes = b''
    ratio: float = 0.0


def metadata_of(name):
    return PropertyMetadata(name, Sample.__annotations__[name], Sample)


@pytest.mark.parametrize('name, raw, expected', [
    ('when', '2024-05-01', date(2024, 5, 1)),
    ('when', '', None),
    ('stamp', '2024-05-01T10:30:00', datetime(2024, 5, 1, 10, 30)),
    ('key', '12345678-1234-5678-1234-567812345678', UUID('12345678-1234-5678-1234-567812345678')),
    ('blob', 'AQI=', b'\x01\x02'),
    ('ratio', '1,234.5', 1234.5),
    ('ratio', '', 0.0),
])
def test_convert_value(name, raw, expected):
    assert convert_value(metadata_of(name), raw, name) == expected


def test_convert_enum_by_value():
    metadata = PropertyMetadata('status', Status)
    assert convert_value(metadata, '2', 'status') is Status.SHIPPED


@pytest.mark.parametrize('raw', ['on', 'yes', '1', 'True'])
def test_convert_boolean_true(raw):
    assert convert_value(PropertyMetadata('flag', bool), raw, 'flag') is True


@pytest.mark.parametrize('name, raw', [
    ('when', 'yesterday'),
    ('blob', 'not base64!'),
    ('key', 'xyz'),
])
def test_convert_invalid_raises(name, raw):
    with pytest.raises(BindingError):
        convert_value(metadata_of(name), raw, name)


def test_convert_unknown_boolean_raises():
    with pytest.raises(BindingError):
        convert_value(PropertyMetadata('flag', bool), 'maybe', 'flag')
