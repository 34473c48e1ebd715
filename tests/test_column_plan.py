"""
Tests for the column plan builder.
"""

import unittest
from types import SimpleNamespace

import pytest

from modeltable import ConfigurationError, TableEdit, TableSettings
from modeltable.metadata import model_metadata
from modeltable.template import TableRenderContext, build_column_plan, load_option_lists
from modeltable.template.formatters import INTEGRAL_TOTAL_FORMAT

from sample_models import AuditEntry, Allocation, Customer, Order, OrderLine, Product, Sale


def plan_for(row_type, edit=False):
    """Build the column plan of row_type and return the render context."""
    metadata = model_metadata(row_type)
    context = TableRenderContext('rows', edit, TableSettings())
    if edit:
        context.apply_edit_options(metadata.get(TableEdit))
    build_column_plan(metadata, context)
    return context


def column(context, *path):
    return next(c for c in context.columns if c.path == path)


class TestReadOnlyPlan(unittest.TestCase):
    """Test plans built for read-only tables."""

    def test_nested_complex_flattened_in_place(self):
        context = plan_for(Customer)
        paths = [c.path for c in context.columns.visible()]
        self.assertEqual(paths, [
            ('name',), ('email',), ('address', 'street'), ('address', 'city'), ('active',)
        ])

    def test_email_column_flagged(self):
        context = plan_for(Customer)
        self.assertTrue(column(context, 'email').is_email)
        self.assertFalse(column(context, 'name').is_email)

    def test_hidden_and_excluded_columns(self):
        context = plan_for(Product)
        self.assertTrue(column(context, 'id').is_hidden)
        self.assertTrue(column(context, 'internal_code').is_excluded)
        # Nested collections are never rendered
        self.assertTrue(column(context, 'tags').is_excluded)

    def test_class_level_link_on_display_property(self):
        context = plan_for(Product)
        name = column(context, 'name')
        self.assertTrue(name.is_link)
        self.assertEqual(name.link.controller, 'products')
        self.assertEqual(name.link_path, ())
        self.assertEqual(context.row_link.controller, 'products')

    def test_property_level_link_is_single_column(self):
        context = plan_for(Product)
        supplier = column(context, 'supplier')
        self.assertTrue(supplier.is_link)
        self.assertEqual(supplier.link.controller, 'suppliers')
        self.assertEqual(supplier.link_path, ('supplier',))
        self.assertFalse(any(c.path[:1] == ('supplier',) and len(c.path) > 1 for c in context.columns))

    def test_display_property_uses_child_header(self):
        context = plan_for(Product)
        category = column(context, 'category')
        self.assertEqual(category.display_property, 'name')
        self.assertEqual(category.header_text, 'Name')

    def test_totals_formats(self):
        context = plan_for(Product)
        self.assertEqual(column(context, 'price').format_string, '{0:,.2f}')
        self.assertEqual(column(context, 'stock').format_string, INTEGRAL_TOTAL_FORMAT)
        self.assertTrue(context.columns.has_totals)

    def test_no_repeat_only_honored_in_leading_chain(self):
        """region and city form a chain from the first column; channel follows a plain column."""
        context = plan_for(Sale)
        self.assertTrue(column(context, 'region').no_repeat)
        self.assertTrue(column(context, 'city').no_repeat)
        self.assertFalse(column(context, 'product').no_repeat)
        self.assertFalse(column(context, 'channel').no_repeat)

    def test_flags_are_plain_columns_in_read_only_mode(self):
        context = plan_for(OrderLine)
        self.assertTrue(column(context, 'is_active').is_visible)


class TestEditablePlan(unittest.TestCase):
    """Test plans built for editable tables."""

    def test_flag_columns_hidden(self):
        context = plan_for(OrderLine, edit=True)
        active = column(context, 'is_active')
        dirty = column(context, 'is_dirty')
        self.assertTrue(active.is_hidden and active.is_active_flag)
        self.assertTrue(dirty.is_hidden and dirty.is_dirty_flag)

    def test_links_ignored_in_edit_mode(self):
        context = plan_for(Product, edit=True)
        self.assertFalse(column(context, 'name').is_link)
        paths = [c.path for c in context.columns.visible()]
        self.assertIn(('supplier', 'name'), paths)

    def test_option_list_properties(self):
        context = plan_for(OrderLine, edit=True)
        self.assertEqual(column(context, 'description').data_list_property, 'descriptions')
        self.assertEqual(column(context, 'category_id').select_list_property, 'categories')

    def test_read_only_and_validation(self):
        context = plan_for(OrderLine, edit=True)
        self.assertTrue(column(context, 'sku').is_readonly)
        self.assertFalse(column(context, 'sku').require_validation)
        self.assertTrue(column(context, 'description').require_validation)

    def test_read_only_class_makes_every_column_read_only(self):
        context = plan_for(AuditEntry, edit=True)
        self.assertTrue(all(c.is_readonly for c in context.columns.visible()))

    def test_display_property_totals(self):
        context = plan_for(Allocation, edit=True)
        product = column(context, 'product')
        self.assertTrue(product.include_totals)
        self.assertEqual(product.header_text, 'Stock')
        self.assertEqual(product.format_string, INTEGRAL_TOTAL_FORMAT)

    def test_structural_counts(self):
        context = plan_for(OrderLine, edit=True)
        self.assertEqual(context.leading_structural_count(), 0)
        self.assertEqual(context.trailing_structural_count(), 2)


class TestOptionLists(unittest.TestCase):
    """Test loading data lists and select lists from the parent model."""

    def setUp(self):
        self.metadata = model_metadata(OrderLine)
        self.context = plan_for(OrderLine, edit=True)

    def test_lists_loaded(self):
        load_option_lists(self.context, self.metadata, Order())
        self.assertEqual(self.context.data_lists['description'], ['Widget', 'Gadget'])
        options = self.context.select_lists['category_id']
        self.assertEqual([(o.value, o.text) for o in options], [('', 'Select...'), ('1', 'Tools'), ('2', 'Parts')])

    def test_missing_list_rejected(self):
        parent = SimpleNamespace(descriptions=['Widget'])
        with self.assertRaises(ConfigurationError):
            load_option_lists(self.context, self.metadata, parent)

    def test_null_list_rejected(self):
        parent = Order(categories=None)
        with self.assertRaises(ConfigurationError):
            load_option_lists(self.context, self.metadata, parent)

    def test_empty_list_rejected(self):
        parent = Order(descriptions=[])
        with self.assertRaises(ConfigurationError):
            load_option_lists(self.context, self.metadata, parent)

    def test_wrong_type_rejected(self):
        parent = Order(descriptions='Widget')
        with self.assertRaises(ConfigurationError):
            load_option_lists(self.context, self.metadata, parent)

    def test_data_list_must_hold_strings(self):
        parent = Order(descriptions=[1, 2])
        with self.assertRaises(ConfigurationError):
            load_option_lists(self.context, self.metadata, parent)


@pytest.mark.parametrize('items', [
    [('1', 'Tools')],
    [{'value': '1', 'text': 'Tools'}],
])
def test_select_items_coerced(items):
    context = plan_for(OrderLine, edit=True)
    load_option_lists(context, model_metadata(OrderLine), Order(categories=items))
    assert context.select_lists['category_id'][1].text == 'Tools'
