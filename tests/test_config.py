"""
Tests for rendering settings and environment variable validation.
"""

import unittest
from unittest import mock

from modeltable import TableSettings, configure, get_settings, reset_settings
from modeltable.config import validate_environment_variable


class TestValidateEnvironmentVariable(unittest.TestCase):
    """Test reading single settings from a mapping."""

    def test_missing_uses_default(self):
        self.assertEqual(validate_environment_variable('X', 'fallback', environ={}), 'fallback')

    def test_converter_applied(self):
        self.assertEqual(validate_environment_variable('X', 0, converter=int, environ={'X': '5'}), 5)

    def test_invalid_conversion_uses_default(self):
        with self.assertLogs('modeltable', level='WARNING'):
            value = validate_environment_variable('X', 3, converter=int, environ={'X': 'five'})
        self.assertEqual(value, 3)

    def test_failed_validation_uses_default(self):
        with self.assertLogs('modeltable', level='WARNING'):
            value = validate_environment_variable('X', 3, validator=lambda v: v > 0,
                                                  converter=int, environ={'X': '-1'})
        self.assertEqual(value, 3)


class TestTableSettings(unittest.TestCase):

    def tearDown(self):
        reset_settings()

    def test_defaults(self):
        settings = TableSettings.from_env({})
        self.assertEqual(settings.yes_text, 'Yes')
        self.assertEqual(settings.no_text, 'No')
        self.assertEqual(settings.index_placeholder, '#')
        self.assertEqual(settings.indexer_placeholder, '%')
        self.assertTrue(settings.validate_controls)

    def test_overrides(self):
        settings = TableSettings.from_env({
            'MODELTABLE_YES_TEXT': 'Oui',
            'MODELTABLE_DETAILS_TEXT': 'View',
            'MODELTABLE_VALIDATE_CONTROLS': 'off',
        })
        self.assertEqual(settings.yes_text, 'Oui')
        self.assertEqual(settings.details_text, 'View')
        self.assertFalse(settings.validate_controls)

    def test_invalid_token_rejected(self):
        """Tokens end up inside attribute values and names."""
        with self.assertLogs('modeltable', level='WARNING'):
            settings = TableSettings.from_env({'MODELTABLE_INDEX_PLACEHOLDER': '"]'})
        self.assertEqual(settings.index_placeholder, '#')

    def test_to_dict(self):
        self.assertEqual(TableSettings(yes_text='Y').to_dict()['yes_text'], 'Y')

    def test_configure_replaces_process_settings(self):
        settings = configure(TableSettings(no_text='Nope'))
        self.assertIs(get_settings(), settings)

    def test_settings_loaded_from_environment(self):
        with mock.patch.dict('os.environ', {'MODELTABLE_EDIT_TEXT': 'Change'}):
            reset_settings()
            self.assertEqual(get_settings().edit_text, 'Change')
