"""Tests for the console client."""

import unittest
from unittest.mock import MagicMock, patch

from cli.api_client import DeutschWegAPIClient
from cli.console import ConsoleUI

MODES = [{'mode': 'review', 'categories': []}, {'mode': 'noun-gender', 'categories': ['nouns']}]


class TestAPIClient(unittest.TestCase):

    def setUp(self):
        self.client = DeutschWegAPIClient(base_url='http://test:8000/')
        self.client.session = MagicMock()
        self.client.session.get.return_value.json.return_value = {'items': []}

    def test_list_catalog_with_level(self):
        self.client.list_catalog('modalVerbs', level='A2')
        self.client.session.get.assert_called_once_with(
            'http://test:8000/api/catalog/modalVerbs', params={'level': 'A2'}
        )

    def test_list_catalog_without_level(self):
        self.client.list_catalog('nouns')
        self.client.session.get.assert_called_once_with(
            'http://test:8000/api/catalog/nouns', params={}
        )


class TestConsoleCatalog(unittest.TestCase):

    def setUp(self):
        self.client = MagicMock()
        self.client.list_catalog.return_value = {
            'category': 'nouns', 'name': 'Nouns', 'level': 'A1',
            'items': [
                {'id': 'n-apfel', 'level': 'A1', 'word': 'Apfel', 'article': 'der', 'english': 'apple'},
                {'id': 'v-machen', 'level': 'A1', 'infinitive': 'machen', 'english': 'to do'},
            ],
        }
        self.ui = ConsoleUI(self.client, level='A1')

    def printed(self, mock_print) -> str:
        return '\n'.join(' '.join(str(a) for a in c.args) for c in mock_print.call_args_list)

    @patch('builtins.print')
    def test_show_catalog(self, mock_print):
        self.ui.show_catalog('nouns')
        self.client.list_catalog.assert_called_once_with('nouns', level='A1')
        output = self.printed(mock_print)
        self.assertIn('der Apfel', output)
        self.assertIn('machen', output)
        self.assertIn('Nouns (A1)', output)

    @patch('builtins.print')
    def test_show_catalog_needs_category(self, mock_print):
        self.ui.show_catalog('')
        self.client.list_catalog.assert_not_called()

    @patch('builtins.print')
    @patch('builtins.input', side_effect=['list modalVerbs', '2'])
    def test_list_command_in_mode_menu(self, mock_input, mock_print):
        mode = self.ui.choose_mode(MODES)
        self.assertEqual(mode, 'noun-gender')
        self.client.list_catalog.assert_called_once_with('modalVerbs', level='A1')

    @patch('builtins.print')
    @patch('builtins.input', side_effect=['exit'])
    def test_exit_from_menu(self, mock_input, mock_print):
        self.assertIsNone(self.ui.choose_mode(MODES))


if __name__ == '__main__':
    unittest.main()
