"""Tests for MongoDB settings and client lifecycle."""

import unittest
from unittest.mock import patch, MagicMock

from adapter.mongodb import connection


class TestRequireSettings(unittest.TestCase):

    def test_missing_url_is_fatal(self):
        with patch.object(connection, 'MONGO_URL', None), patch.object(connection, 'DATABASE_NAME', 'users_db'):
            with self.assertRaisesRegex(connection.MissingSettingError, "MONGO_URL"):
                connection.require_settings()

    def test_missing_database_is_fatal(self):
        with patch.object(connection, 'MONGO_URL', 'mongodb://localhost'), patch.object(connection, 'DATABASE_NAME', None):
            with self.assertRaisesRegex(connection.MissingSettingError, "MONGO_DATABASE"):
                connection.require_settings()

    def test_both_set(self):
        with patch.object(connection, 'MONGO_URL', 'mongodb://localhost'), patch.object(connection, 'DATABASE_NAME', 'users_db'):
            connection.require_settings()


class TestOperationTimeout(unittest.TestCase):

    def test_parse_timeout(self):
        cases = {
            None: None,
            '': None,
            '2.5': 2.5,
            '30': 30.0,
            'abc': None,
            '0': None,
            '-1': None,
            'nan': None,
            'inf': None,
        }
        for value, expected in cases.items():
            with self.subTest(value=value):
                self.assertEqual(connection.parse_timeout(value), expected)

    def _require_with_timeout(self, setting):
        with patch.object(connection, 'MONGO_URL', 'mongodb://localhost'), \
                patch.object(connection, 'DATABASE_NAME', 'users_db'), \
                patch.object(connection, 'OPERATION_TIMEOUT_SETTING', setting), \
                patch.object(connection, 'OPERATION_TIMEOUT', connection.parse_timeout(setting)):
            connection.require_settings()

    def test_non_numeric_timeout_is_reported_at_startup(self):
        with self.assertRaisesRegex(connection.InvalidSettingError, "MONGO_OPERATION_TIMEOUT.*'abc'"):
            self._require_with_timeout('abc')

    def test_non_positive_timeout_is_reported_at_startup(self):
        with self.assertRaises(connection.InvalidSettingError):
            self._require_with_timeout('0')

    def test_valid_or_unset_timeout_passes(self):
        self._require_with_timeout('5')
        self._require_with_timeout(None)


class TestGetMongodbClient(unittest.TestCase):

    def setUp(self):
        connection.reset_client()

    def tearDown(self):
        connection.reset_client()

    @patch('adapter.mongodb.connection.MongoClient')
    def test_caches_client_after_ping(self, mock_client_class):
        with patch.object(connection, 'MONGO_URL', 'mongodb://localhost'):
            first = connection.get_mongodb_client()
            second = connection.get_mongodb_client()

        self.assertIs(first, second)
        mock_client_class.assert_called_once()

    def test_returns_none_without_url(self):
        with patch.object(connection, 'MONGO_URL', None):
            self.assertIsNone(connection.get_mongodb_client())

    @patch('adapter.mongodb.connection.MongoClient')
    def test_close_client_closes_and_clears_cache(self, mock_client_class):
        with patch.object(connection, 'MONGO_URL', 'mongodb://localhost'):
            client = connection.get_mongodb_client()

        connection.close_client()

        client.close.assert_called_once()
        self.assertIsNone(connection._client_cache)


if __name__ == '__main__':
    unittest.main()
