"""Unit tests for users index creation."""

import unittest
from unittest.mock import MagicMock

from pymongo.errors import OperationFailure

from adapter.mongodb.indexes import create_index_safe, ensure_all_indexes, ensure_user_indexes


class TestEnsureUserIndexes(unittest.TestCase):

    def test_creates_independent_partial_unique_indexes(self):
        collection = MagicMock()

        self.assertTrue(ensure_user_indexes(collection))

        collection.create_index.assert_any_call(
            [('email', 1)], name='idx_users_email', unique=True,
            partialFilterExpression={'enabled': True},
        )
        collection.create_index.assert_any_call(
            [('userName', 1)], name='idx_users_username', unique=True,
            partialFilterExpression={'enabled': True},
        )
        self.assertEqual(collection.create_index.call_count, 2)

    def test_returns_false_on_driver_error(self):
        collection = MagicMock()
        collection.create_index.side_effect = OperationFailure("not authorized", 13)

        self.assertFalse(ensure_user_indexes(collection))

    def test_ensure_all_indexes_uses_users_collection(self):
        db = MagicMock()

        ensure_all_indexes(db)

        db.__getitem__.assert_called_once_with('users')


class TestCreateIndexSafe(unittest.TestCase):

    def test_replaces_unscoped_index_on_same_key(self):
        collection = MagicMock()
        collection.create_index.side_effect = [
            OperationFailure("Index already exists with a different name: email_1", 85),
            'idx_users_email',
        ]
        collection.index_information.return_value = {
            '_id_': {'key': [('_id', 1)]},
            'email_1': {'key': [('email', 1)], 'unique': True},
        }

        result = create_index_safe(collection, [('email', 1)], 'idx_users_email', unique=True)

        self.assertTrue(result)
        collection.drop_index.assert_called_once_with('email_1')

    def test_reraises_unrelated_errors(self):
        collection = MagicMock()
        collection.create_index.side_effect = OperationFailure("not authorized", 13)

        with self.assertRaises(OperationFailure):
            create_index_safe(collection, [('email', 1)], 'idx_users_email')


if __name__ == '__main__':
    unittest.main()
