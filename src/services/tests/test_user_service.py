"""Unit tests for UserService."""

import unittest
from unittest.mock import MagicMock

from adapter.fake.password_hasher import FakePasswordHasher
from adapter.fake.user_collection import FakeUserCollection
from adapter.mongodb.user_repository import MongoUserRepository
from domain.model.errors import DuplicateError, NotFoundError, ValidationError
from domain.model.user import User, UserUpdate
from services.user_rules import UserRules
from services.user_service import UserService


def _user(n: int = 1, **kwargs) -> User:
    defaults = {
        'name': f'User {n}',
        'email': f'user{n}@example.com',
        'user_name': f'user{n}',
        'password': 'Test123*',
    }
    defaults.update(kwargs)
    return User(**defaults)


class TestUserService(unittest.TestCase):

    def setUp(self):
        self.collection = FakeUserCollection()
        self.hasher = FakePasswordHasher()
        self.repo = MongoUserRepository(self.collection, self.hasher)
        self.service = UserService(self.repo, UserRules())

    # ── create ───────────────────────────────────────────────

    def test_create_then_get(self):
        user_id = self.service.create_user(User(
            name='Cristian', email='cristian@gmail.com', user_name='cristian', password='Test123*',
        ))

        self.assertTrue(user_id)
        user = self.service.get_user(user_id)
        self.assertEqual(user.name, 'Cristian')
        self.assertEqual(user.email, 'cristian@gmail.com')
        self.assertEqual(user.user_name, 'cristian')
        self.assertNotEqual(user.password, 'Test123*')
        self.assertTrue(self.hasher.verify('Test123*', user.password))

    def test_create_hashes_exactly_once(self):
        self.service.create_user(_user())

        self.assertEqual(self.hasher.calls, ['Test123*'])

    def test_create_invalid_user_raises_with_all_violations(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_user(_user(name='', email='nope', password='abc'))

        self.assertEqual(len(ctx.exception.violations), 3)
        self.assertEqual(self.collection.calls, [])

    def test_create_duplicate_raises_duplicate_error(self):
        self.service.create_user(_user(1))

        with self.assertRaises(DuplicateError):
            self.service.create_user(_user(2, user_name='user1'))

    def test_create_reuses_email_after_delete(self):
        first_id = self.service.create_user(_user(1))
        self.service.delete_user(first_id)

        self.assertTrue(self.service.create_user(_user(1)))

    # ── batch ────────────────────────────────────────────────

    def test_create_batch(self):
        ids = self.service.create_user_batch(iter([_user(1), _user(2)]))

        self.assertEqual(len(ids), 2)
        self.assertEqual(self.service.get_user(ids[1]).user_name, 'user2')

    def test_create_batch_rejects_any_invalid_row(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.create_user_batch([_user(1), _user(2, password='secretpassword')])

        violation = ctx.exception.violations[0]
        self.assertEqual(violation.row, 2)
        self.assertEqual(violation.field, 'password')
        self.assertEqual(self.collection.docs, {})

    def test_create_batch_rejects_empty(self):
        with self.assertRaises(ValidationError):
            self.service.create_user_batch([])

    # ── update / delete ──────────────────────────────────────

    def test_update_user(self):
        user_id = self.service.create_user(_user())

        user = self.service.update_user(user_id, UserUpdate(name='X', password='Changed9!'))

        self.assertEqual(user.name, 'X')
        self.assertTrue(self.hasher.verify('Changed9!', user.password))

    def test_update_rejects_empty_update(self):
        repo = MagicMock()
        service = UserService(repo, UserRules())

        with self.assertRaises(ValidationError):
            service.update_user('abc', UserUpdate())

        repo.update.assert_not_called()

    def test_update_rejects_invalid_fields(self):
        user_id = self.service.create_user(_user())

        with self.assertRaises(ValidationError) as ctx:
            self.service.update_user(user_id, UserUpdate(email='not-an-email'))

        self.assertEqual(ctx.exception.violations[0].field, 'email')

    def test_soft_delete_hides_user_everywhere(self):
        user_id = self.service.create_user(_user())

        self.service.delete_user(user_id)

        with self.assertRaises(NotFoundError):
            self.service.get_user(user_id)
        with self.assertRaises(NotFoundError):
            self.service.update_user(user_id, UserUpdate(name='X'))
        with self.assertRaises(NotFoundError):
            self.service.delete_user(user_id)


if __name__ == '__main__':
    unittest.main()
