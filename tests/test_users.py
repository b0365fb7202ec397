"""Tests for :mod:`qa_accounts.services.users`."""

from unittest import mock

from sqlalchemy.exc import OperationalError

from qa_accounts.services import passwords, users
from qa_accounts.services.users.models import db

from .util import AppTestCase


class TestCreate(AppTestCase):
    """Tests for :func:`.users.create`."""

    def test_create(self):
        """A new user is stored with normalized fields and a hashed password."""
        user = users.create('  Tess  ', '  Tess@QA.io ', 'secret1')
        self.assertEqual(user.name, 'Tess')
        self.assertEqual(user.email, 'tess@qa.io')
        self.assertEqual(user.role, 'tester', 'Role defaults to tester')
        self.assertTrue(user.is_active)
        self.assertTrue(user.user_id)

        db_user = self.reload_user('tess@qa.io')
        self.assertEqual(db_user.user_id, user.user_id)
        self.assertNotEqual(db_user.password, 'secret1')
        self.assertTrue(db_user.compare_password('secret1'))
        self.assertIsNotNone(db_user.created_at)

    def test_create_with_role(self):
        """The role can be set explicitly."""
        user = users.create('Mo', 'mo@qa.io', 'secret1', role='manager')
        self.assertEqual(user.role, 'manager')

    def test_duplicate_email(self):
        """The unique constraint rejects an address in any letter case."""
        users.create('Tess', 'tess@qa.io', 'secret1')
        with self.assertRaises(users.DuplicateEmail):
            users.create('Other Tess', 'TESS@qa.io', 'secret2')
        self.assertEqual(self.count_users(), 1)
        self.assertEqual(self.reload_user('tess@qa.io').name, 'Tess')

    def test_session_usable_after_duplicate(self):
        """A failed insert is rolled back, not left pending."""
        users.create('Tess', 'tess@qa.io', 'secret1')
        with self.assertRaises(users.DuplicateEmail):
            users.create('Tess', 'tess@qa.io', 'secret1')
        users.create('Mo', 'mo@qa.io', 'secret1')
        self.assertEqual(self.count_users(), 2)


class TestLookups(AppTestCase):
    """Tests for the lookup functions."""

    def setUp(self):
        super(TestLookups, self).setUp()
        self.db_user = self.add_user()

    def test_does_email_exist(self):
        """Lookups ignore case and surrounding whitespace."""
        self.assertTrue(users.does_email_exist('tess@qa.io'))
        self.assertTrue(users.does_email_exist(' TESS@QA.IO '))
        self.assertFalse(users.does_email_exist('mo@qa.io'))

    def test_get_user_by_id(self):
        """Users can be loaded by ID."""
        db_user = users.get_user_by_id(self.db_user.user_id)
        self.assertEqual(db_user.email, 'tess@qa.io')

    def test_no_such_user(self):
        """Unknown IDs and addresses raise :class:`.NoSuchUser`."""
        with self.assertRaises(users.NoSuchUser):
            users.get_user_by_id('nope')
        with self.assertRaises(users.NoSuchUser):
            users.get_user_by_email('mo@qa.io')

    def test_database_unavailable(self):
        """Driver failures are reported as :class:`.Unavailable`."""
        error = OperationalError('SELECT', {}, Exception('gone'))
        with mock.patch.object(db.session, 'query', side_effect=error):
            with self.assertRaises(users.Unavailable):
                users.does_email_exist('tess@qa.io')


class TestSetPassword(AppTestCase):
    """Tests for :func:`.users.set_password`."""

    def setUp(self):
        super(TestSetPassword, self).setUp()
        self.db_user = self.add_user(password='secret1')

    def test_set_password(self):
        """The new password replaces the old one, hashed."""
        users.set_password(self.db_user, 'secret2')
        db_user = self.reload_user('tess@qa.io')
        self.assertNotEqual(db_user.password, 'secret2')
        self.assertTrue(db_user.compare_password('secret2'))
        self.assertFalse(db_user.compare_password('secret1'))

    def test_other_updates_keep_the_hash(self):
        """Only a changed password is hashed on write."""
        hashed = self.db_user.password
        self.db_user.name = 'Tessa'
        db.session.commit()
        db_user = self.reload_user('tess@qa.io')
        self.assertEqual(db_user.password, hashed)
        self.assertTrue(db_user.compare_password('secret1'))


class TestAuthenticate(AppTestCase):
    """Tests for :func:`.users.authenticate`."""

    def test_authenticate(self):
        """Correct credentials return the user."""
        self.add_user()
        user = users.authenticate('Tess@qa.io', 'secret1')
        self.assertEqual(user.email, 'tess@qa.io')

    def test_wrong_password(self):
        """A wrong password is rejected."""
        self.add_user()
        with self.assertRaises(users.PasswordAuthenticationFailed):
            users.authenticate('tess@qa.io', 'secret2')

    def test_no_such_user(self):
        """An unknown address is rejected after a full password check."""
        with mock.patch.object(passwords, 'dummy_check',
                               wraps=passwords.dummy_check) as mock_check:
            with self.assertRaises(users.NoSuchUser):
                users.authenticate('mo@qa.io', 'secret1')
        mock_check.assert_called_once_with('secret1')

    def test_known_user_skips_dummy_check(self):
        """Existing accounts are checked against their own hash."""
        self.add_user()
        with mock.patch.object(passwords, 'dummy_check') as mock_check:
            with self.assertRaises(users.PasswordAuthenticationFailed):
                users.authenticate('tess@qa.io', 'secret2')
        mock_check.assert_not_called()

    def test_deactivated(self):
        """A deactivated account cannot log in."""
        self.add_user(is_active=False)
        with self.assertRaises(users.AccountDeactivated):
            users.authenticate('tess@qa.io', 'secret1')
