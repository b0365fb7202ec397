"""Testing helpers."""

from typing import Optional
from unittest import TestCase

from qa_accounts.factory import create_web_app
from qa_accounts.services import tokens, users
from qa_accounts.services.users.models import db, DBUser

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'BCRYPT_ROUNDS': 4,
    'JWT_SECRET': 'foosecret',
    'JWT_EXPIRES_IN': 3600,
    'AUTH_SESSION_COOKIE_SECURE': False,
    'LOG_JSON': False,
}


class FakeResolver(object):
    """Resolves every request to the same user."""

    def __init__(self, user_id: Optional[str]) -> None:
        self.user_id = user_id

    def resolve(self, request: object) -> Optional[str]:
        return self.user_id


class AppTestCase(TestCase):
    """Sets up an app with an empty in-memory users database."""

    resolver: Optional[object] = None

    def setUp(self):
        """Create the app and the users table."""
        self.app = create_web_app(dict(TEST_CONFIG),
                                  identity_resolver=self.resolver)
        self.context = self.app.app_context()
        self.context.push()
        users.create_all()
        self.client = self.app.test_client()

    def tearDown(self):
        """Drop everything."""
        db.session.remove()
        users.drop_all()
        self.context.pop()

    def add_user(self, email: str = 'tess@qa.io', password: str = 'secret1',
                 name: str = 'Tess', role: str = 'tester',
                 is_active: bool = True) -> DBUser:
        """Insert a user directly, bypassing the API."""
        db_user = DBUser(name=name, email=email, password=password,
                         role=role, is_active=is_active)
        db.session.add(db_user)
        db.session.commit()
        return db_user

    def reload_user(self, email: str) -> DBUser:
        """Get a fresh copy of a user record from the database."""
        db.session.expire_all()
        return users.get_user_by_email(email)

    def count_users(self) -> int:
        """Number of user records in the database."""
        return db.session.query(DBUser).count()

    def token_for(self, db_user: DBUser) -> str:
        """Issue a token that the app will accept."""
        return tokens.generate_token(db_user.to_domain(),
                                     TEST_CONFIG['JWT_SECRET'], 3600)

    def auth_headers(self, db_user: DBUser) -> dict:
        """Bearer header for ``db_user``."""
        return {'Authorization': f'Bearer {self.token_for(db_user)}'}
