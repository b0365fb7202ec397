"""Users database models."""

import uuid
from datetime import datetime
from typing import Any

from pytz import UTC
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Boolean, Column, DateTime, String, event, inspect

from ...domain import DEFAULT_ROLE, User
from ..passwords import hash_password, check_password

db: Any = SQLAlchemy()


def _new_user_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(tz=UTC)


class DBUser(db.Model):  # type: ignore
    """
    QA monitor user.

    +-------------+--------------+------+-----+---------+
    | Field       | Type         | Null | Key | Default |
    +-------------+--------------+------+-----+---------+
    | user_id     | varchar(32)  | NO   | PRI | uuid4   |
    | name        | varchar(100) | NO   |     |         |
    | email       | varchar(255) | NO   | UNI |         |
    | password    | varchar(60)  | NO   |     |         |
    | role        | varchar(20)  | NO   |     | tester  |
    | is_active   | tinyint(1)   | NO   |     | 1       |
    | created_at  | datetime     | NO   |     |         |
    | updated_at  | datetime     | NO   |     |         |
    +-------------+--------------+------+-----+---------+

    ``password`` may be assigned in plaintext; it is replaced by its bcrypt
    hash when the row is written (see :func:`_hash_password_on_write`).
    """

    __tablename__ = 'qa_monitor_users'

    user_id = Column(String(32), primary_key=True, default=_new_user_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(60), nullable=False)
    role = Column(String(20), nullable=False, default=DEFAULT_ROLE)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False,
                        default=_now, onupdate=_now)

    def compare_password(self, candidate: str) -> bool:
        """Check ``candidate`` against the stored password hash."""
        return check_password(candidate, self.password)

    def to_domain(self) -> User:
        """Generate the public :class:`.User` for this record."""
        return User(
            user_id=self.user_id,
            name=self.name,
            email=self.email,
            role=self.role,
            is_active=bool(self.is_active),
        )


@event.listens_for(DBUser, 'before_insert')
@event.listens_for(DBUser, 'before_update')
def _hash_password_on_write(mapper: Any, connection: Any,
                            target: DBUser) -> None:
    """Hash a plaintext password that was set since the last write."""
    if inspect(target).attrs.password.history.has_changes():
        target.password = hash_password(target.password)
