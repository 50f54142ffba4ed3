"""SQL-backed persistence for user records."""

import logging
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import AlreadyExistsError, NotFoundError, StoreError
from .schemas.user import User, UserRequest

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

_USER_COLUMNS = (
    users.c.id,
    users.c.first_name,
    users.c.last_name,
    users.c.email,
    users.c.created_at,
    users.c.updated_at,
)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _is_duplicate_key(exc: IntegrityError) -> bool:
    """Whether ``exc`` is a unique-constraint violation rather than any other integrity failure."""
    orig = exc.orig
    return (
        getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION
        or getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE"
    )


class UserStore:
    """Create, fetch and replace user rows through a SQLAlchemy engine.

    Every method runs one statement in its own transaction. Failures surface as
    :class:`~users_api.errors.NotFoundError`,
    :class:`~users_api.errors.AlreadyExistsError` or
    :class:`~users_api.errors.StoreError`.
    """

    def __init__(self, engine: Engine):
        self._engine = engine

    def create_schema(self) -> None:
        metadata.create_all(self._engine)

    def ping(self) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError("failed to ping database") from exc

    def close(self) -> None:
        """Release every pooled connection."""
        self._engine.dispose()

    def create_user(self, request: UserRequest) -> User:
        now = _current_timestamp()
        query = (
            insert(users)
            .values(
                first_name=request.first_name,
                last_name=request.last_name,
                email=str(request.email),
                created_at=now,
                updated_at=now,
            )
            .returning(*_USER_COLUMNS)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(query).mappings().one()
        except IntegrityError as exc:
            if _is_duplicate_key(exc):
                raise AlreadyExistsError(str(request.email)) from exc
            raise StoreError("failed to create user") from exc
        except SQLAlchemyError as exc:
            raise StoreError("failed to create user") from exc

        logger.debug("Created user %s", row["id"])
        return User.model_validate(dict(row))

    def get_user(self, user_id: int) -> User:
        query = select(*_USER_COLUMNS).where(users.c.id == user_id)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query).mappings().one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError("failed to get user") from exc

        if row is None:
            raise NotFoundError(user_id)
        return User.model_validate(dict(row))

    def update_user(self, user_id: int, request: UserRequest) -> User:
        """Replace the mutable fields of ``user_id`` and refresh ``updated_at``."""
        query = (
            update(users)
            .where(users.c.id == user_id)
            .values(
                first_name=request.first_name,
                last_name=request.last_name,
                email=str(request.email),
                updated_at=_current_timestamp(),
            )
            .returning(*_USER_COLUMNS)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(query).mappings().one_or_none()
        except IntegrityError as exc:
            if _is_duplicate_key(exc):
                raise AlreadyExistsError(str(request.email)) from exc
            raise StoreError("failed to update user") from exc
        except SQLAlchemyError as exc:
            raise StoreError("failed to update user") from exc

        if row is None:
            raise NotFoundError(user_id)
        logger.debug("Updated user %s", user_id)
        return User.model_validate(dict(row))
