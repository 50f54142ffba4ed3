"""Failure conditions reported by the user store."""


class UserStoreError(Exception):
    """Base class for every failure raised by :class:`users_api.store.UserStore`."""


class NotFoundError(UserStoreError):
    """The requested user id has no corresponding row."""

    def __init__(self, user_id: int):
        super().__init__(f"user {user_id} not found")
        self.user_id = user_id


class AlreadyExistsError(UserStoreError):
    """A write violated the unique email constraint."""

    def __init__(self, email: str):
        super().__init__(f"user with email {email!r} already exists")
        self.email = email


class StoreError(UserStoreError):
    """Unclassified store failure. The original exception is kept as ``__cause__``."""
