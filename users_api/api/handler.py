import logging
from typing import Optional, Protocol

from fastapi import Request

from ..errors import AlreadyExistsError, NotFoundError, UserStoreError
from ..schemas.user import User, UserRequest
from .results import (
    CreateUser201,
    CreateUser400,
    CreateUser409,
    CreateUser500,
    CreateUserResult,
    GetUser200,
    GetUser404,
    GetUser500,
    GetUserResult,
    Health200,
    HealthResult,
    UpdateUser200,
    UpdateUser400,
    UpdateUser404,
    UpdateUser500,
    UpdateUserResult,
)

logger = logging.getLogger(__name__)

MISSING_BODY = "Missing request body"
USER_EXISTS = "User already exists"
USER_NOT_FOUND = "User not found"
INTERNAL_ERROR = "Internal server error"


class UserRepository(Protocol):
    def create_user(self, request: UserRequest) -> User: ...

    def get_user(self, user_id: int) -> User: ...

    def update_user(self, user_id: int, request: UserRequest) -> User: ...

    def close(self) -> None: ...


class StrictServerInterface(Protocol):
    def health(self) -> HealthResult: ...

    def create_user(self, body: Optional[UserRequest]) -> CreateUserResult: ...

    def get_user(self, user_id: int) -> GetUserResult: ...

    def update_user(self, user_id: int, body: Optional[UserRequest]) -> UpdateUserResult: ...


class UserHandler:
    """Maps user requests onto the repository and its failures onto response variants.

    Only :class:`NotFoundError` and :class:`AlreadyExistsError` are classified;
    any other store failure is logged and answered with a generic 500 message.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def health(self) -> HealthResult:
        return Health200(status="OK")

    def create_user(self, body: Optional[UserRequest]) -> CreateUserResult:
        if body is None:
            return CreateUser400(error=MISSING_BODY)

        try:
            user = self.repo.create_user(body)
        except AlreadyExistsError:
            return CreateUser409(error=USER_EXISTS)
        except UserStoreError:
            logger.exception("Failed to create user")
            return CreateUser500(error=INTERNAL_ERROR)

        return CreateUser201(user=user)

    def get_user(self, user_id: int) -> GetUserResult:
        try:
            user = self.repo.get_user(user_id)
        except NotFoundError:
            return GetUser404(error=USER_NOT_FOUND)
        except UserStoreError:
            logger.exception("Failed to get user", extra={"user_id": user_id})
            return GetUser500(error=INTERNAL_ERROR)

        return GetUser200(user=user)

    def update_user(self, user_id: int, body: Optional[UserRequest]) -> UpdateUserResult:
        if body is None:
            return UpdateUser400(error=MISSING_BODY)

        try:
            user = self.repo.update_user(user_id, body)
        except NotFoundError:
            return UpdateUser404(error=USER_NOT_FOUND)
        except UserStoreError:
            logger.exception("Failed to update user", extra={"user_id": user_id})
            return UpdateUser500(error=INTERNAL_ERROR)

        return UpdateUser200(user=user)


def get_handler(request: Request) -> UserHandler:
    return request.app.state.handler


# UserHandler must satisfy StrictServerInterface; checked by type checkers.
_: type[StrictServerInterface] = UserHandler
