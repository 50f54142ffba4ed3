"""Per-operation response variants.

Each operation returns exactly one of its variants; :func:`to_response` turns
the active variant into a JSON response with the matching status code.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from fastapi.responses import JSONResponse

from ..schemas.user import ErrorResponse, HealthResponse, User


@dataclass(frozen=True)
class _UserResult:
    status_code: ClassVar[int]
    user: User

    def body(self) -> dict:
        return self.user.model_dump(mode="json")


@dataclass(frozen=True)
class _ErrorResult:
    status_code: ClassVar[int]
    error: str

    def body(self) -> dict:
        return ErrorResponse(error=self.error).model_dump()


@dataclass(frozen=True)
class Health200:
    status_code: ClassVar[int] = 200
    status: str = "OK"

    def body(self) -> dict:
        return HealthResponse(status=self.status).model_dump()


class CreateUser201(_UserResult):
    status_code = 201


class CreateUser400(_ErrorResult):
    status_code = 400


class CreateUser409(_ErrorResult):
    status_code = 409


class CreateUser500(_ErrorResult):
    status_code = 500


class GetUser200(_UserResult):
    status_code = 200


class GetUser404(_ErrorResult):
    status_code = 404


class GetUser500(_ErrorResult):
    status_code = 500


class UpdateUser200(_UserResult):
    status_code = 200


class UpdateUser400(_ErrorResult):
    status_code = 400


class UpdateUser404(_ErrorResult):
    status_code = 404


class UpdateUser500(_ErrorResult):
    status_code = 500


HealthResult = Health200
CreateUserResult = Union[CreateUser201, CreateUser400, CreateUser409, CreateUser500]
GetUserResult = Union[GetUser200, GetUser404, GetUser500]
UpdateUserResult = Union[UpdateUser200, UpdateUser400, UpdateUser404, UpdateUser500]

Result = Union[HealthResult, CreateUserResult, GetUserResult, UpdateUserResult]


def to_response(result: Result) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body())
