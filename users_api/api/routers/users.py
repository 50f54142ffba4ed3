from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Path
from fastapi.responses import JSONResponse

from ...schemas.user import ErrorResponse, User, UserRequest
from ..handler import UserHandler, get_handler
from ..results import to_response

router = APIRouter()

MAX_USER_ID = 2**63 - 1

UserId = Annotated[int, Path(ge=0, le=MAX_USER_ID, description="Unique user identifier")]
OptionalUserRequest = Annotated[Optional[UserRequest], Body()]


@router.post(
    "/users",
    response_model=User,
    status_code=201,
    operation_id="postUser",
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_user(
    payload: OptionalUserRequest = None,
    handler: UserHandler = Depends(get_handler),
) -> JSONResponse:
    return to_response(handler.create_user(payload))


@router.get(
    "/users/{user_id}",
    response_model=User,
    operation_id="getUser",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_user(user_id: UserId, handler: UserHandler = Depends(get_handler)) -> JSONResponse:
    return to_response(handler.get_user(user_id))


@router.put(
    "/users/{user_id}",
    response_model=User,
    operation_id="putUser",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def update_user(
    user_id: UserId,
    payload: OptionalUserRequest = None,
    handler: UserHandler = Depends(get_handler),
) -> JSONResponse:
    return to_response(handler.update_user(user_id, payload))
