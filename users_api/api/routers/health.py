from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...schemas.user import HealthResponse
from ..handler import UserHandler, get_handler
from ..results import to_response

router = APIRouter()


@router.get("/health", response_model=HealthResponse, operation_id="health")
def healthcheck(handler: UserHandler = Depends(get_handler)) -> JSONResponse:
    return to_response(handler.health())
