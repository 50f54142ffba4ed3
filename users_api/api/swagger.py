from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from ..core.config import OpenAPISettings

SPEC_ROUTE = "/swagger/doc.yaml"


def ensure_spec(settings: OpenAPISettings) -> Path:
    """Return the OpenAPI document path, failing if the file is missing."""
    spec_path = settings.resolve_spec_path()
    if not spec_path.is_file():
        raise FileNotFoundError(f"OpenAPI specification file not found at {spec_path}")
    return spec_path


def build_router(spec_path: Path) -> APIRouter:
    router = APIRouter()

    @router.get(SPEC_ROUTE, include_in_schema=False)
    def get_openapi_spec() -> Response:
        try:
            spec = spec_path.read_bytes()
        except OSError:
            raise HTTPException(status_code=500, detail="Failed to read OpenAPI specification")
        return Response(content=spec, media_type="application/yaml")

    return router
