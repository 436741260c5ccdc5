"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rescue_radar.api.admin import router as admin_router
from rescue_radar.api.middleware import (
    INTERNAL_ERROR_BODY,
    cors_middleware,
    request_logging_middleware,
)
from rescue_radar.api.sos_models import EmergencyTypeListResponse, EmergencyTypeModel
from rescue_radar.app_logging import configure_logging
from rescue_radar.containers import AppContainer
from rescue_radar.domain.errors import (
    NotFoundError,
    StatusTransitionError,
    StoreError,
    ValidationError,
)
from rescue_radar.domain.sos import EMERGENCY_TYPE_INFO


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Rescue Radar", lifespan=lifespan)
    app.state.container = container

    # Registered innermost first: CORS headers land on error responses too.
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(cors_middleware)

    app.include_router(admin_router)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request body"},
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)}
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "SOS submission not found"},
        )

    @app.exception_handler(StatusTransitionError)
    async def conflict_handler(
        request: Request, exc: StatusTransitionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"message": str(exc)}
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error(
            "Record store failure on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=INTERNAL_ERROR_BODY,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/sos/types")
    async def list_types() -> EmergencyTypeListResponse:
        """Return display metadata for every emergency type."""
        return EmergencyTypeListResponse(
            data=[
                EmergencyTypeModel(
                    value=info.value, label=info.label, color=info.color, icon=info.icon
                )
                for info in EMERGENCY_TYPE_INFO
            ]
        )

    @app.post("/sos", status_code=status.HTTP_201_CREATED)
    def submit_sos(
        request: Request, payload: dict[str, Any] = Body(...)
    ) -> dict[str, object]:
        """Create a new SOS request."""
        state_container: AppContainer = request.app.state.container
        record = state_container.submission_service.submit(payload)
        return {"message": "SOS submitted successfully", "data": record.to_dict()}

    @app.get("/sos")
    def list_sos(
        request: Request,
        type_filter: str | None = Query(default=None, alias="type"),
    ) -> dict[str, object]:
        """Return active SOS requests, newest first."""
        state_container: AppContainer = request.app.state.container
        records = state_container.listing_service.list(type_filter)
        return {"success": True, "data": [record.to_dict() for record in records]}

    @app.post("/sos//resolve")
    def resolve_sos_without_id() -> None:
        """Reject a resolve call whose id segment is empty."""
        raise ValidationError("Missing SOS ID")

    @app.post("/sos/{record_id}/resolve")
    def resolve_sos(record_id: str, request: Request) -> dict[str, object]:
        """Mark an SOS request as resolved."""
        state_container: AppContainer = request.app.state.container
        record = state_container.resolution_service.resolve(record_id)
        return {"message": "SOS resolved successfully", "data": record.to_dict()}

    return app
