"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from rescue_radar.api.sos_models import PurgeResponse

if TYPE_CHECKING:
    from rescue_radar.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str | None:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str | None = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not admin_token or not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.delete("/sos/{record_id}", dependencies=[Depends(require_admin)])
def delete_sos(record_id: str, request: Request) -> dict[str, object]:
    """Delete an SOS record outright."""
    container: AppContainer = request.app.state.container
    container.resolution_service.delete(record_id)
    return {"message": "SOS submission deleted successfully"}


@router.post("/purge", dependencies=[Depends(require_admin)])
def purge_expired(request: Request) -> PurgeResponse:
    """Remove records whose ttl has passed."""
    container: AppContainer = request.app.state.container
    return PurgeResponse(purged=container.resolution_service.purge_expired())
