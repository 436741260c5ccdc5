"""HTTP client for a remote Rescue Radar API."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from rescue_radar.domain.sos import normalize_type_filter
from rescue_radar.services.gateway import GatewayResult, SosGateway

logger = logging.getLogger(__name__)

_ERROR_KINDS = {400: "validation", 404: "not_found", 409: "conflict"}


@dataclass
class HttpxSosGateway(SosGateway):
    """Gateway that calls the remote SOS endpoints with httpx."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxSosGateway":
        """Create a gateway with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def submit(self, payload: Mapping[str, object]) -> GatewayResult:
        """POST a new SOS request."""
        return await self._request(
            "POST",
            "/sos",
            default_message="SOS submitted successfully",
            json=dict(payload),
        )

    async def list(
        self, type_filter: str | None = None, status: str | None = None
    ) -> GatewayResult:
        """GET active SOS requests.

        The API only serves non-resolved rows, so a ``status`` filter narrows
        that set client-side.
        """
        params = {}
        normalized = normalize_type_filter(type_filter)
        if normalized:
            params["type"] = normalized
        result = await self._request("GET", "/sos", params=params)
        if not result.ok or status is None or not isinstance(result.data, list):
            return result
        rows = [row for row in result.data if row.get("status") == status]
        return GatewayResult(ok=True, data=rows, message=result.message)

    async def resolve(self, record_id: str | None) -> GatewayResult:
        """POST a resolve request for a record."""
        if record_id is None or not record_id.strip():
            return GatewayResult(ok=False, message="Missing SOS ID", error="validation")
        return await self._request(
            "POST",
            f"/sos/{quote(record_id.strip(), safe='')}/resolve",
            default_message="SOS resolved successfully",
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, default_message: str = "", **kwargs: Any
    ) -> GatewayResult:
        url = f"{self.base_url}{path}"
        try:
            request = self.http_client.build_request(method, url, timeout=10, **kwargs)
        except (TypeError, ValueError) as exc:
            logger.warning("SOS API request not encodable: %s", exc, extra={"url": url})
            return GatewayResult(
                ok=False, message="Invalid SOS request payload", error="validation"
            )
        try:
            response = await self.http_client.send(request)
        except httpx.HTTPError:
            logger.exception("SOS API request failed", extra={"url": url})
            return GatewayResult(
                ok=False, message="SOS service unavailable", error="unavailable"
            )
        body = _json_body(response)
        message = body.get("message")
        if response.is_success:
            return GatewayResult(
                ok=True,
                data=body.get("data"),
                message=message if isinstance(message, str) else default_message,
            )
        logger.warning(
            "SOS API returned an error",
            extra={"url": url, "status_code": response.status_code},
        )
        return GatewayResult(
            ok=False,
            message=message if isinstance(message, str) else response.reason_phrase,
            error=_ERROR_KINDS.get(response.status_code, "unavailable"),
        )


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
