from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any
from uuid import UUID

import httpx

from src.application.errors import (
    AppError,
    AuthError,
    ConflictError,
    InfrastructureError,
    NotFound,
    PermissionDenied,
    StaleVersion,
    ValidationError,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_ERRORS_BY_STATUS: dict[int, type[AppError]] = {
    400: ValidationError,
    401: AuthError,
    403: PermissionDenied,
    404: NotFound,
    409: ConflictError,
    422: ValidationError,
}


def _encode(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def build_params(params: Mapping[str, Any] | None) -> list[tuple[str, Any]]:
    """Drop empty values; repeat list values as separate query params."""
    out: list[tuple[str, Any]] = []
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)):
            out.extend((key, _encode(v)) for v in value)
        else:
            out.append((key, _encode(value)))
    return out


def error_from_response(response: httpx.Response) -> AppError:
    """Map an API error body ({code, message, details}) onto the AppError hierarchy."""
    try:
        body = response.json()
    except ValueError:
        body = None
    message = f"HTTP {response.status_code}"
    details = None
    code = None
    if isinstance(body, dict):
        message = str(body.get("message") or body.get("detail") or message)
        details = body.get("details")
        code = body.get("code")
    if code == StaleVersion.code:
        return StaleVersion(message, details=details)
    error_cls = _ERRORS_BY_STATUS.get(response.status_code, InfrastructureError)
    return error_cls(message, details=details)


class ApiClient:
    """Thin async client for the LecheFacil REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        tenant_id: UUID | None = None,
        tenant_header: str = "X-Tenant-ID",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if tenant_id is not None:
            headers[tenant_header] = str(tenant_id)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        url = f"{API_PREFIX}{path}"
        try:
            response = await self._client.get(url, params=build_params(params))
        except httpx.HTTPError as exc:
            logger.error("API request failed: GET %s: %s", url, exc)
            raise InfrastructureError(f"API request failed: {exc}") from exc
        if response.is_error:
            error = error_from_response(response)
            logger.error(
                "API error: GET %s -> %d %s",
                url,
                response.status_code,
                error.message,
            )
            raise error
        return response.json()
