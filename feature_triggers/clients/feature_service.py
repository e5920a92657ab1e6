"""ArcGIS Feature Service client (read-only).

Wraps the two layer endpoints the importer needs:

- ``GET <serviceUrl>?f=json``: layer metadata
- ``GET <serviceUrl>/query``: one page of features

When ``authenticate()`` has been called, the acquired token is attached
to every subsequent request.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from feature_triggers.clients.auth import request_token_for
from feature_triggers.clients.base import (
    MetadataFetchError,
    PageFetchError,
    describe_api_error,
)
from feature_triggers.core.constants import OUT_FIELDS, OUT_SPATIAL_REFERENCE
from feature_triggers.models.service import FeaturePage, LayerMetadata

if TYPE_CHECKING:
    from feature_triggers.core.config import ImportConfig

logger = logging.getLogger("feature_triggers.clients.feature_service")

SERVICE_NAME = "feature_service"


class FeatureServiceClient:
    """Async client for one Feature Service layer.

    Args:
        http: Shared ``httpx.AsyncClient``.
        service_url: Layer URL, e.g. ``.../FeatureServer/0``.
    """

    def __init__(self, http: httpx.AsyncClient, service_url: str) -> None:
        self._http = http
        self._service_url = service_url.rstrip("/")
        self._token: str | None = None

    @property
    def service_url(self) -> str:
        return self._service_url

    async def authenticate(self, config: ImportConfig) -> None:
        """Acquire an application token for a private service.

        Raises:
            AuthenticationError: If the token exchange fails.
        """
        self._token = await request_token_for(self._http, config, SERVICE_NAME)
        logger.info("Authenticated with feature service | url=%s", self._service_url)

    async def fetch_metadata(self) -> LayerMetadata:
        """Fetch the layer description.

        Raises:
            MetadataFetchError: On transport failure, an API ``error``
                object, or an unparseable response.
        """
        try:
            body = await self._get_json(self._service_url, {"f": "json"})
        except (httpx.HTTPError, ValueError) as exc:
            msg = f"Could not get metadata for {self._service_url}: {exc}"
            raise MetadataFetchError(
                SERVICE_NAME, msg, retryable=isinstance(exc, httpx.HTTPError)
            ) from exc

        if "error" in body:
            msg = (
                f"Could not get metadata for {self._service_url}: "
                f"{describe_api_error(body['error'])}"
            )
            raise MetadataFetchError(SERVICE_NAME, msg)

        try:
            return LayerMetadata.model_validate(body)
        except PydanticValidationError as exc:
            msg = f"Unexpected metadata payload from {self._service_url}: {exc}"
            raise MetadataFetchError(SERVICE_NAME, msg) from exc

    async def query_page(self, id_field: str, cursor: int) -> FeaturePage:
        """Fetch the features whose id is strictly greater than *cursor*.

        Raises:
            PageFetchError: On transport failure, an API ``error`` object,
                or an unparseable response.
        """
        params: dict[str, Any] = {
            "where": f"{id_field} > {cursor}",
            "outSR": OUT_SPATIAL_REFERENCE,
            "outFields": OUT_FIELDS,
            "f": "json",
        }
        url = f"{self._service_url}/query"
        try:
            body = await self._get_json(url, params)
        except (httpx.HTTPError, ValueError) as exc:
            msg = f"Query failed at cursor {cursor}: {exc}"
            raise PageFetchError(
                SERVICE_NAME, msg, retryable=isinstance(exc, httpx.HTTPError)
            ) from exc

        if "error" in body:
            msg = f"Query failed at cursor {cursor}: {describe_api_error(body['error'])}"
            raise PageFetchError(SERVICE_NAME, msg)

        try:
            return FeaturePage.model_validate(body)
        except PydanticValidationError as exc:
            msg = f"Unexpected query payload at cursor {cursor}: {exc}"
            raise PageFetchError(SERVICE_NAME, msg) from exc

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        if self._token is not None:
            params = {**params, "token": self._token}
        response = await self._http.get(url, params=params)
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            msg = f"expected a JSON object, got {type(body).__name__}"
            raise ValueError(msg)
        return body
