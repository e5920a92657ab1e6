"""Geotrigger API client (write side).

Only ``trigger/create`` is used.  Requests are authenticated with an
application token acquired once, before the run starts.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from feature_triggers.clients.auth import request_token_for
from feature_triggers.clients.base import TriggerCreationError, describe_api_error
from feature_triggers.core.constants import TRIGGER_CREATE_PATH

if TYPE_CHECKING:
    from feature_triggers.core.config import ImportConfig
    from feature_triggers.models.trigger import TriggerRequest

logger = logging.getLogger("feature_triggers.clients.trigger_api")

SERVICE_NAME = "geotrigger"


class GeotriggerClient:
    """Async Geotrigger API client.

    Args:
        http: Shared ``httpx.AsyncClient``.
        api_url: API base URL, e.g. ``https://geotrigger.arcgis.com``.
    """

    def __init__(self, http: httpx.AsyncClient, api_url: str) -> None:
        self._http = http
        self._api_url = api_url.rstrip("/")
        self._token: str | None = None

    async def authenticate(self, config: ImportConfig) -> None:
        """Acquire the application token used for every create call.

        Raises:
            AuthenticationError: If the token exchange fails.
        """
        self._token = await request_token_for(self._http, config, SERVICE_NAME)
        logger.info("Authenticated with Geotrigger API | url=%s", self._api_url)

    async def create_trigger(self, request: TriggerRequest) -> tuple[str, tuple[str, ...]]:
        """Create one trigger.

        Returns:
            ``(trigger_id, tags)`` as reported by the API.

        Raises:
            TriggerCreationError: On a body that is not valid JSON, transport
                failure, an API ``error`` object, or a response without
                ``triggerId``.
        """
        if self._token is None:
            msg = "create_trigger called before authenticate()"
            raise TriggerCreationError(SERVICE_NAME, msg, feature_id=request.feature_id)

        url = f"{self._api_url}/{TRIGGER_CREATE_PATH}"
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }
        try:
            # Strict JSON: NaN or Infinity in feature attributes cannot be sent.
            content = json.dumps(request.to_params(), allow_nan=False)
        except (TypeError, ValueError) as exc:
            msg = f"trigger/create body could not be encoded as JSON: {exc}"
            raise TriggerCreationError(SERVICE_NAME, msg, feature_id=request.feature_id) from exc

        try:
            response = await self._http.post(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            msg = f"trigger/create failed: {exc}"
            raise TriggerCreationError(
                SERVICE_NAME, msg, retryable=True, feature_id=request.feature_id
            ) from exc

        try:
            body: Any = response.json()
        except ValueError as exc:
            msg = f"trigger/create returned a non-JSON response (HTTP {response.status_code})"
            raise TriggerCreationError(SERVICE_NAME, msg, feature_id=request.feature_id) from exc

        if not isinstance(body, dict):
            msg = "trigger/create returned an unexpected payload"
            raise TriggerCreationError(SERVICE_NAME, msg, feature_id=request.feature_id)

        if "error" in body or response.is_error:
            detail = describe_api_error(body.get("error")) if "error" in body else ""
            msg = f"trigger/create rejected (HTTP {response.status_code}) {detail}".rstrip()
            raise TriggerCreationError(
                SERVICE_NAME,
                msg,
                retryable=response.status_code >= 500,
                feature_id=request.feature_id,
            )

        trigger_id = body.get("triggerId")
        if not trigger_id:
            msg = "trigger/create response did not include a triggerId"
            raise TriggerCreationError(SERVICE_NAME, msg, feature_id=request.feature_id)

        return str(trigger_id), tuple(str(t) for t in body.get("tags") or ())
