"""OAuth2 ``client_credentials`` token exchange against ArcGIS Online.

Both the private Feature Service and the Geotrigger API accept an
application token obtained from the same endpoint.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError as PydanticValidationError

from feature_triggers.clients.base import AuthenticationError, describe_api_error
from feature_triggers.models.service import TokenResponse

if TYPE_CHECKING:
    from feature_triggers.core.config import ImportConfig

logger = logging.getLogger("feature_triggers.clients.auth")


async def request_app_token(
    http: httpx.AsyncClient,
    *,
    token_url: str,
    client_id: str,
    client_secret: str,
    service: str,
) -> str:
    """Exchange client credentials for an application access token.

    Args:
        http: Shared HTTP client.
        token_url: OAuth2 token endpoint.
        client_id: Application client id.
        client_secret: Application client secret.
        service: Name of the service the token is for (error context).

    Returns:
        The access token string.

    Raises:
        AuthenticationError: On transport failure, an ``error`` response,
            or a response without ``access_token``.
    """
    form = {
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "client_credentials",
        "f": "json",
    }
    try:
        response = await http.post(token_url, data=form)
    except httpx.HTTPError as exc:
        msg = f"Token request to {token_url} failed: {exc}"
        raise AuthenticationError(service, msg, retryable=True) from exc

    try:
        body = response.json()
    except ValueError as exc:
        msg = (
            f"Token endpoint {token_url} returned a non-JSON response "
            f"(HTTP {response.status_code})"
        )
        raise AuthenticationError(service, msg) from exc

    if not isinstance(body, dict):
        msg = f"Token endpoint {token_url} returned an unexpected payload"
        raise AuthenticationError(service, msg)

    if "error" in body:
        error = body["error"]
        if isinstance(error, str):
            error = {"message": body.get("error_description") or error}
        msg = f"Token request rejected: {describe_api_error(error)}"
        raise AuthenticationError(service, msg)

    try:
        token = TokenResponse.model_validate(body)
    except PydanticValidationError as exc:
        msg = "Token response did not contain an access_token"
        raise AuthenticationError(service, msg) from exc

    logger.debug("Token acquired | service=%s | expires_in=%s", service, token.expires_in)
    return token.access_token


async def request_token_for(http: httpx.AsyncClient, config: ImportConfig, service: str) -> str:
    """``request_app_token`` using the credentials and endpoint from *config*."""
    return await request_app_token(
        http,
        token_url=config.token_url,
        client_id=config.client_id,
        client_secret=config.client_secret,
        service=service,
    )
