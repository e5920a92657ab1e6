"""Run configuration built from CLI arguments and environment variables.

Command-line options are the primary source.  Credentials and service
endpoints may also come from the environment so they stay out of shell
history:

- ``GEOTRIGGER_CLIENT_ID`` / ``GEOTRIGGER_CLIENT_SECRET``
- ``ARCGIS_TOKEN_URL``
- ``GEOTRIGGER_API_URL``
- ``HTTP_TIMEOUT_S``

Fail-fast validation:
    ``validate()`` raises ``ConfigValidationError`` before any network
    call is made, so a bad invocation never creates half a run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from feature_triggers.core.constants import (
    DEFAULT_BUFFER_M,
    DEFAULT_CONCURRENCY,
    DEFAULT_DIRECTION,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_TOKEN_URL,
    DEFAULT_TRIGGER_API_URL,
    TRACKING_PROFILES,
)
from feature_triggers.core.exceptions import ValidationError

if TYPE_CHECKING:
    import argparse


class ConfigValidationError(ValidationError):
    """Raised when configuration values are missing or out of range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ImportConfig:
    """Immutable run configuration.

    Built once by the CLI and threaded through the pipeline.

    Attributes:
        client_id: Client id of the ArcGIS application owning the triggers.
        client_secret: Client secret of that application.
        service_url: Feature Service layer URL to import from.
        tags: Mustache templates rendered into each trigger's tags.
        buffer_m: Radius in metres applied around point features.
        direction: Trigger condition direction (``"enter"``, ``"leave"``...).
        authenticate: Request a token for a private Feature Service.
        concurrency: Maximum trigger-create calls in flight.
        callback_url: URL POSTed to when a trigger fires.
        notification_template: Mustache template for push notification text.
        tracking_profile: Tracking profile applied when a trigger fires.
        use_feature_ids: Reuse feature ids as trigger ids.
        token_url: OAuth2 token endpoint.
        trigger_api_url: Geotrigger API base URL.
        http_timeout_s: Per-request HTTP timeout in seconds.
    """

    client_id: str
    client_secret: str
    service_url: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    buffer_m: float = DEFAULT_BUFFER_M
    direction: str = DEFAULT_DIRECTION
    authenticate: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    callback_url: str | None = None
    notification_template: str | None = None
    tracking_profile: str | None = None
    use_feature_ids: bool = False
    token_url: str = DEFAULT_TOKEN_URL
    trigger_api_url: str = DEFAULT_TRIGGER_API_URL
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> ImportConfig:
        """Build and validate configuration from parsed CLI arguments.

        Missing credentials fall back to environment variables.

        Raises:
            ConfigValidationError: If any value is missing or out of range.
            ValueError: If ``HTTP_TIMEOUT_S`` cannot be parsed as a number.
        """
        config = cls(
            client_id=args.client_id or os.getenv("GEOTRIGGER_CLIENT_ID", ""),
            client_secret=args.client_secret or os.getenv("GEOTRIGGER_CLIENT_SECRET", ""),
            service_url=(args.service_url or "").rstrip("/"),
            tags=tuple(args.tags or ()),
            buffer_m=float(args.buffer),
            direction=args.direction,
            authenticate=bool(args.authenticate),
            concurrency=int(args.concurrency),
            callback_url=args.callback_url or None,
            notification_template=args.notification_template or None,
            tracking_profile=args.tracking_profile or None,
            use_feature_ids=bool(args.use_feature_ids),
            token_url=os.getenv("ARCGIS_TOKEN_URL", DEFAULT_TOKEN_URL),
            trigger_api_url=os.getenv("GEOTRIGGER_API_URL", DEFAULT_TRIGGER_API_URL).rstrip("/"),
            http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", str(DEFAULT_HTTP_TIMEOUT_S))),
        )
        config.validate()
        return config

    @property
    def has_action(self) -> bool:
        """Whether at least one trigger action is configured."""
        return bool(self.callback_url or self.notification_template or self.tracking_profile)

    def validate(self) -> None:
        """Validate all values.  Raises ``ConfigValidationError``."""
        _validate(self)


def _is_http_url(value: str) -> bool:
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError):
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def _validate(config: ImportConfig) -> None:
    if not config.client_id:
        raise ConfigValidationError("clientId", config.client_id, "must not be empty")

    if not config.client_secret:
        # Never echo the secret back.
        raise ConfigValidationError("clientSecret", "", "must not be empty")

    if not _is_http_url(config.service_url):
        raise ConfigValidationError(
            "serviceUrl",
            config.service_url,
            "must be an http(s) URL of a Feature Service layer",
        )

    for name, url in (
        ("ARCGIS_TOKEN_URL", config.token_url),
        ("GEOTRIGGER_API_URL", config.trigger_api_url),
    ):
        if not _is_http_url(url):
            raise ConfigValidationError(name, url, "must be an http(s) URL")

    if not config.tags:
        raise ConfigValidationError("tag", list(config.tags), "at least one tag is required")

    if config.buffer_m <= 0:
        raise ConfigValidationError("buffer", config.buffer_m, "must be > 0 (metres)")

    if not config.direction:
        raise ConfigValidationError("direction", config.direction, "must not be empty")

    if config.concurrency < 1:
        raise ConfigValidationError("concurrency", config.concurrency, "must be >= 1")

    if not config.has_action:
        raise ConfigValidationError(
            "action",
            None,
            "at least one of --callbackUrl, --notificationTemplate "
            "or --trackingProfile is required",
        )

    if config.tracking_profile is not None and config.tracking_profile not in TRACKING_PROFILES:
        allowed = ", ".join(f'"{p}"' for p in TRACKING_PROFILES)
        raise ConfigValidationError(
            "trackingProfile",
            config.tracking_profile,
            f"must be one of {allowed}",
        )

    if config.http_timeout_s <= 0:
        raise ConfigValidationError(
            "HTTP_TIMEOUT_S", config.http_timeout_s, "must be > 0 (seconds)"
        )
