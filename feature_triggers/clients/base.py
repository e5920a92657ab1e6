"""Remote-service exceptions shared by the HTTP clients.

Every client call either returns parsed data or raises a ``ServiceError``
subclass naming the failing service.  Transport failures from ``httpx``
are wrapped with ``retryable=True``; API-reported errors are not.

Fatal vs. recoverable:
    ``AuthenticationError``, ``MetadataFetchError`` and ``PageFetchError``
    abort the run.  ``TriggerCreationError`` is caught at the submission
    boundary and counted against the feature that caused it.
"""

from __future__ import annotations

from typing import Any

from feature_triggers.core.exceptions import PipelineError


class ServiceError(PipelineError):
    """Base exception for remote-service errors.

    Attributes:
        service: Name of the service that raised the error.
        message: Human-readable error description.
        retryable: Whether the failure looks transient.
    """

    default_stage = "service"
    default_code = "SERVICE_ERROR"

    def __init__(
        self,
        service: str,
        message: str,
        *,
        retryable: bool = False,
        feature_id: str = "",
    ) -> None:
        self.service = service
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
            feature_id=feature_id,
        )

    def __str__(self) -> str:
        return f"[{self.service}] {self.message}"


class AuthenticationError(ServiceError):
    """Token exchange was rejected or failed."""

    default_stage = "authenticate"
    default_code = "AUTH_FAILED"

    def __init__(self, service: str, message: str, *, retryable: bool = False) -> None:
        super().__init__(service, message, retryable=retryable)


class MetadataFetchError(ServiceError):
    """Layer metadata could not be fetched or understood."""

    default_stage = "fetch_metadata"
    default_code = "METADATA_FETCH_FAILED"


class PageFetchError(ServiceError):
    """A query page could not be fetched, or pagination cannot proceed."""

    default_stage = "paginate_features"
    default_code = "PAGE_FETCH_FAILED"


class TriggerCreationError(ServiceError):
    """A single ``trigger/create`` call failed."""

    default_stage = "submit_triggers"
    default_code = "TRIGGER_CREATE_FAILED"


def describe_api_error(error: Any) -> str:
    """Flatten an ArcGIS / Geotrigger ``error`` object into one line.

    Handles ``{"code", "message", "details"}`` (ArcGIS REST),
    ``{"type", "message"}`` (Geotrigger) and the OAuth2
    ``{"error": "...", "error_description": "..."}`` string form.
    """
    if isinstance(error, dict):
        parts = [str(error[k]) for k in ("code", "type") if error.get(k) not in (None, "")]
        message = error.get("message") or error.get("error_description") or ""
        details = error.get("details") or []
        text = " ".join([*parts, str(message)]).strip()
        if details:
            text = f"{text} ({'; '.join(str(d) for d in details)})"
        return text or "unknown error"
    return str(error) if error else "unknown error"
