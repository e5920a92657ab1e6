"""Unified pipeline exception taxonomy.

Every domain exception inherits from ``PipelineError`` and carries
structured context fields so the CLI can decide between a fatal abort
and a per-item failure, and so log lines stay consistent.

Categories
----------
- ``validation``: ``ValidationError`` and its subclasses (bad input or
  configuration, unsupported geometry).  Never retryable.
- ``transient`` / ``permanent``: every other error, derived from its
  ``retryable`` flag (remote-service failures in ``clients.base``).

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging.
"""

from __future__ import annotations

from typing import ClassVar


class PipelineError(Exception):
    """Base exception for all importer errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"paginate_features"``, ``"submit_triggers"``).
        code: Machine-readable error code (e.g. ``"PAGE_FETCH_FAILED"``).
        retryable: Whether the failure looks temporary.  Informational
            only: the importer never retries.
        feature_id: Identifier of the feature being processed, if any.
    """

    #: Subclass defaults, used when the matching keyword is not passed.
    default_stage: ClassVar[str] = ""
    default_code: ClassVar[str] = ""
    #: Category reported by ``to_error_dict``; ``None`` derives it from ``retryable``.
    fixed_category: ClassVar[str | None] = None

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        feature_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.feature_id = feature_id
        super().__init__(message)

    @property
    def category(self) -> str:
        if self.fixed_category is not None:
            return self.fixed_category
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "feature_id": self.feature_id,
        }


class ValidationError(PipelineError):
    """Input or domain-model validation failure. Never retryable."""

    fixed_category = "validation"

