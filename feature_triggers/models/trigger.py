"""Typed models for trigger requests and their outcomes.

- ``TriggerCondition``: direction plus geographic area
- ``TriggerAction``: what happens when the trigger fires
- ``TriggerRequest``: one ``trigger/create`` call, built per descriptor
- ``SubmissionOutcome``: result of one create call
- ``RunSummary``: success/error tallies for the whole run

Design notes:
- Request models are frozen dataclasses; only ``RunSummary`` mutates,
  and only from the aggregator's own task.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from feature_triggers.core.constants import SUMMARY_TEMPLATE
from feature_triggers.core.exceptions import PipelineError, ValidationError

if TYPE_CHECKING:
    from feature_triggers.models.contracts import (
        ActionPayload,
        ConditionPayload,
        PointGeoPayload,
        PolygonGeoPayload,
        TriggerCreateParams,
    )


class ModelValidationError(ValueError, ValidationError):
    """Raised when a model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        ValidationError.__init__(self, formatted)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TriggerCondition:
    """When a trigger fires.

    Attributes:
        direction: ``"enter"``, ``"leave"``... as configured for the run.
        geo: Point (latitude/longitude/distance) or ``esrijson`` polygon.
    """

    direction: str
    geo: PointGeoPayload | PolygonGeoPayload

    def to_dict(self) -> ConditionPayload:
        return {"direction": self.direction, "geo": self.geo}


@dataclass(frozen=True, slots=True)
class TriggerAction:
    """What a trigger does when it fires.  At least one field is set."""

    callback_url: str | None = None
    notification_text: str | None = None
    tracking_profile: str | None = None

    def __post_init__(self) -> None:
        if (
            self.callback_url is None
            and self.notification_text is None
            and self.tracking_profile is None
        ):
            raise ModelValidationError(
                "TriggerAction",
                "callback_url",
                None,
                "at least one of callback_url, notification_text or tracking_profile is required",
            )

    def to_dict(self) -> ActionPayload:
        action: ActionPayload = {}
        if self.callback_url is not None:
            action["callbackUrl"] = self.callback_url
        if self.notification_text is not None:
            action["notification"] = {"text": self.notification_text}
        if self.tracking_profile is not None:
            action["trackingProfile"] = self.tracking_profile
        return action


@dataclass(frozen=True, slots=True)
class TriggerRequest:
    """A fully built ``trigger/create`` request.

    Attributes:
        condition: Trigger condition.
        action: Trigger action.
        tags: Rendered tags, in template order, without duplicates.
        properties: Source feature attributes.
        trigger_id: Explicit trigger id, or ``None`` to let the API assign one.
        feature_id: Id of the source feature (for logging only).
    """

    condition: TriggerCondition
    action: TriggerAction
    tags: tuple[str, ...] = ()
    properties: dict[str, Any] = field(default_factory=dict)
    trigger_id: str | None = None
    feature_id: str = ""

    def to_params(self) -> TriggerCreateParams:
        """Serialise to the ``trigger/create`` request body."""
        params: TriggerCreateParams = {
            "condition": self.condition.to_dict(),
            "action": self.action.to_dict(),
            "setTags": list(self.tags),
            "properties": dict(self.properties),
        }
        if self.trigger_id is not None:
            params["triggerId"] = self.trigger_id
        return params


# ---------------------------------------------------------------------------
# Outcome models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """Result of one trigger creation.

    Exactly one of ``trigger_id`` / ``error`` is meaningful.
    """

    feature_id: str
    trigger_id: str | None = None
    tags: tuple[str, ...] | None = None
    error: PipelineError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def created(
        cls, feature_id: str, trigger_id: str, tags: tuple[str, ...]
    ) -> SubmissionOutcome:
        return cls(feature_id=feature_id, trigger_id=trigger_id, tags=tags)

    @classmethod
    def failed(cls, feature_id: str, error: PipelineError) -> SubmissionOutcome:
        return cls(feature_id=feature_id, error=error)


@dataclass(slots=True)
class RunSummary:
    """Success and error tallies for one import run."""

    success_count: int = 0
    error_count: int = 0

    @property
    def total_processed(self) -> int:
        return self.success_count + self.error_count

    def add(self, outcome: SubmissionOutcome) -> None:
        if outcome.succeeded:
            self.success_count += 1
        else:
            self.error_count += 1

    def format(self) -> str:
        """Return the one-line run summary."""
        return SUMMARY_TEMPLATE.format(
            total=self.total_processed,
            successes=self.success_count,
            errors=self.error_count,
        )
