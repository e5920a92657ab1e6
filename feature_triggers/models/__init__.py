"""Data models and schemas.

Defines the data structures used throughout the importer:
- SourceFeature: A classified feature read from the Feature Service
- PointDescriptor / PolygonDescriptor: Flat geometry handed to the builder
- TriggerRequest: One ``trigger/create`` call
- SubmissionOutcome / RunSummary: Per-item results and run totals
"""

from feature_triggers.models.feature import (
    GeometryKind,
    SourceFeature,
    UnsupportedGeometryError,
)
from feature_triggers.models.geometry import (
    GeometryDescriptor,
    PointDescriptor,
    PolygonDescriptor,
)
from feature_triggers.models.trigger import (
    ModelValidationError,
    RunSummary,
    SubmissionOutcome,
    TriggerAction,
    TriggerCondition,
    TriggerRequest,
)

__all__ = [
    "GeometryDescriptor",
    "GeometryKind",
    "ModelValidationError",
    "PointDescriptor",
    "PolygonDescriptor",
    "RunSummary",
    "SourceFeature",
    "SubmissionOutcome",
    "TriggerAction",
    "TriggerCondition",
    "TriggerRequest",
    "UnsupportedGeometryError",
]
