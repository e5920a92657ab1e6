"""Wire payload contracts for the Geotrigger ``trigger/create`` call.

Every outgoing payload is defined here as a ``TypedDict`` so that field
names have a single source of truth.  The API expects camelCase keys.

Design notes:
- Optional action fields use ``NotRequired``: a key is present only when
  the corresponding option was configured.
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict


class PointGeoPayload(TypedDict):
    """Circular trigger area around a point."""

    latitude: float
    longitude: float
    distance: float


class PolygonGeoPayload(TypedDict):
    """Polygon trigger area in Esri JSON form."""

    esrijson: dict[str, Any]


class ConditionPayload(TypedDict):
    direction: str
    geo: PointGeoPayload | PolygonGeoPayload


class NotificationPayload(TypedDict):
    text: str


class ActionPayload(TypedDict):
    callbackUrl: NotRequired[str]
    notification: NotRequired[NotificationPayload]
    trackingProfile: NotRequired[str]


class TriggerCreateParams(TypedDict):
    """Request body of ``trigger/create``."""

    condition: ConditionPayload
    action: ActionPayload
    setTags: list[str]
    properties: dict[str, Any]
    triggerId: NotRequired[str]
