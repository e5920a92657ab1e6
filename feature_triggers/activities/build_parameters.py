"""Trigger parameter construction.

Renders the user's Mustache templates against a feature's attributes and
assembles a ``TriggerRequest`` for one geometry descriptor.

Template rendering:
    Templates use Mustache syntax (``{{NAME}}``) via ``chevron``.  Variables
    with no matching attribute render as an empty string.  ``{{var}}``
    HTML-escapes the value; ``{{{var}}}`` inserts it verbatim.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import chevron

from feature_triggers.models.geometry import PointDescriptor
from feature_triggers.models.trigger import TriggerAction, TriggerCondition, TriggerRequest

if TYPE_CHECKING:
    from feature_triggers.core.config import ImportConfig
    from feature_triggers.models.contracts import PointGeoPayload, PolygonGeoPayload
    from feature_triggers.models.feature import SourceFeature
    from feature_triggers.models.geometry import GeometryDescriptor


def render_template(template: str, attributes: dict[str, Any]) -> str:
    """Render a Mustache *template* with *attributes* as context."""
    return chevron.render(template, attributes)


class ParameterBuilder:
    """Build ``TriggerRequest`` objects from descriptors and run config."""

    def __init__(self, config: ImportConfig) -> None:
        self._config = config

    def build(self, descriptor: GeometryDescriptor, feature: SourceFeature) -> TriggerRequest:
        """Assemble the request for one descriptor of *feature*."""
        attributes = feature.attributes
        return TriggerRequest(
            condition=TriggerCondition(
                direction=self._config.direction,
                geo=build_geo(descriptor),
            ),
            action=self._build_action(attributes),
            tags=self._render_tags(attributes),
            properties=dict(attributes),
            trigger_id=self._trigger_id(descriptor, feature),
            feature_id=feature.feature_id,
        )

    def _build_action(self, attributes: dict[str, Any]) -> TriggerAction:
        notification = self._config.notification_template
        return TriggerAction(
            callback_url=self._config.callback_url,
            notification_text=(
                render_template(notification, attributes) if notification is not None else None
            ),
            tracking_profile=self._config.tracking_profile,
        )

    def _render_tags(self, attributes: dict[str, Any]) -> tuple[str, ...]:
        # dict.fromkeys keeps template order while dropping duplicates
        rendered = (render_template(t, attributes) for t in self._config.tags)
        return tuple(dict.fromkeys(rendered))

    def _trigger_id(self, descriptor: GeometryDescriptor, feature: SourceFeature) -> str | None:
        if not self._config.use_feature_ids:
            return None
        part_index = getattr(descriptor, "part_index", None)
        if part_index is None:
            return feature.feature_id
        return f"{feature.feature_id}-{part_index}"


def build_geo(descriptor: GeometryDescriptor) -> PointGeoPayload | PolygonGeoPayload:
    """Return the condition ``geo`` object for *descriptor*."""
    if isinstance(descriptor, PointDescriptor):
        return {
            "latitude": descriptor.latitude,
            "longitude": descriptor.longitude,
            "distance": descriptor.distance,
        }
    return {"esrijson": descriptor.to_esri_json()}
