"""Data model for a feature read from a Feature Service.

A ``SourceFeature`` is one record of a query page, classified at
ingestion time into a closed set of geometry kinds so that downstream
stages never re-inspect the raw geometry shape.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

from feature_triggers.core.exceptions import ValidationError
from feature_triggers.utils.rings import group_rings


class UnsupportedGeometryError(ValidationError):
    """Raised for geometry the Geotrigger API cannot take.

    At layer level (polyline services) this aborts the run; for a single
    feature it is recorded as that feature's failure.
    """

    default_stage = "dispatch_geometry"
    default_code = "UNSUPPORTED_GEOMETRY"


class GeometryKind(enum.Enum):
    """Geometry classification of a source feature."""

    POINT = "point"
    POLYGON = "polygon"
    MULTIPOLYGON = "multipolygon"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class SourceFeature:
    """A single classified feature.

    Attributes:
        feature_id: String form of the feature's object id.
        attributes: Attribute map as returned by the service.
        kind: Geometry classification.
        point: ``(longitude, latitude)`` for point features.
        parts: Ring groups for polygon features, outer ring first.
        spatial_reference: Raw ``spatialReference`` of the geometry, if any.
    """

    feature_id: str
    attributes: dict[str, Any] = field(default_factory=dict)
    kind: GeometryKind = GeometryKind.UNSUPPORTED
    point: tuple[float, float] | None = None
    parts: tuple[list[list[list[float]]], ...] = ()
    spatial_reference: dict[str, Any] | None = None

    @classmethod
    def from_esri_json(cls, raw: dict[str, Any], id_field: str) -> SourceFeature:
        """Classify a raw Esri JSON feature.

        Args:
            raw: ``{"attributes": {...}, "geometry": {...}}`` from a query page.
            id_field: Name of the object-id attribute.

        Returns:
            A ``SourceFeature``.  Geometry that is missing or of a type the
            importer does not handle yields ``GeometryKind.UNSUPPORTED``.
        """
        attributes = dict(raw.get("attributes") or {})
        feature_id = str(attributes.get(id_field, ""))
        geometry = raw.get("geometry")
        if not isinstance(geometry, dict):
            return cls(feature_id=feature_id, attributes=attributes)

        spatial_reference = geometry.get("spatialReference")

        x, y = geometry.get("x"), geometry.get("y")
        if isinstance(x, int | float) and isinstance(y, int | float):
            return cls(
                feature_id=feature_id,
                attributes=attributes,
                kind=GeometryKind.POINT,
                point=(float(x), float(y)),
                spatial_reference=spatial_reference,
            )

        rings = geometry.get("rings")
        if isinstance(rings, list) and rings:
            parts = tuple(group_rings(rings))
            if parts:
                kind = GeometryKind.POLYGON if len(parts) == 1 else GeometryKind.MULTIPOLYGON
                return cls(
                    feature_id=feature_id,
                    attributes=attributes,
                    kind=kind,
                    parts=parts,
                    spatial_reference=spatial_reference,
                )

        return cls(feature_id=feature_id, attributes=attributes)

    @property
    def part_count(self) -> int:
        """Number of polygon parts (0 for points and unsupported geometry)."""
        return len(self.parts)
