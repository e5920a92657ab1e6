"""Flat geometry descriptors produced by the geometry dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PointDescriptor:
    """A point buffered into a circular trigger area.

    Attributes:
        longitude: WGS 84 longitude in degrees.
        latitude: WGS 84 latitude in degrees.
        distance: Buffer radius in metres.
    """

    longitude: float
    latitude: float
    distance: float


@dataclass(frozen=True, slots=True)
class PolygonDescriptor:
    """One polygon boundary in native Esri ring form.

    Attributes:
        rings: Outer ring followed by its holes.
        spatial_reference: ``spatialReference`` carried over from the source.
        part_index: Position of this part within a multipolygon feature,
            or ``None`` for a plain polygon.
    """

    rings: tuple[list[list[float]], ...]
    spatial_reference: dict[str, Any] | None = None
    part_index: int | None = None

    def to_esri_json(self) -> dict[str, Any]:
        esri: dict[str, Any] = {"rings": [list(r) for r in self.rings]}
        if self.spatial_reference:
            esri["spatialReference"] = dict(self.spatial_reference)
        return esri


GeometryDescriptor = PointDescriptor | PolygonDescriptor
