"""Geometry dispatch: turn one classified feature into flat descriptors.

Points become a single buffered ``PointDescriptor``; polygons a single
``PolygonDescriptor``; multipolygons one indexed ``PolygonDescriptor``
per part.  The dispatcher also keeps the feature/item tallies so that a
multipolygon with N parts is accounted for as N submitted items.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from feature_triggers.models.feature import GeometryKind, UnsupportedGeometryError
from feature_triggers.models.geometry import PointDescriptor, PolygonDescriptor

if TYPE_CHECKING:
    from collections.abc import Iterator

    from feature_triggers.models.feature import SourceFeature
    from feature_triggers.models.geometry import GeometryDescriptor

logger = logging.getLogger("feature_triggers.activities.dispatch_geometry")


class GeometryDispatcher:
    """Classifier-driven fan-out from features to descriptors.

    Attributes:
        buffer_m: Radius applied to point features.
        feature_count: Features dispatched so far.
        descriptor_count: Descriptors (submitted items) produced so far.
    """

    def __init__(self, buffer_m: float) -> None:
        self.buffer_m = buffer_m
        self.feature_count = 0
        self.descriptor_count = 0

    def dispatch(self, feature: SourceFeature) -> Iterator[GeometryDescriptor]:
        """Yield the descriptors for *feature*.

        Raises:
            UnsupportedGeometryError: For ``GeometryKind.UNSUPPORTED``, or a
                point or polygon feature with no coordinates (raised on
                first iteration).
        """
        kind = feature.kind

        if kind is GeometryKind.POINT and feature.point is not None:
            lon, lat = feature.point
            self._count(1)
            yield PointDescriptor(longitude=lon, latitude=lat, distance=self.buffer_m)

        elif kind is GeometryKind.POLYGON and feature.parts:
            self._count(1)
            yield PolygonDescriptor(
                rings=tuple(feature.parts[0]),
                spatial_reference=feature.spatial_reference,
            )

        elif kind is GeometryKind.MULTIPOLYGON:
            self._count(1)
            logger.debug(
                "Splitting multipolygon | feature=%s | parts=%d",
                feature.feature_id,
                feature.part_count,
            )
            for index, rings in enumerate(feature.parts):
                # The feature was counted once above; each extra part is one more item.
                if index > 0:
                    self.descriptor_count += 1
                yield PolygonDescriptor(
                    rings=tuple(rings),
                    spatial_reference=feature.spatial_reference,
                    part_index=index,
                )

        else:
            self.feature_count += 1
            msg = f"Feature {feature.feature_id} has no point or polygon geometry"
            raise UnsupportedGeometryError(msg, feature_id=feature.feature_id)

    def _count(self, items: int) -> None:
        self.feature_count += 1
        self.descriptor_count += items
