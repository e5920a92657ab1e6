"""Esri ring grouping helpers.

Esri JSON polygons store every ring in one flat ``rings`` list.  Outer
rings are clockwise and holes are counter-clockwise; a polygon with more
than one outer ring is a multipolygon.  These helpers split the flat
list into per-polygon ring groups (outer ring first, then its holes)
without changing the coordinates, so each group can be sent back to the
Geotrigger API as native ``esrijson``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shapely.geometry import LinearRing, Polygon

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("feature_triggers.utils.rings")

Ring = list[list[float]]

#: Fewer distinct positions than this cannot enclose an area.
MIN_RING_POSITIONS = 3


def is_outer_ring(ring: Ring) -> bool:
    """Return ``True`` for a clockwise (Esri outer) ring."""
    return not LinearRing([tuple(p[:2]) for p in ring]).is_ccw


def group_rings(rings: Sequence[Ring]) -> list[list[Ring]]:
    """Group a flat Esri ring list into polygon parts.

    Each hole is attached to the smallest outer ring that covers it, so a
    lake on an island inside another polygon's hole goes to the island.  A
    hole with no covering outer ring is promoted to an outer ring of its own.
    Degenerate rings are dropped.

    Args:
        rings: Esri ``rings`` array.

    Returns:
        One list per polygon part, each starting with its outer ring.
        Parts are ordered by the position of their outer ring.
    """
    usable = [r for r in rings if _is_usable(r)]
    if len(usable) < len(rings):
        logger.debug("Dropped degenerate rings | dropped=%d", len(rings) - len(usable))

    outers: list[list[Ring]] = []
    holes: list[Ring] = []
    for ring in usable:
        if is_outer_ring(ring):
            outers.append([ring])
        else:
            holes.append(ring)

    shells = [_polygon(part[0]) for part in outers]
    for hole in holes:
        hole_shape = _polygon(hole)
        containing = [i for i, shell in enumerate(shells) if shell.covers(hole_shape)]
        if containing:
            owner = min(containing, key=lambda i: shells[i].area)
            outers[owner].append(hole)
        else:
            outers.append([hole])
            shells.append(hole_shape)

    return outers


def _polygon(ring: Ring) -> Polygon:
    return Polygon([tuple(p[:2]) for p in ring])


def _is_usable(ring: object) -> bool:
    if not isinstance(ring, list):
        return False
    positions = {tuple(p[:2]) for p in ring if isinstance(p, list | tuple) and len(p) >= 2}
    return len(positions) >= MIN_RING_POSITIONS
