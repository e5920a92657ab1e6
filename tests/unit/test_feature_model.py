"""Tests for SourceFeature classification at ingestion."""

from __future__ import annotations

import pytest
from conftest import HOLE_A, SQUARE_A, SQUARE_B, point_feature, polygon_feature

from feature_triggers.models.feature import GeometryKind, SourceFeature


class TestClassification:
    """Raw Esri JSON → closed set of geometry kinds."""

    def test_point(self) -> None:
        feature = SourceFeature.from_esri_json(point_feature(7, x=-122.5, y=45.5), "OBJECTID")
        assert feature.kind is GeometryKind.POINT
        assert feature.point == (-122.5, 45.5)
        assert feature.feature_id == "7"
        assert feature.spatial_reference == {"wkid": 4326}

    def test_point_on_zero_meridian_is_valid(self) -> None:
        feature = SourceFeature.from_esri_json(point_feature(1, x=0, y=0), "OBJECTID")
        assert feature.kind is GeometryKind.POINT
        assert feature.point == (0.0, 0.0)

    def test_polygon(self) -> None:
        raw = polygon_feature(3, [SQUARE_A, HOLE_A])
        feature = SourceFeature.from_esri_json(raw, "OBJECTID")
        assert feature.kind is GeometryKind.POLYGON
        assert feature.part_count == 1
        assert feature.parts[0] == [SQUARE_A, HOLE_A]

    def test_multipolygon(self) -> None:
        feature = SourceFeature.from_esri_json(
            polygon_feature(42, [SQUARE_A, SQUARE_B]), "OBJECTID"
        )
        assert feature.kind is GeometryKind.MULTIPOLYGON
        assert feature.part_count == 2

    @pytest.mark.parametrize(
        "geometry",
        [
            None,
            {},
            {"rings": []},
            {"paths": [[[0, 0], [1, 1]]]},
            {"points": [[0, 0], [1, 1]]},
            {"x": "NaN", "y": "NaN"},
            {"x": None, "y": 45.0},
        ],
    )
    def test_unsupported(self, geometry: object) -> None:
        raw = {"attributes": {"OBJECTID": 9}, "geometry": geometry}
        feature = SourceFeature.from_esri_json(raw, "OBJECTID")
        assert feature.kind is GeometryKind.UNSUPPORTED
        assert feature.feature_id == "9"

    def test_attributes_are_copied(self) -> None:
        raw = point_feature(1, NAME="Laurelhurst")
        feature = SourceFeature.from_esri_json(raw, "OBJECTID")
        raw["attributes"]["NAME"] = "changed"
        assert feature.attributes["NAME"] == "Laurelhurst"

    def test_missing_id_attribute(self) -> None:
        raw = {"attributes": {}, "geometry": {"x": 1.0, "y": 2.0}}
        assert SourceFeature.from_esri_json(raw, "OBJECTID").feature_id == ""
