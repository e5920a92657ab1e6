"""Shared pytest fixtures for the featureservice2trigger test suite.

``FakeArcGIS`` stands in for the token endpoint, one Feature Service
layer and the Geotrigger API behind an ``httpx.MockTransport``, so no
test ever touches the network.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any
from urllib.parse import parse_qs

import httpx
import pytest

from feature_triggers.core.config import ImportConfig

SERVICE_URL = "https://services.example.com/arcgis/rest/services/Parks/FeatureServer/0"
TOKEN_URL = "https://auth.example.com/oauth2/token"
TRIGGER_API_URL = "https://geotrigger.example.com"

# ---------------------------------------------------------------------------
# Esri JSON builders
# ---------------------------------------------------------------------------

#: Clockwise unit square (outer ring).
SQUARE_A = [[0.0, 0.0], [0.0, 1.0], [1.0, 1.0], [1.0, 0.0], [0.0, 0.0]]
#: Counter-clockwise ring inside ``SQUARE_A`` (hole).
HOLE_A = [[0.2, 0.2], [0.8, 0.2], [0.8, 0.8], [0.2, 0.8], [0.2, 0.2]]
#: Clockwise square disjoint from ``SQUARE_A``.
SQUARE_B = [[2.0, 0.0], [2.0, 1.0], [3.0, 1.0], [3.0, 0.0], [2.0, 0.0]]


def point_feature(oid: int, x: float = -122.68, y: float = 45.52, **attrs: Any) -> dict[str, Any]:
    return {
        "attributes": {"OBJECTID": oid, **attrs},
        "geometry": {"x": x, "y": y, "spatialReference": {"wkid": 4326}},
    }


def polygon_feature(oid: int, rings: list[Any], **attrs: Any) -> dict[str, Any]:
    return {
        "attributes": {"OBJECTID": oid, **attrs},
        "geometry": {"rings": rings, "spatialReference": {"wkid": 4326}},
    }


# ---------------------------------------------------------------------------
# Fake remote services
# ---------------------------------------------------------------------------


class FakeArcGIS:
    """Scriptable token / Feature Service / Geotrigger backend.

    Attributes:
        features: Features served by the layer, sorted by ``OBJECTID``.
        page_size: Maximum features per query page.
        metadata: Body returned for the layer metadata call.
        fail_feature_ids: Feature ids whose ``trigger/create`` is rejected.
        create_delay_s: Simulated latency of each create call.
    """

    def __init__(self) -> None:
        self.features: list[dict[str, Any]] = []
        self.page_size = 1000
        self.metadata: dict[str, Any] = {
            "geometryType": "esriGeometryPoint",
            "objectIdField": "OBJECTID",
        }
        self.token_response: dict[str, Any] = {"access_token": "app-token", "expires_in": 7200}
        self.query_error: dict[str, Any] | None = None
        self.fail_feature_ids: set[str] = set()
        self.create_delay_s = 0.0

        self.token_requests = 0
        self.metadata_requests: list[httpx.Request] = []
        self.query_requests: list[httpx.Request] = []
        self.created: list[dict[str, Any]] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._next_trigger = 0

    @property
    def create_calls(self) -> int:
        return len(self.created)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    async def handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url).split("?")[0]
        if url == TOKEN_URL:
            self.token_requests += 1
            return httpx.Response(200, json=self.token_response)
        if url == SERVICE_URL:
            self.metadata_requests.append(request)
            return httpx.Response(200, json=self.metadata)
        if url == f"{SERVICE_URL}/query":
            return self._query(request)
        if url == f"{TRIGGER_API_URL}/trigger/create":
            return await self._create(request)
        return httpx.Response(404, json={"error": {"code": 404, "message": "not found"}})

    def _query(self, request: httpx.Request) -> httpx.Response:
        self.query_requests.append(request)
        if self.query_error is not None:
            return httpx.Response(200, json={"error": self.query_error})
        where = request.url.params["where"]
        match = re.fullmatch(r"(\w+) > (\d+)", where)
        assert match, where
        field, cursor = match.group(1), int(match.group(2))
        remaining = [f for f in self.features if f["attributes"][field] > cursor]
        page = remaining[: self.page_size]
        # Encoded by hand: ArcGIS can emit bare NaN for double fields.
        body = {"features": page, "exceededTransferLimit": len(remaining) > self.page_size}
        return httpx.Response(
            200,
            content=json.dumps(body).encode(),
            headers={"Content-Type": "application/json"},
        )

    async def _create(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.create_delay_s:
                await asyncio.sleep(self.create_delay_s)
            params = json.loads(request.content)
            self.created.append(params)
            properties = params.get("properties", {})
            if str(properties.get("OBJECTID")) in self.fail_feature_ids:
                return httpx.Response(
                    400,
                    json={"error": {"type": "invalidParams", "message": "bad geometry"}},
                )
            self._next_trigger += 1
            trigger_id = params.get("triggerId") or f"trigger-{self._next_trigger}"
            return httpx.Response(200, json={"triggerId": trigger_id, "tags": params["setTags"]})
        finally:
            self.in_flight -= 1


@pytest.fixture()
def fake_arcgis() -> FakeArcGIS:
    """A fresh fake backend for each test."""
    return FakeArcGIS()


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


def make_config(**overrides: Any) -> ImportConfig:
    values: dict[str, Any] = {
        "client_id": "client-abc",
        "client_secret": "secret-xyz",
        "service_url": SERVICE_URL,
        "tags": ("parks",),
        "callback_url": "https://hooks.example.com/fired",
        "token_url": TOKEN_URL,
        "trigger_api_url": TRIGGER_API_URL,
    }
    values.update(overrides)
    return ImportConfig(**values)


@pytest.fixture()
def config() -> ImportConfig:
    """Default valid configuration pointing at the fake backend."""
    return make_config()


def form_body(request: httpx.Request) -> dict[str, str]:
    """Decode an ``application/x-www-form-urlencoded`` request body."""
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
