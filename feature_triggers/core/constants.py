"""Shared importer constants: single source of truth.

Centralises defaults, endpoint URLs, and Esri/Geotrigger string literals
used across the clients, activities, and the CLI.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Run defaults
# ---------------------------------------------------------------------------

DEFAULT_BUFFER_M: float = 250.0
"""Radius applied around point features to form the trigger area."""

DEFAULT_DIRECTION: str = "enter"
"""Trigger condition direction when none is given."""

DEFAULT_CONCURRENCY: int = 25
"""Maximum number of trigger-create calls in flight at once."""

DEFAULT_HTTP_TIMEOUT_S: float = 30.0

TRACKING_PROFILES: tuple[str, ...] = ("off", "rough", "adaptive", "fine")
"""Device tracking profiles accepted by the Geotrigger API."""

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

DEFAULT_TOKEN_URL: str = "https://www.arcgis.com/sharing/rest/oauth2/token"
DEFAULT_TRIGGER_API_URL: str = "https://geotrigger.arcgis.com"
TRIGGER_CREATE_PATH: str = "trigger/create"

# ---------------------------------------------------------------------------
# Feature service query
# ---------------------------------------------------------------------------

OUT_SPATIAL_REFERENCE: int = 4326
"""The Geotrigger API only understands WGS 84."""

OUT_FIELDS: str = "*"
INITIAL_CURSOR: int = 0

ESRI_POLYLINE: str = "esriGeometryPolyline"
ESRI_OID_FIELD_TYPE: str = "esriFieldTypeOID"

# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

SUMMARY_TEMPLATE: str = "{total} features, {successes} successes, {errors} errors"
