"""Pydantic models for Feature Service and OAuth2 responses.

Only the fields the importer reads are declared; everything else in a
response is ignored.  ArcGIS endpoints report most failures with HTTP 200
and an ``error`` object, so clients check for ``error`` before parsing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from feature_triggers.core.constants import ESRI_OID_FIELD_TYPE, ESRI_POLYLINE


class FieldInfo(BaseModel):
    """One entry of a layer's ``fields`` list."""

    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = ""


class LayerMetadata(BaseModel):
    """Layer description returned by ``<serviceUrl>?f=json``.

    Attributes:
        geometry_type: Esri geometry type (``esriGeometryPoint``...).
        object_id_field: Name of the object-id attribute, if declared.
        fields: Field definitions, used as a fallback for the id field.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    geometry_type: str = Field(default="", alias="geometryType")
    object_id_field: str | None = Field(default=None, alias="objectIdField")
    fields: list[FieldInfo] = Field(default_factory=list)

    @property
    def is_polyline(self) -> bool:
        return self.geometry_type == ESRI_POLYLINE

    def resolve_id_field(self) -> str | None:
        """Return ``objectIdField`` or the first OID-typed field."""
        if self.object_id_field:
            return self.object_id_field
        for f in self.fields:
            if f.type == ESRI_OID_FIELD_TYPE:
                return f.name
        return None


class FeaturePage(BaseModel):
    """One page of a ``/query`` response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    features: list[dict[str, Any]] = Field(default_factory=list)
    exceeded_transfer_limit: bool = Field(default=False, alias="exceededTransferLimit")


class TokenResponse(BaseModel):
    """Successful OAuth2 ``client_credentials`` response."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    expires_in: int | None = None
