"""HTTP clients for the remote services.

- FeatureServiceClient: ArcGIS Feature Service layer (metadata + query)
- GeotriggerClient: Geotrigger API ``trigger/create``
- request_app_token: OAuth2 ``client_credentials`` exchange shared by both
"""

from feature_triggers.clients.auth import request_app_token
from feature_triggers.clients.base import (
    AuthenticationError,
    MetadataFetchError,
    PageFetchError,
    ServiceError,
    TriggerCreationError,
)
from feature_triggers.clients.feature_service import FeatureServiceClient
from feature_triggers.clients.trigger_api import GeotriggerClient

__all__ = [
    "AuthenticationError",
    "FeatureServiceClient",
    "GeotriggerClient",
    "MetadataFetchError",
    "PageFetchError",
    "ServiceError",
    "TriggerCreationError",
    "request_app_token",
]
