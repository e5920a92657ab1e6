"""Feature Service to Geotrigger bulk importer.

Reads point and polygon features from a paginated ArcGIS Feature Service
and creates one Geotrigger per feature (or per multipolygon part), tagged
and templated from the feature's attributes.
"""

__version__ = "0.1.0"
