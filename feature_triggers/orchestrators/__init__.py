"""Pipeline orchestration.

Exposes the top-level import run that wires the pipeline stages together.
"""

from feature_triggers.orchestrators.import_pipeline import run_import

__all__ = ["run_import"]
