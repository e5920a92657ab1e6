"""Pipeline stages.

Each module implements one stage of the feature-to-trigger pipeline:
paginate_features → dispatch_geometry → build_parameters →
submit_triggers → aggregate_results.
"""
