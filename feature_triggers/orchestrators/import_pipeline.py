"""Feature Service → Geotrigger import orchestrator.

Wires the pipeline stages together for one run:

1. Authenticate with the Feature Service (if requested) and fetch layer
   metadata.  Polyline layers are rejected here, before any query.
2. Authenticate with the Geotrigger API.
3. Paginate; each feature is dispatched into descriptors, built into a
   ``TriggerRequest`` and enqueued for submission without waiting.
4. Drain the submission queue, then let the aggregator emit the summary.

Any fatal ``PipelineError`` aborts the workers and the aggregator and
propagates immediately; in-flight submissions are abandoned and no
summary is emitted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from feature_triggers.activities.aggregate_results import ResultAggregator
from feature_triggers.activities.build_parameters import ParameterBuilder
from feature_triggers.activities.dispatch_geometry import GeometryDispatcher
from feature_triggers.activities.paginate_features import Paginator
from feature_triggers.activities.submit_triggers import SubmissionQueue
from feature_triggers.clients.base import MetadataFetchError
from feature_triggers.clients.feature_service import SERVICE_NAME, FeatureServiceClient
from feature_triggers.clients.trigger_api import GeotriggerClient
from feature_triggers.core.exceptions import PipelineError
from feature_triggers.models.feature import UnsupportedGeometryError
from feature_triggers.models.trigger import SubmissionOutcome

if TYPE_CHECKING:
    from feature_triggers.core.config import ImportConfig
    from feature_triggers.models.feature import SourceFeature
    from feature_triggers.models.service import LayerMetadata
    from feature_triggers.models.trigger import RunSummary

logger = logging.getLogger("feature_triggers.orchestrators.import_pipeline")


async def run_import(
    config: ImportConfig,
    *,
    http: httpx.AsyncClient | None = None,
) -> RunSummary:
    """Import every feature of ``config.service_url`` as Geotriggers.

    Args:
        config: Validated run configuration.
        http: Optional pre-built client (tests inject a mock transport).
            When omitted, one is created and closed for the run.

    Returns:
        The final ``RunSummary``.

    Raises:
        PipelineError: On any fatal condition (authentication, metadata,
            unsupported layer geometry, page fetch).
    """
    if http is not None:
        return await _run(config, http)
    async with httpx.AsyncClient(timeout=config.http_timeout_s) as client:
        return await _run(config, client)


async def _run(config: ImportConfig, http: httpx.AsyncClient) -> RunSummary:
    service = FeatureServiceClient(http, config.service_url)
    if config.authenticate:
        await service.authenticate(config)

    logger.info("Getting metadata | url=%s", config.service_url)
    metadata = await service.fetch_metadata()
    id_field = check_layer(metadata, config.service_url)
    logger.info(
        "Got metadata | url=%s | geometry=%s | id_field=%s",
        config.service_url,
        metadata.geometry_type,
        id_field,
    )

    triggers = GeotriggerClient(http, config.trigger_api_url)
    await triggers.authenticate(config)

    aggregator = ResultAggregator()
    queue = SubmissionQueue(
        triggers.create_trigger,
        aggregator.record,
        concurrency=config.concurrency,
    )
    dispatcher = GeometryDispatcher(config.buffer_m)
    builder = ParameterBuilder(config)

    def on_feature(feature: SourceFeature) -> None:
        try:
            for descriptor in dispatcher.dispatch(feature):
                queue.enqueue(builder.build(descriptor, feature))
        except UnsupportedGeometryError as exc:
            aggregator.record(SubmissionOutcome.failed(feature.feature_id, exc))

    aggregator.start()
    queue.start()
    logger.info(
        "Requesting features | url=%s | concurrency=%d",
        config.service_url,
        config.concurrency,
    )
    try:
        await Paginator(service, id_field).run(on_feature)
        await queue.drain()
    except PipelineError:
        queue.abort()
        aggregator.abort()
        raise

    logger.debug(
        "Dispatch totals | features=%d | items=%d | enqueued=%d",
        dispatcher.feature_count,
        dispatcher.descriptor_count,
        queue.enqueued,
    )
    return await aggregator.on_drained()


def check_layer(metadata: LayerMetadata, service_url: str) -> str:
    """Reject unusable layers and return the object-id field name.

    Raises:
        UnsupportedGeometryError: For polyline layers.
        MetadataFetchError: If no object-id field can be determined.
    """
    if metadata.is_polyline:
        msg = f"Cannot import Feature Services that contain polylines ({service_url})"
        raise UnsupportedGeometryError(msg, stage="fetch_metadata")

    id_field = metadata.resolve_id_field()
    if not id_field:
        msg = f"Layer metadata for {service_url} declares no object-id field"
        raise MetadataFetchError(SERVICE_NAME, msg)
    return id_field
