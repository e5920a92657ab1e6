"""Cursor-based pagination over a Feature Service layer.

Pages are requested with ``where=<idField> > <cursor>``, starting at 0.
While the service reports ``exceededTransferLimit``, the next cursor is
the largest id in the current page and the next query is started before
the current page's features are handed downstream.  Pages are strictly
sequential: a query is only issued once the previous one has returned.

Any page failure is fatal; there is no partial-failure tolerance.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from feature_triggers.clients.base import PageFetchError
from feature_triggers.clients.feature_service import SERVICE_NAME
from feature_triggers.core.constants import INITIAL_CURSOR
from feature_triggers.models.feature import SourceFeature

if TYPE_CHECKING:
    from collections.abc import Callable

    from feature_triggers.clients.feature_service import FeatureServiceClient
    from feature_triggers.models.service import FeaturePage

logger = logging.getLogger("feature_triggers.activities.paginate_features")


class Paginator:
    """Walk every page of a layer and emit its features.

    Args:
        service: Feature Service client (authenticated if required).
        id_field: Object-id attribute used as the cursor.
        start_cursor: Exclusive lower bound of the first query.
    """

    def __init__(
        self,
        service: FeatureServiceClient,
        id_field: str,
        *,
        start_cursor: int = INITIAL_CURSOR,
    ) -> None:
        self._service = service
        self._id_field = id_field
        self._start_cursor = start_cursor
        self.pages_fetched = 0
        self.features_emitted = 0

    async def run(self, on_feature: Callable[[SourceFeature], None]) -> int:
        """Fetch all pages, calling *on_feature* for every feature.

        Returns:
            The number of page queries issued.

        Raises:
            PageFetchError: If a query fails, or a page's ids cannot be
                used to advance the cursor.
        """
        cursor = self._start_cursor
        page = await self._schedule(cursor)

        while True:
            next_fetch: asyncio.Task[FeaturePage] | None = None
            if page.exceeded_transfer_limit:
                if page.features:
                    cursor = self._next_cursor(page.features, cursor)
                    next_fetch = self._schedule(cursor)
                else:
                    logger.warning(
                        "Service reported more results but returned an empty page | cursor=%d",
                        cursor,
                    )

            try:
                for raw in page.features:
                    on_feature(SourceFeature.from_esri_json(raw, self._id_field))
                    self.features_emitted += 1
            except BaseException:
                if next_fetch is not None:
                    next_fetch.cancel()
                raise

            if next_fetch is None:
                break
            page = await next_fetch

        logger.info(
            "Pagination finished | pages=%d | features=%d",
            self.pages_fetched,
            self.features_emitted,
        )
        return self.pages_fetched

    def _schedule(self, cursor: int) -> asyncio.Task[FeaturePage]:
        # Counted when issued, not when answered.
        self.pages_fetched += 1
        return asyncio.create_task(self._fetch(self.pages_fetched, cursor))

    async def _fetch(self, page_number: int, cursor: int) -> FeaturePage:
        logger.debug("Requesting features | page=%d | cursor=%d", page_number, cursor)
        page = await self._service.query_page(self._id_field, cursor)
        logger.info(
            "Received page | page=%d | features=%d | more=%s",
            page_number,
            len(page.features),
            page.exceeded_transfer_limit,
        )
        return page

    def _next_cursor(self, features: list[dict[str, Any]], cursor: int) -> int:
        ids: list[int] = []
        for raw in features:
            value = (raw.get("attributes") or {}).get(self._id_field)
            try:
                ids.append(int(value))
            except (TypeError, ValueError) as exc:
                msg = f"Feature without a usable {self._id_field!r} value: {value!r}"
                raise PageFetchError(SERVICE_NAME, msg) from exc

        next_cursor = max(ids)
        if next_cursor <= cursor:
            msg = f"Cursor did not advance past {cursor} ({self._id_field} max={next_cursor})"
            raise PageFetchError(SERVICE_NAME, msg)
        return next_cursor
