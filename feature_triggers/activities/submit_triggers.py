"""Bounded-concurrency trigger submission.

A fixed pool of ``concurrency`` worker tasks pulls ``TriggerRequest``
objects from an unbounded ``asyncio.Queue``.  Each worker performs one
create call at a time, so at most ``concurrency`` calls are ever in
flight.  Every request yields exactly one ``SubmissionOutcome``, which is
handed to ``on_outcome``; failures are recorded, never retried.  Any
exception from ``submit`` becomes a failed outcome, so one bad item
cannot stop a worker.

Lifecycle::

    queue = SubmissionQueue(client.create_trigger, aggregator.record, concurrency=25)
    queue.start()
    queue.enqueue(request)      # any number of times, never blocks
    await queue.drain()         # once pagination is finished
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from feature_triggers.clients.base import TriggerCreationError
from feature_triggers.clients.trigger_api import SERVICE_NAME as SUBMIT_SERVICE
from feature_triggers.core.constants import DEFAULT_CONCURRENCY
from feature_triggers.core.exceptions import PipelineError
from feature_triggers.models.trigger import SubmissionOutcome

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from feature_triggers.models.trigger import TriggerRequest

    SubmitFn = Callable[[TriggerRequest], Awaitable[tuple[str, tuple[str, ...]]]]
    OutcomeFn = Callable[[SubmissionOutcome], None]

logger = logging.getLogger("feature_triggers.activities.submit_triggers")

# Queue sentinel telling a worker to exit.
_STOP = None


class SubmissionQueue:
    """Fixed-size async worker pool for ``trigger/create`` calls.

    Args:
        submit: Coroutine function performing one create call.  Returns
            ``(trigger_id, tags)`` or raises a ``PipelineError``.
        on_outcome: Called once per request with its outcome.
        concurrency: Number of workers (maximum calls in flight).
    """

    def __init__(
        self,
        submit: SubmitFn,
        on_outcome: OutcomeFn,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            msg = f"concurrency must be >= 1, got {concurrency}"
            raise ValueError(msg)
        self._submit = submit
        self._on_outcome = on_outcome
        self._concurrency = concurrency
        self._queue: asyncio.Queue[TriggerRequest | None] = asyncio.Queue()
        self._workers: list[asyncio.Task[None]] = []
        self._closed = False
        self._drained = False
        self.enqueued = 0
        self.completed = 0
        self.in_flight = 0
        self.peak_in_flight = 0

    def start(self) -> None:
        """Spawn the worker tasks.  Must run inside an event loop."""
        if self._workers:
            msg = "SubmissionQueue already started"
            raise RuntimeError(msg)
        self._workers = [
            asyncio.create_task(self._worker(), name=f"submit-worker-{i}")
            for i in range(self._concurrency)
        ]
        logger.debug("Submission workers started | concurrency=%d", self._concurrency)

    def enqueue(self, request: TriggerRequest) -> None:
        """Admit *request* for submission.  Never blocks."""
        if self._closed:
            msg = "Cannot enqueue after drain() or abort()"
            raise RuntimeError(msg)
        self._queue.put_nowait(request)
        self.enqueued += 1

    async def drain(self) -> None:
        """Close the queue and wait until every request has completed.

        Resolves exactly once; a second call raises ``RuntimeError``.
        """
        if self._drained:
            msg = "SubmissionQueue already drained"
            raise RuntimeError(msg)
        if not self._workers:
            msg = "SubmissionQueue was never started"
            raise RuntimeError(msg)
        self._closed = True
        for _ in self._workers:
            self._queue.put_nowait(_STOP)
        await asyncio.gather(*self._workers)
        self._drained = True
        logger.debug(
            "Submission queue drained | enqueued=%d | completed=%d | peak_in_flight=%d",
            self.enqueued,
            self.completed,
            self.peak_in_flight,
        )

    def abort(self) -> None:
        """Cancel all workers without waiting for in-flight calls."""
        self._closed = True
        for task in self._workers:
            task.cancel()

    async def _worker(self) -> None:
        while True:
            request = await self._queue.get()
            if request is _STOP:
                return
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                outcome = await self._submit_one(request)
            finally:
                self.in_flight -= 1
            self.completed += 1
            self._on_outcome(outcome)

    async def _submit_one(self, request: TriggerRequest) -> SubmissionOutcome:
        try:
            trigger_id, tags = await self._submit(request)
        except PipelineError as exc:
            if not exc.feature_id:
                exc.feature_id = request.feature_id
            return SubmissionOutcome.failed(request.feature_id, exc)
        except Exception as exc:
            logger.exception("Unexpected submission failure | feature=%s", request.feature_id)
            msg = f"Unexpected error: {exc!r}"
            error = TriggerCreationError(SUBMIT_SERVICE, msg, feature_id=request.feature_id)
            return SubmissionOutcome.failed(request.feature_id, error)
        return SubmissionOutcome.created(request.feature_id, trigger_id, tags)
