"""Result aggregation: the single owner of the run's tallies.

Submission workers never touch the counters directly.  They post
``SubmissionOutcome`` messages to the aggregator's mailbox, and one task
applies them to the ``RunSummary`` in arrival order.  ``on_drained()``
flushes the mailbox and emits the summary line exactly once.
"""

from __future__ import annotations

import asyncio
import logging

from feature_triggers.models.trigger import RunSummary, SubmissionOutcome

logger = logging.getLogger("feature_triggers.activities.aggregate_results")

# Mailbox sentinel marking the end of the run.
_DONE = None


class ResultAggregator:
    """Mailbox-driven owner of the ``RunSummary``."""

    def __init__(self) -> None:
        self._mailbox: asyncio.Queue[SubmissionOutcome | None] = asyncio.Queue()
        self._summary = RunSummary()
        self._task: asyncio.Task[None] | None = None
        self._finished = False

    def start(self) -> None:
        """Launch the consuming task.  Must run inside an event loop."""
        if self._task is not None:
            msg = "ResultAggregator already started"
            raise RuntimeError(msg)
        self._task = asyncio.create_task(self._consume(), name="result-aggregator")

    def record(self, outcome: SubmissionOutcome) -> None:
        """Post *outcome* to the mailbox.  Never blocks."""
        if self._finished:
            msg = "Cannot record outcomes after on_drained()"
            raise RuntimeError(msg)
        self._mailbox.put_nowait(outcome)

    async def on_drained(self) -> RunSummary:
        """Apply every pending outcome, log the summary line, and return it.

        Must be called exactly once, after the submission queue drained.
        """
        if self._finished:
            msg = "on_drained() already called"
            raise RuntimeError(msg)
        if self._task is None:
            msg = "ResultAggregator was never started"
            raise RuntimeError(msg)
        self._finished = True
        self._mailbox.put_nowait(_DONE)
        await self._task
        logger.info("%s", self._summary.format())
        return self._summary

    def abort(self) -> None:
        """Stop consuming without emitting a summary."""
        self._finished = True
        if self._task is not None:
            self._task.cancel()

    async def _consume(self) -> None:
        while True:
            outcome = await self._mailbox.get()
            if outcome is _DONE:
                return
            self._summary.add(outcome)
            _log_outcome(outcome)


def _log_outcome(outcome: SubmissionOutcome) -> None:
    if outcome.succeeded:
        logger.info(
            "Trigger created | trigger_id=%s | tags=%s | feature=%s",
            outcome.trigger_id,
            list(outcome.tags or ()),
            outcome.feature_id,
        )
    else:
        logger.error(
            "Could not create trigger | feature=%s | error=%s",
            outcome.feature_id,
            outcome.error,
        )
