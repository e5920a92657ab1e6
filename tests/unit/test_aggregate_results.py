"""Tests for the result aggregator."""

from __future__ import annotations

import logging

import pytest

from feature_triggers.activities.aggregate_results import ResultAggregator
from feature_triggers.clients.base import TriggerCreationError
from feature_triggers.models.trigger import SubmissionOutcome

_LOGGER = "feature_triggers.activities.aggregate_results"


def _ok(feature_id: str) -> SubmissionOutcome:
    return SubmissionOutcome.created(feature_id, f"trigger-{feature_id}", ("parks",))


def _failed(feature_id: str) -> SubmissionOutcome:
    return SubmissionOutcome.failed(
        feature_id, TriggerCreationError("geotrigger", "bad geometry", feature_id=feature_id)
    )


class TestResultAggregator:
    @pytest.mark.asyncio
    async def test_counts_outcomes(self) -> None:
        aggregator = ResultAggregator()
        aggregator.start()
        for outcome in (_ok("1"), _failed("2"), _ok("3")):
            aggregator.record(outcome)
        summary = await aggregator.on_drained()

        assert summary.success_count == 2
        assert summary.error_count == 1
        assert summary.format() == "3 features, 2 successes, 1 errors"

    @pytest.mark.asyncio
    async def test_logs_each_outcome_and_summary_once(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        aggregator = ResultAggregator()
        aggregator.start()
        aggregator.record(_ok("1"))
        aggregator.record(_failed("2"))
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            await aggregator.on_drained()

        messages = [r.getMessage() for r in caplog.records if r.name == _LOGGER]
        assert "Trigger created | trigger_id=trigger-1 | tags=['parks'] | feature=1" in messages
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "feature=2" in errors[0].getMessage()
        assert "bad geometry" in errors[0].getMessage()
        assert messages.count("2 features, 1 successes, 1 errors") == 1

    @pytest.mark.asyncio
    async def test_empty_run(self) -> None:
        aggregator = ResultAggregator()
        aggregator.start()
        summary = await aggregator.on_drained()
        assert summary.format() == "0 features, 0 successes, 0 errors"

    @pytest.mark.asyncio
    async def test_second_on_drained_rejected(self) -> None:
        aggregator = ResultAggregator()
        aggregator.start()
        await aggregator.on_drained()
        with pytest.raises(RuntimeError, match="already called"):
            await aggregator.on_drained()

    @pytest.mark.asyncio
    async def test_record_after_drained_rejected(self) -> None:
        aggregator = ResultAggregator()
        aggregator.start()
        await aggregator.on_drained()
        with pytest.raises(RuntimeError):
            aggregator.record(_ok("late"))

    @pytest.mark.asyncio
    async def test_abort_emits_no_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        aggregator = ResultAggregator()
        aggregator.start()
        aggregator.record(_ok("1"))
        with caplog.at_level(logging.INFO, logger=_LOGGER):
            aggregator.abort()
            with pytest.raises(RuntimeError):
                await aggregator.on_drained()

        assert not any("successes" in r.getMessage() for r in caplog.records)
