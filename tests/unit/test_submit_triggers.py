"""Tests for the bounded-concurrency submission queue."""

from __future__ import annotations

import asyncio

import pytest

from feature_triggers.activities.submit_triggers import SubmissionQueue
from feature_triggers.clients.base import TriggerCreationError
from feature_triggers.models.trigger import (
    SubmissionOutcome,
    TriggerAction,
    TriggerCondition,
    TriggerRequest,
)


def _request(feature_id: str) -> TriggerRequest:
    return TriggerRequest(
        condition=TriggerCondition(
            direction="enter",
            geo={"latitude": 0.0, "longitude": 0.0, "distance": 10.0},
        ),
        action=TriggerAction(tracking_profile="fine"),
        tags=("t",),
        feature_id=feature_id,
    )


class _FakeSubmit:
    """Records concurrency and optionally fails selected features."""

    def __init__(self, delay_s: float = 0.0, fail: frozenset[str] = frozenset()) -> None:
        self.delay_s = delay_s
        self.fail = fail
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak = 0

    async def __call__(self, request: TriggerRequest) -> tuple[str, tuple[str, ...]]:
        self.calls.append(request.feature_id)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay_s)
        finally:
            self.in_flight -= 1
        if request.feature_id in self.fail:
            raise TriggerCreationError("geotrigger", "rejected")
        return f"trigger-{request.feature_id}", request.tags


class TestSubmissionQueue:
    @pytest.mark.asyncio
    async def test_every_request_yields_one_outcome(self) -> None:
        submit = _FakeSubmit()
        outcomes: list[SubmissionOutcome] = []
        queue = SubmissionQueue(submit, outcomes.append, concurrency=3)
        queue.start()
        for i in range(10):
            queue.enqueue(_request(str(i)))
        await queue.drain()

        assert sorted(submit.calls, key=int) == [str(i) for i in range(10)]
        assert sorted(o.feature_id for o in outcomes) == sorted(str(i) for i in range(10))
        assert all(o.succeeded for o in outcomes)
        assert queue.enqueued == queue.completed == 10

    @pytest.mark.asyncio
    async def test_in_flight_never_exceeds_concurrency(self) -> None:
        submit = _FakeSubmit(delay_s=0.01)
        queue = SubmissionQueue(submit, lambda _o: None, concurrency=2)
        queue.start()
        for i in range(8):
            queue.enqueue(_request(str(i)))
        await queue.drain()

        assert submit.peak == 2
        assert queue.peak_in_flight == 2
        assert queue.in_flight == 0

    @pytest.mark.asyncio
    async def test_failures_recorded_not_retried(self) -> None:
        submit = _FakeSubmit(fail=frozenset({"2"}))
        outcomes: list[SubmissionOutcome] = []
        queue = SubmissionQueue(submit, outcomes.append, concurrency=2)
        queue.start()
        for i in range(4):
            queue.enqueue(_request(str(i)))
        await queue.drain()

        assert submit.calls.count("2") == 1
        failed = [o for o in outcomes if not o.succeeded]
        assert len(failed) == 1
        assert failed[0].feature_id == "2"
        assert isinstance(failed[0].error, TriggerCreationError)
        assert failed[0].error.feature_id == "2"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failed_outcome(self) -> None:
        async def submit(request: TriggerRequest) -> tuple[str, tuple[str, ...]]:
            if request.feature_id == "1":
                raise RuntimeError("encoder blew up")
            return f"trigger-{request.feature_id}", request.tags

        outcomes: list[SubmissionOutcome] = []
        queue = SubmissionQueue(submit, outcomes.append, concurrency=1)
        queue.start()
        for i in range(3):
            queue.enqueue(_request(str(i)))
        await queue.drain()

        assert len(outcomes) == 3
        (failed,) = [o for o in outcomes if not o.succeeded]
        assert failed.feature_id == "1"
        assert isinstance(failed.error, TriggerCreationError)
        assert "encoder blew up" in str(failed.error)
        assert queue.completed == 3

    @pytest.mark.asyncio
    async def test_drain_with_nothing_enqueued(self) -> None:
        outcomes: list[SubmissionOutcome] = []
        queue = SubmissionQueue(_FakeSubmit(), outcomes.append, concurrency=4)
        queue.start()
        await queue.drain()
        assert outcomes == []

    @pytest.mark.asyncio
    async def test_drain_resolves_once(self) -> None:
        queue = SubmissionQueue(_FakeSubmit(), lambda _o: None, concurrency=1)
        queue.start()
        await queue.drain()
        with pytest.raises(RuntimeError, match="already drained"):
            await queue.drain()

    @pytest.mark.asyncio
    async def test_enqueue_after_drain_rejected(self) -> None:
        queue = SubmissionQueue(_FakeSubmit(), lambda _o: None, concurrency=1)
        queue.start()
        await queue.drain()
        with pytest.raises(RuntimeError):
            queue.enqueue(_request("late"))

    @pytest.mark.asyncio
    async def test_drain_before_start_rejected(self) -> None:
        queue = SubmissionQueue(_FakeSubmit(), lambda _o: None, concurrency=1)
        with pytest.raises(RuntimeError, match="never started"):
            await queue.drain()

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="concurrency"):
            SubmissionQueue(_FakeSubmit(), lambda _o: None, concurrency=0)
