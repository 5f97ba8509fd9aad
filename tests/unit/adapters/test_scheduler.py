"""Tests for the APScheduler-backed SLA scheduler."""

import pytest

from ticket_dispatch.infrastructure.scheduler import JOB_ID, SlaScheduler


async def _noop():
    return None


@pytest.mark.asyncio
async def test_start_registers_single_interval_job():
    scheduler = SlaScheduler(interval_seconds=60)

    scheduler.start(_noop)
    try:
        assert scheduler.running
        job = scheduler._scheduler.get_job(JOB_ID)
        assert job is not None
        assert job.max_instances == 1
        assert job.trigger.interval.total_seconds() == 60
    finally:
        scheduler.stop()

    assert not scheduler.running


@pytest.mark.asyncio
async def test_start_twice_keeps_one_scheduler():
    scheduler = SlaScheduler(interval_seconds=60)

    scheduler.start(_noop)
    first = scheduler._scheduler
    scheduler.start(_noop)
    try:
        assert scheduler._scheduler is first
    finally:
        scheduler.stop()


def test_stop_without_start_is_harmless():
    SlaScheduler().stop()
