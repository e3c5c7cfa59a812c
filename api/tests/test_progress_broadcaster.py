from __future__ import annotations
import time
import pytest
from sdkgen.models.schemas import JobStatus, ProgressEvent
from sdkgen.services.progress_broadcaster import ProgressBroadcaster


def event(progress: int, job_id: str = "job-1", status: JobStatus = JobStatus.ANALYZING) -> ProgressEvent:
    return ProgressEvent(job_id=job_id, status=status, progress=progress,
                         message=f"step {progress}", timestamp=time.time())


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_noop(broadcaster):
    assert broadcaster.publish(event(10)) == 0
    assert broadcaster.subscriber_count == 0


@pytest.mark.asyncio
async def test_every_subscriber_gets_events_in_order(broadcaster):
    first = broadcaster.subscribe()
    second = broadcaster.subscribe()

    for progress in (10, 20, 50):
        assert broadcaster.publish(event(progress)) == 2

    for subscription in (first, second):
        received = [(await subscription.next_event(timeout=1)).progress for _ in range(3)]
        assert received == [10, 20, 50]


@pytest.mark.asyncio
async def test_events_span_jobs(broadcaster):
    subscription = broadcaster.subscribe()
    broadcaster.publish(event(10, job_id="a"))
    broadcaster.publish(event(10, job_id="b"))

    assert (await subscription.next_event(timeout=1)).job_id == "a"
    assert (await subscription.next_event(timeout=1)).job_id == "b"


@pytest.mark.asyncio
async def test_next_event_times_out(broadcaster):
    subscription = broadcaster.subscribe()
    assert await subscription.next_event(timeout=0.01) is None


@pytest.mark.asyncio
async def test_late_subscriber_misses_earlier_events(broadcaster):
    broadcaster.publish(event(10))
    subscription = broadcaster.subscribe()
    broadcaster.publish(event(20))

    assert (await subscription.next_event(timeout=1)).progress == 20
    assert await subscription.next_event(timeout=0.01) is None


@pytest.mark.asyncio
async def test_unsubscribed_observer_stops_receiving(broadcaster):
    kept = broadcaster.subscribe()
    removed = broadcaster.subscribe()
    removed.close()
    removed.close()

    assert broadcaster.subscriber_count == 1
    assert broadcaster.publish(event(30)) == 1
    assert removed.queue.empty()
    assert (await kept.next_event(timeout=1)).progress == 30


@pytest.mark.asyncio
async def test_context_manager_unsubscribes(broadcaster):
    async with broadcaster.subscribe() as subscription:
        assert broadcaster.subscribers() == [subscription]
    assert broadcaster.subscriber_count == 0


@pytest.mark.asyncio
async def test_async_iteration(broadcaster):
    subscription = broadcaster.subscribe()
    broadcaster.publish(event(10))
    broadcaster.publish(event(100, status=JobStatus.COMPLETED))

    seen = []
    async for item in subscription:
        seen.append(item.status)
        if item.status.is_terminal:
            break
    assert seen == [JobStatus.ANALYZING, JobStatus.COMPLETED]


@pytest.mark.asyncio
async def test_bounded_queue_drops_for_slow_subscriber_only():
    broadcaster = ProgressBroadcaster(queue_size=2)
    slow = broadcaster.subscribe()
    fast = broadcaster.subscribe()

    assert broadcaster.publish(event(10)) == 2
    assert (await fast.next_event(timeout=1)).progress == 10
    assert broadcaster.publish(event(20)) == 2
    assert (await fast.next_event(timeout=1)).progress == 20
    # slow subscriber is now full
    assert broadcaster.publish(event(30)) == 1

    assert slow.dropped == 1
    assert fast.dropped == 0
    assert [(await slow.next_event(timeout=1)).progress for _ in range(2)] == [10, 20]
    assert (await fast.next_event(timeout=1)).progress == 30
