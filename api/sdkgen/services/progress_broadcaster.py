from __future__ import annotations
import asyncio
import uuid
from typing import Dict, List, Optional
from sdkgen.config import PROGRESS_SUBSCRIBER_QUEUE_SIZE
from sdkgen.models.schemas import ProgressEvent
from sdkgen.obs.logging_setup import get_logger
from sdkgen.obs.prometheus_metrics import prometheus_metrics

logger = get_logger(__name__)


class Subscription:
    """A registered observer receiving every published ProgressEvent in order."""

    def __init__(self, broadcaster: "ProgressBroadcaster", maxsize: int = 0):
        self.subscription_id = f"sub_{uuid.uuid4().hex[:8]}"
        self.queue: asyncio.Queue[ProgressEvent] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0
        self._broadcaster = broadcaster

    def deliver(self, event: ProgressEvent) -> bool:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Progress subscriber queue full, dropping event",
                           subscription_id=self.subscription_id,
                           job_id=event.job_id,
                           dropped=self.dropped)
            return False
        return True

    async def next_event(self, timeout: Optional[float] = None) -> Optional[ProgressEvent]:
        """Next event, or None if nothing arrives within ``timeout`` seconds."""
        if timeout is None:
            return await self.queue.get()
        try:
            return await asyncio.wait_for(self.queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def close(self) -> None:
        self._broadcaster.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ProgressEvent:
        return await self.queue.get()

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class ProgressBroadcaster:
    """Fan-out of job progress events to every registered subscriber."""

    def __init__(self, queue_size: int = PROGRESS_SUBSCRIBER_QUEUE_SIZE):
        self.queue_size = queue_size
        self._subscribers: Dict[str, Subscription] = {}

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, maxsize=self.queue_size)
        self._subscribers[subscription.subscription_id] = subscription
        prometheus_metrics.update_subscribers(len(self._subscribers))
        logger.debug("Progress subscriber registered", subscription_id=subscription.subscription_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscribers.pop(subscription.subscription_id, None) is not None:
            prometheus_metrics.update_subscribers(len(self._subscribers))
            logger.debug("Progress subscriber removed", subscription_id=subscription.subscription_id)

    def publish(self, event: ProgressEvent) -> int:
        """Deliver to all current subscribers without blocking; returns deliveries made."""
        delivered = 0
        for subscription in list(self._subscribers.values()):
            if subscription.deliver(event):
                delivered += 1
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribers(self) -> List[Subscription]:
        return list(self._subscribers.values())


# Global broadcaster instance
progress_broadcaster = ProgressBroadcaster()
