"""
Change broker - fans row-change events out to realtime subscribers

Events are published from request handlers after the write has been
committed. Each table is its own channel; ordering is preserved per channel
only. With Redis configured, events go through Redis pub/sub so every worker
process sees every write; without it, fan-out stays in-process.
"""

import asyncio
import logging
from typing import Any, Optional

from ...config import REDIS_URL
from ...rate_limiter import get_redis_client
from .events import TABLES, ChangeEvent

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "labbook:changes:"
SUBSCRIBER_QUEUE_SIZE = 1000


class ChangeBroker:
    """Per-table publish/subscribe hub bound to the application's event loop"""

    def __init__(self):
        self._subscribers: dict[str, set[asyncio.Queue]] = {table: set() for table in TABLES}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._redis = None
        self._listener_task: Optional[asyncio.Task] = None

    @property
    def uses_redis(self) -> bool:
        return self._redis is not None

    async def start(self) -> None:
        """Bind to the running loop and, when Redis is configured, start relaying"""
        self._loop = asyncio.get_running_loop()

        if not REDIS_URL:
            logger.info("📡 Realtime broker running in-process (no REDIS_URL)")
            return

        try:
            self._redis = get_redis_client()
            self._listener_task = asyncio.create_task(self._relay_from_redis())
            self._listener_task.add_done_callback(self._on_relay_done)
            logger.info("📡 Realtime broker relaying through Redis pub/sub")
        except Exception as e:
            self._redis = None
            logger.warning(f"⚠️ Redis unavailable, realtime broker running in-process: {e}")

    async def stop(self) -> None:
        if self._listener_task:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"📡 Redis relay had already stopped: {e}")
            self._listener_task = None
        self._loop = None

    def _on_relay_done(self, task: asyncio.Task) -> None:
        """Fall back to in-process fan-out when the Redis relay dies"""
        if task.cancelled():
            return
        error = task.exception()
        logger.error(f"❌ Redis relay stopped, realtime broker falling back to in-process: {error!r}")
        self._redis = None

    def subscribe(self, table: str) -> asyncio.Queue:
        if table not in self._subscribers:
            raise ValueError(f"Unknown table: {table}")
        queue: asyncio.Queue = asyncio.Queue(maxsize=SUBSCRIBER_QUEUE_SIZE)
        self._subscribers[table].add(queue)
        logger.debug(f"📡 Subscriber added to {table} ({len(self._subscribers[table])} total)")
        return queue

    def unsubscribe(self, table: str, queue: asyncio.Queue) -> None:
        self._subscribers.get(table, set()).discard(queue)

    def subscriber_count(self, table: str) -> int:
        return len(self._subscribers.get(table, ()))

    def publish(self, event: ChangeEvent) -> None:
        """Publish a committed change. Safe to call from any thread."""
        if self._redis is not None:
            try:
                self._redis.publish(f"{CHANNEL_PREFIX}{event.table}", event.model_dump_json())
                return
            except Exception as e:
                logger.warning(f"⚠️ Redis publish failed, delivering locally only: {e}")

        if self._loop is None or self._loop.is_closed():
            logger.debug(f"📡 No running broker loop, dropping {event.type} on {event.table}")
            return

        self._loop.call_soon_threadsafe(self._fan_out, event)

    def _fan_out(self, event: ChangeEvent) -> None:
        for queue in list(self._subscribers.get(event.table, ())):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"⚠️ Realtime subscriber on {event.table} is lagging, event dropped")

    async def _relay_from_redis(self) -> None:
        from redis import asyncio as aioredis

        client = aioredis.from_url(REDIS_URL, decode_responses=True)
        pubsub = client.pubsub()
        await pubsub.psubscribe(f"{CHANNEL_PREFIX}*")
        try:
            async for message in pubsub.listen():
                if message.get("type") != "pmessage":
                    continue
                try:
                    self._fan_out(ChangeEvent.model_validate_json(message["data"]))
                except Exception as e:
                    logger.error(f"❌ Dropping malformed realtime message: {e}")
        finally:
            await pubsub.punsubscribe()
            await client.aclose()


broker = ChangeBroker()


def publish_change(table: str, event_type: str, record: dict[str, Any]) -> None:
    """Publish a change on the process-wide broker"""
    broker.publish(ChangeEvent(table=table, type=event_type, record=record))
