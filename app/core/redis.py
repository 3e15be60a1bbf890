import json
from typing import Any, AsyncIterator, Optional

import anyio
import redis.asyncio as redis
from app.core.config import settings


def feed_channel(user_id) -> str:
    return f"feed:{user_id}"


class Subscription:
    """
    Handle on a realtime feed channel.

    Must be closed by the caller; use it as an async context manager so the
    pubsub connection is released on teardown.
    """

    def __init__(self, client: redis.Redis, channel: str):
        self.channel = channel
        self._pubsub = client.pubsub()
        self._open = False

    async def open(self) -> "Subscription":
        await self._pubsub.subscribe(self.channel)
        self._open = True
        return self

    async def close(self):
        if not self._open:
            return
        self._open = False
        # Teardown must finish even when the owning task is being cancelled
        with anyio.CancelScope(shield=True):
            await self._pubsub.unsubscribe(self.channel)
            await self._pubsub.aclose()

    async def get_event(self, timeout: float = 1.0) -> Optional[dict]:
        message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=timeout)
        if not message or message.get("type") != "message":
            return None
        return json.loads(message["data"])

    async def events(self, timeout: float = 1.0) -> AsyncIterator[dict]:
        while self._open:
            event = await self.get_event(timeout=timeout)
            if event is not None:
                yield event

    async def __aenter__(self) -> "Subscription":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


class RedisClient:
    def __init__(self):
        self.redis = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)

    async def set_token(self, token: str, value: str, expire: int):
        await self.redis.set(f"token:{token}", value, ex=expire)

    async def get_token(self, token: str) -> str | None:
        return await self.redis.get(f"token:{token}")

    async def delete_token(self, token: str):
        await self.redis.delete(f"token:{token}")

    async def publish(self, user_id, event_type: str, payload: dict[str, Any]) -> int:
        data = json.dumps({"type": event_type, "payload": payload}, default=str)
        return await self.redis.publish(feed_channel(user_id), data)

    def subscribe(self, user_id) -> Subscription:
        return Subscription(self.redis, feed_channel(user_id))

    async def close(self):
        await self.redis.aclose()

redis_client = RedisClient()
