import json

import redis.asyncio as redis
from clinihof.core.config import settings

class RedisClient:
    """Registry of live session tokens; a token missing here is revoked."""

    def __init__(self):
        self.redis = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)

    async def set_token(self, token: str, value: dict, expire: int):
        await self.redis.set(f"session:{token}", json.dumps(value), ex=expire)

    async def get_token(self, token: str) -> dict | None:
        raw = await self.redis.get(f"session:{token}")
        if raw is None:
            return None
        return json.loads(raw)

    async def delete_token(self, token: str):
        await self.redis.delete(f"session:{token}")

    async def close(self):
        await self.redis.close()

redis_client = RedisClient()
