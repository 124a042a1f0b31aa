from redis.asyncio import Redis

from edgelimit.core.storage.base import KVStore


class RedisKVStore(KVStore):
    def __init__(self, redis: Redis):
        self._redis = redis

    async def get(self, key: str) -> str | None:
        val = await self._redis.get(key)
        if val is None:
            return None
        return val.decode() if isinstance(val, bytes) else val

    async def put(self, key: str, value: str, expiration_ttl: int) -> None:
        await self._redis.set(key, value, ex=expiration_ttl)

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)
