"""
Logical clock (height) sources.

The height gates time-dependent transitions such as maintenance due
dates.  It only ever moves forward: ``advance_to`` with a lower value is
a no-op that returns the current height.
"""

from __future__ import annotations

from typing import Protocol

import redis.asyncio as aioredis


class HeightSource(Protocol):
    async def current_height(self) -> int: ...

    async def advance_to(self, height: int) -> int: ...


class StaticHeightSource:
    """In-process height, for tests and single-process deployments."""

    def __init__(self, height: int = 0):
        self.height = height

    async def current_height(self) -> int:
        return self.height

    async def advance_to(self, height: int) -> int:
        self.height = max(self.height, height)
        return self.height


class RedisHeightSource:
    """Height shared by every API process through one Redis key."""

    _ADVANCE = """
    local current = tonumber(redis.call("get", KEYS[1]) or "0")
    local target = tonumber(ARGV[1])
    if target > current then
        redis.call("set", KEYS[1], target)
        return target
    end
    return current
    """

    def __init__(self, client: aioredis.Redis, key: str = "ledger:height"):
        self.redis = client
        self.key = key

    async def current_height(self) -> int:
        value = await self.redis.get(self.key)
        return int(value) if value is not None else 0

    async def advance_to(self, height: int) -> int:
        return int(await self.redis.eval(self._ADVANCE, 1, self.key, height))
