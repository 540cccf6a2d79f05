"""
Redis-based distributed lock.

Serialises ledger transitions across API processes: every mutating
operation of the transition engine runs while holding the ``ledger`` lock,
so two processes can never interleave a scan-then-write on the same rows.

Implementation uses SET NX EX for acquire and a Lua script for
atomic check-and-delete on release.  The async context manager polls
for up to ``wait_seconds`` before giving up.
"""

from __future__ import annotations

import asyncio
import time
import uuid

import redis.asyncio as aioredis


class LockNotAcquired(RuntimeError):
    """Raised when the lock could not be taken within the wait budget."""


class DistributedLock:
    def __init__(
        self,
        client: aioredis.Redis,
        key: str,
        ttl_seconds: int = 30,
        wait_seconds: float = 0.0,
        poll_interval: float = 0.05,
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.wait = wait_seconds
        self.poll_interval = poll_interval
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def acquire_wait(self) -> bool:
        """Retry ``acquire`` until it succeeds or ``wait_seconds`` elapse."""
        deadline = time.monotonic() + self.wait
        while True:
            if await self.acquire():
                return True
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(self.poll_interval)

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)

    # context-manager support
    async def __aenter__(self):
        acquired = await self.acquire_wait()
        if not acquired:
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()
