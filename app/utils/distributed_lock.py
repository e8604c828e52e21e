"""
Distributed locking utility for serializing work on a shared key.

Uses Redis (``SET NX PX`` with a random token and a token-checked release)
when ``REDIS_URL`` is configured, and a process-local ``asyncio.Lock`` per
key otherwise. A Redis lock is renewed in the background while it is held.
"""

import asyncio
import logging
import secrets
import time
from typing import Dict, Optional

import redis.asyncio as redis

from app.core.redis_client import get_redis_client, is_redis_configured

logger = logging.getLogger(__name__)

# Only delete the key if it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

# Only reset the TTL if the key still holds our token
_EXTEND_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("pexpire", KEYS[1], ARGV[2])
else
    return 0
end
"""

_local_locks: Dict[str, asyncio.Lock] = {}
# Holders plus waiters per key; the lock is dropped when it reaches zero
_local_lock_users: Dict[str, int] = {}


class LockAcquisitionError(Exception):
    """Raised when a lock could not be acquired within the allowed wait."""

    def __init__(self, lock_key: str, waited_seconds: float):
        super().__init__(f"Could not acquire lock '{lock_key}' after {waited_seconds:.1f}s")
        self.lock_key = lock_key
        self.waited_seconds = waited_seconds


def _get_local_lock(key: str) -> asyncio.Lock:
    lock = _local_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _local_locks[key] = lock
    _local_lock_users[key] = _local_lock_users.get(key, 0) + 1
    return lock


def _drop_local_lock_user(key: str) -> None:
    users = _local_lock_users.get(key, 0) - 1
    if users > 0:
        _local_lock_users[key] = users
        return
    _local_lock_users.pop(key, None)
    _local_locks.pop(key, None)


class DistributedLock:
    """
    Async context manager guarding a named critical section.

    Example:
        ```python
        async with DistributedLock("stock-import", timeout_seconds=60):
            await import_stock()
        ```
    """

    def __init__(
        self,
        lock_key: str,
        timeout_seconds: int = 30,
        retry_delay: float = 0.2,
        max_wait_seconds: Optional[float] = None,
        use_redis: Optional[bool] = None,
        renewal_interval: Optional[float] = None,
    ):
        """
        Initialize the distributed lock.

        Args:
            lock_key: Unique key for the lock
            timeout_seconds: Lock TTL in Redis (prevents deadlocks if the holder dies)
            retry_delay: Initial delay between Redis acquisition attempts
            max_wait_seconds: Give up after this long (default: ``timeout_seconds``)
            use_redis: Force (True) or disable (False) Redis; default follows configuration
            renewal_interval: Seconds between TTL renewals (default: a third of the TTL)
        """
        self.lock_key = f"lock:{lock_key}"
        self.timeout_seconds = timeout_seconds
        self.retry_delay = retry_delay
        self.max_wait_seconds = max_wait_seconds if max_wait_seconds is not None else float(timeout_seconds)
        self.use_redis = is_redis_configured() if use_redis is None else use_redis
        self.renewal_interval = renewal_interval if renewal_interval is not None else timeout_seconds / 3
        self.acquired = False
        self._token: Optional[str] = None
        self._local_lock: Optional[asyncio.Lock] = None
        self._renewal_task: Optional[asyncio.Task] = None
        self._start_time: Optional[float] = None

    async def acquire(self) -> None:
        """
        Acquire the lock, waiting up to ``max_wait_seconds``.

        Raises:
            LockAcquisitionError: If the lock stays busy for too long
        """
        start = time.monotonic()
        if self.use_redis:
            await self._acquire_redis(start)
        else:
            await self._acquire_local(start)
        self.acquired = True
        self._start_time = time.monotonic()

        if self._token is not None:
            self._renewal_task = asyncio.create_task(self._renewal_loop(), name=f"renew-{self.lock_key}")
        logger.debug(f"🔒 Acquired lock '{self.lock_key}'")

    async def _acquire_redis(self, start: float) -> None:
        client = get_redis_client()
        token = secrets.token_hex(16)
        delay = self.retry_delay
        while True:
            if await client.set(self.lock_key, token, nx=True, px=self.timeout_seconds * 1000):
                self._token = token
                return
            waited = time.monotonic() - start
            if waited >= self.max_wait_seconds:
                raise LockAcquisitionError(self.lock_key, waited)
            await asyncio.sleep(delay)
            delay = min(delay * 2, 2.0)

    async def _acquire_local(self, start: float) -> None:
        lock = _get_local_lock(self.lock_key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.max_wait_seconds)
        except asyncio.TimeoutError:
            _drop_local_lock_user(self.lock_key)
            raise LockAcquisitionError(self.lock_key, time.monotonic() - start) from None
        except asyncio.CancelledError:
            _drop_local_lock_user(self.lock_key)
            raise
        self._local_lock = lock

    async def extend_lock(self) -> bool:
        """
        Reset the Redis TTL of a held lock.

        Returns:
            bool: False if the lock is not held or its key now belongs to someone else
        """
        if not self.acquired or self._token is None:
            return False

        try:
            extended = await get_redis_client().eval(
                _EXTEND_SCRIPT, 1, self.lock_key, self._token, self.timeout_seconds * 1000
            )
        except redis.RedisError as e:
            logger.error(f"Failed to extend lock '{self.lock_key}': {e}")
            return False

        if not extended:
            logger.warning(f"⚠️ Lock '{self.lock_key}' is no longer held, renewal stopped")
            return False

        logger.debug(f"🔄 Extended lock '{self.lock_key}'")
        return True

    async def _renewal_loop(self) -> None:
        while True:
            await asyncio.sleep(self.renewal_interval)
            if not await self.extend_lock():
                return

    async def release(self) -> None:
        """Release the lock if held."""
        if not self.acquired:
            return

        if self._renewal_task is not None:
            self._renewal_task.cancel()
            try:
                await self._renewal_task
            except asyncio.CancelledError:
                pass
            self._renewal_task = None

        if self._local_lock is not None:
            self._local_lock.release()
            self._local_lock = None
            _drop_local_lock_user(self.lock_key)
        elif self._token is not None:
            try:
                await get_redis_client().eval(_RELEASE_SCRIPT, 1, self.lock_key, self._token)
            except redis.RedisError as e:
                # The TTL frees the key eventually
                logger.warning(f"Failed to release lock '{self.lock_key}': {e}")
            self._token = None

        self.acquired = False
        duration = time.monotonic() - (self._start_time or 0)
        logger.debug(f"🔓 Released lock '{self.lock_key}' (held for {duration:.2f}s)")

    async def __aenter__(self) -> "DistributedLock":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.release()
        return False


def cleanup_locks() -> None:
    """Drop idle process-local locks. Called during application shutdown."""
    for key, lock in list(_local_locks.items()):
        if not lock.locked() and not _local_lock_users.get(key):
            _local_locks.pop(key, None)
