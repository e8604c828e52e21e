"""Tests unitarios para los locks de pedidos (locales y sobre Redis)."""

import asyncio

import pytest

from app.utils import distributed_lock
from app.utils.distributed_lock import DistributedLock, LockAcquisitionError, cleanup_locks
from app.utils.order_lock import OrderLock


class TestLocalLocks:
    """Sin Redis los locks son asyncio.Lock por clave."""

    @pytest.mark.asyncio
    async def test_second_holder_times_out(self):
        async with DistributedLock("test-busy", max_wait_seconds=1, use_redis=False):
            with pytest.raises(LockAcquisitionError) as exc_info:
                async with DistributedLock("test-busy", max_wait_seconds=0.05, use_redis=False):
                    pass

        assert exc_info.value.lock_key == "lock:test-busy"

    @pytest.mark.asyncio
    async def test_lock_is_released_on_exception(self):
        with pytest.raises(RuntimeError):
            async with DistributedLock("test-release", use_redis=False):
                raise RuntimeError("boom")

        async with DistributedLock("test-release", max_wait_seconds=0.05, use_redis=False) as lock:
            assert lock.acquired is True

    @pytest.mark.asyncio
    async def test_order_lock_serializes_same_order(self):
        """Debe ejecutar en serie las operaciones sobre el mismo pedido."""
        events = []

        async def work(name):
            async with OrderLock(7001, timeout_seconds=1):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(work("a"), work("b"))

        assert events == ["a-start", "a-end", "b-start", "b-end"]
        assert OrderLock(7001).lock_key == "lock:order:7001"

    @pytest.mark.asyncio
    async def test_cleanup_drops_idle_locks(self):
        async with DistributedLock("test-cleanup", use_redis=False):
            cleanup_locks()
            assert "lock:test-cleanup" in distributed_lock._local_locks

        cleanup_locks()
        assert "lock:test-cleanup" not in distributed_lock._local_locks

    @pytest.mark.asyncio
    async def test_released_locks_are_dropped(self):
        """Debe liberar la entrada de cada pedido al soltar su lock."""
        before = len(distributed_lock._local_locks)

        for order_id in range(1000, 1500):
            async with OrderLock(order_id, timeout_seconds=1):
                pass

        assert len(distributed_lock._local_locks) == before
        assert "lock:order:1000" not in distributed_lock._local_lock_users

    @pytest.mark.asyncio
    async def test_timed_out_waiter_does_not_leave_entry(self):
        async with DistributedLock("test-waiter", use_redis=False):
            with pytest.raises(LockAcquisitionError):
                await DistributedLock("test-waiter", max_wait_seconds=0.05, use_redis=False).acquire()
            assert distributed_lock._local_lock_users["lock:test-waiter"] == 1

        assert "lock:test-waiter" not in distributed_lock._local_locks


class FakeRedis:
    """Cliente mínimo con ``set NX PX`` y los scripts de liberación y renovación."""

    def __init__(self):
        self.values = {}
        self.ttls_ms = []

    async def set(self, key, value, nx=False, px=None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        self.ttls_ms.append(px)
        return True

    async def eval(self, script, numkeys, key, token, *args):
        if self.values.get(key) != token:
            return 0
        if script == distributed_lock._RELEASE_SCRIPT:
            del self.values[key]
            return 1
        self.ttls_ms.append(int(args[0]))
        return 1


class TestRedisLocks:
    """Tests para los locks sobre Redis."""

    @pytest.fixture
    def fake_redis(self, monkeypatch):
        client = FakeRedis()
        monkeypatch.setattr(distributed_lock, "get_redis_client", lambda: client)
        return client

    @pytest.mark.asyncio
    async def test_held_lock_is_renewed(self, fake_redis):
        """Debe renovar el TTL mientras el lock sigue tomado."""
        lock = DistributedLock("order:42", timeout_seconds=2, use_redis=True, renewal_interval=0.01)

        async with lock:
            await asyncio.sleep(0.1)
            assert len(fake_redis.ttls_ms) >= 2
            assert set(fake_redis.ttls_ms) == {2000}

        assert "lock:order:42" not in fake_redis.values
        assert lock._renewal_task is None

    @pytest.mark.asyncio
    async def test_busy_key_times_out(self, fake_redis):
        fake_redis.values["lock:order:42"] = "other-token"

        with pytest.raises(LockAcquisitionError):
            await DistributedLock("order:42", use_redis=True, retry_delay=0.01, max_wait_seconds=0.05).acquire()

    @pytest.mark.asyncio
    async def test_renewal_stops_when_key_was_taken_over(self, fake_redis):
        lock = DistributedLock("order:42", timeout_seconds=2, use_redis=True, renewal_interval=0.01)
        await lock.acquire()
        fake_redis.values["lock:order:42"] = "other-token"

        await asyncio.sleep(0.05)

        assert lock._renewal_task.done()
        assert await lock.extend_lock() is False
        await lock.release()
        assert fake_redis.values["lock:order:42"] == "other-token"
