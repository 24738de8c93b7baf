import asyncio
import pytest

from common.workers.base_worker import BaseWorker


class TestableWorker(BaseWorker):
    """Concrete implementation of BaseWorker for testing."""

    def __init__(self, interval_seconds: float = 0, run_once: bool = False):
        super().__init__("test", interval_seconds, "test_worker", run_once=run_once)
        self.executions = 0
        self.errors_to_raise = []
        self.stop_after = None

    async def execute(self):
        self.executions += 1
        if self.errors_to_raise:
            raise self.errors_to_raise.pop(0)
        if self.stop_after and self.executions >= self.stop_after:
            await self.stop()


class TestBaseWorker:
    """Tests for the interval loop in BaseWorker."""

    def test_generates_worker_id(self):
        class Unnamed(BaseWorker):
            async def execute(self):
                pass

        worker = Unnamed("recurring_billing", 60)

        assert worker.worker_id.startswith("recurring_billing_worker_")

    async def test_run_once_executes_single_iteration(self):
        worker = TestableWorker(run_once=True)

        await worker.start()

        assert worker.executions == 1
        assert worker.iterations == 1
        assert worker.running is False

    async def test_loop_survives_iteration_errors(self):
        worker = TestableWorker()
        worker.errors_to_raise = [RuntimeError("database unavailable")]
        worker.stop_after = 3

        await asyncio.wait_for(worker.start(), timeout=2)

        assert worker.executions == 3
        assert worker.running is False

    async def test_run_once_propagates_errors(self):
        worker = TestableWorker(run_once=True)
        worker.errors_to_raise = [RuntimeError("database unavailable")]

        with pytest.raises(RuntimeError):
            await worker.start()

        assert worker.running is False

    async def test_stop_wakes_sleeping_worker(self):
        worker = TestableWorker(interval_seconds=30)

        task = asyncio.create_task(worker.start())
        await asyncio.sleep(0.05)
        await worker.stop()
        await asyncio.wait_for(task, timeout=2)

        assert worker.executions == 1

    async def test_setup_and_cleanup_manage_lock_provider(self, mock_lock_provider):
        worker = TestableWorker(run_once=True)
        worker.lock_provider = mock_lock_provider

        await worker.start()

        mock_lock_provider.connect.assert_awaited_once()
        mock_lock_provider.disconnect.assert_awaited_once()

    async def test_cleanup_runs_after_failure(self, mock_lock_provider):
        worker = TestableWorker(run_once=True)
        worker.lock_provider = mock_lock_provider
        worker.errors_to_raise = [RuntimeError("boom")]

        with pytest.raises(RuntimeError):
            await worker.start()

        mock_lock_provider.disconnect.assert_awaited_once()

    async def test_start_when_running_is_ignored(self):
        worker = TestableWorker(run_once=True)
        worker.running = True

        await worker.start()

        assert worker.executions == 0
