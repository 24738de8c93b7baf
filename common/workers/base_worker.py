import asyncio
from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


class BaseWorker(ABC):
    """Base worker class for periodic jobs driven by an interval loop."""

    def __init__(
        self,
        worker_name: str,
        interval_seconds: float,
        worker_id: Optional[str] = None,
        run_once: bool = False,
    ):
        self.worker_name = worker_name
        self.interval_seconds = interval_seconds
        self.worker_id = worker_id or f"{worker_name}_worker_{uuid4()}"
        self.run_once = run_once
        self.running = False
        self.iterations = 0
        self._wake = asyncio.Event()

    async def setup(self):
        """Initialize worker dependencies."""
        try:
            # Setup lock provider if this worker has one
            if hasattr(self, "lock_provider"):
                await self.lock_provider.connect()

            logger.info(f"Worker {self.worker_id} setup completed")

        except Exception as e:
            logger.error(f"Error setting up worker {self.worker_id}: {e}")
            raise

    async def cleanup(self):
        """Cleanup worker resources."""
        try:
            if hasattr(self, "lock_provider"):
                await self.lock_provider.disconnect()

            logger.info(f"Worker {self.worker_id} cleanup completed")
        except Exception as e:
            logger.error(f"Error cleaning up worker {self.worker_id}: {e}")

    async def start(self):
        """Run ``execute`` every ``interval_seconds`` until stopped."""
        if self.running:
            logger.warning(f"Worker {self.worker_id} is already running")
            return

        self.running = True
        self._wake.clear()
        logger.info(
            f"Starting worker {self.worker_id} every {self.interval_seconds}s"
        )

        try:
            await self.setup()
            while self.running:
                await self._run_iteration()
                if self.run_once:
                    break
                await self._wait_for_next_tick()
        finally:
            self.running = False
            await self.cleanup()

    async def stop(self):
        """Stop the worker after the current iteration."""
        self.running = False
        self._wake.set()
        logger.info(f"Stopping worker {self.worker_id}")

    async def _run_iteration(self):
        self.iterations += 1
        try:
            await self.execute()
        except Exception as e:
            # The next tick retries; a failed pass never kills the loop
            logger.error(
                f"Error in worker {self.worker_id} iteration {self.iterations}: {e}",
                exc_info=True,
            )
            if self.run_once:
                raise

    async def _wait_for_next_tick(self):
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            pass

    @abstractmethod
    async def execute(self):
        """Perform one iteration of work. Must be implemented by subclasses."""
        pass
