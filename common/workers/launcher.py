"""
Common worker launcher utilities to reduce boilerplate code across workers.
"""

import asyncio
import logging
import signal
from typing import Optional, Any, Callable

from common.core.otel_axiom_exporter import _initialize_telemetry, get_logger


class WorkerLauncher:
    """Common worker launcher that handles boilerplate setup, signals, and lifecycle."""

    def __init__(self):
        self.logger = get_logger(__name__)
        self.worker_instance: Optional[Any] = None
        self.exit_code = 0

    def _request_shutdown(self, signum: int) -> None:
        self.logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        if self.worker_instance:
            asyncio.ensure_future(self.worker_instance.stop())

    def _register_signal_handlers(self):
        """Register signal handlers for graceful shutdown on the running loop."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._request_shutdown, signum)
            except NotImplementedError:
                # Platforms without loop signal support fall back to KeyboardInterrupt
                pass

    async def _run_worker_async(self, worker_instance: Any, worker_name: str):
        """Run worker with common lifecycle management."""
        self.worker_instance = worker_instance
        self._register_signal_handlers()

        try:
            self.logger.info(f"Starting {worker_name}...")
            await worker_instance.start()
        except Exception as e:
            self.logger.error(f"Worker failed with error: {e}", exc_info=True)
            self.exit_code = 1
        finally:
            try:
                self.logger.info("Performing worker cleanup...")
                await worker_instance.stop()
                self.logger.info("Worker shutdown complete")
            except Exception as cleanup_error:
                self.logger.error(f"Error during cleanup: {cleanup_error}")

    def run(
        self,
        worker_factory: Callable,
        worker_name: str,
        setup_logging: bool = True,
        factory_args: tuple = (),
        factory_kwargs: dict = None,
    ) -> int:
        """
        Main entry point to run a worker.

        Args:
            worker_factory: Function/class that creates the worker instance
            worker_name: Human readable name for logging
            setup_logging: Whether to setup logging configuration
            factory_args: Args to pass to worker factory
            factory_kwargs: Kwargs to pass to worker factory

        Returns:
            Process exit code (0 on success, 1 if the worker failed)
        """
        if factory_kwargs is None:
            factory_kwargs = {}

        _initialize_telemetry()

        if setup_logging:
            logging.basicConfig(
                level=logging.getLogger().level,
                format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                force=True,
            )

        self.logger.info(f"Configuring {worker_name}...")

        worker_instance = worker_factory(*factory_args, **factory_kwargs)

        try:
            asyncio.run(self._run_worker_async(worker_instance, worker_name))
        except KeyboardInterrupt:
            self.logger.info("Final keyboard interrupt caught, exiting...")
        return self.exit_code

    def run_with_cli(
        self,
        worker_factory: Callable,
        worker_name: str,
        setup_logging: bool = True,
        cli_setup_func: Optional[Callable] = None,
    ) -> int:
        """
        Run worker with CLI argument parsing support.

        Args:
            worker_factory: Function/class that creates the worker instance
            worker_name: Human readable name for logging
            setup_logging: Whether to setup logging configuration
            cli_setup_func: Function that sets up argument parser and returns (args, factory_args, factory_kwargs)
        """
        if cli_setup_func:
            args, factory_args, factory_kwargs = cli_setup_func()

            if getattr(args, "log_level", None):
                logging.getLogger().setLevel(getattr(logging, args.log_level))
        else:
            factory_args, factory_kwargs = (), {}

        return self.run(
            worker_factory=worker_factory,
            worker_name=worker_name,
            setup_logging=setup_logging,
            factory_args=factory_args,
            factory_kwargs=factory_kwargs,
        )
