"""Async runtime that the application's entry task runs inside.

The runtime is an asyncio event loop with a thread pool installed as its
default executor, so ``asyncio.to_thread`` and ``loop.run_in_executor(None,
...)`` fan blocking work out over the configured number of workers.
"""

import asyncio
import importlib
import logging
import os
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from cap_desktop.errors import EntryPointError, RuntimeBuildError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EntryTask = Callable[[], Awaitable[Any]]

WORKER_THREAD_PREFIX = "cap-desktop-worker"


class Runtime:
    """A single-use event loop plus worker pool."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        executor: ThreadPoolExecutor,
        worker_threads: int,
    ):
        self._loop = loop
        self._executor = executor
        self.worker_threads = worker_threads
        self._used = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def block_on(self, entry: Callable[[], Awaitable[T]]) -> T:
        """Run the entry task to completion on this runtime.

        Blocks the calling thread until the task finishes. Outstanding tasks
        are cancelled and the worker pool is shut down afterwards, whether the
        entry task returned or raised.

        Args:
            entry: Async callable taking no arguments

        Returns:
            Whatever the entry task returned

        Raises:
            RuntimeError: If the runtime has already been used
        """
        if self._used:
            raise RuntimeError("Runtime has already run an entry task")
        self._used = True

        logger.debug(f"Starting runtime with {self.worker_threads} worker threads")
        with asyncio.Runner(loop_factory=lambda: self._loop) as runner:
            return runner.run(entry())


def build_runtime(worker_threads: int | None = None) -> Runtime:
    """Construct the multi-worker runtime.

    Args:
        worker_threads: Worker pool size (default: CPU count)

    Returns:
        A runtime ready for :meth:`Runtime.block_on`

    Raises:
        RuntimeBuildError: If the worker count is invalid or the event loop or
            worker pool cannot be created
    """
    workers = worker_threads if worker_threads is not None else (os.cpu_count() or 1)
    if workers < 1:
        raise RuntimeBuildError(
            "Failed to build multi threaded runtime",
            detail=f"worker_threads must be at least 1, got {workers}",
        )

    try:
        loop = asyncio.new_event_loop()
    except (OSError, RuntimeError) as e:
        raise RuntimeBuildError("Failed to build multi threaded runtime", detail=str(e)) from e

    try:
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=WORKER_THREAD_PREFIX)
    except (OSError, RuntimeError, ValueError) as e:
        loop.close()
        raise RuntimeBuildError("Failed to build multi threaded runtime", detail=str(e)) from e

    loop.set_default_executor(executor)
    return Runtime(loop, executor, workers)


def load_entry(spec: str) -> EntryTask:
    """Import the application's entry task from a ``module:function`` spec.

    Args:
        spec: Entry point, e.g. ``"cap_app.main:run"``

    Returns:
        The async callable

    Raises:
        EntryPointError: If the spec is malformed or does not resolve to a callable
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise EntryPointError(
            f"Invalid entry point: {spec}", detail="Expected 'package.module:function'"
        )

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise EntryPointError(f"Cannot import entry module: {module_name}", detail=str(e)) from e

    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError:
            raise EntryPointError(
                f"Entry point not found: {spec}", detail=f"{module_name} has no attribute {attr_path}"
            ) from None

    if not callable(target):
        raise EntryPointError(f"Entry point is not callable: {spec}")
    return target
