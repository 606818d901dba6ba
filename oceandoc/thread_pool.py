"""A shared pool of worker threads sized from the server configuration."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, ClassVar, Optional

from oceandoc.config import ConfigManager

__all__ = ["ThreadPool"]

_log = logging.getLogger(__name__)


class ThreadPool:
    """Runs posted callables on a fixed number of worker threads."""

    _shared: ClassVar[Optional["ThreadPool"]] = None
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self._executor: Optional[ThreadPoolExecutor] = None
        self._terminated = False
        self._lock = threading.Lock()

    @classmethod
    def instance(cls) -> "ThreadPool":
        """The process-wide pool, created on first use."""
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls()
            return cls._shared

    def init(self, config: Optional[ConfigManager] = None) -> None:
        """Start ``config.event_threads`` workers (default: the shared config).

        A pool started before is stopped first. Raises ``ValueError`` when
        the configured thread count is not positive.
        """
        if config is None:
            config = ConfigManager.instance()
        threads = config.event_threads
        if threads < 1:
            raise ValueError(f"thread pool size must be positive: {threads}")
        _log.info("thread pool size: %d", threads)
        with self._lock:
            old = self._executor
            self._executor = ThreadPoolExecutor(
                max_workers=threads, thread_name_prefix="oceandoc-pool"
            )
            self._terminated = False
        if old is not None:
            old.shutdown(wait=True, cancel_futures=True)

    @property
    def terminated(self) -> bool:
        return self._terminated

    def post(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue ``fn(*args, **kwargs)``; returns a future for its result.

        Raises ``RuntimeError`` if the pool is not running.
        """
        with self._lock:
            if self._executor is None or self._terminated:
                raise RuntimeError("thread pool is not running")
            return self._executor.submit(fn, *args, **kwargs)

    def stop(self) -> None:
        """Drop queued tasks and wait for running ones to finish."""
        with self._lock:
            executor = self._executor
            if executor is None:
                return
            self._terminated = True
        executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()