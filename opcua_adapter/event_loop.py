"""
Background asyncio loop for blocking callers.

asyncua is coroutine based while the adapter lifecycle is synchronous. The
connector owns one ``LoopThread``; every blocking call submits a coroutine
to it and waits for the result. Subscription callbacks run on this thread.
"""

import asyncio
import threading
from typing import Any, Coroutine, Optional

from .logging import log_debug


class LoopThread:
    """
    Runs an asyncio event loop in a daemon thread.

    Usage:
        loop = LoopThread(name="opcua-client")
        loop.start()
        value = loop.run(coro())
        loop.stop()
    """

    def __init__(self, name: str = "opcua-client"):
        self.name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def in_loop_thread(self) -> bool:
        """True when called from the loop thread itself."""
        return self._thread is not None and threading.current_thread() is self._thread

    def start(self) -> None:
        """Start the loop thread; no-op if already running."""
        if self.is_running:
            return

        self._ready.clear()
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name=self.name
        )
        self._thread.start()
        self._ready.wait()
        log_debug(f"Event loop thread '{self.name}' started")

    def run(self, coro: Coroutine, timeout: Optional[float] = None) -> Any:
        """
        Run a coroutine on the loop and block until it completes.

        Exceptions raised by the coroutine propagate to the caller.
        """
        if not self.is_running:
            coro.close()
            raise RuntimeError(f"Event loop thread '{self.name}' is not running")

        if self.in_loop_thread:
            coro.close()
            raise RuntimeError("LoopThread.run() called from its own loop thread")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result(timeout)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop and join the thread; safe to call repeatedly."""
        if self._loop is None:
            return

        if self.in_loop_thread:
            raise RuntimeError("LoopThread.stop() called from its own loop thread")

        if self.is_running:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=timeout)

        if not self._loop.is_running():
            self._loop.close()
        self._loop = None
        self._thread = None
        log_debug(f"Event loop thread '{self.name}' stopped")

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.call_soon(self._ready.set)
        try:
            self._loop.run_forever()
        finally:
            # Cancel whatever the client left behind
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
