"""Run asynchronous catalog operations from synchronous callers.

Each ExecutionBridge owns a private asyncio event loop on a dedicated daemon
thread, plus a small worker pool used as the loop's default executor for
blocking client calls. Callers block until the operation completes.

Failures are normalized here: icebridge errors pass through unchanged, any
other exception raised while building a client or running an operation is
converted to ExecutionPanic so it never escapes as an arbitrary exception.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
import weakref
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, TypeVar

from icebridge.core.errors import ExecutionPanic, ExecutionTimeout, IcebridgeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_WORKERS = 4


def _shutdown(
    loop: asyncio.AbstractEventLoop,
    thread: threading.Thread,
    pool: ThreadPoolExecutor,
) -> None:
    """Stop the loop thread and release the worker pool."""
    if not loop.is_closed():
        loop.call_soon_threadsafe(loop.stop)
        if thread is not threading.current_thread():
            thread.join(timeout=5)
        if not thread.is_alive():
            loop.close()
    pool.shutdown(wait=False, cancel_futures=True)


class ExecutionBridge:
    """
    Private executor for one catalog connection.

    The bridge is safe to share between threads and between every handle
    derived from the same connection. It is closed explicitly with `close()`
    or implicitly once the last handle referencing it is garbage-collected.

    A timeout cancels the pending operation on the loop, but a blocking
    client call already running in a worker thread keeps its worker until it
    returns. Once `workers` such calls hang, later operations queue behind
    them and time out as well.

    Args:
        timeout: Default per-operation timeout in seconds (None waits forever).
        workers: Size of the worker pool for blocking client calls.
        name: Prefix for thread names, useful in diagnostics.
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        workers: int = DEFAULT_WORKERS,
        name: str = "icebridge",
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.timeout = timeout
        self._loop = asyncio.new_event_loop()
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"{name}-worker")
        self._loop.set_default_executor(self._pool)
        self._thread = threading.Thread(
            target=self._serve, args=(self._loop,), name=f"{name}-loop", daemon=True
        )
        self._thread.start()
        self._finalizer = weakref.finalize(self, _shutdown, self._loop, self._thread, self._pool)

    @staticmethod
    def _serve(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        """Stop the private loop. Further `run` calls raise ExecutionPanic."""
        self._finalizer()

    def run(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        timeout: float | None = None,
    ) -> T:
        """
        Run `fn(*args)` on the private loop and block until it completes.

        Args:
            fn: Async callable producing the operation. It is invoked on the
                loop thread, so failures while building the awaitable are
                handled like failures while awaiting it.
            args: Positional arguments for `fn`.
            timeout: Overrides the bridge default timeout for this call.

        Returns:
            The operation's result.

        Raises:
            IcebridgeError: Re-raised unchanged from the operation.
            ExecutionTimeout: The operation exceeded the timeout and was cancelled.
            ExecutionPanic: Any other failure inside the operation.
        """
        if self.closed:
            raise ExecutionPanic("Execution bridge is closed.")
        if threading.current_thread() is self._thread:
            raise ExecutionPanic("Cannot block on the execution bridge from its own loop.")

        limit = self.timeout if timeout is None else timeout
        op_name = getattr(fn, "__qualname__", repr(fn))

        async def _invoke() -> T:
            try:
                return await fn(*args)
            except (Exception, asyncio.CancelledError):
                raise
            except BaseException as exc:
                # SystemExit/KeyboardInterrupt would otherwise stop the loop thread
                logger.warning("Unexpected %s in %s", type(exc).__name__, op_name)
                raise ExecutionPanic(f"Unexpected {type(exc).__name__}: {exc}") from exc

        try:
            future = asyncio.run_coroutine_threadsafe(_invoke(), self._loop)
        except RuntimeError as exc:
            raise ExecutionPanic(f"Execution bridge is unavailable: {exc}") from exc

        logger.debug("Bridging %s (timeout=%s)", op_name, limit)
        try:
            return future.result(timeout=limit)
        except concurrent.futures.TimeoutError as exc:
            if future.done():
                # the operation itself raised TimeoutError
                raise ExecutionPanic(f"Unexpected {type(exc).__name__}: {exc}") from exc
            future.cancel()
            logger.warning("%s timed out after %ss", op_name, limit)
            raise ExecutionTimeout(f"Operation timed out after {limit}s.") from exc
        except concurrent.futures.CancelledError as exc:
            raise ExecutionPanic("Operation was cancelled.") from exc
        except IcebridgeError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.warning("Unexpected failure in %s: %r", op_name, exc)
            raise ExecutionPanic(f"Unexpected {type(exc).__name__}: {exc}") from exc
