"""Mutation wrapper.

A Mutation runs one server-changing operation (create, update, delete) and
exposes its pending state so the UI can disable the controls that trigger
it. Outcomes are reported through callbacks; the cache is never written
optimistically, callers invalidate it from `on_success`.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Generic, TypeVar

import structlog

from catalog_manager.exceptions import CatalogError

logger = structlog.get_logger()

R = TypeVar("R")


class MutationStatus(str, Enum):
    """Mutation lifecycle states."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class Mutation(Generic[R]):
    """One-shot asynchronous operation with observable outcome."""

    def __init__(
        self,
        name: str,
        mutation_fn: Callable[..., Awaitable[R]],
        on_success: Callable[..., None] | None = None,
        on_error: Callable[..., None] | None = None,
    ) -> None:
        """Initialize the mutation.

        Args:
            name: Name used in logs (e.g. "create_product").
            mutation_fn: Coroutine function performing the operation.
            on_success: Called as on_success(result, *args).
            on_error: Called as on_error(error, *args).
        """
        self.name = name
        self._mutation_fn = mutation_fn
        self._on_success = on_success
        self._on_error = on_error
        self._pending = 0
        self._listeners: list[Callable[["Mutation[R]"], None]] = []

        self.status = MutationStatus.IDLE
        self.data: R | None = None
        self.error: Exception | None = None

    @property
    def is_pending(self) -> bool:
        """True while at least one call is in flight."""
        return self._pending > 0

    def subscribe(self, listener: Callable[["Mutation[R]"], None]) -> Callable[[], None]:
        """Register a listener called on every status change.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mutate(self, *args: Any) -> asyncio.Task[R | None]:
        """Start the mutation without waiting for it.

        Failures are reported to `on_error` only; unexpected ones are also
        logged with their traceback.

        Returns:
            Task resolving to the result, or None on failure.
        """
        return asyncio.get_running_loop().create_task(
            self._execute(args, raise_errors=False)
        )

    async def mutate_async(self, *args: Any) -> R:
        """Run the mutation and wait for it.

        Raises:
            Exception: Whatever the operation raised, after `on_error` ran.
        """
        result = await self._execute(args, raise_errors=True)
        return result  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the last outcome."""
        self.status = MutationStatus.IDLE
        self.data = None
        self.error = None
        self._notify()

    async def _execute(self, args: tuple[Any, ...], raise_errors: bool) -> R | None:
        self._pending += 1
        self.status = MutationStatus.PENDING
        self._notify()
        logger.debug("Mutation started", mutation=self.name)

        try:
            result = await self._mutation_fn(*args)
        except Exception as e:
            self._pending -= 1
            self.status = MutationStatus.ERROR
            self.error = e
            if isinstance(e, CatalogError):
                logger.warning(
                    "Mutation failed",
                    mutation=self.name,
                    error_type=type(e).__name__,
                    error=e.message,
                )
            else:
                logger.exception("Unexpected mutation error", mutation=self.name)
            self._notify()
            if self._on_error is not None:
                self._on_error(e, *args)
            if raise_errors:
                raise
            return None
        except BaseException:
            self._pending -= 1
            self.status = MutationStatus.IDLE
            self._notify()
            raise

        self._pending -= 1
        self.status = MutationStatus.SUCCESS
        self.data = result
        self.error = None
        logger.debug("Mutation succeeded", mutation=self.name)
        self._notify()
        if self._on_success is not None:
            self._on_success(result, *args)
        return result

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
