"""Shape handle outcomes into two-case results.

Every boundary operation returns either `Ok(value)` or `Err(kind, message)`.
The message always starts with a fixed prefix naming the failed operation,
for example "Failed to drop table: ...". Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from icebridge.core.errors import ExecutionPanic, IcebridgeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """
    Failed outcome.

    Attributes:
        kind: Error class name (e.g. CatalogError, TableLoadError).
        message: Operation prefix followed by the underlying error message.
    """

    kind: str
    message: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise IcebridgeError(self.message)


Result = Union[Ok[T], Err]


def failure_message(operation: str, exc: BaseException) -> str:
    """Return `Failed to <operation>: <error>`."""
    detail = str(exc) or type(exc).__name__
    return f"Failed to {operation}: {detail}"


def to_err(operation: str, exc: Exception) -> Err:
    if isinstance(exc, IcebridgeError):
        return Err(kind=exc.kind, message=failure_message(operation, exc))
    return Err(kind=ExecutionPanic.__name__, message=failure_message(operation, exc))


def capture(operation: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """Call `fn` and wrap its outcome; no exception escapes."""
    try:
        return Ok(fn(*args, **kwargs))
    except IcebridgeError as exc:
        logger.debug("%s failed: %s", operation, exc)
        return to_err(operation, exc)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected failure while trying to %s", operation)
        return to_err(operation, exc)
