"""Tagged results returned across the service boundary."""

import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from .enums import ErrorKind
from .errors import TrackerServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome with its payload."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome with its error kind and a human-readable message."""

    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def returns_result(
    component: str,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Result]]]:
    """Wrap an async service method so it returns ``Ok``/``Err`` instead of raising.

    Typed service errors become ``Err`` with their kind. Storage failures are
    logged with their traceback to the component and error logs.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Result]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Result:
            from ..utils.logging_config import get_logger, log_exception

            try:
                value = await func(*args, **kwargs)
            except TrackerServiceError as e:
                if e.kind == ErrorKind.STORAGE_ERROR:
                    log_exception(component, e, {"operation": func.__name__})
                else:
                    get_logger(component).info(
                        f"{func.__name__} rejected ({e.kind.value}): {e}"
                    )
                return Err(kind=e.kind, message=str(e))
            return Ok(value)

        return wrapper

    return decorator
