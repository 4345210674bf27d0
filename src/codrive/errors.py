from __future__ import annotations

from typing import Any, Final


class Error(Exception):
    def __init__(self, message: str, original_error: Any = None) -> None:
        self.original_error: Final = original_error
        super().__init__(message)

    def unwrap(self) -> Any:
        return self.original_error


class UnsupportedYieldError(Error, TypeError):
    """Raised into the result future when a coroutine yields a value with no known shape."""

    def __init__(self, value: Any) -> None:
        self.value: Final = value
        super().__init__(
            "You may only yield a function, future, awaitable, generator, list, tuple, "
            f'or dict, but the following object was passed: "{value!r}"'
        )


class ThunkError(Error):
    """A thunk reported an error indicator that is not an exception."""

    def __init__(self, indicator: Any) -> None:
        super().__init__(f"thunk failed with {indicator!r}", indicator)


def future_error(err: BaseException) -> BaseException:
    """Return ``err`` in a form ``asyncio.Future.set_exception`` accepts.

    Futures refuse ``StopIteration``; it is replaced by a ``RuntimeError``
    caused by it, as generators do.
    """
    if isinstance(err, StopIteration):
        wrapped = RuntimeError(f"operation raised StopIteration: {err!r}")
        wrapped.__cause__ = err
        return wrapped
    return err
