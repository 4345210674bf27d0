from __future__ import annotations

import functools
import logging
import threading
from typing import TYPE_CHECKING, Any

from codrive.errors import ThunkError, future_error

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable

logger = logging.getLogger(__name__)

type Callback = Callable[..., None]
type Thunk = Callable[[Callback], Any]


def to_future(thunk: Thunk, loop: asyncio.AbstractEventLoop) -> asyncio.Future[Any]:
    """Run ``thunk`` once and expose its callback outcome as a future.

    The callback follows the ``callback(err, *results)`` convention and may be
    invoked from any thread. Only its first invocation counts.
    """
    future: asyncio.Future[Any] = loop.create_future()
    lock = threading.Lock()
    called = False

    def callback(err: Any = None, *results: Any) -> None:
        nonlocal called
        with lock:
            if called:
                logger.debug("ignoring repeated callback from thunk %r", thunk)
                return
            called = True
        if loop.is_closed():
            logger.debug("dropping callback from thunk %r, loop is closed", thunk)
            return
        loop.call_soon_threadsafe(_settle, future, err, results)

    try:
        thunk(callback)
    except Exception as e:
        with lock:
            if called:
                logger.debug("thunk %r raised after calling back: %r", thunk, e)
                return future
            called = True
        future.set_exception(future_error(e))

    return future


def _settle(future: asyncio.Future[Any], err: Any, results: tuple[Any, ...]) -> None:
    if future.done():
        return

    if err:
        if not isinstance(err, BaseException):
            err = ThunkError(err)
        future.set_exception(future_error(err))
        return

    match results:
        case ():
            future.set_result(None)
        case (value,):
            future.set_result(value)
        case _:
            future.set_result(list(results))


def thunkify(fn: Callable[..., Any]) -> Callable[..., Thunk]:
    """Turn a callback-last function ``fn(*args, callback)`` into a thunk factory."""

    @functools.wraps(fn)
    def _(*args: Any, **kwargs: Any) -> Thunk:
        def thunk(callback: Callback) -> Any:
            return fn(*args, callback, **kwargs)

        return thunk

    return _
