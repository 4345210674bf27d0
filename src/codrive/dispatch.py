from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING, Any

from codrive import collection, thunk
from codrive.classify import Shape, classify
from codrive.errors import future_error

if TYPE_CHECKING:
    from codrive.driver import Runner

logger = logging.getLogger(__name__)


def coerce(value: Any, runner: Runner) -> Any:
    """Normalize a yielded value into a future of the runner's loop.

    ``None`` and values with no recognized shape come back unchanged; the
    caller decides what they mean at its position.
    """
    loop = runner.loop
    match classify(value):
        case Shape.NULLISH | Shape.OPAQUE:
            return value
        case Shape.FUTURE:
            if asyncio.isfuture(value) and value.get_loop() is loop:
                return value
            return bridge(value, loop)
        case Shape.AWAITABLE:
            return asyncio.ensure_future(value, loop=loop)
        case Shape.COROUTINE | Shape.FACTORY:
            return runner.spawn(value)
        case Shape.THUNK:
            return thunk.to_future(value, loop)
        case Shape.SEQUENCE:
            return collection.gather_sequence(value, functools.partial(coerce, runner=runner), loop)
        case Shape.MAPPING:
            return collection.gather_mapping(value, functools.partial(coerce, runner=runner), loop)


def bridge(source: Any, loop: asyncio.AbstractEventLoop) -> asyncio.Future[Any]:
    """Mirror a foreign future (e.g. ``concurrent.futures.Future``) onto ``loop``."""
    target: asyncio.Future[Any] = loop.create_future()
    chain(source, target)
    return target


def chain(source: Any, target: asyncio.Future[Any]) -> None:
    """Settle ``target`` with the outcome of ``source``, which may settle on any thread."""
    loop = target.get_loop()

    def copy(source: Any) -> None:
        if target.done():
            return
        if source.cancelled():
            target.cancel()
            return
        err = source.exception()
        if err is not None:
            target.set_exception(future_error(err))
        else:
            target.set_result(source.result())

    def on_done(source: Any) -> None:
        if loop.is_closed():
            logger.debug("dropping outcome of %r, loop is closed", source)
            return
        loop.call_soon_threadsafe(copy, source)

    source.add_done_callback(on_done)
