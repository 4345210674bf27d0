from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Final

from codrive import dispatch
from codrive.classify import is_coroutine
from codrive.errors import UnsupportedYieldError, future_error

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    loop: asyncio.AbstractEventLoop | None = None
    strict_none: bool = False


class State(Enum):
    RUNNING = auto()
    AWAITING = auto()
    FULFILLED = auto()
    REJECTED = auto()


def new(config: Config | None = None) -> Runner:
    return Runner(config or Config())


class Runner:
    def __init__(self, config: Config) -> None:
        self.config: Final = config

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self.config.loop is not None:
            return self.config.loop
        return asyncio.get_running_loop()

    def drive(self, coroutine: Any, /, *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        """Drive a coroutine, or the one a factory returns, to completion.

        The first step runs before this returns. A factory that returns
        something other than a coroutine settles the future with that value,
        awaiting it first if it is awaitable.
        """
        return self._drive(coroutine, args, kwargs, eager=True)

    def spawn(self, coroutine: Any) -> asyncio.Future[Any]:
        """Drive a coroutine yielded by another one.

        The first step is scheduled on the loop instead of run in place, so
        nesting depth does not grow the stack.
        """
        return self._drive(coroutine, (), {}, eager=False)

    def _drive(
        self, coroutine: Any, args: tuple[Any, ...], kwargs: dict[str, Any], *, eager: bool
    ) -> asyncio.Future[Any]:
        future: asyncio.Future[Any] = self.loop.create_future()

        if callable(coroutine):
            try:
                coroutine = coroutine(*args, **kwargs)
            except Exception as e:
                future.set_exception(future_error(e))
                return future

        if inspect.isawaitable(coroutine):
            dispatch.chain(asyncio.ensure_future(coroutine, loop=self.loop), future)
        elif is_coroutine(coroutine):
            driver = Driver(self, coroutine, future)
            if eager:
                driver.start()
            else:
                self.loop.call_soon(driver.start)
        else:
            future.set_result(coroutine)
        return future


class Driver:
    def __init__(
        self, runner: Runner, coroutine: Generator[Any, Any, Any], future: asyncio.Future[Any]
    ) -> None:
        self.runner: Final = runner
        self.coroutine: Final = coroutine
        self.future: Final = future
        self.state = State.RUNNING

    def start(self) -> None:
        assert self.state == State.RUNNING, "driver can only be started once"
        self._step(self.coroutine.send, None)

    def _step(self, resume: Callable[[Any], Any], value: Any) -> None:
        if self.future.done():
            logger.debug("result of %r settled from outside, closing", self.coroutine)
            self._finish(State.REJECTED)
            if (close := getattr(self.coroutine, "close", None)) is not None:
                close()
            return

        self.state = State.RUNNING
        try:
            yielded = resume(value)
        except StopIteration as e:
            self._finish(State.FULFILLED)
            self.future.set_result(e.value)
            return
        except asyncio.CancelledError:
            self._finish(State.REJECTED)
            self.future.cancel()
            return
        except Exception as e:
            self._finish(State.REJECTED)
            self.future.set_exception(future_error(e))
            return

        self._suspend(yielded)

    def _suspend(self, yielded: Any) -> None:
        try:
            awaited = dispatch.coerce(yielded, self.runner)
        except Exception as e:
            self._finish(State.REJECTED)
            self.future.set_exception(future_error(e))
            return

        if awaited is None and not self.runner.config.strict_none:
            self.state = State.AWAITING
            self.runner.loop.call_soon(self._step, self.coroutine.send, None)
        elif asyncio.isfuture(awaited):
            self.state = State.AWAITING
            awaited.add_done_callback(self._on_settled)
        else:
            logger.debug("%r yielded unsupported value %r", self.coroutine, yielded)
            self._finish(State.REJECTED)
            self.future.set_exception(UnsupportedYieldError(yielded))

    def _on_settled(self, awaited: asyncio.Future[Any]) -> None:
        assert self.state == State.AWAITING, f"resumed while {self.state.name.lower()}"
        if awaited.cancelled():
            self._step(self.coroutine.throw, asyncio.CancelledError())
            return

        err = awaited.exception()
        if err is not None:
            self._step(self.coroutine.throw, err)
        else:
            self._step(self.coroutine.send, awaited.result())

    def _finish(self, state: State) -> None:
        logger.debug("%r finished: %s", self.coroutine, state.name.lower())
        self.state = state
