from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator, Mapping, Sequence
from typing import Any, overload

from codrive.classify import Shape, classify
from codrive.driver import Config, Runner, new
from codrive.errors import Error, ThunkError, UnsupportedYieldError
from codrive.thunk import thunkify
from codrive.wrapper import wrap

__all__ = [
    "Computation",
    "Config",
    "Error",
    "Runner",
    "Shape",
    "ThunkError",
    "UnsupportedYieldError",
    "Yieldable",
    "classify",
    "new",
    "run",
    "run_sync",
    "thunkify",
    "typesafe",
    "wrap",
]

type Yieldable = (
    None
    | asyncio.Future[Any]
    | Computation[Any]
    | Callable[..., Any]
    | Sequence[Yieldable]
    | Mapping[Any, Yieldable]
)
type Computation[T] = Generator[Yieldable, Any, T]


def run(coroutine: Computation[Any] | Callable[..., Any], /, *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
    """Drive ``coroutine`` on the running event loop and return its result future."""
    return new().drive(coroutine, *args, **kwargs)


def run_sync(coroutine: Computation[Any] | Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
    """Drive ``coroutine`` on a fresh event loop and block until it finishes."""

    async def _() -> Any:
        return await run(coroutine, *args, **kwargs)

    return asyncio.run(_())


@overload
def typesafe[T](y: asyncio.Future[T]) -> Generator[asyncio.Future[T], T, T]: ...
@overload
def typesafe[T](y: Computation[T]) -> Generator[Computation[T], T, T]: ...
def typesafe(y: Yieldable) -> Generator[Yieldable, Any, Any]:
    return (yield y)
