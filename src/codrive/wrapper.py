from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

from codrive import driver

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable


def wrap(fn: Callable[..., Any], runner: driver.Runner | None = None) -> Callable[..., asyncio.Future[Any]]:
    """Bind a generator function to a runner.

    Each call drives a fresh coroutine built from that call's arguments. The
    returned function keeps ``fn`` under ``__generator_function__``.
    """
    runner = runner or driver.new()

    @functools.wraps(fn)
    def _(*args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        return runner.drive(fn, *args, **kwargs)

    _.__generator_function__ = fn  # pyright: ignore[reportFunctionMemberAccess]
    return _
