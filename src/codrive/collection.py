from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

logger = logging.getLogger(__name__)

type Coerce = Callable[[Any], Any]


def gather_sequence(
    items: Sequence[Any], coerce: Coerce, loop: asyncio.AbstractEventLoop
) -> asyncio.Future[Any]:
    """Await every element of ``items`` concurrently, keeping positions.

    Resolves to a container of the input's type, where index ``i`` holds the
    resolved value of ``items[i]``.
    """
    values = [coerce(item) for item in items]

    def rebuild(resolved: list[Any]) -> Any:
        match items:
            case list():
                return resolved
            case tuple() if hasattr(items, "_make"):
                return type(items)._make(resolved)  # pyright: ignore[reportAttributeAccessIssue]
            case _:
                return tuple(resolved)

    return _gather(values, rebuild, loop)


def gather_mapping(
    mapping: Mapping[Any, Any], coerce: Coerce, loop: asyncio.AbstractEventLoop
) -> asyncio.Future[dict[Any, Any]]:
    """Await every value of ``mapping`` concurrently, keeping keys.

    Values that do not coerce to a future are copied as they are. The result
    holds every key of the input, in input order.
    """
    pairs = [(key, coerce(value)) for key, value in mapping.items()]

    def rebuild(resolved: list[Any]) -> dict[Any, Any]:
        return {key: value for (key, _), value in zip(pairs, resolved, strict=True)}

    return _gather([value for _, value in pairs], rebuild, loop)


def _gather(
    values: list[Any],
    rebuild: Callable[[list[Any]], Any],
    loop: asyncio.AbstractEventLoop,
) -> asyncio.Future[Any]:
    aggregate: asyncio.Future[Any] = loop.create_future()
    resolved: list[Any] = [None] * len(values)
    pending: set[int] = set()

    for i, value in enumerate(values):
        if asyncio.isfuture(value):
            pending.add(i)
        else:
            resolved[i] = value

    if not pending:
        aggregate.set_result(rebuild(resolved))
        return aggregate

    def on_settled(i: int, f: asyncio.Future[Any]) -> None:
        if f.cancelled():
            if not aggregate.done():
                aggregate.cancel()
            return

        # always retrieve, so discarded sibling failures are not reported as unhandled
        err = f.exception()
        if aggregate.done():
            logger.debug("discarding outcome of element %d of settled aggregate", i)
            return

        if err is not None:
            aggregate.set_exception(err)
            return

        resolved[i] = f.result()
        pending.discard(i)
        if not pending:
            aggregate.set_result(rebuild(resolved))

    for i, value in enumerate(values):
        if i in pending:
            value.add_done_callback(lambda f, i=i: on_settled(i, f))

    return aggregate
