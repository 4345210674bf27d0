from __future__ import annotations

import inspect
from collections.abc import Mapping
from enum import Enum, auto
from typing import Any


class Shape(Enum):
    NULLISH = auto()
    FUTURE = auto()
    AWAITABLE = auto()
    COROUTINE = auto()
    FACTORY = auto()
    THUNK = auto()
    SEQUENCE = auto()
    MAPPING = auto()
    OPAQUE = auto()


def is_future(value: Any) -> bool:
    return callable(getattr(value, "add_done_callback", None))


def is_coroutine(value: Any) -> bool:
    if inspect.isgenerator(value):
        return True
    return callable(getattr(value, "send", None)) and callable(getattr(value, "throw", None))


def is_coroutine_factory(value: Any) -> bool:
    if getattr(value, "__generator_function__", None) is not None:
        return True
    return inspect.isgeneratorfunction(value) or inspect.iscoroutinefunction(value)


def classify(value: Any) -> Shape:  # noqa: PLR0911
    """Return the shape of a yielded value.

    Checks run in a fixed order and the first match wins, since shapes overlap
    structurally: a native coroutine object has ``send`` and ``throw`` as well
    as ``__await__``, and every generator function is also a plain callable.
    """
    if value is None:
        return Shape.NULLISH
    if is_future(value):
        return Shape.FUTURE
    if inspect.isawaitable(value):
        return Shape.AWAITABLE
    if is_coroutine(value):
        return Shape.COROUTINE
    if is_coroutine_factory(value):
        return Shape.FACTORY
    if callable(value) and not isinstance(value, type):
        return Shape.THUNK
    if isinstance(value, list | tuple):
        return Shape.SEQUENCE
    if isinstance(value, Mapping):
        return Shape.MAPPING
    return Shape.OPAQUE
