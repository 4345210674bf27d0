from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from codrive.thunk import Thunk


class IO(Protocol):
    def thunk(self, fn: Callable[..., Any], *args: Any) -> Thunk: ...
    def shutdown(self) -> None: ...
