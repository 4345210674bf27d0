from __future__ import annotations

import logging
from dataclasses import dataclass
from queue import Empty, Full, Queue, ShutDown
from threading import Thread
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from codrive.thunk import Callback, Thunk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SQE:
    fn: Callable[[], Any]
    callback: Callback


class FIO:
    """Runs blocking functions on worker threads and reports back through thunk callbacks."""

    def __init__(self, size: int) -> None:
        self._sq = Queue[SQE](size)
        self._workers: list[Thread] = []

    def thunk(self, fn: Callable[..., Any], *args: Any) -> Thunk:
        def _(callback: Callback) -> None:
            try:
                self._sq.put_nowait(SQE(lambda: fn(*args), callback))
            except (Full, ShutDown) as e:
                callback(e)

        return _

    def shutdown(self) -> None:
        """Stop the workers. Submissions no worker picked up fail with ``ShutDown``."""
        self._sq.shutdown()
        for t in self._workers:
            t.join()
        logger.debug("stopped %d fio workers", len(self._workers))
        self._workers.clear()

        while True:
            try:
                sqe = self._sq.get_nowait()
            except (Empty, ShutDown):
                break
            sqe.callback(ShutDown("fio shut down before running the submission"))
            self._sq.task_done()

        self._sq.join()

    def _worker(self) -> None:
        while True:
            try:
                sqe = self._sq.get()
            except ShutDown:
                break

            try:
                value = sqe.fn()
            except Exception as e:
                logger.debug("worker function failed: %r", e)
                sqe.callback(e)
            else:
                sqe.callback(None, value)
            finally:
                self._sq.task_done()

    def worker(self) -> None:
        t = Thread(target=self._worker, name=f"fio-worker-{len(self._workers)}", daemon=True)
        t.start()
        self._workers.append(t)
