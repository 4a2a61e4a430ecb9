from __future__ import annotations
from typing import Any, Callable
import queue


class TaskQueue:
    """
    FIFO of callables shared by host commands and engine continuations.

    An engine that has used up its time slice re-posts its own continuation
    here, behind whatever commands arrived meanwhile, so a Pause sent during a
    long run is seen before the next slice starts.
    """

    def __init__(self) -> None:
        self._tasks: "queue.Queue[tuple[Callable[..., Any], tuple]]" = queue.Queue()

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        self._tasks.put((fn, args))

    def run_once(self, timeout: float | None = None) -> bool:
        """
        Run the next task. timeout=None does not wait at all.
        Returns False when nothing was available.
        """
        try:
            if timeout is None:
                fn, args = self._tasks.get_nowait()
            else:
                fn, args = self._tasks.get(timeout=timeout)
        except queue.Empty:
            return False
        fn(*args)
        return True

    def run_until_idle(self, max_tasks: int | None = None) -> int:
        """Run tasks until the queue is empty (or max_tasks ran). Returns how many ran."""
        ran = 0
        while max_tasks is None or ran < max_tasks:
            if not self.run_once():
                break
            ran += 1
        return ran

    def __len__(self) -> int:
        return self._tasks.qsize()
