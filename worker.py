from __future__ import annotations
from typing import List, Optional
import queue
import threading

from loguru import logger

from config import SimConfig
from messages import Command, Configure, Pause, Reset, Run, Snapshot
from scheduler import TaskQueue
from sim import SimulationEngine


class SimWorker:
    """
    Runs one SimulationEngine on its own thread.

    The host only sends commands and reads snapshots; the engine's state is
    touched from the worker thread alone. Commands and engine continuations go
    through the same FIFO, so they are processed one at a time in send order.

    If a task raises, the thread logs it, keeps the exception in `error` and
    exits. Every later `send` raises RuntimeError.
    """

    def __init__(self, poll_interval: float = 0.05, name: str = "sim-worker"):
        self._tasks = TaskQueue()
        self._outbox: "queue.Queue[Snapshot]" = queue.Queue()
        self._engine = SimulationEngine(emit=self._outbox.put, tasks=self._tasks)
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._generation = 0
        self.error: Optional[BaseException] = None

    # ---------- lifecycle ----------
    def start(self) -> "SimWorker":
        self._thread.start()
        logger.info("worker {} started", self._thread.name)
        return self

    def stop(self, timeout: float | None = 2.0) -> None:
        self._stop.set()
        if self._thread.is_alive():
            self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("worker {} still running {}s after stop", self._thread.name, timeout)
            return
        logger.info("worker {} stopped", self._thread.name)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    @property
    def generation(self) -> int:
        """Configure/reset commands sent so far; matches Snapshot.generation of the live run."""
        return self._generation

    def __enter__(self) -> "SimWorker":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()

    # ---------- command channel ----------
    def send(self, command: Command) -> None:
        name = self._thread.name
        if self.error is not None:
            raise RuntimeError(f"worker {name} failed: {self.error!r}") from self.error
        if not self._thread.is_alive():
            raise RuntimeError(f"worker {name} is not running")
        if isinstance(command, Configure):
            # report bad configs to the caller now rather than on the worker thread
            command.config.validate()
        if isinstance(command, (Configure, Reset)):
            self._generation += 1
        self._tasks.call_soon(self._engine.handle, command)

    def configure(self, config: SimConfig) -> None:
        self.send(Configure(config))

    def run(self) -> None:
        self.send(Run())

    def pause(self) -> None:
        self.send(Pause())

    def reset(self) -> None:
        self.send(Reset())

    # ---------- snapshot channel ----------
    def poll(self) -> List[Snapshot]:
        """All snapshots emitted since the last poll, oldest first."""
        out: List[Snapshot] = []
        while True:
            try:
                out.append(self._outbox.get_nowait())
            except queue.Empty:
                return out

    def poll_current(self) -> List[Snapshot]:
        """Like poll, minus records from runs replaced by a later configure or reset."""
        return [s for s in self.poll() if s.generation == self._generation]

    def next_snapshot(self, timeout: float | None = None) -> Optional[Snapshot]:
        try:
            return self._outbox.get(timeout=timeout)
        except queue.Empty:
            return None

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                self._tasks.run_once(timeout=self._poll_interval)
            except Exception as exc:
                logger.exception("worker task failed, stopping")
                self.error = exc
                return
