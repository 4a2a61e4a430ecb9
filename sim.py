from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, NamedTuple, Optional
import time

from loguru import logger

from config import SimConfig
from demand import expected_profit, unit_price
from messages import Command, Configure, Done, Pause, Progress, Reset, Run, Snapshot
from rng import XorShift32
from scheduler import TaskQueue


class Phase(Enum):
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    DONE = "done"


class Decision(NamedTuple):
    informed: bool
    bought: bool


@dataclass
class RunState:
    processed: int = 0
    sold: int = 0
    sold_informed: int = 0
    sold_uninformed: int = 0
    revenue: float = 0.0
    cost: float = 0.0

    @property
    def profit(self) -> float:
        return self.revenue - self.cost

    def copy(self) -> "RunState":
        return replace(self)


class SimulationEngine:
    """
    Incremental Monte Carlo run of the shrink-ray demand model.

    One engine owns one configuration, one RNG stream and the running totals.
    Work happens in slices: each slice executes decisions in batches of
    `batch_size`, emits a snapshot whenever `emit_every_ms` has passed, and
    after `yield_every_ms` re-posts its continuation on the task queue instead
    of carrying on. Commands are only ever handled between slices, so a
    decision is never interrupted halfway.

    Every configure/run/reset bumps an epoch; a continuation from an older
    epoch finds itself stale and returns, so pause-then-run never leaves two
    loops going.
    """

    def __init__(
        self,
        emit: Callable[[Snapshot], None],
        tasks: Optional[TaskQueue] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._emit_fn = emit
        self._tasks = tasks if tasks is not None else TaskQueue()
        self._clock = clock

        self._config: Optional[SimConfig] = None
        self._rng: Optional[XorShift32] = None
        self._state = RunState()
        self._phase = Phase.READY
        self._epoch = 0
        self._generation = 0
        self._last_emit = 0.0

    # ---------- read-only views ----------
    @property
    def config(self) -> Optional[SimConfig]:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def state(self) -> RunState:
        return self._state.copy()

    @property
    def tasks(self) -> TaskQueue:
        return self._tasks

    @property
    def generation(self) -> int:
        """Number of configure and reset commands accepted so far."""
        return self._generation

    # ---------- commands ----------
    def handle(self, command: Command) -> None:
        if isinstance(command, Configure):
            self.configure(command.config)
        elif isinstance(command, Run):
            self.run()
        elif isinstance(command, Pause):
            self.pause()
        elif isinstance(command, Reset):
            self.reset()
        else:
            raise TypeError(f"unknown command {command!r}")

    def configure(self, config: SimConfig) -> None:
        # validate before touching anything so a bad config leaves the old run as it was
        config.validate()
        self._generation += 1
        self._config = config
        self._reset_state()
        logger.debug("configured seed={} N={} -> ready", config.seed, config.N)
        self._emit()

    def run(self) -> None:
        if self._config is None:
            logger.debug("run ignored: not configured")
            return
        if self._phase in (Phase.RUNNING, Phase.DONE):
            logger.debug("run ignored in phase {}", self._phase.value)
            return
        logger.debug("{} -> running at processed={}", self._phase.value, self._state.processed)
        self._phase = Phase.RUNNING
        self._epoch += 1
        self._loop(self._epoch)

    def pause(self) -> None:
        if self._phase is not Phase.RUNNING:
            logger.debug("pause ignored in phase {}", self._phase.value)
            return
        self._phase = Phase.PAUSED
        logger.debug("paused at processed={}", self._state.processed)

    def reset(self) -> None:
        # counted even when unconfigured; SimWorker keeps the same count on its side
        self._generation += 1
        if self._config is None:
            logger.debug("reset ignored: not configured")
            return
        self._reset_state()
        logger.debug("reset -> ready")
        self._emit()

    # ---------- simulation ----------
    def decide_one(self) -> Optional[Decision]:
        """
        Simulate one customer. Consumes exactly two draws from the RNG:
        the segment, then the valuation. Returns None once N is reached.
        """
        cfg = self._config
        if cfg is None or self._state.processed >= cfg.N:
            return None

        st = self._state
        informed = self._rng.bernoulli(cfg.alpha)
        if informed:
            v = self._rng.uniform(0.0, cfg.V_I)
            bought = v >= unit_price(cfg.P, cfg.Q)
        else:
            v = self._rng.uniform(0.0, cfg.V_U)
            bought = v >= cfg.P and not (cfg.strict_q_star and cfg.Q <= cfg.Q_star)

        if bought:
            st.sold += 1
            if informed:
                st.sold_informed += 1
            else:
                st.sold_uninformed += 1
            st.revenue += cfg.P
            st.cost += cfg.C * cfg.Q

        st.processed += 1
        return Decision(informed=informed, bought=bought)

    def snapshot(self, final: bool = False) -> Snapshot:
        cfg = self._config
        if cfg is None:
            raise RuntimeError("engine is not configured")
        st = self._state
        analytic = expected_profit(**cfg.model_params())
        cls = Done if final else Progress
        return cls(
            processed=st.processed,
            N=cfg.N,
            sold=st.sold,
            sold_informed=st.sold_informed,
            sold_uninformed=st.sold_uninformed,
            revenue=st.revenue,
            cost=st.cost,
            profit=st.profit,
            analytic_sold=analytic.expected_sold,
            analytic_profit_total=analytic.expected_profit_total,
            margin=analytic.margin,
            shares=analytic.shares,
            generation=self._generation,
        )

    # ---------- internals ----------
    def _reset_state(self) -> None:
        self._epoch += 1  # orphan any queued continuation
        self._rng = XorShift32(self._config.seed)
        self._state = RunState()
        self._phase = Phase.READY
        self._last_emit = self._clock()

    def _emit(self, final: bool = False) -> None:
        self._emit_fn(self.snapshot(final=final))
        self._last_emit = self._clock()

    def _loop(self, epoch: int) -> None:
        if epoch != self._epoch or self._phase is not Phase.RUNNING:
            return

        cfg = self._config
        st = self._state
        start = self._clock()

        while self._phase is Phase.RUNNING and st.processed < cfg.N:
            steps = min(cfg.N - st.processed, cfg.batch_size)
            for _ in range(steps):
                self.decide_one()

            now = self._clock()
            if (now - self._last_emit) * 1000.0 >= cfg.emit_every_ms:
                self._emit()
            if (now - start) * 1000.0 >= cfg.yield_every_ms:
                break

        if st.processed >= cfg.N:
            self._phase = Phase.DONE
            logger.info("run done: N={} sold={} profit={:.2f}", cfg.N, st.sold, st.profit)
            self._emit(final=True)
            return

        # slice used up: hand control back and continue later
        self._tasks.call_soon(self._loop, epoch)


def run_to_done(config: SimConfig, tasks: Optional[TaskQueue] = None) -> List[Snapshot]:
    """
    Drive a fresh engine synchronously from configure to Done.
    Returns every snapshot emitted on the way, the last one being the Done record.
    """
    snapshots: List[Snapshot] = []
    tasks = tasks if tasks is not None else TaskQueue()
    engine = SimulationEngine(emit=snapshots.append, tasks=tasks)
    engine.configure(config)
    engine.run()
    tasks.run_until_idle()
    return snapshots
