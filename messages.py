"""
Messages crossing the host <-> engine boundary.

Commands flow into the engine, snapshots flow out. Both are closed sets of
frozen dataclasses, so nothing mutable is shared between the two sides.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Dict, Union
import math

from config import SimConfig
from demand import Shares, percent_error


# =========================
# Commands (host -> engine)
# =========================

@dataclass(frozen=True)
class Configure:
    config: SimConfig


@dataclass(frozen=True)
class Run:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Command = Union[Configure, Run, Pause, Reset]


# =========================
# Snapshots (engine -> host)
# =========================

@dataclass(frozen=True)
class Snapshot:
    processed: int
    N: int
    sold: int
    sold_informed: int
    sold_uninformed: int
    revenue: float
    cost: float
    profit: float
    analytic_sold: float
    analytic_profit_total: float
    margin: float
    shares: Shares
    # bumped by every configure/reset; older values belong to a discarded run
    generation: int = 0

    kind: ClassVar[str] = "snapshot"

    @property
    def is_final(self) -> bool:
        return False

    @property
    def fraction_done(self) -> float:
        return self.processed / self.N if self.N > 0 else 1.0

    @property
    def sim_share(self) -> float:
        """Simulated share of processed customers who bought."""
        return self.sold / self.processed if self.processed > 0 else math.nan

    @property
    def profit_error_pct(self) -> float:
        return percent_error(self.profit, self.analytic_profit_total)

    @property
    def sold_error_pct(self) -> float:
        return percent_error(self.sold, self.analytic_sold)

    def to_record(self) -> Dict[str, object]:
        """Flat row for a pandas timeline."""
        return {
            "kind": self.kind,
            "generation": self.generation,
            "processed": self.processed,
            "N": self.N,
            "sold": self.sold,
            "sold_informed": self.sold_informed,
            "sold_uninformed": self.sold_uninformed,
            "revenue": self.revenue,
            "cost": self.cost,
            "profit": self.profit,
            "analytic_sold": self.analytic_sold,
            "analytic_profit_total": self.analytic_profit_total,
            "margin": self.margin,
            "D_i": self.shares.d_i,
            "D_u": self.shares.d_u,
            "D_total": self.shares.total,
        }


@dataclass(frozen=True)
class Progress(Snapshot):
    kind: ClassVar[str] = "progress"


@dataclass(frozen=True)
class Done(Snapshot):
    kind: ClassVar[str] = "done"

    @property
    def is_final(self) -> bool:
        return True
