from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Dict, List
import math

# ---------------- CONFIG ----------------
SEED = 12345
N = 100_000             # customers per run

# Model config
P = 4.0                 # box price
Q = 100.0               # grams per box
C = 0.02                # marginal cost per gram
ALPHA = 0.3             # share of informed buyers
V_I = 0.08              # informed max valuation per gram
V_U = 8.0               # uninformed max valuation per box

# ----- NOTICEABLE SHRINK -----
STRICT_Q_STAR = False   # uninformed only buy while Q > Q_STAR
Q_STAR = 60.0

# ----- SCHEDULING -----
BATCH_SIZE = 2500       # decisions between clock checks
EMIT_EVERY_MS = 80      # progress snapshot interval
YIELD_EVERY_MS = 12     # max slice length before handing control back

# ----- SWEEP -----
SWEEP_Q_MIN = 1
SWEEP_Q_MAX = 160

# ----- LOGGING -----
LOG_LEVEL = "INFO"


class InvalidConfigError(ValueError):
    """Raised when a configuration cannot be simulated."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("invalid configuration: " + "; ".join(self.problems))


@dataclass(frozen=True)
class SimConfig:
    P: float = P
    Q: float = Q
    C: float = C
    alpha: float = ALPHA
    V_I: float = V_I
    V_U: float = V_U
    strict_q_star: bool = STRICT_Q_STAR
    Q_star: float = Q_STAR
    N: int = N
    seed: int = SEED
    batch_size: int = BATCH_SIZE
    emit_every_ms: float = EMIT_EVERY_MS
    yield_every_ms: float = YIELD_EVERY_MS

    def validate(self) -> "SimConfig":
        """
        Check every field and raise InvalidConfigError listing all problems.
        Returns self so it can be chained.
        """
        problems: List[str] = []

        for name in ("P", "Q", "C", "alpha", "V_I", "V_U", "Q_star", "emit_every_ms", "yield_every_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                problems.append(f"{name} must be a number, got {value!r}")
            elif not math.isfinite(value):
                problems.append(f"{name} must be finite, got {value!r}")
        # stop here, the range checks below assume real numbers
        if problems:
            raise InvalidConfigError(problems)

        if self.P <= 0:
            problems.append(f"P must be > 0, got {self.P}")
        for name in ("Q", "C", "V_I", "V_U", "emit_every_ms", "yield_every_ms"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must be >= 0, got {getattr(self, name)}")
        if not 0.0 <= self.alpha <= 1.0:
            problems.append(f"alpha must be within [0, 1], got {self.alpha}")

        if not isinstance(self.strict_q_star, bool):
            problems.append(f"strict_q_star must be a bool, got {self.strict_q_star!r}")

        for name in ("N", "seed", "batch_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                problems.append(f"{name} must be an integer, got {value!r}")
        if isinstance(self.N, int) and self.N < 0:
            problems.append(f"N must be >= 0, got {self.N}")
        if isinstance(self.batch_size, int) and self.batch_size < 1:
            problems.append(f"batch_size must be >= 1, got {self.batch_size}")

        if problems:
            raise InvalidConfigError(problems)
        return self

    def with_params(self, **changes) -> "SimConfig":
        """Copy with some fields replaced; unknown names raise TypeError."""
        return replace(self, **changes)

    def model_params(self) -> Dict[str, float]:
        """The subset of fields the analytic model takes."""
        return {
            "P": self.P,
            "Q": self.Q,
            "C": self.C,
            "N": self.N,
            "alpha": self.alpha,
            "V_I": self.V_I,
            "V_U": self.V_U,
            "strict_q_star": self.strict_q_star,
            "Q_star": self.Q_star,
        }

    def as_dict(self) -> Dict[str, object]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
