from __future__ import annotations
from typing import Dict, Iterable, List
import numpy as np
import pandas as pd

import config as cfg
from config import SimConfig
from demand import expected_profit, percent_error
from sim import run_to_done

SWEEP_COLUMNS = ["Q", "expected_sold", "expected_profit", "margin_per_box", "D_i", "D_u", "D_total"]


def sweep_quantity(config: SimConfig, q_min: int | None = None, q_max: int | None = None) -> pd.DataFrame:
    """
    Evaluate the analytic model at every integer Q in [q_min, q_max],
    all other parameters taken from config.
    """
    q_min = cfg.SWEEP_Q_MIN if q_min is None else q_min
    q_max = cfg.SWEEP_Q_MAX if q_max is None else q_max
    if q_max < q_min:
        raise ValueError(f"q_max ({q_max}) must be >= q_min ({q_min})")

    params = config.model_params()
    rows: List[Dict] = []
    for q in np.arange(q_min, q_max + 1):
        params["Q"] = float(q)
        a = expected_profit(**params)
        rows.append({
            "Q": int(q),
            "expected_sold": a.expected_sold,
            "expected_profit": a.expected_profit_total,
            "margin_per_box": a.margin,
            "D_i": a.shares.d_i,
            "D_u": a.shares.d_u,
            "D_total": a.shares.total,
        })
    return pd.DataFrame.from_records(rows, columns=SWEEP_COLUMNS)


def best_quantity(sweep: pd.DataFrame) -> tuple[int, float]:
    """(Q, expected_profit) at the profit maximum; the smallest Q wins ties."""
    if sweep.empty:
        raise ValueError("empty sweep")
    i = int(np.argmax(sweep["expected_profit"].to_numpy()))
    row = sweep.iloc[i]
    return int(row["Q"]), float(row["expected_profit"])


def convergence_table(config: SimConfig, ns: Iterable[int] = (1_000, 10_000, 100_000)) -> pd.DataFrame:
    """
    Run the engine to completion once per N (same seed) and compare the
    simulated purchase share with the analytic one.
    """
    records: List[Dict] = []
    for n in ns:
        done = run_to_done(config.with_params(N=int(n)))[-1]
        sim_share = done.sold / n if n > 0 else float("nan")
        records.append({
            "N": int(n),
            "sold": done.sold,
            "sim_share": sim_share,
            "analytic_share": done.shares.total,
            "share_error_pct": percent_error(sim_share, done.shares.total),
            "profit": done.profit,
            "analytic_profit": done.analytic_profit_total,
            "profit_error_pct": done.profit_error_pct,
        })
    return pd.DataFrame.from_records(records)
