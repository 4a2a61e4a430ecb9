"""
CSV export helpers.

Two files come out of a session:
- the analytic Q sweep, one row per Q plus the parameters it was computed with
- the snapshot timeline of a simulation run, one row per emitted snapshot
"""
from __future__ import annotations
from pathlib import Path
from typing import Iterable

import pandas as pd

from config import SimConfig
from messages import Snapshot


def sweep_filename(config: SimConfig) -> str:
    return f"shrink-ray-sweep_P{config.P:.2f}_alpha{config.alpha:.3f}.csv"


def sweep_frame_for_export(sweep: pd.DataFrame, config: SimConfig) -> pd.DataFrame:
    """Append the parameter columns so each row is self-describing."""
    out = sweep.copy()
    out["P"] = config.P
    out["C"] = config.C
    out["alpha"] = config.alpha
    out["V_I"] = config.V_I
    out["V_U"] = config.V_U
    out["Q_star"] = config.Q_star
    out["strictQStar"] = 1 if config.strict_q_star else 0
    out["N"] = config.N
    return out


def sweep_to_csv(sweep: pd.DataFrame, config: SimConfig) -> str:
    return sweep_frame_for_export(sweep, config).to_csv(index=False)


def write_sweep_csv(sweep: pd.DataFrame, config: SimConfig, out_dir: str | Path = ".") -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / sweep_filename(config)
    path.write_text(sweep_to_csv(sweep, config), encoding="utf-8")
    return path


def timeline_frame(snapshots: Iterable[Snapshot]) -> pd.DataFrame:
    return pd.DataFrame.from_records([s.to_record() for s in snapshots])


def write_timeline_csv(snapshots: Iterable[Snapshot], path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    timeline_frame(snapshots).to_csv(path, index=False)
    return path
