from __future__ import annotations

import io

import pandas as pd
import pytest

from analysis import SWEEP_COLUMNS, best_quantity, sweep_quantity
from config import SimConfig
from demand import expected_profit
from export import sweep_filename, sweep_to_csv, timeline_frame, write_sweep_csv, write_timeline_csv
from plots import plot_demand_shares, plot_profit_curve, plot_timeline
from sim import run_to_done


def test_sweep_covers_integer_range_and_matches_model() -> None:
    config = SimConfig()
    sweep = sweep_quantity(config, 1, 160)
    assert list(sweep.columns) == SWEEP_COLUMNS
    assert list(sweep["Q"]) == list(range(1, 161))

    row = sweep.loc[sweep["Q"] == 100].iloc[0]
    a = expected_profit(**config.with_params(Q=100.0).model_params())
    assert row["expected_profit"] == a.expected_profit_total
    assert row["D_total"] == a.shares.total
    assert row["margin_per_box"] == a.margin


def test_sweep_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        sweep_quantity(SimConfig(), 10, 5)


def test_best_quantity_is_profit_argmax() -> None:
    sweep = sweep_quantity(SimConfig())
    q, profit = best_quantity(sweep)
    assert profit == sweep["expected_profit"].max()
    assert q == int(sweep.loc[sweep["expected_profit"].idxmax(), "Q"])


def test_best_quantity_prefers_smallest_q_on_ties() -> None:
    sweep = pd.DataFrame({"Q": [1, 2, 3], "expected_profit": [5.0, 7.0, 7.0]})
    assert best_quantity(sweep) == (2, 7.0)
    with pytest.raises(ValueError):
        best_quantity(sweep.iloc[0:0])


def test_sweep_export_has_parameter_columns() -> None:
    config = SimConfig(strict_q_star=True)
    sweep = sweep_quantity(config, 50, 60)
    df = pd.read_csv(io.StringIO(sweep_to_csv(sweep, config)))
    assert list(df.columns) == SWEEP_COLUMNS + ["P", "C", "alpha", "V_I", "V_U", "Q_star", "strictQStar", "N"]
    assert len(df) == 11
    assert (df["strictQStar"] == 1).all()
    assert (df["N"] == config.N).all()


def test_sweep_filename() -> None:
    assert sweep_filename(SimConfig(P=4.0, alpha=0.3)) == "shrink-ray-sweep_P4.00_alpha0.300.csv"


def test_write_sweep_csv(tmp_path) -> None:
    config = SimConfig()
    path = write_sweep_csv(sweep_quantity(config, 1, 10), config, tmp_path / "out")
    assert path.name == sweep_filename(config)
    assert len(pd.read_csv(path)) == 10


def test_timeline_export(tmp_path, base_config: SimConfig) -> None:
    snaps = run_to_done(base_config.with_params(emit_every_ms=0))
    df = timeline_frame(snaps)
    assert len(df) == len(snaps)
    assert df["kind"].iloc[-1] == "done"
    assert (df["kind"].iloc[:-1] == "progress").all()

    path = write_timeline_csv(snaps, tmp_path / "timeline.csv")
    back = pd.read_csv(path)
    assert int(back["processed"].iloc[-1]) == base_config.N


def test_plots_build_figures(base_config: SimConfig) -> None:
    sweep = sweep_quantity(base_config, 1, 40)
    assert plot_profit_curve(sweep, 20.0, sim_profit=10.0).axes
    assert plot_demand_shares(sweep, 20.0, total_at_q=0.4).axes
    snaps = run_to_done(base_config)
    assert plot_timeline(timeline_frame(snaps)).axes
    assert plot_timeline(pd.DataFrame()).axes
