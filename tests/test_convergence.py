from __future__ import annotations

import pytest

from analysis import convergence_table
from config import SimConfig
from sim import run_to_done

# 5 standard deviations of the sample share around total=0.5, per N
_TOLERANCE = {1_000: 0.08, 10_000: 0.025, 100_000: 0.008, 1_000_000: 0.0025}


def _share_error(n: int, seed: int) -> float:
    done = run_to_done(SimConfig(N=n, seed=seed))[-1]
    return abs(done.sold / n - done.shares.total)


@pytest.mark.parametrize("n", [1_000, 10_000, 100_000])
def test_simulated_share_approaches_analytic_share(n: int) -> None:
    for seed in (1, 2, 3):
        assert _share_error(n, seed) < _TOLERANCE[n]


def test_mean_share_error_shrinks_as_n_grows() -> None:
    seeds = range(1, 9)
    means = [sum(_share_error(n, seed) for seed in seeds) / len(seeds) for n in (1_000, 10_000, 100_000)]
    assert means[0] > means[1] > means[2]


@pytest.mark.slow
def test_simulated_share_at_one_million_customers() -> None:
    assert _share_error(1_000_000, 12345) < _TOLERANCE[1_000_000]


def test_convergence_table_columns_and_rows() -> None:
    df = convergence_table(SimConfig(seed=9), ns=(1_000, 10_000))
    assert list(df["N"]) == [1_000, 10_000]
    assert {"sim_share", "analytic_share", "share_error_pct", "profit_error_pct"} <= set(df.columns)
    assert (df["analytic_share"] == df["analytic_share"].iloc[0]).all()
    assert (df["share_error_pct"].abs() < 20).all()
