from __future__ import annotations

import pandas as pd

from main import _build_parser, config_from_args, main


def test_config_from_args_applies_preset_then_overrides() -> None:
    args = _build_parser().parse_args(["--preset", "bonus", "--Q", "120", "--N", "500", "--seed", "3"])
    config = config_from_args(args)
    assert config.Q == 120.0
    assert config.alpha == 0.55
    assert config.N == 500
    assert config.seed == 3
    assert config.strict_q_star is False


def test_main_runs_and_writes_csvs(tmp_path, capsys) -> None:
    timeline = tmp_path / "timeline.csv"
    rc = main(["--N", "3000", "--seed", "11", "--sweep-csv", str(tmp_path), "--timeline-csv", str(timeline)])
    assert rc == 0

    out = capsys.readouterr().out
    assert "Best Q" in out
    assert (tmp_path / "shrink-ray-sweep_P4.00_alpha0.300.csv").exists()
    df = pd.read_csv(timeline)
    assert df["kind"].iloc[-1] == "done"
    assert int(df["processed"].iloc[-1]) == 3000


def test_main_rejects_invalid_config() -> None:
    assert main(["--alpha", "1.5", "--N", "10"]) == 2
    assert main(["--N", "-1"]) == 2
