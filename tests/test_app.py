from __future__ import annotations

import time
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from analysis import best_quantity, sweep_quantity
from config import SimConfig

APP = str(Path(__file__).resolve().parent.parent / "app.py")


@pytest.fixture
def app():
    at = AppTest.from_file(APP, default_timeout=30)
    at.run()
    assert not at.exception
    yield at
    at.session_state["worker"].stop()


def _run_with(at: AppTest, n: int) -> None:
    at.number_input(key="N").set_value(n).run()
    at.button(key="run").click().run()
    assert not at.exception


@pytest.mark.parametrize("n", [0, 1_000])
def test_run_click_reaches_done(app: AppTest, n: int) -> None:
    _run_with(app, n)
    assert app.session_state["phase"] == "done"
    snaps = app.session_state["snapshots"]
    assert snaps[-1].is_final
    assert snaps[-1].processed == n
    assert sum(1 for s in snaps if s.is_final) == 1


def test_rerun_after_done_stays_done(app: AppTest) -> None:
    _run_with(app, 500)
    app.run()
    assert app.session_state["phase"] == "done"
    app.button(key="run").click().run()
    assert app.session_state["phase"] == "done"


def test_reset_keeps_only_the_new_ready_snapshot(app: AppTest) -> None:
    _run_with(app, 500)
    app.button(key="reset").click().run()
    assert app.session_state["phase"] == "ready"
    for _ in range(50):
        app.run()
        if app.session_state["snapshots"]:
            break
        time.sleep(0.02)
    assert [s.processed for s in app.session_state["snapshots"]] == [0]


def test_preset_fills_sidebar(app: AppTest) -> None:
    app.selectbox(key="preset").set_value("shrink").run()
    assert app.number_input(key="P").value == 5.25
    assert app.number_input(key="Q").value == 60.0
    assert app.checkbox(key="strict_q_star").value is True
    assert app.session_state["config"].alpha == 0.12


def test_optimize_moves_q_to_best_sweep_q(app: AppTest) -> None:
    q_best, _ = best_quantity(sweep_quantity(SimConfig()))
    app.button(key="optimize").click().run()
    assert app.number_input(key="Q").value == float(q_best)
    assert app.session_state["config"].Q == float(q_best)
