import streamlit as st
import pandas as pd
import atexit
import math
import time

# Local modules
import config as cfg
from analysis import best_quantity, sweep_quantity
from config import InvalidConfigError, SimConfig
from demand import expected_shares, informed_boundary, is_shrink_ray, margin_per_box, unit_price
from export import sweep_filename, sweep_to_csv, timeline_frame
from plots import plot_demand_shares, plot_profit_curve, plot_timeline
from presets import PRESETS, preset_names
from worker import SimWorker

st.set_page_config(page_title="Shrink-ray Pricing", layout="wide")

st.title("Shrink-ray Pricing: analytic vs simulated")

# sidebar widget keys and their starting values
PARAM_DEFAULTS = {
    "P": cfg.P, "Q": cfg.Q, "C": cfg.C, "alpha": cfg.ALPHA, "V_I": cfg.V_I, "V_U": cfg.V_U,
    "strict_q_star": cfg.STRICT_Q_STAR, "Q_star": cfg.Q_STAR, "N": cfg.N, "seed": cfg.SEED,
}


# =========================
# Session state: one worker per browser session
# =========================
def _start_worker():
    worker = SimWorker().start()
    atexit.register(worker.stop)
    st.session_state.worker = worker
    st.session_state.config = None
    st.session_state.snapshots = []
    st.session_state.phase = "ready"


def _retire_worker(worker: SimWorker):
    atexit.unregister(worker.stop)
    worker.stop()


for key, value in PARAM_DEFAULTS.items():
    if key not in st.session_state:
        st.session_state[key] = value

if "worker" not in st.session_state:
    _start_worker()
elif not st.session_state.worker.alive:
    dead = st.session_state.worker
    st.error(f"Simulation worker stopped ({dead.error!r}); started a new one.")
    _retire_worker(dead)
    _start_worker()

worker: SimWorker = st.session_state.worker


def _apply_preset():
    name = st.session_state.preset
    if name not in PRESETS:
        return
    for key, value in PRESETS[name].items():
        st.session_state[key] = value if key == "strict_q_star" else float(value)


def _set_q(q: float):
    st.session_state.Q = q
    st.session_state.preset = "custom"


with st.sidebar:
    st.header("Configuration")
    st.selectbox("Preset", ["custom"] + preset_names(), key="preset", on_change=_apply_preset)

    st.subheader("Product")
    st.number_input("Price P ($)", min_value=0.01, max_value=50.0, step=0.05, key="P")
    st.number_input("Fill Q (grams)", min_value=0.0, max_value=500.0, step=1.0, key="Q")
    st.number_input("Cost per gram C ($)", min_value=0.0, max_value=1.0, step=0.001, format="%.4f", key="C")

    st.markdown("---")
    st.subheader("Buyers")
    st.slider("Informed share alpha", min_value=0.0, max_value=1.0, step=0.005, key="alpha")
    st.number_input("Informed max value per gram V_I", min_value=0.0, max_value=1.0, step=0.001, format="%.4f", key="V_I")
    st.number_input("Uninformed max value per box V_U", min_value=0.0, max_value=50.0, step=0.1, key="V_U")
    st.checkbox("Uninformed notice shrink at Q*", key="strict_q_star")
    st.number_input("Q* (grams)", min_value=0.0, max_value=500.0, step=1.0, key="Q_star")

    st.markdown("---")
    st.subheader("Simulation")
    st.number_input("Customers N", min_value=0, max_value=10_000_000, step=10_000, key="N")
    st.number_input("Seed", min_value=0, max_value=2**32 - 1, step=1, key="seed")

    st.markdown("---")
    b1, b2, b3 = st.columns(3)
    run_btn = b1.button("Run", key="run")
    pause_btn = b2.button("Pause", key="pause")
    reset_btn = b3.button("Reset", key="reset")

ss = st.session_state
config = SimConfig(
    P=float(ss.P), Q=float(ss.Q), C=float(ss.C), alpha=float(ss.alpha), V_I=float(ss.V_I), V_U=float(ss.V_U),
    strict_q_star=bool(ss.strict_q_star), Q_star=float(ss.Q_star), N=int(ss.N), seed=int(ss.seed),
)


def _drain():
    """Pull this run's snapshots from the worker; a final one ends the run."""
    fresh = worker.poll_current()
    st.session_state.snapshots.extend(fresh)
    if any(s.is_final for s in fresh):
        st.session_state.phase = "done"
    return fresh


# =========================
# Commands
# =========================
if config != st.session_state.config:
    try:
        worker.configure(config)
    except InvalidConfigError as e:
        st.error(str(e))
        st.stop()
    st.session_state.config = config
    st.session_state.snapshots = []
    st.session_state.phase = "ready"

# a run may have finished since the last rerun
_drain()

if run_btn and st.session_state.phase in ("ready", "paused"):
    worker.run()
    st.session_state.phase = "running"
if pause_btn and st.session_state.phase == "running":
    worker.pause()
    st.session_state.phase = "paused"
if reset_btn:
    worker.reset()
    st.session_state.snapshots = []
    st.session_state.phase = "ready"

# =========================
# Analytic panel
# =========================
sweep = sweep_quantity(config)
q_best, profit_best = best_quantity(sweep)
shares = expected_shares(config.P, config.Q, config.alpha, config.V_I, config.V_U, config.strict_q_star, config.Q_star)

c1, c2, c3, c4 = st.columns(4)
c1.metric("Unit price", f"${unit_price(config.P, config.Q):.4f}/g")
c2.metric("Margin per box", f"${margin_per_box(config.P, config.Q, config.C):.2f}")
c3.metric("Regime", "Shrink-ray" if is_shrink_ray(config.P, config.Q, config.V_I) else "Normal")
c4.metric("Best Q (analytic)", f"{q_best} g", f"${profit_best:,.0f}")
c4.button("Optimize Q", key="optimize", on_click=_set_q, args=(float(q_best),),
          disabled=st.session_state.phase == "running")
st.caption(f"Informed demand vanishes at Q <= P/V_I = {informed_boundary(config.P, config.V_I):.2f} g")

# =========================
# Live simulation panel
# =========================
st.header("Simulation")
status = st.empty()
bar = st.progress(0.0)
m1, m2, m3, m4 = st.columns(4)
ph_processed, ph_sold, ph_profit, ph_error = m1.empty(), m2.empty(), m3.empty(), m4.empty()


def _render(snapshots):
    status.write(f"Status: **{st.session_state.phase.capitalize()}**")
    if not snapshots:
        bar.progress(0.0)
        return
    s = snapshots[-1]
    bar.progress(min(1.0, s.fraction_done))
    ph_processed.metric("Processed", f"{s.processed:,} / {s.N:,}")
    ph_sold.metric("Sold (informed / uninformed)", f"{s.sold:,}", f"{s.sold_informed:,} / {s.sold_uninformed:,}")
    if s.processed == 0:
        return
    ph_profit.metric("Simulated profit", f"${s.profit:,.2f}", f"analytic ${s.analytic_profit_total:,.2f}")
    err = s.profit_error_pct
    ph_error.metric("Profit error", "-" if math.isnan(err) else f"{err:.2f}%")


_render(st.session_state.snapshots)

while st.session_state.phase == "running":
    if not worker.alive:
        st.session_state.phase = "failed"
        st.error(f"Simulation worker stopped: {worker.error!r}")
        break
    time.sleep(0.1)
    if _drain():
        _render(st.session_state.snapshots)

# =========================
# Charts and downloads
# =========================
last = st.session_state.snapshots[-1] if st.session_state.snapshots else None
sim_profit = last.profit if last is not None and last.processed > 0 else None

tab_profit, tab_demand, tab_run = st.tabs(["Profit", "Demand", "Run"])
with tab_profit:
    st.pyplot(plot_profit_curve(sweep, config.Q, sim_profit=sim_profit))
with tab_demand:
    st.pyplot(plot_demand_shares(sweep, config.Q, total_at_q=shares.total))
with tab_run:
    df_timeline = timeline_frame(st.session_state.snapshots) if st.session_state.snapshots else pd.DataFrame()
    st.pyplot(plot_timeline(df_timeline))
    if not df_timeline.empty:
        st.dataframe(df_timeline)
        st.download_button(
            "Download run timeline CSV",
            data=df_timeline.to_csv(index=False).encode("utf-8"),
            file_name="run_timeline.csv",
            mime="text/csv",
        )

st.header("Q sweep")
st.dataframe(sweep)
st.download_button(
    "Download sweep CSV",
    data=sweep_to_csv(sweep, config).encode("utf-8"),
    file_name=sweep_filename(config),
    mime="text/csv",
)
