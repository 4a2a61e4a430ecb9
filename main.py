from __future__ import annotations
from typing import List, Sequence
import argparse

import pandas as pd
from loguru import logger

import config as cfg
from analysis import best_quantity, convergence_table, sweep_quantity
from config import InvalidConfigError, SimConfig
from demand import informed_boundary, is_shrink_ray
from export import write_sweep_csv, write_timeline_csv
from logs import setup_logging
from messages import Snapshot
from presets import apply_preset, preset_names
from scheduler import TaskQueue
from sim import SimulationEngine


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="shrink-ray", description="Simulate shrink-ray pricing and compare with the analytic model.")
    p.add_argument("--preset", choices=preset_names(), default=None, help="Start from a named parameter set")
    p.add_argument("--P", type=float, default=None, help=f"Box price (default: {cfg.P})")
    p.add_argument("--Q", type=float, default=None, help=f"Grams per box (default: {cfg.Q})")
    p.add_argument("--C", type=float, default=None, help=f"Cost per gram (default: {cfg.C})")
    p.add_argument("--alpha", type=float, default=None, help=f"Informed share (default: {cfg.ALPHA})")
    p.add_argument("--V-I", dest="V_I", type=float, default=None, help=f"Informed max valuation per gram (default: {cfg.V_I})")
    p.add_argument("--V-U", dest="V_U", type=float, default=None, help=f"Uninformed max valuation per box (default: {cfg.V_U})")
    p.add_argument("--Q-star", dest="Q_star", type=float, default=None, help=f"Noticeable shrink threshold (default: {cfg.Q_STAR})")
    p.add_argument("--strict-q-star", dest="strict_q_star", action="store_true", default=None,
                   help="Uninformed buyers walk away once Q <= Q*")
    p.add_argument("--N", type=int, default=cfg.N, help=f"Customers to simulate (default: {cfg.N})")
    p.add_argument("--seed", type=int, default=cfg.SEED, help=f"RNG seed (default: {cfg.SEED})")
    p.add_argument("--batch-size", type=int, default=cfg.BATCH_SIZE)
    p.add_argument("--emit-every-ms", type=float, default=cfg.EMIT_EVERY_MS)
    p.add_argument("--sweep-csv", metavar="DIR", default=None, help="Write the analytic Q sweep CSV into DIR")
    p.add_argument("--timeline-csv", metavar="PATH", default=None, help="Write every progress snapshot to PATH")
    p.add_argument("--convergence", action="store_true", help="Also tabulate error for N in 1e3, 1e4, 1e5")
    p.add_argument("--plot", action="store_true", help="Show profit and demand charts")
    p.add_argument("--log-level", default=cfg.LOG_LEVEL)
    return p


def config_from_args(args: argparse.Namespace) -> SimConfig:
    config = SimConfig(N=args.N, seed=args.seed, batch_size=args.batch_size, emit_every_ms=args.emit_every_ms)
    if args.preset:
        config = apply_preset(config, args.preset)
    overrides = {
        k: getattr(args, k)
        for k in ("P", "Q", "C", "alpha", "V_I", "V_U", "Q_star", "strict_q_star")
        if getattr(args, k) is not None
    }
    return config.with_params(**overrides)


def _comparison(done: Snapshot) -> pd.DataFrame:
    return pd.DataFrame([
        {"metric": "sold", "simulated": done.sold, "analytic": done.analytic_sold, "error_pct": done.sold_error_pct},
        {"metric": "profit", "simulated": done.profit, "analytic": done.analytic_profit_total, "error_pct": done.profit_error_pct},
        {"metric": "share", "simulated": done.sim_share, "analytic": done.shares.total, "error_pct": float("nan")},
    ])


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(list(argv) if argv is not None else None)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args).validate()
    except InvalidConfigError as e:
        logger.error(str(e))
        return 2

    regime = "shrink-ray" if is_shrink_ray(config.P, config.Q, config.V_I) else "normal"
    logger.info("regime={} informed boundary Q={:.2f}", regime, informed_boundary(config.P, config.V_I))

    snapshots: List[Snapshot] = []

    def on_snapshot(s: Snapshot) -> None:
        snapshots.append(s)
        if s.processed > 0:
            logger.info("{:>6.1%} processed={} sold={} profit={:.2f}", s.fraction_done, s.processed, s.sold, s.profit)

    tasks = TaskQueue()
    engine = SimulationEngine(emit=on_snapshot, tasks=tasks)
    engine.configure(config)
    engine.run()
    tasks.run_until_idle()

    done = snapshots[-1]
    print(f"\nSold {done.sold} of {done.N} (informed {done.sold_informed} / uninformed {done.sold_uninformed})")
    print(f"Margin per box: {done.margin:.4f}")
    print(_comparison(done).to_string(index=False))

    sweep = sweep_quantity(config)
    q_best, profit_best = best_quantity(sweep)
    print(f"\nBest Q in [{cfg.SWEEP_Q_MIN}, {cfg.SWEEP_Q_MAX}]: {q_best} (expected profit {profit_best:.2f})")

    if args.sweep_csv:
        path = write_sweep_csv(sweep, config, args.sweep_csv)
        print(f"Wrote sweep to {path}")
    if args.timeline_csv:
        path = write_timeline_csv(snapshots, args.timeline_csv)
        print(f"Wrote {len(snapshots)} snapshots to {path}")

    if args.convergence:
        print("\nConvergence")
        print(convergence_table(config).to_string(index=False))

    if args.plot:
        import matplotlib.pyplot as plt
        from plots import plot_demand_shares, plot_profit_curve
        plot_profit_curve(sweep, config.Q, sim_profit=done.profit)
        plot_demand_shares(sweep, config.Q, total_at_q=done.shares.total)
        plt.show()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
