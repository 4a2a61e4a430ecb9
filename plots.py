import matplotlib.pyplot as plt


def plot_profit_curve(sweep, Q: float, sim_profit: float | None = None):
    """
    Expected profit over Q, with a marker at the current Q.
    The marker sits on the simulated profit when a run has produced one.
    """
    fig, ax = plt.subplots()
    ax.plot(sweep["Q"], sweep["expected_profit"], label="Expected profit", color="#2563eb")
    ax.axvline(Q, linestyle=":", linewidth=1)
    if sim_profit is not None:
        ax.plot([Q], [sim_profit], marker="o", color="black", label="Simulated")
    ax.axhline(0.0, linewidth=0.5, color="grey")
    ax.set_xlabel("Q (grams)"); ax.set_ylabel("Profit ($)"); ax.legend(); ax.set_title("Profit vs box size")
    ax.grid(True)
    return fig


def plot_demand_shares(sweep, Q: float, total_at_q: float | None = None):
    """
    D_i(Q), D_u and the weighted total over Q.
    Expects columns: Q, D_i, D_u, D_total.
    """
    fig, ax = plt.subplots()
    ax.plot(sweep["Q"], sweep["D_i"], label="D_i(Q)", color="#16a34a")
    ax.plot(sweep["Q"], sweep["D_u"], label="D_u(P)", color="#f59e0b")
    ax.plot(sweep["Q"], sweep["D_total"], label="Total", color="#2563eb")
    ax.axvline(Q, linestyle=":", linewidth=1)
    if total_at_q is not None:
        ax.plot([Q], [total_at_q], marker="o", color="black")
    ax.set_ylim(0, 1)
    ax.set_xlabel("Q (grams)"); ax.set_ylabel("Share"); ax.legend(); ax.set_title("Demand shares")
    ax.grid(True)
    return fig


def plot_timeline(df_timeline):
    """
    Simulated vs analytic profit as the run progresses.
    Analytic profit is scaled to the customers processed so far.
    """
    fig, ax = plt.subplots()
    if df_timeline is None or df_timeline.empty:
        return fig
    frac = df_timeline["processed"] / df_timeline["N"].where(df_timeline["N"] > 0, 1)
    ax.plot(df_timeline["processed"], df_timeline["profit"], label="Simulated profit")
    ax.plot(df_timeline["processed"], df_timeline["analytic_profit_total"] * frac,
            linestyle="--", label="Analytic (pro rata)")
    ax.set_xlabel("Customers processed"); ax.set_ylabel("Profit ($)"); ax.legend(); ax.set_title("Run progress")
    ax.grid(True)
    return fig
