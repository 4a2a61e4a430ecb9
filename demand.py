"""
Closed-form demand and profit for the two-segment (informed / uninformed) model.

Informed buyers value grams: valuation per gram ~ U[0, V_I], they buy when it
covers the unit price P/Q. Uninformed buyers value the box: valuation ~ U[0, V_U],
they buy when it covers P, and optionally only while the shrink is not
noticeable (Q > Q_star).

Everything here is pure so it can be evaluated from any thread, e.g. to sweep Q
while an engine is running.
"""
from __future__ import annotations
from dataclasses import dataclass
import math


@dataclass(frozen=True)
class Shares:
    d_i: float      # informed demand share
    d_u: float      # uninformed demand share (after the notice gate)
    total: float    # population-weighted share


@dataclass(frozen=True)
class Expectation:
    expected_sold: float
    expected_profit_total: float
    margin: float
    shares: Shares


def clamp01(x: float) -> float:
    if math.isnan(x):
        return 0.0
    return min(1.0, max(0.0, x))


def demand_informed(P: float, Q: float, V_I: float) -> float:
    if Q <= 0 or V_I <= 0:
        return 0.0
    return max(0.0, 1.0 - P / (Q * V_I))


def demand_uninformed(P: float, V_U: float) -> float:
    if V_U <= 0:
        return 0.0
    return max(0.0, 1.0 - P / V_U)


def notice_indicator(Q: float, Q_star: float) -> int:
    return 1 if Q > Q_star else 0


def unit_price(P: float, Q: float) -> float:
    return math.inf if Q <= 0 else P / Q


def margin_per_box(P: float, Q: float, C: float) -> float:
    # negative margin is a loss-making box, not an error
    return P - C * Q


def informed_boundary(P: float, V_I: float) -> float:
    """Fill quantity at or below which no informed buyer purchases (P / V_I)."""
    return P / V_I if V_I > 0 else math.inf


def is_shrink_ray(P: float, Q: float, V_I: float) -> bool:
    """True when the box is shrunk so far that informed demand is gone."""
    return Q <= 0 or V_I <= 0 or Q <= P / V_I


def expected_shares(
    P: float,
    Q: float,
    alpha: float,
    V_I: float,
    V_U: float,
    strict_q_star: bool = False,
    Q_star: float = 0.0,
) -> Shares:
    a = clamp01(alpha)
    d_i = demand_informed(P, Q, V_I)
    gate = notice_indicator(Q, Q_star) if strict_q_star else 1
    d_u = demand_uninformed(P, V_U) * gate
    return Shares(d_i=d_i, d_u=d_u, total=a * d_i + (1 - a) * d_u)


def expected_profit(
    P: float,
    Q: float,
    C: float,
    N: float,
    alpha: float,
    V_I: float,
    V_U: float,
    strict_q_star: bool = False,
    Q_star: float = 0.0,
) -> Expectation:
    """
    Expected boxes sold and profit over N customers.

    expected_sold = N * shares.total
    expected_profit_total = expected_sold * (P - C*Q)
    """
    margin = margin_per_box(P, Q, C)
    shares = expected_shares(P, Q, alpha, V_I, V_U, strict_q_star=strict_q_star, Q_star=Q_star)
    expected_sold = N * shares.total
    return Expectation(
        expected_sold=expected_sold,
        expected_profit_total=expected_sold * margin,
        margin=margin,
        shares=shares,
    )


def profit_per_customer(
    P: float,
    Q: float,
    C: float,
    alpha: float,
    V_I: float,
    V_U: float,
    strict_q_star: bool = False,
    Q_star: float = 0.0,
) -> float:
    shares = expected_shares(P, Q, alpha, V_I, V_U, strict_q_star=strict_q_star, Q_star=Q_star)
    return margin_per_box(P, Q, C) * shares.total


def percent_error(sim_value: float, expected_value: float) -> float:
    if not math.isfinite(expected_value) or expected_value == 0:
        return math.nan
    return (sim_value - expected_value) / expected_value * 100.0
