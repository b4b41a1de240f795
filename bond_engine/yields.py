from __future__ import annotations

import logging
import numpy as np
from dataclasses import dataclass
from typing import Sequence, Tuple

from .bonds import CashFlowEntry
from .config import IRR_TOL, IRR_MAX_ITER, IRR_INITIAL_GUESS, RATE_FLOOR
from .rates import nominal_to_effective

logger = logging.getLogger(__name__)

CONVENTIONS = ("investor", "issuer")


@dataclass(frozen=True)
class IRRSolution:
    rate: float          # annual, quoted at frequency f
    annual_rate: float   # effective, (1 + r/f)^f - 1
    iterations: int
    converged: bool
    npv: float


def _npv_and_derivative(
    payments: np.ndarray,
    periods: np.ndarray,
    rate: float,
    frequency: int,
    outlay: float,
    convention: str,
) -> Tuple[float, float]:
    """
    investor: npv = -outlay + sum CF_p / (1+r/f)^p
    issuer:   npv = +outlay - sum CF_p / (1+r/f)^p
    """
    r = rate / frequency
    factors = (1.0 + r) ** periods

    pv = float(np.sum(payments / factors))
    dpv = -float(np.sum(periods * payments / (frequency * factors * (1.0 + r))))

    if convention == "investor":
        return pv - outlay, dpv
    return outlay - pv, -dpv


def solve_irr(
    cash_flow: Sequence[CashFlowEntry],
    outlay: float,
    frequency: int,
    convention: str = "investor",
    guess: float = IRR_INITIAL_GUESS,
    tol: float = IRR_TOL,
    max_iter: int = IRR_MAX_ITER,
) -> IRRSolution:
    """
    Newton-Raphson for the rate r at which the discounted cash flow matches `outlay`.

    Best effort: if |npv| is not below `tol` within `max_iter` updates, the last
    iterate is returned with converged=False. Rates are floored at RATE_FLOOR so
    the period discount base stays positive.
    """
    if frequency <= 0:
        raise ValueError("frequency must be positive")
    if convention not in CONVENTIONS:
        raise ValueError(f"Unknown NPV convention: {convention}")

    payments = np.array([e.total_payment for e in cash_flow], dtype=float)
    periods = np.arange(1, len(payments) + 1, dtype=float)

    rate = float(guess)
    iterations = 0
    for _ in range(max_iter):
        npv, deriv = _npv_and_derivative(payments, periods, rate, frequency, outlay, convention)
        if abs(npv) < tol:
            return IRRSolution(rate, nominal_to_effective(rate, frequency), iterations, True, npv)

        if deriv == 0.0 or not np.isfinite(deriv):
            break

        rate = rate - npv / deriv
        if rate < RATE_FLOOR:
            rate = RATE_FLOOR
        iterations += 1

    npv, _ = _npv_and_derivative(payments, periods, rate, frequency, outlay, convention)
    converged = bool(abs(npv) < tol)
    if not converged:
        logger.warning(
            f"IRR ({convention}) did not converge after {iterations} iterations: rate={rate:.10f} npv={npv:.3e}"
        )

    return IRRSolution(rate, nominal_to_effective(rate, frequency), iterations, converged, npv)


def investor_return_rate(cash_flow: Sequence[CashFlowEntry], purchase_price: float, frequency: int) -> IRRSolution:
    return solve_irr(cash_flow, purchase_price, frequency, convention="investor")


def issuer_cost_rate(cash_flow: Sequence[CashFlowEntry], issue_price: float, frequency: int) -> IRRSolution:
    return solve_irr(cash_flow, issue_price, frequency, convention="issuer")
