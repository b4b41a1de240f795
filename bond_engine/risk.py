from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Sequence, Tuple

from .bonds import CashFlowEntry
from .rates import discount_factors, period_rate


class DegenerateCashFlowError(ValueError):
    """Raised when a cash flow has zero present value and ratios are undefined."""


@dataclass(frozen=True)
class ValuationMetrics:
    present_value: float
    duration: float
    modified_duration: float
    convexity: float


def _payments(cash_flow: Sequence[CashFlowEntry]) -> np.ndarray:
    return np.array([e.total_payment for e in cash_flow], dtype=float)


def _discounted(cash_flow: Sequence[CashFlowEntry], annual_rate: float, frequency: int) -> Tuple[np.ndarray, np.ndarray]:
    """Returns (periods, pv of each payment)."""
    cfs = _payments(cash_flow)
    periods = np.arange(1, len(cfs) + 1, dtype=float)
    return periods, cfs * discount_factors(annual_rate, frequency, len(cfs))


def _require_nonzero(pv: float) -> None:
    if pv == 0.0:
        raise DegenerateCashFlowError("Present value is zero; duration and convexity are undefined.")


def present_value(cash_flow: Sequence[CashFlowEntry], annual_rate: float, frequency: int) -> float:
    _, pv_cf = _discounted(cash_flow, annual_rate, frequency)
    return float(np.sum(pv_cf))


def macaulay_duration(cash_flow: Sequence[CashFlowEntry], annual_rate: float, frequency: int) -> float:
    """Macaulay duration in years: PV-weighted average period, divided by frequency."""
    periods, pv_cf = _discounted(cash_flow, annual_rate, frequency)
    pv = float(np.sum(pv_cf))
    _require_nonzero(pv)
    return float(np.sum(periods * pv_cf)) / pv / frequency


def modified_duration(cash_flow: Sequence[CashFlowEntry], annual_rate: float, frequency: int) -> float:
    mac = macaulay_duration(cash_flow, annual_rate, frequency)
    return mac / (1.0 + period_rate(annual_rate, frequency))


def convexity(cash_flow: Sequence[CashFlowEntry], annual_rate: float, frequency: int) -> float:
    """
    sum p(p+1) PV_p / PV / f^2

    Not divided by (1+r)^2, so this is the Macaulay-style convexity in years^2.
    """
    periods, pv_cf = _discounted(cash_flow, annual_rate, frequency)
    pv = float(np.sum(pv_cf))
    _require_nonzero(pv)
    return float(np.sum(periods * (periods + 1.0) * pv_cf)) / pv / frequency**2


def valuation_metrics(cash_flow: Sequence[CashFlowEntry], annual_rate: float, frequency: int) -> ValuationMetrics:
    periods, pv_cf = _discounted(cash_flow, annual_rate, frequency)
    pv = float(np.sum(pv_cf))
    _require_nonzero(pv)

    duration = float(np.sum(periods * pv_cf)) / pv / frequency
    conv = float(np.sum(periods * (periods + 1.0) * pv_cf)) / pv / frequency**2

    return ValuationMetrics(
        present_value=pv,
        duration=duration,
        modified_duration=duration / (1.0 + period_rate(annual_rate, frequency)),
        convexity=conv,
    )
