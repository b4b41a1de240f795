from __future__ import annotations

import numpy as np


def nominal_to_effective(nominal_rate: float, periods_per_year: int) -> float:
    """
    Effective annual rate of a nominal rate compounded k times per year:
      i = (1 + j/k)^k - 1
    """
    k = periods_per_year
    if k <= 0:
        raise ValueError("periods_per_year must be positive")
    if nominal_rate <= -k:
        raise ValueError(f"Nominal rate {nominal_rate} gives a non-positive compounding base.")

    return (1.0 + nominal_rate / k) ** k - 1.0


def effective_to_nominal(effective_rate: float, periods_per_year: int) -> float:
    """
    Inverse of nominal_to_effective:
      j = k * ((1 + i)^(1/k) - 1)
    """
    k = periods_per_year
    if k <= 0:
        raise ValueError("periods_per_year must be positive")
    if effective_rate <= -1.0:
        raise ValueError("effective_rate must be > -1")

    return k * ((1.0 + effective_rate) ** (1.0 / k) - 1.0)


def period_rate(annual_rate: float, frequency: int) -> float:
    if frequency <= 0:
        raise ValueError("frequency must be positive")
    return annual_rate / frequency


def discount_factors(annual_rate: float, frequency: int, n_periods: int) -> np.ndarray:
    """(1 + r/f)^-p for p = 1..n_periods."""
    r = period_rate(annual_rate, frequency)
    if 1.0 + r <= 0.0:
        raise ValueError(f"Rate {annual_rate} gives a non-positive discount base.")

    periods = np.arange(1, n_periods + 1, dtype=float)
    return (1.0 + r) ** -periods
