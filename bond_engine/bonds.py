from __future__ import annotations

import numbers

import numpy as np
import pandas as pd
from dataclasses import dataclass, asdict
from typing import Optional, List, Sequence

from .config import CURRENCIES, INTEREST_TYPES

GRACE_TYPES = ("none", "partial", "total")

CASHFLOW_COLUMNS = ["period", "coupon", "principal_payment", "total_payment", "outstanding_balance"]


@dataclass(frozen=True)
class BondTerms:
    name: str
    nominal_value: float
    coupon_rate: float
    maturity_periods: int
    frequency: int
    market_rate: float
    grace_periods: int = 0
    grace_type: str = "none"
    interest_type: str = "effective"
    capitalization: Optional[int] = None
    currency: str = "PEN"


@dataclass(frozen=True)
class CashFlowEntry:
    period: int
    coupon: float
    principal_payment: float
    total_payment: float
    outstanding_balance: float


def _is_real(x) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, bool) and bool(np.isfinite(x))


def _is_count(x) -> bool:
    return _is_real(x) and float(x).is_integer()


def qc_flags_for_terms(terms: BondTerms) -> List[str]:
    flags: List[str] = []

    if not str(terms.name).strip():
        flags.append("EMPTY_NAME")

    if not (_is_real(terms.nominal_value) and terms.nominal_value > 0):
        flags.append("BAD_NOMINAL")

    if not (_is_real(terms.coupon_rate) and terms.coupon_rate >= 0):
        flags.append("BAD_COUPON")

    maturity_ok = _is_count(terms.maturity_periods) and terms.maturity_periods > 0
    if not maturity_ok:
        flags.append("BAD_MATURITY")

    if not (_is_count(terms.frequency) and terms.frequency > 0):
        flags.append("BAD_FREQ")

    if not (_is_real(terms.market_rate) and terms.market_rate >= 0):
        flags.append("BAD_MARKET_RATE")

    # grace must end before maturity; an unusable maturity fails it too
    if not (_is_count(terms.grace_periods) and terms.grace_periods >= 0
            and maturity_ok and terms.grace_periods < terms.maturity_periods):
        flags.append("BAD_GRACE")

    if terms.grace_type not in GRACE_TYPES:
        flags.append("BAD_GRACE_TYPE")

    if terms.interest_type not in INTEREST_TYPES:
        flags.append("BAD_INTEREST_TYPE")
    elif terms.interest_type == "nominal" and not (
        terms.capitalization is not None and _is_count(terms.capitalization) and terms.capitalization > 0
    ):
        flags.append("BAD_CAPITALIZATION")

    if terms.currency not in CURRENCIES:
        flags.append("BAD_CURRENCY")

    return flags


def validate_terms(terms: BondTerms) -> None:
    flags = qc_flags_for_terms(terms)
    if flags:
        raise ValueError(f"{terms.name or '<unnamed>'}: invalid bond terms ({'|'.join(flags)}).")


def generate_cash_flow(terms: BondTerms) -> List[CashFlowEntry]:
    """
    Bullet ("American") schedule: coupon every period, full principal at maturity.

    Grace window (periods 1..grace_periods):
      - total:   nothing is paid
      - partial: coupon only
      - none:    treated as a normal period
    Principal is never forgiven; the final period is always outside the grace window.
    """
    n = int(terms.maturity_periods)
    face = float(terms.nominal_value)
    coupon_cf = face * terms.coupon_rate / terms.frequency

    out: List[CashFlowEntry] = []
    for p in range(1, n + 1):
        in_grace = p <= terms.grace_periods

        if in_grace and terms.grace_type == "total":
            coupon, principal = 0.0, 0.0
        elif in_grace and terms.grace_type == "partial":
            coupon, principal = coupon_cf, 0.0
        else:
            coupon = coupon_cf
            principal = face if p == n else 0.0

        out.append(
            CashFlowEntry(
                period=p,
                coupon=coupon,
                principal_payment=principal,
                total_payment=coupon + principal,
                outstanding_balance=0.0 if p == n else face,
            )
        )

    return out


def cashflow_table(cash_flow: Sequence[CashFlowEntry]) -> pd.DataFrame:
    return pd.DataFrame([asdict(e) for e in cash_flow], columns=CASHFLOW_COLUMNS)
