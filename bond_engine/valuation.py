from __future__ import annotations

import logging
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .bonds import BondTerms, CashFlowEntry, cashflow_table, generate_cash_flow, qc_flags_for_terms, validate_terms
from .rates import nominal_to_effective
from .risk import present_value, valuation_metrics
from .yields import investor_return_rate, issuer_cost_rate

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = [
    "present_value",
    "duration",
    "modified_duration",
    "convexity",
    "cost_rate",
    "return_rate",
    "max_market_price",
    "discount_rate",
    "cost_rate_converged",
    "return_rate_converged",
]


@dataclass(frozen=True)
class ValuationResult:
    cash_flow: Tuple[CashFlowEntry, ...]
    present_value: float
    duration: float
    modified_duration: float
    convexity: float
    cost_rate: float          # TCEA, issuer side
    return_rate: float        # TREA, investor side
    max_market_price: float
    discount_rate: float      # effective market rate actually used
    cost_rate_converged: bool = True
    return_rate_converged: bool = True


def effective_market_rate(terms: BondTerms) -> float:
    if terms.interest_type == "nominal":
        return nominal_to_effective(terms.market_rate, int(terms.capitalization))
    return float(terms.market_rate)


def value_bond(
    terms: BondTerms,
    issue_price: Optional[float] = None,
    purchase_price: Optional[float] = None,
) -> ValuationResult:
    """
    Full valuation of a bullet bond.

    issue_price / purchase_price default to the market present value, so
    cost_rate and return_rate are the IRRs of buying/issuing at fair price.
    """
    validate_terms(terms)

    rate = effective_market_rate(terms)
    freq = int(terms.frequency)
    cash_flow = generate_cash_flow(terms)

    m = valuation_metrics(cash_flow, rate, freq)

    issue_px = m.present_value if issue_price is None else float(issue_price)
    purchase_px = m.present_value if purchase_price is None else float(purchase_price)

    cost = issuer_cost_rate(cash_flow, issue_px, freq)
    ret = investor_return_rate(cash_flow, purchase_px, freq)

    max_px = present_value(cash_flow, terms.coupon_rate, freq)

    logger.debug(f"{terms.name}: pv={m.present_value:.6f} rate={rate:.6f} tcea={cost.annual_rate:.6f} trea={ret.annual_rate:.6f}")

    return ValuationResult(
        cash_flow=tuple(cash_flow),
        present_value=m.present_value,
        duration=m.duration,
        modified_duration=m.modified_duration,
        convexity=m.convexity,
        cost_rate=cost.annual_rate,
        return_rate=ret.annual_rate,
        max_market_price=max_px,
        discount_rate=rate,
        cost_rate_converged=cost.converged,
        return_rate_converged=ret.converged,
    )


def result_frames(result: ValuationResult) -> Tuple[pd.DataFrame, pd.Series]:
    """(cash-flow table, summary metrics) for display/export collaborators."""
    summary = pd.Series({k: getattr(result, k) for k in SUMMARY_FIELDS}, dtype=object)
    return cashflow_table(result.cash_flow), summary


def value_book(bonds: Iterable[BondTerms]) -> pd.DataFrame:
    """
    One row per bond: static terms, summary metrics, QC flags.

    Bonds failing QC are kept with NaN metrics so the table lines up with the input.
    """
    rows = []
    for terms in bonds:
        flags = qc_flags_for_terms(terms)
        row = {
            "name": terms.name,
            "nominal_value": terms.nominal_value,
            "coupon_rate": terms.coupon_rate,
            "maturity_periods": terms.maturity_periods,
            "frequency": terms.frequency,
            "market_rate": terms.market_rate,
            "currency": terms.currency,
        }

        if flags:
            row.update({k: np.nan for k in SUMMARY_FIELDS})
        else:
            res = value_bond(terms)
            row.update({k: getattr(res, k) for k in SUMMARY_FIELDS})

        row["flags"] = "|".join(flags)
        rows.append(row)

    columns = ["name", "nominal_value", "coupon_rate", "maturity_periods", "frequency", "market_rate", "currency"]
    return pd.DataFrame(rows, columns=columns + SUMMARY_FIELDS + ["flags"])
