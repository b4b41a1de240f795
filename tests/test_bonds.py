import pandas as pd
import pytest

from bond_engine.bonds import (
    BondTerms,
    generate_cash_flow,
    cashflow_table,
    qc_flags_for_terms,
    validate_terms,
)


@pytest.fixture(scope="module")
def bond():
    return BondTerms(
        name="BULLET_4Y_10PCT",
        nominal_value=1000.0,
        coupon_rate=0.10,
        maturity_periods=4,
        frequency=1,
        market_rate=0.12,
    )


@pytest.fixture(scope="module")
def semiannual_bond():
    return BondTerms(
        name="BULLET_5Y_SEMI",
        nominal_value=5000.0,
        coupon_rate=0.08,
        maturity_periods=10,
        frequency=2,
        market_rate=0.07,
        grace_periods=3,
        grace_type="partial",
    )


def test_cash_flow_length_matches_maturity(bond, semiannual_bond):
    for terms in (bond, semiannual_bond):
        cf = generate_cash_flow(terms)
        assert len(cf) == terms.maturity_periods
        assert [e.period for e in cf] == list(range(1, terms.maturity_periods + 1)), "Periods must be 1..N in order"


def test_bullet_schedule(bond):
    cf = generate_cash_flow(bond)

    for e in cf[:-1]:
        assert e.coupon == pytest.approx(100.0)
        assert e.principal_payment == 0.0
        assert e.total_payment == pytest.approx(100.0)
        assert e.outstanding_balance == 1000.0

    last = cf[-1]
    assert last.principal_payment == 1000.0
    assert last.total_payment == pytest.approx(1100.0)
    assert last.outstanding_balance == 0.0


def test_total_grace_pays_nothing(bond):
    terms = BondTerms(**{**bond.__dict__, "grace_periods": 1, "grace_type": "total"})
    cf = generate_cash_flow(terms)

    assert cf[0].coupon == 0.0 and cf[0].principal_payment == 0.0 and cf[0].total_payment == 0.0
    assert cf[0].outstanding_balance == 1000.0, "Total grace defers, it does not forgive principal"
    assert [e.coupon for e in cf[1:]] == pytest.approx([100.0, 100.0, 100.0])
    assert cf[-1].principal_payment == 1000.0
    assert cf[-1].total_payment == pytest.approx(1100.0)


def test_partial_grace_pays_coupon_only(semiannual_bond):
    cf = generate_cash_flow(semiannual_bond)
    coupon = 5000.0 * 0.08 / 2

    for e in cf[: semiannual_bond.grace_periods]:
        assert e.coupon == pytest.approx(coupon)
        assert e.principal_payment == 0.0

    assert cf[-1].principal_payment == 5000.0


def test_grace_type_none_ignores_grace_periods(bond):
    """A grace window with grace_type='none' behaves like normal periods."""
    with_grace = generate_cash_flow(BondTerms(**{**bond.__dict__, "grace_periods": 2}))
    assert with_grace == generate_cash_flow(bond)


def test_zero_coupon_bond_pays_only_principal():
    terms = BondTerms(name="ZERO", nominal_value=100.0, coupon_rate=0.0, maturity_periods=3, frequency=1, market_rate=0.05)
    cf = generate_cash_flow(terms)
    assert [e.total_payment for e in cf] == [0.0, 0.0, 100.0]


def test_cashflow_table_columns(semiannual_bond):
    table = cashflow_table(generate_cash_flow(semiannual_bond))
    assert list(table.columns) == ["period", "coupon", "principal_payment", "total_payment", "outstanding_balance"]
    assert len(table) == 10
    assert table["principal_payment"].sum() == pytest.approx(5000.0)
    assert (table["total_payment"] == table["coupon"] + table["principal_payment"]).all()


def test_qc_flags_clean_for_valid_terms(bond, semiannual_bond):
    assert qc_flags_for_terms(bond) == []
    assert qc_flags_for_terms(semiannual_bond) == []


@pytest.mark.parametrize(
    "changes, flag",
    [
        ({"name": "  "}, "EMPTY_NAME"),
        ({"nominal_value": 0.0}, "BAD_NOMINAL"),
        ({"coupon_rate": -0.01}, "BAD_COUPON"),
        ({"frequency": 0}, "BAD_FREQ"),
        ({"market_rate": -0.05}, "BAD_MARKET_RATE"),
        ({"grace_periods": 4}, "BAD_GRACE"),
        ({"grace_periods": -1}, "BAD_GRACE"),
        ({"grace_type": "holiday"}, "BAD_GRACE_TYPE"),
        ({"interest_type": "nominal"}, "BAD_CAPITALIZATION"),
        ({"interest_type": "simple"}, "BAD_INTEREST_TYPE"),
        ({"currency": "GBP"}, "BAD_CURRENCY"),
        ({"maturity_periods": 4.5}, "BAD_MATURITY"),
        ({"frequency": 1.5}, "BAD_FREQ"),
        ({"grace_periods": 1.5}, "BAD_GRACE"),
        ({"interest_type": "nominal", "capitalization": 2.5}, "BAD_CAPITALIZATION"),
        ({"market_rate": float("nan")}, "BAD_MARKET_RATE"),
        ({"coupon_rate": float("nan")}, "BAD_COUPON"),
        ({"nominal_value": float("inf")}, "BAD_NOMINAL"),
        ({"maturity_periods": float("nan")}, "BAD_MATURITY"),
    ],
)
def test_qc_flags_detect_invalid_input(bond, changes, flag):
    terms = BondTerms(**{**bond.__dict__, **changes})
    assert flag in qc_flags_for_terms(terms)
    with pytest.raises(ValueError):
        validate_terms(terms)


def test_zero_maturity_is_rejected(bond):
    terms = BondTerms(**{**bond.__dict__, "maturity_periods": 0})
    flags = qc_flags_for_terms(terms)
    assert "BAD_MATURITY" in flags
    assert "BAD_GRACE" in flags, "grace_periods=0 is not below maturity_periods=0"


def test_whole_float_counts_are_accepted(bond):
    """4.0 periods is still a whole number of periods."""
    terms = BondTerms(**{**bond.__dict__, "maturity_periods": 4.0, "frequency": 1.0})
    assert qc_flags_for_terms(terms) == []
    assert len(generate_cash_flow(terms)) == 4
