from __future__ import annotations

from math import isclose

from mortgage_invest.core.finance import calculate_mortgage_costs


def test_costs_nominal_and_real():
    res = calculate_mortgage_costs(principal=100000, annual_rate=0.05, years=30, inflation=0.02)
    assert isclose(res.payment, 536.8216230121399, abs_tol=1e-5)
    assert isclose(res.totalPaid, 193255.78428437034, abs_tol=1e-5)
    assert isclose(res.interestNominal, 93255.78428437034, abs_tol=1e-5)
    assert isclose(res.interestReal, 45236.29372310749, abs_tol=1e-5)


def test_zero_inflation_real_equals_nominal():
    res = calculate_mortgage_costs(principal=100000, annual_rate=0.04, years=20, inflation=0.0)
    assert isclose(res.interestReal, res.interestNominal, rel_tol=1e-9)


def test_zero_rate_has_no_nominal_interest():
    res = calculate_mortgage_costs(principal=90000, annual_rate=0.0, years=15, inflation=0.02)
    assert isclose(res.interestNominal, 0.0, abs_tol=1e-6)
    # paying back later in cheaper money: real cost below the principal
    assert res.interestReal < 0


def test_zero_principal_costs_nothing():
    res = calculate_mortgage_costs(principal=0, annual_rate=0.05, years=30, inflation=0.02)
    assert res.payment == 0
    assert res.totalPaid == 0
    assert res.interestNominal == 0
    assert res.interestReal == 0


def test_inflation_lowers_real_interest():
    low = calculate_mortgage_costs(principal=100000, annual_rate=0.05, years=30, inflation=0.01)
    high = calculate_mortgage_costs(principal=100000, annual_rate=0.05, years=30, inflation=0.04)
    assert high.interestReal < low.interestReal < low.interestNominal
