from __future__ import annotations

import math
from math import isclose

import pytest

from mortgage_invest.core.finance import calculate_scenario_gain
from mortgage_invest.core.report import (
    ScenarioInputs,
    compare_horizons,
    evaluate_horizon,
    gain_sensitivity,
    rate_grid,
    yearly_gains,
)


@pytest.fixture()
def inputs(base_scenario) -> ScenarioInputs:
    return ScenarioInputs(**{key: value for key, value in base_scenario.items() if key != "years"})


def test_horizon_report_reference_values(inputs):
    report = evaluate_horizon(inputs, 30, min_gain_ratio=0.0)
    assert report.years == 30
    assert isclose(report.scenario.gainReal, -36890.19100736438, abs_tol=1e-5)
    assert isclose(report.breakEvenGrossReturn, 0.06372442977267745, abs_tol=1e-5)
    assert isclose(report.payoffYears, 16.125, abs_tol=1e-3)
    assert report.targetGain == 0
    assert report.convenient is False
    assert report.gainShortfall == report.scenario.gainReal


def test_target_gain_is_share_of_principal(inputs):
    rich = inputs.model_copy(update={"gross_return_rate": 0.12})
    report = evaluate_horizon(rich, 30, min_gain_ratio=0.1)
    assert isclose(report.targetGain, 16000, abs_tol=1e-9)
    assert report.convenient is (report.scenario.gainReal >= 16000)
    assert isclose(report.gainShortfall, report.scenario.gainReal - 16000, abs_tol=1e-9)
    assert isclose(report.gainRatioGap, report.scenario.gainReal / 160000 - 0.1, abs_tol=1e-12)


def test_ratio_gap_undefined_without_loan(inputs):
    report = evaluate_horizon(inputs.model_copy(update={"down_payment_ratio": 1.0}), 10, min_gain_ratio=0.1)
    assert report.scenario.principal == 0
    assert report.gainRatioGap is None
    assert report.targetGain == 0


def test_gain_against_salary_and_price(inputs):
    report = evaluate_horizon(inputs, 30, salary=30000)
    gain = report.scenario.gainReal
    assert isclose(report.gainSalaryRatio, gain / 30000, abs_tol=1e-12)
    assert isclose(report.monthsOfWorkEquivalent, gain / 2500, abs_tol=1e-9)
    assert isclose(report.gainPriceRatio, gain / 200000, abs_tol=1e-12)
    assert isclose(report.monthsOfWorkEquivalent, -14.7560764, abs_tol=1e-5)


def test_salary_figures_need_a_salary(inputs):
    report = evaluate_horizon(inputs, 30)
    assert report.gainSalaryRatio is None
    assert report.monthsOfWorkEquivalent is None
    assert report.gainPriceRatio is not None

    free = evaluate_horizon(inputs.model_copy(update={"price": 0.0}), 10, salary=30000)
    assert free.gainPriceRatio is None
    assert free.gainSalaryRatio is not None


def test_compare_horizons_keeps_order(inputs):
    reports = compare_horizons(inputs, [30, 10], min_gain_ratio=0.1)
    assert [report.years for report in reports] == [30, 10]
    for report in reports:
        direct = calculate_scenario_gain(years=report.years, **inputs.model_dump())
        assert report.scenario == direct


def test_rate_grid_is_inclusive_and_drift_free():
    grid = rate_grid(0.02, 0.07, 0.0025)
    assert len(grid) == 21
    assert grid[0] == 0.02
    assert isclose(grid[-1], 0.07, abs_tol=1e-12)
    assert isclose(grid[10], 0.045, abs_tol=1e-15)


def test_rate_grid_degenerate_step():
    assert rate_grid(0.03, 0.07, 0.0) == [0.03]


def test_gain_sensitivity_covers_each_horizon(inputs):
    points = gain_sensitivity(inputs, [10, 30])
    assert len(points) == 21
    for point in points:
        assert sorted(point.gains) == [10, 30]
        assert all(isinstance(key, int) for key in point.gains)
    assert points[-1].gains[30] > points[0].gains[30]


def test_yearly_gains_match_single_scenarios(inputs):
    rows = yearly_gains(inputs, 12)
    assert [row.year for row in rows] == list(range(1, 13))
    direct = calculate_scenario_gain(years=7, **inputs.model_dump())
    assert rows[6].gainNominal == direct.gainNominal
    assert rows[6].gainReal == direct.gainReal


def test_payoff_years_can_be_infinite(inputs):
    broke = inputs.model_copy(update={"initial_capital": 0.0, "monthly_contribution": 0.0, "price": 100000})
    report = evaluate_horizon(broke, 10.02)
    assert math.isinf(report.payoffYears)
