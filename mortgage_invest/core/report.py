from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from mortgage_invest.core.finance import (
    ScenarioResult,
    calculate_break_even_gross_return,
    calculate_payoff_time,
    calculate_scenario_gain,
)


class ScenarioInputs(BaseModel):
    """
    Everything a scenario needs except the horizon, which the report varies.
    Field names match the engine keyword arguments.
    """

    price: float
    down_payment_ratio: float
    annual_rate: float
    gross_return_rate: float
    tax_rate: float
    inflation_rate: float
    initial_capital: float
    monthly_contribution: float = 0.0
    invest_initial: bool = True
    invest_monthly: bool = True

    def scenario(self, years: float) -> ScenarioResult:
        return calculate_scenario_gain(years=years, **self.model_dump())

    def with_rate(self, gross_return_rate: float) -> "ScenarioInputs":
        return self.model_copy(update={"gross_return_rate": gross_return_rate})


class HorizonReport(BaseModel):
    years: float
    scenario: ScenarioResult
    breakEvenGrossReturn: float
    # math.inf when the loan is not covered within the horizon
    payoffYears: float
    targetGain: float
    convenient: bool
    gainShortfall: float
    gainRatioGap: Optional[float] = None
    # gain against the house price and against a net yearly salary
    gainPriceRatio: Optional[float] = None
    gainSalaryRatio: Optional[float] = None
    monthsOfWorkEquivalent: Optional[float] = None


class SensitivityPoint(BaseModel):
    grossReturnRate: float
    # real gain keyed by horizon (whole years)
    gains: Dict[int, float]


class YearlyGain(BaseModel):
    year: int
    gainNominal: float
    gainReal: float


def evaluate_horizon(
    params: ScenarioInputs,
    years: float,
    min_gain_ratio: float = 0.0,
    salary: float = 0.0,
) -> HorizonReport:
    """
    Full verdict for one horizon.

    The scenario is "convenient" when the real gain reaches the target, i.e.
    `min_gain_ratio` of the borrowed principal (or simply zero when no
    positive ratio is asked for).

    With a positive `salary` the real gain is also expressed as a share of it
    and as the months of work it is worth; otherwise those stay None.
    """
    scenario = params.scenario(years)
    engine_args = params.model_dump()

    break_even_args = dict(engine_args)
    break_even_args.pop("gross_return_rate")
    break_even = calculate_break_even_gross_return(years=years, **break_even_args)

    payoff_args = dict(engine_args)
    payoff_args.pop("inflation_rate")
    payoff = calculate_payoff_time(years=years, **payoff_args)

    target_ratio = min_gain_ratio if min_gain_ratio > 0 else 0.0
    target_gain = scenario.principal * target_ratio

    ratio_gap: Optional[float] = None
    if scenario.principal != 0:
        ratio_gap = scenario.gainReal / scenario.principal - target_ratio

    price_ratio: Optional[float] = None
    if params.price != 0:
        price_ratio = scenario.gainReal / params.price

    salary_ratio: Optional[float] = None
    months_of_work: Optional[float] = None
    if salary > 0:
        salary_ratio = scenario.gainReal / salary
        months_of_work = scenario.gainReal / (salary / 12)

    return HorizonReport(
        years=years,
        scenario=scenario,
        breakEvenGrossReturn=break_even,
        payoffYears=payoff,
        targetGain=target_gain,
        convenient=scenario.gainReal >= target_gain,
        gainShortfall=scenario.gainReal - target_gain,
        gainRatioGap=ratio_gap,
        gainPriceRatio=price_ratio,
        gainSalaryRatio=salary_ratio,
        monthsOfWorkEquivalent=months_of_work,
    )


def compare_horizons(
    params: ScenarioInputs,
    horizons: Sequence[float],
    min_gain_ratio: float = 0.0,
    salary: float = 0.0,
) -> List[HorizonReport]:
    return [evaluate_horizon(params, years, min_gain_ratio, salary) for years in horizons]


def rate_grid(rate_from: float, rate_to: float, rate_step: float) -> List[float]:
    """Evenly spaced returns from `rate_from` to `rate_to` inclusive (1e-9 slack)."""
    if rate_step <= 0 or rate_to < rate_from:
        return [rate_from]
    count = int((rate_to - rate_from + 1e-9) // rate_step) + 1
    return [rate_from + index * rate_step for index in range(count)]


def gain_sensitivity(
    params: ScenarioInputs,
    horizons: Sequence[int],
    rate_from: float = 0.02,
    rate_to: float = 0.07,
    rate_step: float = 0.0025,
) -> List[SensitivityPoint]:
    """Real gain of every horizon across a grid of gross returns."""
    points: List[SensitivityPoint] = []
    for rate in rate_grid(rate_from, rate_to, rate_step):
        shifted = params.with_rate(rate)
        points.append(
            SensitivityPoint(
                grossReturnRate=rate,
                gains={int(years): shifted.scenario(years).gainReal for years in horizons},
            )
        )
    return points


def yearly_gains(params: ScenarioInputs, max_years: int) -> List[YearlyGain]:
    """Gain if the comparison stopped after 1, 2, ... max_years years."""
    rows: List[YearlyGain] = []
    for year in range(1, max_years + 1):
        result = params.scenario(year)
        rows.append(YearlyGain(year=year, gainNominal=result.gainNominal, gainReal=result.gainReal))
    return rows


__all__ = [
    "ScenarioInputs",
    "HorizonReport",
    "SensitivityPoint",
    "YearlyGain",
    "evaluate_horizon",
    "compare_horizons",
    "rate_grid",
    "gain_sensitivity",
    "yearly_gains",
]
