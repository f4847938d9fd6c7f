from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

BREAK_EVEN_MAX_RETURN = 0.20
BISECTION_STEPS = 60


# -----------------------------
# Result records
# -----------------------------


class MortgageCosts(BaseModel):
    payment: float
    totalPaid: float
    interestNominal: float
    interestReal: float


class ScenarioResult(BaseModel):
    principal: float
    initialCapital: float
    payment: float
    fvNominal: float
    fvReal: float
    interestNominal: float
    interestReal: float
    gainNominal: float
    gainReal: float


class AmortizationRow(BaseModel):
    """One month of the loan ledger, paired with the money set aside so far.

    `available` is what the invested + saved pots are worth after this month,
    i.e. what could be used to close the loan right now.
    """

    month: int
    interest: float
    capital: float
    balance: float
    paidPrincipal: float
    available: float


class AmortizationSchedule(BaseModel):
    rows: List[AmortizationRow]
    # first month where available >= balance, None if it never happens
    payoffMonth: Optional[int] = None


# -----------------------------
# Cash-flow accumulator
# -----------------------------


class Allocation(str, Enum):
    INVESTED = "invested"
    SAVED = "saved"

    @classmethod
    def from_flag(cls, invest: bool) -> "Allocation":
        return cls.INVESTED if invest else cls.SAVED


@dataclass
class Accumulator:
    """Two pots: one compounding at the net monthly rate, one kept as cash.

    Each cash flow (the initial lump sum, the monthly contribution) is routed
    to exactly one pot by its Allocation.
    """

    monthly_rate: float
    monthly: float
    monthly_allocation: Allocation
    invested: float = 0.0
    saved: float = 0.0

    @classmethod
    def seed(
        cls,
        initial: float,
        monthly: float,
        monthly_rate: float,
        invest_initial: bool = True,
        invest_monthly: bool = True,
    ) -> "Accumulator":
        pot = cls(
            monthly_rate=monthly_rate,
            monthly=monthly,
            monthly_allocation=Allocation.from_flag(invest_monthly),
        )
        if Allocation.from_flag(invest_initial) is Allocation.INVESTED:
            pot.invested = initial
        else:
            pot.saved = initial
        return pot

    def step(self) -> float:
        """Advance one month and return the combined value.

        Growth is applied first, then the contribution is added, so money
        contributed in month m only starts compounding in month m + 1.
        """
        self.invested = self.invested * (1 + self.monthly_rate)
        if self.monthly_allocation is Allocation.INVESTED:
            self.invested += self.monthly
        else:
            self.saved += self.monthly
        return self.total

    @property
    def total(self) -> float:
        return self.invested + self.saved


def months_in(years: float) -> int:
    """Whole months in `years`, rounding halves up."""
    return int(math.floor(years * 12 + 0.5))


def net_monthly_return(gross_return: float, tax_rate: float) -> float:
    return gross_return * (1 - tax_rate) / 12


# -----------------------------
# Engine
# -----------------------------


def calculate_monthly_payment(principal: float, annual_rate: float, years: float) -> float:
    """Fixed annuity payment: P * i / (1 - (1 + i)^-n).

    Zero principal pays nothing; zero rate is straight-line P / n.
    """
    if principal == 0:
        return 0.0
    monthly_rate = annual_rate / 12
    total_months = years * 12
    if monthly_rate == 0:
        return principal / total_months
    return principal * monthly_rate / (1 - (1 + monthly_rate) ** -total_months)


def calculate_investment_future_value(
    initial: float = 0.0,
    monthly: float = 0.0,
    gross_return: float = 0.0,
    tax_rate: float = 0.0,
    years: float = 0.0,
    invest_initial: bool = True,
    invest_monthly: bool = True,
) -> float:
    """Value of the lump sum plus monthly contributions after `years`.

    Returns are taxed at `tax_rate` and compounded monthly at the net rate.
    Flows that are not invested are simply kept, without growth.
    """
    pot = Accumulator.seed(
        initial=initial,
        monthly=monthly,
        monthly_rate=net_monthly_return(gross_return, tax_rate),
        invest_initial=invest_initial,
        invest_monthly=invest_monthly,
    )
    for _ in range(months_in(years)):
        pot.step()
    return pot.total


def calculate_mortgage_costs(
    principal: float,
    annual_rate: float,
    years: float,
    inflation: float,
) -> MortgageCosts:
    """Total and interest cost of a fully amortized loan, nominal and real.

    Real interest discounts every payment to today at the monthly inflation
    rate (one term per month, no closed form) and subtracts the principal.
    """
    total_months = years * 12
    monthly_inflation = inflation / 12
    payment = calculate_monthly_payment(principal, annual_rate, years)
    total_paid = payment * total_months
    interest_nominal = total_paid - principal

    present_value = 0.0
    for month in range(1, int(total_months) + 1):
        present_value += payment / (1 + monthly_inflation) ** month

    return MortgageCosts(
        payment=payment,
        totalPaid=total_paid,
        interestNominal=interest_nominal,
        interestReal=present_value - principal,
    )


def calculate_scenario_gain(
    price: float,
    down_payment_ratio: float,
    annual_rate: float,
    years: float,
    gross_return_rate: float,
    tax_rate: float,
    inflation_rate: float,
    initial_capital: float,
    monthly_contribution: float = 0.0,
    invest_initial: bool = True,
    invest_monthly: bool = True,
) -> ScenarioResult:
    """Borrow and invest vs. pay cash, over one horizon.

    gain = what the investments are worth
           - what was put into them
           - what the loan cost in interest

    computed both in nominal terms and in today's money (real).
    """
    principal = price * (1 - down_payment_ratio)
    fv_nominal = calculate_investment_future_value(
        initial=initial_capital,
        monthly=monthly_contribution,
        gross_return=gross_return_rate,
        tax_rate=tax_rate,
        years=years,
        invest_initial=invest_initial,
        invest_monthly=invest_monthly,
    )
    costs = calculate_mortgage_costs(principal, annual_rate, years, inflation_rate)
    fv_real = fv_nominal / (1 + inflation_rate) ** years

    contributions = (initial_capital if invest_initial else 0.0) + (
        monthly_contribution * years * 12 if invest_monthly else 0.0
    )

    return ScenarioResult(
        principal=principal,
        initialCapital=initial_capital,
        payment=costs.payment,
        fvNominal=fv_nominal,
        fvReal=fv_real,
        interestNominal=costs.interestNominal,
        interestReal=costs.interestReal,
        gainNominal=fv_nominal - contributions - costs.interestNominal,
        gainReal=fv_real - contributions - costs.interestReal,
    )


def calculate_break_even_gross_return(
    price: float,
    down_payment_ratio: float,
    annual_rate: float,
    years: float,
    tax_rate: float,
    inflation_rate: float,
    initial_capital: float,
    monthly_contribution: float = 0.0,
    invest_initial: bool = True,
    invest_monthly: bool = True,
) -> float:
    """Gross annual return in [0, 20%] at which the real gain is zero.

    Plain bisection with a fixed step count. It assumes the real gain does not
    decrease as the return grows; if no root lies in the interval the result
    sticks to the nearest bound.
    """
    lower, upper = 0.0, BREAK_EVEN_MAX_RETURN
    for _ in range(BISECTION_STEPS):
        mid = (lower + upper) / 2
        gain = calculate_scenario_gain(
            price=price,
            down_payment_ratio=down_payment_ratio,
            annual_rate=annual_rate,
            years=years,
            gross_return_rate=mid,
            tax_rate=tax_rate,
            inflation_rate=inflation_rate,
            initial_capital=initial_capital,
            monthly_contribution=monthly_contribution,
            invest_initial=invest_initial,
            invest_monthly=invest_monthly,
        ).gainReal
        if gain >= 0:
            upper = mid
        else:
            lower = mid

    result = (lower + upper) / 2
    logger.debug("break-even gross return for %s years: %.10f", years, result)
    return result


def calculate_mortgage_balance(
    principal: float,
    annual_rate: float,
    years: float,
    after_years: float,
) -> float:
    """Outstanding balance after `after_years` of a `years`-long loan, never negative."""
    payment = calculate_monthly_payment(principal, annual_rate, years)
    monthly_rate = annual_rate / 12
    months_elapsed = months_in(after_years)

    if monthly_rate == 0:
        return max(0.0, principal - payment * months_elapsed)

    growth = (1 + monthly_rate) ** months_elapsed
    balance = principal * growth - payment * (growth - 1) / monthly_rate
    return max(0.0, balance)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    years: float,
    initial: float = 0.0,
    monthly: float = 0.0,
    gross_return: float = 0.0,
    tax_rate: float = 0.0,
    invest_initial: bool = True,
    invest_monthly: bool = True,
) -> AmortizationSchedule:
    """
    Month-by-month ledger of the loan next to the money set aside.

    Per month:
      1) interest = balance * monthly rate, capital = payment - interest
      2) balance drops by capital (floored at zero), paidPrincipal grows by it
      3) the savings pot takes one step (same rule as the investment projector)
      4) the first month where the pot covers the balance is the payoff month
    """
    payment = calculate_monthly_payment(principal, annual_rate, years)
    monthly_rate = annual_rate / 12
    pot = Accumulator.seed(
        initial=initial,
        monthly=monthly,
        monthly_rate=net_monthly_return(gross_return, tax_rate),
        invest_initial=invest_initial,
        invest_monthly=invest_monthly,
    )

    balance = principal
    paid_principal = 0.0
    payoff_month: Optional[int] = None
    rows: List[AmortizationRow] = []

    for month in range(1, months_in(years) + 1):
        interest = balance * monthly_rate
        capital = payment - interest
        balance = max(0.0, balance - capital)
        paid_principal += capital

        available = pot.step()
        if payoff_month is None and available >= balance:
            payoff_month = month

        rows.append(
            AmortizationRow(
                month=month,
                interest=interest,
                capital=capital,
                balance=balance,
                paidPrincipal=paid_principal,
                available=available,
            )
        )

    return AmortizationSchedule(rows=rows, payoffMonth=payoff_month)


def calculate_payoff_time(
    price: float,
    down_payment_ratio: float,
    annual_rate: float,
    years: float,
    gross_return_rate: float,
    tax_rate: float,
    initial_capital: float,
    monthly_contribution: float = 0.0,
    invest_initial: bool = True,
    invest_monthly: bool = True,
) -> float:
    """Years until the money set aside could close the loan.

    Returns math.inf when it is still short at the end of the term.
    """
    principal = price * (1 - down_payment_ratio)

    def saved_at(elapsed: float) -> float:
        return calculate_investment_future_value(
            initial=initial_capital,
            monthly=monthly_contribution,
            gross_return=gross_return_rate,
            tax_rate=tax_rate,
            years=elapsed,
            invest_initial=invest_initial,
            invest_monthly=invest_monthly,
        )

    def balance_at(elapsed: float) -> float:
        return calculate_mortgage_balance(principal, annual_rate, years, after_years=elapsed)

    if saved_at(years) < balance_at(years):
        logger.debug("savings never cover the balance within %s years", years)
        return math.inf

    lower, upper = 0.0, float(years)
    for _ in range(BISECTION_STEPS):
        mid = (lower + upper) / 2
        if saved_at(mid) >= balance_at(mid):
            upper = mid
        else:
            lower = mid

    result = (lower + upper) / 2
    logger.debug("payoff time for %s years: %.6f", years, result)
    return result


__all__ = [
    "Allocation",
    "Accumulator",
    "MortgageCosts",
    "ScenarioResult",
    "AmortizationRow",
    "AmortizationSchedule",
    "months_in",
    "net_monthly_return",
    "calculate_monthly_payment",
    "calculate_investment_future_value",
    "calculate_mortgage_costs",
    "calculate_scenario_gain",
    "calculate_break_even_gross_return",
    "calculate_mortgage_balance",
    "generate_amortization_schedule",
    "calculate_payoff_time",
]
