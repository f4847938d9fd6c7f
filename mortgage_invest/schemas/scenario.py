"""Data contracts for the mortgage vs. investment endpoints."""

from __future__ import annotations

import math
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from mortgage_invest.core.finance import AmortizationRow, MortgageCosts, ScenarioResult
from mortgage_invest.core.report import HorizonReport, ScenarioInputs, SensitivityPoint, YearlyGain


def _check_years(value: float, info: ValidationInfo) -> float:
    """Reject horizons above the MAX_YEARS passed in the validation context."""
    max_years = (info.context or {}).get("max_years")
    if max_years is not None and value > max_years:
        raise ValueError(f"years must be at most {max_years}")
    return value


Horizon = Annotated[float, Field(gt=0), AfterValidator(_check_years)]
Elapsed = Annotated[float, Field(ge=0), AfterValidator(_check_years)]


# -----------------------------
# Requests
# -----------------------------


class PaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    principal: float = Field(..., ge=0)
    annualRate: float = Field(..., ge=0, le=1)
    years: Horizon


class InvestmentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    initial: float = Field(0.0, ge=0)
    monthly: float = Field(0.0, ge=0)
    grossReturn: float = Field(0.0, ge=0, le=1)
    taxRate: float = Field(0.0, ge=0, lt=1)
    years: Elapsed = 0.0
    investInitial: bool = True
    investMonthly: bool = True


class MortgageCostsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    principal: float = Field(..., ge=0)
    annualRate: float = Field(..., ge=0, le=1)
    years: Horizon
    inflation: float = Field(0.0, ge=0, le=1)


class BalanceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    principal: float = Field(..., ge=0)
    annualRate: float = Field(..., ge=0, le=1)
    years: Horizon
    afterYears: Elapsed


class AmortizationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    principal: float = Field(..., ge=0)
    annualRate: float = Field(..., ge=0, le=1)
    years: Horizon
    initial: float = Field(0.0, ge=0)
    monthly: float = Field(0.0, ge=0)
    grossReturn: float = Field(0.0, ge=0, le=1)
    taxRate: float = Field(0.0, ge=0, lt=1)
    investInitial: bool = True
    investMonthly: bool = True


class ScenarioFields(BaseModel):
    """Shared price / loan / investment inputs, in the UI's camelCase."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    price: float = Field(..., ge=0)
    downPaymentRatio: float = Field(..., ge=0, le=1)
    annualRate: float = Field(..., ge=0, le=1)
    grossReturnRate: float = Field(0.0, ge=0, le=1)
    taxRate: float = Field(0.0, ge=0, lt=1)
    inflationRate: float = Field(0.0, ge=0, le=1)
    initialCapital: float = Field(0.0, ge=0)
    monthlyContribution: float = Field(0.0, ge=0)
    investInitial: bool = True
    investMonthly: bool = True

    def to_inputs(self) -> ScenarioInputs:
        return ScenarioInputs(
            price=self.price,
            down_payment_ratio=self.downPaymentRatio,
            annual_rate=self.annualRate,
            gross_return_rate=self.grossReturnRate,
            tax_rate=self.taxRate,
            inflation_rate=self.inflationRate,
            initial_capital=self.initialCapital,
            monthly_contribution=self.monthlyContribution,
            invest_initial=self.investInitial,
            invest_monthly=self.investMonthly,
        )


class ScenarioRequest(ScenarioFields):
    years: Horizon


class ComparisonRequest(ScenarioFields):
    horizons: List[int] = Field(..., min_length=1, max_length=4)
    minGainRatio: float = Field(0.0, ge=0, le=1)
    # net yearly salary the gain is measured against; 0 leaves the salary figures out
    salary: float = Field(0.0, ge=0)
    includeSensitivity: bool = False
    includeYearly: bool = False

    @field_validator("horizons")
    @classmethod
    def check_horizons(cls, value: List[int], info: ValidationInfo) -> List[int]:
        for years in value:
            if years < 1:
                raise ValueError("horizons must be at least 1 year")
            _check_years(years, info)
        return value


# -----------------------------
# Responses
# -----------------------------


class PaymentResponse(BaseModel):
    payment: float


class InvestmentResponse(BaseModel):
    futureValue: float


class BalanceResponse(BaseModel):
    balance: float


class BreakEvenResponse(BaseModel):
    breakEvenGrossReturn: float


class PayoffResponse(BaseModel):
    # JSON has no Infinity: a loan not covered within the term is payoffYears=None
    payoffYears: Optional[float]
    paysOff: bool

    @classmethod
    def from_years(cls, years: float) -> "PayoffResponse":
        if math.isinf(years):
            return cls(payoffYears=None, paysOff=False)
        return cls(payoffYears=years, paysOff=True)


class AmortizationResponse(BaseModel):
    rows: List[AmortizationRow]
    payoffMonth: Optional[int]


class HorizonResponse(BaseModel):
    years: float
    scenario: ScenarioResult
    breakEvenGrossReturn: float
    payoff: PayoffResponse
    targetGain: float
    convenient: bool
    gainShortfall: float
    gainRatioGap: Optional[float]
    gainPriceRatio: Optional[float]
    gainSalaryRatio: Optional[float]
    monthsOfWorkEquivalent: Optional[float]

    @classmethod
    def from_report(cls, report: HorizonReport) -> "HorizonResponse":
        data: Dict[str, Any] = report.model_dump(exclude={"payoffYears"})
        data["payoff"] = PayoffResponse.from_years(report.payoffYears)
        return cls.model_validate(data)


class ComparisonResponse(BaseModel):
    horizons: List[HorizonResponse]
    sensitivity: Optional[List[SensitivityPoint]] = None
    yearly: Optional[List[YearlyGain]] = None


__all__ = [
    "PaymentRequest",
    "InvestmentRequest",
    "MortgageCostsRequest",
    "BalanceRequest",
    "AmortizationRequest",
    "ScenarioFields",
    "ScenarioRequest",
    "ComparisonRequest",
    "PaymentResponse",
    "InvestmentResponse",
    "MortgageCosts",
    "BalanceResponse",
    "BreakEvenResponse",
    "PayoffResponse",
    "AmortizationResponse",
    "ScenarioResult",
    "HorizonResponse",
    "ComparisonResponse",
]
