"""HTTP routes for the Flask API."""

import logging
from http import HTTPStatus
from typing import Any, Dict, Type, TypeVar

from flask import Blueprint, current_app, jsonify, request
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import BadRequest

from mortgage_invest.config import DEFAULT_SCENARIO
from mortgage_invest.core.finance import (
    calculate_break_even_gross_return,
    calculate_investment_future_value,
    calculate_monthly_payment,
    calculate_mortgage_balance,
    calculate_mortgage_costs,
    calculate_payoff_time,
    generate_amortization_schedule,
)
from mortgage_invest.core.report import compare_horizons, gain_sensitivity, yearly_gains
from mortgage_invest.schemas.health import HealthResponse
from mortgage_invest.schemas.scenario import (
    AmortizationRequest,
    AmortizationResponse,
    BalanceRequest,
    BalanceResponse,
    BreakEvenResponse,
    ComparisonRequest,
    ComparisonResponse,
    HorizonResponse,
    InvestmentRequest,
    InvestmentResponse,
    MortgageCostsRequest,
    PaymentRequest,
    PaymentResponse,
    PayoffResponse,
    ScenarioRequest,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    return (
        jsonify({"detail": exc.errors(include_url=False, include_context=False)}),
        HTTPStatus.UNPROCESSABLE_ENTITY,
    )


@api_bp.errorhandler(BadRequest)
def _handle_bad_request(exc: BadRequest):
    return jsonify({"detail": exc.description}), HTTPStatus.BAD_REQUEST


def _parse(model: Type[RequestT]) -> RequestT:
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    return model.model_validate(
        raw_payload,
        context={"max_years": current_app.config["MAX_YEARS"]},
    )


def _respond(payload: BaseModel) -> Any:
    return jsonify(payload.model_dump(mode="json"))


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = HealthResponse(maxYears=current_app.config["MAX_YEARS"])
    return jsonify(response.model_dump())


@api_bp.get("/defaults")
def defaults() -> Any:
    """Scenario preset the wizard starts from."""
    return _respond(DEFAULT_SCENARIO)


@api_bp.post("/calc/payment")
def payment() -> Any:
    payload = _parse(PaymentRequest)
    logger.info("payment: principal=%s rate=%s years=%s", payload.principal, payload.annualRate, payload.years)
    result = calculate_monthly_payment(payload.principal, payload.annualRate, payload.years)
    return _respond(PaymentResponse(payment=result))


@api_bp.post("/calc/investment")
def investment() -> Any:
    payload = _parse(InvestmentRequest)
    logger.info("investment: initial=%s monthly=%s years=%s", payload.initial, payload.monthly, payload.years)
    result = calculate_investment_future_value(
        initial=payload.initial,
        monthly=payload.monthly,
        gross_return=payload.grossReturn,
        tax_rate=payload.taxRate,
        years=payload.years,
        invest_initial=payload.investInitial,
        invest_monthly=payload.investMonthly,
    )
    return _respond(InvestmentResponse(futureValue=result))


@api_bp.post("/calc/mortgage-costs")
def mortgage_costs() -> Any:
    payload = _parse(MortgageCostsRequest)
    logger.info("mortgage costs: principal=%s years=%s", payload.principal, payload.years)
    costs = calculate_mortgage_costs(
        principal=payload.principal,
        annual_rate=payload.annualRate,
        years=payload.years,
        inflation=payload.inflation,
    )
    return _respond(costs)


@api_bp.post("/calc/scenario")
def scenario() -> Any:
    payload = _parse(ScenarioRequest)
    logger.info("scenario: price=%s years=%s", payload.price, payload.years)
    return _respond(payload.to_inputs().scenario(payload.years))


@api_bp.post("/calc/break-even")
def break_even() -> Any:
    payload = _parse(ScenarioRequest)
    logger.info("break-even: price=%s years=%s", payload.price, payload.years)
    engine_args = payload.to_inputs().model_dump(exclude={"gross_return_rate"})
    result = calculate_break_even_gross_return(years=payload.years, **engine_args)
    return _respond(BreakEvenResponse(breakEvenGrossReturn=result))


@api_bp.post("/calc/balance")
def balance() -> Any:
    payload = _parse(BalanceRequest)
    logger.info("balance: principal=%s years=%s after=%s", payload.principal, payload.years, payload.afterYears)
    result = calculate_mortgage_balance(
        principal=payload.principal,
        annual_rate=payload.annualRate,
        years=payload.years,
        after_years=payload.afterYears,
    )
    return _respond(BalanceResponse(balance=result))


@api_bp.post("/calc/amortization")
def amortization() -> Any:
    payload = _parse(AmortizationRequest)
    logger.info("amortization: principal=%s years=%s", payload.principal, payload.years)
    schedule = generate_amortization_schedule(
        principal=payload.principal,
        annual_rate=payload.annualRate,
        years=payload.years,
        initial=payload.initial,
        monthly=payload.monthly,
        gross_return=payload.grossReturn,
        tax_rate=payload.taxRate,
        invest_initial=payload.investInitial,
        invest_monthly=payload.investMonthly,
    )
    return _respond(AmortizationResponse(rows=schedule.rows, payoffMonth=schedule.payoffMonth))


@api_bp.post("/calc/payoff")
def payoff() -> Any:
    payload = _parse(ScenarioRequest)
    logger.info("payoff: price=%s years=%s", payload.price, payload.years)
    engine_args = payload.to_inputs().model_dump(exclude={"inflation_rate"})
    result = calculate_payoff_time(years=payload.years, **engine_args)
    return _respond(PayoffResponse.from_years(result))


@api_bp.post("/calc/comparison")
def comparison() -> Any:
    """Side-by-side verdict for each horizon, plus optional chart series."""
    payload = _parse(ComparisonRequest)
    logger.info("comparison: price=%s horizons=%s", payload.price, payload.horizons)
    params = payload.to_inputs()
    reports = compare_horizons(params, payload.horizons, payload.minGainRatio, payload.salary)

    response = ComparisonResponse(horizons=[HorizonResponse.from_report(report) for report in reports])
    if payload.includeSensitivity:
        response.sensitivity = gain_sensitivity(params, payload.horizons)
    if payload.includeYearly:
        response.yearly = yearly_gains(params, max(payload.horizons))
    return _respond(response)


__all__ = ["api_bp"]
