from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from mortgage_invest.app import create_app


@pytest.fixture()
def app():
    return create_app({"TESTING": True, "MAX_YEARS": 40})


@pytest.fixture()
def client(app) -> FlaskClient:
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def base_scenario() -> dict:
    """200k house, 20% down, 5% loan over 30 years, 40k kept and invested."""
    return {
        "price": 200000,
        "down_payment_ratio": 0.2,
        "annual_rate": 0.05,
        "years": 30,
        "gross_return_rate": 0.05,
        "tax_rate": 0.2,
        "inflation_rate": 0.02,
        "initial_capital": 40000,
        "monthly_contribution": 100,
    }
