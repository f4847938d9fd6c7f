"""Environment-driven settings and the scenario preset the UI starts from."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

ENV_PREFIX = "MORTGAGE_INVEST_"


class DefaultScenario(BaseModel):
    model_config = ConfigDict(extra="forbid")

    price: float = 150000.0
    downPaymentRatio: float = 0.15
    horizons: List[int] = Field(default_factory=lambda: [10, 30])
    annualRate: float = 0.03
    inflationRate: float = 0.02
    taxRate: float = 0.26
    grossReturnRate: float = 0.05
    monthlyContribution: float = 0.0
    investInitial: bool = True
    investMonthly: bool = True
    minGainRatio: float = 0.10
    salary: float = 30000.0

    @computed_field  # type: ignore[misc]
    @property
    def initialCapital(self) -> float:
        # cash kept by borrowing instead of paying in full
        return self.price * (1 - self.downPaymentRatio)


DEFAULT_SCENARIO = DefaultScenario()


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Flask config values, from the environment unless overridden."""
    config: Dict[str, Any] = {
        "CORS_ORIGINS": _split(os.environ.get(f"{ENV_PREFIX}CORS_ORIGINS", "http://localhost:5173")),
        "LOG_LEVEL": os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        "MAX_YEARS": int(os.environ.get(f"{ENV_PREFIX}MAX_YEARS", "40")),
    }
    if overrides:
        config.update(overrides)
    return config
