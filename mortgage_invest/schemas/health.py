"""Pydantic schema for the health-check endpoint."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    message: str = "pong"
    maxYears: int
