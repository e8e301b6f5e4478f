"""Pydantic schemas used for response validation."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class ConversionResult(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    date: str
    converted: float
    reference_currency: str
    source: str


class ErrorDetail(BaseModel):
    error: str
    message: str
    side: Optional[str] = None
