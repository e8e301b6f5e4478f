"""Currency conversion through the ECB daily euro reference rates."""
from __future__ import annotations

import logging
import math
from typing import Dict, NamedTuple, Optional

from .errors import InvalidAmountError, NegativeValueError, UnknownRateError
from .etl import ecb, normalize

LOGGER = logging.getLogger(__name__)

REFERENCE_CURRENCY = "EUR"


class RateKey(NamedTuple):
    date: str
    currency: str


class RateStore:
    """Rates keyed by (date, currency), expressed as units per one EUR."""

    def __init__(self) -> None:
        self._rates: Dict[RateKey, float] = {}

    def set(self, date: str, currency: str, rate: float) -> None:
        self._rates[RateKey(date, currency)] = float(rate)

    def get(self, date: str, currency: str) -> Optional[float]:
        return self._rates.get(RateKey(date, currency))

    def fetch(self, url: Optional[str] = None, *, timeout: Optional[float] = None) -> int:
        return ecb.fetch_into(self, url, timeout=timeout)

    def __len__(self) -> int:
        return len(self._rates)


def convert_from_store(
    amount: float,
    from_currency: str,
    to_currency: str,
    date: str,
    store: RateStore,
) -> float:
    """Convert ``amount`` via the reference currency using rates in ``store``.

    Identical currencies return ``amount`` untouched, without a lookup and
    without rounding. Every other result is rounded to cents; an overflow
    to infinity is returned as such.
    """

    if math.isnan(amount):
        raise InvalidAmountError(amount, "Cannot convert an amount that is not a number")
    if amount < 0:
        raise NegativeValueError(amount)
    if from_currency == to_currency:
        return amount

    value = float(amount)
    if from_currency != REFERENCE_CURRENCY:
        rate = store.get(date, from_currency)
        if rate is None:
            raise UnknownRateError("from", date, from_currency)
        value /= rate
    if to_currency != REFERENCE_CURRENCY:
        rate = store.get(date, to_currency)
        if rate is None:
            raise UnknownRateError("to", date, to_currency)
        value *= rate

    return normalize.round_cents(value)


def convert_currency(
    amount: float,
    from_currency: str,
    to_currency: str,
    date: str,
    *,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> float:
    """Convert ``amount`` between currencies at the ECB rates of ``date``.

    Rates are downloaded on every call; fetch and conversion errors are
    raised to the caller unchanged.
    """

    store = RateStore()
    store.fetch(url, timeout=timeout)
    converted = convert_from_store(amount, from_currency, to_currency, date, store)
    LOGGER.info("Converted %s %s to %s %s on %s", amount, from_currency, converted, to_currency, date)
    return converted
