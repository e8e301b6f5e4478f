"""Exception hierarchy for rate fetching and currency conversion."""
from __future__ import annotations


class FXError(RuntimeError):
    """Base class for every error raised by the conversion service."""


class FetchError(FXError):
    """The reference rate document could not be obtained or decoded."""


class NetworkError(FetchError):
    pass


class UnexpectedStatusError(FetchError):
    def __init__(self, status_code: int, url: str | None = None) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Rate source returned status {status_code}, expected 200")


class ParseError(FetchError):
    pass


class ConfigError(FXError):
    """An environment setting for the rate source is unusable."""


class ConversionError(FXError):
    """The request could not be served from the fetched rates."""


class InvalidAmountError(ConversionError, ValueError):
    def __init__(self, amount: float, message: str | None = None) -> None:
        self.amount = amount
        super().__init__(message or f"Cannot convert amount: {amount}")


class NegativeValueError(InvalidAmountError):
    def __init__(self, amount: float) -> None:
        super().__init__(amount, f"Cannot convert negative amount: {amount}")


class UnknownRateError(ConversionError):
    """No rate recorded for a (date, currency) pair.

    ``side`` is ``"from"`` or ``"to"`` depending on which leg of the
    conversion failed.
    """

    def __init__(self, side: str, date: str, currency: str) -> None:
        self.side = side
        self.date = date
        self.currency = currency
        super().__init__(f"No rate to convert {side} {currency!r} on {date!r}")
