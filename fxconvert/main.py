"""FastAPI entrypoint for the ECB currency converter."""
from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware

from . import forex
from .errors import ConfigError, FetchError, InvalidAmountError, UnknownRateError
from .etl import ecb, normalize
from .schemas import ConversionResult, ErrorDetail

load_dotenv()

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

app = FastAPI(title="ECB Currency Converter")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

SOURCE = "ecb"


def _parse_date(raw: str) -> str:
    day = normalize.parse_iso_date(raw)
    if day is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date: {raw}")
    return day


def _parse_amount(raw: float) -> float:
    # JSON has no spelling for nan or infinity
    if not math.isfinite(raw):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid amount: {raw}")
    return raw


def _error_detail(exc: Exception, side: str | None = None) -> Dict[str, Any]:
    return ErrorDetail(error=type(exc).__name__, message=str(exc), side=side).model_dump()


@app.on_event("startup")
def check_configuration() -> None:
    ecb.check_config()


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


@app.get("/api/convert")
def convert(
    amount: float = Query(..., description="Amount in the source currency"),
    from_currency: str = Query(..., alias="from", description="Source currency code, e.g. USD"),
    to_currency: str = Query(..., alias="to", description="Target currency code, e.g. CHF"),
    date: str = Query(..., description="YYYY-MM-DD rate date"),
) -> Dict[str, Any]:
    amount = _parse_amount(amount)
    day = _parse_date(date)
    try:
        converted = forex.convert_currency(amount, from_currency, to_currency, day)
    except InvalidAmountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_error_detail(exc)) from exc
    except UnknownRateError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_detail(exc, side=exc.side),
        ) from exc
    except FetchError as exc:
        LOGGER.error("Rate fetch failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=_error_detail(exc)) from exc
    except ConfigError as exc:
        LOGGER.error("Rate source misconfigured: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=_error_detail(exc)) from exc

    if not math.isfinite(converted):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Converted amount out of range for {amount} {from_currency}",
        )

    result = ConversionResult(
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        date=day,
        converted=converted,
        reference_currency=forex.REFERENCE_CURRENCY,
        source=SOURCE,
    )
    return result.model_dump()
