"""Fetch and parse the ECB euro foreign exchange reference rates."""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from http import client
from typing import Iterable, List, Optional
from urllib import error, request
from xml.etree import ElementTree

from ..errors import ConfigError, NetworkError, ParseError, UnexpectedStatusError
from . import normalize

LOGGER = logging.getLogger(__name__)

DEFAULT_RATES_URL = "https://www.ecb.europa.eu/stats/eurofxref/eurofxref-hist-90d.xml"
DEFAULT_TIMEOUT = 30.0


@dataclass
class Record:
    date: str
    currency: str
    rate: float


def _rates_url() -> str:
    return os.getenv("FX_RATES_URL") or DEFAULT_RATES_URL


def check_config() -> None:
    """Raise ``ConfigError`` early when the environment settings are unusable."""

    _timeout()


def _timeout() -> float:
    raw = os.getenv("FX_HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"FX_HTTP_TIMEOUT must be a number of seconds, got {raw!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"FX_HTTP_TIMEOUT must be a positive number, got {raw!r}")
    return value


def _request(url: str, timeout: float) -> bytes:
    try:
        req = request.Request(url, headers={"Accept": "application/xml"})
        with request.urlopen(req, timeout=timeout) as resp:
            status = resp.status
            if status != 200:
                LOGGER.warning("Rate source %s answered HTTP %s", url, status)
                raise UnexpectedStatusError(status, url)
            return resp.read()
    except error.HTTPError as exc:
        LOGGER.warning("Rate source %s answered HTTP %s", url, exc.code)
        raise UnexpectedStatusError(exc.code, url) from exc
    except (error.URLError, OSError, client.HTTPException, ValueError) as exc:
        # HTTPException covers bodies cut short mid-read; ValueError a malformed URL
        LOGGER.warning("Rate source %s unreachable: %s", url, exc)
        raise NetworkError(f"Failed to GET currency data from {url}: {exc}") from exc


def _local_name(tag: str) -> str:
    # ElementTree spells namespaced tags as "{uri}Cube"
    return tag.rsplit("}", 1)[-1]


def _cubes(element: ElementTree.Element) -> Iterable[ElementTree.Element]:
    return (child for child in element if _local_name(child.tag) == "Cube")


def parse_rates(payload: bytes) -> List[Record]:
    """Decode an ECB ``Envelope > Cube > Cube[@time] > Cube[@currency,@rate]`` document."""

    try:
        root = ElementTree.fromstring(payload)
    except ElementTree.ParseError as exc:
        raise ParseError(f"Failed to decode XML: {exc}") from exc

    container = next(iter(_cubes(root)), None)
    if container is None:
        raise ParseError("XML document has no Cube container")

    records: List[Record] = []
    for block in _cubes(container):
        raw_date = block.get("time")
        day = normalize.parse_iso_date(raw_date)
        if day is None:
            raise ParseError(f"Invalid or missing time attribute: {raw_date!r}")
        for entry in _cubes(block):
            currency = (entry.get("currency") or "").strip()
            if not currency:
                raise ParseError(f"Rate entry without currency on {day}")
            rate = normalize.parse_rate(entry.get("rate"))
            if rate is None:
                raise ParseError(f"Invalid rate {entry.get('rate')!r} for {currency} on {day}")
            records.append(Record(date=day, currency=currency, rate=rate))
    return records


def load(store, records: Iterable[Record]) -> int:
    written = 0
    for record in records:
        store.set(record.date, record.currency, record.rate)
        written += 1
    return written


def fetch_into(store, url: Optional[str] = None, *, timeout: Optional[float] = None) -> int:
    """Download the rate document and populate ``store`` in place.

    Returns the number of entries written. Transport failures raise
    ``NetworkError``, non-200 answers ``UnexpectedStatusError`` and
    malformed documents ``ParseError``.
    """

    url = url or _rates_url()
    timeout = timeout if timeout is not None else _timeout()
    payload = _request(url, timeout)
    records = _parse_or_log(payload, url)
    if not records:
        LOGGER.warning("Rate source %s returned no rates", url)
    written = load(store, records)
    LOGGER.debug("Loaded %s rates from %s", written, url)
    return written


def _parse_or_log(payload: bytes, url: str) -> List[Record]:
    try:
        return parse_rates(payload)
    except ParseError as exc:
        LOGGER.warning("Rate document from %s rejected: %s", url, exc)
        raise
