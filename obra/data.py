from __future__ import annotations

import io
import logging
import warnings
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

import pandas as pd
import requests

from obra.config import FETCH_TIMEOUT_DEFAULT


logger = logging.getLogger(__name__)

RawRow = Dict[str, str]


# ---------------- Errors ----------------
class LoadError(Exception):
    """The remote sheet could not produce usable rows."""

    kind = "load_error"


class TransportError(LoadError):
    kind = "transport_error"


class ParseError(LoadError):
    kind = "parse_error"


class EmptySource(LoadError):
    kind = "empty_source"


# ---------------- Loaders ----------------
def parse_csv_text(text: str) -> List[RawRow]:
    """Parse CSV text into header-keyed rows, every cell kept as text.

    The first line is the header (case and whitespace preserved) and blank
    lines are skipped. Trailing delimiters never shift values onto the wrong
    header, and a line with more fields than the header is skipped with a
    warning instead of failing the whole sheet. Raises ``EmptySource`` when
    no data row remains.
    """
    if not text or not text.strip():
        raise EmptySource("CSV body is empty")
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            df = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                index_col=False,
                on_bad_lines="warn",
            )
    except pd.errors.EmptyDataError as exc:
        raise EmptySource("CSV has no columns") from exc
    except (pd.errors.ParserError, ValueError) as exc:
        raise ParseError(f"malformed CSV: {exc}") from exc

    for w in caught:
        if issubclass(w.category, pd.errors.ParserWarning):
            logger.warning("CSV line skipped: %s", str(w.message).strip())

    if df.empty:
        raise EmptySource("CSV has a header but no data rows")
    df = df.fillna("")
    df.columns = [str(c) for c in df.columns]
    return df.to_dict(orient="records")


def fetch_csv_text(
    source_url: str,
    *,
    timeout: float = FETCH_TIMEOUT_DEFAULT,
    session: Optional[requests.Session] = None,
) -> str:
    http = session or requests
    try:
        response = http.get(source_url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise TransportError(f"could not fetch {source_url}: {exc}") from exc

    # Published sheets are UTF-8 but do not always say so.
    if not response.encoding or response.encoding.lower() == "iso-8859-1":
        response.encoding = "utf-8"
    return response.text


def load_source(
    source_url: str,
    *,
    timeout: float = FETCH_TIMEOUT_DEFAULT,
    session: Optional[requests.Session] = None,
) -> List[RawRow]:
    text = fetch_csv_text(source_url, timeout=timeout, session=session)
    logger.debug("fetched %d chars from %s", len(text), source_url)
    rows = parse_csv_text(text)
    logger.debug("parsed %d rows from %s", len(rows), source_url)
    return rows


# ---------------- Formatting ----------------
def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_date(value: object) -> str:
    """Render a raw sheet date as dd/mm/YYYY, or echo it when unparsable."""
    if value is None or pd.isna(value):
        return "—"
    s = str(value).strip()
    if not s:
        return "—"
    ts = pd.to_datetime(s, errors="coerce")
    if pd.isna(ts):
        return str(value)
    return ts.strftime("%d/%m/%Y")


def format_percent(value: object) -> str:
    if value is None or pd.isna(value):
        return "0%"
    return f"{float(value):g}%"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y %H:%M:%S")


def is_placeholder_supplier(name: object) -> bool:
    return str(name or "").strip().lower() == "definir"
