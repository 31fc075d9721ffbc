from __future__ import annotations

import math
import re
from dataclasses import asdict
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from obra.records import CANONICAL_FIELDS, DEFAULT_STATUS, CanonicalRecord


# Ranked alias substrings per canonical field. Matching is case-insensitive
# containment against the source header, first header (in sheet order) wins.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "etapa": ("etapa", "fase", "stage"),
    "servico": ("serviço", "servico", "service", "atividade", "tarefa"),
    "progresso": ("progresso", "progress", "%"),
    "inicio": ("início", "inicio", "start", "data inicio"),
    "termino": ("término", "termino", "end", "fim", "data fim"),
    "fornecedor": ("fornecedor", "supplier", "responsável", "responsavel"),
    "status": ("status", "risco", "risk"),
}

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NA:
        return ""
    return str(value)


def find_source_key(keys: Iterable[object], aliases: Iterable[str]) -> Optional[object]:
    lowered = [a.lower() for a in aliases]
    for key in keys:
        text = _as_text(key).lower()
        if any(alias in text for alias in lowered):
            return key
    return None


def resolve_field(row: Mapping[object, object], field: str) -> str:
    key = find_source_key(row.keys(), FIELD_ALIASES[field])
    if key is None:
        return ""
    return _as_text(row[key])


def parse_progress(value: object) -> float:
    """Parse a progress cell such as ``"45,5"``, ``"45.5"`` or ``"45,5%"``.

    Commas are read as decimal separators and only the leading number counts.
    Anything without a finite leading number becomes 0.
    """
    text = _as_text(value).replace(",", ".")
    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0
    try:
        out = float(match.group(0))
    except ValueError:
        return 0.0
    if not math.isfinite(out):
        return 0.0
    return out + 0.0  # -0.0 -> 0.0


def normalize_row(row: Mapping[object, object], index: int) -> CanonicalRecord:
    return CanonicalRecord(
        id=index + 1,
        etapa=resolve_field(row, "etapa"),
        servico=resolve_field(row, "servico"),
        progresso=parse_progress(resolve_field(row, "progresso")),
        inicio=resolve_field(row, "inicio"),
        termino=resolve_field(row, "termino"),
        fornecedor=resolve_field(row, "fornecedor"),
        status=resolve_field(row, "status") or DEFAULT_STATUS,
    )


def normalize(raw_rows: Iterable[Mapping[object, object]]) -> List[CanonicalRecord]:
    return [normalize_row(row, idx) for idx, row in enumerate(raw_rows)]


def records_frame(records: Iterable[CanonicalRecord]) -> pd.DataFrame:
    rows = [asdict(r) for r in records]
    df = pd.DataFrame(rows, columns=list(CANONICAL_FIELDS))
    df["progresso"] = pd.to_numeric(df["progresso"], errors="coerce").fillna(0.0).astype(float)
    return df
