from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

import pandas as pd

from obra.charts import progress_chart, to_vega_spec
from obra.data import format_date, format_timestamp, is_placeholder_supplier, round_half_up
from obra.normalize import records_frame
from obra.records import CanonicalRecord
from obra.risk import is_high_risk, risk_level

if TYPE_CHECKING:
    from obra.state import DatasetState


@dataclass(frozen=True)
class Metrics:
    average_progress: float = 0.0
    high_risk_count: int = 0
    completed_count: int = 0
    total_count: int = 0


def compute_metrics(records: Iterable[CanonicalRecord]) -> Metrics:
    df = records_frame(records)
    if df.empty:
        return Metrics()
    avg = round_half_up(df["progresso"].mean(), 1)
    return Metrics(
        average_progress=float(avg or 0.0),
        high_risk_count=int(df["status"].apply(is_high_risk).sum()),
        completed_count=int((df["progresso"] >= 100).sum()),
        total_count=int(len(df)),
    )


def _card_tones(metrics: Metrics) -> Dict[str, str]:
    return {
        "average_progress": "",
        "high_risk_count": "danger" if metrics.high_risk_count > 0 else "success",
        "completed_count": "success" if metrics.completed_count > 0 else "",
        "total_count": "",
    }


def _record_rows(records: Iterable[CanonicalRecord]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for rec in records:
        row = asdict(rec)
        row["risk"] = risk_level(rec.status)
        row["inicio_label"] = format_date(rec.inicio)
        row["termino_label"] = format_date(rec.termino)
        row["supplier_undefined"] = is_placeholder_supplier(rec.fornecedor)
        rows.append(row)
    return rows


def compute_overview(state: "DatasetState") -> Dict[str, Any]:
    """Renderer payload: metrics, card tones, table rows and the progress chart."""
    metrics = compute_metrics(state.records)
    df: pd.DataFrame = records_frame(state.records)
    return {
        "loading": state.loading,
        "error": state.error,
        "using_fallback": state.using_fallback,
        "phase": state.phase,
        "last_update": state.last_update.isoformat() if state.last_update else None,
        "last_update_label": format_timestamp(state.last_update),
        "metrics": asdict(metrics),
        "card_tones": _card_tones(metrics),
        "records": _record_rows(state.records),
        "chart": to_vega_spec(progress_chart(df)),
    }
