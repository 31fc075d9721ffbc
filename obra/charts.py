from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from obra.risk import RISK_STYLES, risk_level

alt.data_transformers.disable_max_rows()

_RISK_ORDER = ["high", "mid", "low"]


def progress_chart(records_df: pd.DataFrame) -> alt.Chart:
    """Horizontal progress bars per service, coloured by risk level."""
    df = records_df.copy()
    if df.empty:
        df = pd.DataFrame(columns=["id", "etapa", "servico", "progresso", "status"])
    df["label"] = df["etapa"].astype(str) + " / " + df["servico"].astype(str)
    df["risk"] = df["status"].apply(risk_level)
    df["progress_bar"] = pd.to_numeric(df["progresso"], errors="coerce").fillna(0.0).clip(lower=0, upper=100)

    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("progress_bar:Q", title="Progresso (%)", scale=alt.Scale(domain=[0, 100])),
            y=alt.Y("label:N", title=None, sort=alt.EncodingSortField(field="id", order="ascending")),
            color=alt.Color(
                "risk:N",
                title="Risco",
                scale=alt.Scale(domain=_RISK_ORDER, range=[RISK_STYLES[r].bar for r in _RISK_ORDER]),
            ),
            tooltip=["etapa", "servico", "progresso", "status"],
        )
    )


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()
