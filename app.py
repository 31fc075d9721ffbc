import html
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from obra.charts import progress_chart
from obra.config import configure_logging, get_config
from obra.data import format_date, format_percent, format_timestamp, is_placeholder_supplier
from obra.metrics_overview import compute_metrics
from obra.normalize import records_frame
from obra.risk import risk_style
from obra.state import DashboardStore, DatasetState

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e8e4de;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.6rem;font-weight: 700;color: #1a1a18;}
        .app-top-bar .page-title em {color: #7c6f5e;}
        .card {border: 1px solid #e8e4de;border-radius: 16px;padding: 16px 20px;background: #ffffff;margin-bottom: 12px;}
        .card-label {font-size: 0.7rem;text-transform: uppercase;letter-spacing: 0.08em;color: #9e9589;}
        .card-value {font-size: 2rem;font-weight: 600;color: #1a1a18;}
        .card-value.danger {color: #dc2626;}
        .card-value.success {color: #059669;}
        .src-badge {font-size: 0.7rem;padding: 2px 10px;border-radius: 999px;margin-left: 6px;}
        .src-live {background: #d1fae5;color: #065f46;}
        .src-fallback {background: #fef3c7;color: #92400e;}
        .badge {font-size: 0.75rem;padding: 2px 10px;border-radius: 999px;white-space: nowrap;}
        .status-high {background: #fee2e2;color: #b91c1c;}
        .status-mid {background: #fef3c7;color: #92400e;}
        .status-low {background: #d1fae5;color: #065f46;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 2px 10px;font-size: 0.8rem;}
        .chip-undef {background: #fef3c7;border-color: #fcd34d;color: #92400e;}
        .prog-track {background: #f0ece6;border-radius: 999px;height: 6px;width: 120px;display: inline-block;}
        .prog-fill {height: 6px;border-radius: 999px;}
        table.obra {width: 100%;border-collapse: collapse;}
        table.obra th {font-size: 0.7rem;text-transform: uppercase;color: #9e9589;text-align: left;padding: 8px;}
        table.obra td {padding: 8px;border-top: 1px solid #f5f2ee;vertical-align: middle;}
        .etapa-tag {display: block;font-size: 0.65rem;text-transform: uppercase;color: #9e9589;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(label: str):
    container = st.container()
    container.markdown(f"<div class='card'><span class='card-label'>{html.escape(label)}</span>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_store() -> DashboardStore:
    store = st.session_state.get("_obra_store")
    if store is None:
        cfg = get_config()
        configure_logging(cfg.log_level)
        store = DashboardStore(cfg.csv_url, timeout=cfg.fetch_timeout)
        st.session_state["_obra_store"] = store
    return store


def render_page_header(state: DatasetState, store: DashboardStore):
    c1, c2 = st.columns([8, 2])
    with c1:
        if state.loading or state.phase == "idle":
            meta = "Carregando…"
            badge = ""
        else:
            meta = f"Atualizado: {format_timestamp(state.last_update)}"
            badge_cls, badge_txt = ("src-fallback", "Offline (exemplo)") if state.using_fallback else ("src-live", "Google Sheets")
            badge = f"<span class='src-badge {badge_cls}'>{badge_txt}</span>"
        st.markdown(
            "<div class='app-top-bar'><div class='page-title'>Relatório de <em>Acompanhamento</em> de Obra</div>"
            f"<div>{meta}{badge}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        label = "Atualizando…" if store.is_loading else "Atualizar"
        if st.button(label, disabled=store.is_loading):
            with st.spinner("Buscando dados da planilha…"):
                store.refresh()
            st.rerun()


def render_metric_cards(state: DatasetState):
    metrics = compute_metrics(state.records)
    tiles = [
        ("Progresso Geral", f"{metrics.average_progress:.1f}%", ""),
        ("Alertas Críticos", metrics.high_risk_count, "danger" if metrics.high_risk_count > 0 else "success"),
        ("Concluídas", metrics.completed_count, "success" if metrics.completed_count > 0 else ""),
        ("Total de Etapas", metrics.total_count, ""),
    ]
    cols = st.columns(len(tiles))
    for col, (label, value, cls) in zip(cols, tiles):
        with col:
            with card(label):
                if state.loading:
                    st.markdown("…")
                else:
                    st.markdown(f"<span class='card-value {cls}'>{value}</span>", unsafe_allow_html=True)


def _status_row_html(rec) -> str:
    style = risk_style(rec.status)
    width = max(0.0, min(rec.progresso, 100.0))
    chip_cls = "chip chip-undef" if is_placeholder_supplier(rec.fornecedor) else "chip"
    return (
        "<tr>"
        f"<td><span class='etapa-tag'>{html.escape(rec.etapa)}</span><b>{html.escape(rec.servico)}</b></td>"
        f"<td><span class='prog-track'><span class='prog-fill' style='display:block;width:{width}%;background:{style.bar}'></span></span>"
        f" {format_percent(rec.progresso)}</td>"
        f"<td>▸ {html.escape(format_date(rec.inicio))}<br/>◾ {html.escape(format_date(rec.termino))}</td>"
        f"<td><span class='{chip_cls}'>{html.escape(rec.fornecedor or '—')}</span></td>"
        f"<td><span class='badge {style.badge}'>{html.escape(rec.status)}</span></td>"
        "</tr>"
    )


def render_status_table(state: DatasetState, export_df: Optional[pd.DataFrame] = None):
    head = "Status Detalhado por Etapa"
    if not state.loading:
        head += f" · {len(state.records)} itens"
    st.subheader(head)
    if state.loading:
        st.info("Buscando dados da planilha…")
        return
    if not state.records:
        st.info("Nenhum dado encontrado na planilha.")
        return
    rows = "".join(_status_row_html(rec) for rec in state.records)
    st.markdown(
        "<table class='obra'><thead><tr><th>Etapa / Serviço</th><th>Progresso</th><th>Período</th>"
        f"<th>Fornecedor</th><th>Status</th></tr></thead><tbody>{rows}</tbody></table>",
        unsafe_allow_html=True,
    )
    if export_df is not None and not export_df.empty:
        st.download_button(
            "Export CSV",
            data=export_df.to_csv(index=False).encode("utf-8"),
            file_name="obra.csv",
            mime="text/csv",
        )


# ---------- UI setup ----------
st.set_page_config(page_title="Acompanhamento de Obra", layout="wide")
inject_base_styles()

store = get_store()
if store.state.phase == "idle":
    with st.spinner("Buscando dados da planilha…"):
        store.refresh()

state = store.state
render_page_header(state, store)
if state.error:
    st.warning(state.error)
render_metric_cards(state)

records_df = records_frame(state.records)
render_status_table(state, export_df=records_df)
if not records_df.empty:
    st.altair_chart(progress_chart(records_df), use_container_width=True)
