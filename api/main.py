from __future__ import annotations

from dataclasses import asdict
import logging
import math
from functools import lru_cache

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response

from api.schemas import DatasetStateModel, MetricsModel, RefreshResponse
from obra.config import configure_logging, get_config
from obra.metrics_overview import compute_overview
from obra.normalize import records_frame
from obra.state import DashboardStore


app = FastAPI(title="Obra Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_store() -> DashboardStore:
    cfg = get_config()
    configure_logging(cfg.log_level)
    return DashboardStore(cfg.csv_url, timeout=cfg.fetch_timeout)


def _ensure_loaded(store: DashboardStore) -> None:
    if store.state.phase == "idle":
        store.refresh()


def _state_model(store: DashboardStore) -> DatasetStateModel:
    return DatasetStateModel.model_validate(asdict(store.state))


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/dashboard")
def dashboard(store: DashboardStore = Depends(get_store)):
    try:
        _ensure_loaded(store)
        return _json(compute_overview(store.state))
    except Exception as exc:
        logger.exception("dashboard failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/state", response_model=DatasetStateModel)
def state(store: DashboardStore = Depends(get_store)):
    try:
        _ensure_loaded(store)
        return _state_model(store)
    except Exception as exc:
        logger.exception("state failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/metrics", response_model=MetricsModel)
def metrics(store: DashboardStore = Depends(get_store)):
    try:
        _ensure_loaded(store)
        return MetricsModel.model_validate(asdict(store.metrics))
    except Exception as exc:
        logger.exception("metrics failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/refresh")
def refresh(store: DashboardStore = Depends(get_store)):
    try:
        refreshed = store.refresh()
        payload = RefreshResponse(
            refreshed=refreshed,
            state=_state_model(store),
            metrics=MetricsModel.model_validate(asdict(store.metrics)),
        )
        status_code = 200 if refreshed else 409
        return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))
    except Exception as exc:
        logger.exception("refresh failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/export.csv")
def export_csv(store: DashboardStore = Depends(get_store)):
    try:
        _ensure_loaded(store)
        export_df = records_frame(store.state.records)
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    except Exception as exc:
        logger.exception("export_csv failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=obra.csv"})
