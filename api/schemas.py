from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RecordModel(BaseModel):
    id: int
    etapa: str = ""
    servico: str = ""
    progresso: float = 0.0
    inicio: str = ""
    termino: str = ""
    fornecedor: str = ""
    status: str = "baixo risco"


class MetricsModel(BaseModel):
    average_progress: float = 0.0
    high_risk_count: int = 0
    completed_count: int = 0
    total_count: int = 0


class DatasetStateModel(BaseModel):
    records: List[RecordModel] = Field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    using_fallback: bool = False
    last_update: Optional[datetime] = None
    phase: str = "idle"
    error_kind: Optional[str] = None


class RefreshResponse(BaseModel):
    refreshed: bool
    state: DatasetStateModel
    metrics: MetricsModel
