from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
import requests


FIXED_NOW = datetime(2026, 3, 10, 14, 30, 0)


class FakeResponse:
    def __init__(self, text: str, status_code: int = 200, encoding: Optional[str] = "utf-8") -> None:
        self.text = text
        self.status_code = status_code
        self.encoding = encoding

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=None)


class FakeSession:
    """Stands in for ``requests.Session``; records every GET it serves."""

    def __init__(self, text: str = "", status_code: int = 200, exc: Optional[Exception] = None) -> None:
        self.text = text
        self.status_code = status_code
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, timeout: float = 0) -> FakeResponse:
        self.calls.append({"url": url, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return FakeResponse(self.text, status_code=self.status_code)


SHEET_CSV = (
    "Etapa,Serviço,Progresso (%),Data Início,Data Término,Fornecedor,Status\n"
    'Muro divisa,Finalizar alvenaria,"70,25",2026-02-20,2026-03-06,Sérgio,Alto risco\n'
    "\n"
    "Piscina,Hidráulica,100,2026-03-08,2026-03-26,Sérgio,baixo risco\n"
)


@pytest.fixture()
def clock():
    return lambda: FIXED_NOW


@pytest.fixture()
def sheet_rows() -> List[Dict[str, str]]:
    return [
        {
            "Etapa": "Muro divisa",
            "Serviço": "Finalizar alvenaria",
            "Progresso (%)": "70,25",
            "Data Início": "2026-02-20",
            "Data Término": "2026-03-06",
            "Fornecedor": "Sérgio",
            "Status": "Alto risco",
        },
        {
            "Etapa": "Piscina",
            "Serviço": "Hidráulica",
            "Progresso (%)": "100",
            "Data Início": "2026-03-08",
            "Data Término": "2026-03-26",
            "Fornecedor": "Sérgio",
            "Status": "baixo risco",
        },
    ]
