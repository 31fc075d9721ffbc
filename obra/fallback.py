from __future__ import annotations

from typing import List, Tuple

from obra.records import CanonicalRecord


# Sample sheet shown when the live source cannot be read. Keeps a high-risk
# item, zero-progress items and a "Definir" supplier so every card and table
# state has something to show offline.
FALLBACK_RECORDS: Tuple[CanonicalRecord, ...] = (
    CanonicalRecord(1, "Muro divisa", "Finalizar alvenaria", 70.25, "2026-02-20", "2026-03-06", "Sérgio", "Alto risco"),
    CanonicalRecord(2, "Muro divisa", "Reboco Alvenaria", 16.25, "2026-03-09", "2026-03-20", "Sérgio", "médio risco"),
    CanonicalRecord(3, "Muro divisa", "Requadros de vigas", 72.25, "2026-02-26", "2026-03-16", "Sérgio", "baixo risco"),
    CanonicalRecord(4, "Piscina", "Hidráulica", 0.0, "2026-03-08", "2026-03-26", "Sérgio", "baixo risco"),
    CanonicalRecord(5, "Pisos internos", "Revestimentos", 0.0, "2026-03-22", "2026-04-09", "Sérgio", "médio risco"),
    CanonicalRecord(6, "Móveis", "Mobilias planejadas", 0.0, "2026-06-20", "2026-07-08", "Definir", "Alto risco"),
)


def get_fallback() -> List[CanonicalRecord]:
    return list(FALLBACK_RECORDS)
