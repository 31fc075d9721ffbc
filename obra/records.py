from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


DEFAULT_STATUS = "baixo risco"

CANONICAL_FIELDS: Tuple[str, ...] = (
    "id",
    "etapa",
    "servico",
    "progresso",
    "inicio",
    "termino",
    "fornecedor",
    "status",
)


@dataclass(frozen=True)
class CanonicalRecord:
    """One reporting line item of the progress sheet, in canonical shape.

    ``inicio``/``termino`` keep the raw date text; interpretation happens at
    render time. ``id`` is the 1-based row position of the batch it came from
    and changes on every ingestion.
    """

    id: int
    etapa: str = ""
    servico: str = ""
    progresso: float = 0.0
    inicio: str = ""
    termino: str = ""
    fornecedor: str = ""
    status: str = DEFAULT_STATUS
