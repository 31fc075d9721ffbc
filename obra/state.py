from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import partial
from typing import Callable, Literal, Optional, Sequence, Tuple

from obra.data import EmptySource, LoadError, RawRow, load_source
from obra.fallback import get_fallback
from obra.metrics_overview import Metrics, compute_metrics
from obra.normalize import normalize
from obra.records import CanonicalRecord


logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Não foi possível carregar os dados da planilha. Exibindo dados de exemplo."

Phase = Literal["idle", "loading", "ready", "ready_fallback"]
Loader = Callable[[str], Sequence[RawRow]]


@dataclass(frozen=True)
class DatasetState:
    records: Tuple[CanonicalRecord, ...] = field(default_factory=tuple)
    loading: bool = False
    error: Optional[str] = None
    using_fallback: bool = False
    last_update: Optional[datetime] = None
    phase: Phase = "idle"
    error_kind: Optional[str] = None


class DashboardStore:
    """Owns the dashboard's DatasetState and runs ingestion refreshes.

    Renderers read ``state``; only ``refresh`` replaces it. At most one refresh
    runs at a time, a second call made while one is in flight is ignored.
    """

    def __init__(
        self,
        source_url: str,
        *,
        loader: Optional[Loader] = None,
        clock: Optional[Callable[[], datetime]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.source_url = source_url
        if loader is None:
            loader = load_source if timeout is None else partial(load_source, timeout=timeout)
        self._loader = loader
        self._clock = clock or datetime.now
        self._lock = threading.Lock()
        self._state = DatasetState()

    @property
    def state(self) -> DatasetState:
        return self._state

    @property
    def metrics(self) -> Metrics:
        return compute_metrics(self._state.records)

    @property
    def is_loading(self) -> bool:
        return self._state.loading

    def refresh(self) -> bool:
        """Run one ingestion attempt. Returns False when one is already running."""
        if not self._lock.acquire(blocking=False):
            logger.info("refresh ignored: ingestion already in progress")
            return False
        try:
            self._publish(replace(self._state, loading=True, error=None, error_kind=None, using_fallback=False, phase="loading"))
            self._publish(self._ingest())
            return True
        finally:
            if self._state.loading:
                # Only reachable if publishing the terminal state itself failed.
                self._state = self._fallback_state("unexpected_error")
            self._lock.release()

    def _ingest(self) -> DatasetState:
        try:
            rows = self._loader(self.source_url)
            if not rows:
                raise EmptySource("loader returned no rows")
            records = normalize(rows)
        except LoadError as exc:
            logger.warning("ingestion failed kind=%s url=%s error=%s", exc.kind, self.source_url, exc)
            return self._fallback_state(exc.kind)
        except Exception:
            logger.exception("ingestion failed unexpectedly url=%s", self.source_url)
            return self._fallback_state("unexpected_error")

        logger.info("ingestion ready rows=%d url=%s", len(records), self.source_url)
        return DatasetState(
            records=tuple(records),
            loading=False,
            error=None,
            using_fallback=False,
            last_update=self._clock(),
            phase="ready",
        )

    def _fallback_state(self, kind: str) -> DatasetState:
        return DatasetState(
            records=tuple(get_fallback()),
            loading=False,
            error=FALLBACK_MESSAGE,
            using_fallback=True,
            last_update=self._clock(),
            phase="ready_fallback",
            error_kind=kind,
        )

    def _publish(self, state: DatasetState) -> None:
        logger.debug("state -> %s", state.phase)
        self._state = state

