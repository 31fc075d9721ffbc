from __future__ import annotations

from dataclasses import asdict

import pytest

from obra.fallback import FALLBACK_RECORDS, get_fallback
from obra.metrics_overview import compute_metrics
from obra.risk import is_high_risk


def test_fallback_is_non_empty_with_dense_ids() -> None:
    records = get_fallback()
    assert len(records) >= 1
    assert [r.id for r in records] == list(range(1, len(records) + 1))


def test_fallback_covers_card_states() -> None:
    records = get_fallback()
    metrics = compute_metrics(records)
    assert metrics.total_count >= 1
    assert metrics.high_risk_count >= 1
    assert any(r.progresso == 0 for r in records)
    assert any(r.fornecedor.lower() == "definir" for r in records)
    assert any(is_high_risk(r.status) for r in records)


def test_repeated_calls_are_identical() -> None:
    first = get_fallback()
    second = get_fallback()
    assert first == second
    assert first is not second
    assert [asdict(r) for r in first] == [asdict(r) for r in second]


def test_mutating_a_returned_list_does_not_leak() -> None:
    records = get_fallback()
    records.clear()
    assert len(get_fallback()) == len(FALLBACK_RECORDS)


def test_records_are_frozen() -> None:
    with pytest.raises((AttributeError, TypeError)):
        FALLBACK_RECORDS[0].progresso = 99.0  # type: ignore[misc]
