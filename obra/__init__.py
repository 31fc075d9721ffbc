"""Core (UI-agnostic) construction dashboard logic.

This package contains:
- source loading (CSV over HTTP -> raw rows)
- schema normalization (raw rows -> canonical records)
- the built-in fallback dataset
- metrics and overview payloads (JSON-serializable)
- the dataset state store driving refreshes
- chart helpers (Altair -> Vega-Lite spec dict)
"""
