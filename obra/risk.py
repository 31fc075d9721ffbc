from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Tuple


RiskLevel = Literal["high", "mid", "low"]

HIGH_RISK_MARKERS: Tuple[str, ...] = ("alto", "high")
MID_RISK_MARKERS: Tuple[str, ...] = ("médio", "medio", "medium")


@dataclass(frozen=True)
class RiskStyle:
    badge: str
    bar: str


RISK_STYLES: Dict[str, RiskStyle] = {
    "high": RiskStyle(badge="status-high", bar="#ef4444"),
    "mid": RiskStyle(badge="status-mid", bar="#f59e0b"),
    "low": RiskStyle(badge="status-low", bar="#10b981"),
}


def is_high_risk(status: object) -> bool:
    s = str(status or "").lower()
    return any(m in s for m in HIGH_RISK_MARKERS)


def risk_level(status: object) -> RiskLevel:
    if is_high_risk(status):
        return "high"
    s = str(status or "").lower()
    if any(m in s for m in MID_RISK_MARKERS):
        return "mid"
    return "low"


def risk_style(status: object) -> RiskStyle:
    return RISK_STYLES[risk_level(status)]
