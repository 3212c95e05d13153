from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .models import EventBreakdown

# Tiers de relleno de marcador, de más oscuro a más claro
FILL_CRITICAL = "critical"
FILL_SEVERE = "severe"
FILL_SERIOUS = "serious"
FILL_MODERATE = "moderate"
FILL_LOW = "low"

FILL_COLORS = {
    FILL_CRITICAL: "#7a0000",
    FILL_SEVERE: "#cc0000",
    FILL_SERIOUS: "#ff6600",
    FILL_MODERATE: "#ff9900",
    FILL_LOW: "#ffd966",
}

ALERT_EXTREME = "extreme"
ALERT_HIGH = "high"
DEFAULT_ALERT_TIER = ALERT_HIGH
EXTREME_CATEGORY = "extreme"

RISK_COLORS = {
    ALERT_EXTREME: "#b30000",
    ALERT_HIGH: "#d97706",
}

RISK_TEXTS = {
    ALERT_EXTREME: "EXTREME RISK AREA",
    ALERT_HIGH: "HIGH RISK AREA",
}

RECOMMENDATIONS = {
    ALERT_EXTREME: "Slow down immediately and scan road edges.",
    ALERT_HIGH: "Reduce speed and stay alert for wildlife.",
}

BANNER_TEMPLATES = {
    ALERT_EXTREME: "⚠ EXTREME wildlife collision risk ahead on {road}. Slow down immediately.",
    ALERT_HIGH: "⚠ High wildlife collision risk ahead on {road}. Reduce speed and stay alert.",
}


@dataclass(frozen=True)
class Severity:
    fill_tier: str
    fill_color: str
    alert_tier: str
    risk_color: str
    risk_text: str
    recommendation: str

    @property
    def banner_level(self) -> str:
        return self.alert_tier


def classify_fill(breakdown: EventBreakdown) -> Tuple[str, str]:
    if breakdown.killed > 5:
        tier = FILL_CRITICAL
    elif breakdown.killed > 0:
        tier = FILL_SEVERE
    elif breakdown.injured > 5:
        tier = FILL_SERIOUS
    elif breakdown.injured > 0:
        tier = FILL_MODERATE
    else:
        tier = FILL_LOW
    return tier, FILL_COLORS[tier]


def classify_alert_tier(category: str | None) -> str:
    """Alert tier from the source danger category.

    Only ``Extreme`` is recognised; every other label, known or not, uses
    ``DEFAULT_ALERT_TIER``.
    """
    if (category or "").strip().lower() == EXTREME_CATEGORY:
        return ALERT_EXTREME
    return DEFAULT_ALERT_TIER


def classify(breakdown: EventBreakdown, category: str | None) -> Severity:
    fill_tier, fill_color = classify_fill(breakdown)
    alert_tier = classify_alert_tier(category)
    return Severity(
        fill_tier=fill_tier,
        fill_color=fill_color,
        alert_tier=alert_tier,
        risk_color=RISK_COLORS[alert_tier],
        risk_text=RISK_TEXTS[alert_tier],
        recommendation=RECOMMENDATIONS[alert_tier],
    )


def banner_message(alert_tier: str, road_name: str) -> str:
    template = BANNER_TEMPLATES.get(alert_tier, BANNER_TEMPLATES[DEFAULT_ALERT_TIER])
    return template.format(road=road_name)
