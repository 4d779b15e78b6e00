"""Efficiency scoring, recommendations and resource panel gauges."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List

from .models import (
    DesignerSettings,
    EfficiencyReport,
    EfficiencyScores,
    Gauge,
    GaugeLevels,
    PlacedModule,
    Recommendation,
    ResourceSnapshot,
)
from .resources import recompute_resources


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _balance_score(balance: float, consumption: float) -> float:
    if consumption == 0:
        return 100.0
    return _clamp(balance / consumption * 100 + 50)


def space_usage(snapshot: ResourceSnapshot, settings: DesignerSettings) -> float:
    """Share of the configured maximum surface area in use, in percent."""

    return snapshot.total_area / settings.max_surface_area * 100


def _space_score(usage: float) -> float:
    if usage < 20:
        return usage * 2
    if usage <= 80:
        return 100.0
    return max(0.0, 100 - (usage - 80) * 2)


def _crew_score(snapshot: ResourceSnapshot) -> float:
    if snapshot.module_count == 0:
        return 100.0
    ratio = snapshot.crew_capacity / snapshot.module_count
    if 1 <= ratio <= 2:
        return 100.0
    if ratio < 1:
        return ratio * 100
    return max(0.0, 100 - (ratio - 2) * 20)


def efficiency_scores(
    snapshot: ResourceSnapshot,
    settings: DesignerSettings | None = None,
) -> EfficiencyScores:
    settings = settings or DesignerSettings()
    power = _balance_score(snapshot.power_balance, snapshot.power_consumption)
    oxygen = _balance_score(snapshot.oxygen_balance, snapshot.oxygen_consumption)
    space = _space_score(space_usage(snapshot, settings))
    crew = _crew_score(snapshot)
    return EfficiencyScores(
        power=power,
        oxygen=oxygen,
        space=space,
        crew=crew,
        overall=(power + oxygen + space + crew) / 4,
    )


def recommendations(
    snapshot: ResourceSnapshot,
    scores: EfficiencyScores,
    settings: DesignerSettings | None = None,
) -> List[Recommendation]:
    """Suggestions for every score below its threshold, most urgent first."""

    settings = settings or DesignerSettings()
    threshold = settings.recommendation_threshold
    recs: List[Recommendation] = []

    if scores.power < threshold:
        if snapshot.power_balance < 0:
            recs.append(Recommendation(
                severity="critical",
                category="power",
                message="Add more power modules to meet energy demands",
                priority=1,
            ))
        else:
            recs.append(Recommendation(
                severity="suggestion",
                category="power",
                message="Consider adding backup power for redundancy",
                priority=3,
            ))

    if scores.oxygen < threshold:
        if snapshot.oxygen_balance < 0:
            recs.append(Recommendation(
                severity="critical",
                category="oxygen",
                message="Add greenhouse modules to increase oxygen production",
                priority=1,
            ))
        else:
            recs.append(Recommendation(
                severity="suggestion",
                category="oxygen",
                message="Consider adding more greenhouses for better air quality",
                priority=3,
            ))

    if scores.space < settings.space_recommendation_threshold:
        if snapshot.total_area / settings.max_surface_area > settings.space_capacity_ratio:
            recs.append(Recommendation(
                severity="warning",
                category="space",
                message="Habitat is nearly at capacity. Consider removing non-essential modules",
                priority=2,
            ))
        else:
            recs.append(Recommendation(
                severity="suggestion",
                category="space",
                message="Add more modules to better utilize available space",
                priority=3,
            ))

    if scores.crew < threshold:
        if snapshot.crew_capacity == 0:
            recs.append(Recommendation(
                severity="critical",
                category="crew",
                message="Add living quarters for crew accommodation",
                priority=1,
            ))
        elif snapshot.crew_capacity < settings.min_crew_capacity:
            recs.append(Recommendation(
                severity="suggestion",
                category="crew",
                message="Consider adding more living quarters for larger crew",
                priority=3,
            ))

    recs.sort(key=lambda rec: rec.priority)
    return recs


def efficiency_report(
    modules: Iterable[PlacedModule],
    settings: DesignerSettings | None = None,
) -> EfficiencyReport:
    """Compute scores and recommendations for a module list."""

    settings = settings or DesignerSettings()
    snapshot = recompute_resources(modules)
    scores = efficiency_scores(snapshot, settings)
    return EfficiencyReport(
        timestamp=datetime.now(timezone.utc).isoformat(),
        scores=scores,
        resources=snapshot,
        recommendations=recommendations(snapshot, scores, settings),
    )


def _balance_status(balance: float, reserve: float) -> str:
    if balance < 0:
        return "critical"
    if balance < reserve:
        return "low"
    return "ok"


def gauge_levels(
    snapshot: ResourceSnapshot,
    settings: DesignerSettings | None = None,
) -> GaugeLevels:
    """Fill levels for the power, oxygen and space bars.

    The oxygen bar measures ``(balance + consumption) / production`` while the
    power bar measures ``balance / generation`` offset by 50; the two shapes
    differ on purpose.
    """

    settings = settings or DesignerSettings()

    if snapshot.power_generation > 0:
        power = min(100.0, snapshot.power_balance / snapshot.power_generation * 100 + 50)
    elif snapshot.power_consumption > 0:
        power = 0.0
    else:
        power = 100.0

    if snapshot.oxygen_production > 0:
        oxygen = min(
            100.0,
            (snapshot.oxygen_balance + snapshot.oxygen_consumption) / snapshot.oxygen_production * 100,
        )
    elif snapshot.oxygen_consumption > 0:
        oxygen = 0.0
    else:
        oxygen = 100.0

    usage = space_usage(snapshot, settings)
    if usage > 90:
        space_status = "high"
    elif usage > 75:
        space_status = "elevated"
    else:
        space_status = "ok"

    return GaugeLevels(
        power=Gauge(
            level=max(0.0, power),
            status=_balance_status(snapshot.power_balance, settings.power_reserve_threshold),
        ),
        oxygen=Gauge(
            level=_clamp(oxygen),
            status=_balance_status(snapshot.oxygen_balance, settings.oxygen_reserve_threshold),
        ),
        space=Gauge(level=min(100.0, usage), status=space_status),
    )
