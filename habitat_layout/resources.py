"""Resource aggregation and safety alerts."""

from __future__ import annotations

from typing import Iterable, List

from . import catalog
from .models import Alert, DesignerSettings, PlacedModule, ResourceSnapshot


def _fmt(value: float) -> str:
    return f"{value:g}"


def recompute_resources(modules: Iterable[PlacedModule]) -> ResourceSnapshot:
    """Sum per-module profile figures into global balances.

    Modules of uncatalogued types still count towards ``module_count`` but
    add nothing to the balances and are left out of ``present_type_ids``.
    """

    power_generation = 0.0
    power_consumption = 0.0
    oxygen_production = 0.0
    oxygen_consumption = 0.0
    crew_capacity = 0
    total_area = 0.0
    count = 0
    present = set()

    for module in modules:
        count += 1
        profile = catalog.lookup(module.type_id)
        if profile is None:
            continue
        present.add(profile.type_id)
        power_generation += profile.power_generation
        power_consumption += profile.power_consumption
        oxygen_production += profile.oxygen_production
        oxygen_consumption += profile.oxygen_consumption
        crew_capacity += profile.crew_capacity
        total_area += profile.area

    return ResourceSnapshot(
        power_generation=power_generation,
        power_consumption=power_consumption,
        power_balance=power_generation - power_consumption,
        oxygen_production=oxygen_production,
        oxygen_consumption=oxygen_consumption,
        oxygen_balance=oxygen_production - oxygen_consumption,
        crew_capacity=crew_capacity,
        total_area=total_area,
        module_count=count,
        present_type_ids=frozenset(present),
    )


def safety_alerts(
    snapshot: ResourceSnapshot,
    settings: DesignerSettings | None = None,
) -> List[Alert]:
    """Evaluate every safety rule against ``snapshot``; all matching rules report."""

    settings = settings or DesignerSettings()
    alerts: List[Alert] = []

    if snapshot.power_balance < 0:
        alerts.append(Alert(
            severity="danger",
            message=f"Power deficit: {_fmt(abs(snapshot.power_balance))}kW. Add more power modules!",
        ))
    elif snapshot.power_balance < settings.power_reserve_threshold:
        alerts.append(Alert(
            severity="warning",
            message=f"Low power reserve: {_fmt(snapshot.power_balance)}kW. Consider adding backup power.",
        ))

    if snapshot.oxygen_balance < 0:
        alerts.append(Alert(
            severity="danger",
            message=f"Oxygen deficit: {_fmt(abs(snapshot.oxygen_balance))} units. Add greenhouse modules!",
        ))
    elif snapshot.oxygen_balance < settings.oxygen_reserve_threshold:
        alerts.append(Alert(
            severity="warning",
            message=(
                f"Low oxygen reserve: {_fmt(snapshot.oxygen_balance)} units. "
                "Consider adding more greenhouses."
            ),
        ))

    if snapshot.crew_capacity == 0:
        alerts.append(Alert(severity="warning", message="No living quarters. Crew needs places to sleep!"))
    elif snapshot.crew_capacity < settings.min_crew_capacity:
        alerts.append(Alert(
            severity="warning",
            message=(
                f"Limited crew capacity: {snapshot.crew_capacity} people. "
                "Consider adding more living quarters."
            ),
        ))

    if settings.airlock_type not in snapshot.present_type_ids:
        alerts.append(Alert(
            severity="warning",
            message="No airlock detected. EVA operations will not be possible!",
        ))

    if settings.power_type not in snapshot.present_type_ids:
        alerts.append(Alert(
            severity="danger",
            message="No power generation! The habitat needs power modules.",
        ))

    if not alerts:
        alerts.append(Alert(severity="info", message="All systems nominal"))

    return alerts
