"""JSON document helpers for saving, restoring and exporting designs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from . import catalog
from .errors import MalformedPersistedDocument
from .models import DesignerSettings, HabitatDocument, StateChange
from .resources import safety_alerts
from .scoring import efficiency_scores, gauge_levels
from .state import HabitatState

logger = logging.getLogger(__name__)


def document_schema() -> Dict[str, Any]:
    return HabitatDocument.model_json_schema(by_alias=True)


def settings_schema() -> Dict[str, Any]:
    return DesignerSettings.model_json_schema()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_document(
    state: HabitatState,
    include_resources: bool = False,
    auto_saved: bool = False,
) -> Dict[str, Any]:
    """Serialise ``state`` into the interop document shape."""

    data: Dict[str, Any] = {
        "modules": [m.to_record() for m in state.modules],
        "timestamp": _now(),
        "version": state.settings.document_version,
        "nextId": state.next_id,
    }
    if auto_saved:
        data["autoSaved"] = True
    if include_resources:
        data["resources"] = state.resources().model_dump(mode="json")
    return data


def parse_document(data: Any) -> HabitatDocument:
    if not isinstance(data, dict):
        raise MalformedPersistedDocument("Habitat document must be a JSON object")
    try:
        return HabitatDocument.model_validate(data)
    except ValidationError as exc:
        raise MalformedPersistedDocument(f"Habitat document invalid: {exc}") from exc


def load_document(path: Path | str) -> HabitatDocument:
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise MalformedPersistedDocument(f"Habitat document is not valid JSON: {exc}") from exc
    return parse_document(data)


def save_document(
    state: HabitatState,
    path: Path | str,
    include_resources: bool = False,
    auto_saved: bool = False,
) -> Dict[str, Any]:
    data = to_document(state, include_resources=include_resources, auto_saved=auto_saved)
    Path(path).write_text(json.dumps(data, indent=2))
    logger.debug(f"Saved {len(state)} modules to {path}")
    return data


def restore_state(state: HabitatState, data: Any) -> StateChange:
    """Parse ``data`` fully, then swap it into ``state``.

    A malformed document raises before ``state`` is touched.
    """

    document = parse_document(data)
    return state.restore(document)


def load_state(path: Path | str, settings: DesignerSettings | None = None) -> HabitatState:
    return HabitatState.from_document(load_document(path), settings=settings)


def load_settings(path: Path | str | None) -> DesignerSettings:
    if path is None:
        return DesignerSettings()
    data = json.loads(Path(path).read_text())
    return DesignerSettings.model_validate(data)


def export_markdown(state: HabitatState) -> str:
    settings = state.settings
    snapshot = state.resources()
    scores = efficiency_scores(snapshot, settings)
    gauges = gauge_levels(snapshot, settings)
    lines: list[str] = []
    lines.append("# Habitat Design Summary")
    lines.append("")
    lines.append(f"- Modules: {snapshot.module_count}")
    lines.append(f"- Crew capacity: {snapshot.crew_capacity}")
    lines.append(f"- Total area: {snapshot.total_area:.1f} m²")
    lines.append(f"- Power: {snapshot.power_balance:g}/{snapshot.power_generation:g} kW")
    lines.append(f"- Oxygen: {gauges.oxygen.level:.0f}% ({snapshot.oxygen_balance:+g})")
    lines.append(f"- Space: {snapshot.total_area:.1f}/{settings.max_surface_area:g} m²")
    lines.append("")
    lines.append("## Modules")
    lines.append("| Id | Type | X | Y | Width | Height |")
    lines.append("| --- | --- | --- | --- | --- | --- |")
    for module in state.modules:
        profile = catalog.lookup(module.type_id)
        if profile is None:
            lines.append(f"| {module.id} | {module.type_id} (unknown) | {module.x:g} | {module.y:g} | - | - |")
        else:
            lines.append(
                f"| {module.id} | {profile.display_name} | {module.x:g} | {module.y:g} | "
                f"{profile.width:g} | {profile.height:g} |"
            )
    lines.append("")
    lines.append("## Efficiency")
    lines.append(
        f"- Power: {scores.power:.0f}\n"
        f"- Oxygen: {scores.oxygen:.0f}\n"
        f"- Space: {scores.space:.0f}\n"
        f"- Crew: {scores.crew:.0f}\n"
        f"- Overall: {scores.overall:.1f}\n"
    )
    lines.append("## Safety")
    for alert in safety_alerts(snapshot, settings):
        prefix = "✅" if alert.severity in {"info", "ok"} else "⚠️"
        lines.append(f"- {prefix} [{alert.severity}] {alert.message}")
    return "\n".join(lines)
