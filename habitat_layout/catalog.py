"""Static catalog of habitat module types."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .errors import UnknownModuleType
from .models import ModuleProfile, PlacedModule

_PROFILES = [
    ModuleProfile(
        type_id="living-quarters",
        display_name="Living Quarters",
        icon="🏠",
        width=120,
        height=100,
        power_consumption=15,
        oxygen_consumption=5,
        crew_capacity=4,
        area=12,
        description="Sleeping quarters and personal space for crew members",
        required_services=frozenset({"power", "life-support"}),
        color="#2ecc71",
    ),
    ModuleProfile(
        type_id="laboratory",
        display_name="Laboratory",
        icon="🔬",
        width=140,
        height=120,
        power_consumption=25,
        oxygen_consumption=3,
        crew_capacity=2,
        area=16.8,
        description="Research and scientific experimentation facility",
        required_services=frozenset({"power", "data-link"}),
        color="#9b59b6",
    ),
    ModuleProfile(
        type_id="greenhouse",
        display_name="Greenhouse",
        icon="🌱",
        width=160,
        height=140,
        power_consumption=30,
        oxygen_production=15,
        oxygen_consumption=2,
        crew_capacity=1,
        area=22.4,
        description="Food production and oxygen generation facility",
        required_services=frozenset({"power", "water", "co2"}),
        color="#27ae60",
    ),
    ModuleProfile(
        type_id="workshop",
        display_name="Workshop",
        icon="🔧",
        width=130,
        height=110,
        power_consumption=20,
        oxygen_consumption=4,
        crew_capacity=2,
        area=14.3,
        description="Manufacturing and repair facility",
        required_services=frozenset({"power", "raw-materials"}),
        color="#e67e22",
    ),
    ModuleProfile(
        type_id="recreation",
        display_name="Recreation",
        icon="🎮",
        width=150,
        height=130,
        power_consumption=18,
        oxygen_consumption=6,
        crew_capacity=8,
        area=19.5,
        description="Entertainment and social gathering space",
        required_services=frozenset({"power", "climate-control"}),
        color="#3498db",
    ),
    ModuleProfile(
        type_id="airlock",
        display_name="Airlock",
        icon="🚪",
        width=80,
        height=80,
        power_consumption=10,
        oxygen_consumption=1,
        crew_capacity=2,
        area=6.4,
        description="Entry/exit point for EVA operations",
        required_services=frozenset({"power", "pressure-control"}),
        color="#95a5a6",
    ),
    ModuleProfile(
        type_id="power",
        display_name="Power Module",
        icon="⚡",
        width=100,
        height=100,
        power_generation=50,
        area=10,
        description="Solar panels and power generation system",
        color="#f1c40f",
    ),
    ModuleProfile(
        type_id="storage",
        display_name="Storage",
        icon="📦",
        width=110,
        height=90,
        power_consumption=5,
        area=9.9,
        description="Equipment and supply storage facility",
        required_services=frozenset({"climate-control"}),
        color="#8e44ad",
    ),
]

MODULE_TYPES: Mapping[str, ModuleProfile] = MappingProxyType(
    {profile.type_id: profile for profile in _PROFILES}
)


def lookup(type_id: str) -> Optional[ModuleProfile]:
    """Return the profile for ``type_id`` or ``None`` if it is not catalogued."""

    return MODULE_TYPES.get(type_id)


def require(type_id: str) -> ModuleProfile:
    profile = MODULE_TYPES.get(type_id)
    if profile is None:
        raise UnknownModuleType(f"Invalid module type: {type_id}")
    return profile


def list_type_ids() -> List[str]:
    return list(MODULE_TYPES)


def footprint(module: PlacedModule) -> Optional[Tuple[float, float, float, float]]:
    """Return ``(x, y, width, height)`` for a placed module, ``None`` if its type is unknown."""

    profile = MODULE_TYPES.get(module.type_id)
    if profile is None:
        return None
    return module.x, module.y, profile.width, profile.height


def catalog_payload() -> Dict[str, Dict[str, object]]:
    """JSON-ready view of the catalog, keyed by type id."""

    return {type_id: profile.model_dump(mode="json") for type_id, profile in MODULE_TYPES.items()}
