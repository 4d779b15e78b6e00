"""Habitat module layout package."""

from .models import (  # noqa: F401
    Alert,
    DesignerSettings,
    HabitatDocument,
    ModuleProfile,
    PlacedModule,
    PlacementResult,
    ResourceSnapshot,
    SurfaceBounds,
)
from .catalog import list_type_ids, lookup  # noqa: F401
from .constraints import rects_overlap, validate_placement  # noqa: F401
from .resources import recompute_resources, safety_alerts  # noqa: F401
from .scoring import efficiency_report  # noqa: F401
from .state import HabitatState, place_module, remove_module  # noqa: F401

__all__ = [
    "Alert",
    "DesignerSettings",
    "HabitatDocument",
    "ModuleProfile",
    "PlacedModule",
    "PlacementResult",
    "ResourceSnapshot",
    "SurfaceBounds",
    "list_type_ids",
    "lookup",
    "rects_overlap",
    "validate_placement",
    "recompute_resources",
    "safety_alerts",
    "efficiency_report",
    "HabitatState",
    "place_module",
    "remove_module",
]
