"""Placement validators for habitat module layouts."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from . import catalog
from .models import PlacedModule, PlacementResult, Position, SurfaceBounds, ValidationResult

logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]


def rects_overlap(a: Rect, b: Rect) -> bool:
    """Axis-aligned overlap test; rectangles that only share an edge do not overlap."""

    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return not (
        ax + aw <= bx
        or bx + bw <= ax
        or ay + ah <= by
        or by + bh <= ay
    )


def _within_bounds(rect: Rect, bounds: SurfaceBounds) -> bool:
    x, y, w, h = rect
    return not (x < 0 or y < 0 or x + w > bounds.width or y + h > bounds.height)


def _as_position(position: Position | Tuple[float, float]) -> Position:
    if isinstance(position, Position):
        return position
    x, y = position
    return Position(x=x, y=y)


def validate_placement(
    type_id: str,
    position: Position | Tuple[float, float],
    existing_modules: Iterable[PlacedModule],
    bounds: SurfaceBounds,
) -> PlacementResult:
    """Decide whether a module of ``type_id`` may sit at ``position``."""

    profile = catalog.lookup(type_id)
    if profile is None:
        return PlacementResult.fail("unknown-module-type", f"Invalid module type: {type_id}")

    pos = _as_position(position)
    candidate: Rect = (pos.x, pos.y, profile.width, profile.height)
    if not _within_bounds(candidate, bounds):
        return PlacementResult.fail(
            "out-of-bounds", f"{profile.display_name} extends beyond habitat boundary"
        )

    for existing in existing_modules:
        rect = catalog.footprint(existing)
        if rect is None:
            # uncatalogued types have no footprint
            continue
        if rects_overlap(candidate, rect):
            return PlacementResult.fail(
                "overlap",
                f"{profile.display_name} overlaps with existing module {existing.id}",
            )

    return PlacementResult.ok()


def validate_reposition(
    module: PlacedModule,
    position: Position | Tuple[float, float],
    existing_modules: Iterable[PlacedModule],
    bounds: SurfaceBounds,
) -> PlacementResult:
    """Same check as a new placement, with ``module`` itself left out."""

    others = [m for m in existing_modules if m.id != module.id]
    return validate_placement(module.type_id, position, others, bounds)


def validate_layout(
    modules: Sequence[PlacedModule],
    bounds: SurfaceBounds,
) -> ValidationResult:
    """Audit every placed module against the surface and each other."""

    messages: List[str] = []
    failed: List[str] = []
    out_of_bounds: List[int] = []
    overlaps: List[Tuple[int, int]] = []
    unknown: List[int] = []

    rects: List[Tuple[PlacedModule, Optional[Rect]]] = [(m, catalog.footprint(m)) for m in modules]

    for module, rect in rects:
        if rect is None:
            unknown.append(module.id)
            messages.append(f"Module {module.id} has uncatalogued type '{module.type_id}'; ignored.")
            continue
        if not _within_bounds(rect, bounds):
            out_of_bounds.append(module.id)
            failed.append(f"out_of_bounds_{module.id}")
            messages.append(f"Module {module.id} ({module.type_id}) extends beyond habitat boundary.")

    for i, (first, first_rect) in enumerate(rects):
        if first_rect is None:
            continue
        for second, second_rect in rects[i + 1:]:
            if second_rect is None:
                continue
            if rects_overlap(first_rect, second_rect):
                overlaps.append((first.id, second.id))
                failed.append(f"overlap_{first.id}_{second.id}")
                messages.append(f"Modules {first.id} and {second.id} overlap.")

    if not failed:
        messages.append(f"All {len(modules) - len(unknown)} catalogued modules placed validly.")

    logger.debug(f"Layout audit: {len(failed)} failures across {len(modules)} modules")
    return ValidationResult(
        passed=not failed,
        messages=messages,
        failed_rules=failed,
        out_of_bounds=out_of_bounds,
        overlaps=overlaps,
        unknown_types=unknown,
    )
