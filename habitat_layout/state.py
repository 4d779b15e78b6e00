"""Habitat state: the ordered set of placed modules and its transitions."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from . import catalog
from .constraints import validate_placement, validate_reposition
from .errors import ModuleNotFound
from .models import (
    Alert,
    DesignerSettings,
    EfficiencyReport,
    HabitatDocument,
    PlacedModule,
    PlacementOutcome,
    PlacementResult,
    Position,
    ResourceSnapshot,
    StateChange,
    SurfaceBounds,
)
from .resources import recompute_resources, safety_alerts
from .scoring import efficiency_report

logger = logging.getLogger(__name__)


def _seed_next_id(modules: Sequence[PlacedModule]) -> int:
    return max((m.id for m in modules), default=0) + 1


def place_module(
    type_id: str,
    x: float,
    y: float,
    existing_modules: Sequence[PlacedModule],
    bounds: SurfaceBounds,
    next_id: Optional[int] = None,
) -> PlacementOutcome:
    """Validate a placement and build the new module without touching any state.

    Without ``next_id`` the new module takes the id after the highest existing
    one. An explicit ``next_id`` must be above every existing id.
    """

    seed = _seed_next_id(existing_modules)
    if next_id is None:
        next_id = seed
    elif next_id < seed:
        raise ValueError(f"next_id {next_id} would reuse an existing module id")
    result = validate_placement(type_id, Position(x=x, y=y), existing_modules, bounds)
    if not result.valid:
        return PlacementOutcome(result=result)
    module = PlacedModule(id=next_id, type_id=type_id, x=x, y=y)
    return PlacementOutcome(module=module, result=result, change=StateChange(added=[module.id]))


class HabitatState:
    """Ordered module list plus a monotonic id counter.

    The module tuple is replaced wholesale on every mutation, so a reader
    holding ``state.modules`` always sees a complete list.
    """

    def __init__(
        self,
        modules: Iterable[PlacedModule] = (),
        next_id: Optional[int] = None,
        settings: Optional[DesignerSettings] = None,
    ) -> None:
        mods = tuple(modules)
        ids = [m.id for m in mods]
        if len(ids) != len(set(ids)):
            raise ValueError("module ids must be unique")
        self.settings = settings or DesignerSettings()
        self._modules: Tuple[PlacedModule, ...] = mods
        self._next_id = max(next_id or 1, _seed_next_id(mods))
        self._drags: Dict[int, Position] = {}

    @classmethod
    def from_document(
        cls, document: HabitatDocument, settings: Optional[DesignerSettings] = None
    ) -> "HabitatState":
        return cls(document.modules, next_id=document.next_id, settings=settings)

    @property
    def modules(self) -> Tuple[PlacedModule, ...]:
        return self._modules

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[PlacedModule]:
        return iter(self._modules)

    def copy(self) -> "HabitatState":
        # Transitions write modules before the counter, so reading the counter
        # first never yields one ahead of the modules read after it.
        next_id = self._next_id
        return HabitatState(self._modules, next_id=next_id, settings=self.settings)

    def get(self, module_id: int) -> Optional[PlacedModule]:
        for module in self._modules:
            if module.id == module_id:
                return module
        return None

    def _require(self, module_id: int) -> PlacedModule:
        module = self.get(module_id)
        if module is None:
            raise ModuleNotFound(f"No module with id {module_id}")
        return module

    # -- transitions -----------------------------------------------------

    def place_module(self, type_id: str, x: float, y: float, bounds: SurfaceBounds) -> PlacementOutcome:
        outcome = place_module(type_id, x, y, self._modules, bounds, next_id=self._next_id)
        if outcome.module is None:
            logger.warning(f"Placement of {type_id} at ({x}, {y}) rejected: {outcome.result.reason}")
            return outcome
        self._modules = self._modules + (outcome.module,)
        self._next_id += 1
        logger.debug(f"Placed {type_id} as module {outcome.module.id} at ({x}, {y})")
        return outcome

    def remove_module(self, module_id: int) -> StateChange:
        remaining = tuple(m for m in self._modules if m.id != module_id)
        if len(remaining) == len(self._modules):
            return StateChange()
        self._modules = remaining
        self._drags.pop(module_id, None)
        logger.debug(f"Removed module {module_id}")
        return StateChange(removed=[module_id])

    def _commit_move(self, module: PlacedModule, position: Position) -> None:
        moved = module.moved_to(position.x, position.y)
        self._modules = tuple(moved if m.id == module.id else m for m in self._modules)

    def move_module(
        self, module_id: int, x: float, y: float, bounds: SurfaceBounds
    ) -> Tuple[PlacementResult, StateChange]:
        """Reposition a module; on failure it stays where it was."""

        module = self._require(module_id)
        position = Position(x=x, y=y)
        result = validate_reposition(module, position, self._modules, bounds)
        if not result.valid:
            logger.warning(f"Move of module {module_id} to ({x}, {y}) rejected: {result.reason}")
            return result, StateChange()
        self._commit_move(module, position)
        return result, StateChange(moved=[module_id])

    def begin_drag(self, module_id: int) -> None:
        module = self._require(module_id)
        self._drags[module_id] = Position(x=module.x, y=module.y)

    def drag_to(self, module_id: int, x: float, y: float) -> None:
        """Record a provisional drag position; committed state is untouched."""

        if module_id not in self._drags:
            self.begin_drag(module_id)
        self._drags[module_id] = Position(x=x, y=y)

    def drag_position(self, module_id: int) -> Optional[Position]:
        if module_id in self._drags:
            return self._drags[module_id]
        module = self.get(module_id)
        if module is None:
            return None
        return Position(x=module.x, y=module.y)

    def cancel_drag(self, module_id: int) -> None:
        self._drags.pop(module_id, None)

    def end_drag(self, module_id: int, bounds: SurfaceBounds) -> Tuple[PlacementResult, StateChange]:
        """Validate the dropped position and commit it, or roll back to the pre-drag spot."""

        position = self._drags.pop(module_id, None)
        module = self._require(module_id)
        if position is None:
            return PlacementResult.ok(), StateChange()
        return self.move_module(module.id, position.x, position.y, bounds)

    def clear(self) -> StateChange:
        removed = [m.id for m in self._modules]
        self._modules = ()
        self._drags.clear()
        if removed:
            logger.info(f"Cleared habitat ({len(removed)} modules)")
        return StateChange(removed=removed)

    def restore(self, document: HabitatDocument) -> StateChange:
        """Replace all modules with those of an already-validated document."""

        incoming = tuple(document.modules)
        removed = [m.id for m in self._modules]
        self._modules = incoming
        self._drags.clear()
        self._next_id = max(self._next_id, _seed_next_id(incoming), document.next_id or 0)
        unknown = [m.id for m in incoming if catalog.lookup(m.type_id) is None]
        if unknown:
            logger.info(f"Restored {len(unknown)} modules of uncatalogued types: {unknown}")
        logger.info(f"Restored habitat with {len(incoming)} modules; next id {self._next_id}")
        return StateChange(added=[m.id for m in incoming], removed=removed)

    # -- derived views ---------------------------------------------------

    def resources(self) -> ResourceSnapshot:
        return recompute_resources(self._modules)

    def alerts(self) -> List[Alert]:
        return safety_alerts(self.resources(), self.settings)

    def report(self) -> EfficiencyReport:
        return efficiency_report(self._modules, self.settings)


def remove_module(module_id: int, state: HabitatState) -> HabitatState:
    """Return a copy of ``state`` without ``module_id``; unknown ids are a no-op."""

    updated = state.copy()
    updated.remove_module(module_id)
    return updated
