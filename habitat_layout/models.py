"""Core data models for habitat module layouts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AlertSeverity = Literal["danger", "warning", "info", "ok"]
FailureReason = Literal["unknown-module-type", "out-of-bounds", "overlap"]
RecommendationSeverity = Literal["critical", "warning", "suggestion"]
ResourceCategory = Literal["power", "oxygen", "space", "crew"]
GaugeStatus = Literal["critical", "low", "ok", "elevated", "high"]


class ModuleProfile(BaseModel):
    """Fixed physical and resource characteristics of a module type."""

    model_config = ConfigDict(frozen=True)

    type_id: str
    display_name: str
    icon: str = ""
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    power_consumption: float = Field(0.0, ge=0)
    power_generation: float = Field(0.0, ge=0)
    oxygen_production: float = Field(0.0, ge=0)
    oxygen_consumption: float = Field(0.0, ge=0)
    crew_capacity: int = Field(0, ge=0)
    area: float = Field(0.0, ge=0)
    description: str = ""
    required_services: FrozenSet[str] = Field(default_factory=frozenset)
    color: str = "#95a5a6"


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = Field(..., allow_inf_nan=False)
    y: float = Field(..., allow_inf_nan=False)


class SurfaceBounds(BaseModel):
    """Current width/height of the placeable surface."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)


class PlacedModule(BaseModel):
    """A module instance on the surface; its size comes from the catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., gt=0, strict=True)
    type_id: str = Field(..., alias="type", strict=True)
    x: float = Field(..., strict=True, allow_inf_nan=False)
    y: float = Field(..., strict=True, allow_inf_nan=False)

    def moved_to(self, x: float, y: float) -> "PlacedModule":
        return self.model_copy(update={"x": x, "y": y})

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.type_id, "x": self.x, "y": self.y}


class ResourceSnapshot(BaseModel):
    """Aggregate balances recomputed from the full module list."""

    model_config = ConfigDict(frozen=True)

    power_generation: float = 0.0
    power_consumption: float = 0.0
    power_balance: float = 0.0
    oxygen_production: float = 0.0
    oxygen_consumption: float = 0.0
    oxygen_balance: float = 0.0
    crew_capacity: int = 0
    total_area: float = 0.0
    module_count: int = 0
    present_type_ids: FrozenSet[str] = Field(default_factory=frozenset)


class Alert(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: AlertSeverity
    message: str


class PlacementResult(BaseModel):
    """Outcome of a placement or reposition check."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: Optional[FailureReason] = None
    message: str = ""

    @classmethod
    def ok(cls) -> "PlacementResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: FailureReason, message: str) -> "PlacementResult":
        return cls(valid=False, reason=reason, message=message)

    def raise_for_failure(self) -> None:
        """Raise the typed placement error matching ``reason``, if any."""

        if self.valid:
            return
        from .errors import error_for_reason

        raise error_for_reason(self.reason, self.message)


class StateChange(BaseModel):
    """Ids touched by a single habitat state transition."""

    added: List[int] = Field(default_factory=list)
    removed: List[int] = Field(default_factory=list)
    moved: List[int] = Field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.added or self.removed or self.moved)


class ValidationResult(BaseModel):
    """Result set from auditing a whole layout against the surface."""

    passed: bool
    messages: List[str]
    failed_rules: List[str] = Field(default_factory=list)
    out_of_bounds: List[int] = Field(default_factory=list)
    overlaps: List[Tuple[int, int]] = Field(default_factory=list)
    unknown_types: List[int] = Field(default_factory=list)


class EfficiencyScores(BaseModel):
    power: float
    oxygen: float
    space: float
    crew: float
    overall: float


class Recommendation(BaseModel):
    severity: RecommendationSeverity
    category: ResourceCategory
    message: str
    priority: int = Field(..., ge=1)


class EfficiencyReport(BaseModel):
    """Scores, raw balances and ranked recommendations for a layout."""

    timestamp: str
    scores: EfficiencyScores
    resources: ResourceSnapshot
    recommendations: List[Recommendation]


class Gauge(BaseModel):
    level: float
    status: GaugeStatus


class GaugeLevels(BaseModel):
    """Fill levels of the resource panel bars, in percent."""

    power: Gauge
    oxygen: Gauge
    space: Gauge


class HabitatDocument(BaseModel):
    """Persisted/exported habitat design."""

    model_config = ConfigDict(populate_by_name=True)

    modules: List[PlacedModule]
    timestamp: str
    version: str = Field(..., strict=True)
    next_id: Optional[int] = Field(None, alias="nextId", gt=0, strict=True)
    auto_saved: Optional[bool] = Field(None, alias="autoSaved")
    resources: Optional[Dict[str, Any]] = None

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"timestamp is not ISO-8601: {value!r}") from exc
        return value

    @model_validator(mode="after")
    def _unique_ids(self) -> "HabitatDocument":
        seen = set()
        duplicates = set()
        for module in self.modules:
            if module.id in seen:
                duplicates.add(module.id)
            seen.add(module.id)
        if duplicates:
            dup = ", ".join(str(i) for i in sorted(duplicates))
            raise ValueError(f"duplicate module ids: {dup}")
        return self


class DesignerSettings(BaseModel):
    """Thresholds and limits used by alerts, scoring and the shells."""

    max_surface_area: float = Field(1000.0, gt=0)
    power_reserve_threshold: float = 10.0
    oxygen_reserve_threshold: float = 5.0
    min_crew_capacity: int = 4
    recommendation_threshold: float = 70.0
    space_recommendation_threshold: float = 50.0
    space_capacity_ratio: float = 0.9
    airlock_type: str = "airlock"
    power_type: str = "power"
    document_version: str = "1.0"
    refresh_interval_s: float = Field(5.0, gt=0)
    autosave_interval_s: float = Field(30.0, gt=0)


class PlacementOutcome(BaseModel):
    """Placed module (on success), the validation verdict and what changed."""

    module: Optional[PlacedModule] = None
    result: PlacementResult
    change: StateChange = Field(default_factory=StateChange)

    @property
    def ok(self) -> bool:
        return self.result.valid
