"""Error taxonomy for placement and restore failures."""

from __future__ import annotations

from typing import Dict, Optional, Type


class HabitatError(Exception):
    """Base class for recoverable habitat errors."""


class PlacementError(HabitatError):
    reason = "placement"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.reason)
        self.message = message or self.reason


class UnknownModuleType(PlacementError):
    reason = "unknown-module-type"


class OutOfBounds(PlacementError):
    reason = "out-of-bounds"


class Overlap(PlacementError):
    reason = "overlap"


class MalformedPersistedDocument(HabitatError, ValueError):
    """A saved design is missing fields or carries invalid values."""


_ERRORS_BY_REASON: Dict[str, Type[PlacementError]] = {
    cls.reason: cls for cls in (UnknownModuleType, OutOfBounds, Overlap)
}


def error_for_reason(reason: Optional[str], message: str = "") -> PlacementError:
    cls = _ERRORS_BY_REASON.get(reason or "", PlacementError)
    return cls(message)


class ModuleNotFound(HabitatError, KeyError):
    """No placed module carries the requested id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "module not found"
