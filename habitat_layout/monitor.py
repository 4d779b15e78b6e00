"""Background resource refresh and autosave loops."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, ContextManager, Optional

from .io_schema import save_document
from .models import ResourceSnapshot
from .resources import recompute_resources
from .state import HabitatState

logger = logging.getLogger(__name__)


class _PeriodicTask:
    """Run ``tick`` every ``interval`` seconds on a daemon thread until stopped."""

    name = "periodic-task"

    def __init__(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> None:
        raise NotImplementedError

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.tick()
            except Exception:
                logger.exception(f"{self.name} tick failed")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


class ResourceMonitor(_PeriodicTask):
    """Periodically recompute the resource snapshot of a habitat.

    Each refresh reads the state's module tuple once, so it always works on a
    complete list even while the owning thread keeps mutating the state.
    """

    name = "resource-monitor"

    def __init__(
        self,
        state: HabitatState,
        interval: Optional[float] = None,
        on_refresh: Optional[Callable[[ResourceSnapshot], None]] = None,
    ) -> None:
        super().__init__(interval or state.settings.refresh_interval_s)
        self.state = state
        self.on_refresh = on_refresh
        self.latest: Optional[ResourceSnapshot] = None

    def refresh(self) -> ResourceSnapshot:
        modules = self.state.modules
        snapshot = recompute_resources(modules)
        self.latest = snapshot
        if self.on_refresh is not None:
            self.on_refresh(snapshot)
        return snapshot

    def tick(self) -> None:
        self.refresh()


class AutoSaver(_PeriodicTask):
    """Write an autosave document while the habitat holds modules."""

    name = "habitat-autosave"

    def __init__(
        self,
        state: HabitatState,
        path: Path | str,
        interval: Optional[float] = None,
        lock: Optional[ContextManager] = None,
    ) -> None:
        super().__init__(interval or state.settings.autosave_interval_s)
        self.state = state
        self.path = Path(path)
        self.lock = lock

    def _snapshot(self) -> HabitatState:
        if self.lock is None:
            return self.state.copy()
        with self.lock:
            return self.state.copy()

    def save_now(self) -> bool:
        snapshot = self._snapshot()
        if not len(snapshot):
            return False
        try:
            save_document(snapshot, self.path, auto_saved=True)
        except OSError as exc:
            logger.warning(f"Auto-save to {self.path} failed: {exc}")
            return False
        logger.info(f"Auto-saved {len(snapshot)} modules to {self.path}")
        return True

    def tick(self) -> None:
        self.save_now()
