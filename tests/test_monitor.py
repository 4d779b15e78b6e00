import json
import threading
from pathlib import Path

from habitat_layout.monitor import AutoSaver, ResourceMonitor
from habitat_layout.resources import recompute_resources
from habitat_layout.state import HabitatState

from conftest import make_module


def test_refresh_matches_direct_aggregation():
    state = HabitatState([make_module(1, "power"), make_module(2, "living-quarters", 150)])
    seen = []
    monitor = ResourceMonitor(state, interval=60, on_refresh=seen.append)
    snapshot = monitor.refresh()
    assert snapshot == recompute_resources(state.modules)
    assert monitor.refresh() == snapshot
    assert seen == [snapshot, snapshot]
    assert monitor.latest == snapshot


def test_monitor_thread_refreshes_until_stopped(bounds):
    state = HabitatState()
    state.place_module("power", 0, 0, bounds)
    refreshed = threading.Event()
    monitor = ResourceMonitor(state, interval=0.01, on_refresh=lambda _: refreshed.set())
    monitor.start()
    try:
        assert refreshed.wait(5)
        assert monitor.running
    finally:
        monitor.stop(timeout=5)
    assert not monitor.running
    assert monitor.latest.power_generation == 50


def test_autosave_skips_empty_habitat(tmp_path: Path):
    path = tmp_path / "autosave.json"
    saver = AutoSaver(HabitatState(), path, interval=60)
    assert saver.save_now() is False
    assert not path.exists()


def test_autosave_marks_document(tmp_path: Path):
    path = tmp_path / "autosave.json"
    saver = AutoSaver(HabitatState([make_module(1, "airlock")]), path, interval=60)
    assert saver.save_now() is True
    data = json.loads(path.read_text())
    assert data["autoSaved"] is True
    assert data["modules"] == [{"id": 1, "type": "airlock", "x": 0.0, "y": 0.0}]


def test_autosave_failure_is_logged_not_raised(tmp_path: Path, caplog):
    path = tmp_path / "missing-dir" / "autosave.json"
    saver = AutoSaver(HabitatState([make_module(1, "airlock")]), path, interval=60)
    assert saver.save_now() is False
    assert "Auto-save" in caplog.text


def test_failing_refresh_is_logged_and_loop_keeps_running(caplog):
    state = HabitatState([make_module(1, "power")])
    calls = []
    second = threading.Event()

    def on_refresh(snapshot):
        calls.append(snapshot)
        if len(calls) == 1:
            raise RuntimeError("display gone")
        second.set()

    monitor = ResourceMonitor(state, interval=0.01, on_refresh=on_refresh)
    monitor.start()
    try:
        assert second.wait(5)
        assert monitor.running
    finally:
        monitor.stop(timeout=5)
    assert "resource-monitor tick failed" in caplog.text


class _RecordingLock:
    def __init__(self):
        self.entered = 0

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, *exc):
        return False


def test_autosave_snapshots_under_lock(tmp_path: Path):
    lock = _RecordingLock()
    state = HabitatState([make_module(1, "airlock"), make_module(4, "power", 200)])
    saver = AutoSaver(state, tmp_path / "autosave.json", interval=60, lock=lock)
    assert saver.save_now() is True
    assert lock.entered == 1
    data = json.loads((tmp_path / "autosave.json").read_text())
    assert data["nextId"] == 5
