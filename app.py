import os
import threading
from pathlib import Path
from typing import Any, Dict, Tuple

from flask import Flask, jsonify, request
from pydantic import ValidationError

from habitat_layout import catalog
from habitat_layout.errors import HabitatError, MalformedPersistedDocument, ModuleNotFound
from habitat_layout.io_schema import (
    export_markdown,
    load_document,
    load_settings,
    restore_state,
    save_document,
    to_document,
)
from habitat_layout.models import PlacementResult, StateChange, SurfaceBounds
from habitat_layout.monitor import AutoSaver, ResourceMonitor
from habitat_layout.scoring import gauge_levels
from habitat_layout.state import HabitatState

# Flask setup
app = Flask(__name__)

_settings = load_settings(os.environ.get("HABITAT_SETTINGS"))
app.config["HABITAT_STATE"] = HabitatState(settings=_settings)
app.config["HABITAT_SAVE_PATH"] = Path(os.environ.get("HABITAT_SAVE_PATH", "habitat-design.json"))
app.config["HABITAT_AUTOSAVE_PATH"] = Path(
    os.environ.get("HABITAT_AUTOSAVE_PATH", "habitat-design-autosave.json")
)

# Mutations from concurrent requests are serialised; readers use the state's atomic tuple.
_state_lock = threading.Lock()

_STATUS_BY_REASON = {
    "unknown-module-type": 400,
    "out-of-bounds": 409,
    "overlap": 409,
}


class PayloadError(Exception):
    pass


def _state() -> HabitatState:
    return app.config["HABITAT_STATE"]


def _payload() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise PayloadError("JSON object payload required")
    return data


def _bounds(payload: Dict[str, Any]) -> SurfaceBounds:
    raw = payload.get("bounds")
    if not isinstance(raw, dict):
        raise PayloadError("bounds {width, height} required")
    try:
        return SurfaceBounds.model_validate(raw)
    except ValidationError as exc:
        raise PayloadError(f"Invalid bounds: {exc}") from exc


def _coords(payload: Dict[str, Any]) -> Tuple[float, float]:
    try:
        return float(payload["x"]), float(payload["y"])
    except (KeyError, TypeError, ValueError) as exc:
        raise PayloadError("numeric x and y required") from exc


def _summary(state: HabitatState) -> Dict[str, Any]:
    snapshot = state.resources()
    return {
        "resources": snapshot.model_dump(mode="json"),
        "alerts": [a.model_dump() for a in state.alerts()],
        "gauges": gauge_levels(snapshot, state.settings).model_dump(),
    }


def _rejection(result: PlacementResult):
    body = {"error": result.message, "reason": result.reason}
    return jsonify(body), _STATUS_BY_REASON.get(result.reason or "", 409)


def _changed(state: HabitatState, change: StateChange, status: int = 200, **extra: Any):
    body = {"change": change.model_dump(), **extra, **_summary(state)}
    return jsonify(body), status


@app.errorhandler(PayloadError)
def _bad_request(exc: PayloadError):
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(ValidationError)
def _invalid_value(exc: ValidationError):
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(ModuleNotFound)
def _not_found(exc: ModuleNotFound):
    return jsonify({"error": str(exc)}), 404


@app.errorhandler(HabitatError)
def _habitat_error(exc: HabitatError):
    return jsonify({"error": str(exc)}), 400


@app.route("/catalog", methods=["GET"])
def get_catalog():
    return jsonify({"types": catalog.list_type_ids(), "modules": catalog.catalog_payload()})


@app.route("/habitat", methods=["GET"])
def get_habitat():
    state = _state()
    body = {
        "modules": [m.to_record() for m in state.modules],
        "next_id": state.next_id,
        **_summary(state),
    }
    return jsonify(body)


@app.route("/habitat/modules", methods=["POST"])
def place_module():
    payload = _payload()
    bounds = _bounds(payload)
    x, y = _coords(payload)
    type_id = str(payload.get("type", ""))
    state = _state()
    with _state_lock:
        outcome = state.place_module(type_id, x, y, bounds)
    if not outcome.ok:
        return _rejection(outcome.result)
    return _changed(state, outcome.change, 201, module=outcome.module.to_record())


@app.route("/habitat/modules/<int:module_id>", methods=["DELETE"])
def remove_module(module_id: int):
    state = _state()
    with _state_lock:
        change = state.remove_module(module_id)
    return _changed(state, change)


@app.route("/habitat/modules/<int:module_id>", methods=["PATCH"])
def move_module(module_id: int):
    payload = _payload()
    bounds = _bounds(payload)
    x, y = _coords(payload)
    state = _state()
    with _state_lock:
        result, change = state.move_module(module_id, x, y, bounds)
    if not result.valid:
        return _rejection(result)
    return _changed(state, change, module=state.get(module_id).to_record())


@app.route("/habitat/modules/<int:module_id>/drag", methods=["POST"])
def drag_module(module_id: int):
    payload = _payload()
    x, y = _coords(payload)
    state = _state()
    with _state_lock:
        if state.get(module_id) is None:
            raise ModuleNotFound(f"No module with id {module_id}")
        state.drag_to(module_id, x, y)
    return jsonify({"id": module_id, "x": x, "y": y, "committed": False})


@app.route("/habitat/modules/<int:module_id>/drop", methods=["POST"])
def drop_module(module_id: int):
    payload = _payload()
    bounds = _bounds(payload)
    state = _state()
    with _state_lock:
        result, change = state.end_drag(module_id, bounds)
    module = state.get(module_id).to_record()
    if not result.valid:
        body = {"error": result.message, "reason": result.reason, "module": module}
        return jsonify(body), _STATUS_BY_REASON.get(result.reason or "", 409)
    return _changed(state, change, module=module)


@app.route("/habitat/clear", methods=["POST"])
def clear_habitat():
    state = _state()
    with _state_lock:
        change = state.clear()
    return _changed(state, change)


@app.route("/habitat/resources", methods=["GET"])
def get_resources():
    return jsonify(_summary(_state()))


@app.route("/habitat/report", methods=["GET"])
def get_report():
    return jsonify(_state().report().model_dump(mode="json"))


@app.route("/habitat/save", methods=["POST"])
def save_habitat():
    path = app.config["HABITAT_SAVE_PATH"]
    data = save_document(_state(), path)
    return jsonify({"saved": str(path), "modules": len(data["modules"]), "timestamp": data["timestamp"]})


@app.route("/habitat/load", methods=["POST"])
def load_habitat():
    data = request.get_json(silent=True)
    state = _state()
    if data is not None:
        with _state_lock:
            change = restore_state(state, data)
        return _changed(state, change)

    path = Path(app.config["HABITAT_SAVE_PATH"])
    if not path.exists():
        return jsonify({"error": "No saved habitat found"}), 404
    try:
        document = load_document(path)
    except MalformedPersistedDocument as exc:
        return jsonify({"error": f"Error loading habitat design: {exc}"}), 400
    with _state_lock:
        change = state.restore(document)
    return _changed(state, change)


@app.route("/habitat/export", methods=["GET"])
def export_habitat():
    state = _state()
    if request.args.get("format", "json") == "md":
        return jsonify({"markdown": export_markdown(state)})
    return jsonify(to_document(state, include_resources=True))


if __name__ == "__main__":
    ResourceMonitor(_state()).start()
    AutoSaver(_state(), app.config["HABITAT_AUTOSAVE_PATH"], lock=_state_lock).start()
    app.run(host="0.0.0.0", port=5000, debug=True, use_reloader=False)
