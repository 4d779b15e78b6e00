"""Command line interface for the habitat_layout toolkit."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from io import StringIO
from pathlib import Path
from typing import Any

from . import catalog
from .constraints import validate_layout
from .errors import HabitatError
from .io_schema import (
    document_schema,
    export_markdown,
    load_settings,
    load_state,
    save_document,
    settings_schema,
    to_document,
)
from .models import SurfaceBounds
from .scoring import gauge_levels
from .state import HabitatState

DEFAULT_DESIGN_PATH = Path("habitat-design.json")
DEFAULT_WIDTH = 800.0
DEFAULT_HEIGHT = 600.0


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _bounds(args: argparse.Namespace) -> SurfaceBounds:
    return SurfaceBounds(width=args.width, height=args.height)


def _load(args: argparse.Namespace) -> HabitatState:
    settings = load_settings(getattr(args, "settings", None))
    return load_state(args.design, settings)


def cmd_init(args: argparse.Namespace) -> int:
    path = Path(args.design)
    if path.exists() and not args.force:
        print(f"{path} already exists; pass --force to overwrite", file=sys.stderr)
        return 1
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    save_document(HabitatState(settings=load_settings(args.settings)), path)
    print(f"Wrote empty habitat design to {path}")
    return 0


def cmd_catalog(args: argparse.Namespace) -> int:
    if args.json:
        _print_json(catalog.catalog_payload())
        return 0
    for type_id in catalog.list_type_ids():
        profile = catalog.require(type_id)
        print(
            f"{type_id:16} {profile.display_name:16} {profile.width:g}x{profile.height:g} "
            f"power -{profile.power_consumption:g}/+{profile.power_generation:g} "
            f"O2 -{profile.oxygen_consumption:g}/+{profile.oxygen_production:g} "
            f"crew {profile.crew_capacity}"
        )
    return 0


def cmd_place(args: argparse.Namespace) -> int:
    state = _load(args)
    outcome = state.place_module(args.type, args.x, args.y, _bounds(args))
    outcome.result.raise_for_failure()
    save_document(state, args.design)
    print(f"Placed {args.type} as module {outcome.module.id}")
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    state = _load(args)
    change = state.remove_module(args.id)
    if change.empty:
        print(f"No module with id {args.id}; nothing removed")
        return 0
    save_document(state, args.design)
    print(f"Removed module {args.id}")
    return 0


def cmd_move(args: argparse.Namespace) -> int:
    state = _load(args)
    result, _ = state.move_module(args.id, args.x, args.y, _bounds(args))
    result.raise_for_failure()
    save_document(state, args.design)
    print(f"Moved module {args.id} to ({args.x:g}, {args.y:g})")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    state = _load(args)
    change = state.clear()
    save_document(state, args.design)
    print(f"Cleared {len(change.removed)} modules")
    return 0


def cmd_resources(args: argparse.Namespace) -> int:
    state = _load(args)
    snapshot = state.resources()
    _print_json({
        "resources": snapshot.model_dump(mode="json"),
        "gauges": gauge_levels(snapshot, state.settings).model_dump(),
    })
    return 0


def cmd_alerts(args: argparse.Namespace) -> int:
    state = _load(args)
    alerts = state.alerts()
    for alert in alerts:
        print(f"[{alert.severity}] {alert.message}")
    return 1 if any(a.severity == "danger" for a in alerts) else 0


def cmd_report(args: argparse.Namespace) -> int:
    state = _load(args)
    _print_json(state.report().model_dump(mode="json"))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    state = _load(args)
    result = validate_layout(state.modules, _bounds(args))
    for msg in result.messages:
        print(msg)
    return 0 if result.passed else 1


def cmd_export(args: argparse.Namespace) -> int:
    state = _load(args)

    if args.format == "md":
        output = export_markdown(state)
    elif args.format == "json":
        output = json.dumps(to_document(state, include_resources=True), indent=2)
    elif args.format == "csv":
        buffer = StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["Metric", "Value"])
        for key, value in state.resources().model_dump(mode="json").items():
            if isinstance(value, list):
                value = ";".join(sorted(value))
            writer.writerow([key, value])
        output = buffer.getvalue()
    else:
        raise ValueError(f"Unsupported export format: {args.format}")

    if args.out:
        Path(args.out).write_text(output)
    else:
        sys.stdout.write(output if output.endswith("\n") else output + "\n")
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    data = settings_schema() if args.target == "settings" else document_schema()
    _print_json(data)
    return 0


def _add_design(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--design", default=str(DEFAULT_DESIGN_PATH))
    parser.add_argument("--settings", default=None)


def _add_bounds(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--width", type=float, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=float, default=DEFAULT_HEIGHT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habitat_layout")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command")

    p_init = sub.add_parser("init", help="write an empty design file")
    _add_design(p_init)
    p_init.add_argument("--force", action="store_true")
    p_init.set_defaults(func=cmd_init)

    p_cat = sub.add_parser("catalog", help="list module types")
    p_cat.add_argument("--json", action="store_true")
    p_cat.set_defaults(func=cmd_catalog)

    p_place = sub.add_parser("place", help="place a module")
    _add_design(p_place)
    _add_bounds(p_place)
    p_place.add_argument("type")
    p_place.add_argument("x", type=float)
    p_place.add_argument("y", type=float)
    p_place.set_defaults(func=cmd_place)

    p_rm = sub.add_parser("remove", help="remove a module by id")
    _add_design(p_rm)
    p_rm.add_argument("id", type=int)
    p_rm.set_defaults(func=cmd_remove)

    p_mv = sub.add_parser("move", help="reposition a module")
    _add_design(p_mv)
    _add_bounds(p_mv)
    p_mv.add_argument("id", type=int)
    p_mv.add_argument("x", type=float)
    p_mv.add_argument("y", type=float)
    p_mv.set_defaults(func=cmd_move)

    p_clear = sub.add_parser("clear", help="remove every module")
    _add_design(p_clear)
    p_clear.set_defaults(func=cmd_clear)

    p_res = sub.add_parser("resources", help="print resource balances")
    _add_design(p_res)
    p_res.set_defaults(func=cmd_resources)

    p_alerts = sub.add_parser("alerts", help="print safety alerts")
    _add_design(p_alerts)
    p_alerts.set_defaults(func=cmd_alerts)

    p_report = sub.add_parser("report", help="print efficiency report")
    _add_design(p_report)
    p_report.set_defaults(func=cmd_report)

    p_val = sub.add_parser("validate", help="audit placements against the surface")
    _add_design(p_val)
    _add_bounds(p_val)
    p_val.set_defaults(func=cmd_validate)

    p_exp = sub.add_parser("export", help="export design summary")
    _add_design(p_exp)
    p_exp.add_argument("--format", choices=["md", "json", "csv"], required=True)
    p_exp.add_argument("--out", default=None)
    p_exp.set_defaults(func=cmd_export)

    p_schema = sub.add_parser("schema", help="print JSON schema")
    p_schema.add_argument("--target", choices=["document", "settings"], default="document")
    p_schema.set_defaults(func=cmd_schema)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    try:
        return int(args.func(args))
    except (HabitatError, ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
