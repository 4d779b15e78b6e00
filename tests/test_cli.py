import json
import subprocess
import sys
from pathlib import Path

import pytest

from habitat_layout.cli import main

CLI = [sys.executable, "-m", "habitat_layout.cli"]


@pytest.mark.integration
def test_cli_quickstart(tmp_path: Path):
    design = tmp_path / "design.json"
    common = ["--design", str(design)]

    subprocess.run(CLI + ["init"] + common, check=True)
    subprocess.run(CLI + ["place"] + common + ["power", "0", "0"], check=True)
    subprocess.run(CLI + ["place"] + common + ["living-quarters", "100", "0"], check=True)
    subprocess.run(CLI + ["validate"] + common, check=True)
    result = subprocess.run(
        CLI + ["resources"] + common,
        check=True,
        capture_output=True,
        text=True,
    )
    payload = json.loads(result.stdout)
    assert payload["resources"]["power_balance"] == 35
    assert payload["resources"]["crew_capacity"] == 4


def test_place_rejects_overlap(tmp_path: Path, capsys):
    design = str(tmp_path / "design.json")
    assert main(["init", "--design", design]) == 0
    assert main(["place", "--design", design, "power", "0", "0"]) == 0
    assert main(["place", "--design", design, "airlock", "50", "50"]) == 1
    assert "overlaps" in capsys.readouterr().err
    data = json.loads(Path(design).read_text())
    assert [m["id"] for m in data["modules"]] == [1]


def test_place_uses_given_bounds(tmp_path: Path):
    design = str(tmp_path / "design.json")
    main(["init", "--design", design])
    args = ["place", "--design", design, "--width", "150", "--height", "150", "power"]
    assert main(args + ["50", "50"]) == 0
    assert main(args + ["51", "0"]) == 1


def test_remove_then_place_gets_fresh_id(tmp_path: Path):
    design = str(tmp_path / "design.json")
    main(["init", "--design", design])
    main(["place", "--design", design, "airlock", "0", "0"])
    main(["place", "--design", design, "airlock", "100", "0"])
    assert main(["remove", "--design", design, "2"]) == 0
    main(["place", "--design", design, "airlock", "200", "0"])
    data = json.loads(Path(design).read_text())
    assert [m["id"] for m in data["modules"]] == [1, 3]
    assert data["nextId"] == 4


def test_move_missing_module_fails(tmp_path: Path, capsys):
    design = str(tmp_path / "design.json")
    main(["init", "--design", design])
    assert main(["move", "--design", design, "4", "10", "10"]) == 1
    assert "No module with id 4" in capsys.readouterr().err


def test_alerts_exit_code(tmp_path: Path, capsys):
    design = str(tmp_path / "design.json")
    main(["init", "--design", design])
    assert main(["alerts", "--design", design]) == 1
    out = capsys.readouterr().out
    assert "[danger] No power generation" in out


def test_export_formats(tmp_path: Path):
    design = str(tmp_path / "design.json")
    main(["init", "--design", design])
    main(["place", "--design", design, "greenhouse", "0", "0"])
    md = tmp_path / "summary.md"
    csv_path = tmp_path / "summary.csv"
    js = tmp_path / "export.json"
    assert main(["export", "--design", design, "--format", "md", "--out", str(md)]) == 0
    assert main(["export", "--design", design, "--format", "csv", "--out", str(csv_path)]) == 0
    assert main(["export", "--design", design, "--format", "json", "--out", str(js)]) == 0
    assert "Greenhouse" in md.read_text()
    assert "oxygen_balance,13" in csv_path.read_text()
    assert json.loads(js.read_text())["resources"]["oxygen_production"] == 15


def test_malformed_design_is_reported(tmp_path: Path, capsys):
    design = tmp_path / "design.json"
    design.write_text(json.dumps({"modules": [{"id": 1}], "timestamp": "2024-01-01T00:00:00Z", "version": "1.0"}))
    assert main(["resources", "--design", str(design)]) == 1
    assert "Habitat document invalid" in capsys.readouterr().err
