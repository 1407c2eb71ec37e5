"""
Tests for the command line interface.
"""

import json
from dataclasses import replace

import pytest

from planogram_core.cli import main
from planogram_core.persistence import serialize

TEMPLATE = {
    "fixture": {"id": "fx-endcap", "name": "Endcap"},
    "sections": [{"id": "s1", "width": 36, "height": 60, "rows": [{"id": "r0", "height": 14}]}],
}


@pytest.fixture
def snapshot_file(tmp_path, planogram, engine, make_component):
    engine.place(planogram.fixture.sections["s1"], make_component("a", facings=2), 0, 0.0)
    path = tmp_path / "pog.json"
    path.write_text(json.dumps(serialize(planogram)))
    return str(path)


@pytest.fixture
def data_dir(tmp_path):
    templates = tmp_path / "data" / "fixture_templates"
    templates.mkdir(parents=True)
    (templates / "endcap_fixture.json").write_text(json.dumps(TEMPLATE))
    return str(tmp_path / "data")


class TestCommands:

    def test_validate_clean_snapshot(self, snapshot_file, capsys):
        assert main(["validate", snapshot_file]) == 0
        assert "All validations passed" in capsys.readouterr().out

    def test_validate_broken_snapshot(self, tmp_path, planogram, make_component, capsys):
        section = planogram.fixture.sections["s1"]
        for component_id in ("a", "b"):
            component = replace(make_component(component_id), row_index=0, x=0.0, y=60.0)
            section.components[component.id] = component
        path = tmp_path / "broken.json"
        path.write_text(json.dumps(serialize(planogram)))

        assert main(["validate", str(path)]) == 1
        assert "overlap" in capsys.readouterr().out

    def test_capacity(self, snapshot_file, capsys):
        assert main(["capacity", snapshot_file]) == 0
        out = capsys.readouterr().out
        assert "r0" in out and "r2" in out

    def test_export_csv(self, snapshot_file, tmp_path):
        out_dir = tmp_path / "exports"
        assert main(["export", snapshot_file, "--format", "csv", "--output-dir", str(out_dir)]) == 0
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "pog-1_capacity.csv", "pog-1_components.csv"
        ]

    def test_new_then_history(self, data_dir, tmp_path, capsys):
        store_dir = str(tmp_path / "store")
        assert main(["--data-path", data_dir, "new", "--template", "endcap",
                     "--planogram-id", "pog-9", "--store-dir", store_dir]) == 0
        assert "version 1" in capsys.readouterr().out

        assert main(["history", "pog-9", "--store-dir", store_dir]) == 0
        assert "v1" in capsys.readouterr().out

    def test_history_of_unknown_planogram(self, tmp_path):
        assert main(["history", "pog-x", "--store-dir", str(tmp_path)]) == 1


class TestErrors:

    def test_missing_snapshot(self, tmp_path, capsys):
        assert main(["capacity", str(tmp_path / "missing.json")]) == 1
        assert "❌ Error" in capsys.readouterr().out

    def test_bad_config(self, tmp_path, snapshot_file):
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"scale": -1}))
        assert main(["--config", str(config), "capacity", snapshot_file]) == 2
