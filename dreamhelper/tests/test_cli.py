"""
Tests for the command-line interface.
"""

import json

import pytest

from ..catalog import LOTUSES, dump_catalog
from ..cli import main


class TestCLI:

    def test_catalog_search(self, capsys):
        main(["catalog", "--search", "fluorescent", "--limit", "3"])
        out = capsys.readouterr().out
        assert "3 lotus(es)" in out

    def test_validate_builtin(self, capsys):
        main(["validate"])
        assert "Catalog is valid" in capsys.readouterr().out

    def test_validate_invalid_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        dump_catalog([LOTUSES[0], LOTUSES[0]], path)
        with pytest.raises(SystemExit):
            main(["validate", str(path)])
        assert "Duplicate" in capsys.readouterr().out

    def test_recommend(self, tmp_path, capsys):
        path = tmp_path / "vision.json"
        path.write_text(json.dumps({
            "bubbles": [{"type": "Gear", "quality": "White"}] * 2,
            "visionCapacity": 10,
        }), encoding="utf-8")
        main(["recommend", str(path), "--lotus", "adds-1-bubble", "--lotus", "adds-2-gear-bubbles"])
        out = capsys.readouterr().out
        assert out.startswith("1. Adds 2 Gear Bubbles")

    def test_recommend_reads_weights(self, tmp_path, capsys):
        """Weights in the vision file change the ranking."""
        path = tmp_path / "vision.json"
        path.write_text(json.dumps({
            "bubbles": [{"type": "Gear", "quality": "White"}] * 2,
            "visionCapacity": 10,
            "weights": {"typeWeights": {"Whim": 10.0}},
        }), encoding="utf-8")
        main(["recommend", str(path), "--lotus", "adds-1-bubble", "--lotus", "adds-2-gear-bubbles"])
        assert capsys.readouterr().out.startswith("1. Adds 1 bubble")

    def test_recommend_unknown_lotus(self, tmp_path):
        path = tmp_path / "vision.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(SystemExit):
            main(["recommend", str(path), "--lotus", "nope"])
