"""CLI tests for the flowlayout command.

Uses CliRunner to test command output without subprocess overhead.
"""

import json

from typer.testing import CliRunner

from flowlayout.cli import app

runner = CliRunner()

DOCUMENT = {
    "nodes": [
        {"id": "A", "position": {"x": 0, "y": 0}, "width": 100, "height": 50},
        {"id": "B", "position": {"x": 0, "y": 0}, "width": 100, "height": 50},
        {"id": "C", "position": {"x": 0, "y": 0}, "width": 100, "height": 50},
        {"id": "D", "position": {"x": 0, "y": 0}, "width": 100, "height": 50},
    ],
    "edges": [{"id": "e1", "source": "A", "target": "B"}, {"id": "e2", "source": "C", "target": "D"}],
}


def positions(document: dict) -> dict[str, dict]:
    return {n["id"]: n["position"] for n in document["nodes"]}


class TestLayoutCommand:
    def test_writes_to_stdout(self, tmp_path):
        """Laid-out JSON goes to stdout by default."""
        src = tmp_path / "flow.json"
        src.write_text(json.dumps(DOCUMENT))
        result = runner.invoke(app, ["layout", str(src)])
        assert result.exit_code == 0, result.output
        pos = positions(json.loads(result.output))
        assert pos["A"] == {"x": 0, "y": 0}
        assert pos["C"]["y"] == 50 + 40

    def test_spacing_option(self, tmp_path):
        """--spacing changes the gap between groups."""
        src = tmp_path / "flow.json"
        src.write_text(json.dumps(DOCUMENT))
        result = runner.invoke(app, ["layout", str(src), "--spacing", "10"])
        assert result.exit_code == 0, result.output
        assert positions(json.loads(result.output))["C"]["y"] == 50 + 20

    def test_output_file(self, tmp_path):
        """--output writes the document to a file."""
        src = tmp_path / "flow.json"
        dst = tmp_path / "out.json"
        src.write_text(json.dumps(DOCUMENT))
        result = runner.invoke(app, ["layout", str(src), "-o", str(dst), "--sequential", "--on-error", "stack"])
        assert result.exit_code == 0, result.output
        assert set(positions(json.loads(dst.read_text()))) == {"A", "B", "C", "D"}

    def test_stdin(self):
        """'-' reads the document from stdin."""
        result = runner.invoke(app, ["layout", "-"], input=json.dumps(DOCUMENT))
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)["nodes"]) == 4

    def test_invalid_json(self, tmp_path):
        """Malformed input exits with status 1."""
        src = tmp_path / "flow.json"
        src.write_text("{not json")
        result = runner.invoke(app, ["layout", str(src)])
        assert result.exit_code == 1

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["layout", str(tmp_path / "nope.json")])
        assert result.exit_code == 1

    def test_record_without_id(self, tmp_path):
        """A node record without an id is reported, not a traceback."""
        src = tmp_path / "flow.json"
        src.write_text(json.dumps({"nodes": [{"position": {"x": 0, "y": 0}}]}))
        result = runner.invoke(app, ["layout", str(src)])
        assert result.exit_code == 1

    def test_negative_spacing_rejected(self, tmp_path):
        src = tmp_path / "flow.json"
        src.write_text(json.dumps(DOCUMENT))
        result = runner.invoke(app, ["layout", str(src), "--spacing=-5"])
        assert result.exit_code == 1
