"""Integration tests for the formflow CLI"""

import json

import pytest
from typer.testing import CliRunner

from formflow.cli import app

runner = CliRunner()

FLOW = {
    "id": "demo",
    "title": "Demo Qualifier",
    "questions": [
        {
            "id": "q1",
            "type": "single-choice",
            "title": "Company size?",
            "options": ["Small", "Enterprise"],
            "lead_scoring_enabled": True,
            "lead_scoring": {"Small": 5, "Enterprise": 30},
            "conditional_logic": [
                {"condition": {"field": "q1", "operator": "equals", "value": "Enterprise"},
                 "action": "jump", "thenGoTo": "q3"},
            ],
        },
        {"id": "q2", "type": "short-text", "title": "Role"},
        {"id": "q3", "type": "email", "title": "Work email"},
    ],
    "endings": [{"id": "end-ok", "title": "Thanks", "mark_as_qualified": True}],
}


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Working directory with a flow and an answer set"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FORMFLOW_CONFIG", raising=False)
    (tmp_path / "flow.json").write_text(json.dumps(FLOW))
    (tmp_path / "answers.yaml").write_text("q1: Enterprise\nq3: jane@acme.io\n")
    return tmp_path


class TestValidate:
    def test_valid_flow(self, workspace):
        result = runner.invoke(app, ["validate", "flow.json"])

        assert result.exit_code == 0
        assert "Flow is valid" in result.stdout

    def test_dangling_reference_fails(self, workspace):
        broken = json.loads(json.dumps(FLOW))
        broken["questions"][0]["conditional_logic"][0]["thenGoTo"] = "deleted"
        (workspace / "broken.json").write_text(json.dumps(broken))

        result = runner.invoke(app, ["validate", "broken.json", "--json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["valid"] is False
        assert report["errors"][0]["code"] == "dangling_target"

    def test_strict_fails_on_warnings(self, workspace):
        warned = json.loads(json.dumps(FLOW))
        warned["questions"][0]["lead_scoring"]["Removed"] = 1
        (workspace / "warned.json").write_text(json.dumps(warned))

        assert runner.invoke(app, ["validate", "warned.json"]).exit_code == 0
        assert runner.invoke(app, ["validate", "warned.json", "--strict"]).exit_code == 1

    def test_unreadable_document(self, workspace):
        (workspace / "bad.json").write_text("{")

        result = runner.invoke(app, ["validate", "bad.json"])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout


class TestSimulate:
    def test_walks_the_flow(self, workspace):
        result = runner.invoke(app, ["simulate", "flow.json", "--answers", "answers.yaml"])

        assert result.exit_code == 0
        assert "q1 → q3" in result.stdout
        assert "qualified" in result.stdout
        assert "Lead score: 30" in result.stdout

    def test_stops_on_invalid_answer(self, workspace):
        (workspace / "bad_answers.json").write_text(json.dumps({"q1": "Enterprise", "q3": "nope"}))

        result = runner.invoke(app, ["simulate", "flow.json", "--answers", "bad_answers.json"])

        assert result.exit_code == 1
        assert "Stopped at 'q3'" in result.stdout


def test_score(workspace):
    result = runner.invoke(app, ["score", "flow.json", "--answers", "answers.yaml"])

    assert result.exit_code == 0
    assert "Total: 30 (qualified)" in result.stdout


def test_score_threshold_from_config(workspace):
    (workspace / "formflow.yaml").write_text("qualification:\n  score_threshold: 50\n")

    result = runner.invoke(app, ["score", "flow.json", "--answers", "answers.yaml"])

    assert "Total: 30 (not qualified)" in result.stdout


class TestGraph:
    def test_mermaid(self, workspace):
        result = runner.invoke(app, ["graph", "flow.json", "--mermaid"])

        assert result.exit_code == 0
        assert result.stdout.startswith("flowchart TD")
        assert "n_q1 --> n_q2" in result.stdout
        assert '-. "equals Enterprise" .-> n_q3' in result.stdout

    def test_table(self, workspace):
        result = runner.invoke(app, ["graph", "flow.json"])

        assert result.exit_code == 0
        assert "Nodes" in result.stdout
        assert "end-ok" in result.stdout


def test_missing_config_file(workspace):
    result = runner.invoke(app, ["--config", "nope.yaml", "validate", "flow.json"])

    assert result.exit_code == 1
