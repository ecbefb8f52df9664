"""Unit tests for the flowcheck CLI."""

import json

import pytest
from typer.testing import CliRunner

from flowcheck import __version__
from flowcheck.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep config discovery away from any .flowcheck.json above the test run."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_json(tmp_path):
    def write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return write


class TestValidateCommand:
    """Test the validate command."""

    def test_valid_document(self, write_json, sample_flow):
        path = write_json("flow.json", sample_flow)

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0
        assert "Validation Status: VALID" in result.stdout
        assert "No issues found" in result.stdout

    def test_invalid_document(self, write_json, invalid_flow):
        path = write_json("flow.json", invalid_flow)

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Validation Status: INVALID" in result.stdout
        assert "Issues Found" in result.stdout

    def test_json_output(self, write_json, invalid_flow):
        path = write_json("flow.json", invalid_flow)

        result = runner.invoke(app, ["validate", str(path), "--format", "json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert [issue["rule"] for issue in data["errors"]] == ["UNIQUE_ID", "MIN_OUTCOMES", "INVALID_REFERENCE"]
        assert data["errors"][0]["path"] == "steps[1].stepId"
        assert data["warnings"] == []

    def test_lenient_mode(self, write_json, invalid_flow):
        path = write_json("flow.json", invalid_flow)

        result = runner.invoke(app, ["validate", str(path), "--mode", "lenient", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert {issue["severity"] for issue in data["warnings"]} == {"warning"}

    def test_markdown_output(self, write_json, invalid_flow):
        path = write_json("flow.json", invalid_flow)

        result = runner.invoke(app, ["validate", str(path), "--format", "markdown"])

        assert result.exit_code == 1
        assert "# Validation Report" in result.stdout
        assert "## Issues" in result.stdout

    def test_default_mode_from_config(self, write_json, invalid_flow):
        path = write_json("flow.json", invalid_flow)
        config = write_json("config.json", {"validation": {"defaultMode": "LENIENT"}})

        result = runner.invoke(app, ["validate", str(path), "--config", str(config)])

        assert result.exit_code == 0
        assert "LENIENT mode" in result.stdout

    def test_config_discovered_in_cwd(self, tmp_path, write_json, invalid_flow):
        path = write_json("flow.json", invalid_flow)
        write_json(".flowcheck.json", {"validation": {"defaultMode": "LENIENT"}})

        result = runner.invoke(app, ["validate", str(path), "--format", "json"])

        assert result.exit_code == 0

    def test_unexpected_field_types_reported(self, write_json):
        path = write_json("flow.json", {
            "flowId": "f1",
            "name": "Flow",
            "steps": [{"stepId": True, "type": "TODO", "title": {"en": "Hello"}}],
        })

        result = runner.invoke(app, ["validate", str(path), "--format", "json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert [issue["path"] for issue in data["errors"]] == ["steps[0].stepId"]

    def test_invalid_mode(self, write_json, sample_flow):
        path = write_json("flow.json", sample_flow)

        result = runner.invoke(app, ["validate", str(path), "--mode", "relaxed"])

        assert result.exit_code == 1
        assert "Invalid mode" in result.stdout

    def test_invalid_format(self, write_json, sample_flow):
        path = write_json("flow.json", sample_flow)

        result = runner.invoke(app, ["validate", str(path), "--format", "xml"])

        assert result.exit_code == 1
        assert "Invalid format" in result.stdout

    def test_missing_document(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_document_not_an_object(self, write_json):
        path = write_json("flow.json", ["not", "an", "object"])

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_broken_config(self, tmp_path, write_json, sample_flow):
        path = write_json("flow.json", sample_flow)
        config = tmp_path / "broken.json"
        config.write_text("{nope", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path), "--config", str(config)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout


class TestConstraintsCommand:
    """Test the constraints command."""

    def test_table(self):
        result = runner.invoke(app, ["constraints"])

        assert result.exit_code == 0
        assert "Platform Constraints" in result.stdout
        assert "Max parallel paths" in result.stdout
        assert "Milestones inside branches" in result.stdout

    def test_json_uses_config(self, write_json):
        config = write_json("config.json", {"constraints": {"branching": {"maxParallelPaths": 5}}})

        result = runner.invoke(app, ["constraints", "--format", "json", "--config", str(config)])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["branching"]["maxParallelPaths"] == 5
        assert data["goto"]["allowedInside"] == ["DECISION", "SINGLE_CHOICE_BRANCH"]

    def test_unsupported_format(self):
        result = runner.invoke(app, ["constraints", "--format", "markdown"])
        assert result.exit_code == 1


class TestStepTypesCommand:
    """Test the step-types command."""

    def test_all_types(self):
        result = runner.invoke(app, ["step-types"])

        assert result.exit_code == 0
        assert "Known Step Types" in result.stdout
        assert "APPROVAL" in result.stdout
        assert "AI_EXTRACT" in result.stdout

    def test_filter_by_category(self):
        result = runner.invoke(app, ["step-types", "--category", "control"])

        assert result.exit_code == 0
        assert "GOTO_DESTINATION" in result.stdout
        assert "APPROVAL" not in result.stdout

    def test_custom_types_from_config(self, write_json):
        config = write_json("config.json", {"stepTypes": {"additional": {"CUSTOM_SYNC": "AUTOMATION"}}})

        result = runner.invoke(app, ["step-types", "--category", "automation", "--config", str(config)])

        assert result.exit_code == 0
        assert "CUSTOM_SYNC" in result.stdout

    def test_invalid_category(self):
        result = runner.invoke(app, ["step-types", "--category", "robots"])

        assert result.exit_code == 1
        assert "Invalid category" in result.stdout


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
