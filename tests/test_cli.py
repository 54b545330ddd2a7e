"""
CLI tests: machine-mode JSON output of analyze, apply and config.
"""

import json

import pytest
from typer.testing import CliRunner

from fixforge.main import app

runner = CliRunner()


@pytest.fixture
def in_project(temp_project, monkeypatch):
    """Run commands from inside the sample project so local config is isolated."""
    monkeypatch.chdir(temp_project)
    return temp_project


def write_edits(directory, edits, name="edits.json"):
    path = directory / name
    path.write_text(json.dumps(edits))
    return str(path)


class TestAnalyzeCommand:
    """Test `fixforge analyze`."""

    def test_reports_issues(self, in_project):
        result = runner.invoke(app, ["analyze", str(in_project)])
        assert result.exit_code == 0, result.stdout

        data = json.loads(result.stdout)
        assert data["command"] == "analyze"
        assert data["status"] == "success"
        assert data["files_checked"] == 2
        assert data["count"] == 3
        assert {issue["id"] for issue in data["issues"]} == {"MISSING_DOC", "WEAK_NAME"}
        assert data["fix"] is None
        assert (in_project / "weak.py").read_text().startswith("def total(values):\n    tmp = 0")

    def test_fix_rewrites_files(self, in_project):
        result = runner.invoke(app, ["analyze", str(in_project), "--fix", "--rule", "WEAK_NAME"])
        assert result.exit_code == 0, result.stdout

        data = json.loads(result.stdout)
        assert data["fix"]["success"] is True
        fixed = (in_project / "weak.py").read_text()
        assert "count += value" in fixed
        assert '"""' not in fixed
        assert (in_project / "weak.py.bak").exists()

    def test_fix_dry_run(self, in_project):
        result = runner.invoke(app, ["analyze", str(in_project), "--fix", "--dry-run", "--no-backup"])
        assert result.exit_code == 0, result.stdout

        data = json.loads(result.stdout)
        weak = str(in_project / "weak.py")
        assert data["fix"]["dry_run"] is True
        assert "+    count = 0" in data["fix"]["diffs"][weak]
        assert "tmp = 0" in (in_project / "weak.py").read_text()


class TestApplyCommand:
    """Test `fixforge apply`."""

    def test_applies_edit_document(self, in_project):
        target = in_project / "target.c"
        target.write_text("int tmp = 0;")
        edits_file = write_edits(in_project, [
            {"file": str(target), "offset": 10, "length": 0, "replacement": "X"},
            {"file": str(target), "offset": 4, "length": 3, "replacement": "count"},
        ])

        result = runner.invoke(app, ["apply", edits_file])
        assert result.exit_code == 0, result.stdout

        data = json.loads(result.stdout)
        assert data["command"] == "apply"
        assert data["status"] == "success"
        assert data["succeeded_files"] == [str(target)]
        assert target.read_text() == "int count = X0;"
        assert (in_project / "target.c.bak").read_text() == "int tmp = 0;"

    def test_overlap_fails_without_writing(self, in_project):
        target = in_project / "target.c"
        target.write_text("int tmp = 0;")
        edits_file = write_edits(in_project, [
            {"file": str(target), "offset": 4, "length": 3, "replacement": "A"},
            {"file": str(target), "offset": 6, "length": 3, "replacement": "B"},
        ])

        result = runner.invoke(app, ["apply", edits_file])
        assert result.exit_code == 1

        data = json.loads(result.stdout)
        assert data["status"] == "error"
        assert data["failures"][0]["kind"] == "validation"
        assert len(data["failures"][0]["conflicts"]) == 1
        assert target.read_text() == "int tmp = 0;"

    def test_accepts_issue_document(self, in_project):
        analyzed = runner.invoke(app, ["analyze", str(in_project / "weak.py")])
        issues_file = write_edits(in_project, {"issues": json.loads(analyzed.stdout)["issues"]})

        result = runner.invoke(app, ["apply", issues_file, "--no-backup"])
        assert result.exit_code == 0, result.stdout
        assert "count = 0" in (in_project / "weak.py").read_text()
        assert not (in_project / "weak.py.bak").exists()

    def test_malformed_document(self, in_project):
        edits_file = write_edits(in_project, [{"file": "a.c", "offset": "four"}])
        result = runner.invoke(app, ["apply", edits_file])
        assert result.exit_code == 2
        assert json.loads(result.stdout)["code"] == "INVALID_EDITS"

    def test_unknown_mode(self, in_project):
        edits_file = write_edits(in_project, [])
        result = runner.invoke(app, ["apply", edits_file, "--mode", "yolo"])
        assert result.exit_code == 2
        assert json.loads(result.stdout)["code"] == "CONFIG_ERROR"


class TestConfigCommand:
    """Test `fixforge config`."""

    def test_set_then_get(self, in_project):
        result = runner.invoke(app, ["config", "set", "apply.mode", "best_effort"])
        assert result.exit_code == 0, result.stdout
        assert (in_project / ".fixforge" / "config.json").exists()

        result = runner.invoke(app, ["config", "get", "apply.mode"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == "best_effort"

    def test_set_parses_json_literals(self, in_project):
        runner.invoke(app, ["config", "set", "apply.workers", "4"])
        result = runner.invoke(app, ["config", "get", "apply.workers"])
        assert json.loads(result.stdout) == 4

    def test_missing_key(self, in_project):
        result = runner.invoke(app, ["config", "get", "nope.nothing"])
        assert result.exit_code == 1

    def test_show(self, in_project):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["apply"]["backup"] is True


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "fixforge v" in result.stdout
