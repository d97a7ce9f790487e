"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from timetable_engine.apply import InMemoryPeriodRepository
from timetable_engine.cli import app

runner = CliRunner()


@pytest.fixture
def request_file(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(
        json.dumps(
            {
                "category": "SECONDARY",
                "units": [
                    {
                        "id": "eng",
                        "name": "English Language",
                        "teachers": [
                            {"id": "t-ada", "firstName": "Ada", "lastName": "Obi", "periodCount": 4}
                        ],
                    },
                    {"id": "civic", "name": "Civic Education"},
                ],
                "options": {"maxSameSubjectPerDay": 2},
            }
        ),
        encoding="utf-8",
    )
    return path


def _generate(request_file, output, *extra):
    return runner.invoke(
        app, ["generate", str(request_file), "-o", str(output), "--seed", "3", *extra]
    )


class TestTemplatesCommand:
    """Tests for the templates command."""

    def test_shows_template(self):
        result = runner.invoke(app, ["templates", "PRIMARY"])
        assert result.exit_code == 0
        assert "Assembly" in result.output or "ASSEMBLY" in result.output

    def test_bad_config(self, tmp_path):
        config = tmp_path / "engine.json"
        config.write_text("[]", encoding="utf-8")

        result = runner.invoke(app, ["templates", "--config", str(config)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_generate_json(self, request_file, tmp_path):
        output = tmp_path / "preview.json"
        result = _generate(request_file, output)

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["category"] == "SECONDARY"
        lessons = [p for p in data["periods"] if p["slot_type"] == "LESSON"]
        assert len(lessons) == 35
        assert all(p["teacher_id"] == "t-ada" for p in lessons if p["unit_id"] == "eng")

    def test_same_seed_same_periods(self, request_file, tmp_path):
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"
        _generate(request_file, first)
        _generate(request_file, second)

        periods = json.loads(first.read_text(encoding="utf-8"))["periods"]
        assert periods == json.loads(second.read_text(encoding="utf-8"))["periods"]

    def test_generate_excel_fixes_suffix(self, request_file, tmp_path):
        result = _generate(request_file, tmp_path / "preview.json", "-f", "excel")

        assert result.exit_code == 0
        assert (tmp_path / "preview.xlsx").exists()

    def test_generate_csv_directory(self, request_file, tmp_path):
        result = _generate(request_file, tmp_path / "csv_out", "-f", "csv")

        assert result.exit_code == 0
        assert (tmp_path / "csv_out" / "periods.csv").exists()

    def test_missing_input(self, tmp_path):
        result = runner.invoke(app, ["generate", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_malformed_request_file(self, tmp_path):
        path = tmp_path / "request.json"
        path.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["generate", str(path), "-o", str(tmp_path / "x.json")])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output
        assert not (tmp_path / "x.json").exists()

    def test_invalid_options(self, tmp_path):
        path = tmp_path / "request.json"
        path.write_text(json.dumps({"units": [], "options": {"freePeriodsPerDay": -2}}))

        result = runner.invoke(app, ["generate", str(path), "-o", str(tmp_path / "x.json")])

        assert result.exit_code == 1
        assert "Invalid options" in result.output


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_analyze_preview(self, request_file, tmp_path):
        output = tmp_path / "preview.json"
        _generate(request_file, output)

        result = runner.invoke(app, ["analyze", str(output)])

        assert result.exit_code == 0
        assert "Civic Education" in result.output

    def test_malformed_preview(self, tmp_path):
        path = tmp_path / "preview.json"
        path.write_text("[1, 2", encoding="utf-8")

        result = runner.invoke(app, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestApplyCommand:
    """Tests for the apply command."""

    def _apply(self, preview, store, class_id):
        return runner.invoke(
            app,
            [
                "apply",
                str(preview),
                "--store",
                str(store),
                "--school",
                "s1",
                "--class",
                class_id,
                "--term",
                "t1",
            ],
        )

    def test_apply_then_noop(self, request_file, tmp_path):
        preview = tmp_path / "preview.json"
        store = tmp_path / "store.json"
        _generate(request_file, preview)

        first = self._apply(preview, store, "jss1")
        second = self._apply(preview, store, "jss1")

        assert first.exit_code == 0
        assert "50 created" in first.output
        assert second.exit_code == 0
        assert "already up to date" in second.output
        assert len(InMemoryPeriodRepository.load(store)) == 50

    def test_teacher_conflict(self, request_file, tmp_path):
        preview = tmp_path / "preview.json"
        store = tmp_path / "store.json"
        _generate(request_file, preview)

        self._apply(preview, store, "jss1")
        result = self._apply(preview, store, "jss2")

        assert result.exit_code == 1
        assert "Conflict" in result.output
        assert "Ada Obi is already teaching class jss1" in result.output
