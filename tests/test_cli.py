"""Tests for the command line entry point and the reporter."""

import json
import sys
from io import StringIO
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typearch_guard.core.config import Config
from typearch_guard.core.violation import (
    CRITICAL,
    MEDIUM,
    CheckResult,
    Violation,
    ViolationReporter,
)
from typearch_guard.main import main, select_checks

LITERAL_EXPORT = {"src/values.ts": "export const Config = { apiKey: 'k', timeout: 5000 };\n"}


def test_clean_project_passes(make_project, capsys) -> None:
    root = make_project({"src/client.ts": "export const client = http.create({ baseURL: 'x' });\n"})
    assert main(["--root", str(root)]) == 0
    assert capsys.readouterr().out.strip() == "✓ All checks passed"


def test_violations_fail_the_run(make_project, capsys) -> None:
    root = make_project(LITERAL_EXPORT)
    assert main(["--root", str(root)]) == 1
    out = capsys.readouterr().out
    assert "✗ 1 check failed (1 violation)" in out
    assert "type-exports (1):" in out
    assert "  src/values.ts:1: Non-functional constants" in out
    assert "Fix: Move type/interface/enum exports" in out
    assert "To suppress: Add // @type-export-allowed" in out


def test_missing_tsconfig_is_fatal(make_project, capsys) -> None:
    root = make_project({"src/a.ts": "export const a = 1;\n"}, tsconfig=None)
    assert main(["--root", str(root)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert CRITICAL in captured.err
    assert "No tsconfig.json found in project root" in captured.err


def test_missing_tsconfig_is_reported_before_config_errors(make_project, capsys) -> None:
    root = make_project(
        {**LITERAL_EXPORT, ".typearch-guard.yaml": "checks: [unclosed\n"}, tsconfig=None
    )
    assert main(["--root", str(root)]) == 1
    err = capsys.readouterr().err
    assert "No tsconfig.json found in project root" in err
    assert "ERROR:" not in err


def test_selected_checks_only(make_project, capsys) -> None:
    root = make_project(LITERAL_EXPORT)
    assert main(["--root", str(root), "--checks", "type-duplicates,inline-types"]) == 0


def test_unknown_check_is_a_usage_error(make_project, capsys) -> None:
    root = make_project(LITERAL_EXPORT)
    with pytest.raises(SystemExit) as exc_info:
        main(["--root", str(root), "--checks", "type-exports,no-such-check"])
    assert exc_info.value.code == 2
    assert "no-such-check" in capsys.readouterr().err


def test_jobs_must_be_positive(make_project) -> None:
    root = make_project(LITERAL_EXPORT)
    with pytest.raises(SystemExit) as exc_info:
        main(["--root", str(root), "--jobs", "0"])
    assert exc_info.value.code == 2


def test_json_output(make_project, capsys) -> None:
    root = make_project(LITERAL_EXPORT)
    assert main(["--root", str(root), "--format", "json", "--checks", "type-exports"]) == 1
    document = json.loads(capsys.readouterr().out)
    assert document["passed"] is False
    assert document["total_violations"] == 1
    (check,) = document["checks"]
    assert check["check"] == "type-exports"
    assert check["violations"][0]["file"] == "src/values.ts"
    assert check["violations"][0]["severity"] == MEDIUM


def test_cli_patterns_extend_config(make_project) -> None:
    root = make_project(
        {
            **LITERAL_EXPORT,
            "src/legacy/old.ts": "export type Old = string;\n",
            ".typearch-guard.yaml": "allow_exports:\n  - src/values.ts\n",
        }
    )
    assert main(["--root", str(root), "--checks", "type-exports"]) == 1
    assert main(["--root", str(root), "--checks", "type-exports", "--exclude", "src/legacy"]) == 0


def test_invalid_config_is_reported(make_project, capsys) -> None:
    root = make_project({**LITERAL_EXPORT, ".typearch-guard.yaml": "checks: [unclosed\n"})
    assert main(["--root", str(root)]) == 1
    assert capsys.readouterr().err.startswith("ERROR: ")


def test_unknown_check_in_config(make_project, capsys) -> None:
    root = make_project({**LITERAL_EXPORT, ".typearch-guard.yaml": "checks:\n  - bogus\n"})
    assert main(["--root", str(root)]) == 1
    assert "bogus" in capsys.readouterr().err


def test_select_checks_keeps_first_occurrence(tmp_path) -> None:
    assert select_checks(["inline-types", "type-exports", "inline-types"], Config(tmp_path)) == [
        "inline-types",
        "type-exports",
    ]
    assert len(select_checks(None, Config(tmp_path))) == 5


class TestReporter:
    def make_result(self) -> CheckResult:
        violation = Violation(
            file_path="types/a.ts",
            line_num=3,
            violation_type="EXACT",
            message="Type 'A' (types/a.ts:3) and 'B' (types/b.ts:1)",
            fix_suggestion="Consider consolidating into a single type.",
        )
        return CheckResult(
            check_name="type-duplicates",
            violations=[violation],
            how_to_fix=["Consolidate exact duplicates"],
            suppress_instruction="To suppress: add a marker",
        )

    def test_text_report(self) -> None:
        stream = StringIO()
        reporter = ViolationReporter(stream=stream)
        reporter.add_result(self.make_result())
        reporter.add_result(CheckResult(check_name="barrel-files"))
        assert reporter.report() == 1
        lines = stream.getvalue().splitlines()
        assert lines[0] == "✗ 1 check failed (1 violation)"
        assert "type-duplicates (1):" in lines
        assert "    → Consider consolidating into a single type." in lines
        assert "Fix: Consolidate exact duplicates" in lines
        assert "     To suppress: add a marker" in lines
        assert "barrel-files" not in stream.getvalue()

    def test_fatal_report(self) -> None:
        stream = StringIO()
        fatal = Violation("tsconfig.json", None, "Missing", "No tsconfig.json", severity=CRITICAL)
        assert ViolationReporter(stream=stream).report_fatal(fatal, ["Create one"]) == 1
        assert stream.getvalue() == "✗ CRITICAL: No tsconfig.json (tsconfig.json)\n  Create one\n"

    def test_passing_report(self) -> None:
        stream = StringIO()
        reporter = ViolationReporter(stream=stream)
        reporter.add_result(CheckResult(check_name="type-exports"))
        assert reporter.report() == 0
        assert stream.getvalue() == "✓ All checks passed\n"
