"""Core violation data structures for typearch-guard."""

import json
import sys
from dataclasses import dataclass, field
from typing import Any, Optional, TextIO

CRITICAL = "CRITICAL"
HIGH = "HIGH"
MEDIUM = "MEDIUM"
WARNING = "WARNING"
LOW = "LOW"


class Violation:
    """Represents an architecture violation with location and fix context."""

    def __init__(
        self,
        file_path: str,
        line_num: Optional[int],
        violation_type: str,
        message: str,
        fix_suggestion: str = "",
        severity: str = HIGH,
        reason: Optional[str] = None,
        content: Optional[str] = None,
    ):
        self.file_path = file_path
        self.line_num = line_num
        self.violation_type = violation_type
        self.message = message
        self.fix_suggestion = fix_suggestion
        self.severity = severity
        self.reason = reason
        self.content = content

    @property
    def location(self) -> str:
        if self.line_num is None:
            return self.file_path
        return f"{self.file_path}:{self.line_num}"

    def sort_key(self) -> tuple[str, int, str]:
        """Order by file path, then line number (file-level first)."""
        return (self.file_path, self.line_num or 0, self.violation_type)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "file": self.file_path,
            "line": self.line_num,
            "type": self.violation_type,
            "message": self.message,
            "severity": self.severity,
        }
        if self.reason:
            data["reason"] = self.reason
        if self.fix_suggestion:
            data["suggestion"] = self.fix_suggestion
        return data

    def __str__(self) -> str:
        fix_part = f"\n    {self.fix_suggestion}" if self.fix_suggestion else ""
        return f"{self.location}: {self.message}{fix_part}"

    def __repr__(self) -> str:
        return (
            f"Violation({self.location!r}, {self.violation_type!r}, "
            f"severity={self.severity!r})"
        )


@dataclass
class CheckResult:
    """Outcome of one check over the whole project."""

    check_name: str
    violations: list[Violation] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    how_to_fix: list[str] = field(default_factory=list)
    suppress_instruction: str = ""
    files_scanned: int = 0

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "check": self.check_name,
            "passed": self.passed,
            "violation_count": self.violation_count,
            "files_scanned": self.files_scanned,
            "violations": [v.to_dict() for v in self.violations],
            "suggestions": list(self.suggestions),
            "how_to_fix": list(self.how_to_fix),
            "suppress_instruction": self.suppress_instruction,
        }


class ViolationReporter:
    """Aggregates check results and renders them for the terminal."""

    def __init__(self, output_format: str = "text", stream: Optional[TextIO] = None):
        self.output_format = output_format
        self.stream = stream
        self.results: list[CheckResult] = []

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def add_result(self, result: CheckResult) -> None:
        self.results.append(result)

    @property
    def total_violations(self) -> int:
        return sum(r.violation_count for r in self.results)

    def has_failures(self) -> bool:
        return any(not r.passed for r in self.results)

    def report(self) -> int:
        """Print every collected result. Returns the process exit code."""
        exit_code = 1 if self.has_failures() else 0

        if self.output_format == "json":
            document = {
                "passed": exit_code == 0,
                "total_violations": self.total_violations,
                "checks": [r.to_dict() for r in self.results],
            }
            print(json.dumps(document, indent=2), file=self._out())
            return exit_code

        out = self._out()
        failed = [r for r in self.results if not r.passed]

        # Success case: single line
        if not failed:
            print("✓ All checks passed", file=out)
            return exit_code

        check_word = "check" if len(failed) == 1 else "checks"
        total = self.total_violations
        violation_word = "violation" if total == 1 else "violations"
        print(f"✗ {len(failed)} {check_word} failed ({total} {violation_word})", file=out)
        print("", file=out)

        for result in failed:
            print(f"{result.check_name} ({result.violation_count}):", file=out)
            for violation in result.violations:
                print(f"  {violation.location}: {violation.message}", file=out)
                if violation.fix_suggestion:
                    print(f"    → {violation.fix_suggestion}", file=out)
            print("", file=out)

            fixes = [*result.how_to_fix, result.suppress_instruction]
            fixes = [f for f in fixes if f]
            if fixes:
                print("Fix: " + fixes[0], file=out)
                for fix in fixes[1:]:
                    print("     " + fix, file=out)
                print("", file=out)

        return exit_code

    def report_fatal(self, violation: Violation, hint: list[str]) -> int:
        """Report a condition that stopped the run before any scanning."""
        if self.output_format == "json":
            document = {
                "passed": False,
                "fatal": violation.to_dict(),
                "how_to_fix": hint,
            }
            print(json.dumps(document, indent=2), file=self._out())
            return 1

        err = self.stream if self.stream is not None else sys.stderr
        print(f"✗ {violation.severity}: {violation.message} ({violation.file_path})", file=err)
        for line in hint:
            print(f"  {line}", file=err)
        return 1
