"""Pure barrel file enforcer."""

import re

from ..core.base_enforcer import BaseEnforcer
from ..core.directives import BARREL_FILE_ALLOWED, has_file_directive
from ..core.source import SourceFile
from ..core.utils import is_comment_or_whitespace
from ..core.violation import HIGH, Violation

_FROM = r"\s+from\s+['\"][^'\"]+['\"]\s*;?\s*$"

# Statements a barrel file is made of
RE_EXPORT_PATTERNS = (
    re.compile(r"^\s*export\s+\{\s*[^}]+\}" + _FROM),
    re.compile(r"^\s*export\s+\*" + _FROM),
    re.compile(r"^\s*export\s+type\s+\{\s*[^}]+\}" + _FROM),
    re.compile(r"^\s*export\s+\*\s+as\s+\w+" + _FROM),
)


def is_re_export(line: str) -> bool:
    return any(pattern.match(line) for pattern in RE_EXPORT_PATTERNS)


def is_pure_barrel(source: SourceFile) -> bool:
    """A file with at least one re-export and nothing but imports besides."""
    has_exports = False
    for line in source.lines:
        if is_comment_or_whitespace(line):
            continue
        if is_re_export(line):
            has_exports = True
            continue
        if line.strip().startswith("import "):
            continue
        return False
    return has_exports


class BarrelFilesEnforcer(BaseEnforcer):
    """Flag files that only re-export other modules."""

    check_name = "barrel-files"
    how_to_fix = (
        "Add actual implementation code to files with re-exports",
        "Import directly from source files instead of through barrel files",
        "Consider consolidating related functionality into fewer, more meaningful modules",
    )
    suppress_instruction = "To suppress: Add // @barrel-file-allowed comment anywhere in file"

    def analyze_file(self, source: SourceFile) -> list[Violation]:
        if has_file_directive(source.content, *BARREL_FILE_ALLOWED):
            return []
        if not is_pure_barrel(source):
            return []
        return [
            Violation(
                file_path=self.relative(source.path),
                line_num=None,
                violation_type="Pure Barrel File",
                message="File only contains re-exports without actual implementation",
                fix_suggestion="Import directly from the source files",
                severity=HIGH,
                reason=(
                    "Barrel files can cause circular dependencies, hinder "
                    "tree-shaking, and make code navigation harder"
                ),
            )
        ]
