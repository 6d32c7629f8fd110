"""Type import architecture enforcer.

Types may be imported from type modules and from external packages. A type
imported from any other relative path means a type lives in an
implementation file.
"""

import posixpath
import re
from typing import Optional

from ..core.base_enforcer import BaseEnforcer
from ..core.directives import TYPE_IMPORT_ALLOWED, has_ignore_flag
from ..core.source import SourceFile
from ..core.utils import TYPES_DIR_NAME, is_types_file
from ..core.violation import HIGH, Violation

# import type { X } from '...'
TYPE_IMPORT = re.compile(r"import\s+type\s*\{[^}]+\}\s*from\s*['\"]([^'\"]+)['\"]")
# import { type X, y } from '...'
INLINE_TYPE_IMPORT = re.compile(r"import\s*\{[^}]*\btype\b[^}]*\}\s*from\s*['\"]([^'\"]+)['\"]")

_SCRIPT_EXTENSION = re.compile(r"\.(?:js|ts)$")


def type_import_path(line: str) -> Optional[str]:
    """Module specifier of a type import on ``line``, if any."""
    match = TYPE_IMPORT.search(line) or INLINE_TYPE_IMPORT.search(line)
    return match.group(1) if match else None


def is_valid_type_source(import_path: str, importing_file: str) -> bool:
    """Check whether types may be imported from ``import_path``.

    Args:
        import_path: Module specifier as written in the import
        importing_file: Project-relative path of the importing file

    Returns:
        True for external packages and for paths that name a type module
    """
    if not import_path.startswith((".", "/")):
        return True

    normalized = _SCRIPT_EXTENSION.sub("", import_path)
    if normalized.endswith("types") or f"/{TYPES_DIR_NAME}/" in normalized:
        return True

    # Type modules may import from one another
    if is_types_file(importing_file) and import_path.startswith("."):
        resolved = posixpath.normpath(
            posixpath.join(posixpath.dirname(importing_file), normalized + ".ts")
        )
        return is_types_file(resolved)
    return False


class TypeImportsEnforcer(BaseEnforcer):
    """Flag type imports whose source is not a type module."""

    check_name = "type-imports"
    how_to_fix = (
        "Move type definitions to types.ts files",
        "Use types/{domain}.ts for domain-specific types",
        "Import types only from types.ts or types/{domain}.ts files",
        "For shared types, export from a centralized types.ts",
    )
    suppress_instruction = (
        "To suppress: Add // @type-import-allowed comment on same line or line above"
    )

    def analyze_file(self, source: SourceFile) -> list[Violation]:
        violations: list[Violation] = []
        file_path = self.relative(source.path)

        for index, line, prev in source.iter_lines():
            if has_ignore_flag(line, prev, TYPE_IMPORT_ALLOWED):
                continue
            import_path = type_import_path(line)
            if import_path is None or is_valid_type_source(import_path, file_path):
                continue
            violations.append(
                Violation(
                    file_path=file_path,
                    line_num=index + 1,
                    violation_type="Type Import from Non-Types File",
                    message=f"Type imported from non-types file: {import_path}",
                    severity=HIGH,
                    reason="Types should only be imported from types.ts or types/{domain}.ts files",
                    content=line.strip(),
                )
            )
        return violations
