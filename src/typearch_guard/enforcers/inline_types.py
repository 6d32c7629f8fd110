"""Inline object type enforcer."""

import re
from typing import Optional

from ..core.base_enforcer import BaseEnforcer
from ..core.directives import INLINE_TYPE_OK, has_ignore_flag
from ..core.source import SourceFile
from ..core.violation import WARNING, Violation

# How far back to look for the class a property belongs to
CLASS_CONTEXT_LOOKBACK = 20

_MAPPED_TYPE = re.compile(r"\{\s*\[.*\s+in\s+")
_NAMED_DECLARATION = re.compile(r"^(?:export\s+)?(?:type|interface)\s+\w+")
_CLASS_DECLARATION = re.compile(r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+\w+")

_TYPE_ASSERTION = re.compile(r"\s+as\s+\{")
_VARIABLE = re.compile(r"(?:const|let|var)\s+\w+\s*:\s*\{")
_PARAMETER = re.compile(r"\(\s*\w+\s*:\s*\{")
_RETURN_TYPE = re.compile(r"\)\s*:\s*\{")
_PROPERTY = re.compile(r"^\s+\w+\s*:\s*\{")


def _is_exempt(trimmed: str) -> bool:
    """Generic constraints, mapped types, conditional types and named types."""
    if "extends {" in trimmed:
        return True
    if _MAPPED_TYPE.search(trimmed):
        return True
    if "?" in trimmed and ":" in trimmed and "extends" in trimmed:
        return True
    return bool(_NAMED_DECLARATION.match(trimmed))


def _in_class_body(lines: tuple[str, ...], index: int) -> bool:
    for j in range(index - 1, max(0, index - CLASS_CONTEXT_LOOKBACK) - 1, -1):
        if _CLASS_DECLARATION.match(lines[j]):
            return True
        if _NAMED_DECLARATION.match(lines[j]):
            return False
    return False


def inline_type_context(lines: tuple[str, ...], index: int) -> Optional[str]:
    """Where the inline object type on ``lines[index]`` appears, if anywhere."""
    line = lines[index]
    trimmed = line.strip()
    if _is_exempt(trimmed):
        return None

    if _TYPE_ASSERTION.search(line):
        return "type assertion"
    if _VARIABLE.search(line):
        return "variable declaration"
    if _PARAMETER.search(line):
        return "function parameter"
    if _RETURN_TYPE.search(line):
        following = lines[index + 1].strip() if index + 1 < len(lines) else ""
        if "=>" in line or following.startswith("{") or "function" in line:
            return "return type"
        return None
    if _PROPERTY.match(line) and _in_class_body(lines, index):
        return "property type"
    return None


class InlineTypesEnforcer(BaseEnforcer):
    """Flag anonymous object types that should be named."""

    check_name = "inline-types"
    how_to_fix = (
        "Extract inline types to named type aliases or interfaces",
        "Define types in appropriate types.ts files",
        "Use descriptive type names that explain the purpose",
        "For generic constraints and mapped types, inline is acceptable",
    )
    suppress_instruction = "To suppress: Add // @inline-type-ok comment on same line or line above"

    def analyze_file(self, source: SourceFile) -> list[Violation]:
        violations: list[Violation] = []
        file_path = self.relative(source.path)

        for index, line, prev in source.iter_lines():
            if has_ignore_flag(line, prev, INLINE_TYPE_OK):
                continue
            context = inline_type_context(source.lines, index)
            if context is None:
                continue
            violations.append(
                Violation(
                    file_path=file_path,
                    line_num=index + 1,
                    violation_type="Inline Object Type",
                    message=f"Inline object type in {context}",
                    fix_suggestion="Extract it to a named type alias or interface",
                    severity=WARNING,
                    content=line.strip(),
                )
            )
        return violations
