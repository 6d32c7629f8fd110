"""Type export architecture enforcer.

Type declarations belong in type modules (``types.ts``, ``*.types.ts`` or
anything below a ``types/`` directory); implementation files export runtime
values. Type modules, in turn, should not carry functions or classes.
"""

from pathlib import Path
from typing import Optional

from ..core.base_enforcer import BaseEnforcer, ProjectContext
from ..core.directives import TYPE_EXPORT_ALLOWED, has_ignore_flag
from ..core.source import SourceFile
from ..core.utils import is_comment_or_whitespace, is_types_file
from ..core.violation import HIGH, MEDIUM, Violation
from ..standards.export_patterns import (
    ExportCandidate,
    ExportClassification,
    ExportKind,
    ExportPatterns,
    TYPE_LIKE_KINDS,
)

RE_EXPORT = "Type Re-Export Anti-Pattern"
NON_TYPES_FILE = "Type Export from Non-Types File"
NON_FUNCTIONAL_CONSTANT = "Non-Functional Constant Export"
FUNCTIONAL_IN_TYPES = "Functional Export from Types Directory"


class TypeExportsEnforcer(BaseEnforcer):
    """Keep type-shaped exports in type modules and runtime code out of them."""

    check_name = "type-exports"
    how_to_fix = (
        "Move type/interface/enum exports to types.ts or types/{domain}.ts files",
        "Keep functional exports (functions, classes) in implementation files",
        "Use type composition (Pick, Omit, &) to create variations of types",
        "Import directly from types.ts for type definitions",
    )
    suppress_instruction = (
        "To suppress: Add // @type-export-allowed comment on same line or line above"
    )

    def __init__(self, context: ProjectContext):
        super().__init__(context)
        self.patterns = ExportPatterns(context.config.validator_namespaces)

    def should_analyze_file(self, path: Path) -> bool:
        return not self.context.is_export_allowed(path)

    def analyze_file(self, source: SourceFile) -> list[Violation]:
        """Check every exported declaration in a file.

        Args:
            source: File to analyze

        Returns:
            Violations in line order
        """
        violations: list[Violation] = []
        file_path = self.relative(source.path)
        in_types_module = is_types_file(file_path)

        for index, line, prev in source.iter_lines():
            if is_comment_or_whitespace(line):
                continue
            if has_ignore_flag(line, prev, TYPE_EXPORT_ALLOWED):
                continue

            line_num = index + 1
            if self.patterns.is_type_re_export(line):
                violations.append(
                    Violation(
                        file_path=file_path,
                        line_num=line_num,
                        violation_type=RE_EXPORT,
                        message="export type * from ... pattern is discouraged",
                        fix_suggestion="Import types directly from the module that declares them",
                        severity=HIGH,
                        reason=(
                            "Type re-exports make it harder to track type origins "
                            "and can cause circular dependencies"
                        ),
                        content=line.strip(),
                    )
                )
                continue

            if in_types_module:
                violation = self._check_types_module_line(source, index, file_path)
            else:
                violation = self._check_implementation_line(source, index, file_path)
            if violation is not None:
                violations.append(violation)

        return violations

    def _check_implementation_line(
        self, source: SourceFile, index: int, file_path: str
    ) -> Optional[Violation]:
        line = source.lines[index]
        candidate = self.patterns.scan_declaration(line, file_path, index + 1)

        if candidate is not None and candidate.kind in TYPE_LIKE_KINDS:
            return Violation(
                file_path=file_path,
                line_num=index + 1,
                violation_type=NON_TYPES_FILE,
                message=(
                    "Types/interfaces/enums should only be exported from "
                    "types.ts or types/*.ts files"
                ),
                fix_suggestion=f"Move {candidate.kind.value} '{candidate.name}' to a types.ts file",
                severity=HIGH,
                content=line.strip(),
            )

        if self.patterns.has_type_export_in_braces(line):
            return Violation(
                file_path=file_path,
                line_num=index + 1,
                violation_type=NON_TYPES_FILE,
                message="Type exports should only be from types.ts or types/*.ts files",
                severity=HIGH,
                content=line.strip(),
            )

        if candidate is not None and candidate.kind == ExportKind.CONST:
            classification = self.patterns.classify_candidate(candidate, source.lines, index)
            if classification == ExportClassification.LITERAL_CONSTANT:
                return Violation(
                    file_path=file_path,
                    line_num=index + 1,
                    violation_type=NON_FUNCTIONAL_CONSTANT,
                    message=(
                        "Non-functional constants (primitives, objects, arrays) "
                        "should be exported from types.ts files"
                    ),
                    fix_suggestion=f"Move '{candidate.name}' to a types.ts file",
                    severity=MEDIUM,
                    content=line.strip(),
                )
        return None

    def _check_types_module_line(
        self, source: SourceFile, index: int, file_path: str
    ) -> Optional[Violation]:
        line = source.lines[index]
        candidate = self.patterns.scan_declaration(line, file_path, index + 1)
        if candidate is None or candidate.kind in TYPE_LIKE_KINDS:
            return None

        classification = self.patterns.classify_candidate(candidate, source.lines, index)
        if classification != ExportClassification.FUNCTIONAL:
            return None
        return self._functional_in_types(candidate)

    @staticmethod
    def _functional_in_types(candidate: ExportCandidate) -> Violation:
        return Violation(
            file_path=candidate.file_path,
            line_num=candidate.line_num,
            violation_type=FUNCTIONAL_IN_TYPES,
            message="Functions and classes should not be exported from type modules",
            fix_suggestion=f"Move '{candidate.name}' to an implementation file",
            severity=HIGH,
            content=candidate.line.strip(),
        )
