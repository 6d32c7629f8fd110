"""Structural duplicate type enforcer."""

import logging
from pathlib import Path
from typing import Sequence

from ..core.base_enforcer import BaseEnforcer
from ..core.source import SourceFile
from ..core.utils import is_types_file
from ..core.violation import WARNING, Violation
from ..standards.type_shapes import (
    DuplicateMatch,
    TypeDefinition,
    extract_type_definitions,
    find_duplicates,
)

logger = logging.getLogger(__name__)


class TypeDuplicatesEnforcer(BaseEnforcer):
    """Find types in different files that repeat, or nearly repeat, each other."""

    check_name = "type-duplicates"
    how_to_fix = (
        "Consolidate exact duplicates into a single type",
        "Use type composition utilities: Pick<T, K>, Omit<T, K>, Required<T>, Partial<T>",
        "For subset relationships, derive smaller types from larger ones",
        "Co-locate related types in the same types.ts file",
    )
    suppress_instruction = (
        "To suppress: Add // @type-duplicate-allowed comment on same line or line above"
    )

    def should_analyze_file(self, path: Path) -> bool:
        return is_types_file(self.relative(path))

    def extract(self, path: Path) -> list[TypeDefinition]:
        source = self.read_source(path)
        if source is None:
            return []
        return extract_type_definitions(source, self.relative(path))

    def analyze_file(self, source: SourceFile) -> list[Violation]:
        """Duplicates only exist between files, so a single file yields none."""
        return []

    def analyze_project(self, files: Sequence[Path]) -> list[Violation]:
        # Every file is extracted before any pair is compared
        per_file = self.map_files(self.extract, files)
        definitions = [d for definitions in per_file for d in definitions]
        logger.debug("Extracted %d type definitions", len(definitions))
        return [self.to_violation(match) for match in find_duplicates(definitions)]

    @staticmethod
    def to_violation(match: DuplicateMatch) -> Violation:
        type1, type2 = match.type1, match.type2
        return Violation(
            file_path=type1.file_path,
            line_num=type1.line,
            violation_type=match.match_kind.name,
            message=(
                f"Type '{type1.name}' ({type1.location}) and "
                f"'{type2.name}' ({type2.location})"
            ),
            fix_suggestion=match.suggestion,
            severity=WARNING,
        )

    def collect_suggestions(self, violations: list[Violation]) -> list[str]:
        return [v.fix_suggestion for v in violations if v.fix_suggestion]
