"""Base enforcer class for typearch-guard checks."""

import importlib
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence, TypeVar

import pathspec

from .config import Config
from .files import ProjectConfig, compile_globs, enumerate_files, matches_any
from .source import SourceFile
from .utils import relative_posix
from .violation import CheckResult, Violation

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ProjectContext:
    """Everything a check needs to know about the project being analyzed."""

    root: Path
    files: list[Path]
    config: Config
    jobs: int = 1
    allow_exports: list[str] = field(default_factory=list)
    _allow_exports_spec: Optional[pathspec.PathSpec] = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._allow_exports_spec = compile_globs(self.allow_exports)

    @classmethod
    def load(
        cls,
        project_root: Path,
        config: Optional[Config] = None,
        exclude: Sequence[str] = (),
        allow_exports: Sequence[str] = (),
        jobs: Optional[int] = None,
    ) -> Optional["ProjectContext"]:
        """Discover the project's files.

        Command-line ``exclude`` and ``allow_exports`` patterns are added to
        those from the config file; ``jobs`` overrides it.

        Returns:
            The context, or None when the root has no tsconfig.json

        Raises:
            ConfigError: on invalid tsconfig.json or malformed glob patterns
        """
        root = project_root.resolve()
        config = config if config is not None else Config(root)

        project_config = ProjectConfig.load(root)
        if project_config is None:
            return None

        files = enumerate_files(project_config, [*config.exclude, *exclude])
        logger.debug("Discovered %d TypeScript files under %s", len(files), root)

        return cls(
            root=root,
            files=files,
            config=config,
            jobs=jobs if jobs is not None else config.jobs,
            allow_exports=[*config.allow_exports, *allow_exports],
        )

    def relative(self, path: Path) -> str:
        return relative_posix(path, self.root)

    def is_export_allowed(self, path: Path) -> bool:
        """Check if a file is exempt from the type-exports check."""
        if self._allow_exports_spec is None:
            return False
        return matches_any(self.relative(path), self._allow_exports_spec)


class BaseEnforcer(ABC):
    """Base class for type architecture checks."""

    # Check name to enforcer mapping (module_path, class_name)
    CHECK_MAP = {
        "barrel-files": ("typearch_guard.enforcers.barrel_files", "BarrelFilesEnforcer"),
        "type-exports": ("typearch_guard.enforcers.type_exports", "TypeExportsEnforcer"),
        "type-imports": ("typearch_guard.enforcers.type_imports", "TypeImportsEnforcer"),
        "type-duplicates": (
            "typearch_guard.enforcers.type_duplicates",
            "TypeDuplicatesEnforcer",
        ),
        "inline-types": ("typearch_guard.enforcers.inline_types", "InlineTypesEnforcer"),
    }

    check_name: str = ""
    how_to_fix: tuple[str, ...] = ()
    suppress_instruction: str = ""

    def __init__(self, context: ProjectContext):
        self.context = context

    @staticmethod
    def available_checks() -> list[str]:
        return list(BaseEnforcer.CHECK_MAP)

    @staticmethod
    def create(check_name: str, context: ProjectContext) -> "BaseEnforcer":
        """Factory method: create the enforcer for a check name.

        Raises:
            KeyError: if the check name is unknown
        """
        # Lazy import to avoid loading every check at startup
        module_path, class_name = BaseEnforcer.CHECK_MAP[check_name]
        module = importlib.import_module(module_path)
        enforcer_class = getattr(module, class_name)
        return enforcer_class(context)

    @abstractmethod
    def analyze_file(self, source: SourceFile) -> list[Violation]:
        """Analyze one file and return its violations."""

    def should_analyze_file(self, path: Path) -> bool:
        return True

    def analyze_project(self, files: Sequence[Path]) -> list[Violation]:
        """Analyze every file independently and join the results."""
        per_file = self.map_files(self._analyze_path, files)
        return [violation for violations in per_file for violation in violations]

    def map_files(self, func: Callable[[Path], T], files: Sequence[Path]) -> list[T]:
        """Apply ``func`` to each file, in parallel when jobs > 1.

        Results come back in input order.
        """
        if self.context.jobs > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.context.jobs) as pool:
                return list(pool.map(func, files))
        return [func(path) for path in files]

    def read_source(self, path: Path) -> Optional[SourceFile]:
        """Read a file, or None if it cannot be read."""
        try:
            return SourceFile.read(path)
        except OSError as e:
            logger.debug("Skipping unreadable file %s: %s", path, e)
            return None

    def _analyze_path(self, path: Path) -> list[Violation]:
        source = self.read_source(path)
        if source is None:
            return []
        return self.analyze_file(source)

    def relative(self, path: Path) -> str:
        return self.context.relative(path)

    def run(self) -> CheckResult:
        """Run the check over the project. Violations come back sorted."""
        files = [f for f in self.context.files if self.should_analyze_file(f)]
        violations = self.analyze_project(files)
        violations.sort(key=Violation.sort_key)
        logger.debug(
            "%s: %d files, %d violations", self.check_name, len(files), len(violations)
        )
        return CheckResult(
            check_name=self.check_name,
            violations=violations,
            suggestions=self.collect_suggestions(violations),
            how_to_fix=list(self.how_to_fix),
            suppress_instruction=self.suppress_instruction,
            files_scanned=len(files),
        )

    def collect_suggestions(self, violations: list[Violation]) -> list[str]:
        return []
