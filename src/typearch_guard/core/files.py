"""TypeScript file discovery driven by tsconfig.json.

The walk is pre-order and prunes excluded directories before descending, so
reserved trees such as ``node_modules`` are never listed, let alone read.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

import pathspec
from pathspec.patterns.gitwildmatch import GitWildMatchPatternError

from .errors import ConfigError, GlobPatternError
from .jsonc import load_jsonc
from .utils import relative_posix

logger = logging.getLogger(__name__)

TSCONFIG_NAME = "tsconfig.json"
SOURCE_EXTENSION = ".ts"
DECLARATION_EXTENSION = ".d.ts"

# Reserved directories, pruned at any depth
DEFAULT_EXCLUDES = (
    "**/node_modules",
    "**/dist",
    "**/build",
    "**/.git",
    "**/coverage",
    "**/.next",
    "**/out",
)

DEFAULT_INCLUDE = ("**/*",)


def glob_spec(pattern: str) -> pathspec.PathSpec:
    """Compile one glob pattern, anchored at the project root.

    Patterns use gitignore wildcards: ``*`` stays within a path segment,
    ``**/`` matches zero or more whole segments, and a pattern naming a
    directory also matches everything below it.

    Raises:
        GlobPatternError: if the pattern is not a non-empty relative string,
            or pathspec rejects it
    """
    if not isinstance(pattern, str):
        raise GlobPatternError(pattern, "pattern must be a string")
    if not pattern.strip():
        raise GlobPatternError(pattern, "pattern is empty")

    normalized = pattern.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    if normalized.startswith("/"):
        raise GlobPatternError(pattern, "pattern must be relative to the project root")
    normalized = normalized.rstrip("/")
    if not normalized:
        raise GlobPatternError(pattern, "pattern is empty")

    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", ["/" + normalized])
    except GitWildMatchPatternError as e:
        raise GlobPatternError(pattern, str(e)) from e


def compile_globs(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile several glob patterns into one spec, failing on the first malformed one."""
    return pathspec.PathSpec(
        compiled for spec in map(glob_spec, patterns) for compiled in spec.patterns
    )


def matches_any(relative_path: str, spec: pathspec.PathSpec) -> bool:
    return spec.match_file(relative_path)


def is_typescript_source(path: Path) -> bool:
    """Check for a .ts file that is not an ambient .d.ts declaration file."""
    name = path.name
    return name.endswith(SOURCE_EXTENSION) and not name.endswith(DECLARATION_EXTENSION)


def _string_list(data: dict, key: str) -> Optional[list[str]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{TSCONFIG_NAME}: '{key}' must be a list of strings")
    return value


@dataclass(frozen=True)
class ProjectConfig:
    """The file selection part of a tsconfig.json."""

    root: Path
    include: tuple[str, ...] = DEFAULT_INCLUDE
    exclude: tuple[str, ...] = ()
    files: tuple[str, ...] = ()

    @classmethod
    def load(cls, project_root: Path) -> Optional["ProjectConfig"]:
        """Load tsconfig.json from ``project_root``.

        Returns:
            The parsed configuration, or None when no tsconfig.json exists

        Raises:
            ConfigError: if tsconfig.json exists but cannot be parsed
        """
        root = project_root.resolve()
        tsconfig_path = root / TSCONFIG_NAME
        if not tsconfig_path.is_file():
            return None

        data = load_jsonc(tsconfig_path)
        include = _string_list(data, "include")
        exclude = _string_list(data, "exclude")
        files = _string_list(data, "files")

        return cls(
            root=root,
            include=tuple(include) if include is not None else DEFAULT_INCLUDE,
            exclude=tuple(exclude or ()),
            files=tuple(files or ()),
        )


def enumerate_files(
    config: ProjectConfig, exclude_patterns: Sequence[str] = ()
) -> list[Path]:
    """List the project's TypeScript files.

    Args:
        config: Loaded tsconfig selection
        exclude_patterns: Extra exclude globs, additive to the defaults and to
            the tsconfig ``exclude`` list

    Returns:
        Deduplicated, sorted absolute paths

    Raises:
        GlobPatternError: if any include or exclude pattern is malformed
    """
    root = config.root
    include_spec = compile_globs(config.include)
    exclude_spec = compile_globs([*DEFAULT_EXCLUDES, *config.exclude, *exclude_patterns])

    found: set[Path] = set()

    for entry in config.files:
        candidate = (root / entry).resolve()
        if candidate.is_file() and is_typescript_source(candidate):
            found.add(candidate)
        else:
            logger.debug("Ignoring tsconfig 'files' entry %s", entry)

    if config.include:
        found.update(_walk(root, include_spec, exclude_spec))

    # Compare whole POSIX strings, not path parts
    return sorted(found, key=lambda p: p.as_posix())


def _walk(
    root: Path,
    include_spec: pathspec.PathSpec,
    exclude_spec: pathspec.PathSpec,
) -> list[Path]:
    files: list[Path] = []

    def scan(directory: Path) -> None:
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return

        for entry in entries:
            relative_path = relative_posix(entry, root)
            if matches_any(relative_path, exclude_spec):
                continue

            if entry.is_dir() and not entry.is_symlink():
                scan(entry)
            elif (
                entry.is_file()
                and is_typescript_source(entry)
                and matches_any(relative_path, include_spec)
            ):
                files.append(entry)

    scan(root)
    return files


def get_typescript_files(
    project_root: Path, exclude_patterns: Sequence[str] = ()
) -> Optional[list[Path]]:
    """Discover TypeScript files for the project at ``project_root``.

    Returns:
        Sorted absolute paths, or None when ``project_root`` has no tsconfig.json
    """
    config = ProjectConfig.load(project_root)
    if config is None:
        return None
    return enumerate_files(config, exclude_patterns)
