"""Core utilities and base classes for typearch-guard enforcers."""

from .violation import CheckResult, Violation, ViolationReporter
from .base_enforcer import BaseEnforcer, ProjectContext
from .config import Config
from .errors import ConfigError, GlobPatternError, TypeArchError
from .files import get_typescript_files
from .source import SourceFile
from .utils import (
    is_comment_or_whitespace,
    is_types_file,
    relative_posix,
)

__all__ = [
    "CheckResult",
    "Violation",
    "ViolationReporter",
    "BaseEnforcer",
    "ProjectContext",
    "Config",
    "ConfigError",
    "GlobPatternError",
    "TypeArchError",
    "get_typescript_files",
    "SourceFile",
    "is_comment_or_whitespace",
    "is_types_file",
    "relative_posix",
]
