"""Suppression comments understood by the checks.

A line marker applies when it appears anywhere on the current line or on
the line directly above. Nothing is carried further. File-wide markers are
checked separately by the checks that support them.
"""

from typing import Sequence

from .utils import is_comment_or_whitespace

TYPE_EXPORT_ALLOWED = "// @type-export-allowed"
TYPE_DUPLICATE_ALLOWED = "// @type-duplicate-allowed"
TYPE_IMPORT_ALLOWED = "// @type-import-allowed"
INLINE_TYPE_OK = "// @inline-type-ok"
BARREL_FILE_ALLOWED = ("// @barrel-file-allowed", "/* @barrel-file-allowed */")


def has_ignore_flag(line: str, prev_line: str, marker: str) -> bool:
    """Check whether ``marker`` suppresses ``line``."""
    return marker in line or marker in prev_line


def has_file_directive(content: str, *markers: str) -> bool:
    """Check whether any of ``markers`` appears anywhere in a file."""
    return any(marker in content for marker in markers)


def has_header_directive(lines: Sequence[str], marker: str) -> bool:
    """Check whether ``marker`` appears in the comment header of a file.

    The header is every comment or blank line before the first line of code.
    """
    for line in lines:
        if not is_comment_or_whitespace(line):
            return False
        if marker in line:
            return True
    return False
