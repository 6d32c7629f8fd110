"""Common utilities for typearch-guard enforcers."""

import os
import re
from pathlib import Path, PurePosixPath
from typing import Iterator, Union

TYPES_FILE_NAME = "types.ts"
TYPES_DIR_NAME = "types"

_BLOCK_COMMENT_BODY = re.compile(r"^[\s*]*$")


def is_comment_or_whitespace(line: str) -> bool:
    """Check if a line is blank or belongs to a comment."""
    trimmed = line.strip()
    return (
        trimmed == ""
        or trimmed.startswith("//")
        or trimmed.startswith("/*")
        or trimmed.startswith("*")
        or trimmed.endswith("*/")
        or bool(_BLOCK_COMMENT_BODY.match(trimmed))
    )


def is_types_file(path: Union[str, Path]) -> bool:
    """Check if a project-relative path is a type module.

    A type module is named ``types.ts`` (or ``<name>.types.ts``), or lives
    below a ``types/`` directory.
    """
    pure = PurePosixPath(str(path).replace(os.sep, "/"))
    if pure.name == TYPES_FILE_NAME or pure.name.endswith("." + TYPES_FILE_NAME):
        return True
    return TYPES_DIR_NAME in pure.parts[:-1]


def relative_posix(path: Path, root: Path) -> str:
    """Path of ``path`` relative to ``root`` with forward slashes."""
    return os.path.relpath(path, root).replace(os.sep, "/")


def code_chars(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(index, char)`` for every character outside a string literal.

    Quote characters themselves are yielded. Single and double quoted strings
    end at a newline; template literals may span lines.
    """
    quote = ""
    i = 0
    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote or (char == "\n" and quote != "`"):
                quote = ""
                yield i, char
        else:
            if char in "'\"`":
                quote = char
            yield i, char
        i += 1


def mask_strings(text: str) -> str:
    """Blank out the contents of quoted string literals.

    Keeps the quotes so positions of values are preserved, while making sure
    dots, colons or upper-case words inside strings are not read as code.
    Scans left to right, so a quote inside another kind of string (``"it's"``)
    does not open a new one.
    """
    return "".join(char for _, char in code_chars(text))


def strip_line_comment(line: str) -> str:
    """Remove a trailing // comment that is not inside a string literal."""
    for i, _ in code_chars(line):
        if line.startswith("//", i):
            return line[:i].rstrip()
    return line
