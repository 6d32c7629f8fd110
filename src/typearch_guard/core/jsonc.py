"""JSONC support for tsconfig.json (JSON with comments and trailing commas)."""

import json
from pathlib import Path
from typing import Any

from .errors import ConfigError


def strip_comments(content: str) -> str:
    """Remove // and /* */ comments outside of string literals.

    Args:
        content: JSONC text

    Returns:
        Text without comments (trailing commas are left in place)
    """
    result: list[str] = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]

        if in_string:
            result.append(char)
            if char == "\\" and i + 1 < length:
                result.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            result.append(char)
            i += 1
            continue

        if content.startswith("//", i):
            end = content.find("\n", i)
            i = length if end == -1 else end
            continue

        if content.startswith("/*", i):
            end = content.find("*/", i + 2)
            i = length if end == -1 else end + 2
            continue

        result.append(char)
        i += 1

    return "".join(result)


def strip_trailing_commas(content: str) -> str:
    """Drop commas directly followed (modulo whitespace) by ] or }."""
    result: list[str] = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]

        if in_string:
            result.append(char)
            if char == "\\" and i + 1 < length:
                result.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
        elif char == ",":
            j = i + 1
            while j < length and content[j] in " \t\r\n":
                j += 1
            if j < length and content[j] in "]}":
                i += 1
                continue

        result.append(char)
        i += 1

    return "".join(result)


def load_jsonc(path: Path) -> dict[str, Any]:
    """Read a JSONC file into a dict.

    Raises:
        ConfigError: if the file cannot be read, is not valid JSON after
            comment removal, or does not hold a JSON object
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path.name}: {e}") from e

    try:
        data = json.loads(strip_trailing_commas(strip_comments(raw)))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path.name} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a JSON object")
    return data
