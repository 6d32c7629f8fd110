"""Structural type shapes and the duplicate relations between them.

Composite declarations (``type X = { ... }`` and ``interface X { ... }``) are
reduced to their top-level field signatures. Two shapes from different files
are then compared by a fixed list of relations, strongest first.
"""

import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Iterable, Iterator, Optional, Sequence

from ..core.directives import TYPE_DUPLICATE_ALLOWED, has_header_directive, has_ignore_flag
from ..core.source import SourceFile
from ..core.utils import strip_line_comment

IDENT = r"[A-Za-z_$][\w$]*"

# Fewer fields than this is too generic to be worth comparing
MIN_FIELDS = 2

_DECLARATION = re.compile(
    rf"^\s*(?:export\s+)?(?:declare\s+)?(?P<keyword>type|interface)\s+(?P<name>{IDENT})"
)
_FIELD = re.compile(
    rf"^(?:readonly\s+)?(?P<name>{IDENT}|'[^']*'|\"[^\"]*\")(?P<optional>\?)?\s*:\s*(?P<type>.+)$",
    re.DOTALL,
)
_WHITESPACE = re.compile(r"\s+")
_INLINE_BLOCK_COMMENT = re.compile(r"/\*.*?\*/")

_OPEN = "{[(<"
_CLOSE = "}])>"
_MEMBER_SEPARATORS = ";,"
# A member whose text ends like this continues on the next line
_DANGLING = ("|", "&", ":", "=>", "?")


@dataclass(frozen=True)
class FieldDefinition:
    """One top-level member of a composite type."""

    name: str
    type: str
    optional: bool = False

    @property
    def signature(self) -> str:
        return f"{self.name}{'?' if self.optional else ''}:{self.type}"


@dataclass(frozen=True)
class TypeDefinition:
    """A composite type declaration and its fields.

    ``file_path`` is the project-relative path used in reports.
    """

    name: str
    file_path: str
    line: int
    fields: tuple[FieldDefinition, ...]

    @property
    def location(self) -> str:
        return f"{self.file_path}:{self.line}"

    def sort_key(self) -> tuple[str, int, str]:
        return (self.file_path, self.line, self.name)

    def field_map(self) -> dict[str, FieldDefinition]:
        return {f.name: f for f in self.fields}

    @property
    def required_fields(self) -> tuple[FieldDefinition, ...]:
        return tuple(f for f in self.fields if not f.optional)

    @property
    def optional_fields(self) -> tuple[FieldDefinition, ...]:
        return tuple(f for f in self.fields if f.optional)


class MatchKind(Enum):
    EXACT = "exact"
    OPTIONAL_VARIANCE = "optional-variance"
    SUBSET = "subset"
    SUPERSET = "superset"
    REQUIRED_OPPORTUNITY = "required-opportunity"


@dataclass(frozen=True)
class DuplicateMatch:
    """Relation found between two types from different files."""

    type1: TypeDefinition
    type2: TypeDefinition
    match_kind: MatchKind
    suggestion: str

    def sort_key(self) -> tuple[tuple[str, int, str], tuple[str, int, str]]:
        return (self.type1.sort_key(), self.type2.sort_key())


# --- Extraction -------------------------------------------------------------


def extract_type_definitions(source: SourceFile, display_path: str) -> list[TypeDefinition]:
    """Collect the composite types of one file.

    Args:
        source: File to scan
        display_path: Path recorded on each definition

    Returns:
        Definitions with at least two fields, in file order
    """
    if has_header_directive(source.lines, TYPE_DUPLICATE_ALLOWED):
        return []

    definitions: list[TypeDefinition] = []
    for index, line, prev in source.iter_lines():
        if has_ignore_flag(line, prev, TYPE_DUPLICATE_ALLOWED):
            continue

        match = _DECLARATION.match(line)
        if not match:
            continue

        body_start = _find_body_start(source.lines, index, match)
        if body_start is None:
            continue

        fields = _parse_fields(_body_text(source.lines, *body_start))
        if len(fields) >= MIN_FIELDS:
            definitions.append(
                TypeDefinition(
                    name=match.group("name"),
                    file_path=display_path,
                    line=index + 1,
                    fields=tuple(fields),
                )
            )
    return definitions


def _skip_type_parameters(text: str, pos: int) -> int:
    """Position just past a ``<...>`` list starting at ``pos``, if any."""
    if pos >= len(text) or text[pos] != "<":
        return pos
    depth = 0
    for i in range(pos, len(text)):
        if text[i] == "<":
            depth += 1
        elif text[i] == ">" and text[i - 1] != "=":
            depth -= 1
            if depth == 0:
                return i + 1
    return len(text)


def _find_body_start(
    lines: Sequence[str], index: int, match: re.Match[str]
) -> Optional[tuple[int, int]]:
    """Locate the opening brace of a declaration as ``(line index, column)``.

    Returns None for declarations without an object body (unions,
    intersections, aliases) and for interfaces that extend others.
    """
    line = strip_line_comment(lines[index])
    pos = _skip_type_parameters(line, match.end())
    while pos < len(line) and line[pos].isspace():
        pos += 1
    tail = line[pos:]

    if match.group("keyword") == "type":
        if not tail.startswith("=") or tail.startswith("=="):
            return None
        pos += 1
        while pos < len(line) and line[pos].isspace():
            pos += 1
        tail = line[pos:]
    elif tail.startswith("extends"):
        return None

    if tail.startswith("{"):
        return index, pos
    if tail.strip():
        return None

    for next_index in range(index + 1, len(lines)):
        following = lines[next_index]
        if not following.strip():
            continue
        if following.lstrip().startswith("{"):
            return next_index, following.index("{")
        return None
    return None


def _code_of(line: str) -> str:
    """A line without its comments. Lines inside block comments become empty."""
    code = _INLINE_BLOCK_COMMENT.sub(" ", strip_line_comment(line))
    if code.lstrip().startswith(("/*", "*")):
        return ""
    return code


def _body_text(lines: Sequence[str], start_index: int, column: int) -> str:
    """Text between an opening brace and its match (or end of file)."""
    collected: list[str] = []
    depth = 1
    quote = ""
    for index in range(start_index, len(lines)):
        if index == start_index:
            line = _INLINE_BLOCK_COMMENT.sub(" ", strip_line_comment(lines[index])[column + 1 :])
        else:
            line = _code_of(lines[index])
        if quote != "`":
            quote = ""
        chars: list[str] = []
        i = 0
        while i < len(line):
            char = line[i]
            if quote:
                if char == "\\" and i + 1 < len(line):
                    chars.append(line[i : i + 2])
                    i += 2
                    continue
                if char == quote:
                    quote = ""
            elif char in "'\"`":
                quote = char
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    collected.append("".join(chars))
                    return "\n".join(collected)
            chars.append(char)
            i += 1
        collected.append("".join(chars))
    return "\n".join(collected)


def _split_members(body: str) -> Iterator[str]:
    """Split a body into its top-level members.

    Nested object types stay whole; a member continued on the next line by
    a leading or trailing ``|``/``&`` is joined back together.
    """
    pieces: list[str] = []
    current: list[str] = []
    depth = 0
    quote = ""
    previous = ""
    for char in body:
        if quote:
            if char == quote and previous != "\\":
                quote = ""
        elif char in "'\"`":
            quote = char
        elif char in _OPEN:
            depth += 1
        elif char in _CLOSE and not (char == ">" and previous == "="):
            depth -= 1
        elif depth == 0 and (char in _MEMBER_SEPARATORS or char == "\n"):
            pieces.append("".join(current))
            current = []
            pieces.append(char)
            previous = char
            continue
        current.append(char)
        previous = char
    pieces.append("".join(current))

    member = ""
    for piece in pieces:
        if piece in _MEMBER_SEPARATORS:
            if member.strip():
                yield member.strip()
            member = ""
        elif piece == "\n":
            member += " "
        else:
            stripped = piece.strip()
            if member.strip() and stripped and not (
                stripped.startswith(("|", "&")) or member.rstrip().endswith(_DANGLING)
            ):
                yield member.strip()
                member = ""
            member += piece
    if member.strip():
        yield member.strip()


def _parse_fields(body: str) -> list[FieldDefinition]:
    fields: list[FieldDefinition] = []
    for member in _split_members(body):
        match = _FIELD.match(member)
        if not match:
            continue
        # A leading `|` or `&` before the first union member is optional
        declared = _WHITESPACE.sub(" ", match.group("type")).strip().lstrip("|&").strip()
        if not declared:
            continue
        fields.append(
            FieldDefinition(
                name=match.group("name").strip("'\""),
                type=declared,
                optional=match.group("optional") == "?",
            )
        )
    return fields


# --- Comparison -------------------------------------------------------------


def _same_signatures(
    fields1: Sequence[FieldDefinition], fields2: Sequence[FieldDefinition]
) -> bool:
    if len(fields1) != len(fields2):
        return False
    return Counter(f.signature for f in fields1) == Counter(f.signature for f in fields2)


def _is_contained(small: TypeDefinition, large: TypeDefinition) -> bool:
    large_fields = large.field_map()
    return all(
        f.name in large_fields
        and large_fields[f.name].type == f.type
        and large_fields[f.name].optional == f.optional
        for f in small.fields
    )


def _omit_list(small: TypeDefinition, large: TypeDefinition) -> str:
    present = {f.name for f in small.fields}
    return " | ".join(f"'{f.name}'" for f in large.fields if f.name not in present)


def compare_types(first: TypeDefinition, second: TypeDefinition) -> Optional[DuplicateMatch]:
    """Find the strongest relation between two types.

    The pair is put in (file, line, name) order first, so the answer does
    not depend on argument order.

    Returns:
        The match, or None when the types are unrelated or share a file
    """
    if first.file_path == second.file_path:
        return None
    type1, type2 = sorted((first, second), key=TypeDefinition.sort_key)
    names = f"'{type1.name}' ({type1.location}) and '{type2.name}' ({type2.location})"

    if _same_signatures(type1.fields, type2.fields):
        return DuplicateMatch(
            type1,
            type2,
            MatchKind.EXACT,
            f"Types {names} are structurally identical. "
            "Consider consolidating into a single type.",
        )

    optional1, optional2 = type1.optional_fields, type2.optional_fields
    if (
        type1.required_fields
        and _same_signatures(type1.required_fields, type2.required_fields)
        and optional1
        and optional2
        and len(optional1) != len(optional2)
    ):
        return DuplicateMatch(
            type1,
            type2,
            MatchKind.OPTIONAL_VARIANCE,
            f"Types {names} have the same required fields but different optional "
            "fields. Consider using a base type with Partial<T> or optional field "
            "composition.",
        )

    if len(type1.fields) != len(type2.fields):
        if len(type1.fields) < len(type2.fields):
            small, large, kind = type1, type2, MatchKind.SUBSET
        else:
            small, large, kind = type2, type1, MatchKind.SUPERSET
        if _is_contained(small, large):
            return DuplicateMatch(
                small,
                large,
                kind,
                f"Type '{small.name}' ({small.location}) is a subset of "
                f"'{large.name}' ({large.location}). Consider using: "
                f"type {small.name} = Omit<{large.name}, {_omit_list(small, large)}>",
            )
        return None

    fields2 = type2.field_map()
    if not all(f.name in fields2 and fields2[f.name].type == f.type for f in type1.fields):
        return None
    if not optional1 and optional2:
        required, partial = type1, type2
    elif not optional2 and optional1:
        required, partial = type2, type1
    else:
        return None
    return DuplicateMatch(
        required,
        partial,
        MatchKind.REQUIRED_OPPORTUNITY,
        f"Type '{required.name}' ({required.location}) has all required fields while "
        f"'{partial.name}' ({partial.location}) has optional fields. Consider using: "
        f"type {required.name} = Required<{partial.name}>",
    )


def find_duplicates(definitions: Iterable[TypeDefinition]) -> list[DuplicateMatch]:
    """Compare every cross-file pair once.

    Pairs are identified by their unordered (file, name) identities, so the
    result does not depend on the order of ``definitions``.
    """
    ordered = sorted(definitions, key=TypeDefinition.sort_key)
    seen: set[tuple[tuple[str, str], ...]] = set()
    matches: list[DuplicateMatch] = []

    for first, second in combinations(ordered, 2):
        if first.file_path == second.file_path:
            continue
        key = tuple(sorted(((first.file_path, first.name), (second.file_path, second.name))))
        if key in seen:
            continue
        seen.add(key)

        match = compare_types(first, second)
        if match is not None:
            matches.append(match)

    matches.sort(key=DuplicateMatch.sort_key)
    return matches
