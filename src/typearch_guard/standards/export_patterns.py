"""TypeScript export pattern definitions and the const-export classifier.

An ``export const`` is acceptable outside a type module when it holds a
runtime value (function, constructed object, validator schema). A constant
made only of literals is type-like data and belongs in a type module.

The classifier never parses. It applies an ordered list of line predicates,
each looking at the initializer text and a bounded window of following
lines, and the first predicate that matches decides. Reordering the rules
changes results.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Sequence

from ..core.config import DEFAULT_VALIDATOR_NAMESPACES
from ..core.utils import code_chars, mask_strings, strip_line_comment

IDENT = r"[A-Za-z_$][\w$]*"


class ExportKind(Enum):
    TYPE_ALIAS = "type-alias"
    INTERFACE = "interface"
    ENUM = "enum"
    CONST = "const"
    FUNCTION = "function"
    CLASS = "class"


TYPE_LIKE_KINDS = frozenset({ExportKind.TYPE_ALIAS, ExportKind.INTERFACE, ExportKind.ENUM})


class ExportClassification(Enum):
    FUNCTIONAL = "functional"
    RUNTIME_CONSTRUCTED = "runtime-constructed"
    RECOGNIZED_VALIDATOR = "recognized-validator"
    LITERAL_CONSTANT = "literal-constant"


@dataclass(frozen=True)
class ExportCandidate:
    """An exported declaration found while scanning a file."""

    file_path: str
    line_num: int
    line: str
    name: str
    kind: ExportKind


# Order matters: `export const enum` must be seen as an enum before a const
EXPORT_DECLARATION_PATTERNS: tuple[tuple[re.Pattern[str], ExportKind], ...] = (
    (re.compile(rf"^\s*export\s+(?:declare\s+)?type\s+({IDENT})"), ExportKind.TYPE_ALIAS),
    (re.compile(rf"^\s*export\s+(?:declare\s+)?interface\s+({IDENT})"), ExportKind.INTERFACE),
    (
        re.compile(rf"^\s*export\s+(?:declare\s+)?(?:const\s+)?enum\s+({IDENT})"),
        ExportKind.ENUM,
    ),
    (
        re.compile(
            rf"^\s*export\s+(?:default\s+)?(?:declare\s+)?(?:async\s+)?function\b\s*\*?\s*({IDENT})?"
        ),
        ExportKind.FUNCTION,
    ),
    (
        re.compile(
            rf"^\s*export\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?class\b\s*({IDENT})?"
        ),
        ExportKind.CLASS,
    ),
    (re.compile(rf"^\s*export\s+const\s+({IDENT})\s*(?:[:=]|$)"), ExportKind.CONST),
)

# export type * from '...' (and `export type * as ns from`)
TYPE_RE_EXPORT_PATTERN = re.compile(r"^\s*export\s+type\s+\*\s*(?:as\s+\w+\s+)?from\b")

# export { type Foo } / export type { Foo }
TYPE_BRACES_EXPORT_PATTERNS = (
    re.compile(rf"^\s*export\s+\{{[^}}]*\btype\s+{IDENT}"),
    re.compile(r"^\s*export\s+type\s+\{"),
)

_DECLARATION = re.compile(
    rf"^\s*export\s+const\s+{IDENT}\s*(?::(?P<annotation>.*?))?(?<![=!<>])=(?![=>])\s*(?P<init>.*)$"
)
_OPEN_ANNOTATION = re.compile(rf"^\s*export\s+const\s+{IDENT}\s*:(?P<annotation>.*)$")
_NEW_EXPORT = re.compile(r"^\s*export\s")

_ARROW_INIT = re.compile(r"^(?:async\s+)?(?:\([^)]*\)|[^=]+?)\s*=>")
_FUNCTION_INIT = re.compile(r"^(?:async\s+)?function\b")
_CLASS_INIT = re.compile(r"^class\b")
_NEW_INIT = re.compile(r"^new\s+[A-Za-z_$]")
_CALL_INIT = re.compile(rf"^(?:await\s+)?({IDENT}(?:\s*\.\s*{IDENT})*)\s*(?:<[^()]*>)?\s*\(")

_VALUE_START = r"(?:^|[:\[,(])\s*"
_VALUE_END = r"(?=\s*(?:[,;}\])]|$))"
_PROPERTY_VALUE = re.compile(
    _VALUE_START + rf"{IDENT}(?:\s*\??\.\s*{IDENT})+" + _VALUE_END, re.MULTILINE
)
_UPPER_CASE_VALUE = re.compile(_VALUE_START + r"[A-Z][A-Z0-9_]+" + _VALUE_END, re.MULTILINE)
_CALL_VALUE = re.compile(
    _VALUE_START + rf"(?P<callee>(?:new\s+)?{IDENT}(?:\s*\.\s*{IDENT})*)\s*\(", re.MULTILINE
)
_TEMPLATE_INTERPOLATION = re.compile(r"`[^`]*\$\{")
_SHORTHAND_ENTRY = re.compile(IDENT)
_KEYED_ENTRY = re.compile(rf"(?:{IDENT}|''|\"\"|\d+)\s*:\s*(?P<value>{IDENT})")

_LITERAL_KEYWORDS = frozenset({"true", "false", "null", "undefined", "NaN", "Infinity"})
_OPENERS = "{[("
_CLOSERS = "}])"
_CONTINUATIONS = ("=", "(", "[", "{", ",", ".", "?", ":", "|", "&", "+", "-", "=>")

Rule = Callable[[str, Sequence[str]], bool]


def initializer_of(line: str) -> str:
    """Text after the ``=`` of an ``export const`` line.

    Type annotations (including function types with ``=>``) are skipped.
    Returns an empty string when the value starts on a later line.
    """
    match = _DECLARATION.match(line)
    if not match:
        return ""
    return strip_line_comment(match.group("init")).strip()


def _paren_depth(text: str) -> int:
    return text.count("(") - text.count(")")


def _nesting_delta(text: str) -> int:
    return sum(text.count(c) for c in _OPENERS) - sum(text.count(c) for c in _CLOSERS)


def _is_complete(masked: str) -> bool:
    """Whether an initializer ends on its own line."""
    text = masked.rstrip()
    if not text:
        return False
    if text.endswith(";"):
        return True
    return _nesting_delta(text) <= 0 and not text.endswith(_CONTINUATIONS)


def _find_assignment(text: str, depth: int) -> tuple[Optional[int], int, bool]:
    """Scan type annotation text for the ``=`` that starts the value.

    Returns the index of that ``=`` (or None), the bracket depth carried to
    the next line, and whether a top-level ``;`` ended the declaration.
    """
    for i, char in code_chars(text):
        before = text[i - 1] if i else ""
        after = text[i + 1] if i + 1 < len(text) else ""
        if char in "{[(<":
            depth += 1
        elif char in "}])" or (char == ">" and before != "="):
            depth -= 1
        elif depth <= 0 and char == ";":
            return None, depth, True
        elif depth <= 0 and char == "=" and after not in "=>" and before not in "=!<>":
            return i, depth, False
    return None, depth, False


def _window(next_lines: Sequence[str], limit: int) -> Iterator[str]:
    """Lookahead lines up to ``limit``, ending at a `;` or a new export."""
    for line in next_lines[:limit]:
        if _NEW_EXPORT.match(line):
            return
        yield line
        if ";" in line:
            return


def _first_non_blank(next_lines: Sequence[str], limit: int) -> Optional[str]:
    for line in next_lines[:limit]:
        if line.strip():
            return line.strip()
    return None


def _split_top_level(text: str) -> list[str]:
    entries: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        if char == "," and depth == 0:
            entries.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    entries.append("".join(current).strip())
    return [e for e in entries if e]


def _object_body(masked: str) -> Optional[str]:
    """Text between the first ``{`` and its matching ``}``."""
    start = masked.find("{")
    if start == -1:
        return None
    depth = 0
    for i in range(start, len(masked)):
        if masked[i] in _OPENERS:
            depth += 1
        elif masked[i] in _CLOSERS:
            depth -= 1
            if depth == 0:
                return masked[start + 1 : i]
    return masked[start + 1 :]


class ExportPatterns:
    """Ordered heuristics deciding what an ``export const`` holds."""

    FUNCTIONAL_LOOKAHEAD = 10
    CALL_LOOKAHEAD = 5
    VALIDATOR_LOOKAHEAD = 5
    LITERAL_BODY_LOOKAHEAD = 20
    DEFERRED_LOOKAHEAD = 3
    ANNOTATION_LOOKAHEAD = 10

    # Largest window any rule looks at, after a multi-line annotation
    MAX_LOOKAHEAD = ANNOTATION_LOOKAHEAD + LITERAL_BODY_LOOKAHEAD

    # Calls to these produce plain values, not runtime objects
    PRIMITIVE_WRAPPERS = frozenset({"String", "Number", "Boolean", "Array", "Object"})

    def __init__(self, validator_namespaces: Sequence[str] = DEFAULT_VALIDATOR_NAMESPACES):
        """Initialize pattern definitions.

        Args:
            validator_namespaces: Namespaces whose ``ns.builder(...)`` calls
                build runtime validators (TypeBox ``Type``, Zod ``z``, ...)
        """
        names = "|".join(re.escape(n) for n in validator_namespaces) or r"(?!)"
        self.validator_namespaces = tuple(validator_namespaces)
        self._validator_call = re.compile(rf"^(?:{names})\s*\.\s*\w+\s*\(")
        self._validator_assignment = re.compile(rf"=\s*(?:{names})\s*\.\s*\w+\s*\(")
        self._validator_line = re.compile(rf"^\s*(?:{names})\s*\.\s*\w+\s*\(")

        self.rules: list[tuple[str, Rule, ExportClassification]] = [
            ("functional-initializer", self.is_functional_initializer, ExportClassification.FUNCTIONAL),
            ("construction", self.is_construction, ExportClassification.RUNTIME_CONSTRUCTED),
            ("call", self.is_call_initializer, ExportClassification.RUNTIME_CONSTRUCTED),
            ("validator-builder", self.is_validator_builder, ExportClassification.RECOGNIZED_VALIDATOR),
            ("literal-body", self.has_runtime_literal_body, ExportClassification.RUNTIME_CONSTRUCTED),
            ("deferred-initializer", self.is_deferred_runtime, ExportClassification.RUNTIME_CONSTRUCTED),
        ]

    @staticmethod
    def scan_declaration(line: str, file_path: str, line_num: int) -> Optional[ExportCandidate]:
        """Recognize an exported declaration on a single line."""
        for pattern, kind in EXPORT_DECLARATION_PATTERNS:
            match = pattern.match(line)
            if match:
                return ExportCandidate(
                    file_path=file_path,
                    line_num=line_num,
                    line=line,
                    name=match.group(1) or "default",
                    kind=kind,
                )
        return None

    @staticmethod
    def is_type_re_export(line: str) -> bool:
        return bool(TYPE_RE_EXPORT_PATTERN.match(line))

    @staticmethod
    def has_type_export_in_braces(line: str) -> bool:
        return any(p.match(line) for p in TYPE_BRACES_EXPORT_PATTERNS)

    def classify(self, line: str, next_lines: Sequence[str]) -> ExportClassification:
        """Classify an ``export const`` line. First matching rule wins."""
        initializer, next_lines = self.split_initializer(line, next_lines)
        for _, rule, classification in self.rules:
            if rule(initializer, next_lines):
                return classification
        return ExportClassification.LITERAL_CONSTANT

    def split_initializer(
        self, line: str, next_lines: Sequence[str]
    ) -> tuple[str, Sequence[str]]:
        """Find the initializer of an ``export const``, past its type annotation.

        An annotation such as ``handlers: {\\n a: Handler;\\n} = {...}`` may
        span lines. In that case the initializer is the text after the
        closing ``=`` and the returned lookahead starts on the line below it.
        """
        annotated = _OPEN_ANNOTATION.match(line)
        if _DECLARATION.match(line) or not annotated:
            return initializer_of(line), next_lines

        depth = 0
        texts = [annotated.group("annotation"), *next_lines[: self.ANNOTATION_LOOKAHEAD]]
        for offset, text in enumerate(texts):
            if offset and _NEW_EXPORT.match(text):
                break
            text = strip_line_comment(text)
            index, depth, ended = _find_assignment(text, depth)
            if ended:
                break
            if index is not None:
                return strip_line_comment(text[index + 1 :]).strip(), next_lines[offset:]
        return "", next_lines

    def classify_candidate(
        self, candidate: ExportCandidate, lines: Sequence[str], index: int
    ) -> ExportClassification:
        """Classify a candidate found at 0-based ``index`` of ``lines``.

        Raises:
            ValueError: for type-like candidates, which are never classified
        """
        if candidate.kind in TYPE_LIKE_KINDS:
            raise ValueError(f"{candidate.kind.value} exports are not classified")
        if candidate.kind in (ExportKind.FUNCTION, ExportKind.CLASS):
            return ExportClassification.FUNCTIONAL
        next_lines = lines[index + 1 : index + 1 + self.MAX_LOOKAHEAD]
        return self.classify(candidate.line, next_lines)

    # Rule 1
    def is_functional_initializer(self, initializer: str, next_lines: Sequence[str]) -> bool:
        """Arrow function, function expression or class expression."""
        masked = mask_strings(initializer)
        if self._starts_function(masked):
            return True

        # `= (` or `= wrap(` whose arrow shows up on a following line;
        # validator builders take callbacks without becoming functions
        if _paren_depth(masked) > 0 and not self._validator_call.match(masked):
            return any(
                "=>" in mask_strings(line)
                for line in _window(next_lines, self.FUNCTIONAL_LOOKAHEAD)
            )

        if not masked:
            following = _first_non_blank(next_lines, self.DEFERRED_LOOKAHEAD)
            return following is not None and self._starts_function(mask_strings(following))

        return False

    @staticmethod
    def _starts_function(masked: str) -> bool:
        return bool(
            _ARROW_INIT.match(masked) or _FUNCTION_INIT.match(masked) or _CLASS_INIT.match(masked)
        )

    # Rule 2
    def is_construction(self, initializer: str, next_lines: Sequence[str]) -> bool:
        """``new Something(...)``."""
        return bool(_NEW_INIT.match(initializer))

    # Rule 3
    def is_call_initializer(self, initializer: str, next_lines: Sequence[str]) -> bool:
        """``fn(...)`` or ``obj.method(...)`` that is not a higher-order call."""
        if not self._is_runtime_call(initializer):
            return False
        masked = mask_strings(initializer)
        if "=>" in masked:
            return False
        if _is_complete(masked):
            return True
        return not any(
            "=>" in mask_strings(line) for line in _window(next_lines, self.CALL_LOOKAHEAD)
        )

    def _is_runtime_call(self, text: str) -> bool:
        match = _CALL_INIT.match(text)
        if not match:
            return False
        callee = re.sub(r"\s+", "", match.group(1))
        return callee not in self.PRIMITIVE_WRAPPERS

    # Rule 4
    def is_validator_builder(self, initializer: str, next_lines: Sequence[str]) -> bool:
        """Schema builders such as ``Type.Object(...)`` or ``z.object(...)``."""
        if self._validator_call.match(initializer):
            return True
        if _is_complete(mask_strings(initializer)):
            return False
        for line in next_lines[: self.VALIDATOR_LOOKAHEAD]:
            if _NEW_EXPORT.match(line):
                break
            if self._validator_assignment.search(line) or self._validator_line.match(line):
                return True
            if ";" in line and "{" not in line:
                break
        return False

    # Rule 5
    def has_runtime_literal_body(self, initializer: str, next_lines: Sequence[str]) -> bool:
        """Object or array literal that references runtime values."""
        if not initializer.startswith(("{", "[")):
            return False

        raw = self.gather_literal(initializer, next_lines)
        if _TEMPLATE_INTERPOLATION.search(raw):
            return True

        masked = mask_strings(raw)
        if "..." in masked or "=>" in masked:
            return True
        if _PROPERTY_VALUE.search(masked) or _UPPER_CASE_VALUE.search(masked):
            return True
        for match in _CALL_VALUE.finditer(masked):
            if not self._validator_call.match(match.group("callee") + "("):
                return True

        if initializer.startswith("{"):
            return self.is_reference_collection(masked)
        return False

    def gather_literal(self, initializer: str, next_lines: Sequence[str]) -> str:
        """Collect the literal's text up to its closing delimiter (bounded)."""
        collected = [initializer]
        depth = _nesting_delta(mask_strings(initializer))
        for line in next_lines[: self.LITERAL_BODY_LOOKAHEAD]:
            if depth <= 0:
                break
            line = strip_line_comment(line)
            collected.append(line)
            depth += _nesting_delta(mask_strings(line))
        return "\n".join(collected)

    @staticmethod
    def is_reference_collection(masked: str) -> bool:
        """Every entry is ``name`` or ``key: name`` (e.g. ``{ fn1, fn2 }``)."""
        body = _object_body(masked)
        if body is None:
            return False
        entries = _split_top_level(body)
        if not entries:
            return False
        for entry in entries:
            if _SHORTHAND_ENTRY.fullmatch(entry) and entry not in _LITERAL_KEYWORDS:
                continue
            keyed = _KEYED_ENTRY.fullmatch(entry)
            if keyed and keyed.group("value") not in _LITERAL_KEYWORDS:
                continue
            return False
        return True

    # Rule 6
    def is_deferred_runtime(self, initializer: str, next_lines: Sequence[str]) -> bool:
        """``export const x =`` with ``new X()`` or a call on the next line."""
        if initializer:
            return False
        following = _first_non_blank(next_lines, self.DEFERRED_LOOKAHEAD)
        if following is None:
            return False
        return bool(_NEW_INIT.match(following)) or self._is_runtime_call(following)
