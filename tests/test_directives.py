"""Tests for suppression comments and shared line helpers."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typearch_guard.core.directives import (
    BARREL_FILE_ALLOWED,
    TYPE_DUPLICATE_ALLOWED,
    TYPE_EXPORT_ALLOWED,
    has_file_directive,
    has_ignore_flag,
)
from typearch_guard.core.utils import (
    is_comment_or_whitespace,
    is_types_file,
    mask_strings,
    strip_line_comment,
)


def test_marker_on_same_line_or_line_above() -> None:
    line = "export const a = 1;"
    assert has_ignore_flag(line + " " + TYPE_EXPORT_ALLOWED, "", TYPE_EXPORT_ALLOWED)
    assert has_ignore_flag(line, TYPE_EXPORT_ALLOWED, TYPE_EXPORT_ALLOWED)
    assert not has_ignore_flag(line, "const unrelated = 2;", TYPE_EXPORT_ALLOWED)


def test_markers_do_not_cross_checks() -> None:
    assert not has_ignore_flag("type A = {} " + TYPE_DUPLICATE_ALLOWED, "", TYPE_EXPORT_ALLOWED)


def test_file_directive_accepts_either_comment_style() -> None:
    assert has_file_directive("// @barrel-file-allowed\nexport * from './a';", *BARREL_FILE_ALLOWED)
    assert has_file_directive("/* @barrel-file-allowed */\n", *BARREL_FILE_ALLOWED)
    assert not has_file_directive("export * from './a';\n", *BARREL_FILE_ALLOWED)


def test_types_file_detection() -> None:
    assert is_types_file("src/types.ts")
    assert is_types_file("src/user.types.ts")
    assert is_types_file("src/types/user.ts")
    assert is_types_file("types/nested/deep.ts")
    assert not is_types_file("src/prototypes.ts")
    assert not is_types_file("src/types-helper/util.ts")
    assert not is_types_file("src/user.ts")


def test_comment_and_blank_lines() -> None:
    assert is_comment_or_whitespace("   ")
    assert is_comment_or_whitespace("// note")
    assert is_comment_or_whitespace(" * inside a block")
    assert not is_comment_or_whitespace("export const a = 1; // trailing")


def test_mask_strings_hides_code_like_text() -> None:
    assert mask_strings("fn('a.b', \"C_D\", `x.y`)") == "fn('', \"\", ``)"


def test_mask_strings_scans_quotes_in_order() -> None:
    assert mask_strings("{ a: \"it's\", b: 'x: a.b' }") == "{ a: \"\", b: '' }"
    assert mask_strings("`it's ${n}` + C.D") == "`` + C.D"


def test_unterminated_string_ends_at_newline() -> None:
    assert mask_strings("a = 'open\nB.C") == "a = '\nB.C"


def test_strip_line_comment_respects_strings() -> None:
    assert strip_line_comment("const url = 'http://x'; // note") == "const url = 'http://x';"
    assert strip_line_comment("const a = 1") == "const a = 1"
