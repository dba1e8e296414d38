"""
Tests for Literals — regex literal scanning and canonical form

These tests validate:
- Spans come out in document order without overlap
- Comments, strings and templates are skipped
- Escaped slashes and flag letters are handled
- Scanning is restartable
- Canonical form ignores body whitespace and flag order
- Strict parsing accepts only single-line literals with known flags
"""

import pytest

from patchly.core.literals import (
    LiteralScanner, LiteralSpan, scan_literals,
    is_literal, escape_slashes, wrap_as_literal, as_literal,
    split_literal, build_literal, canonical_form, same_literal,
    parse_literal, is_valid_literal,
)


SAMPLE = (
    "const a = /ab+c/gi;\n"
    "// const hidden = /nope/;\n"
    "const b = /x\\/y/;\n"
    "/* block /nope/ */ const c = '/not/' + `/also-not/`;\n"
    "const d = /(a+)+$/u;\n"
)


class TestScannerBasics:
    """Finding literals and their parts."""

    def test_finds_body_and_flags(self):
        """A literal yields its body and trailing flags."""
        spans = list(scan_literals("const a = /ab+c/gi;"))

        assert len(spans) == 1
        assert spans[0].body == "ab+c"
        assert spans[0].flags == "gi"
        assert spans[0].start == 10
        assert spans[0].end == 18

    def test_span_text_matches_literal(self):
        """text[start:end] is the literal itself."""
        for span in scan_literals(SAMPLE):
            assert SAMPLE[span.start:span.end] == span.literal

    def test_skips_comments_strings_and_templates(self):
        """Slashes inside comments, quotes and backticks are not literals."""
        bodies = [span.body for span in scan_literals(SAMPLE)]
        assert bodies == ["ab+c", "x\\/y", "(a+)+$"]

    def test_escaped_slash_does_not_close(self):
        """An escaped slash stays in the body."""
        spans = list(scan_literals("r = /a\\/b/;"))
        assert spans[0].body == "a\\/b"

    def test_escaped_backslash_before_slash_closes(self):
        """An even run of backslashes leaves the slash unescaped."""
        spans = list(scan_literals("r = /a\\\\/g;"))
        assert spans[0].body == "a\\\\"
        assert spans[0].flags == "g"

    def test_flags_stop_at_unknown_letter(self):
        """Only g, i, m, s, u, v, y are consumed as flags."""
        spans = list(scan_literals("r = /a/gx"))
        assert spans[0].flags == "g"
        assert spans[0].end == len("r = /a/g")

    def test_unterminated_literal_yields_nothing(self):
        """A literal cannot span lines."""
        assert list(scan_literals("r = /abc\nnext line")) == []

    def test_trailing_slash_yields_nothing(self):
        """A lone slash at the end of the text is not a literal."""
        assert list(scan_literals("x /")) == []

    def test_division_reads_as_literal(self):
        """Known gap: division between spaces looks like a literal."""
        spans = list(scan_literals("x = a / b / c"))
        assert [span.body for span in spans] == [" b "]


class TestScannerOrdering:
    """Document order, non-overlap, restartability."""

    def test_starts_strictly_increase_without_overlap(self):
        """Each span starts after the previous one ends."""
        spans = list(scan_literals(SAMPLE))
        for previous, current in zip(spans, spans[1:]):
            assert previous.start < current.start
            assert previous.end <= current.start

    def test_scanner_is_restartable(self):
        """Iterating the same scanner twice gives the same spans."""
        scanner = LiteralScanner(SAMPLE)
        assert list(scanner) == list(scanner)

    def test_scanner_is_lazy(self):
        """Spans are produced on demand."""
        iterator = iter(LiteralScanner(SAMPLE))
        first = next(iterator)
        assert first.body == "ab+c"

    def test_round_trip_through_parts(self):
        """Splitting and rebuilding a span's literal reproduces the source text."""
        for span in scan_literals(SAMPLE):
            body, flags = split_literal(span.literal)
            assert build_literal(body, flags) == SAMPLE[span.start:span.end]


class TestLiteralSpan:
    """Span helpers."""

    def test_intersects_is_half_open(self):
        """Touching ranges do not intersect."""
        span = LiteralSpan(start=5, end=10, body="abc", flags="")

        assert span.intersects(9, 10)
        assert span.intersects(0, 6)
        assert not span.intersects(10, 12)
        assert not span.intersects(0, 5)

    def test_flag_set(self):
        """flag_set ignores order."""
        assert LiteralSpan(0, 5, "a", "ig").flag_set == frozenset("gi")


class TestLiteralHelpers:
    """Wrapping, splitting, canonical comparison."""

    def test_is_literal(self):
        assert is_literal("/a/g")
        assert not is_literal("a+")

    def test_escape_slashes_only_unescaped(self):
        """Already-escaped slashes are left alone."""
        assert escape_slashes("a\\/b/c") == "a\\/b\\/c"

    def test_wrap_as_literal_keeps_literals(self):
        assert wrap_as_literal("/a/i") == "/a/i"
        assert wrap_as_literal("a/b") == "/a\\/b/"

    def test_as_literal_strips_whitespace(self):
        assert as_literal("  (a+)+  ") == "/(a+)+/"
        assert as_literal(" /x/m ") == "/x/m"

    def test_split_non_literal(self):
        """Text without delimiters is treated as a bare body."""
        assert split_literal("abc") == ("abc", "")

    def test_canonical_form(self):
        """Whitespace removed from the body, flags sorted."""
        assert canonical_form("/a b/ig") == ("ab", "gi")

    def test_same_literal_ignores_flag_order_and_whitespace(self):
        assert same_literal("/a b/gi", "/ab/ig")
        assert same_literal("(a+)+", "/(a+)+/")

    def test_same_literal_respects_flags(self):
        assert not same_literal("/ab/", "/ab/g")


class TestStrictParse:
    """parse_literal: exactly one well-formed literal."""

    def test_accepts_plain_literal(self):
        assert parse_literal("/^a+$/gi") == ("^a+$", "gi")

    def test_escaped_slash_and_backslash(self):
        assert parse_literal("/a\\/b\\\\/") == ("a\\/b\\\\", "")

    def test_is_literal_shape_spans_line_breaks(self):
        """Shape check sees the whole text; the strict parse rejects it."""
        assert is_literal("/a\nb/")
        assert not is_valid_literal("/a\nb/")

    @pytest.mark.parametrize("text", [
        "/a\nb/",          # line feed in the body
        "/a\rb/",          # carriage return
        "/a\u2028b/",      # line separator
        "/a\\\nb/",        # escaped line break
        "/a/b/",           # unescaped interior slash
        "/[/]/",           # slash inside a class must be escaped too
        "/a/gg",           # repeated flag
        "/a/x",            # unknown flag
        "/a/uv",           # u and v together
        "/a\\/",           # closing slash escaped away
        "//",              # empty body
        "/*a/",            # comment opener
        "a+",              # no delimiters
    ])
    def test_rejects(self, text):
        assert parse_literal(text) is None

    @pytest.mark.parametrize("text", ["/^a+$/", "/a\\/b/m", "/[^\\n]+/su", "/x/gimsy"])
    def test_valid_literal_reads_back_as_one_span(self, text):
        spans = list(LiteralScanner(text))

        assert is_valid_literal(text)
        assert len(spans) == 1
        assert spans[0].literal == text
