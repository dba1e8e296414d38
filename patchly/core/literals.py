"""
Literals — Locate /body/flags regex literals in source text

The scanner is a small state machine over the raw text:

    code ──"//"──> line comment ──newline──> code
    code ──"/*"──> block comment ──"*/"───> code
    code ──' " `─> string ──closing quote──> code
    code ──"/"───> regex candidate ──unescaped "/" + flags──> code

A candidate is the shortest non-empty run after a "/" (not followed by "*" or
"/") up to the next "/" that is not preceded by an odd number of backslashes,
on the same line, followed by flag letters from {g,i,m,s,u,v,y}.

Known gap: there is no expression grammar here, so `a / b / c` reads as a
literal. This is a heuristic, not a JavaScript lexer.

Also provides canonical-form helpers used to compare literals:
body with whitespace removed, flags sorted.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterator, NamedTuple, Optional, Tuple


FLAG_ALPHABET = frozenset("gimsuvy")
LINE_TERMINATORS = frozenset("\n\r\u2028\u2029")

_LITERAL_SHAPE = re.compile(r"/[\s\S]*/[A-Za-z]*")
_LITERAL_PARTS = re.compile(r"/([\s\S]*)/([A-Za-z]*)")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class LiteralSpan:
    """A regex literal found in text: text[start:end] == literal."""
    start: int
    end: int
    body: str
    flags: str

    @property
    def literal(self) -> str:
        return f"/{self.body}/{self.flags}"

    @property
    def flag_set(self) -> FrozenSet[str]:
        return frozenset(self.flags)

    def intersects(self, start: int, end: int) -> bool:
        """Half-open overlap with [start, end)."""
        return self.start < end and start < self.end


class _State(Enum):
    CODE = "code"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    STRING = "string"
    TEMPLATE = "template"


def _is_escaped(text: str, index: int, floor: int) -> bool:
    """True if text[index] is preceded by an odd run of backslashes (not looking before floor)."""
    count = 0
    i = index - 1
    while i >= floor and text[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


class LiteralScanner:
    """
    Lazy, restartable scan of one text.

    Each iteration starts from the beginning, so the same scanner can be
    walked any number of times:

        scanner = LiteralScanner(text)
        spans = list(scanner)
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[LiteralSpan]:
        return self._scan()

    def _scan(self) -> Iterator[LiteralSpan]:
        text = self.text
        n = len(text)
        state = _State.CODE
        quote = ""
        i = 0

        while i < n:
            ch = text[i]

            if state is _State.CODE:
                nxt = text[i + 1] if i + 1 < n else ""
                if ch == "/" and nxt == "/":
                    state = _State.LINE_COMMENT
                    i += 2
                elif ch == "/" and nxt == "*":
                    state = _State.BLOCK_COMMENT
                    i += 2
                elif ch == "/":
                    span = self._read_candidate(i)
                    if span is None:
                        i += 1
                    else:
                        yield span
                        i = span.end
                elif ch in "'\"":
                    state = _State.STRING
                    quote = ch
                    i += 1
                elif ch == "`":
                    state = _State.TEMPLATE
                    i += 1
                else:
                    i += 1

            elif state is _State.LINE_COMMENT:
                if ch == "\n":
                    state = _State.CODE
                i += 1

            elif state is _State.BLOCK_COMMENT:
                if ch == "*" and i + 1 < n and text[i + 1] == "/":
                    state = _State.CODE
                    i += 2
                else:
                    i += 1

            elif state is _State.STRING:
                if ch == "\\":
                    i += 2
                    continue
                # Unterminated strings end at the line break
                if ch == quote or ch == "\n":
                    state = _State.CODE
                i += 1

            else:  # TEMPLATE
                if ch == "\\":
                    i += 2
                    continue
                if ch == "`":
                    state = _State.CODE
                i += 1

    def _read_candidate(self, open_index: int):
        """Try to read a literal whose opening slash is at open_index; None if there is none."""
        text = self.text
        n = len(text)
        body_start = open_index + 1
        if body_start >= n or text[body_start] == "\n":
            return None

        # The body is non-empty, so the closing slash is searched from the second body char
        j = body_start + 1
        while j < n:
            ch = text[j]
            if ch == "\n":
                return None
            if ch == "/" and not _is_escaped(text, j, body_start):
                break
            j += 1
        else:
            return None

        k = j + 1
        while k < n and text[k] in FLAG_ALPHABET:
            k += 1

        return LiteralSpan(
            start=open_index,
            end=k,
            body=text[body_start:j],
            flags=text[j + 1:k],
        )


def scan_literals(text: str) -> Iterator[LiteralSpan]:
    """Convenience: iterate literal spans in text."""
    return iter(LiteralScanner(text))


# =============================================================================
# Literal text helpers
# =============================================================================

class LiteralParts(NamedTuple):
    body: str
    flags: str


def is_literal(text: str) -> bool:
    """True if text already has the /body/flags shape."""
    return _LITERAL_SHAPE.fullmatch(text) is not None


def escape_slashes(body: str) -> str:
    """Escape every "/" that is not already escaped."""
    out = []
    backslashes = 0
    for ch in body:
        if ch == "/" and backslashes % 2 == 0:
            out.append("\\/")
        else:
            out.append(ch)
        backslashes = backslashes + 1 if ch == "\\" else 0
    return "".join(out)


def wrap_as_literal(body_or_literal: str) -> str:
    if is_literal(body_or_literal):
        return body_or_literal
    return f"/{escape_slashes(body_or_literal)}/"


def as_literal(text: str) -> str:
    """Raw pattern text or literal -> literal."""
    stripped = text.strip()
    if is_literal(stripped):
        return stripped
    return wrap_as_literal(stripped)


def split_literal(literal: str) -> LiteralParts:
    match = _LITERAL_PARTS.fullmatch(literal)
    if match is None:
        return LiteralParts(literal, "")
    return LiteralParts(match.group(1), match.group(2))


def parse_literal(text: str) -> Optional[LiteralParts]:
    """
    Strict parse of exactly one /body/flags literal, or None.

    The body is non-empty, stays on one line, and escapes every "/" (inside
    character classes too), so it reads back as a single LiteralScanner span.
    Flags come from FLAG_ALPHABET, each at most once, never both u and v.
    """
    n = len(text)
    if n < 3 or text[0] != "/" or text[1] == "*":
        return None

    i = 1
    while i < n:
        ch = text[i]
        if ch in LINE_TERMINATORS:
            return None
        if ch == "\\":
            if i + 1 < n and text[i + 1] in LINE_TERMINATORS:
                return None
            i += 2
            continue
        if ch == "/":
            break
        i += 1
    else:
        return None

    body, flags = text[1:i], text[i + 1:]
    if not body or not _valid_flags(flags):
        return None
    return LiteralParts(body, flags)


def _valid_flags(flags: str) -> bool:
    unique = set(flags)
    return (
        unique <= FLAG_ALPHABET
        and len(unique) == len(flags)
        and not {"u", "v"} <= unique
    )


def is_valid_literal(text: str) -> bool:
    return parse_literal(text) is not None


def build_literal(body: str, flags: str = "") -> str:
    return f"/{body}/{flags}"


def canonical_form(text: str) -> Tuple[str, str]:
    """(body without whitespace, sorted flags) of a raw pattern or literal."""
    body, flags = split_literal(as_literal(text))
    return _WHITESPACE.sub("", body), "".join(sorted(flags))


def same_literal(a: str, b: str) -> bool:
    """Equality of canonical forms."""
    return canonical_form(a) == canonical_form(b)
