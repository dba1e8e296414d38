"""
Suppression — Inline ignore directives

Directive forms (rule token optional; no rule means every rule):

    const r = /(a+)+/;   // patchly-ignore-line redos
    // patchly-disable-next-line redos
    /* patchly-disable redos */ ... /* patchly-enable redos */

Parsing produces a SuppressionState for one rule. Block directives nest:
an enable token closes the nearest still-open disable token whose rule is
compatible with its own (either side unspecified, or the same rule).

Unmatched enable tokens are dropped. An unclosed disable suppresses nothing.

States are cached per document URI and version. Cached state is never used
once the document's version moves on.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .document import Document
from .literals import LiteralSpan

logger = logging.getLogger(__name__)

DEFAULT_RULE = "redos"

DIRECTIVE_PREFIX = "patchly"

_RULE = r"(?:\s+([^\s]+))?"

LINE_IGNORE_RE = re.compile(r"//\s*patchly-ignore-line" + _RULE)
DISABLE_NEXT_RE = re.compile(r"//\s*patchly-disable-next-line" + _RULE)
BLOCK_TOKEN_RE = re.compile(
    r"/\*\s*patchly-(?P<kind>disable|enable)" + r"(?:\s+(?P<rule>[^\s]+))?" + r"\s*\*/"
)


def next_line_directive(rule: Optional[str] = DEFAULT_RULE) -> str:
    """Comment text inserted by ignore_next_line."""
    suffix = f" {rule}" if rule else ""
    return f"//{DIRECTIVE_PREFIX}-disable-next-line{suffix}\n"


def _applies(directive_rule: Optional[str], rule: str) -> bool:
    return directive_rule is None or directive_rule == rule


def _compatible(a: Optional[str], b: Optional[str]) -> bool:
    return a is None or b is None or a == b


@dataclass
class SuppressionState:
    """Parsed directives of one document, for one rule. Lines are 0-based."""
    rule: str = DEFAULT_RULE
    disabled_lines: Set[int] = field(default_factory=set)
    disabled_next_lines: Set[int] = field(default_factory=set)
    disabled_blocks: List[Tuple[int, int]] = field(default_factory=list)

    def block_contains(self, start: int, end: int) -> bool:
        for block_start, block_end in self.disabled_blocks:
            if start < block_end and block_start < end:
                return True
        return False


@dataclass
class _OpenBlock:
    rule: Optional[str]
    start: int


def parse_directives(text: str, rule: str = DEFAULT_RULE) -> SuppressionState:
    """Parse every directive in text. Pure function of (text, rule)."""
    state = SuppressionState(rule=rule)

    # Line directives
    for line_no, line in enumerate(text.split("\n")):
        for match in LINE_IGNORE_RE.finditer(line):
            if _applies(match.group(1), rule):
                state.disabled_lines.add(line_no)
        for match in DISABLE_NEXT_RE.finditer(line):
            if _applies(match.group(1), rule):
                state.disabled_next_lines.add(line_no)

    # Block directives
    stack: List[_OpenBlock] = []
    for match in BLOCK_TOKEN_RE.finditer(text):
        token_rule = match.group("rule")
        if match.group("kind") == "disable":
            # Region starts right after the open token
            stack.append(_OpenBlock(rule=token_rule, start=match.end()))
            continue

        for index in range(len(stack) - 1, -1, -1):
            opened = stack[index]
            if _compatible(opened.rule, token_rule):
                del stack[index]
                end = match.start()
                if end >= opened.start and _applies(opened.rule, rule) and _applies(token_rule, rule):
                    state.disabled_blocks.append((opened.start, end))
                break

    if stack:
        logger.debug("%d unclosed patchly-disable block(s); they suppress nothing", len(stack))

    state.disabled_blocks.sort()
    return state


class SuppressionCache:
    """Parsed states keyed by (uri, rule), each remembering the version it was built from."""

    def __init__(self):
        self._entries: Dict[Tuple[str, str], Tuple[int, SuppressionState]] = {}

    def get(self, document: Document, rule: str) -> Optional[SuppressionState]:
        entry = self._entries.get((document.uri, rule))
        if entry is None:
            return None
        version, state = entry
        if version != document.version:
            return None
        return state

    def put(self, document: Document, state: SuppressionState):
        self._entries[(document.uri, state.rule)] = (document.version, state)

    def clear(self, document: Optional[Document] = None):
        if document is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k[0] == document.uri]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


class SuppressionEngine:
    """
    Answers "is this span suppressed?" for documents.

    Args:
        rule: Rule identifier directives are matched against
        cache: State store; a fresh one is created if omitted
    """

    def __init__(self, rule: str = DEFAULT_RULE, cache: Optional[SuppressionCache] = None):
        self.rule = rule
        self.cache = cache if cache is not None else SuppressionCache()

    def parse(self, document: Document, rule: Optional[str] = None) -> SuppressionState:
        rule = rule or self.rule
        cached = self.cache.get(document, rule)
        if cached is not None:
            return cached

        state = parse_directives(document.text, rule)
        self.cache.put(document, state)
        return state

    def is_ignored(self, span: LiteralSpan, document: Document,
                   state: Optional[SuppressionState] = None) -> bool:
        if state is None:
            state = self.parse(document)

        line = document.line_at(span.start)
        if line in state.disabled_lines:
            return True
        if line - 1 in state.disabled_next_lines:
            return True
        return state.block_contains(span.start, span.end)

    def directive_insertion(self, document: Document, line: int) -> Optional[Tuple[int, str]]:
        """
        Where ignore_next_line would put its directive for `line`: (offset, prefix).

        None for a line outside 0..line_count. Past the last line the directive
        is appended, after a line break if the text does not end with one.
        """
        if line < 0 or line > document.line_count:
            return None
        if line < document.line_count:
            return document.offset_at(line, 0), ""
        text = document.text
        return len(text), ("" if not text or text.endswith("\n") else "\n")

    def ignore_next_line(self, document: Document, line: int, rule: Optional[str] = None) -> bool:
        """
        Insert a disable-next-line directive at the start of `line`.

        The finding that was on `line` moves down one line and becomes
        suppressed. Returns False (no edit) for a line outside the document.
        """
        insertion = self.directive_insertion(document, line)
        if insertion is None:
            return False

        offset, prefix = insertion
        document.insert(offset, prefix + next_line_directive(rule or self.rule))
        self.cache.clear(document)
        return True

    def clear(self, document: Optional[Document] = None):
        self.cache.clear(document)
