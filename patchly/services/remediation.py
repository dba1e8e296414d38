"""
Remediation — Turn a vulnerable literal into a verified, different one

Pipeline for one literal:

    1. cache hit (only divergent results are ever cached)
    2. canonicalize input to /body/flags
    3. ask the generation collaborator for a candidate
    4. no candidate, or one that is not a single-line /body/flags literal
       -> start from the original
    5. harden deterministically: anchor, bound . wildcards, drop g
    6. divergence guard: wrap the anchored inner part in (?:...) if the
       candidate still equals the original canonically
    7. reverify with the oracle; anything but SAFE -> hardened, wrapped original
    8. cache under the raw input text

Steps 5-7 never call the LLM again, so every request terminates after at
most one generation round trip. The returned literal never equals the input
canonically; that is a syntactic guarantee only, not a behavioral one.
"""

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from ..core.document import Document, Replacement
from ..core.literals import (
    LiteralSpan, as_literal, build_literal, is_valid_literal,
    same_literal, split_literal,
)
from .generation import FixGenerator, GenerationStatus
from .oracle import OracleVerdict, VulnerabilityOracle, check_safely, format_risk_hint

if TYPE_CHECKING:
    from ..core.findings import Finding

logger = logging.getLogger(__name__)

BOUNDED_WILDCARD = "[^\\n]"


class FixStatus(Enum):
    GENERATED = "generated"    # LLM candidate survived hardening and reverification
    FALLBACK = "fallback"      # deterministic rewrite of the original
    CANCELLED = "cancelled"    # caller cancelled; no fix


@dataclass(frozen=True)
class FixResult:
    """A synthesized literal, always in /body/flags form."""
    fixed_pattern: str
    status: FixStatus = FixStatus.GENERATED


@dataclass(frozen=True)
class FixOutcome:
    """What a synthesis request produced."""
    status: FixStatus
    result: Optional[FixResult] = None
    cached: bool = False
    replacement: Optional[Replacement] = None

    @property
    def fixed_pattern(self) -> Optional[str]:
        return self.result.fixed_pattern if self.result else None

    @property
    def cancelled(self) -> bool:
        return self.status == FixStatus.CANCELLED


# =============================================================================
# Deterministic rewrites
# =============================================================================

def _ends_with_anchor(body: str) -> bool:
    if not body.endswith("$"):
        return False
    backslashes = 0
    i = len(body) - 2
    while i >= 0 and body[i] == "\\":
        backslashes += 1
        i -= 1
    return backslashes % 2 == 0


def bound_wildcards(body: str) -> str:
    """Rewrite unescaped `.*` / `.+` outside character classes to `[^\\n]*` / `[^\\n]+`."""
    out = []
    in_class = False
    i = 0
    n = len(body)
    while i < n:
        ch = body[i]
        if ch == "\\":
            out.append(body[i:i + 2])
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
            out.append(ch)
        elif ch == "[":
            in_class = True
            out.append(ch)
        elif ch == "." and i + 1 < n and body[i + 1] in "*+":
            out.append(BOUNDED_WILDCARD + body[i + 1])
            i += 2
            continue
        else:
            out.append(ch)
        i += 1
    return "".join(out)


def harden_literal(literal: str) -> str:
    """
    Anchor, bound wildcards, drop the global flag. Idempotent.

        /.*@.*\\..*/g  ->  /^[^\\n]*@[^\\n]*\\.[^\\n]*$/
    """
    body, flags = split_literal(as_literal(literal))

    body = bound_wildcards(body)
    if not body.startswith("^"):
        body = "^" + body
    if not _ends_with_anchor(body):
        body = body + "$"

    # dict.fromkeys drops repeated flags, keeping order
    return build_literal(body, "".join(dict.fromkeys(flags.replace("g", ""))))


def enforce_must_differ(literal: str) -> str:
    """Wrap only the part between a leading ^ and a trailing $ in a non-capturing group."""
    body, flags = split_literal(as_literal(literal))

    has_start = body.startswith("^")
    has_end = _ends_with_anchor(body) and len(body) > (1 if has_start else 0)
    inner = body[1 if has_start else 0:len(body) - 1 if has_end else len(body)]

    rebuilt = ("^" if has_start else "") + f"(?:{inner})" + ("$" if has_end else "")
    return build_literal(rebuilt, flags)


def fallback_literal(original_literal: str) -> str:
    """The guaranteed-terminating answer: hardened, then forced to differ."""
    return enforce_must_differ(harden_literal(original_literal))


# =============================================================================
# Cache
# =============================================================================

class FixCache:
    """
    Raw original text -> FixResult, for the life of the process.

    Only results that differ from their key canonically are stored, so a
    failed divergence is retried next time instead of being served.
    """

    def __init__(self):
        self._entries: Dict[str, FixResult] = {}
        self._lock = threading.Lock()

    def get(self, original_text: str) -> Optional[FixResult]:
        with self._lock:
            return self._entries.get(original_text)

    def store(self, original_text: str, result: FixResult) -> bool:
        """Insert if divergent. Returns whether the entry was written."""
        if same_literal(result.fixed_pattern, original_text):
            return False
        with self._lock:
            self._entries[original_text] = result
        return True

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, original_text: str) -> bool:
        with self._lock:
            return original_text in self._entries


# =============================================================================
# Synthesizer
# =============================================================================

class RemediationSynthesizer:
    """
    Produces fixes that are valid literals, differ from the original, and
    are either oracle-verified or the deterministic fallback.

    Args:
        oracle: Used to reverify candidates and to build risk hints
        generator: Generation collaborator; None behaves as unavailable
        cache: Fix store; a fresh one is created if omitted
    """

    def __init__(self, oracle: Optional[VulnerabilityOracle],
                 generator: Optional[FixGenerator] = None,
                 cache: Optional[FixCache] = None):
        self.oracle = oracle
        self.generator = generator if generator is not None else FixGenerator(None)
        self.cache = cache if cache is not None else FixCache()

    def synthesize(self, original_text: str, cancel: Optional[threading.Event] = None,
                   risk_hint: str = "") -> FixOutcome:
        cached = self.cache.get(original_text)
        if cached is not None and not same_literal(cached.fixed_pattern, original_text):
            return FixOutcome(status=cached.status, result=cached, cached=True)

        original_literal = as_literal(original_text)

        generation = self.generator.generate(original_literal, risk_hint, cancel)
        if generation.status == GenerationStatus.CANCELLED:
            return FixOutcome(status=FixStatus.CANCELLED)

        if generation.ok:
            candidate = generation.candidate
            status = FixStatus.GENERATED
        else:
            logger.info("No generated candidate for %s (%s); hardening the original",
                        original_literal, generation.status.value)
            candidate = original_literal
            status = FixStatus.FALLBACK

        if status == FixStatus.GENERATED and not is_valid_literal(candidate):
            logger.info("Candidate %r is not a usable literal; hardening the original", candidate)
            candidate = original_literal
            status = FixStatus.FALLBACK

        candidate = harden_literal(candidate)
        if same_literal(candidate, original_literal):
            candidate = enforce_must_differ(candidate)

        body, flags = split_literal(candidate)
        verdict = check_safely(self.oracle, body, flags)
        if not verdict.is_safe:
            logger.info("Candidate %s not verified safe (%s); using fallback",
                        candidate, verdict.status.value)
            candidate = fallback_literal(original_literal)
            status = FixStatus.FALLBACK

        if same_literal(candidate, original_literal):
            candidate = enforce_must_differ(candidate)

        result = FixResult(fixed_pattern=candidate, status=status)
        self.cache.store(original_text, result)
        return FixOutcome(status=status, result=result)

    def fix_span(self, document: Document, span: LiteralSpan,
                 cancel: Optional[threading.Event] = None,
                 verdict: Optional[OracleVerdict] = None) -> FixOutcome:
        """
        Synthesize a fix for a literal in a document.

        The outcome carries the (start, end, text) edit as `replacement`,
        unless cancelled. The document itself is not modified.
        """
        original_text = document.text[span.start:span.end]
        if verdict is None:
            verdict = check_safely(self.oracle, span.body, span.flags)

        outcome = self.synthesize(original_text, cancel, format_risk_hint(verdict))
        if outcome.cancelled:
            return outcome
        return replace(outcome, replacement=Replacement(span.start, span.end, outcome.fixed_pattern))

    def fix_finding(self, document: Document, finding: 'Finding',
                    cancel: Optional[threading.Event] = None) -> FixOutcome:
        return self.fix_span(document, finding.span, cancel, verdict=finding.verdict)
