"""
Oracle — Catastrophic-backtracking classification

The analysis itself is someone else's algorithm. This module only defines
the verdict shape, the interface, and an adapter for the `recheck` package.

Callers never see an oracle exception: check_safely() turns any failure
into an UNKNOWN verdict, and everything downstream treats UNKNOWN as
"not proven safe".
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class VerdictStatus(Enum):
    SAFE = "safe"
    VULNERABLE = "vulnerable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Complexity:
    """Worst-case matching complexity, e.g. type="exponential"."""
    type: str
    summary: str = ""


@dataclass(frozen=True)
class Hotspot:
    """Region of the pattern responsible for backtracking."""
    start: int
    end: int
    temperature: str = "normal"


@dataclass
class OracleVerdict:
    """Result of classifying one pattern."""
    status: VerdictStatus
    pattern: str
    complexity: Optional[Complexity] = None
    attack: Optional[str] = None
    hotspots: List[Hotspot] = field(default_factory=list)

    @property
    def is_safe(self) -> bool:
        return self.status == VerdictStatus.SAFE

    @property
    def is_vulnerable(self) -> bool:
        return self.status == VerdictStatus.VULNERABLE

    @property
    def summary(self) -> str:
        """One-line human description."""
        if self.status == VerdictStatus.SAFE:
            return "This regex is safe"
        if self.status == VerdictStatus.VULNERABLE:
            return "Potential ReDoS"
        return "Unable to analyze this regex"

    @classmethod
    def unknown(cls, pattern: str) -> 'OracleVerdict':
        return cls(status=VerdictStatus.UNKNOWN, pattern=pattern)


def format_risk_hint(verdict: Optional[OracleVerdict]) -> str:
    """
    Compact risk description passed to the generation collaborator.

    Example: Complexity=exponential; WorstCase="'a'.repeat(31) + '\\x00'"
    """
    if verdict is None:
        return ""
    complexity = verdict.complexity.type if verdict.complexity else "unknown"
    hint = f"Complexity={complexity}"
    attack = (verdict.attack or "").strip()
    if attack:
        hint += f'; WorstCase="{attack}"'
    return hint


class VulnerabilityOracle(ABC):
    """Classifies a regex body + flags as safe, vulnerable or unknown."""

    @abstractmethod
    def check(self, pattern: str, flags: str = "") -> OracleVerdict:
        """
        Classify a pattern.

        Args:
            pattern: Regex body (no delimiters)
            flags: Flag letters

        May raise; use check_safely() at call sites.
        """
        pass


def check_safely(oracle: Optional[VulnerabilityOracle], pattern: str, flags: str = "") -> OracleVerdict:
    """Run the oracle, mapping a missing oracle or any exception to UNKNOWN."""
    if oracle is None:
        return OracleVerdict.unknown(pattern)
    try:
        verdict = oracle.check(pattern, flags)
    except Exception as e:
        logger.warning("Oracle failed on /%s/%s: %s", pattern, flags, e)
        return OracleVerdict.unknown(pattern)
    if not isinstance(verdict, OracleVerdict):
        logger.warning("Oracle returned %r for /%s/%s; treating as unknown", type(verdict).__name__, pattern, flags)
        return OracleVerdict.unknown(pattern)
    return verdict


class RecheckOracle(VulnerabilityOracle):
    """
    Adapter for the `recheck` package (hybrid automata + fuzzing checker).

    Install with: pip install "patchly[oracle]"
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._recheck = None
        self._init_checker()

    def _init_checker(self):
        try:
            import recheck
            self._recheck = recheck
        except ImportError:
            logger.info("recheck not installed; oracle unavailable")

    @property
    def is_available(self) -> bool:
        return self._recheck is not None

    def check(self, pattern: str, flags: str = "") -> OracleVerdict:
        if not self._recheck:
            raise RuntimeError("recheck not installed. Install with: pip install recheck")

        if self.timeout is not None:
            diagnostics = self._recheck.check(pattern, flags, config=self._recheck.Config(timeout=self.timeout))
        else:
            diagnostics = self._recheck.check(pattern, flags)
        return self._to_verdict(pattern, diagnostics)

    def _to_verdict(self, pattern: str, diagnostics: Any) -> OracleVerdict:
        raw_status = getattr(diagnostics, "status", "unknown")
        status_value = str(getattr(raw_status, "value", raw_status)).lower()
        try:
            status = VerdictStatus(status_value)
        except ValueError:
            status = VerdictStatus.UNKNOWN

        if status != VerdictStatus.VULNERABLE:
            return OracleVerdict(status=status, pattern=pattern)

        complexity = None
        raw_complexity = getattr(diagnostics, "complexity", None)
        if raw_complexity is not None:
            raw_type = getattr(raw_complexity, "type", "unknown")
            complexity = Complexity(
                type=str(getattr(raw_type, "value", raw_type)).lower(),
                summary=str(getattr(raw_complexity, "summary", "") or ""),
            )

        attack = None
        raw_attack = getattr(diagnostics, "attack", None)
        if raw_attack is not None:
            attack = getattr(raw_attack, "pattern", None) or str(raw_attack)

        hotspots = [
            Hotspot(
                start=int(getattr(h, "start", 0)),
                end=int(getattr(h, "end", 0)),
                temperature=str(getattr(h, "temperature", "normal")),
            )
            for h in (getattr(diagnostics, "hotspot", None) or [])
        ]

        return OracleVerdict(
            status=status,
            pattern=pattern,
            complexity=complexity,
            attack=attack,
            hotspots=hotspots,
        )
