"""
Findings — Vulnerable literals in a document

Pipeline: text -> LiteralScanner -> SuppressionEngine filter -> Oracle.
Spans the oracle calls vulnerable become findings; safe and unknown spans
are dropped. Findings are rebuilt from scratch on every scan.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .document import Document
from .literals import LiteralScanner, LiteralSpan
from .suppression import SuppressionEngine
from ..services.oracle import (
    Complexity, Hotspot, OracleVerdict, VerdictStatus,
    VulnerabilityOracle, check_safely,
)


@dataclass
class Finding:
    """A vulnerable, unsuppressed literal."""
    uri: str
    span: LiteralSpan
    line: int
    column: int
    status: VerdictStatus
    complexity: Optional[Complexity] = None
    attack_string: Optional[str] = None
    hotspots: List[Hotspot] = field(default_factory=list)

    @property
    def pattern(self) -> str:
        return self.span.body

    @property
    def flags(self) -> str:
        return self.span.flags

    @property
    def literal(self) -> str:
        return self.span.literal

    @property
    def summary(self) -> str:
        return "Potential ReDoS"

    @property
    def detail(self) -> str:
        complexity = self.complexity.type if self.complexity else "unknown"
        attack = self.attack_string or "N/A"
        return f"Pattern: {self.pattern}\nComplexity: {complexity}\nAttack String: {attack}"

    @property
    def verdict(self) -> OracleVerdict:
        """The oracle verdict this finding was built from (for risk hints)."""
        return OracleVerdict(
            status=self.status,
            pattern=self.pattern,
            complexity=self.complexity,
            attack=self.attack_string,
            hotspots=list(self.hotspots),
        )

    def contains(self, offset: int) -> bool:
        return self.span.start <= offset < self.span.end


@dataclass
class ScanReport:
    """Findings of one document plus what was skipped."""
    document: Document
    findings: List[Finding] = field(default_factory=list)
    suppressed: List[LiteralSpan] = field(default_factory=list)
    checked: int = 0


class Detector:
    """
    Scan documents for vulnerable regex literals.

    Args:
        oracle: Classifier; None means nothing can be proven vulnerable
        suppression: Directive engine; a default engine is created if omitted
    """

    def __init__(self, oracle: Optional[VulnerabilityOracle],
                 suppression: Optional[SuppressionEngine] = None):
        self.oracle = oracle
        self.suppression = suppression if suppression is not None else SuppressionEngine()

    def scan(self, document: Document) -> ScanReport:
        report = ScanReport(document=document)
        state = self.suppression.parse(document)

        for span in LiteralScanner(document.text):
            if self.suppression.is_ignored(span, document, state):
                report.suppressed.append(span)
                continue

            report.checked += 1
            verdict = check_safely(self.oracle, span.body, span.flags)
            if not verdict.is_vulnerable:
                continue

            line, column = document.position_at(span.start)
            report.findings.append(Finding(
                uri=document.uri,
                span=span,
                line=line,
                column=column,
                status=verdict.status,
                complexity=verdict.complexity,
                attack_string=verdict.attack,
                hotspots=list(verdict.hotspots),
            ))

        return report

    def detect(self, document: Document) -> List[Finding]:
        return self.scan(document).findings

    def finding_at(self, document: Document, line: int, column: Optional[int] = None) -> Optional[Finding]:
        """
        Finding on a line; with a column, the one covering that column.

        Without a column the first finding starting on the line wins.
        """
        for finding in self.detect(document):
            if column is None:
                if finding.line == line:
                    return finding
            elif finding.contains(document.offset_at(line, column)):
                return finding
        return None
