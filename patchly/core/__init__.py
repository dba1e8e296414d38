"""
Core — Text-level analysis for Patchly

Contains the pieces that only need source text:
- Document: versioned text with offset <-> line/column mapping
- Literals: state-machine scanner for /body/flags literals, canonical form
- Suppression: inline ignore directives, cached per document version
- Findings: scanner + suppression + oracle pipeline
"""

from .document import Document, Replacement
from .literals import (
    LiteralSpan, LiteralScanner, scan_literals,
    as_literal, wrap_as_literal, split_literal, parse_literal, is_valid_literal,
    canonical_form, same_literal,
)
from .suppression import (
    SuppressionState, SuppressionEngine, SuppressionCache,
    parse_directives, next_line_directive, DEFAULT_RULE,
)
from .findings import Finding, Detector, ScanReport

__all__ = [
    "Document", "Replacement",
    "LiteralSpan", "LiteralScanner", "scan_literals",
    "as_literal", "wrap_as_literal", "split_literal", "parse_literal", "is_valid_literal",
    "canonical_form", "same_literal",
    "SuppressionState", "SuppressionEngine", "SuppressionCache",
    "parse_directives", "next_line_directive", "DEFAULT_RULE",
    "Finding", "Detector", "ScanReport",
]
