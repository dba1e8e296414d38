"""
Patchly — Find and fix ReDoS-prone regex literals

Scans JavaScript/TypeScript sources for /body/flags literals, asks a
catastrophic-backtracking oracle which ones are vulnerable, honors inline
patchly-* suppression directives, and rewrites vulnerable literals into
verified, anchored alternatives.
"""

__version__ = "0.1.0"

from .config import Config, ConfigManager, get_config
from .core import (
    Document, Replacement, LiteralSpan, LiteralScanner, scan_literals,
    SuppressionEngine, Detector, Finding,
)
from .services import (
    VulnerabilityOracle, RecheckOracle, OracleVerdict,
    FixGenerator, RemediationSynthesizer, FixOutcome, FixStatus,
)

__all__ = [
    "__version__",
    "Config", "ConfigManager", "get_config",
    "Document", "Replacement", "LiteralSpan", "LiteralScanner", "scan_literals",
    "SuppressionEngine", "Detector", "Finding",
    "VulnerabilityOracle", "RecheckOracle", "OracleVerdict",
    "FixGenerator", "RemediationSynthesizer", "FixOutcome", "FixStatus",
]
