"""
Services — External collaborators and the remediation pipeline

- Oracle: catastrophic-backtracking classification (recheck adapter)
- Providers: LLM backend providers
- Generation: typed LLM fix requests with cancellation
- Remediation: deterministic hardening, divergence guard, fix cache
"""

from .oracle import (
    VulnerabilityOracle, RecheckOracle, OracleVerdict, VerdictStatus,
    Complexity, Hotspot, check_safely, format_risk_hint,
)
from .providers import (
    LLMProvider, LLMResponse, OpenAIProvider, ClaudeProvider, MockProvider,
    get_provider, get_provider_status,
)
from .generation import FixGenerator, Generation, GenerationStatus, parse_fixed_pattern
from .remediation import (
    RemediationSynthesizer, FixCache, FixResult, FixOutcome, FixStatus,
    harden_literal, enforce_must_differ, fallback_literal,
)

__all__ = [
    # Oracle
    "VulnerabilityOracle", "RecheckOracle", "OracleVerdict", "VerdictStatus",
    "Complexity", "Hotspot", "check_safely", "format_risk_hint",
    # Providers
    "LLMProvider", "LLMResponse", "OpenAIProvider", "ClaudeProvider", "MockProvider",
    "get_provider", "get_provider_status",
    # Generation
    "FixGenerator", "Generation", "GenerationStatus", "parse_fixed_pattern",
    # Remediation
    "RemediationSynthesizer", "FixCache", "FixResult", "FixOutcome", "FixStatus",
    "harden_literal", "enforce_must_differ", "fallback_literal",
]
