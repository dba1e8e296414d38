"""
Generation — Ask an LLM for a candidate fix, with a typed outcome

The LLM is untrusted. Every expected failure comes back as a status,
never as an exception:

    OK           candidate in hand, a well-formed /body/flags literal
    UNAVAILABLE  no provider, no credentials, or the provider call failed
    MALFORMED    reply was not {"fixedPattern": "<literal or pattern>"}, or the
                 pattern does not make a single-line literal
    CANCELLED    the caller's cancel event fired before a reply arrived

The provider call runs on a daemon thread so a cancel returns promptly even
though the SDKs themselves block, and an abandoned call never delays exit.
"""

import json
import logging
import re
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..core.literals import as_literal, is_valid_literal
from ..presentation.symbols import sanitize_control_chars
from .providers import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


class GenerationStatus(Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"
    CANCELLED = "cancelled"


@dataclass
class Generation:
    """Outcome of one generation request."""
    status: GenerationStatus
    candidate: str = ""
    response: Optional[LLMResponse] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == GenerationStatus.OK


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` wrapper, if any."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))


def parse_fixed_pattern(text: str) -> Optional[str]:
    """
    Pull fixedPattern out of an LLM reply.

    Tries the reply as-is, then without a code fence. Returns None when
    neither parses to an object with a non-empty string fixedPattern.
    """
    if not text:
        return None

    data = _loads(text)
    if data is None:
        data = _loads(strip_code_fence(text))
    if not isinstance(data, dict):
        return None

    value = data.get("fixedPattern")
    if not isinstance(value, str):
        return None
    value = sanitize_control_chars(value).strip()
    return value or None


class FixGenerator:
    """
    Generation collaborator for regex fixes.

    Args:
        provider: LLM provider, or None when no LLM is configured
        max_tokens: Reply budget; a single literal is short
        poll_interval: Seconds between cancellation checks while waiting
    """

    SYSTEM_PROMPT = (
        'You are Patchly. Output ONLY JSON: {"fixedPattern":"..."} for a JS regex literal (/.../flags) '
        'that avoids catastrophic backtracking while preserving the intent of the original. '
        'No prose, no fences. Do NOT return the original literal. '
        'Do NOT use atomic groups or possessive quantifiers.'
    )

    DEFAULT_MAX_TOKENS = 96

    def __init__(self, provider: Optional[LLMProvider] = None,
                 max_tokens: int = DEFAULT_MAX_TOKENS, poll_interval: float = 0.05):
        self.provider = provider
        self.max_tokens = max_tokens
        self.poll_interval = poll_interval

    @property
    def is_available(self) -> bool:
        return self.provider is not None and self.provider.is_available

    def build_user_prompt(self, original_literal: str, risk_hint: str = "") -> str:
        lines = [f"Vulnerable regex (JS literal): {original_literal}"]
        if risk_hint:
            lines.append(f"Risk: {risk_hint.replace('```', '')}")
        lines.append('Return exactly: {"fixedPattern":"..."} (no extra text).')
        return "\n".join(lines)

    def generate(self, original_literal: str, risk_hint: str = "",
                 cancel: Optional[threading.Event] = None) -> Generation:
        if cancel is not None and cancel.is_set():
            return Generation(GenerationStatus.CANCELLED)

        if not self.is_available:
            return Generation(GenerationStatus.UNAVAILABLE, error="No LLM provider configured")

        user = self.build_user_prompt(original_literal, risk_hint)

        # Daemon thread: an abandoned request must not hold up interpreter exit
        future: Future = Future()

        def _call():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.provider.complete(
                    system=self.SYSTEM_PROMPT,
                    user=user,
                    max_tokens=self.max_tokens,
                    json_mode=True,
                ))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=_call, name="patchly-generate", daemon=True).start()

        while True:
            if cancel is not None and cancel.is_set():
                logger.info("Fix generation cancelled for %s", original_literal)
                return Generation(GenerationStatus.CANCELLED)
            try:
                response = future.result(timeout=self.poll_interval)
                break
            except FutureTimeout:
                continue
            except Exception as e:
                logger.warning("Fix generation failed for %s: %s", original_literal, e)
                return Generation(GenerationStatus.UNAVAILABLE, error=str(e))

        candidate = parse_fixed_pattern(response.text)
        if candidate is None:
            logger.warning("Malformed fix reply for %s: %.200r", original_literal, response.text)
            return Generation(GenerationStatus.MALFORMED, response=response)

        candidate = as_literal(candidate)
        if not is_valid_literal(candidate):
            logger.warning("Fix reply for %s is not a usable literal: %.200r", original_literal, candidate)
            return Generation(GenerationStatus.MALFORMED, response=response,
                              error="fixedPattern is not a single-line /body/flags literal")

        return Generation(GenerationStatus.OK, candidate=candidate, response=response)
