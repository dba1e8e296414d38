"""
LLM Providers — Abstraction for the text-generation collaborator

Supports: OpenAI (default), Claude
All providers implement the same interface; the fix generator never talks
to an SDK directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..config import Config, LLMConfig


@dataclass
class LLMResponse:
    """Response from LLM including token usage."""
    text: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def format_tokens(self) -> str:
        return f"in:{self.input_tokens} out:{self.output_tokens} total:{self.total_tokens}"


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    @abstractmethod
    def complete(self, system: str, user: str, max_tokens: int = 256,
                 json_mode: bool = False) -> LLMResponse:
        """
        Get completion from LLM.

        Args:
            system: System prompt
            user: User message
            max_tokens: Maximum tokens in response
            json_mode: Ask the backend to constrain output to one JSON object

        Returns:
            LLMResponse with text and token usage
        """
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is configured and ready."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider."""

    temperature = 0.1

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None
        self._init_client()

    def _init_client(self):
        if not self.config.api_key:
            return
        try:
            import openai
            self._client = openai.OpenAI(api_key=self.config.api_key)
        except ImportError:
            pass

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def complete(self, system: str, user: str, max_tokens: int = 256,
                 json_mode: bool = False) -> LLMResponse:
        if not self._client:
            raise RuntimeError("OpenAI client not initialized")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self._client.chat.completions.create(
            model=self.config.effective_model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user}
            ],
            **kwargs
        )

        usage = getattr(response, 'usage', None)
        input_tokens = getattr(usage, 'prompt_tokens', 0) if usage else 0
        output_tokens = getattr(usage, 'completion_tokens', 0) if usage else 0

        return LLMResponse(
            text=response.choices[0].message.content or "",
            input_tokens=input_tokens,
            output_tokens=output_tokens
        )


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider."""

    temperature = 0.1

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None
        self._init_client()

    def _init_client(self):
        if not self.config.api_key:
            return
        try:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.config.api_key)
        except ImportError:
            pass

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def complete(self, system: str, user: str, max_tokens: int = 256,
                 json_mode: bool = False) -> LLMResponse:
        if not self._client:
            raise RuntimeError("Claude client not initialized")

        # No response_format on the Messages API; the system prompt carries the JSON contract
        message = self._client.messages.create(
            model=self.config.effective_model,
            max_tokens=max_tokens,
            temperature=self.temperature,
            system=system,
            messages=[{"role": "user", "content": user}]
        )

        input_tokens = getattr(message.usage, 'input_tokens', 0)
        output_tokens = getattr(message.usage, 'output_tokens', 0)

        return LLMResponse(
            text=message.content[0].text,
            input_tokens=input_tokens,
            output_tokens=output_tokens
        )


class MockProvider(LLMProvider):
    """
    Mock provider for testing.

    Replies with the scripted texts in order, repeating the last one.
    Records every prompt it receives.
    """

    def __init__(self, responses: Optional[List[str]] = None, available: bool = True):
        self._responses = list(responses) if responses else ['{"fixedPattern": ""}']
        self._available = available
        self.calls: List[dict] = []

    @property
    def is_available(self) -> bool:
        return self._available

    def complete(self, system: str, user: str, max_tokens: int = 256,
                 json_mode: bool = False) -> LLMResponse:
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens, "json_mode": json_mode})
        index = min(len(self.calls) - 1, len(self._responses) - 1)
        return LLMResponse(text=self._responses[index])


PROVIDER_CLASSES = {
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
}


def get_provider(config: Config, allow_mock: bool = False) -> Optional[LLMProvider]:
    """
    Get LLM provider based on configuration.

    Args:
        config: Application configuration
        allow_mock: Return MockProvider instead of None when nothing is usable

    Returns:
        Configured provider, or None (MockProvider with allow_mock) if unavailable
    """
    provider_class = PROVIDER_CLASSES.get(config.llm.provider)
    if provider_class is not None:
        provider = provider_class(config.llm)
        if provider.is_available:
            return provider

    return MockProvider() if allow_mock else None


def get_provider_status(config: Config) -> str:
    """Get human-readable provider status."""
    llm = config.llm

    if llm.provider not in PROVIDER_CLASSES:
        return f"Unknown provider '{llm.provider}'"

    if not llm.api_key:
        return f"LLM not configured (set {llm.api_key_env} environment variable)"

    package_map = {
        "openai": ("openai", "pip install openai"),
        "claude": ("anthropic", "pip install anthropic"),
    }
    module_name, install_cmd = package_map[llm.provider]
    try:
        __import__(module_name)
    except ImportError:
        return f"LLM package missing: {install_cmd}"

    if get_provider(config) is None:
        return "LLM unavailable (check configuration)"

    return f"{llm.provider.title()}: {llm.effective_model}"
