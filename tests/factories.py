"""
Test Data Factory — Isolated Patchly environments for command tests

Provides scripted collaborators (oracle, LLM) and a temp project directory,
so tests run without recheck, network access, or API keys.

Usage:
    @pytest.fixture
    def patchly_env(tmp_path):
        factory = PatchlyTestFactory(tmp_path)
        factory.write_source("src/a.js", "const r = /(a+)+/;\\n")
        return factory

    def test_something(patchly_env):
        cli = patchly_env.create_cli()
        assert cli._scan_cmd.scan(["src"]) == 1
"""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from patchly.cli import PatchlyCLI
from patchly.config import Config
from patchly.core.document import Document
from patchly.services.oracle import (
    Complexity, Hotspot, OracleVerdict, VerdictStatus, VulnerabilityOracle,
)
from patchly.services.providers import MockProvider


# Nested quantifiers the fake oracle treats as catastrophic
DEFAULT_VULNERABLE_FRAGMENTS = ("(a+)+", "(a*)*", "(\\w+)+", "(.*)*")


class FakeOracle(VulnerabilityOracle):
    """
    Scripted oracle: a body is vulnerable iff it contains one of the
    configured fragments. Records every call.
    """

    def __init__(self, fragments: Iterable[str] = DEFAULT_VULNERABLE_FRAGMENTS,
                 unknown: Iterable[str] = ()):
        self.fragments = tuple(fragments)
        self.unknown = tuple(unknown)
        self.calls: List[Tuple[str, str]] = []

    @property
    def is_available(self) -> bool:
        return True

    def check(self, pattern: str, flags: str = "") -> OracleVerdict:
        self.calls.append((pattern, flags))
        if any(fragment in pattern for fragment in self.unknown):
            return OracleVerdict.unknown(pattern)
        for fragment in self.fragments:
            index = pattern.find(fragment)
            if index >= 0:
                return OracleVerdict(
                    status=VerdictStatus.VULNERABLE,
                    pattern=pattern,
                    complexity=Complexity(type="exponential", summary="2^n"),
                    attack="'a'.repeat(31) + '\\x00'",
                    hotspots=[Hotspot(index, index + len(fragment), "heat")],
                )
        return OracleVerdict(status=VerdictStatus.SAFE, pattern=pattern)


class RaisingOracle(VulnerabilityOracle):
    """Oracle that fails on every call."""

    def __init__(self):
        self.calls = 0

    def check(self, pattern: str, flags: str = "") -> OracleVerdict:
        self.calls += 1
        raise RuntimeError("oracle exploded")


def make_document(text: str, uri: str = "file:///test.js") -> Document:
    """In-memory document for pipeline tests."""
    return Document(uri, text)


def llm_reply(fixed_pattern: str) -> str:
    """JSON reply in the shape the generator expects."""
    return '{"fixedPattern": "%s"}' % fixed_pattern.replace("\\", "\\\\")


class PatchlyTestFactory:
    """
    Factory for creating test Patchly environments.

    Creates an isolated project directory and a PatchlyCLI wired to the fake
    oracle and a mock LLM. All data is isolated per test via pytest's
    tmp_path fixture.
    """

    def __init__(self, tmp_path: Path):
        self.tmp_path = tmp_path
        self.config = Config()
        self.config.display.symbols = "ascii"
        self.oracle = FakeOracle()
        self.provider = MockProvider(available=False)

    def write_source(self, relative: str, text: str) -> Path:
        """Write a source file under the project directory."""
        path = self.tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def read_source(self, relative: str) -> str:
        return (self.tmp_path / relative).read_text(encoding="utf-8")

    def with_llm(self, *replies: str) -> 'PatchlyTestFactory':
        """Use an available MockProvider that answers with the given replies."""
        self.provider = MockProvider(responses=list(replies))
        return self

    def create_cli(self, oracle: Optional[VulnerabilityOracle] = None) -> PatchlyCLI:
        return PatchlyCLI(
            self.tmp_path,
            config=self.config,
            oracle=oracle if oracle is not None else self.oracle,
            provider=self.provider,
        )
