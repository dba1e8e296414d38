"""
Shared pytest fixtures for Patchly test suite.

Provides scripted collaborators so no test needs recheck, network access,
or API keys.

Usage in tests:
    def test_something(patchly_factory):
        patchly_factory.write_source("a.js", "const r = /(a+)+/;\\n")
        cli = patchly_factory.create_cli()

    def test_pipeline(oracle):
        synthesizer = RemediationSynthesizer(oracle)
"""

import pytest

from patchly.core.suppression import SuppressionEngine
from tests.factories import FakeOracle, PatchlyTestFactory


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path_factory):
    """
    Keep tests away from the real user config and real API keys.

    The user config file is redirected into a temp directory and every
    provider key / Patchly override is removed from the environment.
    """
    from patchly.config import ConfigManager

    home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", home / ".patchly")
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", home / ".patchly" / "config.yaml")
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY",
                "PATCHLY_LLM_PROVIDER", "PATCHLY_LLM_MODEL", "PATCHLY_PROJECT_PATH"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PATCHLY_ASCII_ONLY", "1")


@pytest.fixture
def patchly_factory(tmp_path):
    """
    Create an empty PatchlyTestFactory.

    Example:
        def test_scan(patchly_factory):
            patchly_factory.write_source("a.js", "const r = /(a+)+/;\\n")
            assert patchly_factory.create_cli()._scan_cmd.scan(["."]) == 1
    """
    return PatchlyTestFactory(tmp_path)


@pytest.fixture
def oracle():
    """FakeOracle flagging nested quantifiers such as (a+)+."""
    return FakeOracle()


@pytest.fixture
def engine():
    """SuppressionEngine for the default rule with a fresh cache."""
    return SuppressionEngine()
