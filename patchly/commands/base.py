"""
BaseCommand — Shared foundation for all CLI commands

Commands receive the CLI instance and access its resources through properties.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..core.document import Document
from ..presentation.symbols import safe_print

if TYPE_CHECKING:
    from ..cli import PatchlyCLI


class BaseCommand:
    """
    Base class for CLI commands with access to shared resources.

    Commands don't reinitialize resources — they access them via the CLI instance.
    """

    def __init__(self, cli: 'PatchlyCLI'):
        self._cli = cli

    @property
    def project_dir(self):
        return self._cli.project_dir

    @property
    def config(self):
        return self._cli.config

    @property
    def config_manager(self):
        return self._cli.config_manager

    @property
    def symbols(self):
        return self._cli.symbols

    @property
    def detector(self):
        return self._cli.detector

    @property
    def suppression(self):
        return self._cli.suppression

    @property
    def synthesizer(self):
        return self._cli.synthesizer

    @property
    def provider(self):
        return self._cli.provider

    def open_document(self, path: str) -> Optional[Document]:
        """Load a source file, reporting (not raising) read errors."""
        resolved: Path = self._cli.resolve_path(path)
        try:
            return Document.from_path(resolved)
        except (OSError, UnicodeDecodeError) as e:
            safe_print(f"{self.symbols.check_fail} Cannot read {path}: {e}")
            return None

    def display_path(self, path: Path) -> str:
        return self._cli.display_path(path)
