"""
CLI -- Command interface

Scan for ReDoS-prone regex literals, suppress findings with inline
directives, and apply verified fixes.

    patchly scan src/
    patchly fix src/validate.js --line 12
    patchly ignore src/validate.js --line 12
    patchly config --set llm.provider=claude
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .config import Config, ConfigManager
from .core.findings import Detector
from .core.suppression import SuppressionCache, SuppressionEngine
from .presentation.symbols import get_symbols
from .services.generation import FixGenerator
from .services.oracle import RecheckOracle, VulnerabilityOracle
from .services.providers import LLMProvider, get_provider
from .services.remediation import FixCache, RemediationSynthesizer
from . import __version__


class PatchlyCLI:
    """
    Holds the resources every command shares.

    Oracle and provider can be injected; by default they come from the
    installed recheck package and the configured LLM.
    """

    def __init__(self, project_dir: Path, config: Optional[Config] = None,
                 oracle: Optional[VulnerabilityOracle] = None,
                 provider: Optional[LLMProvider] = None):
        self.project_dir = Path(project_dir)
        self.config_manager = ConfigManager(self.project_dir)
        self.config = config if config is not None else self.config_manager.load()
        self.symbols = get_symbols(self.config.display.symbols)

        self.oracle = oracle if oracle is not None else RecheckOracle()
        self.provider = provider if provider is not None else get_provider(self.config)

        self.suppression = SuppressionEngine(rule=self.config.scan.rule, cache=SuppressionCache())
        self.detector = Detector(self.oracle, self.suppression)
        self.generator = FixGenerator(self.provider)
        self.synthesizer = RemediationSynthesizer(self.oracle, self.generator, FixCache())

        # Initialize command handlers (modular architecture)
        from .commands.scan import ScanCommand
        from .commands.fix import FixCommand
        from .commands.ignore import IgnoreCommand
        from .commands.config_cmd import ConfigCommand
        self._scan_cmd = ScanCommand(self)
        self._fix_cmd = FixCommand(self)
        self._ignore_cmd = IgnoreCommand(self)
        self._config_cmd = ConfigCommand(self)

    @property
    def oracle_available(self) -> bool:
        return getattr(self.oracle, "is_available", True)

    def resolve_path(self, path: str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.project_dir / candidate
        return candidate

    def display_path(self, path: Path) -> str:
        try:
            return str(Path(path).resolve().relative_to(self.project_dir.resolve()))
        except ValueError:
            return str(path)


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patchly",
        description="Patchly -- ReDoS finder and fixer for regex literals",
        epilog="Suppress a finding with: // patchly-ignore-line redos"
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("PATCHLY_PROJECT_PATH", "."),
        help='Project directory (default: PATCHLY_PROJECT_PATH or current)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log pipeline decisions (fallbacks, oracle failures)'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'patchly {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Register all commands from command modules (self-registration pattern)
    from .commands import register_all
    register_all(subparsers)

    return parser


def main(argv=None) -> int:
    """
    Main entry point for Patchly CLI.

    Parser definitions and dispatch logic are in individual command modules.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.verbose)

    from .commands import dispatch
    cli = PatchlyCLI(Path(args.project))

    try:
        result = dispatch(args.command, cli, args)
    except KeyError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_help()
        return 2

    return result if isinstance(result, int) else 0


if __name__ == '__main__':
    sys.exit(main())
