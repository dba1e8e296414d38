"""
FixCommand — Replace a vulnerable literal with a verified rewrite

Locates the finding at FILE:LINE[:COLUMN], asks the remediation pipeline for
a replacement, and writes it back (unless --dry-run). Ctrl-C while the LLM
is thinking cancels the request without touching the file.
"""

import signal
import threading
from contextlib import contextmanager

from ..commands.base import BaseCommand
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate
from ..services.remediation import FixStatus


@contextmanager
def cancel_on_interrupt(cancel: threading.Event):
    """Route SIGINT to the cancel event for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    previous = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


class FixCommand(BaseCommand):
    """Command for synthesizing and applying fixes."""

    def fix(self, path: str, line: int, column: int = None, dry_run: bool = False) -> int:
        """
        Fix the vulnerable literal at a location.

        Args:
            path: Source file
            line: 1-based line number
            column: 1-based column; without it the first finding on the line is used
            dry_run: Show the rewrite without saving

        Returns:
            Exit status (0 fixed or previewed, 1 nothing to fix, 130 cancelled)
        """
        symbols = self.symbols

        document = self.open_document(path)
        if document is None:
            return 1

        if line < 1 or line > document.line_count:
            safe_print(f"{symbols.check_fail} Line {line} is outside {path} (1-{document.line_count})")
            return 1

        if column is not None and column < 1:
            safe_print(f"{symbols.check_fail} Column must be 1 or greater")
            return 1

        finding = self.detector.finding_at(
            document, line - 1, column - 1 if column is not None else None
        )
        if finding is None:
            location = f"{path}:{line}" + (f":{column}" if column is not None else "")
            safe_print(f"{symbols.check_pass} No vulnerable regex at {location}")
            return 1

        if not self._cli.generator.is_available:
            safe_print(f"{symbols.check_warn} No LLM configured; using deterministic hardening")
        else:
            safe_print(f"{symbols.llm_thinking} Generating fix for {finding.literal}{symbols.ellipsis}")

        cancel = threading.Event()
        with cancel_on_interrupt(cancel):
            outcome = self.synthesizer.fix_finding(document, finding, cancel)

        if outcome.cancelled:
            safe_print(f"{symbols.check_warn} Fix cancelled; {path} unchanged")
            return 130

        replacement = outcome.replacement
        fallback = outcome.status == FixStatus.FALLBACK

        template = OutputTemplate(symbols=symbols)
        template.header("PATCHLY FIX", f"{self.display_path(document.path)}:{finding.line + 1}:{finding.column + 1}")
        template.section("REWRITE", f"{finding.literal}\n{symbols.arrow} {replacement.text}")
        template.section("SOURCE", "deterministic fallback" if fallback else "LLM candidate, verified safe")

        if dry_run:
            template.footer(f"{symbols.check_warn} Dry run, file not modified")
        else:
            document.apply(replacement)
            document.save()
            # Reloaded files start again at version 1
            self.suppression.clear(document)
            template.footer(f"{symbols.check_pass} Fix applied")

        safe_print(template.render(command="fix", context={"dry_run": dry_run, "fallback": fallback}))
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'fix'


def register_parser(subparsers):
    """Register fix command parser."""
    p = subparsers.add_parser('fix', help='Rewrite a vulnerable regex literal')
    p.add_argument('file', help='Source file containing the literal')
    p.add_argument('--line', '-l', type=int, required=True, help='1-based line of the literal')
    p.add_argument('--column', '-c', type=int, help='1-based column inside the literal')
    p.add_argument('--dry-run', action='store_true', help='Show the rewrite without saving')
    return p


def handle(cli, args):
    """Handle fix command dispatch."""
    return cli._fix_cmd.fix(args.file, args.line, column=args.column, dry_run=args.dry_run)
