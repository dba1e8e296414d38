"""
ScanCommand — Find ReDoS-prone regex literals

Walks the given paths, scans every matching source file, and reports
vulnerable literals that are not suppressed by an inline directive.
Locations are shown 1-based (line:column) like compiler output.
"""

from pathlib import Path
from typing import Iterator, List

from ..commands.base import BaseCommand
from ..core.findings import ScanReport
from ..presentation.symbols import safe_print, truncate
from ..presentation.template import OutputTemplate

# Never descended into when walking a directory
SKIP_DIRS = {"node_modules", ".git", ".hg", ".svn", "dist", "build", "coverage", ".patchly"}


class ScanCommand(BaseCommand):
    """
    Command for scanning files and directories.

    Exit status is 1 when any finding is reported, so the command can gate CI.
    """

    def iter_files(self, paths: List[str]) -> Iterator[Path]:
        """
        Expand paths to source files.

        Explicit files are always scanned; directories contribute only files
        whose extension is in scan.extensions.
        """
        scan_config = self.config.scan
        for raw in paths:
            path = self._cli.resolve_path(raw)
            if path.is_file():
                yield path
            elif path.is_dir():
                for candidate in sorted(path.rglob("*")):
                    if any(part in SKIP_DIRS for part in candidate.relative_to(path).parts[:-1]):
                        continue
                    if candidate.is_file() and scan_config.matches(candidate):
                        yield candidate
            else:
                safe_print(f"{self.symbols.check_warn} No such file or directory: {raw}")

    def scan(self, paths: List[str], show_suppressed: bool = False) -> int:
        symbols = self.symbols

        if not self._cli.oracle_available:
            safe_print(f"{symbols.check_warn} recheck is not installed; no literal can be classified. "
                       "Install with: pip install 'patchly[oracle]'")

        reports: List[ScanReport] = []
        template = OutputTemplate(symbols=symbols)

        for path in self.iter_files(paths or ["."]):
            document = self.open_document(str(path))
            if document is None:
                continue
            report = self.detector.scan(document)
            reports.append(report)

            shown = self.display_path(path)
            for finding in report.findings:
                location = f"{shown}:{finding.line + 1}:{finding.column + 1}"
                template.item(location, f"{finding.summary} {truncate(finding.literal)}",
                              prefix=symbols.vulnerable, detail=finding.detail)
            if show_suppressed:
                for span in report.suppressed:
                    line, column = document.position_at(span.start)
                    template.item(f"{shown}:{line + 1}:{column + 1}", truncate(span.literal),
                                  prefix=symbols.suppressed)

        finding_count = sum(len(r.findings) for r in reports)
        suppressed_count = sum(len(r.suppressed) for r in reports)
        checked_count = sum(r.checked for r in reports)

        template.header("PATCHLY SCAN", f"{len(reports)} file(s)")
        template.legend({symbols.vulnerable: "vulnerable", symbols.suppressed: "suppressed"})
        template.items_section("FINDINGS")

        status = symbols.check_fail if finding_count else symbols.check_pass
        template.footer(
            f"{status} {finding_count} finding(s) | {checked_count} literal(s) checked | "
            f"{suppressed_count} suppressed"
        )
        safe_print(template.render(command="scan", context={"has_findings": finding_count > 0}))

        return 1 if finding_count else 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'scan'


def register_parser(subparsers):
    """Register scan command parser."""
    p = subparsers.add_parser('scan', help='Find ReDoS-prone regex literals')
    p.add_argument('paths', nargs='*', default=['.'],
                   help='Files or directories to scan (default: project directory)')
    p.add_argument('--show-suppressed', action='store_true',
                   help='Also list literals skipped by patchly directives')
    return p


def handle(cli, args):
    """Handle scan command dispatch."""
    return cli._scan_cmd.scan(args.paths, show_suppressed=args.show_suppressed)
