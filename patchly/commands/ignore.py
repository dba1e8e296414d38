"""
IgnoreCommand — Suppress a finding with an inline directive

Inserts `//patchly-disable-next-line <rule>` above the given line, the same
edit an editor quick-fix would make.
"""

from ..commands.base import BaseCommand
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


class IgnoreCommand(BaseCommand):
    """Command for adding suppression directives."""

    def ignore(self, path: str, line: int, rule: str = None) -> int:
        """
        Suppress findings on a 1-based line.

        Returns:
            Exit status (0 written, 1 file unreadable or line out of range)
        """
        symbols = self.symbols
        rule = rule or self.config.scan.rule

        document = self.open_document(path)
        if document is None:
            return 1

        insertion = self.suppression.directive_insertion(document, line - 1)
        if insertion is None or not self.suppression.ignore_next_line(document, line - 1, rule):
            safe_print(f"{symbols.check_fail} Line {line} is outside {path} (1-{document.line_count})")
            return 1

        document.save()
        offset, prefix = insertion
        directive_line = document.line_at(offset + len(prefix))

        template = OutputTemplate(symbols=symbols)
        template.header("PATCHLY IGNORE", self.display_path(document.path))
        template.section("INSERTED", f"line {directive_line + 1}: {document.line_text(directive_line)}")
        template.footer(f"{symbols.check_pass} '{rule}' suppressed for line {directive_line + 2}")
        safe_print(template.render(command="ignore", context={"updated": True}))
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'ignore'


def register_parser(subparsers):
    """Register ignore command parser."""
    p = subparsers.add_parser('ignore', help='Suppress a finding with a disable-next-line directive')
    p.add_argument('file', help='Source file containing the finding')
    p.add_argument('--line', '-l', type=int, required=True, help='1-based line of the finding')
    p.add_argument('--rule', '-r', help='Rule to suppress (default: scan.rule)')
    return p


def handle(cli, args):
    """Handle ignore command dispatch."""
    return cli._ignore_cmd.ignore(args.file, args.line, rule=args.rule)
