"""
OutputTemplate — Consistent CLI output structure

Builder for structured command output with header, sections, and footer.

Usage:
    from patchly.presentation.template import OutputTemplate

    template = OutputTemplate()
    template.header("PATCHLY SCAN", "3 files")
    template.legend({"⚠": "vulnerable", "○": "suppressed"})
    template.item("src/a.js:4:15", "/(a+)+/", prefix="⚠")
    template.items_section("FINDINGS")
    output = template.render(command="scan", context={"has_findings": True})
    print(output)
"""

import shutil
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any

from .symbols import SymbolSet, get_symbols


HEADER_CHAR = "="
SECTION_CHAR = "-"
DEFAULT_WIDTH = 80
MAX_WIDTH = 100

# command -> [(context key, hint)]; first key that is truthy wins
NEXT_STEP_HINTS: Dict[str, List[tuple]] = {
    "scan": [
        ("has_findings", "Next: patchly fix FILE --line N   (or: patchly ignore FILE --line N)"),
    ],
    "fix": [
        ("dry_run", "Apply with: patchly fix FILE --line N"),
        ("fallback", "Deterministic fallback used; review the rewrite before committing"),
    ],
    "ignore": [
        ("updated", "Re-scan with: patchly scan"),
    ],
    "config": [
        ("no_provider", "Without an LLM, fixes use the deterministic fallback"),
    ],
}


def get_hint(command: Optional[str], context: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Next-step hint for a command, given what it just did."""
    context = context or {}
    for key, hint in NEXT_STEP_HINTS.get(command or "", []):
        if context.get(key):
            return hint
    return None


@dataclass
class TemplateSection:
    """A titled section of output."""
    title: str
    content: str


@dataclass
class TemplateLegend:
    """Legend mapping symbols to meanings."""
    items: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        if not self.items:
            return ""
        parts = [f"{symbol} {meaning}" for symbol, meaning in self.items.items()]
        return "Legend: " + "  ".join(parts)


class OutputTemplate:
    """
    Builder for structured CLI output.

    Creates consistent output with:
    - HEADER: Command identity, legend, scope
    - SECTIONS: Titled content blocks
    - FOOTER: Summary line, next-step hint
    """

    def __init__(
        self,
        symbols: Optional[SymbolSet] = None,
        width: Optional[int] = None,
    ):
        """
        Initialize template.

        Args:
            symbols: SymbolSet for visual elements (auto-detect if None)
            width: Rule width (terminal width, capped, if None)
        """
        self.symbols = symbols or get_symbols()
        if width is None:
            width = min(shutil.get_terminal_size((DEFAULT_WIDTH, 24)).columns or DEFAULT_WIDTH, MAX_WIDTH)
        self.width = width

        self._title: Optional[str] = None
        self._subtitle: Optional[str] = None
        self._legend: Optional[TemplateLegend] = None
        self._scope: Optional[str] = None
        self._sections: List[TemplateSection] = []
        self._summary: Optional[str] = None
        self._items: List[str] = []

    # =========================================================================
    # Builder Methods
    # =========================================================================

    def header(self, title: str, subtitle: Optional[str] = None) -> "OutputTemplate":
        self._title = title
        self._subtitle = subtitle
        return self

    def legend(self, items: Dict[str, str]) -> "OutputTemplate":
        self._legend = TemplateLegend(items=items)
        return self

    def scope(self, text: str) -> "OutputTemplate":
        """Set scope line (count/context info in header)."""
        self._scope = text
        return self

    def section(self, title: str, content: str) -> "OutputTemplate":
        self._sections.append(TemplateSection(title=title, content=content))
        return self

    def item(self, location: str, summary: str, prefix: Optional[str] = None,
             detail: Optional[str] = None) -> "OutputTemplate":
        """
        Add a single located item, accumulated until items_section().

        Example:
            template.item("src/a.js:4:15", "/(a+)+/", prefix="⚠")
            # Renders: ⚠ src/a.js:4:15 /(a+)+/
        """
        prefix_str = f"{prefix} " if prefix else ""
        self._items.append(f"{prefix_str}{location} {summary}")
        if detail:
            self._items.extend(f"    {line}" for line in detail.splitlines())
        return self

    def items_section(self, title: str) -> "OutputTemplate":
        """Render accumulated items as a titled section and clear the buffer."""
        if self._items:
            self.section(title, "\n".join(self._items))
            self._items = []
        return self

    def footer(self, summary: Optional[str] = None) -> "OutputTemplate":
        self._summary = summary
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(
        self,
        command: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> str:
        lines: List[str] = []

        if self._title:
            lines.extend(self._render_header())

        for section in self._sections:
            lines.extend(self._render_section(section))

        lines.extend(self._render_footer(command, context))

        return "\n".join(lines)

    def _render_header(self) -> List[str]:
        border = HEADER_CHAR * self.width
        title_line = f"{self._title} - {self._subtitle}" if self._subtitle else (self._title or "")
        lines = [border, title_line, border]

        if self._legend:
            legend_text = self._legend.render()
            if legend_text:
                lines.append(legend_text)

        if self._scope:
            lines.append(self._scope)

        lines.append("")
        return lines

    def _render_section(self, section: TemplateSection) -> List[str]:
        lines: List[str] = []
        if section.title:
            lines.append(section.title)
            lines.append(SECTION_CHAR * len(section.title))
        if section.content:
            lines.append(section.content)
        lines.append("")
        return lines

    def _render_footer(
        self,
        command: Optional[str],
        context: Optional[Dict[str, Any]]
    ) -> List[str]:
        lines = [SECTION_CHAR * self.width]

        if self._summary:
            lines.append(f"Summary: {self._summary}")

        hint = get_hint(command, context)
        if hint:
            lines.append(hint)

        lines.append(HEADER_CHAR * self.width)
        return lines

    def format_list(self, items: List[str], bullet: Optional[str] = None) -> str:
        """Format items as bulleted list."""
        if not items:
            return ""
        bullet = bullet or self.symbols.bullet
        return "\n".join(f"{bullet} {item}" for item in items)
