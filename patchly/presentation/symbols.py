"""
Symbols — Visual vocabulary for findings and fixes

Progressive enhancement: Unicode when supported, ASCII fallback.
Configurable via display.symbols setting.

Also provides safe output utilities:
- safe_print(): Encoding-safe printing for untrusted content
- sanitize_control_chars(): Security sanitization for LLM output
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Safe Output Utilities (Two-Layer Defense)
# =============================================================================
# Layer 1 (Security): sanitize_control_chars() - strips dangerous control chars
# Layer 2 (Encoding): safe_print() - handles display encoding gracefully

UNICODE_TO_ASCII = {
    '→': '->',
    '…': '...',
    '–': '-',
    '—': '--',
    '•': '*',
    '✓': '[OK]',
    '⚠': '[!]',
    '❌': '[ERR]',
}


def sanitize_control_chars(text: str) -> str:
    """
    Layer 1 (Security): Remove dangerous control characters from LLM output.

    Strips control chars that could:
    - Manipulate terminal display (ANSI escapes)
    - Smuggle invisible bytes into a regex written back to source

    Preserves: newlines (\\n), tabs (\\t), carriage returns (\\r)

    Args:
        text: Raw text from LLM or untrusted source

    Returns:
        Sanitized text safe for storage and display
    """
    if not text:
        return text

    # Remove control chars except \t (0x09), \n (0x0A), \r (0x0D)
    result = []
    for char in text:
        code = ord(char)
        if code >= 32 or code in (9, 10, 13):
            result.append(char)

    return ''.join(result)


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    Layer 2 (Encoding): Print with graceful encoding fallback.

    Handles UnicodeEncodeError by replacing unencodable characters
    with ASCII equivalents or '?' as last resort.

    Use this when printing untrusted content (source lines, LLM output).
    """
    if file is None:
        file = sys.stdout

    try:
        print(text, end=end, file=file)
    except UnicodeEncodeError:
        safe_text = text
        for unicode_char, ascii_equiv in UNICODE_TO_ASCII.items():
            safe_text = safe_text.replace(unicode_char, ascii_equiv)

        try:
            print(safe_text, end=end, file=file)
        except UnicodeEncodeError:
            # Last resort: replace all unencodable chars with ?
            encoding = getattr(file, 'encoding', 'utf-8') or 'utf-8'
            encoded = safe_text.encode(encoding, errors='replace')
            print(encoded.decode(encoding), end=end, file=file)


SUMMARY_LENGTH = 120


def truncate(text: str, length: int = SUMMARY_LENGTH, full: bool = False) -> str:
    """
    Truncate text with ellipsis, respecting full mode.

    Examples:
        truncate("Short", 50)                -> "Short" (no change)
        truncate("Any length", 50, full=True) -> "Any length" (no truncation)
    """
    if not text:
        return ""
    if full or len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[:length - 3] + "..."


@dataclass(frozen=True)
class SymbolSet:
    """Complete set of symbols for scan and fix output."""
    # Finding states
    vulnerable: str
    suppressed: str
    safe: str
    unknown: str

    # Status markers
    check_pass: str
    check_warn: str
    check_fail: str
    arrow: str
    bullet: str

    # LLM indicators
    llm_thinking: str
    llm_done: str

    ellipsis: str


UNICODE = SymbolSet(
    vulnerable='⚠',
    suppressed='○',
    safe='✓',
    unknown='?',
    check_pass='✓',
    check_warn='⚠',
    check_fail='❌',
    arrow='→',
    bullet='•',
    llm_thinking='◌',
    llm_done='●',
    ellipsis='…',
)

ASCII = SymbolSet(
    vulnerable='[!]',
    suppressed='[-]',
    safe='[OK]',
    unknown='[?]',
    check_pass='[OK]',
    check_warn='[!]',
    check_fail='[ERR]',
    arrow='->',
    bullet='*',
    llm_thinking='...',
    llm_done='[OK]',
    ellipsis='...',
)


STATUS_TO_SYMBOL = {
    'vulnerable': 'vulnerable',
    'suppressed': 'suppressed',
    'safe': 'safe',
    'unknown': 'unknown',
}


def supports_unicode() -> bool:
    """
    Check if environment likely supports Unicode output.

    Conservative: defaults to ASCII if uncertain.
    """
    if os.environ.get('PATCHLY_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False
    if os.environ.get('PATCHLY_UNICODE', '').lower() in ('1', 'true', 'yes'):
        return True

    stdout_encoding = getattr(sys.stdout, 'encoding', None)
    if stdout_encoding:
        encoding_lower = stdout_encoding.lower().replace('-', '').replace('_', '')
        if encoding_lower.startswith('cp') or encoding_lower in ('ascii', 'latin1', 'iso88591'):
            return False
        if 'utf' in encoding_lower:
            return True

    lang = os.environ.get('LANG', '').lower()
    lc_all = os.environ.get('LC_ALL', '').lower()
    if 'utf-8' in lang or 'utf8' in lang or 'utf-8' in lc_all or 'utf8' in lc_all:
        return True

    return False


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)
    """
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII


def symbol_for_status(symbols: SymbolSet, status: str) -> str:
    """Get symbol for a finding status."""
    attr = STATUS_TO_SYMBOL.get(status, 'unknown')
    return getattr(symbols, attr)
