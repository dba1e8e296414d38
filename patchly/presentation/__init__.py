"""
Presentation — Display layer for Patchly CLI

Contains display and formatting:
- Symbols: Visual vocabulary (unicode/ascii)
- Safe output for untrusted text (source lines, LLM output)
- OutputTemplate: header/sections/footer builder shared by commands
"""

from .symbols import (
    SymbolSet, get_symbols, symbol_for_status,
    safe_print, sanitize_control_chars, truncate,
    SUMMARY_LENGTH, UNICODE, ASCII
)
from .template import OutputTemplate, get_hint

__all__ = [
    "SymbolSet", "get_symbols", "symbol_for_status",
    "truncate", "safe_print", "sanitize_control_chars",
    "SUMMARY_LENGTH", "UNICODE", "ASCII",
    "OutputTemplate", "get_hint",
]
