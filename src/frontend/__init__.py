"""Textual admin console for packscope."""
