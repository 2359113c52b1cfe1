# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared leaf utilities (spans, diagnostics)."""

from .diagnostics import Diagnostic, diagnostic_to_json, format_diagnostic
from .span import Span

__all__ = ["Diagnostic", "Span", "diagnostic_to_json", "format_diagnostic"]
