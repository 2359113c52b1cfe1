# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic records shared by the front end, the engine driver and the CLI.

The engine itself raises `InvalidGenerationSourceError`; only the driver
layer (`catchgen.build`, `catchgen.cli`) turns failures into Diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a generator diagnostic (error/warning)."""

	message: str
	code: str | None = None
	# Pipeline phase that produced the diagnostic: "parser", "generate",
	# "config" or "io".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()


def format_diagnostic(diag: Diagnostic, source: Path | None = None) -> str:
	"""Human-readable single line: `file:line:col: severity: message`."""
	span = diag.span
	if span.file is None and source is not None:
		span = Span(file=str(source), line=span.line, column=span.column)
	text = f"{span.describe()}: {diag.severity}: {diag.message}"
	if diag.code:
		text += f" [{diag.code}]"
	for note in diag.notes:
		text += f"\n  note: {note}"
	return text


def diagnostic_to_json(diag: Diagnostic, source: Path | None = None) -> dict[str, Any]:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	file = diag.span.file
	if file is None and source is not None:
		file = str(source)
	return {
		"phase": diag.phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "diagnostic_to_json", "format_diagnostic", "has_errors"]
