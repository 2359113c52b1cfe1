# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from catchgen.core.diagnostics import Diagnostic
from catchgen.core.span import Span

# Reason codes for hard generation failures.
MISSING_DIRECTIVE = "missing-directive"
UNRESOLVED_DIRECTIVE = "unresolved-directive"
INVALID_CATCHERS = "invalid-catchers"
MALFORMED_CATCHERS = "malformed-catchers"
INVALID_IDENTIFIER = "invalid-identifier"
INVALID_SIGNATURE = "invalid-signature"


@dataclass(frozen=True)
class InvalidGenerationSourceError(Exception):
	"""
	Annotated source that cannot be turned into a unit.

	Raised synchronously out of `generate_unit`; the host build step is
	expected to fail with `format_human()` as its message. `element` names the
	offending declaration (`Class.method` where known).
	"""

	reason_code: str
	message: str
	element: str | None = None
	span: Span = field(default_factory=Span)

	def __str__(self) -> str:
		return self.format_human()

	def format_human(self) -> str:
		parts = [f"[{self.reason_code}] {self.message}"]
		if self.element:
			parts.append(f"element={self.element}")
		return " ".join(parts)

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"element": self.element,
			"line": self.span.line,
			"column": self.span.column,
		}

	def to_diagnostic(self) -> Diagnostic:
		notes = [f"while generating {self.element}"] if self.element else []
		return Diagnostic(
			message=self.message,
			code=self.reason_code,
			phase="generate",
			severity="error",
			span=self.span,
			notes=notes,
		)


@dataclass(frozen=True)
class CatchgenParseError(Exception):
	"""Syntax error reported by the declaration front end."""

	message: str
	span: Span = field(default_factory=Span)

	def __str__(self) -> str:
		return f"{self.span.describe()}: {self.message}"

	def to_diagnostic(self) -> Diagnostic:
		return Diagnostic(message=self.message, code="syntax", phase="parser", span=self.span)


__all__ = [
	"CatchgenParseError",
	"INVALID_CATCHERS",
	"INVALID_IDENTIFIER",
	"INVALID_SIGNATURE",
	"InvalidGenerationSourceError",
	"MALFORMED_CATCHERS",
	"MISSING_DIRECTIVE",
	"UNRESOLVED_DIRECTIVE",
]
