# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to declarations and diagnostics.

Declarations built by an external front end may carry no location at all;
`Span()` is the sentinel for "unknown" so consumers never have to deal with
None.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort file/line/column of a declaration (1-based, like lark)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Build a Span from a lark Token, a lark Tree (via its `meta`), or any
		object exposing `line`/`column` attributes.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			return loc if file is None else replace(loc, file=file)
		meta = getattr(loc, "meta", None)
		if meta is not None and not getattr(meta, "empty", True):
			loc = meta
		return cls(
			file=file,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
		)

	@property
	def known(self) -> bool:
		return self.line is not None

	def describe(self) -> str:
		"""`file:line:col` with `?` for unknown parts."""
		file = self.file or "<unknown>"
		line = "?" if self.line is None else str(self.line)
		col = "?" if self.column is None else str(self.column)
		return f"{file}:{line}:{col}"


__all__ = ["Span"]
