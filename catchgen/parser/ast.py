# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Constant-expression AST for annotation arguments.

Only annotation arguments are parsed this deeply; everything else in a source
file is recovered as opaque text. Evaluation lives in
`catchgen.parser.resolve`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from catchgen.core.span import Span


class ConstExpr:
	"""Base class for constant expressions."""
	pass


@dataclass
class StringLit(ConstExpr):
	value: str
	loc: Span = field(default_factory=Span)


@dataclass
class NumberLit(ConstExpr):
	"""Numeric literal kept as source text (`3`, `-1.5`, `0xFF`)."""
	text: str
	loc: Span = field(default_factory=Span)


@dataclass
class BoolLit(ConstExpr):
	value: bool
	loc: Span = field(default_factory=Span)


@dataclass
class NullLit(ConstExpr):
	loc: Span = field(default_factory=Span)


@dataclass
class Ref(ConstExpr):
	"""Identifier or qualified identifier: `logError`, `eh.Handlers.log`."""
	parts: List[str]
	loc: Span = field(default_factory=Span)


@dataclass
class CallExpr(ConstExpr):
	"""Const constructor invocation: `Duration(seconds: 1)`."""
	target: List[str]
	args: "ConstArgs"
	type_args: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class MapOrSetLit(ConstExpr):
	"""
	Brace literal. Entries with a value are map entries; entries without one
	are set elements. `{}` is an empty map, as in Dart.
	"""
	entries: List[Tuple[ConstExpr, Optional[ConstExpr]]]
	type_args: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class ListLit(ConstExpr):
	elements: List[ConstExpr]
	type_args: Optional[str] = None
	loc: Span = field(default_factory=Span)


@dataclass
class ConstArgs:
	"""Argument list of an annotation or const constructor call."""
	positional: List[ConstExpr] = field(default_factory=list)
	named: List[Tuple[str, ConstExpr]] = field(default_factory=list)


__all__ = [
	"BoolLit",
	"CallExpr",
	"ConstArgs",
	"ConstExpr",
	"ListLit",
	"MapOrSetLit",
	"NullLit",
	"NumberLit",
	"Ref",
	"StringLit",
]
