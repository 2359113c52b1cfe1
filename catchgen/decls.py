# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration graph consumed by the generator.

The graph is produced by a front end (`catchgen.parser`, or any host that can
reflect over its own sources) and is read-only to the engine:

  LibraryDeclaration → ClassDeclaration → MethodDeclaration → Parameter
                                         ↘ AnnotationInstance → ConstValue

Types, default values and modifiers are opaque text; the engine re-emits them
verbatim and never interprets them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, List, Optional, Sequence, Tuple

from catchgen.core.span import Span


# Constants

class ConstKind(Enum):
	"""Kinds of resolved annotation constants."""

	NULL = auto()
	BOOL = auto()
	INT = auto()
	DOUBLE = auto()
	STRING = auto()
	TYPE = auto()
	FUNCTION = auto()
	LIST = auto()
	SET = auto()
	MAP = auto()
	OBJECT = auto()


@dataclass(frozen=True)
class TypeRef:
	"""A type literal used as a constant (`Exception`, `http.ClientException`)."""

	display_name: str


@dataclass(frozen=True)
class FunctionRef:
	"""A tear-off of a top-level or static function (`logError`, `Handlers.log`)."""

	display_name: str


MapEntries = Tuple[Tuple[Optional["ConstValue"], Optional["ConstValue"]], ...]


@dataclass(frozen=True)
class ConstValue:
	"""
	A resolved compile-time constant.

	`value` holds the Python payload for scalars, a TypeRef/FunctionRef for
	type literals and tear-offs, a tuple of elements for lists and sets, and a
	tuple of (key, value) pairs for maps (insertion order preserved). OBJECT
	constants (annotation instances) carry `type_name` and `fields`.
	"""

	kind: ConstKind
	value: Any = None
	type_name: Optional[str] = None
	fields: Tuple[Tuple[str, "ConstValue"], ...] = ()

	@classmethod
	def null(cls) -> "ConstValue":
		return cls(ConstKind.NULL)

	@classmethod
	def of_bool(cls, value: bool) -> "ConstValue":
		return cls(ConstKind.BOOL, bool(value))

	@classmethod
	def of_int(cls, value: int) -> "ConstValue":
		return cls(ConstKind.INT, int(value))

	@classmethod
	def of_double(cls, value: float) -> "ConstValue":
		return cls(ConstKind.DOUBLE, float(value))

	@classmethod
	def of_string(cls, value: str) -> "ConstValue":
		return cls(ConstKind.STRING, value)

	@classmethod
	def of_type(cls, display_name: str) -> "ConstValue":
		return cls(ConstKind.TYPE, TypeRef(display_name))

	@classmethod
	def of_function(cls, display_name: str) -> "ConstValue":
		return cls(ConstKind.FUNCTION, FunctionRef(display_name))

	@classmethod
	def of_list(cls, elements: Sequence["ConstValue"]) -> "ConstValue":
		return cls(ConstKind.LIST, tuple(elements))

	@classmethod
	def of_set(cls, elements: Sequence["ConstValue"]) -> "ConstValue":
		return cls(ConstKind.SET, tuple(elements))

	@classmethod
	def of_map(cls, entries: Sequence[Tuple[Optional["ConstValue"], Optional["ConstValue"]]]) -> "ConstValue":
		return cls(ConstKind.MAP, tuple((k, v) for k, v in entries))

	@classmethod
	def of_object(cls, type_name: str, fields: Sequence[Tuple[str, "ConstValue"]]) -> "ConstValue":
		return cls(ConstKind.OBJECT, type_name=type_name, fields=tuple(fields))

	@property
	def is_null(self) -> bool:
		return self.kind is ConstKind.NULL

	def get_field(self, name: str) -> Optional["ConstValue"]:
		"""Field of an OBJECT constant; None when absent or not an object."""
		if self.kind is not ConstKind.OBJECT:
			return None
		for fname, fval in self.fields:
			if fname == name:
				return fval
		return None

	def to_bool_value(self) -> Optional[bool]:
		return self.value if self.kind is ConstKind.BOOL else None

	def to_type_value(self) -> Optional[TypeRef]:
		return self.value if self.kind is ConstKind.TYPE else None

	def to_function_value(self) -> Optional[FunctionRef]:
		return self.value if self.kind is ConstKind.FUNCTION else None

	def to_map_value(self) -> Optional[MapEntries]:
		return self.value if self.kind is ConstKind.MAP else None

	def display(self) -> str:
		"""Source-like rendering used in diagnostics."""
		k = self.kind
		if k is ConstKind.NULL:
			return "null"
		if k is ConstKind.BOOL:
			return "true" if self.value else "false"
		if k is ConstKind.STRING:
			return repr(self.value)
		if k in (ConstKind.INT, ConstKind.DOUBLE):
			return str(self.value)
		if k in (ConstKind.TYPE, ConstKind.FUNCTION):
			return self.value.display_name
		if k is ConstKind.LIST:
			return "[" + ", ".join(_display(e) for e in self.value) + "]"
		if k is ConstKind.SET:
			return "{" + ", ".join(_display(e) for e in self.value) + "}"
		if k is ConstKind.MAP:
			return "{" + ", ".join(f"{_display(key)}: {_display(val)}" for key, val in self.value) + "}"
		args = ", ".join(f"{name}: {val.display()}" for name, val in self.fields)
		return f"{self.type_name}({args})"


def _display(value: Optional[ConstValue]) -> str:
	return "<unresolved>" if value is None else value.display()


# Declarations

@dataclass(frozen=True)
class ElementRef:
	"""
	The symbol an annotation resolves to.

	For `@GenerateErrorHandler(...)` this is the (unnamed) constructor whose
	`enclosing_name` is `GenerateErrorHandler`; for `@someConst` it is a
	top-level variable enclosed by the library.
	"""

	kind: str  # "constructor" | "variable" | "function"
	name: str
	enclosing_name: Optional[str] = None
	# Defining library; None when the front end does not track libraries.
	library: Optional[str] = None


@dataclass(frozen=True)
class AnnotationInstance:
	"""
	One `@...` metadata entry attached to a declaration.

	`arguments` is the front end's parsed argument list (opaque to the engine).
	`constant` is an already-computed value for graphs that do not need a
	resolver.
	"""

	name: str
	element: Optional[ElementRef] = None
	arguments: Any = None
	constant: Optional[ConstValue] = None
	span: Span = field(default_factory=Span)


class ParamKind(Enum):
	POSITIONAL = "positional"
	OPTIONAL_POSITIONAL = "optional_positional"
	NAMED = "named"


@dataclass(frozen=True)
class Parameter:
	name: str
	type: Optional[str] = None
	kind: ParamKind = ParamKind.POSITIONAL
	modifiers: Tuple[str, ...] = ()
	default: Optional[str] = None


@dataclass
class MethodDeclaration:
	name: str
	parameters: List[Parameter] = field(default_factory=list)
	metadata: List[AnnotationInstance] = field(default_factory=list)
	type_params: List[str] = field(default_factory=list)
	is_static: bool = False
	span: Span = field(default_factory=Span)


@dataclass
class ClassDeclaration:
	name: str
	methods: List[MethodDeclaration] = field(default_factory=list)
	metadata: List[AnnotationInstance] = field(default_factory=list)
	type_params: List[str] = field(default_factory=list)
	span: Span = field(default_factory=Span)

	def static_method(self, name: str) -> Optional[MethodDeclaration]:
		for m in self.methods:
			if m.is_static and m.name == name:
				return m
		return None


@dataclass(frozen=True)
class ImportDirective:
	uri: str
	prefix: Optional[str] = None
	show: Tuple[str, ...] = ()


@dataclass
class LibraryDeclaration:
	"""Everything the front end saw in one source file."""

	path: Optional[str] = None
	classes: List[ClassDeclaration] = field(default_factory=list)
	functions: List[str] = field(default_factory=list)
	# Non-class type declarations (enums, mixins, typedefs).
	types: List[str] = field(default_factory=list)
	variables: List[str] = field(default_factory=list)
	imports: List[ImportDirective] = field(default_factory=list)
	parts: List[str] = field(default_factory=list)
	part_of: Optional[str] = None

	def find_class(self, name: str) -> Optional[ClassDeclaration]:
		for c in self.classes:
			if c.name == name:
				return c
		return None


__all__ = [
	"AnnotationInstance",
	"ClassDeclaration",
	"ConstKind",
	"ConstValue",
	"ElementRef",
	"FunctionRef",
	"ImportDirective",
	"LibraryDeclaration",
	"MethodDeclaration",
	"ParamKind",
	"Parameter",
	"TypeRef",
]
