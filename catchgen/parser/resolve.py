# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Symbol linking and constant evaluation for parsed libraries.

A parsed file only sees its own declarations and import directives, so the
rules are deliberately conservative:

- An annotation name that the library declares itself (class, enum,
  typedef, variable) refers to that local symbol, never to the annotation
  package.
- Any other use of a known annotation class name, bare or through an import
  prefix, is taken to come from the annotation package.
- Identifiers in annotation arguments resolve against local declarations
  first, then `dart:core`, then the configured known names. Names the file
  cannot see are imported symbols; when `assume_imported` is set they are
  classified by Dart naming convention.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Optional, Set

from catchgen.annotations import ANNOTATION_SCHEMAS, ANNOTATIONS_LIBRARY
from catchgen.decls import AnnotationInstance, ConstValue, ElementRef, LibraryDeclaration
from .ast import (
	BoolLit,
	CallExpr,
	ConstArgs,
	ConstExpr,
	ListLit,
	MapOrSetLit,
	NullLit,
	NumberLit,
	Ref,
	StringLit,
)

# Types from dart:core that can appear as catcher keys without an import.
DART_CORE_TYPES = frozenset(
	{
		"ArgumentError",
		"AssertionError",
		"ConcurrentModificationError",
		"Error",
		"Exception",
		"FormatException",
		"IndexError",
		"IntegerDivisionByZeroException",
		"NoSuchMethodError",
		"Object",
		"OutOfMemoryError",
		"RangeError",
		"StackOverflowError",
		"StateError",
		"TypeError",
		"UnimplementedError",
		"UnsupportedError",
		"bool",
		"double",
		"dynamic",
		"int",
		"num",
		"String",
	}
)
DART_CORE_FUNCTIONS = frozenset({"identical", "identityHashCode", "print"})


def library_id(library: LibraryDeclaration) -> str:
	"""Identity used for symbols the library declares itself."""
	return f"file:{library.path}" if library.path else "file:<memory>"


def _local_types(library: LibraryDeclaration) -> Set[str]:
	return {c.name for c in library.classes} | set(library.types)


def _import_prefixes(library: LibraryDeclaration) -> Set[str]:
	return {imp.prefix for imp in library.imports if imp.prefix}


def resolve_annotation_element(
	annotation: AnnotationInstance,
	library: LibraryDeclaration,
) -> Optional[ElementRef]:
	"""The symbol `annotation` refers to, or None when it cannot be resolved."""
	parts = annotation.name.split(".")
	invoked = annotation.arguments is not None
	if len(parts) > 1 and parts[0] in _import_prefixes(library):
		parts = parts[1:]
		if parts[0] not in ANNOTATION_SCHEMAS:
			return None
		return ElementRef("constructor" if invoked else "class", ".".join(parts[1:]), parts[0], ANNOTATIONS_LIBRARY)
	own = library_id(library)
	head = parts[0]
	ctor = ".".join(parts[1:])
	if head in _local_types(library):
		if not invoked:
			return ElementRef("class", head, None, own)
		return ElementRef("constructor", ctor, head, own)
	if head in library.variables or head in library.functions:
		kind = "variable" if head in library.variables else "function"
		return ElementRef(kind, head, None, own)
	if head in ANNOTATION_SCHEMAS:
		if not invoked:
			return ElementRef("class", head, None, ANNOTATIONS_LIBRARY)
		return ElementRef("constructor", ctor, head, ANNOTATIONS_LIBRARY)
	return None


def link_library(library: LibraryDeclaration) -> LibraryDeclaration:
	"""Attach resolved elements to every annotation in `library` (in place)."""

	def link(items: List[AnnotationInstance]) -> List[AnnotationInstance]:
		return [replace(a, element=resolve_annotation_element(a, library)) for a in items]

	for cls in library.classes:
		cls.metadata = link(cls.metadata)
		for method in cls.methods:
			method.metadata = link(method.metadata)
	return library


class LibraryConstantResolver:
	"""
	ConstantResolver that evaluates annotation arguments parsed from source.

	Known annotation classes are instantiated from their schema (named
	arguments only, declared defaults for omitted ones). Anything that a Dart
	analyzer would reject as a non-constant or mistyped expression yields None.
	"""

	def __init__(
		self,
		library: LibraryDeclaration,
		known_types: Iterable[str] = (),
		known_functions: Iterable[str] = (),
		assume_imported: bool = True,
	) -> None:
		self.library = library
		self.known_types = frozenset(known_types)
		self.known_functions = frozenset(known_functions)
		self.assume_imported = assume_imported
		self._types = _local_types(library)
		self._prefixes = _import_prefixes(library)
		self._shown = {name for imp in library.imports for name in imp.show}

	def compute_constant_value(self, annotation: AnnotationInstance) -> Optional[ConstValue]:
		if annotation.constant is not None:
			return annotation.constant
		element = annotation.element
		if element is None or element.kind != "constructor" or not isinstance(annotation.arguments, ConstArgs):
			return None
		if element.library != ANNOTATIONS_LIBRARY or element.name:
			return None
		return self.instantiate(element.enclosing_name, annotation.arguments)

	def instantiate(self, class_name: str, args: ConstArgs) -> Optional[ConstValue]:
		schema = ANNOTATION_SCHEMAS.get(class_name)
		if schema is None or args.positional:
			return None
		given = {}
		for name, expr in args.named:
			if name not in schema.field_names() or name in given:
				return None
			value = self.evaluate(expr)
			if value is None:
				return None
			given[name] = value
		fields = [(f.name, given.get(f.name, f.default)) for f in schema.fields]
		return ConstValue.of_object(schema.name, fields)

	def evaluate(self, expr: ConstExpr) -> Optional[ConstValue]:
		"""Value of a constant expression, or None when it is not a valid constant."""
		if isinstance(expr, StringLit):
			return ConstValue.of_string(expr.value)
		if isinstance(expr, BoolLit):
			return ConstValue.of_bool(expr.value)
		if isinstance(expr, NullLit):
			return ConstValue.null()
		if isinstance(expr, NumberLit):
			return _number(expr.text)
		if isinstance(expr, Ref):
			return self.identifier(expr.parts)
		if isinstance(expr, MapOrSetLit):
			return self.brace_literal(expr)
		if isinstance(expr, ListLit):
			elements = [self.evaluate(e) for e in expr.elements]
			if any(e is None for e in elements):
				return None
			return ConstValue.of_list(elements)
		if isinstance(expr, CallExpr):
			return self.call(expr)
		return None

	def brace_literal(self, expr: MapOrSetLit) -> Optional[ConstValue]:
		has_values = [value is not None for _, value in expr.entries]
		if expr.entries and not all(has_values):
			if any(has_values):
				return None
			elements = [self.evaluate(key) for key, _ in expr.entries]
			if any(e is None for e in elements) or len(set(elements)) != len(elements):
				return None
			return ConstValue.of_set(elements)
		entries = []
		seen = set()
		for key_expr, value_expr in expr.entries:
			key = self.evaluate(key_expr)
			value = self.evaluate(value_expr)
			# Duplicate keys are a compile-time error in a const map.
			if key is None or value is None or key in seen:
				return None
			seen.add(key)
			entries.append((key, value))
		return ConstValue.of_map(entries)

	def call(self, expr: CallExpr) -> Optional[ConstValue]:
		parts = list(expr.target)
		if len(parts) > 1 and parts[0] in self._prefixes:
			parts = parts[1:]
		if len(parts) == 1 and parts[0] in ANNOTATION_SCHEMAS:
			return self.instantiate(parts[0], expr.args)
		if parts[0] in self._types or self._is_external_type(parts[0]):
			named = []
			for name, arg in expr.args.named:
				value = self.evaluate(arg)
				if value is None:
					return None
				named.append((name, value))
			for index, arg in enumerate(expr.args.positional):
				value = self.evaluate(arg)
				if value is None:
					return None
				named.append((f"${index}", value))
			return ConstValue.of_object(".".join(expr.target), named)
		return None

	def identifier(self, parts: List[str]) -> Optional[ConstValue]:
		display = ".".join(parts)
		if len(parts) == 1:
			name = parts[0]
			if name in self.library.variables:
				# Values of const variables are not tracked.
				return None
			if name in self._types or name in DART_CORE_TYPES or name in self.known_types:
				return ConstValue.of_type(name)
			if name in self.library.functions or name in DART_CORE_FUNCTIONS or name in self.known_functions:
				return ConstValue.of_function(name)
			if name in self._shown or self.assume_imported:
				return _by_convention(name, display)
			return None
		if display in self.known_types:
			return ConstValue.of_type(display)
		if display in self.known_functions:
			return ConstValue.of_function(display)
		if parts[0] in self._prefixes:
			if len(parts) == 2:
				return _by_convention(parts[1], display)
			if len(parts) == 3 and parts[1][:1].isupper():
				return ConstValue.of_function(display)
			return None
		if len(parts) == 2:
			owner = self.library.find_class(parts[0])
			if owner is not None:
				if owner.static_method(parts[1]) is not None:
					return ConstValue.of_function(display)
				return None
			if parts[0] in self._types:
				# Enum values and other static members are not tear-offs.
				return None
			if self.assume_imported and parts[0][:1].isupper() and parts[1][:1].islower():
				return ConstValue.of_function(display)
		return None

	def _is_external_type(self, name: str) -> bool:
		return name in DART_CORE_TYPES or name in self.known_types or (self.assume_imported and name[:1].isupper())


def _by_convention(name: str, display: str) -> ConstValue:
	"""Capitalized identifiers are types, everything else is a function."""
	if name.lstrip("_$")[:1].isupper():
		return ConstValue.of_type(display)
	return ConstValue.of_function(display)


def _number(text: str) -> Optional[ConstValue]:
	body = text.lstrip("-")
	sign = -1 if text.startswith("-") else 1
	if body[:2] in ("0x", "0X"):
		return ConstValue.of_int(sign * int(body, 16))
	if "." in body or "e" in body or "E" in body:
		return ConstValue.of_double(sign * float(body))
	return ConstValue.of_int(sign * int(body))


__all__ = [
	"DART_CORE_FUNCTIONS",
	"DART_CORE_TYPES",
	"LibraryConstantResolver",
	"library_id",
	"link_library",
	"resolve_annotation_element",
]
