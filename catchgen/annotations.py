# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Annotation model understood by the generator.

The host declares two annotation classes:

	class ErrorHandlersGenerator { const ErrorHandlersGenerator(); }

	class GenerateErrorHandler {
	  final bool useLogging;
	  final Map<Type, Function(dynamic, StackTrace)>? catchers;
	  const GenerateErrorHandler({this.useLogging = true, this.catchers});
	}

`ANNOTATION_SCHEMAS` records their named parameters and declared defaults so a
constant resolver can build the same field values the host analyzer would.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple, Union

from catchgen.decls import AnnotationInstance, ConstValue, ElementRef

ERROR_HANDLERS_GENERATOR = "ErrorHandlersGenerator"
GENERATE_ERROR_HANDLER = "GenerateErrorHandler"

USE_LOGGING = "useLogging"
CATCHERS = "catchers"

# Library declaring both annotation classes in the host ecosystem.
ANNOTATIONS_LIBRARY = "package:error_handlers_generator_annotations/error_handlers_generator_annotations.dart"


@dataclass(frozen=True)
class FieldSpec:
	name: str
	default: ConstValue


@dataclass(frozen=True)
class AnnotationSchema:
	"""Named-only const constructor of an annotation class."""

	name: str
	fields: Tuple[FieldSpec, ...] = ()

	def field_names(self) -> Tuple[str, ...]:
		return tuple(f.name for f in self.fields)


ANNOTATION_SCHEMAS: dict[str, AnnotationSchema] = {
	ERROR_HANDLERS_GENERATOR: AnnotationSchema(ERROR_HANDLERS_GENERATOR),
	GENERATE_ERROR_HANDLER: AnnotationSchema(
		GENERATE_ERROR_HANDLER,
		(
			FieldSpec(USE_LOGGING, ConstValue.of_bool(True)),
			FieldSpec(CATCHERS, ConstValue.null()),
		),
	),
}


def is_annotation_element(element: Optional[ElementRef], annotation_name: str) -> bool:
	"""
	True when `element` is a constructor of the annotation class `annotation_name`.

	A class of the same name declared in another library is a different symbol.
	"""
	if element is None or element.kind != "constructor" or element.enclosing_name != annotation_name:
		return False
	return element.library is None or element.library == ANNOTATIONS_LIBRARY


CatcherSpec = Union[Mapping[str, str], Sequence[Tuple[str, str]]]


def error_handlers_generator() -> AnnotationInstance:
	"""Class-level marker with its constant precomputed."""
	return AnnotationInstance(
		name=ERROR_HANDLERS_GENERATOR,
		element=ElementRef("constructor", "", ERROR_HANDLERS_GENERATOR, ANNOTATIONS_LIBRARY),
		constant=ConstValue.of_object(ERROR_HANDLERS_GENERATOR, ()),
	)


def generate_error_handler(use_logging: bool = True, catchers: Optional[CatcherSpec] = None) -> AnnotationInstance:
	"""
	Method-level directive with its constant precomputed.

	Mirrors the const constructor: `use_logging` defaults to true and
	`catchers` to null. Catcher keys are type names and values are function
	names, in the given order.
	"""
	if catchers is None:
		catchers_value = ConstValue.null()
	else:
		items = catchers.items() if isinstance(catchers, Mapping) else catchers
		catchers_value = ConstValue.of_map(
			[(ConstValue.of_type(t), ConstValue.of_function(f)) for t, f in items]
		)
	return AnnotationInstance(
		name=GENERATE_ERROR_HANDLER,
		element=ElementRef("constructor", "", GENERATE_ERROR_HANDLER, ANNOTATIONS_LIBRARY),
		constant=ConstValue.of_object(
			GENERATE_ERROR_HANDLER,
			((USE_LOGGING, ConstValue.of_bool(use_logging)), (CATCHERS, catchers_value)),
		),
	)


__all__ = [
	"ANNOTATIONS_LIBRARY",
	"ANNOTATION_SCHEMAS",
	"AnnotationSchema",
	"CATCHERS",
	"ERROR_HANDLERS_GENERATOR",
	"FieldSpec",
	"GENERATE_ERROR_HANDLER",
	"USE_LOGGING",
	"error_handlers_generator",
	"generate_error_handler",
	"is_annotation_element",
]
