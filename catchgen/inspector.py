# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration inspector: which methods of a class carry the directive.

Matching is on the resolved defining symbol (the annotation class that
encloses the constructor), never on the text written at the use site, so a
look-alike such as a const variable named after the directive is ignored.
"""

from __future__ import annotations

from typing import List, Optional

from catchgen.annotations import ERROR_HANDLERS_GENERATOR, GENERATE_ERROR_HANDLER, is_annotation_element
from catchgen.decls import AnnotationInstance, ClassDeclaration, MethodDeclaration


def find_directive(method: MethodDeclaration) -> Optional[AnnotationInstance]:
	"""First `GenerateErrorHandler` annotation on `method` in declaration order."""
	for annotation in method.metadata:
		if is_annotation_element(annotation.element, GENERATE_ERROR_HANDLER):
			return annotation
	return None


def find_annotated_methods(cls: ClassDeclaration) -> List[MethodDeclaration]:
	"""Methods of `cls` carrying the directive, in declaration order."""
	return [m for m in cls.methods if find_directive(m) is not None]


def is_marked_class(cls: ClassDeclaration) -> bool:
	"""True when `cls` carries the class-level `ErrorHandlersGenerator` marker."""
	return any(is_annotation_element(a.element, ERROR_HANDLERS_GENERATOR) for a in cls.metadata)


__all__ = ["find_annotated_methods", "find_directive", "is_marked_class"]
