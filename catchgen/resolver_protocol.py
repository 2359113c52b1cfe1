# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Constant-resolution protocol between the engine and its front end.

The engine asks for an annotation's constant value exactly once per read and
treats the answer as atomic: either a fully decoded ConstValue or None
("unresolvable"). How the value is computed is the front end's business.
"""

from __future__ import annotations

from typing import Optional, Protocol

from catchgen.decls import AnnotationInstance, ConstValue


class ConstantResolver(Protocol):
	"""Protocol for computing the constant value of an annotation instance."""

	def compute_constant_value(self, annotation: AnnotationInstance) -> Optional[ConstValue]:
		"""Return the annotation's constant value, or None when it cannot be evaluated."""
		...


class AttachedConstantResolver:
	"""Resolver for graphs whose annotations already carry `constant`."""

	def compute_constant_value(self, annotation: AnnotationInstance) -> Optional[ConstValue]:
		return annotation.constant


__all__ = ["AttachedConstantResolver", "ConstantResolver"]
