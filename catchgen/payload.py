# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Payload validator: decode the directive's constant into generator inputs.

The two readers are deliberately asymmetric:

- `extract_catchers` tolerates a missing or unresolvable directive (the
  wrapper is generated without type dispatch), but a catchers map that is
  present and corrupt aborts generation.
- `extract_use_logging` treats a missing or unresolvable directive as a hard
  error, and falls back to `False` when the resolved field is absent or null.
  The declared default (`true`) only applies through the resolver, when the
  directive is written without `useLogging`.
"""

from __future__ import annotations

from typing import Dict, Optional

from catchgen.annotations import CATCHERS, USE_LOGGING
from catchgen.decls import ConstValue, MethodDeclaration
from catchgen.errors import (
	INVALID_CATCHERS,
	MALFORMED_CATCHERS,
	MISSING_DIRECTIVE,
	UNRESOLVED_DIRECTIVE,
	InvalidGenerationSourceError,
)
from catchgen.inspector import find_directive
from catchgen.resolver_protocol import ConstantResolver


def _element_name(method: MethodDeclaration, owner: Optional[str]) -> str:
	return f"{owner}.{method.name}" if owner else method.name


def extract_catchers(
	method: MethodDeclaration,
	resolver: ConstantResolver,
	owner: Optional[str] = None,
) -> Optional[Dict[str, str]]:
	"""
	Exception type name → handler function name, in declaration order.

	Returns None ("no catchers", distinct from an empty map) when the directive
	is missing, its constant is unresolvable, or `catchers` is absent/null.
	"""
	annotation = find_directive(method)
	if annotation is None:
		return None
	constant = resolver.compute_constant_value(annotation)
	if constant is None:
		return None
	catchers_field = constant.get_field(CATCHERS)
	if catchers_field is None or catchers_field.is_null:
		return None
	return parse_catchers(catchers_field, method, owner)


def parse_catchers(
	value: ConstValue,
	method: MethodDeclaration,
	owner: Optional[str] = None,
) -> Dict[str, str]:
	"""Decode a resolved `catchers` value; every entry must be Type → function."""
	entries = value.to_map_value()
	if entries is None:
		raise InvalidGenerationSourceError(
			reason_code=INVALID_CATCHERS,
			message="Catchers must be a Map<Type, Function>.",
			element=_element_name(method, owner),
			span=method.span,
		)
	parsed: Dict[str, str] = {}
	for key, val in entries:
		type_ref = key.to_type_value() if key is not None else None
		fn_ref = val.to_function_value() if val is not None else None
		if type_ref is None or fn_ref is None:
			raise InvalidGenerationSourceError(
				reason_code=MALFORMED_CATCHERS,
				message=f"Invalid data in catchers: {value.display()}",
				element=_element_name(method, owner),
				span=method.span,
			)
		parsed[type_ref.display_name] = fn_ref.display_name
	return parsed


def extract_use_logging(
	method: MethodDeclaration,
	resolver: ConstantResolver,
	owner: Optional[str] = None,
) -> bool:
	"""Resolved `useLogging` flag; absent/null/non-bool fields read as False."""
	annotation = find_directive(method)
	if annotation is None:
		raise InvalidGenerationSourceError(
			reason_code=MISSING_DIRECTIVE,
			message=(
				f"Method {method.name} must contain the GenerateErrorHandler annotation "
				"with the useLogging parameter."
			),
			element=_element_name(method, owner),
			span=method.span,
		)
	constant = resolver.compute_constant_value(annotation)
	if constant is None:
		raise InvalidGenerationSourceError(
			reason_code=UNRESOLVED_DIRECTIVE,
			message=f"Unable to retrieve the GenerateErrorHandler annotation value in method {method.name}.",
			element=_element_name(method, owner),
			span=annotation.span if annotation.span.known else method.span,
		)
	field = constant.get_field(USE_LOGGING)
	if field is None or field.is_null:
		return False
	flag = field.to_bool_value()
	return flag if flag is not None else False


__all__ = ["extract_catchers", "extract_use_logging", "parse_catchers"]
