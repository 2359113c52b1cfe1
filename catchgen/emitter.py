# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Class emitter and the engine entry point.

`ErrorHandlersBuilder.generate_unit` runs the whole pipeline for one class:

  inspector (annotated methods) → payload (catchers, useLogging)
  → synth (one wrapper each) → emit_unit (one extension block)

Either the whole unit is produced or InvalidGenerationSourceError propagates;
nothing is emitted for a class without annotated methods.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence

from catchgen.decls import ClassDeclaration
from catchgen.errors import InvalidGenerationSourceError
from catchgen.inspector import find_annotated_methods
from catchgen.payload import extract_catchers, extract_use_logging
from catchgen.resolver_protocol import AttachedConstantResolver, ConstantResolver
from catchgen.synth import INDENT, check_identifier, render_method, type_param_names

IGNORE_FOR_FILE = "// ignore_for_file: avoid_print, unused_element, unused_local_variable"
EXTENSION_SUFFIX = "ErrorHandlers"


def _indent_block(text: str) -> str:
	return "\n".join(f"{INDENT}{ln}" if ln else "" for ln in text.split("\n"))


def emit_unit(
	class_name: str,
	rendered_methods: Sequence[str],
	type_params: Sequence[str] = (),
) -> Optional[str]:
	"""Wrap rendered methods in `extension <Class>ErrorHandlers on <Class>`."""
	if not rendered_methods:
		return None
	check_identifier(class_name, "class", class_name)
	ext_params = f"<{', '.join(type_params)}>" if type_params else ""
	on_args = f"<{', '.join(type_param_names(type_params))}>" if type_params else ""
	body = "\n\n".join(_indent_block(m) for m in rendered_methods)
	return (
		f"{IGNORE_FOR_FILE}\n"
		"\n"
		f"extension {class_name}{EXTENSION_SUFFIX}{ext_params} on {class_name}{on_args} {{\n"
		f"{body}\n"
		"}\n"
	)


class ErrorHandlersBuilder:
	"""
	Stateless generator for `@ErrorHandlersGenerator()` classes.

	The only state is the constant resolver supplied by the front end; one
	builder can serve any number of classes, in any order or concurrently.
	"""

	def __init__(self, resolver: Optional[ConstantResolver] = None) -> None:
		self.resolver: ConstantResolver = resolver if resolver is not None else AttachedConstantResolver()

	def render_methods(self, cls: ClassDeclaration) -> List[str]:
		annotated = find_annotated_methods(cls)
		if annotated:
			try:
				check_identifier(cls.name, "class", cls.name)
			except InvalidGenerationSourceError as err:
				raise replace(err, span=cls.span) from None
		rendered: List[str] = []
		for method in annotated:
			catchers = extract_catchers(method, self.resolver, owner=cls.name)
			use_logging = extract_use_logging(method, self.resolver, owner=cls.name)
			try:
				rendered.append(render_method(method, catchers, cls.name, use_logging))
			except InvalidGenerationSourceError as err:
				if err.span.known:
					raise
				# Synthesis errors carry no location; point at the method.
				raise replace(err, span=method.span) from None
		return rendered

	def generate_unit(self, cls: ClassDeclaration) -> Optional[str]:
		"""Generated extension text for `cls`, or None when nothing is annotated."""
		return emit_unit(cls.name, self.render_methods(cls), cls.type_params)


def generate_unit(cls: ClassDeclaration, resolver: Optional[ConstantResolver] = None) -> Optional[str]:
	"""Convenience wrapper around `ErrorHandlersBuilder(resolver).generate_unit`."""
	return ErrorHandlersBuilder(resolver).generate_unit(cls)


__all__ = ["ErrorHandlersBuilder", "emit_unit", "generate_unit"]
