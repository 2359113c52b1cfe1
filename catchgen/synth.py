# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Method synthesizer: render one `<name>ErrorCatching` wrapper.

Output shape (two-space indentation, one statement per line):

	void <name>ErrorCatching(<params>) {
	  try {
	    <name>(<args>);
	  } catch (error, stackTrace) {
	    <dispatch>      one `if (error is T) { handler(error, stackTrace); }` per catcher
	    <log block>     only when logging is enabled
	    rethrow;
	  }
	}

Every catcher check is emitted unconditionally in declaration order; there is
no early exit, so overlapping types fire every matching handler.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from catchgen.decls import MethodDeclaration, ParamKind, Parameter
from catchgen.errors import INVALID_IDENTIFIER, INVALID_SIGNATURE, InvalidGenerationSourceError

INDENT = "  "
WRAPPER_SUFFIX = "ErrorCatching"
LOG_SEPARATOR = "=" * 112

_IDENT_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*\Z")
_QUALIFIED_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z_$][A-Za-z0-9_$]*)*\Z")
_WORD_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_TYPE_ARGS_RE = re.compile(r"[A-Za-z0-9_$.,<>? ]+\Z")

# Dart reserved words; built-in identifiers (e.g. `get`, `static`) are legal names.
RESERVED_WORDS = frozenset(
	"""
	assert break case catch class const continue default do else enum extends
	false final finally for if in is new null rethrow return super switch this
	throw true try var void while with
	""".split()
)


class CodeWriter:
	"""Line builder with an explicit indentation depth."""

	def __init__(self) -> None:
		self._lines: List[str] = []
		self._depth = 0

	def line(self, text: str = "") -> None:
		self._lines.append(f"{INDENT * self._depth}{text}" if text else "")

	@contextmanager
	def indented(self) -> Iterator[None]:
		self._depth += 1
		try:
			yield
		finally:
			self._depth -= 1

	@contextmanager
	def block(self, header: str) -> Iterator[None]:
		self.line(f"{header} {{")
		with self.indented():
			yield
		self.line("}")

	def text(self) -> str:
		return "\n".join(self._lines)


def check_identifier(name: str, what: str, element: Optional[str] = None) -> str:
	"""Reject names that would not re-emit as a Dart identifier."""
	if not isinstance(name, str) or not _IDENT_RE.match(name) or name in RESERVED_WORDS:
		raise _invalid(name, what, element)
	return name


def _invalid(name: object, what: str, element: Optional[str]) -> InvalidGenerationSourceError:
	return InvalidGenerationSourceError(
		reason_code=INVALID_IDENTIFIER,
		message=f"{what} {name!r} is not a valid identifier",
		element=element,
	)


def check_qualified_name(name: str, what: str, element: Optional[str] = None) -> str:
	"""Like `check_identifier`, but `prefix.name` and `Class.member` are allowed."""
	if not isinstance(name, str) or not _QUALIFIED_RE.match(name):
		raise _invalid(name, what, element)
	if any(part in RESERVED_WORDS for part in name.split(".")):
		raise _invalid(name, what, element)
	return name


def _balanced_type_args(text: str) -> bool:
	depth = 0
	for ch in text:
		if ch == "<":
			depth += 1
		elif ch == ">":
			depth -= 1
			if depth < 0:
				return False
	return depth == 0


def check_type_name(name: str, what: str, element: Optional[str] = None) -> str:
	"""Qualified type name with optional type arguments: `http.Response<T>`."""
	if not isinstance(name, str):
		raise _invalid(name, what, element)
	base, sep, rest = name.partition("<")
	if not sep:
		return check_qualified_name(name, what, element)
	if not _QUALIFIED_RE.match(base) or any(part in RESERVED_WORDS for part in base.split(".")):
		raise _invalid(name, what, element)
	args = rest[:-1] if rest.endswith(">") else None
	if not args or not _TYPE_ARGS_RE.match(args) or not _balanced_type_args(args):
		raise _invalid(name, what, element)
	if any(word in RESERVED_WORDS and word != "void" for word in _WORD_RE.findall(args)):
		raise _invalid(name, what, element)
	return name


def dart_string_literal(text: str) -> str:
	"""Escape `text` for the inside of a single-quoted Dart string."""
	return text.replace("\\", "\\\\").replace("'", "\\'").replace("$", "\\$")


def type_param_names(type_params: Sequence[str]) -> List[str]:
	"""`["K", "V extends Object"]` → `["K", "V"]`."""
	return [tp.split()[0] for tp in type_params if tp.strip()]


# Signature

def render_parameter(param: Parameter) -> str:
	parts = [*param.modifiers]
	if param.type:
		parts.append(param.type)
	parts.append(param.name)
	text = " ".join(parts)
	if param.default is not None:
		text += f" = {param.default}"
	return text


def _split_parameters(params: Sequence[Parameter], element: str) -> tuple[List[Parameter], List[Parameter], Optional[ParamKind]]:
	required: List[Parameter] = []
	optional: List[Parameter] = []
	group: Optional[ParamKind] = None
	for p in params:
		check_identifier(p.name, "parameter", element)
		if p.kind is ParamKind.POSITIONAL:
			required.append(p)
			continue
		if group is not None and group is not p.kind:
			raise InvalidGenerationSourceError(
				reason_code=INVALID_SIGNATURE,
				message="a method cannot mix optional positional and named parameters",
				element=element,
			)
		group = p.kind
		optional.append(p)
	return required, optional, group


def render_parameters(params: Sequence[Parameter], element: str = "") -> str:
	"""Formal parameter list text, without the surrounding parentheses."""
	required, optional, group = _split_parameters(params, element)
	parts = [render_parameter(p) for p in required]
	if optional:
		inner = ", ".join(render_parameter(p) for p in optional)
		parts.append(f"[{inner}]" if group is ParamKind.OPTIONAL_POSITIONAL else f"{{{inner}}}")
	return ", ".join(parts)


def render_arguments(params: Sequence[Parameter]) -> str:
	"""Forwarding argument list: positional by name, named as `name: name`."""
	return ", ".join(f"{p.name}: {p.name}" if p.kind is ParamKind.NAMED else p.name for p in params)


def render_signature(method: MethodDeclaration, element: str) -> str:
	name = check_identifier(method.name, "method", element)
	type_params = f"<{', '.join(method.type_params)}>" if method.type_params else ""
	prefix = "static " if method.is_static else ""
	return f"{prefix}void {name}{WRAPPER_SUFFIX}{type_params}({render_parameters(method.parameters, element)})"


def render_call(method: MethodDeclaration, class_name: str) -> str:
	callee = f"{class_name}.{method.name}" if method.is_static else method.name
	if method.type_params:
		callee += f"<{', '.join(type_param_names(method.type_params))}>"
	return f"{callee}({render_arguments(method.parameters)});"


# Catch body

def write_dispatch(w: CodeWriter, catchers: Optional[Dict[str, str]], element: Optional[str] = None) -> None:
	if not catchers:
		return
	for exception_type, handler in catchers.items():
		check_type_name(exception_type, "catcher type", element)
		check_qualified_name(handler, "catcher handler", element)
		with w.block(f"if (error is {exception_type})"):
			w.line(f"{handler}(error, stackTrace);")


def write_log_block(w: CodeWriter, class_name: str, method_name: str) -> None:
	where = dart_string_literal(f"{class_name}.{method_name}")
	w.line(f"print('{LOG_SEPARATOR}');")
	w.line(f"print('🔴 ${{error.runtimeType}} - {where}:');")
	w.line("print('Message: $error');")
	w.line("print('StackTrace: $stackTrace');")
	w.line(f"print('{LOG_SEPARATOR}');")


def write_rethrow(w: CodeWriter) -> None:
	w.line("rethrow;")


def render_method(
	method: MethodDeclaration,
	catchers: Optional[Dict[str, str]],
	class_name: str,
	use_logging: bool,
) -> str:
	"""Full wrapper method text for one annotated method."""
	element = f"{class_name}.{method.name}"
	w = CodeWriter()
	w.line(f"{render_signature(method, element)} {{")
	with w.indented():
		w.line("try {")
		with w.indented():
			w.line(render_call(method, class_name))
		w.line("} catch (error, stackTrace) {")
		with w.indented():
			write_dispatch(w, catchers, element)
			if use_logging:
				write_log_block(w, class_name, method.name)
			write_rethrow(w)
		w.line("}")
	w.line("}")
	return w.text()


__all__ = [
	"CodeWriter",
	"LOG_SEPARATOR",
	"WRAPPER_SUFFIX",
	"check_identifier",
	"check_qualified_name",
	"check_type_name",
	"dart_string_literal",
	"render_arguments",
	"render_method",
	"render_parameters",
]
