# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from catchgen.decls import MethodDeclaration, ParamKind, Parameter
from catchgen.errors import InvalidGenerationSourceError
from catchgen.synth import (
	CodeWriter,
	check_identifier,
	check_qualified_name,
	check_type_name,
	dart_string_literal,
	render_arguments,
	render_method,
	render_parameters,
)


def test_code_writer_indents_two_spaces_per_level() -> None:
	w = CodeWriter()
	with w.block("if (x)"):
		w.line("a();")
		with w.indented():
			w.line("b();")
	w.line()
	assert w.text() == "if (x) {\n  a();\n    b();\n}\n"


def test_optional_positional_parameters_keep_defaults() -> None:
	params = [
		Parameter("path", "String"),
		Parameter("retries", "int", ParamKind.OPTIONAL_POSITIONAL, default="3"),
		Parameter("tag", "String?", ParamKind.OPTIONAL_POSITIONAL),
	]
	assert render_parameters(params) == "String path, [int retries = 3, String? tag]"
	assert render_arguments(params) == "path, retries, tag"


def test_named_parameters_forward_by_name() -> None:
	params = [
		Parameter("id", "int"),
		Parameter("force", "bool", ParamKind.NAMED, ("required",)),
		Parameter("label", "String", ParamKind.NAMED, default="'a, b'"),
	]
	assert render_parameters(params) == "int id, {required bool force, String label = 'a, b'}"
	assert render_arguments(params) == "id, force: force, label: label"


def test_untyped_and_modified_parameters() -> None:
	params = [Parameter("x"), Parameter("y", None, modifiers=("final",)), Parameter("z", "num", modifiers=("covariant",))]
	assert render_parameters(params) == "x, final y, covariant num z"


def test_mixed_optional_groups_are_rejected() -> None:
	params = [
		Parameter("a", "int", ParamKind.OPTIONAL_POSITIONAL),
		Parameter("b", "int", ParamKind.NAMED),
	]
	with pytest.raises(InvalidGenerationSourceError, match="cannot mix") as excinfo:
		render_parameters(params, "Foo.m")
	assert excinfo.value.reason_code == "invalid-signature"


@pytest.mark.parametrize("name", ["", "1abc", "with space", "class", "is", "a-b"])
def test_check_identifier_rejects(name: str) -> None:
	with pytest.raises(InvalidGenerationSourceError, match="not a valid identifier"):
		check_identifier(name, "parameter", "Foo.m")


@pytest.mark.parametrize("name", ["get", "static", "_private", "$dollar", "async"])
def test_check_identifier_accepts_builtin_identifiers(name: str) -> None:
	assert check_identifier(name, "method") == name


def test_dart_string_literal_escapes_interpolation_and_quotes() -> None:
	assert dart_string_literal("It's $x \\ y") == "It\\'s \\$x \\\\ y"


def test_static_generic_method_calls_through_class() -> None:
	method = MethodDeclaration(
		name="index",
		parameters=[Parameter("key", "K"), Parameter("deep", "bool", ParamKind.NAMED, ("required",))],
		type_params=["K extends Object"],
		is_static=True,
	)
	text = render_method(method, None, "Service", use_logging=False)
	assert text.splitlines() == [
		"static void indexErrorCatching<K extends Object>(K key, {required bool deep}) {",
		"  try {",
		"    Service.index<K>(key, deep: deep);",
		"  } catch (error, stackTrace) {",
		"    rethrow;",
		"  }",
		"}",
	]


def test_log_line_escapes_dollar_in_names() -> None:
	method = MethodDeclaration(name="$run")
	text = render_method(method, None, "Foo", use_logging=True)
	assert "print('🔴 ${error.runtimeType} - Foo.\\$run:');" in text
	assert "    $run();" in text


def test_every_catcher_gets_its_own_check() -> None:
	method = MethodDeclaration(name="go")
	text = render_method(method, {"A": "onA", "B": "onB"}, "Foo", use_logging=False)
	assert text.count("if (error is ") == 2
	assert "    if (error is A) {\n      onA(error, stackTrace);\n    }\n    if (error is B) {" in text


@pytest.mark.parametrize("name", ["Exception", "http.ClientException", "Result<int>", "Either<Left, Map<String, int?>>", "Future<void>"])
def test_check_type_name_accepts(name: str) -> None:
	assert check_type_name(name, "catcher type") == name


@pytest.mark.parametrize("name", ["", "Exception)", "List<int", "Map<int>>", "A<>", "is", "a.class", "List<if>", "Exception {}"])
def test_check_type_name_rejects(name: str) -> None:
	with pytest.raises(InvalidGenerationSourceError) as excinfo:
		check_type_name(name, "catcher type", "Foo.run")
	assert excinfo.value.reason_code == "invalid-identifier"
	assert excinfo.value.element == "Foo.run"


def test_check_qualified_name() -> None:
	assert check_qualified_name("Handlers.onState", "catcher handler") == "Handlers.onState"
	assert check_qualified_name("eh.Handlers.log", "catcher handler") == "eh.Handlers.log"
	for bad in ("log()", "a..b", ".log", "x(); y", "this.log"):
		with pytest.raises(InvalidGenerationSourceError):
			check_qualified_name(bad, "catcher handler")


def test_dispatch_rejects_handler_expression() -> None:
	method = MethodDeclaration(name="go")
	with pytest.raises(InvalidGenerationSourceError, match="catcher handler 'x\\(\\); y'"):
		render_method(method, {"Exception": "x(); y"}, "Foo", use_logging=False)
