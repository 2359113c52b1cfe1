# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from catchgen.annotations import ANNOTATIONS_LIBRARY
from catchgen.decls import ParamKind, Parameter
from catchgen.errors import CatchgenParseError
from catchgen.inspector import find_annotated_methods, is_marked_class
from catchgen.parser import parse_library, parse_library_file
from catchgen.parser.ast import ConstArgs, MapOrSetLit, Ref, StringLit

SERVICE_SRC = """
library services;

import 'package:error_handlers_generator_annotations/error_handlers_generator_annotations.dart' as eh;
import 'package:http/http.dart' show ClientException, Response;
import 'dart:async';

part 'service.g.dart';

typedef Callback = void Function(int code);

enum Level { low, high }

const defaultTimeout = 30;

/* Block comment with { braces } and 'quotes' */
@eh.ErrorHandlersGenerator()
abstract class Service<T extends Object> extends Base<T> implements A, B {
  final String name;
  static const int limit = 3;

  Service(this.name) : super();
  Service.named({required this.name});
  factory Service.create() => throw UnimplementedError();

  int get size => 0;
  set size(int value) {}
  bool operator ==(Object other) => false;

  // Loads one entry.
  @eh.GenerateErrorHandler(useLogging: false)
  Future<void> load(String id, [int retries = 3]) async {
    await Future.delayed(Duration(milliseconds: retries * 2));
    if (id.isEmpty) { throw ArgumentError('id: ${id}'); }
  }

  @eh.GenerateErrorHandler()
  static Map<String, List<int>> index<K>(K key, {required bool deep, int depth = 1}) => {};

  void plain() {}

  void withCallback(void cb(int code), {String label = 'a, b'}) {}
}

void logError(dynamic error, StackTrace stackTrace) {
  print('Error: $error');
}
"""


def test_library_level_declarations() -> None:
	lib = parse_library(SERVICE_SRC, "lib/service.dart")
	assert [c.name for c in lib.classes] == ["Service"]
	assert lib.functions == ["logError"]
	assert lib.types == ["Callback", "Level"]
	assert lib.variables == ["defaultTimeout"]
	assert lib.parts == ["service.g.dart"]
	assert lib.part_of is None
	assert [(i.uri, i.prefix, i.show) for i in lib.imports] == [
		(ANNOTATIONS_LIBRARY, "eh", ()),
		("package:http/http.dart", None, ("ClientException", "Response")),
		("dart:async", None, ()),
	]


def test_class_members_become_methods_only_for_plain_methods() -> None:
	cls = parse_library(SERVICE_SRC).classes[0]
	assert cls.type_params == ["T extends Object"]
	assert [m.name for m in cls.methods] == ["load", "index", "plain", "withCallback"]
	assert is_marked_class(cls)
	assert [m.name for m in find_annotated_methods(cls)] == ["load", "index"]


def test_parameters_keep_types_kinds_and_defaults() -> None:
	cls = parse_library(SERVICE_SRC).classes[0]
	load, index, _plain, callback = cls.methods
	assert load.parameters == [
		Parameter("id", "String"),
		Parameter("retries", "int", ParamKind.OPTIONAL_POSITIONAL, default="3"),
	]
	assert not load.is_static
	assert index.is_static
	assert index.type_params == ["K"]
	assert index.parameters == [
		Parameter("key", "K"),
		Parameter("deep", "bool", ParamKind.NAMED, ("required",)),
		Parameter("depth", "int", ParamKind.NAMED, default="1"),
	]
	assert callback.parameters == [
		Parameter("cb", "void Function(int code)"),
		Parameter("label", "String", ParamKind.NAMED, default="'a, b'"),
	]


def test_prefixed_annotations_resolve_to_annotation_library() -> None:
	cls = parse_library(SERVICE_SRC).classes[0]
	load = cls.methods[0]
	(directive,) = load.metadata
	assert directive.name == "eh.GenerateErrorHandler"
	assert directive.element is not None
	assert directive.element.library == ANNOTATIONS_LIBRARY
	assert isinstance(directive.arguments, ConstArgs)
	assert directive.arguments.named[0][0] == "useLogging"
	assert directive.span.line is not None


def test_map_argument_is_parsed_with_comments() -> None:
	src = """
class Foo {
  @GenerateErrorHandler(catchers: {
    /// Doc comments are allowed between entries.
    Exception: logError,
    http.ClientException: Handlers.onHttp,
  })
  void bar() {}
}
"""
	method = parse_library(src).classes[0].methods[0]
	(name, value), = method.metadata[0].arguments.named
	assert name == "catchers"
	assert isinstance(value, MapOrSetLit)
	keys = [k.parts for k, _ in value.entries]
	values = [v.parts for _, v in value.entries]
	assert keys == [["Exception"], ["http", "ClientException"]]
	assert values == [["logError"], ["Handlers", "onHttp"]]
	assert all(isinstance(v, Ref) for _, v in value.entries)


def test_generic_method_return_type_and_nullable_types() -> None:
	src = """
class Repo {
  Future<Map<String, int>?> fetch<T extends num>(List<T>? items, [Map<String, Object?> extra = const {}]) async => null;
  Stream<int> watch() async* {}
  Iterable<int> walk() sync* {}
}
"""
	cls = parse_library(src).classes[0]
	fetch, watch, walk = cls.methods
	assert fetch.type_params == ["T extends num"]
	assert fetch.parameters == [
		Parameter("items", "List<T>?"),
		Parameter("extra", "Map<String, Object?>", ParamKind.OPTIONAL_POSITIONAL, default="const {}"),
	]
	assert watch.name == "watch"
	assert walk.name == "walk"


def test_part_of_and_mixins() -> None:
	src = """
part of 'main.dart';

mixin Loggable on Object implements A, B {
  void log() {}
}

base mixin class Shared {}

extension type UserId(int value) implements int {}

extension on String {
  int get twice => length * 2;
}
"""
	lib = parse_library(src)
	assert lib.part_of == "main.dart"
	assert lib.types == ["Loggable", "UserId"]
	assert [c.name for c in lib.classes] == ["Shared"]


def test_syntax_error_has_location() -> None:
	src = "class Foo {\n  void bar( {}\n}\n"
	with pytest.raises(CatchgenParseError) as excinfo:
		parse_library(src, "bad.dart")
	err = excinfo.value
	assert err.span.file == "bad.dart"
	assert err.span.line == 2
	assert str(err).startswith("bad.dart:2:")


def test_unterminated_class_reports_end_of_input() -> None:
	with pytest.raises(CatchgenParseError, match="unexpected end of input"):
		parse_library("class Foo {\n  void bar() {}\n")


def test_parse_library_file_records_path(tmp_path: Path) -> None:
	src = tmp_path / "a.dart"
	src.write_text("class A {}\n", encoding="utf-8")
	lib = parse_library_file(src)
	assert lib.path == str(src)
	assert lib.classes[0].span.file == str(src)
	assert lib.classes[0].span.line == 1


def test_record_types_at_the_start_of_a_declaration() -> None:
	src = """
@ErrorHandlersGenerator()
class Pairs {
  (int, int)? cached;

  @GenerateErrorHandler(useLogging: false)
  (int, int) run((String, {bool strict}) spec, [(int, int) seed = (0, 0)]) => seed;

  (int, int) get origin => (0, 0);
}
"""
	cls = parse_library(src).find_class("Pairs")
	(method,) = find_annotated_methods(cls)
	assert method.name == "run"
	assert method.parameters == [
		Parameter("spec", "(String, {bool strict})"),
		Parameter("seed", "(int, int)", ParamKind.OPTIONAL_POSITIONAL, default="(0, 0)"),
	]
	assert [m.name for m in cls.methods] == ["run"]


def test_raw_strings_are_not_unescaped() -> None:
	src = r"""
class Legacy {
  @Deprecated(r'use $other\n instead')
  void old() {
    final pattern = r'\';
  }
}
"""
	(method,) = parse_library(src).find_class("Legacy").methods
	(annotation,) = method.metadata
	(arg,) = annotation.arguments.positional
	assert isinstance(arg, StringLit)
	assert arg.value == "use $other\\n instead"
