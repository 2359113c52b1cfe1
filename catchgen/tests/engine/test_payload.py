# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import Optional

import pytest

from catchgen.annotations import (
	ANNOTATIONS_LIBRARY,
	CATCHERS,
	GENERATE_ERROR_HANDLER,
	USE_LOGGING,
	generate_error_handler,
)
from catchgen.decls import AnnotationInstance, ConstValue, ElementRef, MethodDeclaration
from catchgen.errors import InvalidGenerationSourceError
from catchgen.inspector import find_directive
from catchgen.payload import extract_catchers, extract_use_logging
from catchgen.resolver_protocol import AttachedConstantResolver


class _UnresolvableResolver:
	def __init__(self) -> None:
		self.calls = 0

	def compute_constant_value(self, annotation: AnnotationInstance) -> Optional[ConstValue]:
		self.calls += 1
		return None


def _directive(*fields) -> AnnotationInstance:
	return AnnotationInstance(
		name=GENERATE_ERROR_HANDLER,
		element=ElementRef("constructor", "", GENERATE_ERROR_HANDLER, ANNOTATIONS_LIBRARY),
		constant=ConstValue.of_object(GENERATE_ERROR_HANDLER, fields),
	)


def test_catchers_soft_miss_when_directive_missing() -> None:
	method = MethodDeclaration(name="run")
	assert extract_catchers(method, AttachedConstantResolver()) is None


def test_catchers_soft_miss_when_unresolvable() -> None:
	method = MethodDeclaration(name="run", metadata=[generate_error_handler()])
	resolver = _UnresolvableResolver()
	assert extract_catchers(method, resolver) is None
	assert resolver.calls == 1


def test_use_logging_hard_error_when_directive_missing() -> None:
	method = MethodDeclaration(name="run")
	with pytest.raises(
		InvalidGenerationSourceError,
		match="Method run must contain the GenerateErrorHandler annotation with the useLogging parameter.",
	) as excinfo:
		extract_use_logging(method, AttachedConstantResolver(), owner="Foo")
	assert excinfo.value.reason_code == "missing-directive"
	assert excinfo.value.element == "Foo.run"


def test_use_logging_hard_error_when_unresolvable() -> None:
	method = MethodDeclaration(name="run", metadata=[generate_error_handler()])
	with pytest.raises(
		InvalidGenerationSourceError,
		match="Unable to retrieve the GenerateErrorHandler annotation value in method run.",
	) as excinfo:
		extract_use_logging(method, _UnresolvableResolver())
	assert excinfo.value.reason_code == "unresolved-directive"


@pytest.mark.parametrize(
	"fields",
	[
		(),
		((USE_LOGGING, ConstValue.null()),),
		((USE_LOGGING, ConstValue.of_int(1)),),
	],
)
def test_use_logging_absent_null_or_mistyped_reads_false(fields) -> None:
	method = MethodDeclaration(name="run", metadata=[_directive(*fields)])
	assert extract_use_logging(method, AttachedConstantResolver()) is False


def test_use_logging_true() -> None:
	method = MethodDeclaration(name="run", metadata=[generate_error_handler(use_logging=True)])
	assert extract_use_logging(method, AttachedConstantResolver()) is True


def test_catchers_keep_declaration_order() -> None:
	method = MethodDeclaration(
		name="run",
		metadata=[generate_error_handler(catchers=[("StateError", "b"), ("Exception", "a")])],
	)
	assert list(extract_catchers(method, AttachedConstantResolver()).items()) == [
		("StateError", "b"),
		("Exception", "a"),
	]


def test_empty_catchers_map_is_not_absent() -> None:
	method = MethodDeclaration(name="run", metadata=[generate_error_handler(catchers={})])
	assert extract_catchers(method, AttachedConstantResolver()) == {}


def test_null_catchers_read_as_absent() -> None:
	method = MethodDeclaration(name="run", metadata=[_directive((CATCHERS, ConstValue.null()))])
	assert extract_catchers(method, AttachedConstantResolver()) is None


def test_catchers_not_a_map_is_hard_error() -> None:
	value = ConstValue.of_set([ConstValue.of_function("logError")])
	method = MethodDeclaration(name="run", metadata=[_directive((CATCHERS, value))])
	with pytest.raises(InvalidGenerationSourceError, match=r"Catchers must be a Map<Type, Function>\.") as excinfo:
		extract_catchers(method, AttachedConstantResolver())
	assert excinfo.value.reason_code == "invalid-catchers"


@pytest.mark.parametrize(
	"entry",
	[
		(ConstValue.of_string("Exception"), ConstValue.of_function("log")),
		(ConstValue.of_type("Exception"), ConstValue.of_string("log")),
		(ConstValue.of_type("Exception"), None),
	],
)
def test_malformed_catcher_entry_is_hard_error(entry) -> None:
	value = ConstValue.of_map([entry])
	method = MethodDeclaration(name="run", metadata=[_directive((CATCHERS, value))])
	with pytest.raises(InvalidGenerationSourceError, match="Invalid data in catchers: ") as excinfo:
		extract_catchers(method, AttachedConstantResolver(), owner="Foo")
	assert excinfo.value.reason_code == "malformed-catchers"
	assert excinfo.value.element == "Foo.run"


def test_first_directive_wins() -> None:
	first = generate_error_handler(use_logging=False)
	second = generate_error_handler(use_logging=True)
	method = MethodDeclaration(name="run", metadata=[first, second])
	assert find_directive(method) is first
	assert extract_use_logging(method, AttachedConstantResolver()) is False


def test_malformed_message_shows_map() -> None:
	value = ConstValue.of_map([(ConstValue.of_type("Exception"), ConstValue.of_function("log")), (None, None)])
	method = MethodDeclaration(name="run", metadata=[_directive((CATCHERS, value))])
	with pytest.raises(InvalidGenerationSourceError) as excinfo:
		extract_catchers(method, AttachedConstantResolver())
	assert excinfo.value.message == "Invalid data in catchers: {Exception: log, <unresolved>: <unresolved>}"
