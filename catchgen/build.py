# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Part-file builder: one `<name>.g.dart` per source library.

The library-level driver around the engine. It parses a source file, runs
`ErrorHandlersBuilder` over every class carrying `@ErrorHandlersGenerator()`,
wraps the units in the standard generated-part header and reports failures as
Diagnostics. Nothing here raises for bad input; callers inspect
`BuildResult.diagnostics`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from catchgen.config import GeneratorConfig
from catchgen.core.diagnostics import Diagnostic, has_errors
from catchgen.core.span import Span
from catchgen.decls import LibraryDeclaration
from catchgen.emitter import ErrorHandlersBuilder
from catchgen.errors import CatchgenParseError, InvalidGenerationSourceError
from catchgen.inspector import is_marked_class
from catchgen.parser import LibraryConstantResolver, parse_library

GENERATED_HEADER = "// GENERATED CODE - DO NOT MODIFY BY HAND"
GENERATOR_NAME = "ErrorHandlersBuilder"
BANNER_RULE = "// " + "*" * 74
PART_SUFFIX = ".g.dart"


def part_file_name(source_name: str) -> str:
	"""`test_class.dart` → `test_class.g.dart`."""
	stem = source_name[: -len(".dart")] if source_name.endswith(".dart") else source_name
	return stem + PART_SUFFIX


def build_part(
	library: LibraryDeclaration,
	part_of: str,
	builder: Optional[ErrorHandlersBuilder] = None,
) -> Optional[str]:
	"""
	Full text of the generated part for `library`, or None when no marked class
	produces a unit. Units appear in class declaration order. `part_of` is the
	URI of the library relative to the part file.

	InvalidGenerationSourceError from any class propagates; no partial part is
	produced.
	"""
	if builder is None:
		builder = ErrorHandlersBuilder(LibraryConstantResolver(library))
	units: List[str] = []
	for cls in library.classes:
		if not is_marked_class(cls):
			continue
		unit = builder.generate_unit(cls)
		if unit is not None:
			units.append(unit)
	if not units:
		return None
	return (
		f"{GENERATED_HEADER}\n"
		"\n"
		f"part of '{part_of}';\n"
		"\n"
		f"{BANNER_RULE}\n"
		f"// Generator: {GENERATOR_NAME}\n"
		f"{BANNER_RULE}\n"
		"\n" + "\n".join(units)
	)


@dataclass
class BuildResult:
	"""Outcome of building one source file."""

	source: Path
	output: Path
	text: Optional[str] = None
	diagnostics: List[Diagnostic] = field(default_factory=list)
	# True when `output` was (or in check mode would be) rewritten.
	changed: bool = False

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


def output_path(source: Path, config: GeneratorConfig, root: Optional[Path] = None) -> Path:
	"""
	Where the part for `source` goes. With `out_dir`, the source's directory
	relative to `root` is mirrored below it, so equal file names in different
	directories do not share an output.
	"""
	name = part_file_name(source.name)
	if config.out_dir is None:
		return source.with_name(name)
	subdir = Path()
	if root is not None:
		parent, base = source.resolve().parent, root.resolve()
		if parent.is_relative_to(base):
			subdir = parent.relative_to(base)
	return config.out_dir / subdir / name


def relative_uri(target: Path, from_dir: Path) -> str:
	"""POSIX-style URI of `target` as seen from `from_dir`."""
	return Path(os.path.relpath(target, from_dir)).as_posix()


def generate_file(source: Path, config: Optional[GeneratorConfig] = None, root: Optional[Path] = None) -> BuildResult:
	"""Parse and generate one file without touching the output."""
	config = config or GeneratorConfig()
	result = BuildResult(source=source, output=output_path(source, config, root))
	try:
		text = source.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		result.diagnostics.append(
			Diagnostic(message=f"cannot read source: {err}", code="read-failed", phase="io", span=Span(file=str(source)))
		)
		return result
	try:
		library = parse_library(text, str(source))
	except CatchgenParseError as err:
		result.diagnostics.append(err.to_diagnostic())
		return result
	resolver = LibraryConstantResolver(
		library,
		known_types=config.known_types,
		known_functions=config.known_functions,
		assume_imported=config.assume_imported,
	)
	try:
		result.text = build_part(library, relative_uri(source, result.output.parent), ErrorHandlersBuilder(resolver))
	except InvalidGenerationSourceError as err:
		diag = err.to_diagnostic()
		if diag.span.file is None:
			diag.span = replace(diag.span, file=str(source))
		result.diagnostics.append(diag)
		return result
	part_uri = relative_uri(result.output, source.parent)
	if result.text is not None and part_uri not in library.parts:
		result.diagnostics.append(
			Diagnostic(
				message=f"library has no `part '{part_uri}';` directive; the generated code will not be compiled",
				code="missing-part-directive",
				phase="generate",
				severity="warning",
				span=Span(file=str(source)),
			)
		)
	return result


def write_result(result: BuildResult, check: bool = False) -> BuildResult:
	"""
	Write `result.text` to `result.output` when it differs from what is there.

	With `check`, nothing is written; an out-of-date or missing output is
	reported as an error instead. Results without text leave any existing
	output alone, since other generators may share the part file.
	"""
	if not result.ok or result.text is None:
		return result
	try:
		current = result.output.read_text(encoding="utf-8") if result.output.exists() else None
	except OSError as err:
		result.diagnostics.append(
			Diagnostic(message=f"cannot read output: {err}", code="read-failed", phase="io", span=Span(file=str(result.output)))
		)
		return result
	result.changed = current != result.text
	if not result.changed:
		return result
	if check:
		result.diagnostics.append(
			Diagnostic(
				message=f"{result.output.name} is out of date",
				code="stale-output",
				phase="generate",
				span=Span(file=str(result.output)),
			)
		)
		return result
	try:
		result.output.parent.mkdir(parents=True, exist_ok=True)
		result.output.write_text(result.text, encoding="utf-8")
	except OSError as err:
		result.diagnostics.append(
			Diagnostic(message=f"cannot write output: {err}", code="write-failed", phase="io", span=Span(file=str(result.output)))
		)
	return result


def build_file(
	source: Path,
	config: Optional[GeneratorConfig] = None,
	check: bool = False,
	root: Optional[Path] = None,
) -> BuildResult:
	"""Generate and write `<name>.g.dart` for `source`."""
	return write_result(generate_file(source, config, root), check=check)


__all__ = [
	"BANNER_RULE",
	"BuildResult",
	"GENERATED_HEADER",
	"build_file",
	"build_part",
	"generate_file",
	"output_path",
	"part_file_name",
	"relative_uri",
	"write_result",
]
