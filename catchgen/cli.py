# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`catchgen` command line.

	catchgen lib/test_class.dart            # writes lib/test_class.g.dart
	catchgen lib --check                    # fail if any output is stale
	catchgen lib/test_class.dart --stdout   # print instead of writing
	catchgen lib --json                     # machine-readable diagnostics

Exit codes: 0 success, 1 when any error diagnostic was reported, 2 for usage
errors (argparse).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Tuple

from catchgen.build import PART_SUFFIX, BuildResult, generate_file, write_result
from catchgen.config import GeneratorConfig, find_config, load_config_json
from catchgen.core.diagnostics import Diagnostic, diagnostic_to_json, format_diagnostic, has_errors
from catchgen.core.span import Span


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="catchgen",
		description="Generate error-catching wrapper extensions for annotated Dart classes",
	)
	p.add_argument("sources", nargs="+", type=Path, help="Dart source files or directories to scan")
	p.add_argument("--config", type=Path, default=None, help="Path to catchgen.json (default: nearest in cwd or a parent)")
	p.add_argument("--out-dir", type=Path, default=None, help="Write .g.dart files here instead of beside each source")
	p.add_argument(
		"--known-type",
		dest="known_types",
		action="append",
		default=[],
		metavar="NAME",
		help="Treat NAME as a type in annotation arguments (repeatable)",
	)
	p.add_argument(
		"--known-function",
		dest="known_functions",
		action="append",
		default=[],
		metavar="NAME",
		help="Treat NAME as a function in annotation arguments (repeatable)",
	)
	p.add_argument(
		"--no-assume-imported",
		dest="assume_imported",
		action="store_const",
		const=False,
		default=None,
		help="Reject identifiers that are neither declared in the file nor listed as known",
	)
	mode = p.add_mutually_exclusive_group()
	mode.add_argument("--check", action="store_true", help="Do not write; fail if an output is missing or out of date")
	mode.add_argument("--stdout", action="store_true", help="Print generated parts to stdout instead of writing them")
	p.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	return p


def _collect_sources(paths: List[Path], diagnostics: List[Diagnostic]) -> List[Tuple[Path, Path]]:
	"""`(source, root)` pairs; `root` is the directory an output layout is mirrored from."""
	out: List[Tuple[Path, Path]] = []
	for path in paths:
		if path.is_dir():
			out.extend(
				(p, path)
				for p in sorted(path.rglob("*.dart"))
				if p.is_file() and not p.name.endswith(PART_SUFFIX)
			)
		elif path.is_file():
			out.append((path, path.parent))
		else:
			diagnostics.append(
				Diagnostic(message=f"no such file or directory: {path}", code="not-found", phase="io", span=Span(file=str(path)))
			)
	return out


def _load_config(args: argparse.Namespace, diagnostics: List[Diagnostic]) -> GeneratorConfig:
	config_path = args.config if args.config is not None else find_config(Path.cwd())
	config = GeneratorConfig()
	if config_path is not None:
		try:
			config = load_config_json(config_path)
		except (OSError, ValueError) as err:
			diagnostics.append(
				Diagnostic(message=str(err), code="bad-config", phase="config", span=Span(file=str(config_path)))
			)
	return config.merged(
		known_types=args.known_types,
		known_functions=args.known_functions,
		assume_imported=args.assume_imported,
		out_dir=args.out_dir,
	)


def _collision(result: BuildResult, owner: Path) -> Diagnostic:
	return Diagnostic(
		message=f"{result.output} is also generated from {owner}; not written",
		code="output-collision",
		phase="generate",
		span=Span(file=str(result.source)),
	)


def _emit(diagnostics: List[Diagnostic], as_json: bool) -> int:
	exit_code = 1 if has_errors(diagnostics) else 0
	if as_json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [diagnostic_to_json(d) for d in diagnostics],
		}
		print(json.dumps(payload))
	else:
		for diag in diagnostics:
			print(format_diagnostic(diag), file=sys.stderr)
	return exit_code


def main(argv: list[str] | None = None) -> int:
	"""
	Build `.g.dart` parts for every source. All sources are processed even when
	some fail, so one run reports every problem.
	"""
	parser = _build_parser()
	args = parser.parse_args(argv)

	diagnostics: List[Diagnostic] = []
	config = _load_config(args, diagnostics)
	if has_errors(diagnostics):
		return _emit(diagnostics, args.json)
	sources = _collect_sources(list(args.sources), diagnostics)

	results: List[BuildResult] = []
	claimed: Dict[Path, Path] = {}
	for source, root in sources:
		result = generate_file(source, config, root)
		if not args.stdout and result.text is not None:
			owner = claimed.setdefault(result.output.resolve(), source)
			if owner.resolve() != source.resolve():
				result.diagnostics.append(_collision(result, owner))
			else:
				write_result(result, check=args.check)
		results.append(result)
		diagnostics.extend(result.diagnostics)

	if args.stdout and not args.json:
		for result in results:
			if result.ok and result.text is not None:
				sys.stdout.write(result.text)
	return _emit(diagnostics, args.json)


__all__ = ["main"]
