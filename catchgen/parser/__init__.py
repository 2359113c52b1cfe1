# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Dart declaration front end.

`parse_library` turns source text into a linked `LibraryDeclaration` whose
annotations carry resolved elements; pair it with `LibraryConstantResolver`
to evaluate annotation arguments.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from catchgen.decls import LibraryDeclaration
from .parser import build_library, parse_tree
from .resolve import LibraryConstantResolver, link_library, resolve_annotation_element


def parse_library(source: str, path: Optional[str] = None) -> LibraryDeclaration:
	"""Parse and link one library. Raises CatchgenParseError on bad syntax."""
	return link_library(build_library(source, path))


def parse_library_file(path: Union[str, Path]) -> LibraryDeclaration:
	p = Path(path)
	return parse_library(p.read_text(encoding="utf-8"), str(p))


__all__ = [
	"LibraryConstantResolver",
	"link_library",
	"parse_library",
	"parse_library_file",
	"parse_tree",
	"resolve_annotation_element",
]
