# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark front end for the Dart declaration subset.

The grammar keeps bodies, initializer lists and default values as balanced
token groups; the builders below recover types and defaults as source slices
(whitespace collapsed) so the engine can re-emit them verbatim.

Annotation elements are left unresolved here; `catchgen.parser.resolve`
links them once the whole library is known.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from catchgen.core.span import Span
from catchgen.decls import (
	AnnotationInstance,
	ClassDeclaration,
	ImportDirective,
	LibraryDeclaration,
	MethodDeclaration,
	ParamKind,
	Parameter,
)
from catchgen.errors import CatchgenParseError
from .ast import (
	BoolLit,
	CallExpr,
	ConstArgs,
	ConstExpr,
	ListLit,
	MapOrSetLit,
	NullLit,
	NumberLit,
	Ref,
	StringLit,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

# Leading words of a declaration head that are not part of its type.
_MODIFIERS = frozenset(
	{
		"abstract",
		"const",
		"covariant",
		"external",
		"factory",
		"final",
		"late",
		"required",
		"static",
		"var",
	}
)
_ACCESSORS = frozenset({"get", "set"})

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v"}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.S)

Node = Union[Tree, Token]


def parse_tree(source: str) -> Tree:
	"""Raw lark tree for `source` (used by tests and debugging)."""
	return _PARSER.parse(source)


def build_library(source: str, path: Optional[str] = None) -> LibraryDeclaration:
	"""
	Parse `source` into an unlinked LibraryDeclaration.

	Raises CatchgenParseError for input outside the supported subset.
	"""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		raise _syntax_error(err, path) from None
	return _Builder(source, path).library(tree)


def _syntax_error(err: UnexpectedInput, path: Optional[str]) -> CatchgenParseError:
	span = Span(file=path, line=getattr(err, "line", None), column=getattr(err, "column", None))
	if isinstance(err, UnexpectedEOF):
		return CatchgenParseError("unexpected end of input", span)
	if isinstance(err, UnexpectedCharacters):
		return CatchgenParseError(f"unexpected character {err.char!r}", span)
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			return CatchgenParseError("unexpected end of input", span)
		return CatchgenParseError(f"unexpected {err.token.value!r}", span)
	return CatchgenParseError(str(err), span)


def _name(node: Node) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	return node.type


def _is_tok(node: Node, kind: str) -> bool:
	return isinstance(node, Token) and node.type == kind


def _subtrees(tree: Tree, kind: str) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree) and _name(c) == kind]


def _subtree(tree: Tree, kind: str) -> Optional[Tree]:
	found = _subtrees(tree, kind)
	return found[0] if found else None


def _start_pos(node: Node) -> int:
	return node.start_pos if isinstance(node, Token) else node.meta.start_pos


def _end_pos(node: Node) -> int:
	return node.end_pos if isinstance(node, Token) else node.meta.end_pos


def _squash(text: str) -> str:
	return " ".join(text.split())


def _split_top_level(text: str) -> List[str]:
	"""Split on commas that are not nested in brackets of any kind."""
	parts: List[str] = []
	depth = 0
	cur = []
	for ch in text:
		if ch in "<([{":
			depth += 1
		elif ch in ">)]}":
			depth -= 1
		if ch == "," and depth == 0:
			parts.append("".join(cur))
			cur = []
			continue
		cur.append(ch)
	parts.append("".join(cur))
	return [_squash(p) for p in parts if p.strip()]


def _unescape(body: str) -> str:
	def sub(m: re.Match) -> str:
		esc = m.group(1)
		if esc.startswith("u{"):
			return chr(int(esc[2:-1], 16))
		if esc[0] in "ux" and len(esc) > 1:
			return chr(int(esc[1:], 16))
		return _ESCAPES.get(esc, esc)

	return _ESCAPE_RE.sub(sub, body)


def _decode_string(tok: Token) -> str:
	text = tok.value
	is_raw = text.startswith("r")
	if is_raw:
		text = text[1:]
	quote = 3 if text[:3] in ("'''", '"""') else 1
	body = text[quote:-quote]
	return body if is_raw else _unescape(body)


@dataclass
class _Head:
	"""Pieces of a declaration head: `static Future<void> run<T>`."""

	modifiers: Tuple[str, ...] = ()
	type_text: Optional[str] = None
	name: Optional[Token] = None
	# `Foo` in `Foo.named(...)` or `this` in `this.x`.
	qualifier: Optional[str] = None
	accessor: Optional[str] = None
	is_operator: bool = False
	type_params: List[str] = field(default_factory=list)
	first_word: Optional[str] = None


class _Builder:
	def __init__(self, source: str, path: Optional[str]) -> None:
		self.src = source
		self.path = path

	def span(self, node: Node) -> Span:
		return Span.from_loc(node, file=self.path)

	def slice(self, first: Node, last: Node) -> str:
		return self.src[_start_pos(first) : _end_pos(last)]

	def inner(self, group: Tree) -> str:
		"""Text between the opening and closing token of a bracketed group."""
		return self.src[_end_pos(group.children[0]) : _start_pos(group.children[-1])]

	def angle_params(self, angle: Tree) -> List[str]:
		return _split_top_level(self.inner(angle))

	# Library

	def library(self, tree: Tree) -> LibraryDeclaration:
		lib = LibraryDeclaration(path=self.path)
		for item in tree.children:
			kind = _name(item)
			if kind == "directive":
				self.directive(item, lib)
			elif kind == "class_decl":
				lib.classes.append(self.class_decl(item))
			elif kind == "type_decl":
				self.type_decl(item, lib)
			elif kind == "member":
				self.top_level_member(item, lib)
		return lib

	def directive(self, tree: Tree, lib: LibraryDeclaration) -> None:
		toks = [c for c in tree.children if isinstance(c, Token)]
		kw = toks[0].type
		strings = [t for t in toks if t.type == "STRING"]
		words = [t.value for t in toks if t.type == "NAME"]
		if kw == "IMPORT":
			if not strings:
				raise CatchgenParseError("import directive without a URI", self.span(tree))
			prefix = None
			show: List[str] = []
			after_uri = [t for t in toks[1:] if t.start_pos > strings[0].start_pos]
			mode = None
			for tok in after_uri:
				if tok.type != "NAME":
					continue
				if tok.value in ("as", "show", "hide"):
					mode = tok.value
				elif mode == "as" and prefix is None:
					prefix = tok.value
				elif mode == "show":
					show.append(tok.value)
			lib.imports.append(ImportDirective(_decode_string(strings[0]), prefix, tuple(show)))
		elif kw == "PART":
			if words and words[0] == "of":
				lib.part_of = _decode_string(strings[0]) if strings else ".".join(words[1:])
			elif strings:
				lib.parts.append(_decode_string(strings[0]))

	def type_decl(self, tree: Tree, lib: LibraryDeclaration) -> None:
		kw = next(c for c in tree.children if isinstance(c, Token) and c.type in ("ENUM", "MIXIN", "EXTENSION"))
		names = [c.value for c in tree.children if _is_tok(c, "NAME") and c.start_pos > kw.start_pos]
		if kw.type == "EXTENSION":
			# Only `extension type X(...)` declares a type.
			if len(names) >= 2 and names[0] == "type":
				lib.types.append(names[1])
			return
		if names:
			lib.types.append(names[0])

	def top_level_member(self, tree: Tree, lib: LibraryDeclaration) -> None:
		head = self.head(_subtree(tree, "head"))
		if head.is_operator or head.name is None:
			return
		if head.first_word == "typedef":
			lib.types.append(head.name.value)
			return
		if _subtree(tree, "params") is not None:
			if head.accessor is None:
				lib.functions.append(head.name.value)
			return
		# Variables and getters.
		lib.variables.append(head.name.value)
		tail = _subtree(tree, "field_tail")
		if tail is None:
			return
		for more in _subtrees(tail, "var_more"):
			lib.variables.append(next(c.value for c in more.children if _is_tok(c, "NAME")))

	# Classes

	def class_decl(self, tree: Tree) -> ClassDeclaration:
		name_tok = next(c for c in tree.children if _is_tok(c, "NAME"))
		angle = next(
			(c for c in tree.children if isinstance(c, Tree) and _name(c) == "angle" and _start_pos(c) > name_tok.start_pos),
			None,
		)
		cls = ClassDeclaration(
			name=name_tok.value,
			metadata=[self.metadata(m) for m in _subtrees(tree, "metadata")],
			type_params=self.angle_params(angle) if angle is not None else [],
			span=self.span(name_tok),
		)
		for member in _subtrees(tree, "member"):
			method = self.method(member, cls.name)
			if method is not None:
				cls.methods.append(method)
		return cls

	def method(self, tree: Tree, class_name: str) -> Optional[MethodDeclaration]:
		"""MethodDeclaration for a plain or static method, None for other members."""
		params = _subtree(tree, "params")
		if params is None or _subtree(tree, "initializers") is not None:
			return None
		head = self.head(_subtree(tree, "head"))
		if head.is_operator or head.name is None or head.accessor is not None:
			return None
		if head.qualifier is not None or "factory" in head.modifiers:
			return None
		if head.name.value == class_name:
			return None
		return MethodDeclaration(
			name=head.name.value,
			parameters=self.params(params),
			metadata=[self.metadata(m) for m in _subtrees(tree, "metadata")],
			type_params=head.type_params,
			is_static="static" in head.modifiers,
			span=self.span(head.name),
		)

	def head(self, tree: Tree) -> _Head:
		items: List[Node] = list(tree.children)
		out = _Head()
		if _is_tok(items[0], "NAME"):
			out.first_word = items[0].value
		if _name(items[-1]) == "operator":
			out.is_operator = True
			return out
		if len(items) > 1 and _name(items[-1]) == "angle" and _is_tok(items[-2], "NAME"):
			out.type_params = self.angle_params(items[-1])
			items = items[:-1]
		if not _is_tok(items[-1], "NAME"):
			return out
		out.name = items[-1]
		rest = items[:-1]
		if rest and _is_tok(rest[-1], "DOT"):
			if len(rest) >= 2 and _is_tok(rest[-2], "NAME"):
				out.qualifier = rest[-2].value
			rest = rest[:-2]
		mods: List[str] = []
		while rest and _is_tok(rest[0], "NAME") and rest[0].value in _MODIFIERS:
			mods.append(rest[0].value)
			rest = rest[1:]
		if rest and _is_tok(rest[-1], "NAME") and rest[-1].value in _ACCESSORS:
			out.accessor = rest[-1].value
			rest = rest[:-1]
		out.modifiers = tuple(mods)
		if rest:
			out.type_text = _squash(self.slice(rest[0], rest[-1]))
		return out

	# Parameters

	def params(self, tree: Tree) -> List[Parameter]:
		out: List[Parameter] = []
		for child in tree.children:
			kind = _name(child)
			if kind == "param":
				out.append(self.param(child, ParamKind.POSITIONAL))
			elif kind == "optional_group":
				out.extend(self.param(p, ParamKind.OPTIONAL_POSITIONAL) for p in _subtrees(child, "param"))
			elif kind == "named_group":
				out.extend(self.param(p, ParamKind.NAMED) for p in _subtrees(child, "param"))
		return out

	def param(self, tree: Tree, kind: ParamKind) -> Parameter:
		head = self.head(_subtree(tree, "head"))
		if head.name is None:
			raise CatchgenParseError("expected a parameter name", self.span(tree))
		type_text = head.type_text
		nested = _subtree(tree, "params")
		if nested is not None:
			# `void cb(int x)` is re-emitted as `void Function(int x) cb`.
			fn = f"Function({_squash(self.inner(nested))})"
			type_text = f"{type_text} {fn}" if type_text else fn
		default = None
		dflt = _subtree(tree, "default")
		if dflt is not None:
			expr = _subtree(dflt, "expr")
			default = self.src[_start_pos(expr) : _end_pos(expr)].strip()
		return Parameter(
			name=head.name.value,
			type=type_text,
			kind=kind,
			modifiers=head.modifiers,
			default=default,
		)

	# Annotations

	def metadata(self, tree: Tree) -> AnnotationInstance:
		qualified = _subtree(tree, "qualified")
		args = _subtree(tree, "const_args")
		return AnnotationInstance(
			name=".".join(self.qualified(qualified)),
			arguments=self.const_args(args) if args is not None else None,
			span=self.span(tree),
		)

	def qualified(self, tree: Tree) -> List[str]:
		return [c.value for c in tree.children if _is_tok(c, "NAME")]

	def const_args(self, tree: Tree) -> ConstArgs:
		out = ConstArgs()
		for child in tree.children:
			if isinstance(child, Token):
				continue
			if _name(child) == "named_arg":
				name_tok, _, value = child.children
				out.named.append((name_tok.value, self.const_expr(value)))
			else:
				out.positional.append(self.const_expr(child))
		return out

	def const_expr(self, tree: Tree) -> ConstExpr:
		kind = _name(tree)
		loc = self.span(tree)
		if kind == "string_lit":
			return StringLit("".join(_decode_string(t) for t in tree.children), loc)
		if kind == "number_lit":
			return NumberLit(tree.children[0].value, loc)
		if kind == "neg_number_lit":
			return NumberLit("-" + tree.children[0].value, loc)
		if kind in ("true_lit", "false_lit"):
			return BoolLit(kind == "true_lit", loc)
		if kind == "null_lit":
			return NullLit(loc)
		if kind == "ref":
			return Ref(self.qualified(tree.children[0]), loc)
		if kind == "call":
			angle = _subtree(tree, "angle")
			return CallExpr(
				target=self.qualified(_subtree(tree, "qualified")),
				args=self.const_args(_subtree(tree, "const_args")),
				type_args=_squash(self.inner(angle)) if angle is not None else None,
				loc=loc,
			)
		if kind == "collection_lit":
			return self.collection(tree, loc)
		raise CatchgenParseError(f"unsupported constant expression '{kind}'", loc)

	def collection(self, tree: Tree, loc: Span) -> ConstExpr:
		angle = _subtree(tree, "angle")
		type_args = _squash(self.inner(angle)) if angle is not None else None
		braces = _subtree(tree, "brace_lit")
		if braces is not None:
			entries: List[Tuple[ConstExpr, Optional[ConstExpr]]] = []
			for entry in _subtrees(braces, "entry"):
				exprs = [self.const_expr(c) for c in entry.children if isinstance(c, Tree)]
				entries.append((exprs[0], exprs[1] if len(exprs) > 1 else None))
			return MapOrSetLit(entries, type_args, loc)
		items = _subtree(tree, "list_lit")
		return ListLit([self.const_expr(c) for c in items.children if isinstance(c, Tree)], type_args, loc)


__all__ = ["build_library", "parse_tree"]
