# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from opalias.core.span import Span
from opalias.schema.function_schema import AliasInfo, Argument, FunctionSchema, WILDCARD
from opalias.schema.types import (
	SchemaType,
	any_type,
	list_of,
	none_type,
	optional_of,
	scalar,
	tensor,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


class SchemaParseError(ValueError):
	"""
	A signature string could not be turned into a FunctionSchema.

	Raised for syntax errors (wrapping lark's UnexpectedInput) and for
	well-formed signatures that name unknown types or repeat argument names.
	"""

	def __init__(self, message: str, span: Span | None = None) -> None:
		self.span = span if span is not None else Span()
		if self.span.is_known:
			message = f"{message} at {self.span.describe()}"
		super().__init__(message)


_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

# Named types that never share storage with anything.
_OPAQUE_TYPE_NAMES = frozenset(
	{
		"int",
		"float",
		"bool",
		"str",
		"complex",
		"Scalar",
		"ScalarType",
		"SymInt",
		"SymFloat",
		"Layout",
		"Device",
		"MemoryFormat",
		"Dimname",
		"Generator",
		"Storage",
		"Stream",
		"QScheme",
	}
)


def parse_schema(signature: str) -> FunctionSchema:
	"""Parse `ns::name.overload(args) -> returns` into a FunctionSchema."""
	try:
		tree = _PARSER.parse(signature)
	except UnexpectedInput as err:
		raise SchemaParseError(f"invalid schema signature {signature!r}", Span.from_lark_error(err)) from err
	return _build_schema(tree)


def _build_schema(tree: Tree) -> FunctionSchema:
	children = list(tree.children)
	name, overload = _build_op_name(children[0])
	arguments: Tuple[Argument, ...] = ()
	idx = 1
	if idx < len(children) and _name(children[idx]) == "params":
		arguments = _build_params(children[idx])
		idx += 1
	returns = _build_returns(children[idx])
	return FunctionSchema(name=name, overload_name=overload, arguments=arguments, returns=returns)


def _build_op_name(tree: Tree) -> Tuple[str, str]:
	names = [c.value for c in tree.children if isinstance(c, Token) and c.type == "NAME"]
	overload_node = next((c for c in tree.children if isinstance(c, Tree) and _name(c) == "overload"), None)
	overload = ""
	if overload_node is not None:
		overload = _first_token(overload_node, "NAME").value
	return "::".join(names), overload


def _build_params(tree: Tree) -> Tuple[Argument, ...]:
	args: List[Argument] = []
	seen: dict[str, Token] = {}
	kwarg_only = False
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "kwarg_marker":
			kwarg_only = True
			continue
		if kind != "argument":
			raise ValueError(f"unexpected params child {kind}")
		arg = _build_argument(child, kwarg_only=kwarg_only)
		name_tok = _first_token(child, "NAME")
		if arg.name in seen:
			raise SchemaParseError(f"duplicate argument name {arg.name!r}", _span_from_token(name_tok))
		seen[arg.name] = name_tok
		args.append(arg)
	return tuple(args)


def _build_argument(tree: Tree, *, kwarg_only: bool) -> Argument:
	type_node = next(c for c in tree.children if isinstance(c, Tree) and _name(c) == "type")
	ty, alias_info, size = _build_type(type_node)
	name_tok = _first_token(tree, "NAME")
	default: Optional[str] = None
	# children: type, NAME, optional default
	if len(tree.children) > 2:
		default = _build_default(tree.children[2])
	return Argument(
		name=name_tok.value,
		type=ty,
		alias_info=alias_info,
		default=default,
		kwarg_only=kwarg_only,
		size=size,
	)


def _build_default(node: Tree | Token) -> str:
	kind = _name(node)
	if kind == "list_literal":
		assert isinstance(node, Tree)
		return "[" + ", ".join(_build_default(c) for c in node.children) + "]"
	if isinstance(node, Tree):
		return str(node.children[0])
	return str(node)


def _build_returns(tree: Tree) -> Tuple[Argument, ...]:
	kind = _name(tree)
	if kind == "single_return":
		ty, alias_info, size = _build_type(tree.children[0])
		return (Argument(name="", type=ty, alias_info=alias_info, size=size),)
	if kind == "tuple_return":
		rets: List[Argument] = []
		for ret in tree.children:
			type_node = ret.children[0]
			ty, alias_info, size = _build_type(type_node)
			name_tok = next((c for c in ret.children if isinstance(c, Token) and c.type == "NAME"), None)
			rets.append(
				Argument(
					name=name_tok.value if name_tok is not None else "",
					type=ty,
					alias_info=alias_info,
					size=size,
				)
			)
		return tuple(rets)
	raise ValueError(f"unexpected returns node {kind}")


def _build_type(tree: Tree) -> Tuple[SchemaType, Optional[AliasInfo], Optional[int]]:
	"""
	Build (type, alias annotation, list size) for a `type` node.

	An annotation written before `[]` belongs to the elements and is moved into
	the list annotation's `contained`; `?` leaves the annotation in place
	because optionals alias like their element.
	"""
	name_tok = tree.children[0]
	assert isinstance(name_tok, Token)
	ty = _base_type(name_tok)
	alias_info: Optional[AliasInfo] = None
	size: Optional[int] = None
	for child in tree.children[1:]:
		kind = _name(child)
		if kind == "alias":
			alias_info = _build_alias(child)
		elif kind == "list_suffix":
			ty = list_of(ty)
			size_tok = next((c for c in child.children if isinstance(c, Token) and c.type == "INT"), None)
			size = int(size_tok.value) if size_tok is not None else None
			outer_node = next((c for c in child.children if isinstance(c, Tree) and _name(c) == "alias"), None)
			outer = _build_alias(outer_node) if outer_node is not None else None
			if alias_info is not None:
				base = outer if outer is not None else AliasInfo()
				alias_info = AliasInfo(
					before_sets=base.before_sets,
					after_sets=base.after_sets,
					is_write=base.is_write,
					contained=(alias_info,),
				)
			else:
				alias_info = outer
		elif kind == "optional_suffix":
			ty = optional_of(ty)
		else:
			raise ValueError(f"unexpected type suffix {kind}")
	return ty, alias_info, size


def _base_type(tok: Token) -> SchemaType:
	name = tok.value
	if name == "Tensor":
		return tensor()
	if name == "Any":
		return any_type()
	if name in ("None", "NoneType"):
		return none_type()
	if name in _OPAQUE_TYPE_NAMES:
		return scalar(name)
	raise SchemaParseError(f"unknown type {name!r}", _span_from_token(tok))


def _build_alias(tree: Tree) -> AliasInfo:
	sets_nodes = [c for c in tree.children if isinstance(c, Tree) and _name(c) == "alias_sets"]
	before = _alias_labels(sets_nodes[0])
	is_write = any(isinstance(c, Tree) and _name(c) == "write_mark" for c in tree.children)
	after = before
	after_node = next((c for c in tree.children if isinstance(c, Tree) and _name(c) == "alias_after"), None)
	if after_node is not None:
		after = _alias_labels(next(c for c in after_node.children if isinstance(c, Tree) and _name(c) == "alias_sets"))
		is_write = is_write or any(isinstance(c, Tree) and _name(c) == "write_mark" for c in after_node.children)
	return AliasInfo(before_sets=before, after_sets=after, is_write=is_write)


def _alias_labels(tree: Tree) -> frozenset[str]:
	labels: set[str] = set()
	for child in tree.children:
		if isinstance(child, Token):
			labels.add(child.value)
		elif _name(child) == "wildcard":
			labels.add(WILDCARD)
	return frozenset(labels)


def _first_token(tree: Tree, token_type: str) -> Token:
	return next(c for c in tree.children if isinstance(c, Token) and c.type == token_type)


def _span_from_token(tok: Token) -> Span:
	column = tok.column if tok.column is not None else None
	end = column + len(tok.value) if column is not None else None
	return Span(line=tok.line, column=column, end_column=end, raw=tok)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)
