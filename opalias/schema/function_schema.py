# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
FunctionSchema: the declarative signature of an operator.

A schema is an ordered list of input arguments and an ordered list of return
values. Each entry has a name, a declared type and an optional alias
annotation. Annotations name *alias sets*: two entries annotated with the same
after-set label may share storage after the call, `!` marks a write, and `*`
means "may alias anything not explicitly tracked".

The predicates here are purely static: they look at annotations and types
only. Binding-aware refinement lives in `opalias.schema_info`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import FrozenSet, Optional, Tuple

from .types import (
	SchemaType,
	TypeKind,
	can_alias_type_sets_alias,
	contained_alias_types,
	map_type_to_alias_type_set,
	union_alias_type_sets,
)

WILDCARD = "*"


@dataclass(frozen=True)
class AliasInfo:
	"""
	Alias annotation on one argument or return.

	`before_sets`/`after_sets` are labels for the storage the value belongs to
	before and after the call; they are equal unless the annotation uses
	`a -> b`. `contained` carries element annotations of lists (`Tensor(a!)[]`).
	"""

	before_sets: FrozenSet[str] = frozenset()
	after_sets: FrozenSet[str] = frozenset()
	is_write: bool = False
	contained: Tuple["AliasInfo", ...] = ()

	@property
	def is_wildcard_before(self) -> bool:
		return WILDCARD in self.before_sets

	@property
	def is_wildcard_after(self) -> bool:
		return WILDCARD in self.after_sets

	def writes(self) -> bool:
		"""True if this annotation, or any contained element annotation, is a write."""
		return self.is_write or any(c.writes() for c in self.contained)

	def __str__(self) -> str:
		before = "|".join(sorted(self.before_sets))
		text = before + ("!" if self.is_write else "")
		if self.after_sets != self.before_sets:
			text += " -> " + "|".join(sorted(self.after_sets))
		return text


@dataclass(frozen=True)
class Argument:
	"""One input argument or return value of a schema."""

	name: str
	type: SchemaType
	alias_info: Optional[AliasInfo] = None
	default: Optional[str] = None  # default value as written in the signature
	kwarg_only: bool = False
	size: Optional[int] = None  # N in `int[N]`

	@property
	def is_mutable(self) -> bool:
		return self.alias_info is not None and self.alias_info.writes()


class SchemaArgType(Enum):
	"""Which list a SchemaArgument indexes into."""

	INPUT = auto()
	OUTPUT = auto()


@dataclass(frozen=True)
class SchemaArgument:
	"""(role, index) reference to an entry of a schema's arguments or returns."""

	role: SchemaArgType
	index: int

	@staticmethod
	def input(index: int) -> "SchemaArgument":
		return SchemaArgument(SchemaArgType.INPUT, index)

	@staticmethod
	def output(index: int) -> "SchemaArgument":
		return SchemaArgument(SchemaArgType.OUTPUT, index)


@dataclass(frozen=True)
class FunctionSchema:
	"""Immutable operator signature; equality is structural over every field."""

	name: str
	overload_name: str = ""
	arguments: Tuple[Argument, ...] = field(default_factory=tuple)
	returns: Tuple[Argument, ...] = field(default_factory=tuple)

	@property
	def qualified_name(self) -> str:
		if self.overload_name:
			return f"{self.name}.{self.overload_name}"
		return self.name

	def argument_index_with_name(self, name: str) -> Optional[int]:
		for idx, arg in enumerate(self.arguments):
			if arg.name == name:
				return idx
		return None

	def get_correct_list(self, role: SchemaArgType) -> Tuple[Argument, ...]:
		if role is SchemaArgType.INPUT:
			return self.arguments
		return self.returns

	def argument_at(self, ref: SchemaArgument) -> Argument:
		"""Return the entry `ref` points at; raises IndexError when out of bounds."""
		entries = self.get_correct_list(ref.role)
		if ref.index < 0 or ref.index >= len(entries):
			raise IndexError(f"Invalid index {ref.index} for {ref.role.name.lower()} list of {self.qualified_name}")
		return entries[ref.index]

	def is_mutable(self, ref: SchemaArgument) -> bool:
		"""Static mutability: the entry carries a write annotation."""
		return self.argument_at(ref).is_mutable

	def may_alias(self, lhs: SchemaArgument, rhs: SchemaArgument) -> bool:
		"""
		Static aliasing: both entries share an after-set label and their
		types can alias.
		"""
		lhs_arg = self.argument_at(lhs)
		rhs_arg = self.argument_at(rhs)
		lhs_types = map_type_to_alias_type_set(lhs_arg.type)
		rhs_types = map_type_to_alias_type_set(rhs_arg.type)
		if not can_alias_type_sets_alias(lhs_types, rhs_types):
			return False
		if lhs_arg.alias_info is None or rhs_arg.alias_info is None:
			return False
		return bool(lhs_arg.alias_info.after_sets & rhs_arg.alias_info.after_sets)

	def may_contain_alias(self, lhs: SchemaArgument, rhs: SchemaArgument, bidirectional: bool = True) -> bool:
		"""
		Static containment: either the entries may alias, or one side is a
		wildcard whose own or contained types can alias the other side.
		"""
		if self.may_alias(lhs, rhs):
			return True
		if bidirectional:
			return self._wildcard_may_contain(lhs, rhs) or self._wildcard_may_contain(rhs, lhs)
		return self._wildcard_may_contain(lhs, rhs)

	def _wildcard_may_contain(self, lhs: SchemaArgument, rhs: SchemaArgument) -> bool:
		lhs_arg = self.argument_at(lhs)
		rhs_arg = self.argument_at(rhs)
		if lhs_arg.alias_info is None or not lhs_arg.alias_info.is_wildcard_after:
			return False
		lhs_reachable = union_alias_type_sets(
			map_type_to_alias_type_set(lhs_arg.type),
			contained_alias_types(lhs_arg.type),
		)
		return can_alias_type_sets_alias(lhs_reachable, map_type_to_alias_type_set(rhs_arg.type))

	def __str__(self) -> str:
		parts: list[str] = []
		kwarg_marked = False
		for arg in self.arguments:
			if arg.kwarg_only and not kwarg_marked:
				parts.append("*")
				kwarg_marked = True
			text = f"{format_type(arg.type, arg.alias_info, arg.size)} {arg.name}"
			if arg.default is not None:
				text += f"={arg.default}"
			parts.append(text)
		rets = [
			(format_type(r.type, r.alias_info, r.size) + (f" {r.name}" if r.name else ""))
			for r in self.returns
		]
		if len(rets) == 1 and not self.returns[0].name:
			ret_text = rets[0]
		else:
			ret_text = "(" + ", ".join(rets) + ")"
		return f"{self.qualified_name}({', '.join(parts)}) -> {ret_text}"


def format_type(ty: SchemaType, alias_info: Optional[AliasInfo], size: Optional[int] = None) -> str:
	"""Render a declared type with its alias annotation in signature syntax."""
	if ty.kind is TypeKind.LIST:
		elem_alias = alias_info.contained[0] if alias_info is not None and alias_info.contained else None
		text = format_type(ty.element, elem_alias) + (f"[{size}]" if size is not None else "[]")
		if alias_info is not None and alias_info.after_sets:
			text += f"({alias_info})"
		return text
	if ty.kind is TypeKind.OPTIONAL:
		return format_type(ty.element, alias_info) + "?"
	text = str(ty)
	if alias_info is not None and alias_info.after_sets:
		text += f"({alias_info})"
	return text


__all__ = [
	"WILDCARD",
	"AliasInfo",
	"Argument",
	"SchemaArgType",
	"SchemaArgument",
	"FunctionSchema",
	"format_type",
]
