# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Declared types of schema arguments and their alias classes.

SchemaType is a small structural type: a kind, a display name and the
contained element types. Types are frozen and hashable so they can be used
directly as members of an alias type set.

An *alias type set* answers "what kind of storage could a value of this type
share with another value?". It is None for types that can never alias
(scalars, None); otherwise it is the frozenset of mutable types the value may
carry at its top level.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import FrozenSet, Iterable, Optional, Tuple


class TypeKind(Enum):
	"""Kinds of declared types understood by the alias analysis."""

	TENSOR = auto()
	LIST = auto()
	OPTIONAL = auto()
	TUPLE = auto()
	DICT = auto()
	CLASS = auto()
	ANY = auto()
	SCALAR = auto()    # int, float, bool, str, Scalar, ScalarType, Device, ...
	NONE = auto()


@dataclass(frozen=True)
class SchemaType:
	"""A declared argument/return type."""

	kind: TypeKind
	name: str
	contained: Tuple["SchemaType", ...] = ()

	def __str__(self) -> str:
		if self.kind is TypeKind.LIST:
			return f"{self.contained[0]}[]"
		if self.kind is TypeKind.OPTIONAL:
			return f"{self.contained[0]}?"
		if self.kind is TypeKind.TUPLE:
			return "(" + ", ".join(str(t) for t in self.contained) + ")"
		if self.kind is TypeKind.DICT:
			return f"Dict({self.contained[0]}, {self.contained[1]})"
		return self.name

	@property
	def element(self) -> "SchemaType":
		"""Element type of a list or optional."""
		if self.kind not in (TypeKind.LIST, TypeKind.OPTIONAL):
			raise TypeError(f"{self} has no single element type")
		return self.contained[0]


def tensor() -> SchemaType:
	return SchemaType(TypeKind.TENSOR, "Tensor")


def scalar(name: str) -> SchemaType:
	return SchemaType(TypeKind.SCALAR, name)


def none_type() -> SchemaType:
	return SchemaType(TypeKind.NONE, "NoneType")


def any_type() -> SchemaType:
	return SchemaType(TypeKind.ANY, "Any")


def class_type(name: str) -> SchemaType:
	return SchemaType(TypeKind.CLASS, name)


def list_of(elem: SchemaType) -> SchemaType:
	return SchemaType(TypeKind.LIST, "List", (elem,))


def optional_of(elem: SchemaType) -> SchemaType:
	return SchemaType(TypeKind.OPTIONAL, "Optional", (elem,))


def tuple_of(*elems: SchemaType) -> SchemaType:
	return SchemaType(TypeKind.TUPLE, "Tuple", tuple(elems))


def dict_of(key: SchemaType, value: SchemaType) -> SchemaType:
	return SchemaType(TypeKind.DICT, "Dict", (key, value))


AliasTypeSet = FrozenSet[SchemaType]

# Kinds whose values are reference-like and alias as themselves.
_SELF_ALIASING_KINDS = frozenset({TypeKind.TENSOR, TypeKind.LIST, TypeKind.DICT, TypeKind.CLASS, TypeKind.ANY})


def map_type_to_alias_type_set(ty: SchemaType) -> Optional[AliasTypeSet]:
	"""
	Map a declared type to its alias type set.

	- Tensors, lists, dicts, classes and Any alias as themselves.
	- Optionals are transparent: `Tensor?` aliases like `Tensor`.
	- Tuples are immutable; they alias through their aliasable elements, which
	  are collected into a single synthetic tuple type.
	- Everything else never aliases (None).
	"""
	if ty.kind in _SELF_ALIASING_KINDS:
		return frozenset({ty})
	if ty.kind is TypeKind.OPTIONAL:
		return map_type_to_alias_type_set(ty.element)
	if ty.kind is TypeKind.TUPLE:
		mutable: list[SchemaType] = []
		for inner in ty.contained:
			inner_set = map_type_to_alias_type_set(inner)
			if inner_set is not None:
				mutable.extend(sorted(inner_set, key=str))
		if not mutable:
			return None
		return frozenset({tuple_of(*mutable)})
	return None


def can_alias_type_sets_alias(lhs: Optional[AliasTypeSet], rhs: Optional[AliasTypeSet]) -> bool:
	"""Return True when some member of `lhs` may share storage with some member of `rhs`."""
	if lhs is None or rhs is None:
		return False
	for lhs_type in lhs:
		for rhs_type in rhs:
			if lhs_type == rhs_type:
				return True
			# Any may hold a value of every aliasable type.
			if lhs_type.kind is TypeKind.ANY or rhs_type.kind is TypeKind.ANY:
				return True
	return False


def _element_types(ty: SchemaType) -> Iterable[SchemaType]:
	if ty.kind is TypeKind.DICT:
		# Keys are hashed by value; only values can be handed out by reference.
		return ty.contained[1:]
	return ty.contained


def contained_alias_types(ty: SchemaType) -> Optional[AliasTypeSet]:
	"""
	Alias types reachable strictly inside `ty` (transitively).

	Returns None when nothing inside `ty` can alias. `Tensor[]`, `Tensor?` and
	`(Tensor, int)` all contain `Tensor`; a bare `Tensor` contains nothing.
	"""
	found: set[SchemaType] = set()
	stack = list(_element_types(ty))
	seen: set[SchemaType] = set()
	while stack:
		current = stack.pop()
		if current in seen:
			continue
		seen.add(current)
		current_set = map_type_to_alias_type_set(current)
		if current_set is not None:
			found.update(current_set)
		stack.extend(_element_types(current))
	if not found:
		return None
	return frozenset(found)


def is_container_type(ty: SchemaType) -> bool:
	"""True when values of `ty` can hold other aliasable values."""
	return contained_alias_types(ty) is not None


def union_alias_type_sets(*sets: Optional[AliasTypeSet]) -> Optional[AliasTypeSet]:
	out: set[SchemaType] = set()
	for s in sets:
		if s is not None:
			out.update(s)
	return frozenset(out) if out else None


__all__ = [
	"TypeKind",
	"SchemaType",
	"AliasTypeSet",
	"tensor",
	"scalar",
	"none_type",
	"any_type",
	"class_type",
	"list_of",
	"optional_of",
	"tuple_of",
	"dict_of",
	"map_type_to_alias_type_set",
	"can_alias_type_sets_alias",
	"contained_alias_types",
	"is_container_type",
	"union_alias_type_sets",
]
