# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Runtime values that can be bound to schema arguments.

The analysis never looks at payloads. It needs two capabilities from every
bound value:

  * `is_alias_of(other)`: do the two values share storage? This is an
    identity test (same storage object), never structural equality.
  * `sub_values()`: every aliasable value reachable from this one, including
    itself when it is aliasable. Containers recurse into their items.

Tensors alias through a shared `Storage`; views are new TensorValues on the
same storage. Lists, tuples and dicts alias by object identity. Scalars never
alias.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

_storage_ids = itertools.count(1)


class IValue:
	"""Base class for bound values."""

	def is_alias_of(self, other: "IValue") -> bool:
		return False

	def sub_values(self) -> Iterator["IValue"]:
		"""Yield every aliasable value reachable from this one (depth first)."""
		return iter(())

	def to_bool(self) -> bool:
		raise TypeError(f"expected a bool value, got {self!r}")

	def contains_alias_of(self, other: "IValue") -> bool:
		"""True when some sub-value of this value aliases `other`."""
		return any(sub.is_alias_of(other) for sub in self.sub_values())


class Storage:
	"""Opaque storage identity. Two tensors alias iff they share a Storage."""

	__slots__ = ("storage_id", "label")

	def __init__(self, label: str | None = None) -> None:
		self.storage_id = next(_storage_ids)
		self.label = label

	def __repr__(self) -> str:
		if self.label:
			return f"Storage({self.label!r})"
		return f"Storage(#{self.storage_id})"


@dataclass(eq=False)
class TensorValue(IValue):
	"""A tensor; `storage=None` is an undefined tensor, which aliases nothing."""

	storage: Storage | None = field(default_factory=Storage)

	def is_alias_of(self, other: IValue) -> bool:
		if not isinstance(other, TensorValue):
			return False
		if self.storage is None or other.storage is None:
			return False
		return self.storage is other.storage

	def sub_values(self) -> Iterator[IValue]:
		if self.storage is not None:
			yield self

	def view(self) -> "TensorValue":
		"""A new tensor sharing this tensor's storage."""
		return TensorValue(self.storage)


@dataclass(eq=False)
class _ContainerValue(IValue):
	items: Tuple[IValue, ...] = ()

	def is_alias_of(self, other: IValue) -> bool:
		return self is other

	def sub_values(self) -> Iterator[IValue]:
		yield self
		for item in self.items:
			yield from item.sub_values()


@dataclass(eq=False)
class ListValue(_ContainerValue):
	pass


@dataclass(eq=False)
class TupleValue(_ContainerValue):
	"""Tuples are immutable; they only alias through their items."""

	def is_alias_of(self, other: IValue) -> bool:
		return False

	def sub_values(self) -> Iterator[IValue]:
		for item in self.items:
			yield from item.sub_values()


@dataclass(eq=False)
class DictValue(IValue):
	entries: Tuple[Tuple[IValue, IValue], ...] = ()

	def is_alias_of(self, other: IValue) -> bool:
		return self is other

	def sub_values(self) -> Iterator[IValue]:
		yield self
		for key, value in self.entries:
			yield from key.sub_values()
			yield from value.sub_values()


@dataclass(frozen=True)
class ScalarValue(IValue):
	"""int/float/bool/str/None payload; never aliases."""

	value: Any = None

	def to_bool(self) -> bool:
		if isinstance(self.value, bool):
			return self.value
		raise TypeError(f"expected a bool value, got {self.value!r}")


# id(source object) -> (source object, IValue). The source object is held so
# its id cannot be reused while the memo lives.
ConversionMemo = Dict[int, Tuple[Any, IValue]]


def to_ivalue(obj: Any, memo: Optional[ConversionMemo] = None) -> IValue:
	"""
	Wrap a Python object as an IValue.

	IValues pass through; bool/int/float/str/None become ScalarValue; lists,
	tuples and mappings wrap their items recursively.

	Lists and mappings alias by identity, so the same Python container must
	always become the same IValue. Pass one `memo` for every conversion whose
	results are compared (SchemaInfo keeps one per instance); without it each
	call wraps a container afresh. A container is read when it is first
	converted; later changes to the Python object are not seen.
	"""
	if isinstance(obj, IValue):
		return obj
	if obj is None or isinstance(obj, (bool, int, float, complex, str)):
		return ScalarValue(obj)
	if memo is None:
		memo = {}
	seen = memo.get(id(obj))
	if seen is not None:
		return seen[1]
	value: IValue
	if isinstance(obj, list):
		value = ListValue(tuple(to_ivalue(o, memo) for o in obj))
	elif isinstance(obj, tuple):
		value = TupleValue(tuple(to_ivalue(o, memo) for o in obj))
	elif isinstance(obj, Mapping):
		value = DictValue(tuple((to_ivalue(k, memo), to_ivalue(v, memo)) for k, v in obj.items()))
	else:
		raise TypeError(f"cannot bind value of type {type(obj).__name__}")
	memo[id(obj)] = (obj, value)
	return value


def list_value(items: Iterable[Any], memo: Optional[ConversionMemo] = None) -> ListValue:
	if memo is None:
		memo = {}
	return ListValue(tuple(to_ivalue(i, memo) for i in items))


__all__ = [
	"IValue",
	"Storage",
	"TensorValue",
	"ListValue",
	"TupleValue",
	"DictValue",
	"ScalarValue",
	"ConversionMemo",
	"to_ivalue",
	"list_value",
]
