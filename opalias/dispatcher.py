# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Operator registry: (qualified name, overload) -> capability tags.

The registry does not dispatch anything; the analysis only asks whether a
registered operator carries a tag. A missing operator is not an error, it
simply carries no tags.

`Dispatcher.singleton()` is the process-wide registry. It is built once under
a lock and seeded with the aten operators whose results depend on the random
seed. Tests and embedders that need a different view construct their own
`Dispatcher()` and pass it to SchemaInfo.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Dict, FrozenSet, Iterable, Optional, Tuple


class Tag(Enum):
	"""Capability tags an operator can carry."""

	NONDETERMINISTIC_SEEDED = auto()  # output depends on the RNG seed


@dataclass(frozen=True)
class OperatorName:
	name: str
	overload_name: str = ""

	def __str__(self) -> str:
		if self.overload_name:
			return f"{self.name}.{self.overload_name}"
		return self.name


@dataclass(frozen=True)
class OperatorHandle:
	"""A registered operator and its tags."""

	operator_name: OperatorName
	tags: FrozenSet[Tag] = frozenset()

	def has_tag(self, tag: Tag) -> bool:
		return tag in self.tags


# Seeded-random aten operators (name, overload). Overloads listed explicitly
# because the registry is keyed on the exact overload.
_SEEDED_OPS: Tuple[Tuple[str, str], ...] = (
	("aten::dropout", ""),
	("aten::dropout_", ""),
	("aten::feature_dropout", ""),
	("aten::feature_dropout_", ""),
	("aten::alpha_dropout", ""),
	("aten::alpha_dropout_", ""),
	("aten::feature_alpha_dropout", ""),
	("aten::feature_alpha_dropout_", ""),
	("aten::native_dropout", ""),
	("aten::bernoulli", ""),
	("aten::bernoulli", "p"),
	("aten::bernoulli_", "Tensor"),
	("aten::bernoulli_", "float"),
	("aten::multinomial", ""),
	("aten::normal", "Tensor_float"),
	("aten::normal", "float_Tensor"),
	("aten::normal", "Tensor_Tensor"),
	("aten::normal_", ""),
	("aten::poisson", ""),
	("aten::rand_like", ""),
	("aten::randn_like", ""),
	("aten::randint_like", ""),
	("aten::randint_like", "low_dtype"),
	("aten::randperm", ""),
	("aten::rrelu", ""),
	("aten::rrelu_", ""),
	("aten::rrelu_with_noise", ""),
	("aten::uniform_", ""),
	("aten::exponential_", ""),
	("aten::geometric_", ""),
	("aten::log_normal_", ""),
	("aten::cauchy_", ""),
	("aten::random_", ""),
)


class Dispatcher:
	"""Registry of operators keyed by (name, overload)."""

	_singleton: ClassVar[Optional["Dispatcher"]] = None
	_singleton_lock: ClassVar[threading.Lock] = threading.Lock()

	def __init__(self) -> None:
		self._ops: Dict[OperatorName, OperatorHandle] = {}

	@classmethod
	def singleton(cls) -> "Dispatcher":
		"""Return the process-wide registry, seeding it on first use."""
		if cls._singleton is None:
			with cls._singleton_lock:
				if cls._singleton is None:
					dispatcher = cls()
					for name, overload in _SEEDED_OPS:
						dispatcher.register(name, overload, [Tag.NONDETERMINISTIC_SEEDED])
					cls._singleton = dispatcher
		return cls._singleton

	def register(self, name: str, overload_name: str = "", tags: Iterable[Tag] = ()) -> OperatorHandle:
		"""
		Register (or re-register) an operator.

		Re-registering replaces the previous tag set rather than merging it.
		"""
		op_name = OperatorName(name, overload_name)
		handle = OperatorHandle(op_name, frozenset(tags))
		self._ops[op_name] = handle
		return handle

	def find_op(self, name: str, overload_name: str = "") -> Optional[OperatorHandle]:
		return self._ops.get(OperatorName(name, overload_name))

	def __contains__(self, op_name: object) -> bool:
		return op_name in self._ops

	def __len__(self) -> int:
		return len(self._ops)


__all__ = ["Tag", "OperatorName", "OperatorHandle", "Dispatcher"]
