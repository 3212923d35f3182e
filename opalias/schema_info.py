# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
SchemaInfo: alias and mutability queries over one operator schema.

A SchemaInfo wraps a FunctionSchema and refines its static alias annotations
with runtime values bound to argument names. It answers:

  * is_mutable: may the call write to an input (or to what a return aliases)?
  * may_alias / may_contain_alias: may two entries share storage, directly or
    through a container?
  * is_nondeterministic: does the operator depend on the RNG for these
    bindings?

The analysis must stay sound: "cannot alias" is only reported when aliasing
is impossible. Anything that cannot be tracked precisely goes into the
*wildcard set* (may alias any other wildcard), which only ever grows.

State:
  - value map: bound values by argument name (add/overwrite only)
  - wildcard set / container set: seeded once from the schema
  - input/output alias maps: derived from the value map; rebuilt in full when
    `_alias_maps_current` is False and a query needs them

Not thread-safe; use one instance per thread or serialize access.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from opalias.core.diagnostics import Diagnostic
from opalias.dispatcher import Dispatcher, Tag
from opalias.errors import InvalidArgumentIndexError, TooManyValuesError, UnknownArgumentError
from opalias.ivalue import ConversionMemo, IValue, to_ivalue
from opalias.parser import parse_schema
from opalias.schema import Argument, FunctionSchema, SchemaArgType, SchemaArgument
from opalias.schema.types import (
	can_alias_type_sets_alias,
	contained_alias_types,
	is_container_type,
	map_type_to_alias_type_set,
)
from opalias.special_ops import DROPOUT_CONTROL_ARGUMENT, dropout_schema, find_training_override

DUPLICATE_ALIAS_SET_CODE = "alias-set-duplicate"


class SchemaInfo:
	"""Binding-aware alias analysis for a single FunctionSchema."""

	def __init__(
		self,
		schema: FunctionSchema,
		*,
		dispatcher: Dispatcher | None = None,
		diagnostics: List[Diagnostic] | None = None,
	) -> None:
		self._schema = schema
		self._dispatcher = dispatcher
		self.diagnostics: List[Diagnostic] = diagnostics if diagnostics is not None else []
		self._value_map: Dict[str, IValue] = {}
		# One IValue per bound Python container, so identity aliasing survives wrapping.
		self._conversions: ConversionMemo = {}
		self._alias_maps_current = False
		self._input_alias_map: List[Set[int]] = []
		self._output_alias_map: List[Set[int]] = []
		self._wildcard_set: Set[SchemaArgument] = set()
		self._container_set: Set[SchemaArgument] = set()
		self._training_override = find_training_override(schema)
		self._init_schema_info()

	@classmethod
	def from_signature(cls, signature: str, **kwargs: Any) -> "SchemaInfo":
		return cls(parse_schema(signature), **kwargs)

	@property
	def schema(self) -> FunctionSchema:
		return self._schema

	@property
	def wildcard_set(self) -> FrozenSet[SchemaArgument]:
		"""Entries that may alias any other wildcard, given the current bindings."""
		self._ensure_alias_maps()
		return frozenset(self._wildcard_set)

	@property
	def container_set(self) -> FrozenSet[SchemaArgument]:
		return frozenset(self._container_set)

	# ------------------------------------------------------------------
	# Bindings

	def add_argument_value(self, name: str, value: Any) -> None:
		"""Bind `value` to the input argument `name` (overwrites a previous binding)."""
		if self._schema.argument_index_with_name(name) is None:
			raise UnknownArgumentError(self._schema.qualified_name, name)
		self._value_map[name] = to_ivalue(value, self._conversions)
		self._alias_maps_current = False

	def add_argument_values(self, values: Sequence[Optional[Any]] | Mapping[str, Any]) -> None:
		"""
		Bind several values at once.

		A mapping binds by name. A sequence binds positionally; None entries
		mean "no value" and are skipped (bind `ScalarValue(None)` to record an
		explicit None).
		"""
		if isinstance(values, Mapping):
			for name, value in values.items():
				self.add_argument_value(name, value)
			return
		values = list(values)
		arguments = self._schema.arguments
		if len(values) > len(arguments):
			raise TooManyValuesError(self._schema.qualified_name, len(values), len(arguments))
		for arg, value in zip(arguments, values):
			if value is None:
				continue
			self._value_map[arg.name] = to_ivalue(value, self._conversions)
			self._alias_maps_current = False

	def has_input_argument_named(self, name: str) -> bool:
		return any(arg.name == name for arg in self._schema.arguments)

	# ------------------------------------------------------------------
	# Queries

	def is_mutable(self, argument: SchemaArgument | str | None = None) -> bool:
		"""
		Mutability of the whole operator (no argument), of one entry, or of
		the input argument with the given name.

		An entry is mutable if any input it may alias is written by the call.
		"""
		if argument is None:
			return any(
				self._is_mutable_argument(SchemaArgument.input(idx))
				for idx in range(len(self._schema.arguments))
			)
		if isinstance(argument, str):
			return self._is_mutable_argument(self._input_ref(argument))
		return self._is_mutable_argument(argument)

	def is_nondeterministic(self) -> bool:
		"""
		True when the operator is tagged seeded-nondeterministic.

		Dropout with `train` bound to false is deterministic (identity).
		"""
		if self._schema == dropout_schema():
			train = self._value_map.get(DROPOUT_CONTROL_ARGUMENT)
			if train is not None and not train.to_bool():
				return False
		dispatcher = self._dispatcher if self._dispatcher is not None else Dispatcher.singleton()
		op = dispatcher.find_op(self._schema.name, self._schema.overload_name)
		return op is not None and op.has_tag(Tag.NONDETERMINISTIC_SEEDED)

	def may_alias(self, lhs: SchemaArgument, rhs: SchemaArgument) -> bool:
		"""May `lhs` and `rhs` refer to the same storage?"""
		lhs_arg = self._argument_at(lhs)
		rhs_arg = self._argument_at(rhs)
		if self._schema.may_alias(lhs, rhs):
			return True
		if lhs == rhs:
			return True
		if not can_alias_type_sets_alias(
			map_type_to_alias_type_set(lhs_arg.type),
			map_type_to_alias_type_set(rhs_arg.type),
		):
			return False

		self._ensure_alias_maps()
		if lhs in self._wildcard_set and rhs in self._wildcard_set:
			return True

		if lhs.role is SchemaArgType.INPUT and rhs.role is SchemaArgType.INPUT:
			return rhs.index in self._input_alias_map[lhs.index]
		if lhs.role is SchemaArgType.OUTPUT and rhs.role is SchemaArgType.OUTPUT:
			return bool(self._output_alias_map[lhs.index] & self._output_alias_map[rhs.index])
		if lhs.role is SchemaArgType.OUTPUT:
			return rhs.index in self._output_alias_map[lhs.index]
		return lhs.index in self._output_alias_map[rhs.index]

	def may_contain_alias(self, lhs: SchemaArgument, rhs: SchemaArgument, bidirectional: bool = True) -> bool:
		"""
		May `lhs` hold (inside a container) something that aliases `rhs`?

		With `bidirectional` the reverse direction is checked as well.
		"""
		self._argument_at(lhs)
		self._argument_at(rhs)
		if self._schema.may_contain_alias(lhs, rhs) or self.may_alias(lhs, rhs):
			return True
		self._ensure_alias_maps()
		if bidirectional:
			return self._may_contain_alias_impl(lhs, rhs) or self._may_contain_alias_impl(rhs, lhs)
		return self._may_contain_alias_impl(lhs, rhs)

	def input_alias_map(self) -> Tuple[FrozenSet[int], ...]:
		"""Input index -> input indices it aliases (reflexive and symmetric)."""
		self._ensure_alias_maps()
		return tuple(frozenset(s) for s in self._input_alias_map)

	def output_alias_map(self) -> Tuple[FrozenSet[int], ...]:
		"""Output index -> input indices it may alias."""
		self._ensure_alias_maps()
		return tuple(frozenset(s) for s in self._output_alias_map)

	# ------------------------------------------------------------------
	# Internals

	def _argument_at(self, ref: SchemaArgument) -> Argument:
		entries = self._schema.get_correct_list(ref.role)
		if ref.index < 0 or ref.index >= len(entries):
			raise InvalidArgumentIndexError(
				f"Invalid index {ref.index} for {ref.role.name.lower()} list of {self._schema.qualified_name} "
				f"({len(entries)} entries)"
			)
		return entries[ref.index]

	def _input_ref(self, name: str) -> SchemaArgument:
		idx = self._schema.argument_index_with_name(name)
		if idx is None:
			raise UnknownArgumentError(self._schema.qualified_name, name)
		return SchemaArgument.input(idx)

	def _is_mutable_argument(self, ref: SchemaArgument) -> bool:
		self._argument_at(ref)
		self._ensure_alias_maps()
		alias_map = self._input_alias_map if ref.role is SchemaArgType.INPUT else self._output_alias_map
		# Checked per aliasing input: running_mean may alias another input,
		# in which case that input's mutability follows the training flag too.
		return any(self._input_is_written(idx) for idx in sorted(alias_map[ref.index]))

	def _input_is_written(self, index: int) -> bool:
		override = self._training_override
		if override is not None and self._schema.arguments[index].name in override.affected_arguments:
			return self._control_flag(override.control_argument)
		return self._schema.is_mutable(SchemaArgument.input(index))

	def _control_flag(self, name: str) -> bool:
		# Unbound counts as true regardless of the schema's declared default.
		value = self._value_map.get(name)
		if value is not None:
			return value.to_bool()
		return self.has_input_argument_named(name)

	def _may_contain_alias_impl(self, lhs: SchemaArgument, rhs: SchemaArgument) -> bool:
		lhs_contained = contained_alias_types(self._argument_at(lhs).type)
		rhs_types = map_type_to_alias_type_set(self._argument_at(rhs).type)
		return (
			can_alias_type_sets_alias(lhs_contained, rhs_types)
			and lhs in self._container_set
			and rhs in self._wildcard_set
		)

	def _init_schema_info(self) -> None:
		"""
		Seed the wildcard and container sets from the schema alone.

		An after-set label used by two entries of the same list makes it
		ambiguous which entries alias which, so every entry carrying that
		label (in either list) becomes a wildcard.
		"""
		duplicates: Set[str] = set()
		for role, entries in (
			(SchemaArgType.INPUT, self._schema.arguments),
			(SchemaArgType.OUTPUT, self._schema.returns),
		):
			seen: Set[str] = set()
			for idx, arg in enumerate(entries):
				ref = SchemaArgument(role, idx)
				info = arg.alias_info
				if info is not None:
					if info.is_wildcard_after:
						self._wildcard_set.add(ref)
					else:
						for label in sorted(info.after_sets):
							if label not in seen:
								seen.add(label)
								continue
							if label not in duplicates:
								duplicates.add(label)
								self._report_duplicate_alias_set(label, role)
				if is_container_type(arg.type):
					self._container_set.add(ref)

		if duplicates:
			self._ensure_conservativity(duplicates, self._schema.arguments, SchemaArgType.INPUT)
			self._ensure_conservativity(duplicates, self._schema.returns, SchemaArgType.OUTPUT)

	def _ensure_conservativity(self, duplicates: Set[str], entries: Tuple[Argument, ...], role: SchemaArgType) -> None:
		for idx, arg in enumerate(entries):
			if arg.alias_info is not None and arg.alias_info.after_sets & duplicates:
				self._wildcard_set.add(SchemaArgument(role, idx))

	def _report_duplicate_alias_set(self, label: str, role: SchemaArgType) -> None:
		list_name = "arguments" if role is SchemaArgType.INPUT else "returns"
		self.diagnostics.append(
			Diagnostic(
				message=(
					f"alias set '{label}' appears twice in the {list_name} of {self._schema.qualified_name}; "
					f"aliasing checks will be more conservative"
				),
				code=DUPLICATE_ALIAS_SET_CODE,
				phase="schema",
				severity="warning",
			)
		)

	def _ensure_alias_maps(self) -> None:
		if not self._alias_maps_current:
			self._generate_alias_maps()

	def _generate_alias_maps(self) -> None:
		arguments = self._schema.arguments
		count = len(arguments)
		values: List[Optional[IValue]] = [self._value_map.get(arg.name) for arg in arguments]

		input_alias_map: List[Set[int]] = [{idx} for idx in range(count)]
		for i in range(count):
			vi = values[i]
			if vi is None:
				continue
			for j in range(i + 1, count):
				vj = values[j]
				if vj is not None and vi.is_alias_of(vj):
					input_alias_map[i].add(j)
					input_alias_map[j].add(i)

		# Wildcard status spreads across confirmed aliases, and a bound value
		# found inside another bound value is no longer tracked precisely.
		# Iterate to a fixpoint so a rebuild with the same bindings is a no-op.
		changed = True
		while changed:
			changed = False
			for i in range(count):
				for j in input_alias_map[i]:
					if i != j and SchemaArgument.input(i) in self._wildcard_set:
						changed |= self._promote(SchemaArgument.input(j))
			for i in range(count):
				vi = values[i]
				if vi is None:
					continue
				for j in range(count):
					vj = values[j]
					if vj is None or j in input_alias_map[i]:
						continue
					if vi.contains_alias_of(vj):
						changed |= self._promote(SchemaArgument.input(j))

		output_alias_map: List[Set[int]] = [set() for _ in self._schema.returns]
		for i in range(count):
			for j in range(len(self._schema.returns)):
				if self._schema.may_alias(SchemaArgument.input(i), SchemaArgument.output(j)):
					if SchemaArgument.input(i) in self._wildcard_set:
						self._wildcard_set.add(SchemaArgument.output(j))
					output_alias_map[j].update(input_alias_map[i])

		self._input_alias_map = input_alias_map
		self._output_alias_map = output_alias_map
		self._alias_maps_current = True

	def _promote(self, ref: SchemaArgument) -> bool:
		if ref in self._wildcard_set:
			return False
		self._wildcard_set.add(ref)
		return True


__all__ = ["SchemaInfo", "DUPLICATE_ALIAS_SET_CODE"]
