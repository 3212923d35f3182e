# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""Static FunctionSchema predicates (no bindings involved)."""

import pytest

from opalias.parser import parse_schema
from opalias.schema import SchemaArgType, SchemaArgument

In = SchemaArgument.input
Out = SchemaArgument.output


def test_static_may_alias_needs_shared_label_and_compatible_types() -> None:
	schema = parse_schema("test::view(Tensor(a) self, Tensor other, int[] size) -> Tensor(a)")
	assert schema.may_alias(In(0), Out(0))
	assert schema.may_alias(Out(0), In(0))
	assert not schema.may_alias(In(1), Out(0))
	assert not schema.may_alias(In(0), In(2))


def test_label_on_incompatible_types_does_not_alias() -> None:
	schema = parse_schema("test::odd(Tensor(a) self, Tensor(a)[] others) -> Tensor")
	assert not schema.may_alias(In(0), In(1))


def test_static_mutability() -> None:
	schema = parse_schema("aten::add_.Tensor(Tensor(a!) self, Tensor other, *, Scalar alpha=1) -> Tensor(a!)")
	assert schema.is_mutable(In(0))
	assert not schema.is_mutable(In(1))
	assert schema.is_mutable(Out(0))


def test_mutability_of_annotated_list_elements() -> None:
	schema = parse_schema("aten::_foreach_add_.Scalar(Tensor(a!)[] self, Scalar scalar) -> ()")
	assert schema.is_mutable(In(0))


def test_wildcard_may_contain_alias() -> None:
	schema = parse_schema("test::stash(Tensor(*) a, Tensor b, Tensor[] c, int n) -> Tensor")
	assert schema.may_contain_alias(In(0), In(1))
	assert schema.may_contain_alias(In(1), In(0))
	assert not schema.may_contain_alias(In(1), In(0), bidirectional=False)
	assert not schema.may_contain_alias(In(0), In(3))
	assert not schema.may_contain_alias(In(1), In(2))


def test_argument_lookup() -> None:
	schema = parse_schema("test::f(Tensor x, int y) -> Tensor")
	assert schema.argument_index_with_name("y") == 1
	assert schema.argument_index_with_name("z") is None
	assert schema.get_correct_list(SchemaArgType.OUTPUT) == schema.returns
	with pytest.raises(IndexError):
		schema.argument_at(Out(1))


def test_schemas_compare_structurally() -> None:
	text = "aten::dropout(Tensor input, float p, bool train) -> Tensor"
	assert parse_schema(text) == parse_schema(text)
	assert hash(parse_schema(text)) == hash(parse_schema(text))
	assert parse_schema(text) != parse_schema("aten::dropout(Tensor input, float p, bool training) -> Tensor")
