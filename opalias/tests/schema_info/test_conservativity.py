# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""Wildcard and container handling: ambiguous annotations, infection, containment."""

from opalias.ivalue import TensorValue, list_value
from opalias.schema import SchemaArgument
from opalias.schema_info import DUPLICATE_ALIAS_SET_CODE, SchemaInfo

In = SchemaArgument.input
Out = SchemaArgument.output


def _warnings(info: SchemaInfo) -> list:
	return [d for d in info.diagnostics if d.code == DUPLICATE_ALIAS_SET_CODE]


def test_duplicate_label_makes_both_arguments_wildcards() -> None:
	info = SchemaInfo.from_signature("test::dup(Tensor(a) x, Tensor(a) y, Tensor z) -> Tensor")
	assert info.wildcard_set == frozenset({In(0), In(1)})
	warnings = _warnings(info)
	assert len(warnings) == 1
	assert warnings[0].severity == "warning"
	assert "'a'" in warnings[0].message
	assert info.may_alias(In(0), In(1))
	assert not info.may_alias(In(0), In(2))


def test_one_warning_per_duplicated_label() -> None:
	info = SchemaInfo.from_signature(
		"test::dup(Tensor(a) x, Tensor(a) y, Tensor(a) w, Tensor z) -> (Tensor(b), Tensor(b))"
	)
	assert len(_warnings(info)) == 2
	assert info.wildcard_set == frozenset({In(0), In(1), In(2), Out(0), Out(1)})
	# Wildcards may alias each other even across unrelated labels.
	assert info.may_alias(In(0), Out(1))
	assert info.may_alias(Out(0), Out(1))
	assert not info.may_alias(In(3), Out(0))


def test_duplicate_label_widens_the_other_list() -> None:
	"""A label duplicated among inputs also widens returns carrying it."""
	info = SchemaInfo.from_signature("test::dup(Tensor(a) x, Tensor(a) y) -> Tensor(a)")
	assert Out(0) in info.wildcard_set
	assert len(_warnings(info)) == 1


def test_diagnostics_sink_is_shared() -> None:
	sink: list = []
	SchemaInfo.from_signature("test::dup(Tensor(a) x, Tensor(a) y) -> Tensor", diagnostics=sink)
	assert len(sink) == 1
	assert sink[0].phase == "schema"


def test_unique_labels_produce_no_warnings() -> None:
	info = SchemaInfo.from_signature("test::ok(Tensor(a!) x, Tensor(b!) y) -> (Tensor(a!), Tensor(b!))")
	assert info.diagnostics == []
	assert info.wildcard_set == frozenset()


def test_wildcard_annotation_seeds_the_set() -> None:
	info = SchemaInfo.from_signature("aten::unbind.int(Tensor(a -> *) self, int dim=0) -> Tensor(a)[]")
	assert info.wildcard_set == frozenset({In(0)})
	assert info.container_set == frozenset({Out(0)})


def test_wildcard_spreads_through_confirmed_aliasing() -> None:
	info = SchemaInfo.from_signature("test::wild(Tensor(*) a, Tensor b, Tensor c, Tensor d) -> Tensor")
	t = TensorValue()
	info.add_argument_values({"b": t, "c": t.view()})
	assert info.may_alias(In(1), In(2))
	assert not info.may_alias(In(0), In(1))
	info.add_argument_value("a", t)
	assert In(1) in info.wildcard_set
	assert In(2) in info.wildcard_set
	assert info.may_alias(In(0), In(1))
	assert not info.may_alias(In(1), In(3))


def test_value_inside_container_becomes_wildcard() -> None:
	"""`a` found inside `c` may now alias whatever the wildcard `b` aliases."""
	info = SchemaInfo.from_signature("test::contain(Tensor a, Tensor(*) b, Tensor[] c) -> Tensor")
	assert not info.may_alias(In(0), In(1))
	t = TensorValue()
	info.add_argument_values({"a": t, "c": list_value([t])})
	assert In(0) in info.wildcard_set
	assert info.may_alias(In(0), In(1))


def test_wildcard_input_promotes_aliased_output() -> None:
	info = SchemaInfo.from_signature("test::w(Tensor(a) x, Tensor(*) y) -> Tensor(a)")
	assert not info.may_alias(Out(0), In(1))
	t = TensorValue()
	info.add_argument_values([t, t])
	assert info.may_alias(In(0), In(1))
	assert In(0) in info.wildcard_set
	assert Out(0) in info.wildcard_set
	assert info.may_alias(Out(0), In(1))


def test_container_may_contain_wildcard() -> None:
	info = SchemaInfo.from_signature("test::contain(Tensor a, Tensor(*) b, Tensor[] c, int n) -> Tensor")
	assert info.may_contain_alias(In(2), In(1))
	assert info.may_contain_alias(In(1), In(2))
	assert not info.may_contain_alias(In(1), In(2), bidirectional=False)
	assert not info.may_contain_alias(In(2), In(0))
	assert not info.may_contain_alias(In(2), In(3))


def test_containment_after_binding() -> None:
	info = SchemaInfo.from_signature("test::contain(Tensor a, Tensor(*) b, Tensor[] c) -> Tensor")
	t = TensorValue()
	info.add_argument_values({"a": t, "c": list_value([t])})
	assert info.may_contain_alias(In(2), In(0))
	assert not info.may_contain_alias(In(0), In(2), bidirectional=False)
	assert info.may_contain_alias(In(0), In(2))
