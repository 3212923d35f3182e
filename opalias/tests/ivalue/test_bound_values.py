# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""Identity aliasing and sub-value enumeration of bound values."""

import pytest

from opalias.ivalue import (
	DictValue,
	ListValue,
	ScalarValue,
	Storage,
	TensorValue,
	TupleValue,
	list_value,
	to_ivalue,
)


def test_tensors_alias_through_shared_storage() -> None:
	t = TensorValue()
	assert t.is_alias_of(t)
	assert t.is_alias_of(t.view())
	assert not t.is_alias_of(TensorValue())
	shared = Storage("w")
	assert TensorValue(shared).is_alias_of(TensorValue(shared))


def test_undefined_tensor_aliases_nothing() -> None:
	undefined = TensorValue(None)
	assert not undefined.is_alias_of(undefined)
	assert list(undefined.sub_values()) == []


def test_scalars_never_alias() -> None:
	v = ScalarValue(3)
	assert not v.is_alias_of(v)
	assert list(v.sub_values()) == []


def test_lists_alias_by_identity_not_contents() -> None:
	t = TensorValue()
	a = ListValue((t,))
	b = ListValue((t,))
	assert a.is_alias_of(a)
	assert not a.is_alias_of(b)


def test_sub_values_are_deep() -> None:
	inner = TensorValue()
	nested = list_value([list_value([inner]), 1])
	assert nested.contains_alias_of(inner)
	assert nested.contains_alias_of(inner.view())
	assert not nested.contains_alias_of(TensorValue())


def test_tuples_only_alias_through_items() -> None:
	t = TensorValue()
	tup = TupleValue((t, ScalarValue(1)))
	assert not tup.is_alias_of(tup)
	assert tup.contains_alias_of(t)


def test_dict_values_are_enumerated() -> None:
	t = TensorValue()
	d = DictValue(((ScalarValue("w"), t),))
	assert d.contains_alias_of(t)
	assert d.is_alias_of(d)


def test_to_bool() -> None:
	assert ScalarValue(True).to_bool() is True
	assert ScalarValue(False).to_bool() is False
	with pytest.raises(TypeError):
		ScalarValue(1).to_bool()
	with pytest.raises(TypeError):
		TensorValue().to_bool()


def test_to_ivalue_wraps_python_values() -> None:
	t = TensorValue()
	assert to_ivalue(t) is t
	assert to_ivalue(True) == ScalarValue(True)
	assert to_ivalue(None) == ScalarValue(None)
	wrapped = to_ivalue([t, 2.5])
	assert isinstance(wrapped, ListValue)
	assert wrapped.items[0] is t
	assert isinstance(to_ivalue((t,)), TupleValue)
	assert isinstance(to_ivalue({"k": t}), DictValue)
	with pytest.raises(TypeError):
		to_ivalue(object())


def test_to_ivalue_memo_keeps_container_identity() -> None:
	"""A shared memo maps one Python container to one IValue, nested or not."""
	inner = [TensorValue()]
	outer = [inner, {"k": inner}]
	memo = {}
	wrapped_outer = to_ivalue(outer, memo)
	wrapped_inner = to_ivalue(inner, memo)
	assert wrapped_outer.items[0] is wrapped_inner
	assert wrapped_outer.contains_alias_of(wrapped_inner)
	assert to_ivalue(outer, memo) is wrapped_outer
	# Without a memo every call wraps afresh.
	assert to_ivalue(inner) is not to_ivalue(inner)
