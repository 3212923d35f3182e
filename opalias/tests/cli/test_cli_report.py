# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""`python -m opalias` report output."""

import json

import pytest

from opalias.cli import BindingSyntaxError, main, parse_binding_value
from opalias.ivalue import ListValue, ScalarValue, TensorValue

ADD_ = "aten::add_.Tensor(Tensor(a!) self, Tensor other, *, Scalar alpha=1) -> Tensor(a!)"
BATCH_NORM = (
	"aten::batch_norm(Tensor input, Tensor? weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, "
	"bool training, float momentum, float eps, bool cudnn_enabled) -> Tensor"
)


def _run_json(capsys, argv) -> tuple[int, dict]:
	code = main([*argv, "--json"])
	out = capsys.readouterr().out
	return code, json.loads(out)


def test_json_report_for_inplace_op(capsys) -> None:
	code, payload = _run_json(capsys, [ADD_])
	assert code == 0
	report = payload["report"]
	assert report["is_mutable"] is True
	assert report["mutable_arguments"] == ["self"]
	assert report["may_alias"] == [["self", "return0"]]
	assert report["is_nondeterministic"] is False
	assert payload["diagnostics"] == []


def test_shared_storage_binding(capsys) -> None:
	code, payload = _run_json(capsys, [ADD_, "--bind", "self=@t", "--bind", "other=@t"])
	assert code == 0
	report = payload["report"]
	assert ["self", "other"] in report["may_alias"]
	assert report["mutable_arguments"] == ["self", "other"]


def test_training_flag_binding(capsys) -> None:
	_, unbound = _run_json(capsys, [BATCH_NORM])
	assert unbound["report"]["mutable_arguments"] == ["running_mean", "running_var"]
	_, eval_mode = _run_json(capsys, [BATCH_NORM, "--bind", "training=false"])
	assert eval_mode["report"]["is_mutable"] is False


def test_duplicate_labels_are_reported(capsys) -> None:
	code, payload = _run_json(capsys, ["test::dup(Tensor(a) x, Tensor(a) y) -> Tensor"])
	assert code == 0
	assert [d["code"] for d in payload["diagnostics"]] == ["alias-set-duplicate"]
	assert payload["report"]["wildcards"] == ["x", "y"]


def test_parse_error_exits_nonzero(capsys) -> None:
	code, payload = _run_json(capsys, ["aten::broken(Tensor self -> Tensor"])
	assert code == 1
	assert payload["diagnostics"][0]["phase"] == "parser"


def test_unknown_binding_exits_nonzero(capsys) -> None:
	code, payload = _run_json(capsys, [ADD_, "--bind", "nope=1"])
	assert code == 1
	assert payload["diagnostics"][0]["phase"] == "binding"


def test_human_output(capsys) -> None:
	assert main([ADD_]) == 0
	out = capsys.readouterr().out
	assert "mutable: True" in out
	assert "may alias: self <-> return0" in out


def test_binding_value_syntax() -> None:
	storages: dict = {}
	a = parse_binding_value("@a", storages)
	assert isinstance(a, TensorValue)
	assert a.is_alias_of(parse_binding_value("@a", storages))
	assert parse_binding_value("true", storages) == ScalarValue(True)
	assert parse_binding_value("None", storages) == ScalarValue(None)
	assert parse_binding_value("3", storages) == ScalarValue(3)
	assert parse_binding_value("0.5", storages) == ScalarValue(0.5)
	lst = parse_binding_value("[@a, @b]", storages)
	assert isinstance(lst, ListValue)
	assert lst.contains_alias_of(a)
	with pytest.raises(BindingSyntaxError):
		parse_binding_value("@", storages)
	with pytest.raises(BindingSyntaxError):
		parse_binding_value("nonsense", storages)


def test_nested_list_binding() -> None:
	storages: dict = {}
	nested = parse_binding_value("[[@a, 1], @b]", storages)
	assert isinstance(nested, ListValue)
	assert len(nested.items) == 2
	assert isinstance(nested.items[0], ListValue)
	assert nested.items[0].items[1] == ScalarValue(1)
	assert nested.contains_alias_of(parse_binding_value("@a", storages))
	with pytest.raises(BindingSyntaxError):
		parse_binding_value("[[@a, @b]", storages)
	with pytest.raises(BindingSyntaxError):
		parse_binding_value("[@a]]", storages)


def test_human_output_reports_warnings_without_failing(capsys) -> None:
	"""Duplicate-label warnings go to stderr and the run still succeeds."""
	assert main(["test::dup(Tensor(a) x, Tensor(a) y) -> Tensor"]) == 0
	captured = capsys.readouterr()
	assert "wildcards: x, y" in captured.out
	assert "warning[alias-set-duplicate]" in captured.err
