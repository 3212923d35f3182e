# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Command-line report for one operator signature.

	python -m opalias 'aten::add_.Tensor(Tensor(a!) self, Tensor other, *, Scalar alpha=1) -> Tensor(a!)'
	python -m opalias 'aten::batch_norm(...) -> Tensor' --bind training=false --json

`--bind NAME=VALUE` values: true/false, none, integers, floats, `@label`
(a tensor on storage `label`; equal labels share storage) and `[v,...]`
lists of those, which may nest.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, List, Sequence

from opalias.core.diagnostics import Diagnostic
from opalias.errors import SchemaInfoError
from opalias.ivalue import IValue, ListValue, ScalarValue, Storage, TensorValue
from opalias.parser import SchemaParseError, parse_schema
from opalias.schema import SchemaArgType, SchemaArgument
from opalias.schema_info import SchemaInfo


class BindingSyntaxError(ValueError):
	"""A `--bind` value could not be parsed."""


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="opalias", description="Alias and mutability report for an operator schema")
	p.add_argument("signature", type=str, help="Operator signature, e.g. 'aten::relu_(Tensor(a!) self) -> Tensor(a!)'")
	p.add_argument(
		"--bind",
		action="append",
		default=[],
		metavar="NAME=VALUE",
		help="Bind a runtime value to an input argument (repeatable)",
	)
	p.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
	return p


def _split_list_items(inner: str) -> List[str]:
	"""Split `inner` on commas that are not inside a nested `[...]`."""
	items: List[str] = []
	depth = 0
	start = 0
	for pos, ch in enumerate(inner):
		if ch == "[":
			depth += 1
		elif ch == "]":
			depth -= 1
			if depth < 0:
				raise BindingSyntaxError(f"unbalanced ']' in list binding [{inner}]")
		elif ch == "," and depth == 0:
			items.append(inner[start:pos])
			start = pos + 1
	if depth != 0:
		raise BindingSyntaxError(f"unbalanced '[' in list binding [{inner}]")
	items.append(inner[start:])
	return items


def parse_binding_value(text: str, storages: Dict[str, Storage]) -> IValue:
	"""Parse one `--bind` value; `storages` maps `@label`s to shared storage."""
	text = text.strip()
	if text.startswith("[") and text.endswith("]"):
		inner = text[1:-1].strip()
		if not inner:
			return ListValue(())
		return ListValue(tuple(parse_binding_value(part, storages) for part in _split_list_items(inner)))
	if text.startswith("@"):
		label = text[1:]
		if not label:
			raise BindingSyntaxError("tensor binding needs a storage label after '@'")
		if label not in storages:
			storages[label] = Storage(label)
		return TensorValue(storages[label])
	lowered = text.lower()
	if lowered in ("true", "false"):
		return ScalarValue(lowered == "true")
	if lowered == "none":
		return ScalarValue(None)
	try:
		return ScalarValue(int(text))
	except ValueError:
		pass
	try:
		return ScalarValue(float(text))
	except ValueError:
		raise BindingSyntaxError(f"cannot parse binding value {text!r}") from None


def _parse_bindings(items: Sequence[str]) -> Dict[str, IValue]:
	storages: Dict[str, Storage] = {}
	bindings: Dict[str, IValue] = {}
	for item in items:
		name, sep, value = item.partition("=")
		if not sep or not name.strip():
			raise BindingSyntaxError(f"expected NAME=VALUE, got {item!r}")
		bindings[name.strip()] = parse_binding_value(value, storages)
	return bindings


def _label(info: SchemaInfo, ref: SchemaArgument) -> str:
	entry = info.schema.get_correct_list(ref.role)[ref.index]
	if ref.role is SchemaArgType.INPUT:
		return entry.name
	return entry.name or f"return{ref.index}"


def build_report(info: SchemaInfo) -> Dict[str, Any]:
	"""Summarize every query for the schema as a JSON-ready dict."""
	schema = info.schema
	refs = [SchemaArgument.input(i) for i in range(len(schema.arguments))]
	refs += [SchemaArgument.output(i) for i in range(len(schema.returns))]
	alias_pairs: List[List[str]] = []
	contain_pairs: List[List[str]] = []
	for pos, lhs in enumerate(refs):
		for rhs in refs[pos + 1 :]:
			if info.may_alias(lhs, rhs):
				alias_pairs.append([_label(info, lhs), _label(info, rhs)])
			elif info.may_contain_alias(lhs, rhs):
				contain_pairs.append([_label(info, lhs), _label(info, rhs)])
	return {
		"schema": str(schema),
		"is_mutable": info.is_mutable(),
		"mutable_arguments": [arg.name for arg in schema.arguments if info.is_mutable(arg.name)],
		"is_nondeterministic": info.is_nondeterministic(),
		"may_alias": alias_pairs,
		"may_contain_alias": contain_pairs,
		"wildcards": sorted(_label(info, ref) for ref in info.wildcard_set),
	}


def _emit_failure(args: argparse.Namespace, diag: Diagnostic) -> int:
	if args.json:
		print(json.dumps({"exit_code": 1, "diagnostics": [diag.to_dict()]}))
	else:
		print(diag.format_human(), file=sys.stderr)
	return 1


def main(argv: Sequence[str] | None = None) -> int:
	args = _build_parser().parse_args(argv)
	try:
		schema = parse_schema(args.signature)
	except SchemaParseError as err:
		return _emit_failure(args, Diagnostic(message=str(err), code="schema-parse", phase="parser", span=err.span))

	info = SchemaInfo(schema)
	try:
		info.add_argument_values(_parse_bindings(args.bind))
	except (BindingSyntaxError, SchemaInfoError) as err:
		return _emit_failure(args, Diagnostic(message=str(err), code="binding", phase="binding"))

	try:
		report = build_report(info)
	except TypeError as err:
		# A control argument such as `training` was bound to a non-bool.
		return _emit_failure(args, Diagnostic(message=str(err), code="binding", phase="binding"))

	# Warnings are reported but do not fail the run.
	exit_code = 0 if all(d.is_warning for d in info.diagnostics) else 1
	if args.json:
		payload = {"exit_code": exit_code, "report": report, "diagnostics": [d.to_dict() for d in info.diagnostics]}
		print(json.dumps(payload))
		return exit_code

	print(report["schema"])
	print(f"  mutable: {report['is_mutable']}")
	if report["mutable_arguments"]:
		print(f"  mutated arguments: {', '.join(report['mutable_arguments'])}")
	print(f"  nondeterministic: {report['is_nondeterministic']}")
	for lhs, rhs in report["may_alias"]:
		print(f"  may alias: {lhs} <-> {rhs}")
	for lhs, rhs in report["may_contain_alias"]:
		print(f"  may contain alias: {lhs} <-> {rhs}")
	if report["wildcards"]:
		print(f"  wildcards: {', '.join(report['wildcards'])}")
	for diag in info.diagnostics:
		print(diag.format_human(), file=sys.stderr)
	return exit_code


__all__ = ["main", "build_report", "parse_binding_value", "BindingSyntaxError"]
