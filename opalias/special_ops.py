# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Operators whose mutability or determinism depends on a bound argument.

Two fixed tables, both built once per process under a lock and read-only
afterwards:

  * training overrides: normalization ops whose `running_mean`/`running_var`
    are only written when a boolean control argument (`training` or
    `use_input_stats`) is true. An *unbound* control argument counts as true;
    the schema's declared default is deliberately not consulted.
  * the dropout signature, which is deterministic when `train` is bound false.

Adding an op here is the only change needed to give it conditional
mutability; SchemaInfo consults the table and nothing else.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from opalias.parser import parse_schema
from opalias.schema import FunctionSchema

RUNNING_STATS = frozenset({"running_mean", "running_var"})

# (signature, control argument)
_TRAINING_OP_SIGNATURES: Tuple[Tuple[str, str], ...] = (
	(
		"aten::batch_norm(Tensor input, Tensor? weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool training, float momentum, float eps, bool cudnn_enabled) -> Tensor",
		"training",
	),
	(
		"aten::instance_norm(Tensor input, Tensor? weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool use_input_stats, float momentum, float eps, bool cudnn_enabled) -> Tensor",
		"use_input_stats",
	),
	(
		"aten::_batch_norm_impl_index(Tensor input, Tensor? weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool training, float momentum, float eps, bool cudnn_enabled) -> (Tensor, Tensor, Tensor, Tensor, int)",
		"training",
	),
	(
		"aten::cudnn_batch_norm(Tensor input, Tensor weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool training, float exponential_average_factor, float epsilon) -> (Tensor, Tensor, Tensor, Tensor)",
		"training",
	),
	(
		"aten::miopen_batch_norm(Tensor input, Tensor weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool training, float exponential_average_factor, float epsilon) -> (Tensor, Tensor, Tensor)",
		"training",
	),
	(
		"aten::native_batch_norm(Tensor input, Tensor? weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool training, float momentum, float eps) -> (Tensor, Tensor, Tensor)",
		"training",
	),
	(
		"aten::native_batch_norm.out(Tensor input, Tensor? weight, Tensor? bias, Tensor? running_mean, Tensor? running_var, bool training, float momentum, float eps, *, Tensor(a!) out, Tensor(b!) save_mean, Tensor(c!) save_invstd) -> (Tensor(a!), Tensor(b!), Tensor(c!))",
		"training",
	),
)

DROPOUT_SIGNATURE = "aten::dropout(Tensor input, float p, bool train) -> Tensor"
DROPOUT_CONTROL_ARGUMENT = "train"


@dataclass(frozen=True)
class TrainingOverride:
	"""
	One conditional-mutability rule.

	`affected_arguments` of `schema` are mutable iff `control_argument` is
	unbound or bound to true.
	"""

	schema: FunctionSchema
	control_argument: str
	affected_arguments: FrozenSet[str] = RUNNING_STATS


_tables_lock = threading.Lock()
_training_overrides: Optional[Dict[FunctionSchema, TrainingOverride]] = None
_dropout_schema: Optional[FunctionSchema] = None


def training_overrides() -> Dict[FunctionSchema, TrainingOverride]:
	"""Return the training-override table keyed by exact schema."""
	global _training_overrides
	if _training_overrides is None:
		with _tables_lock:
			if _training_overrides is None:
				table: Dict[FunctionSchema, TrainingOverride] = {}
				for signature, control in _TRAINING_OP_SIGNATURES:
					schema = parse_schema(signature)
					table[schema] = TrainingOverride(schema=schema, control_argument=control)
				_training_overrides = table
	return _training_overrides


def find_training_override(schema: FunctionSchema) -> Optional[TrainingOverride]:
	return training_overrides().get(schema)


def dropout_schema() -> FunctionSchema:
	global _dropout_schema
	if _dropout_schema is None:
		with _tables_lock:
			if _dropout_schema is None:
				_dropout_schema = parse_schema(DROPOUT_SIGNATURE)
	return _dropout_schema


__all__ = [
	"RUNNING_STATS",
	"DROPOUT_SIGNATURE",
	"DROPOUT_CONTROL_ARGUMENT",
	"TrainingOverride",
	"training_overrides",
	"find_training_override",
	"dropout_schema",
]
