# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
opalias.schema: operator schema model.

Modules:
  - types: declared types and alias type sets
  - function_schema: AliasInfo/Argument/FunctionSchema and static predicates
"""

from .function_schema import (
	WILDCARD,
	AliasInfo,
	Argument,
	FunctionSchema,
	SchemaArgType,
	SchemaArgument,
)
from .types import SchemaType, TypeKind

__all__ = [
	"WILDCARD",
	"AliasInfo",
	"Argument",
	"FunctionSchema",
	"SchemaArgType",
	"SchemaArgument",
	"SchemaType",
	"TypeKind",
]
