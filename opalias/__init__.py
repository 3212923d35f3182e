# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
opalias: alias and mutability analysis for operator schemas.

Layers:
  core:        diagnostics and spans shared by every layer
  schema:      types, alias annotations and FunctionSchema predicates
  parser:      textual signature -> FunctionSchema
  schema_info: SchemaInfo, the binding-aware query engine
"""

from opalias.schema_info import SchemaInfo
from opalias.schema import FunctionSchema, SchemaArgType, SchemaArgument
from opalias.parser import parse_schema

__all__ = ["SchemaInfo", "FunctionSchema", "SchemaArgType", "SchemaArgument", "parse_schema"]
