# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Errors raised by SchemaInfo for caller/schema mismatches.

These are programmer errors (a name or index the schema does not have), so
they are raised rather than reported as diagnostics.
"""

from __future__ import annotations


class SchemaInfoError(ValueError):
	"""Base class for misuse of a SchemaInfo against its schema."""


class UnknownArgumentError(SchemaInfoError):
	"""A value was bound to, or a query named, an argument the schema lacks."""

	def __init__(self, schema_name: str, name: str) -> None:
		super().__init__(f"Schema {schema_name} has no argument named {name}")
		self.schema_name = schema_name
		self.name = name


class TooManyValuesError(SchemaInfoError):
	"""A positional value list is longer than the schema's argument list."""

	def __init__(self, schema_name: str, got: int, expected: int) -> None:
		super().__init__(
			f"Schema {schema_name} does not have enough arguments for value list "
			f"(got {got} values, schema has {expected} arguments)"
		)
		self.got = got
		self.expected = expected


class InvalidArgumentIndexError(SchemaInfoError):
	"""A SchemaArgument index is out of bounds for its role's list."""


__all__ = [
	"SchemaInfoError",
	"UnknownArgumentError",
	"TooManyValuesError",
	"InvalidArgumentIndexError",
]
