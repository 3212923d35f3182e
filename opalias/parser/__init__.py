# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Signature parser: `ns::name.overload(args) -> returns` text to FunctionSchema.

The grammar lives in grammar.lark beside this package; parser.py walks the
lark tree into opalias.schema objects.
"""

from .parser import SchemaParseError, parse_schema

__all__ = ["SchemaParseError", "parse_schema"]
