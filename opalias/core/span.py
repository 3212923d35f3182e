# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Source span for operator signatures.

Signatures are usually one-line strings, so a span is mostly a column range.
`line` is kept because table-driven signatures may be written across lines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Best-effort location inside a signature string (1-based line/column)."""

	line: Optional[int] = None
	column: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_lark_error(cls, err: Any) -> "Span":
		"""
		Build a Span from a lark `UnexpectedInput` (or anything shaped like one).

		lark reports `line`/`column` as -1 when the failure is at end of input;
		those collapse to None.
		"""
		if err is None:
			return cls()
		line = getattr(err, "line", None)
		column = getattr(err, "column", None)
		return cls(
			line=line if isinstance(line, int) and line > 0 else None,
			column=column if isinstance(column, int) and column > 0 else None,
			raw=err,
		)

	@property
	def is_known(self) -> bool:
		return self.line is not None or self.column is not None

	def describe(self) -> str:
		if not self.is_known:
			return "<unknown>"
		if self.line is not None and self.line > 1:
			return f"{self.line}:{self.column}"
		return f"col {self.column}"


__all__ = ["Span"]
