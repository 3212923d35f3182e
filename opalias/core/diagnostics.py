# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
Diagnostic record shared by the schema analysis and the CLI.

Analysis code never prints; it appends Diagnostics to a sink list that the
caller owns. The CLI decides how to render them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .span import Span


@dataclass
class Diagnostic:
	"""A warning or error produced while analysing a schema."""

	message: str
	code: str | None = None
	# Which layer produced the diagnostic ("parser", "schema", "binding").
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes unknown.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_warning(self) -> bool:
		return self.severity == "warning"

	def to_dict(self) -> dict[str, Any]:
		return {
			"phase": self.phase,
			"code": self.code,
			"severity": self.severity,
			"message": self.message,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}

	def format_human(self) -> str:
		head = f"{self.severity}"
		if self.code:
			head += f"[{self.code}]"
		text = f"{head}: {self.message}"
		if self.span.is_known:
			text += f" ({self.span.describe()})"
		for note in self.notes:
			text += f"\n  note: {note}"
		return text


__all__ = ["Diagnostic"]
