# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
opalias.core: shared diagnostics/span records used across layers.

Modules:
  - diagnostics: Diagnostic record (warnings from the conservativity pass)
  - span: best-effort signature source location
"""

__all__ = [
	"diagnostics",
	"span",
]
