# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: opalias developers; created: 2026-10-18
"""
CLI entrypoint for `python -m opalias`.
"""

from .cli import main

if __name__ == "__main__":
	import sys
	sys.exit(main())
