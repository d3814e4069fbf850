#!/usr/bin/env python
"""
Thin wrapper script to invoke the nullcommits CLI.

Running ``python nullcommits_cli.py`` is equivalent to running the
``nullcommits`` console script installed via ``pyproject.toml``.
"""

from nullcommits.cli import main


if __name__ == "__main__":
    main(prog_name="nullcommits")
