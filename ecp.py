#!/usr/bin/env python
"""
Thin wrapper script to invoke the copilot_kit CLI.

Running ``python ecp.py`` is equivalent to running the ``ecp`` console
script installed via ``pyproject.toml``.
"""

from copilot_kit.cli import main


if __name__ == "__main__":
    main(prog_name="ecp")
