"""
Top-level package for copilot_kit.

Utilities behind the ``ecp`` command: package manager detection,
model tier selection, and skill scaffolding from git history. The CLI
entry point lives in ``copilot_kit.cli``.
"""

__all__ = ["__version__"]

__version__ = "0.3.0"
