"""
Package manager resolution.

Detects whether a JavaScript project uses npm, yarn, pnpm or bun and
builds the matching CLI commands. See
:mod:`copilot_kit.pm.package_manager`.
"""

from .package_manager import (  # noqa: F401
    DEFAULT_PM,
    SUPPORTED_PMS,
    add_command,
    detect_package_manager,
    find_package_manager,
    install_command,
    run_command,
)
