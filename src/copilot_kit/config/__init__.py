"""
Configuration loading for copilot_kit.

See :mod:`copilot_kit.config.loader` for the file locations, the
recognised keys, and their defaults.
"""

from .loader import DEFAULT_CONFIG, ConfigError, load_config  # noqa: F401
