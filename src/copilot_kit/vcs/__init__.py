"""
Version control system (VCS) integration.

Only Git is supported. The client is used to read commit history for
skill scaffolding and to locate repository roots.
"""

from .git_client import GitClient, GitError  # noqa: F401
