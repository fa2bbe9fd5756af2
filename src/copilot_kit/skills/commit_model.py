"""
Data models for commit history.

A :class:`Commit` is one line of ``git log`` output split into its
Conventional Commit parts. Commits are grouped by prefix into a
:data:`CommitGroups` mapping; commits without a prefix land in the
:data:`UNCLASSIFIED_PREFIX` bucket.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional


# Commits with no prefix share this key with commits literally typed "other:".
UNCLASSIFIED_PREFIX = "other"

# "<type>: <subject>"; scopes such as "feat(api):" are not treated as prefixes
PREFIX_PATTERN = re.compile(r"^(\w+):\s*(.*)$")

CommitGroups = Dict[str, List["Commit"]]


@dataclass(frozen=True)
class Commit:
    """A single commit parsed from the log.

    Attributes
    ----------
    hash : str
        Abbreviated commit hash.
    message : str
        The full one-line commit message.
    prefix : str
        Conventional Commit type (``feat``, ``fix``...), or ``""`` when the
        message has none.
    subject : str
        The message with the prefix removed.
    """

    hash: str
    message: str
    prefix: str
    subject: str

    @property
    def group_key(self) -> str:
        """Key of the group this commit belongs to."""
        return self.prefix or UNCLASSIFIED_PREFIX

    @classmethod
    def from_message(cls, commit_hash: str, message: str) -> "Commit":
        """Build a commit, splitting off a leading ``<type>:`` prefix."""
        message = message.strip()
        match = PREFIX_PATTERN.match(message)
        if match:
            return cls(commit_hash, message, match.group(1), match.group(2).strip())
        return cls(commit_hash, message, "", message)

    @classmethod
    def from_log_line(cls, line: str) -> Optional["Commit"]:
        """Parse a ``<hash> <message>`` line; blank lines give None."""
        line = line.strip()
        if not line:
            return None
        commit_hash, _, message = line.partition(" ")
        return cls.from_message(commit_hash, message)
