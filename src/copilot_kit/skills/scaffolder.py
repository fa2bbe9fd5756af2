"""
Skill scaffolding from git history.

Turns a commit range into a skill directory::

    <output_base>/<name>/
        SKILL.md             manifest: name, description, triggers, files
        <name>-patterns.md   commit subjects grouped by Conventional Commit type

The pipeline is linear: validate the name, read the commit range, group
commits by prefix, render both documents, write them. Reading history is
best-effort (a bad range yields a minimal skill), while an invalid name
or a failed write makes :func:`create_skill` return False. Rendering is
deterministic so the same history always produces the same files, and
re-running over an existing skill overwrites it.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from copilot_kit.models.model_selector import TIERS, select_model
from copilot_kit.skills.commit_model import Commit, CommitGroups
from copilot_kit.vcs.git_client import GitClient, GitError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PathLike = Union[str, Path]

MANIFEST_FILENAME = "SKILL.md"
MAX_SKILL_NAME_LENGTH = 64
SKILL_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")

# Commit prefix -> task category used for the model recommendation.
PREFIX_TASKS: Dict[str, str] = {
    "feat": "implementation",
    "fix": "implementation",
    "perf": "implementation",
    "build": "implementation",
    "chore": "implementation",
    "ci": "implementation",
    "docs": "documentation",
    "style": "formatting",
    "test": "tdd",
    "refactor": "refactoring",
    "security": "security",
}
DEFAULT_PREFIX_TASK = "coding"


def is_valid_skill_name(name: Any) -> bool:
    """Return True if ``name`` is a lowercase slug of letters, digits and hyphens."""
    return (
        isinstance(name, str)
        and len(name) <= MAX_SKILL_NAME_LENGTH
        and SKILL_NAME_PATTERN.match(name) is not None
    )


def title_case(name: Any) -> str:
    """Turn ``my-cool-skill`` into ``My Cool Skill``.

    Only the first letter of each segment is changed.
    """
    if not isinstance(name, str):
        return ""
    return " ".join(part[:1].upper() + part[1:] for part in name.split("-") if part)


def patterns_filename(skill_name: str) -> str:
    return f"{skill_name}-patterns.md"


def _pluralize(count: int, singular: str) -> str:
    return f"{count} {singular if count == 1 else singular + 's'}"


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def parse_commit_range(
    commit_range: Any,
    repo_root: Optional[PathLike] = None,
    max_count: Optional[int] = None,
) -> List[Commit]:
    """Return the commits in ``commit_range``, newest first, at most ``max_count``.

    Any failure (invalid range, not a repository, git not installed)
    is logged and yields an empty list. Ranges starting with ``-`` are
    rejected so they cannot reach git as options.
    """
    if not isinstance(commit_range, str) or not commit_range.strip():
        return []
    commit_range = commit_range.strip()
    if commit_range.startswith("-"):
        logger.warning("Ignoring commit range that looks like an option: %r", commit_range)
        return []

    client = GitClient(Path(repo_root) if repo_root is not None else None)
    try:
        lines = client.log_lines(commit_range, max_count=max_count)
    except (GitError, OSError) as exc:
        logger.warning("Could not read commits for range '%s': %s", commit_range, exc)
        return []

    commits = [Commit.from_log_line(line) for line in lines]
    return [commit for commit in commits if commit is not None]


def group_by_prefix(commits: Iterable[Commit]) -> CommitGroups:
    """Bucket commits by prefix, keeping their input order within each bucket.

    Commits without a prefix go to the ``other`` bucket.
    """
    groups: CommitGroups = {}
    for commit in commits:
        groups.setdefault(commit.group_key, []).append(commit)
    return groups


def _ranked(groups: CommitGroups) -> List[Tuple[str, List[Commit]]]:
    """Non-empty groups, largest first, ties broken by prefix name."""
    return sorted(
        ((key, commits) for key, commits in groups.items() if commits),
        key=lambda item: (-len(item[1]), item[0]),
    )


def recommended_tiers(groups: CommitGroups) -> Dict[str, List[str]]:
    """Map each model tier to the prefixes whose work it suits, in tier order."""
    by_tier: Dict[str, List[str]] = {}
    for key, _ in _ranked(groups):
        tier = select_model(PREFIX_TASKS.get(key, DEFAULT_PREFIX_TASK))
        by_tier.setdefault(tier, []).append(key)
    return {tier: by_tier[tier] for tier in TIERS if tier in by_tier}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def generate_manifest(skill_name: str, groups: CommitGroups) -> str:
    """Render ``SKILL.md`` for ``skill_name`` from grouped commits."""
    title = title_case(skill_name)
    ranked = _ranked(groups)
    total = sum(len(commits) for _, commits in ranked)

    lines = [f"# {title} Skill", "", "## Name", title, "", "## Description"]
    if ranked:
        summary = ", ".join(f"{key} ({len(commits)})" for key, commits in ranked)
        lines.append(
            f"Patterns and knowledge for {title}, distilled from "
            f"{_pluralize(total, 'commit')}: {summary}."
        )
    else:
        lines.append(f"Patterns and knowledge for {title}.")

    lines += ["", "## Trigger Conditions"]
    if ranked:
        for key, commits in ranked:
            lines.append(f'- {key} changes similar to "{commits[0].subject}"')
    else:
        lines.append("- General development tasks")

    lines += [
        "",
        "## Files",
        f"- `{patterns_filename(skill_name)}` - Core patterns and guidelines",
        "",
        "## Model Recommendation",
    ]
    tiers = recommended_tiers(groups)
    if tiers:
        for tier, prefixes in tiers.items():
            lines.append(f"- **{tier.capitalize()}** for {', '.join(prefixes)} changes")
    else:
        lines.append("- **Sonnet** for implementation and applying patterns")

    lines.append("")
    return "\n".join(lines)


def generate_patterns(skill_name: str, groups: CommitGroups, context: Optional[str] = None) -> str:
    """Render the supporting ``<name>-patterns.md`` file.

    ``context`` replaces the generated body when given.
    """
    title = title_case(skill_name)
    lines = [f"# {title} Patterns", ""]

    if context is not None and context.strip():
        lines += [context.strip(), ""]
        return "\n".join(lines)

    ranked = _ranked(groups)
    if not ranked:
        lines += [
            "## Overview",
            "",
            f"Add your {title.lower()} patterns and guidelines here.",
            "",
            "## Rules",
            "",
            "- Add your rules",
            "",
            "## Anti-Patterns",
            "",
            "| Anti-Pattern | Problem | Fix |",
            "|--------------|---------|-----|",
            "",
        ]
        return "\n".join(lines)

    total = sum(len(commits) for _, commits in ranked)
    lines += [
        "## Overview",
        "",
        f"Patterns for {title.lower()} drawn from {_pluralize(total, 'commit')}.",
        "",
    ]
    for key, commits in ranked:
        lines += [f"## {key}", ""]
        lines += [f"- {commit.subject} ({commit.hash})" for commit in commits]
        lines.append("")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Materialisation
# ---------------------------------------------------------------------------

def _write_text(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(content)


def create_skill(
    name: Any,
    commit_range: Any,
    output_base: Any,
    repo_root: Optional[PathLike] = None,
    context_file: Optional[PathLike] = None,
    max_count: Optional[int] = None,
) -> bool:
    """Scaffold ``<output_base>/<name>/`` from the commits in ``commit_range``.

    Parameters
    ----------
    name : str
        Skill slug: lowercase letters, digits and hyphens.
    commit_range : str
        Revision range passed to ``git log``. An unreadable range gives a
        skill with no commit-derived content rather than an error.
    output_base : str or Path
        Directory under which the skill directory is created.
    repo_root : str or Path, optional
        Repository to read history from. Defaults to the current directory.
    context_file : str or Path, optional
        Markdown file whose content becomes the patterns file body.
    max_count : int, optional
        Read at most this many commits from the range.

    Returns
    -------
    bool
        True if every file was written. False for an invalid name or
        output base (nothing is touched) or on any filesystem error.
    """
    if not is_valid_skill_name(name):
        logger.error("Invalid skill name: %r", name)
        return False
    if not isinstance(output_base, (str, Path)) or not str(output_base):
        logger.error("Invalid output directory: %r", output_base)
        return False

    context = None
    if context_file is not None:
        try:
            context = Path(context_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Context file not used (%s): %s", context_file, exc)

    groups = group_by_prefix(parse_commit_range(commit_range, repo_root, max_count))
    files = {
        MANIFEST_FILENAME: generate_manifest(name, groups),
        patterns_filename(name): generate_patterns(name, groups, context),
    }

    skill_dir = Path(output_base) / name
    try:
        skill_dir.mkdir(parents=True, exist_ok=True)
        for filename, content in files.items():
            _write_text(skill_dir / filename, content)
    except OSError as exc:
        logger.error("Failed to write skill '%s' to %s: %s", name, skill_dir, exc)
        return False

    logger.info("Created skill '%s' at %s", name, skill_dir)
    return True
