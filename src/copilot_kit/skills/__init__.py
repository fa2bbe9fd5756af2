"""
Skill scaffolding.

This package turns git history into skill directories. See
:mod:`copilot_kit.skills.commit_model` for the commit records and
:mod:`copilot_kit.skills.scaffolder` for the pipeline.
"""

from .commit_model import UNCLASSIFIED_PREFIX, Commit  # noqa: F401
from .scaffolder import (  # noqa: F401
    create_skill,
    generate_manifest,
    group_by_prefix,
    parse_commit_range,
    title_case,
)
