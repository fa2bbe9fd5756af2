"""
Model routing for assistant tasks.

Maps a task category to the cheapest model tier that handles it well,
exposes per-tier limits and illustrative costs, and provides a rough
token estimate plus a budget check built on it.

Tier hierarchy (descending capability, descending cost):

- ``opus``: architecture, security and other high-stakes reasoning
- ``sonnet``: general implementation, reviews, tests
- ``haiku``: documentation, formatting, lookups

Nothing here performs I/O and nothing raises: unknown categories route
to ``sonnet``, unknown tiers have no configuration and never fit a budget.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

DEFAULT_TIER = "sonnet"
TIERS: Tuple[str, ...] = ("opus", "sonnet", "haiku")

# Heuristic used by BPE tokenisers on English text.
CHARS_PER_TOKEN = 4

# Keywords shorter than this are too generic to route on.
_MIN_KEYWORD_LENGTH = 4


@dataclass(frozen=True)
class TaskCategory:
    """A named kind of task and the tier it is routed to."""

    tier: str
    description: str


@dataclass(frozen=True)
class ModelConfig:
    """Static limits and illustrative pricing for one model tier.

    Attributes
    ----------
    context_window : int
        Maximum prompt size in tokens.
    max_output : int
        Maximum completion size in tokens.
    cost_tier : str
        Relative cost class: ``high``, ``medium`` or ``low``.
    input_cost_per_1k : float
        Approximate USD per 1000 input tokens.
    output_cost_per_1k : float
        Approximate USD per 1000 output tokens.
    """

    context_window: int
    max_output: int
    cost_tier: str
    input_cost_per_1k: float
    output_cost_per_1k: float


TASK_CATEGORIES: Mapping[str, TaskCategory] = MappingProxyType({
    "architecture": TaskCategory("opus", "System design, architecture decisions, complex refactoring"),
    "security": TaskCategory("opus", "Security audits, vulnerability analysis, threat modeling"),
    "implementation": TaskCategory("sonnet", "General feature implementation and bug fixes"),
    "tdd": TaskCategory("sonnet", "Test-driven development, red-green-refactor cycles"),
    "code-review": TaskCategory("sonnet", "Pull request reviews, code quality checks"),
    "documentation": TaskCategory("haiku", "API docs, READMEs, inline documentation"),
    "formatting": TaskCategory("haiku", "Code formatting, linting fixes, style adjustments"),
    "security-review": TaskCategory("opus", "Security-focused review of changes before merge"),
    "complex-debugging": TaskCategory("opus", "Multi-file debugging, race conditions, memory leaks"),
    "code-migration": TaskCategory("opus", "Large-scale migrations, framework upgrades, language ports"),
    "planning": TaskCategory("opus", "Project planning, technical specifications, RFC drafting"),
    "coding": TaskCategory("sonnet", "Everyday coding tasks and small changes"),
    "refactoring": TaskCategory("sonnet", "Code restructuring, pattern application, cleanup"),
    "testing": TaskCategory("sonnet", "Test generation, test review, coverage improvement"),
    "simple-generation": TaskCategory("haiku", "Boilerplate, templates, repetitive patterns"),
    "lookup": TaskCategory("haiku", "API lookups, syntax checks, quick answers"),
    "summarization": TaskCategory("haiku", "Summarizing files, changelogs, commit messages"),
    "translation": TaskCategory("haiku", "i18n string translation, locale file generation"),
})

MODEL_CONFIGS: Mapping[str, ModelConfig] = MappingProxyType({
    "opus": ModelConfig(
        context_window=200000,
        max_output=32000,
        cost_tier="high",
        input_cost_per_1k=0.015,
        output_cost_per_1k=0.075,
    ),
    "sonnet": ModelConfig(
        context_window=200000,
        max_output=16000,
        cost_tier="medium",
        input_cost_per_1k=0.003,
        output_cost_per_1k=0.015,
    ),
    "haiku": ModelConfig(
        context_window=200000,
        max_output=8000,
        cost_tier="low",
        input_cost_per_1k=0.00025,
        output_cost_per_1k=0.00125,
    ),
})


def select_model(task_category: Any) -> str:
    """Return the tier for ``task_category``.

    The lookup is an exact, case-sensitive match against
    :data:`TASK_CATEGORIES`. Anything else, including non-strings,
    returns ``sonnet``.
    """
    if isinstance(task_category, str) and task_category in TASK_CATEGORIES:
        return TASK_CATEGORIES[task_category].tier
    return DEFAULT_TIER


def _keywords(category: str, entry: TaskCategory) -> Tuple[str, ...]:
    words = re.split(r"[\s,]+", entry.description.lower())
    return tuple(
        word for word in (category, *words) if len(word) >= _MIN_KEYWORD_LENGTH
    )


def suggest_model(description: Any) -> str:
    """Route a free-text task description to a tier.

    Resolution order:

    1. exact category match after trimming and lower-casing;
    2. the first category (in table order) whose name, or a word of
       its description, occurs in the text;
    3. ``sonnet``.
    """
    if not isinstance(description, str) or not description.strip():
        return DEFAULT_TIER

    text = description.strip().lower()
    if text in TASK_CATEGORIES:
        return TASK_CATEGORIES[text].tier

    for category, entry in TASK_CATEGORIES.items():
        if any(keyword in text for keyword in _keywords(category, entry)):
            return entry.tier
    return DEFAULT_TIER


def model_config(tier: Any) -> Optional[ModelConfig]:
    """Return the :class:`ModelConfig` for ``tier``, or None if it is unknown.

    Tier names are matched case-insensitively.
    """
    if not isinstance(tier, str):
        return None
    return MODEL_CONFIGS.get(tier.strip().lower())


def estimate_tokens(text: Any) -> int:
    """Approximate the token count of ``text`` as ``ceil(len(text) / 4)``.

    Non-strings and the empty string count as 0 tokens.
    """
    if not isinstance(text, str) or not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_within_budget(tier: Any, estimated_tokens: Any, budget_remaining: Any) -> bool:
    """Return True if ``estimated_tokens`` input tokens on ``tier`` fit the budget.

    ``budget_remaining`` is in USD. Only the input cost is counted since
    output length is not known in advance. An unknown tier, a budget
    that is not a positive number, or a token count that is not a
    non-negative number all fail closed, as does a token count too large
    to price as a float. For a fixed tier and token count the result is
    monotonic in the budget.
    """
    config = model_config(tier)
    if config is None:
        return False
    if not _is_number(budget_remaining) or not budget_remaining > 0:
        return False
    if not _is_number(estimated_tokens) or not estimated_tokens >= 0:
        return False

    try:
        estimated_cost = (estimated_tokens / 1000) * config.input_cost_per_1k
    except OverflowError:
        return False
    return estimated_cost <= budget_remaining
