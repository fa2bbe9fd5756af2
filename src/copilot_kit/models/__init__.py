"""
Model tier routing and token budgeting.

See :mod:`copilot_kit.models.model_selector`.
"""

from .model_selector import (  # noqa: F401
    DEFAULT_TIER,
    MODEL_CONFIGS,
    TASK_CATEGORIES,
    ModelConfig,
    estimate_tokens,
    is_within_budget,
    model_config,
    select_model,
    suggest_model,
)
