"""
Command line interface for copilot_kit.

This module defines the ``main`` click group used as the entry point of
the ``ecp`` command. Each sub-command is a thin layer over the library:
it loads configuration, calls one of the resolver, selector or
scaffolder functions, and turns the outcome into console output and an
exit code.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from copilot_kit import __version__
from copilot_kit.config.loader import ConfigError, load_config
from copilot_kit.models.model_selector import (
    estimate_tokens,
    is_within_budget,
    model_config,
    select_model,
    suggest_model,
)
from copilot_kit.pm.package_manager import (
    DEFAULT_PM,
    SUPPORTED_PMS,
    add_command,
    detect_package_manager,
    find_package_manager,
    find_project_root,
    install_command,
    prompt_package_manager,
    run_command,
    update_package_json,
    write_config_file,
)
from copilot_kit.skills.scaffolder import create_skill, is_valid_skill_name, patterns_filename
from copilot_kit.vcs.git_client import GitClient

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests).
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_CONFIG_ERROR = 5
EXIT_SKILL_FAILED = 6
EXIT_OVER_BUDGET = 7


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=False)


def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=False)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=False)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def print_summary_box(title: str, items: List[str]):
    """Print a formatted summary box."""
    max_width = max(len(title), max(len(item) for item in items) if items else 0)
    box_width = min(max_width + 4, 60)

    click.echo(f"\n┌{'─' * box_width}┐")
    click.echo(f"│ {title.ljust(box_width - 2)}│")
    click.echo(f"├{'─' * box_width}┤")
    for item in items:
        click.echo(f"│ {item.ljust(box_width - 2)}│")
    click.echo(f"└{'─' * box_width}┘")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _enable_library_logging() -> None:
    """Let copilot_kit loggers reach the handlers configured on the root."""
    for name, candidate in logging.root.manager.loggerDict.items():
        if name.startswith("copilot_kit") and isinstance(candidate, logging.Logger):
            candidate.propagate = True


def _is_interactive() -> bool:
    return sys.stdin.isatty()


def _load_config_or_exit(project_root: Path) -> Dict[str, Any]:
    try:
        return load_config(project_root)
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


# ---------------------------------------------------------------------------
# Command group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="ecp")
def main(verbose: bool) -> None:
    """Toolkit for AI coding assistant projects: skills, package managers, model tiers."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    if verbose:
        _enable_library_logging()


# ---------------------------------------------------------------------------
# skill:create
# ---------------------------------------------------------------------------

@main.command(name="skill:create")
@click.argument("name")
@click.option("--from-range", "commit_range", help="Git revision range to learn from (e.g. HEAD~5..HEAD).")
@click.option("--output", type=click.Path(file_okay=False), help="Base directory for the skill.")
@click.option("--from-context", "context_file", type=click.Path(dir_okay=False),
              help="Markdown file to use as the patterns file body.")
@click.option("--repo", type=click.Path(file_okay=False), help="Repository to read history from.")
def skill_create(
    name: str,
    commit_range: Optional[str],
    output: Optional[str],
    context_file: Optional[str],
    repo: Optional[str],
) -> None:
    """Create a skill named NAME from a range of git commits."""
    if repo:
        project_root = Path(repo)
    else:
        project_root = GitClient.find_repo_root(Path.cwd()) or Path.cwd()
    config = _load_config_or_exit(project_root)

    if not is_valid_skill_name(name):
        print_error("Invalid skill name. Use lowercase letters, digits and hyphens (e.g. 'my-skill').")
        raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    # The commit cap only applies to the configured default range
    max_count = None
    if not commit_range:
        commit_range = config["default_range"]
        max_count = config["max_commits"]
    output_base = Path(output) if output else project_root / config["skills_dir"]
    print_info(f"Reading commits in {commit_range}")

    if not create_skill(
        name, commit_range, output_base,
        repo_root=project_root, context_file=context_file, max_count=max_count,
    ):
        print_error(f"Failed to create skill '{name}' in {output_base}")
        raise click.exceptions.Exit(EXIT_SKILL_FAILED)

    skill_dir = output_base / name
    print_success(f"Skill created: {name}")
    print_summary_box(f"{skill_dir}/", ["SKILL.md", patterns_filename(name)])


# ---------------------------------------------------------------------------
# pm:detect / pm:setup
# ---------------------------------------------------------------------------

@main.command(name="pm:detect")
@click.argument("directory", type=click.Path(file_okay=False), default=".")
def pm_detect(directory: str) -> None:
    """Show the package manager used in DIRECTORY and its commands."""
    pm = detect_package_manager(directory)
    click.echo(f"Package manager: {click.style(pm, fg='cyan', bold=True)}")
    print_info(f"Install:  {install_command(pm)}", indent=1)
    print_info(f"Run:      {run_command(pm, '<script>')}", indent=1)
    print_info(f"Add:      {add_command(pm)}", indent=1)
    print_info(f"Add dev:  {add_command(pm, dev=True)}", indent=1)


@main.command(name="pm:setup")
@click.argument("directory", type=click.Path(file_okay=False), required=False)
@click.option("--pm", "pm_name", type=click.Choice(SUPPORTED_PMS, case_sensitive=False),
              help="Package manager to configure.")
def pm_setup(directory: Optional[str], pm_name: Optional[str]) -> None:
    """Write package manager config and pin packageManager in package.json."""
    project_root = Path(directory) if directory else find_project_root()
    config = _load_config_or_exit(project_root)

    pm = pm_name or config["package_manager"] or find_package_manager(project_root)
    if pm is None:
        print_info("No package manager detected.")
        if _is_interactive():
            pm = prompt_package_manager()
        else:
            print_info(f"Non-interactive mode; defaulting to {DEFAULT_PM}.")
            pm = DEFAULT_PM

    print_info(f"Configuring {project_root} for {pm}")

    written = write_config_file(project_root, pm)
    if written is not None:
        print_success(f"Created {written.name}")
    else:
        print_warning("Package manager config file already present or not writable; skipped.")

    if update_package_json(project_root, pm):
        print_success("Updated packageManager field in package.json")
    else:
        print_info("package.json left unchanged")

    print_success(f"Package manager configured: {pm}")
    click.echo(f"\nNext step:\n  {install_command(pm)}")


# ---------------------------------------------------------------------------
# model:select / model:estimate
# ---------------------------------------------------------------------------

@main.command(name="model:select")
@click.argument("task")
@click.option("--fuzzy", is_flag=True, help="Treat TASK as free text and match keywords.")
def model_select(task: str, fuzzy: bool) -> None:
    """Show the model tier recommended for TASK."""
    tier = suggest_model(task) if fuzzy else select_model(task)
    click.echo(f"Model: {click.style(tier, fg='cyan', bold=True)}")
    config = model_config(tier)
    print_info(f"Cost tier:      {config.cost_tier}", indent=1)
    print_info(f"Max output:     {config.max_output} tokens", indent=1)
    print_info(f"Context window: {config.context_window} tokens", indent=1)


@main.command(name="model:estimate")
@click.argument("tier")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--budget", type=float, help="Budget in USD (default from configuration).")
def model_estimate(tier: str, source, budget: Optional[float]) -> None:
    """Estimate the tokens in SOURCE (default stdin) and check them against a budget."""
    config = model_config(tier)
    if config is None:
        print_error(f"Unknown model tier: {tier}")
        raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    if budget is None:
        budget = _load_config_or_exit(Path.cwd())["budget"]

    tokens = estimate_tokens(source.read())
    cost = tokens / 1000 * config.input_cost_per_1k
    click.echo(f"Estimated tokens: {tokens}")
    print_info(f"Estimated input cost: ${cost:.4f} (budget ${budget:.4f})", indent=1)

    if not is_within_budget(tier, tokens, budget):
        print_warning(f"Over budget for {tier}")
        raise click.exceptions.Exit(EXIT_OVER_BUDGET)
    print_success(f"Within budget for {tier}")
