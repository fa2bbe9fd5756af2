"""
Package manager detection and command generation.

The resolver inspects a project directory for lockfiles (and, failing
that, the corepack ``packageManager`` field of ``package.json``) to decide
which of npm, yarn, pnpm or bun the project uses. Every public function
here is advisory and total: unreadable directories, malformed JSON and
unknown manager names all collapse to the npm default instead of raising.

The module also carries the small amount of project setup the ``pm:setup``
command performs: writing the manager's config file and pinning the
``packageManager`` field.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

import click


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PathLike = Union[str, Path]

SUPPORTED_PMS: Tuple[str, ...] = ("npm", "yarn", "pnpm", "bun")
DEFAULT_PM = "npm"

# Checked in order; the first lockfile found wins.
LOCKFILES: Tuple[Tuple[str, str], ...] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)

INSTALL_COMMANDS: Mapping[str, str] = MappingProxyType({
    "npm": "npm install",
    "yarn": "yarn install",
    "pnpm": "pnpm install",
    "bun": "bun install",
})

# yarn runs package.json scripts without the "run" keyword
RUN_COMMANDS: Mapping[str, str] = MappingProxyType({
    "npm": "npm run",
    "yarn": "yarn",
    "pnpm": "pnpm run",
    "bun": "bun run",
})

ADD_COMMANDS: Mapping[str, str] = MappingProxyType({
    "npm": "npm install",
    "yarn": "yarn add",
    "pnpm": "pnpm add",
    "bun": "bun add",
})

DEV_FLAGS: Mapping[str, str] = MappingProxyType({
    "npm": "--save-dev",
    "yarn": "--dev",
    "pnpm": "--save-dev",
    "bun": "--dev",
})

_CONFIG_TEMPLATES: Mapping[str, Tuple[str, str]] = MappingProxyType({
    "npm": (
        ".npmrc",
        "# npm configuration\n"
        "# See: https://docs.npmjs.com/cli/v10/configuring-npm/npmrc\n"
        "\n"
        "# Use exact versions when adding dependencies.\n"
        "save-exact=true\n"
        "\n"
        "# Automatically install peer dependencies.\n"
        "legacy-peer-deps=false\n",
    ),
    "yarn": (
        ".yarnrc.yml",
        "# Yarn configuration\n"
        "# See: https://yarnpkg.com/configuration/yarnrc\n"
        "\n"
        "nodeLinker: node-modules\n"
        "\n"
        "# Enable immutable installs in CI.\n"
        "# enableImmutableInstalls: true\n",
    ),
    "pnpm": (
        ".npmrc",
        "# pnpm configuration\n"
        "# See: https://pnpm.io/npmrc\n"
        "\n"
        "# Use exact versions when adding dependencies.\n"
        "save-exact=true\n"
        "\n"
        "# Hoist all dependencies (less strict, but more compatible).\n"
        "shamefully-hoist=true\n"
        "\n"
        "auto-install-peers=true\n",
    ),
    "bun": (
        "bunfig.toml",
        "# Bun configuration\n"
        "# See: https://bun.sh/docs/runtime/bunfig\n"
        "\n"
        "[install]\n"
        "# Use exact versions when adding dependencies.\n"
        "exact = true\n",
    ),
})


def _normalise(pm: Any) -> Optional[str]:
    """Return ``pm`` if it names a supported manager, else None."""
    if isinstance(pm, str) and pm in SUPPORTED_PMS:
        return pm
    return None


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        return False


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

def _read_package_manager_field(root: Path) -> Optional[str]:
    """Return the manager named by ``package.json``'s ``packageManager`` field.

    The field has the corepack shape ``<name>@<version>[+hash]``. Anything
    that is missing, unreadable or names an unsupported tool yields None.
    """
    pkg_path = root / "package.json"
    if not _exists(pkg_path):
        return None
    try:
        data = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", pkg_path, exc)
        return None

    if not isinstance(data, dict):
        return None
    field = data.get("packageManager")
    if not isinstance(field, str):
        return None
    return _normalise(field.split("@", 1)[0].strip())


def find_package_manager(directory: Optional[PathLike] = None) -> Optional[str]:
    """Return the manager the project in ``directory`` signals, or None.

    Lockfiles are checked first, in :data:`LOCKFILES` order, then the
    ``packageManager`` field of ``package.json``.
    """
    try:
        root = Path.cwd() if directory is None else Path(directory)
    except (TypeError, ValueError, OSError) as exc:
        logger.debug("Cannot inspect %r: %s", directory, exc)
        return None

    for lockfile, pm in LOCKFILES:
        if _exists(root / lockfile):
            logger.debug("Found %s in %s; using %s", lockfile, root, pm)
            return pm

    pm = _read_package_manager_field(root)
    if pm is not None:
        logger.debug("package.json packageManager field selects %s", pm)
    return pm


def detect_package_manager(directory: Optional[PathLike] = None) -> str:
    """Detect the package manager used by the project in ``directory``.

    Parameters
    ----------
    directory : str or Path, optional
        Project directory to inspect. Defaults to the current directory.
        A missing or unreadable directory is treated as "no signal".

    Returns
    -------
    str
        One of ``npm``, ``yarn``, ``pnpm`` or ``bun``. When neither a
        lockfile nor the ``packageManager`` field decides, ``npm``.
    """
    pm = find_package_manager(directory)
    if pm is None:
        logger.debug("No package manager signal in %s; defaulting to %s", directory, DEFAULT_PM)
        return DEFAULT_PM
    return pm


# ---------------------------------------------------------------------------
# Command builders
# ---------------------------------------------------------------------------

def install_command(pm: Any) -> str:
    """Return the command that installs all dependencies for ``pm``."""
    return INSTALL_COMMANDS[_normalise(pm) or DEFAULT_PM]


def run_command(pm: Any, script_name: Optional[str] = None) -> str:
    """Return the command that runs a ``package.json`` script.

    Without ``script_name`` only the prefix (e.g. ``pnpm run``) is returned.
    """
    command = RUN_COMMANDS[_normalise(pm) or DEFAULT_PM]
    if isinstance(script_name, str) and script_name.strip():
        return f"{command} {script_name.strip()}"
    return command


def add_command(pm: Any, dev: bool = False) -> str:
    """Return the command that adds a dependency, with the dev flag if ``dev``."""
    name = _normalise(pm) or DEFAULT_PM
    command = ADD_COMMANDS[name]
    if dev:
        return f"{command} {DEV_FLAGS[name]}"
    return command


# ---------------------------------------------------------------------------
# Interactive selection
# ---------------------------------------------------------------------------

def prompt_package_manager() -> str:
    """Ask the user to pick a package manager by number or by name."""
    click.echo("\nWhich package manager would you like to use?\n")
    for index, pm in enumerate(SUPPORTED_PMS, start=1):
        click.echo(f"  {index}) {pm}")
    click.echo("")

    while True:
        answer = click.prompt(
            f"Enter number (1-{len(SUPPORTED_PMS)}) or name", type=str
        ).strip().lower()
        if answer.isdigit() and 1 <= int(answer) <= len(SUPPORTED_PMS):
            return SUPPORTED_PMS[int(answer) - 1]
        if answer in SUPPORTED_PMS:
            return answer
        click.echo("  Invalid choice. Please try again.")


# ---------------------------------------------------------------------------
# Project setup
# ---------------------------------------------------------------------------

def find_project_root(start: Optional[PathLike] = None) -> Path:
    """Walk up from ``start`` to the first directory holding ``package.json`` or ``.git``.

    Returns ``start`` itself (resolved) when no marker is found.
    """
    origin = (Path.cwd() if start is None else Path(start)).resolve()
    current = origin
    while True:
        if _exists(current / "package.json") or _exists(current / ".git"):
            return current
        if current.parent == current:
            return origin
        current = current.parent


def config_template(pm: Any) -> Optional[Tuple[str, str]]:
    """Return ``(filename, content)`` of the config file for ``pm``, or None."""
    name = _normalise(pm)
    if name is None:
        return None
    return _CONFIG_TEMPLATES[name]


def write_config_file(project_root: PathLike, pm: str) -> Optional[Path]:
    """Write the manager's config file into ``project_root``.

    An existing file is never overwritten.

    Returns
    -------
    Path or None
        The path written, or None if nothing was written.
    """
    template = config_template(pm)
    if template is None:
        return None

    filename, content = template
    config_path = Path(project_root) / filename
    if _exists(config_path):
        logger.info("%s already exists; leaving it untouched", filename)
        return None
    try:
        with open(config_path, "w", encoding="utf-8") as fh:
            fh.write(content)
    except OSError as exc:
        logger.error("Failed to write %s: %s", config_path, exc)
        return None
    return config_path


def update_package_json(project_root: PathLike, pm: str) -> bool:
    """Pin ``packageManager`` in ``package.json`` to ``<pm>@*``.

    The field is left alone when it already names ``pm``.

    Returns
    -------
    bool
        True if ``package.json`` was rewritten.
    """
    name = _normalise(pm)
    pkg_path = Path(project_root) / "package.json"
    if name is None or not _exists(pkg_path):
        return False

    try:
        pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not parse %s: %s", pkg_path, exc)
        return False
    if not isinstance(pkg, dict):
        logger.warning("%s does not contain a JSON object", pkg_path)
        return False

    current = pkg.get("packageManager")
    if isinstance(current, str) and current.split("@", 1)[0] == name:
        return False

    # Placeholder version; the user is expected to pin the real one.
    pkg["packageManager"] = f"{name}@*"
    try:
        with open(pkg_path, "w", encoding="utf-8") as fh:
            fh.write(json.dumps(pkg, indent=2) + "\n")
    except OSError as exc:
        logger.error("Failed to write %s: %s", pkg_path, exc)
        return False
    return True
