import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(scope="session", autouse=True)
def isolate_home_config():
    """Point the user-level config directory at an empty temp directory.

    Tests must not pick up a real ``~/.copilot_kit/config.json``. The
    directory is patched for the whole session and removed afterwards.
    """
    with tempfile.TemporaryDirectory(prefix="copilot_kit_home_") as tmp:
        with patch("copilot_kit.config.loader._get_config_directory", return_value=Path(tmp)):
            yield Path(tmp)
