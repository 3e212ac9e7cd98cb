"""
Pytest configuration and shared fixtures.
"""

import difflib
import os
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from patchpilot.utils.diff_utils.core.config import ENV_PREFIX


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (large generated inputs)"
    )


@pytest.fixture(autouse=True)
def clean_patchpilot_env(monkeypatch):
    """Make sure PATCHPILOT_* settings from the shell never leak into tests."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX) and name != f"{ENV_PREFIX}LOG_LEVEL":
            monkeypatch.delenv(name, raising=False)


def make_diff(original: str, modified: str, file_path: str = "example.py", context: int = 3) -> str:
    """Build a unified diff between two texts with difflib."""
    lines = difflib.unified_diff(
        original.splitlines(), modified.splitlines(),
        f"a/{file_path}", f"b/{file_path}", n=context, lineterm='')
    return '\n'.join(lines) + '\n'


@pytest.fixture
def diff_maker():
    return make_diff


@pytest.fixture
def sample_source():
    """A small Python module used as patch target."""
    return (
        "import os\n"
        "import sys\n"
        "\n"
        "\n"
        "def greet(name):\n"
        "    message = f'Hello, {name}'\n"
        "    print(message)\n"
        "    return message\n"
        "\n"
        "\n"
        "def farewell(name):\n"
        "    message = f'Goodbye, {name}'\n"
        "    print(message)\n"
        "    return message\n"
        "\n"
        "\n"
        "if __name__ == '__main__':\n"
        "    greet(sys.argv[1])\n"
    )
