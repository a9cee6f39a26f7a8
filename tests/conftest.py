"""
Pytest configuration and fixtures for HireBridge tests.
"""

import random
import sys
from pathlib import Path

import pytest


# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hirebridge.core.config import Settings  # noqa: E402


class ScriptedOracle:
    """Oracle double that replays canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise AssertionError("ScriptedOracle ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FailingOracle:
    """Oracle double that is always unreachable."""

    def __init__(self):
        self.calls = 0

    async def complete(self, prompt: str) -> str:
        self.calls += 1
        raise ConnectionError("oracle unreachable")


@pytest.fixture
def settings():
    """Settings isolated from the developer's .env file."""
    return Settings(
        _env_file=None,
        GEMINI_API_KEY="",
        ORACLE_TIMEOUT_SECONDS=1.0,
        SESSION_BACKEND="memory",
    )


@pytest.fixture
def rng():
    """Seeded random source so selection is reproducible."""
    return random.Random(1234)


@pytest.fixture
def scripted_oracle():
    """Factory for ScriptedOracle instances."""
    return ScriptedOracle


@pytest.fixture
def failing_oracle():
    return FailingOracle()
