"""
Shared fixtures and helpers for the Cities: Skylines installer test suite.
"""

import zipfile
from pathlib import Path

import pytest

from game_profile import InstallLayout


class FakePrompt:
    """Stands in for the mod type dialog and records what it was shown."""

    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    async def __call__(self, title, text, choices):
        self.calls.append((title, text, list(choices)))
        return self.answer


class FakeContext:
    def __init__(self, answer=None):
        self.ask_category = FakePrompt(answer)
        self.games = []
        self.installers = []

    def register_game(self, game):
        self.games.append(game)

    def register_installer(self, installer):
        self.installers.append(installer)


@pytest.fixture
def layout(tmp_path) -> InstallLayout:
    """Install layout rooted in a fresh tmp_path mod-data folder."""
    return InstallLayout(mod_base_path=str(tmp_path / "Cities_Skylines"))


@pytest.fixture
def prompt():
    """Factory: prompt(answer) -> FakePrompt returning ``answer``."""
    return FakePrompt


@pytest.fixture
def context():
    return FakeContext


@pytest.fixture
def make_zip():
    def _make_zip(path: Path, members: dict[str, bytes]) -> Path:
        with zipfile.ZipFile(path, "w") as zf:
            for member, data in members.items():
                zf.writestr(member, data)
        return path

    return _make_zip
