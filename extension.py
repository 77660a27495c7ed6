"""
Cities: Skylines extension for the mod manager.

Registers the game (where it lives, where mods go, how to get those folders
ready) and the archive installer from crp_installer with the host.

Public API
----------
main(context, layout=None, store=None)
    Register both descriptors with an ExtensionContext.  Returns True.

prepare_for_modding(layout)
    Create Addons/Mods, Addons/Assets, Maps and Saves under the mod-data root.

find_game(store)
    Ask a GameStore for the install folder of the Steam release.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol, Sequence, runtime_checkable

from crp_installer import (
    AskCategory,
    ClassificationResult,
    InstallResult,
    classify_archive,
    install_mod,
)
from game_profile import (
    EXECUTABLE,
    GAME_ID,
    GAME_NAME,
    INSTALLER_NAME,
    INSTALLER_PRIORITY,
    STEAM_INSTALL_DIR,
    STEAMAPP_ID,
    InstallLayout,
    default_layout,
)

_log = logging.getLogger(__name__)

DEFAULT_STEAM_LIBRARIES = (
    r"C:\Program Files (x86)\Steam",
    "~/.steam/steam",
    "~/.local/share/Steam",
)


class GameNotFound(Exception):
    """No game store knows where the game is installed."""


@runtime_checkable
class GameStore(Protocol):
    async def find_by_app_id(self, app_ids: Sequence[str]) -> str: ...


class SteamLibraryStore:
    """Find games by looking in steamapps/common of each Steam library."""

    def __init__(
        self,
        library_dirs: Sequence[str | Path] = DEFAULT_STEAM_LIBRARIES,
        install_dirs: Optional[dict[str, str]] = None,
        executable: str = EXECUTABLE,
    ):
        self.library_dirs = [Path(d).expanduser() for d in library_dirs]
        self.install_dirs = install_dirs or {STEAMAPP_ID: STEAM_INSTALL_DIR}
        self.executable = executable

    def _lookup(self, app_ids: Sequence[str]) -> str:
        for app_id in app_ids:
            folder = self.install_dirs.get(app_id)
            if not folder:
                continue
            for library in self.library_dirs:
                game_path = library / "steamapps" / "common" / folder
                if (game_path / self.executable).is_file():
                    return str(game_path)
        raise GameNotFound(f"No Steam library contains app(s) {list(app_ids)}")

    async def find_by_app_id(self, app_ids: Sequence[str]) -> str:
        return await asyncio.to_thread(self._lookup, app_ids)


# ── Descriptors ───────────────────────────────────────────────────────

@dataclass
class GameRegistration:
    id: str
    name: str
    executable: str
    setup: Callable[[], Awaitable[list[Path]]]
    query_path: Callable[[], Awaitable[str]]
    query_mod_path: Callable[[], str]
    merge_mods: bool = True
    logo: str = "gameart.jpg"
    required_files: list[str] = field(default_factory=list)
    details: dict[str, str] = field(default_factory=dict)


@dataclass
class InstallerRegistration:
    name: str
    priority: int  # lower runs first when several installers accept an archive
    test: Callable[[Sequence[str], str], ClassificationResult]
    install: Callable[[Sequence[str]], Awaitable[InstallResult]]


class ExtensionContext(Protocol):
    ask_category: AskCategory

    def register_game(self, game: GameRegistration) -> None: ...
    def register_installer(self, installer: InstallerRegistration) -> None: ...


# ── Game Setup ────────────────────────────────────────────────────────

async def find_game(store: GameStore) -> str:
    game_path = await store.find_by_app_id([STEAMAPP_ID])
    _log.info("Found %s at %s", GAME_NAME, game_path)
    return game_path


async def prepare_for_modding(layout: InstallLayout) -> list[Path]:
    dirs = layout.absolute_dirs()
    await asyncio.gather(
        *(asyncio.to_thread(d.mkdir, parents=True, exist_ok=True) for d in dirs)
    )
    _log.info("Mod folders ready under %s", layout.mod_base_path)
    return dirs


def build_game_registration(layout: InstallLayout, store: GameStore) -> GameRegistration:
    return GameRegistration(
        id=GAME_ID,
        name=GAME_NAME,
        executable=EXECUTABLE,
        setup=partial(prepare_for_modding, layout),
        query_path=partial(find_game, store),
        query_mod_path=lambda: layout.mod_base_path,
        merge_mods=True,
        required_files=[EXECUTABLE],
        details={"steamAppId": STEAMAPP_ID},
    )


def build_installer_registration(
    ask_category: AskCategory, layout: InstallLayout
) -> InstallerRegistration:
    return InstallerRegistration(
        name=INSTALLER_NAME,
        priority=INSTALLER_PRIORITY,
        test=classify_archive,
        install=partial(install_mod, ask_category=ask_category, layout=layout),
    )


# ── Entry Point ───────────────────────────────────────────────────────

def main(
    context: ExtensionContext,
    layout: InstallLayout | None = None,
    store: GameStore | None = None,
) -> bool:
    layout = layout or default_layout()
    store = store or SteamLibraryStore()

    context.register_game(build_game_registration(layout, store))
    context.register_installer(build_installer_registration(context.ask_category, layout))
    _log.info("Registered %s (%s) with installer %s", GAME_NAME, GAME_ID, INSTALLER_NAME)
    return True
