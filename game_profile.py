"""
Game profile for the Cities: Skylines installer.

Holds the identifiers the mod manager uses to recognise the game and the
install layout: where each kind of content lives beneath the game's
mod-data root.

Cities: Skylines keeps user content outside the game folder:

    %LOCALAPPDATA%/Colossal Order/Cities_Skylines
    ├── Addons/
    │   ├── Mods/      <- code mods (.dll), usually in subfolders
    │   └── Assets/    <- custom assets (.crp), optionally in subfolders
    ├── Maps/          <- maps (.crp)
    └── Saves/         <- saved cities (.crp)

The layout can be overridden with a JSON settings file:

{
    "mod_base_path": "D:/CS/Cities_Skylines",
    "maps_dir": "Maps"
}
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

GAME_ID = "citiesskylines"
GAME_NAME = "Cities: Skylines"
STEAMAPP_ID = "255710"
EXECUTABLE = "Cities.exe"
STEAM_INSTALL_DIR = "Cities_Skylines"

MOD_EXT = ".dll"
FILE_EXT = ".crp"

INSTALLER_NAME = "cities-skylines-installer"
INSTALLER_PRIORITY = 25

_log = logging.getLogger(__name__)


def default_mod_base_path() -> str:
    local_app_data = os.environ.get("LOCALAPPDATA", "~")
    return str(
        Path(local_app_data).expanduser() / "Colossal Order" / "Cities_Skylines"
    )


class InstallLayout(BaseModel):
    """Immutable install roots shared by the installer and the game setup.

    The ``*_dir`` fields are relative to ``mod_base_path`` and are what copy
    instructions are rooted at.  ``heuristic_assets_dir`` is the root used
    when an archive is recognised as assets from its folder names, which is
    not the same folder the user gets by picking "Install as Asset".
    """

    model_config = ConfigDict(frozen=True, validate_default=True)

    mod_base_path: str = ""
    mods_dir: str = "Addons/Mods"
    assets_dir: str = "Addons/Assets"
    heuristic_assets_dir: str = "Addons"
    maps_dir: str = "Maps"
    saves_dir: str = "Saves"

    @field_validator("mod_base_path")
    @classmethod
    def _default_base(cls, v: str) -> str:
        return v or default_mod_base_path()

    @field_validator("mods_dir", "assets_dir", "heuristic_assets_dir", "maps_dir", "saves_dir")
    @classmethod
    def _normalize(cls, v: str) -> str:
        v = v.replace("\\", "/").strip("/")
        if not v:
            raise ValueError("Install directories must not be empty")
        return v

    @staticmethod
    def native(relative: str) -> str:
        """Render a ``/``-separated relative root with the platform separator."""
        return os.path.join(*relative.split("/"))

    def absolute_dirs(self) -> list[Path]:
        """Directories that must exist before anything can be installed."""
        base = Path(self.mod_base_path)
        return [
            base / self.native(rel)
            for rel in (self.mods_dir, self.assets_dir, self.maps_dir, self.saves_dir)
        ]


def default_layout() -> InstallLayout:
    return InstallLayout()


def load_layout(path: str | Path) -> InstallLayout:
    """Read an install layout from a JSON settings file.

    Raises ``pydantic.ValidationError`` if a field is invalid.
    Raises ``json.JSONDecodeError`` if the file is not valid JSON.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found at {path}")
    layout = InstallLayout.model_validate(json.loads(path.read_text(encoding="utf-8")))
    _log.info("Loaded install layout from %s (base %s)", path, layout.mod_base_path)
    return layout
