"""
Installer for Cities: Skylines mod archives.

Archives come in two flavours:

- code mods, recognised by a .dll anywhere in the archive, and
- content packages (.crp), which may be a custom asset, a map or a saved
  city.  All three share the one extension, so the folder names inside the
  archive are the only hint.  When those don't settle it the user is asked.

classify_archive() decides whether an archive belongs to this game;
install_mod() turns its file list into copy instructions rooted under the
mod-data folder.  Nothing in this module touches the disk.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from game_profile import FILE_EXT, GAME_ID, MOD_EXT, InstallLayout, default_layout

_log = logging.getLogger(__name__)

# (title, text, choices) -> label of the chosen button, or None if dismissed
AskCategory = Callable[[str, str, Sequence[str]], Awaitable[Optional[str]]]

PROMPT_TITLE = "Unidentified Mod Type"
PROMPT_TEXT = (
    "The mod manager has been unable to automatically determine the type of mod "
    "you are installing based on the file structure. "
    "This is because Cities: Skylines uses CRP format files for Assets, Saves and "
    "Maps. Please select which type of mod this is from the options below to "
    "complete the installation."
)


class ExtensionClass(str, Enum):
    CODE_MOD = "code_mod"
    OPAQUE_ASSET = "opaque_asset"
    OTHER = "other"


class InstallCategory(str, Enum):
    MOD = "mod"
    ASSET = "asset"
    MAP = "map"
    SAVE = "save"


CANCEL_CHOICE = "Cancel"
PROMPT_CHOICES: dict[str, InstallCategory] = {
    "Install as Asset": InstallCategory.ASSET,
    "Install as Map": InstallCategory.MAP,
    "Install as Save": InstallCategory.SAVE,
}

# Checked in order; the first prefix found in any path wins.
_FOLDER_HINTS = (
    ("Assets", InstallCategory.ASSET),
    ("Maps", InstallCategory.MAP),
    ("Saves", InstallCategory.SAVE),
)


class InstallError(Exception):
    """An archive could not be turned into install instructions."""


class NoInstallableContent(InstallError):
    """The archive holds neither a code mod nor any .crp content."""


class OperationCanceled(InstallError):
    """The user backed out of the mod type prompt."""


@dataclass(frozen=True)
class CopyInstruction:
    source: str
    destination: str  # relative to the mod-data root
    type: str = "copy"


@dataclass(frozen=True)
class ClassificationResult:
    supported: bool
    required_files: list[str] = field(default_factory=list)


@dataclass
class InstallResult:
    category: InstallCategory
    instructions: list[CopyInstruction] = field(default_factory=list)


# ── Extensions ────────────────────────────────────────────────────────

def extension_of(path: str) -> str:
    """Final extension including the dot, "" for dotfiles and folders."""
    return os.path.splitext(path)[1]


def classify_extension(path: str) -> ExtensionClass:
    ext = extension_of(path).lower()
    if ext == MOD_EXT:
        return ExtensionClass.CODE_MOD
    if ext == FILE_EXT:
        return ExtensionClass.OPAQUE_ASSET
    return ExtensionClass.OTHER


def _contains(files: Sequence[str], kind: ExtensionClass) -> bool:
    return any(classify_extension(f) == kind for f in files)


# ── Classifier ────────────────────────────────────────────────────────

def classify_archive(files: Sequence[str], game_id: str) -> ClassificationResult:
    supported = game_id == GAME_ID and any(
        classify_extension(f) != ExtensionClass.OTHER for f in files
    )
    _log.debug("Classified %d file(s) for %s: supported=%s", len(files), game_id, supported)
    return ClassificationResult(supported=supported, required_files=[])


# ── Placement ─────────────────────────────────────────────────────────

def is_loose(files: Sequence[str]) -> bool:
    # True only when every path starts with a separator, which relative
    # archive paths never do.
    return all(f.find(os.sep) == 0 for f in files)


def detect_folder_category(files: Sequence[str]) -> Optional[InstallCategory]:
    """Guess the kind of a .crp archive from its top-level folder names.

    Returns ``None`` when the archive is loose or no path starts with
    Assets, Maps or Saves.
    """
    if is_loose(files):
        return None
    for prefix, category in _FOLDER_HINTS:
        if any(f.startswith(prefix) for f in files):
            return category
    return None


def category_root(
    category: InstallCategory, layout: InstallLayout, *, chosen_by_user: bool = False
) -> str:
    """Relative install root for a category, ``/``-separated."""
    if category == InstallCategory.MOD:
        return layout.mods_dir
    if category == InstallCategory.ASSET:
        return layout.assets_dir if chosen_by_user else layout.heuristic_assets_dir
    if category == InstallCategory.MAP:
        return layout.maps_dir
    return layout.saves_dir


def reroot(root: str, source: str) -> str:
    return os.path.normpath(os.sep.join((InstallLayout.native(root), source)))


async def ask_user_category(ask_category: AskCategory) -> InstallCategory:
    response = await ask_category(
        PROMPT_TITLE, PROMPT_TEXT, [CANCEL_CHOICE, *PROMPT_CHOICES]
    )
    if response == CANCEL_CHOICE:
        _log.warning("Mod type prompt cancelled by the user")
        raise OperationCanceled("Mod install cancelled by the user.")

    category = PROMPT_CHOICES.get(response) if response else None
    if category is None:
        _log.warning("Mod type prompt returned no usable choice: %r", response)
        raise OperationCanceled("Unable to determine mod type")

    _log.info("User chose to install as %s", category.value)
    return category


async def install_mod(
    files: Sequence[str],
    ask_category: AskCategory,
    layout: InstallLayout | None = None,
) -> InstallResult:
    """Map every file of an archive to its destination under the mod-data root.

    A .dll anywhere makes the whole archive a code mod.  Otherwise .crp
    content is placed by folder name, falling back to ``ask_category``.
    Files without an extension are left out of the instructions.

    Raises ``OperationCanceled`` if the user declines the prompt and
    ``NoInstallableContent`` if there is nothing this game can use.
    """
    layout = layout or default_layout()
    filtered = [f for f in files if extension_of(f)]
    chosen_by_user = False

    if _contains(files, ExtensionClass.CODE_MOD):
        category = InstallCategory.MOD
    elif _contains(files, ExtensionClass.OPAQUE_ASSET):
        category = detect_folder_category(filtered)
        if category is None:
            _log.info("Could not tell the mod type from %d file(s), asking", len(filtered))
            category = await ask_user_category(ask_category)
            chosen_by_user = True
    else:
        raise NoInstallableContent(
            f"No {MOD_EXT} or {FILE_EXT} files found among {len(files)} file(s)"
        )

    root = category_root(category, layout, chosen_by_user=chosen_by_user)
    instructions = [CopyInstruction(source=f, destination=reroot(root, f)) for f in filtered]
    _log.info(
        "Installing %d file(s) as %s into %s", len(instructions), category.value, root
    )
    return InstallResult(category=category, instructions=instructions)
