"""
Tests for archive classification and file placement.
"""

import asyncio
import os

import pytest

from crp_installer import (
    CANCEL_CHOICE,
    PROMPT_TITLE,
    ExtensionClass,
    InstallCategory,
    NoInstallableContent,
    OperationCanceled,
    classify_archive,
    classify_extension,
    detect_folder_category,
    install_mod,
    is_loose,
)
from game_profile import GAME_ID, InstallLayout


def run_install(files, prompt, layout):
    return asyncio.run(install_mod(files, prompt, layout))


def dests(result):
    return [ins.destination for ins in result.instructions]


# ── classification ───────────────────────────────────────────────────────────

def test_classify_dll_and_crp_archives():
    assert classify_archive(["MyMod.dll"], GAME_ID).supported
    assert classify_archive(["Folder/Park.crp"], GAME_ID).supported
    assert classify_archive(["README.md", "Plugin.DLL"], GAME_ID).supported
    assert classify_archive(["Building.CRP"], GAME_ID).required_files == []


def test_classify_rejects_other_games_and_content():
    # Scenario: a game executable, offered for another game
    result = classify_archive(["Cities.exe"], "other-game")
    assert result.supported is False
    assert result.required_files == []

    assert not classify_archive(["MyMod.dll"], "skyrimse").supported
    assert not classify_archive(["readme.txt", "preview.png"], GAME_ID).supported
    assert not classify_archive([], GAME_ID).supported


def test_extension_classes():
    assert classify_extension("a/b/Mod.dll") == ExtensionClass.CODE_MOD
    assert classify_extension("Park.Crp") == ExtensionClass.OPAQUE_ASSET
    assert classify_extension("notes.txt") == ExtensionClass.OTHER
    assert classify_extension("Assets") == ExtensionClass.OTHER
    assert classify_extension(".crp") == ExtensionClass.OTHER


# ── code mods ────────────────────────────────────────────────────────────────

def test_dll_archive_installs_everything_as_mod(prompt, layout):
    ask = prompt(None)
    result = run_install(["MyMod.dll", "readme.txt"], ask, layout)

    assert result.category == InstallCategory.MOD
    assert dests(result) == [
        os.path.join("Addons", "Mods", "MyMod.dll"),
        os.path.join("Addons", "Mods", "readme.txt"),
    ]
    assert all(ins.type == "copy" for ins in result.instructions)
    assert ask.calls == []


def test_dll_wins_over_crp_and_folder_hints(prompt, layout):
    ask = prompt("Install as Map")
    files = ["Maps/Island.crp", os.path.join("MyMod", "MyMod.dll"), "Saves/City.crp"]
    result = run_install(files, ask, layout)

    assert result.category == InstallCategory.MOD
    assert [ins.source for ins in result.instructions] == files
    assert dests(result)[1] == os.path.join("Addons", "Mods", "MyMod", "MyMod.dll")
    assert ask.calls == []


# ── folder heuristics ────────────────────────────────────────────────────────

def test_maps_folder_installs_as_map_without_prompt(prompt, layout):
    ask = prompt(CANCEL_CHOICE)
    result = run_install(["Maps/Island.crp", "Maps/Coast.crp"], ask, layout)

    assert result.category == InstallCategory.MAP
    assert dests(result) == [
        os.path.join("Maps", "Maps", "Island.crp"),
        os.path.join("Maps", "Maps", "Coast.crp"),
    ]
    assert ask.calls == []


def test_saves_folder_keeps_matched_segment(prompt, layout):
    result = run_install(["Saves/MyCity.crp"], prompt(None), layout)

    assert result.category == InstallCategory.SAVE
    assert dests(result) == [os.path.join("Saves", "Saves", "MyCity.crp")]


def test_assets_folder_wins_and_roots_at_addons(prompt, layout):
    files = ["Saves/City.crp", "Maps/Island.crp", "Assets/Tower.crp"]
    result = run_install(files, prompt(None), layout)

    assert result.category == InstallCategory.ASSET
    assert dests(result) == [
        os.path.join("Addons", "Saves", "City.crp"),
        os.path.join("Addons", "Maps", "Island.crp"),
        os.path.join("Addons", "Assets", "Tower.crp"),
    ]


def test_maps_beats_saves():
    assert detect_folder_category(["Saves/a.crp", "Maps/b.crp"]) == InstallCategory.MAP


def test_folder_hint_is_a_case_sensitive_prefix():
    assert detect_folder_category(["MapsPack/Island.crp"]) == InstallCategory.MAP
    assert detect_folder_category(["maps/Island.crp"]) is None
    assert detect_folder_category(["Content/Maps/Island.crp"]) is None


def test_loose_requires_every_path_to_start_with_separator():
    assert not is_loose(["Island.crp"])
    assert not is_loose([os.sep + "Maps" + os.sep + "a.crp", "b.crp"])
    assert is_loose([os.sep + "Maps" + os.sep + "a.crp"])


def test_separator_rooted_archive_skips_folder_hints(prompt, layout):
    ask = prompt("Install as Save")
    source = os.sep + os.path.join("Maps", "Island.crp")
    result = run_install([source], ask, layout)

    assert len(ask.calls) == 1
    assert result.category == InstallCategory.SAVE
    assert dests(result) == [os.path.join("Saves", "Maps", "Island.crp")]


# ── prompt ───────────────────────────────────────────────────────────────────

def test_loose_crp_prompts_and_installs_as_map(prompt, layout):
    ask = prompt("Install as Map")
    result = run_install(["CustomAsset.crp"], ask, layout)

    assert result.category == InstallCategory.MAP
    assert dests(result) == [os.path.join("Maps", "CustomAsset.crp")]

    title, text, choices = ask.calls[0]
    assert title == PROMPT_TITLE
    assert "CRP" in text
    assert choices == [CANCEL_CHOICE, "Install as Asset", "Install as Map", "Install as Save"]


def test_prompted_asset_goes_to_addons_assets(prompt, layout):
    result = run_install(["Park/Park.crp", "Park/preview.png"], prompt("Install as Asset"), layout)

    assert result.category == InstallCategory.ASSET
    assert dests(result) == [
        os.path.join("Addons", "Assets", "Park", "Park.crp"),
        os.path.join("Addons", "Assets", "Park", "preview.png"),
    ]


def test_folder_entries_do_not_count_as_hints(prompt, layout):
    # "Assets" has no extension, so it is dropped before the folder check
    ask = prompt("Install as Save")
    result = run_install(["Assets", "City.crp"], ask, layout)

    assert len(ask.calls) == 1
    assert dests(result) == [os.path.join("Saves", "City.crp")]


@pytest.mark.parametrize("answer", [CANCEL_CHOICE, None, "", "Install as Mod"])
def test_prompt_without_a_category_cancels(prompt, layout, answer):
    with pytest.raises(OperationCanceled):
        run_install(["CustomAsset.crp"], prompt(answer), layout)


# ── instructions ─────────────────────────────────────────────────────────────

def test_extensionless_entries_dropped_duplicates_kept(prompt, layout):
    files = ["Maps", "Maps/Island.crp", "Maps/Island.crp", "Maps/LICENSE"]
    result = run_install(files, prompt(None), layout)

    assert [ins.source for ins in result.instructions] == ["Maps/Island.crp", "Maps/Island.crp"]


def test_no_installable_content(prompt, layout):
    ask = prompt("Install as Map")
    with pytest.raises(NoInstallableContent):
        run_install(["readme.txt", "docs"], ask, layout)
    assert ask.calls == []


def test_custom_layout_roots(prompt, tmp_path):
    custom = InstallLayout(
        mod_base_path=str(tmp_path),
        mods_dir="Addons\\Plugins",
        maps_dir="/MyMaps/",
    )
    result = run_install(["Plugin.dll"], prompt(None), custom)
    assert dests(result) == [os.path.join("Addons", "Plugins", "Plugin.dll")]

    result = run_install(["Island.crp"], prompt("Install as Map"), custom)
    assert dests(result) == [os.path.join("MyMaps", "Island.crp")]
