#!/usr/bin/env python3
"""Cities: Skylines Mod Installer — Entry Point

Dry-runs the installer against an archive and prints the copy instructions
the mod manager would carry out.
"""

import argparse
import asyncio
import faulthandler
import logging
import os
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from archive_listing import ARCHIVE_ERRORS, list_archive_files
from crp_installer import (
    InstallError,
    OperationCanceled,
    classify_archive,
    install_mod,
)
from extension import prepare_for_modding
from game_profile import GAME_ID, default_layout, load_layout

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 2
EXIT_UNSUPPORTED = 3


def setup_logging() -> tuple[logging.Logger, Path]:
    log_dir = Path(os.environ.get("APPDATA", "~")).expanduser() / "CitiesSkylinesModInstaller"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "citiesskylinesinstaller.log"

    handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,  # 1 MB
        backupCount=2,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s  %(levelname)-8s  %(message)s"))

    # on the root logger so crp_installer, extension etc. share the file
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    logger = logging.getLogger("citiesskylinesinstaller")
    logger.setLevel(logging.DEBUG)
    return logger, log_dir


def install_crash_handler(logger: logging.Logger, log_dir: Path):
    def handle_exception(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical(
            "Unhandled exception:\n%s",
            "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
        )
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = handle_exception

    crash_file = log_dir / "crash.log"
    faulthandler.enable(open(crash_file, "w"), all_threads=True)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cities: Skylines Mod Installer")
    parser.add_argument("archive", help=".zip, .7z or .rar mod archive")
    parser.add_argument("--game-id", default=GAME_ID)
    parser.add_argument("--settings", help="JSON file overriding the install layout")
    parser.add_argument("--mod-base-path")
    parser.add_argument("--prompt", choices=("console", "qt"), default="console")
    parser.add_argument(
        "--prepare", action="store_true", help="create the mod folders before printing"
    )
    return parser.parse_args(argv)


async def ask_category_console(title: str, text: str, choices: Sequence[str]) -> Optional[str]:
    print(f"\n{title}\n\n{text}\n")
    for i, choice in enumerate(choices, start=1):
        print(f"  {i}. {choice}")
    try:
        answer = await asyncio.to_thread(input, "Choice: ")
    except EOFError:
        return None
    answer = answer.strip()
    if answer.isdigit() and 1 <= int(answer) <= len(choices):
        return choices[int(answer) - 1]
    return None


async def run(args: argparse.Namespace) -> int:
    log = logging.getLogger("citiesskylinesinstaller")

    try:
        layout = load_layout(args.settings) if args.settings else default_layout()
        files = list_archive_files(args.archive)
    except (OSError, ValueError, ValidationError, *ARCHIVE_ERRORS) as exc:
        log.error("Could not read %s: %s", args.archive, exc)
        print(f"Failed: {exc}")
        return EXIT_FAILED

    if args.mod_base_path:
        layout = layout.model_copy(update={"mod_base_path": args.mod_base_path})

    if not classify_archive(files, args.game_id).supported:
        print(f"{args.archive}: not a {args.game_id} mod archive")
        return EXIT_UNSUPPORTED

    if args.prompt == "qt":
        from gui import ask_category_qt as ask_category
    else:
        ask_category = ask_category_console

    try:
        result = await install_mod(files, ask_category, layout)
    except OperationCanceled as exc:
        log.warning("Install of %s cancelled: %s", args.archive, exc)
        print(f"Cancelled: {exc}")
        return EXIT_CANCELLED
    except InstallError as exc:
        log.error("Install of %s failed: %s", args.archive, exc)
        print(f"Failed: {exc}")
        return EXIT_FAILED

    if args.prepare:
        await prepare_for_modding(layout)

    print(f"Install as {result.category.value} under {layout.mod_base_path}")
    for ins in result.instructions:
        print(f"  {ins.type}  {ins.source} -> {ins.destination}")
    return EXIT_OK


def cli():
    args = parse_args()

    logger, log_dir = setup_logging()
    install_crash_handler(logger, log_dir)
    logger.info("Starting Cities: Skylines Mod Installer on %s", args.archive)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    cli()
