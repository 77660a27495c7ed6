"""
Read the member list of a mod archive without extracting it.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import py7zr
import rarfile

_log = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".zip", ".7z", ".rar"}

# Raised when an archive is corrupt or not what its extension says
ARCHIVE_ERRORS = (zipfile.BadZipFile, py7zr.Bad7zFile, rarfile.Error)


def list_archive_files(filepath: str | Path) -> list[str]:
    """Return member paths in archive order, using the platform separator.

    Folder entries come back with no extension, the way an extractor reports
    them, so the installer drops them on its own.
    """
    filepath = Path(filepath)
    ext = filepath.suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported archive format: {ext}")

    if ext == ".zip":
        with zipfile.ZipFile(filepath, "r") as zf:
            names = zf.namelist()
    elif ext == ".7z":
        with py7zr.SevenZipFile(filepath, "r") as sz:
            names = sz.getnames()
    else:
        with rarfile.RarFile(filepath, "r") as rf:
            names = [info.filename for info in rf.infolist()]

    files = [
        str(Path(*n.replace("\\", "/").rstrip("/").split("/")))
        for n in names
        if n.strip("/\\")
    ]
    _log.debug("Listed %d member(s) in %s", len(files), filepath.name)
    return files
