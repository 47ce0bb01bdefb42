"""
Archive inspection for case file ZIPs.

Locates the party.xml metadata entry and lists the entries eligible for
extraction. Only base filenames matter: archive sub-paths are ignored for
matching and discarded on extraction.
"""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import FrozenSet, List, Union

from src.case_intake.core.config import PARTY_XML_FILE_NAME, MetadataMatchPolicy
from src.case_intake.core.errors import (
    ArchiveNotFoundError,
    ArchiveOpenError,
    MetadataAmbiguousError,
    MetadataMissingError,
)

logger = logging.getLogger(__name__)


def parse_whitelist(value: str) -> FrozenSet[str]:
    """
    Parse a comma-separated extension list such as ".pdf,.docx".
    Whitespace around items is stripped and empty items are dropped.
    """
    return frozenset(item.strip() for item in (value or "").split(",") if item.strip())


def entry_base_name(info: zipfile.ZipInfo) -> str:
    """Return the base filename of an entry ('' for directory entries)."""
    return info.filename.replace("\\", "/").rsplit("/", 1)[-1]


def entry_extension(info: zipfile.ZipInfo) -> str:
    # ".pdf" for "docs/a.pdf" and for a bare ".pdf"; "" for "README"
    name = entry_base_name(info)
    if name.startswith(".") and name.count(".") == 1:
        return name
    return os.path.splitext(name)[1]


def open_archive(zip_path: Union[str, Path]) -> zipfile.ZipFile:
    """
    Open a ZIP file for reading. The caller owns the returned handle.

    Raises:
        ArchiveNotFoundError: no file at zip_path
        ArchiveOpenError: the file is not a readable ZIP archive
    """
    if not os.path.isfile(zip_path):
        raise ArchiveNotFoundError(f"Unable to find ZIP file '{zip_path}'.")

    try:
        return zipfile.ZipFile(zip_path, "r")
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveOpenError(f"Unable to open ZIP file '{zip_path}': {e}.") from e


def locate_metadata_entry(
    archive: zipfile.ZipFile,
    policy: MetadataMatchPolicy = MetadataMatchPolicy.ERROR,
) -> zipfile.ZipInfo:
    """
    Find the party.xml entry by case-insensitive match on the base filename.

    Raises:
        MetadataMissingError: no entry matches
        MetadataAmbiguousError: several entries match and policy is ERROR
    """
    matches = [
        info for info in archive.infolist()
        if not info.is_dir() and entry_base_name(info).lower() == PARTY_XML_FILE_NAME
    ]

    if not matches:
        raise MetadataMissingError(f"Unable to find '{PARTY_XML_FILE_NAME}' in ZIP file.")

    if len(matches) > 1:
        names = ", ".join(f"'{m.filename}'" for m in matches)
        if MetadataMatchPolicy(policy) is MetadataMatchPolicy.ERROR:
            raise MetadataAmbiguousError(
                f"Found {len(matches)} '{PARTY_XML_FILE_NAME}' entries in ZIP file ({names})."
            )
        logger.warning(f"Multiple '{PARTY_XML_FILE_NAME}' entries ({names}); using '{matches[0].filename}'")

    return matches[0]


def select_extractable_entries(
    archive: zipfile.ZipFile,
    whitelist: FrozenSet[str],
    case_sensitive: bool = True,
) -> List[zipfile.ZipInfo]:
    """
    Return the entries whose extension is in the whitelist, in archive order.
    Directory entries are never returned.
    """
    allowed = whitelist if case_sensitive else frozenset(ext.lower() for ext in whitelist)

    selected = []
    for info in archive.infolist():
        if info.is_dir():
            continue
        ext = entry_extension(info)
        if not case_sensitive:
            ext = ext.lower()
        if ext and ext in allowed:
            selected.append(info)

    logger.debug(f"Selected {len(selected)} of {len(archive.infolist())} entries for extraction")
    return selected
