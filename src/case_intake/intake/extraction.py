"""
Extraction of whitelisted case files into a destination folder.

Output is flattened: each entry is written as destination/<base name>, so
entries sharing a base name overwrite each other in archive order.
Plain extraction is not transactional; files written before a failure stay on
disk. extract_entries_atomically stages into a sibling folder instead and only
moves it into place once every entry is written.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
import zipfile
import zlib
from pathlib import Path
from typing import Iterable, List

from src.case_intake.core.errors import ExtractionError, IntakeStage
from src.case_intake.intake.archive import entry_base_name

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024


def create_destination(destination: Path) -> None:
    """Create destination and missing parents; existing folders are fine."""
    try:
        destination.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExtractionError(
            f"Unable to create folder '{destination}': {e.strerror or e}.",
            stage=IntakeStage.METADATA_VALIDATED,
        ) from e


def extract_entries(
    archive: zipfile.ZipFile,
    entries: Iterable[zipfile.ZipInfo],
    destination: Path,
) -> List[str]:
    """
    Write each entry to destination/<base name>, overwriting existing files.

    Returns:
        Base names written, in first-write order

    Raises:
        ExtractionError: on the first I/O or archive read failure
    """
    destination = Path(destination)
    create_destination(destination)

    written: List[str] = []
    for info in entries:
        name = entry_base_name(info)
        if not name:
            continue
        target = destination / name
        try:
            with archive.open(info, "r") as source, open(target, "wb") as sink:
                shutil.copyfileobj(source, sink, COPY_BUFFER_SIZE)
        except (OSError, EOFError, RuntimeError, zipfile.BadZipFile, zlib.error) as e:
            # RuntimeError: encrypted entry without a password; zlib.error/EOFError: corrupt or truncated data
            logger.error(f"Extraction of '{info.filename}' to '{target}' failed after {len(written)} file(s): {e}")
            raise ExtractionError(f"Unable to extract '{info.filename}' to '{target}': {e}.") from e

        if name in written:
            logger.warning(f"'{info.filename}' overwrote an earlier entry named '{name}'")
        else:
            written.append(name)

    return written


def extract_entries_atomically(
    archive: zipfile.ZipFile,
    entries: Iterable[zipfile.ZipInfo],
    destination: Path,
) -> List[str]:
    """
    Like extract_entries, but nothing appears at destination unless every entry
    was written. destination must not exist yet.
    """
    destination = Path(destination)
    staging = destination.parent / f".{destination.name}.{uuid.uuid4().hex}.partial"

    try:
        written = extract_entries(archive, entries, staging)
        try:
            os.replace(staging, destination)
        except OSError as e:
            raise ExtractionError(
                f"Unable to move extracted files into '{destination}': {e.strerror or e}."
            ) from e
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    return written
