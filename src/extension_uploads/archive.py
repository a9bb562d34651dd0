"""Zip archive access - entry lookup, descriptor reading, and extraction.

Entry paths are archive-relative with forward slashes. Lookups are
case-insensitive. Directory entries end with a slash and are never written as
files; parent directories are always created on extraction.
"""

import logging
import shutil
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .exceptions import InvalidArchiveError
from .exceptions import UnsafeArchiveEntryError

logger = logging.getLogger(__name__)

# Raised by zipfile while reading a damaged member (bad CRC, truncated or invalid deflate data).
_MEMBER_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError)


@contextmanager
def open_archive(archive_path: Path) -> Iterator[zipfile.ZipFile]:
    """Open a zip archive read-only.

    Raises:
        InvalidArchiveError: If the file is missing, unreadable, or not a zip archive
    """
    try:
        archive = zipfile.ZipFile(archive_path, "r")
    except (zipfile.BadZipFile, OSError) as e:
        raise InvalidArchiveError(
            f"Cannot open archive {archive_path.name}: {e}",
            context={"archive_path": str(archive_path)},
        ) from e

    with archive:
        yield archive


def _corrupt_member(archive: zipfile.ZipFile, info: zipfile.ZipInfo, error: Exception) -> InvalidArchiveError:
    return InvalidArchiveError(
        f"Archive entry '{info.filename}' is damaged: {error}",
        context={"archive_path": str(archive.filename), "entry": info.filename},
    )


def find_entry(archive: zipfile.ZipFile, entry_path: str) -> zipfile.ZipInfo | None:
    """Find an entry by exact archive-relative path, ignoring case."""
    wanted = entry_path.casefold()
    for info in archive.infolist():
        if info.filename.casefold() == wanted:
            return info
    return None


def read_entry_text(archive: zipfile.ZipFile, entry_path: str) -> str | None:
    """Read one entry's text content without extracting the archive.

    Args:
        archive: Open archive
        entry_path: Archive-relative path (e.g. "uploadedItems.json" or "Payments.PayPal/plugin.json")

    Returns:
        Decoded UTF-8 text (leading BOM dropped), or None if no such entry
    """
    info = find_entry(archive, entry_path)
    if info is None or info.is_dir():
        return None
    try:
        data = archive.read(info)
    except _MEMBER_ERRORS as e:
        raise _corrupt_member(archive, info, e) from e
    return data.decode("utf-8-sig")


def top_level_directories(archive: zipfile.ZipFile) -> list[str]:
    """List root directory entries (one slash, at the end), in archive order."""
    return [
        info.filename
        for info in archive.infolist()
        if info.filename.count("/") == 1 and info.filename.endswith("/")
    ]


def _resolve_member_path(destination: Path, relative_path: str) -> Path:
    """Map an archive-relative path under destination, refusing anything that escapes it."""
    if relative_path.startswith(("/", "\\")) or ".." in Path(relative_path).parts:
        raise UnsafeArchiveEntryError(
            f"Archive entry '{relative_path}' points outside the destination directory",
            context={"entry": relative_path, "destination": str(destination)},
        )

    target = (destination / relative_path).resolve()
    root = destination.resolve()
    if target != root and root not in target.parents:
        raise UnsafeArchiveEntryError(
            f"Archive entry '{relative_path}' points outside the destination directory",
            context={"entry": relative_path, "destination": str(destination)},
        )
    return target


def _write_member(archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        with archive.open(info, "r") as src, open(target, "wb") as out:
            shutil.copyfileobj(src, out)
    except _MEMBER_ERRORS as e:
        raise _corrupt_member(archive, info, e) from e


def _verify_member(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> None:
    """Read a member to the end so zipfile checks its CRC."""
    try:
        with archive.open(info, "r") as src:
            while src.read(1 << 16):
                pass
    except _MEMBER_ERRORS as e:
        raise _corrupt_member(archive, info, e) from e


def _members_under(archive: zipfile.ZipFile, prefix: str) -> list[zipfile.ZipInfo]:
    # Compare same-length slices so stripping len(prefix) always cuts at the matched prefix.
    folded = prefix.casefold()
    return [info for info in archive.infolist() if info.filename[: len(prefix)].casefold() == folded]


def check_members(archive: zipfile.ZipFile, destination: Path, prefix: str = "") -> None:
    """Validate every entry under prefix before anything on disk is touched.

    Each entry must stay inside destination once extracted, and each file
    entry must read back with a matching CRC.

    Raises:
        UnsafeArchiveEntryError: On the first escaping entry
        InvalidArchiveError: On the first damaged entry
    """
    for info in _members_under(archive, prefix):
        relative_path = info.filename[len(prefix) :]
        if not relative_path:
            continue
        _resolve_member_path(destination, relative_path)
        if not info.is_dir():
            _verify_member(archive, info)


def extract_all(archive: zipfile.ZipFile, destination: Path) -> int:
    """Extract every entry of the archive into destination.

    Returns:
        Number of files written (directory entries not counted)

    Raises:
        UnsafeArchiveEntryError: If any entry would land outside destination
        InvalidArchiveError: If an entry is damaged
    """
    return extract_directory(archive, "", destination)


def extract_directory(archive: zipfile.ZipFile, prefix: str, destination: Path) -> int:
    """Extract entries under an archive directory prefix into destination.

    The prefix (matched case-insensitively) is stripped from each entry path.
    The prefix's own directory entry is skipped; other directory entries are
    created but not written.

    Args:
        archive: Open archive
        prefix: Archive directory prefix ending with "/", or "" for the whole archive
        destination: Directory that receives the stripped paths

    Returns:
        Number of files written

    Raises:
        UnsafeArchiveEntryError: If any entry would land outside destination
        InvalidArchiveError: If an entry is damaged
    """
    check_members(archive, destination, prefix)
    destination.mkdir(parents=True, exist_ok=True)

    written = 0
    for info in _members_under(archive, prefix):
        relative_path = info.filename[len(prefix) :]
        if not relative_path:
            continue

        target = _resolve_member_path(destination, relative_path)
        if info.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            continue

        _write_member(archive, info, target)
        written += 1

    logger.debug(f"Extracted {written} files from '{prefix or '/'}' into {destination}")
    return written
