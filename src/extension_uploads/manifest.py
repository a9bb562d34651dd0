"""Upload manifest resolution.

An archive carrying several extensions declares them in ``uploadedItems.json``
at its root. No manifest (or an empty one) means the archive holds a single
extension.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from .archive import open_archive
from .archive import read_entry_text
from .exceptions import MalformedManifestError
from .schema import ManifestEntry
from .schema import parse_manifest

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "uploadedItems.json"


def resolve_manifest(archive_path: Path) -> list[ManifestEntry] | None:
    """
    Read the upload manifest from the root of an archive.

    Args:
        archive_path: Path to the zip archive

    Returns:
        Ordered manifest entries, or None if the archive has no manifest.
        An empty list is returned as-is; callers treat it like None.

    Raises:
        InvalidArchiveError: If the archive cannot be opened
        MalformedManifestError: If the manifest exists but is not a JSON array of entries
    """
    with open_archive(archive_path) as archive:
        manifest_name = next(
            (
                info.filename
                for info in archive.infolist()
                if "/" not in info.filename and info.filename.casefold() == MANIFEST_FILE_NAME.casefold()
            ),
            None,
        )
        if manifest_name is None:
            logger.debug(f"No {MANIFEST_FILE_NAME} in {archive_path.name}")
            return None

        try:
            text = read_entry_text(archive, manifest_name)
        except UnicodeDecodeError as e:
            raise MalformedManifestError(
                f"{manifest_name} is not valid UTF-8 text: {e}",
                context={"archive_path": str(archive_path), "entry": manifest_name},
            ) from e

    # A JSON null manifest declares nothing, same as a blank file.
    if not text or text.strip() in ("", "null"):
        logger.debug(f"Empty {manifest_name} in {archive_path.name}")
        return None

    try:
        entries = parse_manifest(text)
    except ValidationError as e:
        raise MalformedManifestError(
            f"Invalid {manifest_name} in {archive_path.name}: {e}",
            context={"archive_path": str(archive_path), "entry": manifest_name},
        ) from e

    logger.debug(f"Manifest in {archive_path.name} declares {len(entries)} items")
    return entries
