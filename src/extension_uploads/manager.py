"""Upload entry point - accept an uploaded archive and install its extensions.

The uploaded bytes are staged in a temporary directory for the duration of
one call and always removed afterwards, whatever the outcome.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from .exceptions import InvalidArgumentError
from .exceptions import UnsupportedFileTypeError
from .installer import ExtensionInstaller
from .manifest import resolve_manifest
from .protocols import PluginLocator
from .protocols import ThemeLocator
from .schema import ExtensionDescriptor

logger = logging.getLogger(__name__)

SUPPORTED_ARCHIVE_SUFFIX = ".zip"


def default_uploads_temp_dir() -> Path:
    """Process-wide staging directory for uploaded archives."""
    return Path(tempfile.gettempdir()) / "extension_uploads"


class UploadManager:
    """
    Install plugins and/or themes from an uploaded zip archive.

    Apps inject policy: the locators (where extensions go), the running
    application version, and the staging directory for uploads. Theme support
    is disabled unless a theme locator is given.

    Calls are not synchronized; callers install one archive at a time.

    Example:
        >>> manager = UploadManager(
        ...     plugin_locator=DirectoryPluginLocator(Path("app/Plugins")),
        ...     current_version="4.60",
        ... )
        >>> descriptors = manager.upload("Payments.PayPal.zip", request_body)
        >>> print([d.system_name for d in descriptors])
    """

    def __init__(
        self,
        plugin_locator: PluginLocator,
        current_version: str,
        theme_locator: ThemeLocator | None = None,
        uploads_temp_dir: Path | None = None,
    ):
        self.installer = ExtensionInstaller(
            plugin_locator=plugin_locator,
            current_version=current_version,
            theme_locator=theme_locator,
        )
        self.uploads_temp_dir = uploads_temp_dir or default_uploads_temp_dir()

    def upload(self, file_name: str, content: bytes | BinaryIO | None) -> list[ExtensionDescriptor]:
        """
        Install every extension contained in an uploaded archive.

        Process:
        1. Validate content and the .zip extension
        2. Stage the archive under uploads_temp_dir
        3. Multi-item install if the archive has a non-empty manifest, else single-item
        4. Delete the staged archive

        Args:
            file_name: Original name of the uploaded file
            content: Archive bytes or a readable binary stream

        Returns:
            Descriptors of installed extensions. A single-item archive yields one
            element; a manifest archive yields one per successfully installed item.

        Raises:
            InvalidArgumentError: If no content is supplied
            UnsupportedFileTypeError: If the file is not a .zip archive
            UploadError: Any single-item install or manifest failure (see installer)
        """
        if content is None or (isinstance(content, bytes | bytearray) and not content):
            raise InvalidArgumentError("No archive content was uploaded")

        name = Path(file_name or "").name
        if Path(name).suffix.lower() != SUPPORTED_ARCHIVE_SUFFIX:
            raise UnsupportedFileTypeError(
                "Only zip archives are supported",
                context={"file_name": file_name},
            )

        archive_path = self.uploads_temp_dir / name
        try:
            self._stage(archive_path, content)
            logger.info(f"Uploading extensions from {name}")

            manifest = resolve_manifest(archive_path)
            if not manifest:
                return [self.installer.install_single(archive_path)]

            return self.installer.install_multiple(archive_path, manifest)
        finally:
            archive_path.unlink(missing_ok=True)
            logger.debug(f"Removed staged archive {archive_path}")

    def _stage(self, archive_path: Path, content: bytes | BinaryIO) -> None:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with open(archive_path, "wb") as f:
            if isinstance(content, bytes | bytearray):
                f.write(content)
            else:
                shutil.copyfileobj(content, f)

        logger.debug(f"Staged upload at {archive_path}")
