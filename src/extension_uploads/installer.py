"""Extension installation from zip archives.

Apps provide:
- plugin_locator / theme_locator: where extensions live and how descriptors parse
- current_version: the running application version, checked against plugins

Two modes:
- Single item: archive root holds exactly one extension directory.
- Multiple items: an upload manifest declares each item's directory.

Single-item installs are all-or-nothing. Multi-item installs skip bad entries
and only fail when the archive itself cannot be read.
"""

import logging
import shutil
import zipfile
from pathlib import Path

from .archive import check_members
from .archive import extract_all
from .archive import extract_directory
from .archive import open_archive
from .archive import read_entry_text
from .archive import top_level_directories
from .exceptions import AmbiguousArchiveLayoutError
from .exceptions import DescriptorNotFoundError
from .exceptions import InvalidArchiveError
from .exceptions import UnresolvedTargetDirectoryError
from .exceptions import UnsafeArchiveEntryError
from .exceptions import UnsupportedVersionError
from .manifest import MANIFEST_FILE_NAME
from .protocols import PluginLocator
from .protocols import ThemeLocator
from .schema import ExtensionDescriptor
from .schema import ManifestEntry
from .schema import PluginDescriptor
from .schema import UploadedItemType

logger = logging.getLogger(__name__)


def _replace_directory(path: Path) -> None:
    """Remove an existing installation so no stale files survive a re-install."""
    if path.exists():
        logger.debug(f"Removing existing directory {path}")
        shutil.rmtree(path)


def _is_directory_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and "\\" not in name


def _entry_label(entry: ManifestEntry) -> str:
    return entry.system_name or entry.directory_path or "<unnamed>"


def _read_descriptor_text(archive: zipfile.ZipFile, entry_path: str) -> str | None:
    try:
        return read_entry_text(archive, entry_path)
    except UnicodeDecodeError as e:
        logger.warning(f"Descriptor {entry_path} is not valid UTF-8 text: {e}")
        return None


class ExtensionInstaller:
    """
    Install plugins and themes from an archive on disk (with injected locators).

    Example:
        >>> installer = ExtensionInstaller(
        ...     plugin_locator=DirectoryPluginLocator(Path("app/Plugins")),
        ...     current_version="4.60",
        ...     theme_locator=DirectoryThemeLocator(Path("app/Themes")),
        ... )
        >>> descriptor = installer.install_single(Path("Payments.PayPal.zip"))
    """

    def __init__(
        self,
        plugin_locator: PluginLocator,
        current_version: str,
        theme_locator: ThemeLocator | None = None,
    ):
        self.plugin_locator = plugin_locator
        self.current_version = current_version
        self.theme_locator = theme_locator

    def _theme_descriptor_file_name(self) -> str | None:
        if self.theme_locator is None:
            return None
        return self.theme_locator.descriptor_file_name or None

    def _target_root(self, descriptor: ExtensionDescriptor) -> Path | None:
        if isinstance(descriptor, PluginDescriptor):
            return self.plugin_locator.plugins_root
        if self.theme_locator is None:
            return None
        return self.theme_locator.themes_root

    def install_single(self, archive_path: Path) -> ExtensionDescriptor:
        """
        Install an archive holding exactly one extension directory.

        Process:
        1. Require exactly one root directory entry
        2. Read the plugin descriptor, or the theme descriptor if themes are enabled
        3. Check plugin version support
        4. Replace targetRoot/<root directory> with the archive contents

        Args:
            archive_path: Path to the zip archive

        Returns:
            Descriptor of the installed extension

        Raises:
            InvalidArchiveError: If the archive cannot be opened or an entry is damaged
            AmbiguousArchiveLayoutError: If there is not exactly one root directory
            DescriptorNotFoundError: If no usable descriptor sits under the root directory
            UnsupportedVersionError: If the plugin does not support current_version
            UnresolvedTargetDirectoryError: If the extension kind has no installation root
            UnsafeArchiveEntryError: If an entry would be extracted outside the root
        """
        with open_archive(archive_path) as archive:
            root_directories = top_level_directories(archive)
            if len(root_directories) != 1:
                raise AmbiguousArchiveLayoutError(
                    f"The archive should contain exactly one root plugin or theme directory, "
                    f"found {len(root_directories)}. "
                    f"To upload multiple items, add '{MANIFEST_FILE_NAME}' to the archive root.",
                    context={"archive_path": str(archive_path), "root_directories": root_directories},
                )

            directory_name = root_directories[0].rstrip("/")
            descriptor = self._read_single_descriptor(archive, directory_name)
            if descriptor is None:
                raise DescriptorNotFoundError(
                    f"No descriptor file found in '{directory_name}/'. "
                    f"It should be in the root directory of the archive.",
                    context={"archive_path": str(archive_path), "directory": directory_name},
                )

            if isinstance(descriptor, PluginDescriptor) and not descriptor.supports(self.current_version):
                raise UnsupportedVersionError(
                    f"Plugin '{descriptor.system_name or directory_name}' doesn't support "
                    f"the current version - {self.current_version}",
                    context={
                        "current_version": self.current_version,
                        "supported_versions": descriptor.supported_versions,
                    },
                )

            target_root = self._target_root(descriptor)
            if not target_root or not _is_directory_name(directory_name):
                raise UnresolvedTargetDirectoryError(
                    f"Cannot resolve the {descriptor.kind} installation directory for '{directory_name}'",
                    context={"kind": descriptor.kind, "directory": directory_name},
                )

            check_members(archive, target_root)

            install_path = target_root / directory_name
            logger.info(f"Installing {descriptor.kind} '{directory_name}' to {install_path}")
            _replace_directory(install_path)
            extract_all(archive, target_root)

        logger.info(f"Successfully installed {descriptor.kind}: {directory_name}")
        return descriptor

    def _read_single_descriptor(self, archive: zipfile.ZipFile, directory_name: str) -> ExtensionDescriptor | None:
        plugin_text = _read_descriptor_text(archive, f"{directory_name}/{self.plugin_locator.descriptor_file_name}")
        if plugin_text is not None:
            return self.plugin_locator.parse_descriptor(plugin_text)

        theme_file_name = self._theme_descriptor_file_name()
        if self.theme_locator is None or theme_file_name is None:
            return None

        theme_text = _read_descriptor_text(archive, f"{directory_name}/{theme_file_name}")
        if theme_text is None:
            return None
        return self.theme_locator.parse_descriptor(theme_text)

    def install_multiple(self, archive_path: Path, manifest: list[ManifestEntry]) -> list[ExtensionDescriptor]:
        """
        Install every item declared in an upload manifest.

        Entries are processed in manifest order. An entry that cannot be
        installed (no type, no descriptor, unsupported version, damaged or
        unwritable files) is skipped and omitted from the result; compare the
        result length against the manifest to detect partial installs.

        Args:
            archive_path: Path to the zip archive
            manifest: Entries parsed from the archive's manifest

        Returns:
            Descriptors of the installed items, in manifest order

        Raises:
            InvalidArchiveError: If the archive cannot be opened
        """
        descriptors: list[ExtensionDescriptor] = []
        with open_archive(archive_path) as archive:
            for entry in manifest:
                try:
                    descriptor = self._install_entry(archive, entry)
                except (InvalidArchiveError, UnsafeArchiveEntryError, OSError) as e:
                    logger.warning(f"Skipping manifest item {_entry_label(entry)}: {e}")
                    continue
                if descriptor is not None:
                    descriptors.append(descriptor)

        logger.info(f"Installed {len(descriptors)} of {len(manifest)} items from {archive_path.name}")
        return descriptors

    def _install_entry(self, archive: zipfile.ZipFile, entry: ManifestEntry) -> ExtensionDescriptor | None:
        label = _entry_label(entry)
        if entry.item_type is None:
            logger.warning(f"Skipping manifest item {label}: no type")
            return None

        item_path = f"{(entry.directory_path or '').rstrip('/')}/"

        if entry.item_type is UploadedItemType.PLUGIN:
            descriptor_file_name = self.plugin_locator.descriptor_file_name
        else:
            descriptor_file_name = self._theme_descriptor_file_name()
        if not descriptor_file_name:
            logger.warning(f"Skipping manifest item {label}: themes are not supported")
            return None

        text = _read_descriptor_text(archive, f"{item_path}{descriptor_file_name}")
        if text is None:
            logger.warning(f"Skipping manifest item {label}: {item_path}{descriptor_file_name} not in archive")
            return None

        if entry.item_type is UploadedItemType.PLUGIN:
            descriptor = self.plugin_locator.parse_descriptor(text)
        else:
            descriptor = self.theme_locator.parse_descriptor(text)
        if descriptor is None:
            logger.warning(f"Skipping manifest item {label}: descriptor could not be parsed")
            return None

        if isinstance(descriptor, PluginDescriptor) and not descriptor.supports(self.current_version):
            logger.warning(f"Skipping manifest item {label}: current version {self.current_version} not supported")
            return None

        directory_name = item_path.rstrip("/").rsplit("/", 1)[-1]
        target_root = self._target_root(descriptor)
        if not _is_directory_name(directory_name) or not target_root:
            logger.warning(f"Skipping manifest item {label}: cannot resolve installation directory")
            return None

        install_path = target_root / directory_name
        check_members(archive, install_path, item_path)

        logger.info(f"Installing {descriptor.kind} '{directory_name}' to {install_path}")
        _replace_directory(install_path)
        extract_directory(archive, item_path, install_path)
        return descriptor
