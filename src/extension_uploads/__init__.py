"""extension-uploads - Install plugins and themes from uploaded zip archives.

Library mechanism only: apps inject policy (extension roots, descriptor
parsing, running version, staging directory).
"""

from .exceptions import AmbiguousArchiveLayoutError
from .exceptions import DescriptorNotFoundError
from .exceptions import InvalidArchiveError
from .exceptions import InvalidArgumentError
from .exceptions import MalformedManifestError
from .exceptions import UnresolvedTargetDirectoryError
from .exceptions import UnsafeArchiveEntryError
from .exceptions import UnsupportedFileTypeError
from .exceptions import UnsupportedVersionError
from .exceptions import UploadError
from .installer import ExtensionInstaller
from .locators import PLUGIN_DESCRIPTOR_FILE_NAME
from .locators import THEME_DESCRIPTOR_FILE_NAME
from .locators import DirectoryPluginLocator
from .locators import DirectoryThemeLocator
from .manager import UploadManager
from .manifest import MANIFEST_FILE_NAME
from .manifest import resolve_manifest
from .protocols import PluginLocator
from .protocols import ThemeLocator
from .schema import ExtensionDescriptor
from .schema import ManifestEntry
from .schema import PluginDescriptor
from .schema import ThemeDescriptor
from .schema import UploadedItemType
from .schema import dump_manifest
from .schema import parse_manifest

__all__ = [
    # Entry point
    "UploadManager",
    # Installation
    "ExtensionInstaller",
    "resolve_manifest",
    "MANIFEST_FILE_NAME",
    # Collaborators
    "PluginLocator",
    "ThemeLocator",
    "DirectoryPluginLocator",
    "DirectoryThemeLocator",
    "PLUGIN_DESCRIPTOR_FILE_NAME",
    "THEME_DESCRIPTOR_FILE_NAME",
    # Metadata
    "ExtensionDescriptor",
    "PluginDescriptor",
    "ThemeDescriptor",
    "ManifestEntry",
    "UploadedItemType",
    "parse_manifest",
    "dump_manifest",
    # Exceptions
    "UploadError",
    "InvalidArgumentError",
    "UnsupportedFileTypeError",
    "InvalidArchiveError",
    "AmbiguousArchiveLayoutError",
    "DescriptorNotFoundError",
    "UnsupportedVersionError",
    "UnresolvedTargetDirectoryError",
    "MalformedManifestError",
    "UnsafeArchiveEntryError",
]

__version__ = "0.1.0"
