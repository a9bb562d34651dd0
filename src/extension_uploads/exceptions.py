"""Upload-specific exceptions.

Every failure surfaced by the installer derives from UploadError so callers can
catch the whole family at the request-handling layer.
"""


class UploadError(Exception):
    """Base exception for extension upload and installation failures.

    Attributes:
        message: What went wrong, suitable for showing to the uploading admin
        context: Details for logs (archive path, entry name, versions involved)
    """

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidArgumentError(UploadError, ValueError):
    """No upload content was supplied."""


class UnsupportedFileTypeError(UploadError):
    """Uploaded file is not a zip archive."""


class InvalidArchiveError(UploadError):
    """Archive could not be opened, or one of its entries is damaged."""


class AmbiguousArchiveLayoutError(UploadError):
    """Single-item archive does not contain exactly one root directory."""


class DescriptorNotFoundError(UploadError):
    """Single-item archive has no recognizable plugin or theme descriptor."""


class UnsupportedVersionError(UploadError):
    """Plugin does not support the running application version."""


class UnresolvedTargetDirectoryError(UploadError):
    """No installation root is configured for the extension kind."""


class MalformedManifestError(UploadError):
    """Manifest entry exists but cannot be parsed."""


class UnsafeArchiveEntryError(UploadError):
    """Archive entry would be written outside its destination directory."""
