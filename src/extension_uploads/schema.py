"""Extension metadata schema - descriptors and the multi-item upload manifest.

Descriptors are a closed tagged union (plugin | theme) discriminated by ``kind``.
Only plugins carry a supported-versions list.
"""

import json
from enum import Enum
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import TypeAdapter


class PluginDescriptor(BaseModel):
    """
    Plugin metadata from a plugin descriptor file (``plugin.json``).

    Field names follow Python conventions; the JSON keys are the PascalCase
    aliases used by the descriptor files themselves.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["plugin"] = "plugin"

    group: str = Field(default="", alias="Group")
    friendly_name: str = Field(default="", alias="FriendlyName")
    system_name: str = Field(default="", alias="SystemName")
    version: str = Field(default="", alias="Version")
    supported_versions: list[str] = Field(default_factory=list, alias="SupportedVersions")
    author: str = Field(default="", alias="Author")
    display_order: int = Field(default=0, alias="DisplayOrder")
    file_name: str = Field(default="", alias="FileName")
    description: str = Field(default="", alias="Description")

    def supports(self, version: str) -> bool:
        """Check whether the plugin declares support for an application version."""
        return version in self.supported_versions

    @classmethod
    def from_json(cls, text: str) -> "PluginDescriptor":
        """
        Parse plugin descriptor text.

        Raises:
            pydantic.ValidationError: If text is not valid JSON or has wrong field types
        """
        return cls.model_validate_json(text)


class ThemeDescriptor(BaseModel):
    """Theme metadata from a theme descriptor file (``theme.json``)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["theme"] = "theme"

    system_name: str = Field(default="", alias="SystemName")
    friendly_name: str = Field(default="", alias="FriendlyName")
    support_rtl: bool = Field(default=False, alias="SupportRTL")
    preview_image_url: str = Field(default="", alias="PreviewImageUrl")
    preview_text: str = Field(default="", alias="PreviewText")

    @classmethod
    def from_json(cls, text: str) -> "ThemeDescriptor":
        """
        Parse theme descriptor text.

        Raises:
            pydantic.ValidationError: If text is not valid JSON or has wrong field types
        """
        return cls.model_validate_json(text)


ExtensionDescriptor = PluginDescriptor | ThemeDescriptor


class UploadedItemType(str, Enum):
    """Kind of item declared in an upload manifest (case-sensitive JSON values)."""

    PLUGIN = "Plugin"
    THEME = "Theme"


class ManifestEntry(BaseModel):
    """
    One item declared in ``uploadedItems.json``.

    Only ``item_type`` and ``directory_path`` drive installation; the other
    fields are informational but are kept so the manifest round-trips.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    item_type: UploadedItemType | None = Field(default=None, alias="Type")
    system_name: str | None = Field(default=None, alias="SystemName")
    version: str | None = Field(default=None, alias="Version")
    directory_path: str | None = Field(default=None, alias="DirectoryPath")
    source_directory_path: str | None = Field(default=None, alias="SourceDirectoryPath")

    def to_dict(self) -> dict:
        """Convert to dictionary using the manifest's JSON keys."""
        return self.model_dump(mode="json", by_alias=True)


_manifest_adapter = TypeAdapter(list[ManifestEntry])


def parse_manifest(text: str) -> list[ManifestEntry]:
    """
    Parse manifest text into an ordered list of entries.

    Raises:
        pydantic.ValidationError: If text is not a JSON array of entry objects
    """
    return _manifest_adapter.validate_json(text)


def dump_manifest(entries: list[ManifestEntry]) -> str:
    """Serialize manifest entries back to the ``uploadedItems.json`` format."""
    return json.dumps([entry.to_dict() for entry in entries], indent=2)
