"""Default locators backed by JSON descriptor files on disk.

Apps inject the root directories (policy); these classes only supply the
filename convention and the parsing.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from .schema import PluginDescriptor
from .schema import ThemeDescriptor

logger = logging.getLogger(__name__)

PLUGIN_DESCRIPTOR_FILE_NAME = "plugin.json"
THEME_DESCRIPTOR_FILE_NAME = "theme.json"


class DirectoryPluginLocator:
    """
    Plugin locator for a plugins directory with ``plugin.json`` descriptors.

    Example:
        >>> locator = DirectoryPluginLocator(plugins_root=Path("app/Plugins"))
        >>> locator.descriptor_file_name
        'plugin.json'
    """

    def __init__(self, plugins_root: Path, descriptor_file_name: str = PLUGIN_DESCRIPTOR_FILE_NAME):
        self._plugins_root = plugins_root
        self._descriptor_file_name = descriptor_file_name

    @property
    def plugins_root(self) -> Path:
        return self._plugins_root

    @property
    def descriptor_file_name(self) -> str:
        return self._descriptor_file_name

    def parse_descriptor(self, text: str) -> PluginDescriptor | None:
        try:
            return PluginDescriptor.from_json(text)
        except ValidationError as e:
            logger.warning(f"Invalid plugin descriptor: {e.error_count()} validation error(s)")
            logger.debug(f"Plugin descriptor errors: {e}")
            return None


class DirectoryThemeLocator:
    """Theme locator for a themes directory with ``theme.json`` descriptors."""

    def __init__(self, themes_root: Path | None, descriptor_file_name: str | None = THEME_DESCRIPTOR_FILE_NAME):
        self._themes_root = themes_root
        self._descriptor_file_name = descriptor_file_name

    @property
    def themes_root(self) -> Path | None:
        return self._themes_root

    @property
    def descriptor_file_name(self) -> str | None:
        return self._descriptor_file_name

    def parse_descriptor(self, text: str) -> ThemeDescriptor | None:
        try:
            return ThemeDescriptor.from_json(text)
        except ValidationError as e:
            logger.warning(f"Invalid theme descriptor: {e.error_count()} validation error(s)")
            logger.debug(f"Theme descriptor errors: {e}")
            return None
