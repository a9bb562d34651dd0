"""Protocols for the collaborators that know where extensions live.

Apps provide implementations (see locators.py for the default JSON-file ones).
The installer only requires these interfaces.
"""

from pathlib import Path
from typing import Protocol
from typing import runtime_checkable

from .schema import PluginDescriptor
from .schema import ThemeDescriptor


@runtime_checkable
class PluginLocator(Protocol):
    """Protocol for the plugins side of the application.

    Knows the plugins root directory, the descriptor filename convention, and
    how to turn descriptor text into a PluginDescriptor.
    """

    @property
    def plugins_root(self) -> Path:
        """Directory that holds one subdirectory per installed plugin."""
        ...

    @property
    def descriptor_file_name(self) -> str:
        """Filename of the descriptor directly under a plugin's directory."""
        ...

    def parse_descriptor(self, text: str) -> PluginDescriptor | None:
        """Parse descriptor text.

        Args:
            text: Decoded descriptor file content

        Returns:
            PluginDescriptor, or None if the text is not a valid descriptor
        """
        ...


@runtime_checkable
class ThemeLocator(Protocol):
    """Protocol for the themes side of the application.

    Optional: when no theme locator is injected, theme installs are disabled.
    """

    @property
    def themes_root(self) -> Path | None:
        """Directory that holds installed themes, or None if themes are not installed on disk."""
        ...

    @property
    def descriptor_file_name(self) -> str | None:
        """Filename of the descriptor directly under a theme's directory."""
        ...

    def parse_descriptor(self, text: str) -> ThemeDescriptor | None:
        """Parse descriptor text.

        Args:
            text: Decoded descriptor file content

        Returns:
            ThemeDescriptor, or None if the text is not a valid descriptor
        """
        ...
