"""Shared fixtures for extension-uploads tests."""

import io
import json
import shutil
import tempfile
import zipfile
from collections.abc import Callable
from collections.abc import Generator
from pathlib import Path

import pytest
from extension_uploads import DirectoryPluginLocator
from extension_uploads import DirectoryThemeLocator

CURRENT_VERSION = "4.60"


def plugin_json(system_name: str, supported_versions: list[str] | None = None) -> str:
    """Plugin descriptor text supporting CURRENT_VERSION unless told otherwise."""
    return json.dumps(
        {
            "Group": "Payment methods",
            "FriendlyName": system_name,
            "SystemName": system_name,
            "Version": "1.00",
            "SupportedVersions": supported_versions if supported_versions is not None else [CURRENT_VERSION],
            "Author": "Test Author",
            "DisplayOrder": 1,
            "FileName": f"{system_name}.dll",
            "Description": "Test plugin",
        }
    )


def theme_json(system_name: str) -> str:
    return json.dumps({"SystemName": system_name, "FriendlyName": system_name, "SupportRTL": False})


def build_zip(entries: dict[str, str | bytes]) -> bytes:
    """Build zip bytes; names ending with "/" become directory entries."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


def corrupt_member(content: bytes, original: bytes, replacement: bytes) -> bytes:
    """Swap stored member bytes in raw zip content so the member's CRC no longer matches."""
    assert len(original) == len(replacement)
    assert content.count(original) == 1
    return content.replace(original, replacement)


def installed_files(root: Path) -> set[str]:
    """Relative POSIX paths of every file under root."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory."""
    path = Path(tempfile.mkdtemp(prefix="extension_uploads_test_"))
    yield path
    if path.exists():
        shutil.rmtree(path)


@pytest.fixture
def make_archive(temp_dir: Path) -> Callable[..., Path]:
    """Write a zip archive under temp_dir/archives and return its path."""

    def _make(entries: dict[str, str | bytes], name: str = "upload.zip") -> Path:
        archive_path = temp_dir / "archives" / name
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        archive_path.write_bytes(build_zip(entries))
        return archive_path

    return _make


@pytest.fixture
def plugins_root(temp_dir: Path) -> Path:
    path = temp_dir / "Plugins"
    path.mkdir()
    return path


@pytest.fixture
def themes_root(temp_dir: Path) -> Path:
    path = temp_dir / "Themes"
    path.mkdir()
    return path


@pytest.fixture
def plugin_locator(plugins_root: Path) -> DirectoryPluginLocator:
    return DirectoryPluginLocator(plugins_root=plugins_root)


@pytest.fixture
def theme_locator(themes_root: Path) -> DirectoryThemeLocator:
    return DirectoryThemeLocator(themes_root=themes_root)
