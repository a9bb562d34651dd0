"""Tests for zip archive helpers."""

import zipfile
from pathlib import Path

import pytest
from conftest import build_zip
from conftest import corrupt_member
from extension_uploads import InvalidArchiveError
from extension_uploads import UnsafeArchiveEntryError
from extension_uploads.archive import check_members
from extension_uploads.archive import extract_all
from extension_uploads.archive import extract_directory
from extension_uploads.archive import find_entry
from extension_uploads.archive import open_archive
from extension_uploads.archive import read_entry_text
from extension_uploads.archive import top_level_directories


def test_find_entry_ignores_case(make_archive):
    """Test entry lookup is case-insensitive but exact."""
    archive_path = make_archive({"Misc.Test/Plugin.JSON": "{}"})

    with open_archive(archive_path) as archive:
        assert find_entry(archive, "misc.test/plugin.json") is not None
        assert find_entry(archive, "plugin.json") is None
        assert find_entry(archive, "Misc.Test/plugin.json.bak") is None


def test_read_entry_text(make_archive):
    """Test reading one entry's text without extraction."""
    archive_path = make_archive({"Misc.Test/": "", "Misc.Test/plugin.json": '{"SystemName": "Misc.Test"}'})

    with open_archive(archive_path) as archive:
        assert read_entry_text(archive, "Misc.Test/plugin.json") == '{"SystemName": "Misc.Test"}'
        assert read_entry_text(archive, "Misc.Test/missing.json") is None
        assert read_entry_text(archive, "Misc.Test/") is None


def test_read_entry_text_drops_bom(make_archive):
    """Test UTF-8 byte order mark is not part of the text."""
    archive_path = make_archive({"uploadedItems.json": "\ufeff[]".encode()})

    with open_archive(archive_path) as archive:
        assert read_entry_text(archive, "uploadedItems.json") == "[]"


def test_top_level_directories(make_archive):
    """Test only root directory entries are listed."""
    archive_path = make_archive(
        {
            "A/": "",
            "A/B/": "",
            "A/file.txt": "x",
            "readme.txt": "x",
            "C/": "",
        }
    )

    with open_archive(archive_path) as archive:
        assert top_level_directories(archive) == ["A/", "C/"]


def test_open_archive_not_a_zip(temp_dir):
    """Test non-zip content raises InvalidArchiveError."""
    archive_path = temp_dir / "broken.zip"
    archive_path.write_text("not a zip")

    with pytest.raises(InvalidArchiveError, match="Cannot open archive"):
        with open_archive(archive_path):
            pass


def test_open_archive_missing_file(temp_dir):
    """Test missing archive raises InvalidArchiveError."""
    with pytest.raises(InvalidArchiveError):
        with open_archive(temp_dir / "missing.zip"):
            pass


def test_extract_directory_strips_prefix(make_archive, temp_dir):
    """Test extraction of one archive directory into a destination."""
    archive_path = make_archive(
        {
            "Plugins/Misc.Test/": "",
            "Plugins/Misc.Test/plugin.json": "{}",
            "Plugins/Misc.Test/Views/Configure.cshtml": "<div/>",
            "Plugins/Misc.Test/empty/": "",
            "Plugins/Other/plugin.json": "{}",
        }
    )
    destination = temp_dir / "out" / "Misc.Test"

    with open_archive(archive_path) as archive:
        written = extract_directory(archive, "plugins/misc.test/", destination)

    assert written == 2
    assert (destination / "plugin.json").read_text() == "{}"
    assert (destination / "Views" / "Configure.cshtml").read_text() == "<div/>"
    assert (destination / "empty").is_dir()
    assert not (temp_dir / "out" / "Other").exists()


def test_extract_all_creates_parent_directories(make_archive, temp_dir):
    """Test entries without directory entries still get their parents created."""
    archive_path = make_archive({"Misc.Test/lib/net/a.dll": b"\x00\x01"})
    destination = temp_dir / "out"

    with open_archive(archive_path) as archive:
        extract_all(archive, destination)

    assert (destination / "Misc.Test" / "lib" / "net" / "a.dll").read_bytes() == b"\x00\x01"


def test_extract_refuses_parent_traversal(make_archive, temp_dir):
    """Test entries escaping the destination are refused before anything is written."""
    archive_path = make_archive({"Misc.Test/ok.txt": "ok", "Misc.Test/../../evil.txt": "evil"})
    destination = temp_dir / "out"

    with open_archive(archive_path) as archive:
        with pytest.raises(UnsafeArchiveEntryError):
            extract_all(archive, destination)

    assert not (destination / "Misc.Test" / "ok.txt").exists()
    assert not (temp_dir / "evil.txt").exists()


def test_extract_refuses_absolute_path(temp_dir):
    """Test absolute entry names are refused."""
    archive_path = temp_dir / "abs.zip"
    with zipfile.ZipFile(archive_path, "w") as zf:
        zf.writestr(zipfile.ZipInfo("/etc/evil.txt"), "evil")

    with open_archive(archive_path) as archive:
        with pytest.raises(UnsafeArchiveEntryError):
            extract_all(archive, Path(temp_dir) / "out")


def test_check_members_detects_damaged_entry(temp_dir):
    """Test a member whose data no longer matches its CRC is reported as InvalidArchiveError."""
    content = build_zip({"Misc.Test/plugin.json": "{}", "Misc.Test/data.bin": b"payload-0123456789"})
    archive_path = temp_dir / "damaged.zip"
    archive_path.write_bytes(corrupt_member(content, b"payload-0123456789", b"payload-9876543210"))
    destination = temp_dir / "out"

    with open_archive(archive_path) as archive:
        with pytest.raises(InvalidArchiveError, match="Misc.Test/data.bin"):
            check_members(archive, destination, "Misc.Test/")
        with pytest.raises(InvalidArchiveError):
            extract_all(archive, destination)

    assert not destination.exists()


def test_read_entry_text_damaged_entry(temp_dir):
    """Test reading a damaged entry raises InvalidArchiveError instead of a zipfile error."""
    content = build_zip({"uploadedItems.json": '[{"Type": "Plugin"}]'})
    archive_path = temp_dir / "damaged.zip"
    archive_path.write_bytes(corrupt_member(content, b'"Plugin"', b'"Plugon"'))

    with open_archive(archive_path) as archive:
        with pytest.raises(InvalidArchiveError):
            read_entry_text(archive, "uploadedItems.json")


def test_extract_directory_prefix_case_changes_length(make_archive, temp_dir):
    """Test prefixes only match same-length names, so stripping never cuts mid-name."""
    archive_path = make_archive({"Plugins/STRASSE/a.txt": "a", "Plugins/Straße/b.txt": "b"})

    with open_archive(archive_path) as archive:
        assert extract_directory(archive, "plugins/straße/", temp_dir / "one") == 1
        assert extract_directory(archive, "plugins/strasse/", temp_dir / "two") == 1

    assert (temp_dir / "one" / "b.txt").read_text() == "b"
    assert (temp_dir / "two" / "a.txt").read_text() == "a"
