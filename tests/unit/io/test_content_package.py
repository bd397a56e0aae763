"""Unit tests for the ContentPackage reader."""

import logging
import zipfile
from pathlib import Path

import pytest

from cp2fm.exceptions import ArchiveError
from cp2fm.io.content_package import (
    FEATURE_CLASSIFIER,
    SLING_OSGI_FEATURE_TILE_TYPE,
    ArchiveEntry,
    ContentPackage,
    split_dependencies,
)


def names(entry: ArchiveEntry) -> list[str]:
    return [child.name for child in entry.children]


class TestLifecycle:
    def test_context_manager_opens_and_closes(self, content_package):
        path = content_package({"jcr_root/apps/app/file.txt": "x"})
        package = ContentPackage(path)
        assert package.is_closed
        with package as opened:
            assert opened is package
            assert not package.is_closed
        assert package.is_closed

    def test_closed_on_exception(self, content_package):
        package = ContentPackage(content_package({"jcr_root/a.txt": "x"}))
        with pytest.raises(RuntimeError):
            with package:
                raise RuntimeError("boom")
        assert package.is_closed

    def test_not_a_zip(self, tmp_path: Path):
        path = tmp_path / "broken.zip"
        path.write_bytes(b"definitely not a zip")
        with pytest.raises(ArchiveError, match="Unable to open"):
            ContentPackage(path).open()

    def test_open_entry_after_close_fails(self, content_package):
        package = ContentPackage(content_package({"jcr_root/a.txt": "x"}))
        with package:
            entry = package.root.get_child("a.txt")
        with pytest.raises(ArchiveError, match="not open"):
            package.open_entry(entry)


class TestMetadata:
    def test_properties(self, content_package):
        properties = {
            "group": "my_packages",
            "name": "my-app",
            "version": "1.0.0",
            "groupId": "com.example",
            "artifactId": "my-app-content",
            "description": "Hello",
            "dependencies": "day:core:[1.0,2.0),acme:base:1.1",
        }
        with ContentPackage(content_package(properties=properties)) as package:
            assert package.properties["artifactId"] == "my-app-content"
            assert package.package_id == "my_packages:my-app:1.0.0"
            assert package.description == "Hello"
            assert package.dependencies == ["day:core:[1.0,2.0)", "acme:base:1.1"]

            feature_id = package.get_feature_id()
            assert feature_id.group_id == "com.example"
            assert feature_id.artifact_id == "my-app-content"
            assert feature_id.version == "1.0.0"
            assert feature_id.classifier == FEATURE_CLASSIFIER
            assert feature_id.type == SLING_OSGI_FEATURE_TILE_TYPE

    def test_non_strict_falls_back_to_vault_names(self, content_package):
        properties = {"group": "my_packages", "name": "my-app", "version": "2.0"}
        with ContentPackage(content_package(properties=properties)) as package:
            feature_id = package.get_feature_id()
        assert (feature_id.group_id, feature_id.artifact_id) == ("my_packages", "my-app")

    def test_strict_requires_maven_coordinates(self, content_package):
        properties = {"group": "my_packages", "name": "my-app", "version": "2.0"}
        path = content_package({"jcr_root/a.txt": "x"}, properties=properties)
        with ContentPackage(path, strict_validation=True) as package:
            with pytest.raises(ArchiveError, match="groupId, artifactId"):
                package.get_feature_id()

    def test_missing_properties_non_strict(self, content_package, caplog):
        caplog.set_level(logging.WARNING)
        path = content_package({"jcr_root/a.txt": "x"}, properties=None)
        with ContentPackage(path) as package:
            assert package.properties == {}
            with pytest.raises(ArchiveError, match="does not declare"):
                package.get_feature_id()
        assert any("continuing with empty properties" in r.message for r in caplog.records)

    def test_missing_properties_strict(self, content_package):
        path = content_package({"jcr_root/a.txt": "x"}, properties=None)
        package = ContentPackage(path, strict_validation=True)
        with pytest.raises(ArchiveError, match="properties.xml"):
            package.open()
        assert package.is_closed

    def test_malformed_properties(self, tmp_path: Path):
        path = tmp_path / "bad.zip"
        with zipfile.ZipFile(path, "w") as zipf:
            zipf.writestr("META-INF/vault/properties.xml", "<properties><entry")
        with pytest.raises(ArchiveError, match="Invalid"):
            ContentPackage(path).open()

    def test_corrupted_properties(self, tmp_path: Path):
        path = tmp_path / "corrupted.zip"
        xml = b'<?xml version="1.0"?><properties><entry key="name">x</entry></properties>'
        with zipfile.ZipFile(path, "w") as zipf:
            zipf.writestr("META-INF/vault/properties.xml", xml)
        data = bytearray(path.read_bytes())
        # "x" becomes "y": still well-formed XML, only the CRC is wrong
        data[data.index(b">x<") + 1] ^= 0x01
        path.write_bytes(bytes(data))

        package = ContentPackage(path)
        with pytest.raises(ArchiveError, match="Invalid") as exc_info:
            package.open()
        assert isinstance(exc_info.value.__cause__, zipfile.BadZipFile)
        assert package.is_closed


class TestTree:
    def test_implicit_directories_are_synthesized(self, content_package):
        path = content_package(
            {
                "jcr_root/apps/app/install/a.jar": b"a",
                "jcr_root/apps/app/config/b.cfg": "k=v",
                "jcr_root/content/c.xml": "<c/>",
            }
        )
        with ContentPackage(path) as package:
            root = package.root
            assert root.name == "jcr_root"
            assert sorted(names(root)) == ["apps", "content"]
            app = root.get_child("apps").get_child("app")
            assert app.is_directory
            assert sorted(names(app)) == ["config", "install"]
            leaf = app.get_child("install").get_child("a.jar")
            assert not leaf.is_directory
            assert leaf.member == "jcr_root/apps/app/install/a.jar"

    def test_explicit_empty_directory(self, content_package):
        path = content_package({"jcr_root/apps/empty/": b""})
        with ContentPackage(path) as package:
            empty = package.root.get_child("apps").get_child("empty")
            assert empty.is_directory
            assert empty.children == []

    def test_open_entry_reads_bytes(self, content_package):
        path = content_package({"jcr_root/a.txt": "hello"})
        with ContentPackage(path) as package:
            with package.open_entry(package.root.get_child("a.txt")) as stream:
                assert stream.read() == b"hello"

    def test_open_directory_entry_fails(self, content_package):
        path = content_package({"jcr_root/apps/a.txt": "x"})
        with ContentPackage(path) as package:
            with pytest.raises(ArchiveError, match="not a file entry"):
                package.open_entry(package.root.get_child("apps"))

    def test_missing_jcr_root_non_strict(self, content_package, caplog):
        caplog.set_level(logging.WARNING)
        path = content_package({"META-INF/vault/filter.xml": "<workspaceFilter/>"})
        with ContentPackage(path) as package:
            root = package.root
        assert root.name == "jcr_root"
        assert root.children == []
        assert any("has no 'jcr_root'" in r.message for r in caplog.records)

    def test_missing_jcr_root_strict(self, content_package):
        path = content_package({"META-INF/vault/filter.xml": "<workspaceFilter/>"})
        with pytest.raises(ArchiveError, match="jcr_root"):
            ContentPackage(path, strict_validation=True).open()

    def test_unsafe_entry_skipped_non_strict(self, content_package, caplog):
        caplog.set_level(logging.WARNING)
        path = content_package({"jcr_root/a.txt": "x", "jcr_root/../evil.txt": "x"})
        with ContentPackage(path) as package:
            assert names(package.root) == ["a.txt"]
        assert any("unsafe entry" in r.message for r in caplog.records)

    def test_unsafe_entry_strict(self, content_package):
        path = content_package({"jcr_root/a.txt": "x", "jcr_root/../evil.txt": "x"})
        with pytest.raises(ArchiveError, match="Unsafe"):
            ContentPackage(path, strict_validation=True).open()


class TestSplitDependencies:
    def test_simple(self):
        assert split_dependencies("a:b:1, c:d:2") == ["a:b:1", "c:d:2"]

    def test_ranges_keep_commas(self):
        assert split_dependencies("a:b:[1.0,2.0),c:d:(1,2]") == [
            "a:b:[1.0,2.0)",
            "c:d:(1,2]",
        ]

    def test_empty(self):
        assert split_dependencies("") == []
        assert split_dependencies(" , ") == []
