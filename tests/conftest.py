"""
Shared pytest fixtures for cp2fm tests.

This module provides:
- A factory building real content-package zip files
- A factory building bundle jars with embedded Maven metadata
- Logger level cleanup between tests

Usage:
    def test_something(content_package):
        path = content_package({"jcr_root/apps/app/config/a.cfg": "k=v"})
"""

import io
import logging
import zipfile
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path

import pytest

from cp2fm.io.vault_properties import PROPERTIES_PATH, serialize_properties

DEFAULT_PACKAGE_PROPERTIES = {
    "group": "my_packages",
    "name": "my-app",
    "version": "1.0.0",
    "groupId": "com.example",
    "artifactId": "my-app",
    "description": "An example content package",
}

_DEFAULT = object()


# =============================================================================
# Package Factories
# =============================================================================


@pytest.fixture
def content_package(tmp_path: Path) -> Callable[..., Path]:
    """
    Build a content-package zip under ``tmp_path``.

    Args (of the returned factory):
        entries: Member name -> content (str or bytes); names ending with
            ``/`` become explicit directory entries
        properties: properties.xml entries; None omits the file entirely
        file_name: Name of the zip file
    """

    def _build(
        entries: Mapping[str, str | bytes] | None = None,
        properties: Mapping[str, str] | None | object = _DEFAULT,
        file_name: str = "my-app-1.0.0.zip",
    ) -> Path:
        if properties is _DEFAULT:
            properties = DEFAULT_PACKAGE_PROPERTIES

        path = tmp_path / file_name
        with zipfile.ZipFile(path, "w") as zipf:
            if properties is not None:
                zipf.writestr(PROPERTIES_PATH, serialize_properties(properties))
            for name, content in (entries or {}).items():
                if isinstance(content, str):
                    content = content.encode("utf-8")
                zipf.writestr(name, content)
        return path

    return _build


@pytest.fixture
def corrupted_content_package(content_package) -> Callable[..., Path]:
    """Build a content package whose given member fails its CRC check when read."""

    def _build(member: str, content: bytes = b"payload-to-be-damaged") -> Path:
        path = content_package({member: content})
        data = bytearray(path.read_bytes())
        # members are stored uncompressed, so the payload appears verbatim
        offset = data.index(content)
        data[offset] ^= 0xFF
        path.write_bytes(bytes(data))
        return path

    return _build


@pytest.fixture
def bundle_jar() -> Callable[..., bytes]:
    """Build jar bytes, optionally embedding ``META-INF/maven/.../pom.properties``."""

    def _build(
        group_id: str | None = "com.example",
        artifact_id: str | None = "widget",
        version: str | None = "1.2.0",
    ) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as jar:
            jar.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
            jar.writestr("com/example/Widget.class", b"\xca\xfe\xba\xbe")
            if group_id and artifact_id and version:
                jar.writestr(
                    f"META-INF/maven/{group_id}/{artifact_id}/pom.properties",
                    "#Generated by Maven\n"
                    f"groupId={group_id}\n"
                    f"artifactId={artifact_id}\n"
                    f"version={version}\n",
                )
        return buffer.getvalue()

    return _build


# =============================================================================
# Logging Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """The CLI reconfigures the root logger and quiets the package logger; undo both."""
    root = logging.getLogger()
    package_logger = logging.getLogger("cp2fm")
    root_handlers, root_level = list(root.handlers), root.level
    package_level = package_logger.level
    yield
    for handler in root.handlers:
        if handler not in root_handlers:
            root.removeHandler(handler)
    for handler in root_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(root_level)
    package_logger.setLevel(package_level)
