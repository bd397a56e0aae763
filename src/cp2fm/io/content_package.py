"""
Content package reader.

A content package is a zip archive with a ``jcr_root`` content tree and a
``META-INF/vault`` metadata folder. This module exposes the archive as a
tree of entries and gives access to the package properties.
"""

import logging
import xml.etree.ElementTree as ET
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import IO

from ..exceptions import ArchiveError
from ..models.artifact_id import ArtifactId
from .vault_properties import PROPERTIES_PATH, parse_properties

logger = logging.getLogger(__name__)

JCR_ROOT = "jcr_root"

NAME_GROUP = "group"
NAME_NAME = "name"
NAME_VERSION = "version"
NAME_DESCRIPTION = "description"
NAME_DEPENDENCIES = "dependencies"
NAME_GROUP_ID = "groupId"
NAME_ARTIFACT_ID = "artifactId"

# Raised lazily by zip member streams on corrupted data
ENTRY_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError)

FEATURE_CLASSIFIER = "cp2fm-converted-feature"
SLING_OSGI_FEATURE_TILE_TYPE = "slingosgifeature"


@dataclass
class ArchiveEntry:
    """A node of the archive tree; directories carry children, files a member name."""

    name: str
    is_directory: bool
    children: list["ArchiveEntry"] = field(default_factory=list)
    member: str | None = None

    def get_child(self, name: str) -> "ArchiveEntry | None":
        for child in self.children:
            if child.name == name:
                return child
        return None


def split_dependencies(value: str) -> list[str]:
    """
    Split the comma separated ``dependencies`` property.

    Commas inside version ranges such as ``[1.0,2.0)`` are not separators.
    """
    dependencies = []
    current = []
    depth = 0
    for char in value:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth = max(depth - 1, 0)

        if char == "," and depth == 0:
            dependencies.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    dependencies.append("".join(current).strip())
    return [d for d in dependencies if d]


class ContentPackage:
    """
    Read access to a content package archive.

    Must be opened before use and closed afterwards; use it as a context
    manager to guarantee the archive handle is released on every exit path.
    """

    def __init__(self, path: Path, strict_validation: bool = False):
        self._path = Path(path)
        self._strict = strict_validation
        self._zip: zipfile.ZipFile | None = None
        self._properties: dict[str, str] = {}
        self._tree = ArchiveEntry(name="", is_directory=True)
        self._logger = logger.getChild(self.__class__.__name__)

    # --- Lifecycle ---

    def open(self) -> "ContentPackage":
        """
        Open the archive, read its properties and index its entries.

        Raises:
            ArchiveError: If the archive is unreadable or, in strict mode,
                malformed
        """
        if self._zip is not None:
            return self

        try:
            self._zip = zipfile.ZipFile(self._path)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Unable to open content-package '{self._path}': {e}") from e

        try:
            self._properties = self._read_properties(self._zip)
            self._tree = self._index_entries(self._zip)
            if self._strict and self._tree.get_child(JCR_ROOT) is None:
                raise ArchiveError(
                    f"Content-package '{self._path}' has no '{JCR_ROOT}' folder"
                )
        except BaseException:
            self.close()
            raise

        return self

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    @property
    def is_closed(self) -> bool:
        return self._zip is None

    def __enter__(self) -> "ContentPackage":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Metadata ---

    @property
    def path(self) -> Path:
        return self._path

    @property
    def properties(self) -> dict[str, str]:
        return dict(self._properties)

    @property
    def package_id(self) -> str:
        """Vault package id, ``group:name:version``."""
        return ":".join(
            self._properties.get(key, "")
            for key in (NAME_GROUP, NAME_NAME, NAME_VERSION)
        )

    @property
    def description(self) -> str | None:
        return self._properties.get(NAME_DESCRIPTION) or None

    @property
    def dependencies(self) -> list[str]:
        return split_dependencies(self._properties.get(NAME_DEPENDENCIES, ""))

    def get_feature_id(self) -> ArtifactId:
        """
        Build the target feature coordinate from the package properties.

        Raises:
            ArchiveError: If group, artifact or version cannot be determined
        """
        group_id = self._properties.get(NAME_GROUP_ID)
        artifact_id = self._properties.get(NAME_ARTIFACT_ID)
        if not self._strict:
            group_id = group_id or self._properties.get(NAME_GROUP)
            artifact_id = artifact_id or self._properties.get(NAME_NAME)
        version = self._properties.get(NAME_VERSION)

        missing = [
            name
            for name, value in (
                (NAME_GROUP_ID, group_id),
                (NAME_ARTIFACT_ID, artifact_id),
                (NAME_VERSION, version),
            )
            if not value
        ]
        if missing:
            raise ArchiveError(
                f"Content-package '{self._path}' does not declare: {', '.join(missing)}"
            )

        return ArtifactId(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            classifier=FEATURE_CLASSIFIER,
            type=SLING_OSGI_FEATURE_TILE_TYPE,
        )

    # --- Content ---

    @property
    def root(self) -> ArchiveEntry:
        """The ``jcr_root`` entry, an empty directory if the package has none."""
        jcr_root = self._tree.get_child(JCR_ROOT)
        if jcr_root is None:
            self._logger.warning(f"Content-package '{self._path}' has no '{JCR_ROOT}' folder")
            return ArchiveEntry(name=JCR_ROOT, is_directory=True)
        return jcr_root

    def open_entry(self, entry: ArchiveEntry) -> IO[bytes]:
        """
        Open a file entry for reading.

        Corrupted member data only surfaces while reading the returned
        stream, as one of ENTRY_READ_ERRORS.

        Raises:
            ArchiveError: If the archive is closed or the entry is unreadable
        """
        if self._zip is None:
            raise ArchiveError(f"Content-package '{self._path}' is not open")
        if entry.is_directory or entry.member is None:
            raise ArchiveError(f"'{entry.name}' is not a file entry", entry.member)

        try:
            return self._zip.open(entry.member)
        except (OSError, KeyError, RuntimeError, zipfile.BadZipFile) as e:
            raise ArchiveError(
                f"Unable to read entry '{entry.member}': {e}", entry.member
            ) from e

    # --- Internals ---

    def _read_properties(self, zip_file: zipfile.ZipFile) -> dict[str, str]:
        try:
            with zip_file.open(PROPERTIES_PATH) as stream:
                return parse_properties(stream)
        except KeyError:
            if self._strict:
                raise ArchiveError(
                    f"Content-package '{self._path}' has no {PROPERTIES_PATH}"
                ) from None
            self._logger.warning(
                f"Content-package '{self._path}' has no {PROPERTIES_PATH}, "
                "continuing with empty properties"
            )
            return {}
        except (ET.ParseError, ValueError, OSError, *ENTRY_READ_ERRORS) as e:
            raise ArchiveError(
                f"Invalid {PROPERTIES_PATH} in '{self._path}': {e}", PROPERTIES_PATH
            ) from e

    def _index_entries(self, zip_file: zipfile.ZipFile) -> ArchiveEntry:
        tree = ArchiveEntry(name="", is_directory=True)

        for info in zip_file.infolist():
            name = info.filename
            if not self._is_safe(name):
                if self._strict:
                    raise ArchiveError(f"Unsafe entry path '{name}'", name)
                self._logger.warning(f"Skipping unsafe entry path '{name}'")
                continue

            parts = [p for p in name.split("/") if p]
            if not parts:
                continue

            parent = tree
            for part in parts[:-1]:
                parent = self._directory(parent, part)

            if info.is_dir():
                self._directory(parent, parts[-1])
            else:
                parent.children.append(
                    ArchiveEntry(name=parts[-1], is_directory=False, member=name)
                )

        return tree

    @staticmethod
    def _directory(parent: ArchiveEntry, name: str) -> ArchiveEntry:
        child = parent.get_child(name)
        if child is None or not child.is_directory:
            child = ArchiveEntry(name=name, is_directory=True)
            parent.children.append(child)
        return child

    @staticmethod
    def _is_safe(name: str) -> bool:
        path = PurePosixPath(name)
        return not path.is_absolute() and ".." not in path.parts and "\\" not in name
