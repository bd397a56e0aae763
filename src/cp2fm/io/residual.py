"""
Residual packaging.

Entries no handler claimed are copied verbatim into a staging folder during
traversal. After traversal the staging folder, when not empty, is zipped into
a new content package that is deployed next to the converted bundles.
"""

import logging
import os
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import IO

from ..exceptions import ArchiveError, DeployError
from ..models.artifact_id import ArtifactId
from .artifact_repository import ArtifactRepository
from .content_package import (
    FEATURE_CLASSIFIER,
    NAME_GROUP,
    NAME_GROUP_ID,
    NAME_NAME,
    NAME_VERSION,
)
from .vault_properties import PROPERTIES_PATH, serialize_properties

logger = logging.getLogger(__name__)

ZIP_TYPE = "zip"
NAME_PACKAGE_TYPE = "packageType"
PACKAGE_TYPE_APPLICATION = "application"


class ResidualPackager:
    """Stages unclaimed entries and repackages them as a single zip artifact."""

    def __init__(self, staging_directory: Path):
        self._staging = Path(staging_directory)
        self._logger = logger.getChild(self.__class__.__name__)

    @property
    def staging_directory(self) -> Path:
        return self._staging

    def stage(self, entry_path: str, input_stream: IO[bytes]) -> Path:
        """
        Copy an entry into the staging folder, preserving its relative path.

        Raises:
            ArchiveError: If the entry path escapes the staging folder
            DeployError: If the copy fails
        """
        relative = PurePosixPath(entry_path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ArchiveError(f"Refusing to stage unsafe path '{entry_path}'", entry_path)

        target = self._staging.joinpath(*relative.parts)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as target_stream:
                shutil.copyfileobj(input_stream, target_stream)
        except OSError as e:
            raise DeployError(
                f"Unable to stage entry '{entry_path}': {e}", path=str(target)
            ) from e

        self._logger.debug(f"Entry {entry_path} staged for repackaging")
        return target

    def is_empty(self) -> bool:
        return not self._staging.exists() or not any(self._staging.iterdir())

    def package(
        self,
        feature_id: ArtifactId,
        package_properties: dict[str, str],
        repository: ArtifactRepository,
    ) -> ArtifactId | None:
        """
        Zip the staging folder and deploy it under the feature coordinate.

        Returns:
            The coordinate of the deployed residual package, or None when
            nothing was staged
        """
        if self.is_empty():
            self._logger.info("No resources to be repackaged.")
            return None

        residual_id = ArtifactId(
            group_id=feature_id.group_id,
            artifact_id=feature_id.artifact_id,
            version=feature_id.version,
            classifier=FEATURE_CLASSIFIER,
            type=ZIP_TYPE,
        )

        fd, archive_name = tempfile.mkstemp(
            prefix=f"{feature_id.artifact_id}-", suffix=f".{ZIP_TYPE}"
        )
        os.close(fd)
        archive_path = Path(archive_name)
        try:
            self._write_archive(
                archive_path, self._build_properties(feature_id, package_properties)
            )
            with open(archive_path, "rb") as input_stream:
                repository.deploy_artifact(input_stream, residual_id)
        except OSError as e:
            raise DeployError(
                f"Unable to repackage residual content: {e}", path=str(archive_path)
            ) from e
        finally:
            archive_path.unlink(missing_ok=True)

        self._logger.info(f"Residual content repackaged as '{residual_id}'")
        return residual_id

    @staticmethod
    def _build_properties(
        feature_id: ArtifactId, package_properties: dict[str, str]
    ) -> dict[str, str]:
        name = package_properties.get(NAME_NAME) or feature_id.artifact_id
        return {
            NAME_GROUP: package_properties.get(NAME_GROUP) or feature_id.group_id,
            NAME_NAME: f"{name} {FEATURE_CLASSIFIER}",
            NAME_VERSION: package_properties.get(NAME_VERSION) or feature_id.version,
            NAME_GROUP_ID: feature_id.group_id,
            NAME_PACKAGE_TYPE: PACKAGE_TYPE_APPLICATION,
        }

    def _write_archive(self, archive_path: Path, properties: dict[str, str]) -> None:
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as zipf:
            zipf.writestr(PROPERTIES_PATH, serialize_properties(properties))

            for path in sorted(self._staging.rglob("*")):
                arcname = path.relative_to(self._staging).as_posix()
                if arcname == PROPERTIES_PATH:
                    continue
                if path.is_dir():
                    # keep empty folders
                    if not any(path.iterdir()):
                        zipf.writestr(f"{arcname}/", b"")
                else:
                    zipf.write(path, arcname)
