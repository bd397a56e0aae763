import logging
import shutil
from pathlib import Path
from typing import IO

from ..exceptions import DeployError
from ..models.artifact_id import ArtifactId

logger = logging.getLogger(__name__)

BUNDLES_DIRECTORY = "bundles"


class ArtifactRepository:
    """
    Local Maven-layout repository rooted at ``<output>/bundles``.

    Artifacts land in ``<g1>/<g2>/.../<artifact>/<version>/`` under the
    name ``<artifact>-<version>[-<classifier>].<type>``.
    """

    def __init__(self, output_directory: Path):
        self._root = Path(output_directory) / BUNDLES_DIRECTORY
        self._logger = logger.getChild(self.__class__.__name__)

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, artifact_id: ArtifactId) -> Path:
        """Return the file path an artifact is deployed to."""
        return self._root.joinpath(*artifact_id.to_relative_path().split("/"))

    def deploy(
        self,
        input_stream: IO[bytes],
        group_id: str,
        artifact_id: str,
        version: str,
        classifier: str | None,
        type: str,
    ) -> Path:
        """Write the stream under the coordinate's path, see deploy_artifact."""
        coordinate = ArtifactId(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            classifier=classifier,
            type=type,
        )
        return self.deploy_artifact(input_stream, coordinate)

    def deploy_artifact(self, input_stream: IO[bytes], artifact_id: ArtifactId) -> Path:
        """
        Write the full stream to the artifact path, replacing any existing file.

        Raises:
            DeployError: On any I/O failure
        """
        target_file = self.resolve(artifact_id)
        self._logger.info(f"Writing data to {target_file}...")

        try:
            target_file.parent.mkdir(parents=True, exist_ok=True)
            with open(target_file, "wb") as target_stream:
                shutil.copyfileobj(input_stream, target_stream)
        except OSError as e:
            raise DeployError(
                f"Unable to deploy '{artifact_id}' to '{target_file}': {e}",
                path=str(target_file),
            ) from e

        self._logger.info(f"Data successfully written to {target_file}.")
        return target_file
