import logging
from collections.abc import Mapping
from pathlib import Path
from typing import IO, Any

from cp2fm.io.artifact_repository import ArtifactRepository
from cp2fm.io.residual import ResidualPackager
from cp2fm.models.artifact_id import ArtifactId
from cp2fm.models.builder import FeatureModelBuilder
from cp2fm.models.feature import Artifact, Configuration, Extension, Feature

logger = logging.getLogger(__name__)


class ConversionContext:
    """
    The view entry handlers get over a running conversion.

    Exposes the operations handlers need (model lookup, registrations,
    deployment, residual staging) without handing out the builder's
    internal maps.
    """

    def __init__(
        self,
        builder: FeatureModelBuilder,
        repository: ArtifactRepository,
        residual: ResidualPackager,
    ):
        self._builder = builder
        self._repository = repository
        self._residual = residual
        self._deployed: list[Path] = []

    @property
    def deployed_artifacts(self) -> list[Path]:
        return list(self._deployed)

    def get_model(self, run_mode: str | None = None) -> Feature:
        return self._builder.get_model(run_mode)

    def add_configuration(
        self, run_mode: str | None, pid: str, properties: Mapping[str, Any]
    ) -> Configuration:
        return self._builder.add_configuration(run_mode, pid, properties)

    def add_bundle(
        self,
        run_mode: str | None,
        artifact_id: ArtifactId,
        start_order: int | None = None,
    ) -> Artifact:
        return self._builder.add_bundle(run_mode, artifact_id, start_order)

    def add_extension(self, run_mode: str | None, extension: Extension) -> Extension:
        return self._builder.add_extension(run_mode, extension)

    def deploy(
        self,
        input_stream: IO[bytes],
        group_id: str,
        artifact_id: str,
        version: str,
        classifier: str | None,
        type: str,
    ) -> Path:
        path = self._repository.deploy(
            input_stream, group_id, artifact_id, version, classifier, type
        )
        self._deployed.append(path)
        return path

    def deploy_and_register(
        self,
        run_mode: str | None,
        input_stream: IO[bytes],
        group_id: str,
        artifact_id: str,
        version: str,
        classifier: str | None,
        type: str,
        start_order: int | None = None,
    ) -> Artifact:
        """
        Deploy an artifact and attach it as a bundle.

        The bundle gets ``start_order``, or the default start order when None.
        """
        self.deploy(input_stream, group_id, artifact_id, version, classifier, type)
        coordinate = ArtifactId(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            classifier=classifier,
            type=type,
        )
        return self._builder.add_bundle(run_mode, coordinate, start_order)

    def stage_residual(self, path: str, input_stream: IO[bytes]) -> Path:
        """Copy an unclaimed entry into the residual staging area."""
        return self._residual.stage(path, input_stream)

    def record_deployment(self, path: Path) -> None:
        self._deployed.append(path)
