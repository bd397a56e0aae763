import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ..exceptions import ConversionError, DuplicateConfigurationError
from .artifact_id import ArtifactId
from .feature import Artifact, Configuration, Extension, Feature

logger = logging.getLogger(__name__)


class FeatureModelBuilder:
    """
    Owns the target feature and the features derived from it, one per run
    mode.

    Run-mode features are created on first access and cached for the rest
    of the conversion. Their coordinate equals the target coordinate with
    ``-<runMode>`` appended to the classifier.
    """

    def __init__(
        self,
        target_id: ArtifactId,
        description: str | None = None,
        merge_configurations: bool = False,
        bundles_start_order: int = 0,
    ):
        self._logger = logger.getChild(self.__class__.__name__)
        self._target = Feature(id=target_id, description=description)
        self._run_modes: dict[str, Feature] = {}
        self._merge_configurations = merge_configurations
        self._bundles_start_order = bundles_start_order

    @property
    def target(self) -> Feature:
        return self._target

    @property
    def bundles_start_order(self) -> int:
        return self._bundles_start_order

    def get_model(self, run_mode: str | None = None) -> Feature:
        """
        Return the feature for a run mode.

        Args:
            run_mode: Run-mode name, or None for the target feature

        Returns:
            The target feature, or the cached/new run-mode feature
        """
        if run_mode is None:
            return self._target

        feature = self._run_modes.get(run_mode)
        if feature is None:
            target_id = self._target.id
            classifier = f"{target_id.classifier or ''}-{run_mode}"
            feature = Feature(id=target_id.with_classifier(classifier))
            self._run_modes[run_mode] = feature
            self._logger.debug(f"Created feature '{feature.id}' for run mode '{run_mode}'")
        return feature

    def run_modes(self) -> dict[str, Feature]:
        """Return a snapshot of the run-mode index."""
        return dict(self._run_modes)

    def iter_models(self) -> Iterator[Feature]:
        """Yield the target feature followed by every run-mode feature."""
        yield self._target
        yield from self._run_modes.values()

    def add_configuration(
        self, run_mode: str | None, pid: str, properties: Mapping[str, Any]
    ) -> Configuration:
        """
        Register configuration properties under a PID.

        Raises:
            DuplicateConfigurationError: If merging is disabled and the PID is
                already known to the target or to any run-mode feature
        """
        if not self._merge_configurations:
            for feature in self.iter_models():
                if feature.get_configuration(pid) is not None:
                    raise DuplicateConfigurationError(pid, feature.id.to_mvn_id())

        feature = self.get_model(run_mode)
        configuration = feature.get_configuration(pid)
        if configuration is None:
            configuration = Configuration(pid=pid)
            feature.configurations[pid] = configuration

        for key, value in properties.items():
            configuration.properties[key] = value

        self._logger.debug(
            f"Configuration '{pid}' registered in feature '{feature.id}' "
            f"({len(properties)} properties)"
        )
        return configuration

    def add_bundle(
        self,
        run_mode: str | None,
        artifact_id: ArtifactId,
        start_order: int | None = None,
    ) -> Artifact:
        """Append a bundle to the feature; duplicates are kept in order."""
        if start_order is None:
            start_order = self._bundles_start_order

        bundle = Artifact(id=artifact_id, start_order=start_order)
        feature = self.get_model(run_mode)
        feature.bundles.append(bundle)

        self._logger.debug(f"Bundle '{artifact_id}' attached to feature '{feature.id}'")
        return bundle

    def add_extension(self, run_mode: str | None, extension: Extension) -> Extension:
        """
        Add an extension to the feature.

        Raises:
            ConversionError: If the feature already has an extension by that name
        """
        feature = self.get_model(run_mode)
        if extension.name in feature.extensions:
            raise ConversionError(
                f"Extension '{extension.name}' already defined in Feature Model "
                f"'{feature.id.to_mvn_id()}'"
            )
        feature.extensions[extension.name] = extension
        return extension


class DependencySet:
    """
    Dependencies declared by a content package.

    The package's own id is excluded: a package never depends on itself.
    """

    def __init__(self, package_id: str):
        self._package_id = package_id
        self._dependencies: set[str] = set()

    def update(self, dependencies: Iterable[str]) -> None:
        for dependency in dependencies:
            dependency = dependency.strip()
            if dependency:
                self._dependencies.add(dependency)
        self._dependencies.discard(self._package_id)

    def __contains__(self, dependency: object) -> bool:
        return dependency in self._dependencies

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._dependencies))

    def __len__(self) -> int:
        return len(self._dependencies)
