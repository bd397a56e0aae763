"""Content-package to feature-model conversion pipeline."""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from cp2fm.exceptions import ArchiveError, ConversionError, InputError
from cp2fm.io.artifact_repository import ArtifactRepository
from cp2fm.io.content_package import (
    ENTRY_READ_ERRORS,
    FEATURE_CLASSIFIER,
    ArchiveEntry,
    ContentPackage,
)
from cp2fm.io.residual import ResidualPackager
from cp2fm.models.builder import DependencySet, FeatureModelBuilder
from cp2fm.models.feature import Feature
from cp2fm.models.writer import JSON_FILE_EXTENSION, FeatureJSONWriter

from .context import ConversionContext
from .handler_registry import EntryHandlerRegistry, build_registry
from .settings import ConverterSettings

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """What a conversion produced."""

    target: Feature
    run_modes: dict[str, Feature]
    dependencies: list[str]
    feature_files: list[Path] = field(default_factory=list)
    artifacts: list[Path] = field(default_factory=list)


class ContentPackageConverter:
    """
    Converts a content package into feature models.

    The package tree is walked depth-first; every file entry is dispatched to
    the first matching entry handler. Entries nobody claims are repackaged
    into a residual content package. Finally the target feature and every
    run-mode feature are written to the output directory.
    """

    def __init__(
        self,
        output_directory: Path,
        settings: ConverterSettings | None = None,
        registry: EntryHandlerRegistry | None = None,
        writer: FeatureJSONWriter | None = None,
    ):
        """
        Initialize the converter.

        Args:
            output_directory: Where feature files and the bundles repository go
            settings: Conversion flags; defaults apply when omitted
            registry: Entry handler registry; built from settings when omitted
            writer: Feature serializer
        """
        self._logger = logger.getChild(self.__class__.__name__)
        self._output_directory = Path(output_directory) if output_directory else None
        self._settings = settings or ConverterSettings()
        self._registry = registry or build_registry(self._settings.handlers)
        self._writer = writer or FeatureJSONWriter()

    @property
    def settings(self) -> ConverterSettings:
        return self._settings

    @property
    def registry(self) -> EntryHandlerRegistry:
        return self._registry

    def convert(self, content_package: Path) -> ConversionResult:
        """
        Run the whole conversion.

        Args:
            content_package: Path to the content package zip

        Returns:
            The produced features, written files and deployed artifacts

        Raises:
            InputError: If the package or the output directory are unusable
            ConversionError: Any other fatal conversion failure
        """
        output_directory = self._validate_inputs(content_package)

        self._logger.info(f"Reading content-package '{content_package}'...")

        with ContentPackage(content_package, self._settings.strict_validation) as package:
            self._logger.info(f"content-package '{content_package}' successfully read!")

            builder = FeatureModelBuilder(
                package.get_feature_id(),
                description=package.description,
                merge_configurations=self._settings.merge_configurations,
                bundles_start_order=self._settings.bundles_start_order,
            )

            dependencies = DependencySet(package.package_id)
            dependencies.update(package.dependencies)

            repository = ArtifactRepository(output_directory)

            self._logger.info(
                f"Converting content-package '{package.package_id}' "
                f"to Feature File '{builder.target.id}'..."
            )

            with tempfile.TemporaryDirectory(prefix="cp2fm-deflated-") as staging:
                residual = ResidualPackager(Path(staging))
                context = ConversionContext(builder, repository, residual)

                self.traverse(None, package, package.root, context)

                # attach all unmatched resources as new content-package
                residual_id = residual.package(
                    builder.target.id, package.properties, repository
                )
                if residual_id is not None:
                    builder.add_bundle(None, residual_id)
                    context.record_deployment(repository.resolve(residual_id))

            result = ConversionResult(
                target=builder.target,
                run_modes=builder.run_modes(),
                dependencies=list(dependencies),
                artifacts=context.deployed_artifacts,
            )

            # finally serialize the Feature Model(s) file(s)
            for feature in builder.iter_models():
                result.feature_files.append(self.serialize(feature))

        self._logger.info("Conversion complete!")
        return result

    def traverse(
        self,
        path: str | None,
        archive: ContentPackage,
        entry: ArchiveEntry,
        context: ConversionContext,
    ) -> None:
        """Visit every file entry below ``entry``, depth-first."""
        entry_path = entry.name if path is None else f"{path}/{entry.name}"

        if entry.is_directory:
            for child in entry.children:
                self.traverse(entry_path, archive, child, context)
            return

        self._logger.info(f"Processing entry {entry_path}...")

        handler = self._registry.select_handler(entry_path)
        try:
            claimed = handler.handle(entry_path, archive, entry, context)
            if not claimed and handler is not self._registry.default_handler:
                self._logger.debug(f"Entry {entry_path} left unclaimed")
                self._registry.default_handler.handle(
                    entry_path, archive, entry, context
                )
        except ConversionError as e:
            self._logger.error(f"Entry {entry_path} failed: {e}")
            raise
        except ENTRY_READ_ERRORS as e:
            self._logger.error(f"Entry {entry_path} is corrupted: {e}")
            raise ArchiveError(
                f"Unable to read entry '{entry_path}': {e}", entry_path
            ) from e
        except Exception as e:
            self._logger.error(
                f"Handler {handler.__class__.__name__} failed on {entry_path}: {e}"
            )
            raise ConversionError(f"Unable to process entry '{entry_path}': {e}") from e

        self._logger.info(f"Entry {entry_path} successfully processed.")

    def serialize(self, feature: Feature) -> Path:
        """
        Write a feature as ``<artifactId>[-<runMode>].json`` in the output directory.

        Raises:
            InputError: If the converter has no output directory
            DeployError: If the file cannot be written
        """
        if self._output_directory is None:
            raise InputError("Null output directory not supported, it must be specified.")

        file_name = feature.id.artifact_id

        classifier = feature.id.classifier or ""
        if classifier != FEATURE_CLASSIFIER and classifier.startswith(FEATURE_CLASSIFIER):
            file_name += classifier[len(FEATURE_CLASSIFIER) :]

        target_file = self._output_directory / f"{file_name}{JSON_FILE_EXTENSION}"

        self._logger.info(f"Writing resulting Feature File to '{target_file}'...")
        self._writer.save_json(feature, target_file)
        self._logger.info(f"'{target_file}' Feature File successfully written!")
        return target_file

    def _validate_inputs(self, content_package: Path | None) -> Path:
        if content_package is None:
            raise InputError("Null content-package can not be converted.")

        content_package = Path(content_package)
        if not content_package.is_file():
            raise InputError(
                f"Content-package {content_package} does not exist "
                "or it is not a valid file."
            )

        if self._output_directory is None:
            raise InputError("Null output directory not supported, it must be specified.")

        try:
            self._output_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            user = os.environ.get("USER", "unknown")
            raise InputError(
                f"output directory {self._output_directory} does not exist and can "
                f"not be created, please make sure current user '{user}' "
                "has enough rights to write on the File System."
            ) from e

        if not self._output_directory.is_dir():
            raise InputError(f"output directory {self._output_directory} is not a directory")

        return self._output_directory
