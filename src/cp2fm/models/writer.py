"""
JSON serialization of feature models.

Produces the Sling feature-model JSON layout: the feature id in Maven form,
an optional description, bundles with their start order, configurations
keyed by PID and extensions keyed by ``name:TYPE|required``.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from ..exceptions import DeployError
from .feature import Artifact, Extension, ExtensionType, Feature

logger = logging.getLogger(__name__)

JSON_FILE_EXTENSION = ".json"


class FeatureJSONWriter:
    """Serializes a Feature to JSON text and to files."""

    def __init__(self, indent: int = 2):
        self._indent = indent

    def to_dict(self, feature: Feature) -> dict[str, Any]:
        """Convert a feature to a JSON-ready dictionary, omitting empty sections."""
        result: dict[str, Any] = {"id": feature.id.to_mvn_id()}

        if feature.description:
            result["description"] = feature.description

        if feature.bundles:
            result["bundles"] = [self._artifact_to_dict(b) for b in feature.bundles]

        if feature.configurations:
            result["configurations"] = {
                pid: dict(configuration.properties)
                for pid, configuration in feature.configurations.items()
            }

        for extension in feature.extensions.values():
            result[self._extension_key(extension)] = self._extension_content(
                extension
            )

        return result

    def to_json(self, feature: Feature) -> str:
        return json.dumps(
            self.to_dict(feature), indent=self._indent, ensure_ascii=False
        )

    def save_json(self, feature: Feature, file_path: Path) -> Path:
        """
        Write the feature to ``file_path`` through a temporary sibling file
        that is renamed into place, so a failed write never leaves a
        half-written model behind.

        Raises:
            DeployError: If the file cannot be written
        """
        content = self.to_json(feature)
        # plain open() so the file gets the umask default permissions
        tmp_path = file_path.with_name(f".{file_path.name}.tmp")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.write("\n")
            os.replace(tmp_path, file_path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise DeployError(
                f"Unable to write Feature File '{file_path}': {e}",
                path=str(file_path),
            ) from e

        logger.debug(f"Feature '{feature.id}' saved to: {file_path}")
        return file_path

    @staticmethod
    def _artifact_to_dict(artifact: Artifact) -> dict[str, Any]:
        return {
            "id": artifact.id.to_mvn_id(),
            "start-order": str(artifact.start_order),
        }

    @staticmethod
    def _extension_key(extension: Extension) -> str:
        state = "required" if extension.required else "optional"
        return f"{extension.name}:{extension.type.value}|{state}"

    def _extension_content(self, extension: Extension) -> Any:
        if extension.type is ExtensionType.TEXT:
            return extension.text
        if extension.type is ExtensionType.JSON:
            return extension.json_content
        return [self._artifact_to_dict(a) for a in extension.artifacts]
