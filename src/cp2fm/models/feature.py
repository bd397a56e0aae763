from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .artifact_id import ArtifactId


class ExtensionType(str, Enum):
    """Content kinds a feature extension can carry."""

    TEXT = "TEXT"
    JSON = "JSON"
    ARTIFACTS = "ARTIFACTS"


class Artifact(BaseModel):
    """A bundle reference inside a feature, with its start order."""

    id: ArtifactId = Field(..., description="Required coordinate of the bundle.")
    start_order: int = Field(
        default=0, ge=0, description="Start level the bundle is started at."
    )


class Configuration(BaseModel):
    """
    An OSGi configuration keyed by PID.

    Factory configurations use the ``factoryPid~name`` form.
    """

    pid: str = Field(..., min_length=1, description="Persistent identifier.")
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Configuration property mapping."
    )

    @property
    def is_factory(self) -> bool:
        return "~" in self.pid

    @property
    def factory_pid(self) -> str | None:
        if not self.is_factory:
            return None
        return self.pid.split("~", 1)[0]


class Extension(BaseModel):
    """A named feature extension holding text, JSON or a list of artifacts."""

    name: str = Field(..., min_length=1, description="Extension name.")
    type: ExtensionType = Field(..., description="Kind of extension content.")
    required: bool = Field(
        default=False, description="Whether the launcher must understand it."
    )
    text: str | None = Field(default=None, description="Content of TEXT extensions.")
    json_content: Any = Field(
        default=None, description="Content of JSON extensions."
    )
    artifacts: list[Artifact] = Field(
        default_factory=list, description="Content of ARTIFACTS extensions."
    )

    @model_validator(mode="after")
    def validate_content(self) -> "Extension":
        if self.type is ExtensionType.TEXT and self.text is None:
            raise ValueError("TEXT extensions require 'text'")
        if self.type is ExtensionType.JSON and self.json_content is None:
            raise ValueError("JSON extensions require 'json_content'")
        return self


class Feature(BaseModel):
    """
    A feature model: bundles, configurations and extensions for one
    deployment target.

    Features are only ever grown during a conversion; nothing is removed.
    """

    id: ArtifactId = Field(..., description="Required feature coordinate.")
    description: str | None = Field(
        default=None, description="Optional human readable description."
    )
    bundles: list[Artifact] = Field(
        default_factory=list, description="Bundles in insertion order."
    )
    configurations: dict[str, Configuration] = Field(
        default_factory=dict, description="Configurations keyed by PID."
    )
    extensions: dict[str, Extension] = Field(
        default_factory=dict, description="Extensions keyed by name."
    )

    def get_configuration(self, pid: str) -> Configuration | None:
        return self.configurations.get(pid)
