from pydantic import BaseModel, ConfigDict, Field, field_validator


class ArtifactId(BaseModel):
    """
    Represents the five-part Maven coordinate of a deployable unit.

    Instances are immutable and hashable; equality takes every field into
    account, classifier included.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., description="Required Maven groupId.")
    artifact_id: str = Field(..., description="Required Maven artifactId.")
    version: str = Field(..., description="Required artifact version.")
    classifier: str | None = Field(
        default=None, description="Optional classifier (e.g., sources)."
    )
    type: str = Field(default="jar", description="Artifact type / extension.")

    @field_validator("group_id", "artifact_id", "version", "type")
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("coordinate parts must not be blank")
        return v

    @field_validator("classifier")
    def validate_classifier(cls, v: str | None) -> str | None:
        # an empty classifier means no classifier
        return v or None

    def with_classifier(self, classifier: str | None) -> "ArtifactId":
        """Return a copy of this coordinate with another classifier."""
        return self.model_copy(update={"classifier": classifier or None})

    def to_mvn_id(self) -> str:
        """
        Render the coordinate in Maven id form.

        Returns:
            ``group:artifact:version`` for plain jars, otherwise
            ``group:artifact:type[:classifier]:version``
        """
        parts = [self.group_id, self.artifact_id]
        if self.classifier or self.type != "jar":
            parts.append(self.type)
            if self.classifier:
                parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)

    def to_file_name(self) -> str:
        """Return ``artifact-version[-classifier].type``."""
        name = f"{self.artifact_id}-{self.version}"
        if self.classifier:
            name += f"-{self.classifier}"
        return f"{name}.{self.type}"

    def to_relative_path(self) -> str:
        """Return the repository layout path, slash separated."""
        segments = [s for s in self.group_id.split(".") if s]
        segments.extend([self.artifact_id, self.version, self.to_file_name()])
        return "/".join(segments)

    def __str__(self) -> str:
        return self.to_mvn_id()
