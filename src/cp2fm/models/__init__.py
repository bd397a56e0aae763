from .artifact_id import ArtifactId
from .builder import DependencySet, FeatureModelBuilder
from .feature import Artifact, Configuration, Extension, ExtensionType, Feature
from .writer import FeatureJSONWriter

__all__ = [
    "ArtifactId",
    "Artifact",
    "Configuration",
    "Extension",
    "ExtensionType",
    "Feature",
    "FeatureModelBuilder",
    "DependencySet",
    "FeatureJSONWriter",
]
