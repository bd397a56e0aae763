from .artifact_repository import ArtifactRepository
from .content_package import ArchiveEntry, ContentPackage
from .residual import ResidualPackager

__all__ = ["ArchiveEntry", "ArtifactRepository", "ContentPackage", "ResidualPackager"]
