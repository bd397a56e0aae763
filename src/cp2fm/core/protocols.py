from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cp2fm.core.context import ConversionContext
    from cp2fm.io.content_package import ArchiveEntry, ContentPackage


class EntryHandler(Protocol):
    """Defines the contract for converting a single content-package entry."""

    def matches(self, path: str) -> bool:
        """
        Checks whether this handler claims the given entry path.

        Args:
            path: Slash separated entry path (e.g., "jcr_root/apps/x/install/a.jar")

        Returns:
            True if the handler can convert this entry, False otherwise
        """
        ...

    def handle(
        self,
        path: str,
        archive: "ContentPackage",
        entry: "ArchiveEntry",
        context: "ConversionContext",
    ) -> bool:
        """
        Convert the entry, registering bundles, configurations or extensions
        through the context.

        Args:
            path: Slash separated entry path
            archive: The open content package the entry belongs to
            entry: The archive entry to convert
            context: Narrow view over the models and the artifact repository

        Returns:
            True if the entry was converted, False to leave it unclaimed so it
            ends up in the residual package
        """
        ...
