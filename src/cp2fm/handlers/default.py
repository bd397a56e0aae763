from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cp2fm.core.context import ConversionContext
    from cp2fm.io.content_package import ArchiveEntry, ContentPackage


class DefaultEntryHandler:
    """Fallback handler: copies any entry verbatim into the residual staging area."""

    def matches(self, path: str) -> bool:
        return True

    def handle(
        self,
        path: str,
        archive: "ContentPackage",
        entry: "ArchiveEntry",
        context: "ConversionContext",
    ) -> bool:
        with archive.open_entry(entry) as input_stream:
            context.stage_residual(path, input_stream)
        return True
