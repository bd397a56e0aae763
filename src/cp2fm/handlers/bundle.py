import io
import logging
import re
import zipfile
from typing import TYPE_CHECKING

from cp2fm.exceptions import ArchiveError
from cp2fm.io.config_formats import parse_java_properties

from .base import BaseEntryHandler

if TYPE_CHECKING:
    from cp2fm.core.context import ConversionContext
    from cp2fm.io.content_package import ArchiveEntry, ContentPackage

logger = logging.getLogger(__name__)

JAR_TYPE = "jar"

_POM_PROPERTIES = re.compile(r"META-INF/maven/[^/]+/[^/]+/pom\.properties")


class BundleEntryHandler(BaseEntryHandler):
    """
    Deploys OSGi bundles found in ``install`` folders and attaches them to
    the feature of the folder's run mode.

    A numeric sub-folder (``install/20/x.jar``) sets the bundle start order;
    otherwise the default start order applies.

    The Maven coordinate is read from the ``pom.properties`` embedded in the
    jar; jars without it are left unclaimed.
    """

    pattern = r"jcr_root/(?:apps|libs)/.+/install(?:\.([^/]+))?/(?:(\d+)/)?[^/]+\.jar"

    def _handle(
        self,
        path: str,
        match: re.Match[str],
        archive: "ContentPackage",
        entry: "ArchiveEntry",
        context: "ConversionContext",
    ) -> bool:
        run_mode = match.group(1)
        start_level = match.group(2)
        start_order = int(start_level) if start_level else None

        with archive.open_entry(entry) as input_stream:
            content = input_stream.read()

        coordinates = self.read_maven_coordinates(content, path)
        if coordinates is None:
            self._logger.warning(
                f"Bundle {path} does not embed Maven metadata, "
                "it will be repackaged with the residual content"
            )
            return False

        group_id, artifact_id, version = coordinates
        self._logger.info(
            f"Installing bundle {group_id}:{artifact_id}:{version} "
            f"(run mode: {run_mode or 'none'})"
        )
        context.deploy_and_register(
            run_mode,
            io.BytesIO(content),
            group_id,
            artifact_id,
            version,
            None,
            JAR_TYPE,
            start_order,
        )
        return True

    @staticmethod
    def read_maven_coordinates(content: bytes, path: str) -> tuple[str, str, str] | None:
        """
        Extract groupId, artifactId and version from a jar's pom.properties.

        Raises:
            ArchiveError: If the content is not a readable jar
        """
        try:
            with zipfile.ZipFile(io.BytesIO(content)) as jar:
                for name in jar.namelist():
                    if not _POM_PROPERTIES.fullmatch(name):
                        continue
                    text = jar.read(name).decode("iso-8859-1")
                    properties = parse_java_properties(text)
                    coordinates = tuple(
                        properties.get(key, "").strip()
                        for key in ("groupId", "artifactId", "version")
                    )
                    if all(coordinates):
                        return coordinates  # type: ignore[return-value]
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise ArchiveError(f"Bundle {path} is not a valid jar: {e}", path) from e
        return None
