"""Handlers turning OSGi configuration files into feature configurations."""

import json
import re
from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from cp2fm.exceptions import ConfigurationFormatError
from cp2fm.io.config_formats import (
    is_osgi_config_xml,
    parse_felix_config,
    parse_java_properties,
    parse_osgi_config_xml,
)

from .base import BaseEntryHandler

if TYPE_CHECKING:
    from cp2fm.core.context import ConversionContext
    from cp2fm.io.content_package import ArchiveEntry, ContentPackage

CONFIG_PATTERN = r"jcr_root/(?:apps|libs)/.+/config(?:\.([^/]+))?/([^/]+)"


def normalize_pid(name: str) -> str:
    """
    Derive a PID from a configuration file name.

    ``factory~name`` is kept as is; the legacy ``factory-name`` form becomes
    ``factory~name``.
    """
    if "~" in name:
        return name
    if "-" in name:
        factory_pid, subname = name.split("-", 1)
        if factory_pid and subname:
            return f"{factory_pid}~{subname}"
    return name


class ConfigurationEntryHandler(BaseEntryHandler):
    """
    Base class for configuration files under ``config[.<runMode>]`` folders.

    Subclasses must define:
    - extension: File extension, dot included
    - pattern: CONFIG_PATTERN followed by the escaped extension
    - parse(): Turn the file content into properties
    """

    extension: str

    def _handle(
        self,
        path: str,
        match: re.Match[str],
        archive: "ContentPackage",
        entry: "ArchiveEntry",
        context: "ConversionContext",
    ) -> bool:
        run_mode, name = match.group(1), match.group(2)
        pid = normalize_pid(name)

        with archive.open_entry(entry) as input_stream:
            content = input_stream.read()

        if not self.accepts(content):
            self._logger.debug(f"{path} is not an OSGi configuration")
            return False

        try:
            properties = self.parse(content)
        except (ValueError, UnicodeDecodeError) as e:
            raise ConfigurationFormatError(str(e), path) from e

        self._logger.info(
            f"Processing configuration '{pid}' (run mode: {run_mode or 'none'})"
        )
        context.add_configuration(run_mode, pid, properties)
        return True

    def accepts(self, content: bytes) -> bool:
        return True

    @abstractmethod
    def parse(self, content: bytes) -> dict[str, Any]:
        """Parse the configuration file; raise ValueError when malformed."""
        pass


class JsonConfigurationEntryHandler(ConfigurationEntryHandler):
    """OSGi Configurator ``.cfg.json`` files."""

    extension = ".cfg.json"
    pattern = CONFIG_PATTERN + re.escape(extension)

    def parse(self, content: bytes) -> dict[str, Any]:
        data = json.loads(content.decode("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Top-level JSON value must be an object")
        return data


class PropertiesConfigurationEntryHandler(ConfigurationEntryHandler):
    """Java properties ``.cfg`` files."""

    extension = ".cfg"
    pattern = CONFIG_PATTERN + re.escape(extension)

    def parse(self, content: bytes) -> dict[str, Any]:
        return parse_java_properties(content.decode("iso-8859-1"))


class ConfigAdminConfigurationEntryHandler(ConfigurationEntryHandler):
    """Felix ConfigAdmin typed ``.config`` files."""

    extension = ".config"
    pattern = CONFIG_PATTERN + re.escape(extension)

    def parse(self, content: bytes) -> dict[str, Any]:
        return parse_felix_config(content.decode("utf-8"))


class XmlConfigurationEntryHandler(ConfigurationEntryHandler):
    """
    JCR ``sling:OsgiConfig`` nodes serialized as docview ``.xml`` files.

    Any other XML (folder metadata, content nodes) is left unclaimed.
    """

    extension = ".xml"
    pattern = CONFIG_PATTERN + re.escape(extension)

    def accepts(self, content: bytes) -> bool:
        return is_osgi_config_xml(content.decode("utf-8", errors="replace"))

    def parse(self, content: bytes) -> dict[str, Any]:
        return parse_osgi_config_xml(content.decode("utf-8"))
