from .base import BaseEntryHandler
from .bundle import BundleEntryHandler
from .configuration import (
    ConfigAdminConfigurationEntryHandler,
    ConfigurationEntryHandler,
    JsonConfigurationEntryHandler,
    PropertiesConfigurationEntryHandler,
    XmlConfigurationEntryHandler,
)
from .default import DefaultEntryHandler

# Built-in handlers by the name settings refer to them with
HANDLER_TYPES: dict[str, type[BaseEntryHandler]] = {
    "bundle": BundleEntryHandler,
    "cfg-json": JsonConfigurationEntryHandler,
    "cfg": PropertiesConfigurationEntryHandler,
    "config": ConfigAdminConfigurationEntryHandler,
    "xml": XmlConfigurationEntryHandler,
}

__all__ = [
    "HANDLER_TYPES",
    "BaseEntryHandler",
    "BundleEntryHandler",
    "ConfigAdminConfigurationEntryHandler",
    "ConfigurationEntryHandler",
    "DefaultEntryHandler",
    "JsonConfigurationEntryHandler",
    "PropertiesConfigurationEntryHandler",
    "XmlConfigurationEntryHandler",
]
