from .context import ConversionContext
from .converter import ContentPackageConverter, ConversionResult
from .handler_registry import EntryHandlerRegistry, build_registry
from .settings import ConverterSettings, load_settings

__all__ = [
    "ContentPackageConverter",
    "ConversionContext",
    "ConversionResult",
    "ConverterSettings",
    "EntryHandlerRegistry",
    "build_registry",
    "load_settings",
]
