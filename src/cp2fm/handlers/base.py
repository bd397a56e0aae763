import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from cp2fm.core.protocols import EntryHandler

if TYPE_CHECKING:
    from cp2fm.core.context import ConversionContext
    from cp2fm.io.content_package import ArchiveEntry, ContentPackage

logger = logging.getLogger(__name__)


class BaseEntryHandler(EntryHandler, ABC):
    """
    Base class for handlers that claim entries by a path regular expression.

    The whole entry path must match ``pattern``. Subclasses receive the match
    object so capturing groups (run mode, PID...) are parsed only once.

    Subclasses must implement:
    - _handle(): Convert the matched entry
    """

    pattern: ClassVar[str]

    def __init__(self):
        self._logger = logger.getChild(self.__class__.__name__)
        self._regex = re.compile(self.pattern)

    def matches(self, path: str) -> bool:
        return self._regex.fullmatch(path) is not None

    def handle(
        self,
        path: str,
        archive: "ContentPackage",
        entry: "ArchiveEntry",
        context: "ConversionContext",
    ) -> bool:
        match = self._regex.fullmatch(path)
        if match is None:
            self._logger.warning(f"Entry {path} does not match {self.pattern}. Skipping.")
            return False
        return self._handle(path, match, archive, entry, context)

    @abstractmethod
    def _handle(
        self,
        path: str,
        match: re.Match[str],
        archive: "ContentPackage",
        entry: "ArchiveEntry",
        context: "ConversionContext",
    ) -> bool:
        """
        Handler-specific conversion.

        Returns:
            True if the entry was converted, False to leave it unclaimed
        """
        pass
