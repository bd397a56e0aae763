"""Ordered registry of entry handlers."""

import logging
from collections.abc import Iterable

from .protocols import EntryHandler

logger = logging.getLogger(__name__)


class EntryHandlerRegistry:
    """
    Ordered set of entry handlers with a fallback.

    Dispatch walks the handlers in registration order and returns the first
    one whose ``matches`` accepts the path, or the default handler when none
    does. The registry keeps no per-conversion state.
    """

    def __init__(
        self,
        default_handler: EntryHandler,
        handlers: Iterable[tuple[str, EntryHandler]] | None = None,
    ):
        """
        Initialize the registry.

        Args:
            default_handler: Handler returned when no registered handler matches
            handlers: Optional (name, handler) pairs registered in order
        """
        if default_handler is None:
            raise ValueError("Default handler cannot be None")

        self._logger = logger.getChild(self.__class__.__name__)
        self._default_handler = default_handler
        self._handlers: list[tuple[str, EntryHandler]] = []

        for name, handler in handlers or []:
            self.register_handler(name, handler)

    def register_handler(self, name: str, handler: EntryHandler) -> None:
        """
        Append a handler to the dispatch order.

        Args:
            name: The identifier of the handler (e.g., 'bundle', 'cfg')
            handler: The handler instance

        Raises:
            ValueError: If the name is empty, the handler is None or the name
                is already registered
        """
        if not name or not name.strip():
            raise ValueError("Handler name cannot be empty")

        if handler is None:
            raise ValueError("Handler cannot be None")

        name = name.strip().lower()

        if name in self:
            raise ValueError(f"Handler '{name}' is already registered")

        self._handlers.append((name, handler))
        self._logger.debug(
            f"Registered handler '{handler.__class__.__name__}' as '{name}' "
            f"(position {len(self._handlers)})"
        )

    @property
    def default_handler(self) -> EntryHandler:
        return self._default_handler

    def select_handler(self, path: str) -> EntryHandler:
        """
        Return the first handler matching the path, or the default handler.

        Never raises for a string path.
        """
        for name, handler in self._handlers:
            if handler.matches(path):
                self._logger.debug(f"Entry {path} dispatched to '{name}'")
                return handler

        self._logger.debug(f"Entry {path} dispatched to the default handler")
        return self._default_handler

    def get_handlers(self) -> list[EntryHandler]:
        """Return the registered handlers in dispatch order."""
        return [handler for _, handler in self._handlers]

    def get_names(self) -> list[str]:
        """Return the registered handler names in dispatch order."""
        return [name for name, _ in self._handlers]

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: str) -> bool:
        if not name:
            return False
        return name.strip().lower() in self.get_names()


def build_registry(handler_names: Iterable[str]) -> EntryHandlerRegistry:
    """
    Build a registry holding the named built-in handlers, in the given order.

    Raises:
        ValueError: If a name does not refer to a built-in handler
    """
    # Import here to avoid circular imports
    from cp2fm.handlers import HANDLER_TYPES, DefaultEntryHandler

    registry = EntryHandlerRegistry(DefaultEntryHandler())
    for name in handler_names:
        handler_class = HANDLER_TYPES.get(name.strip().lower())
        if handler_class is None:
            available = ", ".join(sorted(HANDLER_TYPES))
            raise ValueError(f"Unknown handler '{name}'. Available handlers: {available}")
        registry.register_handler(name, handler_class())
    return registry
