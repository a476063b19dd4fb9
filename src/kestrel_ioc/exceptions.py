"""Exception hierarchy for kestrel-ioc.

All container exceptions inherit from :class:`KestrelError`, making it easy
to catch any kestrel-ioc error with a single ``except KestrelError`` clause.
"""

from typing import Any, Iterable


def _name_of(key: Any) -> str:
    if isinstance(key, str):
        return key
    return getattr(key, "__name__", str(key))


class KestrelError(Exception):
    """Base exception for all kestrel-ioc errors."""

    pass


class DuplicateProviderError(KestrelError):
    """Raised when a provider is registered twice for the same composite key.

    Only raised when the container disallows overrides or uses the ``error``
    override strategy. Existing registrations are left untouched.

    Attributes:
        key: The formatted composite key (``"Name::qualifier"``).
    """

    def __init__(self, key: str):
        super().__init__(f"Provider override detected for {key}")
        self.key = key


class ProviderNotFoundError(KestrelError):
    """Raised when no provider exists for a key and fallback construction is not possible.

    Attributes:
        key: The formatted composite key that was not found.
        origin: The key whose resolution requested it, if any.
    """

    def __init__(self, key: str, origin: Any | None = None):
        origin_name = _name_of(origin) if origin is not None else "init"
        super().__init__(f"No provider for: {key} (required by: '{origin_name}')")
        self.key = key
        self.origin = origin


class CircularDependencyError(KestrelError):
    """Raised when a key is re-entered while it is still being resolved.

    The resolving set belongs to the container, so concurrent tasks awaiting
    the same container also trip this error when they meet the same
    uncached key; the chain then lists keys from every such task.

    Attributes:
        key: The formatted composite key that closed the cycle.
        chain: The keys being resolved, in the order they were entered.
    """

    def __init__(self, key: str, chain: Iterable[str] = ()):
        self.key = key
        self.chain = tuple(chain)
        path = " -> ".join(self.chain + (key,))
        super().__init__(f"Circular dependency detected at {key}: {path}")


class AsyncResolutionError(KestrelError):
    """Raised when ``get()`` encounters an awaitable result.

    The provider produces its instance asynchronously; use
    ``await container.aget(key)`` instead.

    Attributes:
        key: The formatted composite key that produced an awaitable.
    """

    def __init__(self, key: str):
        super().__init__(f"Tried to resolve async provider with sync get(): {key}. Use aget().")
        self.key = key


class InvalidProviderError(KestrelError):
    """Raised for malformed providers (no production method, or more than one)."""

    def __init__(self, key: str, msg: str):
        super().__init__(f"Invalid provider for {key}: {msg}")
        self.key = key


class ConfigurationError(KestrelError):
    """Raised for configuration problems (bad override strategy, uninitialized handle)."""

    def __init__(self, msg: str):
        super().__init__(msg)
