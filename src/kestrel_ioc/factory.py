"""Provider descriptors and the per-container provider registry.

This module defines :class:`Provider` (the immutable recipe for producing an
instance), :class:`ProviderRegistry` (the identifier -> qualifier -> provider
mapping owned by each container) and the composite-key helpers used for map
indexing and error messages.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Optional, Tuple, Union

from .constants import LIFETIMES, LOGGER
from .exceptions import DuplicateProviderError, InvalidProviderError
from .options import ContainerOptions

KeyT = Union[str, type]
QualifierT = Optional[Hashable]
CompositeKey = Tuple[KeyT, QualifierT]


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def key_of(key: KeyT, qualifier: QualifierT = None) -> CompositeKey:
    return (key, qualifier)


def format_key(key: KeyT, qualifier: QualifierT = None) -> str:
    """Render a composite key as ``"<identifierName>[::<qualifier>]"``.

    Example:
        >>> format_key(Database)
        'Database'
        >>> format_key(Database, "replica")
        'Database::replica'
    """
    name = key if isinstance(key, str) else getattr(key, "__name__", None) or "[[ctor]]"
    if qualifier is None:
        return name
    return f"{name}::{qualifier}"


@dataclass(frozen=True)
class Provider:
    """Immutable descriptor for a registered provider.

    Exactly one production method may be set: *use_class* (constructed with
    its resolved *deps*), *use_factory* (called with a resolution context) or
    *use_value* (returned as is, falsy values included).

    Attributes:
        lifetime: ``"single"``, ``"scoped"`` or ``"factory"``.
        key: The identifier the provider is registered under.
        qualifier: Optional secondary key; ``None`` means unqualified.
        use_class: Class to instantiate.
        use_factory: Callable taking a ``ResolutionContext``; may return an
            awaitable.
        use_value: Fixed value.
        deps: Ordered dependency identifiers passed positionally to *use_class*.
        on_close: Disposal hook called with the instance on shutdown; may
            return an awaitable.

    Raises:
        InvalidProviderError: If the lifetime is unknown or more than one
            production method is set.
    """

    lifetime: str
    key: KeyT
    qualifier: QualifierT = None
    use_class: Optional[type] = None
    use_factory: Optional[Callable[..., Any]] = None
    use_value: Any = MISSING
    deps: Tuple[KeyT, ...] = field(default_factory=tuple)
    on_close: Optional[Callable[[Any], Any]] = None

    def __post_init__(self) -> None:
        if self.lifetime not in LIFETIMES:
            raise InvalidProviderError(self.display_key, f"unknown lifetime {self.lifetime!r}")
        object.__setattr__(self, "deps", tuple(self.deps or ()))
        methods = sum((self.use_class is not None, self.use_factory is not None, self.has_value))
        if methods > 1:
            raise InvalidProviderError(self.display_key, "set only one of use_class, use_factory or use_value")

    @property
    def has_value(self) -> bool:
        return self.use_value is not MISSING

    @property
    def composite_key(self) -> CompositeKey:
        return key_of(self.key, self.qualifier)

    @property
    def display_key(self) -> str:
        return format_key(self.key, self.qualifier)


class ProviderRegistry:
    """One layer of the provider registry.

    Maps identifier -> qualifier -> provider. Lookups through parent layers
    are performed by the owning container; this class only knows its own
    entries.
    """

    def __init__(self, options: Optional[ContainerOptions] = None) -> None:
        self._options = options or ContainerOptions()
        self._providers: Dict[KeyT, Dict[QualifierT, Provider]] = {}

    def register(self, provider: Provider, *, force: bool = False) -> None:
        """Insert *provider*, applying the override policy on conflict.

        Args:
            provider: The provider to register.
            force: Replace any existing entry regardless of policy.

        Raises:
            DuplicateProviderError: If an entry exists for the same key and
                the policy forbids replacing it.
        """
        inner = self._providers.setdefault(provider.key, {})
        if provider.qualifier in inner:
            if not force and not self._options.replaces_on_conflict:
                raise DuplicateProviderError(provider.display_key)
            LOGGER.debug("Replacing provider for %s", provider.display_key)
        inner[provider.qualifier] = provider

    def get(self, key: KeyT, qualifier: QualifierT = None) -> Optional[Provider]:
        inner = self._providers.get(key)
        if inner is None:
            return None
        return inner.get(qualifier)

    def clear(self) -> None:
        self._providers.clear()

    def __len__(self) -> int:
        return sum(len(inner) for inner in self._providers.values())
