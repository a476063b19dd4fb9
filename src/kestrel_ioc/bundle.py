"""Declarative helpers that build providers and group them into bundles.

Example:
    >>> app = bundle(
    ...     single_of(Repo),
    ...     single_of(Service, deps=[Repo]),
    ...     factory_of(Controller, lambda ctx: Controller(ctx.get(Service))),
    ... )
    >>> container = Container()
    >>> container.load(app)
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Tuple

from .constants import LIFETIME_FACTORY, LIFETIME_SCOPED, LIFETIME_SINGLE
from .factory import MISSING, KeyT, Provider, QualifierT


@dataclass(frozen=True)
class Bundle:
    providers: Tuple[Provider, ...] = ()

    def __add__(self, other: "Bundle") -> "Bundle":
        return Bundle(self.providers + other.providers)

    def __len__(self) -> int:
        return len(self.providers)


def bundle(*providers: Provider) -> Bundle:
    return Bundle(tuple(providers))


def bundles(*parts: Bundle) -> Bundle:
    """Merge several bundles into one, keeping their order."""
    merged: Tuple[Provider, ...] = ()
    for b in parts:
        merged += b.providers
    return Bundle(merged)


def _provider_of(
    lifetime: str,
    key: KeyT,
    factory: Optional[Callable[..., Any]],
    qualifier: QualifierT,
    impl: Optional[type],
    deps: Optional[Iterable[KeyT]],
    on_close: Optional[Callable[[Any], Any]],
) -> Provider:
    if factory is not None:
        if impl is not None or deps:
            raise TypeError("impl= and deps= apply to class providers, not factories")
        return Provider(lifetime, key, qualifier, use_factory=factory, on_close=on_close)
    use_class = impl if impl is not None else key
    if not isinstance(use_class, type):
        raise TypeError(f"{key!r} is not a class; pass impl= or a factory")
    return Provider(lifetime, key, qualifier, use_class=use_class, deps=tuple(deps or ()), on_close=on_close)


def single_of(
    key: KeyT,
    factory: Optional[Callable[..., Any]] = None,
    *,
    qualifier: QualifierT = None,
    impl: Optional[type] = None,
    deps: Optional[Iterable[KeyT]] = None,
    on_close: Optional[Callable[[Any], Any]] = None,
) -> Provider:
    """Provider with one cached instance for the whole container tree.

    Constructs *impl* (default: *key* itself) with *deps* resolved in order,
    or calls *factory* with a resolution context when given.
    """
    return _provider_of(LIFETIME_SINGLE, key, factory, qualifier, impl, deps, on_close)


def scoped_of(
    key: KeyT,
    factory: Optional[Callable[..., Any]] = None,
    *,
    qualifier: QualifierT = None,
    impl: Optional[type] = None,
    deps: Optional[Iterable[KeyT]] = None,
    on_close: Optional[Callable[[Any], Any]] = None,
) -> Provider:
    """Provider with one cached instance per scope."""
    return _provider_of(LIFETIME_SCOPED, key, factory, qualifier, impl, deps, on_close)


def factory_of(
    key: KeyT,
    factory: Optional[Callable[..., Any]] = None,
    *,
    qualifier: QualifierT = None,
    impl: Optional[type] = None,
    deps: Optional[Iterable[KeyT]] = None,
) -> Provider:
    """Provider producing a new instance on every resolution.

    Instances are neither cached nor disposed, so no ``on_close`` is accepted.
    """
    return _provider_of(LIFETIME_FACTORY, key, factory, qualifier, impl, deps, None)


def value_of(
    key: KeyT,
    value: Any,
    *,
    qualifier: QualifierT = None,
    on_close: Optional[Callable[[Any], Any]] = None,
) -> Provider:
    if value is MISSING:
        raise ValueError("value_of() requires a value")
    return Provider(LIFETIME_SINGLE, key, qualifier, use_value=value, on_close=on_close)


__all__ = ["Bundle", "bundle", "bundles", "single_of", "scoped_of", "factory_of", "value_of"]
