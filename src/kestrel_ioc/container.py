# src/kestrel_ioc/container.py
import inspect
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple, Union

from .analysis import DependencyInspector, required_arity
from .bundle import Bundle
from .constants import LIFETIME_FACTORY, LIFETIME_SCOPED, LIFETIME_SINGLE, LOGGER
from .exceptions import AsyncResolutionError, CircularDependencyError, InvalidProviderError, ProviderNotFoundError
from .factory import CompositeKey, KeyT, Provider, ProviderRegistry, QualifierT, format_key, key_of
from .lifecycle import LifecycleTracker, close_awaitable
from .options import ContainerOptions
from .scope import InstanceCache


class ContainerObserver(Protocol):
    """Protocol for observing container resolution events.

    Pass instances to ``Container(observers=[...])`` to receive callbacks on
    every fresh resolution and every cache hit. Scopes inherit the observers
    of the container they were created from.
    """

    def on_resolve(self, key: str, took_ms: float): ...
    def on_cache_hit(self, key: str): ...


class ResolutionContext:
    """Handle passed to factory functions.

    ``get``/``aget`` resolve through the container that invoked the factory,
    so nested resolutions share its cycle detection and scoped cache.
    """

    __slots__ = ("_container",)

    def __init__(self, container: "Container") -> None:
        self._container = container

    @property
    def container(self) -> "Container":
        return self._container

    def get(self, key: KeyT, qualifier: QualifierT = None) -> Any:
        return self._container.get(key, qualifier)

    async def aget(self, key: KeyT, qualifier: QualifierT = None) -> Any:
        return await self._container.aget(key, qualifier)


def _is_constructible(key: Any) -> bool:
    if not inspect.isclass(key):
        return False
    if inspect.isabstract(key) or getattr(key, "_is_protocol", False):
        return False
    return True


class Container:
    """A node in the scope tree.

    The root owns the ``single`` cache. Every node owns its registry layer,
    its ``scoped`` cache, its ``resolving`` set and its disposal records. A
    child keeps a reference to its parent for registry and ``single`` cache
    lookups; a parent never references its children.

    Args:
        options: Override policy. Scopes copy their parent's.
        parent: Parent container; ``None`` for the root.
        inspector: Optional capability returning the dependency identifiers
            of a class that is constructed without an explicit ``deps`` list.
        observers: Resolution observers.
    """

    class _Ctx:
        def __init__(self, container_id: str, created_at: float) -> None:
            self.container_id = container_id
            self.created_at = created_at
            self.resolve_count = 0
            self.cache_hit_count = 0

    def __init__(
        self,
        options: Optional[ContainerOptions] = None,
        *,
        parent: Optional["Container"] = None,
        inspector: Optional[DependencyInspector] = None,
        observers: Optional[Iterable[ContainerObserver]] = None,
    ) -> None:
        self._parent = parent
        if options is None:
            options = parent.options if parent is not None else ContainerOptions()
        self.options = options
        if inspector is None and parent is not None:
            inspector = parent._inspector
        self._inspector = inspector
        if observers is None:
            observers = parent._observers if parent is not None else ()
        self._observers: List[ContainerObserver] = list(observers)

        self._registry = ProviderRegistry(options)
        self._singles: Optional[InstanceCache] = InstanceCache() if parent is None else None
        self._scoped = InstanceCache()
        # insertion-ordered so cycle errors can report the chain
        self._resolving: Dict[CompositeKey, str] = {}
        self._lifecycle = LifecycleTracker()

        self.container_id = self._generate_container_id()
        self.context = Container._Ctx(container_id=self.container_id, created_at=time.time())

    @staticmethod
    def _generate_container_id() -> str:
        import random as _r
        return f"k{time.time_ns():x}{_r.randrange(1 << 16):04x}"

    @property
    def parent(self) -> Optional["Container"]:
        return self._parent

    @property
    def root(self) -> "Container":
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def is_root(self) -> bool:
        return self._parent is None

    # ---------- registry ----------

    def register(self, provider: Provider) -> None:
        self._registry.register(provider)
        LOGGER.debug("[%s] registered %s (%s)", self.container_id[:8], provider.display_key, provider.lifetime)

    def load(self, *items: Union[Bundle, Provider, Iterable[Provider]]) -> None:
        """Register every provider of the given bundles, providers or iterables of providers."""
        for item in items:
            if isinstance(item, Provider):
                self.register(item)
            elif isinstance(item, Bundle):
                for p in item.providers:
                    self.register(p)
            else:
                for p in item:
                    self.register(p)

    def _lookup(self, key: KeyT, qualifier: QualifierT) -> Optional[Provider]:
        node: Optional[Container] = self
        while node is not None:
            found = node._registry.get(key, qualifier)
            if found is not None:
                return found
            node = node._parent
        return None

    def has(self, key: KeyT, qualifier: QualifierT = None) -> bool:
        hit, _ = self._cached(key_of(key, qualifier))
        return hit or self._lookup(key, qualifier) is not None

    # ---------- resolution ----------

    def _cached(self, ck: CompositeKey) -> Tuple[bool, Any]:
        singles = self.root._singles
        if singles.has(ck):
            return True, singles.get(ck)
        if self._scoped.has(ck):
            return True, self._scoped.get(ck)
        return False, None

    def _note_cache_hit(self, display: str) -> None:
        self.context.cache_hit_count += 1
        for o in self._observers:
            o.on_cache_hit(display)

    def _requester(self) -> Optional[str]:
        if not self._resolving:
            return None
        return next(reversed(self._resolving.values()))

    @contextmanager
    def _entering(self, ck: CompositeKey, display: str) -> Iterator[None]:
        if ck in self._resolving:
            raise CircularDependencyError(display, self._resolving.values())
        self._resolving[ck] = display
        try:
            yield
        finally:
            self._resolving.pop(ck, None)

    def _inspect(self, cls: type) -> Sequence[KeyT]:
        if self._inspector is None:
            return ()
        return tuple(self._inspector(cls))

    def _fallback_deps(self, key: KeyT, display: str) -> Sequence[KeyT]:
        if not _is_constructible(key):
            raise ProviderNotFoundError(display, self._requester())
        deps = self._inspect(key)
        if not deps and required_arity(key) > 0:
            raise ProviderNotFoundError(display, self._requester())
        return deps

    def get(self, key: KeyT, qualifier: QualifierT = None) -> Any:
        """Resolve *key* synchronously.

        Raises:
            ProviderNotFoundError: No provider and no fallback construction.
            CircularDependencyError: *key* is already being resolved.
            AsyncResolutionError: The provider's factory returned an awaitable.
        """
        ck = key_of(key, qualifier)
        display = format_key(key, qualifier)
        hit, cached = self._cached(ck)
        if hit:
            self._note_cache_hit(display)
            return cached

        provider = self._lookup(key, qualifier)
        if provider is None:
            deps = self._fallback_deps(key, display)
            with self._entering(ck, display):
                return key(*[self.get(d) for d in deps])

        t0 = time.perf_counter()
        with self._entering(ck, display):
            instance = self._produce(provider)
            if provider.use_factory is not None and inspect.isawaitable(instance):
                close_awaitable(instance)
                raise AsyncResolutionError(display)
        self._cache_and_track(provider, instance, t0)
        return instance

    async def aget(self, key: KeyT, qualifier: QualifierT = None) -> Any:
        """Resolve *key*, awaiting asynchronous factories and dependencies.

        Tasks awaiting this container concurrently share one resolving set.
        Two tasks that reach the same uncached key at once therefore fail the
        second one with ``CircularDependencyError``, and its chain mixes the
        keys of both tasks. Resolve such keys once before fanning out.

        Raises:
            ProviderNotFoundError: No provider and no fallback construction.
            CircularDependencyError: *key* is already being resolved, by this
                call chain or by a concurrent task on the same container.
        """
        ck = key_of(key, qualifier)
        display = format_key(key, qualifier)
        hit, cached = self._cached(ck)
        if hit:
            self._note_cache_hit(display)
            return cached

        provider = self._lookup(key, qualifier)
        if provider is None:
            deps = self._fallback_deps(key, display)
            with self._entering(ck, display):
                args = [await self.aget(d) for d in deps]
                return key(*args)

        t0 = time.perf_counter()
        with self._entering(ck, display):
            instance = await self._aproduce(provider)
        self._cache_and_track(provider, instance, t0)
        return instance

    def _produce(self, provider: Provider) -> Any:
        if provider.has_value:
            return provider.use_value
        if provider.use_factory is not None:
            return provider.use_factory(ResolutionContext(self))
        if provider.use_class is not None:
            deps = provider.deps or self._inspect(provider.use_class)
            return provider.use_class(*[self.get(d) for d in deps])
        raise InvalidProviderError(provider.display_key, "no production method set")

    async def _aproduce(self, provider: Provider) -> Any:
        if provider.has_value:
            return provider.use_value
        if provider.use_factory is not None:
            res = provider.use_factory(ResolutionContext(self))
            if inspect.isawaitable(res):
                res = await res
            return res
        if provider.use_class is not None:
            deps = provider.deps or self._inspect(provider.use_class)
            args = []
            for d in deps:
                args.append(await self.aget(d))
            return provider.use_class(*args)
        raise InvalidProviderError(provider.display_key, "no production method set")

    def _cache_and_track(self, provider: Provider, instance: Any, t0: float) -> None:
        ck = provider.composite_key
        if provider.lifetime == LIFETIME_SINGLE:
            self.root._singles.put(ck, instance)
        elif provider.lifetime == LIFETIME_SCOPED:
            self._scoped.put(ck, instance)
        if provider.lifetime != LIFETIME_FACTORY:
            self._lifecycle.track(provider.display_key, instance, provider.on_close)

        took_ms = (time.perf_counter() - t0) * 1000
        self.context.resolve_count += 1
        for o in self._observers:
            o.on_resolve(provider.display_key, took_ms)

    # ---------- scopes ----------

    def begin_scope(self) -> "Container":
        child = Container(self.options, parent=self)
        LOGGER.debug("[%s] began scope %s", self.container_id[:8], child.container_id[:8])
        return child

    @contextmanager
    def scope(self) -> Iterator["Container"]:
        child = self.begin_scope()
        try:
            yield child
        finally:
            child.shutdown()

    @asynccontextmanager
    async def ascope(self):
        child = self.begin_scope()
        try:
            yield child
        finally:
            await child.ashutdown()

    # ---------- override ----------

    def override(self, key: KeyT, value: Any, qualifier: QualifierT = None) -> None:
        """Replace the provider for *key* at the root and seed the ``single`` cache with *value*.

        Succeeds regardless of the override policy, and from any scope.
        """
        root = self.root
        provider = Provider(LIFETIME_SINGLE, key, qualifier, use_value=value)
        root._registry.register(provider, force=True)
        root._singles.put(provider.composite_key, value)
        LOGGER.debug("[%s] overrode %s", root.container_id[:8], provider.display_key)

    # ---------- lifecycle ----------

    def _clear_caches(self) -> None:
        self._scoped.clear()
        if self._singles is not None:
            self._singles.clear()

    def shutdown(self) -> None:
        """Dispose tracked instances, last created first, then clear this container's caches.

        Disposal failures are logged, never raised. A hook returning an
        awaitable counts as a failure here; use :meth:`ashutdown` instead.
        """
        failures = self._lifecycle.dispose_all()
        self._clear_caches()
        LOGGER.info("[%s] shutdown complete (%d disposal failures)", self.container_id[:8], failures)

    async def ashutdown(self) -> None:
        """Asynchronous :meth:`shutdown`; awaits asynchronous disposal hooks."""
        failures = await self._lifecycle.adispose_all()
        self._clear_caches()
        LOGGER.info("[%s] shutdown complete (%d disposal failures)", self.container_id[:8], failures)

    def reset(self) -> None:
        """Clear caches, registry, resolving set and disposal records without running any hook."""
        self._clear_caches()
        self._registry.clear()
        self._resolving.clear()
        self._lifecycle.clear()

    def stats(self) -> Dict[str, Any]:
        resolves = self.context.resolve_count
        hits = self.context.cache_hit_count
        total = resolves + hits
        return {
            "container_id": self.container_id,
            "is_root": self.is_root,
            "uptime_seconds": time.time() - self.context.created_at,
            "total_resolves": resolves,
            "cache_hits": hits,
            "cache_hit_rate": (hits / total) if total > 0 else 0.0,
            "registered_providers": len(self._registry),
            "tracked_disposables": len(self._lifecycle),
        }
