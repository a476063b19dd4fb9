"""Process-scoped container handle.

The handle is explicitly initialized with :func:`init` and torn down with
:func:`reset`; nothing is created at import time. Code that needs several
independent containers (tests, embedded apps) should construct
:class:`~kestrel_ioc.container.Container` directly instead.

Lifecycle::

    init(app_bundle)          # installs a new root container
    inject(Service)           # resolves through it
    await ashutdown()         # disposes tracked instances, keeps it installed
    reset()                   # hard clear without disposal, uninstalls it
"""

from typing import Any, Iterable, Optional, Union

from . import _state
from .analysis import DependencyInspector
from .bundle import Bundle
from .constants import LOGGER
from .container import Container, ContainerObserver
from .exceptions import ConfigurationError
from .factory import KeyT, Provider, QualifierT
from .options import ContainerOptions, StrategyT


def init(
    *bundles: Union[Bundle, Provider, Iterable[Provider]],
    options: Optional[ContainerOptions] = None,
    allow_override: Optional[bool] = None,
    override_strategy: Optional[StrategyT] = None,
    inspector: Optional[DependencyInspector] = None,
    observers: Optional[Iterable[ContainerObserver]] = None,
) -> Container:
    """Create a root container, load *bundles* into it and install it as the process handle.

    Any previously installed container is replaced without being shut down.

    Raises:
        ConfigurationError: If *options* is combined with *allow_override*
            or *override_strategy*, or the strategy is unknown.
        DuplicateProviderError: If the bundles conflict under the policy.
    """
    if options is not None and (allow_override is not None or override_strategy is not None):
        raise ConfigurationError("Pass either options= or allow_override=/override_strategy=, not both")
    if options is None:
        options = ContainerOptions(allow_override=bool(allow_override), override_strategy=override_strategy)

    container = Container(options, inspector=inspector, observers=observers)
    container.load(*bundles)
    if _state._container is not None:
        LOGGER.debug("Replacing installed container %s", _state._container.container_id[:8])
    _state._container = container
    return container


def current() -> Container:
    """Return the installed container.

    Raises:
        ConfigurationError: If :func:`init` has not been called since the last :func:`reset`.
    """
    if _state._container is None:
        raise ConfigurationError("kestrel_ioc is not initialized; call init() first")
    return _state._container


def is_initialized() -> bool:
    return _state._container is not None


def inject(key: KeyT, qualifier: QualifierT = None) -> Any:
    return current().get(key, qualifier)


async def ainject(key: KeyT, qualifier: QualifierT = None) -> Any:
    return await current().aget(key, qualifier)


def override(key: KeyT, value: Any, qualifier: QualifierT = None) -> None:
    current().override(key, value, qualifier)


class ScopeHandle:
    """A scope of the installed container, ended with :meth:`end` or :meth:`aend`."""

    def __init__(self, container: Container) -> None:
        self._container = container

    @property
    def container(self) -> Container:
        return self._container

    def get(self, key: KeyT, qualifier: QualifierT = None) -> Any:
        return self._container.get(key, qualifier)

    async def aget(self, key: KeyT, qualifier: QualifierT = None) -> Any:
        return await self._container.aget(key, qualifier)

    def end(self) -> None:
        self._container.shutdown()

    async def aend(self) -> None:
        await self._container.ashutdown()


def begin_scope() -> ScopeHandle:
    return ScopeHandle(current().begin_scope())


def shutdown() -> None:
    current().shutdown()


async def ashutdown() -> None:
    await current().ashutdown()


def reset() -> None:
    """Hard-clear the installed container, without disposal, and uninstall it. No-op when uninstalled."""
    container = _state._container
    if container is None:
        return
    container.reset()
    _state._container = None
