# kestrel_ioc/__init__.py
try:
    from ._version import __version__
except Exception:
    __version__ = "0.0.0"

from .container import Container, ContainerObserver, ResolutionContext
from .factory import Provider, ProviderRegistry, format_key
from .bundle import Bundle, bundle, bundles, single_of, scoped_of, factory_of, value_of
from .lifecycle import Disposable
from .analysis import annotated_dependencies
from .options import ContainerOptions, OverrideStrategy
from .api import init, current, inject, ainject, override, begin_scope, shutdown, ashutdown, reset, ScopeHandle
from .exceptions import (
    KestrelError,
    DuplicateProviderError,
    ProviderNotFoundError,
    CircularDependencyError,
    AsyncResolutionError,
    InvalidProviderError,
    ConfigurationError,
)

__all__ = [
    "__version__",
    "Container",
    "ContainerObserver",
    "ResolutionContext",
    "Provider",
    "ProviderRegistry",
    "format_key",
    "Bundle",
    "bundle",
    "bundles",
    "single_of",
    "scoped_of",
    "factory_of",
    "value_of",
    "Disposable",
    "annotated_dependencies",
    "ContainerOptions",
    "OverrideStrategy",
    "init",
    "current",
    "inject",
    "ainject",
    "override",
    "begin_scope",
    "shutdown",
    "ashutdown",
    "reset",
    "ScopeHandle",
    "KestrelError",
    "DuplicateProviderError",
    "ProviderNotFoundError",
    "CircularDependencyError",
    "AsyncResolutionError",
    "InvalidProviderError",
    "ConfigurationError",
]
