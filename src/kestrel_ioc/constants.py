"""Constants used throughout the kestrel-ioc container.

This module defines the package logger, the built-in lifetime names and the
environment variable prefix read by :meth:`ContainerOptions.from_env`.
"""

import logging

LOGGER_NAME: str = "kestrel_ioc"
"""Default logger name for the kestrel-ioc container."""

LOGGER: logging.Logger = logging.getLogger(LOGGER_NAME)
"""Pre-configured logger instance for kestrel-ioc internal diagnostics."""

LIFETIME_SINGLE: str = "single"
"""Built-in lifetime: one instance for the whole container tree."""

LIFETIME_SCOPED: str = "scoped"
"""Built-in lifetime: one instance per scope."""

LIFETIME_FACTORY: str = "factory"
"""Built-in lifetime: a new instance on every resolution, never cached."""

LIFETIMES = (LIFETIME_SINGLE, LIFETIME_SCOPED, LIFETIME_FACTORY)

ENV_PREFIX: str = "KESTREL_"
"""Prefix for environment variables read by ``ContainerOptions.from_env``."""
