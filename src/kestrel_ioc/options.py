"""Container configuration.

Provides :class:`OverrideStrategy` and the immutable :class:`ContainerOptions`
accepted by :class:`~kestrel_ioc.container.Container`, plus loading from
environment variables.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union

from .constants import ENV_PREFIX
from .exceptions import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class OverrideStrategy(str, Enum):
    ERROR = "error"
    LAST_WINS = "last-wins"

    @classmethod
    def parse(cls, value: Union["OverrideStrategy", str]) -> "OverrideStrategy":
        """Normalize a strategy given as an enum member or a string.

        Accepts ``"error"``, ``"last-wins"``, ``"last_wins"`` and ``"lastWins"``.

        Raises:
            ConfigurationError: If *value* names no known strategy.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            norm = value.strip().lower().replace("_", "-")
            if norm == "lastwins":
                norm = "last-wins"
            for member in cls:
                if member.value == norm:
                    return member
        raise ConfigurationError(f"Unknown override strategy: {value!r}; expected 'error' or 'last-wins'")


StrategyT = Union[OverrideStrategy, str]


@dataclass(frozen=True)
class ContainerOptions:
    """Override policy for a container and every scope derived from it.

    Attributes:
        allow_override: Whether a second registration for the same key may
            replace the first.
        override_strategy: ``ERROR`` or ``LAST_WINS``. When omitted it
            defaults to ``LAST_WINS`` if *allow_override* is true and to
            ``ERROR`` otherwise.

    Example:
        >>> ContainerOptions(allow_override=True).resolved_strategy
        <OverrideStrategy.LAST_WINS: 'last-wins'>
    """

    allow_override: bool = False
    override_strategy: Optional[StrategyT] = None

    def __post_init__(self) -> None:
        if self.override_strategy is not None:
            object.__setattr__(self, "override_strategy", OverrideStrategy.parse(self.override_strategy))

    @property
    def resolved_strategy(self) -> OverrideStrategy:
        if self.override_strategy is not None:
            return self.override_strategy
        return OverrideStrategy.LAST_WINS if self.allow_override else OverrideStrategy.ERROR

    @property
    def replaces_on_conflict(self) -> bool:
        return self.allow_override and self.resolved_strategy is OverrideStrategy.LAST_WINS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX) -> "ContainerOptions":
        """Build options from ``<prefix>ALLOW_OVERRIDE`` and ``<prefix>OVERRIDE_STRATEGY``.

        Args:
            environ: Mapping to read from; defaults to ``os.environ``.
            prefix: Variable name prefix.

        Raises:
            ConfigurationError: If a variable holds an unrecognized value.
        """
        env = os.environ if environ is None else environ
        raw_allow = env.get(prefix + "ALLOW_OVERRIDE")
        raw_strategy = env.get(prefix + "OVERRIDE_STRATEGY")
        allow = False
        if raw_allow is not None:
            norm = raw_allow.strip().lower()
            if norm in _TRUTHY:
                allow = True
            elif norm not in _FALSY:
                raise ConfigurationError(f"Invalid boolean for {prefix}ALLOW_OVERRIDE: {raw_allow!r}")
        strategy = raw_strategy if raw_strategy else None
        return cls(allow_override=allow, override_strategy=strategy)
