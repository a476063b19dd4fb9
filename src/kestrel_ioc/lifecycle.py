"""Disposal tracking for cached instances.

Provides the :class:`Disposable` capability, :class:`DisposalRecord` and
:class:`LifecycleTracker`, which tears instances down in reverse creation
order when its container shuts down.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Union, runtime_checkable

from .constants import LOGGER


@runtime_checkable
class Disposable(Protocol):
    """Capability for instances that own resources.

    ``dispose()`` may be a coroutine function; ``ashutdown()`` awaits it.
    """

    def dispose(self) -> Union[None, Awaitable[None]]: ...


@dataclass(frozen=True)
class DisposalRecord:
    key: str
    instance: Any
    close: Optional[Callable[[Any], Any]] = None

    def run(self) -> Any:
        if self.close is not None:
            return self.close(self.instance)
        if isinstance(self.instance, Disposable):
            return self.instance.dispose()
        return None


class LifecycleTracker:
    """Ordered list of disposal records owned by a single container."""

    def __init__(self) -> None:
        self._records: List[DisposalRecord] = []

    def track(self, key: str, instance: Any, close: Optional[Callable[[Any], Any]] = None) -> None:
        self._records.append(DisposalRecord(key, instance, close))

    def records(self) -> List[DisposalRecord]:
        return list(self._records)

    def clear(self) -> None:
        self._records = []

    def __len__(self) -> int:
        return len(self._records)

    def _take(self) -> List[DisposalRecord]:
        records, self._records = self._records, []
        return list(reversed(records))

    def dispose_all(self) -> int:
        """Run every record synchronously, last created first.

        A hook that returns an awaitable cannot complete here; the awaitable
        is closed and the failure logged. Use :meth:`adispose_all` for
        asynchronous hooks.

        Returns:
            The number of records that failed.
        """
        failures = 0
        for record in self._take():
            try:
                res = record.run()
                if inspect.isawaitable(res):
                    close_awaitable(res)
                    raise RuntimeError("disposal returned an awaitable; use ashutdown()")
            except Exception as e:
                failures += 1
                LOGGER.warning("Disposal of %s failed: %s", record.key, e)
        return failures

    async def adispose_all(self) -> int:
        """Run every record, last created first, awaiting asynchronous hooks.

        Returns:
            The number of records that failed.
        """
        failures = 0
        for record in self._take():
            try:
                res = record.run()
                if inspect.isawaitable(res):
                    await res
            except Exception as e:
                failures += 1
                LOGGER.warning("Disposal of %s failed: %s", record.key, e)
        return failures


def close_awaitable(aw: Any) -> None:
    close = getattr(aw, "close", None)
    if callable(close):
        close()
