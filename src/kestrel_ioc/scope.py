"""Instance storage for the ``single`` and ``scoped`` lifetimes."""

from typing import Any, Dict

from .factory import CompositeKey


class InstanceCache:
    def __init__(self) -> None:
        self._instances: Dict[CompositeKey, Any] = {}

    def has(self, key: CompositeKey) -> bool:
        # membership, not truthiness: None and other falsy instances are cached too
        return key in self._instances

    def get(self, key: CompositeKey) -> Any:
        return self._instances[key]

    def put(self, key: CompositeKey, value: Any) -> None:
        self._instances[key] = value

    def clear(self) -> None:
        self._instances.clear()

    def __len__(self) -> int:
        return len(self._instances)
