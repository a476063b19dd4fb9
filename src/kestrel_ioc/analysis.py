import inspect
import types
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union, get_args, get_origin, get_type_hints, Annotated

from .constants import LOGGER

KeyT = Union[str, type]

DependencyInspector = Callable[[type], Sequence[KeyT]]
"""Capability returning the ordered dependency identifiers of a constructible class."""


def _strip_annotated(ann: Any) -> Any:
    if get_origin(ann) is Annotated:
        args = get_args(ann)
        return args[0] if args else Any
    return ann


def _check_optional(ann: Any) -> Any:
    if get_origin(ann) in (Union, types.UnionType):
        args = [a for a in get_args(ann) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return ann


class _SingleHint:
    # lets get_type_hints evaluate one annotation at a time
    def __init__(self, name: str, ann: Any) -> None:
        self.__annotations__ = {name: ann}


def _hint_for(name: str, ann: Any, globalns: Dict[str, Any]) -> Any:
    try:
        return get_type_hints(_SingleHint(name, ann), globalns=globalns, include_extras=True)[name]
    except (NameError, TypeError, SyntaxError):
        return ann


def _init_hints(cls: type) -> Dict[str, Any]:
    init = inspect.getattr_static(cls, "__init__", None)
    if init is None or init is object.__init__:
        return {}
    try:
        return get_type_hints(init, include_extras=True)
    except NameError as exc:
        LOGGER.warning("'%s' name error retrieving %s type hints", exc.name, cls.__qualname__)
    except TypeError:
        return {}

    try:
        raw: Optional[Dict[str, Any]] = getattr(init, "__annotations__", None)
    except NameError:
        return {}
    globalns = getattr(init, "__globals__", {})
    return {name: _hint_for(name, ann, globalns) for name, ann in (raw or {}).items()}


def annotated_dependencies(cls: type) -> Tuple[KeyT, ...]:
    """Read dependency identifiers from the annotations of ``cls.__init__``.

    Only required positional parameters are reported, in declaration order,
    since the container passes dependencies positionally. Scanning stops at
    the first parameter that has a default. Unannotated parameters are keyed
    by their name; unresolvable forward references by their string.

    Example:
        >>> class Service:
        ...     def __init__(self, repo: Repo, name: str = "svc"): ...
        >>> annotated_dependencies(Service)
        (<class 'Repo'>,)
    """
    if cls.__init__ is object.__init__:
        return ()
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return ()

    hints = _init_hints(cls)
    plan: List[KeyT] = []
    for name, param in sig.parameters.items():
        if param.kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            continue
        if param.default is not inspect.Parameter.empty:
            break
        ann = _strip_annotated(_check_optional(_strip_annotated(hints.get(name, param.annotation))))
        if ann is inspect.Parameter.empty:
            plan.append(name)
        elif isinstance(ann, (type, str)):
            plan.append(ann)
        else:
            plan.append(getattr(ann, "__forward_arg__", name))
    return tuple(plan)


def required_arity(cls: type) -> int:
    """Number of parameters ``cls()`` cannot be called without."""
    if cls.__init__ is object.__init__:
        return 0
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return 0
    return sum(
        1
        for p in sig.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    )
