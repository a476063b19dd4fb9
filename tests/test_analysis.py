# tests/test_analysis.py
from __future__ import annotations

from typing import Annotated, Optional

from kestrel_ioc.analysis import annotated_dependencies, required_arity


class Repo:
    pass


class Cache:
    pass


class Plain:
    pass


class Service:
    def __init__(self, repo: Repo, cache: Annotated[Cache, "meta"], name: str = "svc", *, debug: bool = False):
        self.repo = repo


class Untyped:
    def __init__(self, settings):
        self.settings = settings


class Forward:
    def __init__(self, dep: NotDefinedAnywhere):  # noqa: F821
        self.dep = dep


def test_plain_class_has_no_dependencies():
    assert annotated_dependencies(Plain) == ()
    assert required_arity(Plain) == 0


def test_required_positional_params_in_order():
    assert annotated_dependencies(Service) == (Repo, Cache)
    assert required_arity(Service) == 2


def test_unannotated_param_keyed_by_name():
    assert annotated_dependencies(Untyped) == ("settings",)


def test_unresolvable_forward_reference_keyed_by_string():
    assert annotated_dependencies(Forward) == ("NotDefinedAnywhere",)


class Mixed:
    def __init__(self, repo: Repo, other: NotDefinedAnywhere):  # noqa: F821
        self.repo = repo


class WithOptional:
    def __init__(self, repo: Optional[Repo], cache: Cache | None):
        self.repo = repo


class OptionalAnnotated:
    def __init__(self, cache: Optional[Annotated[Cache, "meta"]]):
        self.cache = cache


def test_resolvable_hints_survive_an_unresolvable_sibling():
    deps = annotated_dependencies(Mixed)

    assert deps[0] is Repo
    assert deps[1] == "NotDefinedAnywhere"


def test_optional_is_unwrapped():
    assert annotated_dependencies(WithOptional) == (Repo, Cache)
    assert annotated_dependencies(OptionalAnnotated) == (Cache,)


def test_container_resolves_through_mixed_hints():
    from kestrel_ioc import Container, single_of, value_of

    c = Container(inspector=annotated_dependencies)
    c.load(single_of(Repo), value_of("NotDefinedAnywhere", "fallback"))

    mixed = c.get(Mixed)
    assert mixed.repo is c.get(Repo)
