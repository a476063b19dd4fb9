# tests/test_scope.py
import pytest

from kestrel_ioc import Container, ContainerOptions, scoped_of, single_of, value_of
from kestrel_ioc.exceptions import DuplicateProviderError


class RequestCtx:
    pass


class Config:
    pass


def _container():
    c = Container()
    c.load(single_of(Config), scoped_of(RequestCtx))
    return c


def test_scoped_instances_differ_between_scopes_and_are_stable_within():
    c = _container()
    s1, s2 = c.begin_scope(), c.begin_scope()

    a1, a2 = s1.get(RequestCtx), s1.get(RequestCtx)
    b1 = s2.get(RequestCtx)

    assert a1 is a2
    assert a1 is not b1
    assert s2.get(RequestCtx) is b1


def test_single_shared_across_scopes_and_root():
    c = _container()
    s1, s2 = c.begin_scope(), c.begin_scope()

    cfg = s1.get(Config)
    assert s2.get(Config) is cfg
    assert c.get(Config) is cfg


def test_nested_scopes_walk_to_root():
    c = _container()
    inner = c.begin_scope().begin_scope()

    assert inner.root is c
    assert inner.parent.parent is c
    assert c.parent is None
    assert inner.get(Config) is c.get(Config)
    assert not inner.is_root


def test_scope_inherits_override_policy():
    c = Container(ContainerOptions(allow_override=True))
    s = c.begin_scope()
    assert s.options == c.options
    assert s.options.replaces_on_conflict


def test_child_registry_layer_shadows_parent_and_stays_local():
    c = Container()
    c.register(value_of("name", "root"))
    s = c.begin_scope()
    s.register(scoped_of("greeting", lambda ctx: f"hello {ctx.get('name')}"))

    assert s.get("greeting") == "hello root"
    assert not c.has("greeting")


def test_child_duplicate_check_is_per_layer():
    c = Container()
    c.register(value_of("name", "root"))
    s = c.begin_scope()
    s.register(scoped_of("name", lambda ctx: "child"))

    assert s.get("name") == "child"
    assert c.get("name") == "root"
    with pytest.raises(DuplicateProviderError):
        s.register(scoped_of("name", lambda ctx: "again"))


def test_ending_scope_leaves_parent_and_siblings_untouched():
    closed = []
    c = Container()
    c.load(
        single_of(Config),
        scoped_of(RequestCtx, on_close=lambda inst: closed.append(inst)),
    )
    root_req = c.get(RequestCtx)
    s1, s2 = c.begin_scope(), c.begin_scope()
    r1, r2 = s1.get(RequestCtx), s2.get(RequestCtx)

    s1.shutdown()

    assert closed == [r1]
    assert s2.get(RequestCtx) is r2
    assert c.get(RequestCtx) is root_req
    assert s1.get(RequestCtx) is not r1


def test_scope_context_manager_shuts_down_child():
    closed = []
    c = Container()
    c.register(scoped_of(RequestCtx, on_close=lambda inst: closed.append("req")))

    with c.scope() as s:
        s.get(RequestCtx)
        assert closed == []

    assert closed == ["req"]


@pytest.mark.asyncio
async def test_async_scope_context_manager():
    closed = []

    async def close(inst):
        closed.append("req")

    c = Container()
    c.register(scoped_of(RequestCtx, on_close=close))

    async with c.ascope() as s:
        await s.aget(RequestCtx)

    assert closed == ["req"]


def test_single_resolved_in_scope_is_tracked_by_that_scope():
    closed = []
    c = Container()
    c.register(single_of(Config, on_close=lambda inst: closed.append("cfg")))
    s = c.begin_scope()
    cfg = s.get(Config)

    s.shutdown()
    assert closed == ["cfg"]
    assert c.get(Config) is cfg

    c.shutdown()
    assert closed == ["cfg"]
