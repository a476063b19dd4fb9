# tests/test_override.py
from kestrel_ioc import Container, scoped_of, single_of


class Mailer:
    instances = 0

    def __init__(self):
        Mailer.instances += 1


class FakeMailer:
    pass


def setup_function():
    Mailer.instances = 0


def test_override_bypasses_production_method():
    c = Container()
    c.register(single_of(Mailer))
    fake = FakeMailer()

    c.override(Mailer, fake)

    assert c.get(Mailer) is fake
    assert Mailer.instances == 0


def test_override_visible_from_child_scopes():
    c = Container()
    c.register(single_of(Mailer))
    s = c.begin_scope()
    fake = FakeMailer()

    c.override(Mailer, fake)

    assert s.get(Mailer) is fake
    assert c.begin_scope().get(Mailer) is fake


def test_override_replaces_already_cached_instance():
    c = Container()
    c.register(single_of(Mailer))
    original = c.get(Mailer)
    fake = FakeMailer()

    c.override(Mailer, fake)

    assert c.get(Mailer) is fake
    assert c.get(Mailer) is not original


def test_override_ignores_policy_and_works_from_scope():
    c = Container()
    c.register(scoped_of(Mailer))
    s = c.begin_scope()

    s.override(Mailer, "stub")

    assert c.get(Mailer) == "stub"
    assert s.get(Mailer) == "stub"
    assert Mailer.instances == 0


def test_override_qualified_key_only():
    c = Container()
    c.load(single_of(Mailer), single_of(Mailer, qualifier="bulk"))

    c.override(Mailer, "stub", "bulk")

    assert c.get(Mailer, "bulk") == "stub"
    assert isinstance(c.get(Mailer), Mailer)


def test_override_survives_shutdown_through_registry():
    c = Container()
    c.register(single_of(Mailer))
    c.override(Mailer, "stub")

    c.shutdown()

    assert c.get(Mailer) == "stub"
    assert Mailer.instances == 0


def test_override_of_unregistered_key():
    c = Container()
    c.override("clock", 42)
    assert c.get("clock") == 42
