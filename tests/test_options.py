# tests/test_options.py
import pytest

from kestrel_ioc import ContainerOptions, OverrideStrategy
from kestrel_ioc.exceptions import ConfigurationError


def test_defaults():
    opts = ContainerOptions()
    assert opts.allow_override is False
    assert opts.resolved_strategy is OverrideStrategy.ERROR
    assert opts.replaces_on_conflict is False


def test_allow_override_defaults_to_last_wins():
    opts = ContainerOptions(allow_override=True)
    assert opts.resolved_strategy is OverrideStrategy.LAST_WINS
    assert opts.replaces_on_conflict is True


@pytest.mark.parametrize("raw", ["last-wins", "last_wins", "lastWins", "LAST-WINS", OverrideStrategy.LAST_WINS])
def test_strategy_spellings(raw):
    assert ContainerOptions(override_strategy=raw).override_strategy is OverrideStrategy.LAST_WINS


def test_last_wins_without_allow_override_does_not_replace():
    opts = ContainerOptions(allow_override=False, override_strategy="last-wins")
    assert opts.replaces_on_conflict is False


def test_unknown_strategy():
    with pytest.raises(ConfigurationError, match="Unknown override strategy"):
        ContainerOptions(override_strategy="first-wins")


def test_from_env():
    opts = ContainerOptions.from_env({"KESTREL_ALLOW_OVERRIDE": "yes", "KESTREL_OVERRIDE_STRATEGY": "error"})
    assert opts.allow_override is True
    assert opts.resolved_strategy is OverrideStrategy.ERROR


def test_from_env_custom_prefix_and_defaults():
    assert ContainerOptions.from_env({}, prefix="APP_") == ContainerOptions()
    opts = ContainerOptions.from_env({"APP_ALLOW_OVERRIDE": "1"}, prefix="APP_")
    assert opts.replaces_on_conflict is True


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("KESTREL_ALLOW_OVERRIDE", "true")
    monkeypatch.delenv("KESTREL_OVERRIDE_STRATEGY", raising=False)
    assert ContainerOptions.from_env().allow_override is True


def test_from_env_rejects_bad_boolean():
    with pytest.raises(ConfigurationError, match="ALLOW_OVERRIDE"):
        ContainerOptions.from_env({"KESTREL_ALLOW_OVERRIDE": "maybe"})
