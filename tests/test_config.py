from pathlib import Path

import pytest

from gardenctl.shared.config import (
    DEFAULT_SESSION_ID,
    AccessRestriction,
    GardenctlPaths,
    GardenConfig,
    load_garden_config,
)
from gardenctl.shared.errors import ConfigError


def test_paths_from_environment(tmp_path):
    """GARDENCTL_HOME, GARDENCONFIG and GARDEN_SESSION_ID set the paths."""
    paths = GardenctlPaths.from_environment(
        {"GARDENCTL_HOME": str(tmp_path), "GARDEN_SESSION_ID": "abc"}
    )

    assert paths.config == tmp_path / "config"
    assert paths.target == tmp_path / "sessions" / "abc" / "target"
    assert paths.cache == tmp_path / "cache"
    assert paths.history == tmp_path / "history"


def test_paths_defaults(monkeypatch, tmp_path):
    """Paths default to ~/.garden."""
    monkeypatch.setenv("HOME", str(tmp_path))

    paths = GardenctlPaths.from_environment({"GARDENCONFIG": "~/gardenconfig"})

    assert paths.home == tmp_path / ".garden"
    assert paths.config == tmp_path / "gardenconfig"
    assert paths.session_dir.name == DEFAULT_SESSION_ID


def test_load_garden_config(garden_config_path):
    """Gardens, kubeconfigs and access restrictions are read."""
    config = load_garden_config(garden_config_path)

    assert config.names() == ["prod", "dev"]
    assert config.github_url == "https://github.example.com"
    prod = config.get("prod")
    assert prod.dashboard_url == "https://dashboard.garden.prod.example.com"
    restriction = prod.access_restrictions[0]
    assert restriction.notify_if is True
    assert restriction.options[0].notify_if is False
    assert config.kubeconfig_for("dev") == Path(config.get("dev").kubeconfig)


def test_missing_config_is_empty(tmp_path):
    """A missing config has no gardens."""
    assert load_garden_config(tmp_path / "nope").names() == []


def test_broken_config(tmp_path):
    """Unparsable config is a ConfigError."""
    path = tmp_path / "config"
    path.write_text("gardenClusters: [\n")

    with pytest.raises(ConfigError):
        load_garden_config(path)


def test_unknown_garden(garden_config_path):
    """Asking for an unconfigured garden fails."""
    config = load_garden_config(garden_config_path)

    with pytest.raises(ConfigError, match="not configured"):
        config.kubeconfig_for("staging")


def test_garden_for_dashboard(garden_config_path):
    """Dashboard hosts map back to their garden."""
    config = load_garden_config(garden_config_path)

    assert config.garden_for_dashboard("dashboard.garden.dev.example.com") == "dev"
    with pytest.raises(ConfigError):
        config.garden_for_dashboard("dashboard.other.example.com")


def test_garden_entry_needs_name():
    """Garden entries without a name are rejected."""
    with pytest.raises(ConfigError):
        GardenConfig.from_dict({"gardenClusters": [{"kubeConfig": "/x"}]})


@pytest.mark.parametrize(
    "value,expected",
    [(True, True), (False, False), ("true", True), ("True", True), ("false", False), ("no", False)],
)
def test_notify_if_accepts_quoted_booleans(value, expected):
    """notifyIf written as a string is read by its text, not its truthiness."""
    restriction = AccessRestriction.from_dict(
        {
            "key": "seed.gardener.cloud/eu-access",
            "notifyIf": value,
            "options": [{"key": "addons", "notifyIf": value}],
        }
    )

    assert restriction.notify_if is expected
    assert restriction.options[0].notify_if is expected
