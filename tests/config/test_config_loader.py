from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from twtfeed.config import ConfigLocator, ConfigRepository, SortOrder
from twtfeed.errors import ConfigurationError


def test_locator_uses_env_home(config_home: Path) -> None:
    locator = ConfigLocator()
    assert locator.home == config_home.resolve()
    assert locator.config_file == config_home.resolve() / "config.yaml"
    assert locator.cache_path() == config_home.resolve() / "cache.db"
    assert locator.logs_dir == config_home.resolve() / "logs"


def test_locator_explicit_config_file(config_home: Path, tmp_path: Path) -> None:
    locator = ConfigLocator(config_file=tmp_path / "elsewhere.yaml")
    assert locator.config_file == (tmp_path / "elsewhere.yaml").resolve()


def test_missing_config_is_configuration_error(config_home: Path) -> None:
    repository = ConfigRepository()
    with pytest.raises(ConfigurationError, match="doesn't exist"):
        repository.load()


def test_unparseable_config(config_home: Path) -> None:
    repository = ConfigRepository()
    repository.path.parent.mkdir(parents=True, exist_ok=True)
    repository.path.write_text("twtxt: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        repository.load()
    repository.path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        repository.load()


def test_invalid_option_is_configuration_error(make_repository) -> None:
    repository = make_repository(limit_timeline="many")
    with pytest.raises(ConfigurationError, match="limit_timeline"):
        repository.load()


def test_load_applies_overrides(make_repository) -> None:
    repository = make_repository(
        following={"bob": "http://b/"},
        overrides={"sorting": "ascending", "limit_timeline": 3, "since": "2020-01-01"},
        use_cache=True,
    )
    config = repository.load()
    assert config.twtxt.sorting is SortOrder.ASCENDING
    assert config.twtxt.limit_timeline == 3
    assert config.twtxt.since.year == 2020
    assert config.twtxt.use_cache is True
    assert config.following == {"bob": "http://b/"}


def test_invalid_override_is_configuration_error(make_repository) -> None:
    repository = make_repository(overrides={"timeout": -1})
    with pytest.raises(ConfigurationError, match="timeout"):
        repository.load()


def test_sync_following_keeps_settings(make_repository) -> None:
    repository = make_repository(following={"bob": "http://b/"}, custom_key="kept")
    repository.sync_following({"carol": "http://c/"})
    raw = yaml.safe_load(repository.path.read_text(encoding="utf-8"))
    assert raw["following"] == {"carol": "http://c/"}
    assert raw["twtxt"]["custom_key"] == "kept"


def test_initialise_writes_default_once(config_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USER", "tester")
    repository = ConfigRepository()
    repository.initialise()
    assert repository.load().twtxt.nick == "tester"
    repository.sync_following({"bob": "http://b/"})
    repository.initialise()
    assert repository.load().following == {"bob": "http://b/"}


def test_option_get_set_remove(make_repository) -> None:
    repository = make_repository()
    assert repository.get_option("limit_timeline") is None
    repository.set_option("limit_timeline", 5)
    assert repository.get_option("limit_timeline") == 5
    assert repository.load().twtxt.limit_timeline == 5
    assert repository.remove_option("limit_timeline") is True
    assert repository.remove_option("limit_timeline") is False


def test_set_option_rejects_invalid_value(make_repository) -> None:
    repository = make_repository()
    with pytest.raises(ConfigurationError):
        repository.set_option("sorting", "sideways")
    assert repository.get_option("sorting") is None
