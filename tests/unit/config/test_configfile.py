"""
Tests for the `configfile.py` module.
"""

import os

import pytest
import yaml
from _pytest.monkeypatch import MonkeyPatch
from pytest_mock import MockerFixture

from mddb.config import configfile
from mddb.config.configfile import (
    DEFAULT_CHUNK_SIZE_BYTES,
    ENV_OVERRIDES,
    apply_env_overrides,
    find_config_file,
    get_config,
    initialize_config,
    load_config,
    merge_defaults,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: MonkeyPatch):
    """
    Remove every `MONGODB_*` variable so the host environment does not leak into the tests.

    Args:
        monkeypatch: PyTest monkeypatch fixture.
    """
    for variable in ENV_OVERRIDES:
        monkeypatch.delenv(variable, raising=False)


def write_app_yaml(directory: str, contents: dict) -> str:
    """
    Write an `app.yaml` file.

    Args:
        directory: Where to write it.
        contents: The configuration.

    Returns:
        The path of the new file.
    """
    filepath = os.path.join(directory, "app.yaml")
    with open(filepath, "w") as app_file:
        yaml.dump(contents, app_file)
    return filepath


def test_load_config(tmp_path: str):
    """
    Test reading an existing and a missing file.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    filepath = write_app_yaml(tmp_path, {"mongo": {"host": "db.example.org"}})
    assert load_config(filepath) == {"mongo": {"host": "db.example.org"}}
    assert load_config(os.path.join(tmp_path, "missing.yaml")) is None


class TestFindConfigFile:
    """Tests for `find_config_file`."""

    def test_given_directory(self, tmp_path: str):
        """
        Only the given directory is searched.

        Args:
            tmp_path: PyTest tmp_path fixture.
        """
        assert find_config_file(str(tmp_path)) is None
        filepath = write_app_yaml(tmp_path, {})
        assert find_config_file(str(tmp_path)) == filepath

    def test_current_directory_first(self, tmp_path: str, monkeypatch: MonkeyPatch, mocker: MockerFixture):
        """
        The current directory wins over the MDDB home directory.

        Args:
            tmp_path: PyTest tmp_path fixture.
            monkeypatch: PyTest monkeypatch fixture.
            mocker: PyTest mocker fixture.
        """
        home = os.path.join(tmp_path, "home")
        work = os.path.join(tmp_path, "work")
        os.makedirs(home)
        os.makedirs(work)
        mocker.patch("mddb.config.configfile.MDDB_HOME", home)
        monkeypatch.chdir(work)
        assert find_config_file() is None
        home_file = write_app_yaml(home, {})
        assert find_config_file() == home_file
        write_app_yaml(work, {})
        assert find_config_file() == os.path.join(os.getcwd(), "app.yaml")


def test_merge_defaults():
    """Test that defaults fill in the missing settings only."""
    config = {"mongo": {"host": "db.example.org"}, "load": None}
    merge_defaults(config)
    assert config["mongo"]["host"] == "db.example.org"
    assert config["mongo"]["port"] == 27017
    assert config["mongo"]["chunk_size_bytes"] == DEFAULT_CHUNK_SIZE_BYTES
    assert config["load"] == {"conserve": False, "overwrite": False}


def test_apply_env_overrides():
    """Test that environment variables override the file and are cast."""
    config = {"mongo": {"host": "localhost", "port": 27017}}
    apply_env_overrides(config, {"MONGODB_HOST": "db.example.org", "MONGODB_PORT": "27018", "OTHER": "x"})
    assert config["mongo"] == {"host": "db.example.org", "port": 27018}


def test_get_config_without_file(tmp_path: str, monkeypatch: MonkeyPatch):
    """
    Test that a missing file falls back to the defaults.

    Args:
        tmp_path: PyTest tmp_path fixture.
        monkeypatch: PyTest monkeypatch fixture.
    """
    monkeypatch.setenv("MONGODB_DATABASE", "mddb_test")
    config = get_config(str(tmp_path))
    assert config["mongo"]["host"] == "localhost"
    assert config["mongo"]["database"] == "mddb_test"
    assert config["load"]["overwrite"] is False


def test_initialize_config(tmp_path: str):
    """
    Test that the global configuration is built from the given directory.

    Args:
        tmp_path: PyTest tmp_path fixture.
    """
    write_app_yaml(tmp_path, {"mongo": {"database": "md"}, "load": {"conserve": True}})
    config = initialize_config(str(tmp_path))
    assert configfile.CONFIG is config
    assert config.mongo.database == "md"
    assert config.load.conserve is True
    assert config.load.overwrite is False
