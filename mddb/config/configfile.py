##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
This module provides functionality for locating and loading the application
configuration file, filling in default settings and applying environment
variable overrides.

It houses the `CONFIG` object that's used throughout MDDB's codebase.
"""
import logging
import os
from typing import Dict, Optional

from mddb.config import Config
from mddb.config.config_filepaths import APP_FILENAME, MDDB_HOME
from mddb.utils import load_yaml


LOG: logging.Logger = logging.getLogger(__name__)

CONFIG: Optional[Config] = None

DEFAULT_CHUNK_SIZE_BYTES: int = 4 * 1024 * 1024  # 4 MiB

DEFAULT_MONGO_SETTINGS: Dict = {
    "host": "localhost",
    "port": 27017,
    "database": "mddb",
    "username": None,
    "password": None,
    "auth_source": "admin",
    "url": None,
    "chunk_size_bytes": DEFAULT_CHUNK_SIZE_BYTES,
}

DEFAULT_LOAD_SETTINGS: Dict = {
    "conserve": False,
    "overwrite": False,
}

# Environment variable -> (section, key, type)
ENV_OVERRIDES: Dict = {
    "MONGODB_HOST": ("mongo", "host", str),
    "MONGODB_PORT": ("mongo", "port", int),
    "MONGODB_DATABASE": ("mongo", "database", str),
    "MONGODB_USERNAME": ("mongo", "username", str),
    "MONGODB_PASSWORD": ("mongo", "password", str),
    "MONGODB_AUTH_SOURCE": ("mongo", "auth_source", str),
    "MONGODB_URL": ("mongo", "url", str),
}


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads an MDDB YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath (str): The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No app config file at {filepath}")
        return None
    LOG.info(f"Reading app config from file {filepath}")
    return load_yaml(filepath)


def find_config_file(path: str = None) -> Optional[str]:
    """
    Locate the application configuration file (`app.yaml`).

    Without a `path`, the current working directory is checked first and then
    the `MDDB_HOME` directory. With a `path`, only that directory is checked.

    Args:
        path (str, optional): A specific directory to look for `app.yaml`.

    Returns:
        The full path to the `app.yaml` file if found, otherwise `None`.
    """
    if path is None:
        local_app = os.path.join(os.getcwd(), APP_FILENAME)
        if os.path.isfile(local_app):
            return local_app

        path_app = os.path.join(MDDB_HOME, APP_FILENAME)
        if os.path.isfile(path_app):
            return path_app

        return None

    app_path = os.path.join(path, APP_FILENAME)
    if os.path.exists(app_path):
        return app_path

    return None


def merge_defaults(config: Dict):
    """
    Fill in every missing setting with its default value.

    Args:
        config: The raw configuration dictionary. Modified in place.
    """
    for section, defaults in (("mongo", DEFAULT_MONGO_SETTINGS), ("load", DEFAULT_LOAD_SETTINGS)):
        values = config.get(section) or {}
        for key, default in defaults.items():
            values.setdefault(key, default)
        config[section] = values


def apply_env_overrides(config: Dict, environ: Dict = None):
    """
    Override configuration values with the `MONGODB_*` environment variables.

    Args:
        config: The configuration dictionary. Modified in place.
        environ: The environment to read from. Defaults to `os.environ`.
    """
    environ = os.environ if environ is None else environ
    for variable, (section, key, cast) in ENV_OVERRIDES.items():
        if variable in environ:
            LOG.debug(f"Overriding {section}.{key} with the {variable} environment variable")
            config[section][key] = cast(environ[variable])


def get_config(path: Optional[str] = None) -> Dict:
    """
    Load the app configuration, merged with defaults and environment overrides.

    A missing `app.yaml` is not an error: the defaults point to a local server.

    Args:
        path (Optional[str]): The directory holding the `app.yaml` file.

    Returns:
        The configuration dictionary.
    """
    filepath = find_config_file(path)
    config = (load_config(filepath) if filepath else None) or {}
    merge_defaults(config)
    apply_env_overrides(config)
    return config


def initialize_config(path: Optional[str] = None) -> Config:
    """
    Build the global `CONFIG` object.

    Args:
        path (Optional[str]): The directory holding the `app.yaml` file.

    Returns:
        The initialized `Config` object.
    """
    global CONFIG  # pylint: disable=global-statement
    CONFIG = Config(get_config(path))
    return CONFIG
