##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import os
from typing import Any, Optional
from unittest.mock import MagicMock

import mongomock
import pytest
from gridfs import GridFSBucket

from mddb.db_scripts.database import Database
from mddb.db_scripts.project import Project
from mddb.prompts import Prompter
from tests.fixture_types import FixtureCallable, FixtureDatabase, FixtureMongoDatabase, FixtureProject
from tests.utils import create_bucket


# pylint: disable=redefined-outer-name


@pytest.fixture
def mongo_db() -> FixtureMongoDatabase:
    """
    An empty in-memory database.

    Returns:
        A mongomock database.
    """
    return mongomock.MongoClient()["mddb_test"]


@pytest.fixture
def bucket(mongo_db: FixtureMongoDatabase) -> MagicMock:
    """
    A mocked GridFS bucket storing files in `mongo_db`.

    Args:
        mongo_db: The in-memory database.

    Returns:
        A mocked `GridFSBucket`.
    """
    return create_bucket(mongo_db)


@pytest.fixture
def prompter() -> MagicMock:
    """
    A mocked `Prompter`. Tests configure its answers.

    Returns:
        A mocked `Prompter`.
    """
    return MagicMock(spec=Prompter)


@pytest.fixture
def database(mongo_db: FixtureMongoDatabase, bucket: GridFSBucket, prompter: MagicMock) -> FixtureDatabase:
    """
    A `Database` handle over the in-memory database, already set up.

    Args:
        mongo_db: The in-memory database.
        bucket: The mocked GridFS bucket.
        prompter: The mocked prompter.

    Returns:
        The database handle.
    """
    database = Database(mongo_db, bucket, prompter=prompter)
    database.setup()
    return database


@pytest.fixture
def project(database: FixtureDatabase) -> FixtureProject:
    """
    A new empty project.

    Args:
        database: The database handle.

    Returns:
        The project handle.
    """
    return database.create_project()


@pytest.fixture
def load_file(tmp_path: str) -> FixtureCallable:
    """
    A fixture that returns a function loading a small file into a project.

    Args:
        tmp_path: PyTest tmp_path fixture.

    Returns:
        A function that writes a local file and loads it with `Project.load_file`.
    """

    def _load_file(project: Project, filename: str, md_index: Optional[int] = None, data: bytes = b"data") -> Any:
        source_path = os.path.join(tmp_path, f"source-{filename}")
        with open(source_path, "wb") as source:
            source.write(data)
        return project.load_file(filename, md_index, source_path)

    return _load_file


@pytest.fixture
def load_analysis() -> FixtureCallable:
    """
    A fixture that returns a function loading an analysis into a project.

    Returns:
        A function that loads an analysis with `Project.load_analysis`.
    """

    def _load_analysis(project: Project, name: str, md_index: Optional[int] = None, value: Any = None) -> Any:
        return project.load_analysis({"name": name, "value": value or {"data": [1, 2, 3]}}, md_index)

    return _load_analysis
