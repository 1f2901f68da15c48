##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
It's hard to type hint pytest fixtures in a way that makes it clear
that the variable being used is a fixture. This module will created
aliases for these fixtures in order to make it easier to track what's
happening.

The types here will be defined as such:
- `FixtureCallable`: A fixture that returns a function
- `FixtureDatabase`: A fixture that returns an MDDB `Database` handle
- `FixtureDict`: A fixture that returns a dictionary
- `FixtureMongoDatabase`: A fixture that returns a (mongomock) pymongo database
- `FixtureProject`: A fixture that returns an MDDB `Project` handle
- `FixtureStr`: A fixture that returns a string
"""

from collections.abc import Callable
from typing import Annotated, Dict, TypeVar

import pytest
from pymongo.database import Database as MongoDatabase

from mddb.db_scripts.database import Database
from mddb.db_scripts.project import Project


K = TypeVar("K")
V = TypeVar("V")

FixtureCallable = Annotated[Callable, pytest.fixture]
FixtureDatabase = Annotated[Database, pytest.fixture]
FixtureDict = Annotated[Dict[K, V], pytest.fixture]
FixtureMongoDatabase = Annotated[MongoDatabase, pytest.fixture]
FixtureProject = Annotated[Project, pytest.fixture]
FixtureStr = Annotated[str, pytest.fixture]
