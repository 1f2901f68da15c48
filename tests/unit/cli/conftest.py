##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Fixtures for files in this `cli/` test directory.
"""

from argparse import ArgumentParser
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from tests.fixture_types import FixtureCallable, FixtureDatabase


@pytest.fixture
def create_parser() -> FixtureCallable:
    """
    A fixture to help create a parser for any command.

    Returns:
        A function that creates a parser.
    """

    def _create_parser(cmd: CommandEntryPoint) -> ArgumentParser:
        """
        Returns an `ArgumentParser` configured with the `cmd` command and its subcommands.

        Returns:
            Parser with the `cmd` command and its subcommands registered.
        """
        parser = ArgumentParser()
        subparsers = parser.add_subparsers(dest="main_command")
        cmd.add_parser(subparsers)
        return parser

    return _create_parser


@pytest.fixture
def patch_database(mocker: MockerFixture, database: FixtureDatabase) -> FixtureCallable:
    """
    A fixture that makes a command module connect to the in-memory database.

    Args:
        mocker: PyTest mocker fixture.
        database: The database handle.

    Returns:
        A function that patches `get_database` in a command module.
    """

    def _patch_database(module: str) -> MagicMock:
        return mocker.patch(f"mddb.cli.commands.{module}.get_database", return_value=database)

    return _patch_database


@pytest.fixture
def patch_confirm(mocker: MockerFixture) -> FixtureCallable:
    """
    A fixture that answers the confirmations of a command module.

    Args:
        mocker: PyTest mocker fixture.

    Returns:
        A function that patches `confirm_action` in a command module.
    """

    def _patch_confirm(module: str, answer: bool = True) -> MagicMock:
        return mocker.patch(f"mddb.cli.commands.{module}.confirm_action", return_value=answer)

    return _patch_confirm
