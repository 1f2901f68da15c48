##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Tests for the `book.py` file of the `cli/commands` folder.
"""

import logging
from argparse import Namespace

import pytest
from _pytest.capture import CaptureFixture

from mddb.cli.commands.book import BookCommand
from tests.fixture_types import FixtureCallable, FixtureDatabase


def test_add_parser_sets_up_book_command(create_parser: FixtureCallable):
    """
    Ensure the `book` command parses its count.

    Args:
        create_parser: A fixture to help create a parser.
    """
    parser = create_parser(BookCommand())
    assert parser.parse_args(["book"]).count == 1
    assert parser.parse_args(["book", "--count", "3"]).count == 3
    with pytest.raises(SystemExit):
        parser.parse_args(["book", "--count", "0"])


def test_process_command_books_accessions(
    database: FixtureDatabase, patch_database: FixtureCallable, caplog: CaptureFixture
):
    """
    Ensure `process_command` creates booked projects and logs their accessions.

    Args:
        database: The database handle.
        patch_database: A fixture to connect commands to the in-memory database.
        caplog: PyTest caplog fixture.
    """
    caplog.set_level(logging.INFO)
    patch_database("book")

    BookCommand().process_command(Namespace(count=2, config_dir=None))

    booked = list(database.projects.find({"booked": True}))
    assert sorted(project["accession"] for project in booked) == ["A0001", "A0002"]
    assert all("metadata" not in project for project in booked)
    assert "Booked 2 new project accessions: A0001, A0002" in caplog.text
