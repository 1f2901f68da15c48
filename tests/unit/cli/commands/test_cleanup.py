##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Tests for the `cleanup.py` file of the `cli/commands` folder.
"""

from argparse import Namespace

import pytest
from pytest_mock import MockerFixture

from mddb.cli.commands.cleanup import ORPHAN_CLEANUP_ORDER, CleanupCommand
from tests.fixture_types import FixtureCallable, FixtureDatabase, FixtureProject
from tests.utils import store_file


def run_cleanup(orphans: str = None, bastards: bool = False, incomplete: bool = False, force: bool = True):
    """
    Run the `cleanup` command.

    Args:
        orphans: The `--orphans` option.
        bastards: The `--bastards` flag.
        incomplete: The `--incomplete` flag.
        force: Skip the confirmations.
    """
    args = Namespace(orphans=orphans, bastards=bastards, incomplete=incomplete, force=force, config_dir=None)
    CleanupCommand().process_command(args)


def test_add_parser_sets_up_cleanup_command(create_parser: FixtureCallable):
    """
    Ensure the `cleanup` command parses its arguments.

    Args:
        create_parser: A fixture to help create a parser.
    """
    parser = create_parser(CleanupCommand())
    args = parser.parse_args(["cleanup"])
    assert (args.orphans, args.bastards, args.incomplete, args.force) == (None, False, False, False)
    args = parser.parse_args(["cleanup", "--orphans", "chunks", "--bastards", "-f"])
    assert (args.orphans, args.bastards, args.force) == ("chunks", True, True)
    with pytest.raises(SystemExit):
        parser.parse_args(["cleanup", "--orphans", "projects"])


def test_chunks_are_cleaned_last():
    """Ensure orphan chunks are searched once orphan files are gone."""
    assert ORPHAN_CLEANUP_ORDER[-1] == "chunks"
    assert "files" in ORPHAN_CLEANUP_ORDER


def test_cleanup_every_orphan(
    database: FixtureDatabase, project: FixtureProject, load_file: FixtureCallable, patch_database: FixtureCallable
):
    """
    Ensure the default cleanup removes orphan files along with their chunks.

    Args:
        database: The database handle.
        project: A new project.
        load_file: A fixture to load files.
        patch_database: A fixture to connect commands to the in-memory database.
    """
    patch_database("cleanup")
    kept_id = load_file(project, "structure.pdb")
    store_file(database.db, "orphan", "lost.pdb", b"lost", {"project": "gone", "md": None})
    database.analyses.insert_one({"name": "rmsd", "project": "gone", "md": None})
    database.chunks.insert_one({"files_id": "nothing", "n": 0, "data": b"x"})

    run_cleanup()

    assert [document["_id"] for document in database.files.find()] == [kept_id]
    assert [chunk["files_id"] for chunk in database.chunks.find()] == [kept_id]
    assert database.analyses.count_documents({}) == 0


def test_cleanup_orphans_declined(
    database: FixtureDatabase, patch_database: FixtureCallable, patch_confirm: FixtureCallable
):
    """
    Ensure declined deletions keep the orphans.

    Args:
        database: The database handle.
        patch_database: A fixture to connect commands to the in-memory database.
        patch_confirm: A fixture to answer confirmations.
    """
    patch_database("cleanup")
    confirm = patch_confirm("cleanup", False)
    database.topologies.insert_one({"project": "gone"})
    run_cleanup(orphans="topologies", force=False)
    assert database.topologies.count_documents({}) == 1
    assert confirm.call_args.kwargs["times"] == 2


def test_cleanup_bastards(
    database: FixtureDatabase, project: FixtureProject, load_analysis: FixtureCallable, patch_database: FixtureCallable
):
    """
    Ensure analyses pointing to a project that does not list them are deleted.

    Args:
        database: The database handle.
        project: A new project.
        load_analysis: A fixture to load analyses.
        patch_database: A fixture to connect commands to the in-memory database.
    """
    patch_database("cleanup")
    listed_id = load_analysis(project, "rmsd")
    database.analyses.insert_one({"name": "rgyr", "project": project.id, "md": None})
    run_cleanup(bastards=True)
    assert [analysis["_id"] for analysis in database.analyses.find()] == [listed_id]


def test_cleanup_incomplete(
    database: FixtureDatabase, project: FixtureProject, patch_database: FixtureCallable, mocker: MockerFixture
):
    """
    Ensure only projects without metadata are deleted, and orphans are left alone.

    Args:
        database: The database handle.
        project: A new project.
        patch_database: A fixture to connect commands to the in-memory database.
        mocker: PyTest mocker fixture.
    """
    patch_database("cleanup")
    complete = database.create_project()
    complete.update_project_metadata({"NAME": "complete"})
    orphans = mocker.spy(CleanupCommand, "cleanup_orphans")
    run_cleanup(incomplete=True)
    assert database.find_project(project.id) is None
    assert database.find_project(complete.id) is not None
    orphans.assert_not_called()


def test_cleanup_incomplete_keeps_booked_projects(
    database: FixtureDatabase, project: FixtureProject, patch_database: FixtureCallable
):
    """
    Ensure reserved accessions are not destroyed by a cleanup of incomplete projects.

    Args:
        database: The database handle.
        project: A new project.
        patch_database: A fixture to connect commands to the in-memory database.
    """
    patch_database("cleanup")
    booked = database.book_projects(2)
    run_cleanup(incomplete=True)
    assert database.find_project(project.id) is None
    for booked_project in booked:
        assert database.find_project(booked_project.id) is not None
