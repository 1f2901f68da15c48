##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Tests for the `publish.py` file of the `cli/commands` folder.
"""

import logging
from argparse import Namespace

import pytest
from _pytest.capture import CaptureFixture

from mddb.cli.commands.publish import PublishCommand, UnpublishCommand
from mddb.exceptions import NotFoundError
from tests.fixture_types import FixtureCallable, FixtureDatabase, FixtureProject



def run_publish(command: PublishCommand, projects=None, query: str = None):
    """
    Run a publication command.

    Args:
        command: The command to run.
        projects: The ids or accessions given in the command line.
        query: The `--query` option.
    """
    command.process_command(Namespace(projects=projects or [], query=query, config_dir=None))


def test_add_parser_sets_up_both_commands(create_parser: FixtureCallable):
    """
    Ensure `publish` and `unpublish` register under their own names.

    Args:
        create_parser: A fixture to help create a parser.
    """
    args = create_parser(PublishCommand()).parse_args(["publish", "A0001", "A0002"])
    assert args.projects == ["A0001", "A0002"]
    assert args.query is None
    args = create_parser(UnpublishCommand()).parse_args(["unpublish", "--query", '{"published": true}'])
    assert args.projects == []
    assert args.query == '{"published": true}'


def test_publish_and_unpublish(database: FixtureDatabase, project: FixtureProject, patch_database: FixtureCallable):
    """
    Ensure the publication status is set and cleared.

    Args:
        database: The database handle.
        project: A new project.
        patch_database: A fixture to connect commands to the in-memory database.
    """
    patch_database("publish")
    run_publish(PublishCommand(), [project.accession])
    assert database.find_project(project.id)["published"] is True
    run_publish(PublishCommand(), [str(project.id)])
    assert database.find_project(project.id)["published"] is True
    run_publish(UnpublishCommand(), [project.accession])
    assert database.find_project(project.id)["published"] is False


def test_publish_missing_project(patch_database: FixtureCallable):
    """
    Ensure publishing an unknown project raises.

    Args:
        patch_database: A fixture to connect commands to the in-memory database.
    """
    patch_database("publish")
    with pytest.raises(NotFoundError):
        run_publish(PublishCommand(), ["ZZZZZ"])


def test_publish_by_query(
    database: FixtureDatabase, project: FixtureProject, patch_database: FixtureCallable, caplog: CaptureFixture
):
    """
    Ensure every project matched by a query is published, and only those.

    Args:
        database: The database handle.
        project: A new project.
        patch_database: A fixture to connect commands to the in-memory database.
        caplog: PyTest caplog fixture.
    """
    caplog.set_level(logging.INFO)
    patch_database("publish")
    project.update_project_metadata({"NAME": "Spike"})
    other = database.create_project()
    other.update_project_metadata({"NAME": "Spike"})
    unrelated = database.create_project()
    unrelated.update_project_metadata({"NAME": "Nsp1"})

    run_publish(PublishCommand(), query='{"metadata.NAME": "Spike"}')

    assert database.find_project(project.id)["published"] is True
    assert database.find_project(other.id)["published"] is True
    assert database.find_project(unrelated.id)["published"] is False
    assert "2 projects matched the query" in caplog.text

    run_publish(UnpublishCommand(), query='{"published": true}')
    assert database.projects.count_documents({"published": True}) == 0


@pytest.mark.parametrize("query", ["{not json", "[1, 2]"])
def test_publish_invalid_query(patch_database: FixtureCallable, query: str):
    """
    Ensure a query which is not a JSON object is rejected.

    Args:
        patch_database: A fixture to connect commands to the in-memory database.
        query: The invalid query.
    """
    patch_database("publish")
    with pytest.raises(ValueError):
        run_publish(PublishCommand(), query=query)


def test_publish_needs_projects_or_query(patch_database: FixtureCallable):
    """
    Ensure the command refuses to run with nothing to publish.

    Args:
        patch_database: A fixture to connect commands to the in-memory database.
    """
    database_getter = patch_database("publish")
    with pytest.raises(ValueError):
        run_publish(PublishCommand())
    database_getter.assert_not_called()
