##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for publishing and unpublishing projects.

- `PublishCommand`: Handles the `publish` command.
- `UnpublishCommand`: Extends `PublishCommand` to handle the `unpublish` command.
"""

import json
import logging
from argparse import ArgumentParser, Namespace
from typing import Dict

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import get_database
from mddb.db_scripts.project import Project
from mddb.exceptions import NotFoundError
from mddb.utils import plural


LOG = logging.getLogger("mddb")


class PublishCommand(CommandEntryPoint):
    """
    Handles the `publish` CLI command.

    Attributes:
        command_name: The name of the command.
        published: The status the command sets.

    Methods:
        add_parser: Adds the command to the CLI parser.
        process_command: Sets the publication status of every given or matched project.
        parse_query: Parses a JSON projects filter.
        set_status: Sets the publication status of one project.
    """

    command_name = "publish"
    published = True

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the command parser will be added.
        """
        publish_cmd: ArgumentParser = subparsers.add_parser(
            self.command_name,
            help=f"{self.command_name.capitalize()} projects, given by id or accession or matched by a query.",
        )
        publish_cmd.set_defaults(func=self.process_command)
        publish_cmd.add_argument("projects", nargs="*", help="Ids or accessions of the projects")
        publish_cmd.add_argument(
            "-q",
            "--query",
            type=str,
            default=None,
            help='A JSON projects filter, e.g. \'{"metadata.NAME": "Spike"}\'. Every matched project is processed.',
        )

    def process_command(self, args: Namespace):
        """
        Process the command.

        Parameters:
            args: Parsed CLI arguments.

        Raises:
            NotFoundError: If a project does not exist.
            ValueError: If no project is given or the query is not a JSON object.
        """
        if not args.projects and args.query is None:
            raise ValueError(f"Give the projects to {self.command_name} or a query to match them")
        database = get_database(args)
        for id_or_accession in args.projects:
            project = database.sync_project(id_or_accession)
            if project is None:
                raise NotFoundError(f"Project {id_or_accession} does not exist")
            self.set_status(project)
        if args.query is not None:
            query = self.parse_query(args.query)
            matched = 0
            for project in database.iterate_projects(query):
                self.set_status(project)
                matched += 1
            LOG.info(f"{plural('project', matched, include_count=True)} matched the query")

    @staticmethod
    def parse_query(query: str) -> Dict:
        """
        Parse a JSON projects filter.

        Parameters:
            query: The filter as given in the command line.

        Returns:
            The filter.

        Raises:
            ValueError: If the query is not a JSON object.
        """
        try:
            parsed = json.loads(query)
        except json.JSONDecodeError as exc:
            raise ValueError(f"The query is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("The query must be a JSON object")
        return parsed

    def set_status(self, project: Project):
        """Set the publication status of one project and log the outcome."""
        if project.set_published(self.published):
            LOG.info(f"{project} is now {self.command_name}ed")
        else:
            LOG.info(f"{project} was already {self.command_name}ed")


class UnpublishCommand(PublishCommand):
    """
    Handles the `unpublish` CLI command.
    """

    command_name = "unpublish"
    published = False
