##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for listing the projects of the database.
"""

import logging
from argparse import ArgumentParser, Namespace

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import get_database
from mddb.display import display_project_list, display_project_summary
from mddb.exceptions import NotFoundError


LOG = logging.getLogger("mddb")


class ListCommand(CommandEntryPoint):
    """
    Handles the `list` CLI command.

    Methods:
        add_parser: Adds the `list` command to the CLI parser.
        process_command: Displays a table of projects, or the summary of some of them.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `list` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `list` command parser will be added.
        """
        list_cmd: ArgumentParser = subparsers.add_parser(
            "list",
            help="List the projects in the database, or summarize the given ones.",
        )
        list_cmd.set_defaults(func=self.process_command)
        list_cmd.add_argument("projects", nargs="*", help="Ids or accessions of the projects to summarize")
        list_cmd.add_argument(
            "--incomplete",
            action="store_true",
            default=False,
            help="Only list the projects whose metadata was never loaded",
        )

    def process_command(self, args: Namespace):
        """
        Process the `list` command.

        Parameters:
            args: Parsed CLI arguments.

        Raises:
            NotFoundError: If a requested project does not exist.
        """
        database = get_database(args)
        if args.projects:
            for id_or_accession in args.projects:
                project = database.sync_project(id_or_accession)
                if project is None:
                    raise NotFoundError(f"Project {id_or_accession} does not exist")
                display_project_summary(project.get_summary())
            return
        if args.incomplete:
            display_project_list(database.find_incomplete_projects())
        else:
            display_project_list(database.iterate_projects())
