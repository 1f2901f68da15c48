##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for reserving project accessions ahead of their data.

Every reserved accession is held by an empty project marked as booked.
Cleanups of incomplete projects leave booked projects alone.
"""

import logging
from argparse import ArgumentParser, Namespace

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import get_database
from mddb.utils import plural


LOG = logging.getLogger("mddb")


def positive_int(value: str) -> int:
    """
    Parse a strictly positive integer from the command line.

    Parameters:
        value: The raw argument.

    Returns:
        The integer.
    """
    number = int(value)
    if number < 1:
        raise ValueError(f"{value} is not a positive number")
    return number


class BookCommand(CommandEntryPoint):
    """
    Handles the `book` CLI command.

    Methods:
        add_parser: Adds the `book` command to the CLI parser.
        process_command: Books the requested number of accessions.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `book` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `book` command parser will be added.
        """
        book_cmd: ArgumentParser = subparsers.add_parser(
            "book",
            help="Reserve new project accessions by creating empty booked projects.",
        )
        book_cmd.set_defaults(func=self.process_command)
        book_cmd.add_argument(
            "-c",
            "--count",
            type=positive_int,
            default=1,
            help="How many accessions to book. Default: %(default)s",
        )

    def process_command(self, args: Namespace):
        """
        Process the `book` command.

        Parameters:
            args: Parsed CLI arguments.
        """
        database = get_database(args)
        projects = database.book_projects(args.count)
        accessions = ", ".join(project.accession for project in projects)
        LOG.info(f"Booked {plural('new project accession', len(projects), include_count=True)}: {accessions}")
