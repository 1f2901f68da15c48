##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for bootstrapping the MDDB database.

This module defines the `SetupCommand` class, which creates every missing
collection and index and the accession counter. Running it on a database
which is already set up changes nothing.
"""

import logging
from argparse import ArgumentParser, Namespace

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import get_database


LOG = logging.getLogger("mddb")


class SetupCommand(CommandEntryPoint):
    """
    Handles the `setup` CLI command.

    Methods:
        add_parser: Adds the `setup` command to the CLI parser.
        process_command: Creates the missing collections, indexes and counter.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `setup` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `setup` command parser will be added.
        """
        setup_cmd: ArgumentParser = subparsers.add_parser(
            "setup",
            help="Create the missing collections, indexes and accession counter.",
        )
        setup_cmd.set_defaults(func=self.process_command)

    def process_command(self, args: Namespace):
        """
        Process the `setup` command.

        Parameters:
            args: Parsed CLI arguments.
        """
        database = get_database(args)
        database.setup()
        LOG.info("The database is set up")
