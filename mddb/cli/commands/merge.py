##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for merging projects.

Every active MD of the merged projects is moved into the remaining project,
then the merged projects are deleted.
"""

import logging
from argparse import ArgumentParser, Namespace

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import confirm_action, get_database
from mddb.display import display_project_summary


LOG = logging.getLogger("mddb")


class MergeCommand(CommandEntryPoint):
    """
    Handles the `merge` CLI command.

    Methods:
        add_parser: Adds the `merge` command to the CLI parser.
        process_command: Merges the given projects into the first one.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `merge` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `merge` command parser will be added.
        """
        merge_cmd: ArgumentParser = subparsers.add_parser(
            "merge",
            help="Move every MD of some projects into another project and delete them.",
        )
        merge_cmd.set_defaults(func=self.process_command)
        merge_cmd.add_argument("remainer", help="Id or accession of the project which stays")
        merge_cmd.add_argument("others", nargs="+", help="Ids or accessions of the projects merged into it")
        merge_cmd.add_argument(
            "-f",
            "--force",
            action="store_true",
            default=False,
            help="Merge without confirmation",
        )

    def process_command(self, args: Namespace):
        """
        Process the `merge` command.

        Parameters:
            args: Parsed CLI arguments.
        """
        if not confirm_action(f"Merge {', '.join(args.others)} into {args.remainer}?", force=args.force):
            LOG.info("Merge cancelled")
            return
        database = get_database(args)
        remainer = database.merge_projects(args.remainer, args.others)
        display_project_summary(remainer.get_summary())
