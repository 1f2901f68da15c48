##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for cleaning up the leftovers of interrupted runs.

This module defines the `CleanupCommand` class, which implements the `cleanup`
command. It can remove:

- orphans, documents whose parent does not exist anymore;
- bastards, files and analyses that no project lists;
- incomplete projects, whose metadata was never loaded.

Bulk deletions must be confirmed twice unless `--force` is given.
"""

import logging
from argparse import ArgumentParser, Namespace
from typing import List

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import confirm_action, get_database
from mddb.db_scripts.collections import BASTARD_RELATIONSHIPS, ORPHAN_RELATIONSHIPS
from mddb.db_scripts.database import Database
from mddb.utils import plural


LOG = logging.getLogger("mddb")

# Children go after their parents so deleting orphan files leaves orphan chunks to be found
ORPHAN_CLEANUP_ORDER: List[str] = [key for key in ORPHAN_RELATIONSHIPS if key != "chunks"] + ["chunks"]


class CleanupCommand(CommandEntryPoint):
    """
    Handles the `cleanup` CLI command.

    Methods:
        add_parser: Adds the `cleanup` command to the CLI parser.
        process_command: Runs the requested sweeps.
        cleanup_orphans: Deletes the orphans of one collection.
        cleanup_bastards: Deletes the files and analyses no project lists.
        cleanup_incomplete: Deletes the projects whose metadata was never loaded.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `cleanup` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `cleanup` command parser will be added.
        """
        cleanup_cmd: ArgumentParser = subparsers.add_parser(
            "cleanup",
            help="Delete orphan documents, unlisted files and analyses, and incomplete projects. "
            "With no option, orphans of every collection are deleted.",
        )
        cleanup_cmd.set_defaults(func=self.process_command)
        cleanup_cmd.add_argument(
            "--orphans",
            choices=list(ORPHAN_RELATIONSHIPS) + ["all"],
            default=None,
            help="Delete the orphans of a collection, or of every collection with 'all'",
        )
        cleanup_cmd.add_argument(
            "--bastards",
            action="store_true",
            default=False,
            help="Delete files and analyses that no project lists",
        )
        cleanup_cmd.add_argument(
            "--incomplete",
            action="store_true",
            default=False,
            help="Delete projects whose metadata was never loaded",
        )
        cleanup_cmd.add_argument(
            "-f",
            "--force",
            action="store_true",
            default=False,
            help="Delete without confirmation",
        )

    def process_command(self, args: Namespace):
        """
        Process the `cleanup` command.

        Parameters:
            args: Parsed CLI arguments.
        """
        orphans = args.orphans
        if orphans is None and not args.bastards and not args.incomplete:
            orphans = "all"
        database = get_database(args)
        if args.incomplete:
            self.cleanup_incomplete(database, args.force)
        if args.bastards:
            self.cleanup_bastards(database, args.force)
        if orphans == "all":
            for collection_key in ORPHAN_CLEANUP_ORDER:
                self.cleanup_orphans(database, collection_key, args.force)
        elif orphans is not None:
            self.cleanup_orphans(database, orphans, args.force)

    def cleanup_orphans(self, database: Database, collection_key: str, force: bool) -> int:
        """
        Delete the orphans of one collection.

        Parameters:
            database: The database handle.
            collection_key: A key of `ORPHAN_RELATIONSHIPS`.
            force: Skip the confirmations.

        Returns:
            The number of deleted documents.
        """
        orphan_ids = database.find_orphan_data(collection_key)
        if not orphan_ids:
            LOG.info(f"No orphan {collection_key} found")
            return 0
        document_name = database.name_collection_document(collection_key)
        message = f"Delete {plural(f'orphan {document_name}', len(orphan_ids), include_count=True)}?"
        if not confirm_action(message, force=force, times=2):
            LOG.info(f"Orphan {collection_key} are kept")
            return 0
        deleted = database.garbage_collector.delete_documents(collection_key, orphan_ids)
        LOG.info(f"Deleted {deleted} of {len(orphan_ids)} orphan {plural(document_name, len(orphan_ids))}")
        return deleted

    def cleanup_bastards(self, database: Database, force: bool) -> int:
        """
        Delete the files and analyses that no project lists.

        Parameters:
            database: The database handle.
            force: Skip the confirmations.

        Returns:
            The number of deleted documents.
        """
        deleted = 0
        for collection_key in BASTARD_RELATIONSHIPS:
            bastard_ids = database.find_bastards(collection_key)
            if not bastard_ids:
                LOG.info(f"No unlisted {collection_key} found")
                continue
            document_name = database.name_collection_document(collection_key)
            message = f"Delete {plural(f'unlisted {document_name}', len(bastard_ids), include_count=True)}?"
            if not confirm_action(message, force=force, times=2):
                LOG.info(f"Unlisted {collection_key} are kept")
                continue
            deleted += database.garbage_collector.delete_documents(collection_key, bastard_ids)
        return deleted

    def cleanup_incomplete(self, database: Database, force: bool) -> int:
        """
        Delete the projects whose metadata was never loaded.

        Parameters:
            database: The database handle.
            force: Skip the confirmations.

        Returns:
            The number of deleted projects.
        """
        projects = database.find_incomplete_projects()
        if not projects:
            LOG.info("No incomplete projects found")
            return 0
        message = f"Delete {plural('incomplete project', len(projects), include_count=True)}?"
        if not confirm_action(message, force=force, times=2):
            LOG.info("Incomplete projects are kept")
            return 0
        for project in projects:
            project.delete_project()
        return len(projects)
