##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
MDDB CLI Commands Package.

Each module encapsulates the logic and argument parsing for a distinct `mddb`
command, built around the `CommandEntryPoint` interface.

Modules:
    command_entry_point: Defines the abstract base class `CommandEntryPoint` for all CLI commands.
    book: Implements the `book` command for reserving project accessions.
    cleanup: Implements the `cleanup` command for removing orphans, bastards and incomplete projects.
    delete: Implements the `delete` command for removing any document by id.
    list_projects: Implements the `list` command for displaying projects.
    merge: Implements the `merge` command for merging projects into one.
    publish: Implements the `publish` and `unpublish` commands.
    setup: Implements the `setup` command for bootstrapping the database.
"""

from mddb.cli.commands.book import BookCommand
from mddb.cli.commands.cleanup import CleanupCommand
from mddb.cli.commands.delete import DeleteCommand
from mddb.cli.commands.list_projects import ListCommand
from mddb.cli.commands.merge import MergeCommand
from mddb.cli.commands.publish import PublishCommand, UnpublishCommand
from mddb.cli.commands.setup import SetupCommand


ALL_COMMANDS = [
    BookCommand(),
    CleanupCommand(),
    DeleteCommand(),
    ListCommand(),
    MergeCommand(),
    PublishCommand(),
    SetupCommand(),
    UnpublishCommand(),
]
