##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Utility functions to support MDDB CLI command handlers.
"""

import logging
from argparse import Namespace

from mddb.config.configfile import initialize_config
from mddb.db_scripts.database import Database
from mddb.prompts import Prompter


LOG = logging.getLogger("mddb")


def get_database(args: Namespace) -> Database:
    """
    Load the configuration and connect to the database.

    Args:
        args: Parsed CLI arguments, possibly holding `config_dir`.

    Returns:
        A `Database` handle.
    """
    config = initialize_config(getattr(args, "config_dir", None))
    LOG.debug(f"Using configuration:\n{config}")
    return Database.from_config(config)


def confirm_action(message: str, force: bool = False, times: int = 1) -> bool:
    """
    Ask the operator to confirm a destructive action.

    Args:
        message: What is about to happen.
        force: Skip the confirmation.
        times: How many times the operator must confirm.

    Returns:
        True if the action can go on.
    """
    if force:
        return True
    prompter = Prompter()
    if not prompter.confirm(message):
        return False
    for _ in range(times - 1):
        if not prompter.confirm("Are you really sure? This cannot be undone"):
            return False
    return True
