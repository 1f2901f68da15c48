##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Tests for the `command_entry_point.py` file.
"""

from argparse import ArgumentParser

import pytest

from mddb.cli.commands import ALL_COMMANDS
from mddb.cli.commands.command_entry_point import CommandEntryPoint


def test_cannot_instantiate_abstract_class():
    """Ensure instantiating CommandEntryPoint directly raises TypeError."""
    with pytest.raises(TypeError):
        CommandEntryPoint()


def test_subclass_without_process_command_is_abstract():
    """Ensure a subclass missing `process_command` cannot be instantiated."""

    class IncompleteCommand(CommandEntryPoint):
        def add_parser(self, subparsers: ArgumentParser):
            pass

    with pytest.raises(TypeError):
        IncompleteCommand()


@pytest.mark.parametrize("command", ALL_COMMANDS, ids=lambda command: type(command).__name__)
def test_every_command_sets_its_function(command: CommandEntryPoint):
    """
    Ensure every registered command is an entry point bound to its own `process_command`.

    Args:
        command: A registered command.
    """
    assert isinstance(command, CommandEntryPoint)
    parser = ArgumentParser()
    subparsers = parser.add_subparsers(dest="main_command")
    command.add_parser(subparsers)
    name = next(iter(subparsers.choices))
    subparser = subparsers.choices[name]
    assert subparser.get_default("func") == command.process_command
