##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
The `cli` package contains the command-line interface of MDDB.

Modules:
    argparse_main: Builds the main `mddb` argument parser.
    utils: Helpers shared by the command handlers.
    commands: One module per `mddb` command.
"""
