##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
MDDB: a loader and lifecycle engine for molecular dynamics datasets.

This module contains the source code for MDDB.
"""


__version__ = "1.4.0"
VERSION = __version__
