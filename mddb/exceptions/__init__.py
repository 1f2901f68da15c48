##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Module of all MDDB-specific exception types.

Lookup misses are generally reported by returning `None`; the exceptions
below are raised when a caller must stop and decide what to do next.
"""

__all__ = (
    "MddbError",
    "NotFoundError",
    "ConflictError",
    "LimitExceededError",
    "InconsistencyError",
    "FatalError",
    "LoadAbortedError",
    "TrajectoryDecodeError",
)


class MddbError(Exception):
    """
    Base class for every exception raised by MDDB.
    """


class NotFoundError(MddbError):
    """
    Exception to signal that a named file, analysis, MD or document is not
    where the caller said it would be.
    """


class ConflictError(MddbError):
    """
    Exception to signal a duplicate accession or a duplicate name that could
    not be resolved.
    """


class LimitExceededError(MddbError):
    """
    Exception to signal that the accession space has been exhausted.
    """


class InconsistencyError(MddbError):
    """
    Exception to signal that a file or analysis document does not belong to
    the project/MD that references it (a "bastard" document).

    Attributes:
        document: The offending document.
    """

    def __init__(self, message: str, document: dict = None):
        super().__init__(message)
        self.document = document


class FatalError(MddbError):
    """
    Exception for failures that may leave the database partially updated.
    The operator should run `mddb cleanup` afterwards.
    """

    def __init__(self, message: str, suggest_cleanup: bool = True):
        if suggest_cleanup:
            message = f"{message}\nThe database may be left inconsistent. Run 'mddb cleanup' to remove orphans."
        super().__init__(message)


class LoadAbortedError(MddbError):
    """
    Exception to signal that the operator asked to abort the current load.
    """


class TrajectoryDecodeError(MddbError):
    """
    Exception to signal that a trajectory produced no frames.
    """
