##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""This module provides enumerations for interfaces."""
from enum import Enum


__all__ = ("ConflictPolicy", "MdState")


class ConflictPolicy(Enum):
    """
    How to resolve data that is already present when new data arrives.

    Attributes:
        ASK: Ask the operator every time.
        CONSERVE: Always keep the current data.
        OVERWRITE: Always replace the current data.
    """

    ASK = "ask"
    CONSERVE = "conserve"
    OVERWRITE = "overwrite"

    @classmethod
    def from_flags(cls, conserve: bool = False, overwrite: bool = False) -> "ConflictPolicy":
        """
        Build a policy from the `--conserve`/`--overwrite` command line flags.

        Args:
            conserve: The conserve flag.
            overwrite: The overwrite flag.

        Returns:
            The matching policy. `conserve` wins if both flags are set.
        """
        if conserve:
            return cls.CONSERVE
        if overwrite:
            return cls.OVERWRITE
        return cls.ASK


class MdState(Enum):
    """
    Lifecycle of an MD slot. `REMOVED` is terminal and the slot is never
    dropped from the project's MD list.
    """

    ABSENT = "absent"
    ACTIVE = "active"
    REMOVED = "removed"
