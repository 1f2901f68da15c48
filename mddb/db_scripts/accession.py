##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Issuing of public project accessions.

Accessions are 5 uppercase base-36 characters. The first one is `A0001` and
every new one is the previous plus one. The singleton counter document
(`{name: "identifier", count: N}`) holds the ordinal of the last accession
issued, so the N-th accession is `A0000` advanced by N.
"""

import logging
from typing import Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection

from mddb.db_scripts.collections import COUNTER_NAME
from mddb.exceptions import FatalError, LimitExceededError


LOG = logging.getLogger("mddb")

ACCESSION_LENGTH = 5
ACCESSION_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
ACCESSION_ORIGIN = int("A0000", 36)


def to_base36(number: int) -> str:
    """
    Write a non-negative integer in uppercase base 36.

    Args:
        number: The integer.

    Returns:
        The base-36 representation.
    """
    if number < 0:
        raise ValueError(f"Cannot encode negative number {number}")
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(ACCESSION_DIGITS[remainder])
        if number == 0:
            break
    return "".join(reversed(digits))


def format_accession(ordinal: int) -> str:
    """
    Build the accession for a counter ordinal.

    Args:
        ordinal: The counter value (1 for the first accession).

    Returns:
        The accession code.

    Raises:
        LimitExceededError: If the code would not fit in 5 characters.
    """
    code = to_base36(ACCESSION_ORIGIN + ordinal).zfill(ACCESSION_LENGTH)
    if len(code) > ACCESSION_LENGTH:
        raise LimitExceededError(f"Accession ordinal {ordinal} does not fit in {ACCESSION_LENGTH} characters")
    return code


def parse_accession(accession: str) -> int:
    """
    Recover the counter ordinal of an accession.

    Args:
        accession: The accession code.

    Returns:
        The ordinal that produced it.
    """
    return int(accession, 36) - ACCESSION_ORIGIN


class AccessionIssuer:
    """
    Hands out unique accessions using the counter document as source of truth.

    Attributes:
        counters: The counters collection.
        projects: The projects collection, used to verify uniqueness.

    Methods:
        issue_new_accession: Increment the counter and return the new accession.
        get_last_accession: Read the last issued accession without incrementing.
        free_last_accession: Decrement the counter so the last accession is issued again.
        is_accession_used: Check whether a project already holds an accession.
    """

    def __init__(self, counters: Collection, projects: Collection):
        self.counters = counters
        self.projects = projects

    def _read_counter(self) -> int:
        counter = self.counters.find_one({"name": COUNTER_NAME})
        if counter is None:
            raise FatalError("The accession counter is missing. Run 'mddb setup' first.", suggest_cleanup=False)
        return counter["count"]

    def is_accession_used(self, accession: str) -> bool:
        """
        Check whether a project already holds an accession.

        Args:
            accession: The accession code.

        Returns:
            True if any project holds it.
        """
        return self.projects.count_documents({"accession": accession}) > 0

    def issue_new_accession(self) -> str:
        """
        Increment the counter and return the new accession.

        Returns:
            The new accession code.

        Raises:
            LimitExceededError: If the accession space is exhausted. The counter is restored.
            FatalError: If the counter is missing or a project already holds the new code.
        """
        counter = self.counters.find_one_and_update(
            {"name": COUNTER_NAME},
            {"$inc": {"count": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if counter is None:
            raise FatalError("The accession counter is missing. Run 'mddb setup' first.", suggest_cleanup=False)
        ordinal = counter["count"]
        try:
            accession = format_accession(ordinal)
        except LimitExceededError:
            self.counters.update_one({"name": COUNTER_NAME}, {"$inc": {"count": -1}})
            raise
        if self.is_accession_used(accession):
            raise FatalError(
                f"Accession {accession} was just issued but a project already holds it. "
                "The accession counter has been tampered with.",
                suggest_cleanup=False,
            )
        LOG.debug(f"Issued new accession {accession}")
        return accession

    def get_last_accession(self) -> Optional[str]:
        """
        Read the last issued accession without incrementing the counter.

        Returns:
            The last issued accession, or None if no accession was ever issued.
        """
        ordinal = self._read_counter()
        if ordinal <= 0:
            return None
        return format_accession(ordinal)

    def free_last_accession(self, accession: str) -> bool:
        """
        Decrement the counter so `accession` is issued again, but only while it
        is still the last one issued.

        Args:
            accession: The accession to free.

        Returns:
            True if the counter was decremented.
        """
        ordinal = parse_accession(accession)
        result = self.counters.update_one({"name": COUNTER_NAME, "count": ordinal}, {"$inc": {"count": -1}})
        if result.modified_count == 0:
            LOG.debug(f"Accession {accession} is not the last one issued and will not be reissued")
            return False
        LOG.info(f"Accession {accession} has been freed and will be reissued")
        return True
