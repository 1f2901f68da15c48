##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
The undo journal: every document inserted during a run, in insertion order.

MongoDB gives no multi-document transactions here, so a failed or aborted
run is compensated by deleting what the journal lists.
"""

import logging
from typing import Any, Iterator, List

from mddb.db_scripts.data_models import JournalEntry


LOG = logging.getLogger("mddb")


class UndoJournal:
    """
    Run-scoped list of inserted documents.

    Methods:
        record: Append a newly inserted document.
        forget: Drop the entry of a document that has already been removed.
        clear: Drop every entry.
    """

    def __init__(self):
        self._entries: List[JournalEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[JournalEntry]:
        return iter(list(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)

    @property
    def entries(self) -> List[JournalEntry]:
        """
        A copy of the entries, oldest first.
        """
        return list(self._entries)

    def record(self, label: str, collection_key: str, document_id: Any) -> JournalEntry:
        """
        Append a newly inserted document.

        Args:
            label: A human readable description of the document.
            collection_key: The collection the document was inserted in.
            document_id: The `_id` of the inserted document.

        Returns:
            The new entry.
        """
        entry = JournalEntry(label=label, collection_key=collection_key, id=document_id)
        self._entries.append(entry)
        LOG.debug(f"Journaled {label} ({collection_key}) -> {document_id}")
        return entry

    def forget(self, collection_key: str, document_id: Any) -> bool:
        """
        Drop the entry of a document that has already been removed.

        Args:
            collection_key: The collection of the document.
            document_id: The `_id` of the document.

        Returns:
            True if an entry was dropped.
        """
        for entry in self._entries:
            if entry.collection_key == collection_key and entry.id == document_id:
                self._entries.remove(entry)
                return True
        return False

    def clear(self):
        """
        Drop every entry. Called once a run has succeeded.
        """
        self._entries.clear()
