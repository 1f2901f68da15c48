##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Orphan and reference garbage collection.

Interrupted runs may leave documents behind whose parent is gone (orphans)
or whose parent does not list them anymore (bastards). Shared reference
records are kept only while some project metadata lists their id. None of
this is tracked with live counters: every check is computed on demand by
scanning the parents.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Set

from mddb.db_scripts.collections import BASTARD_RELATIONSHIPS, ORPHAN_RELATIONSHIPS, REFERENCE_TYPES
from mddb.db_scripts.data_models import OrphanRelationship, ReferenceType
from mddb.exceptions import NotFoundError
from mddb.utils import get_hashable_path_values, plural


LOG = logging.getLogger("mddb")


def _projection(paths: Iterable[str]) -> Dict[str, int]:
    """Project the root field of every dotted path."""
    return {path.split(".")[0]: 1 for path in paths}


class GarbageCollector:
    """
    Finds and removes documents no parent accounts for.

    Attributes:
        database (db_scripts.database.Database): The database handle, used for
            collection access and binary-aware deletion.

    Methods:
        collect_live_values: Read every value of a parent reference field.
        find_orphans: Anti-join a child collection against its parents.
        find_orphan_data: Find the orphans of a registered collection.
        find_bastards: Find files or analyses that no project lists.
        delete_documents: Best-effort deletion of many documents.
        delete_orphan_data: Find and delete the orphans of a registered collection.
        count_reference_usage: Count the projects that list a reference id.
        delete_reference_if_unused: Remove a shared reference record nobody lists.
        collect_project_references: Run the reference check for every id a project listed.
    """

    def __init__(self, database: "Database"):  # noqa: F821
        self.database = database

    def collect_live_values(self, relationship: OrphanRelationship) -> Set[Any]:
        """
        Read every value of the parent reference fields into a set.

        Args:
            relationship: The parent/child relationship.

        Returns:
            Every value referenced by some parent.
        """
        parents = self.database.collection(relationship.parent_key)
        live_values = set()
        for parent in parents.find({}, _projection(relationship.parent_fields)):
            for path in relationship.parent_fields:
                live_values.update(get_hashable_path_values(parent, path))
        return live_values

    def find_orphans(self, relationship: OrphanRelationship) -> List[Dict]:
        """
        Select every child whose local field value is not referenced by any parent.

        Args:
            relationship: The parent/child relationship.

        Returns:
            The orphan child documents (projected to `_id` and the local field).
        """
        live_values = self.collect_live_values(relationship)
        children = self.database.collection(relationship.child_key)
        orphans = []
        for child in children.find({}, _projection([relationship.local_field, "_id"])):
            values = get_hashable_path_values(child, relationship.local_field)
            if not any(value in live_values for value in values):
                orphans.append(child)
        LOG.debug(f"Found {len(orphans)} orphans in {relationship.child_key} against {relationship.parent_key}")
        return orphans

    def find_orphan_data(self, collection_key: str) -> List[Any]:
        """
        Find the ids of orphan documents in a registered collection.

        Args:
            collection_key: A key of `ORPHAN_RELATIONSHIPS`.

        Returns:
            The ids of the orphans.

        Raises:
            NotFoundError: If the collection has no registered parent.
        """
        relationship = ORPHAN_RELATIONSHIPS.get(collection_key)
        if relationship is None:
            raise NotFoundError(f"Collection '{collection_key}' has no parent to search orphans against")
        return [orphan["_id"] for orphan in self.find_orphans(relationship)]

    def find_bastards(self, collection_key: str) -> List[Any]:
        """
        Find the ids of files or analyses that no project lists.

        Args:
            collection_key: Either "files" or "analyses".

        Returns:
            The ids of the unlisted documents.

        Raises:
            NotFoundError: If the collection is not "files" nor "analyses".
        """
        relationship = BASTARD_RELATIONSHIPS.get(collection_key)
        if relationship is None:
            raise NotFoundError(f"Collection '{collection_key}' is not listed by projects")
        return [bastard["_id"] for bastard in self.find_orphans(relationship)]

    def delete_documents(self, collection_key: str, ids: Iterable[Any]) -> int:
        """
        Delete many documents, continuing past failures.

        Args:
            collection_key: The collection of the documents.
            ids: The ids to delete.

        Returns:
            The number of documents actually deleted.
        """
        deleted = 0
        for document_id in ids:
            try:
                if self.database.delete_document(collection_key, document_id):
                    deleted += 1
            except Exception as exc:  # pylint: disable=broad-except
                LOG.error(f"Failed to delete {collection_key} document {document_id}: {exc}")
        return deleted

    def delete_orphan_data(self, collection_key: str) -> int:
        """
        Find and delete the orphans of a registered collection.

        Args:
            collection_key: A key of `ORPHAN_RELATIONSHIPS`.

        Returns:
            The number of orphans deleted.
        """
        orphan_ids = self.find_orphan_data(collection_key)
        if not orphan_ids:
            LOG.info(f"No orphan {collection_key} found")
            return 0
        document_name = self.database.name_collection_document(collection_key)
        LOG.info(f"Deleting {plural(f'orphan {document_name}', len(orphan_ids), include_count=True)}")
        deleted = self.delete_documents(collection_key, orphan_ids)
        LOG.info(f"Deleted {deleted} of {len(orphan_ids)} orphan {plural(document_name, len(orphan_ids))}")
        return deleted

    def count_reference_usage(self, reference_type: ReferenceType, reference_id: Any) -> int:
        """
        Count the projects whose metadata lists a reference id.

        Args:
            reference_type: The kind of reference.
            reference_id: The domain id of the reference.

        Returns:
            The number of projects listing it.
        """
        projects = self.database.collection("projects")
        return projects.count_documents({f"metadata.{reference_type.metadata_field}": reference_id})

    def delete_reference_if_unused(self, reference_type: ReferenceType, reference_id: Any) -> bool:
        """
        Delete a shared reference record if no project lists its id anymore.

        Args:
            reference_type: The kind of reference.
            reference_id: The domain id of the reference.

        Returns:
            True if the record was deleted.
        """
        if self.count_reference_usage(reference_type, reference_id) > 0:
            LOG.debug(f"{reference_type.key} reference {reference_id} is still in use")
            return False
        collection = self.database.collection(reference_type.collection_key)
        result = collection.delete_one({reference_type.id_field: reference_id})
        if result.deleted_count == 0:
            LOG.debug(f"{reference_type.key} reference {reference_id} was not in the database")
            return False
        LOG.info(f"Deleted unused {reference_type.key} reference {reference_id}")
        return True

    def collect_project_references(self, metadata: Dict) -> int:
        """
        Drop every reference record listed in some metadata that no project uses anymore.

        Args:
            metadata: The metadata of a project which has just been deleted.

        Returns:
            The number of reference records deleted.
        """
        deleted = 0
        for reference_type in REFERENCE_TYPES.values():
            for reference_id in metadata.get(reference_type.metadata_field) or []:
                if self.delete_reference_if_unused(reference_type, reference_id):
                    deleted += 1
        return deleted
