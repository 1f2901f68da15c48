##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Module for the `Database` handle.

The `Database` wraps a pymongo database and the GridFS bucket of binary files.
It exposes every collection of the schema, creates and finds projects, issues
accessions, journals the documents created by the current run so they can be
reverted, and runs the garbage collector.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from bson import ObjectId
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo.collection import Collection
from pymongo.database import Database as MongoDatabase

from mddb.common.enums import ConflictPolicy
from mddb.db_scripts.accession import AccessionIssuer
from mddb.db_scripts.collections import COLLECTIONS, COUNTER_NAME, REFERENCE_TYPES
from mddb.db_scripts.connection import get_database_handles
from mddb.db_scripts.data_models import FoundDocument
from mddb.db_scripts.garbage_collector import GarbageCollector
from mddb.db_scripts.project import Project
from mddb.db_scripts.undo_journal import UndoJournal
from mddb.exceptions import ConflictError, FatalError, LoadAbortedError, NotFoundError
from mddb.prompts import Prompter
from mddb.utils import coerce_object_id, is_accession


LOG = logging.getLogger("mddb")


class Database:
    """
    Handle of the MDDB database.

    Attributes:
        db: The pymongo database.
        bucket: The GridFS bucket holding the binary files.
        prompter: The operator prompts.
        should_abort: Optional predicate polled between load steps.
        policy: The default way to resolve already existing data.
        journal: The documents created during the current run.
        accessions: The accession issuer.
        garbage_collector: The orphan and reference garbage collector.
        issued_accession: The accession issued during the current run, if any.

    Methods:
        from_config: Build a handle from the application configuration.
        collection: Get a collection by its schema key.
        name_collection_document: Get the human readable name of a collection document.
        setup: Create missing collections, indexes and the accession counter.
        check_abort: Raise if the operator asked to abort.
        find_project: Find a raw project document by id or accession.
        sync_project: Find a project and wrap it in a `Project` handle.
        create_project: Create a new empty project.
        book_projects: Reserve accessions with empty booked projects.
        iterate_projects: Yield every project handle.
        find_incomplete_projects: Find the projects whose load never finished, booked ones aside.
        find_id: Find any document by its `_id` across every collection.
        issue_new_accession / get_last_accession: Accession helpers.
        delete_document: Delete one document, binary payloads included.
        load_reference: Insert a shared reference record if it does not exist.
        find_orphan_data / delete_orphan_data / find_bastards: Garbage collection.
        revert_load: Delete everything the current run created.
        merge_projects: Move every MD of some projects into another one.
    """

    def __init__(
        self,
        db: MongoDatabase,
        bucket: GridFSBucket,
        prompter: Prompter = None,
        should_abort: Callable[[], bool] = None,
        policy: ConflictPolicy = ConflictPolicy.ASK,
    ):
        self.db = db
        self.bucket = bucket
        self.prompter = prompter or Prompter()
        self.should_abort = should_abort
        self.policy = policy
        self.journal = UndoJournal()
        self.accessions = AccessionIssuer(self.counters, self.projects)
        self.garbage_collector = GarbageCollector(self)
        self.issued_accession: Optional[str] = None

    @classmethod
    def from_config(cls, config=None, **kwargs) -> Database:
        """
        Connect to the database described by the application configuration.

        Args:
            config (config.Config): The configuration. Defaults to the global one.
            **kwargs: Passed to the constructor (`prompter`, `should_abort`, `policy`).

        Returns:
            A new `Database` handle.
        """
        if config is None:
            from mddb.config.configfile import CONFIG, initialize_config  # pylint: disable=C0415

            config = CONFIG or initialize_config()
        db, bucket = get_database_handles(config)
        if config.load is not None:
            kwargs.setdefault("policy", ConflictPolicy.from_flags(config.load.conserve, config.load.overwrite))
        return cls(db, bucket, **kwargs)

    ###############
    # Collections #
    ###############

    def collection(self, collection_key: str) -> Collection:
        """
        Get a collection by its schema key.

        Args:
            collection_key: A key of `COLLECTIONS` (e.g. "files").

        Returns:
            The pymongo collection.

        Raises:
            NotFoundError: If the key is not part of the schema.
        """
        spec = COLLECTIONS.get(collection_key)
        if spec is None:
            raise NotFoundError(f"Collection '{collection_key}' is not part of the database schema")
        return self.db[spec.name]

    def name_collection_document(self, collection_key: str) -> str:
        """Get the human readable name of a document of a collection."""
        spec = COLLECTIONS.get(collection_key)
        if spec is None:
            raise NotFoundError(f"Collection '{collection_key}' is not part of the database schema")
        return spec.document_name

    @property
    def projects(self) -> Collection:
        return self.collection("projects")

    @property
    def topologies(self) -> Collection:
        return self.collection("topologies")

    @property
    def files(self) -> Collection:
        return self.collection("files")

    @property
    def chunks(self) -> Collection:
        return self.collection("chunks")

    @property
    def analyses(self) -> Collection:
        return self.collection("analyses")

    @property
    def counters(self) -> Collection:
        return self.collection("counters")

    def setup(self):
        """
        Create every missing collection and index, and the accession counter.

        Existing collections and indexes are left untouched, so this can be run
        any number of times.
        """
        existing = set(self.db.list_collection_names())
        for spec in COLLECTIONS.values():
            if spec.name not in existing:
                self.db.create_collection(spec.name)
                LOG.info(f"Created collection '{spec.name}'")
            collection = self.db[spec.name]
            current_indexes = collection.index_information()
            for index in spec.indexes:
                if index.name in current_indexes:
                    continue
                collection.create_index(list(index.keys), unique=index.unique, name=index.name)
                LOG.info(f"Created index '{index.name}' in '{spec.name}'")
        if self.counters.find_one({"name": COUNTER_NAME}) is None:
            self.counters.insert_one({"name": COUNTER_NAME, "count": 0})
            LOG.info("Created the accession counter")

    def check_abort(self):
        """
        Raise if the operator asked to abort the current load.

        Raises:
            LoadAbortedError: If the abort predicate says so.
        """
        if self.should_abort is not None and self.should_abort():
            raise LoadAbortedError("The load was aborted by the operator")

    ############
    # Projects #
    ############

    def find_project(self, id_or_accession: Union[str, ObjectId]) -> Optional[Dict]:
        """
        Find a raw project document.

        Args:
            id_or_accession: A project `_id` (or its hex string) or an accession.

        Returns:
            The project document, or None if there is no such project.

        Raises:
            FatalError: If no identifier was given.
        """
        if id_or_accession is None or id_or_accession == "":
            raise FatalError("A project id or accession is required", suggest_cleanup=False)
        if is_accession(id_or_accession):
            return self.projects.find_one({"accession": id_or_accession})
        return self.projects.find_one({"_id": coerce_object_id(id_or_accession)})

    def sync_project(self, id_or_accession: Union[str, ObjectId]) -> Optional[Project]:
        """
        Find a project and wrap it in a `Project` handle.

        Args:
            id_or_accession: A project `_id` (or its hex string) or an accession.

        Returns:
            The project handle, or None if there is no such project.
        """
        data = self.find_project(id_or_accession)
        if data is None:
            return None
        return Project(data, self)

    def issue_new_accession(self) -> str:
        """
        Issue a new accession and remember it as issued by this run.

        Returns:
            The new accession.
        """
        accession = self.accessions.issue_new_accession()
        self.issued_accession = accession
        return accession

    def get_last_accession(self) -> Optional[str]:
        """Read the last issued accession."""
        return self.accessions.get_last_accession()

    def create_project(self, accession: str = None) -> Project:
        """
        Create a new empty project.

        The project is created without metadata, so it is reported as incomplete
        until its metadata is loaded.

        Args:
            accession: Force this accession instead of issuing a new one.

        Returns:
            The new project handle.

        Raises:
            ConflictError: If the accession is malformed or already held by another project.
        """
        if accession is not None:
            if not is_accession(accession):
                raise ConflictError(f"'{accession}' is not a valid accession")
            if self.accessions.is_accession_used(accession):
                raise ConflictError(f"Accession {accession} is already held by another project")
        else:
            accession = self.issue_new_accession()
        data = {"accession": accession, "published": False, "mds": [], "mdref": None, "files": [], "analyses": []}
        result = self.projects.insert_one(data)
        data["_id"] = result.inserted_id
        self.journal.record("new project", "projects", result.inserted_id)
        # Another writer may have taken the same accession in the meantime
        if self.projects.count_documents({"accession": accession}) > 1:
            self.projects.delete_one({"_id": result.inserted_id})
            self.journal.forget("projects", result.inserted_id)
            if self.issued_accession == accession:
                self.issued_accession = None
            raise ConflictError(f"Accession {accession} was taken by another project while creating a new one")
        LOG.info(f"Created new project {accession} -> {result.inserted_id}")
        return Project(data, self)

    def book_projects(self, count: int) -> List[Project]:
        """
        Reserve accessions by creating empty projects marked as booked.

        Booked projects are not reported as incomplete, so cleanups keep them
        until their data is loaded.

        Args:
            count: How many accessions to reserve.

        Returns:
            The handles of the booked projects.

        Raises:
            LimitExceededError: If the accessions run out.
        """
        booked = []
        for _ in range(count):
            project = self.create_project()
            project.data["booked"] = True
            project.update_remote()
            booked.append(project)
        # Booked projects are meant to stay
        self.journal.clear()
        self.issued_accession = None
        return booked

    def iterate_projects(self, query: Dict = None) -> Iterator[Project]:
        """
        Yield a handle for every project.

        Args:
            query: An optional projects filter.

        Yields:
            Project handles.
        """
        for data in self.projects.find(query or {}):
            yield Project(data, self)

    def find_incomplete_projects(self) -> List[Project]:
        """
        Find the projects whose metadata was never loaded, leaving out booked ones.

        Returns:
            The handles of the incomplete projects.
        """
        return list(self.iterate_projects({"metadata": {"$exists": False}, "booked": {"$ne": True}}))

    def merge_projects(self, remainer_id: Union[str, ObjectId], other_ids: List[Union[str, ObjectId]]) -> Project:
        """
        Move every active MD of some projects into another project and delete them.

        The reference ids listed in the merged projects metadata are added to the
        remaining project so shared references are not collected.

        Args:
            remainer_id: The id or accession of the project which stays.
            other_ids: The ids or accessions of the projects merged into it.

        Returns:
            The remaining project handle.

        Raises:
            NotFoundError: If any project does not exist.
            ConflictError: If a project is to be merged into itself.
        """
        remainer = self.sync_project(remainer_id)
        if remainer is None:
            raise NotFoundError(f"Project {remainer_id} does not exist")
        others = []
        for other_id in other_ids:
            other = self.sync_project(other_id)
            if other is None:
                raise NotFoundError(f"Project {other_id} does not exist")
            if other.id == remainer.id:
                raise ConflictError(f"Project {other_id} cannot be merged into itself")
            others.append(other)
        for other in others:
            LOG.info(f"Merging {other} into {remainer}")
            for md_index in other.get_active_md_indices():
                remainer.absorb_md(other, md_index)
            if remainer.merge_reference_ids(other.data.get("metadata") or {}):
                remainer.update_remote()
            other.delete_project()
        return remainer

    #############
    # Documents #
    #############

    def find_id(self, document_id: Union[str, ObjectId]) -> Optional[FoundDocument]:
        """
        Find a document by its `_id` in any collection.

        Args:
            document_id: The `_id` (or its hex string).

        Returns:
            The document and its collection key, or None if no collection holds it.

        Raises:
            FatalError: If no id was given.
        """
        if document_id is None or document_id == "":
            raise FatalError("A document id is required", suggest_cleanup=False)
        document_id = coerce_object_id(document_id)
        for collection_key in COLLECTIONS:
            document = self.collection(collection_key).find_one({"_id": document_id})
            if document is not None:
                return FoundDocument(document, collection_key)
        return None

    def delete_document(self, collection_key: str, document_id: Any) -> bool:
        """
        Delete one document. Binary files are deleted with their chunks.

        Args:
            collection_key: The collection of the document.
            document_id: The document `_id`.

        Returns:
            True if something was deleted.
        """
        if COLLECTIONS[collection_key].binary:
            try:
                self.bucket.delete(document_id)
            except NoFile:
                return False
            return True
        result = self.collection(collection_key).delete_one({"_id": document_id})
        return result.deleted_count > 0

    def load_reference(self, reference_type_key: str, document: Dict) -> Optional[Any]:
        """
        Insert a shared reference record unless one with the same domain id exists.

        Args:
            reference_type_key: A key of `REFERENCE_TYPES` (e.g. "ligand").
            document: The reference record.

        Returns:
            The id of the new record, or None if it already existed.

        Raises:
            NotFoundError: If the reference type is unknown.
        """
        reference_type = REFERENCE_TYPES.get(reference_type_key)
        if reference_type is None:
            raise NotFoundError(f"Unknown reference type '{reference_type_key}'")
        reference_id = document[reference_type.id_field]
        collection = self.collection(reference_type.collection_key)
        if collection.find_one({reference_type.id_field: reference_id}) is not None:
            LOG.info(f"{reference_type.key.capitalize()} reference {reference_id} is already in the database")
            return None
        result = collection.insert_one(dict(document))
        label = f"{reference_id} {reference_type.key} reference"
        self.journal.record(label, reference_type.collection_key, result.inserted_id)
        LOG.info(f"Loaded new {reference_type.key} reference {reference_id} -> {result.inserted_id}")
        return result.inserted_id

    ######################
    # Garbage collection #
    ######################

    def find_orphan_data(self, collection_key: str) -> List[Any]:
        """Find the ids of the orphans of a collection."""
        return self.garbage_collector.find_orphan_data(collection_key)

    def delete_orphan_data(self, collection_key: str) -> int:
        """Delete the orphans of a collection and return how many were deleted."""
        return self.garbage_collector.delete_orphan_data(collection_key)

    def find_bastards(self, collection_key: str) -> List[Any]:
        """Find the ids of files or analyses that no project lists."""
        return self.garbage_collector.find_bastards(collection_key)

    def revert_load(self, confirmed: bool = False) -> bool:
        """
        Delete everything the current run created, after asking the operator.

        The accession issued by this run is freed first, but only while it is
        still the last one issued. Then every journaled document is deleted in
        insertion order, skipping the ones which are already gone.

        Args:
            confirmed: Do not ask the operator before deleting.

        Returns:
            True if the loaded data was deleted.
        """
        if not self.journal and self.issued_accession is None:
            LOG.info("There is no loaded data to revert")
            return False
        if not confirmed and self.prompter.conserve_loaded_data():
            LOG.info("Already loaded data is conserved")
            self.journal.clear()
            self.issued_accession = None
            return False
        if self.issued_accession is not None:
            self.accessions.free_last_accession(self.issued_accession)
            self.issued_accession = None
        for entry in self.journal:
            if self.delete_document(entry.collection_key, entry.id):
                LOG.info(f"Deleted {entry.label} <- {entry.id}")
            else:
                LOG.warning(f"{entry.label.capitalize()} <- {entry.id} was already gone")
        self.journal.clear()
        return True
