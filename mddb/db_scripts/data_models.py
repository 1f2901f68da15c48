##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
This module houses dataclasses that describe the schema and the bookkeeping
records used by the engine. Stored documents themselves are kept as plain
dictionaries, exactly as MongoDB returns them.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class IndexSpec:
    """
    An index that must exist on a collection.

    Attributes:
        keys: A list of (field, direction) pairs.
        unique: Whether the index enforces uniqueness.
    """

    keys: Tuple[Tuple[str, int], ...]
    unique: bool = False

    @property
    def name(self) -> str:
        """
        The name MongoDB gives to an index created without an explicit name.
        """
        return "_".join(f"{key}_{direction}" for key, direction in self.keys)


@dataclass(frozen=True)
class CollectionSpec:
    """
    Declarative description of one collection.

    Attributes:
        key: The internal key used throughout the code (e.g. "files").
        name: The actual collection name in the database (e.g. "fs.files").
        document_name: A human readable name for one of its documents.
        indexes: Indexes that must exist on the collection.
        binary: True for the GridFS metadata collection, whose documents must be
            deleted through the bucket so their chunks go with them.
    """

    key: str
    name: str
    document_name: str
    indexes: Tuple[IndexSpec, ...] = ()
    binary: bool = False


@dataclass(frozen=True)
class ReferenceType:
    """
    A kind of shared reference record pointed to by project metadata.

    Attributes:
        key: The internal key (e.g. "protein").
        collection_key: The collection holding the records.
        id_field: The domain id field inside each record (e.g. "uniprot").
        metadata_field: The project metadata array listing record ids (e.g. "REFERENCES").
    """

    key: str
    collection_key: str
    id_field: str
    metadata_field: str


@dataclass(frozen=True)
class OrphanRelationship:
    """
    A parent/child relationship. A child is an orphan when the value of its
    `local_field` is not found among the values of any `parent_fields` of any
    parent document.

    Attributes:
        child_key: The collection where orphans are searched.
        parent_key: The collection holding the parents.
        parent_fields: Dotted paths read in every parent document.
        local_field: Dotted path read in every child document.
    """

    child_key: str
    parent_key: str
    parent_fields: Tuple[str, ...]
    local_field: str


@dataclass
class JournalEntry:
    """
    A document inserted during the current run.

    Attributes:
        label: A human readable description (e.g. "rmsd analysis").
        collection_key: The collection where the document was inserted.
        id: The `_id` of the inserted document.
    """

    label: str
    collection_key: str
    id: Any

    def to_dict(self) -> Dict:
        """
        Convert the entry to a dictionary.

        Returns:
            The entry as a dictionary.
        """
        return asdict(self)


@dataclass
class FoundDocument:
    """
    The result of looking a raw id up across every collection.

    Attributes:
        document: The document found.
        collection_key: The key of the collection it was found in.
    """

    document: Dict
    collection_key: str


@dataclass
class ProjectSummary:
    """
    Counts of everything a project owns.

    Attributes:
        id: The project id.
        accession: The project accession, if any.
        topology: Whether the project has a topology.
        project_files: Number of project-level files.
        project_analyses: Number of project-level analyses.
        mds: Number of active MDs.
        removed_mds: Number of MDs flagged as removed.
        md_files: Number of files across active MDs.
        md_analyses: Number of analyses across active MDs.
    """

    id: Any
    accession: str = None
    topology: bool = False
    project_files: int = 0
    project_analyses: int = 0
    mds: int = 0
    removed_mds: int = 0
    md_files: int = 0
    md_analyses: int = 0

    @property
    def is_empty(self) -> bool:
        """
        True when the project owns nothing at all.
        """
        return not (
            self.topology
            or self.project_files
            or self.project_analyses
            or self.mds
            or self.md_files
            or self.md_analyses
        )
