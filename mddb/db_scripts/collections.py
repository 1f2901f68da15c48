##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Declarative schema of the MDDB database.

`COLLECTIONS` lists every collection in the order used when a raw id is looked
up across the whole database. `REFERENCE_TYPES` describes the shared reference
records and the project metadata arrays that point to them.
`ORPHAN_RELATIONSHIPS` and `BASTARD_RELATIONSHIPS` feed the garbage collector.
"""

from typing import Dict

from mddb.db_scripts.data_models import CollectionSpec, IndexSpec, OrphanRelationship, ReferenceType


BUCKET_NAME = "fs"
COUNTER_NAME = "identifier"

COLLECTIONS: Dict[str, CollectionSpec] = {
    spec.key: spec
    for spec in (
        CollectionSpec(
            key="projects",
            name="projects",
            document_name="project",
            indexes=(IndexSpec((("published", 1),)), IndexSpec((("accession", 1),))),
        ),
        CollectionSpec(
            key="references",
            name="references",
            document_name="reference",
            indexes=(IndexSpec((("uniprot", 1),)),),
        ),
        CollectionSpec(
            key="ligands",
            name="ligands",
            document_name="ligand",
            indexes=(IndexSpec((("pubchem", 1),)),),
        ),
        CollectionSpec(
            key="pdb_refs",
            name="pdb_refs",
            document_name="PDB reference",
            indexes=(IndexSpec((("id", 1),)),),
        ),
        CollectionSpec(
            key="chain_refs",
            name="chain_refs",
            document_name="chain reference",
            indexes=(IndexSpec((("sequence", 1),)),),
        ),
        CollectionSpec(
            key="inchikey_refs",
            name="inchikey_refs",
            document_name="InChIKey reference",
            indexes=(IndexSpec((("inchikey", 1),)),),
        ),
        CollectionSpec(
            key="topologies",
            name="topologies",
            document_name="topology",
            indexes=(IndexSpec((("project", 1),)),),
        ),
        CollectionSpec(
            key="files",
            name=f"{BUCKET_NAME}.files",
            document_name="file",
            indexes=(IndexSpec((("metadata.project", 1),)),),
            binary=True,
        ),
        CollectionSpec(
            key="chunks",
            name=f"{BUCKET_NAME}.chunks",
            document_name="file chunk",
            indexes=(IndexSpec((("files_id", 1), ("n", 1)), unique=True),),
        ),
        CollectionSpec(
            key="analyses",
            name="analyses",
            document_name="analysis",
            indexes=(IndexSpec((("project", 1),)), IndexSpec((("project", 1), ("md", 1)))),
        ),
        CollectionSpec(
            key="counters",
            name="counters",
            document_name="counter",
            indexes=(IndexSpec((("name", 1),), unique=True),),
        ),
    )
}

REFERENCE_TYPES: Dict[str, ReferenceType] = {
    ref.key: ref
    for ref in (
        ReferenceType(key="protein", collection_key="references", id_field="uniprot", metadata_field="REFERENCES"),
        ReferenceType(key="ligand", collection_key="ligands", id_field="pubchem", metadata_field="LIGANDS"),
        ReferenceType(key="pdb", collection_key="pdb_refs", id_field="id", metadata_field="PDBIDS"),
        ReferenceType(key="chain", collection_key="chain_refs", id_field="sequence", metadata_field="PROTSEQ"),
        ReferenceType(key="inchikey", collection_key="inchikey_refs", id_field="inchikey", metadata_field="INCHIKEYS"),
    )
}

# Documents whose parent no longer exists
ORPHAN_RELATIONSHIPS: Dict[str, OrphanRelationship] = {
    "files": OrphanRelationship("files", "projects", ("_id",), "metadata.project"),
    "analyses": OrphanRelationship("analyses", "projects", ("_id",), "project"),
    "topologies": OrphanRelationship("topologies", "projects", ("_id",), "project"),
    "chunks": OrphanRelationship("chunks", "files", ("_id",), "files_id"),
}
# Shared reference records no project points to anymore
ORPHAN_RELATIONSHIPS.update(
    {
        ref.collection_key: OrphanRelationship(
            ref.collection_key, "projects", (f"metadata.{ref.metadata_field}",), ref.id_field
        )
        for ref in REFERENCE_TYPES.values()
    }
)

# Documents whose parent exists but does not list them
BASTARD_RELATIONSHIPS: Dict[str, OrphanRelationship] = {
    "files": OrphanRelationship("files", "projects", ("files.id", "mds.files.id"), "_id"),
    "analyses": OrphanRelationship("analyses", "projects", ("analyses.id", "mds.analyses.id"), "_id"),
}


def get_reference_type_by_collection(collection_key: str) -> ReferenceType:
    """
    Find the reference type stored in a given collection.

    Args:
        collection_key: The collection key (e.g. "ligands").

    Returns:
        The matching reference type, or None if the collection holds no references.
    """
    for ref in REFERENCE_TYPES.values():
        if ref.collection_key == collection_key:
            return ref
    return None
