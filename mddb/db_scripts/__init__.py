##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
The `db_scripts` package contains the consistency and lifecycle engine of MDDB.

Modules:
    collections: Declarative schema of every collection, its indexes and the
        parent/child relationships used to find orphans.
    data_models: Small dataclasses shared by the engine.
    accession: The accession issuer backed by the counter document.
    undo_journal: The run-scoped list of inserted documents.
    metadata: The three-way metadata merge.
    associated_data: Grouping of analyses and files that live and die together.
    garbage_collector: Orphan scans and reference counting.
    connection: Construction of the MongoDB client and GridFS bucket.
    project: The `Project` handle, aggregate root of one dataset.
    database: The `Database` handle, entry point used by commands.
"""
