##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
CLI module for deleting any document of the database by its id.

The document is found with a scan over every collection and the deletion is
dispatched on the collection it lives in:

- projects are deleted with their whole cascade, after confirmation;
- files and analyses are deleted through their owner project when it still
  lists them, or directly otherwise;
- topologies are deleted directly;
- shared references are deleted only when no project uses them.
"""

import logging
from argparse import ArgumentParser, Namespace
from typing import Optional

from mddb.cli.commands.command_entry_point import CommandEntryPoint
from mddb.cli.utils import confirm_action, get_database
from mddb.db_scripts.collections import get_reference_type_by_collection
from mddb.db_scripts.data_models import FoundDocument
from mddb.db_scripts.database import Database
from mddb.db_scripts.project import OWNER_FIELDS, Project
from mddb.display import display_project_summary
from mddb.exceptions import ConflictError, NotFoundError
from mddb.utils import get_hashable_path_values


LOG = logging.getLogger("mddb")


class DeleteCommand(CommandEntryPoint):
    """
    Handles the `delete` CLI command.

    Methods:
        add_parser: Adds the `delete` command to the CLI parser.
        process_command: Deletes every given document.
        delete_found_document: Dispatches the deletion of one document.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `delete` command parser to the CLI argument parser.

        Parameters:
            subparsers (ArgumentParser): The subparsers object to which the `delete` command parser will be added.
        """
        delete_cmd: ArgumentParser = subparsers.add_parser(
            "delete",
            help="Delete any document of the database by its id. Projects are deleted with everything they own.",
        )
        delete_cmd.set_defaults(func=self.process_command)
        delete_cmd.add_argument("ids", nargs="+", help="Ids of the documents (or accessions of projects)")
        delete_cmd.add_argument(
            "-f",
            "--force",
            action="store_true",
            default=False,
            help="Delete projects without confirmation",
        )

    def process_command(self, args: Namespace):
        """
        Process the `delete` command.

        Parameters:
            args: Parsed CLI arguments.

        Raises:
            NotFoundError: If an id matches no document.
        """
        database = get_database(args)
        for document_id in args.ids:
            project = database.sync_project(document_id)
            if project is not None:
                self.delete_project(project, args.force)
                continue
            found = database.find_id(document_id)
            if found is None:
                raise NotFoundError(f"No document with id {document_id} was found in the database")
            self.delete_found_document(database, found, args.force)

    def delete_project(self, project: Project, force: bool):
        """
        Delete a project and everything it owns, after confirmation.

        Parameters:
            project: The project handle.
            force: Skip the confirmation.
        """
        display_project_summary(project.get_summary())
        if not confirm_action(f"Delete {project} and everything it owns?", force=force):
            LOG.info(f"Deletion of {project} cancelled")
            return
        project.delete_project()

    def delete_found_document(self, database: Database, found: FoundDocument, force: bool):
        """
        Dispatch the deletion of a document on the collection it was found in.

        Parameters:
            database: The database handle.
            found: The document and its collection key.
            force: Skip the confirmation of project deletions.

        Raises:
            ConflictError: If the document cannot be deleted on its own.
        """
        key = found.collection_key
        document = found.document
        if key == "projects":
            self.delete_project(Project(document, database), force)
        elif key in OWNER_FIELDS:
            self._delete_project_data(database, found)
        elif key == "topologies":
            database.delete_document(key, document["_id"])
            LOG.info(f"Deleted topology {document['_id']}")
        else:
            reference_type = get_reference_type_by_collection(key)
            if reference_type is None:
                raise ConflictError(f"A {database.name_collection_document(key)} cannot be deleted on its own")
            reference_id = document[reference_type.id_field]
            if not database.garbage_collector.delete_reference_if_unused(reference_type, reference_id):
                LOG.warning(f"{reference_type.key.capitalize()} reference {reference_id} is still used and was kept")

    def _find_owner(self, database: Database, found: FoundDocument) -> Optional[Project]:
        project_field, _ = OWNER_FIELDS[found.collection_key]
        owner_id = next(iter(get_hashable_path_values(found.document, project_field)), None)
        if owner_id is None:
            return None
        owner = database.projects.find_one({"_id": owner_id})
        return Project(owner, database) if owner is not None else None

    def _delete_project_data(self, database: Database, found: FoundDocument):
        """Delete a file or analysis through its owner project, or directly if no project lists it."""
        key = found.collection_key
        document = found.document
        _, md_field = OWNER_FIELDS[key]
        md_index = next(iter(get_hashable_path_values(document, md_field)), None)
        owner = self._find_owner(database, found)
        name = document.get("filename") if key == "files" else document.get("name")
        entry = None
        if owner is not None:
            try:
                if key == "files":
                    entry = owner.find_file(name, md_index)
                else:
                    entry = owner.find_analysis(name, md_index)
            except NotFoundError:
                entry = None
        if entry is None or entry["id"] != document["_id"]:
            document_name = database.name_collection_document(key).capitalize()
            LOG.warning(f"{document_name} {document['_id']} is not listed by its project")
            database.delete_document(key, document["_id"])
            return
        if key == "files":
            owner.delete_file(name, md_index)
        else:
            owner.delete_analysis(name, md_index)
