##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Module for the `Project` handle.

A `Project` holds an in-memory copy of one project document and every
operation that mutates it remotely: MDs (replicas), files, analyses, topology,
metadata and publication status. Every mutation is written back with
`update_remote`, which replaces the whole remote document with the local copy.

MDs are addressed by their index in the `mds` list, so an MD is never removed
from that list. Removing an MD deletes its contents and leaves a
`{name, removed: True}` slot behind.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from mddb.common.enums import ConflictPolicy, MdState
from mddb.db_scripts.associated_data import (
    analysis_matches_label,
    file_matches_label,
    get_analysis_label,
    get_file_label,
)
from mddb.db_scripts.collections import BASTARD_RELATIONSHIPS, REFERENCE_TYPES
from mddb.db_scripts.data_models import ProjectSummary
from mddb.db_scripts.metadata import merge_metadata
from mddb.exceptions import (
    ConflictError,
    FatalError,
    InconsistencyError,
    NotFoundError,
    TrajectoryDecodeError,
)
from mddb.utils import get_hashable_path_values, values_are_equal


LOG = logging.getLogger("mddb")

N_COORDINATES = 3  # x, y, z
COORDINATE_BYTES = 4  # float32

# Which denormalized fields point a document back to its owner
OWNER_FIELDS = {
    "files": ("metadata.project", "metadata.md"),
    "analyses": ("project", "md"),
}


class Project:
    """
    Aggregate root of one dataset.

    Attributes:
        data (Dict): The local copy of the project document.
        id: The project `_id`.
        database (db_scripts.database.Database): The database handle that owns this project.

    Methods:
        update_remote: Replace the remote project document with the local copy.
        get_md_state: Tell whether an MD slot is absent, active or removed.
        get_active_md_indices: List the indices of the MDs that are not removed.
        add_md_directory: Append a new MD.
        remove_md_directory: Delete the contents of an MD and flag it as removed.
        delete_project: Delete the project and everything it owns.
        find_file / find_analysis: Find a file or analysis entry by name.
        load_file / load_trajectory_file / load_analysis / load_topology: Insert new data.
        forestall_file_load / forestall_analysis_load / forestall_topology_load: Resolve
            already existing data before a load.
        delete_file / delete_analysis / delete_topology: Delete data.
        find_associated_data / delete_associated_data: Handle associated data groups.
        rename_file / rename_analysis: Rename data.
        update_project_metadata / update_md_metadata: Merge new metadata.
        set_published: Publish or unpublish the project.
        absorb_md: Move an MD from another project into this one.
        get_summary: Count everything the project owns.
    """

    def __init__(self, data: Dict, database: "Database"):  # noqa: F821
        self.data = data
        self.id = data["_id"]
        self.database = database
        for field in ("mds", "files", "analyses"):
            self.data.setdefault(field, [])
        # Decisions taken for associated data groups during the current load
        self._group_decisions: Dict[Tuple[str, Optional[int]], bool] = {}

    def __repr__(self) -> str:
        return f"Project(id={self.id}, accession={self.accession}, mds={len(self.data['mds'])})"

    def __str__(self) -> str:
        return f"project {self.accession or self.id}"

    @property
    def accession(self) -> Optional[str]:
        """The project accession, if any."""
        return self.data.get("accession")

    @property
    def published(self) -> bool:
        """Whether the project is published."""
        return bool(self.data.get("published"))

    def update_remote(self):
        """
        Replace the remote project document with the local copy.

        Raises:
            FatalError: If the remote project does not exist anymore.
        """
        result = self.database.projects.replace_one({"_id": self.id}, self.data)
        if result.matched_count == 0:
            raise FatalError(f"Failed to update project {self.id}: it is not in the database anymore")
        LOG.debug(f"Updated database project data for {self.id}")

    ##################
    # MD directories #
    ##################

    def get_md_state(self, md_index: int) -> MdState:
        """
        Tell whether an MD slot is absent, active or removed.

        Args:
            md_index: The MD index.

        Returns:
            The state of the slot.
        """
        mds = self.data["mds"]
        if not isinstance(md_index, int) or md_index < 0 or md_index >= len(mds):
            return MdState.ABSENT
        if mds[md_index].get("removed"):
            return MdState.REMOVED
        return MdState.ACTIVE

    def get_active_md_indices(self) -> List[int]:
        """
        Get the indices of every MD that is not removed.

        Returns:
            The active MD indices, in ascending order.
        """
        return [index for index, md in enumerate(self.data["mds"]) if not md.get("removed")]

    def _get_md(self, md_index: int) -> Dict:
        state = self.get_md_state(md_index)
        if state is MdState.ABSENT:
            raise NotFoundError(f"MD with index {md_index} does not exist in {self}")
        if state is MdState.REMOVED:
            raise NotFoundError(f"MD with index {md_index} has been removed from {self}")
        return self.data["mds"][md_index]

    def _update_md_count(self):
        self.data["mdcount"] = len(self.get_active_md_indices())

    def add_md_directory(self, name: str, metadata: Dict = None) -> int:
        """
        Append a new, empty MD to the project.

        The first MD added to a project without a reference MD becomes the reference MD.

        Args:
            name: The MD name.
            metadata: Additional MD metadata, stored in the MD entry itself.

        Returns:
            The index of the new MD.
        """
        md = dict(metadata or {})
        md.update({"name": name, "files": [], "analyses": []})
        self.data["mds"].append(md)
        md_index = len(self.data["mds"]) - 1
        if self.data.get("mdref") is None:
            self.data["mdref"] = md_index
        self._update_md_count()
        self.update_remote()
        LOG.info(f"Added MD '{name}' to {self} with index {md_index}")
        return md_index

    def remove_md_directory(self, md_index: int, forced: bool = False):
        """
        Delete every file and analysis of an MD and flag it as removed.

        The MD slot is kept so other MD indices stay valid. If the removed MD was
        the reference MD, a new one is chosen among the remaining active MDs:
        the first one if `forced`, otherwise the operator picks it.

        Args:
            md_index: The MD index.
            forced: Never ask the operator.

        Raises:
            NotFoundError: If there is no MD with this index.
        """
        state = self.get_md_state(md_index)
        if state is MdState.ABSENT:
            raise NotFoundError(f"MD with index {md_index} does not exist in {self}")
        if state is MdState.REMOVED:
            LOG.warning(f"MD with index {md_index} is already removed from {self}")
            return
        md = self.data["mds"][md_index]
        # Take the names first since deleting shrinks the lists
        for filename in [file["name"] for file in md.get("files", [])]:
            # Already gone if it was part of an associated data group
            if self.find_file(filename, md_index) is not None:
                self.delete_file(filename, md_index)
        for analysis_name in [analysis["name"] for analysis in md.get("analyses", [])]:
            if self.find_analysis(analysis_name, md_index) is not None:
                self.delete_analysis(analysis_name, md_index)
        LOG.info(f"MD '{md['name']}' will be flagged as removed")
        self.data["mds"][md_index] = {"name": md["name"], "removed": True}
        if self.data.get("mdref") == md_index:
            self._reassign_md_reference(forced)
        self._update_md_count()
        self.update_remote()

    def _reassign_md_reference(self, forced: bool):
        options = {index: self.data["mds"][index]["name"] for index in self.get_active_md_indices()}
        if not options:
            LOG.warning(f"There are no MDs left in {self}. The reference MD is unset")
            self.data["mdref"] = None
            return
        if forced:
            new_reference = min(options)
        else:
            new_reference = self.database.prompter.choose_md_reference(options)
            while new_reference not in options:
                LOG.warning(f"'{new_reference}' is not the index of an active MD")
                new_reference = self.database.prompter.choose_md_reference(options)
        LOG.info(f"MD '{options[new_reference]}' (index {new_reference}) is the new reference MD")
        self.data["mdref"] = new_reference

    def absorb_md(self, source: Project, md_index: int) -> int:
        """
        Move an active MD of another project into this one.

        The MD is appended to this project first, then the denormalized owner of
        every file and analysis is rewritten, and finally the source slot is
        flagged as removed without touching the moved data.

        Args:
            source: The project currently owning the MD.
            md_index: The index of the MD in the source project.

        Returns:
            The index of the MD in this project.
        """
        md = source._get_md(md_index)  # pylint: disable=protected-access
        self.data["mds"].append(md)
        new_index = len(self.data["mds"]) - 1
        if self.data.get("mdref") is None:
            self.data["mdref"] = new_index
        self._update_md_count()
        self.update_remote()
        for analysis in md.get("analyses", []):
            self.database.analyses.update_one({"_id": analysis["id"]}, {"$set": {"project": self.id, "md": new_index}})
        for file in md.get("files", []):
            self.database.files.update_one(
                {"_id": file["id"]}, {"$set": {"metadata.project": self.id, "metadata.md": new_index}}
            )
        source.data["mds"][md_index] = {"name": md["name"], "removed": True}
        if source.data.get("mdref") == md_index:
            source._reassign_md_reference(forced=True)  # pylint: disable=protected-access
        source._update_md_count()  # pylint: disable=protected-access
        source.update_remote()
        LOG.info(f"Moved MD '{md['name']}' from {source} to {self} with index {new_index}")
        return new_index

    ###########
    # Project #
    ###########

    def delete_project(self):
        """
        Delete the project and everything it owns.

        Contents go first (topology, project files, project analyses, then every
        active MD) so an interruption never leaves orphans behind a deleted
        project. If the project held the last issued accession, that accession
        is freed. Finally, shared references listed in the project metadata are
        deleted if no other project uses them.

        Raises:
            FatalError: If anything fails midway.
        """
        try:
            if self.get_topology() is not None:
                self.delete_topology()
            for filename in [file["name"] for file in self.data["files"]]:
                if self.find_file(filename) is not None:
                    self.delete_file(filename)
            for analysis_name in [analysis["name"] for analysis in self.data["analyses"]]:
                if self.find_analysis(analysis_name) is not None:
                    self.delete_analysis(analysis_name)
            for md_index in self.get_active_md_indices():
                self.remove_md_directory(md_index, forced=True)
            result = self.database.projects.delete_one({"_id": self.id})
        except (PyMongoError, NoFile, NotFoundError) as exc:
            raise FatalError(f"Failed to delete {self}: {exc}") from exc
        if result.deleted_count == 0:
            raise FatalError(f"Failed to delete {self}: it is not in the database anymore")
        LOG.info(f"Deleted {self}")
        self.database.journal.forget("projects", self.id)

        accession = self.accession
        if accession and accession == self.database.accessions.get_last_accession():
            self.database.accessions.free_last_accession(accession)

        self.database.garbage_collector.collect_project_references(self.data.get("metadata") or {})

    def set_published(self, published: bool) -> bool:
        """
        Publish or unpublish the project.

        Args:
            published: The requested status.

        Returns:
            True if the status changed.
        """
        if self.published == published:
            return False
        self.data["published"] = published
        self.update_remote()
        return True

    def get_summary(self) -> ProjectSummary:
        """
        Count everything the project owns.

        Returns:
            A `ProjectSummary`.
        """
        summary = ProjectSummary(id=self.id, accession=self.accession)
        summary.topology = self.get_topology() is not None
        summary.project_files = len(self.data["files"])
        summary.project_analyses = len(self.data["analyses"])
        for md in self.data["mds"]:
            if md.get("removed"):
                summary.removed_mds += 1
                continue
            summary.mds += 1
            summary.md_files += len(md.get("files", []))
            summary.md_analyses += len(md.get("analyses", []))
        return summary

    ############
    # Metadata #
    ############

    def update_project_metadata(self, new_metadata: Dict, policy: ConflictPolicy = None) -> bool:
        """
        Merge new metadata into the project metadata.

        Args:
            new_metadata: The incoming metadata.
            policy: How to resolve values that differ. Defaults to the database policy.

        Returns:
            True if the remote project was updated.
        """
        self.database.check_abort()
        previous_metadata = self.data.get("metadata")
        if previous_metadata is None:
            self.data["metadata"] = dict(new_metadata)
            self.update_remote()
            return True
        policy = policy or self.database.policy
        changed = merge_metadata(previous_metadata, new_metadata, policy, self.database.prompter.overwrite_metadata_key)
        if not changed:
            LOG.info("Project metadata is already up to date")
            return False
        self.update_remote()
        return True

    def update_md_metadata(self, new_metadata: Dict, md_index: int, policy: ConflictPolicy = None) -> bool:
        """
        Merge new metadata into an MD entry.

        Args:
            new_metadata: The incoming metadata.
            md_index: The MD index.
            policy: How to resolve values that differ. Defaults to the database policy.

        Returns:
            True if the remote project was updated.
        """
        self.database.check_abort()
        md = self._get_md(md_index)
        policy = policy or self.database.policy
        changed = merge_metadata(md, new_metadata, policy, self.database.prompter.overwrite_metadata_key)
        if not changed:
            LOG.info(f"MD {md_index} metadata is already up to date")
            return False
        self.update_remote()
        return True

    ############
    # Topology #
    ############

    def get_topology(self) -> Optional[Dict]:
        """Get the project topology, if any."""
        return self.database.topologies.find_one({"project": self.id})

    def delete_topology(self) -> bool:
        """Delete the project topology."""
        result = self.database.topologies.delete_one({"project": self.id})
        if result.deleted_count == 0:
            return False
        LOG.info(f"Deleted topology of {self}")
        return True

    def forestall_topology_load(self, new_topology: Dict, policy: ConflictPolicy = None) -> bool:
        """
        Check whether a new topology can be loaded, deleting the current one if needed.

        Args:
            new_topology: The topology about to be loaded.
            policy: How to resolve an already existing topology. Defaults to the database policy.

        Returns:
            True if the load can go on.
        """
        current = self.get_topology()
        if current is None:
            return True
        policy = policy or self.database.policy
        if policy is ConflictPolicy.CONSERVE:
            return False
        current_content = {key: value for key, value in current.items() if key != "_id"}
        new_content = {key: value for key, value in new_topology.items() if key != "_id"}
        new_content["project"] = self.id
        if values_are_equal(current_content, new_content):
            LOG.info("Topology is already up to date")
            return False
        confirm = policy is ConflictPolicy.OVERWRITE or self.database.prompter.confirm_data_load("Topology")
        if not confirm:
            return False
        self.delete_topology()
        return True

    def load_topology(self, topology: Dict, policy: ConflictPolicy = None) -> Optional[Any]:
        """
        Load the project topology.

        Args:
            topology: The topology document.
            policy: How to resolve an already existing topology. Defaults to the database policy.

        Returns:
            The id of the new topology, or None if the current one was kept.
        """
        if not self.forestall_topology_load(topology, policy):
            return None
        document = dict(topology)
        document["project"] = self.id
        result = self.database.topologies.insert_one(document)
        self.database.journal.record("new topology", "topologies", result.inserted_id)
        LOG.info(f"Loaded new topology data -> {result.inserted_id}")
        self.database.check_abort()
        return result.inserted_id

    ###################
    # Files/analyses #
    ###################

    def get_available_files(self, md_index: Optional[int] = None) -> List[Dict]:
        """
        Get the file entries of the project (no MD index) or of an MD.

        Args:
            md_index: The MD index, or None for project files.

        Returns:
            The live list of `{name, id}` entries.
        """
        if md_index is None:
            return self.data["files"]
        return self._get_md(md_index).setdefault("files", [])

    def get_available_analyses(self, md_index: Optional[int] = None) -> List[Dict]:
        """
        Get the analysis entries of the project (no MD index) or of an MD.

        Args:
            md_index: The MD index, or None for project analyses.

        Returns:
            The live list of `{name, id}` entries.
        """
        if md_index is None:
            return self.data["analyses"]
        return self._get_md(md_index).setdefault("analyses", [])

    def find_file(self, filename: str, md_index: Optional[int] = None) -> Optional[Dict]:
        """Find a file entry by its exact name."""
        return next((file for file in self.get_available_files(md_index) if file["name"] == filename), None)

    def find_analysis(self, name: str, md_index: Optional[int] = None) -> Optional[Dict]:
        """Find an analysis entry by its exact name."""
        return next((analysis for analysis in self.get_available_analyses(md_index) if analysis["name"] == name), None)

    def find_associated_data(self, label: str, md_index: Optional[int] = None) -> Tuple[List[Dict], List[Dict]]:
        """
        Find every analysis and file of an associated data group.

        Args:
            label: The group label (e.g. "clusters").
            md_index: The MD index, or None for project data.

        Returns:
            The analysis entries and the file entries of the group.
        """
        analyses = [
            entry for entry in self.get_available_analyses(md_index) if analysis_matches_label(entry["name"], label)
        ]
        files = [entry for entry in self.get_available_files(md_index) if file_matches_label(entry["name"], label)]
        return analyses, files

    def _is_associated_group(self, label: Optional[str], md_index: Optional[int]) -> bool:
        if label is None:
            return False
        analyses, files = self.find_associated_data(label, md_index)
        return len(analyses) + len(files) > 1

    def delete_associated_data(self, label: str, md_index: Optional[int] = None):
        """
        Delete every analysis and file of an associated data group as one unit.

        Args:
            label: The group label.
            md_index: The MD index, or None for project data.
        """
        analyses, files = self.find_associated_data(label, md_index)
        LOG.info(f"Deleting {len(analyses) + len(files)} members of associated data '{label}' (MD index {md_index})")
        for entry in analyses:
            self._remove_entry("analyses", entry, md_index)
        for entry in files:
            self._remove_entry("files", entry, md_index)
        self.update_remote()

    def _verify_owner(self, collection_key: str, entry: Dict, md_index: Optional[int]) -> Optional[Dict]:
        """
        Read the document behind an entry and check that it points back to us.

        Returns:
            The document, or None if it does not exist.

        Raises:
            InconsistencyError: If the document claims another project or MD.
        """
        document = self.database.collection(collection_key).find_one({"_id": entry["id"]})
        if document is None:
            return None
        project_field, md_field = OWNER_FIELDS[collection_key]
        owner = next(iter(get_hashable_path_values(document, project_field)), None)
        owner_md = next(iter(get_hashable_path_values(document, md_field)), None)
        if owner != self.id or owner_md != md_index:
            raise InconsistencyError(
                f"{entry['name']} ({entry['id']}) is listed in {self} (MD index {md_index}) "
                f"but belongs to project {owner} (MD index {owner_md})",
                document=document,
            )
        return document

    def _is_listed_by_owner(self, collection_key: str, document: Dict) -> bool:
        project_field, _ = OWNER_FIELDS[collection_key]
        owner = next(iter(get_hashable_path_values(document, project_field)), None)
        if owner is None:
            return False
        # Our own entry is about to go, so another entry of ours must list it too
        own_project = owner == self.id
        owner_project = self.data if own_project else self.database.projects.find_one({"_id": owner})
        if owner_project is None:
            return False
        listed = []
        for path in BASTARD_RELATIONSHIPS[collection_key].parent_fields:
            listed.extend(get_hashable_path_values(owner_project, path))
        return listed.count(document["_id"]) > (1 if own_project else 0)

    def _remove_entry(self, collection_key: str, entry: Dict, md_index: Optional[int]):
        """
        Delete the document behind a file or analysis entry and splice the entry
        out of its list. The remote project is not updated here.
        """
        document_name = self.database.name_collection_document(collection_key)
        try:
            document = self._verify_owner(collection_key, entry, md_index)
        except InconsistencyError as exc:
            if self._is_listed_by_owner(collection_key, exc.document):
                LOG.warning(f"{exc}. Only the entry in {self} is removed")
            else:
                LOG.warning(f"{exc}. No one lists it so it is deleted as a bastard {document_name}")
                self.database.delete_document(collection_key, entry["id"])
        else:
            if document is None:
                LOG.warning(f"{document_name.capitalize()} {entry['name']} <- {entry['id']} is missing in the database")
            else:
                self.database.delete_document(collection_key, entry["id"])
                LOG.info(f"Deleted {document_name} {entry['name']} (MD index {md_index}) <- {entry['id']}")
        if collection_key == "files":
            entries = self.get_available_files(md_index)
        else:
            entries = self.get_available_analyses(md_index)
        entries.remove(entry)

    def delete_file(self, filename: str, md_index: Optional[int] = None, handle_associated_data: bool = True):
        """
        Delete a file, both its binary payload and its entry in the project.

        If the file belongs to an associated data group with other members, the
        whole group is deleted instead.

        Args:
            filename: The file name.
            md_index: The MD index, or None for project files.
            handle_associated_data: If False, only this file is deleted.

        Raises:
            NotFoundError: If the file is not listed.
        """
        entry = self.find_file(filename, md_index)
        if entry is None:
            raise NotFoundError(f"File {filename} is not in the available files list (MD index {md_index})")
        if handle_associated_data:
            label = get_file_label(filename)
            if self._is_associated_group(label, md_index):
                self.delete_associated_data(label, md_index)
                return
        self._remove_entry("files", entry, md_index)
        self.update_remote()

    def delete_analysis(self, name: str, md_index: Optional[int] = None, handle_associated_data: bool = True):
        """
        Delete an analysis, both its document and its entry in the project.

        If the analysis belongs to an associated data group with other members,
        the whole group is deleted instead.

        Args:
            name: The analysis name.
            md_index: The MD index, or None for project analyses.
            handle_associated_data: If False, only this analysis is deleted.

        Raises:
            NotFoundError: If the analysis is not listed.
        """
        entry = self.find_analysis(name, md_index)
        if entry is None:
            raise NotFoundError(f"Analysis {name} is not in the available analyses list (MD index {md_index})")
        if handle_associated_data:
            label = get_analysis_label(name)
            if self._is_associated_group(label, md_index):
                self.delete_associated_data(label, md_index)
                return
        self._remove_entry("analyses", entry, md_index)
        self.update_remote()

    def rename_file(self, filename: str, md_index: Optional[int], new_filename: str):
        """
        Rename a file, first in the files collection and then in the project.

        Args:
            filename: The current name.
            md_index: The MD index, or None for project files.
            new_filename: The new name.

        Raises:
            NotFoundError: If the file is not listed.
            ConflictError: If the new name is already taken.
        """
        entry = self.find_file(filename, md_index)
        if entry is None:
            raise NotFoundError(f"File {filename} is not in the available files list (MD index {md_index})")
        if self.find_file(new_filename, md_index) is not None:
            raise ConflictError(f"File {new_filename} already exists (MD index {md_index})")
        self.database.bucket.rename(entry["id"], new_filename)
        entry["name"] = new_filename
        self.update_remote()
        LOG.info(f"Renamed file {filename} (MD index {md_index}) as {new_filename}")

    def rename_analysis(self, name: str, md_index: Optional[int], new_name: str):
        """
        Rename an analysis, first in the analyses collection and then in the project.

        Args:
            name: The current name.
            md_index: The MD index, or None for project analyses.
            new_name: The new name.

        Raises:
            NotFoundError: If the analysis is not listed or its document is missing.
            ConflictError: If the new name is already taken.
        """
        entry = self.find_analysis(name, md_index)
        if entry is None:
            raise NotFoundError(f"Analysis {name} is not in the available analyses list (MD index {md_index})")
        if self.find_analysis(new_name, md_index) is not None:
            raise ConflictError(f"Analysis {new_name} already exists (MD index {md_index})")
        result = self.database.analyses.update_one({"_id": entry["id"]}, {"$set": {"name": new_name}})
        if result.matched_count == 0:
            raise NotFoundError(f"Analysis {name} <- {entry['id']} is missing in the database")
        entry["name"] = new_name
        self.update_remote()
        LOG.info(f"Renamed analysis {name} (MD index {md_index}) as {new_name}")

    def _forestall(self, kind: str, name: str, md_index: Optional[int], policy: ConflictPolicy) -> bool:
        policy = policy or self.database.policy
        if kind == "file":
            existing = self.find_file(name, md_index)
            label = get_file_label(name)
        else:
            existing = self.find_analysis(name, md_index)
            label = get_analysis_label(name)
        group_key = (label, md_index) if label else None
        if existing is None:
            if group_key is None:
                return True
            if group_key in self._group_decisions:
                return self._group_decisions[group_key]
            analyses, files = self.find_associated_data(label, md_index)
            if not analyses and not files:
                # The group is created from scratch during this run
                self._group_decisions[group_key] = True
                return True
        decision = self._group_decisions.get(group_key) if group_key else None
        if decision is None:
            if policy is ConflictPolicy.CONSERVE:
                decision = False
            else:
                decision = policy is ConflictPolicy.OVERWRITE or self.database.prompter.confirm_data_load(
                    f"{name} {kind}"
                )
            if group_key:
                self._group_decisions[group_key] = decision
        if not decision:
            return False
        if existing is None:
            self.delete_associated_data(label, md_index)
        elif kind == "file":
            self.delete_file(name, md_index)
        else:
            self.delete_analysis(name, md_index)
        return True

    def forestall_file_load(
        self, filename: str, md_index: Optional[int] = None, policy: ConflictPolicy = None
    ) -> bool:
        """
        Check whether a file can be loaded, deleting the current one (or its whole
        associated data group) if needed.

        Args:
            filename: The name of the file about to be loaded.
            md_index: The MD index, or None for project files.
            policy: How to resolve an already existing file. Defaults to the database policy.

        Returns:
            True if the load can go on.
        """
        return self._forestall("file", filename, md_index, policy)

    def forestall_analysis_load(
        self, name: str, md_index: Optional[int] = None, policy: ConflictPolicy = None
    ) -> bool:
        """
        Check whether an analysis can be loaded, deleting the current one (or its
        whole associated data group) if needed.

        Args:
            name: The name of the analysis about to be loaded.
            md_index: The MD index, or None for project analyses.
            policy: How to resolve an already existing analysis. Defaults to the database policy.

        Returns:
            True if the load can go on.
        """
        return self._forestall("analysis", name, md_index, policy)

    def _add_file_entry(self, filename: str, md_index: Optional[int], file_id: Any):
        self.database.journal.record(f"{filename} file", "files", file_id)
        self.get_available_files(md_index).append({"name": filename, "id": file_id})
        self.update_remote()

    def load_file(self, filename: str, md_index: Optional[int], source_path: str) -> Any:
        """
        Upload a local file to the bucket and register it.

        This does not check for an already existing file with the same name.
        Call `forestall_file_load` first.

        Args:
            filename: The name of the file in the database.
            md_index: The MD index, or None for project files.
            source_path: The local path of the file.

        Returns:
            The id of the new file.
        """
        metadata = {"project": self.id, "md": md_index}
        LOG.info(f"Loading new file: {filename}")
        with open(source_path, "rb") as source:
            file_id = self.database.bucket.upload_from_stream(filename, source, metadata=metadata)
        self._add_file_entry(filename, md_index, file_id)
        LOG.info(f"Loaded file [{filename} -> {file_id}]")
        self.database.check_abort()
        return file_id

    def load_trajectory_file(self, filename: str, md_index: Optional[int], frames: Iterable[bytes]) -> Any:
        """
        Upload a trajectory, frame by frame, and register it.

        Each frame is a buffer of 32-bit floats (x, y, z for every atom). Once
        every frame is written, the number of frames and atoms is added to the
        file metadata.

        Args:
            filename: The name of the file in the database.
            md_index: The MD index, or None for project files.
            frames: The coordinate frames, consumed once.

        Returns:
            The id of the new file.

        Raises:
            TrajectoryDecodeError: If no frame was produced. Nothing is uploaded.
        """
        metadata = {"project": self.id, "md": md_index}
        LOG.info(f"Loading trajectory file as '{filename}'")
        upload = self.database.bucket.open_upload_stream(filename, metadata=metadata)
        frame_count = 0
        try:
            for frame in frames:
                upload.write(frame)
                frame_count += 1
            if frame_count == 0:
                raise TrajectoryDecodeError(f"No frames were produced for trajectory {filename}")
        except Exception:
            upload.abort()
            raise
        upload.close()
        file_id = upload._id  # pylint: disable=protected-access
        metadata["frames"] = frame_count
        metadata["atoms"] = upload.length // frame_count // COORDINATE_BYTES // N_COORDINATES
        self.database.files.update_one({"_id": file_id}, {"$set": {"metadata": metadata}})
        self._add_file_entry(filename, md_index, file_id)
        LOG.info(f"Loaded trajectory file '{filename}' [{file_id}] ({frame_count} frames)")
        self.database.check_abort()
        return file_id

    def load_analysis(self, analysis: Dict, md_index: Optional[int] = None) -> Any:
        """
        Insert an analysis and register it.

        This does not check for an already existing analysis with the same name.
        Call `forestall_analysis_load` first.

        Args:
            analysis: The analysis, with at least a `name` and a `value`.
            md_index: The MD index, or None for project analyses.

        Returns:
            The id of the new analysis.
        """
        document = dict(analysis)
        document["project"] = self.id
        document["md"] = md_index
        result = self.database.analyses.insert_one(document)
        self.database.journal.record(f"{analysis['name']} analysis", "analyses", result.inserted_id)
        self.get_available_analyses(md_index).append({"name": analysis["name"], "id": result.inserted_id})
        self.update_remote()
        LOG.info(f"Loaded analysis {analysis['name']} -> {result.inserted_id}")
        self.database.check_abort()
        return result.inserted_id

    def merge_reference_ids(self, metadata: Dict) -> bool:
        """
        Add the reference ids listed in some metadata to the project metadata.

        Args:
            metadata: Metadata of another project.

        Returns:
            True if any id was added. The remote project is not updated here.
        """
        changed = False
        project_metadata = self.data.setdefault("metadata", {})
        for reference_type in REFERENCE_TYPES.values():
            for reference_id in metadata.get(reference_type.metadata_field) or []:
                current = project_metadata.setdefault(reference_type.metadata_field, [])
                if reference_id not in current:
                    current.append(reference_id)
                    changed = True
        return changed
