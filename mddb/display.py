##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Manages formatting for displaying information to the console.
"""
import logging
from typing import Iterable, List

from tabulate import tabulate

from mddb.db_scripts.data_models import ProjectSummary
from mddb.utils import plural


LOG = logging.getLogger("mddb")

LIST_HEADERS = ["ID", "Accession", "Published", "MDs", "Removed MDs", "Files", "Analyses", "Topology"]


def format_project_summary(summary: ProjectSummary) -> str:
    """
    Build a two-column table with everything a project owns.

    Args:
        summary: The project summary.

    Returns:
        The rendered table.
    """
    rows = [
        ["Accession", summary.accession or "-"],
        ["Topology", "yes" if summary.topology else "no"],
        ["Project files", summary.project_files],
        ["Project analyses", summary.project_analyses],
        ["MDs", summary.mds],
        ["Removed MDs", summary.removed_mds],
        ["MD files", summary.md_files],
        ["MD analyses", summary.md_analyses],
    ]
    return tabulate(rows, tablefmt="presto")


def display_project_summary(summary: ProjectSummary):
    """
    Print the summary of a project.

    Args:
        summary: The project summary.
    """
    print(f"Project {summary.id}")
    print(format_project_summary(summary))
    print()


def format_project_rows(projects: Iterable["Project"]) -> List[List]:  # noqa: F821
    """
    Build one listing row per project.

    Args:
        projects: Project handles.

    Returns:
        The rows, in the order of `LIST_HEADERS`.
    """
    rows = []
    for project in projects:
        summary = project.get_summary()
        rows.append(
            [
                str(summary.id),
                summary.accession or "-",
                "yes" if project.published else "no",
                summary.mds,
                summary.removed_mds,
                summary.project_files + summary.md_files,
                summary.project_analyses + summary.md_analyses,
                "yes" if summary.topology else "no",
            ]
        )
    return rows


def display_project_list(projects: Iterable["Project"]):  # noqa: F821
    """
    Print a table with one row per project.

    Args:
        projects: Project handles.
    """
    rows = format_project_rows(projects)
    if not rows:
        LOG.info("There are no projects in the database")
        return
    print(tabulate(rows, headers=LIST_HEADERS))
    print(f"\n{plural('project', len(rows), include_count=True)}")
