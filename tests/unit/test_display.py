"""
Tests for the `display.py` module.
"""

import logging

from _pytest.capture import CaptureFixture

from mddb.db_scripts.data_models import ProjectSummary
from mddb.display import display_project_list, display_project_summary, format_project_rows, format_project_summary
from tests.fixture_types import FixtureCallable, FixtureProject


def test_format_project_summary():
    """Test that every count is rendered."""
    summary = ProjectSummary(id="abc", accession="A0001", topology=True, project_files=2, mds=3, md_analyses=7)
    table = format_project_summary(summary)
    lines = {line.split("|")[0].strip(): line.split("|")[1].strip() for line in table.splitlines() if "|" in line}
    assert lines["Accession"] == "A0001"
    assert lines["Topology"] == "yes"
    assert lines["Project files"] == "2"
    assert lines["MDs"] == "3"
    assert lines["MD analyses"] == "7"


def test_display_project_summary(capsys: CaptureFixture):
    """
    Test that the summary is printed under the project id.

    Args:
        capsys: PyTest capsys fixture.
    """
    display_project_summary(ProjectSummary(id="abc"))
    output = capsys.readouterr().out
    assert output.startswith("Project abc\n")
    assert "Accession" in output


def test_format_project_rows(project: FixtureProject, load_file: FixtureCallable, load_analysis: FixtureCallable):
    """
    Test that files and analyses are counted across the project and its MDs.

    Args:
        project: A new project.
        load_file: A fixture to load files.
        load_analysis: A fixture to load analyses.
    """
    project.add_md_directory("replica 1")
    load_file(project, "structure.pdb")
    load_file(project, "trajectory.bin", 0)
    load_analysis(project, "rmsd", 0)
    project.set_published(True)
    assert format_project_rows([project]) == [[str(project.id), "A0001", "yes", 1, 0, 2, 1, "no"]]


def test_display_empty_project_list(capsys: CaptureFixture, caplog: CaptureFixture):
    """
    Test that an empty listing prints nothing.

    Args:
        capsys: PyTest capsys fixture.
        caplog: PyTest caplog fixture.
    """
    caplog.set_level(logging.INFO)
    display_project_list([])
    assert capsys.readouterr().out == ""
    assert "There are no projects in the database" in caplog.text
