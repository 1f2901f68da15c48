##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Associated data groups.

Some analyses and files only make sense together (e.g. the `clusters`
analysis, its `clusters-01` sibling and the `clusters.pdb` structures). They
share a label and are created, overwritten or deleted as one unit.

An analysis belongs to label L when its name is L, optionally followed by
`-<number>`. A file belongs to label L when its name matches one of the
patterns registered for L.
"""

import re
from typing import Dict, List, Optional, Pattern


ASSOCIATED_FILE_PATTERNS: Dict[str, List[Pattern]] = {
    "pca": [re.compile(r"^pca\.trajectory_\d+\.(bin|xtc)$")],
    "clusters": [re.compile(r"^clusters(-\d+)?\.(pdb|bin)$"), re.compile(r"^clusters_\d+\.(pdb|bin)$")],
    "markov": [re.compile(r"^markov_states\.(pdb|bin)$")],
    "pockets": [re.compile(r"^pocket_?\d+\.(pdb|pqr)$"), re.compile(r"^pockets\.(pdb|bin)$")],
}

ASSOCIATED_LABELS: List[str] = list(ASSOCIATED_FILE_PATTERNS)


def analysis_matches_label(name: str, label: str) -> bool:
    """
    Check whether an analysis name belongs to a label.

    Args:
        name: The analysis name.
        label: The associated data label.

    Returns:
        True if the name is the label, optionally suffixed with `-<number>`.
    """
    return re.fullmatch(rf"{re.escape(label)}(-\d+)?", name) is not None


def file_matches_label(name: str, label: str) -> bool:
    """
    Check whether a filename belongs to a label.

    Args:
        name: The filename.
        label: The associated data label.

    Returns:
        True if the filename matches one of the label patterns.
    """
    return any(pattern.match(name) for pattern in ASSOCIATED_FILE_PATTERNS.get(label, []))


def get_analysis_label(name: str) -> Optional[str]:
    """
    Find the associated data label of an analysis.

    Args:
        name: The analysis name.

    Returns:
        The label, or None if the analysis belongs to no group.
    """
    for label in ASSOCIATED_LABELS:
        if analysis_matches_label(name, label):
            return label
    return None


def get_file_label(name: str) -> Optional[str]:
    """
    Find the associated data label of a file.

    Args:
        name: The filename.

    Returns:
        The label, or None if the file belongs to no group.
    """
    for label in ASSOCIATED_LABELS:
        if file_matches_label(name, label):
            return label
    return None
