##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Interactive questions asked to the operator.

The engine never calls `input()` directly. Every question goes through a
`Prompter`, which is injected into the database handle so the core logic can
run (and be tested) without a live operator.
"""

import json
import logging
from typing import Any, Dict, List


LOG = logging.getLogger("mddb")


def ask_user(message: str, valid_inputs: List[str] = None) -> str:
    """
    Ask the operator a question and return the (upper-cased) answer.

    Args:
        message: The question.
        valid_inputs: If given, keep asking until one of these answers is typed.

    Returns:
        The answer, stripped and upper-cased.
    """
    user_input = input(message).strip().upper()
    if valid_inputs is None:
        return user_input
    valid_inputs = [valid.upper() for valid in valid_inputs]
    while user_input not in valid_inputs:
        user_input = input(f"Invalid input. Use one of {', '.join(valid_inputs)}: ").strip().upper()
    return user_input


class Prompter:
    """
    Default operator prompts, backed by `input()`.

    Methods:
        confirm: Ask a yes/no question.
        confirm_data_load: Ask whether already existing data must be overwritten.
        overwrite_metadata_key: Ask whether a conflicting metadata value must be overwritten.
        choose_md_reference: Ask which MD becomes the new reference MD.
        conserve_loaded_data: Ask whether data loaded by an aborted run must be kept.
    """

    def confirm(self, message: str) -> bool:
        """
        Ask a yes/no question.

        Args:
            message: The question.

        Returns:
            True if the operator answered 'y'.
        """
        return ask_user(f"{message} (y/n): ", ["Y", "N"]) == "Y"

    def confirm_data_load(self, label: str) -> bool:
        """
        Ask whether already existing data must be overwritten by new data.

        Args:
            label: A human readable name of the data (e.g. 'rmsd analysis').

        Returns:
            True if the current data is to be overwritten.
        """
        answer = ask_user(
            f"{label} already exists in the database. Confirm data loading:\n"
            "  Y - Overwrite current data with the new data\n"
            "  * - Conserve current data and discard the new data\n"
        )
        return answer == "Y"

    def overwrite_metadata_key(self, key: str, previous: Any, new: Any) -> bool:
        """
        Ask whether a conflicting metadata value must be overwritten.

        Args:
            key: The metadata field.
            previous: The value already stored.
            new: The incoming value.

        Returns:
            True if the previous value is to be replaced.
        """
        answer = ask_user(
            f"Metadata '{key}' field already exists and its value does not match new metadata.\n"
            f"  Previous value: {json.dumps(previous, indent=4, default=str)}\n"
            f"  New value: {json.dumps(new, indent=4, default=str)}\n"
            "Confirm data loading:\n"
            "  Y - Overwrite previous value with the new value\n"
            "  * - Conserve previous value and discard new value\n"
        )
        return answer == "Y"

    def choose_md_reference(self, options: Dict[int, str]) -> int:
        """
        Ask which MD becomes the new reference MD.

        Args:
            options: Active MD names keyed by their index.

        Returns:
            One of the keys in `options`.
        """
        listing = "\n".join(f"  {index} - {name}" for index, name in options.items())
        message = f"The reference MD was removed. Choose the new reference MD:\n{listing}\n"
        while True:
            answer = ask_user(message)
            if answer.isdigit() and int(answer) in options:
                return int(answer)
            LOG.warning(f"'{answer}' is not a valid MD index.")

    def conserve_loaded_data(self) -> bool:
        """
        Ask whether data loaded by an interrupted run must be kept.

        Returns:
            True to conserve, False to delete already loaded data.
        """
        answer = ask_user(
            "There was some problem and the load has been aborted. Confirm further instructions:\n"
            "  C - Conserve already loaded data\n"
            "  * - Delete already loaded data\n"
        )
        return answer == "C"
