##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Three-way merge of metadata.

Incoming metadata is appended to the metadata already stored: new keys are
added, identical values are left alone and differing values are resolved by a
`ConflictPolicy`. Keys missing from the incoming metadata are never removed.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from mddb.common.enums import ConflictPolicy
from mddb.utils import values_are_equal


LOG = logging.getLogger("mddb")

# Signature of the callback asked about each conflicting key: (key, previous, new) -> overwrite?
OverwritePrompt = Callable[[str, Any, Any], bool]


class KeyStatus(Enum):
    """
    How an incoming metadata key relates to the stored metadata.
    """

    NEW = "new"
    UNCHANGED = "unchanged"
    CONFLICT = "conflict"


def classify_key(previous: Dict, key: str, new_value: Any) -> KeyStatus:
    """
    Compare an incoming key against the stored metadata.

    Args:
        previous: The stored metadata.
        key: The incoming key.
        new_value: The incoming value.

    Returns:
        The status of the key.
    """
    if key not in previous:
        return KeyStatus.NEW
    if values_are_equal(previous[key], new_value):
        return KeyStatus.UNCHANGED
    return KeyStatus.CONFLICT


def should_overwrite(
    policy: ConflictPolicy, key: str, previous_value: Any, new_value: Any, prompt: Optional[OverwritePrompt]
) -> bool:
    """
    Decide whether a conflicting key takes the incoming value.

    Args:
        policy: The conflict policy.
        key: The conflicting key.
        previous_value: The stored value.
        new_value: The incoming value.
        prompt: The callback used when the policy is `ASK`.

    Returns:
        True if the incoming value wins.

    Raises:
        ValueError: If the policy is `ASK` and no prompt was given.
    """
    if policy is ConflictPolicy.CONSERVE:
        return False
    if policy is ConflictPolicy.OVERWRITE:
        return True
    if prompt is None:
        raise ValueError(f"Metadata key '{key}' is in conflict and there is no way to ask the operator")
    return prompt(key, previous_value, new_value)


def merge_metadata(
    previous: Dict,
    incoming: Dict,
    policy: ConflictPolicy = ConflictPolicy.ASK,
    prompt: Optional[OverwritePrompt] = None,
) -> bool:
    """
    Merge incoming metadata into the stored metadata.

    Args:
        previous: The stored metadata. Modified in place.
        incoming: The new metadata.
        policy: How to resolve keys whose values differ.
        prompt: Callback used for every conflicting key when the policy is `ASK`.
            The answer applies to that key only.

    Returns:
        True if anything was added or changed.
    """
    changed = False
    for key, new_value in incoming.items():
        status = classify_key(previous, key, new_value)
        if status is KeyStatus.NEW:
            previous[key] = new_value
            changed = True
        elif status is KeyStatus.CONFLICT:
            if should_overwrite(policy, key, previous[key], new_value, prompt):
                LOG.info(f"Previous '{key}' value will be overwritten by the new value")
                previous[key] = new_value
                changed = True
            else:
                LOG.info(f"Previous '{key}' value is conserved")
    return changed
