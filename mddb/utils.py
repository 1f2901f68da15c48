##############################################################################
# Copyright (c) MDDB Project developers. See top-level LICENSE and COPYRIGHT
# files for dates and other details. No copyright assignment is required to
# contribute to MDDB.
##############################################################################

"""
Module for project-wide utility functions.
"""

import logging
import re
from copy import deepcopy
from types import SimpleNamespace
from typing import Any, Dict, Hashable, List, Union

import yaml
from bson import ObjectId
from bson.errors import InvalidId


LOG = logging.getLogger(__name__)

ACCESSION_PATTERN = re.compile(r"^[0-9A-Z]{5}$")


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def nested_dict_to_namespaces(dic: Dict) -> SimpleNamespace:
    """
    Convert a nested dictionary into a nested SimpleNamespace structure.

    Args:
        dic: The nested dictionary to be converted.

    Returns:
        A SimpleNamespace object representing the nested structure of the input dictionary.

    Raises:
        TypeError: If the input is not a dictionary.
    """

    def recurse(dic):
        if not isinstance(dic, dict):
            return dic
        for key, val in list(dic.items()):
            dic[key] = recurse(val)
        return SimpleNamespace(**dic)

    if not isinstance(dic, dict):
        raise TypeError(f"{dic} is not a dict")

    new_dic = deepcopy(dic)
    return recurse(new_dic)


def is_accession(value: Any) -> bool:
    """
    Check whether a value looks like a project accession (5 uppercase base-36 characters).

    Args:
        value: The value to check.

    Returns:
        True if the value is formatted as an accession.
    """
    return isinstance(value, str) and bool(ACCESSION_PATTERN.match(value))


def coerce_object_id(value: Union[str, ObjectId]) -> Union[str, ObjectId]:
    """
    Turn a 24-character hex string into an `ObjectId`. Anything else is returned
    untouched so that documents with non-ObjectId keys can still be queried.

    Args:
        value: The raw identifier.

    Returns:
        An `ObjectId` when the value can be parsed as one, the original value otherwise.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return value


def get_path_values(document: Dict, path: str) -> List[Any]:
    """
    Dereference a dotted path inside a document, flattening arrays found along
    the way the same way MongoDB does when matching a dotted field.

    For example, `mds.files.id` on `{"mds": [{"files": [{"id": 1}, {"id": 2}]}]}`
    yields `[1, 2]`.

    Only one level of nesting is flattened per path step. Arrays of arrays are
    not expanded any further.

    Args:
        document: The document to read from.
        path: A dotted field path.

    Returns:
        Every value found at the end of the path. Missing paths yield an empty list.
    """
    values = [document]
    for key in path.split("."):
        next_values = []
        for value in values:
            if not isinstance(value, dict) or key not in value:
                continue
            found = value[key]
            if isinstance(found, list):
                next_values.extend(found)
            else:
                next_values.append(found)
        values = next_values
    return values


def get_hashable_path_values(document: Dict, path: str) -> List[Hashable]:
    """
    Same as `get_path_values` but drops values that cannot be used as set members.

    Args:
        document: The document to read from.
        path: A dotted field path.

    Returns:
        Every hashable value found at the end of the path.
    """
    hashable = []
    for value in get_path_values(document, path):
        if isinstance(value, (dict, list)):
            LOG.debug(f"Skipping non-scalar value at '{path}' in document {document.get('_id')}")
            continue
        hashable.append(value)
    return hashable


def values_are_equal(previous: Any, new: Any) -> bool:
    """
    Compare two metadata values. Arrays and objects are compared by content and
    booleans are never considered equal to numbers.

    Args:
        previous: The value already stored.
        new: The incoming value.

    Returns:
        True if both values are equivalent.
    """
    if isinstance(previous, bool) != isinstance(new, bool):
        return False
    if isinstance(previous, dict) and isinstance(new, dict):
        if previous.keys() != new.keys():
            return False
        return all(values_are_equal(previous[key], new[key]) for key in previous)
    if isinstance(previous, list) and isinstance(new, list):
        if len(previous) != len(new):
            return False
        return all(values_are_equal(a, b) for a, b in zip(previous, new))
    if isinstance(previous, (dict, list)) or isinstance(new, (dict, list)):
        return False
    return previous == new


def plural(word: str, count: int, include_count: bool = False) -> str:
    """
    Return the plural of a word when the count requires it.

    Args:
        word: The singular word.
        count: The number of items.
        include_count: If True, prefix the result with the count.

    Returns:
        The word in its right form.
    """
    if count == 1:
        result = word
    elif word.endswith("y"):
        result = f"{word[:-1]}ies"
    elif word.endswith("is"):
        result = f"{word[:-2]}es"
    elif word.endswith("s"):
        result = f"{word}es"
    else:
        result = f"{word}s"
    return f"{count} {result}" if include_count else result
