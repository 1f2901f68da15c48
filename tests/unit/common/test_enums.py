"""
Tests for the `enums.py` module.
"""

import pytest

from mddb.common.enums import ConflictPolicy


@pytest.mark.parametrize(
    "conserve, overwrite, expected",
    [
        (False, False, ConflictPolicy.ASK),
        (True, False, ConflictPolicy.CONSERVE),
        (False, True, ConflictPolicy.OVERWRITE),
        (True, True, ConflictPolicy.CONSERVE),
    ],
)
def test_policy_from_flags(conserve: bool, overwrite: bool, expected: ConflictPolicy):
    """
    Test building a policy from the command line flags.

    Args:
        conserve: The conserve flag.
        overwrite: The overwrite flag.
        expected: The expected policy.
    """
    assert ConflictPolicy.from_flags(conserve, overwrite) is expected


def test_policy_values():
    """Test that policies can be read back from their values."""
    assert ConflictPolicy("overwrite") is ConflictPolicy.OVERWRITE
