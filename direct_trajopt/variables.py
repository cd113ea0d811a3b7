"""Define the kinds of decision variables in a transcribed trajectory."""

from enum import IntEnum
from typing import TypeVar

T = TypeVar("T")

class VariableKind(IntEnum):
    """Tag for a trajectory component.

    The integer values fix the order in which the kinds are flattened into the
    NLP decision vector, so they must never be reordered.
    """

    INITIAL_TIME = 0
    FINAL_TIME = 1
    STATES = 2
    CONTROLS = 3
    MULTIPLIERS = 4
    DERIVATIVES = 5
    SLACKS = 6
    PARAMETERS = 7

    @property
    def is_time_invariant(self) -> bool:
        """Whether the kind carries a single column rather than one per grid point."""
        return self in (VariableKind.INITIAL_TIME, VariableKind.FINAL_TIME, VariableKind.PARAMETERS)

# Mapping from variable kind to a numeric (ndarray) or symbolic (casadi.MX) matrix
Variables = dict[VariableKind, T]


def get_sorted_variable_kinds(variables: Variables) -> list[VariableKind]:
    """Get the kinds present in the container in their flattening order."""
    return sorted(variables.keys())
