"""Define the structured, time indexed trajectory exchanged with the transcription."""

from dataclasses import dataclass, field, replace

import numpy as np
from numpy import ndarray
from scipy.interpolate import make_interp_spline

from direct_trajopt.variables import VariableKind, get_sorted_variable_kinds
from trajopt_util.logconfig import create_logger

LOG = create_logger(__name__)

# Highest degree of the spline used to resample trajectories
MAX_RESAMPLE_SPLINE_DEGREE = 5


class InconsistentIterateError(ValueError):
    """Raise when the shape of a variable does not agree with the times or its names."""


class InvalidResampleTimesError(ValueError):
    """Raise when an iterate cannot be resampled onto the requested times."""


@dataclass
class Iterate:
    """Values of every variable kind at a sequence of absolute times.

    Trajectory kinds (states, controls, ...) hold one column per time; the
    initial time, final time and parameters hold a single column.
    """

    times: ndarray
    variables: dict = field(default_factory=dict)
    names: dict = field(default_factory=dict)
    iteration: int = -1

    def __post_init__(self):
        """Coerce the arrays and validate their shapes."""
        self.times = np.asarray(self.times, dtype=float).reshape(-1)
        self.variables = {
            VariableKind(kind): np.atleast_2d(np.asarray(value, dtype=float)) for kind, value in self.variables.items()
        }
        self.names = {VariableKind(kind): list(names) for kind, names in self.names.items()}
        self.validate()

    def validate(self):
        """Check the number of columns of each kind against the times and the rows against the names."""
        num_times = self.num_times
        for kind in get_sorted_variable_kinds(self.variables):
            value = self.variables[kind]
            if value.ndim != 2:
                raise InconsistentIterateError(f"Variable {kind.name} must be a 2D array, got {value.ndim} dimensions.")

            expected_columns = 1 if kind.is_time_invariant else num_times
            # An empty kind may be stored without columns
            if value.shape[1] != expected_columns and value.size:
                raise InconsistentIterateError(
                    f"Variable {kind.name} has {value.shape[1]} columns, expected {expected_columns}."
                )

            if kind in self.names and len(self.names[kind]) != value.shape[0]:
                raise InconsistentIterateError(
                    f"Variable {kind.name} has {value.shape[0]} rows but {len(self.names[kind])} names."
                )

    @property
    def num_times(self) -> int:
        """Number of time points of the trajectory."""
        return self.times.size

    @property
    def initial_time(self) -> float:
        """Initial time of the trajectory."""
        return float(self.times[0])

    @property
    def final_time(self) -> float:
        """Final time of the trajectory."""
        return float(self.times[-1])

    def get(self, kind: VariableKind) -> ndarray:
        """Get the values of a kind, an empty matrix if the iterate does not carry it."""
        return self.variables.get(kind, np.zeros((0, 1 if kind.is_time_invariant else self.num_times)))

    def get_trajectory(self, name: str) -> ndarray:
        """Get the row labelled with the given name in any kind."""
        for kind, names in self.names.items():
            if name in names and kind in self.variables:
                return self.variables[kind][names.index(name)]
        raise KeyError(f"No variable named '{name}' in the iterate.")

    def resample(self, new_times) -> "Iterate":
        """Interpolate the trajectory kinds onto new times, returning a new iterate.

        Each row is interpolated with an interpolating B-spline of the highest
        odd degree not exceeding min(num_times - 1, 5), quadratic for exactly
        three times. Time invariant
        kinds are copied. The new times must be non-decreasing and lie within
        the current time span.
        """
        new_times = np.asarray(new_times, dtype=float).reshape(-1)
        if self.num_times < 2:
            raise InvalidResampleTimesError(
                f"Cannot resample an iterate with {self.num_times} time(s), need at least 2."
            )
        if np.any(np.diff(self.times) <= 0):
            raise InvalidResampleTimesError("Cannot resample an iterate whose times are not strictly increasing.")
        if new_times.size < 2:
            raise InvalidResampleTimesError(f"Expected at least 2 new times, got {new_times.size}.")
        if new_times[0] < self.times[0]:
            raise InvalidResampleTimesError(
                f"New initial time {new_times[0]} is earlier than the current initial time {self.times[0]}."
            )
        if new_times[-1] > self.times[-1]:
            raise InvalidResampleTimesError(
                f"New final time {new_times[-1]} is later than the current final time {self.times[-1]}."
            )
        if np.any(np.diff(new_times) < 0):
            raise InvalidResampleTimesError("New times must be non-decreasing.")

        # Largest odd degree supported by the number of points, quadratic being the only even exception
        degree = min(self.num_times - 1, MAX_RESAMPLE_SPLINE_DEGREE)
        if degree > 2 and degree % 2 == 0:
            degree -= 1
        LOG.debug(f"Resampling {self.num_times} times onto {new_times.size} times with spline degree {degree}.")

        new_variables = {}
        for kind, value in self.variables.items():
            if kind.is_time_invariant:
                new_variables[kind] = value.copy()
            elif value.shape[0] == 0:
                new_variables[kind] = np.zeros((0, new_times.size))
            else:
                spline = make_interp_spline(self.times, value.T, k=degree)
                new_variables[kind] = np.atleast_2d(spline(new_times).T)

        return replace(self, times=new_times, variables=new_variables, names=dict(self.names))


@dataclass
class Solution(Iterate):
    """Iterate returned by a solve, with the outcome reported by the NLP solver."""

    objective: float = np.nan
    success: bool = False
    status: str = ""
    num_iterations: int = 0
    solver_duration: float = 0.0
    stats: dict = field(default_factory=dict)
