"""Test the trajectory iterate and its resampling."""

import numpy as np
import pytest

from direct_trajopt.iterate import InconsistentIterateError, InvalidResampleTimesError, Iterate, Solution
from direct_trajopt.variables import VariableKind


@pytest.fixture
def five_point_iterate():
    """Create an iterate on 5 uniform times with a linear, a cubic and a constant row."""
    times = np.linspace(0.0, 1.0, 5)
    yield Iterate(
        times=times,
        variables={
            VariableKind.STATES: np.vstack((2 * times + 1, times**3)),
            VariableKind.CONTROLS: np.full((1, 5), 4.0),
            VariableKind.PARAMETERS: np.array([[7.0]]),
            VariableKind.FINAL_TIME: np.array([[1.0]]),
        },
        names={VariableKind.STATES: ["line", "cubic"], VariableKind.CONTROLS: ["constant"]},
    )


class TestIterateValidation:
    """Test the shape checks of an iterate."""

    def test_mismatched_columns(self):
        """Verify a trajectory kind must have one column per time."""
        with pytest.raises(InconsistentIterateError):
            Iterate(times=[0.0, 0.5, 1.0], variables={VariableKind.STATES: np.zeros((2, 4))})

    def test_time_invariant_kind_with_many_columns(self):
        """Verify parameters hold a single column."""
        with pytest.raises(InconsistentIterateError):
            Iterate(times=[0.0, 0.5, 1.0], variables={VariableKind.PARAMETERS: np.zeros((1, 3))})

    def test_mismatched_names(self):
        """Verify the names must label every row."""
        with pytest.raises(InconsistentIterateError):
            Iterate(
                times=[0.0, 1.0],
                variables={VariableKind.STATES: np.zeros((2, 2))},
                names={VariableKind.STATES: ["only_one"]},
            )

    def test_get_trajectory_by_name(self, five_point_iterate):
        """Verify rows are retrieved by their names."""
        assert np.allclose(five_point_iterate.get_trajectory("cubic"), five_point_iterate.times**3)
        with pytest.raises(KeyError):
            five_point_iterate.get_trajectory("missing")

    def test_solution_is_an_iterate(self):
        """Verify the solution carries the solver outcome on top of the trajectory."""
        solution = Solution(times=[0.0, 1.0], variables={VariableKind.STATES: [[0.0, 1.0]]}, success=True, status="ok")
        assert isinstance(solution, Iterate)
        assert solution.success and solution.status == "ok"
        assert solution.variables[VariableKind.STATES].shape == (1, 2)


class TestResample:
    """Test the interpolation of an iterate onto new times."""

    def test_resample_interior_points(self, five_point_iterate):
        """Verify polynomial rows are reproduced at interior times."""
        new_times = np.array([0.2, 0.5, 0.9])
        resampled = five_point_iterate.resample(new_times)

        assert np.allclose(resampled.times, new_times)
        states = resampled.variables[VariableKind.STATES]
        assert np.allclose(states[0], 2 * new_times + 1)
        assert np.allclose(states[1], new_times**3)
        assert np.allclose(resampled.variables[VariableKind.CONTROLS], 4.0)
        assert np.allclose(resampled.variables[VariableKind.PARAMETERS], 7.0)
        assert resampled.names == five_point_iterate.names

    def test_resample_keeps_original(self, five_point_iterate):
        """Verify resampling copies instead of modifying the iterate."""
        original_states = five_point_iterate.variables[VariableKind.STATES].copy()
        five_point_iterate.resample([0.0, 0.25, 1.0])
        assert five_point_iterate.num_times == 5
        assert np.array_equal(five_point_iterate.variables[VariableKind.STATES], original_states)

    def test_resample_endpoints(self, five_point_iterate):
        """Verify the values at the ends of the time span are preserved."""
        resampled = five_point_iterate.resample(np.linspace(0.0, 1.0, 9))
        assert np.allclose(resampled.variables[VariableKind.STATES][:, 0], [1.0, 0.0])
        assert np.allclose(resampled.variables[VariableKind.STATES][:, -1], [3.0, 1.0])

    def test_resample_with_repeated_times(self, five_point_iterate):
        """Verify non-decreasing times with repeated values are accepted."""
        resampled = five_point_iterate.resample([0.5, 0.5, 1.0])
        assert np.allclose(resampled.variables[VariableKind.STATES][0], [2.0, 2.0, 3.0])

    @pytest.mark.parametrize("num_times", [2, 3, 4])
    def test_resample_few_points(self, num_times):
        """Verify linear rows are reproduced with the spline degree limited by the number of times."""
        times = np.linspace(1.0, 2.0, num_times)
        iterate = Iterate(times=times, variables={VariableKind.STATES: [3 * times - 1]})
        resampled = iterate.resample([1.1, 1.7])
        assert np.allclose(resampled.variables[VariableKind.STATES], [[2.3, 4.1]])

    @pytest.mark.parametrize(
        "new_times",
        [
            [-0.1, 0.5, 1.0],
            [0.0, 0.5, 1.2],
            [0.2, 0.1, 0.3],
            [0.5],
        ],
    )
    def test_reject_invalid_times(self, five_point_iterate, new_times):
        """Verify times outside the span, decreasing or too few are rejected."""
        with pytest.raises(InvalidResampleTimesError):
            five_point_iterate.resample(new_times)

    def test_reject_single_time_iterate(self):
        """Verify an iterate with a single time cannot be interpolated."""
        iterate = Iterate(times=[0.0], variables={VariableKind.STATES: [[1.0]]})
        with pytest.raises(InvalidResampleTimesError):
            iterate.resample([0.0, 0.0])
