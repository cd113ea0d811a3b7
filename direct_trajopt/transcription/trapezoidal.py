"""Trapezoidal collocation, the grid being the mesh."""

import casadi as ca
import numpy as np

from direct_trajopt.config import SolverConfig
from direct_trajopt.problem import Problem
from direct_trajopt.transcription.base import Transcription
from direct_trajopt.variables import VariableKind


class TrapezoidalTranscription(Transcription):
    """Enforce the dynamics with the trapezoidal rule between consecutive mesh points."""

    def __init__(self, problem: Problem, config: SolverConfig = None):
        super().__init__(problem, config)
        self.create_variables_and_set_bounds(self.mesh, num_defects_per_grid_point=problem.get_num_states())

    def create_quadrature_coefficients_impl(self) -> np.ndarray:
        """Half the interval width on each side of every mesh interval."""
        interval_widths = np.diff(self.grid)
        coefficients = np.zeros(self.num_grid_points)
        coefficients[:-1] += 0.5 * interval_widths
        coefficients[1:] += 0.5 * interval_widths
        return coefficients

    def create_kinematic_constraint_indices_impl(self) -> np.ndarray:
        """Every grid point is a mesh point."""
        return np.ones((1, self.num_grid_points))

    def calc_defects_impl(self, states, state_derivatives):
        """x[k+1] - x[k] - h / 2 * (xdot[k] + xdot[k+1]) for every mesh interval."""
        num_states = states.shape[0]
        interval_widths = ca.repmat(self.times[:, 1:] - self.times[:, :-1], num_states, 1)
        return (
            states[:, 1:]
            - states[:, :-1]
            - 0.5 * interval_widths * (state_derivatives[:, 1:] + state_derivatives[:, :-1])
        )

    def get_defect_labels(self) -> list[str]:
        """Each defect row belongs to a state."""
        return self.problem.get_variable_names(VariableKind.STATES)
