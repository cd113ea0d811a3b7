"""Hermite-Simpson collocation, with a collocation point at the middle of every mesh interval."""

import casadi as ca
import numpy as np

from direct_trajopt.config import SolverConfig
from direct_trajopt.problem import Problem
from direct_trajopt.transcription.base import Transcription
from direct_trajopt.variables import VariableKind


class HermiteSimpsonTranscription(Transcription):
    """Enforce the dynamics with Simpson quadrature and Hermite interpolation at interval midpoints.

    Grid points alternate between mesh points (even indices) and midpoints
    (odd indices). Each mesh interval has 2 * num_states defect rows: the
    Simpson rule relating the states at the interval ends, then the Hermite
    interpolation fixing the state at the midpoint. Slack variables at the
    midpoint relax the first interpolation rows, which lets the midpoint
    multipliers correct for kinematic constraints enforced only at mesh points.
    """

    def __init__(self, problem: Problem, config: SolverConfig = None):
        super().__init__(problem, config)
        midpoints = 0.5 * (self.mesh[:-1] + self.mesh[1:])
        grid = np.empty(2 * self.mesh.size - 1)
        grid[0::2], grid[1::2] = self.mesh, midpoints
        self.create_variables_and_set_bounds(grid, num_defects_per_grid_point=2 * problem.get_num_states())

    @property
    def mesh_grid_indices(self) -> list[int]:
        """Grid indices of the mesh points."""
        return list(range(0, self.num_grid_points, 2))

    @property
    def midpoint_grid_indices(self) -> list[int]:
        """Grid indices of the interval midpoints."""
        return list(range(1, self.num_grid_points, 2))

    def create_quadrature_coefficients_impl(self) -> np.ndarray:
        """Simpson weights h/6, 4h/6, h/6 over every mesh interval."""
        interval_widths = np.diff(self.mesh)
        coefficients = np.zeros(self.num_grid_points)
        coefficients[0:-1:2] += interval_widths / 6
        coefficients[1::2] += 4 * interval_widths / 6
        coefficients[2::2] += interval_widths / 6
        return coefficients

    def create_kinematic_constraint_indices_impl(self) -> np.ndarray:
        """Kinematic constraints are enforced at mesh points only."""
        indices = np.zeros((1, self.num_grid_points))
        indices[0, self.mesh_grid_indices] = 1
        return indices

    def calc_defects_impl(self, states, state_derivatives):
        """Simpson defects stacked over Hermite interpolation defects, one column per mesh interval."""
        mesh_indices, midpoint_indices = self.mesh_grid_indices, self.midpoint_grid_indices
        start_indices, end_indices = mesh_indices[:-1], mesh_indices[1:]
        num_states, num_intervals = states.shape[0], self.num_mesh_intervals

        # Unpack the states and their derivatives at the interval ends and midpoints
        x_start, x_mid, x_end = states[:, start_indices], states[:, midpoint_indices], states[:, end_indices]
        f_start = state_derivatives[:, start_indices]
        f_mid = state_derivatives[:, midpoint_indices]
        f_end = state_derivatives[:, end_indices]
        interval_widths = ca.repmat(self.times[:, end_indices] - self.times[:, start_indices], num_states, 1)

        # Slacks relax the leading interpolation rows
        slacks = self.variables[VariableKind.SLACKS][:, midpoint_indices]
        slacks = ca.vertcat(slacks, ca.MX(num_states - slacks.shape[0], num_intervals))

        simpson = x_end - x_start - interval_widths / 6 * (f_start + 4 * f_mid + f_end)
        interpolation = x_mid - (0.5 * (x_start + x_end) + interval_widths / 8 * (f_start - f_end)) - slacks
        return ca.vertcat(simpson, interpolation)

    def get_defect_labels(self) -> list[str]:
        """Simpson rows then interpolation rows, per state."""
        state_names = self.problem.get_variable_names(VariableKind.STATES)
        return [f"{name}_simpson" for name in state_names] + [f"{name}_interpolation" for name in state_names]
