"""Transcribe an optimal control problem into a nonlinear program.

The transcription owns the layout of the NLP: a symbolic matrix per variable
kind with one column per grid point, their bounds, and the constraint vector
grouped by mesh interval. Collocation schemes derive from Transcription and
supply the grid, the quadrature weights, the grid points enforcing kinematic
constraints and the defect equations.
"""

import threading
from dataclasses import dataclass, field

import casadi as ca
import numpy as np

from direct_trajopt.config import SolverConfig, build_solver_options
from direct_trajopt.initial_guess import guess_from_bounds, random_within_bounds
from direct_trajopt.iterate import InconsistentIterateError, Iterate, Solution
from direct_trajopt.problem import Bounds, DynamicsMode, Problem
from direct_trajopt.variables import VariableKind, get_sorted_variable_kinds
from trajopt_util.complexity import ComplexityMonitor, Stopwatch
from trajopt_util.logconfig import create_logger

LOG = create_logger(__name__)


class TranscriptionInternalError(RuntimeError):
    """Raise when the layout built by a transcription scheme is inconsistent."""


class TranscriptionStateError(RuntimeError):
    """Raise when a transcription operation is called in the wrong state."""


@dataclass
class Constraints:
    """Constraint values grouped by kind, numeric (ndarray) or symbolic (casadi.MX).

    defects hold one column per mesh interval, residuals one per grid point,
    kinematic and each path block one per mesh point.
    """

    defects: object
    residuals: object
    kinematic: object
    path: list = field(default_factory=list)


class Transcription:
    """Base class of direct collocation transcriptions.

    Derived classes must call create_variables_and_set_bounds() at the end of
    their constructor, once the scheme specific methods are usable.
    """

    def __init__(self, problem: Problem, config: SolverConfig = None):
        """Store the problem and config, the layout is created by the derived class."""
        self.problem = problem
        self.config = config or SolverConfig()
        self.mesh = np.asarray(self.config.mesh, dtype=float)
        self.monitor = ComplexityMonitor()

        # Layout, populated by create_variables_and_set_bounds
        self.grid = None
        self.num_grid_points = -1
        self.num_mesh_points = -1
        self.num_mesh_intervals = -1
        self.num_points_ignoring_constraints = -1
        self.num_defects_per_grid_point = -1
        self.num_residuals = -1
        self.num_constraints = -1
        self.variables = {}
        self.lower_bounds = {}
        self.upper_bounds = {}
        self.kinematic_constraint_indices = None
        self.times = None
        self.duration = None

        # Symbolic NLP, populated on the first solve
        self._objective = None
        self._constraints = None
        self._constraints_lower_bounds = None
        self._constraints_upper_bounds = None
        self._is_initialized = False
        self._is_transcribed = False
        self._solve_lock = threading.Lock()

    def create_variables_and_set_bounds(self, grid, num_defects_per_grid_point: int):
        """Allocate the symbolic variables on the grid and apply the problem bounds."""
        if self._is_initialized:
            raise TranscriptionStateError("Variables and bounds of the transcription are already created.")

        self.grid = np.asarray(grid, dtype=float).reshape(-1)
        self._validate_grid()
        self.num_grid_points = self.grid.size
        self.num_mesh_points = self.mesh.size
        self.num_mesh_intervals = self.num_mesh_points - 1
        self.num_points_ignoring_constraints = self.num_grid_points - self.num_mesh_points
        self.num_defects_per_grid_point = int(num_defects_per_grid_point)
        self.num_residuals = self.problem.get_num_derivatives()

        # The layout is usable by the scheme methods from here on
        self._is_initialized = True
        self.kinematic_constraint_indices = self.create_kinematic_constraint_indices()

        # Allocate one symbolic matrix per variable kind
        problem, num_grid_points = self.problem, self.num_grid_points
        shapes = {
            VariableKind.INITIAL_TIME: (1, 1),
            VariableKind.FINAL_TIME: (1, 1),
            VariableKind.STATES: (problem.get_num_states(), num_grid_points),
            VariableKind.CONTROLS: (problem.get_num_controls(), num_grid_points),
            VariableKind.MULTIPLIERS: (problem.get_num_multipliers(), num_grid_points),
            VariableKind.DERIVATIVES: (problem.get_num_derivatives(), num_grid_points),
            VariableKind.SLACKS: (problem.get_num_slacks(), num_grid_points),
            VariableKind.PARAMETERS: (problem.get_num_parameters(), 1),
        }
        for kind, shape in shapes.items():
            self.variables[kind] = ca.MX.sym(kind.name.lower(), *shape)
            self.lower_bounds[kind] = np.full(shape, -np.inf)
            self.upper_bounds[kind] = np.full(shape, np.inf)

        self.duration = self.variables[VariableKind.FINAL_TIME] - self.variables[VariableKind.INITIAL_TIME]
        self.times = self.create_times(
            self.variables[VariableKind.INITIAL_TIME], self.variables[VariableKind.FINAL_TIME]
        )

        self._set_bounds_from_problem()
        self.num_constraints = (
            problem.get_num_kinematic_constraint_equations() * self.num_mesh_points
            + sum(info.size for info in problem.get_path_constraint_infos()) * self.num_mesh_points
            + self.num_residuals * self.num_grid_points
            + self.num_defects_per_grid_point * self.num_mesh_intervals
        )
        LOG.info(
            f"{type(self).__name__} with {self.num_grid_points} grid points and {self.num_mesh_points} mesh points: "
            f"{self.num_variables} variables, {self.num_constraints} constraints."
        )

    def _validate_grid(self):
        """Make sure the scheme built a grid containing every mesh point."""
        if self.grid.size < 2 or np.any(np.diff(self.grid) <= 0):
            raise TranscriptionInternalError("Grid must have at least 2 strictly increasing points.")
        if self.grid[0] != self.mesh[0] or self.grid[-1] != self.mesh[-1]:
            raise TranscriptionInternalError("First and last grid points must be the first and last mesh points.")
        if not np.all(np.isin(self.mesh, self.grid)):
            raise TranscriptionInternalError("Every mesh point must be a grid point.")

    def _set_bounds_from_problem(self):
        """Apply the bounds declared by the problem to the variables."""
        problem = self.problem
        everywhere, first, last = slice(None), 0, self.num_grid_points - 1
        self.set_variable_bounds(VariableKind.INITIAL_TIME, 0, 0, problem.time_initial_bounds)
        self.set_variable_bounds(VariableKind.FINAL_TIME, 0, 0, problem.time_final_bounds)

        for kind, infos in ((VariableKind.STATES, problem.states), (VariableKind.CONTROLS, problem.controls)):
            for row, info in enumerate(infos):
                self.set_variable_bounds(kind, row, everywhere, info.bounds)
                if info.initial_bounds.is_set():
                    self.set_variable_bounds(kind, row, first, info.initial_bounds)
                if info.final_bounds.is_set():
                    self.set_variable_bounds(kind, row, last, info.final_bounds)

        for row, info in enumerate(problem.multipliers):
            self.set_variable_bounds(VariableKind.MULTIPLIERS, row, everywhere, info.bounds)

        if problem.get_num_derivatives():
            self.set_variable_bounds(
                VariableKind.DERIVATIVES, everywhere, everywhere, Bounds(*self.config.implicit_derivative_bounds)
            )

        # Slacks are only free where kinematic constraints are not enforced
        enforced = np.flatnonzero(self.kinematic_constraint_indices[0])
        ignored = np.flatnonzero(self.kinematic_constraint_indices[0] == 0)
        for row, info in enumerate(problem.slacks):
            self.set_variable_bounds(VariableKind.SLACKS, row, ignored, info.bounds)
            self.set_variable_bounds(VariableKind.SLACKS, row, enforced, Bounds(0.0, 0.0))

        for row, info in enumerate(problem.parameters):
            self.set_variable_bounds(VariableKind.PARAMETERS, row, 0, info.bounds)

    def set_variable_bounds(self, kind: VariableKind, rows, columns, bounds: Bounds):
        """Write the bounds into a block of the bound matrices of a kind, infinite when unset."""
        LOG.debug(f"Setting bounds [{bounds.finite_lower}, {bounds.finite_upper}] of {kind.name}.")
        self.lower_bounds[kind][rows, columns] = bounds.finite_lower
        self.upper_bounds[kind][rows, columns] = bounds.finite_upper

    def _require_initialized(self):
        """Make sure the derived class created the layout."""
        if not self._is_initialized:
            raise TranscriptionStateError(
                f"{type(self).__name__} must call create_variables_and_set_bounds() in its constructor."
            )

    @property
    def num_variables(self) -> int:
        """Total number of NLP decision variables."""
        return sum(value.numel() for value in self.variables.values())

    def create_times(self, initial_time, final_time):
        """Map the normalized grid onto absolute times, symbolically or numerically."""
        self._require_initialized()
        if any(isinstance(time, (ca.MX, ca.SX)) for time in (initial_time, final_time)):
            return (final_time - initial_time) * ca.DM(self.grid).T + initial_time
        return (final_time - initial_time) * self.grid + initial_time

    def create_quadrature_coefficients(self) -> np.ndarray:
        """Get the quadrature weights of the integral cost on the normalized grid."""
        self._require_initialized()
        coefficients = np.asarray(self.create_quadrature_coefficients_impl(), dtype=float).reshape(-1)
        if coefficients.size != self.num_grid_points:
            raise TranscriptionInternalError(
                f"create_quadrature_coefficients_impl() must return {self.num_grid_points} coefficients, "
                f"but {coefficients.size} were returned."
            )
        return coefficients

    def create_kinematic_constraint_indices(self) -> np.ndarray:
        """Get the row flagging the grid points where kinematic constraints are enforced."""
        self._require_initialized()
        indices = np.asarray(self.create_kinematic_constraint_indices_impl(), dtype=float)
        if indices.shape != (1, self.num_grid_points):
            raise TranscriptionInternalError(
                f"create_kinematic_constraint_indices_impl() must return a row vector of shape "
                f"[1, {self.num_grid_points}], but a matrix of shape {list(indices.shape)} was returned."
            )
        if np.count_nonzero(indices) != self.num_mesh_points:
            raise TranscriptionInternalError(
                f"Kinematic constraints must be enforced at {self.num_mesh_points} grid points, "
                f"got {np.count_nonzero(indices)}."
            )
        return indices

    def create_quadrature_coefficients_impl(self) -> np.ndarray:
        """Quadrature weights of the scheme, one per grid point."""
        raise NotImplementedError(f"Quadrature coefficients are not implemented for {type(self).__name__}.")

    def create_kinematic_constraint_indices_impl(self) -> np.ndarray:
        """Row of shape [1, num_grid_points], nonzero where kinematic constraints are enforced."""
        raise NotImplementedError(f"Kinematic constraint indices are not implemented for {type(self).__name__}.")

    def calc_defects_impl(self, states, state_derivatives):
        """Defect equations of the scheme, one column per mesh interval."""
        raise NotImplementedError(f"Defects are not implemented for {type(self).__name__}.")

    def get_defect_labels(self) -> list[str]:
        """Labels of the defect rows used when reporting constraint values."""
        return [f"defect_{row}" for row in range(self.num_defects_per_grid_point)]

    def eval_on_trajectory(self, point_function: ca.Function, inputs, time_indices):
        """Evaluate a per point function at the selected grid columns.

        The function takes time first, then one argument per kind in inputs,
        then the parameters. Returns one column per selected grid point.
        """
        self._require_initialized()
        time_indices = [int(index) for index in time_indices]
        num_points = len(time_indices)
        arguments = [self.times[:, time_indices]]
        arguments += [self.variables[kind][:, time_indices] for kind in inputs]
        arguments.append(ca.repmat(self.variables[VariableKind.PARAMETERS], 1, num_points))

        if self.config.is_parallel:
            mapped_function = point_function.map(num_points, "thread", self.config.resolve_num_workers())
        else:
            mapped_function = point_function.map(num_points, "serial")
        return mapped_function(*arguments)

    def _transcribe(self):
        """Build the symbolic objective and constraints of the NLP."""
        problem, variables = self.problem, self.variables
        all_points = range(self.num_grid_points)
        constrained_points = np.flatnonzero(self.kinematic_constraint_indices[0])

        # Compute the state derivatives, from the dynamics or as variables bound by residuals
        if problem.dynamics_mode is DynamicsMode.IMPLICIT:
            state_derivatives = variables[VariableKind.DERIVATIVES]
            residuals = self.eval_on_trajectory(
                problem.implicit_residual_function,
                [VariableKind.STATES, VariableKind.CONTROLS, VariableKind.MULTIPLIERS, VariableKind.DERIVATIVES],
                all_points,
            )
        else:
            state_derivatives = self.eval_on_trajectory(
                problem.dynamics_function,
                [VariableKind.STATES, VariableKind.CONTROLS, VariableKind.MULTIPLIERS],
                all_points,
            )
            residuals = ca.MX(0, self.num_grid_points)

        defects = self.calc_defects_impl(variables[VariableKind.STATES], state_derivatives)
        kinematic = self.eval_on_trajectory(
            problem.kinematic_constraint_function, [VariableKind.STATES, VariableKind.CONTROLS], constrained_points
        )
        path = [
            self.eval_on_trajectory(
                problem.path_constraint_function(index),
                [VariableKind.STATES, VariableKind.CONTROLS],
                constrained_points,
            )
            for index in range(len(problem.path_constraints))
        ]
        self._constraints = Constraints(defects=defects, residuals=residuals, kinematic=kinematic, path=path)

        # Compute the objective from the quadrature of the integrand and the endpoint cost
        integrand = self.eval_on_trajectory(
            problem.integral_cost_function, [VariableKind.STATES, VariableKind.CONTROLS], all_points
        )
        quadrature = ca.DM(self.create_quadrature_coefficients())
        endpoint_cost = problem.endpoint_cost_function(
            variables[VariableKind.FINAL_TIME],
            variables[VariableKind.STATES][:, -1],
            variables[VariableKind.PARAMETERS],
        )
        self._objective = self.duration * ca.mtimes(integrand, quadrature) + endpoint_cost

        # Bounds of the constraints, equalities except for path constraints
        def zeros(num_rows, num_columns):
            return np.zeros((num_rows, num_columns))

        lower = Constraints(
            defects=zeros(self.num_defects_per_grid_point, self.num_mesh_intervals),
            residuals=zeros(self.num_residuals, self.num_grid_points),
            kinematic=zeros(problem.get_num_kinematic_constraint_equations(), self.num_mesh_points),
            path=[np.full((pc.size, self.num_mesh_points), pc.bounds.finite_lower) for pc in problem.path_constraints],
        )
        upper = Constraints(
            defects=zeros(self.num_defects_per_grid_point, self.num_mesh_intervals),
            residuals=zeros(self.num_residuals, self.num_grid_points),
            kinematic=zeros(problem.get_num_kinematic_constraint_equations(), self.num_mesh_points),
            path=[np.full((pc.size, self.num_mesh_points), pc.bounds.finite_upper) for pc in problem.path_constraints],
        )
        self._constraints_lower_bounds = self.flatten_constraints(lower)
        self._constraints_upper_bounds = self.flatten_constraints(upper)
        self._is_transcribed = True

    @staticmethod
    def flatten_variables(variables: dict):
        """Concatenate the variables column-major in the order of their kinds."""
        values = [variables[kind] for kind in get_sorted_variable_kinds(variables)]
        if all(isinstance(value, np.ndarray) for value in values):
            return np.concatenate([value.reshape(-1, order="F") for value in values]) if values else np.zeros(0)
        return ca.veccat(*values)

    def expand_variables(self, flat) -> dict:
        """Split a flat vector into numeric matrices with the shapes of the variables."""
        self._require_initialized()
        flat = np.asarray(flat, dtype=float).reshape(-1)
        if flat.size != self.num_variables:
            raise TranscriptionInternalError(f"Expected {self.num_variables} variables, got {flat.size}.")

        expanded, offset = {}, 0
        for kind in get_sorted_variable_kinds(self.variables):
            num_rows, num_columns = self.variables[kind].shape
            size = num_rows * num_columns
            expanded[kind] = flat[offset : offset + size].reshape((num_rows, num_columns), order="F")
            offset += size
        return expanded

    def _constraint_columns(self, constraints: Constraints):
        """Iterate the (matrix, column) blocks of the constraints, grouped by mesh interval.

        For every mesh point: its kinematic column and path columns; then, unless
        it is the last mesh point, the residual columns of the grid points before
        the next mesh point, followed by the defect column of the interval. A grid
        point at the next mesh point belongs to the next group. The residual of
        the last grid point comes last.
        """
        grid_index = 0
        for mesh_index in range(self.num_mesh_points):
            yield constraints.kinematic, mesh_index
            for path in constraints.path:
                yield path, mesh_index
            if mesh_index < self.num_mesh_intervals:
                while self.grid[grid_index] < self.mesh[mesh_index + 1]:
                    yield constraints.residuals, grid_index
                    grid_index += 1
                yield constraints.defects, mesh_index
        yield constraints.residuals, self.num_grid_points - 1

    def flatten_constraints(self, constraints: Constraints):
        """Concatenate the constraints into a column grouped by mesh interval."""
        self._require_initialized()
        pieces, offset = [], 0
        for matrix, column in self._constraint_columns(constraints):
            if matrix.shape[0]:
                pieces.append(matrix[:, column])
                offset += matrix.shape[0]

        if offset != self.num_constraints:
            raise TranscriptionInternalError(f"Flattened {offset} constraints, expected {self.num_constraints}.")
        if all(isinstance(piece, np.ndarray) for piece in pieces):
            return np.concatenate(pieces) if pieces else np.zeros(0)
        return ca.vertcat(*pieces)

    def expand_constraints(self, flat) -> Constraints:
        """Split a flat numeric constraint vector into its blocks."""
        self._require_initialized()
        flat = np.asarray(flat, dtype=float).reshape(-1)
        expanded = Constraints(
            defects=np.zeros((self.num_defects_per_grid_point, self.num_mesh_intervals)),
            residuals=np.zeros((self.num_residuals, self.num_grid_points)),
            kinematic=np.zeros((self.problem.get_num_kinematic_constraint_equations(), self.num_mesh_points)),
            path=[np.zeros((info.size, self.num_mesh_points)) for info in self.problem.get_path_constraint_infos()],
        )

        offset = 0
        for matrix, column in self._constraint_columns(expanded):
            num_rows = matrix.shape[0]
            if num_rows:
                matrix[:, column] = flat[offset : offset + num_rows]
                offset += num_rows

        if offset != self.num_constraints or flat.size != self.num_constraints:
            raise TranscriptionInternalError(
                f"Expanded {offset} of {flat.size} constraint values, expected {self.num_constraints}."
            )
        return expanded

    def _create_iterate(self, variables: dict, iteration: int = -1) -> Iterate:
        """Wrap numeric variables into an iterate on this transcription's grid."""
        times = self.create_times(
            float(variables[VariableKind.INITIAL_TIME][0, 0]), float(variables[VariableKind.FINAL_TIME][0, 0])
        )
        names = {kind: self.problem.get_variable_names(kind) for kind in variables}
        return Iterate(times=times, variables=variables, names=names, iteration=iteration)

    def create_initial_guess_from_bounds(self) -> Iterate:
        """Create an iterate at the middle of the bounds, zero where unbounded."""
        self._require_initialized()
        variables = {
            kind: guess_from_bounds(self.lower_bounds[kind], self.upper_bounds[kind]) for kind in self.variables
        }
        return self._create_iterate(variables)

    def create_random_iterate_within_bounds(self, rng: np.random.Generator = None) -> Iterate:
        """Create an iterate drawn uniformly within the bounds."""
        self._require_initialized()
        rng = np.random.default_rng() if rng is None else rng
        variables = {
            kind: random_within_bounds(self.lower_bounds[kind], self.upper_bounds[kind], rng=rng)
            for kind in get_sorted_variable_kinds(self.variables)
        }
        return self._create_iterate(variables)

    def _variables_from_guess(self, guess: Iterate) -> dict:
        """Bring a guess onto this grid and complete the kinds it does not carry."""
        bounds_guess = self.create_initial_guess_from_bounds().variables
        initial_time = guess.variables.get(VariableKind.INITIAL_TIME, np.full((1, 1), guess.initial_time))
        final_time = guess.variables.get(VariableKind.FINAL_TIME, np.full((1, 1), guess.final_time))
        expected_times = self.create_times(float(initial_time[0, 0]), float(final_time[0, 0]))

        # Resample a guess built on another grid
        if guess.num_times != self.num_grid_points or not np.allclose(guess.times, expected_times):
            LOG.info(f"Resampling the guess from {guess.num_times} to {self.num_grid_points} times.")
            guess = guess.resample(expected_times)

        variables = {}
        for kind in get_sorted_variable_kinds(self.variables):
            expected_shape = self.variables[kind].shape
            if kind is VariableKind.INITIAL_TIME:
                value = initial_time
            elif kind is VariableKind.FINAL_TIME:
                value = final_time
            else:
                value = guess.variables.get(kind)
            if value is None or (value.size == 0 and expected_shape[0]):
                value = bounds_guess[kind]
            if value.shape != expected_shape and value.size != 0:
                raise InconsistentIterateError(
                    f"Guess for {kind.name} has shape {list(value.shape)}, expected {list(expected_shape)}."
                )
            variables[kind] = value.reshape(expected_shape)
        return variables

    def solve(self, initial_guess: Iterate = None) -> Solution:
        """Transcribe on first use, solve the NLP from the guess and expand the result."""
        self._require_initialized()
        if not self._solve_lock.acquire(blocking=False):
            raise TranscriptionStateError(f"{type(self).__name__} is already solving.")

        try:
            if not self._is_transcribed:
                with self.monitor.track("transcribe"):
                    self._transcribe()

            guess = self.create_initial_guess_from_bounds() if initial_guess is None else initial_guess
            guess_flat = self.flatten_variables(self._variables_from_guess(guess))

            nlp = {
                "x": self.flatten_variables(self.variables),
                "f": self._objective,
                "g": self.flatten_constraints(self._constraints),
            }
            solver = ca.nlpsol("nlp", self.config.optim_solver, nlp, build_solver_options(self.config))

            LOG.info(
                f"Solving with {self.config.optim_solver}: {self.num_variables} variables, "
                f"{self.num_constraints} constraints."
            )
            stopwatch = Stopwatch()
            with self.monitor.track("solve_nlp"):
                result = solver(
                    x0=guess_flat,
                    lbx=self.flatten_variables(self.lower_bounds),
                    ubx=self.flatten_variables(self.upper_bounds),
                    lbg=self._constraints_lower_bounds,
                    ubg=self._constraints_upper_bounds,
                )
            stats = solver.stats()
            status = str(stats.get("return_status", ""))
            success = bool(stats.get("success", False))
            LOG.info(f"Solver finished in {stopwatch.elapsed_time_formatted()} with status '{status}'.")

            with self.monitor.track("expand"):
                iteration = int(stats.get("iter_count", -1))
                iterate = self._create_iterate(self.expand_variables(result["x"]), iteration=iteration)
                solution = Solution(
                    times=iterate.times,
                    variables=iterate.variables,
                    names=iterate.names,
                    iteration=iteration,
                    objective=float(result["f"]),
                    success=success,
                    status=status,
                    num_iterations=iteration,
                    solver_duration=stopwatch.elapsed_time,
                    stats=stats,
                )
                if self.config.verbosity >= 2:
                    self.print_constraint_values(solution, self.expand_constraints(result["g"]))
        finally:
            self._solve_lock.release()

        if not success:
            LOG.warning(f"{self.config.optim_solver} failed to converge with status '{status}'.")
        if self.config.verbosity >= 1:
            self.monitor.report_complexity()
        return solution

    def print_constraint_values(self, iterate: Iterate, constraints: Constraints):
        """Log the largest magnitude of every constraint row and the time at which it occurs."""
        problem = self.problem
        mesh_times = iterate.times[np.flatnonzero(self.kinematic_constraint_indices[0])]

        def describe(label, matrix, times):
            """Format the row maxima of a constraint block."""
            lines = [f"{label}:"]
            if matrix.size == 0:
                return lines + ["    (none)"]
            for row_label, row in zip(row_labels[label], matrix):
                column = int(np.argmax(np.abs(row)))
                lines.append(f"    {row_label:<30} max |value| {abs(row[column]):.3e} at time {times[column]:.4g}")
            return lines

        row_labels = {
            "defects": self.get_defect_labels(),
            "residuals": problem.get_variable_names(VariableKind.STATES)[: self.num_residuals],
            "kinematic": [f"kinematic_{row}" for row in range(problem.get_num_kinematic_constraint_equations())],
        }
        report = ["Constraint values:"]
        report += describe("defects", constraints.defects, mesh_times[:-1])
        report += describe("residuals", constraints.residuals, iterate.times)
        report += describe("kinematic", constraints.kinematic, mesh_times)
        for path_constraint, values in zip(problem.path_constraints, constraints.path):
            # Report the distance outside the bounds rather than the raw value
            violation = np.maximum(
                np.maximum(path_constraint.bounds.finite_lower - values, values - path_constraint.bounds.finite_upper),
                0,
            )
            row_labels[path_constraint.name] = [f"{path_constraint.name}_{row}" for row in range(path_constraint.size)]
            report += describe(path_constraint.name, violation, mesh_times)
        LOG.info("\n".join(report))
