"""Define the optimal control problem descriptor consumed by the transcription."""

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import NamedTuple

import casadi as ca
import numpy as np

from direct_trajopt.dynamics.base import DynamicsModel
from direct_trajopt.variables import VariableKind


# Input labels of the compiled per-point functions
POINT_FUNCTION_INPUTS = ["time", "states", "controls", "parameters"]


class InvalidBoundsError(ValueError):
    """Raise when a lower bound exceeds its upper bound."""


class RedundantLabelError(ValueError):
    """Raise when the same name labels more than one variable or constraint."""


class InconsistentProblemDimensionError(ValueError):
    """Raise when the declared variables do not agree with the dynamics model or evaluators."""


@dataclass(frozen=True)
class Bounds:
    """Optional [lower, upper] pair, an unset side is infinite."""

    lower: float = None
    upper: float = None

    def __post_init__(self):
        """Validate the ordering of the bounds."""
        if self.lower is not None and self.upper is not None and self.lower > self.upper:
            raise InvalidBoundsError(f"Lower bound {self.lower} is greater than upper bound {self.upper}.")

    def is_set(self) -> bool:
        """Whether either side of the bounds is given."""
        return self.lower is not None or self.upper is not None

    @property
    def finite_lower(self) -> float:
        """Lower bound with unset expanded to -inf."""
        return -np.inf if self.lower is None else float(self.lower)

    @property
    def finite_upper(self) -> float:
        """Upper bound with unset expanded to +inf."""
        return np.inf if self.upper is None else float(self.upper)


@dataclass(frozen=True)
class StateInfo:
    """Declare a state with bounds over the whole trajectory and at its ends."""

    name: str
    bounds: Bounds = Bounds()
    initial_bounds: Bounds = Bounds()
    final_bounds: Bounds = Bounds()


@dataclass(frozen=True)
class ControlInfo:
    """Declare a control with bounds over the whole trajectory and at its ends."""

    name: str
    bounds: Bounds = Bounds()
    initial_bounds: Bounds = Bounds()
    final_bounds: Bounds = Bounds()


@dataclass(frozen=True)
class MultiplierInfo:
    """Declare the Lagrange multiplier of one kinematic constraint equation."""

    name: str
    bounds: Bounds = Bounds()


@dataclass(frozen=True)
class SlackInfo:
    """Declare a slack variable used by schemes with interior collocation points."""

    name: str
    bounds: Bounds = Bounds()


@dataclass(frozen=True)
class ParameterInfo:
    """Declare a time invariant parameter."""

    name: str
    bounds: Bounds = Bounds()


class PathConstraintInfo(NamedTuple):
    """Name and number of equations of a path constraint."""

    name: str
    size: int


@dataclass(frozen=True)
class PathConstraint:
    """Declare a path constraint g(t, x, u, p) enforced within bounds at every mesh point."""

    name: str
    size: int
    function: Callable
    bounds: Bounds = Bounds(0.0, 0.0)

    @property
    def info(self) -> PathConstraintInfo:
        """Get the name and size of the constraint."""
        return PathConstraintInfo(self.name, self.size)


class DynamicsMode(Enum):
    """Whether the dynamics are enforced with explicit derivatives or implicit residuals."""

    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


@dataclass(frozen=True)
class Problem:
    """Read-only description of an optimal control problem.

    The evaluators are plain Python callables written with CasADi operations;
    the problem compiles them into casadi.Function objects on first use:

        path constraint:  g(t, x, u, p) -> column of PathConstraint.size
        integral cost:    L(t, x, u, p) -> scalar, integrated over the time horizon
        endpoint cost:    E(tf, x(tf), p) -> scalar

    Time is normalized into the horizon [initial time, final time], both of
    which are decision variables bounded by time_initial_bounds and
    time_final_bounds.
    """

    states: tuple[StateInfo, ...]
    dynamics_model: DynamicsModel
    controls: tuple[ControlInfo, ...] = ()
    parameters: tuple[ParameterInfo, ...] = ()
    multipliers: tuple[MultiplierInfo, ...] = ()
    slacks: tuple[SlackInfo, ...] = ()
    path_constraints: tuple[PathConstraint, ...] = ()
    integral_cost: Callable = None
    endpoint_cost: Callable = None
    time_initial_bounds: Bounds = Bounds(0.0, 0.0)
    time_final_bounds: Bounds = Bounds(1.0, 1.0)
    dynamics_mode: DynamicsMode = DynamicsMode.EXPLICIT

    def __post_init__(self):
        """Validate the declaration before any transcription is built."""
        # Coerce the collections into tuples so the descriptor stays immutable
        for attribute in ("states", "controls", "parameters", "multipliers", "slacks", "path_constraints"):
            object.__setattr__(self, attribute, tuple(getattr(self, attribute)))

        labels = [info.name for info in self.states + self.controls + self.parameters + self.multipliers + self.slacks]
        labels += [constraint.name for constraint in self.path_constraints]
        if redundant := sorted(label for label, count in Counter(labels).items() if count > 1):
            raise RedundantLabelError(f"Labels {redundant} are used more than once.")

        self.dynamics_model.check_required_dimensions()
        for label, declared, required in (
            ("states", len(self.states), self.dynamics_model.REQUIRED_STATE_NUM),
            ("controls", len(self.controls), self.dynamics_model.REQUIRED_CTRL_NUM),
            ("parameters", len(self.parameters), self.dynamics_model.REQUIRED_PARAM_NUM),
            ("multipliers", len(self.multipliers), self.dynamics_model.NUM_KINEMATIC_CONSTRAINT_EQUATIONS),
        ):
            if declared != required:
                raise InconsistentProblemDimensionError(
                    f"Problem declares {declared} {label} but {type(self.dynamics_model).__name__} requires {required}."
                )

        if len(self.slacks) > len(self.states):
            raise InconsistentProblemDimensionError(
                f"Problem declares {len(self.slacks)} slacks, more than its {len(self.states)} states."
            )
        for constraint in self.path_constraints:
            if constraint.size <= 0:
                raise InconsistentProblemDimensionError(
                    f"Path constraint '{constraint.name}' must have a positive size."
                )

    def get_num_states(self) -> int:
        """Get the number of states."""
        return len(self.states)

    def get_num_controls(self) -> int:
        """Get the number of controls."""
        return len(self.controls)

    def get_num_parameters(self) -> int:
        """Get the number of parameters."""
        return len(self.parameters)

    def get_num_multipliers(self) -> int:
        """Get the number of kinematic constraint multipliers."""
        return len(self.multipliers)

    def get_num_slacks(self) -> int:
        """Get the number of slack variables."""
        return len(self.slacks)

    def get_num_derivatives(self) -> int:
        """Get the number of state derivative variables, only present in implicit mode."""
        return self.get_num_states() if self.dynamics_mode is DynamicsMode.IMPLICIT else 0

    def get_num_kinematic_constraint_equations(self) -> int:
        """Get the number of kinematic constraint equations of the dynamics model."""
        return self.dynamics_model.NUM_KINEMATIC_CONSTRAINT_EQUATIONS

    def get_path_constraint_infos(self) -> list[PathConstraintInfo]:
        """Get the ordered names and sizes of the path constraints."""
        return [constraint.info for constraint in self.path_constraints]

    def get_variable_names(self, kind: VariableKind) -> list[str]:
        """Get the names labelling the rows of a variable kind."""
        if kind is VariableKind.INITIAL_TIME:
            return ["initial_time"]
        if kind is VariableKind.FINAL_TIME:
            return ["final_time"]
        if kind is VariableKind.DERIVATIVES:
            return [f"{info.name}_dot" for info in self.states][: self.get_num_derivatives()]
        infos = {
            VariableKind.STATES: self.states,
            VariableKind.CONTROLS: self.controls,
            VariableKind.MULTIPLIERS: self.multipliers,
            VariableKind.SLACKS: self.slacks,
            VariableKind.PARAMETERS: self.parameters,
        }[kind]
        return [info.name for info in infos]

    def _symbols(self):
        """Create the symbolic inputs of a per-point function."""
        return (
            ca.SX.sym("time"),
            ca.SX.sym("states", self.get_num_states()),
            ca.SX.sym("controls", self.get_num_controls()),
            ca.SX.sym("multipliers", self.get_num_multipliers()),
            ca.SX.sym("parameters", self.get_num_parameters()),
        )

    @staticmethod
    def _check_output_size(name: str, output, expected_rows: int):
        """Make sure an evaluator produced a column of the expected length."""
        output = ca.SX(output)
        if output.numel() != expected_rows:
            raise InconsistentProblemDimensionError(
                f"Evaluator '{name}' returned {output.numel()} values, expected {expected_rows}."
            )
        return ca.reshape(output, expected_rows, 1)

    @cached_property
    def dynamics_function(self) -> ca.Function:
        """Compile xdot = f(t, x, u, lambda, p)."""
        time, states, controls, multipliers, parameters = self._symbols()
        xdot = self.dynamics_model.continuous_time_state_equation(time, states, controls, multipliers, parameters)
        xdot = self._check_output_size("dynamics", xdot, self.get_num_states())
        return ca.Function(
            "dynamics",
            [time, states, controls, multipliers, parameters],
            [xdot],
            ["time", "states", "controls", "multipliers", "parameters"],
            ["xdot"],
        )

    @cached_property
    def implicit_residual_function(self) -> ca.Function:
        """Compile the implicit residual r(t, x, u, lambda, xdot, p)."""
        time, states, controls, multipliers, parameters = self._symbols()
        derivatives = ca.SX.sym("derivatives", self.get_num_states())
        residual = self.dynamics_model.implicit_residual(time, states, controls, multipliers, derivatives, parameters)
        residual = self._check_output_size("implicit_residual", residual, self.get_num_states())
        return ca.Function(
            "implicit_residual",
            [time, states, controls, multipliers, derivatives, parameters],
            [residual],
            ["time", "states", "controls", "multipliers", "derivatives", "parameters"],
            ["residual"],
        )

    @cached_property
    def kinematic_constraint_function(self) -> ca.Function:
        """Compile the kinematic constraint errors c(t, x, u, p)."""
        time, states, controls, _, parameters = self._symbols()
        errors = self.dynamics_model.kinematic_constraint_equations(time, states, controls, parameters)
        errors = self._check_output_size(
            "kinematic_constraints", errors, self.get_num_kinematic_constraint_equations()
        )
        inputs = [time, states, controls, parameters]
        return ca.Function("kinematic_constraints", inputs, [errors], POINT_FUNCTION_INPUTS, ["errors"])

    def path_constraint_function(self, index: int) -> ca.Function:
        """Compile the path constraint at the given position."""
        return self._path_constraint_functions[index]

    @cached_property
    def _path_constraint_functions(self) -> list[ca.Function]:
        """Compile every path constraint once."""
        time, states, controls, _, parameters = self._symbols()
        inputs = [time, states, controls, parameters]
        functions = []
        for constraint in self.path_constraints:
            values = constraint.function(time, states, controls, parameters)
            values = self._check_output_size(constraint.name, values, constraint.size)
            functions.append(ca.Function(constraint.name, inputs, [values], POINT_FUNCTION_INPUTS, ["values"]))
        return functions

    @cached_property
    def integral_cost_function(self) -> ca.Function:
        """Compile the integrand of the cost, zero if none is declared."""
        time, states, controls, _, parameters = self._symbols()
        integrand = 0 if self.integral_cost is None else self.integral_cost(time, states, controls, parameters)
        integrand = self._check_output_size("integral_cost", integrand, 1)
        inputs = [time, states, controls, parameters]
        return ca.Function("integral_cost", inputs, [integrand], POINT_FUNCTION_INPUTS, ["integrand"])

    @cached_property
    def endpoint_cost_function(self) -> ca.Function:
        """Compile the endpoint cost, zero if none is declared."""
        final_time, final_states = ca.SX.sym("final_time"), ca.SX.sym("final_states", self.get_num_states())
        parameters = ca.SX.sym("parameters", self.get_num_parameters())
        cost = 0 if self.endpoint_cost is None else self.endpoint_cost(final_time, final_states, parameters)
        cost = self._check_output_size("endpoint_cost", cost, 1)
        return ca.Function(
            "endpoint_cost",
            [final_time, final_states, parameters],
            [cost],
            ["final_time", "final_states", "parameters"],
            ["cost"],
        )
