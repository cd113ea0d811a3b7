"""Define the dynamics model interface consumed by the transcription."""

from functools import wraps

import casadi as ca
import numpy as np


class RequiredDimensionNotSetError(SyntaxError):
    """Raise when a required dimension is not set for inherited class."""


class InconsistentInputDimensionError(ValueError):
    """Raise when input vector dimension is mismatched."""


class DynamicsModel:
    """Base dynamics model that supplies the right hand side of the state equation.

    Derived classes implement the equations with CasADi operations (ca.sin,
    ca.vertcat, ...) so that the same code can be evaluated on symbolic
    expressions while transcribing and on numeric arrays afterwards. Every
    method is a pure function of its inputs.
    """

    # Define required number of elements in the state/control/parameter vector
    REQUIRED_STATE_NUM: int = None
    REQUIRED_CTRL_NUM: int = None
    REQUIRED_PARAM_NUM: int = 0

    # Number of algebraic equations enforced by kinematic constraints, each
    # of them paired with a Lagrange multiplier entering the dynamics
    NUM_KINEMATIC_CONSTRAINT_EQUATIONS: int = 0

    def with_single_timestamp_dimension_check(method):
        """Decorator to check the dimension of numeric input at a single time."""

        @wraps(method)
        def wrapper(self, time, state, control, multiplier=None, parameters=None):
            """Wrap with the input of the decorated method."""
            assert isinstance(self, DynamicsModel), "Method decorator only works for DynamicsModel class."
            self.check_required_dimensions()

            # Ensure the input numpy dimensions are 1D array, defaulting optional inputs to empty
            state = np.atleast_1d(np.asarray(state, dtype=float))
            control = np.atleast_1d(np.asarray(control, dtype=float))
            multiplier = np.zeros(0) if multiplier is None else np.atleast_1d(np.asarray(multiplier, dtype=float))
            parameters = np.zeros(0) if parameters is None else np.atleast_1d(np.asarray(parameters, dtype=float))

            for label, vector, expected in (
                ("state", state, self.REQUIRED_STATE_NUM),
                ("control", control, self.REQUIRED_CTRL_NUM),
                ("multiplier", multiplier, self.NUM_KINEMATIC_CONSTRAINT_EQUATIONS),
                ("parameter", parameters, self.REQUIRED_PARAM_NUM),
            ):
                assert vector.ndim == 1, f"{label.capitalize()} vector must be a 1D array."
                if vector.size != expected:
                    raise InconsistentInputDimensionError(f"Input {label} has size {vector.size}, expect {expected}.")

            # Evaluate on casadi numeric matrices so the CasADi operations in the equations apply
            columns = (ca.DM(vector.reshape(-1, 1)) for vector in (state, control, multiplier, parameters))
            return method(self, float(time), *columns)

        return wrapper

    def check_required_dimensions(self):
        """Make sure the derived class declared its state and control dimensions."""
        if self.REQUIRED_STATE_NUM is None or self.REQUIRED_CTRL_NUM is None:
            raise RequiredDimensionNotSetError(f"Required input vector dimensions are not defined for {self.__class__}")

    @with_single_timestamp_dimension_check
    def xdot(self, time, state, control, multiplier, parameters):
        """A dimension checked numeric wrapper for continuous_time_state_equation."""
        xdot = self.continuous_time_state_equation(time, state, control, multiplier, parameters)
        return np.asarray(ca.DM(xdot)).reshape(-1)

    def continuous_time_state_equation(self, time, state, control, multiplier, parameters):
        """State equation xdot = f(t, x, u, lambda, p) for a single timestamp.

        Must return a column of length REQUIRED_STATE_NUM.
        """
        raise NotImplementedError(
            f"Continuous time state equation is not implemented for {self.__class__.__name__}. "
            "Please implement this method in the derived class."
        )

    def implicit_residual(self, time, state, control, multiplier, derivative, parameters):
        """Residual of the state equation in implicit form, zero when the derivative is consistent.

        Models with a naturally implicit form (e.g. mass matrix times acceleration)
        may override this; the default uses the explicit state equation.
        """
        return derivative - self.continuous_time_state_equation(time, state, control, multiplier, parameters)

    def kinematic_constraint_equations(self, time, state, control, parameters):
        """Algebraic constraint errors, a column of length NUM_KINEMATIC_CONSTRAINT_EQUATIONS."""
        if self.NUM_KINEMATIC_CONSTRAINT_EQUATIONS:
            raise NotImplementedError(
                f"{self.__class__.__name__} declares {self.NUM_KINEMATIC_CONSTRAINT_EQUATIONS} kinematic constraint "
                "equations but does not implement kinematic_constraint_equations."
            )
        matrix_type = type(state) if isinstance(state, (ca.MX, ca.SX, ca.DM)) else ca.DM
        return matrix_type(0, 1)
