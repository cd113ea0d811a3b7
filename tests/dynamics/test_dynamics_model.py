"""Test the dynamics model interface with the pendulum systems."""

import casadi as ca
import numpy as np
import pytest

from direct_trajopt.dynamics.base import DynamicsModel, InconsistentInputDimensionError, RequiredDimensionNotSetError
from direct_trajopt.dynamics.pendulum import (
    GRAVITY_ACCEL,
    PlanarPointPendulumDynamicsModel,
    SinglePendulumDynamicsModel,
    SlidingMassDynamicsModel,
)


class UndeclaredDynamicsModel(DynamicsModel):
    """Define a model missing its required dimensions."""

    def continuous_time_state_equation(self, time, state, control, multiplier, parameters):
        return state


class TestDynamicsModel:
    """Test the numeric wrapper and defaults of the dynamics model."""

    def test_single_pendulum_at_rest(self):
        """Verify the hanging pendulum stays at rest and the torque accelerates it."""
        single_pendulum = SinglePendulumDynamicsModel()
        assert np.allclose(single_pendulum.xdot(0.0, [0.0, 0.0], [0.0]), [0.0, 0.0])

        expected_accel = 1.0 / (single_pendulum.MASS_PEND * single_pendulum.LENG_PEND**2)
        assert np.allclose(single_pendulum.xdot(0.0, [0.0, 0.0], [1.0]), [0.0, expected_accel])

    def test_single_pendulum_gravity_torque(self):
        """Verify the gravity restoring term at a quarter turn."""
        single_pendulum = SinglePendulumDynamicsModel()
        xdot = single_pendulum.xdot(0.0, [np.pi / 2, 0.5], [0.0])
        assert np.allclose(xdot, [0.5, -GRAVITY_ACCEL / single_pendulum.LENG_PEND])

    @pytest.mark.parametrize(
        "state, control, multiplier",
        [
            ([0.0], [0.0], None),
            ([0.0, 0.0], [0.0, 1.0], None),
            ([0.0, 0.0], [0.0], [1.0]),
        ],
    )
    def test_inconsistent_input_dimension(self, state, control, multiplier):
        """Verify mismatched numeric inputs are rejected."""
        with pytest.raises(InconsistentInputDimensionError):
            SlidingMassDynamicsModel().xdot(0.0, state, control, multiplier)

    def test_required_dimension_not_set(self):
        """Verify a model without declared dimensions cannot be evaluated."""
        with pytest.raises(RequiredDimensionNotSetError):
            UndeclaredDynamicsModel().xdot(0.0, [0.0], [0.0])

    def test_default_implicit_residual(self):
        """Verify the default residual vanishes at the explicit derivative."""
        sliding_mass = SlidingMassDynamicsModel()
        state, control = ca.DM([0.5, 1.0]), ca.DM([4.0])
        derivative = ca.DM([1.0, 4.0 / sliding_mass.MASS])
        residual = sliding_mass.implicit_residual(0.0, state, control, ca.DM(0, 1), derivative, ca.DM(0, 1))
        assert np.allclose(np.asarray(residual), 0.0)

    def test_default_kinematic_constraints_are_empty(self):
        """Verify models without kinematic constraints return an empty column of the input type."""
        errors = SlidingMassDynamicsModel().kinematic_constraint_equations(0.0, ca.SX.sym("x", 2), ca.SX.sym("u"), None)
        assert isinstance(errors, ca.SX)
        assert errors.shape == (0, 1)


class TestPlanarPointPendulum:
    """Test the pendulum held by a rod constraint."""

    def test_rod_constraint_on_circle(self):
        """Verify the constraint error vanishes on the circle of the rod length."""
        pendulum = PlanarPointPendulumDynamicsModel()
        angle = 0.3
        state = ca.DM([np.sin(angle), -np.cos(angle), 0.0, 0.0])
        errors = pendulum.kinematic_constraint_equations(0.0, state, ca.DM([0.0]), ca.DM(0, 1))
        assert np.isclose(float(errors), 0.0)

    def test_tension_balances_gravity(self):
        """Verify the hanging mass is in equilibrium with the matching tension."""
        pendulum = PlanarPointPendulumDynamicsModel()
        # Hanging straight down, the rod force -2 * lambda * y balances the weight
        tension = pendulum.MASS * GRAVITY_ACCEL / (2 * pendulum.LENG_PEND)
        xdot = pendulum.xdot(0.0, [0.0, -pendulum.LENG_PEND, 0.0, 0.0], [0.0], [tension])
        assert np.allclose(xdot, 0.0)
