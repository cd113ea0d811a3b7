"""Dynamics models of pendulums and point masses."""

import casadi as ca

from direct_trajopt.dynamics.base import DynamicsModel

# Standard gravitational acceleration in m/s^2
GRAVITY_ACCEL = 9.80665


class SlidingMassDynamicsModel(DynamicsModel):
    """Define a dynamics model of a mass sliding without friction on a line."""

    # Define required number of elements in the state/control vector
    REQUIRED_STATE_NUM: int = 2
    REQUIRED_CTRL_NUM: int = 1

    MASS = 2.0

    def continuous_time_state_equation(self, time, state, control, multiplier, parameters):
        """Double integrator, state is (position, speed) and control is the applied force."""
        return ca.vertcat(state[1], control[0] / self.MASS)


class SinglePendulumDynamicsModel(DynamicsModel):
    """Define a rigid pendulum in its angle coordinate, the minimal coordinate counterpart of the point pendulum.

    State:
        theta (angle from the downward vertical, counterclockwise)
        omega (angular rate)
    Control:
        torque (applied at the pivot, counterclockwise)
    """

    REQUIRED_STATE_NUM: int = 2
    REQUIRED_CTRL_NUM: int = 1

    MASS_PEND = 1
    LENG_PEND = 0.5

    def continuous_time_state_equation(self, time, state, control, multiplier, parameters):
        """Gravity restores the angle, the torque acts on the inertia m * L^2."""
        inertia = self.MASS_PEND * self.LENG_PEND**2
        omega_dot = control[0] / inertia - GRAVITY_ACCEL / self.LENG_PEND * ca.sin(state[0])
        return ca.vertcat(state[1], omega_dot)


class PlanarPointPendulumDynamicsModel(DynamicsModel):
    """Define a point mass pendulum in Cartesian coordinates held by a rod constraint.

    State:
        x, y (position of the mass, y pointing up)
        vx, vy (velocity of the mass)
    Control:
        fx (horizontal force applied to the mass)
    Multiplier:
        lambda (rod tension scaled so the constraint force is -2 * lambda * position)
    Kinematic constraint:
        x^2 + y^2 - L^2 = 0
    """

    REQUIRED_STATE_NUM: int = 4
    REQUIRED_CTRL_NUM: int = 1
    NUM_KINEMATIC_CONSTRAINT_EQUATIONS: int = 1

    MASS = 1.0
    LENG_PEND = 1.0

    def continuous_time_state_equation(self, time, state, control, multiplier, parameters):
        """Newton's law with the constraint force supplied by the multiplier."""
        x, y, vx, vy = state[0], state[1], state[2], state[3]
        tension = multiplier[0]
        ax = (control[0] - 2 * x * tension) / self.MASS
        ay = -GRAVITY_ACCEL - 2 * y * tension / self.MASS
        return ca.vertcat(vx, vy, ax, ay)

    def kinematic_constraint_equations(self, time, state, control, parameters):
        """Position level rod length constraint."""
        return state[0] ** 2 + state[1] ** 2 - self.LENG_PEND**2
