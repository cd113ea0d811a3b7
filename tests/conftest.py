"""Conftest for direct collocation trajectory optimization."""

import casadi as ca
import numpy as np
import pytest

from direct_trajopt.dynamics.base import DynamicsModel
from direct_trajopt.dynamics.pendulum import PlanarPointPendulumDynamicsModel, SlidingMassDynamicsModel
from direct_trajopt.problem import (
    Bounds,
    ControlInfo,
    MultiplierInfo,
    PathConstraint,
    Problem,
    SlackInfo,
    StateInfo,
)


def pytest_addoption(parser):
    """Add command line options for pytest."""
    parser.addoption(
        "--show-plots",
        action="store_true",
        default=False,
        help="Show plots during tests (default: False)",
    )


@pytest.fixture(scope="session")
def show_plots(request):
    """Fixture to determine if plots should be shown during tests."""
    return request.config.getoption("--show-plots")


class ConstantRateDynamicsModel(DynamicsModel):
    """Define a single state growing at a constant rate, without control."""

    REQUIRED_STATE_NUM: int = 1
    REQUIRED_CTRL_NUM: int = 0

    RATE = 3.0

    def continuous_time_state_equation(self, time, state, control, multiplier, parameters):
        """xdot = c"""
        return self.RATE + 0 * state[0]


@pytest.fixture
def constant_rate_problem():
    """Create a problem whose only state starts at zero and grows at a constant rate for 2 time units."""
    yield Problem(
        states=(StateInfo("x", initial_bounds=Bounds(0.0, 0.0)),),
        dynamics_model=ConstantRateDynamicsModel(),
        time_final_bounds=Bounds(2.0, 2.0),
    )


def minimum_effort(time, states, controls, parameters):
    """Integrand of the squared control effort."""
    return ca.sumsqr(controls)


"""
Below defines a rest to rest transfer of a sliding mass over unit distance in
unit time with minimal effort. The force is linear in time, from 12 to -12,
and the minimal cost is 48.
"""


@pytest.fixture
def sliding_mass_problem():
    """Create the minimal effort rest to rest problem of the sliding mass."""
    yield Problem(
        states=(
            StateInfo("position", Bounds(-5.0, 5.0), initial_bounds=Bounds(0.0, 0.0), final_bounds=Bounds(1.0, 1.0)),
            StateInfo("speed", Bounds(-5.0, 5.0), initial_bounds=Bounds(0.0, 0.0), final_bounds=Bounds(0.0, 0.0)),
        ),
        controls=(ControlInfo("force", Bounds(-50.0, 50.0)),),
        dynamics_model=SlidingMassDynamicsModel(),
        integral_cost=minimum_effort,
    )


"""
Below defines a point mass pendulum held by a rod constraint, released at rest
at 45 degrees from the vertical. Only the horizontal position is pinned at the
start; the rod constraint places the mass below the pivot.
"""


@pytest.fixture
def planar_pendulum_problem():
    """Create the released pendulum problem with a kinematic constraint and a speed path constraint."""
    initial_x = np.sin(np.pi / 4) * PlanarPointPendulumDynamicsModel.LENG_PEND
    yield Problem(
        states=(
            StateInfo("x", Bounds(-1.5, 1.5), initial_bounds=Bounds(initial_x, initial_x)),
            StateInfo("y", Bounds(-1.5, 0.0)),
            StateInfo("vx", Bounds(-10.0, 10.0), initial_bounds=Bounds(0.0, 0.0)),
            StateInfo("vy", Bounds(-10.0, 10.0), initial_bounds=Bounds(0.0, 0.0)),
        ),
        controls=(ControlInfo("fx", Bounds(-10.0, 10.0)),),
        multipliers=(MultiplierInfo("tension"),),
        slacks=(SlackInfo("x_slack"), SlackInfo("y_slack")),
        path_constraints=(
            PathConstraint(
                "speed_limit",
                1,
                lambda time, states, controls, parameters: states[2] ** 2 + states[3] ** 2,
                Bounds(0.0, 25.0),
            ),
        ),
        dynamics_model=PlanarPointPendulumDynamicsModel(),
        integral_cost=minimum_effort,
        time_final_bounds=Bounds(0.3, 0.3),
    )
