"""Test the blocking evaluator pool and the parallel evaluation on a trajectory."""

import threading

import numpy as np
import pytest

from direct_trajopt.iterate import Iterate
from direct_trajopt.parallel import EvaluatorPool, evaluate_on_grid
from direct_trajopt.variables import VariableKind

# Time given to a thread to reach a blocking call
SETTLE_TIME = 0.2


class TestEvaluatorPool:
    """Test the take/leave contract of the pool."""

    def test_take_and_leave(self):
        """Test objects are handed out last in, first out and counted."""
        pool = EvaluatorPool(["a", "b"])
        assert pool.size() == 2
        assert pool.take() == "b"
        assert pool.size() == 1
        pool.leave("b")
        assert pool.size() == 2

    def test_empty_pool_times_out(self):
        """Test an empty pool does not create objects."""
        pool = EvaluatorPool()
        with pytest.raises(TimeoutError):
            pool.take(timeout=0.05)

    def test_third_take_blocks_until_leave(self):
        """Test a third take on a pool of 2 waits for one of the objects to be left."""
        pool = EvaluatorPool(["first", "second"])
        taken = [pool.take(), pool.take()]
        received = []
        done = threading.Event()

        def take_third():
            received.append(pool.take(timeout=5.0))
            done.set()

        thread = threading.Thread(target=take_third, daemon=True)
        thread.start()
        assert not done.wait(SETTLE_TIME), "Take should block while the pool is empty"

        pool.leave(taken[0])
        assert done.wait(5.0)
        thread.join(5.0)
        assert received == [taken[0]]
        assert pool.size() == 0

    def test_leave_wakes_exactly_one_waiter(self):
        """Test a single leave unblocks only one of two waiting threads."""
        pool = EvaluatorPool(["only"])
        held = pool.take()
        received = []
        lock = threading.Lock()

        def take_and_hold():
            obj = pool.take(timeout=5.0)
            with lock:
                received.append(obj)

        threads = [threading.Thread(target=take_and_hold, daemon=True) for _ in range(2)]
        for thread in threads:
            thread.start()

        pool.leave(held)
        threading.Event().wait(SETTLE_TIME)
        with lock:
            assert received == ["only"]

        # Leaving the object again releases the second waiter
        pool.leave(received[0])
        for thread in threads:
            thread.join(5.0)
        assert received == ["only", "only"]


@pytest.mark.parametrize("num_workers", [1, 3])
def test_evaluate_on_grid(sliding_mass_problem, num_workers):
    """Test the pooled evaluation matches the numeric dynamics at every time."""
    times = np.linspace(0.0, 1.0, 7)
    states = np.vstack((times**2, 2 * times))
    controls = np.atleast_2d(np.cos(times))
    iterate = Iterate(times=times, variables={VariableKind.STATES: states, VariableKind.CONTROLS: controls})

    values = evaluate_on_grid(sliding_mass_problem.dynamics_function, iterate, num_workers=num_workers)

    model = sliding_mass_problem.dynamics_model
    expected = np.column_stack([model.xdot(t, states[:, i], controls[:, i]) for i, t in enumerate(times)])
    assert values.shape == (2, 7)
    assert np.allclose(values, expected)
