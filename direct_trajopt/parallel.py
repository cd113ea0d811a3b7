"""Evaluate per grid point functions numerically on multiple threads, e.g. on a solved trajectory."""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Generic, TypeVar

import casadi as ca
import numpy as np

from direct_trajopt.iterate import Iterate
from direct_trajopt.variables import VariableKind
from trajopt_util.logconfig import create_logger

LOG = create_logger(__name__)

T = TypeVar("T")


class EvaluatorPool(Generic[T]):
    """Blocking pool of reusable objects, each handed out to one thread at a time.

    The pool never creates objects; a take() on an empty pool waits until
    another thread leaves one. Objects are handed out last in, first out.
    """

    def __init__(self, objects=()):
        self._objects = list(objects)
        self._condition = threading.Condition()

    def take(self, timeout: float = None) -> T:
        """Remove an object from the pool, blocking until one is available."""
        with self._condition:
            if not self._condition.wait_for(lambda: self._objects, timeout=timeout):
                raise TimeoutError(f"No object was left in the pool within {timeout} seconds.")
            return self._objects.pop()

    def leave(self, obj: T):
        """Return an object to the pool and wake one waiting thread."""
        with self._condition:
            self._objects.append(obj)
            self._condition.notify()

    def size(self) -> int:
        """Number of objects currently in the pool, only indicative under concurrency."""
        with self._condition:
            return len(self._objects)


def copy_function(function: ca.Function) -> ca.Function:
    """Create an independent copy of a casadi Function with its own evaluation memory."""
    return ca.Function.deserialize(function.serialize())


def point_arguments(iterate: Iterate, index: int) -> list:
    """Gather (time, states, controls, multipliers, parameters) of a grid column."""
    return [
        iterate.times[index],
        iterate.get(VariableKind.STATES)[:, index],
        iterate.get(VariableKind.CONTROLS)[:, index],
        iterate.get(VariableKind.MULTIPLIERS)[:, index],
        iterate.get(VariableKind.PARAMETERS)[:, 0],
    ]


def evaluate_on_grid(function: ca.Function, iterate: Iterate, num_workers: int = 1, argument_builder=point_arguments):
    """Evaluate a numeric function at every time of an iterate.

    This is the numeric counterpart of Transcription.eval_on_trajectory, used
    to post-process a Solution, e.g. evaluating problem.dynamics_function on
    the solved trajectory. Transcription itself works on symbols and
    parallelizes with casadi.Function.map instead.

    Each worker thread takes its own copy of the function from a pool holding
    one copy per worker. Returns a matrix with one column per time, stacking
    the first output of the function.
    """
    num_workers = max(1, int(num_workers))
    pool = EvaluatorPool(copy_function(function) for _ in range(num_workers))
    LOG.debug(f"Evaluating {function.name()} at {iterate.num_times} times with {num_workers} worker(s).")

    def evaluate_point(index: int) -> np.ndarray:
        """Evaluate the function at a single time with a pooled copy."""
        evaluator = pool.take()
        try:
            return np.asarray(evaluator(*argument_builder(iterate, index))).reshape(-1)
        finally:
            pool.leave(evaluator)

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        columns = list(executor.map(evaluate_point, range(iterate.num_times)))

    num_rows = function.size1_out(0)
    return np.column_stack(columns) if columns else np.zeros((num_rows, 0))
