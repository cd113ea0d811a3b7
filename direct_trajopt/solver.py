"""Solve an optimal control problem by direct collocation."""

import numpy as np

from direct_trajopt.config import SolverConfig
from direct_trajopt.iterate import Iterate, Solution
from direct_trajopt.problem import Problem
from direct_trajopt.transcription.base import Transcription
from direct_trajopt.transcription.factory import create_transcription
from trajopt_util.logconfig import create_logger

LOG = create_logger(__name__)


class CollocationSolver:
    """Front end creating a transcription of the problem for every solve.

    A transcription can only be solved once at a time and keeps its symbolic
    NLP, so a fresh one is built per call to allow changing the config between
    solves, e.g. refining the mesh and warm starting from the previous solution.
    """

    def __init__(self, problem: Problem, config: SolverConfig = None):
        """Store the problem and the solve options."""
        self.problem = problem
        self.config = config or SolverConfig()

    def create_transcription(self) -> Transcription:
        """Create the transcription selected by the config."""
        return create_transcription(self.problem, self.config)

    def create_initial_guess_from_bounds(self) -> Iterate:
        """Create a guess at the middle of the bounds on the configured mesh."""
        return self.create_transcription().create_initial_guess_from_bounds()

    def create_random_iterate_within_bounds(self, rng: np.random.Generator = None) -> Iterate:
        """Create a random guess within the bounds on the configured mesh."""
        return self.create_transcription().create_random_iterate_within_bounds(rng)

    def solve(self, guess: Iterate = None) -> Solution:
        """Solve the problem, from the bounds midpoint when no guess is given."""
        transcription = self.create_transcription()
        LOG.info(
            f"Solving with the {self.config.transcription_scheme} scheme on {self.config.mesh.size} mesh points."
        )
        return transcription.solve(guess)
