"""Configuration of a collocation solve and of the NLP solver it calls."""

import os
from dataclasses import dataclass, field

import numpy as np


# Environment variable read by SolverConfig.from_environment
PARALLEL_ENVIRONMENT_VARIABLE = "DIRECT_TRAJOPT_PARALLEL"

# Number of uniformly spaced mesh points when no mesh is given
DEFAULT_NUM_MESH_POINTS = 11

# Names of the available transcription schemes
SCHEME_NAMES = ("trapezoidal", "hermite-simpson")


class InvalidMeshError(ValueError):
    """Raise when a mesh is not a strictly increasing sequence from 0 to 1."""


class UnknownTranscriptionSchemeError(ValueError):
    """Raise when a transcription scheme name is not recognized."""


class InvalidParallelismError(ValueError):
    """Raise when the number of parallel workers is not a non-negative integer."""


@dataclass
class SolverConfig:
    """Options of a collocation solve.

    num_parallel_workers selects how per grid point functions are evaluated:
    0 evaluates serially, 1 uses one thread per available core, and N > 1 uses
    exactly N threads.
    """

    mesh: np.ndarray = field(default_factory=lambda: np.linspace(0.0, 1.0, DEFAULT_NUM_MESH_POINTS))
    transcription_scheme: str = "trapezoidal"
    num_parallel_workers: int = 0
    optim_solver: str = "ipopt"
    optim_max_iterations: int = None
    optim_convergence_tolerance: float = None
    optim_constraint_tolerance: float = None
    optim_hessian_approximation: str = "exact"
    implicit_derivative_bounds: tuple[float, float] = (-1000.0, 1000.0)
    verbosity: int = 1
    solver_options: dict = field(default_factory=dict)

    def __post_init__(self):
        """Validate every option at construction."""
        self.mesh = np.asarray(self.mesh, dtype=float).reshape(-1)
        if self.mesh.size < 2:
            raise InvalidMeshError(f"Mesh must have at least 2 points, got {self.mesh.size}.")
        if self.mesh[0] != 0 or self.mesh[-1] != 1:
            raise InvalidMeshError(f"Mesh must start at 0 and end at 1, got [{self.mesh[0]}, {self.mesh[-1]}].")
        if np.any(np.diff(self.mesh) <= 0):
            raise InvalidMeshError("Mesh must be strictly increasing.")

        if self.transcription_scheme not in SCHEME_NAMES:
            raise UnknownTranscriptionSchemeError(
                f"Unknown transcription scheme '{self.transcription_scheme}', expected one of {SCHEME_NAMES}."
            )

        if isinstance(self.num_parallel_workers, bool) or not isinstance(self.num_parallel_workers, (int, np.integer)):
            raise InvalidParallelismError(
                f"Number of parallel workers must be an integer, got {self.num_parallel_workers!r}."
            )
        if self.num_parallel_workers < 0:
            raise InvalidParallelismError(
                f"Number of parallel workers must be non-negative, got {self.num_parallel_workers}."
            )

        lower, upper = self.implicit_derivative_bounds
        if lower > upper:
            raise ValueError(f"Implicit derivative lower bound {lower} is greater than upper bound {upper}.")

    @classmethod
    def from_environment(cls, **kwargs) -> "SolverConfig":
        """Create a config taking the number of parallel workers from DIRECT_TRAJOPT_PARALLEL when set."""
        value = os.environ.get(PARALLEL_ENVIRONMENT_VARIABLE)
        if value is not None and "num_parallel_workers" not in kwargs:
            try:
                kwargs["num_parallel_workers"] = int(value)
            except ValueError as err:
                raise InvalidParallelismError(
                    f"{PARALLEL_ENVIRONMENT_VARIABLE} must be an integer, got '{value}'."
                ) from err
        return cls(**kwargs)

    @property
    def is_parallel(self) -> bool:
        """Whether per grid point functions are evaluated on multiple threads."""
        return self.num_parallel_workers > 0

    def resolve_num_workers(self) -> int:
        """Get the number of threads used for evaluation, 1 when serial."""
        if self.num_parallel_workers == 0:
            return 1
        if self.num_parallel_workers == 1:
            return os.cpu_count() or 1
        return self.num_parallel_workers


def build_solver_options(config: SolverConfig) -> dict:
    """Assemble the casadi.nlpsol options from the config, user overrides taking precedence."""
    options = {"error_on_fail": False, "print_time": config.verbosity >= 2}
    if config.optim_solver == "ipopt":
        # Verbosity 0 silences IPOPT, 2 and above prints every iteration
        options["ipopt.print_level"] = {0: 0, 1: 3}.get(config.verbosity, 5)
        options["ipopt.hessian_approximation"] = config.optim_hessian_approximation
        if config.optim_max_iterations is not None:
            options["ipopt.max_iter"] = int(config.optim_max_iterations)
        if config.optim_convergence_tolerance is not None:
            options["ipopt.tol"] = float(config.optim_convergence_tolerance)
        if config.optim_constraint_tolerance is not None:
            options["ipopt.constr_viol_tol"] = float(config.optim_constraint_tolerance)
        if config.verbosity == 0:
            options["ipopt.sb"] = "yes"
    options.update(config.solver_options)
    return options
