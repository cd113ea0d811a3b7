"""Test the solver configuration and the NLP solver options built from it."""

import numpy as np
import pytest

from direct_trajopt.config import (
    DEFAULT_NUM_MESH_POINTS,
    PARALLEL_ENVIRONMENT_VARIABLE,
    InvalidMeshError,
    InvalidParallelismError,
    SolverConfig,
    UnknownTranscriptionSchemeError,
    build_solver_options,
)


class TestSolverConfig:
    """Test the validation of the configuration."""

    def test_default_mesh(self):
        """Verify the default mesh is uniform over the normalized time."""
        config = SolverConfig()
        assert np.allclose(config.mesh, np.linspace(0.0, 1.0, DEFAULT_NUM_MESH_POINTS))
        assert config.transcription_scheme == "trapezoidal"
        assert not config.is_parallel

    @pytest.mark.parametrize(
        "mesh",
        [
            [0.0],
            [0.1, 0.5, 1.0],
            [0.0, 0.5, 0.9],
            [0.0, 0.6, 0.4, 1.0],
            [0.0, 0.5, 0.5, 1.0],
        ],
    )
    def test_invalid_mesh(self, mesh):
        """Verify meshes not strictly increasing from 0 to 1 are rejected."""
        with pytest.raises(InvalidMeshError):
            SolverConfig(mesh=mesh)

    def test_unknown_scheme(self):
        """Verify an unknown scheme name is rejected."""
        with pytest.raises(UnknownTranscriptionSchemeError):
            SolverConfig(transcription_scheme="runge-kutta")

    @pytest.mark.parametrize("num_parallel_workers", [-1, 1.5, "2", True])
    def test_invalid_parallelism(self, num_parallel_workers):
        """Verify the number of workers must be a non-negative integer."""
        with pytest.raises(InvalidParallelismError):
            SolverConfig(num_parallel_workers=num_parallel_workers)

    def test_resolve_num_workers(self, monkeypatch):
        """Verify 0 is serial, 1 is every core and N is exactly N threads."""
        monkeypatch.setattr("direct_trajopt.config.os.cpu_count", lambda: 6)
        assert SolverConfig(num_parallel_workers=0).resolve_num_workers() == 1
        assert SolverConfig(num_parallel_workers=1).resolve_num_workers() == 6
        assert SolverConfig(num_parallel_workers=3).resolve_num_workers() == 3

    def test_from_environment(self, monkeypatch):
        """Verify the number of workers can be read from the environment."""
        monkeypatch.setenv(PARALLEL_ENVIRONMENT_VARIABLE, "4")
        assert SolverConfig.from_environment().num_parallel_workers == 4
        # Explicit arguments take precedence over the environment
        assert SolverConfig.from_environment(num_parallel_workers=0).num_parallel_workers == 0

        monkeypatch.setenv(PARALLEL_ENVIRONMENT_VARIABLE, "many")
        with pytest.raises(InvalidParallelismError):
            SolverConfig.from_environment()

        monkeypatch.delenv(PARALLEL_ENVIRONMENT_VARIABLE)
        assert SolverConfig.from_environment().num_parallel_workers == 0


class TestBuildSolverOptions:
    """Test the options handed to casadi.nlpsol."""

    def test_ipopt_options(self):
        """Verify the optimizer settings map onto IPOPT options."""
        config = SolverConfig(
            optim_max_iterations=50,
            optim_convergence_tolerance=1e-6,
            optim_constraint_tolerance=1e-5,
            optim_hessian_approximation="limited-memory",
        )
        options = build_solver_options(config)
        assert options["ipopt.max_iter"] == 50
        assert options["ipopt.tol"] == 1e-6
        assert options["ipopt.constr_viol_tol"] == 1e-5
        assert options["ipopt.hessian_approximation"] == "limited-memory"
        assert options["error_on_fail"] is False

    def test_unset_options_are_left_to_ipopt(self):
        """Verify unset limits do not appear in the options."""
        options = build_solver_options(SolverConfig())
        assert "ipopt.max_iter" not in options
        assert "ipopt.tol" not in options

    def test_silent_and_overrides(self):
        """Verify verbosity 0 silences IPOPT and user overrides win."""
        config = SolverConfig(verbosity=0, solver_options={"ipopt.print_level": 2, "ipopt.mu_init": 0.1})
        options = build_solver_options(config)
        assert options["ipopt.sb"] == "yes"
        assert options["print_time"] is False
        assert options["ipopt.print_level"] == 2
        assert options["ipopt.mu_init"] == 0.1
