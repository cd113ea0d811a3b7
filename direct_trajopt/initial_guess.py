"""Initial guess generators working on the variable bounds of a transcription."""

import numpy as np
from numpy import ndarray


def guess_from_bounds(lower: ndarray, upper: ndarray) -> ndarray:
    """Generate a guess elementwise from the bounds.

    Finite bounds give their midpoint, a single finite bound gives that bound
    and an unbounded entry gives zero.
    """
    lower, upper = np.asarray(lower, dtype=float), np.asarray(upper, dtype=float)
    if lower.shape != upper.shape:
        raise ValueError(f"Lower bound shape {lower.shape} does not match upper bound shape {upper.shape}.")

    lower_finite, upper_finite = np.isfinite(lower), np.isfinite(upper)
    guess = np.zeros(lower.shape)
    both = lower_finite & upper_finite
    guess[both] = 0.5 * (lower[both] + upper[both])
    guess[lower_finite & ~upper_finite] = lower[lower_finite & ~upper_finite]
    guess[upper_finite & ~lower_finite] = upper[upper_finite & ~lower_finite]
    return guess


def random_within_bounds(lower: ndarray, upper: ndarray, rng: np.random.Generator = None) -> ndarray:
    """Generate a random guess elementwise within the bounds.

    Draws r are uniform in [-1, 1]. Finite bounds map r affinely onto
    [lower, upper], a single finite bound is offset by |r| into the feasible
    side and an unbounded entry keeps r.
    """
    lower, upper = np.asarray(lower, dtype=float), np.asarray(upper, dtype=float)
    if lower.shape != upper.shape:
        raise ValueError(f"Lower bound shape {lower.shape} does not match upper bound shape {upper.shape}.")

    rng = np.random.default_rng() if rng is None else rng
    draws = rng.uniform(-1.0, 1.0, size=lower.shape)

    lower_finite, upper_finite = np.isfinite(lower), np.isfinite(upper)
    guess = draws.copy()
    both = lower_finite & upper_finite
    guess[both] = 0.5 * (upper[both] - lower[both]) * draws[both] + 0.5 * (upper[both] + lower[both])
    only_lower = lower_finite & ~upper_finite
    guess[only_lower] = lower[only_lower] + np.abs(draws[only_lower])
    only_upper = upper_finite & ~lower_finite
    guess[only_upper] = upper[only_upper] - np.abs(draws[only_upper])
    return guess
