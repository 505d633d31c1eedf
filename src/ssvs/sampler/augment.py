from __future__ import annotations

import numpy as np
from scipy.stats import truncnorm


def truncation_bounds(y_bin: np.ndarray, linear_predictor: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Standardized truncation bounds for unit-variance latent draws.

    Label 1 restricts the latent value to [0, inf), label 0 to (-inf, 0].
    """
    y = np.asarray(y_bin, dtype=int)
    eta = np.asarray(linear_predictor, dtype=float)
    lower = np.where(y == 1, -eta, -np.inf)
    upper = np.where(y == 1, np.inf, -eta)
    return lower, upper


def draw_latent_response(
    y_bin: np.ndarray,
    linear_predictor: np.ndarray,
    rng: np.random.Generator,
) -> np.ndarray:
    eta = np.asarray(linear_predictor, dtype=float)
    lower, upper = truncation_bounds(y_bin, eta)
    z = truncnorm.rvs(lower, upper, loc=eta, scale=1.0, size=eta.shape[0], random_state=rng)
    return np.asarray(z, dtype=float)
