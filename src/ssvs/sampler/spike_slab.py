from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.linalg import LinAlgError, cholesky, solve_triangular
from scipy.special import expit
from scipy.stats import invgamma

from ssvs.config import EPS_INCLUSION, SpikeSlabPrior
from ssvs.errors import DegenerateDesignError
from ssvs.sampler.chain import ChainState


@dataclass(frozen=True)
class PreparedDesign:
    """Design with a leading intercept column and its cached cross products."""

    design: np.ndarray
    gram: np.ndarray
    col_sq_norms: np.ndarray

    @property
    def n_obs(self) -> int:
        return int(self.design.shape[0])

    @property
    def n_predictors(self) -> int:
        return int(self.design.shape[1] - 1)


def prepare_design(x: np.ndarray) -> PreparedDesign:
    x = np.asarray(x, dtype=float)
    design = np.column_stack((np.ones(x.shape[0], dtype=float), x))
    gram = design.T @ design
    return PreparedDesign(design=design, gram=gram, col_sq_norms=np.diag(gram).copy())


def log_marginal_likelihood(xtx: float, xtr: float, sigma2: float, variance: float) -> float:
    # Partial residual likelihood with the coefficient integrated out under
    # N(0, variance), relative to the coefficient fixed at zero.
    data_precision = xtx / sigma2
    score = xtr / sigma2
    return float(
        -0.5 * np.log1p(variance * data_precision)
        + 0.5 * score**2 / (data_precision + 1.0 / variance)
    )


def inclusion_probability(
    xtx: float,
    xtr: float,
    sigma2: float,
    prior: SpikeSlabPrior,
    eps: float = EPS_INCLUSION,
) -> float:
    log_odds = (
        np.log(prior.inclusion_prob)
        - np.log1p(-prior.inclusion_prob)
        + log_marginal_likelihood(xtx, xtr, sigma2, prior.slab_variance)
        - log_marginal_likelihood(xtx, xtr, sigma2, prior.spike_variance)
    )
    prob = float(expit(log_odds))
    return min(max(prob, eps), 1.0 - eps)


def prior_precision(inclusion: np.ndarray, prior: SpikeSlabPrior) -> np.ndarray:
    slopes = np.where(
        np.asarray(inclusion) == 1,
        1.0 / prior.slab_variance,
        1.0 / prior.spike_variance,
    )
    return np.concatenate(([1.0 / prior.intercept_variance], slopes))


def update_inclusion(
    state: ChainState,
    prepared: PreparedDesign,
    prior: SpikeSlabPrior,
    rng: np.random.Generator,
) -> None:
    """Draw each indicator in turn, refreshing its slope from the new component.

    The indicator is drawn with its slope integrated out, then the slope is
    drawn from its conditional given the indicator and the other slopes.
    """
    design = prepared.design
    sigma2 = float(state.sigma2)
    for j in range(prepared.n_predictors):
        k = j + 1
        a_k = design[:, k]
        partial = state.residual + a_k * state.theta[k]
        xtx = float(prepared.col_sq_norms[k])
        xtr = float(a_k @ partial)

        prob = inclusion_probability(xtx, xtr, sigma2, prior)
        included = bool(rng.random() < prob)
        state.inclusion[j] = 1 if included else 0

        variance = prior.slab_variance if included else prior.spike_variance
        precision = xtx / sigma2 + 1.0 / variance
        mean = (xtr / sigma2) / precision
        theta_k = mean + rng.standard_normal() / np.sqrt(precision)
        state.theta[k] = theta_k
        state.residual = partial - a_k * theta_k


def draw_coefficients(
    state: ChainState,
    prepared: PreparedDesign,
    prior: SpikeSlabPrior,
    rng: np.random.Generator,
) -> None:
    sigma2 = float(state.sigma2)
    precision = prepared.gram / sigma2 + np.diag(prior_precision(state.inclusion, prior))
    try:
        chol = cholesky(precision, lower=True, check_finite=True)
    except (LinAlgError, ValueError) as exc:
        raise DegenerateDesignError(
            f"coefficient precision matrix is not positive definite: {exc}"
        ) from exc

    rhs = prepared.design.T @ state.y / sigma2
    half = solve_triangular(chol, rhs, lower=True)
    mean = solve_triangular(chol, half, lower=True, trans="T")
    noise = solve_triangular(chol, rng.standard_normal(mean.shape[0]), lower=True, trans="T")
    theta = mean + noise
    if not np.all(np.isfinite(theta)):
        raise DegenerateDesignError("coefficient draw is not finite")

    state.theta = theta
    state.residual = state.y - prepared.design @ theta


def draw_residual_variance(
    state: ChainState,
    prior: SpikeSlabPrior,
    rng: np.random.Generator,
) -> None:
    n = state.residual.shape[0]
    shape = prior.variance_shape + 0.5 * n
    scale = prior.variance_scale + 0.5 * float(state.residual @ state.residual)
    state.sigma2 = float(invgamma.rvs(a=shape, scale=scale, random_state=rng))


def gibbs_sweep(
    state: ChainState,
    prepared: PreparedDesign,
    prior: SpikeSlabPrior,
    rng: np.random.Generator,
    continuous: bool = True,
) -> None:
    update_inclusion(state, prepared, prior, rng)
    draw_coefficients(state, prepared, prior, rng)
    if continuous:
        draw_residual_variance(state, prior, rng)
