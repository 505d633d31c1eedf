from __future__ import annotations

from typing import Callable

import numpy as np

from ssvs.config import PROGRESS_EVERY, SpikeSlabPrior, default_burn_in
from ssvs.errors import ConfigurationError
from ssvs.sampler.augment import draw_latent_response
from ssvs.sampler.chain import init_chain_state
from ssvs.sampler.spike_slab import gibbs_sweep, prepare_design
from ssvs.types import ChainDraws, DesignSlice


def resolve_burn_in(iterations: int, burn_in: int | None) -> int:
    burn = default_burn_in(iterations) if burn_in is None else int(burn_in)
    if burn < 0:
        raise ConfigurationError(f"burn_in must be >= 0, got {burn}")
    if int(iterations) <= burn:
        raise ConfigurationError(
            f"iterations ({iterations}) must exceed burn_in ({burn}); no draws would be retained"
        )
    return burn


def run_chain(
    design_slice: DesignSlice,
    iterations: int,
    burn_in: int | None,
    prior: SpikeSlabPrior,
    rng: np.random.Generator,
    continuous: bool = True,
    on_progress: Callable[[int], None] | None = None,
) -> ChainDraws:
    """Run one independent chain on a slice and keep the post-burn-in draws.

    On the binary path every sweep starts by redrawing the latent response
    from the current linear predictor and the residual variance stays at 1.
    """
    burn = resolve_burn_in(iterations, burn_in)
    prepared = prepare_design(design_slice.x)
    y_observed = np.asarray(design_slice.y, dtype=float)
    state = init_chain_state(prepared.design, y_observed, continuous=continuous)

    n_keep = int(iterations) - burn
    p = prepared.n_predictors
    inclusion = np.empty((n_keep, p), dtype=np.int8)
    beta = np.empty((n_keep, p), dtype=float)
    intercept = np.empty(n_keep, dtype=float)
    sigma2 = np.empty(n_keep, dtype=float)

    pending = 0
    for it in range(int(iterations)):
        if not continuous:
            latent = draw_latent_response(y_observed, prepared.design @ state.theta, rng)
            state.set_response(latent, prepared.design)
        gibbs_sweep(state, prepared, prior, rng, continuous=continuous)

        if it >= burn:
            row = it - burn
            inclusion[row] = state.inclusion
            beta[row] = state.beta
            intercept[row] = state.intercept
            sigma2[row] = state.sigma2

        if on_progress is not None:
            pending += 1
            if pending >= PROGRESS_EVERY:
                on_progress(pending)
                pending = 0
    if on_progress is not None and pending:
        on_progress(pending)

    draws = ChainDraws(inclusion=inclusion, beta=beta, intercept=intercept, sigma2=sigma2)
    if draws.n_draws == 0:
        raise ConfigurationError(
            f"slice imputation={design_slice.imputation}, replication={design_slice.replication} "
            "retained no draws"
        )
    return draws
