from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ssvs.config import DEFAULT_SEED


def slice_seed_sequence(seed: int, imputation: int, replication: int) -> np.random.SeedSequence:
    return np.random.SeedSequence([int(seed), int(imputation), int(replication)])


def slice_rng(seed: int = DEFAULT_SEED, imputation: int = 1, replication: int = 1) -> np.random.Generator:
    # Derived from the slice indices, not drawn from a shared stream, so the
    # draws do not depend on the order in which slices are run.
    return np.random.default_rng(slice_seed_sequence(seed, imputation, replication))


@dataclass
class ChainState:
    """Mutable parameters of one chain.

    ``theta`` holds the intercept at index 0 followed by one slope per
    predictor. ``residual`` is always ``y - A @ theta`` for the response the
    sweep currently conditions on.
    """

    theta: np.ndarray
    inclusion: np.ndarray
    sigma2: float
    y: np.ndarray
    residual: np.ndarray

    @property
    def intercept(self) -> float:
        return float(self.theta[0])

    @property
    def beta(self) -> np.ndarray:
        return self.theta[1:]

    def set_response(self, y: np.ndarray, design: np.ndarray) -> None:
        self.y = np.asarray(y, dtype=float)
        self.residual = self.y - design @ self.theta


def init_chain_state(design: np.ndarray, y: np.ndarray, continuous: bool) -> ChainState:
    n_coef = design.shape[1]
    y = np.asarray(y, dtype=float)
    theta = np.zeros(n_coef, dtype=float)
    inclusion = np.ones(n_coef - 1, dtype=np.int8)
    if continuous:
        var_y = float(np.var(y))
        sigma2 = var_y if var_y > 0 else 1.0
    else:
        sigma2 = 1.0
    return ChainState(
        theta=theta,
        inclusion=inclusion,
        sigma2=sigma2,
        y=y,
        residual=y - design @ theta,
    )
