from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from ssvs.config import SpikeSlabPrior


def _readonly(arr: np.ndarray, dtype: Any) -> np.ndarray:
    out = np.array(arr, dtype=dtype, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class DesignSlice:
    imputation: int
    replication: int
    x: np.ndarray
    y: np.ndarray
    predictor_columns: list[str]
    observation_ids: np.ndarray | None = None

    @property
    def n_obs(self) -> int:
        return int(self.x.shape[0])

    @property
    def n_predictors(self) -> int:
        return int(self.x.shape[1])

    @property
    def key(self) -> tuple[int, int]:
        return (self.imputation, self.replication)


@dataclass(frozen=True)
class ChainDraws:
    """Retained post-burn-in draws of one chain, one row per sweep."""

    inclusion: np.ndarray
    beta: np.ndarray
    intercept: np.ndarray
    sigma2: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "inclusion", _readonly(self.inclusion, np.int8))
        object.__setattr__(self, "beta", _readonly(self.beta, float))
        object.__setattr__(self, "intercept", _readonly(self.intercept, float))
        object.__setattr__(self, "sigma2", _readonly(self.sigma2, float))

    @property
    def n_draws(self) -> int:
        return int(self.beta.shape[0])


@dataclass(frozen=True)
class SliceSummary:
    imputation: int
    replication: int
    mip: np.ndarray
    mean_beta: np.ndarray
    mean_nonzero_beta: np.ndarray
    lower_ci: np.ndarray
    upper_ci: np.ndarray

    @property
    def key(self) -> tuple[int, int]:
        return (self.imputation, self.replication)


@dataclass(frozen=True)
class RunConfig:
    response_column: str
    predictor_columns: list[str]
    imputations: int
    replications: int
    iterations: int
    burn_in: int
    interval: float
    continuous: bool
    standardize: bool
    seed: int
    prior: SpikeSlabPrior

    def to_payload(self) -> dict[str, Any]:
        return {
            "response_column": self.response_column,
            "predictor_columns": list(self.predictor_columns),
            "imputations": int(self.imputations),
            "replications": int(self.replications),
            "iterations": int(self.iterations),
            "burn_in": int(self.burn_in),
            "interval": float(self.interval),
            "continuous": bool(self.continuous),
            "standardize": bool(self.standardize),
            "seed": int(self.seed),
            "prior": self.prior.to_payload(),
        }


@dataclass(frozen=True)
class SSVSResult:
    """Per-predictor statistics folded across every (imputation, replication) slice.

    ``stats`` is indexed by predictor with columns ``<stat>_<fold>`` such as
    ``mip_mean`` or ``mean_beta_sd``. ``imputation_summaries`` holds the
    replication-averaged statistics per imputation and ``slice_summaries``
    the raw per-slice values. ``draws`` is empty unless draws were kept.
    """

    config: RunConfig
    stats: pd.DataFrame
    imputation_summaries: pd.DataFrame
    slice_summaries: pd.DataFrame
    draws: dict[tuple[int, int], ChainDraws] = field(default_factory=dict)

    @property
    def predictors(self) -> list[str]:
        return list(self.config.predictor_columns)

    @property
    def interval(self) -> float:
        return float(self.config.interval)
