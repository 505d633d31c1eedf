from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from ssvs.errors import ConfigurationError

DEFAULT_SEED: Final[int] = 42
DEFAULT_ITERATIONS: Final[int] = 20000
BURN_IN_FRACTION: Final[float] = 0.25
DEFAULT_INTERVAL: Final[float] = 0.95

DEFAULT_INCLUSION_PROB: Final[float] = 0.5
DEFAULT_SLAB_VARIANCE: Final[float] = 10.0
DEFAULT_SPIKE_VARIANCE: Final[float] = 0.001
DEFAULT_INTERCEPT_VARIANCE: Final[float] = 1000.0
DEFAULT_VARIANCE_SHAPE: Final[float] = 0.01
DEFAULT_VARIANCE_SCALE: Final[float] = 0.01

EPS_INCLUSION: Final[float] = 1e-10
EPS_COLLINEAR: Final[float] = 1e-10
PROGRESS_EVERY: Final[int] = 100


class ColumnName:
    IMPUTATION = ".imp"
    REPLICATION = "r"
    OBSERVATION_ID = ".id"


class StatName:
    MIP = "mip"
    MEAN_BETA = "mean_beta"
    MEAN_NONZERO_BETA = "mean_nonzero_beta"
    LOWER_CI = "lower_ci"
    UPPER_CI = "upper_ci"
    ALL = [MIP, MEAN_BETA, MEAN_NONZERO_BETA, LOWER_CI, UPPER_CI]

    MEAN = "mean"
    SD = "sd"
    MIN = "min"
    MAX = "max"
    FOLDS = [MEAN, SD, MIN, MAX]


class SummaryColumn:
    VARIABLE = "Variable"
    MIP = "MIP"
    AVG_BETA = "Avg Beta"
    SD_BETA = "SD Beta"
    MIN_BETA = "Min Beta"
    MAX_BETA = "Max Beta"
    AVG_MIP = "Avg MIP"
    SD_MIP = "SD MIP"
    MIN_MIP = "Min MIP"
    MAX_MIP = "Max MIP"
    AVG_NONZERO_BETA = "Avg Nonzero Beta"
    LOWER_CI = "Lower CI"
    UPPER_CI = "Upper CI"

    SINGLE = [VARIABLE, MIP, AVG_BETA, AVG_NONZERO_BETA, LOWER_CI, UPPER_CI]
    MULTIPLE = [
        VARIABLE,
        AVG_BETA,
        SD_BETA,
        MIN_BETA,
        MAX_BETA,
        AVG_MIP,
        SD_MIP,
        MIN_MIP,
        MAX_MIP,
        AVG_NONZERO_BETA,
        LOWER_CI,
        UPPER_CI,
    ]


class ArtifactName:
    SUMMARY = "ssvs_summary.csv"
    SLICE_SUMMARIES = "ssvs_slice_summaries.csv"
    MANIFEST = "run_manifest.json"


MANIFEST_REQUIRED_KEYS: Final[list[str]] = [
    "manifest_version",
    "python_executable",
    "library_versions",
    "seed",
    "response_column",
    "predictor_columns",
    "imputations",
    "replications",
    "iterations",
    "burn_in",
    "interval",
    "continuous",
    "standardize",
    "prior",
]


@dataclass(frozen=True)
class SpikeSlabPrior:
    """Hyperparameters of the spike-and-slab regression prior.

    Slopes with inclusion indicator 1 are N(0, slab_variance), slopes with
    indicator 0 are N(0, spike_variance). The intercept is always N(0,
    intercept_variance). The residual variance is InvGamma(variance_shape,
    variance_scale) on the continuous path.
    """

    inclusion_prob: float = DEFAULT_INCLUSION_PROB
    slab_variance: float = DEFAULT_SLAB_VARIANCE
    spike_variance: float = DEFAULT_SPIKE_VARIANCE
    intercept_variance: float = DEFAULT_INTERCEPT_VARIANCE
    variance_shape: float = DEFAULT_VARIANCE_SHAPE
    variance_scale: float = DEFAULT_VARIANCE_SCALE

    def validate(self) -> None:
        if not (0.0 < float(self.inclusion_prob) < 1.0):
            raise ConfigurationError(f"inclusion_prob must be in (0, 1), got {self.inclusion_prob}")
        for name in ("slab_variance", "spike_variance", "intercept_variance"):
            value = float(getattr(self, name))
            if not value > 0:
                raise ConfigurationError(f"{name} must be > 0, got {value}")
        if not self.spike_variance < self.slab_variance:
            raise ConfigurationError(
                f"spike_variance ({self.spike_variance}) must be smaller than "
                f"slab_variance ({self.slab_variance})"
            )
        if not (self.variance_shape > 0 and self.variance_scale > 0):
            raise ConfigurationError("variance_shape and variance_scale must be > 0")

    def to_payload(self) -> dict[str, Any]:
        return {
            "inclusion_prob": float(self.inclusion_prob),
            "slab_variance": float(self.slab_variance),
            "spike_variance": float(self.spike_variance),
            "intercept_variance": float(self.intercept_variance),
            "variance_shape": float(self.variance_shape),
            "variance_scale": float(self.variance_scale),
        }


def default_burn_in(iterations: int) -> int:
    return int(iterations * BURN_IN_FRACTION)
