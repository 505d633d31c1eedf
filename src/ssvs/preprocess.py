from __future__ import annotations

import numpy as np
from sklearn.preprocessing import StandardScaler

from ssvs.config import EPS_COLLINEAR
from ssvs.errors import DegenerateDesignError


def make_scaler(standardize: bool) -> StandardScaler:
    return StandardScaler(with_mean=standardize, with_std=standardize)


def _zero_variance_mask(x: np.ndarray) -> np.ndarray:
    std = np.std(x, axis=0, ddof=0)
    return std <= 0


def collinear_pairs(x: np.ndarray, eps: float = EPS_COLLINEAR) -> list[tuple[int, int]]:
    x = np.asarray(x, dtype=float)
    p = x.shape[1]
    if p < 2 or x.shape[0] < 2:
        return []
    centered = x - np.mean(x, axis=0)
    norms = np.linalg.norm(centered, axis=0)
    pairs: list[tuple[int, int]] = []
    for i in range(p):
        for j in range(i + 1, p):
            denom = norms[i] * norms[j]
            if denom <= 0:
                continue
            corr = float(np.dot(centered[:, i], centered[:, j]) / denom)
            if abs(corr) >= 1.0 - eps:
                pairs.append((i, j))
    return pairs


def dependent_columns(x: np.ndarray) -> list[int]:
    """Indices of columns that are linear combinations of earlier columns.

    Only meaningful when there are more rows than columns; with fewer rows the
    centered design is rank-deficient regardless of the data.
    """
    x = np.asarray(x, dtype=float)
    n, p = x.shape
    if p < 2 or n <= p:
        return []
    centered = x - np.mean(x, axis=0)
    if np.linalg.matrix_rank(centered) == p:
        return []
    basis: list[int] = []
    dependent: list[int] = []
    for j in range(p):
        trial = basis + [j]
        if np.linalg.matrix_rank(centered[:, trial]) < len(trial):
            dependent.append(j)
        else:
            basis.append(j)
    return dependent


def check_design(x: np.ndarray, predictor_columns: list[str]) -> None:
    """Reject designs whose predictors cannot be told apart.

    Constant predictors and exact linear dependencies among predictors leave
    the likelihood flat along some direction, so inclusion probabilities for
    them would only reflect the prior. Dependencies spanning more than two
    predictors are only checked when there are more observations than
    predictors.
    """
    x = np.asarray(x, dtype=float)
    if not np.all(np.isfinite(x)):
        raise DegenerateDesignError("design contains non-finite values")
    constant = np.where(_zero_variance_mask(x))[0]
    if constant.size:
        names = [predictor_columns[int(i)] for i in constant]
        raise DegenerateDesignError(f"predictors with zero variance: {names}")
    pairs = collinear_pairs(x)
    if pairs:
        names = [(predictor_columns[i], predictor_columns[j]) for i, j in pairs]
        raise DegenerateDesignError(f"perfectly collinear predictors: {names}")
    dependent = dependent_columns(x)
    if dependent:
        names = [predictor_columns[j] for j in dependent]
        raise DegenerateDesignError(f"predictors linearly dependent on earlier predictors: {names}")


def standardize_design(x: np.ndarray, standardize: bool) -> np.ndarray:
    scaler = make_scaler(standardize)
    return np.asarray(scaler.fit_transform(np.asarray(x, dtype=float)), dtype=float)
