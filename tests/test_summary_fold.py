from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from ssvs.config import StatName
from ssvs.errors import ConfigurationError
from ssvs.summary import SliceFold, fold_slices, nonzero_mean, safe_std, summarize_draws
from ssvs.types import ChainDraws, SliceSummary

PREDICTORS = ["a", "b", "c"]


def _random_draws(seed: int, n_draws: int = 80) -> ChainDraws:
    rng = np.random.default_rng(seed)
    inclusion = (rng.random((n_draws, 3)) < np.array([0.9, 0.4, 0.0])).astype(np.int8)
    beta = np.where(inclusion == 1, rng.normal(1.0, 0.3, (n_draws, 3)), rng.normal(0.0, 0.03, (n_draws, 3)))
    return ChainDraws(
        inclusion=inclusion,
        beta=beta,
        intercept=np.zeros(n_draws),
        sigma2=np.ones(n_draws),
    )


def _slice_summaries(imputations: int = 2, replications: int = 3) -> list[SliceSummary]:
    out = []
    for imp in range(1, imputations + 1):
        for rep in range(1, replications + 1):
            draws = _random_draws(seed=10 * imp + rep)
            out.append(summarize_draws(draws, 0.95, imputation=imp, replication=rep))
    return out


def test_slice_summary_statistics() -> None:
    draws = ChainDraws(
        inclusion=np.array([[1, 0], [1, 0], [0, 0], [1, 0]]),
        beta=np.array([[2.0, 0.01], [4.0, -0.01], [0.1, 0.0], [3.0, 0.02]]),
        intercept=np.zeros(4),
        sigma2=np.ones(4),
    )
    s = summarize_draws(draws, 0.9)
    assert np.allclose(s.mip, [0.75, 0.0])
    assert np.allclose(s.mean_beta, [2.275, 0.005])
    assert np.isclose(s.mean_nonzero_beta[0], 3.0)
    assert np.isnan(s.mean_nonzero_beta[1])


def test_nonzero_mean_without_inclusions_is_nan() -> None:
    beta = np.array([[0.1, 1.0], [0.2, 2.0]])
    inclusion = np.array([[0, 1], [0, 1]])
    out = nonzero_mean(beta, inclusion)
    assert np.isnan(out[0])
    assert np.isclose(out[1], 1.5)


@pytest.mark.parametrize("interval", [0.01, 0.5, 0.8, 0.95, 0.999])
def test_interval_contains_mean(interval: float) -> None:
    for seed in range(5):
        s = summarize_draws(_random_draws(seed), interval)
        assert np.all(s.lower_ci <= s.mean_beta)
        assert np.all(s.mean_beta <= s.upper_ci)
        assert np.all((s.mip >= 0) & (s.mip <= 1))


def test_interval_widened_to_mean_on_spike_heavy_draws() -> None:
    beta = np.zeros((100, 1))
    beta[-10:, 0] = 10.0
    inclusion = (beta != 0).astype(np.int8)
    draws = ChainDraws(inclusion=inclusion, beta=beta, intercept=np.zeros(100), sigma2=np.ones(100))
    s = summarize_draws(draws, 0.5)
    assert np.isclose(np.quantile(beta[:, 0], 0.75), 0.0)
    assert np.isclose(s.mean_beta[0], 1.0)
    assert s.lower_ci[0] == 0.0
    assert s.upper_ci[0] == s.mean_beta[0]


def test_invalid_interval_rejected() -> None:
    with pytest.raises(ConfigurationError):
        summarize_draws(_random_draws(0), 1.0)
    with pytest.raises(ConfigurationError):
        summarize_draws(_random_draws(0), 0.0)


def test_fold_is_order_independent() -> None:
    summaries = _slice_summaries()
    forward = fold_slices(summaries, PREDICTORS).finalize()
    backward = fold_slices(reversed(summaries), PREDICTORS).finalize()
    shuffled_order = [summaries[i] for i in np.random.default_rng(3).permutation(len(summaries))]
    shuffled = fold_slices(shuffled_order, PREDICTORS).finalize()
    merged = (
        fold_slices(summaries[3:], PREDICTORS)
        .merge(fold_slices(summaries[:1], PREDICTORS))
        .merge(fold_slices(summaries[1:3], PREDICTORS))
        .finalize()
    )
    pd.testing.assert_frame_equal(forward, backward, check_exact=True)
    pd.testing.assert_frame_equal(forward, shuffled, check_exact=True)
    pd.testing.assert_frame_equal(forward, merged, check_exact=True)


def test_fold_matches_direct_aggregation() -> None:
    summaries = _slice_summaries(imputations=2, replications=3)
    stats = fold_slices(summaries, PREDICTORS).finalize()

    per_imp = np.array(
        [np.mean([s.mip for s in summaries if s.imputation == imp], axis=0) for imp in (1, 2)]
    )
    assert np.allclose(stats[f"{StatName.MIP}_{StatName.MEAN}"], per_imp.mean(axis=0))
    assert np.allclose(stats[f"{StatName.MIP}_{StatName.SD}"], per_imp.std(axis=0, ddof=1))
    assert np.allclose(stats[f"{StatName.MIP}_{StatName.MIN}"], per_imp.min(axis=0))
    assert np.allclose(stats[f"{StatName.MIP}_{StatName.MAX}"], per_imp.max(axis=0))
    # With equal replication counts the grand mean equals the mean over all slices.
    all_slices = np.array([s.mean_beta for s in summaries])
    assert np.allclose(stats[f"{StatName.MEAN_BETA}_{StatName.MEAN}"], all_slices.mean(axis=0))
    # Predictor "c" is never included.
    assert np.isnan(stats.loc["c", f"{StatName.MEAN_NONZERO_BETA}_{StatName.MEAN}"])


def test_fold_rejects_duplicate_slices() -> None:
    summaries = _slice_summaries(imputations=1, replications=1)
    fold = SliceFold(PREDICTORS).add(summaries[0])
    with pytest.raises(ValueError):
        fold.add(summaries[0])


def test_safe_std_single_value_is_zero() -> None:
    assert safe_std([0.4]) == 0.0
    assert np.isclose(safe_std([1.0, 3.0]), np.sqrt(2.0))
