from __future__ import annotations

import numpy as np
import pytest

import ssvs.sampler.driver as driver
import ssvs.sampler.spike_slab as spike_slab
from ssvs.config import SpikeSlabPrior
from ssvs.errors import ConfigurationError
from ssvs.preprocess import standardize_design
from ssvs.sampler.chain import slice_rng
from ssvs.sampler.driver import resolve_burn_in, run_chain
from ssvs.types import DesignSlice


def _slice(frame, continuous: bool = True) -> DesignSlice:
    x = standardize_design(frame[["x1", "x2"]].to_numpy(dtype=float), True)
    return DesignSlice(
        imputation=1,
        replication=1,
        x=x,
        y=frame["y"].to_numpy(dtype=float),
        predictor_columns=["x1", "x2"],
    )


def test_default_burn_in_is_a_quarter() -> None:
    assert resolve_burn_in(2000, None) == 500
    assert resolve_burn_in(10, 3) == 3
    with pytest.raises(ConfigurationError):
        resolve_burn_in(100, 100)
    with pytest.raises(ConfigurationError):
        resolve_burn_in(100, -1)


def test_run_chain_keeps_post_burn_in_draws(signal_frame) -> None:
    draws = run_chain(_slice(signal_frame), 400, None, SpikeSlabPrior(), slice_rng(42, 1, 1))
    assert draws.n_draws == 300
    assert draws.inclusion.shape == (300, 2)
    assert draws.beta.shape == (300, 2)
    assert set(np.unique(draws.inclusion).tolist()) <= {0, 1}
    assert np.all(draws.sigma2 > 0)
    assert not draws.beta.flags.writeable


def test_run_chain_is_reproducible_for_a_seed(signal_frame) -> None:
    a = run_chain(_slice(signal_frame), 200, 50, SpikeSlabPrior(), slice_rng(42, 1, 1))
    b = run_chain(_slice(signal_frame), 200, 50, SpikeSlabPrior(), slice_rng(42, 1, 1))
    c = run_chain(_slice(signal_frame), 200, 50, SpikeSlabPrior(), slice_rng(42, 1, 2))
    assert np.array_equal(a.beta, b.beta)
    assert np.array_equal(a.inclusion, b.inclusion)
    assert not np.array_equal(a.beta, c.beta)


def test_progress_observer_does_not_change_draws(signal_frame) -> None:
    seen: list[int] = []
    observed = run_chain(
        _slice(signal_frame), 250, None, SpikeSlabPrior(), slice_rng(42, 1, 1), on_progress=seen.append
    )
    silent = run_chain(_slice(signal_frame), 250, None, SpikeSlabPrior(), slice_rng(42, 1, 1))
    assert sum(seen) == 250
    assert np.array_equal(observed.beta, silent.beta)


def test_binary_path_augments_every_sweep_and_fixes_variance(probit_frame, monkeypatch) -> None:
    calls = {"n": 0}
    real_draw = driver.draw_latent_response

    def counting_draw(y, eta, rng):
        calls["n"] += 1
        return real_draw(y, eta, rng)

    def no_variance_update(*args, **kwargs):
        raise AssertionError("residual variance must not be sampled on the binary path")

    monkeypatch.setattr(driver, "draw_latent_response", counting_draw)
    monkeypatch.setattr(spike_slab, "draw_residual_variance", no_variance_update)

    draws = run_chain(_slice(probit_frame), 120, 20, SpikeSlabPrior(), slice_rng(42, 1, 1), continuous=False)
    assert calls["n"] == 120
    assert np.all(draws.sigma2 == 1.0)
    assert draws.n_draws == 100


def test_continuous_path_never_augments(signal_frame, monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise AssertionError("continuous responses are not augmented")

    monkeypatch.setattr(driver, "draw_latent_response", fail)
    draws = run_chain(_slice(signal_frame), 50, 10, SpikeSlabPrior(), slice_rng(42, 1, 1))
    assert draws.n_draws == 40
