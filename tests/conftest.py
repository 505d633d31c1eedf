from __future__ import annotations

from pathlib import Path
from uuid import uuid4
import shutil

import numpy as np
import pandas as pd
import pytest

from ssvs.datasets import make_example_data


def _make_signal_frame(n_rows: int = 200, seed: int = 7) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    x = rng.normal(size=(n_rows, 2))
    # Only the first predictor carries signal.
    y = 1.0 + 2.0 * x[:, 0] + rng.normal(size=n_rows)
    return pd.DataFrame({"y": y, "x1": x[:, 0], "x2": x[:, 1]})


def _make_probit_frame(n_rows: int = 150, seed: int = 11) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    x = rng.normal(size=(n_rows, 2))
    latent = 0.3 + 1.5 * x[:, 0] + rng.normal(size=n_rows)
    return pd.DataFrame({"y": (latent > 0).astype(int), "x1": x[:, 0], "x2": x[:, 1]})


def _stack_imputations(frame: pd.DataFrame, imputations: int, replications: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    frames = []
    for imp in range(1, imputations + 1):
        for rep in range(1, replications + 1):
            part = frame.copy()
            jitter = rng.normal(scale=0.05, size=(len(part), 2))
            part[["x1", "x2"]] = part[["x1", "x2"]].to_numpy() + jitter
            part.insert(0, "r", rep)
            part.insert(0, ".id", np.arange(1, len(part) + 1))
            part.insert(0, ".imp", imp)
            frames.append(part)
    return pd.concat(frames, ignore_index=True)


@pytest.fixture()
def workspace_tmp_dir() -> Path:
    root = Path(".test_tmp") / str(uuid4())
    root.mkdir(parents=True, exist_ok=True)
    try:
        yield root
    finally:
        shutil.rmtree(root, ignore_errors=True)


@pytest.fixture()
def signal_frame() -> pd.DataFrame:
    return _make_signal_frame()


@pytest.fixture()
def probit_frame() -> pd.DataFrame:
    return _make_probit_frame()


@pytest.fixture()
def stacked_frame() -> pd.DataFrame:
    return _stack_imputations(_make_signal_frame(n_rows=60, seed=3), imputations=2, replications=3, seed=5)


@pytest.fixture()
def example_frame() -> pd.DataFrame:
    return make_example_data()
