from __future__ import annotations

import numpy as np
import pandas as pd

from ssvs.config import ColumnName, DEFAULT_SEED

EXAMPLE_RESPONSE = "yMCAR40"
EXAMPLE_PREDICTORS = [f"xMCAR40_{j}" for j in range(1, 6)]
EXAMPLE_EFFECTS = np.array([0.8, 0.4, 0.0, 0.0, 0.0])


def make_example_data(
    seed: int = DEFAULT_SEED,
    imputations: int = 3,
    replications: int = 3,
    n_obs: int = 5,
) -> pd.DataFrame:
    """Stacked multiply-imputed frame shaped like the classic SSVS-MI example.

    With the defaults: 45 rows, columns ``.imp`` (1..3), ``.id`` (1..5),
    ``r`` (1..3), ``yMCAR40`` and ``xMCAR40_1`` .. ``xMCAR40_5``. Only the
    first two predictors carry signal.
    """
    rng = np.random.default_rng(seed)
    frames = []
    for imp in range(1, imputations + 1):
        for rep in range(1, replications + 1):
            x = rng.normal(size=(n_obs, EXAMPLE_EFFECTS.shape[0]))
            y = x @ EXAMPLE_EFFECTS + rng.normal(scale=0.5, size=n_obs)
            frame = pd.DataFrame(x, columns=EXAMPLE_PREDICTORS)
            frame.insert(0, EXAMPLE_RESPONSE, y)
            frame.insert(0, ColumnName.REPLICATION, rep)
            frame.insert(0, ColumnName.OBSERVATION_ID, np.arange(1, n_obs + 1))
            frame.insert(0, ColumnName.IMPUTATION, imp)
            frames.append(frame)
    return pd.concat(frames, ignore_index=True)
