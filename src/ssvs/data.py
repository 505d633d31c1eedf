from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from ssvs.errors import ConfigurationError, DataAlignmentError, DegenerateDesignError
from ssvs.preprocess import check_design, standardize_design
from ssvs.types import DesignSlice


def load_frame(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Missing data file: {path}")
    return pd.read_csv(path)


def resolve_columns(
    frame: pd.DataFrame,
    response_column: str,
    predictor_columns: list[str],
    required: list[str] | None = None,
) -> list[str]:
    predictors = [str(c) for c in predictor_columns]
    if not predictors:
        raise ConfigurationError("predictor_columns must name at least one column")
    duplicated = sorted({c for c in predictors if predictors.count(c) > 1})
    if duplicated:
        raise ConfigurationError(f"predictor_columns contains duplicates: {duplicated}")
    if response_column in predictors:
        raise ConfigurationError(f"response column {response_column!r} is also listed as a predictor")

    wanted = [response_column] + predictors + list(required or [])
    missing = [c for c in wanted if c not in frame.columns]
    if missing:
        raise ConfigurationError(f"columns missing from data: {missing}")
    return predictors


def check_values(frame: pd.DataFrame, response_column: str, predictors: list[str], continuous: bool) -> None:
    for col in [response_column] + predictors:
        values = pd.to_numeric(frame[col], errors="coerce").to_numpy(dtype=float)
        if not np.all(np.isfinite(values)):
            raise ConfigurationError(f"column {col!r} contains missing or non-numeric values")
    if not continuous:
        labels = set(np.unique(frame[response_column].to_numpy(dtype=float)).tolist())
        if not labels <= {0.0, 1.0}:
            raise ConfigurationError(
                f"binary response {response_column!r} must be coded 0/1, got values {sorted(labels)}"
            )


def _expected_ids(values: pd.Series, count: int, name: str) -> None:
    found = sorted(pd.unique(values).tolist())
    expected = list(range(1, int(count) + 1))
    if found != expected:
        raise DataAlignmentError(f"{name} values {found} do not enumerate 1..{count}")


def check_alignment(
    frame: pd.DataFrame,
    imputations: int,
    replications: int,
    imputation_column: str,
    replication_column: str,
    id_column: str | None,
) -> None:
    _expected_ids(frame[imputation_column], imputations, f"imputation column {imputation_column!r}")
    for imp, group in frame.groupby(imputation_column, sort=True):
        _expected_ids(
            group[replication_column],
            replications,
            f"replication column {replication_column!r} in imputation {imp}",
        )
        counts = group.groupby(replication_column, sort=True).size()
        if counts.nunique() != 1:
            raise DataAlignmentError(
                f"imputation {imp}: replications have different observation counts {counts.to_dict()}"
            )
        if id_column is None:
            continue
        id_sets = {
            rep: tuple(sorted(g[id_column].tolist()))
            for rep, g in group.groupby(replication_column, sort=True)
        }
        reference = next(iter(id_sets.values()))
        if any(ids != reference for ids in id_sets.values()):
            raise DataAlignmentError(f"imputation {imp}: replications cover different {id_column!r} values")
        if len(set(reference)) != len(reference):
            raise DataAlignmentError(f"imputation {imp}: duplicated {id_column!r} values within a replication")


def make_slice(
    rows: pd.DataFrame,
    imputation: int,
    replication: int,
    response_column: str,
    predictors: list[str],
    id_column: str | None,
    standardize: bool,
) -> DesignSlice:
    if id_column is not None:
        rows = rows.sort_values(id_column, kind="mergesort")
    x_raw = rows[predictors].to_numpy(dtype=float)
    y = rows[response_column].to_numpy(dtype=float)
    if x_raw.shape[0] == 0:
        raise DataAlignmentError(f"imputation={imputation}, replication={replication}: slice has no rows")
    try:
        check_design(x_raw, predictors)
    except DegenerateDesignError as exc:
        raise exc.with_slice(imputation, replication) from exc
    return DesignSlice(
        imputation=int(imputation),
        replication=int(replication),
        x=standardize_design(x_raw, standardize),
        y=y,
        predictor_columns=list(predictors),
        observation_ids=None if id_column is None else rows[id_column].to_numpy(),
    )


def build_mi_slices(
    frame: pd.DataFrame,
    response_column: str,
    predictors: list[str],
    imputations: int,
    replications: int,
    imputation_column: str,
    replication_column: str,
    id_column: str | None,
    standardize: bool,
) -> list[DesignSlice]:
    slices: list[DesignSlice] = []
    for imp in range(1, int(imputations) + 1):
        for rep in range(1, int(replications) + 1):
            mask = (frame[imputation_column] == imp) & (frame[replication_column] == rep)
            slices.append(
                make_slice(
                    frame.loc[mask],
                    imputation=imp,
                    replication=rep,
                    response_column=response_column,
                    predictors=predictors,
                    id_column=id_column,
                    standardize=standardize,
                )
            )
    return slices


def build_replicated_slices(
    frame: pd.DataFrame,
    response_column: str,
    predictors: list[str],
    replications: int,
    standardize: bool,
) -> list[DesignSlice]:
    # One dataset, so every replication is a fresh chain on the same rows.
    base = make_slice(
        frame,
        imputation=1,
        replication=1,
        response_column=response_column,
        predictors=predictors,
        id_column=None,
        standardize=standardize,
    )
    return [
        DesignSlice(
            imputation=1,
            replication=rep,
            x=base.x,
            y=base.y,
            predictor_columns=base.predictor_columns,
        )
        for rep in range(1, int(replications) + 1)
    ]
