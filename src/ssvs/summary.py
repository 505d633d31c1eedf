from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from ssvs.config import StatName, SummaryColumn
from ssvs.errors import ConfigurationError
from ssvs.types import ChainDraws, SliceSummary, SSVSResult


def check_interval(interval: float) -> float:
    value = float(interval)
    if not (0.0 < value < 1.0):
        raise ConfigurationError(f"interval must be in (0, 1), got {interval}")
    return value


def safe_std(values: Iterable[float]) -> float:
    arr = np.asarray(list(values), dtype=float)
    if arr.size <= 1:
        return 0.0
    return float(np.std(arr, ddof=1))


def _finite_mean(values: np.ndarray) -> float:
    arr = np.asarray(values, dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        return np.nan
    return float(np.mean(arr))


def nonzero_mean(beta: np.ndarray, inclusion: np.ndarray) -> np.ndarray:
    """Column means of ``beta`` over draws where the predictor was included.

    NaN for predictors that were never included.
    """
    mask = np.asarray(inclusion) == 1
    counts = mask.sum(axis=0)
    totals = np.where(mask, beta, 0.0).sum(axis=0)
    out = np.full(beta.shape[1], np.nan, dtype=float)
    seen = counts > 0
    out[seen] = totals[seen] / counts[seen]
    return out


def summarize_draws(
    draws: ChainDraws,
    interval: float,
    imputation: int = 1,
    replication: int = 1,
) -> SliceSummary:
    """Reduce one slice's retained draws to per-predictor statistics.

    ``lower_ci`` and ``upper_ci`` start as the empirical
    ``(1 - interval) / 2`` and ``1 - (1 - interval) / 2`` quantiles of the
    coefficient draws and are then widened to include ``mean_beta``, so they
    differ from the raw quantiles whenever the mean falls outside them.
    """
    interval = check_interval(interval)
    if draws.n_draws == 0:
        raise ConfigurationError(
            f"slice imputation={imputation}, replication={replication} has no retained draws"
        )
    mean_beta = draws.beta.mean(axis=0)
    lower_q = (1.0 - interval) / 2.0
    upper_q = 1.0 - lower_q
    lower = np.quantile(draws.beta, lower_q, axis=0)
    upper = np.quantile(draws.beta, upper_q, axis=0)
    # Narrow intervals on a skewed spike/slab mixture can exclude the mean.
    lower = np.minimum(lower, mean_beta)
    upper = np.maximum(upper, mean_beta)
    return SliceSummary(
        imputation=int(imputation),
        replication=int(replication),
        mip=draws.inclusion.mean(axis=0).astype(float),
        mean_beta=mean_beta,
        mean_nonzero_beta=nonzero_mean(draws.beta, draws.inclusion),
        lower_ci=lower,
        upper_ci=upper,
    )


class SliceFold:
    """Accumulates slice summaries keyed by (imputation, replication).

    Merging is a keyed union, and finalization walks the slices in sorted key
    order, so the result does not depend on the order slices arrive in or on
    how partial folds were grouped.
    """

    def __init__(self, predictors: list[str]) -> None:
        self.predictors = list(predictors)
        self._slices: dict[tuple[int, int], SliceSummary] = {}

    def __len__(self) -> int:
        return len(self._slices)

    def add(self, summary: SliceSummary) -> "SliceFold":
        if summary.key in self._slices:
            raise ValueError(f"slice {summary.key} already folded")
        if summary.mip.shape[0] != len(self.predictors):
            raise ValueError(
                f"slice {summary.key} has {summary.mip.shape[0]} predictors, expected {len(self.predictors)}"
            )
        self._slices[summary.key] = summary
        return self

    def merge(self, other: "SliceFold") -> "SliceFold":
        if other.predictors != self.predictors:
            raise ValueError("cannot merge folds over different predictors")
        out = SliceFold(self.predictors)
        for summary in list(self._slices.values()) + list(other._slices.values()):
            out.add(summary)
        return out

    def slice_frame(self) -> pd.DataFrame:
        rows = []
        for key in sorted(self._slices):
            s = self._slices[key]
            for j, name in enumerate(self.predictors):
                rows.append(
                    {
                        "imputation": s.imputation,
                        "replication": s.replication,
                        "predictor": name,
                        StatName.MIP: float(s.mip[j]),
                        StatName.MEAN_BETA: float(s.mean_beta[j]),
                        StatName.MEAN_NONZERO_BETA: float(s.mean_nonzero_beta[j]),
                        StatName.LOWER_CI: float(s.lower_ci[j]),
                        StatName.UPPER_CI: float(s.upper_ci[j]),
                    }
                )
        return pd.DataFrame(
            rows,
            columns=["imputation", "replication", "predictor"] + StatName.ALL,
        )

    def imputation_frame(self) -> pd.DataFrame:
        """Replication-averaged statistics, one row per (imputation, predictor)."""
        by_imp: dict[int, list[SliceSummary]] = {}
        for key in sorted(self._slices):
            by_imp.setdefault(key[0], []).append(self._slices[key])

        rows = []
        for imp in sorted(by_imp):
            group = by_imp[imp]
            for j, name in enumerate(self.predictors):
                row: dict[str, object] = {
                    "imputation": imp,
                    "predictor": name,
                    "n_replications": len(group),
                }
                for stat in StatName.ALL:
                    values = np.array([getattr(s, stat)[j] for s in group], dtype=float)
                    row[stat] = _finite_mean(values)
                rows.append(row)
        return pd.DataFrame(
            rows,
            columns=["imputation", "predictor", "n_replications"] + StatName.ALL,
        )

    def finalize(self) -> pd.DataFrame:
        if not self._slices:
            raise ConfigurationError("no slices were folded")
        per_imp = self.imputation_frame()
        records = []
        for name in self.predictors:
            sub = per_imp.loc[per_imp["predictor"] == name].sort_values("imputation")
            row: dict[str, float] = {}
            for stat in StatName.ALL:
                values = sub[stat].to_numpy(dtype=float)
                finite = values[~np.isnan(values)]
                if finite.size == 0:
                    row.update({f"{stat}_{fold}": np.nan for fold in StatName.FOLDS})
                    continue
                row[f"{stat}_{StatName.MEAN}"] = float(np.mean(finite))
                row[f"{stat}_{StatName.SD}"] = safe_std(finite)
                row[f"{stat}_{StatName.MIN}"] = float(np.min(finite))
                row[f"{stat}_{StatName.MAX}"] = float(np.max(finite))
            records.append(row)
        stats = pd.DataFrame(records, index=pd.Index(self.predictors, name="predictor"))
        return stats[[f"{stat}_{fold}" for stat in StatName.ALL for fold in StatName.FOLDS]]


def fold_slices(summaries: Iterable[SliceSummary], predictors: list[str]) -> SliceFold:
    fold = SliceFold(predictors)
    for summary in summaries:
        fold.add(summary)
    return fold


def _resummarize(result: SSVSResult, interval: float) -> pd.DataFrame:
    if not result.draws:
        raise ConfigurationError(
            f"result was computed at interval={result.interval} without kept draws; "
            "rerun with keep_draws=True to summarize at another interval"
        )
    fold = fold_slices(
        (
            summarize_draws(draws, interval, imputation=key[0], replication=key[1])
            for key, draws in sorted(result.draws.items())
        ),
        result.predictors,
    )
    return fold.finalize()


def summarize(
    result: SSVSResult,
    interval: float | None = None,
    sort_by_mip: bool = False,
) -> pd.DataFrame:
    """Per-predictor summary table of an SSVS or SSVS-MI result."""
    stats = result.stats
    if interval is not None and not np.isclose(check_interval(interval), result.interval):
        stats = _resummarize(result, float(interval))

    mean = StatName.MEAN
    table = pd.DataFrame({SummaryColumn.VARIABLE: list(stats.index)})
    if result.config.imputations == 1:
        table[SummaryColumn.MIP] = stats[f"{StatName.MIP}_{mean}"].to_numpy()
        table[SummaryColumn.AVG_BETA] = stats[f"{StatName.MEAN_BETA}_{mean}"].to_numpy()
        columns = SummaryColumn.SINGLE
        mip_col = SummaryColumn.MIP
    else:
        for col, stat, fold in [
            (SummaryColumn.AVG_BETA, StatName.MEAN_BETA, StatName.MEAN),
            (SummaryColumn.SD_BETA, StatName.MEAN_BETA, StatName.SD),
            (SummaryColumn.MIN_BETA, StatName.MEAN_BETA, StatName.MIN),
            (SummaryColumn.MAX_BETA, StatName.MEAN_BETA, StatName.MAX),
            (SummaryColumn.AVG_MIP, StatName.MIP, StatName.MEAN),
            (SummaryColumn.SD_MIP, StatName.MIP, StatName.SD),
            (SummaryColumn.MIN_MIP, StatName.MIP, StatName.MIN),
            (SummaryColumn.MAX_MIP, StatName.MIP, StatName.MAX),
        ]:
            table[col] = stats[f"{stat}_{fold}"].to_numpy()
        columns = SummaryColumn.MULTIPLE
        mip_col = SummaryColumn.AVG_MIP
    table[SummaryColumn.AVG_NONZERO_BETA] = stats[f"{StatName.MEAN_NONZERO_BETA}_{mean}"].to_numpy()
    table[SummaryColumn.LOWER_CI] = stats[f"{StatName.LOWER_CI}_{mean}"].to_numpy()
    table[SummaryColumn.UPPER_CI] = stats[f"{StatName.UPPER_CI}_{mean}"].to_numpy()

    table = table[columns]
    if sort_by_mip:
        table = table.sort_values(mip_col, ascending=False, kind="mergesort").reset_index(drop=True)
    return table
