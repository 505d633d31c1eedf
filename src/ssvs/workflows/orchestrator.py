from __future__ import annotations

import numbers
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Callable

import pandas as pd

from ssvs.config import (
    ColumnName,
    DEFAULT_INTERVAL,
    DEFAULT_ITERATIONS,
    DEFAULT_SEED,
    SpikeSlabPrior,
)
from ssvs.data import (
    build_mi_slices,
    build_replicated_slices,
    check_alignment,
    check_values,
    resolve_columns,
)
from ssvs.errors import ConfigurationError, DegenerateDesignError
from ssvs.logging_utils import get_logger
from ssvs.progress import ProgressReporter
from ssvs.sampler.chain import slice_rng
from ssvs.sampler.driver import resolve_burn_in, run_chain
from ssvs.summary import SliceFold, check_interval, summarize_draws
from ssvs.types import ChainDraws, DesignSlice, RunConfig, SliceSummary, SSVSResult

logger = get_logger(__name__)


def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return int(value)


def _run_slice(
    design_slice: DesignSlice,
    iterations: int,
    burn_in: int,
    prior: SpikeSlabPrior,
    seed: int,
    continuous: bool,
    interval: float,
    keep_draws: bool,
    on_progress: Callable[[int], None] | None = None,
) -> tuple[SliceSummary, ChainDraws | None]:
    imp, rep = design_slice.key
    rng = slice_rng(seed, imp, rep)
    try:
        draws = run_chain(
            design_slice,
            iterations=iterations,
            burn_in=burn_in,
            prior=prior,
            rng=rng,
            continuous=continuous,
            on_progress=on_progress,
        )
    except DegenerateDesignError as exc:
        if exc.imputation is None:
            raise exc.with_slice(imp, rep) from exc
        raise
    summary = summarize_draws(draws, interval, imputation=imp, replication=rep)
    return summary, (draws if keep_draws else None)


def _slice_worker(args: tuple) -> tuple[SliceSummary, ChainDraws | None]:
    return _run_slice(*args)


def _run_slices(
    slices: list[DesignSlice],
    predictors: list[str],
    iterations: int,
    burn_in: int,
    prior: SpikeSlabPrior,
    seed: int,
    continuous: bool,
    interval: float,
    keep_draws: bool,
    progress: bool,
    n_jobs: int,
) -> tuple[SliceFold, dict[tuple[int, int], ChainDraws]]:
    fold = SliceFold(predictors)
    kept: dict[tuple[int, int], ChainDraws] = {}
    total = len(slices) * int(iterations)

    with ProgressReporter(total=total, desc="SSVS sweeps", enabled=progress) as reporter:
        if n_jobs == 1 or len(slices) == 1:
            for design_slice in slices:
                logger.debug("[SSVS] Sampling slice imputation=%d replication=%d", *design_slice.key)
                summary, draws = _run_slice(
                    design_slice,
                    iterations,
                    burn_in,
                    prior,
                    seed,
                    continuous,
                    interval,
                    keep_draws,
                    reporter.update if reporter.active else None,
                )
                fold.add(summary)
                if draws is not None:
                    kept[summary.key] = draws
        else:
            worker_args = [
                (s, iterations, burn_in, prior, seed, continuous, interval, keep_draws)
                for s in slices
            ]
            with ProcessPoolExecutor(max_workers=min(n_jobs, len(slices))) as executor:
                futures = [executor.submit(_slice_worker, a) for a in worker_args]
                try:
                    for fut in as_completed(futures):
                        summary, draws = fut.result()
                        fold.add(summary)
                        if draws is not None:
                            kept[summary.key] = draws
                        reporter.update(iterations)
                except BaseException:
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise
    return fold, kept


def _common_checks(
    iterations: int,
    replications: int,
    interval: float,
    burn_in: int | None,
    prior: SpikeSlabPrior | None,
    n_jobs: int,
) -> tuple[int, int, float, int, SpikeSlabPrior]:
    iterations = _check_count("iterations", iterations)
    replications = _check_count("replications", replications)
    _check_count("n_jobs", n_jobs)
    interval = check_interval(interval)
    burn = resolve_burn_in(iterations, burn_in)
    prior = SpikeSlabPrior() if prior is None else prior
    prior.validate()
    return iterations, replications, interval, burn, prior


def _build_result(
    config: RunConfig,
    fold: SliceFold,
    kept: dict[tuple[int, int], ChainDraws],
) -> SSVSResult:
    return SSVSResult(
        config=config,
        stats=fold.finalize(),
        imputation_summaries=fold.imputation_frame(),
        slice_summaries=fold.slice_frame(),
        draws=dict(sorted(kept.items())),
    )


def run_ssvs(
    data: pd.DataFrame,
    response_column: str,
    predictor_columns: list[str],
    iterations: int = DEFAULT_ITERATIONS,
    replications: int = 1,
    continuous: bool = True,
    *,
    interval: float = DEFAULT_INTERVAL,
    burn_in: int | None = None,
    prior: SpikeSlabPrior | None = None,
    seed: int = DEFAULT_SEED,
    standardize: bool = True,
    progress: bool = False,
    n_jobs: int = 1,
    keep_draws: bool = True,
) -> SSVSResult:
    """SSVS on a single dataset.

    Each replication is an independent chain on the full frame; the result
    has the same shape as an SSVS-MI result with one imputation.
    """
    iterations, replications, interval, burn, prior = _common_checks(
        iterations, replications, interval, burn_in, prior, n_jobs
    )
    predictors = resolve_columns(data, response_column, predictor_columns)
    check_values(data, response_column, predictors, continuous)
    slices = build_replicated_slices(
        data,
        response_column=response_column,
        predictors=predictors,
        replications=replications,
        standardize=standardize,
    )

    logger.info(
        "[SSVS] %d replication(s) x %d iterations (burn-in %d), %d predictors, %s response",
        replications,
        iterations,
        burn,
        len(predictors),
        "continuous" if continuous else "binary",
    )
    fold, kept = _run_slices(
        slices,
        predictors,
        iterations,
        burn,
        prior,
        seed,
        continuous,
        interval,
        keep_draws,
        progress,
        n_jobs,
    )
    config = RunConfig(
        response_column=response_column,
        predictor_columns=predictors,
        imputations=1,
        replications=replications,
        iterations=iterations,
        burn_in=burn,
        interval=interval,
        continuous=bool(continuous),
        standardize=bool(standardize),
        seed=int(seed),
        prior=prior,
    )
    return _build_result(config, fold, kept)


def run_ssvs_mi(
    data: pd.DataFrame,
    response_column: str,
    predictor_columns: list[str],
    imputations: int,
    replications: int,
    interval: float = DEFAULT_INTERVAL,
    continuous: bool = True,
    *,
    iterations: int = DEFAULT_ITERATIONS,
    burn_in: int | None = None,
    prior: SpikeSlabPrior | None = None,
    seed: int = DEFAULT_SEED,
    imputation_column: str = ColumnName.IMPUTATION,
    replication_column: str = ColumnName.REPLICATION,
    id_column: str | None = ColumnName.OBSERVATION_ID,
    standardize: bool = True,
    progress: bool = False,
    n_jobs: int = 1,
    keep_draws: bool = False,
) -> SSVSResult:
    """SSVS over every (imputation, replication) slice of a stacked dataset.

    Rows of slice (i, r) are those with ``imputation_column == i`` and
    ``replication_column == r``, ordered by ``id_column`` when the data has
    it. Configuration and alignment problems are raised before any sampling.
    """
    iterations, replications, interval, burn, prior = _common_checks(
        iterations, replications, interval, burn_in, prior, n_jobs
    )
    imputations = _check_count("imputations", imputations)
    predictors = resolve_columns(
        data,
        response_column,
        predictor_columns,
        required=[imputation_column, replication_column],
    )
    if id_column is not None and id_column not in data.columns:
        logger.info("[SSVS-MI] No %r column, slices keep row order", id_column)
        id_column = None
    check_values(data, response_column, predictors, continuous)
    check_alignment(
        data,
        imputations=imputations,
        replications=replications,
        imputation_column=imputation_column,
        replication_column=replication_column,
        id_column=id_column,
    )
    slices = build_mi_slices(
        data,
        response_column=response_column,
        predictors=predictors,
        imputations=imputations,
        replications=replications,
        imputation_column=imputation_column,
        replication_column=replication_column,
        id_column=id_column,
        standardize=standardize,
    )

    logger.info(
        "[SSVS-MI] %d imputation(s) x %d replication(s) x %d iterations (burn-in %d), %d predictors",
        imputations,
        replications,
        iterations,
        burn,
        len(predictors),
    )
    fold, kept = _run_slices(
        slices,
        predictors,
        iterations,
        burn,
        prior,
        seed,
        continuous,
        interval,
        keep_draws,
        progress,
        n_jobs,
    )
    config = RunConfig(
        response_column=response_column,
        predictor_columns=predictors,
        imputations=imputations,
        replications=replications,
        iterations=iterations,
        burn_in=burn,
        interval=interval,
        continuous=bool(continuous),
        standardize=bool(standardize),
        seed=int(seed),
        prior=prior,
    )
    return _build_result(config, fold, kept)
