from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from ssvs.artifacts import write_run_artifacts
from ssvs.config import ColumnName, DEFAULT_INTERVAL, DEFAULT_ITERATIONS, DEFAULT_SEED
from ssvs.data import load_frame
from ssvs.summary import summarize
from ssvs.workflows.orchestrator import run_ssvs, run_ssvs_mi


def main() -> None:
    parser = argparse.ArgumentParser(
        description="SSVS runbook: spike-and-slab variable selection over imputed datasets"
    )
    parser.add_argument("--input", type=Path, required=True, help="CSV file with the stacked data.")
    parser.add_argument("--response", required=True)
    parser.add_argument("--predictors", nargs="+", required=True)
    parser.add_argument(
        "--imputations",
        type=int,
        default=None,
        help="Number of imputations; omit to treat the input as a single dataset.",
    )
    parser.add_argument("--replications", type=int, default=1)
    parser.add_argument("--iterations", type=int, default=DEFAULT_ITERATIONS)
    parser.add_argument("--burn-in", type=int, default=None)
    parser.add_argument("--interval", type=float, default=DEFAULT_INTERVAL)
    parser.add_argument("--binary", action="store_true", help="Response is coded 0/1 (probit path).")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--imputation-column", default=ColumnName.IMPUTATION)
    parser.add_argument("--replication-column", default=ColumnName.REPLICATION)
    parser.add_argument("--id-column", default=ColumnName.OBSERVATION_ID)
    parser.add_argument("--n-jobs", type=int, default=1)
    parser.add_argument("--progress", action="store_true")
    parser.add_argument("--sort", action="store_true", help="Order the summary by descending MIP.")
    parser.add_argument("--output-dir", type=Path, default=Path("."))
    args = parser.parse_args()

    frame = load_frame(args.input)
    if args.imputations is None:
        result = run_ssvs(
            frame,
            response_column=args.response,
            predictor_columns=args.predictors,
            iterations=args.iterations,
            replications=args.replications,
            continuous=not args.binary,
            interval=args.interval,
            burn_in=args.burn_in,
            seed=args.seed,
            progress=args.progress,
            n_jobs=args.n_jobs,
        )
    else:
        result = run_ssvs_mi(
            frame,
            response_column=args.response,
            predictor_columns=args.predictors,
            imputations=args.imputations,
            replications=args.replications,
            interval=args.interval,
            continuous=not args.binary,
            iterations=args.iterations,
            burn_in=args.burn_in,
            seed=args.seed,
            imputation_column=args.imputation_column,
            replication_column=args.replication_column,
            id_column=args.id_column,
            progress=args.progress,
            n_jobs=args.n_jobs,
        )

    reports = write_run_artifacts(result, args.output_dir, sort_by_mip=args.sort)
    print(summarize(result, sort_by_mip=args.sort).to_string(index=False))
    print(f"Artifacts written to {reports}")


if __name__ == "__main__":
    main()
