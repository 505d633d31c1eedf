from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pandas as pd

from ssvs.artifacts import build_manifest, config_hash, write_run_artifacts
from ssvs.config import ArtifactName, MANIFEST_REQUIRED_KEYS, SummaryColumn
from ssvs.datasets import EXAMPLE_PREDICTORS, EXAMPLE_RESPONSE
from ssvs.workflows.orchestrator import run_ssvs_mi

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_run_artifacts_written(example_frame, workspace_tmp_dir: Path) -> None:
    result = run_ssvs_mi(
        example_frame, EXAMPLE_RESPONSE, EXAMPLE_PREDICTORS, imputations=3, replications=3, iterations=120
    )
    reports = write_run_artifacts(result, workspace_tmp_dir, sort_by_mip=True)

    summary = pd.read_csv(reports / ArtifactName.SUMMARY)
    assert list(summary.columns) == SummaryColumn.MULTIPLE
    assert summary[SummaryColumn.AVG_MIP].is_monotonic_decreasing

    slices = pd.read_csv(reports / ArtifactName.SLICE_SUMMARIES)
    assert len(slices) == 3 * 3 * len(EXAMPLE_PREDICTORS)

    manifest = json.loads((reports / ArtifactName.MANIFEST).read_text(encoding="utf-8"))
    for key in MANIFEST_REQUIRED_KEYS:
        assert key in manifest
    assert manifest["imputations"] == 3
    assert manifest["burn_in"] == 30
    assert manifest["config_sha256"] == build_manifest(result)["config_sha256"]


def test_config_hash_ignores_key_order() -> None:
    assert config_hash({"a": 1, "b": 0.5}) == config_hash({"b": 0.5, "a": 1})


def test_cli_help() -> None:
    result = subprocess.run(
        [sys.executable, str(PROJECT_ROOT / "scripts" / "run_ssvs_mi.py"), "--help"],
        check=False,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0
    assert "SSVS runbook" in result.stdout


def test_cli_end_to_end(example_frame, workspace_tmp_dir: Path) -> None:
    data_path = workspace_tmp_dir / "example.csv"
    example_frame.to_csv(data_path, index=False)
    out_dir = workspace_tmp_dir / "out"
    result = subprocess.run(
        [
            sys.executable,
            str(PROJECT_ROOT / "scripts" / "run_ssvs_mi.py"),
            "--input",
            str(data_path),
            "--response",
            EXAMPLE_RESPONSE,
            "--predictors",
            *EXAMPLE_PREDICTORS,
            "--imputations",
            "3",
            "--replications",
            "3",
            "--iterations",
            "100",
            "--output-dir",
            str(out_dir),
        ],
        check=False,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
    assert (out_dir / "reports" / ArtifactName.SUMMARY).exists()


def test_get_logger_attaches_one_stdout_handler() -> None:
    from ssvs.logging_utils import get_logger

    first = get_logger("ssvs.test_logging")
    second = get_logger("ssvs.test_logging")
    assert first is second
    assert len(first.handlers) == 1
    assert first.handlers[0].stream is sys.stdout
