from __future__ import annotations

import hashlib
import json
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ssvs.common.meta import library_versions
from ssvs.config import ArtifactName, MANIFEST_REQUIRED_KEYS
from ssvs.summary import summarize
from ssvs.types import SSVSResult

MANIFEST_VERSION = 1


def ensure_reports_dir(output_dir: Path) -> Path:
    reports = output_dir / "reports"
    reports.mkdir(parents=True, exist_ok=True)
    return reports


def write_csv(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)


def _normalize_float(x: float) -> float | None:
    if x is None:
        return None
    if not np.isfinite(float(x)):
        return None
    return float(f"{float(x):.6g}")


def normalize_for_manifest(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: normalize_for_manifest(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_for_manifest(v) for v in value]
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (np.floating, float)):
        return _normalize_float(float(value))
    if isinstance(value, (np.integer, int)):
        return int(value)
    if isinstance(value, str) or value is None:
        return value
    return str(value)


def canonical_json_bytes(data: Any) -> bytes:
    normalized = normalize_for_manifest(data)
    return json.dumps(
        normalized,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    ).encode("utf-8")


def config_hash(config: dict[str, Any]) -> str:
    return hashlib.sha256(canonical_json_bytes(config)).hexdigest()


def build_manifest(result: SSVSResult) -> dict[str, Any]:
    payload = result.config.to_payload()
    return {
        "manifest_version": MANIFEST_VERSION,
        "python_executable": sys.executable,
        "library_versions": library_versions(),
        "config_sha256": config_hash(payload),
        **payload,
    }


def write_manifest(manifest: dict[str, Any], path: Path) -> None:
    payload = normalize_for_manifest(manifest)
    missing = [k for k in MANIFEST_REQUIRED_KEYS if k not in payload]
    if missing:
        raise ValueError(f"Manifest missing required keys: {missing}")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, sort_keys=True, indent=2, ensure_ascii=True)


def write_run_artifacts(result: SSVSResult, output_dir: Path, sort_by_mip: bool = False) -> Path:
    reports = ensure_reports_dir(output_dir)
    write_csv(summarize(result, sort_by_mip=sort_by_mip), reports / ArtifactName.SUMMARY)
    write_csv(result.slice_summaries, reports / ArtifactName.SLICE_SUMMARIES)
    write_manifest(build_manifest(result), reports / ArtifactName.MANIFEST)
    return reports
