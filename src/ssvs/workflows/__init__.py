from ssvs.workflows.orchestrator import run_ssvs, run_ssvs_mi

__all__ = [
    "run_ssvs",
    "run_ssvs_mi",
]
