from ssvs.config import SpikeSlabPrior
from ssvs.datasets import make_example_data
from ssvs.errors import ConfigurationError, DataAlignmentError, DegenerateDesignError, SSVSError
from ssvs.summary import summarize
from ssvs.types import SSVSResult
from ssvs.workflows import run_ssvs, run_ssvs_mi

__all__ = [
    "run_ssvs",
    "run_ssvs_mi",
    "summarize",
    "make_example_data",
    "SpikeSlabPrior",
    "SSVSResult",
    "SSVSError",
    "ConfigurationError",
    "DataAlignmentError",
    "DegenerateDesignError",
]
