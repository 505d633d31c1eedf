from __future__ import annotations

from tqdm.auto import tqdm

from ssvs.logging_utils import get_logger

logger = get_logger(__name__)


class ProgressReporter:
    """Sweep counter shown with tqdm.

    Display failures disable the bar and are logged; they never reach the
    sampler.
    """

    def __init__(self, total: int, desc: str, enabled: bool = True) -> None:
        self._bar = None
        if not enabled:
            return
        try:
            self._bar = tqdm(total=int(total), desc=desc, ncols=100)
        except Exception as exc:
            logger.warning("[PROGRESS] Display unavailable, continuing without it: %r", exc)

    @property
    def active(self) -> bool:
        return self._bar is not None

    def update(self, n: int) -> None:
        if self._bar is None:
            return
        try:
            self._bar.update(int(n))
        except Exception as exc:
            logger.warning("[PROGRESS] Display failed, disabling it: %r", exc)
            self._bar = None

    def close(self) -> None:
        if self._bar is None:
            return
        try:
            self._bar.close()
        except Exception as exc:
            logger.warning("[PROGRESS] Failed to close display: %r", exc)
        self._bar = None

    def __enter__(self) -> "ProgressReporter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
