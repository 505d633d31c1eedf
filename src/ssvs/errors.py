from __future__ import annotations


class SSVSError(Exception):
    pass


class ConfigurationError(SSVSError, ValueError):
    pass


class DataAlignmentError(SSVSError, ValueError):
    pass


class DegenerateDesignError(SSVSError, RuntimeError):
    """Raised when a slice's design cannot support a proper coefficient posterior.

    ``imputation`` and ``replication`` locate the offending slice when known.
    """

    def __init__(
        self,
        message: str,
        imputation: int | None = None,
        replication: int | None = None,
    ) -> None:
        self.imputation = imputation
        self.replication = replication
        self.detail = message
        super().__init__(self._format())

    def _format(self) -> str:
        if self.imputation is None and self.replication is None:
            return self.detail
        return f"imputation={self.imputation}, replication={self.replication}: {self.detail}"

    def __reduce__(self):
        return (DegenerateDesignError, (self.detail, self.imputation, self.replication))

    def with_slice(self, imputation: int, replication: int) -> "DegenerateDesignError":
        return DegenerateDesignError(self.detail, imputation=imputation, replication=replication)
