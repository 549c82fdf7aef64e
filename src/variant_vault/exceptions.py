"""Typed failures raised by the ingestion, storage and matching layers."""


class VaultError(Exception):
    """Base exception class for all variant vault errors."""

    def __init__(self, message="An error occurred in variant vault", details=None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class IngestionError(VaultError):
    """Raised when a genotype export cannot be read or decoded at all."""

    def __init__(self, message="Failed to ingest genome file", details=None):
        super().__init__(message, details)


class StoreBuildError(VaultError):
    """Raised when a variant store cannot be fully written and indexed."""

    def __init__(self, message="Failed to build variant store", details=None):
        super().__init__(message, details)


class StoreNotFoundError(VaultError):
    """Raised when a store id is not present in the catalog."""

    def __init__(self, message="Variant store not found", details=None):
        super().__init__(message, details)


class MatchError(VaultError):
    """Raised when the reference database cannot be opened or queried."""

    def __init__(self, message="Reference database lookup failed", details=None):
        super().__init__(message, details)
