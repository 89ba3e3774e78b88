# backend/folio_engine/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

The accounting engine itself never raises on financial inputs: divisions are
guarded and invalid cycles are dropped. Exceptions here cover the boundaries
around it (ledger files and serialized refresh snapshots).

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── LedgerError
    │   ├── LedgerEmptyError
    │   ├── LedgerFormatError
    │   └── UnsupportedLedgerVersionError
    └── SnapshotError
        ├── SnapshotDecodeError
        └── UnsupportedSchemaVersionError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when programmatic input validation fails.

    User input validation is handled by Pydantic; this is for checks that
    need more context than a single schema.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


# =============================================================================
# LEDGER ERRORS
# =============================================================================


class LedgerError(ServiceError):
    """Base exception for ledger export/import failures."""


class LedgerEmptyError(LedgerError):
    """Raised when an import file is empty or contains no transactions."""

    def __init__(self) -> None:
        super().__init__("The file is empty or contains no transactions.")


class LedgerFormatError(LedgerError):
    """
    Raised when an import file cannot be parsed as a ledger export.

    Attributes:
        detail: Parser-specific description of the problem
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid file format: {detail}")


class UnsupportedLedgerVersionError(LedgerError):
    """
    Raised when an import file declares a format version we cannot read.

    Attributes:
        version: The version found in the file
    """

    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Unsupported ledger format version: '{version}'")


# =============================================================================
# REFRESH SNAPSHOT ERRORS
# =============================================================================


class SnapshotError(ServiceError):
    """Base exception for refresh snapshot serialization failures."""


class SnapshotDecodeError(SnapshotError):
    """
    Raised when a serialized snapshot or display aggregate is malformed.

    Attributes:
        kind: Which record failed ("snapshot" or "display")
    """

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Cannot decode {kind}: {detail}")


class UnsupportedSchemaVersionError(SnapshotError):
    """
    Raised when a serialized record carries an unknown schema version.

    Attributes:
        kind: Which record was read ("snapshot" or "display")
        version: Version found in the payload
        expected: Version this build understands
    """

    def __init__(self, kind: str, version: int, expected: int) -> None:
        self.kind = kind
        self.version = version
        self.expected = expected
        super().__init__(
            f"Unsupported {kind} schema version {version} (expected {expected})"
        )
