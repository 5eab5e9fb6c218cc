from pydantic import BaseModel
from typing import Iterable


class CityNotFoundError(ValueError):
    """Raised when a requested city doesn't exist."""


class NoDataError(ValueError):
    """Raised when a request is valid, but no data is available."""


class InvalidRangeError(ValueError):
    """Raised when the padded value range of a chart is empty or negative."""

    def __init__(self, lowest: float, highest: float) -> None:
        super().__init__(
            f"Invalid value range: lowest={lowest}, highest={highest} (span must be > 0)"
        )
        self.lowest = lowest
        self.highest = highest


class UnsupportedGranularityError(ValueError):
    """Raised when a granularity token is not one of Week, Fortnight, Month."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unsupported granularity: {token!r}")
        self.token = token


class SourceUnavailableError(RuntimeError):
    """Raised when the observation store cannot be queried.

    The underlying driver or SQLAlchemy exception is available as __cause__.
    """


class SchemaColumnMismatchInfo(BaseModel):
    table: str
    column: str
    is_missing: bool = False
    info: str = ""


class SchemaValidationError(ValueError):
    """Custom exception for sqlalchemy schema mismatch."""

    def __init__(
        self,
        message: str,
        *,
        missing_tables: Iterable[str] = (),
        mismatched_columns: Iterable[SchemaColumnMismatchInfo] = (),
    ) -> None:
        """Creates a new SchemaValidationError instance.

        Args:
            message: the exception message
            missing_tables: tables missing in the DB entirely
            mismatched_columns: columns that exist in the DB with different types or
                constraints, or are missing.
        """
        super().__init__(message)
        self.missing_tables = sorted(missing_tables)
        self.mismatched_columns = list(mismatched_columns)

    def __str__(self) -> str:
        base = super().__str__()
        parts = []
        if self.missing_tables:
            parts.append(f"missing_tables={self.missing_tables}")
        if self.mismatched_columns:
            parts.append(f"mismatched_columns={self.mismatched_columns}")
        return f"{base} ({', '.join(parts)})" if parts else base
