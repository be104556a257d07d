"""Error hierarchy for ingestion, storage and reporting failures.

Every error carries enough context (row number, field name or the
underlying storage message) to be diagnosed from the response alone.
"""

from typing import Any, Dict, Optional


class CallSpendError(Exception):
    """Base exception for all call spending failures."""

    def context(self) -> Dict[str, Any]:
        return {}


class NoFileProvidedError(CallSpendError):
    """Raised when an ingestion request carries no file payload."""

    def __init__(self, message: str = "No spreadsheet file was provided") -> None:
        super().__init__(message)


class MalformedInputError(CallSpendError):
    """Raised when the payload cannot be read as a spreadsheet at all."""


class InvalidFileNameError(CallSpendError):
    """Raised when an upload's file name is blank or too long to store."""

    def __init__(self, file_name: Optional[str], reason: str) -> None:
        super().__init__(f"Invalid file name {file_name!r}: {reason}")
        self.file_name = file_name
        self.reason = reason


class RowError(CallSpendError):
    """Base for structural problems in one spreadsheet row."""

    def __init__(self, row: int, message: str) -> None:
        super().__init__(f"Row {row}: {message}")
        self.row = row

    def context(self) -> Dict[str, Any]:
        return {"row": self.row}


class IncompleteRowError(RowError):
    def __init__(self, row: int, cell_count: int, expected: int = 7) -> None:
        super().__init__(row, f"expected {expected} cells, got {cell_count}")
        self.cell_count = cell_count
        self.expected = expected


class InvalidFieldError(RowError):
    def __init__(self, row: int, field: str, value: Any, reason: str) -> None:
        super().__init__(row, f"invalid {field} {value!r}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason

    def context(self) -> Dict[str, Any]:
        return {"row": self.row, "field": self.field}


class StorageError(CallSpendError):
    """Raised when a transaction or connection fails."""

    def __init__(self, message: str, rolled_back: bool = False) -> None:
        super().__init__(message)
        self.rolled_back = rolled_back

    def context(self) -> Dict[str, Any]:
        return {"rolled_back": self.rolled_back}


class NotFoundError(CallSpendError):
    def __init__(self, entity: str, identifier: Optional[Any]) -> None:
        super().__init__(f"{entity} {identifier} not found")
        self.entity = entity
        self.identifier = identifier

    def context(self) -> Dict[str, Any]:
        return {"entity": self.entity, "id": self.identifier}
