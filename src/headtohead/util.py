"""Common utilities and exception classes."""


class HeadToHeadError(Exception):
    """Base exception for headtohead."""


class MalformedInputError(HeadToHeadError):
    """Input table is missing columns or has unusable keys."""


class ContractViolationError(HeadToHeadError):
    """Call arguments break the operation's contract."""


class AggregationError(HeadToHeadError):
    """A reduction function failed on one group."""

    def __init__(self, group: tuple, column: str, cause: Exception) -> None:
        self.group = group
        self.column = column
        super().__init__(
            f"Failed to compute '{column}' for group {group!r}: {cause}"
        )


def require_columns(tbl, columns: list[str], what: str = "table") -> None:
    """Raise MalformedInputError if any of columns is absent from tbl."""
    missing = [c for c in columns if c not in tbl.columns]
    if missing:
        raise MalformedInputError(
            f"{what} is missing required columns: {', '.join(missing)}"
        )
