class TableStructureError(ValueError):
    """A precondition on the table shape does not hold (e.g. no columns)."""


class TableDataError(ValueError):
    """Row data is malformed or a value cannot be rendered."""


class TableOperationError(RuntimeError):
    """A backend could not carry out a best-effort cell operation."""
