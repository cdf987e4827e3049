"""Data-layer exceptions."""


class QueryError(Exception):
    """Raised when the database rejects or cannot execute a statement.

    Distinct from "no rows": lookups that match nothing return None or [].
    """

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
