"""
Exceptions raised by gdatasheets.
Everything derives from GDataSheetsError so a caller can catch the lot.
"""


class GDataSheetsError(Exception):
    """Base exception for all gdatasheets errors."""
    pass


class InvalidAddress(GDataSheetsError, ValueError):
    """A cell label or coordinate that doesn't address a cell."""

    def __init__(self, address: object, message: str|None = None) -> None:
        self.address = address
        super().__init__(message or f"invalid cell address: {address!r}")


class RemoteError(GDataSheetsError):
    """
    The server answered with a non-2xx status.
    Carries the status and the raw body so callers can dig into the reason.
    """

    def __init__(self, status: int|None, body: str = "",
                 method: str = "", url: str = "") -> None:
        self.status = status
        self.body = body
        self.method = method
        self.url = url
        where = f" for {method} {url}" if method else ""
        super().__init__(f"response code {status}{where}: {body}")


class AuthenticationError(RemoteError):
    """
    Credential exchange failed, or an authorization failure could not be
    recovered by the session's retry policy.
    """

    def __init__(self, message: str, status: int|None = None, body: str = "",
                 method: str = "", url: str = "") -> None:
        self.status = status
        self.body = body
        self.method = method
        self.url = url
        GDataSheetsError.__init__(self, message)


class BatchInterruptedError(GDataSheetsError):
    """The server aborted a batch request part way through."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"update has failed: {reason}")


class CellUpdateError(GDataSheetsError):
    """One operation in a batch cell update failed."""

    def __init__(self, cell_id: str, reason: str) -> None:
        self.cell_id = cell_id
        self.reason = reason
        super().__init__(f"updating cell {cell_id} has failed: {reason}")
