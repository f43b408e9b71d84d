"""
A client side model of spreadsheets exposed through the GData feed protocol.
The goal is to simplify working with the cell feeds: addressing cells with A1
labels, keeping a local mirror of a worksheet, and pushing edits back in a
single batch.

Python dataclasses are used for the feed entries and most of the logic is
translating between those and the raw Atom documents.

A GDataSession holds the credential and talks HTTP, every spreadsheet and
worksheet handle is built from one and shares it.
"""
from .errors import (GDataSheetsError, InvalidAddress, RemoteError, AuthenticationError,
                     BatchInterruptedError, CellUpdateError)
from .access import GDataSession, AuthRetryPolicy, OAuthRecovery
from .sheets import Spreadsheet, Worksheet, LoadState

def login(mail: str, password: str) -> GDataSession:
    """Authenticate with mail and password and return the new session."""
    return GDataSession.login_with(mail, password)
