"""Exceptions raised while importing history exports.

Only ``ConfigError`` stops a whole run. The other errors stop the file that
raised them and the importer moves on to the next file.
"""

from __future__ import annotations


class HistoryImportError(Exception):
    """Base class for import failures."""


class CellError(HistoryImportError):
    """A spreadsheet cell holds an error value such as ``#NAME?``."""

    def __init__(self, description: str) -> None:
        super().__init__(f"Error: {description}")
        self.description = description


class SchemaViolation(HistoryImportError):
    """The input file does not have the expected worksheet or columns."""


class StoreError(HistoryImportError):
    """The database rejected a query, a commit or a connection attempt."""


class ConfigError(HistoryImportError):
    """The run is missing a connection string, an input file or a valid setting."""
