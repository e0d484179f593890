"""Exceptions raised while reading replays."""

from __future__ import annotations


class DissectError(Exception):
    """Base class for all replay reading errors."""

    default_message = "dissect: error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidFileError(DissectError):
    """The data is not a dissect replay."""

    default_message = "dissect: not a dissect file"


class InvalidFolderError(DissectError):
    """The directory is not a match folder."""

    default_message = "dissect: not a match folder"


class InvalidStringSeparatorError(DissectError):
    """A header string was not followed by the expected separator."""

    default_message = "dissect: invalid string separator"


class EndOfData(DissectError, EOFError):
    """The replay data ran out before a read completed."""

    default_message = "EOF"


def is_ok(error: BaseException | None) -> bool:
    """Return True if ``error`` is absent or only signals the end of the data."""
    return error is None or isinstance(error, EOFError)