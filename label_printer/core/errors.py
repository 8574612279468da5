"""
Error taxonomy for Label Printer.

Collaborators (the printer service) signal failures with exceptions. The
request pipeline converts them, along with its own validation failures, into
LabelError values so nothing is thrown across layers.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ErrorKind(enum.Enum):
    NOT_FOUND = 404
    BAD_REQUEST = 400
    INTERNAL_ERROR = 500

    @property
    def status_code(self) -> int:
        return self.value


@dataclass(frozen=True)
class LabelError:
    """A failed label request: what went wrong and the message to surface."""

    kind: ErrorKind
    message: str = ""


class LabelPrinterError(Exception):
    """Base class for printer service failures."""


class PrinterNotFoundError(LabelPrinterError):
    """The printer is not (or no longer) attached."""


class InvalidParameterError(LabelPrinterError):
    """The printer service rejected a print parameter."""


class PrintFailedError(LabelPrinterError):
    """The printer was reachable but the print itself failed."""


__all__ = [
    "ErrorKind",
    "InvalidParameterError",
    "LabelError",
    "LabelPrinterError",
    "PrintFailedError",
    "PrinterNotFoundError",
]
