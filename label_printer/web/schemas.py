from __future__ import annotations

"""
Pydantic schemas for the Label Printer HTTP API.

Query parameters are validated here so that only known tapes reach the
label pipeline.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from label_printer.printing.service import Printer
from label_printer.printing.tapes import DEFAULT_TAPE, Tape


class PrintParams(BaseModel):
    """Query parameters of POST /printers/<serial_number>."""
    tape: Tape = Field(
        default=DEFAULT_TAPE,
        description="Label cassette loaded in the printer",
        examples=["D1_6_MM", "D1_9_MM", "D1_12_MM"],
    )
    preview: bool = Field(
        default=False,
        description="Only render the label, do not print it",
    )

    @field_validator("tape", mode="before")
    @classmethod
    def _parse_tape(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_TAPE
        if isinstance(v, Tape):
            return v
        tape = Tape.parse(str(v))
        if tape is None:
            names = ", ".join(t.value for t in Tape)
            raise ValueError(f"Unknown tape {v!r}. Use one of: {names}")
        return tape

    @field_validator("preview", mode="before")
    @classmethod
    def _blank_preview(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return False
        return v


class PrinterOut(BaseModel):
    """An attached printer as returned by the API."""
    serial_number: str = Field(description="Unique printer serial number")
    model: str = Field(default="", description="Printer model name")
    label_heights: Dict[str, int] = Field(
        default_factory=dict,
        description="Required image height in pixels per supported tape",
        examples=[{"D1_6_MM": 32, "D1_9_MM": 48, "D1_12_MM": 64}],
    )

    @classmethod
    def from_printer(cls, printer: Printer) -> "PrinterOut":
        return cls.model_validate(printer.to_dict())


__all__ = ["PrintParams", "PrinterOut"]
