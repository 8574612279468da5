# Ensure the repository root is on sys.path so `label_printer` can be imported in tests.

import io
import json
import sys
from pathlib import Path
from typing import List, Optional

import pytest


def _ensure_repo_root_on_syspath() -> None:
    # This file lives at: <repo_root>/tests/conftest.py
    here = Path(__file__).resolve()
    repo_str = str(here.parent.parent)
    if repo_str not in sys.path:
        sys.path.insert(0, repo_str)


_ensure_repo_root_on_syspath()

from PIL import Image  # noqa: E402

from label_printer.printing.service import Printer, PrinterService  # noqa: E402
from label_printer.printing.tapes import TAPE_GEOMETRY, label_heights_for  # noqa: E402


class FakePrinterService(PrinterService):
    """In-memory PrinterService that records print calls."""

    def __init__(self, printers: Optional[List[Printer]] = None, print_error: Optional[Exception] = None):
        self.printers = list(printers or [])
        self.print_error = print_error
        self.printed = []
        self.list_calls = 0

    def list_available_printers(self):
        self.list_calls += 1
        return list(self.printers)

    def print_label(self, serial_number, tape, image):
        if self.print_error is not None:
            raise self.print_error
        self.printed.append((serial_number, tape, image))


def make_printer(serial_number: str = "SN-1", tapes=None) -> Printer:
    return Printer(
        serial_number=serial_number,
        label_heights=label_heights_for(tapes, TAPE_GEOMETRY),
        model="DYMO LabelManager PnP",
    )


def write_config(data, path) -> None:
    """Write a printer registry the way an operator would."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "L", color=0) -> bytes:
    img = Image.new(mode, (width, height), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def printer_service():
    return FakePrinterService([make_printer("SN-1"), make_printer("SN-6", tapes=["D1_6_MM"])])
