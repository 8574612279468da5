"""
Label request pipeline.

Turns a PrintRequest into a PNG of what was (or would be) printed:

    resolve printer -> check tape -> decode image -> scale to tape height
    -> dispatch (unless preview) -> encode PNG

Every exit is a LabelResult value. Printer service exceptions are converted
here; nothing is raised to the caller for expected failures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from label_printer.core.errors import (
    ErrorKind,
    InvalidParameterError,
    LabelError,
    LabelPrinterError,
    PrinterNotFoundError,
)
from label_printer.printing.codec import decode_image, encode_png
from label_printer.printing.scaler import scale_label, to_binary
from label_printer.printing.service import PrinterService
from label_printer.printing.tapes import DEFAULT_TAPE, Tape

logger = logging.getLogger(__name__)

PNG_CONTENT_TYPE = "image/png"


@dataclass(frozen=True)
class PrintRequest:
    serial_number: str
    image_data: bytes
    tape: Tape = DEFAULT_TAPE
    preview: bool = False


@dataclass(frozen=True)
class LabelResult:
    """Outcome of a label request: PNG bytes on success, otherwise an error."""

    png: Optional[bytes] = None
    error: Optional[LabelError] = None
    printed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def content_type(self) -> str:
        return PNG_CONTENT_TYPE

    @property
    def content_length(self) -> int:
        return len(self.png or b"")

    @classmethod
    def failure(cls, kind: ErrorKind, message: str = "") -> "LabelResult":
        return cls(error=LabelError(kind, message))


class LabelRequestHandler:
    """
    Prepares and optionally prints labels through a PrinterService.

    force_binary: also convert images that already have the tape height to
    1-bit. Off by default, so such images pass through untouched.
    """

    def __init__(self, printer_service: PrinterService, force_binary: bool = False):
        self.printer_service = printer_service
        self.force_binary = force_binary

    def prepare(self, image: Image.Image, required_height: int) -> Image.Image:
        """
        Bring a decoded image to the required height.
        """
        if image.height != required_height:
            return scale_label(image, required_height)
        if self.force_binary:
            return to_binary(image)
        return image

    def handle(self, req: PrintRequest) -> LabelResult:
        printer = self.printer_service.find_printer(req.serial_number)
        if printer is None:
            return LabelResult.failure(ErrorKind.NOT_FOUND, f"Printer not found: {req.serial_number}")

        if not printer.supports(req.tape):
            return LabelResult.failure(ErrorKind.BAD_REQUEST, f"Unsupported tape! {req.tape.value}")
        required_height = printer.label_heights[req.tape]

        image = decode_image(req.image_data)
        if image is None:
            return LabelResult.failure(ErrorKind.BAD_REQUEST, "Unsupported image type!")

        label = self.prepare(image, required_height)

        if not req.preview:
            try:
                self.printer_service.print_label(printer.serial_number, req.tape, label)
            except PrinterNotFoundError as e:
                logger.warning("Printer %s vanished before printing: %s", printer.serial_number, e)
                return LabelResult.failure(ErrorKind.NOT_FOUND, str(e))
            except InvalidParameterError as e:
                return LabelResult.failure(ErrorKind.BAD_REQUEST, str(e))
            except (LabelPrinterError, OSError) as e:
                logger.exception("Printing on %s failed", printer.serial_number)
                return LabelResult.failure(ErrorKind.INTERNAL_ERROR, str(e))

        try:
            png = encode_png(label)
        except OSError as e:
            logger.exception("PNG encoding failed")
            return LabelResult.failure(ErrorKind.INTERNAL_ERROR, str(e))

        return LabelResult(png=png, printed=not req.preview)


__all__ = ["PNG_CONTENT_TYPE", "LabelRequestHandler", "LabelResult", "PrintRequest"]
