from __future__ import annotations

"""
Printer endpoints.

- GET  /printers                 : attached printers
- GET  /printers/<serial_number> : one printer, 404 if not attached
- POST /printers/<serial_number> : print (or preview) an uploaded image
      query: tape=D1_12_MM (default), preview=false (default)
      body:  multipart/form-data with the image in 'multipartFile' (or 'file')
      returns the PNG that was (or would be) printed
"""

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import ValidationError

from label_printer.core.errors import ErrorKind
from label_printer.printing.handler import LabelRequestHandler, PrintRequest
from label_printer.printing.service import PrinterService
from . import schemas

printers_bp = Blueprint("printers", __name__, url_prefix="/printers")

UPLOAD_FIELDS = ("multipartFile", "file")


def _json_error(msg: str, code: int = 400):
    return jsonify({"error": msg}), code


def _printer_service() -> PrinterService:
    return current_app.extensions["printer_service"]


def _validation_message(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    msg = errors[0].get("msg") or str(e)
    return msg.removeprefix("Value error, ")


@printers_bp.get("")
def list_printers():
    printers = _printer_service().list_available_printers()
    return jsonify([schemas.PrinterOut.from_printer(p).model_dump() for p in printers])


@printers_bp.get("/<serial_number>")
def get_printer(serial_number: str):
    printer = _printer_service().find_printer(serial_number)
    if printer is None:
        return _json_error(f"Printer not found: {serial_number}", 404)
    return jsonify(schemas.PrinterOut.from_printer(printer).model_dump())


@printers_bp.post("/<serial_number>")
def print_label(serial_number: str):
    """
    Print a label image (PNG, JPEG, BMP, GIF).

    The image should already have the pixel height of the tape; otherwise it
    is scaled to that height, keeping its proportions.
    """
    try:
        params = schemas.PrintParams.model_validate(
            {"tape": request.args.get("tape"), "preview": request.args.get("preview")}
        )
    except ValidationError as e:
        return _json_error(_validation_message(e), 400)

    upload = next((request.files[f] for f in UPLOAD_FIELDS if f in request.files), None)
    if upload is None:
        return _json_error("Missing image upload (multipartFile).", 400)
    try:
        data = upload.read()
    except OSError as e:
        current_app.logger.exception("Reading upload failed")
        return _json_error(str(e), 500)

    handler = LabelRequestHandler(
        _printer_service(),
        force_binary=bool(current_app.config.get("FORCE_BINARY", False)),
    )
    result = handler.handle(
        PrintRequest(serial_number=serial_number, image_data=data, tape=params.tape, preview=params.preview)
    )
    if result.error is not None:
        kind = result.error.kind
        if kind is ErrorKind.INTERNAL_ERROR:
            current_app.logger.error("Label request failed: %s", result.error.message)
        return _json_error(result.error.message, kind.status_code)

    resp = Response(result.png, mimetype=result.content_type)
    resp.headers["Content-Length"] = str(result.content_length)
    return resp


__all__ = ["printers_bp"]
