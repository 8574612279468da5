"""
Label Printer package

This module provides an application factory:
- Configures logging via label_printer.core.logging
- Creates a Flask app with env-driven limits
- Builds the printer service once and shares it through app.extensions
- Registers the web blueprints
"""

from __future__ import annotations

import importlib
import logging
import uuid
from collections.abc import Sequence
from typing import Optional

from flask import Flask, g

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

DEFAULT_BLUEPRINTS = (
    ("label_printer.web.printers", "printers_bp"),  # printer listing and printing
    ("label_printer.web.health", "health_bp"),  # health endpoint
)


def _register_blueprint(app: Flask, import_path: str, attr: str) -> None:
    mod = importlib.import_module(import_path)
    app.register_blueprint(getattr(mod, attr))
    app.logger.debug(f"Registered blueprint: {import_path}.{attr}")


def _set_request_id() -> None:
    """
    Assign a request ID for logging if not set elsewhere.
    """
    g.request_id = getattr(g, "request_id", uuid.uuid4().hex)


def create_app(
    config_overrides: Optional[dict] = None,
    blueprints: Optional[Sequence[tuple[str, str]]] = None,
    printer_service=None,
) -> Flask:
    """
    Application factory.

    Parameters:
    - config_overrides: values to inject into app.config after defaults
    - blueprints: optional list of (import_path, attribute) tuples to register
      instead of the default set
    - printer_service: PrinterService to use; defaults to a
      ConfiguredPrinterService over the JSON config and the tape geometry table

    Returns:
    - Flask app instance
    """
    from label_printer.core.config import env_bool, env_int
    from label_printer.core.logging import configure_logging
    from label_printer.printing.service import ConfiguredPrinterService
    from label_printer.printing.tapes import TAPE_GEOMETRY

    app = Flask("label_printer")

    app.config["MAX_CONTENT_LENGTH"] = env_int("LABELPRINTER_MAX_CONTENT_LENGTH", 5 * 1024 * 1024)  # 5 MiB
    app.config["FORCE_BINARY"] = env_bool("LABELPRINTER_FORCE_BINARY", False)

    configure_logging()

    app.url_map.strict_slashes = False

    @app.before_request
    def _before_request():
        _set_request_id()

    if printer_service is None:
        printer_service = ConfiguredPrinterService(geometry=TAPE_GEOMETRY)
    app.extensions["printer_service"] = printer_service

    for import_path, attr in blueprints or DEFAULT_BLUEPRINTS:
        _register_blueprint(app, import_path, attr)

    if config_overrides:
        app.config.update(config_overrides)

    app.logger.info("Label Printer app created")
    return app


__all__ = ["__version__", "create_app"]
