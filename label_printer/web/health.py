from __future__ import annotations

"""
Health endpoint for Label Printer.

`/healthz` reports:
- Overall status ("ok" or "degraded")
- Presence of a config with at least one printer
- How many configured printers are attached right now
"""

from typing import Any, Dict

from flask import Blueprint, current_app

from label_printer.core.config import configured_printers, load_config

health_bp = Blueprint("health", __name__)


@health_bp.get("/healthz")
def healthz():
    status: Dict[str, Any] = {"status": "ok"}

    try:
        cfg = load_config()
    except (OSError, ValueError) as e:
        status.update(status="degraded", reason=f"config_unreadable: {type(e).__name__}")
        return status, 200

    configured = configured_printers(cfg)
    status["printers_configured"] = len(configured)
    if not configured:
        status.update(status="degraded", reason="no_printers_configured")
        return status, 200

    attached = current_app.extensions["printer_service"].list_available_printers()
    status["printers_attached"] = len(attached)
    if not attached:
        status.update(status="degraded", reason="no_printers_attached")
    return status, 200
