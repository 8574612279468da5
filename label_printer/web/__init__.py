"""
Web module for Label Printer.

Exposes blueprints for:
- Printer listing and label printing: printers_bp
- Health endpoint: health_bp
"""

from .health import health_bp
from .printers import printers_bp

__all__ = ["health_bp", "printers_bp"]
