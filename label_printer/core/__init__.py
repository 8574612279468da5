"""
Core utilities for Label Printer.

This package groups non-Flask helpers used across the app:
- config: config path resolution, JSON load/save, env settings
- errors: error kinds and printer service exceptions
- logging: Request ID aware logging filters/formatters and root logger config
"""

from .config import (
    configured_printers,
    default_config_path,
    env_bool,
    env_int,
    get_config_path,
    load_config,
)
from .errors import (
    ErrorKind,
    InvalidParameterError,
    LabelError,
    LabelPrinterError,
    PrintFailedError,
    PrinterNotFoundError,
)
from .logging import (
    JsonFormatter,
    RequestIdFilter,
    configure_logging,
)

__all__ = [
    # config
    "configured_printers",
    "default_config_path",
    "env_bool",
    "env_int",
    "get_config_path",
    "load_config",
    # errors
    "ErrorKind",
    "InvalidParameterError",
    "LabelError",
    "LabelPrinterError",
    "PrintFailedError",
    "PrinterNotFoundError",
    # logging
    "configure_logging",
    "RequestIdFilter",
    "JsonFormatter",
]
