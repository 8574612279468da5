"""
Printer directory and print dispatch.

PrinterService is the seam between the label pipeline and real hardware:
- list_available_printers() enumerates attached printers (fresh every call)
- print_label() sends a prepared image to one of them

ConfiguredPrinterService implements it on top of the JSON config and
python-escpos. A configured printer counts as attached when its device
opens; escpos connects lazily, so the service calls open() itself.
Printing to one device is serialized with a per-serial-number lock.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Optional

from escpos.exceptions import DeviceNotFoundError
from escpos.exceptions import Error as EscposError
from PIL import Image

from label_printer.core.config import configured_printers, load_config
from label_printer.core.errors import InvalidParameterError, PrintFailedError, PrinterNotFoundError
from label_printer.printing.scaler import to_binary
from label_printer.printing.tapes import TAPE_GEOMETRY, Tape, label_heights_for

logger = logging.getLogger(__name__)

# Seconds to wait for a network printer before treating it as unreachable
DEFAULT_NETWORK_TIMEOUT = 3.0


@dataclass(frozen=True)
class Printer:
    """An attached printer and the tapes it supports."""

    serial_number: str
    label_heights: Mapping[Tape, int] = field(default_factory=lambda: MappingProxyType({}))
    model: str = ""

    def supports(self, tape: Tape) -> bool:
        return tape in self.label_heights

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serial_number": self.serial_number,
            "model": self.model,
            "label_heights": {tape.value: height for tape, height in self.label_heights.items()},
        }


class PrinterService(ABC):
    """Enumerates attached printers and prints labels on them."""

    @abstractmethod
    def list_available_printers(self) -> List[Printer]:
        """
        Return the printers attached right now, in a stable order.
        """

    @abstractmethod
    def print_label(self, serial_number: str, tape: Tape, image: Image.Image) -> None:
        """
        Print image on the printer with serial_number using tape.

        Raises:
            PrinterNotFoundError if the printer is not attached.
            InvalidParameterError if the tape or image is not acceptable.
        """

    def find_printer(self, serial_number: Optional[str]) -> Optional[Printer]:
        """
        Look up an attached printer by serial number.
        """
        if serial_number is None:
            return None
        for printer in self.list_available_printers():
            if printer.serial_number == serial_number:
                return printer
        return None


def connect_printer(config: Mapping[str, Any]):
    """
    Create and return an ESC/POS printer instance based on a printer entry.
    Supports USB, Network, and Serial with optional 'printer_profile'.
    """
    profile = config.get("printer_profile") or None
    ptype = str(config.get("printer_type", "usb")).lower()

    if ptype == "usb":
        from escpos.printer import Usb

        vendor = int(str(config.get("usb_vendor_id", "0x0922")), 16)
        product = int(str(config.get("usb_product_id", "0x1002")), 16)
        if profile:
            return Usb(vendor, product, profile=profile)
        return Usb(vendor, product)
    if ptype == "network":
        from escpos.printer import Network

        ip = str(config.get("network_ip", ""))
        port = int(str(config.get("network_port", "9100")))
        timeout = float(config.get("network_timeout", DEFAULT_NETWORK_TIMEOUT))
        if profile:
            return Network(ip, port, timeout=timeout, profile=profile)
        return Network(ip, port, timeout=timeout)
    if ptype == "serial":
        from escpos.printer import Serial

        port = str(config.get("serial_port", ""))
        baud = int(str(config.get("serial_baudrate", "19200")))
        if profile:
            return Serial(port, baudrate=baud, profile=profile)
        return Serial(port, baudrate=baud)
    raise InvalidParameterError(f"Unsupported printer type: {ptype}")


def _close_quietly(p) -> None:
    try:
        p.close()
    except Exception as e:
        logger.debug("Ignoring printer close error: %s", e)


class ConfiguredPrinterService(PrinterService):
    """
    PrinterService backed by the 'printers' list of the JSON config.

    Each entry looks like:
        {"serial_number": "...", "model": "DYMO LabelManager PnP",
         "tapes": ["D1_6_MM", "D1_9_MM", "D1_12_MM"],
         "printer_type": "usb", "usb_vendor_id": "0x0922", "usb_product_id": "0x1002",
         "cut": false}
    """

    def __init__(
        self,
        geometry: Mapping[Tape, int] = TAPE_GEOMETRY,
        config_loader: Callable[[], Optional[Dict[str, Any]]] = load_config,
        connect: Callable[[Mapping[str, Any]], Any] = connect_printer,
    ):
        self.geometry = geometry
        self._load_config = config_loader
        self._connect = connect
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, serial_number: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(serial_number)
            if lock is None:
                lock = threading.Lock()
                self._locks[serial_number] = lock
            return lock

    def _entries(self) -> List[Dict[str, Any]]:
        return configured_printers(self._load_config())

    def _open(self, entry: Mapping[str, Any]):
        """
        Connect to the printer of entry and open its device.
        Raises DeviceNotFoundError (or OSError) when it is not reachable.
        """
        p = self._connect(entry)
        try:
            p.open()
        except Exception:
            _close_quietly(p)
            raise
        return p

    def _is_attached(self, entry: Mapping[str, Any]) -> bool:
        try:
            p = self._open(entry)
        except (DeviceNotFoundError, EscposError, InvalidParameterError, OSError) as e:
            logger.debug("Printer %s not reachable: %s", entry.get("serial_number"), e)
            return False
        _close_quietly(p)
        return True

    def _to_printer(self, entry: Mapping[str, Any]) -> Printer:
        tapes = entry.get("tapes")
        return Printer(
            serial_number=str(entry["serial_number"]),
            label_heights=label_heights_for(tapes if isinstance(tapes, list) else None, self.geometry),
            model=str(entry.get("model", "") or ""),
        )

    def list_available_printers(self) -> List[Printer]:
        printers = []
        for entry in self._entries():
            # A printer that is busy printing is attached; don't open it mid-job.
            if self._lock_for(str(entry["serial_number"])).locked() or self._is_attached(entry):
                printers.append(self._to_printer(entry))
        return printers

    def print_label(self, serial_number: str, tape: Tape, image: Image.Image) -> None:
        entry = next((e for e in self._entries() if str(e["serial_number"]) == serial_number), None)
        if entry is None:
            raise PrinterNotFoundError(f"Printer not found: {serial_number}")

        printer = self._to_printer(entry)
        if not printer.supports(tape):
            raise InvalidParameterError(f"Unsupported tape! {tape.value}")
        expected = printer.label_heights[tape]
        if image.height != expected:
            raise InvalidParameterError(
                f"Image height {image.height} does not match {tape.value} height {expected}"
            )

        # The print head is 1-bit; threshold here so the device gets what the preview shows.
        raster = image if image.mode == "1" else to_binary(image)

        with self._lock_for(serial_number):
            try:
                p = self._open(entry)
            except (DeviceNotFoundError, EscposError, OSError) as e:
                logger.warning("Printer %s disappeared before printing: %s", serial_number, e)
                raise PrinterNotFoundError(f"Printer not found: {serial_number}") from e
            try:
                logger.info("Printing %dx%d label on %s (%s)", raster.width, raster.height, serial_number, tape.value)
                p.image(raster)
                if bool(entry.get("cut", False)):
                    p.cut()
            except DeviceNotFoundError as e:
                raise PrinterNotFoundError(f"Printer not found: {serial_number}") from e
            except EscposError as e:
                raise PrintFailedError(f"Printing on {serial_number} failed: {e}") from e
            finally:
                _close_quietly(p)
        logger.info("Printed label on %s", serial_number)


__all__ = [
    "DEFAULT_NETWORK_TIMEOUT",
    "ConfiguredPrinterService",
    "Printer",
    "PrinterService",
    "connect_printer",
]
