import socket
import threading
from typing import Any, Dict, List

import pytest
from escpos.exceptions import DeviceNotFoundError
from escpos.exceptions import Error as EscposError
from PIL import Image

from label_printer.core.errors import InvalidParameterError, PrintFailedError, PrinterNotFoundError
from label_printer.printing.service import DEFAULT_NETWORK_TIMEOUT, ConfiguredPrinterService, connect_printer
from label_printer.printing.tapes import Tape
from conftest import write_config


class FakeEscpos:
    def __init__(self):
        self.images: List[Image.Image] = []
        self.cut_calls = 0
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def image(self, img):
        self.images.append(img)

    def cut(self):
        self.cut_calls += 1

    def close(self):
        self.closed = True


def _cfg() -> Dict[str, Any]:
    return {
        "printers": [
            {"serial_number": "SN-1", "model": "DYMO LabelManager PnP", "printer_type": "usb"},
            {"serial_number": "SN-2", "tapes": ["D1_6_MM", "D1_9_MM"], "printer_type": "network", "cut": True},
            {"serial_number": "SN-OFF", "printer_type": "usb"},
        ]
    }


@pytest.fixture
def connections():
    return []


@pytest.fixture
def service(connections):
    def _connect(entry):
        if entry["serial_number"] == "SN-OFF":
            raise OSError("USB device not found")
        p = FakeEscpos()
        connections.append((entry["serial_number"], p))
        return p

    return ConfiguredPrinterService(config_loader=_cfg, connect=_connect)


def test_lists_only_reachable_printers(service, connections):
    printers = service.list_available_printers()
    assert [p.serial_number for p in printers] == ["SN-1", "SN-2"]
    assert dict(printers[0].label_heights) == {Tape.D1_6_MM: 32, Tape.D1_9_MM: 48, Tape.D1_12_MM: 64}
    assert dict(printers[1].label_heights) == {Tape.D1_6_MM: 32, Tape.D1_9_MM: 48}
    assert printers[0].model == "DYMO LabelManager PnP"
    # Connections used to check attachment are closed again
    assert all(p.closed for _, p in connections)


def test_find_printer(service):
    assert service.find_printer("SN-2").serial_number == "SN-2"
    assert service.find_printer("SN-OFF") is None
    assert service.find_printer(None) is None


def test_print_label_sends_image_and_closes(service, connections):
    img = Image.new("1", (50, 64), 1)
    service.print_label("SN-1", Tape.D1_12_MM, img)
    serial, p = connections[-1]
    assert serial == "SN-1"
    assert p.images == [img]
    assert p.cut_calls == 0
    assert p.closed


def test_print_label_cuts_when_configured(service, connections):
    service.print_label("SN-2", Tape.D1_9_MM, Image.new("1", (10, 48), 1))
    assert connections[-1][1].cut_calls == 1


def test_print_label_unknown_serial(service):
    with pytest.raises(PrinterNotFoundError):
        service.print_label("nope", Tape.D1_12_MM, Image.new("1", (10, 64)))


def test_print_label_unreachable_printer_is_not_found(service):
    with pytest.raises(PrinterNotFoundError):
        service.print_label("SN-OFF", Tape.D1_12_MM, Image.new("1", (10, 64)))


def test_print_label_rejects_unsupported_tape(service):
    with pytest.raises(InvalidParameterError):
        service.print_label("SN-2", Tape.D1_12_MM, Image.new("1", (10, 64)))


def test_print_label_rejects_wrong_height(service):
    with pytest.raises(InvalidParameterError):
        service.print_label("SN-1", Tape.D1_12_MM, Image.new("1", (10, 63)))


def test_prints_to_same_printer_are_serialized():
    active = []
    overlap = []
    lock = threading.Lock()

    class SlowEscpos(FakeEscpos):
        def image(self, img):
            with lock:
                active.append(1)
                if len(active) > 1:
                    overlap.append(True)
            threading.Event().wait(0.05)
            with lock:
                active.pop()

    svc = ConfiguredPrinterService(config_loader=_cfg, connect=lambda entry: SlowEscpos())
    img = Image.new("1", (10, 64), 1)
    threads = [threading.Thread(target=svc.print_label, args=("SN-1", Tape.D1_12_MM, img)) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert overlap == []


def test_reads_config_file_on_every_call(tmp_path, monkeypatch):
    cfg_path = tmp_path / "cfg.json"
    monkeypatch.setenv("LABELPRINTER_CONFIG_PATH", str(cfg_path))
    svc = ConfiguredPrinterService(connect=lambda entry: FakeEscpos())

    assert svc.list_available_printers() == []
    write_config({"printers": [{"serial_number": "SN-9", "tapes": ["D1_12_MM"]}]}, cfg_path)
    assert [p.serial_number for p in svc.list_available_printers()] == ["SN-9"]


def test_connect_printer_rejects_unknown_type():
    with pytest.raises(InvalidParameterError):
        connect_printer({"printer_type": "bluetooth"})


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_connect_printer_network_uses_short_timeout():
    p = connect_printer({"printer_type": "network", "network_ip": "127.0.0.1", "network_port": "9100"})
    assert p.timeout == DEFAULT_NETWORK_TIMEOUT
    p = connect_printer({"printer_type": "network", "network_ip": "127.0.0.1", "network_timeout": 0.5})
    assert p.timeout == 0.5


def test_printer_whose_device_does_not_open_is_not_attached():
    class DeadEscpos(FakeEscpos):
        def open(self):
            raise DeviceNotFoundError("No device")

    svc = ConfiguredPrinterService(config_loader=_cfg, connect=lambda entry: DeadEscpos())
    assert svc.list_available_printers() == []
    assert svc.find_printer("SN-1") is None
    with pytest.raises(PrinterNotFoundError):
        svc.print_label("SN-1", Tape.D1_12_MM, Image.new("1", (10, 64), 1))


def test_network_printer_on_closed_port_is_not_attached():
    port = _closed_port()
    cfg = {
        "printers": [
            {
                "serial_number": "SN-DEAD",
                "printer_type": "network",
                "network_ip": "127.0.0.1",
                "network_port": str(port),
                "network_timeout": 1,
            }
        ]
    }
    svc = ConfiguredPrinterService(config_loader=lambda: cfg)

    assert svc.list_available_printers() == []
    assert svc.find_printer("SN-DEAD") is None
    with pytest.raises(PrinterNotFoundError):
        svc.print_label("SN-DEAD", Tape.D1_12_MM, Image.new("1", (10, 64), 1))


def test_escpos_error_while_printing_is_print_failure():
    class JammedEscpos(FakeEscpos):
        def image(self, img):
            raise EscposError("paper jam")

    jammed = JammedEscpos()
    svc = ConfiguredPrinterService(config_loader=_cfg, connect=lambda entry: jammed)
    with pytest.raises(PrintFailedError):
        svc.print_label("SN-1", Tape.D1_12_MM, Image.new("1", (10, 64), 1))
    assert jammed.closed


def test_print_label_opens_device_before_printing(service, connections):
    service.print_label("SN-1", Tape.D1_12_MM, Image.new("1", (10, 64), 1))
    assert connections[-1][1].opened


def test_print_label_sends_one_bit_raster_for_grayscale_image(service, connections):
    img = Image.new("L", (40, 64), 255)
    img.paste(20, (0, 0, 20, 64))
    service.print_label("SN-1", Tape.D1_12_MM, img)

    sent = connections[-1][1].images[0]
    assert sent.mode == "1"
    assert sent.size == (40, 64)
    assert sent.getpixel((5, 32)) == 0
    assert sent.getpixel((35, 32)) == 255


def test_print_label_thresholds_sixteen_bit_pass_through(service, connections):
    img = Image.new("I;16", (40, 64), 65535)
    img.paste(Image.new("I;16", (20, 64), 16000), (0, 0))
    service.print_label("SN-1", Tape.D1_12_MM, img)

    sent = connections[-1][1].images[0]
    assert sent.mode == "1"
    assert sent.getpixel((5, 32)) == 0
    assert sent.getpixel((35, 32)) == 255
