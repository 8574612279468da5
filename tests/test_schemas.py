import pytest
from pydantic import ValidationError

from label_printer.printing.tapes import Tape
from label_printer.web import schemas as s
from conftest import make_printer


def test_print_params_defaults():
    p = s.PrintParams.model_validate({"tape": None, "preview": None})
    assert p.tape is Tape.D1_12_MM
    assert p.preview is False


@pytest.mark.parametrize("raw", ["true", "1", "yes", "on", "True"])
def test_print_params_preview_truthy(raw):
    assert s.PrintParams.model_validate({"preview": raw}).preview is True


def test_print_params_tape_case_insensitive():
    assert s.PrintParams.model_validate({"tape": "d1_9_mm"}).tape is Tape.D1_9_MM


def test_print_params_unknown_tape():
    with pytest.raises(ValidationError):
        s.PrintParams.model_validate({"tape": "D1_19_MM"})


def test_printer_out_from_printer():
    out = s.PrinterOut.from_printer(make_printer("SN-7", tapes=["D1_9_MM"]))
    assert out.model_dump() == {
        "serial_number": "SN-7",
        "model": "DYMO LabelManager PnP",
        "label_heights": {"D1_9_MM": 48},
    }
