"""
Printing subsystem for Label Printer.

- tapes: tape cassettes and their required pixel heights
- codec: Pillow decode/encode helpers
- scaler: scaling uploads to tape height and 1-bit conversion
- service: printer directory/dispatch (PrinterService, python-escpos backend)
- handler: the label request pipeline
"""

from .codec import *
from .handler import *
from .scaler import *
from .service import *
from .tapes import *
