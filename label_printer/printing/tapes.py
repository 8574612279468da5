"""
Tape cassettes and the pixel height each one requires.

DYMO LabelManager PnP:

    +------------------+--------------+
    |  Label cassette  | Image height |
    +------------------+--------------+
    | D1 6mm  | 1/4 in | 32 pixel     |
    | D1 9mm  | 3/8 in | 48 pixel     |
    | D1 12mm | 1/2 in | 64 pixel     |
    +------------------+--------------+
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Dict, Optional


class Tape(str, enum.Enum):
    D1_6_MM = "D1_6_MM"
    D1_9_MM = "D1_9_MM"
    D1_12_MM = "D1_12_MM"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Tape"]:
        """Look up a tape by name (case-insensitive); None if unknown."""
        if value is None:
            return None
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return None


DEFAULT_TAPE = Tape.D1_12_MM

TAPE_GEOMETRY: Mapping[Tape, int] = MappingProxyType(
    {
        Tape.D1_6_MM: 32,
        Tape.D1_9_MM: 48,
        Tape.D1_12_MM: 64,
    }
)


def label_heights_for(
    tape_names: Optional[Iterable[str]],
    geometry: Mapping[Tape, int] = TAPE_GEOMETRY,
) -> Mapping[Tape, int]:
    """
    Build a printer's read-only tape -> height mapping from configured tape names.
    None means every tape in the geometry table; unknown names are skipped.
    """
    if tape_names is None:
        return MappingProxyType(dict(geometry))
    heights: Dict[Tape, int] = {}
    for name in tape_names:
        tape = Tape.parse(name)
        if tape is not None and tape in geometry:
            heights[tape] = geometry[tape]
    return MappingProxyType(heights)


__all__ = ["DEFAULT_TAPE", "TAPE_GEOMETRY", "Tape", "label_heights_for"]
