"""Generic decoders for named bits and numeric fields of a register."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .events import MceEvent

# A table without strings is treated as having the widest possible mask.
_NO_TABLE_LIMIT = 0xFFFFFFFF


@dataclass(frozen=True)
class Field:
    """A register field whose value indexes a table of descriptions.

    ``names`` may be a sequence or a sparse mapping of value to text;
    missing values are ``None``.
    """

    start_bit: int
    names: tuple = ()

    def __post_init__(self) -> None:
        names = self.names
        if isinstance(names, Mapping):
            size = max(names, default=-1) + 1
            names = tuple(names.get(value) for value in range(size))
        else:
            names = tuple(names)
        object.__setattr__(self, "names", names)


@dataclass(frozen=True)
class NumField:
    """A register field printed as a number."""

    start: int
    end: int
    name: str
    as_hex: bool = False
    force: bool = False


def sbitfield(start_bit: int, text: str) -> Field:
    """A single bit described by ``text`` when set."""
    return Field(start_bit, (None, text))


def field_null(start_bit: int) -> Field:
    """A field without descriptions; any set bits are reported raw."""
    return Field(start_bit, ())


def number(start: int, end: int, name: str) -> NumField:
    return NumField(start, end, name)


def number_force(start: int, end: int, name: str) -> NumField:
    return NumField(start, end, name, force=True)


def hex_number(start: int, end: int, name: str) -> NumField:
    return NumField(start, end, name, as_hex=True)


def hex_number_force(start: int, end: int, name: str) -> NumField:
    return NumField(start, end, name, as_hex=True, force=True)


def mask(bits: int) -> int:
    """Mask covering bits 0 through ``bits`` inclusive."""
    return (1 << (bits + 1)) - 1


def extract(value: int, start: int, end: int) -> int:
    """Bits ``start`` through ``end`` inclusive of ``value``."""
    return (value >> start) & mask(end - start)


def test_prefix(nr: int, value: int) -> bool:
    """True when the highest set bit of ``value`` is bit ``nr``."""
    return (value >> nr) == 1


test_prefix.__test__ = False


def bitfield_msg(
    names: Sequence[str | None], bit_offset: int, ignore_bits: int, status: int
) -> str:
    """Comma separated names of the set bits, starting at ``bit_offset``."""
    if status & ignore_bits:
        return ""
    parts = []
    for index, name in enumerate(names):
        bit = index + bit_offset
        if status & (1 << bit):
            parts.append(name if name is not None else f"BIT{bit}")
    return ", ".join(parts)


def _bitmask(limit: int) -> int:
    result = 1
    while result < limit:
        result = (result << 1) | 1
    return result


def decode_bitfield(event: MceEvent, status: int, fields: Iterable[Field]) -> None:
    """Append the description of each field's value to the error message."""
    for field in fields:
        size = len(field.names)
        limit = size - 1 if size else _NO_TABLE_LIMIT
        value = (status >> field.start_bit) & _bitmask(limit)
        text = field.names[value] if value < size else None
        if text is None:
            if value == 0:
                continue
            event.append("error_msg", f"<{field.start_bit}:{value:x}>")
        else:
            event.append("error_msg", text)


def decode_numfield(event: MceEvent, status: int, fields: Iterable[NumField]) -> None:
    """Append each non-zero (or forced) numeric field to the error message."""
    for field in fields:
        value = (status >> field.start) & ((1 << (field.end - field.start + 1)) - 1)
        if value > 0 or field.force:
            shown = f"{value:x}" if field.as_hex else f"{value}"
            event.append("error_msg", f"{field.name}: {shown}\n")