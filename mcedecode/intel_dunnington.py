"""Model specific decoding for Dunnington processors."""

from __future__ import annotations

from collections.abc import Mapping

from .bitfield import Field, decode_bitfield, field_null, sbitfield
from .events import MceEvent

_BUS_STATUS = (
    sbitfield(16, "Parity error detected during FSB request phase"),
    field_null(17),
    sbitfield(20, "Hard Failure response received for a local transaction"),
    sbitfield(21, "Parity error on FSB response field detected"),
    sbitfield(22, "Parity data error on inbound data detected"),
    field_null(23),
    field_null(25),
    field_null(28),
    field_null(31),
)


def _table(size: int, entries: Mapping[int, str]) -> tuple[str | None, ...]:
    return tuple(entries.get(code) for code in range(size))


_FRONT_ERROR = _table(0xF, {
    0x1: "Inclusion error from core 0",
    0x2: "Inclusion error from core 1",
    0x3: "Write Exclusive error from core 0",
    0x4: "Write Exclusive error from core 1",
    0x5: "Inclusion error from FSB",
    0x6: "SNP stall error from FSB",
    0x7: "Write stall error from FSB",
    0x8: "FSB Arbiter Timeout error",
    0xA: "Inclusion error from core 2",
    0xB: "Write exclusive error from core 2",
})

_INT_ERROR = _table(0xF, {
    0x2: "Internal timeout error",
    0x3: "Internal timeout error",
    0x4: "Intel Cache Safe Technology Queue full error\n"
         "or disabled ways in a set overflow",
    0x5: "Quiet cycle timeout error (correctable)",
})

_INT_STATUS = (Field(8, _INT_ERROR),)
_FRONT_STATUS = (Field(0, _FRONT_ERROR),)

_CECC = (
    sbitfield(1, "Correctable ECC event on outgoing core 0 data"),
    sbitfield(2, "Correctable ECC event on outgoing core 1 data"),
    sbitfield(3, "Correctable ECC event on outgoing core 2 data"),
)

_UECC = (
    sbitfield(1, "Uncorrectable ECC event on outgoing core 0 data"),
    sbitfield(2, "Uncorrectable ECC event on outgoing core 1 data"),
    sbitfield(3, "Uncorrectable ECC event on outgoing core 2 data"),
)


def _decode_internal(event: MceEvent, status: int) -> None:
    mca = (status >> 16) & 0xFFFF
    if (mca & 0xFFF0) == 0:
        decode_bitfield(event, mca, _FRONT_STATUS)
    elif (mca & 0xF0FF) == 0:
        decode_bitfield(event, mca, _INT_STATUS)
    elif (mca & 0xFFF0) == 0xC000:
        decode_bitfield(event, mca, _CECC)
    elif (mca & 0xFFF0) == 0xE000:
        decode_bitfield(event, mca, _UECC)


def dunnington_decode_model(event: MceEvent) -> None:
    """Decode the model specific bits of a Dunnington machine check."""
    status = event.status
    code = status & 0xFFFF
    if code == 0xE0F:
        decode_bitfield(event, status, _BUS_STATUS)
    elif code == 1 << 10:
        _decode_internal(event, status)