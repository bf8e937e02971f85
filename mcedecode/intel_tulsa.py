"""Model specific decoding for Tulsa processors."""

from __future__ import annotations

from .bitfield import (
    Field,
    decode_bitfield,
    decode_numfield,
    field_null,
    hex_number,
    number,
    sbitfield,
)
from .events import MCI_STATUS_MISCV, MceEvent

_CORR_NUMBERS = (number(32, 39, "Corrected events"),)
_ECC_NUMBERS = (hex_number(44, 51, "ECC syndrome"),)

_BUS_STATUS = (
    sbitfield(16, "Parity error detected during FSB request phase"),
    sbitfield(17, "Partity error detected on Core 0 request's address field"),
    sbitfield(18, "Partity error detected on Core 1 request's address field"),
    field_null(19),
    sbitfield(20, "Parity error on FSB response field detected"),
    sbitfield(21, "FSB data parity error on inbound date detected"),
    sbitfield(22, "Data parity error on data received from Core 0 detected"),
    sbitfield(23, "Data parity error on data received from Core 1 detected"),
    sbitfield(24, "Detected an Enhanced Defer parity error phase A or phase B"),
    sbitfield(25, "Data ECC event to error on inbound data correctable or uncorrectable"),
    sbitfield(26, "Pad logic detected a data strobe glitch or sequencing error"),
    sbitfield(27, "Pad logic detected a request strobe glitch or sequencing error"),
    field_null(28),
    field_null(31),
)


def _table(size: int, entries: dict[int, str]) -> tuple:
    return tuple(entries.get(value) for value in range(size))


_FRONT_ERROR = _table(0xF, {
    0x1: "Inclusion error from core 0",
    0x2: "Inclusion error from core 1",
    0x3: "Write Exclusive error from core 0",
    0x4: "Write Exclusive error from core 1",
    0x5: "Inclusion error from FSB",
    0x6: "SNP stall error from FSB",
    0x7: "Write stall error from FSB",
    0x8: "FSB Arbiter Timeout error",
    0x9: "CBC OOD Queue Underflow/overflow",
})

_INT_ERROR = _table(0xF, {
    0x1: "Enhanced Intel SpeedStep Technology TM1-TM2 Error",
    0x2: "Internal timeout error",
    0x3: "Internal timeout error",
    0x4: "Intel Cache Safe Technology Queue full error\n"
         "or disabled ways in a set overflow",
})

_INT_STATUS = (Field(8, _INT_ERROR),)
_FRONT_STATUS = (Field(0, _FRONT_ERROR),)

_CECC = (
    sbitfield(0, "Correctable ECC event on outgoing FSB data"),
    sbitfield(1, "Correctable ECC event on outgoing core 0 data"),
    sbitfield(2, "Correctable ECC event on outgoing core 1 data"),
)

_UECC = (
    sbitfield(0, "Uncorrectable ECC event on outgoing FSB data"),
    sbitfield(1, "Uncorrectable ECC event on outgoing core 0 data"),
    sbitfield(2, "Uncorrectable ECC event on outgoing core 1 data"),
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


def tulsa_decode_model(event: MceEvent) -> None:
    """Decode the model specific bits of a Tulsa machine check."""
    status = event.status
    decode_numfield(event, status, _CORR_NUMBERS)
    if status & (1 << 52):
        decode_numfield(event, status, _ECC_NUMBERS)
    # The MISC register layout is undocumented, so it is shown raw.
    if status & MCI_STATUS_MISCV:
        event.append(
            "mcistatus_msg",
            f"MISC format {(status >> 40) & 3:x} value {event.misc:x}\n",
        )

    code = status & 0xFFFF
    if code == 0xE0F:
        decode_bitfield(event, status, _BUS_STATUS)
    elif code == 1 << 10:
        _decode_internal(event, status)