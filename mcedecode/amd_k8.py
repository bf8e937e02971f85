"""Decoding of machine checks reported by AMD K8 processors."""

from __future__ import annotations

from .bitfield import bitfield_msg
from .events import MCE_EXTENDED_BANK, MCI_THRESHOLD_OVER, MceEvent

_THRESHOLD_BASE = MCE_EXTENDED_BANK + 1
_THRESHOLD_TOP = _THRESHOLD_BASE + 6 * 9

_THRESHOLD_DRAM_ECC = 4 * 9 + 0
_THRESHOLD_LINK = 4 * 9 + 1
_THRESHOLD_L3_CACHE = 4 * 9 + 2
_THRESHOLD_FBDIMM = 4 * 9 + 3

_BANKS = (
    "data cache",
    "instruction cache",
    "bus unit",
    "load/store unit",
    "northbridge",
    "fixed-issue reorder",
)

_KNOWN_THRESHOLDS = {
    _THRESHOLD_DRAM_ECC: "MC4_MISC0 DRAM threshold",
    _THRESHOLD_LINK: "MC4_MISC1 Link threshold",
    _THRESHOLD_L3_CACHE: "MC4_MISC2 L3 Cache threshold",
    _THRESHOLD_FBDIMM: "MC4_MISC3 FBDIMM threshold",
}

_THRESHOLDS = tuple(
    _KNOWN_THRESHOLDS.get(index, "Unknown threshold counter")
    for index in range(_THRESHOLD_TOP - _THRESHOLD_BASE)
)

_TRANSACTION = ("instruction", "data", "generic", "reserved")
_CACHE_LEVEL = ("0", "1", "2", "generic")
_MEMTRANS = (
    "generic error", "generic read", "generic write", "data read",
    "data write", "instruction fetch", "prefetch", "evict", "snoop",
    "?", "?", "?", "?", "?", "?", "?",
)
_PARTPROC = (
    "local node origin", "local node response",
    "local node observed", "generic participation",
)
_TIMEOUT = ("request didn't time out", "request timed out")
_MEMORYIO = ("memory", "res.", "i/o", "generic")

_NB_EXTENDED_ERR = (
    "RAM ECC error",
    "CRC error",
    "Sync error",
    "Master abort",
    "Target abort",
    "GART error",
    "RMW error",
    "Watchdog error",
    "RAM Chipkill ECC error",
    "DEV Error",
    "Link Data Error",
    "Link Protocol Error",
    "NB Array Error",
    "DRAM Parity Error",
    "Link Retry",
    "Tablew Walk Data Error",
    "L3 Cache Data Error",
    "L3 Cache Tag Error",
    "L3 Cache LRU Error",
)

_HIGHBITS_NAMED = {
    31: "valid",
    30: "error overflow (multiple errors)",
    29: "error uncorrected",
    28: "error enable",
    27: "misc error valid",
    26: "error address valid",
    25: "processor context corrupt",
    24: "res24",
    23: "res23",
    14: "corrected ecc error",
    13: "uncorrected ecc error",
    12: "res12",
    11: "L3 subcache in error bit 1",
    10: "L3 subcache in error bit 0",
    9: "sublink or DRAM channel",
    8: "error found by scrub",
    3: "err cpu3",
    2: "err cpu2",
    1: "err cpu1",
    0: "err cpu0",
}
_HIGHBITS = tuple(_HIGHBITS_NAMED.get(index) for index in range(32))

# The ignore mask is built with a logical "or", which makes it 1; the call
# below passes it as the bit offset and 32 as the ignore mask.
_IGNORE_HIGHBITS = 1
_HIGHBITS_IGNORE_MASK = 32


def _exterrcode(event: MceEvent) -> int:
    return (event.status >> 16) & 0x0F


def _decode_generic_errcode(event: MceEvent) -> None:
    errcode = event.status & 0xFFFF

    text = bitfield_msg(_HIGHBITS, _IGNORE_HIGHBITS, _HIGHBITS_IGNORE_MASK, event.status)
    if text:
        event.append("error_msg", f"({text}) ")

    tt = _TRANSACTION[(errcode >> 2) & 3]
    level = _CACHE_LEVEL[errcode & 3]
    if (errcode & 0xFFF0) == 0x0010:
        event.append("error_msg", f"LB error '{tt} transaction, level {level}'")
    elif (errcode & 0xFF00) == 0x0100:
        event.append(
            "error_msg",
            f"memory/cache error '{_MEMTRANS[(errcode >> 4) & 0xF]} mem transaction, "
            f"{tt} transaction, level {level}'",
        )
    elif (errcode & 0xF800) == 0x0800:
        event.append(
            "error_msg",
            f"bus error '{_PARTPROC[(errcode >> 9) & 0x3]}, "
            f"{_TIMEOUT[(errcode >> 8) & 1]}: "
            f"{_MEMTRANS[(errcode >> 4) & 0xF]} mem transaction, "
            f"{_MEMORYIO[(errcode >> 2) & 0x3]} access, level {level}'",
        )


def _tlb_parity(event: MceEvent) -> None:
    if (event.status & 0xFFF0) == 0x0010:
        array = "physical" if _exterrcode(event) == 0 else "virtual"
        event.append("error_msg", f"TLB parity error in {array} array")


def _decode_dc(event: MceEvent) -> None:
    if event.status & (3 << 45):
        syndrome = (event.status >> 47) & 0xFF
        event.append("error_msg", f"Data cache ECC error (syndrome {syndrome:x})")
        if event.status & (1 << 40):
            event.append("error_msg", "found by scrubber")
    _tlb_parity(event)


def _decode_ic(event: MceEvent) -> None:
    if event.status & (3 << 45):
        event.append("error_msg", "Instruction cache ECC error")
    _tlb_parity(event)


def _decode_bu(event: MceEvent) -> None:
    if event.status & (3 << 45):
        event.append("error_msg", "L2 cache ECC error")
    kind = "Bus or cache" if not _exterrcode(event) else "Cache tag"
    event.append("error_msg", f"{kind} array error")


def _decode_nb(event: MceEvent) -> bool:
    """Decode a northbridge error; return whether it is a memory error."""
    exterrcode = _exterrcode(event)
    status = event.status
    event.append("error_msg", f"Northbridge {_NB_EXTENDED_ERR[exterrcode]}")

    if exterrcode == 0:
        event.append("error_msg", f"ECC syndrome = {(status >> 47) & 0xFF:x}")
        return True
    if exterrcode == 8:
        syndrome = (((status >> 24) & 0xFF) << 8) | ((status >> 47) & 0xFF)
        event.append("error_msg", f"Chipkill ECC syndrome = {syndrome:x}")
        return True
    if exterrcode in (1, 2, 3, 4, 6):
        event.append("error_msg", f"link number = {(status >> 36) & 0xF:x}")
    return False


def _bank_name(event: MceEvent) -> None:
    bank = event.bank
    if 0 <= bank < len(_BANKS):
        name = _BANKS[bank]
    elif _THRESHOLD_BASE <= bank < _THRESHOLD_TOP:
        name = _THRESHOLDS[bank - _THRESHOLD_BASE]
    else:
        return
    event.append("bank_name", f"{name} (bank={bank})")


def parse_amd_k8_event(event: MceEvent) -> bool:
    """Decode a K8 machine check into ``event``.

    Returns False, leaving the event untouched, for GART errors, which are
    not handled.
    """
    if event.bank == 4 and _exterrcode(event) == 5 and event.status & (1 << 61):
        return False

    _bank_name(event)

    memory_error = False
    bank = event.bank
    if bank == 0:
        _decode_dc(event)
        _decode_generic_errcode(event)
    elif bank == 1:
        _decode_ic(event)
        _decode_generic_errcode(event)
    elif bank == 2:
        _decode_bu(event)
        _decode_generic_errcode(event)
    elif bank in (3, 5):
        _decode_generic_errcode(event)
    elif bank == 4:
        memory_error = _decode_nb(event)
        _decode_generic_errcode(event)
    elif _THRESHOLD_BASE <= bank <= _THRESHOLD_TOP:
        if event.misc & MCI_THRESHOLD_OVER:
            event.append("error_msg", "Threshold error count overflow")
    else:
        event.error_msg = "Don't know how to decode this bank"

    # The instruction pointer is meaningless for memory errors.
    if memory_error:
        event.ip = 0
    return True