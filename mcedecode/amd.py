"""Decoding of the AMD architectural MCA error code."""

from __future__ import annotations

from .events import (
    MCG_STATUS_RIPV,
    MCI_STATUS_DEFERRED,
    MCI_STATUS_OVER,
    MCI_STATUS_PCC,
    MCI_STATUS_UC,
    MCI_STATUS_VAL,
    MceEvent,
)

_TRANSACTION = ("instruction", "data", "generic", "reserved")
_CACHE_LEVEL = ("reserved", "L1", "L2", "L3/generic")
_MEMTRANS = (
    "generic", "generic read", "generic write", "data read",
    "data write", "instruction fetch", "prefetch", "evict", "snoop",
    "?", "?", "?", "?", "?", "?", "?",
)
_PARTPROC = (
    "local node origin", "local node response",
    "local node observed", "generic participation",
)
_TIMEOUT = ("request didn't time out", "request timed out")
_INTERNAL = ("reserved", "reserved", "hardware assert", "reserved")


def _tt(ec: int) -> str:
    return _TRANSACTION[(ec >> 2) & 0x3]


def _ll(ec: int) -> str:
    return _CACHE_LEVEL[ec & 0x3]


def _r4(ec: int) -> str:
    r4 = (ec >> 4) & 0xF
    return _MEMTRANS[r4] if r4 < 9 else "Wrong R4!"


def decode_amd_errcode(event: MceEvent) -> None:
    """Fill in severity, status flags and the error code description."""
    status = event.status
    ec = status & 0xFFFF
    ecc = (status >> 45) & 0x3

    if status & MCI_STATUS_UC:
        # Later assignments replace earlier ones, so an uncorrected error
        # always ends up described as software containable.
        if status & MCI_STATUS_PCC:
            event.error_msg = "System Fatal error."
        if event.mcgstatus & MCG_STATUS_RIPV:
            event.error_msg = "Uncorrected, software restartable error."
        event.error_msg = "Uncorrected, software containable error."
    elif status & MCI_STATUS_DEFERRED:
        event.error_msg = "Deferred error, no action required."
    else:
        event.error_msg = "Corrected error, no action required."

    if not status & MCI_STATUS_VAL:
        event.append("mcistatus_msg", "MCE_INVALID")
    if status & MCI_STATUS_OVER:
        event.append("mcistatus_msg", "Error_overflow")
    if status & MCI_STATUS_PCC:
        event.append("mcistatus_msg", "Processor_context_corrupt")
    if ecc:
        event.append("mcistatus_msg", f"{'C' if ecc == 2 else 'U'}ECC")

    if (ec & 0xF4FF) == 0x0400:
        event.append("mcastatus_msg", f"Internal '{_INTERNAL[(ec >> 8) & 0x3]}'")
        return

    if (ec & 0xFFF0) == 0x0010:
        event.append("mcastatus_msg", f"TLB Error 'tx: {_tt(ec)}, level: {_ll(ec)}'")
    elif (ec & 0xFF00) == 0x0100:
        event.append(
            "mcastatus_msg",
            f"Memory Error 'mem-tx: {_r4(ec)}, tx: {_tt(ec)}, level: {_ll(ec)}'",
        )
    elif (ec & 0xF800) == 0x0800:
        event.append(
            "mcastatus_msg",
            f"Bus Error '{_PARTPROC[(ec >> 9) & 0x3]}, {_TIMEOUT[(ec >> 8) & 0x1]}, "
            f"mem-tx: {_r4(ec)}, level: {_ll(ec)}'",
        )