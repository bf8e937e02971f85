"""Model specific decoding for Knights Landing and Knights Mill processors."""

from __future__ import annotations

from .bitfield import decode_bitfield, extract, sbitfield, test_prefix
from .events import MCI_STATUS_UC, MceEvent

_MEMCTRL_MC7 = (
    sbitfield(16, "CA Parity error"),
    sbitfield(17, "Internal Parity error except WDB"),
    sbitfield(18, "Internal Parity error from WDB"),
    sbitfield(19, "Correctable Patrol Scrub"),
    sbitfield(20, "Uncorrectable Patrol Scrub"),
    sbitfield(21, "Spare Correctable Error"),
    sbitfield(22, "Spare UC Error"),
    sbitfield(23, "CORR Chip fail even MC only, 4 bit burst error EDC only"),
)

_UBOX_MESSAGES = {
    0x402: "PCU Internal Errors",
    0x403: "VCU Internal Errors",
    0x407: "Other UBOX Internal Errors",
}

_REQUESTS = {
    0x0: "Undefined request on channel {}",
    0x1: "Read on channel {}",
    0x2: "Write on channel {}",
    0x3: "CA error on channel {}",
    0x4: "Scrub error on channel {}",
}


def _channel(event: MceEvent) -> int:
    """Channel of a memory error; bank 15 holds the second controller."""
    return extract(event.status, 0, 3) + (3 if event.bank == 15 else 0)


def knl_decode_model(event: MceEvent) -> None:
    """Decode the model specific bits of a Knights Landing machine check."""
    status = event.status
    mca = status & 0xFFFF
    bank = event.bank

    if bank == 5:
        message = _UBOX_MESSAGES.get(extract(status, 0, 15))
        if message:
            event.append("mcastatus_msg", message)
    elif 7 <= bank <= 16:
        if extract(status, 0, 15) == 0x5:
            event.append("mcastatus_msg", "Internal Parity error")
        else:
            template = _REQUESTS.get(extract(status, 4, 7))
            if template:
                event.append("mcastatus_msg", template.format(_channel(event)))
        decode_bitfield(event, status, _MEMCTRL_MC7)

    # Only corrected memory controller errors from an iMC bank carry a location.
    if (mca >> 7) != 1:
        return
    if bank < 7 or bank > 16 or status & MCI_STATUS_UC or not test_prefix(
        7, status & 0xEFFF
    ):
        return

    if extract(status, 0, 3) == 0xF:
        event.append("mc_location", "memory_channel=unspecified")
        return
    event.append("mc_location", f"memory_channel={_channel(event)}")

    misc = event.misc
    rank0 = extract(misc, 46, 50) if extract(misc, 62, 62) else None
    rank1 = extract(misc, 51, 55) if extract(misc, 63, 63) else None

    if rank0 is not None and rank1 is not None:
        event.append("mc_location", f"ranks={rank0} and {rank1}")
    elif rank0 is not None:
        event.append("mc_location", f"rank={rank0}")