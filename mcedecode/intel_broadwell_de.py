"""Model specific decoding for Broadwell DE processors."""

from __future__ import annotations

from collections.abc import Mapping

from .bitfield import Field, decode_bitfield, extract, sbitfield, test_prefix
from .events import MCI_STATUS_UC, MceEvent


def _table(entries: Mapping[int, str]) -> tuple[str | None, ...]:
    """Sparse code table sized to its highest code."""
    return tuple(entries.get(code) for code in range(max(entries) + 1))


_PCU_1 = _table({
    0x00: "No Error",
    0x09: "MC_MESSAGE_CHANNEL_TIMEOUT",
    0x13: "MC_DMI_TRAINING_TIMEOUT",
    0x15: "MC_DMI_CPU_RESET_ACK_TIMEOUT",
    0x1E: "MC_VR_ICC_MAX_LT_FUSED_ICC_MAX",
    0x25: "MC_SVID_COMMAN_TIMEOUT",
    0x26: "MCA_PKGC_DIRECT_WAKE_RING_TIMEOUT",
    0x29: "MC_VR_VOUT_MAC_LT_FUSED_SVID",
    0x2B: "MC_PKGC_WATCHDOG_HANG_CBZ_DOWN",
    0x2C: "MC_PKGC_WATCHDOG_HANG_CBZ_UP",
    0x44: "MC_CRITICAL_VR_FAILED",
    0x46: "MC_VID_RAMP_DOWN_FAILED",
    0x49: "MC_SVID_WRITE_REG_VOUT_MAX_FAILED",
    0x4B: "MC_BOOT_VID_TIMEOUT_DRAM_0",
    0x4F: "MC_SVID_COMMAND_ERROR",
    0x52: "MC_FIVR_CATAS_OVERVOL_FAULT",
    0x53: "MC_FIVR_CATAS_OVERCUR_FAULT",
    0x57: "MC_SVID_PKGC_REQUEST_FAILED",
    0x58: "MC_SVID_IMON_REQUEST_FAILED",
    0x59: "MC_SVID_ALERT_REQUEST_FAILED",
    0x62: "MC_INVALID_PKGS_RSP_QPI",
    0x64: "MC_INVALID_PKG_STATE_CONFIG",
    0x67: "MC_HA_IMC_RW_BLOCK_ACK_TIMEOUT",
    0x6A: "MC_MSGCH_PMREQ_CMP_TIMEOUT",
    0x72: "MC_WATCHDOG_TIMEOUT_PKGS_MASTER",
    0x81: "MC_RECOVERABLE_DIE_THERMAL_TOO_HOT",
})

_PCU_MC4 = (Field(24, _PCU_1),)

_MEMCTRL_MC9 = (
    sbitfield(16, "Address parity error"),
    sbitfield(17, "HA Wrt buffer Data parity error"),
    sbitfield(18, "HA Wrt byte enable parity error"),
    sbitfield(19, "Corrected patrol scrub error"),
    sbitfield(20, "Uncorrected patrol scrub error"),
    sbitfield(21, "Corrected spare error"),
    sbitfield(22, "Uncorrected spare error"),
    sbitfield(23, "Corrected memory read error"),
    sbitfield(24, "iMC, WDB, parity errors"),
)

_UBOX_MESSAGES = {
    0x402: "Internal errors ",
    0x403: "Internal errors ",
    0x406: "Intel TXT errors ",
    0x407: "Other UBOX Internal errors ",
}


def broadwell_de_decode_model(event: MceEvent) -> None:
    """Decode the model specific bits of a Broadwell DE machine check."""
    status = event.status
    mca = status & 0xFFFF
    bank = event.bank

    if bank == 4:
        message = _UBOX_MESSAGES.get(extract(status, 0, 15) & ~(1 << 12))
        if message:
            event.append("mcastatus_msg", message)
        if extract(status, 16, 19) & 3:
            event.append("mcastatus_msg", "PCU internal error ")
        if extract(status, 20, 23) & 4:
            event.append("mcastatus_msg", "Ubox error ")
        decode_bitfield(event, status, _PCU_MC4)
    elif bank in (9, 10):
        event.append("mcastatus_msg", "MemCtrl: ")
        decode_bitfield(event, status, _MEMCTRL_MC9)

    # Only corrected memory controller errors from an iMC bank carry a location.
    if (mca >> 7) != 1:
        return
    if bank < 9 or bank > 16 or status & MCI_STATUS_UC or not test_prefix(
        7, status & 0xEFFF
    ):
        return

    channel = extract(status, 0, 3)
    if channel == 0xF:
        return
    event.append("mc_location", f"memory_channel={channel}")

    rank0 = rank1 = None
    if extract(event.misc, 62, 62):
        rank0 = extract(event.misc, 46, 50)
        if extract(event.misc, 63, 63):
            rank1 = extract(event.misc, 51, 55)

    if rank0 is not None and rank1 is not None:
        event.append("mc_location", f"ranks={rank0} and {rank1}")
    elif rank0 is not None:
        event.append("mc_location", f"rank={rank0}")