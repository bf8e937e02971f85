"""Model specific decoding for Ivy Bridge processors."""

from __future__ import annotations

from .bitfield import Field, decode_bitfield, extract, test_prefix
from .events import MCI_STATUS_UC, CpuInfo, CpuType, MceEvent

_PCU_1 = (
    "No error",
    "Non_IMem_Sel",
    "I_Parity_Error",
    "Bad_OpCode",
    "I_Stack_Underflow",
    "I_Stack_Overflow",
    "D_Stack_Underflow",
    "D_Stack_Overflow",
    "Non-DMem_Sel",
    "D_Parity_Error",
)

_PCU_2 = {
    0x00: "No Error",
    0x0D: "MC_IMC_FORCE_SR_S3_TIMEOUT",
    0x0E: "MC_MC_CPD_UNCPD_ST_TIMEOUT",
    0x0F: "MC_PKGS_SAFE_WP_TIMEOUT",
    0x43: "MC_PECI_MAILBOX_QUIESCE_TIMEOUT",
    0x44: "MC_CRITICAL_VR_FAILED",
    0x45: "MC_ICC_MAX-NOTSUPPORTED",
    0x5C: "MC_MORE_THAN_ONE_LT_AGENT",
    0x60: "MC_INVALID_PKGS_REQ_PCH",
    0x61: "MC_INVALID_PKGS_REQ_QPI",
    0x62: "MC_INVALID_PKGS_RES_QPI",
    0x63: "MC_INVALID_PKGC_RES_PCH",
    0x64: "MC_INVALID_PKG_STATE_CONFIG",
    0x70: "MC_WATCHDG_TIMEOUT_PKGC_SLAVE",
    0x71: "MC_WATCHDG_TIMEOUT_PKGC_MASTER",
    0x72: "MC_WATCHDG_TIMEOUT_PKGS_MASTER",
    0x7A: "MC_HA_FAILSTS_CHANGE_DETECTED",
    0x7B: "MC_PCIE_R2PCIE-RW_BLOCK_ACK_TIMEOUT",
    0x81: "MC_RECOVERABLE_DIE_THERMAL_TOO_HOT",
}

_PCU_MC4 = (Field(16, _PCU_1), Field(24, _PCU_2))

_MEMCTRL_1 = {
    0x001: "Address parity error",
    0x002: "HA Wrt buffer Data parity error",
    0x004: "HA Wrt byte enable parity error",
    0x008: "Corrected patrol scrub error",
    0x010: "Uncorrected patrol scrub error",
    0x020: "Corrected spare error",
    0x040: "Uncorrected spare error",
    0x080: "Corrected memory read error",
    0x100: "iMC, WDB, parity errors",
}

_MEMCTRL_MC9 = (Field(16, _MEMCTRL_1),)


def ivb_decode_model(event: MceEvent, cpu: CpuInfo) -> None:
    """Decode the model specific bits of an Ivy Bridge machine check."""
    status = event.status
    mca = status & 0xFFFF
    bank = event.bank

    if bank == 4:
        decode_bitfield(event, status, _PCU_MC4)
    elif bank == 5:
        # The MCA code has already been decoded; only name the bank.
        if cpu.cputype is CpuType.IVY_BRIDGE_EPEX:
            event.append("bank_name", "QPI")
    elif 9 <= bank <= 16:
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

    rank0 = extract(event.misc, 46, 50) if extract(event.misc, 62, 62) else -1
    rank1 = extract(event.misc, 51, 55) if extract(event.misc, 63, 63) else -1

    # Ranks are reported as a pair even when a rank is not valid, in which
    # case it shows as -1.
    event.append("mc_location", f"ranks={rank0} and {rank1}")