"""Model specific decoding for Skylake server processors."""

from __future__ import annotations

from .bitfield import Field, decode_bitfield, extract, sbitfield, test_prefix
from .events import MCI_STATUS_UC, MceEvent

_PCU_1 = {
    0x00: "No Error",
    0x0D: "MCA_DMI_TRAINING_TIMEOUT",
    0x0F: "MCA_DMI_CPU_RESET_ACK_TIMEOUT",
    0x10: "MCA_MORE_THAN_ONE_LT_AGENT",
    0x1E: "MCA_BIOS_RST_CPL_INVALID_SEQ",
    0x1F: "MCA_BIOS_INVALID_PKG_STATE_CONFIG",
    0x25: "MCA_MESSAGE_CHANNEL_TIMEOUT",
    0x27: "MCA_MSGCH_PMREQ_CMP_TIMEOUT",
    0x30: "MCA_PKGC_DIRECT_WAKE_RING_TIMEOUT",
    0x31: "MCA_PKGC_INVALID_RSP_PCH",
    0x33: "MCA_PKGC_WATCHDOG_HANG_CBZ_DOWN",
    0x34: "MCA_PKGC_WATCHDOG_HANG_CBZ_UP",
    0x38: "MCA_PKGC_WATCHDOG_HANG_C3_UP_SF",
    0x40: "MCA_SVID_VCCIN_VR_ICC_MAX_FAILURE",
    0x41: "MCA_SVID_COMMAND_TIMEOUT",
    0x42: "MCA_SVID_VCCIN_VR_VOUT_FAILURE",
    0x43: "MCA_SVID_CPU_VR_CAPABILITY_ERROR",
    0x44: "MCA_SVID_CRITICAL_VR_FAILED",
    0x45: "MCA_SVID_SA_ITD_ERROR",
    0x46: "MCA_SVID_READ_REG_FAILED",
    0x47: "MCA_SVID_WRITE_REG_FAILED",
    0x48: "MCA_SVID_PKGC_INIT_FAILED",
    0x49: "MCA_SVID_PKGC_CONFIG_FAILED",
    0x4A: "MCA_SVID_PKGC_REQUEST_FAILED",
    0x4B: "MCA_SVID_IMON_REQUEST_FAILED",
    0x4C: "MCA_SVID_ALERT_REQUEST_FAILED",
    0x4D: "MCA_SVID_MCP_VR_ABSENT_OR_RAMP_ERROR",
    0x4E: "MCA_SVID_UNEXPECTED_MCP_VR_DETECTED",
    0x51: "MCA_FIVR_CATAS_OVERVOL_FAULT",
    0x52: "MCA_FIVR_CATAS_OVERCUR_FAULT",
    0x58: "MCA_WATCHDOG_TIMEOUT_PKGC_SLAVE",
    0x59: "MCA_WATCHDOG_TIMEOUT_PKGC_MASTER",
    0x5A: "MCA_WATCHDOG_TIMEOUT_PKGS_MASTER",
    0x61: "MCA_PKGS_CPD_UNCPD_TIMEOUT",
    0x63: "MCA_PKGS_INVALID_REQ_PCH",
    0x64: "MCA_PKGS_INVALID_REQ_INTERNAL",
    0x65: "MCA_PKGS_INVALID_RSP_INTERNAL",
    0x6B: "MCA_PKGS_SMBUS_VPP_PAUSE_TIMEOUT",
    0x81: "MCA_RECOVERABLE_DIE_THERMAL_TOO_HOT",
}

_PCU_MC4 = (Field(24, _PCU_1),)

_UPI = {
    0x00: "UC Phy Initialization Failure",
    0x01: "UC Phy detected drift buffer alarm",
    0x02: "UC Phy detected latency buffer rollover",
    0x10: "UC LL Rx detected CRC error: unsuccessful LLR: entered abort state",
    0x11: "UC LL Rx unsupported or undefined packet",
    0x12: "UC LL or Phy control error",
    0x13: "UC LL Rx parameter exchange exception",
    0x1F: "UC LL detected control error from the link-mesh interface",
    0x20: "COR Phy initialization abort",
    0x21: "COR Phy reset",
    0x22: "COR Phy lane failure, recovery in x8 width",
    0x23: "COR Phy L0c error corrected without Phy reset",
    0x24: "COR Phy L0c error triggering Phy Reset",
    0x25: "COR Phy L0p exit error corrected with Phy reset",
    0x30: "COR LL Rx detected CRC error - successful LLR without Phy Reinit",
    0x31: "COR LL Rx detected CRC error - successful LLR with Phy Reinit",
}

_UPI_MC = (Field(16, _UPI),)

# Detail bits of MSCOD 0x12, "UC LL or Phy control error".
_UPI_0X12 = (
    sbitfield(22, "Phy Control Error"),
    sbitfield(23, "Unexpected Retry.Ack flit"),
    sbitfield(24, "Unexpected Retry.Req flit"),
    sbitfield(25, "RF parity error"),
    sbitfield(26, "Routeback Table error"),
    sbitfield(27, "unexpected Tx Protocol flit (EOP, Header or Data)"),
    sbitfield(28, "Rx Header-or-Credit BGF credit overflow/underflow"),
    sbitfield(29, "Link Layer Reset still in progress when Phy enters L0"),
    sbitfield(30, "Link Layer reset initiated while protocol traffic not idle"),
    sbitfield(31, "Link Layer Tx Parity Error"),
)

_MC_BITS = (
    sbitfield(16, "Address parity error"),
    sbitfield(17, "HA write data parity error"),
    sbitfield(18, "HA write byte enable parity error"),
    sbitfield(19, "Corrected patrol scrub error"),
    sbitfield(20, "Uncorrected patrol scrub error"),
    sbitfield(21, "Corrected spare error"),
    sbitfield(22, "Uncorrected spare error"),
    sbitfield(23, "Any HA read error"),
    sbitfield(24, "WDB read parity error"),
    sbitfield(25, "DDR4 command address parity error"),
    sbitfield(26, "Uncorrected address parity error"),
)

_MC_0X8XX = (
    "Unrecognized request type",
    "Read response to an invalid scoreboard entry",
    "Unexpected read response",
    "DDR4 completion to an invalid scoreboard entry",
    "Completion to an invalid scoreboard entry",
    "Completion FIFO overflow",
    "Correctable parity error",
    "Uncorrectable error",
    "Interrupt received while outstanding interrupt was not ACKed",
    "ERID FIFO overflow",
    "Error on Write credits",
    "Error on Read credits",
    "Scheduler error",
    "Error event",
)

_MEMCTRL_MC13 = (Field(16, _MC_0X8XX),)

_M2M = (
    sbitfield(16, "MscodDataRdErr"),
    sbitfield(17, "Reserved"),
    sbitfield(18, "MscodPtlWrErr"),
    sbitfield(19, "MscodFullWrErr"),
    sbitfield(20, "MscodBgfErr"),
    sbitfield(21, "MscodTimeout"),
    sbitfield(22, "MscodParErr"),
    sbitfield(23, "MscodBucket1Err"),
)

_UBOX_MESSAGES = {
    0x402: "Internal errors ",
    0x403: "Internal errors ",
    0x406: "Intel TXT errors ",
    0x407: "Other UBOX Internal errors ",
}


def skylake_s_decode_model(event: MceEvent) -> None:
    """Decode the model specific bits of a Skylake server machine check."""
    status = event.status
    mca = status & 0xFFFF
    bank = event.bank

    if bank == 4:
        message = _UBOX_MESSAGES.get(extract(status, 0, 15) & ~(1 << 12))
        if message:
            event.append("mcastatus_msg", message)
        if extract(status, 16, 19):
            event.append("mcastatus_msg", "PCU internal error ")
        decode_bitfield(event, status, _PCU_MC4)
    elif bank in (5, 12, 19):
        event.append("mcastatus_msg", "UPI: ")
        decode_bitfield(event, status, _UPI_MC)
        if extract(status, 16, 21) == 0x12:
            decode_bitfield(event, status, _UPI_0X12)
    elif bank in (7, 8):
        event.append("mcastatus_msg", "M2M: ")
        decode_bitfield(event, status, _M2M)
    elif 13 <= bank <= 18:
        event.append("mcastatus_msg", "MemCtrl: ")
        if extract(status, 27, 27):
            decode_bitfield(event, status, _MEMCTRL_MC13)
        else:
            decode_bitfield(event, status, _MC_BITS)

    # Only corrected memory controller errors from an iMC bank carry a location.
    if (mca >> 7) != 1:
        return
    if (
        bank < 13
        or bank > 18
        or status & MCI_STATUS_UC
        or not test_prefix(7, status & 0xEFFF)
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