"""Model specific decoding for Intel 10nm server processors."""

from __future__ import annotations

import enum
from collections.abc import Mapping

from .bitfield import Field, decode_bitfield, extract, sbitfield, test_prefix
from .events import MCI_STATUS_UC, CpuType, MceEvent


def _table(entries: Mapping[int, str]) -> tuple[str | None, ...]:
    """Sparse code table sized to its highest code."""
    return tuple(entries.get(code) for code in range(max(entries) + 1))


_PCU_1_ENTRIES = {
    0x0D: "MCA_LLC_BIST_ACTIVE_TIMEOUT",
    0x0E: "MCA_DMI_TRAINING_TIMEOUT",
    0x0F: "MCA_DMI_STRAP_SET_ARRIVAL_TIMEOUT",
    0x10: "MCA_DMI_CPU_RESET_ACK_TIMEOUT",
    0x11: "MCA_MORE_THAN_ONE_LT_AGENT",
    0x14: "MCA_INCOMPATIBLE_PCH_TYPE",
    0x1E: "MCA_BIOS_RST_CPL_INVALID_SEQ",
    0x1F: "MCA_BIOS_INVALID_PKG_STATE_CONFIG",
    0x2D: "MCA_PCU_PMAX_CALIB_ERROR",
    0x2E: "MCA_TSC100_SYNC_TIMEOUT",
    0x3A: "MCA_GPSB_TIMEOUT",
    0x3B: "MCA_PMSB_TIMEOUT",
    0x3E: "MCA_IOSFSB_PMREQ_CMP_TIMEOUT",
    0x40: "MCA_SVID_VCCIN_VR_ICC_MAX_FAILURE",
    0x42: "MCA_SVID_VCCIN_VR_VOUT_FAILURE",
    0x43: "MCA_SVID_CPU_VR_CAPABILITY_ERROR",
    0x44: "MCA_SVID_CRITICAL_VR_FAILED",
    0x45: "MCA_SVID_SA_ITD_ERROR",
    0x46: "MCA_SVID_READ_REG_FAILED",
    0x47: "MCA_SVID_WRITE_REG_FAILED",
    0x4A: "MCA_SVID_PKGC_REQUEST_FAILED",
    0x4B: "MCA_SVID_IMON_REQUEST_FAILED",
    0x4C: "MCA_SVID_ALERT_REQUEST_FAILED",
    0x4D: "MCA_SVID_MCP_VR_RAMP_ERROR",
    0x56: "MCA_FIVR_PD_HARDERR",
    0x58: "MCA_WATCHDOG_TIMEOUT_PKGC_SLAVE",
    0x59: "MCA_WATCHDOG_TIMEOUT_PKGC_MASTER",
    0x5A: "MCA_WATCHDOG_TIMEOUT_PKGS_MASTER",
    0x5B: "MCA_WATCHDOG_TIMEOUT_MSG_CH_FSM",
    0x5C: "MCA_WATCHDOG_TIMEOUT_BULK_CR_FSM",
    0x5D: "MCA_WATCHDOG_TIMEOUT_IOSFSB_FSM",
    0x60: "MCA_PKGS_SAFE_WP_TIMEOUT",
    0x61: "MCA_PKGS_CPD_UNCPD_TIMEOUT",
    0x62: "MCA_PKGS_INVALID_REQ_PCH",
    0x63: "MCA_PKGS_INVALID_REQ_INTERNAL",
    0x64: "MCA_PKGS_INVALID_RSP_INTERNAL",
    **{code: "MCA_PKGS_RESET_PREP_TIMEOUT" for code in range(0x65, 0x7A + 1)},
    0x7B: "MCA_PKGS_SMBUS_VPP_PAUSE_TIMEOUT",
    0x7C: "MCA_PKGS_SMBUS_MCP_PAUSE_TIMEOUT",
    0x7D: "MCA_PKGS_SMBUS_SPD_PAUSE_TIMEOUT",
    0x80: "MCA_PKGC_DISP_BUSY_TIMEOUT",
    0x81: "MCA_PKGC_INVALID_RSP_PCH",
    0x83: "MCA_PKGC_WATCHDOG_HANG_CBZ_DOWN",
    0x84: "MCA_PKGC_WATCHDOG_HANG_CBZ_UP",
    0x87: "MCA_PKGC_WATCHDOG_HANG_C2_BLKMASTER",
    0x88: "MCA_PKGC_WATCHDOG_HANG_C2_PSLIMIT",
    0x89: "MCA_PKGC_WATCHDOG_HANG_SETDISP",
    0x8B: "MCA_PKGC_ALLOW_L1_ERROR",
    0x90: "MCA_RECOVERABLE_DIE_THERMAL_TOO_HOT",
    0xA0: "MCA_ADR_SIGNAL_TIMEOUT",
    0xA1: "MCA_BCLK_FREQ_OC_ABOVE_THRESHOLD",
    0xB0: "MCA_DISPATCHER_RUN_BUSY_TIMEOUT",
}

_PCU_2 = _table({
    0x04: "Clock/power IP response timeout",
    0x05: "SMBus controller raised SMI",
    0x09: "PM controller received invalid transaction",
})

_PCU_3 = _table({
    0x01: "Instruction address out of valid space",
    0x02: "Double bit RAM error on Instruction Fetch",
    0x03: "Invalid OpCode seen",
    0x04: "Stack Underflow",
    0x05: "Stack Overflow",
    0x06: "Data address out of valid space",
    0x07: "Double bit RAM error on Data Fetch",
})

_PCU1 = (Field(0, _table(_PCU_1_ENTRIES)),)
_PCU2 = (Field(0, _PCU_2),)
_PCU3 = (Field(0, _PCU_3),)

_UPI1 = (
    sbitfield(22, "Phy Control Error"),
    sbitfield(23, "Unexpected Retry.Ack flit"),
    sbitfield(24, "Unexpected Retry.Req flit"),
    sbitfield(25, "RF parity error"),
    sbitfield(26, "Routeback Table error"),
    sbitfield(27, "Unexpected Tx Protocol flit (EOP, Header or Data)"),
    sbitfield(28, "Rx Header-or-Credit BGF credit overflow/underflow"),
    sbitfield(29, "Link Layer Reset still in progress when Phy enters L0"),
    sbitfield(30, "Link Layer reset initiated while protocol traffic not idle"),
    sbitfield(31, "Link Layer Tx Parity Error"),
)

_UPI2 = (Field(0, _table({
    0x00: "Phy Initialization Failure (NumInit)",
    0x01: "Phy Detected Drift Buffer Alarm",
    0x02: "Phy Detected Latency Buffer Rollover",
    0x10: "LL Rx detected CRC error: unsuccessful LLR (entered Abort state)",
    0x11: "LL Rx Unsupported/Undefined packet",
    0x12: "LL or Phy Control Error",
    0x13: "LL Rx Parameter Exception",
    0x1F: "LL Detected Control Error",
    0x20: "Phy Initialization Abort",
    0x21: "Phy Inband Reset",
    0x22: "Phy Lane failure, recovery in x8 width",
    0x23: "Phy L0c error corrected without Phy reset",
    0x24: "Phy L0c error triggering Phy reset",
    0x25: "Phy L0p exit error corrected with reset",
    0x30: "LL Rx detected CRC error: successful LLR without Phy Reinit",
    0x31: "LL Rx detected CRC error: successful LLR with Phy Reinit",
    0x32: "Tx received LLR",
})),)

_M2M = (
    sbitfield(16, "MC read data error"),
    sbitfield(17, "Reserved"),
    sbitfield(18, "MC partial write data error"),
    sbitfield(19, "Full write data error"),
    sbitfield(20, "M2M clock-domain-crossing buffer (BGF) error"),
    sbitfield(21, "M2M time out"),
    sbitfield(22, "M2M tracker parity error"),
    sbitfield(23, "fatal Bucket1 error"),
)

_IMC_0 = _table({
    0x01: "Address parity error",
    0x02: "Data parity error",
    0x03: "Data ECC error",
    0x04: "Data byte enable parity error",
    0x07: "Transaction ID parity error",
    0x08: "Corrected patrol scrub error",
    0x10: "Uncorrected patrol scrub error",
    0x20: "Corrected spare error",
    0x40: "Uncorrected spare error",
    0x80: "Corrected read error",
    0xA0: "Uncorrected read error",
    0xC0: "Uncorrected metadata",
})

_IMC_1 = _table({
    0x00: "WDB read parity error",
    0x03: "RPA parity error",
    0x06: "DDR_T_DPPP data BE error",
    0x07: "DDR_T_DPPP data error",
    0x08: "DDR link failure",
    0x11: "PCLS CAM error",
    0x12: "PCLS data error",
})

_IMC_2 = _table({
    0x00: "DDR4 command / address parity error",
    0x20: "HBM command / address parity error",
    0x21: "HBM data parity error",
})

_IMC_4 = _table({0x00: "RPQ parity (primary) error"})

_IMC_8 = _table({
    0x00: "DDR-T bad request",
    0x01: "DDR Data response to an invalid entry",
    0x02: "DDR data response to an entry not expecting data",
    0x03: "DDR4 completion to an invalid entry",
    0x04: "DDR-T completion to an invalid entry",
    0x05: "DDR data/completion FIFO overflow",
    0x06: "DDR-T ERID correctable parity error",
    0x07: "DDR-T ERID uncorrectable error",
    0x08: "DDR-T interrupt received while outstanding interrupt was not ACKed",
    0x09: "ERID FI FO overflow",
    0x0A: "DDR-T error on FNV write credits",
    0x0B: "DDR-T error on FNV read credits",
    0x0C: "DDR-T scheduler error",
    0x0D: "DDR-T FNV error event",
    0x0E: "DDR-T FNV thermal event",
    0x0F: "CMI packet while idle",
    0x10: "DDR_T_RPQ_REQ_PARITY_ERR",
    0x11: "DDR_T_WPQ_REQ_PARITY_ERR",
    0x12: "2LM_NMFILLWR_CAM_ERR",
    0x13: "CMI_CREDIT_OVERSUB_ERR",
    0x14: "CMI_CREDIT_TOTAL_ERR",
    0x15: "CMI_CREDIT_RSVD_POOL_ERR",
    0x16: "DDR_T_RD_ERROR",
    0x17: "WDB_FIFO_ERR",
    0x18: "CMI_REQ_FIFO_OVERFLOW",
    0x19: "CMI_REQ_FIFO_UNDERFLOW",
    0x1A: "CMI_RSP_FIFO_OVERFLOW",
    0x1B: "CMI_RSP_FIFO_UNDERFLOW",
    0x1C: "CMI _MISC_MC_CRDT_ERRORS",
    0x1D: "CMI_MISC_MC_ARB_ERRORS",
    0x1E: "DDR_T_WR_CMPL_FI FO_OVERFLOW",
    0x1F: "DDR_T_WR_CMPL_FI FO_UNDERFLOW",
    0x20: "CMI_RD_CPL_FIFO_OVERFLOW",
    0x21: "CMI_RD_CPL_FIFO_UNDERFLOW",
    0x22: "TME_KEY_PAR_ERR",
    0x23: "TME_CMI_MISC_ERR",
    0x24: "TME_CMI_OVFL_ERR",
    0x25: "TME_CMI_UFL_ERR",
    0x26: "TME_TEM_SECURE_ERR",
    0x27: "TME_UFILL_PAR_ERR",
    0x29: "INTERNAL_ERR",
    0x2A: "TME_INTEGRITY_ERR",
    0x2B: "TME_TDX_ERR",
    0x2C: "TME_UFILL_TEM_SECURE_ERR",
    0x2D: "TME_KEY_POISON_ERR",
    0x2E: "TME_SECURITY_ENGINE_ERR",
})

_IMC_10 = _table({
    0x08: "CORR_PATSCRUB_MIRR2ND_ERR",
    0x10: "UC_PATSCRUB_MIRR2ND_ERR",
    0x20: "COR_SPARE_MIRR2ND_ERR",
    0x40: "UC_SPARE_MIRR2ND_ERR",
    0x80: "HA_RD_MIRR2ND_ERR",
    0xA0: "HA_UNCORR_RD_MIRR2ND_ERR",
})

# Keyed by the MSCOD high byte, bits 24..31 of the status.
_IMC_FIELDS = {
    0x00: (Field(0, _IMC_0),),
    0x01: (Field(0, _IMC_1),),
    0x02: (Field(0, _IMC_2),),
    0x04: (Field(0, _IMC_4),),
    0x08: (Field(0, _IMC_8),),
    0x10: (Field(0, _IMC_10),),
}

_ECC_MODES = {
    0: "SDDC memory mode",
    1: "SDDC",
    4: "ADDDC memory mode",
    5: "ADDDC",
    8: "DDRT read",
}


class _BankType(enum.Enum):
    UNKNOWN = enum.auto()
    PCU = enum.auto()
    UPI = enum.auto()
    M2M = enum.auto()
    IMC = enum.auto()


def _layout(**groups: tuple[int, ...]) -> dict[int, _BankType]:
    return {
        bank: _BankType[kind]
        for kind, banks in groups.items()
        for bank in banks
    }


_ICELAKE = _layout(
    PCU=(4,),
    UPI=(5, 7, 8),
    M2M=(12, 16, 20, 24),
    IMC=(13, 14, 15, 17, 18, 19, 21, 22, 23, 25, 26, 27),
)
_ICELAKE_DE = _layout(PCU=(4,), M2M=(12, 16), IMC=(13, 14, 15, 17, 18, 19))
_TREMONT = _layout(PCU=(4,), M2M=(12,), IMC=(13, 14, 15))
_SAPPHIRE = _layout(PCU=(4,), UPI=(5,), M2M=(12,), IMC=tuple(range(13, 21)))

_LAYOUTS = {
    CpuType.ICELAKE_XEON: _ICELAKE,
    CpuType.ICELAKE_DE: _ICELAKE_DE,
    CpuType.TREMONT_D: _TREMONT,
    CpuType.SAPPHIRERAPIDS: _SAPPHIRE,
    CpuType.EMERALDRAPIDS: _SAPPHIRE,
}

# Memory controller index of each M2M and iMC bank; three channels each.
_BANK_IMC = {bank: (bank - 12) // 4 for bank in range(12, 28)}


def _imc_misc(event: MceEvent) -> None:
    misc = event.misc
    column = extract(misc, 9, 18) << 2
    row = extract(misc, 19, 39)
    bank = extract(misc, 42, 43)
    bankgroup = extract(misc, 40, 41) | (extract(misc, 44, 44) << 2)
    fdevice = extract(misc, 46, 51)
    subrank = extract(misc, 52, 55)
    rank = extract(misc, 56, 58)
    eccmode = extract(misc, 59, 62)
    transient = extract(misc, 63, 63)

    event.append(
        "error_msg",
        f"bank: 0x{bank:x} bankgroup: 0x{bankgroup:x} "
        f"row: 0x{row:x} column: 0x{column:x}",
    )
    if not transient and not extract(event.status, 61, 61):
        event.append("error_msg", f"failed device: 0x{fdevice:x}")
    event.append("error_msg", f"rank: 0x{rank:x} subrank: 0x{subrank:x}")
    event.append("error_msg", "ecc mode: ")
    event.append("error_msg", _ECC_MODES.get(eccmode, "unknown"))
    if transient:
        event.append("error_msg", "transient")


def _memory_channel(event: MceEvent) -> int | None:
    """Channel derived from the bank number; None when it cannot be told."""
    status = event.status
    if not test_prefix(7, status & 0xEFFF):
        return None
    chan = extract(status, 0, 3)
    if chan == 0xF:
        return None
    imc = _BANK_IMC.get(event.bank)
    if imc is None:
        return None
    return imc * 3 + chan


def i10nm_decode_model(cputype: CpuType, event: MceEvent) -> None:
    """Decode the model specific bits of a 10nm server machine check."""
    layout = _LAYOUTS.get(cputype)
    if layout is None:
        return
    banktype = layout.get(event.bank, _BankType.UNKNOWN)
    status = event.status
    mca = status & 0xFFFF

    if banktype is _BankType.PCU:
        event.append("error_msg", "PCU: ")
        for (start, end), fields in (
            ((24, 31), _PCU1),
            ((20, 23), _PCU2),
            ((16, 19), _PCU3),
        ):
            value = extract(status, start, end)
            if value:
                decode_bitfield(event, value, fields)
    elif banktype is _BankType.UPI:
        event.append("error_msg", "UPI: ")
        if extract(status, 22, 31):
            decode_bitfield(event, status, _UPI1)
        decode_bitfield(event, extract(status, 16, 21), _UPI2)
    elif banktype is _BankType.M2M:
        event.append("error_msg", "M2M: ")
        event.append("error_msg", f"MscodDDRType=0x{extract(status, 24, 25):x}")
        event.append("error_msg", f"MscodMiscErrs=0x{extract(status, 26, 31):x}")
        decode_bitfield(event, status, _M2M)
    elif banktype is _BankType.IMC:
        event.append("error_msg", "MemCtrl: ")
        fields = _IMC_FIELDS.get(extract(status, 24, 31))
        if fields is not None:
            decode_bitfield(event, extract(status, 16, 23), fields)
        _imc_misc(event)

    # Only corrected memory controller errors from an iMC bank carry a location.
    if (mca >> 7) != 1:
        return
    if banktype is not _BankType.IMC or status & MCI_STATUS_UC:
        return

    channel = _memory_channel(event)
    if channel is not None:
        event.append("mc_location", f"memory_channel={channel}")