"""Machine check event record, CPU description and architectural bit masks."""

from __future__ import annotations

import enum
from dataclasses import dataclass

# MCi_STATUS register bits
MCI_STATUS_VAL = 1 << 63
MCI_STATUS_OVER = 1 << 62
MCI_STATUS_UC = 1 << 61
MCI_STATUS_EN = 1 << 60
MCI_STATUS_MISCV = 1 << 59
MCI_STATUS_ADDRV = 1 << 58
MCI_STATUS_PCC = 1 << 57
MCI_STATUS_S = 1 << 56
MCI_STATUS_AR = 1 << 55
MCI_STATUS_TCC = 1 << 55
MCI_STATUS_DEFERRED = 1 << 44
MCI_STATUS_POISON = 1 << 43

# MCG_STATUS register bits
MCG_STATUS_RIPV = 1 << 0
MCG_STATUS_EIPV = 1 << 1
MCG_STATUS_MCIP = 1 << 2
MCG_STATUS_LMCE = 1 << 3

# MCi_MISC threshold overflow bit
MCI_THRESHOLD_OVER = 1 << 48

# First bank number used for software-defined banks
MCE_EXTENDED_BANK = 128

MESSAGE_FIELDS = (
    "bank_name",
    "error_msg",
    "mcgstatus_msg",
    "mcistatus_msg",
    "mcastatus_msg",
    "user_action",
    "mc_location",
)


class CpuType(enum.Enum):
    """Processor families that have their own decoders."""

    GENERIC = enum.auto()
    P6OLD = enum.auto()
    CORE2 = enum.auto()
    K8 = enum.auto()
    P4 = enum.auto()
    NEHALEM = enum.auto()
    DUNNINGTON = enum.auto()
    TULSA = enum.auto()
    INTEL = enum.auto()
    XEON75XX = enum.auto()
    SANDY_BRIDGE = enum.auto()
    SANDY_BRIDGE_EP = enum.auto()
    IVY_BRIDGE = enum.auto()
    IVY_BRIDGE_EPEX = enum.auto()
    HASWELL = enum.auto()
    HASWELL_EPEX = enum.auto()
    BROADWELL = enum.auto()
    BROADWELL_DE = enum.auto()
    BROADWELL_EPEX = enum.auto()
    KNIGHTS_LANDING = enum.auto()
    KNIGHTS_MILL = enum.auto()
    SKYLAKE_XEON = enum.auto()
    AMD_SMCA = enum.auto()
    DHYANA = enum.auto()
    ICELAKE_XEON = enum.auto()
    ICELAKE_DE = enum.auto()
    TREMONT_D = enum.auto()
    SAPPHIRERAPIDS = enum.auto()
    EMERALDRAPIDS = enum.auto()


@dataclass
class CpuInfo:
    """The processor an event was reported on."""

    cputype: CpuType = CpuType.GENERIC
    family: int = 0
    model: int = 0


@dataclass
class MceEvent:
    """Raw machine check registers together with the decoded messages."""

    bank: int = 0
    status: int = 0
    misc: int = 0
    addr: int = 0
    mcgstatus: int = 0
    mcgcap: int = 0
    ipid: int = 0
    synd: int = 0
    ip: int = 0
    cpu: int = 0
    vdata: bytes = b""
    frutext: bytes = b""
    bank_name: str = ""
    error_msg: str = ""
    mcgstatus_msg: str = ""
    mcistatus_msg: str = ""
    mcastatus_msg: str = ""
    user_action: str = ""
    mc_location: str = ""

    def append(self, field: str, text: str) -> None:
        """Add text to a message field, separated by a space from what is there."""
        if field not in MESSAGE_FIELDS:
            raise ValueError(f"unknown message field: {field!r}")
        current = getattr(self, field)
        setattr(self, field, f"{current} {text}" if current else text)

    def messages(self) -> dict[str, str]:
        """Return the message fields that hold text, in a fixed order."""
        return {
            name: getattr(self, name)
            for name in MESSAGE_FIELDS
            if getattr(self, name)
        }