from mcedecode.events import MCI_STATUS_UC, CpuInfo, CpuType, MceEvent
from mcedecode.intel_ivb import ivb_decode_model

EPEX = CpuInfo(cputype=CpuType.IVY_BRIDGE_EPEX)
OTHER = CpuInfo(cputype=CpuType.IVY_BRIDGE)


def test_pcu_bank_decodes_both_fields():
    event = MceEvent(bank=4, status=3 << 16)
    ivb_decode_model(event, EPEX)
    assert event.error_msg == "Bad_OpCode No Error"


def test_pcu_second_field():
    event = MceEvent(bank=4, status=(1 << 16) | (0x7B << 24))
    ivb_decode_model(event, EPEX)
    assert "Non_IMem_Sel" in event.error_msg
    assert "MC_PCIE_R2PCIE-RW_BLOCK_ACK_TIMEOUT" in event.error_msg


def test_qpi_bank_named_only_on_epex():
    named = MceEvent(bank=5)
    ivb_decode_model(named, EPEX)
    assert named.bank_name == "QPI"

    unnamed = MceEvent(bank=5)
    ivb_decode_model(unnamed, OTHER)
    assert unnamed.bank_name == ""


def test_memory_controller_bits():
    event = MceEvent(bank=9, status=0x100 << 16)
    ivb_decode_model(event, OTHER)
    assert event.error_msg == "iMC, WDB, parity errors"


def test_memory_location_with_one_rank():
    misc = (1 << 62) | (3 << 46)
    event = MceEvent(bank=9, status=0x82, misc=misc)
    ivb_decode_model(event, OTHER)
    assert event.mc_location == "memory_channel=2 ranks=3 and -1"


def test_memory_location_with_two_ranks():
    misc = (1 << 62) | (1 << 63) | (3 << 46) | (4 << 51)
    event = MceEvent(bank=16, status=0x81, misc=misc)
    ivb_decode_model(event, OTHER)
    assert event.mc_location == "memory_channel=1 ranks=3 and 4"


def test_uncorrected_error_has_no_location():
    event = MceEvent(bank=9, status=0x82 | MCI_STATUS_UC, misc=1 << 62)
    ivb_decode_model(event, OTHER)
    assert event.mc_location == ""


def test_unspecified_channel_has_no_location():
    event = MceEvent(bank=9, status=0x8F)
    ivb_decode_model(event, OTHER)
    assert event.mc_location == ""


def test_non_imc_bank_has_no_location():
    event = MceEvent(bank=4, status=0x82)
    ivb_decode_model(event, OTHER)
    assert event.mc_location == ""