from mcedecode.events import MCI_STATUS_UC, CpuInfo, CpuType, MceEvent
from mcedecode.intel_sb import snb_decode_model

SNB = CpuInfo(cputype=CpuType.SANDY_BRIDGE)
SNB_EP = CpuInfo(cputype=CpuType.SANDY_BRIDGE_EP)

MEM_READ_CHAN2 = 0x0092


def test_pcu_bank():
    event = MceEvent(bank=4, status=(3 << 16) | (0x62 << 24))
    snb_decode_model(event, SNB)
    assert event.error_msg == "Bad_OpCode MC_INVALID_PKGS_RES_QPI"
    assert event.mc_location == ""


def test_qpi_bank_named_on_ep():
    event = MceEvent(bank=6)
    snb_decode_model(event, SNB_EP)
    assert event.bank_name == "QPI"


def test_qpi_bank_not_named_on_client():
    event = MceEvent(bank=7)
    snb_decode_model(event, SNB)
    assert event.bank_name == ""


def test_memory_controller_with_ranks():
    misc = (1 << 62) | (1 << 63) | (3 << 46) | (5 << 51)
    event = MceEvent(bank=8, status=(0x8 << 16) | MEM_READ_CHAN2, misc=misc)
    snb_decode_model(event, SNB)
    assert event.error_msg == "Corrected patrol scrub error"
    assert event.mc_location == "memory_channel=2 ranks=3 and 5"


def test_memory_controller_without_valid_ranks():
    event = MceEvent(bank=9, status=MEM_READ_CHAN2)
    snb_decode_model(event, SNB)
    assert event.mc_location == "memory_channel=2 ranks=-1 and -1"


def test_only_second_rank_valid():
    misc = (1 << 63) | (7 << 51)
    event = MceEvent(bank=10, status=MEM_READ_CHAN2, misc=misc)
    snb_decode_model(event, SNB)
    assert event.mc_location.endswith("ranks=-1 and 7")


def test_uncorrected_error_has_no_location():
    event = MceEvent(bank=8, status=MCI_STATUS_UC | MEM_READ_CHAN2)
    snb_decode_model(event, SNB)
    assert event.mc_location == ""


def test_unspecified_channel_has_no_location():
    event = MceEvent(bank=8, status=0x009F)
    snb_decode_model(event, SNB)
    assert event.mc_location == ""


def test_bank_outside_imc_range():
    event = MceEvent(bank=12, status=(0x8 << 16) | MEM_READ_CHAN2)
    snb_decode_model(event, SNB)
    assert event.messages() == {}