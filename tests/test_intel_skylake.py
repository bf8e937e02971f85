from mcedecode.events import MCI_STATUS_UC, MceEvent
from mcedecode.intel_skylake import skylake_s_decode_model


def _decode(bank, status, misc=0):
    event = MceEvent(bank=bank, status=status, misc=misc)
    skylake_s_decode_model(event)
    return event


def test_pcu_internal_errors():
    event = _decode(4, 0x402)
    assert event.mcastatus_msg == "Internal errors "
    assert event.error_msg == "No Error"


def test_pcu_filtering_bit_is_ignored():
    event = _decode(4, 0x1406)
    assert event.mcastatus_msg == "Intel TXT errors "


def test_pcu_internal_error_flag():
    event = _decode(4, 0x407 | (1 << 16))
    assert event.mcastatus_msg.startswith("Other UBOX Internal errors ")
    assert "PCU internal error" in event.mcastatus_msg


def test_pcu_code():
    event = _decode(4, 0x81 << 24)
    assert event.error_msg == "MCA_RECOVERABLE_DIE_THERMAL_TOO_HOT"


def test_upi_control_error_details():
    event = _decode(5, (0x12 << 16) | (1 << 22))
    assert event.mcastatus_msg == "UPI: "
    assert event.error_msg == "UC LL or Phy control error Phy Control Error"


def test_m2m_bits():
    event = _decode(7, 1 << 21)
    assert event.mcastatus_msg == "M2M: "
    assert event.error_msg == "MscodTimeout"


def test_memctrl_extended_code():
    event = _decode(13, (1 << 27) | (0x5 << 16))
    assert event.mcastatus_msg == "MemCtrl: "
    assert event.error_msg == "Completion FIFO overflow"


def test_memctrl_bits():
    event = _decode(14, 1 << 19)
    assert event.error_msg == "Corrected patrol scrub error"


def test_memory_location_single_rank():
    channel, rank = 2, 3
    event = _decode(13, 0x90 | channel, misc=(1 << 62) | (rank << 46))
    assert event.mc_location == f"memory_channel={channel} rank={rank}"


def test_memory_location_two_ranks():
    channel, rank0, rank1 = 1, 3, 5
    misc = (1 << 62) | (1 << 63) | (rank0 << 46) | (rank1 << 51)
    event = _decode(15, 0x90 | channel, misc=misc)
    assert event.mc_location == f"memory_channel={channel} ranks={rank0} and {rank1}"


def test_second_rank_needs_first():
    channel = 4
    event = _decode(16, 0x90 | channel, misc=(1 << 63) | (5 << 51))
    assert event.mc_location == f"memory_channel={channel}"


def test_no_location_for_uncorrected_errors():
    event = _decode(13, 0x92 | MCI_STATUS_UC, misc=1 << 62)
    assert event.mc_location == ""


def test_no_location_for_unspecified_channel():
    event = _decode(13, 0x9F)
    assert event.mc_location == ""


def test_no_location_outside_imc_banks():
    event = _decode(12, 0x92)
    assert event.mc_location == ""
    assert event.mcastatus_msg == "UPI: "