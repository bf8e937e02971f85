import pytest

from mcedecode.events import MCI_STATUS_UC, MceEvent
from mcedecode.intel_broadwell_epex import broadwell_epex_decode_model


def decode(bank, status, misc=0):
    event = MceEvent(bank=bank, status=status, misc=misc)
    broadwell_epex_decode_model(event)
    return event


@pytest.mark.parametrize("code", [0x402, 0x1402, 0x403])
def test_internal_errors_ignore_bit_12(code):
    assert "Internal errors" in decode(4, code).mcastatus_msg


def test_txt_errors():
    assert "Intel TXT errors" in decode(4, 0x406).mcastatus_msg


def test_pcu_code_decoded():
    event = decode(4, 0x09 << 24)
    assert "MC_MESSAGE_CHANNEL_TIMEOUT" in event.error_msg


def test_pcu_zero_reports_no_error():
    assert "No Error" in decode(4, 0).error_msg


def test_pcu_internal_error_flag():
    assert "PCU internal error" in decode(4, 1 << 16).mcastatus_msg


@pytest.mark.parametrize("bank", [5, 20, 21])
def test_qpi_banks(bank):
    event = decode(bank, 0x11 << 16)
    assert "QPI:" in event.mcastatus_msg
    assert "Rx entered LLR abort state on CRC error" in event.error_msg


def test_memctrl_bit():
    event = decode(12, 1 << 19)
    assert "MemCtrl:" in event.mcastatus_msg
    assert "Corrected patrol scrub error" in event.error_msg


def test_location_single_rank():
    misc = (1 << 62) | (2 << 46)
    event = decode(9, 0x0093, misc)
    assert "memory_channel=3" in event.mc_location
    assert "rank=2" in event.mc_location


def test_location_two_ranks():
    misc = (1 << 62) | (1 << 63) | (2 << 46) | (5 << 51)
    event = decode(10, 0x0091, misc)
    assert "ranks=2 and 5" in event.mc_location


def test_second_rank_needs_first_valid():
    misc = (1 << 63) | (5 << 51)
    event = decode(10, 0x0091, misc)
    assert event.mc_location == "memory_channel=1"


def test_unspecified_channel_has_no_location():
    assert decode(9, 0x009F).mc_location == ""


def test_uncorrected_has_no_location():
    assert decode(9, 0x0093 | MCI_STATUS_UC, 1 << 62).mc_location == ""


def test_non_imc_bank_has_no_location():
    assert decode(4, 0x0093, 1 << 62).mc_location == ""