import pytest

from mcedecode.events import MCI_STATUS_UC, CpuType, MceEvent
from mcedecode.intel_i10nm import i10nm_decode_model


def _decode(cputype, bank, status, misc=0):
    event = MceEvent(bank=bank, status=status, misc=misc)
    i10nm_decode_model(cputype, event)
    return event


def test_pcu_first_table():
    event = _decode(CpuType.ICELAKE_XEON, 4, 0x0D << 24)
    assert event.error_msg.startswith("PCU:")
    assert "MCA_LLC_BIST_ACTIVE_TIMEOUT" in event.error_msg


@pytest.mark.parametrize("code", [0x65, 0x70, 0x7A])
def test_pcu_reset_prep_range(code):
    event = _decode(CpuType.SAPPHIRERAPIDS, 4, code << 24)
    assert "MCA_PKGS_RESET_PREP_TIMEOUT" in event.error_msg


def test_pcu_second_and_third_tables():
    event = _decode(CpuType.TREMONT_D, 4, (0x05 << 20) | (0x03 << 16))
    assert "SMBus controller raised SMI" in event.error_msg
    assert "Invalid OpCode seen" in event.error_msg


def test_unsupported_cputype_leaves_event_alone():
    event = _decode(CpuType.SKYLAKE_XEON, 4, 0x0D << 24)
    assert event.messages() == {}


def test_unknown_bank_decodes_nothing():
    event = _decode(CpuType.SAPPHIRERAPIDS, 21, 0x0D << 24 | 0x81)
    assert event.messages() == {}


def test_upi_bits_and_code():
    event = _decode(CpuType.ICELAKE_XEON, 5, (1 << 25) | (0x21 << 16))
    assert event.error_msg.startswith("UPI:")
    assert "RF parity error" in event.error_msg
    assert "Phy Inband Reset" in event.error_msg


def test_m2m_reports_ddr_type():
    event = _decode(CpuType.ICELAKE_XEON, 12, (2 << 24) | (1 << 21))
    assert event.error_msg.startswith("M2M:")
    assert "MscodDDRType=0x2" in event.error_msg
    assert "M2M time out" in event.error_msg


def test_imc_corrected_error_has_channel():
    status = (0x08 << 16) | 0x81
    event = _decode(CpuType.ICELAKE_XEON, 13, status)
    assert event.error_msg.startswith("MemCtrl:")
    assert "Corrected patrol scrub error" in event.error_msg
    assert "SDDC memory mode" in event.error_msg
    assert event.mc_location == "memory_channel=1"


def test_imc_uncorrected_error_has_no_location():
    event = _decode(CpuType.ICELAKE_XEON, 13, MCI_STATUS_UC | 0x81)
    assert "MemCtrl:" in event.error_msg
    assert event.mc_location == ""


def test_imc_unspecified_channel_has_no_location():
    event = _decode(CpuType.ICELAKE_DE, 14, 0x8F)
    assert event.mc_location == ""


def test_transient_error_hides_failed_device():
    event = _decode(CpuType.ICELAKE_XEON, 13, 0x81, misc=1 << 63)
    assert "transient" in event.error_msg
    assert "failed device" not in event.error_msg


def test_persistent_error_shows_failed_device():
    event = _decode(CpuType.ICELAKE_XEON, 13, 0x81, misc=0)
    assert "failed device" in event.error_msg
    assert "transient" not in event.error_msg