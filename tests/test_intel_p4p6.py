from mcedecode.events import MceEvent
from mcedecode.intel_p4p6 import (
    core2_decode_model,
    p4_decode_model,
    p6old_decode_model,
)


def test_p4_single_bit():
    event = MceEvent(status=1 << 16)
    p4_decode_model(event)
    assert event.error_msg == "FSB address parity"


def test_p4_bits_in_table_order():
    event = MceEvent(status=(1 << 23) | (1 << 17))
    p4_decode_model(event)
    assert event.error_msg.index("Response hard fail") < event.error_msg.index(
        "Pad address glitch"
    )


def test_p4_ignores_low_and_high_bits():
    event = MceEvent(status=0xFFFF | (1 << 40))
    p4_decode_model(event)
    assert event.error_msg == ""


def test_core2_specific_bits():
    event = MceEvent(status=(1 << 28) | (1 << 30) | (1 << 37))
    core2_decode_model(event)
    assert "MCE driven" in event.error_msg
    assert "internal BINIT" in event.error_msg
    assert "FSB address parity error detected" in event.error_msg
    assert "FRC error" not in event.error_msg


def test_p6old_specific_bits():
    event = MceEvent(status=(1 << 28) | (1 << 35))
    p6old_decode_model(event)
    assert "FRC error" in event.error_msg
    assert "BINIT received from external bus" in event.error_msg
    assert "MCE driven" not in event.error_msg


def test_bus_queue_request_type():
    event = MceEvent(status=4 << 19)
    p6old_decode_model(event)
    assert "BQ_DCU_RFO_TYPE" in event.error_msg


def test_bus_queue_error_type():
    event = MceEvent(status=4 << 25)
    core2_decode_model(event)
    assert "BQ_ERR_SINGLE_TYPE" in event.error_msg


def test_ecc_syndrome_number():
    event = MceEvent(status=0xAB << 47)
    p6old_decode_model(event)
    assert "ECC syndrome" in event.error_msg
    assert "ab" in event.error_msg