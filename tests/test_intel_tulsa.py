from mcedecode.events import MCI_STATUS_MISCV, MceEvent
from mcedecode.intel_tulsa import tulsa_decode_model


def test_nothing_set_gives_no_messages():
    event = MceEvent(status=0)
    tulsa_decode_model(event)
    assert event.messages() == {}


def test_corrected_events_count():
    event = MceEvent(status=7 << 32)
    tulsa_decode_model(event)
    assert "Corrected events: 7\n" in event.error_msg


def test_ecc_syndrome_only_with_bit_52():
    with_flag = MceEvent(status=(1 << 52) | (0xAB << 44))
    tulsa_decode_model(with_flag)
    assert "ECC syndrome: ab" in with_flag.error_msg

    without_flag = MceEvent(status=0xAB << 44)
    tulsa_decode_model(without_flag)
    assert "ECC syndrome" not in without_flag.error_msg


def test_misc_dump():
    event = MceEvent(status=MCI_STATUS_MISCV | (2 << 40), misc=0xDEAD)
    tulsa_decode_model(event)
    assert event.mcistatus_msg == "MISC format 2 value dead\n"


def test_bus_error_bits():
    event = MceEvent(status=0xE0F | (1 << 16) | (1 << 24))
    tulsa_decode_model(event)
    assert "Parity error detected during FSB request phase" in event.error_msg
    assert "Detected an Enhanced Defer parity error phase A or phase B" in event.error_msg


def test_internal_front_error():
    event = MceEvent(status=(1 << 10) | (0x5 << 16))
    tulsa_decode_model(event)
    assert event.error_msg == "Inclusion error from FSB"


def test_internal_int_error():
    event = MceEvent(status=(1 << 10) | (0x0100 << 16))
    tulsa_decode_model(event)
    assert event.error_msg == "Enhanced Intel SpeedStep Technology TM1-TM2 Error"


def test_internal_correctable_ecc():
    event = MceEvent(status=(1 << 10) | (0xC002 << 16))
    tulsa_decode_model(event)
    assert event.error_msg == "Correctable ECC event on outgoing core 0 data"


def test_internal_uncorrectable_ecc():
    event = MceEvent(status=(1 << 10) | (0xE001 << 16))
    tulsa_decode_model(event)
    assert event.error_msg == "Uncorrectable ECC event on outgoing FSB data"