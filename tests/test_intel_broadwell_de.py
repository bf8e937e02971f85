from mcedecode.events import MCI_STATUS_UC, MceEvent
from mcedecode.intel_broadwell_de import broadwell_de_decode_model

# Status of a corrected memory read error on channel 2.
MEM_STATUS = 0x0092


def _decode(bank, status, misc=0):
    event = MceEvent(bank=bank, status=status, misc=misc)
    broadwell_de_decode_model(event)
    return event


def test_ubox_internal_error():
    event = _decode(4, 0x402)
    assert "Internal errors" in event.mcastatus_msg


def test_txt_error_ignores_bit_12():
    event = _decode(4, 0x1406)
    assert "Intel TXT errors" in event.mcastatus_msg


def test_other_ubox_error():
    event = _decode(4, 0x407)
    assert "Other UBOX Internal errors" in event.mcastatus_msg


def test_pcu_internal_and_ubox_flags():
    event = _decode(4, (1 << 16) | (1 << 22))
    assert "PCU internal error" in event.mcastatus_msg
    assert "Ubox error" in event.mcastatus_msg


def test_pcu_code_decoded():
    event = _decode(4, 0x09 << 24)
    assert "MC_MESSAGE_CHANNEL_TIMEOUT" in event.error_msg


def test_memctrl_bits():
    event = _decode(9, 1 << 19)
    assert "MemCtrl:" in event.mcastatus_msg
    assert "Corrected patrol scrub error" in event.error_msg


def test_location_with_two_ranks():
    misc = (1 << 62) | (1 << 63) | (5 << 46) | (3 << 51)
    event = _decode(9, MEM_STATUS, misc)
    assert "memory_channel=2" in event.mc_location
    assert "ranks=5 and 3" in event.mc_location


def test_location_with_one_rank():
    misc = (1 << 62) | (5 << 46) | (3 << 51)
    event = _decode(10, MEM_STATUS, misc)
    assert "rank=5" in event.mc_location
    assert "ranks" not in event.mc_location


def test_uncorrected_error_has_no_location():
    event = _decode(9, MEM_STATUS | MCI_STATUS_UC)
    assert not event.mc_location


def test_unspecified_channel_has_no_location():
    event = _decode(9, 0x009F)
    assert not event.mc_location


def test_non_imc_bank_has_no_location():
    event = _decode(3, MEM_STATUS)
    assert not event.mc_location