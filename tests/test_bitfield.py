import pytest

from mcedecode.bitfield import (
    Field,
    bitfield_msg,
    decode_bitfield,
    decode_numfield,
    extract,
    field_null,
    hex_number,
    hex_number_force,
    mask,
    number,
    number_force,
    sbitfield,
    test_prefix as prefix_matches,
)
from mcedecode.events import MceEvent


def test_field_from_mapping_fills_holes():
    field = Field(4, {0: "zero", 3: "three"})
    assert field.names == ("zero", None, None, "three")


def test_field_from_sequence_becomes_tuple():
    field = Field(0, ["a", "b"])
    assert field.names == ("a", "b")


def test_sbitfield_reports_set_bit():
    event = MceEvent()
    decode_bitfield(event, 1 << 19, [sbitfield(19, "scrub error")])
    assert event.error_msg == "scrub error"


def test_sbitfield_clear_bit_reports_nothing():
    event = MceEvent()
    decode_bitfield(event, 1 << 18, [sbitfield(19, "scrub error")])
    assert event.error_msg == ""


def test_field_null_reports_raw_bits():
    event = MceEvent()
    decode_bitfield(event, 1 << 17, [field_null(17)])
    assert event.error_msg == "<17:1>"


def test_field_null_silent_when_zero():
    event = MceEvent()
    decode_bitfield(event, 0, [field_null(17)])
    assert event.error_msg == ""


def test_table_lookup_and_missing_entry():
    table = Field(8, {0: "none", 2: "two"})
    event = MceEvent()
    decode_bitfield(event, 2 << 8, [table])
    assert event.error_msg == "two"
    other = MceEvent()
    decode_bitfield(other, 1 << 8, [table])
    assert other.error_msg.startswith("<8:")


def test_table_zero_value_uses_entry():
    event = MceEvent()
    decode_bitfield(event, 0, [Field(8, {0: "none", 2: "two"})])
    assert event.error_msg == "none"


def test_numfield_skipped_when_zero():
    event = MceEvent()
    decode_numfield(event, 0, [number(0, 7, "count"), hex_number(8, 15, "id")])
    assert event.error_msg == ""


def test_numfield_forced_when_zero():
    event = MceEvent()
    decode_numfield(event, 0, [number_force(0, 3, "count")])
    assert event.error_msg == "count: 0\n"


@pytest.mark.parametrize("value", [1, 9, 200, 255])
def test_numfield_decimal_and_hex_agree(value):
    decimal = MceEvent()
    decode_numfield(decimal, value << 8, [number(8, 15, "n")])
    hexa = MceEvent()
    decode_numfield(hexa, value << 8, [hex_number_force(8, 15, "n")])
    assert int(decimal.error_msg.split(": ")[1]) == value
    assert int(hexa.error_msg.split(": ")[1], 16) == value


@pytest.mark.parametrize("start,end,value", [(0, 3, 5), (16, 23, 200), (44, 51, 1)])
def test_extract_round_trip(start, end, value):
    assert extract(value << start, start, end) == value
    assert extract((value << start) | ~(-1 << start), start, end) == value


def test_mask_width():
    for bits in range(10):
        assert mask(bits) + 1 == 1 << (bits + 1)


def test_prefix():
    assert prefix_matches(7, 0x93)
    assert not prefix_matches(7, 0x193)
    assert not prefix_matches(7, 0x13)


def test_bitfield_msg_names_and_fallback():
    names = ("a", None, "c")
    assert bitfield_msg(names, 0, 0, 0b101) == "a, c"
    assert bitfield_msg(names, 0, 0, 0b010) == "BIT1"


def test_bitfield_msg_ignore_bits_suppress_all():
    assert bitfield_msg(("a", "b"), 0, 0b100, 0b111) == ""