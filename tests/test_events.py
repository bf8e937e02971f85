import pytest

from mcedecode.events import CpuInfo, CpuType, MceEvent


def test_append_to_empty_field_sets_text():
    event = MceEvent()
    event.append("error_msg", "first")
    assert event.error_msg == "first"


def test_append_separates_with_space():
    event = MceEvent()
    event.append("mcistatus_msg", "first")
    event.append("mcistatus_msg", "second")
    assert event.mcistatus_msg == "first second"


def test_append_unknown_field_raises():
    event = MceEvent()
    with pytest.raises(ValueError):
        event.append("status", "text")


def test_messages_only_non_empty_fields():
    event = MceEvent()
    event.append("mc_location", "here")
    event.append("bank_name", "bank")
    assert event.messages() == {"bank_name": "bank", "mc_location": "here"}


def test_messages_empty_for_fresh_event():
    assert MceEvent().messages() == {}


def test_cpu_info_defaults_to_generic():
    cpu = CpuInfo()
    assert cpu.cputype is CpuType.GENERIC
    assert (cpu.family, cpu.model) == (0, 0)