# mcedecode

`mcedecode` turns raw x86 machine check register values (MCi_STATUS,
MCi_MISC, MCG_STATUS) into the human-readable messages a RAS monitor would
log: the failing bank, the error class, model-specific detail and, for memory
errors, the channel and rank.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

## The event record

`mcedecode.events.MceEvent` is a dataclass holding the registers of one
machine check (`bank`, `status`, `misc`, `addr`, `mcgstatus`, `mcgcap`,
`ipid`, `synd`, `ip`, `cpu`) and the decoded message fields (`bank_name`,
`error_msg`, `mcgstatus_msg`, `mcistatus_msg`, `mcastatus_msg`,
`user_action`, `mc_location`).

Decoders add text with `MceEvent.append(field, text)`, which separates new
text from old with a space and raises `ValueError` for an unknown field.
`MceEvent.messages()` returns the fields that hold text, in a fixed order.

`CpuInfo` describes the processor (`cputype`, a `CpuType` member, plus
`family` and `model`). `events` also defines the architectural status bit
masks such as `MCI_STATUS_UC` and `MCG_STATUS_RIPV`.

## Decoders

| Module | Function | Processors |
| --- | --- | --- |
| `amd` | `decode_amd_errcode(event)` | AMD architectural error code and severity |
| `amd_k8` | `parse_amd_k8_event(event)` | AMD K8 |
| `intel_p4p6` | `p4_decode_model`, `core2_decode_model`, `p6old_decode_model` | P4, Core 2, older P6 |
| `intel_tulsa` | `tulsa_decode_model(event)` | Tulsa |
| `intel_dunnington` | `dunnington_decode_model(event)` | Dunnington |
| `intel_nehalem` | `nehalem_decode_model`, `xeon75xx_decode_model` | Nehalem, Xeon 75xx |
| `intel_sb` | `snb_decode_model(event, cpu)` | Sandy Bridge |
| `intel_ivb` | `ivb_decode_model(event, cpu)` | Ivy Bridge |
| `intel_haswell` | `hsw_decode_model(event)` | Haswell EP/EX |
| `intel_broadwell_de` | `broadwell_de_decode_model(event)` | Broadwell DE |
| `intel_broadwell_epex` | `broadwell_epex_decode_model(event)` | Broadwell EP/EX |
| `intel_skylake` | `skylake_s_decode_model(event)` | Skylake Xeon |
| `intel_knl` | `knl_decode_model(event)` | Knights Landing / Mill |
| `intel_i10nm` | `i10nm_decode_model(cputype, event)` | Ice Lake, Tremont, Sapphire/Emerald Rapids |

Each decoder appends to the event's message fields in place.
`parse_amd_k8_event` returns `False`, leaving the event untouched, for GART
errors on bank 4, and `True` otherwise; for northbridge memory errors it also
clears `ip`. `i10nm_decode_model` does nothing for a `cputype` outside the
10nm family.

## Usage

```python
from mcedecode.events import MceEvent
from mcedecode.intel_skylake import skylake_s_decode_model

event = MceEvent(bank=13, status=0x0000_0000_0008_0090, misc=0)
skylake_s_decode_model(event)

for field, text in event.messages().items():
    print(f"{field}: {text}")
```

```python
from mcedecode.amd_k8 import parse_amd_k8_event
from mcedecode.events import MceEvent

event = MceEvent(bank=0, status=0x9000_0000_0000_0011)
if parse_amd_k8_event(event):
    print(event.messages())
```

## Lower-level helpers

`mcedecode.bitfield` holds the generic register-field decoders used by every
model decoder: `extract(value, start, end)`, `mask(bits)`,
`test_prefix(nr, value)`, `bitfield_msg(names, bit_offset, ignore_bits, status)`,
`decode_bitfield(event, status, fields)` and
`decode_numfield(event, status, fields)`, with the `Field` and `NumField`
table entries and the builders `sbitfield`, `field_null`, `number`,
`number_force`, `hex_number` and `hex_number_force`.

## What the package does not do

- It has no single entry point that picks a decoder from the CPU type; the
  caller chooses the model decoder, and generic Intel MCG/MCi status and MCA
  code decoding is not provided.
- It does not decode AMD Scalable MCA (family 17h and later) bank types.
- It does not read machine check events from the kernel, store them, or run
  as a monitoring service.
- It does not write model-specific registers to enable memory controller
  error logging.

## Running the tests

```
pip install .[test]
pytest
```