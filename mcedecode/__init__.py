"""Decode x86 machine check register values from AMD K8 and Intel processors."""

__version__ = "0.1.0"

__all__ = [
    "amd",
    "amd_k8",
    "bitfield",
    "events",
    "intel_broadwell_de",
    "intel_broadwell_epex",
    "intel_dunnington",
    "intel_haswell",
    "intel_i10nm",
    "intel_ivb",
    "intel_knl",
    "intel_nehalem",
    "intel_p4p6",
    "intel_sb",
    "intel_skylake",
    "intel_tulsa",
]