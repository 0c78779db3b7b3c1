from .core import (
    AtomData,
    AtomIndex,
    AtomInfo,
    CompositionEntry,
    ComputeOnce,
    DirectKernelDynamics,
    DynamicInfo,
    FreeGasDynamics,
    HKLInfo,
    HKLList,
    IndexedAtomData,
    Info,
    SABData,
    ScatteringKernelDynamics,
    SterileDynamics,
    StructureInfo,
    VDOSData,
    VDOSDebyeDynamics,
    VDOSDynamics,
    check_and_complete_lattice,
    dspacing_from_hkl,
    estimate_dcutoff,
    estimate_hkl_range,
    lattice_rotation,
    reciprocal_lattice_rotation,
)
from .errors import BadInput, LogicError, MatInfoError
from .modeling import FinalizeConfig, InfoBuilder

__all__ = [
    "AtomData",
    "AtomIndex",
    "IndexedAtomData",
    "StructureInfo",
    "HKLInfo",
    "CompositionEntry",
    "ComputeOnce",
    "AtomInfo",
    "DynamicInfo",
    "SterileDynamics",
    "FreeGasDynamics",
    "ScatteringKernelDynamics",
    "DirectKernelDynamics",
    "VDOSDynamics",
    "VDOSDebyeDynamics",
    "SABData",
    "VDOSData",
    "HKLList",
    "Info",
    "InfoBuilder",
    "FinalizeConfig",
    "lattice_rotation",
    "reciprocal_lattice_rotation",
    "dspacing_from_hkl",
    "estimate_hkl_range",
    "estimate_dcutoff",
    "check_and_complete_lattice",
    "MatInfoError",
    "LogicError",
    "BadInput",
]
