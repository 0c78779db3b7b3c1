from .atominfo import AtomInfo
from .compute_once import ComputeOnce
from .dyninfo import (
    DirectKernelDynamics,
    DynamicInfo,
    FreeGasDynamics,
    ScatteringKernelDynamics,
    SterileDynamics,
    VDOSDebyeDynamics,
    VDOSDynamics,
)
from .hkllist import HKLList
from .info import Info
from .kernel_data import SABData, VDOSData, create_vdos_debye
from .lattice import (
    check_and_complete_lattice,
    dspacing_from_hkl,
    estimate_dcutoff,
    estimate_hkl_range,
    lattice_rotation,
    reciprocal_lattice_rotation,
)
from .types import (
    AtomData,
    AtomIndex,
    CompositionEntry,
    CustomData,
    CustomLine,
    CustomSectionData,
    HKLInfo,
    IndexedAtomData,
    StructureInfo,
)
from .uid import UniqueID, next_unique_id

__all__ = [
    "AtomData",
    "AtomIndex",
    "IndexedAtomData",
    "StructureInfo",
    "HKLInfo",
    "CompositionEntry",
    "CustomLine",
    "CustomSectionData",
    "CustomData",
    "UniqueID",
    "next_unique_id",
    "ComputeOnce",
    "lattice_rotation",
    "reciprocal_lattice_rotation",
    "dspacing_from_hkl",
    "estimate_hkl_range",
    "estimate_dcutoff",
    "check_and_complete_lattice",
    "SABData",
    "VDOSData",
    "create_vdos_debye",
    "AtomInfo",
    "DynamicInfo",
    "SterileDynamics",
    "FreeGasDynamics",
    "ScatteringKernelDynamics",
    "DirectKernelDynamics",
    "VDOSDynamics",
    "VDOSDebyeDynamics",
    "HKLList",
    "Info",
]
