from .info_validator import (
    validate_atoms_vs_dynamics,
    validate_atom_infos,
    validate_composition,
    validate_dynamic_infos,
    validate_hkl,
    validate_structure_vs_atoms,
)

__all__ = [
    "validate_atoms_vs_dynamics",
    "validate_atom_infos",
    "validate_structure_vs_atoms",
    "validate_dynamic_infos",
    "validate_hkl",
    "validate_composition",
]
