from .builders import (
    InfoBuilder,
    build_atom_data_table,
    build_display_labels,
    composition_from_atom_infos,
    composition_from_dynamic_infos,
    derive_composition,
)
from .schema import FinalizeConfig
from .validators import (
    validate_atom_infos,
    validate_atoms_vs_dynamics,
    validate_composition,
    validate_dynamic_infos,
    validate_hkl,
    validate_structure_vs_atoms,
)

__all__ = [
    "InfoBuilder",
    "FinalizeConfig",
    "build_atom_data_table",
    "build_display_labels",
    "derive_composition",
    "composition_from_dynamic_infos",
    "composition_from_atom_infos",
    "validate_atom_infos",
    "validate_atoms_vs_dynamics",
    "validate_structure_vs_atoms",
    "validate_dynamic_infos",
    "validate_hkl",
    "validate_composition",
]
