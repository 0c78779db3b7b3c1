from .atom_tables import build_atom_data_table, build_display_labels
from .composition import composition_from_atom_infos, composition_from_dynamic_infos, derive_composition
from .info_builder import InfoBuilder

__all__ = [
    "InfoBuilder",
    "build_atom_data_table",
    "build_display_labels",
    "derive_composition",
    "composition_from_dynamic_infos",
    "composition_from_atom_infos",
]
