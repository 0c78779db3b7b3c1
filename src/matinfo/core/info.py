"""Locked material information consumed by physics models.

Instances are produced by ``matinfo.modeling.InfoBuilder.finalize()`` and are
read-only afterwards, so they can be shared freely between threads.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Callable, TypeVar

import numpy as np

from matinfo.core.atominfo import AtomInfo
from matinfo.core.compute_once import ComputeOnce
from matinfo.core.dyninfo import DynamicInfo
from matinfo.core.hkllist import HKLList
from matinfo.core.lattice import dspacing_from_hkl, reciprocal_lattice_rotation
from matinfo.core.types import (
    AtomData,
    AtomIndex,
    CompositionEntry,
    CustomData,
    CustomSectionData,
    HKLInfo,
    IndexedAtomData,
    StructureInfo,
)
from matinfo.core.uid import UniqueID, next_unique_id
from matinfo.errors import LogicError


T = TypeVar("T")
XSectProvider = Callable[[float], float]


def _require(value: T | None, name: str) -> T:
    if value is None:
        raise LogicError(f"{name} is not available on this Info object.")
    return value


class Info:
    """Material data: structure, atoms, dynamics, reflections and cross sections."""

    def __init__(
        self,
        *,
        structure_info: StructureInfo | None = None,
        atom_infos: Sequence[AtomInfo] = (),
        dynamic_infos: Sequence[DynamicInfo] = (),
        hkl_list: HKLList | None = None,
        density: float | None = None,
        number_density: float | None = None,
        xsect_free: float | None = None,
        xsect_absorption: float | None = None,
        temperature: float | None = None,
        xsect_provider: XSectProvider | None = None,
        composition: Sequence[CompositionEntry] = (),
        custom_data: CustomData = (),
        atom_data_table: Sequence[AtomData] = (),
        display_labels: Sequence[str] = (),
        atom_to_dyninfo: Mapping[int, int] | None = None,
    ) -> None:
        if len(atom_data_table) != len(display_labels):
            raise LogicError("atom_data_table and display_labels must have equal length.")
        self._uid = next_unique_id()
        self._structure_info = structure_info
        self._atom_infos: tuple[AtomInfo, ...] = tuple(atom_infos)
        self._dynamic_infos: tuple[DynamicInfo, ...] = tuple(dynamic_infos)
        self._hkl_list = hkl_list
        self._density = density
        self._number_density = number_density
        self._xsect_free = xsect_free
        self._xsect_absorption = xsect_absorption
        self._temperature = temperature
        self._xsect_provider = xsect_provider
        self._composition: tuple[CompositionEntry, ...] = tuple(composition)
        self._custom_data: CustomData = tuple(custom_data)
        self._atom_data_table: tuple[AtomData, ...] = tuple(atom_data_table)
        self._display_labels: tuple[str, ...] = tuple(display_labels)
        self._rec_lat: ComputeOnce[np.ndarray] = ComputeOnce(self._build_rec_lat)

        links = dict(atom_to_dyninfo or {})
        reverse = {di_pos: ai_pos for ai_pos, di_pos in links.items()}
        if len(reverse) != len(links):
            raise LogicError("A DynamicInfo can correspond to at most one AtomInfo.")
        for ai_pos, ai in enumerate(self._atom_infos):
            ai._attach(self, links.get(ai_pos))
        for di_pos, di in enumerate(self._dynamic_infos):
            di._attach(self, reverse.get(di_pos))

    def __repr__(self) -> str:
        return (
            f"Info(uid={self._uid.value}, atoms={len(self._atom_infos)}, "
            f"dyninfos={len(self._dynamic_infos)}, nhkl={self.n_hkl})"
        )

    @property
    def uid(self) -> UniqueID:
        return self._uid

    @property
    def is_locked(self) -> bool:
        return True

    def is_crystalline(self) -> bool:
        return self.has_structure_info() or self.has_atom_info() or self.has_hkl_info()

    # Structure

    def has_structure_info(self) -> bool:
        return self._structure_info is not None

    @property
    def structure_info(self) -> StructureInfo:
        return _require(self._structure_info, "Structure info")

    def _build_rec_lat(self) -> np.ndarray:
        si = self.structure_info
        return reciprocal_lattice_rotation(*si.lengths, *si.angles_rad)

    def dspacing_from_hkl(self, h: int, k: int, l: int) -> float:
        """d-spacing [angstrom] of a Miller index, using the structure info lattice."""

        return dspacing_from_hkl(h, k, l, self._rec_lat.get())

    # Dynamics

    def has_dynamic_info(self) -> bool:
        return bool(self._dynamic_infos)

    @property
    def dynamic_infos(self) -> tuple[DynamicInfo, ...]:
        return self._dynamic_infos

    # Cross sections [barn]

    def has_xsect_absorption(self) -> bool:
        return self._xsect_absorption is not None

    @property
    def xsect_absorption(self) -> float:
        return _require(self._xsect_absorption, "Absorption cross section")

    def has_xsect_free(self) -> bool:
        return self._xsect_free is not None

    @property
    def xsect_free(self) -> float:
        return _require(self._xsect_free, "Free scattering cross section")

    def provides_non_bragg_xsects(self) -> bool:
        return self._xsect_provider is not None

    def xsect_scat_non_bragg(self, ekin: float) -> float:
        """Non-Bragg scattering cross section [barn] at neutron kinetic energy ``ekin`` [eV]."""

        provider = _require(self._xsect_provider, "Non-Bragg cross section provider")
        return float(provider(ekin))

    # Temperature [K]

    def has_temperature(self) -> bool:
        return self._temperature is not None

    @property
    def temperature(self) -> float:
        return _require(self._temperature, "Temperature")

    # Atoms

    def has_atom_info(self) -> bool:
        return bool(self._atom_infos)

    @property
    def atom_infos(self) -> tuple[AtomInfo, ...]:
        return self._atom_infos

    def has_atom_msd(self) -> bool:
        return self.has_atom_info() and self._atom_infos[0].msd is not None

    def has_atom_debye_temp(self) -> bool:
        return self.has_atom_info() and self._atom_infos[0].debye_temperature is not None

    def has_debye_temperature(self) -> bool:
        return self.has_atom_debye_temp()

    # Reflections

    def has_hkl_info(self) -> bool:
        return self._hkl_list is not None

    @property
    def hkl_list(self) -> Sequence[HKLInfo]:
        """Reflections sorted by d-spacing. Empty when no HKL info is present."""

        return () if self._hkl_list is None else self._hkl_list

    @property
    def n_hkl(self) -> int:
        return 0 if self._hkl_list is None else len(self._hkl_list)

    def hkl_first(self) -> HKLInfo | None:
        return None if self._hkl_list is None else self._hkl_list.first()

    def hkl_last(self) -> HKLInfo | None:
        return None if self._hkl_list is None else self._hkl_list.last()

    @property
    def hkl_dlower(self) -> float:
        """Lower end of the d-spacing window. Raises LogicError without HKL info."""

        return _require(self._hkl_list, "HKL info").dlower

    @property
    def hkl_dupper(self) -> float:
        return _require(self._hkl_list, "HKL info").dupper

    @property
    def hkl_dmin_val(self) -> float:
        return float("inf") if self._hkl_list is None else self._hkl_list.dmin_val

    @property
    def hkl_dmax_val(self) -> float:
        return float("inf") if self._hkl_list is None else self._hkl_list.dmax_val

    def has_hkl_demi_normals(self) -> bool:
        return self._hkl_list is not None and self._hkl_list.has_demi_normals

    def has_expanded_hkl_info(self) -> bool:
        return self._hkl_list is not None and self._hkl_list.has_expanded_hkl

    def search_expanded_hkl(self, h: int, k: int, l: int) -> HKLInfo | None:
        if self._hkl_list is None:
            return None
        return self._hkl_list.search_expanded_hkl(h, k, l)

    # Densities

    def has_density(self) -> bool:
        return self._density is not None

    @property
    def density(self) -> float:
        """Mass density [g/cm^3]."""

        return _require(self._density, "Density")

    def has_number_density(self) -> bool:
        return self._number_density is not None

    @property
    def number_density(self) -> float:
        """Number density [atoms/angstrom^3]."""

        return _require(self._number_density, "Number density")

    # Composition

    def has_composition(self) -> bool:
        return bool(self._composition)

    @property
    def composition(self) -> tuple[CompositionEntry, ...]:
        return self._composition

    # Per-index atom lookups

    def _check_index(self, ai: AtomIndex | int) -> int:
        idx = int(ai)
        if not 0 <= idx < len(self._atom_data_table):
            raise LogicError(f"Atom index {idx} is out of range.")
        return idx

    def display_label(self, ai: AtomIndex | int) -> str:
        return self._display_labels[self._check_index(ai)]

    def atom_data(self, ai: AtomIndex | int) -> AtomData:
        return self._atom_data_table[self._check_index(ai)]

    def indexed_atom_data(self, ai: AtomIndex | int) -> IndexedAtomData:
        idx = self._check_index(ai)
        return IndexedAtomData(self._atom_data_table[idx], AtomIndex(idx))

    @property
    def n_atom_indices(self) -> int:
        return len(self._atom_data_table)

    # Custom sections

    @property
    def custom_sections(self) -> CustomData:
        return self._custom_data

    def count_custom_sections(self, name: str) -> int:
        return sum(1 for section_name, _ in self._custom_data if section_name == name)

    def custom_section(self, name: str, index: int = 0) -> CustomSectionData:
        """Return the ``index``-th section called ``name``."""

        matches = [body for section_name, body in self._custom_data if section_name == name]
        if not 0 <= index < len(matches):
            raise LogicError(f"Custom section {name!r} (index {index}) is not available.")
        return matches[index]

    # Retired API

    def has_atom_positions(self) -> bool:
        return self.has_atom_info()

    def has_any_debye_temperature(self) -> bool:
        return self.has_atom_debye_temp()

    @staticmethod
    def _retired_debye_api() -> LogicError:
        return LogicError(
            "Global versus per-element Debye temperatures no longer exist. Debye temperatures "
            "are available on the AtomInfo objects (see has_atom_debye_temp())."
        )

    def global_debye_temperature(self) -> float:
        raise self._retired_debye_api()

    def has_per_element_debye_temperature(self) -> bool:
        raise self._retired_debye_api()

    def debye_temperature_by_element(self, ai: AtomIndex | int) -> float:
        raise self._retired_debye_api()
