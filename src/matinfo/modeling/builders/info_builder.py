"""Two-phase construction of Info objects.

Factories populate an ``InfoBuilder`` from a single thread and then call
``finalize()`` exactly once. Finalizing sorts and cross-links the entries,
builds the per-index tables and returns the immutable ``Info``; the builder
is locked from then on and rejects every further call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from matinfo.core.atominfo import AtomInfo
from matinfo.core.dyninfo import DynamicInfo
from matinfo.core.hkllist import HKLList
from matinfo.core.info import Info, XSectProvider
from matinfo.core.types import CompositionEntry, CustomData, HKLInfo, StructureInfo
from matinfo.errors import BadInput, LogicError
from matinfo.modeling.builders.atom_tables import build_atom_data_table, build_display_labels
from matinfo.modeling.builders.composition import derive_composition
from matinfo.modeling.schema import FinalizeConfig
from matinfo.modeling.validators import (
    validate_atom_infos,
    validate_atoms_vs_dynamics,
    validate_composition,
    validate_dynamic_infos,
    validate_hkl,
    validate_structure_vs_atoms,
)


logger = logging.getLogger(__name__)


def _non_negative(value: float, name: str) -> float:
    if not value >= 0.0:
        raise BadInput(f"{name} must be non-negative.")
    return float(value)


def _positive(value: float, name: str) -> float:
    if not value > 0.0:
        raise BadInput(f"{name} must be positive.")
    return float(value)


def _normalize_custom_data(data: Iterable[tuple[str, Iterable[Iterable[str]]]]) -> CustomData:
    sections = []
    for name, body in data:
        if not isinstance(name, str) or not name:
            raise BadInput("Custom section names must be non-empty strings.")
        lines = []
        for line in body:
            if isinstance(line, str):
                raise BadInput(f"Lines in custom section {name!r} must be sequences of words, not strings.")
            words = tuple(line)
            if not words or not all(isinstance(w, str) for w in words):
                raise BadInput(f"Lines in custom section {name!r} must hold one or more strings.")
            lines.append(words)
        sections.append((name, tuple(lines)))
    return tuple(sections)


class InfoBuilder:
    """Mutable staging area for an Info object."""

    def __init__(self) -> None:
        self._locked = False
        self._structure_info: StructureInfo | None = None
        self._atom_infos: list[AtomInfo] = []
        self._dynamic_infos: list[DynamicInfo] = []
        self._hkl_records: list[HKLInfo] = []
        self._hkl_window: tuple[float, float] | None = None
        self._density: float | None = None
        self._number_density: float | None = None
        self._xsect_free: float | None = None
        self._xsect_absorption: float | None = None
        self._temperature: float | None = None
        self._xsect_provider: XSectProvider | None = None
        self._composition: list[CompositionEntry] = []
        self._custom_data: CustomData = ()

    @property
    def is_locked(self) -> bool:
        return self._locked

    def _ensure_no_lock(self) -> None:
        if self._locked:
            raise LogicError("InfoBuilder has been finalized and can no longer be modified.")

    def set_structure_info(self, structure_info: StructureInfo) -> None:
        self._ensure_no_lock()
        if self._structure_info is not None:
            raise LogicError("Structure info has already been set.")
        if not isinstance(structure_info, StructureInfo):
            raise BadInput("structure_info must be a StructureInfo instance.")
        self._structure_info = structure_info

    def add_atom(self, atom_info: AtomInfo) -> None:
        self._ensure_no_lock()
        if not isinstance(atom_info, AtomInfo):
            raise BadInput("add_atom expects an AtomInfo instance.")
        self._atom_infos.append(atom_info)

    def enable_hkl_info(self, dlower: float, dupper: float) -> None:
        self._ensure_no_lock()
        if not 0.0 < dlower <= dupper:
            raise BadInput("HKL window must satisfy 0 < dlower <= dupper.")
        self._hkl_window = (float(dlower), float(dupper))

    def add_hkl(self, hkl: HKLInfo) -> None:
        self._ensure_no_lock()
        if not isinstance(hkl, HKLInfo):
            raise BadInput("add_hkl expects an HKLInfo instance.")
        self._hkl_records.append(hkl)

    def set_hkl_list(self, records: Iterable[HKLInfo]) -> None:
        self._ensure_no_lock()
        records = list(records)
        if not all(isinstance(rec, HKLInfo) for rec in records):
            raise BadInput("set_hkl_list expects HKLInfo instances.")
        self._hkl_records = records

    def set_xsect_free(self, xsect: float) -> None:
        self._ensure_no_lock()
        self._xsect_free = _non_negative(xsect, "Free scattering cross section")

    def set_xsect_absorption(self, xsect: float) -> None:
        self._ensure_no_lock()
        self._xsect_absorption = _non_negative(xsect, "Absorption cross section")

    def set_temperature(self, temperature: float) -> None:
        self._ensure_no_lock()
        self._temperature = _positive(temperature, "Temperature")

    def set_density(self, density: float) -> None:
        self._ensure_no_lock()
        self._density = _positive(density, "Density")

    def set_number_density(self, number_density: float) -> None:
        self._ensure_no_lock()
        self._number_density = _positive(number_density, "Number density")

    def set_xsect_provider(self, provider: XSectProvider) -> None:
        self._ensure_no_lock()
        if not callable(provider):
            raise BadInput("Cross section provider must be callable.")
        self._xsect_provider = provider

    def add_dyn_info(self, dyninfo: DynamicInfo) -> None:
        self._ensure_no_lock()
        if not isinstance(dyninfo, DynamicInfo):
            raise BadInput("add_dyn_info expects a DynamicInfo instance.")
        self._dynamic_infos.append(dyninfo)

    def set_composition(self, composition: Sequence[CompositionEntry]) -> None:
        self._ensure_no_lock()
        entries = list(composition)
        if not all(isinstance(entry, CompositionEntry) for entry in entries):
            raise BadInput("set_composition expects CompositionEntry instances.")
        self._composition = entries

    def set_custom_data(self, data: Iterable[tuple[str, Iterable[Iterable[str]]]]) -> None:
        self._ensure_no_lock()
        self._custom_data = _normalize_custom_data(data)

    def finalize(self, config: FinalizeConfig | None = None) -> Info:
        """Validate, sort and cross-link everything, then lock and return the Info."""

        self._ensure_no_lock()
        self._locked = True
        config = config or FinalizeConfig()

        atom_infos = sorted(self._atom_infos, key=lambda ai: (ai.atom_data.z, ai.atom.index))
        dyninfos = list(self._dynamic_infos)

        validate_atom_infos(atom_infos)
        validate_structure_vs_atoms(self._structure_info, atom_infos)
        validate_dynamic_infos(dyninfos, self._temperature, config.fraction_tolerance)
        validate_atoms_vs_dynamics(atom_infos, dyninfos)
        validate_hkl(self._hkl_records, self._hkl_window, config.dspacing_tolerance)

        composition = tuple(self._composition)
        if not composition and config.derive_composition:
            composition = derive_composition(atom_infos, dyninfos)
            logger.debug("Derived composition with %d entries", len(composition))
        validate_composition(
            composition,
            dyninfos,
            config.fraction_tolerance,
            check_consistency=config.check_composition_consistency,
        )

        all_atoms = [ai.atom for ai in atom_infos]
        all_atoms += [di.atom for di in dyninfos]
        all_atoms += [entry.atom for entry in composition]
        table = build_atom_data_table(all_atoms)
        labels = build_display_labels(table)

        dyn_pos_by_index = {di.atom.index.value: pos for pos, di in enumerate(dyninfos)}
        links = {
            pos: dyn_pos_by_index[ai.atom.index.value]
            for pos, ai in enumerate(atom_infos)
            if ai.atom.index.value in dyn_pos_by_index
        }

        hkl_list = None
        if self._hkl_window is not None:
            hkl_list = HKLList(self._hkl_records, *self._hkl_window)

        info = Info(
            structure_info=self._structure_info,
            atom_infos=atom_infos,
            dynamic_infos=dyninfos,
            hkl_list=hkl_list,
            density=self._density,
            number_density=self._number_density,
            xsect_free=self._xsect_free,
            xsect_absorption=self._xsect_absorption,
            temperature=self._temperature,
            xsect_provider=self._xsect_provider,
            composition=composition,
            custom_data=self._custom_data,
            atom_data_table=table,
            display_labels=labels,
            atom_to_dyninfo=links,
        )
        logger.debug(
            "Finalized %r: %d atom roles, %d reflections, composition=%s",
            info,
            len(table),
            info.n_hkl,
            ", ".join(f"{labels[e.atom.index.value]}:{e.fraction:g}" for e in composition),
        )
        return info
