"""Cross-entity checks applied when an Info object is finalized."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from matinfo.core.atominfo import AtomInfo
from matinfo.core.dyninfo import DynamicInfo
from matinfo.core.types import CompositionEntry, HKLInfo, StructureInfo
from matinfo.errors import LogicError


def validate_atom_infos(atom_infos: Sequence[AtomInfo]) -> None:
    if not atom_infos:
        return
    seen: set[int] = set()
    for ai in atom_infos:
        idx = ai.atom.index.value
        if idx in seen:
            raise LogicError(f"Atom index {idx} is used by more than one AtomInfo.")
        seen.add(idx)
    n_msd = sum(1 for ai in atom_infos if ai.msd is not None)
    if n_msd not in (0, len(atom_infos)):
        raise LogicError("Either all or none of the AtomInfo objects must have mean-squared displacements.")
    n_dt = sum(1 for ai in atom_infos if ai.debye_temperature is not None)
    if n_dt not in (0, len(atom_infos)):
        raise LogicError("Either all or none of the AtomInfo objects must have Debye temperatures.")


def validate_structure_vs_atoms(structure: StructureInfo | None, atom_infos: Sequence[AtomInfo]) -> None:
    if structure is None or not atom_infos:
        return
    n_positions = sum(ai.number_per_unit_cell for ai in atom_infos)
    if n_positions != structure.n_atoms:
        raise LogicError(
            f"StructureInfo.n_atoms ({structure.n_atoms}) does not match the number of "
            f"atom positions ({n_positions})."
        )


def validate_atoms_vs_dynamics(atom_infos: Sequence[AtomInfo], dyninfos: Sequence[DynamicInfo]) -> None:
    if not atom_infos or not dyninfos:
        return
    atom_indices = {ai.atom.index.value for ai in atom_infos}
    dyn_indices = {di.atom.index.value for di in dyninfos}
    if atom_indices != dyn_indices:
        missing_dyn = sorted(atom_indices - dyn_indices)
        missing_atom = sorted(dyn_indices - atom_indices)
        raise LogicError(
            "AtomInfo and DynamicInfo objects must cover the same atom indices "
            f"(without DynamicInfo: {missing_dyn}, without AtomInfo: {missing_atom})."
        )


def validate_dynamic_infos(
    dyninfos: Sequence[DynamicInfo],
    temperature: float | None,
    fraction_tolerance: float,
) -> None:
    if not dyninfos:
        return
    seen: set[int] = set()
    for di in dyninfos:
        idx = di.atom.index.value
        if idx in seen:
            raise LogicError(f"Atom index {idx} is used by more than one DynamicInfo.")
        seen.add(idx)
    if temperature is None:
        raise LogicError("Temperature must be set when DynamicInfo objects are present.")
    for di in dyninfos:
        if not np.isclose(di.temperature, temperature, rtol=1e-6, atol=0.0):
            raise LogicError("DynamicInfo temperature differs from the Info temperature.")
    total = sum(di.fraction for di in dyninfos)
    if abs(total - 1.0) > fraction_tolerance:
        raise LogicError(f"DynamicInfo fractions sum to {total:.12g}, expected 1.")


def validate_hkl(
    records: Sequence[HKLInfo],
    window: tuple[float, float] | None,
    dspacing_tolerance: float,
) -> None:
    if window is None:
        if records:
            raise LogicError("HKL records were added without enabling HKL info.")
        return
    dlower, dupper = window
    lo = dlower * (1.0 - dspacing_tolerance)
    hi = dupper * (1.0 + dspacing_tolerance)
    for rec in records:
        if not lo <= rec.dspacing <= hi:
            raise LogicError(
                f"Reflection {rec.hkl} with d={rec.dspacing:g} is outside the HKL window "
                f"[{dlower:g}, {dupper:g}]."
            )
    if records:
        n_normals = sum(1 for rec in records if rec.demi_normals is not None)
        if n_normals not in (0, len(records)):
            raise LogicError("Either all or none of the reflections must have demi_normals.")
        n_eqv = sum(1 for rec in records if rec.eqv_hkl is not None)
        if n_eqv not in (0, len(records)):
            raise LogicError("Either all or none of the reflections must have eqv_hkl.")


def validate_composition(
    composition: Sequence[CompositionEntry],
    dyninfos: Sequence[DynamicInfo],
    fraction_tolerance: float,
    check_consistency: bool = True,
) -> None:
    if not composition:
        return
    total = sum(entry.fraction for entry in composition)
    if abs(total - 1.0) > fraction_tolerance:
        raise LogicError(f"Composition fractions sum to {total:.12g}, expected 1.")
    if not (check_consistency and dyninfos):
        return
    by_index = {entry.atom.index.value: entry for entry in composition}
    if len(by_index) != len(composition):
        raise LogicError("Composition lists the same atom index more than once.")
    if set(by_index) != {di.atom.index.value for di in dyninfos}:
        raise LogicError("Composition and DynamicInfo objects refer to different atoms.")
    for di in dyninfos:
        entry = by_index[di.atom.index.value]
        if entry.atom.atom_data is not di.atom_data:
            raise LogicError("Composition and DynamicInfo use different AtomData for the same index.")
        if abs(entry.fraction - di.fraction) > fraction_tolerance:
            raise LogicError("Composition fractions are inconsistent with DynamicInfo fractions.")
