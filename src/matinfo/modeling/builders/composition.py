"""Derivation of bulk composition from atom and dynamics entries."""

from __future__ import annotations

from collections.abc import Sequence

from matinfo.core.atominfo import AtomInfo
from matinfo.core.dyninfo import DynamicInfo
from matinfo.core.types import CompositionEntry


def composition_from_dynamic_infos(dyninfos: Sequence[DynamicInfo]) -> tuple[CompositionEntry, ...]:
    ordered = sorted(dyninfos, key=lambda di: di.atom.index)
    return tuple(CompositionEntry(di.fraction, di.atom) for di in ordered)


def composition_from_atom_infos(atom_infos: Sequence[AtomInfo]) -> tuple[CompositionEntry, ...]:
    """Fractions proportional to the number of positions per unit cell."""

    total = sum(ai.number_per_unit_cell for ai in atom_infos)
    if total == 0:
        return ()
    ordered = sorted(atom_infos, key=lambda ai: ai.atom.index)
    return tuple(CompositionEntry(ai.number_per_unit_cell / total, ai.atom) for ai in ordered)


def derive_composition(
    atom_infos: Sequence[AtomInfo],
    dyninfos: Sequence[DynamicInfo],
) -> tuple[CompositionEntry, ...]:
    if dyninfos:
        return composition_from_dynamic_infos(dyninfos)
    return composition_from_atom_infos(atom_infos)
