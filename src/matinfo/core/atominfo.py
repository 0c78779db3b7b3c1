"""Per-role structural information for atoms in the unit cell."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

import numpy as np

from matinfo.core.types import AtomData, IndexedAtomData, readonly_array
from matinfo.errors import BadInput, LogicError

if TYPE_CHECKING:
    from matinfo.core.dyninfo import DynamicInfo
    from matinfo.core.info import Info


Array = np.ndarray


class AtomInfo:
    """One atom role in the unit cell: its positions and optional displacement data.

    ``msd`` is the mean-squared displacement projected onto a linear axis
    [angstrom^2], as used by isotropic Debye-Waller factors.
    """

    def __init__(
        self,
        atom: IndexedAtomData,
        positions: Array,
        debye_temperature: float | None = None,
        msd: float | None = None,
    ) -> None:
        if not isinstance(atom, IndexedAtomData):
            raise BadInput("AtomInfo.atom must be an IndexedAtomData.")
        pos = np.asarray(positions, dtype=float)
        if pos.ndim == 1 and pos.size == 3:
            pos = pos.reshape(1, 3)
        if pos.ndim != 2 or pos.shape[1] != 3 or pos.shape[0] == 0:
            raise BadInput("AtomInfo.positions must be a non-empty (n, 3) array.")
        if debye_temperature is not None and not debye_temperature > 0.0:
            raise BadInput("AtomInfo.debye_temperature must be positive when provided.")
        if msd is not None and not msd > 0.0:
            raise BadInput("AtomInfo.msd must be positive when provided.")
        self._atom = atom
        self._positions = readonly_array(pos)
        self._debye_temperature = None if debye_temperature is None else float(debye_temperature)
        self._msd = None if msd is None else float(msd)
        self._owner: weakref.ReferenceType[Info] | None = None
        self._dyninfo_index: int | None = None

    def __repr__(self) -> str:
        return (
            f"AtomInfo({self.atom_data.description}, index={self._atom.index.value}, "
            f"n={self.number_per_unit_cell})"
        )

    @property
    def atom(self) -> IndexedAtomData:
        return self._atom

    @property
    def indexed_atom_data(self) -> IndexedAtomData:
        return self._atom

    @property
    def atom_data(self) -> AtomData:
        return self._atom.atom_data

    @property
    def positions(self) -> Array:
        return self._positions

    @property
    def number_per_unit_cell(self) -> int:
        return int(self._positions.shape[0])

    @property
    def msd(self) -> float | None:
        return self._msd

    @property
    def debye_temperature(self) -> float | None:
        return self._debye_temperature

    @property
    def corresponding_dynamic_info(self) -> DynamicInfo | None:
        """DynamicInfo for the same role on the owning Info, or None."""

        if self._dyninfo_index is None:
            return None
        owner = self._owner() if self._owner is not None else None
        if owner is None:
            raise LogicError("The Info object owning this AtomInfo no longer exists.")
        return owner.dynamic_infos[self._dyninfo_index]

    def _attach(self, owner: Info, dyninfo_index: int | None) -> None:
        if self._owner is not None:
            raise LogicError("AtomInfo objects can only belong to a single Info object.")
        self._owner = weakref.ref(owner)
        self._dyninfo_index = dyninfo_index
