"""Core value types describing a material."""

from __future__ import annotations

import functools
from dataclasses import dataclass

import numpy as np

from matinfo.errors import BadInput, LogicError
from matinfo.units import FM2_PER_BARN, NEUTRON_MASS_AMU


Array = np.ndarray
CustomLine = tuple[str, ...]
CustomSectionData = tuple[CustomLine, ...]
CustomData = tuple[tuple[str, CustomSectionData], ...]


def readonly_array(arr: Array) -> Array:
    arr = np.array(arr, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class AtomData:
    """Physical description of one atom species, shared between roles and materials.

    Compared by identity: two descriptors are the same only if they are the
    same object.

    Parameters
    - ``symbol``: element symbol, e.g. ``"Al"``.
    - ``z``: atomic number.
    - ``mass_amu``: atomic mass [amu].
    - ``coherent_scat_len_fm``: bound coherent scattering length [fm].
    - ``incoherent_xs``: bound incoherent cross section [barn].
    - ``capture_xs``: absorption cross section at 2200 m/s [barn].
    - ``a``: mass number for a specific isotope, 0 for the natural element.
    """

    symbol: str
    z: int
    mass_amu: float
    coherent_scat_len_fm: float = 0.0
    incoherent_xs: float = 0.0
    capture_xs: float = 0.0
    a: int = 0

    def __post_init__(self) -> None:
        if not self.symbol or not self.symbol.isalpha():
            raise BadInput("AtomData.symbol must be a non-empty alphabetic string.")
        if not 1 <= int(self.z) <= 130:
            raise BadInput("AtomData.z must be in the range 1..130.")
        if not self.mass_amu > 0.0:
            raise BadInput("AtomData.mass_amu must be positive.")
        if self.incoherent_xs < 0.0 or self.capture_xs < 0.0:
            raise BadInput("AtomData cross sections must be non-negative.")
        if self.a < 0:
            raise BadInput("AtomData.a must be non-negative.")

    @property
    def is_isotope(self) -> bool:
        return self.a > 0

    @property
    def description(self) -> str:
        return f"{self.symbol}{self.a}" if self.is_isotope else self.symbol

    @property
    def coherent_xs(self) -> float:
        b = self.coherent_scat_len_fm
        return 4.0 * np.pi * b * b / FM2_PER_BARN

    @property
    def scattering_xs(self) -> float:
        return self.coherent_xs + self.incoherent_xs

    @property
    def free_scattering_xs(self) -> float:
        """Scattering cross section in the free-atom (high energy) limit."""

        ratio = self.mass_amu / (self.mass_amu + NEUTRON_MASS_AMU)
        return self.scattering_xs * ratio * ratio


@functools.total_ordering
@dataclass(frozen=True)
class AtomIndex:
    """Identifies one role of an atom species inside a single material."""

    value: int

    def __post_init__(self) -> None:
        if int(self.value) != self.value or self.value < 0:
            raise BadInput("AtomIndex must be a non-negative integer.")
        object.__setattr__(self, "value", int(self.value))

    def __lt__(self, other: AtomIndex) -> bool:
        if not isinstance(other, AtomIndex):
            return NotImplemented
        return self.value < other.value

    def __index__(self) -> int:
        return self.value

    def __int__(self) -> int:
        return self.value


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class IndexedAtomData:
    """A shared AtomData together with the role index it plays in one material.

    Equality, ordering and hashing use the index only. Records sharing an index
    must reference the identical AtomData object.
    """

    atom_data: AtomData
    index: AtomIndex

    def __post_init__(self) -> None:
        if not isinstance(self.atom_data, AtomData):
            raise BadInput("IndexedAtomData.atom_data must be an AtomData instance.")
        if not isinstance(self.index, AtomIndex):
            object.__setattr__(self, "index", AtomIndex(self.index))

    def _check_same_role(self, other: IndexedAtomData) -> None:
        if self.index == other.index and self.atom_data is not other.atom_data:
            raise LogicError(
                f"Atom index {self.index.value} is associated with two different AtomData objects."
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexedAtomData):
            return NotImplemented
        self._check_same_role(other)
        return self.index == other.index

    def __lt__(self, other: IndexedAtomData) -> bool:
        if not isinstance(other, IndexedAtomData):
            return NotImplemented
        self._check_same_role(other)
        return self.index < other.index

    def __hash__(self) -> int:
        return hash(self.index)


@dataclass(frozen=True)
class StructureInfo:
    """Unit cell description. Lengths in angstrom, angles in degrees."""

    spacegroup: int
    lattice_a: float
    lattice_b: float
    lattice_c: float
    alpha: float
    beta: float
    gamma: float
    volume: float
    n_atoms: int

    def __post_init__(self) -> None:
        if not 0 <= self.spacegroup <= 230:
            raise BadInput("spacegroup must be in the range 0..230 (0 meaning unknown).")
        if min(self.lattice_a, self.lattice_b, self.lattice_c) <= 0.0:
            raise BadInput("Lattice lengths must be positive.")
        for angle in (self.alpha, self.beta, self.gamma):
            if not 0.0 < angle < 180.0:
                raise BadInput("Lattice angles must be in the open range (0, 180) degrees.")
        if not self.volume > 0.0:
            raise BadInput("Unit cell volume must be positive.")
        if self.n_atoms < 1:
            raise BadInput("n_atoms must be at least 1.")

    @property
    def lengths(self) -> tuple[float, float, float]:
        return (self.lattice_a, self.lattice_b, self.lattice_c)

    @property
    def angles_rad(self) -> tuple[float, float, float]:
        return tuple(float(x) for x in np.deg2rad([self.alpha, self.beta, self.gamma]))


@dataclass(frozen=True, eq=False)
class HKLInfo:
    """One reflection family.

    ``demi_normals`` optionally holds one unit plane normal per +/- pair, so
    that ``multiplicity == 2 * len(demi_normals)``. ``eqv_hkl`` optionally holds
    the Miller indices matching each demi-normal as an ``(n, 3)`` int16 array.
    """

    dspacing: float
    fsquared: float
    h: int
    k: int
    l: int
    multiplicity: int
    demi_normals: Array | None = None
    eqv_hkl: Array | None = None

    def __post_init__(self) -> None:
        if not (np.isfinite(self.dspacing) and self.dspacing > 0.0):
            raise BadInput("HKLInfo.dspacing must be positive and finite.")
        if not self.fsquared >= 0.0:
            raise BadInput("HKLInfo.fsquared must be non-negative.")
        if self.multiplicity < 1:
            raise BadInput("HKLInfo.multiplicity must be positive.")
        if self.demi_normals is not None:
            normals = np.asarray(self.demi_normals, dtype=float)
            if normals.ndim != 2 or normals.shape[1] != 3 or normals.shape[0] == 0:
                raise BadInput("demi_normals must be a non-empty (n, 3) array.")
            if self.multiplicity != 2 * normals.shape[0]:
                raise BadInput("multiplicity must equal twice the number of demi_normals.")
            if not np.allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-6):
                raise BadInput("demi_normals must be unit vectors.")
            object.__setattr__(self, "demi_normals", readonly_array(normals))
        if self.eqv_hkl is not None:
            if self.demi_normals is None:
                raise BadInput("eqv_hkl requires demi_normals.")
            raw = np.asarray(self.eqv_hkl)
            if raw.shape != self.demi_normals.shape:
                raise BadInput("eqv_hkl must have the same (n, 3) shape as demi_normals.")
            if not np.array_equal(raw, np.round(raw)):
                raise BadInput("eqv_hkl values must be integers.")
            if raw.size and (raw.min() < np.iinfo(np.int16).min or raw.max() > np.iinfo(np.int16).max):
                raise BadInput("eqv_hkl values must fit in 16-bit integers.")
            object.__setattr__(self, "eqv_hkl", readonly_array(raw.astype(np.int16)))

    @property
    def hkl(self) -> tuple[int, int, int]:
        return (self.h, self.k, self.l)

    @property
    def sort_key(self) -> tuple[float, int, int, int]:
        return (self.dspacing, self.h, self.k, self.l)


@dataclass(frozen=True)
class CompositionEntry:
    """Fraction of one atom role in the bulk material."""

    fraction: float
    atom: IndexedAtomData

    def __post_init__(self) -> None:
        if not 0.0 < self.fraction <= 1.0:
            raise BadInput("Composition fractions must be in the range (0, 1].")
