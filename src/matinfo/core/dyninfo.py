"""Dynamic (inelastic scattering) behaviour of atom roles.

The variants form a closed family:

- ``SterileDynamics``: inelastic scattering absent or disabled.
- ``FreeGasDynamics``: scattering on a free gas.
- ``ScatteringKernelDynamics`` (abstract): anything yielding a full kernel.
  - ``DirectKernelDynamics``: kernel available directly, converted lazily.
  - ``VDOSDynamics``: regularised phonon spectrum, expanded by the consumer.
  - ``VDOSDebyeDynamics``: Debye model spectrum from a Debye temperature.
"""

from __future__ import annotations

import abc
import logging
import weakref
from typing import TYPE_CHECKING, Callable

import numpy as np

from matinfo.core.compute_once import ComputeOnce
from matinfo.core.kernel_data import SABData, VDOSData, create_vdos_debye
from matinfo.core.types import AtomData, IndexedAtomData, readonly_array
from matinfo.core.uid import UniqueID, next_unique_id
from matinfo.errors import BadInput, LogicError

if TYPE_CHECKING:
    from matinfo.core.atominfo import AtomInfo
    from matinfo.core.info import Info


Array = np.ndarray

logger = logging.getLogger(__name__)


def _check_fraction(fraction: float) -> float:
    if not 0.0 < fraction <= 1.0:
        raise BadInput("DynamicInfo fraction must be in the range (0, 1].")
    return float(fraction)


def _check_energy_grid(egrid: Array | None) -> Array | None:
    if egrid is None:
        return None
    grid = np.asarray(egrid, dtype=float)
    if grid.ndim != 1 or grid.size < 3:
        raise BadInput("Energy grids must be 1D with at least 3 entries.")
    if not np.all(np.isfinite(grid)):
        raise BadInput("Energy grid values must be finite.")
    if grid.size == 3:
        emin, emax, npts = grid
        if emin < 0.0 or emax < 0.0 or npts < 0.0:
            raise BadInput("Energy grid [emin, emax, npts] entries must be non-negative.")
        if npts != int(npts) or npts == 1:
            raise BadInput("Energy grid point count must be 0 or an integer >= 2.")
        if emin > 0.0 and emax > 0.0 and not emin < emax:
            raise BadInput("Energy grid must satisfy emin < emax.")
    else:
        if not grid[0] > 0.0 or not np.all(np.diff(grid) > 0.0):
            raise BadInput("Explicit energy grids must be positive and strictly increasing.")
    return readonly_array(grid)


class DynamicInfo(abc.ABC):
    """Common data of all dynamic variants: fraction, role and temperature [K]."""

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError("DynamicInfo variants form a closed set and cannot be extended.")

    def __init__(self, fraction: float, atom: IndexedAtomData, temperature: float) -> None:
        if not isinstance(atom, IndexedAtomData):
            raise BadInput("DynamicInfo.atom must be an IndexedAtomData.")
        if not temperature > 0.0:
            raise BadInput("DynamicInfo temperature must be positive.")
        self._uid = next_unique_id()
        self._fraction = _check_fraction(fraction)
        self._atom = atom
        self._temperature = float(temperature)
        self._owner: weakref.ReferenceType[Info] | None = None
        self._atominfo_index: int | None = None

    @property
    @abc.abstractmethod
    def kind(self) -> str:
        """Short tag naming the variant."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.atom_data.description}, index={self._atom.index.value}, "
            f"fraction={self._fraction:g})"
        )

    @property
    def uid(self) -> UniqueID:
        return self._uid

    @property
    def fraction(self) -> float:
        return self._fraction

    def change_fraction(self, fraction: float) -> None:
        """Replace the fraction. Keeping fractions and composition consistent is up to the caller."""

        self._fraction = _check_fraction(fraction)

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def atom(self) -> IndexedAtomData:
        return self._atom

    @property
    def atom_data(self) -> AtomData:
        return self._atom.atom_data

    @property
    def corresponding_atom_info(self) -> AtomInfo | None:
        """AtomInfo for the same role on the owning Info, or None."""

        if self._atominfo_index is None:
            return None
        owner = self._owner() if self._owner is not None else None
        if owner is None:
            raise LogicError("The Info object owning this DynamicInfo no longer exists.")
        return owner.atom_infos[self._atominfo_index]

    def _attach(self, owner: Info, atominfo_index: int | None) -> None:
        if self._owner is not None:
            raise LogicError("DynamicInfo objects can only belong to a single Info object.")
        self._owner = weakref.ref(owner)
        self._atominfo_index = atominfo_index


class SterileDynamics(DynamicInfo):
    kind = "sterile"


class FreeGasDynamics(DynamicInfo):
    kind = "freegas"


class ScatteringKernelDynamics(DynamicInfo):
    """Base of variants which can, directly or not, be turned into a scattering kernel.

    ``energy_grid`` is a hint for the energy points at which consumers should
    analyse and cache the kernel. None leaves the choice to the consumer. A
    3-element grid means ``[emin, emax, npts]`` where zeros leave that entry to
    the consumer; 4 or more entries form an explicit grid.
    """

    def __init__(
        self,
        fraction: float,
        atom: IndexedAtomData,
        temperature: float,
        energy_grid: Array | None = None,
    ) -> None:
        super().__init__(fraction, atom, temperature)
        self._energy_grid = _check_energy_grid(energy_grid)

    @property
    def energy_grid(self) -> Array | None:
        return self._energy_grid


class DirectKernelDynamics(ScatteringKernelDynamics):
    """Kernel which at most needs a one-time conversion into SABData.

    ``build_sab`` is only called from ``ensure_build_then_return_sab()``, at most
    once per successful build, even when many threads ask concurrently.
    """

    kind = "directkernel"

    def __init__(
        self,
        fraction: float,
        atom: IndexedAtomData,
        temperature: float,
        build_sab: Callable[[], SABData],
        energy_grid: Array | None = None,
    ) -> None:
        super().__init__(fraction, atom, temperature, energy_grid=energy_grid)
        if not callable(build_sab):
            raise BadInput("build_sab must be callable.")
        self._build_sab = build_sab
        self._sab: ComputeOnce[SABData] = ComputeOnce(self._checked_build)

    @classmethod
    def from_sab_data(
        cls,
        fraction: float,
        atom: IndexedAtomData,
        sab: SABData,
        energy_grid: Array | None = None,
    ) -> DirectKernelDynamics:
        """Wrap an already available kernel. The temperature is taken from ``sab``."""

        if not isinstance(sab, SABData):
            raise BadInput("sab must be a SABData instance.")
        return cls(fraction, atom, sab.temperature, build_sab=lambda: sab, energy_grid=energy_grid)

    def _checked_build(self) -> SABData:
        logger.debug("Building scattering kernel for %r", self)
        sab = self._build_sab()
        if not isinstance(sab, SABData):
            raise LogicError("build_sab must return a SABData instance.")
        if not np.isclose(sab.temperature, self.temperature, rtol=1e-6, atol=0.0):
            raise LogicError("Scattering kernel temperature does not match the DynamicInfo temperature.")
        logger.debug("Scattering kernel for %r built with shape %s", self, sab.shape)
        return sab

    def ensure_build_then_return_sab(self) -> SABData:
        return self._sab.get()

    def has_built_sab(self) -> bool:
        return self._sab.done


class VDOSDynamics(ScatteringKernelDynamics):
    """Phonon spectrum which the consumer expands into a full kernel.

    ``vdos_orig_egrid`` and ``vdos_orig_density`` optionally hold the curve as
    it was before regularisation; they are empty arrays when unavailable.
    """

    kind = "vdos"

    def __init__(
        self,
        fraction: float,
        atom: IndexedAtomData,
        temperature: float,
        vdos_data: VDOSData,
        orig_egrid: Array | None = None,
        orig_density: Array | None = None,
        energy_grid: Array | None = None,
    ) -> None:
        super().__init__(fraction, atom, temperature, energy_grid=energy_grid)
        if not isinstance(vdos_data, VDOSData):
            raise BadInput("vdos_data must be a VDOSData instance.")
        if not np.isclose(vdos_data.temperature, self.temperature, rtol=1e-6, atol=0.0):
            raise BadInput("VDOSData temperature does not match the DynamicInfo temperature.")
        if (orig_egrid is None) != (orig_density is None):
            raise BadInput("orig_egrid and orig_density must be given together.")
        egrid = np.asarray(orig_egrid if orig_egrid is not None else [], dtype=float)
        density = np.asarray(orig_density if orig_density is not None else [], dtype=float)
        if egrid.ndim != 1 or egrid.shape != density.shape:
            raise BadInput("orig_egrid and orig_density must be 1D arrays of equal length.")
        self._vdos_data = vdos_data
        self._orig_egrid = readonly_array(egrid)
        self._orig_density = readonly_array(density)

    @property
    def vdos_data(self) -> VDOSData:
        return self._vdos_data

    @property
    def vdos_orig_egrid(self) -> Array:
        return self._orig_egrid

    @property
    def vdos_orig_density(self) -> Array:
        return self._orig_density


class VDOSDebyeDynamics(ScatteringKernelDynamics):
    """Idealised Debye model spectrum, fully described by the Debye temperature."""

    kind = "vdosdebye"

    def __init__(
        self,
        fraction: float,
        atom: IndexedAtomData,
        temperature: float,
        debye_temperature: float,
    ) -> None:
        if not debye_temperature > 0.0:
            raise BadInput("Debye temperature must be positive.")
        super().__init__(fraction, atom, temperature, energy_grid=None)
        self._debye_temperature = float(debye_temperature)

    @property
    def debye_temperature(self) -> float:
        return self._debye_temperature

    def vdos_data(self, n_points: int = 20) -> VDOSData:
        return create_vdos_debye(
            debye_temperature=self._debye_temperature,
            temperature=self.temperature,
            bound_xs=self.atom_data.scattering_xs,
            element_mass_amu=self.atom_data.mass_amu,
            n_points=n_points,
        )
