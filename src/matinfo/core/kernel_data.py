"""Tabulated scattering kernels and phonon spectra consumed by inelastic physics."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.integrate import trapezoid

from matinfo.core.types import readonly_array
from matinfo.errors import BadInput
from matinfo.units import kelvin_to_kt


Array = np.ndarray


def _strictly_increasing(arr: Array) -> bool:
    return bool(np.all(np.diff(arr) > 0.0))


@dataclass(frozen=True, eq=False)
class SABData:
    """Scattering kernel S(alpha, beta) on a rectangular grid.

    Parameters
    - ``alpha_grid``: momentum transfer grid (n_alpha >= 2, increasing, >= 0).
    - ``beta_grid``: energy transfer grid (n_beta >= 2, increasing).
    - ``sab``: kernel values with shape ``(n_beta, n_alpha)``.
    - ``temperature``: material temperature [K].
    - ``bound_xs``: bound scattering cross section [barn].
    - ``element_mass_amu``: scatterer mass [amu].
    - ``suggested_emax``: upper neutron energy for which the kernel is
      meaningful [eV], 0 if the source has no opinion.
    """

    alpha_grid: Array
    beta_grid: Array
    sab: Array
    temperature: float
    bound_xs: float
    element_mass_amu: float
    suggested_emax: float = 0.0

    def __post_init__(self) -> None:
        alpha = np.asarray(self.alpha_grid, dtype=float)
        beta = np.asarray(self.beta_grid, dtype=float)
        sab = np.asarray(self.sab, dtype=float)
        if alpha.ndim != 1 or alpha.size < 2 or not _strictly_increasing(alpha) or alpha[0] < 0.0:
            raise BadInput("alpha_grid must be a non-negative increasing 1D array with at least 2 points.")
        if beta.ndim != 1 or beta.size < 2 or not _strictly_increasing(beta):
            raise BadInput("beta_grid must be an increasing 1D array with at least 2 points.")
        if sab.shape != (beta.size, alpha.size):
            raise BadInput("sab must have shape (n_beta, n_alpha).")
        if not np.all(np.isfinite(sab)) or np.any(sab < 0.0):
            raise BadInput("sab values must be finite and non-negative.")
        if not self.temperature > 0.0:
            raise BadInput("SABData.temperature must be positive.")
        if self.bound_xs < 0.0:
            raise BadInput("SABData.bound_xs must be non-negative.")
        if not self.element_mass_amu > 0.0:
            raise BadInput("SABData.element_mass_amu must be positive.")
        if self.suggested_emax < 0.0:
            raise BadInput("SABData.suggested_emax must be non-negative.")
        object.__setattr__(self, "alpha_grid", readonly_array(alpha))
        object.__setattr__(self, "beta_grid", readonly_array(beta))
        object.__setattr__(self, "sab", readonly_array(sab))

    @property
    def shape(self) -> tuple[int, int]:
        return (int(self.beta_grid.size), int(self.alpha_grid.size))


@dataclass(frozen=True, eq=False)
class VDOSData:
    """Regularised vibrational density of states on an equidistant energy grid.

    ``density[i]`` is the (unnormalised) density at ``emin + i*(emax-emin)/(n-1)``.
    Below ``emin`` the curve is understood to continue quadratically to zero.
    """

    egrid: tuple[float, float]
    density: Array
    temperature: float
    bound_xs: float
    element_mass_amu: float

    def __post_init__(self) -> None:
        if len(self.egrid) != 2:
            raise BadInput("VDOSData.egrid must be an (emin, emax) pair.")
        emin, emax = float(self.egrid[0]), float(self.egrid[1])
        if not 0.0 < emin < emax:
            raise BadInput("VDOSData.egrid must satisfy 0 < emin < emax.")
        density = np.asarray(self.density, dtype=float)
        if density.ndim != 1 or density.size < 2:
            raise BadInput("VDOSData.density must be a 1D array with at least 2 points.")
        if not np.all(np.isfinite(density)) or np.any(density < 0.0):
            raise BadInput("VDOSData.density must be finite and non-negative.")
        if not density.max() > 0.0:
            raise BadInput("VDOSData.density must not be identically zero.")
        if not self.temperature > 0.0:
            raise BadInput("VDOSData.temperature must be positive.")
        if self.bound_xs < 0.0:
            raise BadInput("VDOSData.bound_xs must be non-negative.")
        if not self.element_mass_amu > 0.0:
            raise BadInput("VDOSData.element_mass_amu must be positive.")
        object.__setattr__(self, "egrid", (emin, emax))
        object.__setattr__(self, "density", readonly_array(density))

    @property
    def emin(self) -> float:
        return self.egrid[0]

    @property
    def emax(self) -> float:
        return self.egrid[1]

    def kt(self) -> float:
        return float(kelvin_to_kt(self.temperature))

    def energy_points(self) -> Array:
        return np.linspace(self.emin, self.emax, self.density.size)

    def integral(self) -> float:
        """Area under the curve, including the quadratic part on [0, emin]."""

        tabulated = trapezoid(self.density, self.energy_points())
        return float(tabulated + self.density[0] * self.emin / 3.0)


def create_vdos_debye(
    debye_temperature: float,
    temperature: float,
    bound_xs: float,
    element_mass_amu: float,
    n_points: int = 20,
) -> VDOSData:
    """Idealised Debye spectrum rising as E^2 up to k_B * debye_temperature."""

    if not debye_temperature > 0.0:
        raise BadInput("Debye temperature must be positive.")
    if n_points < 2:
        raise BadInput("n_points must be at least 2.")
    emax = float(kelvin_to_kt(debye_temperature))
    energies = np.linspace(emax / n_points, emax, n_points)
    density = (energies / emax) ** 2
    return VDOSData(
        egrid=(float(energies[0]), emax),
        density=density,
        temperature=temperature,
        bound_xs=bound_xs,
        element_mass_amu=element_mass_amu,
    )
