"""Physical constants and unit helpers used across matinfo.

Fixed unit contract: lengths in angstrom, cross sections in barn, density in
g/cm^3, number density in atoms/angstrom^3, temperature in kelvin and
energies (neutron kinetic energy, phonon energy) in eV.
"""

from __future__ import annotations

import numpy as np


# CODATA 2018 constants.
K_BOLTZMANN_EV_PER_K = 8.617333262e-5
NEUTRON_MASS_AMU = 1.00866491595
# E[eV] * lambda[angstrom]^2 for a free neutron.
WAVELENGTH_TO_EKIN_EV_AA2 = 0.081804209605330899
# 1 barn = 100 fm^2.
FM2_PER_BARN = 100.0


def kelvin_to_kt(temperature_k: np.ndarray | float) -> np.ndarray | float:
    """Return k_B*T in eV."""

    return np.asarray(temperature_k, dtype=float) * K_BOLTZMANN_EV_PER_K


def wavelength_to_ekin(wavelength_aa: np.ndarray | float) -> np.ndarray | float:
    """Convert neutron wavelength [angstrom] to kinetic energy [eV]."""

    wl = np.asarray(wavelength_aa, dtype=float)
    with np.errstate(divide="ignore"):
        return WAVELENGTH_TO_EKIN_EV_AA2 / (wl * wl)


def ekin_to_wavelength(ekin_ev: np.ndarray | float) -> np.ndarray | float:
    """Convert neutron kinetic energy [eV] to wavelength [angstrom]."""

    ekin = np.asarray(ekin_ev, dtype=float)
    with np.errstate(divide="ignore"):
        return np.sqrt(WAVELENGTH_TO_EKIN_EV_AA2 / ekin)
