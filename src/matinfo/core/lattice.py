"""Unit cell geometry: lattice matrices, d-spacings and Miller index ranges.

Lengths are in angstrom and angles in radians. The real-space lattice matrix
holds the cell vectors a, b and c as its columns. The reciprocal matrix is
``2*pi * inv(A).T`` so that its columns are the reciprocal vectors and
``G(h, k, l) = rec @ (h, k, l)``.
"""

from __future__ import annotations

import numpy as np
import scipy.linalg as la

from matinfo.errors import BadInput, LogicError


Array = np.ndarray

LATTICE_RTOL = 1e-6

# Space groups 75-194 (tetragonal, trigonal, hexagonal) have a == b, and
# 195-230 (cubic) additionally have a == c.
_SG_A_EQ_B_MIN = 75
_SG_A_EQ_C_MIN = 195


def lattice_rotation(a: float, b: float, c: float, alpha: float, beta: float, gamma: float) -> Array:
    """Return the real-space cell matrix with columns a, b, c."""

    if min(a, b, c) <= 0.0:
        raise BadInput("Lattice lengths must be positive.")
    ca, cb, cg = np.cos(alpha), np.cos(beta), np.cos(gamma)
    sg = np.sin(gamma)
    vol_factor = 1.0 - ca * ca - cb * cb - cg * cg + 2.0 * ca * cb * cg
    if not vol_factor > 0.0 or abs(sg) < 1e-12:
        raise BadInput("Lattice angles do not describe a valid unit cell.")
    volume = a * b * c * np.sqrt(vol_factor)
    return np.array(
        [
            [a, b * cg, c * cb],
            [0.0, b * sg, c * (ca - cb * cg) / sg],
            [0.0, 0.0, volume / (a * b * sg)],
        ],
        dtype=float,
    )


def reciprocal_lattice_rotation(
    a: float, b: float, c: float, alpha: float, beta: float, gamma: float
) -> Array:
    """Return the reciprocal cell matrix (inverse-transpose of the cell, times 2*pi)."""

    cell = lattice_rotation(a, b, c, alpha, beta, gamma)
    return 2.0 * np.pi * la.inv(cell).T


def _real_axis_lengths(rec_lat: Array) -> Array:
    rec = np.asarray(rec_lat, dtype=float)
    if rec.shape != (3, 3):
        raise BadInput("Reciprocal lattice matrix must have shape (3, 3).")
    cell = 2.0 * np.pi * la.inv(rec).T
    return np.linalg.norm(cell, axis=0)


def dspacing_from_hkl(h: int, k: int, l: int, rec_lat: Array) -> float:
    """Return d = 2*pi / |h*a* + k*b* + l*c*|."""

    if h == 0 and k == 0 and l == 0:
        raise LogicError("d-spacing is undefined for the (0,0,0) Miller index.")
    g = np.asarray(rec_lat, dtype=float) @ np.array([h, k, l], dtype=float)
    return float(2.0 * np.pi / np.linalg.norm(g))


def estimate_hkl_range(dcutoff: float, rec_lat: Array) -> tuple[int, int, int]:
    """Return (max_h, max_k, max_l) bounding every reflection with d >= dcutoff.

    Since h = G.a / (2*pi), any plane with d >= dcutoff has |h| <= |a| / dcutoff,
    and likewise for k and l.
    """

    if not dcutoff > 0.0:
        raise BadInput("dcutoff must be positive.")
    lengths = _real_axis_lengths(rec_lat)
    bounds = np.floor(lengths / dcutoff * (1.0 + 1e-12)).astype(int)
    return int(bounds[0]), int(bounds[1]), int(bounds[2])


def estimate_dcutoff(max_hkl: int, rec_lat: Array) -> float:
    """Return the smallest dcutoff for which |h|,|k|,|l| <= max_hkl covers all planes."""

    if max_hkl < 1:
        raise BadInput("max_hkl must be at least 1.")
    lengths = _real_axis_lengths(rec_lat)
    return float(lengths.max() / max_hkl)


def _lengths_match(x: float, y: float) -> bool:
    return bool(np.isclose(x, y, rtol=LATTICE_RTOL, atol=0.0))


def check_and_complete_lattice(spacegroup: int, a: float, b: float, c: float) -> tuple[float, float]:
    """Validate lattice lengths against a space group and return the completed (b, c).

    Where the space group implies b == a or c == a, passing 0 fills the length
    in from ``a``. Any other missing or conflicting length raises BadInput.
    """

    if not 0 <= spacegroup <= 230:
        raise BadInput(f"Invalid space group number {spacegroup} (must be 0..230).")
    if not a > 0.0:
        raise BadInput("Lattice length a must be positive.")
    if b < 0.0 or c < 0.0:
        raise BadInput("Lattice lengths must not be negative.")

    a_eq_b = spacegroup >= _SG_A_EQ_B_MIN
    a_eq_c = spacegroup >= _SG_A_EQ_C_MIN

    if b == 0.0:
        if not a_eq_b:
            raise BadInput(f"Lattice length b must be provided for space group {spacegroup}.")
        b = a
    if c == 0.0:
        if not a_eq_c:
            raise BadInput(f"Lattice length c must be provided for space group {spacegroup}.")
        c = a

    if a_eq_b and not _lengths_match(a, b):
        raise BadInput(f"Space group {spacegroup} requires lattice lengths a and b to be equal.")
    if a_eq_c and not _lengths_match(a, c):
        raise BadInput(f"Space group {spacegroup} requires lattice lengths a and c to be equal.")
    return float(b), float(c)
