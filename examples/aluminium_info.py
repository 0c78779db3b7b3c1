"""Build a locked Info object for fcc aluminium and print a short summary."""

import logging

import numpy as np

from matinfo import (
    AtomData,
    AtomIndex,
    AtomInfo,
    HKLInfo,
    IndexedAtomData,
    InfoBuilder,
    StructureInfo,
    VDOSDebyeDynamics,
    check_and_complete_lattice,
    estimate_hkl_range,
    reciprocal_lattice_rotation,
)
from matinfo.core.lattice import dspacing_from_hkl
from matinfo.units import wavelength_to_ekin


logging.basicConfig(level=logging.DEBUG)

temperature = 293.15
debye_temperature = 410.4
dcut = 0.5

al = AtomData(symbol="Al", z=13, mass_amu=26.9815, coherent_scat_len_fm=3.449, incoherent_xs=0.0082, capture_xs=0.231)
role = IndexedAtomData(al, AtomIndex(0))
positions = np.array([[0.0, 0.0, 0.0], [0.5, 0.5, 0.0], [0.5, 0.0, 0.5], [0.0, 0.5, 0.5]])

a = 4.04958
b, c = check_and_complete_lattice(225, a, 0.0, 0.0)
rec = reciprocal_lattice_rotation(a, b, c, np.pi / 2, np.pi / 2, np.pi / 2)

# Group symmetry-equivalent reflections by d-spacing and |F|^2, keeping one of each +-hkl pair.
families: dict[tuple[float, float], list[tuple[int, int, int]]] = {}
hmax, kmax, lmax = estimate_hkl_range(dcut, rec)
for h in range(-hmax, hmax + 1):
    for k in range(-kmax, kmax + 1):
        for l in range(0, lmax + 1):
            if (h, k, l) == (0, 0, 0) or (l == 0 and (k < 0 or (k == 0 and h < 0))):
                continue
            d = dspacing_from_hkl(h, k, l, rec)
            if d < dcut:
                continue
            phase = np.exp(2j * np.pi * positions @ np.array([h, k, l]))
            fsq = abs(al.coherent_scat_len_fm * 0.1 * phase.sum()) ** 2
            if fsq < 1e-10:
                continue
            families.setdefault((round(d, 8), round(fsq, 8)), []).append((h, k, l))

builder = InfoBuilder()
builder.set_structure_info(StructureInfo(225, a, b, c, 90.0, 90.0, 90.0, a * b * c, len(positions)))
builder.add_atom(AtomInfo(role, positions, debye_temperature=debye_temperature, msd=0.0077))
builder.set_temperature(temperature)
builder.add_dyn_info(VDOSDebyeDynamics(1.0, role, temperature, debye_temperature=debye_temperature))
builder.enable_hkl_info(dcut, np.inf)
for (d, fsq), members in families.items():
    hkl = max(members)
    normals = np.array([np.asarray(rec @ m) / np.linalg.norm(rec @ m) for m in members])
    builder.add_hkl(
        HKLInfo(
            dspacing=d,
            fsquared=fsq,
            h=hkl[0],
            k=hkl[1],
            l=hkl[2],
            multiplicity=2 * len(members),
            demi_normals=normals,
            eqv_hkl=members,
        )
    )
builder.set_density(2.6989)
builder.set_number_density(len(positions) / a**3)
builder.set_xsect_free(al.free_scattering_xs)
builder.set_xsect_absorption(al.capture_xs)

info = builder.finalize()

print(info)
print(f"label={info.display_label(0)} composition={[(e.atom.atom_data.description, e.fraction) for e in info.composition]}")
print(f"n_hkl={info.n_hkl} dmin={info.hkl_dmin_val:.4f} dmax={info.hkl_dmax_val:.4f}")
for hi in list(info.hkl_list)[-5:][::-1]:
    print(f"  ({hi.h:2d} {hi.k:2d} {hi.l:2d}) d={hi.dspacing:.4f} mult={hi.multiplicity:3d} F^2={hi.fsquared:.4f}")
print(f"(2,0,0) found as {info.search_expanded_hkl(0, -2, 0).hkl}")
print(f"Bragg cutoff at lambda=2*dmax: E={wavelength_to_ekin(2.0 * info.hkl_dmax_val) * 1e3:.3f} meV")
vdos = info.dynamic_infos[0].vdos_data()
print(f"Debye VDOS: emax={vdos.emax * 1e3:.2f} meV, integral={vdos.integral():.4g}")
