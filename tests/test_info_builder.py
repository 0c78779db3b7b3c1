import threading

import numpy as np
import pytest

from matinfo.core import (
    AtomData,
    AtomIndex,
    AtomInfo,
    CompositionEntry,
    DirectKernelDynamics,
    FreeGasDynamics,
    HKLInfo,
    IndexedAtomData,
    SABData,
    StructureInfo,
    VDOSDebyeDynamics,
)
from matinfo.errors import BadInput, LogicError
from matinfo.modeling import FinalizeConfig, InfoBuilder


TEMP = 293.15
A_LAT = 4.05

AL = AtomData(symbol="Al", z=13, mass_amu=26.9815, coherent_scat_len_fm=3.449, incoherent_xs=0.0082, capture_xs=0.231)
OX = AtomData(symbol="O", z=8, mass_amu=15.999, coherent_scat_len_fm=5.803, incoherent_xs=0.0008, capture_xs=0.00019)


def _sab() -> SABData:
    return SABData(
        alpha_grid=[0.0, 1.0],
        beta_grid=[-1.0, 0.0, 1.0],
        sab=np.ones((3, 2)),
        temperature=TEMP,
        bound_xs=AL.scattering_xs,
        element_mass_amu=AL.mass_amu,
    )


def _populated_builder(build_counter: list | None = None) -> InfoBuilder:
    al0 = IndexedAtomData(AL, AtomIndex(0))
    o1 = IndexedAtomData(OX, AtomIndex(1))
    al2 = IndexedAtomData(AL, AtomIndex(2))

    def build() -> SABData:
        if build_counter is not None:
            build_counter.append(1)
        return _sab()

    builder = InfoBuilder()
    builder.set_structure_info(StructureInfo(225, A_LAT, A_LAT, A_LAT, 90.0, 90.0, 90.0, A_LAT**3, 4))
    builder.add_atom(AtomInfo(al0, [[0.0, 0.0, 0.0], [0.5, 0.5, 0.0]], debye_temperature=410.0, msd=0.010))
    builder.add_atom(AtomInfo(o1, [0.5, 0.0, 0.5], debye_temperature=300.0, msd=0.020))
    builder.add_atom(AtomInfo(al2, [[0.0, 0.5, 0.5]], debye_temperature=410.0, msd=0.012))
    builder.set_temperature(TEMP)
    builder.add_dyn_info(VDOSDebyeDynamics(0.5, al0, TEMP, debye_temperature=410.0))
    builder.add_dyn_info(FreeGasDynamics(0.25, o1, TEMP))
    builder.add_dyn_info(DirectKernelDynamics(0.25, al2, TEMP, build_sab=build))
    builder.enable_hkl_info(0.5, 10.0)
    builder.add_hkl(HKLInfo(dspacing=A_LAT / np.sqrt(3.0), fsquared=1.0, h=1, k=1, l=1, multiplicity=8))
    builder.add_hkl(HKLInfo(dspacing=A_LAT / 2.0, fsquared=1.0, h=2, k=0, l=0, multiplicity=6))
    builder.add_hkl(HKLInfo(dspacing=A_LAT / 2.0, fsquared=1.0, h=0, k=0, l=2, multiplicity=6))
    builder.set_density(2.7)
    builder.set_number_density(0.0603)
    builder.set_xsect_free(1.39)
    builder.set_xsect_absorption(0.231)
    builder.set_xsect_provider(lambda ekin: 1.0 + ekin)
    builder.set_custom_data(
        [
            ("UNOFFICIAL", [["a", "b"], ["c"]]),
            ("OTHER", [["x"]]),
            ("UNOFFICIAL", [["second"]]),
        ]
    )
    return builder


def test_finalize_sorts_atoms_by_atomic_number() -> None:
    info = _populated_builder().finalize()
    assert [ai.atom_data.z for ai in info.atom_infos] == [8, 13, 13]
    assert [ai.atom.index.value for ai in info.atom_infos] == [1, 0, 2]


def test_finalize_sorts_reflections() -> None:
    info = _populated_builder().finalize()
    assert info.has_hkl_info()
    assert [r.hkl for r in info.hkl_list] == [(0, 0, 2), (2, 0, 0), (1, 1, 1)]
    assert info.n_hkl == 3
    assert info.hkl_first().hkl == (0, 0, 2)
    assert info.hkl_last().hkl == (1, 1, 1)
    assert np.isclose(info.hkl_dmin_val, A_LAT / 2.0)
    assert np.isclose(info.hkl_dmax_val, A_LAT / np.sqrt(3.0))
    assert info.hkl_dlower == 0.5 and info.hkl_dupper == 10.0
    assert not info.has_hkl_demi_normals()
    assert not info.has_expanded_hkl_info()
    assert info.search_expanded_hkl(1, 1, 1) is None


def test_atom_and_dynamic_infos_are_cross_linked() -> None:
    info = _populated_builder().finalize()
    for ai in info.atom_infos:
        di = ai.corresponding_dynamic_info
        assert di is not None
        assert di.atom == ai.atom
        assert di.corresponding_atom_info is ai
    kinds = {di.atom.index.value: di.kind for di in info.dynamic_infos}
    assert kinds == {0: "vdosdebye", 1: "freegas", 2: "directkernel"}


def test_labels_and_index_tables() -> None:
    info = _populated_builder().finalize()
    assert info.n_atom_indices == 3
    assert [info.display_label(i) for i in range(3)] == ["Al-a", "O", "Al-b"]
    assert info.atom_data(AtomIndex(1)) is OX
    assert info.indexed_atom_data(2).atom_data is AL
    with pytest.raises(LogicError):
        info.display_label(3)
    with pytest.raises(LogicError):
        info.atom_data(7)


def test_optional_fields_and_conveniences() -> None:
    info = _populated_builder().finalize()
    assert info.is_locked
    assert info.is_crystalline()
    assert info.has_structure_info() and info.structure_info.spacegroup == 225
    assert np.isclose(info.dspacing_from_hkl(2, 0, 0), A_LAT / 2.0)
    assert np.isclose(info.dspacing_from_hkl(1, 0, 0), A_LAT)
    assert info.temperature == TEMP
    assert info.density == 2.7
    assert info.number_density == 0.0603
    assert info.xsect_free == 1.39
    assert info.xsect_absorption == 0.231
    assert info.provides_non_bragg_xsects()
    assert info.xsect_scat_non_bragg(0.5) == 1.5
    assert info.has_atom_msd()
    assert info.has_atom_debye_temp()
    assert info.has_debye_temperature()
    assert info.has_dynamic_info()


def test_custom_sections() -> None:
    info = _populated_builder().finalize()
    assert info.count_custom_sections("UNOFFICIAL") == 2
    assert info.count_custom_sections("MISSING") == 0
    assert info.custom_section("UNOFFICIAL") == (("a", "b"), ("c",))
    assert info.custom_section("UNOFFICIAL", 1) == (("second",),)
    assert [name for name, _ in info.custom_sections] == ["UNOFFICIAL", "OTHER", "UNOFFICIAL"]
    with pytest.raises(LogicError):
        info.custom_section("UNOFFICIAL", 2)
    with pytest.raises(LogicError):
        info.custom_section("MISSING")


def test_derived_composition_from_dynamic_fractions() -> None:
    info = _populated_builder().finalize()
    assert info.has_composition()
    fractions = {e.atom.index.value: e.fraction for e in info.composition}
    assert fractions == {0: 0.5, 1: 0.25, 2: 0.25}
    assert np.isclose(sum(fractions.values()), 1.0)


def test_derived_composition_from_atom_counts() -> None:
    builder = InfoBuilder()
    builder.add_atom(AtomInfo(IndexedAtomData(AL, AtomIndex(0)), [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]]))
    builder.add_atom(AtomInfo(IndexedAtomData(OX, AtomIndex(1)), [[0.5, 0.0, 0.0], [0.0, 0.5, 0.0], [0.0, 0.0, 0.5]]))
    info = builder.finalize()
    fractions = [e.fraction for e in info.composition]
    assert np.allclose(fractions, [0.4, 0.6])
    assert np.isclose(sum(fractions), 1.0)
    assert not info.has_atom_msd()
    assert not info.has_atom_debye_temp()
    assert info.atom_infos[0].corresponding_dynamic_info is None


def test_explicit_composition_must_agree_with_dynamics() -> None:
    builder = _populated_builder()
    al0 = IndexedAtomData(AL, AtomIndex(0))
    o1 = IndexedAtomData(OX, AtomIndex(1))
    al2 = IndexedAtomData(AL, AtomIndex(2))
    builder.set_composition([CompositionEntry(0.4, al0), CompositionEntry(0.3, o1), CompositionEntry(0.3, al2)])
    with pytest.raises(LogicError):
        builder.finalize()

    builder = _populated_builder()
    builder.set_composition([CompositionEntry(0.4, al0), CompositionEntry(0.3, o1), CompositionEntry(0.3, al2)])
    info = builder.finalize(FinalizeConfig(check_composition_consistency=False))
    assert [e.fraction for e in info.composition] == [0.4, 0.3, 0.3]


def test_mutation_after_finalize_fails() -> None:
    builder = _populated_builder()
    builder.finalize()
    assert builder.is_locked
    with pytest.raises(LogicError):
        builder.set_density(1.0)
    with pytest.raises(LogicError):
        builder.add_atom(AtomInfo(IndexedAtomData(AL, AtomIndex(3)), [0.0, 0.0, 0.0]))
    with pytest.raises(LogicError):
        builder.add_hkl(HKLInfo(dspacing=1.0, fsquared=1.0, h=1, k=0, l=0, multiplicity=2))
    with pytest.raises(LogicError):
        builder.set_custom_data([])


def test_finalize_twice_fails() -> None:
    builder = InfoBuilder()
    builder.finalize()
    with pytest.raises(LogicError):
        builder.finalize()


def test_empty_info_has_nothing() -> None:
    info = InfoBuilder().finalize()
    assert not info.is_crystalline()
    assert not info.has_structure_info()
    assert not info.has_hkl_info()
    assert len(info.hkl_list) == 0
    assert list(info.hkl_list) == []
    assert info.n_hkl == 0
    assert info.hkl_last() is None
    assert info.search_expanded_hkl(1, 0, 0) is None
    assert info.hkl_first() is None
    assert info.hkl_dmin_val == float("inf")
    assert info.hkl_dmax_val == float("inf")
    assert not info.has_atom_msd()
    assert not info.has_composition()
    assert not info.provides_non_bragg_xsects()
    for getter in ("density", "number_density", "temperature", "xsect_free", "xsect_absorption", "structure_info", "hkl_dlower", "hkl_dupper"):
        with pytest.raises(LogicError):
            getattr(info, getter)
    with pytest.raises(LogicError):
        info.dspacing_from_hkl(1, 0, 0)
    with pytest.raises(LogicError):
        info.xsect_scat_non_bragg(0.025)
    with pytest.raises(LogicError):
        info.display_label(0)


def test_unique_ids() -> None:
    a = InfoBuilder().finalize()
    b = InfoBuilder().finalize()
    assert a.uid != b.uid
    assert a.uid == a.uid


def test_retired_debye_api() -> None:
    info = _populated_builder().finalize()
    assert info.has_atom_positions()
    assert info.has_any_debye_temperature()
    with pytest.raises(LogicError):
        info.global_debye_temperature()
    with pytest.raises(LogicError):
        info.has_per_element_debye_temperature()
    with pytest.raises(LogicError):
        info.debye_temperature_by_element(AtomIndex(0))


def test_kernel_built_once_from_locked_info_under_threads() -> None:
    counter: list = []
    info = _populated_builder(counter).finalize()
    di = next(d for d in info.dynamic_infos if d.kind == "directkernel")
    assert not di.has_built_sab()

    n_threads = 8
    barrier = threading.Barrier(n_threads)
    results: list = [None] * n_threads

    def worker(i: int) -> None:
        barrier.wait()
        results[i] = di.ensure_build_then_return_sab()

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(counter) == 1
    assert all(r is results[0] for r in results)
    assert di.has_built_sab()


def test_set_structure_info_only_once() -> None:
    builder = InfoBuilder()
    si = StructureInfo(225, A_LAT, A_LAT, A_LAT, 90.0, 90.0, 90.0, A_LAT**3, 4)
    builder.set_structure_info(si)
    with pytest.raises(LogicError):
        builder.set_structure_info(si)


def test_mixed_msd_is_rejected() -> None:
    builder = InfoBuilder()
    builder.add_atom(AtomInfo(IndexedAtomData(AL, AtomIndex(0)), [0.0, 0.0, 0.0], msd=0.01))
    builder.add_atom(AtomInfo(IndexedAtomData(OX, AtomIndex(1)), [0.5, 0.5, 0.5]))
    with pytest.raises(LogicError):
        builder.finalize()


def test_mixed_debye_temperatures_are_rejected() -> None:
    builder = InfoBuilder()
    builder.add_atom(AtomInfo(IndexedAtomData(AL, AtomIndex(0)), [0.0, 0.0, 0.0], debye_temperature=410.0))
    builder.add_atom(AtomInfo(IndexedAtomData(OX, AtomIndex(1)), [0.5, 0.5, 0.5]))
    with pytest.raises(LogicError):
        builder.finalize()


def test_structure_atom_count_must_match_positions() -> None:
    builder = InfoBuilder()
    builder.set_structure_info(StructureInfo(225, A_LAT, A_LAT, A_LAT, 90.0, 90.0, 90.0, A_LAT**3, 4))
    builder.add_atom(AtomInfo(IndexedAtomData(AL, AtomIndex(0)), [0.0, 0.0, 0.0]))
    with pytest.raises(LogicError):
        builder.finalize()


def test_hkl_records_require_window() -> None:
    builder = InfoBuilder()
    builder.add_hkl(HKLInfo(dspacing=2.0, fsquared=1.0, h=1, k=0, l=0, multiplicity=2))
    with pytest.raises(LogicError):
        builder.finalize()

    builder = InfoBuilder()
    builder.enable_hkl_info(2.5, 5.0)
    builder.add_hkl(HKLInfo(dspacing=2.0, fsquared=1.0, h=1, k=0, l=0, multiplicity=2))
    with pytest.raises(LogicError):
        builder.finalize()

    with pytest.raises(BadInput):
        InfoBuilder().enable_hkl_info(5.0, 2.5)


def test_expanded_hkl_through_info() -> None:
    builder = InfoBuilder()
    builder.enable_hkl_info(1.0, 5.0)
    builder.set_hkl_list(
        [
            HKLInfo(
                dspacing=A_LAT,
                fsquared=1.0,
                h=1,
                k=0,
                l=0,
                multiplicity=6,
                demi_normals=np.eye(3),
                eqv_hkl=[[1, 0, 0], [0, 1, 0], [0, 0, 1]],
            )
        ]
    )
    info = builder.finalize()
    assert info.has_hkl_demi_normals()
    assert info.has_expanded_hkl_info()
    assert info.search_expanded_hkl(0, 0, -1).hkl == (1, 0, 0)
    assert info.search_expanded_hkl(1, 1, 0) is None


def test_mixed_expanded_hkl_is_rejected() -> None:
    builder = InfoBuilder()
    builder.enable_hkl_info(1.0, 5.0)
    builder.add_hkl(HKLInfo(dspacing=2.0, fsquared=1.0, h=1, k=0, l=0, multiplicity=2, demi_normals=[[1.0, 0.0, 0.0]]))
    builder.add_hkl(HKLInfo(dspacing=3.0, fsquared=1.0, h=0, k=1, l=0, multiplicity=2))
    with pytest.raises(LogicError):
        builder.finalize()


def test_dynamics_require_matching_temperature() -> None:
    builder = InfoBuilder()
    builder.add_dyn_info(FreeGasDynamics(1.0, IndexedAtomData(AL, AtomIndex(0)), TEMP))
    with pytest.raises(LogicError):
        builder.finalize()

    builder = InfoBuilder()
    builder.set_temperature(400.0)
    builder.add_dyn_info(FreeGasDynamics(1.0, IndexedAtomData(AL, AtomIndex(0)), TEMP))
    with pytest.raises(LogicError):
        builder.finalize()


def test_dynamic_fractions_must_sum_to_one() -> None:
    builder = InfoBuilder()
    builder.set_temperature(TEMP)
    builder.add_dyn_info(FreeGasDynamics(0.5, IndexedAtomData(AL, AtomIndex(0)), TEMP))
    builder.add_dyn_info(FreeGasDynamics(0.3, IndexedAtomData(OX, AtomIndex(1)), TEMP))
    with pytest.raises(LogicError):
        builder.finalize()


def test_atom_indices_must_be_contiguous() -> None:
    builder = InfoBuilder()
    builder.add_atom(AtomInfo(IndexedAtomData(AL, AtomIndex(0)), [0.0, 0.0, 0.0]))
    builder.add_atom(AtomInfo(IndexedAtomData(OX, AtomIndex(2)), [0.5, 0.5, 0.5]))
    with pytest.raises(LogicError):
        builder.finalize()


def test_entries_cannot_join_two_infos() -> None:
    atom = AtomInfo(IndexedAtomData(AL, AtomIndex(0)), [0.0, 0.0, 0.0])
    first = InfoBuilder()
    first.add_atom(atom)
    first.finalize()
    second = InfoBuilder()
    second.add_atom(atom)
    with pytest.raises(LogicError):
        second.finalize()


def test_builder_input_validation() -> None:
    builder = InfoBuilder()
    with pytest.raises(BadInput):
        builder.set_density(0.0)
    with pytest.raises(BadInput):
        builder.set_xsect_absorption(-1.0)
    with pytest.raises(BadInput):
        builder.set_temperature(-1.0)
    with pytest.raises(BadInput):
        builder.set_xsect_provider(3.0)
    with pytest.raises(BadInput):
        builder.set_custom_data([("", [["x"]])])
    with pytest.raises(BadInput):
        builder.set_custom_data([("SEC", [[]])])
    with pytest.raises(BadInput):
        builder.add_atom("not an atom")


def test_atoms_without_dynamics_are_rejected() -> None:
    al0 = IndexedAtomData(AL, AtomIndex(0))
    o1 = IndexedAtomData(OX, AtomIndex(1))
    builder = InfoBuilder()
    builder.add_atom(AtomInfo(al0, [0.0, 0.0, 0.0]))
    builder.add_atom(AtomInfo(o1, [0.5, 0.5, 0.5]))
    builder.set_temperature(TEMP)
    builder.add_dyn_info(FreeGasDynamics(1.0, al0, TEMP))
    with pytest.raises(LogicError):
        builder.finalize()


def test_dynamics_without_atoms_are_rejected() -> None:
    al0 = IndexedAtomData(AL, AtomIndex(0))
    o1 = IndexedAtomData(OX, AtomIndex(1))
    builder = InfoBuilder()
    builder.add_atom(AtomInfo(al0, [0.0, 0.0, 0.0]))
    builder.set_temperature(TEMP)
    builder.add_dyn_info(FreeGasDynamics(0.5, al0, TEMP))
    builder.add_dyn_info(FreeGasDynamics(0.5, o1, TEMP))
    with pytest.raises(LogicError):
        builder.finalize()


def test_dynamics_alone_are_accepted() -> None:
    builder = InfoBuilder()
    builder.set_temperature(TEMP)
    builder.add_dyn_info(FreeGasDynamics(0.5, IndexedAtomData(AL, AtomIndex(0)), TEMP))
    builder.add_dyn_info(FreeGasDynamics(0.5, IndexedAtomData(OX, AtomIndex(1)), TEMP))
    info = builder.finalize()
    assert not info.has_atom_info()
    assert all(di.corresponding_atom_info is None for di in info.dynamic_infos)


def test_custom_lines_must_not_be_bare_strings() -> None:
    with pytest.raises(BadInput):
        InfoBuilder().set_custom_data([("SEC", ["a b"])])
